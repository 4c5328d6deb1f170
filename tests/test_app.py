"""
Tests for the HTTP endpoints and CORS behaviour.
"""

import pytest

from conftest import FakeUsbDevice, access_denied


@pytest.fixture
def printer(devices):
    device = FakeUsbDevice()
    devices.append(device)
    return device


class TestHealth:

    def test_health(self, client):
        response = client.get('/health')
        data = response.get_json()

        assert response.status_code == 200
        assert data['ok'] is True
        assert data['service'] == 'MPOS Print Agent'
        assert data['enabled'] is True


class TestAgentSwitch:

    def test_defaults_to_on(self, client):
        assert client.get('/agent/status').get_json() == {'ok': True, 'enabled': True, 'code': 'AGENT_ON'}

    def test_off_then_on(self, client):
        assert client.post('/agent/off').get_json() == {'ok': True, 'enabled': False, 'code': 'AGENT_OFF'}
        assert client.get('/agent/status').get_json()['enabled'] is False

        assert client.post('/agent/on').get_json() == {'ok': True, 'enabled': True, 'code': 'AGENT_ON'}

    def test_print_while_off(self, client, printer):
        client.post('/agent/off')

        response = client.get('/print-test')

        assert response.status_code == 200
        assert response.get_json()['code'] == 'AGENT_OFF'
        assert printer.claimed == []


class TestDefaultPrinter:

    def test_initially_unset(self, client):
        assert client.get('/printer/default').get_json() == {
            'ok': True, 'defaultPrinter': None, 'code': 'DEFAULT_PRINTER_GET',
        }

    def test_set_and_get(self, client):
        response = client.post('/printer/default', json={'vendorId': 1208, 'productId': 514})

        assert response.get_json() == {
            'ok': True,
            'defaultPrinter': {'vendorId': 1208, 'productId': 514},
            'code': 'DEFAULT_PRINTER_SET',
        }
        assert client.get('/printer/default').get_json()['defaultPrinter'] == {'vendorId': 1208, 'productId': 514}

    @pytest.mark.parametrize('body', [
        {'vendorId': 1},
        {'productId': 1},
        {'vendorId': 0, 'productId': 1},
        {'vendorId': 'abc', 'productId': 1},
        {'vendorId': 70000, 'productId': 1},
        {'vendorId': True, 'productId': 1},
    ])
    def test_invalid_selection_leaves_state_alone(self, client, body):
        client.post('/printer/default', json={'vendorId': 1208, 'productId': 514})

        data = client.post('/printer/default', json=body).get_json()

        assert data['ok'] is False
        assert data['code'] == 'DEFAULT_PRINTER_INVALID'
        assert client.get('/printer/default').get_json()['defaultPrinter'] == {'vendorId': 1208, 'productId': 514}

    def test_non_json_body(self, client):
        response = client.post('/printer/default', data='vendorId=1', content_type='text/plain')

        assert response.status_code == 200
        assert response.get_json()['code'] == 'DEFAULT_PRINTER_INVALID'


class TestPrinters:

    def test_empty(self, client):
        assert client.get('/printers').get_json() == {'ok': True, 'printers': [], 'code': 'PRINTER_LIST_EMPTY'}

    def test_lists_classified_devices(self, client, devices):
        devices.extend([
            FakeUsbDevice(address=2),
            FakeUsbDevice(vendor_id=0x046D, product_id=0xC31C, address=3,
                          manufacturer='Logitech', product='USB Keyboard', interface_class=3),
        ])

        data = client.get('/printers').get_json()

        assert data['code'] == 'PRINTER_LIST_OK'
        assert [p['isThermalPrinter'] for p in data['printers']] == [True, False]
        assert data['printers'][0]['vendorId'] == 0x04B8
        assert data['printers'][0]['product'] == 'TM-T20II'
        assert data['printers'][1]['name'] == 'USB Keyboard'

    def test_unsupported_device_does_not_hide_printer(self, client, devices):
        devices.extend([
            FakeUsbDevice(vendor_id=0x046D, product_id=0xC31C, address=2,
                          manufacturer='Logitech', product='USB Keyboard', interface_class=3,
                          open_error=NotImplementedError('not supported')),
            FakeUsbDevice(address=3),
        ])

        listing = client.get('/printers')
        printed = client.get('/print-test').get_json()

        assert listing.status_code == 200
        assert [p['deviceAddress'] for p in listing.get_json()['printers']] == [3]
        assert printed['code'] == 'PRINT_TEST_OK'

    def test_access_denied(self, client, orchestrator):
        def denied():
            raise access_denied()
        orchestrator.resolver.enumerator._find_devices = denied

        data = client.get('/printers').get_json()

        assert data['ok'] is False
        assert data['code'] == 'USB_ACCESS_DENIED'


class TestPrinting:

    def test_print_test(self, client, printer):
        data = client.get('/print-test').get_json()

        assert data['ok'] is True
        assert data['code'] == 'PRINT_TEST_OK'

    def test_print_test_without_printer(self, client):
        assert client.get('/print-test').get_json()['code'] == 'THERMAL_PRINTER_NOT_FOUND'

    def test_print_sale(self, client, printer, sale_payload):
        data = client.post('/print-sale', json=sale_payload).get_json()

        assert data['ok'] is True
        assert data['code'] == 'PRINT_SALE_OK'

    def test_print_sale_bad_body(self, client, printer):
        response = client.post('/print-sale', data='not json', content_type='application/json')

        assert response.status_code == 200
        assert response.get_json()['code'] == 'PRINT_SALE_ERROR'

    def test_jobs(self, client, printer):
        client.get('/print-test')
        client.get('/print-test')

        data = client.get('/jobs?limit=1').get_json()

        assert data['count'] == 1
        assert data['jobs'][0]['code'] == 'PRINT_TEST_OK'


class TestCors:

    def test_allowed_origin_is_echoed(self, client):
        response = client.get('/agent/status', headers={'Origin': 'http://localhost:5173'})

        assert response.headers['Access-Control-Allow-Origin'] == 'http://localhost:5173'

    def test_unknown_origin_gets_wildcard(self, client):
        response = client.get('/agent/status', headers={'Origin': 'http://evil.example'})

        assert response.headers['Access-Control-Allow-Origin'] == '*'

    def test_preflight(self, client):
        response = client.options('/print-sale', headers={
            'Origin': 'https://martpos.app',
            'Access-Control-Request-Method': 'POST',
            'Access-Control-Request-Headers': 'Content-Type',
        })

        assert response.status_code == 200
        assert response.headers['Access-Control-Allow-Origin'] == 'https://martpos.app'
        assert 'POST' in response.headers['Access-Control-Allow-Methods']
