"""
MPOS Print Agent Client
=======================

Python SDK for talking to a running print agent.

Usage:
    from mpos_print_agent.client import PrintAgentClient

    client = PrintAgentClient('http://localhost:3300')

    # Pick a printer
    printers = client.list_printers()
    client.set_default_printer(0x04b8, 0x0202)

    # Print
    client.print_test()
    client.print_sale(sale, store=store, employee=employee, items=items, locale='en')
"""

from typing import Dict, Any, List, Optional

import requests


class PrintAgentClient:
    """Client for the MPOS Print Agent HTTP interface."""

    def __init__(self, base_url: str = 'http://localhost:3300', timeout: float = 30):
        """
        Initialize client.

        Args:
            base_url: Base URL of the print agent
            timeout: Seconds to wait for each request
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _request(self, method: str, endpoint: str, data: Optional[Dict] = None) -> Dict[str, Any]:
        """Make API request. Network failures come back in the agent's own result shape."""
        url = f'{self.base_url}{endpoint}'

        try:
            if method == 'GET':
                response = requests.get(url, timeout=self.timeout)
            elif method == 'POST':
                response = requests.post(url, json=data, timeout=self.timeout)
            else:
                raise ValueError(f'Unknown method: {method}')

            return response.json()

        except requests.exceptions.Timeout:
            return {'ok': False, 'code': 'AGENT_TIMEOUT', 'message': 'Request timeout'}
        except requests.exceptions.ConnectionError:
            return {'ok': False, 'code': 'AGENT_UNREACHABLE', 'message': f'Cannot connect to {self.base_url}'}

    # =========================================================================
    # Health / Agent
    # =========================================================================

    def health(self) -> Dict[str, Any]:
        """Check service health."""
        return self._request('GET', '/health')

    def is_online(self) -> bool:
        return self.health().get('ok', False)

    def status(self) -> Dict[str, Any]:
        return self._request('GET', '/agent/status')

    def is_enabled(self) -> bool:
        return self.status().get('enabled', False)

    def enable(self) -> Dict[str, Any]:
        return self._request('POST', '/agent/on')

    def disable(self) -> Dict[str, Any]:
        return self._request('POST', '/agent/off')

    # =========================================================================
    # Printers
    # =========================================================================

    def get_default_printer(self) -> Optional[Dict[str, Any]]:
        """Current default selection, or None."""
        return self._request('GET', '/printer/default').get('defaultPrinter')

    def set_default_printer(self, vendor_id: int, product_id: int) -> Dict[str, Any]:
        return self._request('POST', '/printer/default', {
            'vendorId': vendor_id,
            'productId': product_id,
        })

    def list_printers(self, thermal_only: bool = False) -> List[Dict[str, Any]]:
        """
        List attached USB devices.

        Args:
            thermal_only: Drop devices the agent does not consider printers
        """
        printers = self._request('GET', '/printers').get('printers', [])
        if thermal_only:
            printers = [p for p in printers if p.get('isThermalPrinter')]
        return printers

    # =========================================================================
    # Printing
    # =========================================================================

    def print_test(self) -> Dict[str, Any]:
        """Print the agent's self-test ticket."""
        return self._request('GET', '/print-test')

    def print_sale(self, sale: Dict[str, Any], items: List[Dict[str, Any]],
                   store: Optional[Dict[str, Any]] = None,
                   employee: Optional[Dict[str, Any]] = None,
                   locale: str = 'es') -> Dict[str, Any]:
        """
        Print a sale receipt.

        Args:
            sale: {id, number, date, subtotal, tax_total, discount_total, grand_total, payment_method}
            items: [{name, quantity, unit_price, tax}]
            store: {name, address, phone}
            employee: {name}
            locale: 'es' or 'en'
        """
        return self._request('POST', '/print-sale', {
            'sale': sale,
            'store': store or {},
            'employee': employee or {},
            'items': items,
            'locale': locale,
        })

    # =========================================================================
    # Jobs
    # =========================================================================

    def list_jobs(self, limit: int = 50) -> List[Dict[str, Any]]:
        """List recent print attempts."""
        return self._request('GET', f'/jobs?limit={limit}').get('jobs', [])
