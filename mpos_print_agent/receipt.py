"""
Receipt Templates
=================

Directive sequences for the two tickets the agent prints: the fixed
self-test ticket and the sale receipt.

Sale receipt layout (48 columns):
    store header (centered)
    ------------------------------------------------
    invoice / date / seller
    ------------------------------------------------
    Product               Qty     Price     Total
    item rows (22 / 4 / 10 / 10 columns)
    ------------------------------------------------
                          subtotal / tax / discount
                                   TOTAL (bold, 2x2)
    payment method
    barcode + QR
    thanks footer, feed, partial cut
"""

from datetime import datetime
from typing import Callable, Dict, Optional, Union

from .commands import CommandStream
from .config import INVOICE_URL, RECEIPT_WIDTH
from .handlers import CommandEncoder
from .models import SaleItem, SaleReceipt

PRODUCT_WIDTH = 22
QTY_WIDTH = 4
PRICE_WIDTH = 10
TOTAL_WIDTH = 10

BARCODE_FALLBACK = '123456789'
FOOTER = 'Powered by martpos.app'

EncoderFactory = Optional[Callable[[], CommandEncoder]]


def _format_quantity(quantity: Union[int, float]) -> str:
    if isinstance(quantity, float) and quantity.is_integer():
        return str(int(quantity))
    return str(quantity)


def format_item_row(name: str, quantity: Union[int, float], unit_price: float, total: float) -> str:
    """
    Fixed-width item row. Names longer than the product column are cut
    without any marker.
    """
    return (
        f"{name[:PRODUCT_WIDTH]:<{PRODUCT_WIDTH}}"
        f"{_format_quantity(quantity):>{QTY_WIDTH}}"
        f"{unit_price:>{PRICE_WIDTH}.2f}"
        f"{total:>{TOTAL_WIDTH}.2f}"
    )


def format_item(item: SaleItem) -> str:
    return format_item_row(item.name, item.quantity, item.unit_price, item.line_total)


def format_header_row(labels: Dict[str, str]) -> str:
    return (
        f"{labels['product']:<{PRODUCT_WIDTH}}"
        f"{labels['qty']:>{QTY_WIDTH}}"
        f"{labels['price']:>{PRICE_WIDTH}}"
        f"{labels['total']:>{TOTAL_WIDTH}}"
    )


def format_sale_date(value: Optional[str], labels: Dict[str, str]) -> str:
    """ISO timestamps are reformatted per language; anything else is printed as given."""
    if not value:
        return ''
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return value
    return parsed.strftime(labels['date_format'])


def invoice_url(sale_id: str) -> str:
    """Lookup URL encoded in the receipt's QR code."""
    return INVOICE_URL.format(sale_id=sale_id)


def build_test_ticket(encoder_factory: EncoderFactory = None) -> CommandStream:
    """Self-test ticket for GET /print-test."""
    return (
        CommandStream(encoder_factory)
        .initialize()
        .align('center')
        .bold(True)
        .size(2, 2)
        .line('MART POS')
        .bold(False)
        .size(1, 1)
        .align('left')
        .line('Ticket de prueba')
        .line('Ticket of proof')
        .newline(4)
        .cut('partial')
    )


def build_sale_ticket(receipt: SaleReceipt, labels: Dict[str, str],
                      encoder_factory: EncoderFactory = None,
                      width: int = RECEIPT_WIDTH) -> CommandStream:
    """Sale receipt for POST /print-sale."""
    sale = receipt.sale
    store = receipt.store
    rule = '-' * width

    stream = CommandStream(encoder_factory).initialize()

    # Header
    stream.align('center').bold(True)
    if store.name:
        stream.line(store.name)
    stream.bold(False)
    if store.address:
        stream.line(store.address)
    if store.phone:
        stream.line(f"Tel: {store.phone}")
    stream.align('left')

    # Metadata
    stream.newline().line(rule)
    stream.line(f"{labels['invoice']}: {sale.id}")
    stream.line(f"{labels['date']}: {format_sale_date(sale.date, labels)}")
    if receipt.employee_name:
        stream.line(f"{labels['seller']}: {receipt.employee_name}")
    stream.line(rule).newline()

    # Items
    stream.bold(True).line(format_header_row(labels)).bold(False)
    for item in receipt.items:
        stream.line(format_item(item))
    stream.line(rule)

    # Totals
    (stream
        .align('right')
        .line(f"{labels['subtotal']}: ${sale.subtotal:.2f}")
        .line(f"{labels['tax']}: ${sale.tax_total:.2f}")
        .line(f"{labels['discount']}: ${sale.discount_total:.2f}")
        .bold(True)
        .size(2, 2)
        .line(f"{labels['grand_total']}: ${sale.grand_total:.2f}")
        .bold(False)
        .size(1, 1)
        .align('left')
        .newline())

    if sale.payment_method:
        stream.align('center').line(f"{labels['payment_method']}: {sale.payment_method}")

    # Barcode + QR
    (stream
        .newline()
        .align('center')
        .bold(True).line('Barcode').bold(False)
        .barcode(sale.number or BARCODE_FALLBACK, 'code128', height=60)
        .align('center')
        .bold(True).line('QR').bold(False)
        .qrcode(invoice_url(sale.id), model=1, size=6, correction='M'))

    # Footer
    (stream
        .newline()
        .align('center')
        .bold(True).line(labels['thanks']).bold(False)
        .line(FOOTER)
        .newline(3)
        .cut('partial'))

    return stream
