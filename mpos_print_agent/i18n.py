"""
Receipt Labels
==============

Built-in label tables for printed receipts.

Supported languages:
- Spanish (es, default)
- English (en)

Unknown or missing locale codes fall back to Spanish.
"""

from typing import Dict, Optional

DEFAULT_LANGUAGE = 'es'

LABELS: Dict[str, Dict[str, str]] = {
    'es': {
        'invoice': 'Factura',
        'date': 'Fecha',
        'seller': 'Vendedor',
        'product': 'Producto',
        'qty': 'Cant',
        'price': 'Precio',
        'total': 'Total',
        'subtotal': 'Subtotal',
        'tax': 'IVA',
        'discount': 'Descuento',
        'grand_total': 'TOTAL',
        'thanks': '¡Gracias por su compra!',
        'payment_method': 'Método de pago',
        'date_format': '%d/%m/%Y %H:%M:%S',
    },
    'en': {
        'invoice': 'Invoice',
        'date': 'Date',
        'seller': 'Seller',
        'product': 'Product',
        'qty': 'Qty',
        'price': 'Price',
        'total': 'Total',
        'subtotal': 'Subtotal',
        'tax': 'Tax',
        'discount': 'Discount',
        'grand_total': 'TOTAL',
        'thanks': 'Thank you for your purchase!',
        'payment_method': 'Payment method',
        'date_format': '%m/%d/%Y %I:%M:%S %p',
    },
}


def resolve_language(locale: Optional[str]) -> str:
    """Map a locale code ('en', 'en-US', 'es_MX') to a supported language."""
    if not locale:
        return DEFAULT_LANGUAGE
    lang = locale.replace('_', '-').split('-')[0].lower()
    return lang if lang in LABELS else DEFAULT_LANGUAGE


def get_labels(locale: Optional[str]) -> Dict[str, str]:
    return LABELS[resolve_language(locale)]
