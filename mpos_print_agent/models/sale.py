"""
Sale Models
===========

The body of POST /print-sale, validated before any device is touched.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, List, Any, Dict, Union

from ..exceptions import InvalidSalePayloadError

Number = Union[int, float]


def _number(value: Any, name: str, default: Optional[Number] = None) -> Number:
    if value is None and default is not None:
        return default
    if isinstance(value, bool):
        raise InvalidSalePayloadError(f"{name} must be a number", {'field': name})
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            pass
    if isinstance(value, int) or (isinstance(value, float) and math.isfinite(value)):
        return value
    raise InvalidSalePayloadError(f"{name} must be a number", {'field': name})


def _text(value: Any) -> Optional[str]:
    if value is None or value == '':
        return None
    return str(value)


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise InvalidSalePayloadError(f"{name} must be an object", {'field': name})
    return section


@dataclass
class SaleItem:
    """One receipt line."""

    name: str
    quantity: Number
    unit_price: Number
    tax: Number = 0

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price + self.tax

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> 'SaleItem':
        if not isinstance(data, dict):
            raise InvalidSalePayloadError("Each item must be an object", {'item': index})
        if data.get('name') is None:
            raise InvalidSalePayloadError("Item name is required", {'item': index})
        return cls(
            name=str(data['name']),
            quantity=_number(data.get('quantity'), f'items[{index}].quantity'),
            unit_price=_number(data.get('unit_price'), f'items[{index}].unit_price'),
            tax=_number(data.get('tax'), f'items[{index}].tax', default=0),
        )


@dataclass
class Store:
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None


@dataclass
class Sale:
    """Sale header and totals."""

    id: str
    number: Optional[str] = None
    date: Optional[str] = None
    subtotal: Number = 0
    tax_total: Number = 0
    discount_total: Number = 0
    grand_total: Number = 0
    payment_method: Optional[str] = None


@dataclass
class SaleReceipt:
    """Everything needed to lay out a sale receipt."""

    sale: Sale
    store: Store = field(default_factory=Store)
    employee_name: Optional[str] = None
    items: List[SaleItem] = field(default_factory=list)
    locale: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Any) -> 'SaleReceipt':
        """
        Parse a /print-sale request body.

        Raises:
            InvalidSalePayloadError: missing sale id, non-numeric amounts,
                or items that are not a list of objects
        """
        if not isinstance(data, dict):
            raise InvalidSalePayloadError("Request body must be a JSON object")

        sale_data = _section(data, 'sale')
        if sale_data.get('id') in (None, ''):
            raise InvalidSalePayloadError("sale.id is required", {'field': 'sale.id'})

        sale = Sale(
            id=str(sale_data['id']),
            number=_text(sale_data.get('number')),
            date=_text(sale_data.get('date')),
            subtotal=_number(sale_data.get('subtotal'), 'sale.subtotal', default=0),
            tax_total=_number(sale_data.get('tax_total'), 'sale.tax_total', default=0),
            discount_total=_number(sale_data.get('discount_total'), 'sale.discount_total', default=0),
            grand_total=_number(sale_data.get('grand_total'), 'sale.grand_total', default=0),
            payment_method=_text(sale_data.get('payment_method')),
        )

        store_data = _section(data, 'store')
        store = Store(
            name=_text(store_data.get('name')),
            address=_text(store_data.get('address')),
            phone=_text(store_data.get('phone')),
        )

        items_data = data.get('items') or []
        if not isinstance(items_data, list):
            raise InvalidSalePayloadError("items must be a list", {'field': 'items'})

        return cls(
            sale=sale,
            store=store,
            employee_name=_text(_section(data, 'employee').get('name')),
            items=[SaleItem.from_dict(item, i) for i, item in enumerate(items_data)],
            locale=_text(data.get('locale')),
        )
