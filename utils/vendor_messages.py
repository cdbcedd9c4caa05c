"""
Vendor grouping and restock request messages.

Two views use different item selections and line formats:
  - the broadcast from the current stock report lists items at or below their
    minimum restock, one message per vendor, quantity on hand per line
  - the supplier contact view lists every item that needs attention for one
    supplier, restock quantity per line, greeting the supplier's alias
"""

import logging
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote

from constants.schemas import CurrentStockItem, SupplierContact, VendorMessage
from constants.sheet_columns import (
    NO_VENDOR_LABEL,
    RESTOCK_MESSAGE_TEMPLATE,
    WHATSAPP_MEDIA,
)
from utils.restock import needs_attention, needs_restock, sort_by_urgency

logger = logging.getLogger(__name__)

WHATSAPP_DIRECT_URL = "https://wa.me/{phone}"
WHATSAPP_WEB_URL = "https://web.whatsapp.com/send"


def format_quantity(value: float) -> str:
    """5.0 -> '5', 2.5 -> '2.5'"""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def vendor_key(item: CurrentStockItem) -> str:
    return item.vendor.strip() if item.vendor and item.vendor.strip() else NO_VENDOR_LABEL


def group_by_vendor(items: Iterable[CurrentStockItem]) -> Dict[str, List[CurrentStockItem]]:
    """Vendor -> items, in the order vendors first appear."""
    groups: Dict[str, List[CurrentStockItem]] = {}
    for item in items:
        groups.setdefault(vendor_key(item), []).append(item)
    return groups


def compose_message(greet_name: str, lines: List[str]) -> str:
    return RESTOCK_MESSAGE_TEMPLATE.format(name=greet_name, lines="\n".join(lines))


def broadcast_line(item: CurrentStockItem) -> str:
    return f"- {item.item}: {format_quantity(item.current_qty)} {item.unit}".strip()


def supplier_line(item: CurrentStockItem) -> str:
    return f"- {item.item}: {format_quantity(item.min_restock)} ({item.unit})"


def build_broadcast_messages(items: Iterable[CurrentStockItem]) -> List[VendorMessage]:
    """
    One message per vendor for every item at or below its minimum restock.

    Items are urgency-sorted inside each message. Vendors with more items come
    first; vendors with the same count keep their first-seen order.
    """
    needed = [i for i in sort_by_urgency(items) if needs_restock(i)]

    messages = []
    for vendor, vendor_items in group_by_vendor(needed).items():
        lines = [broadcast_line(i) for i in vendor_items]
        messages.append(
            VendorMessage(vendor=vendor, items=vendor_items, message=compose_message(vendor, lines))
        )

    messages.sort(key=lambda m: len(m.items), reverse=True)
    logger.info(f"Composed restock messages for {len(messages)} vendors")
    return messages


def supplier_groups(items: Iterable[CurrentStockItem]) -> Dict[str, List[CurrentStockItem]]:
    """Items needing attention grouped by vendor, urgency-sorted within each group."""
    attention = [i for i in items if needs_attention(i)]
    return {vendor: sort_by_urgency(group) for vendor, group in group_by_vendor(attention).items()}


def whatsapp_suppliers(suppliers: Iterable[SupplierContact]) -> List[SupplierContact]:
    return [s for s in suppliers if (s.media or "").strip().lower() == WHATSAPP_MEDIA]


def find_supplier(vendor: str, suppliers: Iterable[SupplierContact]) -> Optional[SupplierContact]:
    for supplier in suppliers:
        if supplier.name == vendor:
            return supplier
    return None


def build_supplier_message(
    vendor: str,
    items: Iterable[CurrentStockItem],
    suppliers: Iterable[SupplierContact],
) -> VendorMessage:
    """
    Restock request for a single supplier.

    Args:
        vendor: Vendor name as written in the processing table
        items: Items of that vendor needing attention
        suppliers: Known supplier contacts, matched by exact name

    Returns:
        VendorMessage greeting the supplier alias when one is configured
    """
    vendor_items = sort_by_urgency(items)
    supplier = find_supplier(vendor, suppliers)
    greet_name = supplier.alias if supplier and supplier.alias else vendor
    lines = [supplier_line(i) for i in vendor_items]
    return VendorMessage(vendor=vendor, items=vendor_items, message=compose_message(greet_name, lines))


def resolve_phone(
    vendor: str,
    suppliers: Iterable[SupplierContact],
    fallback_numbers: Optional[Dict[str, str]] = None,
) -> Optional[str]:
    supplier = find_supplier(vendor, suppliers)
    if supplier and supplier.phone:
        return supplier.phone
    return (fallback_numbers or {}).get(vendor) or None


def whatsapp_link(message: str, phone: Optional[str] = None) -> str:
    """wa.me link when the number is known, WhatsApp Web's contact picker otherwise."""
    base = WHATSAPP_DIRECT_URL.format(phone=phone) if phone else WHATSAPP_WEB_URL
    return f"{base}?text={quote(message, safe='')}"
