from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .io import to_csv_text
from .normalize import safe_int, text
from .woocommerce import WooClient


log = logging.getLogger(__name__)

SHOPIFY_CUSTOMER_HEADERS = [
    "First Name",
    "Last Name",
    "Email",
    "Accepts Email Marketing",
    "Default Address Company",
    "Default Address Address1",
    "Default Address Address2",
    "Default Address City",
    "Default Address Province Code",
    "Default Address Country Code",
    "Default Address Zip",
    "Default Address Phone",
    "Phone",
    "Accepts SMS Marketing",
    "Tags",
    "Note",
    "Tax Exempt",
]

ADDRESS_FIELDS = ("company", "address_1", "address_2", "city", "state", "country", "postcode", "phone")


def is_active(customer: dict) -> bool:
    return safe_int(customer.get("orders_count"), 0) > 0 or bool(customer.get("is_paying_customer"))


def _address(customer: dict) -> Dict[str, str]:
    billing = customer.get("billing") or {}
    shipping = customer.get("shipping") or {}
    return {k: text(billing.get(k)) or text(shipping.get(k)) for k in ADDRESS_FIELDS}


def map_customer_row(customer: dict) -> Dict:
    billing = customer.get("billing") or {}
    shipping = customer.get("shipping") or {}
    addr = _address(customer)
    return {
        "First Name": text(customer.get("first_name")) or text(billing.get("first_name")) or text(shipping.get("first_name")),
        "Last Name": text(customer.get("last_name")) or text(billing.get("last_name")) or text(shipping.get("last_name")),
        "Email": text(customer.get("email")).lower(),
        "Accepts Email Marketing": "no",
        "Default Address Company": addr["company"],
        "Default Address Address1": addr["address_1"],
        "Default Address Address2": addr["address_2"],
        "Default Address City": addr["city"],
        "Default Address Province Code": addr["state"],
        "Default Address Country Code": addr["country"],
        "Default Address Zip": addr["postcode"],
        "Default Address Phone": addr["phone"],
        "Phone": text(billing.get("phone")),
        "Accepts SMS Marketing": "no",
        "Tags": "",
        "Note": "",
        "Tax Exempt": "no",
    }


@dataclass
class CustomerExportSummary:
    scanned: int = 0
    skipped_inactive: int = 0
    skipped_no_email: int = 0
    failed_pages: List[int] = field(default_factory=list)
    rows: List[Dict] = field(default_factory=list)

    @property
    def exported(self) -> int:
        return len(self.rows)

    def to_csv(self) -> str:
        return to_csv_text(self.rows, SHOPIFY_CUSTOMER_HEADERS)


def export_customers(client: WooClient, per_page: int = 100, active_only: bool = True, start_page: int = 1) -> CustomerExportSummary:
    log.info("[Woo Customers Export] Start | per_page=%s | activeOnly=%s | startPage=%s", per_page, active_only, start_page)
    summary = CustomerExportSummary()
    for _, customers in client.iter_customer_pages(per_page, start_page, summary.failed_pages):
        summary.scanned += len(customers)
        for c in customers:
            if active_only and not is_active(c):
                summary.skipped_inactive += 1
                log.debug("Skipping inactive customer id=%s", c.get("id"))
                continue
            if not text(c.get("email")):
                summary.skipped_no_email += 1
                log.info("Skipping customer id=%s (no email)", c.get("id"))
                continue
            summary.rows.append(map_customer_row(c))
    log.info(
        "[Woo Customers Export] Done. Total scanned: %d, Exported: %d, Failed pages: %d",
        summary.scanned, summary.exported, len(summary.failed_pages),
    )
    return summary
