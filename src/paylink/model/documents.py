from __future__ import annotations

"""
Document models for the reconciliation run.

Scope
- Pure Pydantic v2 models; no I/O.
- Parsed from the accounting system's JSON rows via `from_api_row`.
- Amounts are integers in minor currency units (kopecks).

Row shape (abridged) for both entity types:
{
    "id": "...",
    "meta": {"href": "...", "type": "paymentin" | "invoiceout", ...},
    "organization": {"meta": {"href": "..."}},
    "agent": {"meta": {"href": "..."}},
    "organizationAccount": {"meta": {"href": "..."}},
    "sum": 4048750,
    ...
}
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field


def _ref_href(row: dict, key: str) -> Optional[str]:
    """Return row[key].meta.href, or None when any level is missing."""
    ref = row.get(key)
    if not isinstance(ref, dict):
        return None
    meta = ref.get("meta")
    if not isinstance(meta, dict):
        return None
    href = meta.get("href")
    return str(href) if href else None


def _parse_moment(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    # API format: "2025-02-19 10:15:00.000"
    return datetime.fromisoformat(str(value).strip())


class Payment(BaseModel):
    """Incoming bank payment (paymentin)."""

    payment_id: str
    meta: Dict[str, Any]
    organization_href: Optional[str] = None
    agent_href: Optional[str] = None
    account_href: Optional[str] = None
    amount: int = Field(description="Payment sum in minor units")
    purpose: str = ""
    operations: List[Dict[str, Any]] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def is_eligible(self) -> bool:
        """Only positive payments with a bank account and a purpose text can be matched."""
        return self.amount > 0 and bool(self.account_href) and bool(self.purpose.strip())

    @computed_field  # type: ignore[misc]
    @property
    def is_linked(self) -> bool:
        return len(self.operations) > 0

    @classmethod
    def from_api_row(cls, row: dict) -> "Payment":
        return cls(
            payment_id=row["id"],
            meta=row["meta"],
            organization_href=_ref_href(row, "organization"),
            agent_href=_ref_href(row, "agent"),
            account_href=_ref_href(row, "organizationAccount"),
            amount=int(row.get("sum") or 0),
            purpose=row.get("paymentPurpose") or "",
            operations=list(row.get("operations") or []),
        )


class Invoice(BaseModel):
    """Outgoing sales invoice (invoiceout).

    `amount_paid` is always held in minor units. Sources that report `payedSum`
    in major units are normalized with `payed_sum_scale` in `from_api_row`.
    """

    invoice_id: str
    meta: Dict[str, Any]
    number: str
    organization_href: Optional[str] = None
    agent_href: Optional[str] = None
    account_href: Optional[str] = None
    total_amount: int
    amount_paid: int = 0
    moment: datetime

    @computed_field  # type: ignore[misc]
    @property
    def remaining(self) -> int:
        return self.total_amount - self.amount_paid

    @computed_field  # type: ignore[misc]
    @property
    def is_unpaid(self) -> bool:
        return self.amount_paid < self.total_amount

    @classmethod
    def from_api_row(cls, row: dict, payed_sum_scale: int = 1) -> "Invoice":
        paid = row.get("payedSum") or 0
        return cls(
            invoice_id=row["id"],
            meta=row["meta"],
            number=str(row.get("name") or ""),
            organization_href=_ref_href(row, "organization"),
            agent_href=_ref_href(row, "agent"),
            account_href=_ref_href(row, "organizationAccount"),
            total_amount=int(row.get("sum") or 0),
            amount_paid=int(round(float(paid) * payed_sum_scale)),
            moment=_parse_moment(row["moment"]),
        )


class AttachmentAttribute(BaseModel):
    """Tenant custom attribute flagging a payment as attached to its invoice."""

    meta: Dict[str, Any]
    id: Optional[str] = None
    name: Optional[str] = None
    type: str = "boolean"
    value: Any = None

    def as_attached(self) -> Dict[str, Any]:
        """Attribute payload with value set to true, ready for a payment update."""
        payload = self.model_dump(exclude_none=True)
        payload["value"] = True
        return payload


__all__ = ["Payment", "Invoice", "AttachmentAttribute"]
