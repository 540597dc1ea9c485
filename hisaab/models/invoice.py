"""
Core Data Models for Hisaab

These models define the records the editor works with and the store
persists. They are designed to:
1. Keep derived money fields consistent with their inputs
2. Serialize to the camelCase JSON shape of the stored collections
3. Accept the editor's "unset" values (None or "") without losing them

DESIGN DECISION: Derived fields are a cache, not a source of truth.
InvoiceItem recomputes tp / total_price_per_piece / row_total and
Invoice recomputes its aggregates every time they are validated,
including when loaded from storage. Values supplied for them are ignored.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from hisaab.pricing import (
    calculate_balance,
    calculate_grand_total,
    calculate_total_paid,
    compute_row,
)


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _unset_to_none(value: Any) -> Any:
    """Map the editor's empty cell to None; keep floats exact via str()."""
    if isinstance(value, str) and not value.strip():
        return None
    if isinstance(value, float):
        return Decimal(str(value))
    return value


class RecordModel(BaseModel):
    """Base for persisted records: snake_case in Python, camelCase on disk."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_record(self) -> dict:
        """Dump to the JSON-ready camelCase shape used by the stores."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# ENUMS
# =============================================================================

class InvoiceStatus(str, Enum):
    """Payment status of an invoice, toggled from the dashboard."""
    PAID = "Paid"
    PENDING = "Pending"

    def toggled(self) -> "InvoiceStatus":
        return InvoiceStatus.PENDING if self is InvoiceStatus.PAID else InvoiceStatus.PAID


# =============================================================================
# LINE ITEMS AND PAYMENTS
# =============================================================================

class InvoiceItem(RecordModel):
    """
    One purchasable line.

    qty, rate and discount_percent may be unset (None). Unset counts as 0
    when pricing but stays None here, so the editor shows an empty cell.
    """

    EDITABLE_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"item_name", "qty", "rate", "discount_percent"}
    )

    id: str = Field(
        default_factory=_new_id,
        description="Row identifier, fixed once created"
    )
    item_name: str = Field(
        default="",
        max_length=200,
        description="Free text label"
    )
    qty: Optional[Decimal] = None
    rate: Optional[Decimal] = Field(
        default=None,
        description="Retail price per unit"
    )
    discount_percent: Optional[Decimal] = Field(
        default=None,
        description="Signed adjustment: +5 surcharge, -5 discount"
    )

    # Derived, recomputed on every validation
    tp: Decimal = Decimal("0")
    total_price_per_piece: Decimal = Decimal("0")
    row_total: Decimal = Decimal("0")

    @field_validator('qty', 'rate', 'discount_percent', mode='before')
    @classmethod
    def empty_means_unset(cls, v: Any) -> Any:
        return _unset_to_none(v)

    @model_validator(mode='after')
    def recompute_derived(self) -> 'InvoiceItem':
        """Derived fields always follow rate, qty and discount_percent."""
        pricing = compute_row(self.rate, self.qty, self.discount_percent)
        self.tp = pricing.tp
        self.total_price_per_piece = pricing.total_price_per_piece
        self.row_total = pricing.row_total
        return self

    def edit(self, **changes: Any) -> 'InvoiceItem':
        """
        Return a copy with the given input fields changed and the
        derived fields recomputed.

        Raises:
            ValueError: If a non-editable field (id or a derived field) is given
        """
        unknown = set(changes) - self.EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be edited: {sorted(unknown)}")
        data = self.model_dump()
        data.update(changes)
        return InvoiceItem.model_validate(data)

    def duplicate(self) -> 'InvoiceItem':
        """Copy of this row under a fresh id."""
        data = self.model_dump()
        data["id"] = _new_id()
        return InvoiceItem.model_validate(data)


class PaidAmount(RecordModel):
    """One payment received against an invoice."""

    id: str = Field(default_factory=_new_id)
    narration: str = Field(
        default="",
        max_length=500,
        description="What the payment was (cash, cheque no., ...)"
    )
    amount: Optional[Decimal] = None

    @field_validator('amount', mode='before')
    @classmethod
    def empty_means_unset(cls, v: Any) -> Any:
        return _unset_to_none(v)


# =============================================================================
# INVOICE
# =============================================================================

class Invoice(RecordModel):
    """
    The aggregate root: a named, dated invoice owned by one user.

    grand_total, total_paid and balance are recomputed from items and
    paid_amounts on validation and by recalculate(). Stores call
    recalculate() on every save.
    """

    id: str = Field(
        default_factory=_new_id,
        description="Stable across edits"
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="Username of the owner; the only access-scoping key"
    )
    name: str = Field(
        default="",
        max_length=200,
        description="Invoice name, required before saving"
    )
    invoice_date: date = Field(
        default_factory=date.today,
        alias="date",
        description="Date printed on the invoice"
    )
    status: InvoiceStatus = InvoiceStatus.PENDING

    items: list[InvoiceItem] = Field(default_factory=list)
    paid_amounts: list[PaidAmount] = Field(default_factory=list)

    # Aggregates (cache)
    grand_total: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode='after')
    def recompute_aggregates(self) -> 'Invoice':
        return self.recalculate()

    def recalculate(self) -> 'Invoice':
        """Recompute the aggregates from items and paid_amounts in place."""
        self.grand_total = calculate_grand_total(self.items)
        self.total_paid = calculate_total_paid(self.paid_amounts)
        self.balance = calculate_balance(self.grand_total, self.total_paid)
        return self

    @classmethod
    def from_record(cls, record: dict) -> 'Invoice':
        """Build from a stored camelCase record."""
        return cls.model_validate(record)


# =============================================================================
# USERS
# =============================================================================

class User(RecordModel):
    """
    A stored login.

    The password is kept in plain text. This is only acceptable for a
    local, single-user installation.
    """

    # Passwords are compared exactly, whitespace included
    model_config = ConfigDict(str_strip_whitespace=False)

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class SessionUser(BaseModel):
    """The logged-in user as the UI holds it: no password."""
    model_config = ConfigDict(frozen=True)

    username: str
