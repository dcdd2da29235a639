from dataclasses import dataclass, fields
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Outcome:
    success: bool
    message: str
    error: Optional[str] = None

    def to_dict(self) -> dict:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = float(value)
            out[f.name] = value
        return out


@dataclass
class BorrowOutcome(Outcome):
    transaction_id: Optional[int] = None
    due_date: Optional[datetime] = None
    book_title: Optional[str] = None


@dataclass
class ReturnOutcome(Outcome):
    late_fee: Optional[Decimal] = None
    reservation_promoted: bool = False
    promoted_reservation_id: Optional[int] = None


@dataclass
class ReserveOutcome(Outcome):
    reservation_id: Optional[int] = None
    expiry_date: Optional[datetime] = None


@dataclass
class PaymentOutcome(Outcome):
    payment_id: Optional[int] = None
    amount: Optional[Decimal] = None


@dataclass
class CancelOutcome(Outcome):
    reservation_id: Optional[int] = None
