from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from circulation.errors import ValidationFailure
from circulation.extensions import db
from circulation.utils.clock import utcnow

CENTS = Decimal("0.01")


class BorrowTransaction(db.Model):
    __tablename__ = "borrow_transactions"

    id = db.Column(db.Integer, primary_key=True)

    member_id = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=False, index=True)
    book_isbn = db.Column(db.String(32), db.ForeignKey("books.isbn"), nullable=False, index=True)
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=False, index=True)

    borrow_date = db.Column(db.DateTime, nullable=False)
    due_date = db.Column(db.DateTime, nullable=False)
    return_date = db.Column(db.DateTime, nullable=True)

    late_fee = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal("0.00"))

    member = db.relationship("Member", backref="transactions")
    book = db.relationship("Book", backref="transactions")
    branch = db.relationship("Branch")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.borrow_date and self.due_date and self.borrow_date > self.due_date:
            raise ValidationFailure("Due date cannot be before borrow date")

    @property
    def status(self) -> str:
        return "RETURNED" if self.return_date is not None else "OPEN"

    def is_overdue(self, as_of: Optional[datetime] = None) -> bool:
        if self.return_date is not None:
            return False
        return (as_of or utcnow()) > self.due_date

    def calculate_late_fee(self, fee_per_day, as_of: Optional[datetime] = None) -> Decimal:
        """
        Whole days past the due date times ``fee_per_day``, rounded to cents.

        Measured to the return date once returned, otherwise to ``as_of``
        (default: now). Anything up to and including the due date costs 0.
        """
        end = self.return_date if self.return_date is not None else (as_of or utcnow())
        if end <= self.due_date:
            return Decimal("0.00")

        days_late = (end - self.due_date).days
        return (Decimal(str(fee_per_day)) * days_late).quantize(CENTS, rounding=ROUND_HALF_UP)

    def process_return(self, fee_per_day, now: Optional[datetime] = None) -> None:
        now = now or utcnow()
        self.return_date = now
        self.late_fee = self.calculate_late_fee(fee_per_day, now)
