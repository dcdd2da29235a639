from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.orm import validates

from circulation.errors import ValidationFailure
from circulation.extensions import db
from circulation.utils.clock import today as _today


class MemberType(str, Enum):
    STUDENT = "STUDENT"
    FACULTY = "FACULTY"


@dataclass(frozen=True)
class MemberPolicy:
    max_books: int
    loan_days: int
    late_fee: Decimal  # per day


MEMBER_POLICIES = {
    MemberType.STUDENT: MemberPolicy(max_books=3, loan_days=14, late_fee=Decimal("0.50")),
    MemberType.FACULTY: MemberPolicy(max_books=10, loan_days=30, late_fee=Decimal("0.25")),
}


class Member(db.Model):
    """
    A borrower. The member type selects a fixed lending policy from
    MEMBER_POLICIES; student_id only applies to students, employee_id and
    department only to faculty.

    ``total_borrowed_books`` counts every borrow ever made. The number of
    books currently out is derived from open transactions.
    """
    __tablename__ = "members"

    id = db.Column(db.Integer, primary_key=True)
    member_type = db.Column(db.Enum(MemberType, name="member_type"), nullable=False)

    full_name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    phone_number = db.Column(db.String(50), nullable=True)

    membership_end_date = db.Column(db.Date, nullable=True)
    total_borrowed_books = db.Column(db.Integer, nullable=False, default=0)

    student_id = db.Column(db.String(50), nullable=True)
    employee_id = db.Column(db.String(50), nullable=True)
    department = db.Column(db.String(100), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    @validates("full_name")
    def _check_name(self, key, value):
        value = str(value or "").strip()
        if not value:
            raise ValidationFailure("Full name is required")
        return value

    @validates("email")
    def _check_email(self, key, value):
        value = str(value or "").strip()
        if not value:
            raise ValidationFailure("Email is required")
        try:
            # syntax only, no DNS lookup
            checked = validate_email(value, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValidationFailure(f"Invalid email address: {value} ({e})") from None
        return checked.normalized.lower()

    @validates("member_type")
    def _check_type(self, key, value):
        try:
            return MemberType(value)
        except ValueError:
            raise ValidationFailure(f"Unknown member type: {value}") from None

    @property
    def policy(self) -> MemberPolicy:
        return MEMBER_POLICIES[self.member_type]

    @property
    def max_books(self) -> int:
        return self.policy.max_books

    @property
    def loan_days(self) -> int:
        return self.policy.loan_days

    @property
    def late_fee_rate(self) -> Decimal:
        return self.policy.late_fee

    def is_membership_valid(self, today: Optional[date] = None) -> bool:
        if self.membership_end_date is None:
            return False
        return self.membership_end_date >= (today or _today())

    def can_borrow(self, current_borrowed_count: int, today: Optional[date] = None) -> bool:
        return self.is_membership_valid(today) and current_borrowed_count < self.max_books

    def increment_total_borrowed_books(self) -> None:
        self.total_borrowed_books = (self.total_borrowed_books or 0) + 1

    def renew_membership(self, new_end_date: date) -> None:
        self.membership_end_date = new_end_date
