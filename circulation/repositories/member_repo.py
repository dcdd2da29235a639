from decimal import Decimal

from sqlalchemy import func, select

from circulation.models.borrow import BorrowTransaction
from circulation.models.member import Member
from circulation.models.payment import Payment


class MemberRepo:
    @staticmethod
    def get(session, member_id: int):
        return session.get(Member, member_id)

    @staticmethod
    def get_for_update(session, member_id: int):
        return session.get(Member, member_id, with_for_update=True)

    @staticmethod
    def get_by_email(session, email: str):
        return session.scalars(select(Member).where(Member.email == email.strip().lower())).first()

    @staticmethod
    def list_all(session):
        return session.scalars(select(Member).order_by(Member.full_name)).all()

    @staticmethod
    def save(session, member: Member):
        session.add(member)
        session.flush()
        return member

    @staticmethod
    def update(session, member: Member):
        session.flush()
        return member

    @staticmethod
    def current_borrowed_count(session, member_id: int) -> int:
        stmt = select(func.count(BorrowTransaction.id)).where(
            BorrowTransaction.member_id == member_id,
            BorrowTransaction.return_date.is_(None),
        )
        return session.scalar(stmt) or 0

    @staticmethod
    def total_unpaid_fees(session, member_id: int) -> Decimal:
        """Late fees on returned loans minus everything paid, never below zero."""
        fees = session.scalar(
            select(func.coalesce(func.sum(BorrowTransaction.late_fee), 0)).where(
                BorrowTransaction.member_id == member_id,
                BorrowTransaction.return_date.is_not(None),
                BorrowTransaction.late_fee > 0,
            )
        )
        paid = session.scalar(
            select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.member_id == member_id)
        )
        balance = Decimal(str(fees or 0)) - Decimal(str(paid or 0))
        return max(Decimal("0.00"), balance).quantize(Decimal("0.01"))

    @staticmethod
    def has_overdue_books(session, member_id: int, now) -> bool:
        stmt = select(func.count(BorrowTransaction.id)).where(
            BorrowTransaction.member_id == member_id,
            BorrowTransaction.return_date.is_(None),
            BorrowTransaction.due_date < now,
        )
        return (session.scalar(stmt) or 0) > 0
