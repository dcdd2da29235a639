from sqlalchemy import select

from circulation.models.payment import Payment


class PaymentRepo:
    @staticmethod
    def get(session, payment_id: int):
        return session.get(Payment, payment_id)

    @staticmethod
    def list_by_member(session, member_id: int):
        stmt = (
            select(Payment)
            .where(Payment.member_id == member_id)
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
        )
        return session.scalars(stmt).all()

    @staticmethod
    def save(session, payment: Payment):
        session.add(payment)
        session.flush()
        return payment
