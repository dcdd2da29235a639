from decimal import Decimal, InvalidOperation

from circulation.extensions import db


class Payment(db.Model):
    """Settlement of late fees. Written once, never updated."""
    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)

    member_id = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=False, index=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    payment_date = db.Column(db.DateTime, nullable=False)
    payment_method = db.Column(db.String(50), nullable=False)

    member = db.relationship("Member", backref="payments")

    def process_payment(self) -> bool:
        # no gateway: a positive finite amount is a successful settlement
        if self.amount is None:
            return False
        try:
            amount = Decimal(str(self.amount))
        except InvalidOperation:
            return False
        return amount.is_finite() and amount > 0

    def validate(self) -> bool:
        return bool(self.member_id) and self.process_payment() and bool((self.payment_method or "").strip())
