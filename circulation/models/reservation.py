from datetime import timedelta
from enum import Enum

from circulation.extensions import db
from circulation.utils.clock import utcnow

PENDING_WINDOW = timedelta(days=7)
READY_WINDOW = timedelta(days=2)


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    READY = "READY"
    EXPIRED = "EXPIRED"
    FULFILLED = "FULFILLED"


ACTIVE_STATUSES = (ReservationStatus.PENDING, ReservationStatus.READY)


class Reservation(db.Model):
    __tablename__ = "reservations"

    id = db.Column(db.Integer, primary_key=True)

    member_id = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=False, index=True)
    book_isbn = db.Column(db.String(32), db.ForeignKey("books.isbn"), nullable=False, index=True)
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=False, index=True)

    reservation_date = db.Column(db.DateTime, nullable=False)
    expiry_date = db.Column(db.DateTime, nullable=False)

    status = db.Column(db.Enum(ReservationStatus, name="reservation_status"),
                       nullable=False, default=ReservationStatus.PENDING)

    member = db.relationship("Member", backref="reservations")
    book = db.relationship("Book")

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def notify_member(self, now=None) -> None:
        # a copy came back: hold window restarts from now
        now = now or utcnow()
        self.status = ReservationStatus.READY
        self.expiry_date = now + READY_WINDOW

    def cancel(self) -> None:
        self.status = ReservationStatus.EXPIRED

    def is_expired(self, as_of=None) -> bool:
        return (as_of or utcnow()) > self.expiry_date and self.status != ReservationStatus.FULFILLED
