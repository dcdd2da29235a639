from sqlalchemy import select, update

from circulation.models.reservation import ACTIVE_STATUSES, Reservation, ReservationStatus


class ReservationRepo:
    @staticmethod
    def get(session, reservation_id: int):
        return session.get(Reservation, reservation_id)

    @staticmethod
    def list_by_member(session, member_id: int):
        stmt = (
            select(Reservation)
            .where(Reservation.member_id == member_id)
            .order_by(Reservation.reservation_date.desc(), Reservation.id.desc())
        )
        return session.scalars(stmt).all()

    @staticmethod
    def list_active_by_book_and_branch(session, isbn: str, branch_id: int, for_update: bool = False):
        # FIFO: the oldest reservation is first in line
        stmt = (
            select(Reservation)
            .where(
                Reservation.book_isbn == isbn,
                Reservation.branch_id == branch_id,
                Reservation.status.in_(ACTIVE_STATUSES),
            )
            .order_by(Reservation.reservation_date.asc(), Reservation.id.asc())
        )
        if for_update:
            stmt = stmt.with_for_update()
        return session.scalars(stmt).all()

    @staticmethod
    def save(session, reservation: Reservation):
        session.add(reservation)
        session.flush()
        return reservation

    @staticmethod
    def update(session, reservation: Reservation):
        session.flush()
        return reservation

    @staticmethod
    def expire_old(session, now) -> int:
        """Mark every PENDING/READY reservation whose expiry has passed as EXPIRED."""
        stmt = (
            update(Reservation)
            .where(Reservation.status.in_(ACTIVE_STATUSES), Reservation.expiry_date < now)
            .values(status=ReservationStatus.EXPIRED)
            .execution_options(synchronize_session="fetch")
        )
        return session.execute(stmt).rowcount
