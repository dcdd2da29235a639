"""
Circulation engine: borrow, return, reserve and pay.

Each workflow runs as a single unit of work on the session it is given
(``db.session`` by default). Every read that drives a decision and every
write happens inside that unit; if any step fails the whole unit is rolled
back and the failure comes back as an unsuccessful outcome instead of an
exception.

Inventory is counted twice, per branch (BranchInventory) and catalog-wide
(Book.available_copies). Borrow and return always move both by one in the
same unit.
"""
from datetime import timedelta
from decimal import Decimal, InvalidOperation

from flask import current_app

from circulation.errors import CirculationError, NotFound, PersistenceFailure, PolicyViolation, ValidationFailure
from circulation.extensions import db
from circulation.models.borrow import BorrowTransaction
from circulation.models.payment import Payment
from circulation.models.reservation import PENDING_WINDOW, Reservation, ReservationStatus
from circulation.repositories.book_repo import BookRepo
from circulation.repositories.borrow_repo import BorrowRepo
from circulation.repositories.member_repo import MemberRepo
from circulation.repositories.payment_repo import PaymentRepo
from circulation.repositories.reservation_repo import ReservationRepo
from circulation.services.outcomes import (
    BorrowOutcome,
    CancelOutcome,
    PaymentOutcome,
    ReserveOutcome,
    ReturnOutcome,
)
from circulation.utils.clock import utcnow
from circulation.utils.db import atomic

UNPAID_FEE_LIMIT = Decimal("10.00")


class CirculationService:
    @staticmethod
    def _failure(outcome_cls, action: str, error: CirculationError):
        if isinstance(error, PersistenceFailure):
            current_app.logger.exception(f"[circulation] {action} failed: {error}")
        else:
            current_app.logger.info(f"[circulation] {action} rejected ({error.code}): {error}")
        return outcome_cls(success=False, message=str(error), error=error.code)

    @staticmethod
    def borrow_book(member_id: int, isbn: str, branch_id: int, session=None, now=None) -> BorrowOutcome:
        session = session or db.session
        now = now or utcnow()

        try:
            with atomic(session):
                member = MemberRepo.get_for_update(session, member_id)
                if not member:
                    raise NotFound("Member not found")

                if not member.is_membership_valid(now.date()):
                    raise PolicyViolation("Membership has expired")

                current_count = MemberRepo.current_borrowed_count(session, member_id)
                if not member.can_borrow(current_count, now.date()):
                    raise PolicyViolation(f"Maximum borrowing limit reached ({member.max_books} books)")

                if MemberRepo.has_overdue_books(session, member_id, now):
                    raise PolicyViolation("Cannot borrow: You have overdue books")

                unpaid = MemberRepo.total_unpaid_fees(session, member_id)
                if unpaid > UNPAID_FEE_LIMIT:
                    raise PolicyViolation(f"Cannot borrow: Unpaid fees exceed $10 (Current: ${unpaid:.2f})")

                book = BookRepo.get_for_update(session, isbn)
                if not book:
                    raise NotFound("Book not found")

                available = BookRepo.branch_inventory(session, isbn, branch_id, for_update=True)
                if available <= 0:
                    raise PolicyViolation("Book not available at this branch")

                transaction = BorrowRepo.save(session, BorrowTransaction(
                    member_id=member_id,
                    book_isbn=isbn,
                    branch_id=branch_id,
                    borrow_date=now,
                    due_date=now + timedelta(days=member.loan_days),
                    late_fee=Decimal("0.00"),
                ))

                BookRepo.set_branch_inventory(session, isbn, branch_id, available - 1)

                book.decrement_copies()
                BookRepo.update(session, book)

                member.increment_total_borrowed_books()
                MemberRepo.update(session, member)

                transaction_id = transaction.id
                due_date = transaction.due_date
                title = book.title
        except CirculationError as e:
            return CirculationService._failure(BorrowOutcome, "borrow", e)

        current_app.logger.info(
            f"[circulation] borrow ok member={member_id} isbn={isbn} branch={branch_id} "
            f"transaction={transaction_id} due={due_date:%Y-%m-%d}"
        )
        return BorrowOutcome(
            success=True,
            message="Book borrowed successfully",
            transaction_id=transaction_id,
            due_date=due_date,
            book_title=title,
        )

    @staticmethod
    def return_book(transaction_id: int, session=None, now=None) -> ReturnOutcome:
        session = session or db.session
        now = now or utcnow()

        try:
            with atomic(session):
                transaction = BorrowRepo.get_for_update(session, transaction_id)
                if not transaction:
                    raise NotFound("Transaction not found")

                if transaction.return_date is not None:
                    raise PolicyViolation("Book already returned")

                member = MemberRepo.get(session, transaction.member_id)
                if not member:
                    raise NotFound("Member not found")

                transaction.process_return(member.late_fee_rate, now)
                BorrowRepo.update(session, transaction)

                isbn, branch_id = transaction.book_isbn, transaction.branch_id

                book = BookRepo.get_for_update(session, isbn)
                if book:
                    current = BookRepo.branch_inventory(session, isbn, branch_id, for_update=True)
                    BookRepo.set_branch_inventory(session, isbn, branch_id, current + 1)

                    book.increment_copies()
                    BookRepo.update(session, book)

                # the returned copy goes back on the shelf; the first in line is told it is ready
                promoted = None
                waiting = ReservationRepo.list_active_by_book_and_branch(session, isbn, branch_id, for_update=True)
                if waiting:
                    promoted = waiting[0]
                    promoted.notify_member(now)
                    ReservationRepo.update(session, promoted)

                late_fee = Decimal(str(transaction.late_fee))
                promoted_id = promoted.id if promoted else None
        except CirculationError as e:
            return CirculationService._failure(ReturnOutcome, "return", e)

        message = "Book returned successfully"
        if late_fee > 0:
            message += f" - Late fee: ${late_fee:.2f}"
        if promoted_id is not None:
            message += " - Book reserved for next member"

        current_app.logger.info(
            f"[circulation] return ok transaction={transaction_id} late_fee={late_fee:.2f} "
            f"promoted_reservation={promoted_id}"
        )
        return ReturnOutcome(
            success=True,
            message=message,
            late_fee=late_fee,
            reservation_promoted=promoted_id is not None,
            promoted_reservation_id=promoted_id,
        )

    @staticmethod
    def reserve_book(member_id: int, isbn: str, branch_id: int, session=None, now=None) -> ReserveOutcome:
        session = session or db.session
        now = now or utcnow()

        try:
            with atomic(session):
                member = MemberRepo.get(session, member_id)
                if not member:
                    raise NotFound("Invalid or expired membership")
                if not member.is_membership_valid(now.date()):
                    raise PolicyViolation("Invalid or expired membership")

                book = BookRepo.get(session, isbn)
                if not book:
                    raise NotFound("Book not found")

                if BookRepo.branch_inventory(session, isbn, branch_id, for_update=True) > 0:
                    raise PolicyViolation("Book is currently available - please borrow directly")

                for existing in ReservationRepo.list_by_member(session, member_id):
                    if existing.book_isbn == isbn and existing.branch_id == branch_id and existing.is_active:
                        raise PolicyViolation("You already have an active reservation for this book")

                reservation = ReservationRepo.save(session, Reservation(
                    member_id=member_id,
                    book_isbn=isbn,
                    branch_id=branch_id,
                    reservation_date=now,
                    expiry_date=now + PENDING_WINDOW,
                    status=ReservationStatus.PENDING,
                ))
                reservation_id = reservation.id
                expiry_date = reservation.expiry_date
        except CirculationError as e:
            return CirculationService._failure(ReserveOutcome, "reserve", e)

        current_app.logger.info(
            f"[circulation] reserve ok member={member_id} isbn={isbn} branch={branch_id} reservation={reservation_id}"
        )
        return ReserveOutcome(
            success=True,
            message="Book reserved successfully",
            reservation_id=reservation_id,
            expiry_date=expiry_date,
        )

    @staticmethod
    def process_payment(member_id: int, amount, method: str, session=None, now=None) -> PaymentOutcome:
        session = session or db.session
        now = now or utcnow()

        try:
            with atomic(session):
                member = MemberRepo.get(session, member_id)
                if not member:
                    raise NotFound("Member not found")

                try:
                    amount = Decimal(str(amount)).quantize(Decimal("0.01"))
                except InvalidOperation:
                    raise ValidationFailure("Payment processing failed") from None
                if not amount.is_finite():
                    raise ValidationFailure("Payment processing failed")

                payment = Payment(
                    member_id=member_id,
                    amount=amount,
                    payment_date=now,
                    payment_method=method,
                )
                if not payment.validate():
                    raise ValidationFailure("Payment processing failed")

                PaymentRepo.save(session, payment)
                payment_id = payment.id
        except CirculationError as e:
            return CirculationService._failure(PaymentOutcome, "payment", e)

        current_app.logger.info(f"[circulation] payment ok member={member_id} amount={amount:.2f} payment={payment_id}")
        return PaymentOutcome(
            success=True,
            message="Payment processed successfully",
            payment_id=payment_id,
            amount=amount,
        )

    @staticmethod
    def cancel_reservation(reservation_id: int, member_id=None, session=None) -> CancelOutcome:
        """Withdraw an active reservation; ``member_id`` restricts it to the owner."""
        session = session or db.session

        try:
            with atomic(session):
                reservation = ReservationRepo.get(session, reservation_id)
                if not reservation or (member_id is not None and reservation.member_id != member_id):
                    raise NotFound("Reservation not found")
                if not reservation.is_active:
                    raise PolicyViolation("Reservation is no longer active")

                reservation.cancel()
                ReservationRepo.update(session, reservation)
        except CirculationError as e:
            return CirculationService._failure(CancelOutcome, "cancel", e)

        current_app.logger.info(f"[circulation] reservation {reservation_id} cancelled")
        return CancelOutcome(success=True, message="Reservation cancelled", reservation_id=reservation_id)

    @staticmethod
    def expire_reservations(session=None, now=None) -> int:
        """Sweep stale PENDING/READY reservations to EXPIRED. Safe to re-run."""
        session = session or db.session
        now = now or utcnow()

        with atomic(session):
            expired = ReservationRepo.expire_old(session, now)

        current_app.logger.info(f"[reservation_sweep] expired={expired}")
        return expired
