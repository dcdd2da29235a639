from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from circulation.errors import ValidationFailure
from circulation.models import (
    Book,
    BookStatus,
    BorrowTransaction,
    Member,
    MemberType,
    Payment,
    Reservation,
    ReservationStatus,
)

NOW = datetime(2026, 3, 2, 10, 0)


def _book(copies, status=BookStatus.AVAILABLE):
    return Book(isbn="978-0123456789", title="Test Driven Development", publication_year=2024,
                available_copies=copies, status=status)


def _member(kind=MemberType.STUDENT, end=date(2099, 12, 31)):
    return Member(member_type=kind, full_name="Ada Lovelace", email="ada@example.edu",
                  membership_end_date=end, total_borrowed_books=0)


def _loan(due=NOW + timedelta(days=14), returned=None):
    return BorrowTransaction(member_id=1, book_isbn="978-1", branch_id=1, borrow_date=NOW,
                             due_date=due, return_date=returned, late_fee=Decimal("0.00"))


# --- Book ---------------------------------------------------------------

def test_new_book_with_copies_is_available():
    book = _book(5)
    assert book.is_available()
    book.decrement_copies()
    assert book.available_copies == 4
    assert book.status == BookStatus.AVAILABLE


def test_last_copy_checks_the_book_out_and_return_makes_it_available():
    book = _book(1)
    book.decrement_copies()
    assert (book.available_copies, book.status) == (0, BookStatus.CHECKED_OUT)
    assert not book.is_available()

    book.increment_copies()
    assert (book.available_copies, book.status) == (1, BookStatus.AVAILABLE)


def test_decrement_at_zero_is_a_silent_noop():
    book = _book(0, BookStatus.CHECKED_OUT)
    book.decrement_copies()
    assert (book.available_copies, book.status) == (0, BookStatus.CHECKED_OUT)


@pytest.mark.parametrize("copies", [1, 2, 7])
def test_decrement_then_increment_restores_available_books(copies):
    book = _book(copies)
    book.decrement_copies()
    book.increment_copies()
    assert (book.available_copies, book.status) == (copies, BookStatus.AVAILABLE)


@pytest.mark.parametrize("override", [BookStatus.RESERVED, BookStatus.UNDER_MAINTENANCE])
def test_override_status_survives_round_trip_while_copies_remain(override):
    book = _book(3, override)
    book.decrement_copies()
    assert book.status == override
    book.increment_copies()
    assert (book.available_copies, book.status) == (3, override)


@pytest.mark.parametrize("override", [BookStatus.RESERVED, BookStatus.UNDER_MAINTENANCE])
def test_override_status_is_lost_when_last_copy_goes_out_and_comes_back(override):
    # decrement forces Checked Out at zero, increment then turns it into Available,
    # so the override does not come back
    book = _book(1, override)
    book.decrement_copies()
    assert book.status == BookStatus.CHECKED_OUT
    book.increment_copies()
    assert (book.available_copies, book.status) == (1, BookStatus.AVAILABLE)


def test_increment_leaves_maintenance_status_alone():
    book = _book(0, BookStatus.UNDER_MAINTENANCE)
    book.increment_copies()
    assert (book.available_copies, book.status) == (1, BookStatus.UNDER_MAINTENANCE)
    assert not book.is_available()


@pytest.mark.parametrize("field,value", [("title", ""), ("isbn", "  "), ("publication_year", 0),
                                         ("available_copies", -1)])
def test_book_rejects_malformed_fields(field, value):
    data = dict(isbn="978-1", title="Clean Code", publication_year=2008, available_copies=1)
    data[field] = value
    with pytest.raises(ValidationFailure):
        Book(**data)


# --- Member -------------------------------------------------------------

def test_member_policies():
    student, faculty = _member(MemberType.STUDENT), _member(MemberType.FACULTY)
    assert (student.max_books, student.loan_days, student.late_fee_rate) == (3, 14, Decimal("0.50"))
    assert (faculty.max_books, faculty.loan_days, faculty.late_fee_rate) == (10, 30, Decimal("0.25"))


def test_membership_validity():
    today = date(2026, 3, 2)
    assert _member(end=today).is_membership_valid(today)
    assert not _member(end=today - timedelta(days=1)).is_membership_valid(today)
    assert not _member(end=None).is_membership_valid(today)


def test_can_borrow_needs_valid_membership_and_room_under_the_limit():
    today = date(2026, 3, 2)
    student = _member()
    assert student.can_borrow(2, today)
    assert not student.can_borrow(3, today)
    assert not _member(end=date(2026, 3, 1)).can_borrow(0, today)


def test_lifetime_counter_only_goes_up():
    member = _member()
    for _ in range(5):
        member.increment_total_borrowed_books()
    assert member.total_borrowed_books == 5


@pytest.mark.parametrize("email", [
    "", "no-at-sign", "two@@example.com", "spaces in@example.com", "a@b..c", "ada@example.edu.", 42,
])
def test_member_rejects_bad_email(email):
    with pytest.raises(ValidationFailure):
        Member(member_type=MemberType.STUDENT, full_name="Ada", email=email)


def test_member_email_is_normalized():
    m = Member(member_type=MemberType.STUDENT, full_name="Ada", email="  Ada.Lovelace@Example.EDU ")
    assert m.email == "ada.lovelace@example.edu"


def test_member_rejects_empty_name():
    with pytest.raises(ValidationFailure):
        Member(member_type=MemberType.STUDENT, full_name=" ", email="ada@example.edu")


# --- BorrowTransaction --------------------------------------------------

@pytest.mark.parametrize("returned_after_due,rate,fee", [
    (timedelta(0), "0.50", "0.00"),
    (-timedelta(days=2), "0.50", "0.00"),
    (timedelta(hours=23), "0.50", "0.00"),
    (timedelta(days=1), "0.50", "0.50"),
    (timedelta(days=3, hours=5), "0.50", "1.50"),
    (timedelta(days=7), "0.25", "1.75"),
])
def test_late_fee_counts_whole_days_past_due(returned_after_due, rate, fee):
    loan = _loan()
    assert loan.calculate_late_fee(Decimal(rate), loan.due_date + returned_after_due) == Decimal(fee)


def test_late_fee_uses_return_date_once_returned():
    due = NOW + timedelta(days=14)
    loan = _loan(due=due, returned=due + timedelta(days=2))
    assert loan.calculate_late_fee(Decimal("0.50"), due + timedelta(days=30)) == Decimal("1.00")


def test_process_return_sets_date_and_fee():
    loan = _loan()
    when = loan.due_date + timedelta(days=4)
    loan.process_return(Decimal("0.50"), when)
    assert loan.return_date == when
    assert loan.late_fee == Decimal("2.00")
    assert loan.status == "RETURNED"


def test_overdue_only_while_open():
    loan = _loan()
    assert not loan.is_overdue(loan.due_date)
    assert loan.is_overdue(loan.due_date + timedelta(seconds=1))
    loan.process_return(Decimal("0.50"), loan.due_date + timedelta(days=1))
    assert not loan.is_overdue(loan.due_date + timedelta(days=10))


def test_due_date_before_borrow_date_is_rejected():
    with pytest.raises(ValidationFailure):
        _loan(due=NOW - timedelta(days=1))


# --- Reservation / Payment ----------------------------------------------

def test_notify_member_marks_ready_and_resets_expiry():
    r = Reservation(member_id=1, book_isbn="978-1", branch_id=1, reservation_date=NOW,
                    expiry_date=NOW + timedelta(days=7), status=ReservationStatus.PENDING)
    later = NOW + timedelta(days=1)
    r.notify_member(later)
    assert r.status == ReservationStatus.READY
    assert r.expiry_date == later + timedelta(days=2)


def test_reservation_expiry():
    r = Reservation(member_id=1, book_isbn="978-1", branch_id=1, reservation_date=NOW,
                    expiry_date=NOW + timedelta(days=7), status=ReservationStatus.PENDING)
    assert not r.is_expired(NOW + timedelta(days=7))
    assert r.is_expired(NOW + timedelta(days=8))
    r.status = ReservationStatus.FULFILLED
    assert not r.is_expired(NOW + timedelta(days=30))


@pytest.mark.parametrize("amount,ok", [
    ("25.00", True), ("0.01", True), ("0", False), ("-5", False), ("NaN", False), ("Infinity", False),
])
def test_payment_requires_positive_amount(amount, ok):
    p = Payment(member_id=1, amount=Decimal(amount), payment_date=NOW, payment_method="Cash")
    assert p.process_payment() is ok


def test_payment_validate_needs_member_and_method():
    assert Payment(member_id=1, amount=Decimal("5"), payment_date=NOW, payment_method="Cash").validate()
    assert not Payment(member_id=1, amount=Decimal("5"), payment_date=NOW, payment_method="  ").validate()
    assert not Payment(member_id=None, amount=Decimal("5"), payment_date=NOW, payment_method="Cash").validate()
