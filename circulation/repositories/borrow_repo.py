from sqlalchemy import func, select

from circulation.models.book import Book
from circulation.models.borrow import BorrowTransaction
from circulation.models.member import Member


class BorrowRepo:
    @staticmethod
    def get(session, transaction_id: int):
        return session.get(BorrowTransaction, transaction_id)

    @staticmethod
    def get_for_update(session, transaction_id: int):
        return session.get(BorrowTransaction, transaction_id, with_for_update=True)

    @staticmethod
    def list_by_member(session, member_id: int):
        stmt = (
            select(BorrowTransaction)
            .where(BorrowTransaction.member_id == member_id)
            .order_by(BorrowTransaction.borrow_date.desc(), BorrowTransaction.id.desc())
        )
        return session.scalars(stmt).all()

    @staticmethod
    def list_open_by_member(session, member_id: int):
        stmt = (
            select(BorrowTransaction)
            .where(BorrowTransaction.member_id == member_id, BorrowTransaction.return_date.is_(None))
            .order_by(BorrowTransaction.borrow_date.desc(), BorrowTransaction.id.desc())
        )
        return session.scalars(stmt).all()

    @staticmethod
    def list_open_by_book_and_branch(session, isbn: str, branch_id: int):
        stmt = (
            select(BorrowTransaction)
            .where(
                BorrowTransaction.book_isbn == isbn,
                BorrowTransaction.branch_id == branch_id,
                BorrowTransaction.return_date.is_(None),
            )
            .order_by(BorrowTransaction.borrow_date.desc(), BorrowTransaction.id.desc())
        )
        return session.scalars(stmt).all()

    @staticmethod
    def list_overdue(session, now):
        """Open loans past due, with the member and title needed for the report."""
        stmt = (
            select(BorrowTransaction, Member.full_name, Member.email, Book.title)
            .join(Member, Member.id == BorrowTransaction.member_id)
            .join(Book, Book.isbn == BorrowTransaction.book_isbn)
            .where(BorrowTransaction.return_date.is_(None), BorrowTransaction.due_date < now)
            .order_by(BorrowTransaction.due_date.asc(), BorrowTransaction.id.asc())
        )
        return session.execute(stmt).all()

    @staticmethod
    def save(session, transaction: BorrowTransaction):
        session.add(transaction)
        session.flush()
        return transaction

    @staticmethod
    def update(session, transaction: BorrowTransaction):
        session.flush()
        return transaction

    @staticmethod
    def most_borrowed(session, limit: int = 10, since=None):
        borrow_count = func.count(BorrowTransaction.id).label("borrow_count")
        stmt = (
            select(Book.isbn, Book.title, borrow_count)
            .join(Book, Book.isbn == BorrowTransaction.book_isbn)
        )
        if since is not None:
            stmt = stmt.where(BorrowTransaction.borrow_date >= since)
        stmt = (
            stmt.group_by(Book.isbn, Book.title)
            .order_by(borrow_count.desc(), Book.title.asc())
            .limit(limit)
        )
        return session.execute(stmt).all()
