from sqlalchemy import func, select
from sqlalchemy.orm import joinedload, selectinload

from circulation.models.book import Author, Book, Category
from circulation.models.branch import BranchInventory


class BookRepo:
    @staticmethod
    def _with_relations():
        return select(Book).options(joinedload(Book.category), selectinload(Book.authors))

    @staticmethod
    def get(session, isbn: str):
        return session.get(Book, isbn, options=[joinedload(Book.category), selectinload(Book.authors)])

    @staticmethod
    def get_for_update(session, isbn: str):
        return session.get(Book, isbn, with_for_update=True)

    @staticmethod
    def list_all(session):
        return session.scalars(BookRepo._with_relations().order_by(Book.title)).unique().all()

    @staticmethod
    def search_by_title(session, title: str):
        stmt = BookRepo._with_relations().where(Book.title.ilike(f"%{title}%")).order_by(Book.title)
        return session.scalars(stmt).unique().all()

    @staticmethod
    def search_by_author(session, author_name: str):
        stmt = (
            BookRepo._with_relations()
            .where(Book.authors.any(Author.name.ilike(f"%{author_name}%")))
            .order_by(Book.title)
        )
        return session.scalars(stmt).unique().all()

    @staticmethod
    def search_by_category(session, category_id: int):
        stmt = BookRepo._with_relations().where(Book.category_id == category_id).order_by(Book.title)
        return session.scalars(stmt).unique().all()

    @staticmethod
    def save(session, book: Book):
        session.add(book)
        session.flush()
        return book

    @staticmethod
    def update(session, book: Book):
        session.flush()
        return book

    # authors / categories
    @staticmethod
    def find_author_by_name(session, name: str):
        return session.scalars(select(Author).where(Author.name == name)).first()

    @staticmethod
    def find_category_by_name(session, name: str):
        return session.scalars(select(Category).where(Category.name == name)).first()

    @staticmethod
    def get_category(session, category_id: int):
        return session.get(Category, category_id)

    # branch inventory
    @staticmethod
    def _inventory_row(session, isbn: str, branch_id: int, for_update: bool = False):
        return session.get(BranchInventory, (isbn, branch_id), with_for_update=for_update or None)

    @staticmethod
    def branch_inventory(session, isbn: str, branch_id: int, for_update: bool = False) -> int:
        """Copies of ``isbn`` at ``branch_id``; a branch that never stocked it has 0."""
        row = BookRepo._inventory_row(session, isbn, branch_id, for_update)
        return row.copies if row else 0

    @staticmethod
    def set_branch_inventory(session, isbn: str, branch_id: int, copies: int):
        row = BookRepo._inventory_row(session, isbn, branch_id)
        if row is None:
            row = BranchInventory(book_isbn=isbn, branch_id=branch_id, copies=copies)
            session.add(row)
        else:
            row.copies = copies
        session.flush()
        return row

    @staticmethod
    def branch_totals(session):
        """(isbn, available_copies, sum of branch copies) for every book."""
        branch_sum = (
            select(BranchInventory.book_isbn, func.sum(BranchInventory.copies).label("branch_copies"))
            .group_by(BranchInventory.book_isbn)
            .subquery()
        )
        stmt = (
            select(Book.isbn, Book.title, Book.available_copies,
                   func.coalesce(branch_sum.c.branch_copies, 0).label("branch_copies"))
            .outerjoin(branch_sum, branch_sum.c.book_isbn == Book.isbn)
            .order_by(Book.isbn)
        )
        return session.execute(stmt).all()
