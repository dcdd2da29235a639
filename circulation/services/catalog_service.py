from circulation.errors import NotFound, ValidationFailure
from circulation.extensions import db
from circulation.models.book import Author, Book, BookStatus, Category
from circulation.models.branch import Branch
from circulation.repositories.book_repo import BookRepo
from circulation.repositories.branch_repo import BranchRepo
from circulation.utils.db import atomic

SEARCH_TYPES = ("title", "author", "isbn", "category")


class CatalogService:
    @staticmethod
    def list_books():
        return BookRepo.list_all(db.session)

    @staticmethod
    def get_book(isbn: str):
        book = BookRepo.get(db.session, isbn)
        if not book:
            raise NotFound("Book not found")
        return book

    @staticmethod
    def search_books(term: str, search_type: str = "title"):
        session = db.session
        if search_type == "author":
            return BookRepo.search_by_author(session, term)
        if search_type == "isbn":
            book = BookRepo.get(session, term)
            return [book] if book else []
        if search_type == "category":
            category = BookRepo.find_category_by_name(session, term)
            return BookRepo.search_by_category(session, category.id) if category else []
        return BookRepo.search_by_title(session, term)

    @staticmethod
    def list_branches():
        return BranchRepo.list_all(db.session)

    @staticmethod
    def add_branch(name: str, location=None, contact_number=None) -> Branch:
        name = str(name or "").strip()
        if not name:
            raise ValidationFailure("Branch name is required")
        with atomic(db.session) as session:
            branch = BranchRepo.save(session, Branch(
                name=name,
                location=location,
                contact_number=contact_number,
            ))
        return branch

    @staticmethod
    def add_book(data: dict) -> Book:
        """
        Register a title with its authors, category and opening stock.

        ``data["copies"]`` maps branch id -> copies on the shelf there; the
        catalog-wide count starts as their sum so both counters agree.
        """
        session = db.session
        raw_copies = data.get("copies") or {}
        if not isinstance(raw_copies, dict):
            raise ValidationFailure("copies must map branch ids to integers")
        copies = {int(branch_id): int(n) for branch_id, n in raw_copies.items()}
        if any(n < 0 for n in copies.values()):
            raise ValidationFailure("Copies cannot be negative")

        with atomic(session):
            if BookRepo.get(session, data.get("isbn") or ""):
                raise ValidationFailure("A book with this ISBN already exists")

            total = sum(copies.values())
            book = Book(
                isbn=data.get("isbn"),
                title=data.get("title"),
                publication_year=data.get("publication_year"),
                available_copies=total,
                status=BookStatus.AVAILABLE if total > 0 else BookStatus.CHECKED_OUT,
            )

            category_name = str(data.get("category") or "").strip()
            if category_name:
                book.category = BookRepo.find_category_by_name(session, category_name) or Category(name=category_name)

            for name in data.get("authors") or []:
                name = str(name).strip()
                book.authors.append(BookRepo.find_author_by_name(session, name) or Author(name=name))

            BookRepo.save(session, book)

            for branch_id, n in copies.items():
                if not BranchRepo.get(session, branch_id):
                    raise NotFound(f"Branch {branch_id} not found")
                BookRepo.set_branch_inventory(session, book.isbn, branch_id, n)

        return book

    @staticmethod
    def set_book_status(isbn: str, status: str) -> Book:
        """Manual override, e.g. sending a title to maintenance."""
        try:
            new_status = BookStatus(status)
        except ValueError:
            raise ValidationFailure(f"Unknown book status: {status}") from None

        with atomic(db.session) as session:
            book = BookRepo.get_for_update(session, isbn)
            if not book:
                raise NotFound("Book not found")
            book.status = new_status
            BookRepo.update(session, book)
        return book
