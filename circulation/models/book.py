from datetime import datetime
from enum import Enum

from sqlalchemy.orm import validates

from circulation.errors import ValidationFailure
from circulation.extensions import db


class BookStatus(str, Enum):
    AVAILABLE = "Available"
    CHECKED_OUT = "Checked Out"
    RESERVED = "Reserved"
    UNDER_MAINTENANCE = "Under Maintenance"


book_authors = db.Table(
    "book_authors",
    db.Column("book_isbn", db.String(32), db.ForeignKey("books.isbn"), primary_key=True),
    db.Column("author_id", db.Integer, db.ForeignKey("authors.id"), primary_key=True),
)


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)

    @validates("name")
    def _check_name(self, key, value):
        value = str(value or "").strip()
        if not value:
            raise ValidationFailure("Category name is required")
        return value


class Author(db.Model):
    __tablename__ = "authors"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    biography = db.Column(db.Text, nullable=True)
    nationality = db.Column(db.String(100), nullable=True)
    birth_date = db.Column(db.Date, nullable=True)
    primary_genre = db.Column(db.String(100), nullable=True)

    books = db.relationship("Book", secondary=book_authors, back_populates="authors")

    @validates("name")
    def _check_name(self, key, value):
        value = str(value or "").strip()
        if not value:
            raise ValidationFailure("Author name is required")
        return value


class Book(db.Model):
    """
    A catalog item keyed by ISBN.

    ``available_copies`` is the catalog-wide count. The per-branch counts live
    in BranchInventory and are kept in step by the circulation workflows only.
    """
    __tablename__ = "books"

    isbn = db.Column(db.String(32), primary_key=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    publication_year = db.Column(db.Integer, nullable=False)

    available_copies = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.Enum(BookStatus, name="book_status"), nullable=False, default=BookStatus.AVAILABLE)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    category = db.relationship("Category", backref="books")
    authors = db.relationship("Author", secondary=book_authors, back_populates="books", order_by="Author.name")

    @validates("isbn", "title")
    def _check_required(self, key, value):
        value = str(value or "").strip()
        if not value:
            raise ValidationFailure(f"Book {key} is required")
        return value

    @validates("publication_year")
    def _check_year(self, key, value):
        try:
            year = int(value)
        except (TypeError, ValueError):
            raise ValidationFailure("Publication year must be a number") from None
        if year <= 0:
            raise ValidationFailure("Publication year must be positive")
        return year

    @validates("available_copies")
    def _check_copies(self, key, value):
        if value is None or int(value) < 0:
            raise ValidationFailure("Available copies cannot be negative")
        return int(value)

    def is_available(self) -> bool:
        return self.available_copies > 0 and self.status == BookStatus.AVAILABLE

    def decrement_copies(self) -> None:
        # at zero this is a silent no-op
        if self.available_copies > 0:
            self.available_copies -= 1
            if self.available_copies == 0:
                self.status = BookStatus.CHECKED_OUT

    def increment_copies(self) -> None:
        # Reserved / Under Maintenance are left alone
        self.available_copies += 1
        if self.available_copies > 0 and self.status == BookStatus.CHECKED_OUT:
            self.status = BookStatus.AVAILABLE
