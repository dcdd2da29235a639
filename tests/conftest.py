from datetime import date, datetime

import pytest
from flask_jwt_extended import create_access_token

from circulation import create_app
from circulation.config import TestConfig
from circulation.extensions import db
from circulation.services.catalog_service import CatalogService
from circulation.services.member_service import MemberService

NOW = datetime(2026, 3, 2, 10, 0)
FAR_FUTURE = date(2099, 12, 31)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def client(app):
    return app.test_client()


def _bearer(identity, role):
    token = create_access_token(identity=str(identity), additional_claims={"role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def staff_headers(app):
    return _bearer("front-desk", "staff")


@pytest.fixture
def member_headers(app):
    def _make(member_id):
        return _bearer(member_id, "member")
    return _make


@pytest.fixture
def make_branch(app):
    counter = {"n": 0}

    def _make(name=None):
        counter["n"] += 1
        return CatalogService.add_branch(name or f"Branch {counter['n']}", location="Main St")
    return _make


@pytest.fixture
def make_book(app):
    def _make(isbn, copies, title=None, authors=("Robert C. Martin",), category="Software", year=2008):
        return CatalogService.add_book({
            "isbn": isbn,
            "title": title or f"Book {isbn}",
            "publication_year": year,
            "authors": list(authors),
            "category": category,
            "copies": copies,
        })
    return _make


@pytest.fixture
def make_member(app):
    counter = {"n": 0}

    def _make(member_type="STUDENT", end=FAR_FUTURE, **extra):
        counter["n"] += 1
        return MemberService.enroll(
            member_type=member_type,
            full_name=extra.pop("full_name", f"Member {counter['n']}"),
            email=extra.pop("email", f"member{counter['n']}@example.edu"),
            membership_end_date=end,
            **extra,
        )
    return _make
