from flask import current_app

from circulation.extensions import db
from circulation.repositories.book_repo import BookRepo
from circulation.repositories.borrow_repo import BorrowRepo
from circulation.utils.clock import utcnow


class ReportService:
    @staticmethod
    def overdue_report(now=None):
        now = now or utcnow()
        rows = BorrowRepo.list_overdue(db.session, now)
        return [
            {
                "transaction_id": t.id,
                "member_id": t.member_id,
                "full_name": full_name,
                "email": email,
                "book_isbn": t.book_isbn,
                "title": title,
                "branch_id": t.branch_id,
                "borrow_date": t.borrow_date,
                "due_date": t.due_date,
                "days_overdue": (now - t.due_date).days,
            }
            for t, full_name, email, title in rows
        ]

    @staticmethod
    def most_borrowed(limit: int = 10, since=None):
        rows = BorrowRepo.most_borrowed(db.session, limit=limit, since=since)
        return [{"isbn": isbn, "title": title, "borrow_count": count} for isbn, title, count in rows]

    @staticmethod
    def inventory_drift():
        """
        Titles whose catalog-wide count disagrees with the sum over branches.

        Nothing is repaired here; the counters are only ever moved by the
        circulation workflows.
        """
        drift = []
        for isbn, title, available, branch_copies in BookRepo.branch_totals(db.session):
            if available != branch_copies:
                drift.append({
                    "isbn": isbn,
                    "title": title,
                    "available_copies": available,
                    "branch_copies": int(branch_copies),
                })
        if drift:
            current_app.logger.warning(f"[inventory_check] {len(drift)} title(s) out of step: "
                                       + ", ".join(d["isbn"] for d in drift))
        return drift
