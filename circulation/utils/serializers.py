from decimal import Decimal


def _iso(value):
    return value.isoformat() if value is not None else None


def book_to_dict(b):
    return {
        "isbn": b.isbn,
        "title": b.title,
        "publication_year": b.publication_year,
        "available_copies": b.available_copies,
        "status": b.status.value,
        "available": b.is_available(),
        "category": b.category.name if b.category else None,
        "authors": [a.name for a in b.authors],
        "branches": {inv.branch_id: inv.copies for inv in b.branch_inventory},
    }


def branch_to_dict(br):
    return {"id": br.id, "name": br.name, "location": br.location, "contact_number": br.contact_number}


def member_to_dict(m):
    data = {
        "id": m.id,
        "member_type": m.member_type.value,
        "full_name": m.full_name,
        "email": m.email,
        "phone_number": m.phone_number,
        "membership_end_date": _iso(m.membership_end_date),
        "membership_valid": m.is_membership_valid(),
        "total_borrowed_books": m.total_borrowed_books,
        "max_books": m.max_books,
        "loan_days": m.loan_days,
        "late_fee_per_day": float(m.late_fee_rate),
    }
    if m.member_type.value == "STUDENT":
        data["student_id"] = m.student_id
    else:
        data["employee_id"] = m.employee_id
        data["department"] = m.department
    return data


def transaction_to_dict(t):
    return {
        "id": t.id,
        "member_id": t.member_id,
        "book_isbn": t.book_isbn,
        "branch_id": t.branch_id,
        "borrow_date": _iso(t.borrow_date),
        "due_date": _iso(t.due_date),
        "return_date": _iso(t.return_date),
        "late_fee": float(t.late_fee or 0),
        "status": t.status,
    }


def reservation_to_dict(r):
    return {
        "id": r.id,
        "member_id": r.member_id,
        "book_isbn": r.book_isbn,
        "branch_id": r.branch_id,
        "reservation_date": _iso(r.reservation_date),
        "expiry_date": _iso(r.expiry_date),
        "status": r.status.value,
    }


def payment_to_dict(p):
    return {
        "id": p.id,
        "member_id": p.member_id,
        "amount": float(p.amount),
        "payment_date": _iso(p.payment_date),
        "payment_method": p.payment_method,
    }


def plain(row: dict):
    """Report rows: dates to ISO strings, Decimals to floats."""
    out = {}
    for k, v in row.items():
        if hasattr(v, "isoformat"):
            v = v.isoformat()
        elif isinstance(v, Decimal):
            v = float(v)
        out[k] = v
    return out
