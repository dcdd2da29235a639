from datetime import date

from circulation.errors import NotFound, PolicyViolation, ValidationFailure
from circulation.extensions import db
from circulation.models.member import Member, MemberType
from circulation.repositories.borrow_repo import BorrowRepo
from circulation.repositories.member_repo import MemberRepo
from circulation.repositories.payment_repo import PaymentRepo
from circulation.repositories.reservation_repo import ReservationRepo
from circulation.utils.db import atomic


class MemberService:
    @staticmethod
    def enroll(
        member_type: str,
        full_name: str,
        email: str,
        membership_end_date: date,
        phone_number=None,
        student_id=None,
        employee_id=None,
        department=None,
    ) -> Member:
        try:
            kind = MemberType(str(member_type or "").upper())
        except ValueError:
            raise ValidationFailure(f"Unknown member type: {member_type}") from None

        if kind is MemberType.STUDENT and (employee_id or department):
            raise ValidationFailure("Students cannot carry employee_id or department")
        if kind is MemberType.FACULTY and student_id:
            raise ValidationFailure("Faculty members cannot carry student_id")

        with atomic(db.session) as session:
            if MemberRepo.get_by_email(session, str(email or "")):
                raise ValidationFailure("Email is already registered")

            member = MemberRepo.save(session, Member(
                member_type=kind,
                full_name=full_name,
                email=email,
                phone_number=phone_number,
                membership_end_date=membership_end_date,
                total_borrowed_books=0,
                student_id=student_id,
                employee_id=employee_id,
                department=department,
            ))
        return member

    @staticmethod
    def get_member(member_id: int) -> Member:
        member = MemberRepo.get(db.session, member_id)
        if not member:
            raise NotFound("Member not found")
        return member

    @staticmethod
    def list_members():
        return MemberRepo.list_all(db.session)

    @staticmethod
    def renew_membership(member_id: int, new_end_date: date) -> Member:
        with atomic(db.session) as session:
            member = MemberRepo.get_for_update(session, member_id)
            if not member:
                raise NotFound("Member not found")
            if member.membership_end_date and new_end_date < member.membership_end_date:
                raise PolicyViolation("Renewal cannot shorten the membership")
            member.renew_membership(new_end_date)
            MemberRepo.update(session, member)
        return member

    @staticmethod
    def history(member_id: int) -> dict:
        session = db.session
        member = MemberService.get_member(member_id)
        return {
            "member": member,
            "transactions": BorrowRepo.list_by_member(session, member_id),
            "reservations": ReservationRepo.list_by_member(session, member_id),
            "payments": PaymentRepo.list_by_member(session, member_id),
            "current_borrowed": MemberRepo.current_borrowed_count(session, member_id),
            "unpaid_fees": MemberRepo.total_unpaid_fees(session, member_id),
        }
