from circulation.models.book import Author, Book, BookStatus, Category
from circulation.models.branch import Branch, BranchInventory
from circulation.models.borrow import BorrowTransaction
from circulation.models.member import MEMBER_POLICIES, Member, MemberPolicy, MemberType
from circulation.models.payment import Payment
from circulation.models.reservation import Reservation, ReservationStatus

__all__ = [
    "Author",
    "Book",
    "BookStatus",
    "Category",
    "Branch",
    "BranchInventory",
    "BorrowTransaction",
    "MEMBER_POLICIES",
    "Member",
    "MemberPolicy",
    "MemberType",
    "Payment",
    "Reservation",
    "ReservationStatus",
]
