from sqlalchemy import select

from circulation.models.branch import Branch


class BranchRepo:
    @staticmethod
    def get(session, branch_id: int):
        return session.get(Branch, branch_id)

    @staticmethod
    def list_all(session):
        return session.scalars(select(Branch).order_by(Branch.name)).all()

    @staticmethod
    def save(session, branch: Branch):
        session.add(branch)
        session.flush()
        return branch
