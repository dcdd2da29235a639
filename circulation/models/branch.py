from circulation.extensions import db


class Branch(db.Model):
    __tablename__ = "branches"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False, unique=True)
    location = db.Column(db.String(255), nullable=True)
    contact_number = db.Column(db.String(50), nullable=True)


class BranchInventory(db.Model):
    __tablename__ = "branch_inventory"

    book_isbn = db.Column(db.String(32), db.ForeignKey("books.isbn"), primary_key=True)
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), primary_key=True)

    copies = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.CheckConstraint("copies >= 0", name="ck_branch_inventory_copies"),
    )

    book = db.relationship("Book", backref="branch_inventory")
    branch = db.relationship("Branch", backref="inventory")
