from datetime import datetime
from bookclub import db


class Member(db.Model):
    """Reading circle member."""
    __tablename__ = 'members'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(30), unique=True, nullable=False)
    email = db.Column(db.String(254), nullable=False)
    is_admin = db.Column(db.Boolean, nullable=False, default=False)
    is_temporary = db.Column(db.Boolean, nullable=False, default=True)  # True until account setup is done
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    hosted_meets = db.relationship('Meet', backref='host', lazy='dynamic')
    added_books = db.relationship('Book', backref='added_by_member', lazy='dynamic')

    def __repr__(self):
        return f'<Member {self.username}>'
