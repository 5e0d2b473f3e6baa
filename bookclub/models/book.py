from datetime import datetime
from bookclub import db


class Book(db.Model):
    """Book on the shared reading list."""
    __tablename__ = 'books'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(500), nullable=False)
    author = db.Column(db.String(200), nullable=False)
    year = db.Column(db.String(30), nullable=True)
    country = db.Column(db.String(50), nullable=True)
    original_language = db.Column(db.String(50), nullable=True)
    book_type = db.Column(db.String(50), nullable=True)  # novel, poetry, non-fiction, ...
    introduction = db.Column(db.Text, nullable=True)
    added_by = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    comments = db.relationship('BookComment', backref='book', lazy='dynamic',
                               cascade='all, delete-orphan', order_by='BookComment.created_at')

    def __repr__(self):
        return f'<Book {self.title}>'


class BookComment(db.Model):
    """Member comment on a book."""
    __tablename__ = 'book_comments'

    id = db.Column(db.Integer, primary_key=True)
    book_id = db.Column(db.Integer, db.ForeignKey('books.id'), nullable=False)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    member = db.relationship('Member')

    def __repr__(self):
        return f'<BookComment book={self.book_id} member={self.member_id}>'
