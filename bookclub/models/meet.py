from datetime import datetime
from bookclub import db


PHASES = ('draft', 'voting', 'reading', 'completed', 'cancelled')


class Meet(db.Model):
    """Book club gathering with its own candidate pool, vote and date poll."""
    __tablename__ = 'meets'

    id = db.Column(db.Integer, primary_key=True)
    host_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    phase = db.Column(db.String(20), nullable=False, default='draft')  # draft, voting, reading, completed, cancelled
    selected_book_id = db.Column(db.Integer, db.ForeignKey('books.id'), nullable=True)
    selected_date = db.Column(db.String(40), nullable=True)  # copied from a date option, not a reference
    location = db.Column(db.String(300), nullable=True)
    description = db.Column(db.Text, nullable=True)
    voting_points_revealed = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint(
            "phase IN ('draft', 'voting', 'reading', 'completed', 'cancelled')",
            name='valid_phase',
        ),
    )

    # Relationships
    selected_book = db.relationship('Book')
    candidates = db.relationship('Candidate', backref='meet', lazy='dynamic',
                                 cascade='all, delete-orphan', order_by='Candidate.id')
    date_options = db.relationship('DateOption', backref='meet', lazy='dynamic',
                                   cascade='all, delete-orphan', order_by='DateOption.id')
    top5_entries = db.relationship('Top5Entry', backref='meet', lazy='dynamic',
                                   cascade='all, delete-orphan', order_by='Top5Entry.id')

    @property
    def label(self):
        host_name = self.host.username if self.host else 'unknown'
        if self.selected_book:
            return f'{self.selected_book.title} at {host_name}'
        return f'Draft Meet by {host_name}'

    def __repr__(self):
        return f'<Meet {self.id} {self.phase}>'
