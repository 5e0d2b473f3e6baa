from bookclub import db


class Top5Entry(db.Model):
    """One ranked book in a member's Top 5 for a meet."""
    __tablename__ = 'meet_top5'

    id = db.Column(db.Integer, primary_key=True)
    meet_id = db.Column(db.Integer, db.ForeignKey('meets.id'), nullable=False, index=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    book_id = db.Column(db.Integer, db.ForeignKey('books.id'), nullable=False)
    rank = db.Column(db.Integer, nullable=False)

    # A member cannot use the same rank twice in one meet
    __table_args__ = (
        db.UniqueConstraint('meet_id', 'member_id', 'rank', name='meet_member_rank_unique'),
        db.CheckConstraint('rank >= 1 AND rank <= 5', name='valid_rank'),
    )

    member = db.relationship('Member')
    book = db.relationship('Book')

    def __repr__(self):
        return f'<Top5Entry meet={self.meet_id} member={self.member_id} rank={self.rank}>'
