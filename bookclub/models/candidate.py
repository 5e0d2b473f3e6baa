from bookclub import db


class Candidate(db.Model):
    """Book nominated for a meet."""
    __tablename__ = 'meet_candidates'

    id = db.Column(db.Integer, primary_key=True)
    meet_id = db.Column(db.Integer, db.ForeignKey('meets.id'), nullable=False, index=True)
    book_id = db.Column(db.Integer, db.ForeignKey('books.id'), nullable=False)
    motivation = db.Column(db.Text, nullable=True)
    added_by = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)

    # Relationships
    book = db.relationship('Book')
    added_by_member = db.relationship('Member')
    votes = db.relationship('CandidateVote', backref='candidate', lazy='dynamic',
                            cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Candidate meet={self.meet_id} book={self.book_id}>'


class CandidateVote(db.Model):
    """Points a member gave to one candidate."""
    __tablename__ = 'meet_candidate_votes'

    id = db.Column(db.Integer, primary_key=True)
    meet_id = db.Column(db.Integer, db.ForeignKey('meets.id'), nullable=False, index=True)
    candidate_id = db.Column(db.Integer, db.ForeignKey('meet_candidates.id'), nullable=False)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    points = db.Column(db.Integer, nullable=False)

    # One vote row per member per candidate
    __table_args__ = (
        db.UniqueConstraint('candidate_id', 'member_id', name='candidate_member_unique'),
        db.CheckConstraint('points > 0', name='positive_points'),
    )

    def __repr__(self):
        return f'<CandidateVote candidate={self.candidate_id} member={self.member_id} points={self.points}>'
