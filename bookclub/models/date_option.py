from bookclub import db


AVAILABILITY_VALUES = ('available', 'not_available', 'maybe', 'no_response')


class DateOption(db.Model):
    """Proposed meeting time for a meet."""
    __tablename__ = 'meet_date_options'

    id = db.Column(db.Integer, primary_key=True)
    meet_id = db.Column(db.Integer, db.ForeignKey('meets.id'), nullable=False, index=True)
    date_time = db.Column(db.String(40), nullable=False)

    # Relationships
    votes = db.relationship('DateVote', backref='date_option', lazy='dynamic',
                            cascade='all, delete-orphan', order_by='DateVote.id')

    def __repr__(self):
        return f'<DateOption meet={self.meet_id} {self.date_time}>'


class DateVote(db.Model):
    """Member availability for one date option."""
    __tablename__ = 'meet_date_votes'

    id = db.Column(db.Integer, primary_key=True)
    date_option_id = db.Column(db.Integer, db.ForeignKey('meet_date_options.id'), nullable=False)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    availability = db.Column(db.String(20), nullable=False, default='no_response')

    # One availability answer per member per option
    __table_args__ = (
        db.UniqueConstraint('date_option_id', 'member_id', name='date_option_member_unique'),
    )

    member = db.relationship('Member')

    def __repr__(self):
        return f'<DateVote option={self.date_option_id} member={self.member_id} {self.availability}>'
