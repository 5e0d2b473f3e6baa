"""
Top 5 rankings.

After reading a book, members rank up to five of the books the circle has
read (or is reading). Rankings from every meet feed one leaderboard where
rank 1 earns 5 points down to rank 5 earning 1 point.
"""

from flask import current_app

from bookclub import db
from bookclub.models import Book, Meet, Top5Entry
from bookclub.services.errors import InvalidAllocation, InvalidPhase, InvalidSelection, ValidationError
from bookclub.services.lookups import get_meet, parse_id


MAX_TOP5_ENTRIES = 5


def eligible_book_ids() -> set:
    """Selected books of completed meets plus those of meets still being read."""
    rows = db.session.query(Meet.selected_book_id).filter(
        Meet.phase.in_(('completed', 'reading')),
        Meet.selected_book_id.isnot(None),
    ).all()
    return {row.selected_book_id for row in rows}


def serialize_entry(entry) -> dict:
    return {
        'id': entry.id,
        'meetId': entry.meet_id,
        'userId': entry.member_id,
        'username': entry.member.username if entry.member else None,
        'bookId': entry.book_id,
        'bookTitle': entry.book.title if entry.book else None,
        'bookAuthor': entry.book.author if entry.book else None,
        'rank': entry.rank,
    }


def submit_top5(meet_id, member_id, entries) -> dict:
    """
    Replace a member's Top 5 for a meet.

    Raises:
        InvalidPhase: Meet is not reading or completed
        ValidationError: entries is not a list of objects
        InvalidSelection: A book was never the selected book of a reading/completed meet
        InvalidAllocation: Rank out of range, repeated rank or repeated book
    """
    meet = get_meet(meet_id)
    if meet.phase not in ('reading', 'completed'):
        raise InvalidPhase('Top 5 can only be submitted during reading or completed phase')

    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise ValidationError('entries array is required')

    valid_book_ids = eligible_book_ids()
    ranked = []
    seen_ranks = set()
    seen_books = set()
    for entry in entries:
        book_id = parse_id(entry.get('bookId'))
        if book_id not in valid_book_ids:
            raise InvalidSelection(
                'Only books that have been selected in completed or current meets can be in your Top 5'
            )
        rank = entry.get('rank')
        if not isinstance(rank, int) or isinstance(rank, bool) or rank < 1 or rank > MAX_TOP5_ENTRIES:
            raise InvalidAllocation('Rank must be between 1 and 5')
        if rank in seen_ranks:
            raise InvalidAllocation(f"Rank {rank} is used more than once")
        if book_id in seen_books:
            raise InvalidAllocation('A book can only appear once in your Top 5')
        seen_ranks.add(rank)
        seen_books.add(book_id)
        ranked.append((book_id, rank))

    Top5Entry.query.filter_by(meet_id=meet.id, member_id=member_id).delete(synchronize_session='fetch')
    for book_id, rank in ranked:
        db.session.add(Top5Entry(meet_id=meet.id, member_id=member_id, book_id=book_id, rank=rank))

    db.session.commit()
    current_app.logger.info(f"Member {member_id} submitted {len(ranked)} Top 5 entries for meet {meet.id}")
    return {'ok': True}


def aggregate_ranking() -> list:
    """
    Cross-meet leaderboard.

    Sorted by total points, then by number of mentions; remaining ties keep
    the order in which the books were first ranked.
    """
    aggregation = {}
    for entry in Top5Entry.query.order_by(Top5Entry.id).all():
        points = MAX_TOP5_ENTRIES + 1 - entry.rank
        row = aggregation.get(entry.book_id)
        if row is None:
            row = aggregation[entry.book_id] = {
                'bookId': entry.book_id,
                'bookTitle': None,
                'bookAuthor': None,
                'totalPoints': 0,
                'appearances': 0,
            }
        row['totalPoints'] += points
        row['appearances'] += 1

    if aggregation:
        for book in Book.query.filter(Book.id.in_(list(aggregation))).all():
            aggregation[book.id]['bookTitle'] = book.title
            aggregation[book.id]['bookAuthor'] = book.author

    return sorted(aggregation.values(), key=lambda r: (-r['totalPoints'], -r['appearances']))
