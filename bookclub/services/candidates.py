"""
Candidate manager - nominations for a meet's book pool.

Candidates can only be added or removed while the meet is in draft;
starting the vote freezes the pool.
"""

from flask import current_app

from bookclub import db
from bookclub.models import Candidate
from bookclub.services.errors import InvalidPhase, NotFound, ValidationError
from bookclub.services.lookups import completed_selection_meet_ids, get_book, get_meet, parse_id
from bookclub.services.permissions import HOST_OR_ADMIN, require


def serialize_candidate(candidate, already_selected: bool, points=None) -> dict:
    data = {
        'id': candidate.id,
        'meetId': candidate.meet_id,
        'bookId': candidate.book_id,
        'bookTitle': candidate.book.title if candidate.book else None,
        'bookAuthor': candidate.book.author if candidate.book else None,
        'motivation': candidate.motivation,
        'addedBy': candidate.added_by,
        'addedByUsername': candidate.added_by_member.username if candidate.added_by_member else None,
        'alreadySelectedInMeet': already_selected,
    }
    if points is not None:
        data['points'] = points
    return data


def add_candidate(meet_id, book_id, motivation, actor) -> dict:
    """
    Nominate a book for a draft meet.

    Returns the candidate with alreadySelectedInMeet set when the book was
    the selected book of another completed meet. The flag is advisory only.
    """
    meet = get_meet(meet_id)
    if meet.phase != 'draft':
        raise InvalidPhase('Candidates can only be added during the draft phase')
    require(actor, meet, HOST_OR_ADMIN, 'Only the host or an admin can add candidates')

    if book_id is None or book_id == '':
        raise ValidationError('bookId is required')
    book = get_book(book_id)

    if meet.candidates.filter_by(book_id=book.id).first():
        raise ValidationError('This book is already a candidate for this meet')

    candidate = Candidate(
        meet_id=meet.id,
        book_id=book.id,
        motivation=motivation or None,
        added_by=actor.id,
    )
    db.session.add(candidate)
    db.session.commit()

    already_selected = bool(completed_selection_meet_ids(book.id, exclude_meet_id=meet.id))
    current_app.logger.info(f"Book {book.id} nominated for meet {meet.id} by member {actor.id}")
    return serialize_candidate(candidate, already_selected)


def remove_candidate(meet_id, candidate_id, actor) -> dict:
    """
    Remove a nomination (and its votes) from a draft meet.

    If the meet's selected book was this candidate's book and no other
    candidate of the meet holds it, the selection is cleared as well.
    """
    meet = get_meet(meet_id)
    if meet.phase != 'draft':
        raise InvalidPhase('Candidates can only be removed during the draft phase')
    require(actor, meet, HOST_OR_ADMIN, 'Only the host or an admin can remove candidates')

    candidate_id = parse_id(candidate_id)
    candidate = meet.candidates.filter_by(id=candidate_id).first() if candidate_id is not None else None
    if not candidate:
        raise NotFound('Candidate not found in this meet')

    book_id = candidate.book_id
    db.session.delete(candidate)
    db.session.flush()

    if meet.selected_book_id == book_id and not meet.candidates.filter_by(book_id=book_id).first():
        meet.selected_book_id = None
        current_app.logger.info(f"Cleared selected book {book_id} of meet {meet.id} after candidate removal")

    db.session.commit()
    current_app.logger.info(f"Candidate {candidate_id} removed from meet {meet.id} by member {actor.id}")
    return {'ok': True}
