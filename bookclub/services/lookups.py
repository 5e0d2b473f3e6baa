"""Shared entity lookups for the meet and book services."""

from bookclub.models import Book, Meet, Member
from bookclub.services.errors import NotFound


def parse_id(value):
    """Coerce a client-supplied id to int, or None when it cannot be one."""
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def get_meet(meet_id) -> Meet:
    """Return the meet or raise NotFound. Always re-reads current state."""
    meet_id = parse_id(meet_id)
    meet = Meet.query.get(meet_id) if meet_id is not None else None
    if not meet:
        raise NotFound('Meet not found')
    return meet


def get_book(book_id) -> Book:
    book_id = parse_id(book_id)
    book = Book.query.get(book_id) if book_id is not None else None
    if not book:
        raise NotFound('Book not found')
    return book


def active_roster() -> list:
    """Members who completed account setup, ordered by username."""
    return Member.query.filter_by(is_temporary=False).order_by(Member.username).all()


def completed_selection_meet_ids(book_id, exclude_meet_id=None) -> list:
    """Ids of completed meets that selected this book, optionally skipping one meet."""
    query = Meet.query.filter(Meet.selected_book_id == book_id, Meet.phase == 'completed')
    if exclude_meet_id is not None:
        query = query.filter(Meet.id != exclude_meet_id)
    return [meet.id for meet in query.all()]
