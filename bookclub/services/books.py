"""
Book service - the shared reading list.

Includes:
- Listing with derived isRead / candidateCount
- Book detail with the meets it was selected or nominated in
- Create, edit and delete (delete refused while any meet uses the book)
- Comments
"""

from flask import current_app
from sqlalchemy import func

from bookclub import db
from bookclub.models import Book, BookComment, Candidate, Meet, Top5Entry
from bookclub.services.errors import InvalidState, ValidationError
from bookclub.services.lookups import get_book
from bookclub.services.permissions import OWNER_OR_ADMIN, require


# field name in requests -> (column, max length, required)
BOOK_FIELDS = {
    'title': ('title', 500, True),
    'author': ('author', 200, True),
    'year': ('year', 30, False),
    'country': ('country', 50, False),
    'originalLanguage': ('original_language', 50, False),
    'type': ('book_type', 50, False),
    'introduction': ('introduction', 5000, False),
}

MAX_COMMENT_LENGTH = 2000


def _iso(value):
    return value.isoformat() if value else None


def read_book_ids() -> set:
    """Books selected by a completed meet count as read."""
    rows = db.session.query(Meet.selected_book_id).filter(
        Meet.phase == 'completed', Meet.selected_book_id.isnot(None)
    ).all()
    return {row.selected_book_id for row in rows}


def candidate_counts() -> dict:
    rows = db.session.query(Candidate.book_id, func.count(Candidate.id)).group_by(Candidate.book_id).all()
    return {book_id: count for book_id, count in rows}


def serialize_book(book, read_ids=None, counts=None) -> dict:
    read_ids = read_book_ids() if read_ids is None else read_ids
    counts = candidate_counts() if counts is None else counts
    return {
        'id': book.id,
        'title': book.title,
        'author': book.author,
        'year': book.year,
        'country': book.country,
        'originalLanguage': book.original_language,
        'type': book.book_type,
        'introduction': book.introduction,
        'addedBy': book.added_by,
        'addedByUsername': book.added_by_member.username if book.added_by_member else None,
        'createdAt': _iso(book.created_at),
        'updatedAt': _iso(book.updated_at),
        'isRead': book.id in read_ids,
        'candidateCount': counts.get(book.id, 0),
    }


def _meet_summary(meet) -> dict:
    return {'id': meet.id, 'label': meet.label, 'phase': meet.phase, 'selectedDate': meet.selected_date}


def serialize_comment(comment) -> dict:
    return {
        'id': comment.id,
        'bookId': comment.book_id,
        'userId': comment.member_id,
        'username': comment.member.username if comment.member else None,
        'content': comment.content,
        'createdAt': _iso(comment.created_at),
    }


def _clean_fields(data: dict, creating: bool) -> dict:
    """Validate request fields and map them to column values."""
    if not isinstance(data, dict):
        raise ValidationError('Invalid book data')

    if creating and not all(isinstance(data.get(k), str) and data.get(k).strip() for k in ('title', 'author')):
        raise ValidationError('Title and author are required')

    values = {}
    for field, (column, max_length, required) in BOOK_FIELDS.items():
        if field not in data:
            continue
        value = data[field]
        if value is None:
            value = ''
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be text")
        value = value.strip()
        if required and not value:
            raise ValidationError(f"{field.capitalize()} must be between 1 and {max_length} characters")
        if len(value) > max_length:
            raise ValidationError(f"{field} must be under {max_length} characters")
        values[column] = value or None
    return values


def list_books() -> list:
    read_ids = read_book_ids()
    counts = candidate_counts()
    return [serialize_book(book, read_ids, counts) for book in Book.query.order_by(Book.title).all()]


def book_detail(book_id) -> dict:
    """Book with the (non-cancelled) meets that selected or nominated it, and comments."""
    book = get_book(book_id)

    selected_in = Meet.query.filter(
        Meet.selected_book_id == book.id, Meet.phase != 'cancelled'
    ).order_by(Meet.id).all()
    candidate_in = Meet.query.join(Candidate, Candidate.meet_id == Meet.id).filter(
        Candidate.book_id == book.id, Meet.phase != 'cancelled'
    ).order_by(Meet.id).all()

    data = serialize_book(book)
    data.update({
        'selectedInMeets': [_meet_summary(meet) for meet in selected_in],
        'candidateInMeets': [_meet_summary(meet) for meet in candidate_in],
        'comments': [serialize_comment(comment) for comment in book.comments.all()],
    })
    return data


def create_book(actor, data) -> dict:
    values = _clean_fields(data, creating=True)
    book = Book(added_by=actor.id, **values)
    db.session.add(book)
    db.session.commit()

    current_app.logger.info(f"Book {book.id} '{book.title}' added by member {actor.id}")
    return serialize_book(book)


def update_book(book_id, actor, data) -> dict:
    book = get_book(book_id)
    require(actor, book, OWNER_OR_ADMIN, 'Only the person who added this book or an admin can edit it')

    values = _clean_fields(data, creating=False)
    for column, value in values.items():
        setattr(book, column, value)
    db.session.commit()
    return serialize_book(book)


def delete_book(book_id, actor) -> dict:
    """
    Delete a book and its comments.

    Refused while any meet, cancelled ones included, selected it or holds
    it as a candidate, or while anyone ranks it in a Top 5.
    """
    book = get_book(book_id)
    require(actor, book, OWNER_OR_ADMIN, 'Only the person who added this book or an admin can delete it')

    if Meet.query.filter_by(selected_book_id=book.id).first():
        raise InvalidState('Cannot delete this book because it is selected in a Meet')
    if Candidate.query.filter_by(book_id=book.id).first():
        raise InvalidState('Cannot delete this book because it is a candidate in a Meet')
    if Top5Entry.query.filter_by(book_id=book.id).first():
        raise InvalidState('Cannot delete this book because it is ranked in a Top 5')

    db.session.delete(book)
    db.session.commit()

    current_app.logger.info(f"Book {book_id} deleted by member {actor.id}")
    return {'ok': True}


def add_comment(book_id, actor, content) -> dict:
    book = get_book(book_id)
    if not isinstance(content, str) or not content.strip():
        raise ValidationError('Comment content is required')
    if len(content) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment must be under {MAX_COMMENT_LENGTH} characters")

    comment = BookComment(book_id=book.id, member_id=actor.id, content=content.strip())
    db.session.add(comment)
    db.session.commit()
    return serialize_comment(comment)
