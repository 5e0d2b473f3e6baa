"""
Meet service - create, list, inspect, edit and delete meets.

The detail payload pulls together candidates, the availability poll,
Top 5 entries and vote status. Candidate points are only included while
they are visible (see voting.points_visible).
"""

from flask import current_app

from bookclub import db
from bookclub.models import Meet
from bookclub.services.availability import serialize_option
from bookclub.services.candidates import serialize_candidate
from bookclub.services.errors import ValidationError
from bookclub.services.lookups import completed_selection_meet_ids, get_meet
from bookclub.services.permissions import HOST_OR_ADMIN, require
from bookclub.services.top5 import serialize_entry
from bookclub.services.voting import candidate_totals, my_votes, points_visible, vote_status


MAX_LOCATION_LENGTH = 300
MAX_DESCRIPTION_LENGTH = 5000


def _iso(value):
    return value.isoformat() if value else None


def serialize_meet(meet) -> dict:
    return {
        'id': meet.id,
        'hostId': meet.host_id,
        'hostUsername': meet.host.username if meet.host else None,
        'phase': meet.phase,
        'selectedBookId': meet.selected_book_id,
        'selectedBookTitle': meet.selected_book.title if meet.selected_book else None,
        'selectedDate': meet.selected_date,
        'location': meet.location,
        'description': meet.description,
        'votingPointsRevealed': bool(meet.voting_points_revealed),
        'label': meet.label,
        'createdAt': _iso(meet.created_at),
        'updatedAt': _iso(meet.updated_at),
    }


def _validate_text(location, description):
    if location is not None and (not isinstance(location, str) or len(location) > MAX_LOCATION_LENGTH):
        raise ValidationError(f"Location must be text under {MAX_LOCATION_LENGTH} characters")
    if description is not None and (not isinstance(description, str) or len(description) > MAX_DESCRIPTION_LENGTH):
        raise ValidationError(f"Description must be text under {MAX_DESCRIPTION_LENGTH} characters")


def create_meet(actor, location=None, description=None) -> dict:
    """Create a draft meet hosted by the actor."""
    _validate_text(location, description)
    meet = Meet(
        host_id=actor.id,
        phase='draft',
        location=location or None,
        description=description or None,
    )
    db.session.add(meet)
    db.session.commit()

    current_app.logger.info(f"Meet {meet.id} created by member {actor.id}")
    return serialize_meet(meet)


def list_meets() -> list:
    return [serialize_meet(meet) for meet in Meet.query.order_by(Meet.created_at.desc(), Meet.id.desc()).all()]


def meet_detail(meet_id, viewer, roster) -> dict:
    """
    Full meet payload for one viewer.

    Args:
        meet_id: Meet to load
        viewer: Actor whose own votes are included as myVotes
        roster: Active members for the vote status list
    """
    meet = get_meet(meet_id)
    show_points = points_visible(meet)
    totals = candidate_totals(meet.id) if show_points else {}

    candidates = []
    for candidate in meet.candidates.all():
        already_selected = bool(completed_selection_meet_ids(candidate.book_id, exclude_meet_id=meet.id))
        points = totals.get(candidate.id, 0) if show_points else None
        candidates.append(serialize_candidate(candidate, already_selected, points))

    data = serialize_meet(meet)
    data.update({
        'candidates': candidates,
        'dateOptions': [serialize_option(option) for option in meet.date_options.all()],
        'top5Entries': [serialize_entry(entry) for entry in meet.top5_entries.all()],
        'voteStatus': vote_status(meet.id, roster),
        'myVotes': my_votes(meet.id, viewer.id),
    })
    return data


def update_meet(meet_id, actor, location=None, description=None) -> dict:
    """Edit a meet's location and description. None leaves a field unchanged."""
    meet = get_meet(meet_id)
    require(actor, meet, HOST_OR_ADMIN, 'Only the host or an admin can update this meet')
    _validate_text(location, description)

    if location is not None:
        meet.location = location or None
    if description is not None:
        meet.description = description or None
    db.session.commit()
    return serialize_meet(meet)


def delete_meet(meet_id, actor) -> dict:
    """Delete a meet in any phase, with its candidates, votes, date poll and Top 5."""
    meet = get_meet(meet_id)
    require(actor, meet, HOST_OR_ADMIN, 'Only the host or an admin can delete this meet')

    db.session.delete(meet)
    db.session.commit()

    current_app.logger.info(f"Meet {meet_id} deleted by member {actor.id}")
    return {'ok': True}
