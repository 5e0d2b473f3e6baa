"""
Point voting engine.

Every member distributes exactly VOTING_POINTS_TOTAL points across a
meet's candidates. A submission replaces the member's previous one as a
whole. Totals stay hidden until the host reveals them, and a book can
only be picked from the top scorers once they are revealed.
"""

from flask import current_app
from sqlalchemy import func

from bookclub import db, VOTING_POINTS_TOTAL
from bookclub.models import Candidate, CandidateVote
from bookclub.services.errors import (
    InvalidAllocation,
    InvalidPhase,
    InvalidSelection,
    InvalidState,
    NotFound,
    ValidationError,
)
from bookclub.services.lookups import completed_selection_meet_ids, get_book, get_meet, parse_id
from bookclub.services.permissions import HOST_OR_ADMIN, require


def _is_points(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def submit_votes(meet_id, member_id, votes) -> dict:
    """
    Record a member's point allocation for a meet in the voting phase.

    Args:
        meet_id: Meet being voted on
        member_id: Voting member
        votes: List of {'candidateId': ..., 'points': ...} dicts

    Raises:
        InvalidPhase: Meet is not in voting
        ValidationError: votes is not a list of objects
        InvalidAllocation: Bad points values, repeated candidates or wrong total
        NotFound: A candidate is not part of this meet
    """
    meet = get_meet(meet_id)
    if meet.phase != 'voting':
        raise InvalidPhase('Voting is only allowed during the voting phase')

    if not isinstance(votes, list) or not all(isinstance(v, dict) for v in votes):
        raise ValidationError('votes array is required')

    meet_candidate_ids = {c.id for c in meet.candidates.all()}
    allocation = {}
    for vote in votes:
        points = vote.get('points')
        if not _is_points(points):
            raise InvalidAllocation('Points must be non-negative whole numbers')
        candidate_id = parse_id(vote.get('candidateId'))
        if candidate_id not in meet_candidate_ids:
            raise NotFound(f"Candidate {vote.get('candidateId')} not found in this meet")
        if candidate_id in allocation:
            raise InvalidAllocation(f"Candidate {candidate_id} appears more than once")
        allocation[candidate_id] = points

    total_points = sum(allocation.values())
    if total_points != VOTING_POINTS_TOTAL:
        raise InvalidAllocation(
            f"You must distribute exactly {VOTING_POINTS_TOTAL} points (you distributed {total_points})"
        )

    # Replace the previous allocation; the bulk delete runs before the new rows are flushed
    CandidateVote.query.filter_by(meet_id=meet.id, member_id=member_id).delete(synchronize_session='fetch')

    for candidate_id, points in allocation.items():
        if points > 0:
            db.session.add(CandidateVote(
                meet_id=meet.id,
                candidate_id=candidate_id,
                member_id=member_id,
                points=points,
            ))

    db.session.commit()
    current_app.logger.info(f"Member {member_id} submitted votes for meet {meet.id}")
    return {'ok': True}


def candidate_totals(meet_id) -> dict:
    """Return {candidate_id: total_points} for every candidate, 0 when unvoted."""
    totals = {c.id: 0 for c in Candidate.query.filter_by(meet_id=meet_id).all()}
    rows = db.session.query(
        CandidateVote.candidate_id, func.sum(CandidateVote.points)
    ).filter(CandidateVote.meet_id == meet_id).group_by(CandidateVote.candidate_id).all()
    for candidate_id, points in rows:
        if candidate_id in totals:
            totals[candidate_id] = int(points or 0)
    return totals


def points_visible(meet) -> bool:
    """Totals are public once revealed or once the meet has moved past voting."""
    return bool(meet.voting_points_revealed) or meet.phase in ('reading', 'completed')


def vote_status(meet_id, roster) -> list:
    """
    Report which roster members have voted in a meet.

    Args:
        meet_id: Meet to inspect
        roster: Active members to report on (see lookups.active_roster)
    """
    meet = get_meet(meet_id)
    voted_ids = {
        row.member_id for row in
        db.session.query(CandidateVote.member_id).filter(CandidateVote.meet_id == meet.id).distinct()
    }
    return [
        {'userId': member.id, 'username': member.username, 'hasVoted': member.id in voted_ids}
        for member in roster
    ]


def my_votes(meet_id, member_id) -> list:
    rows = CandidateVote.query.filter_by(meet_id=meet_id, member_id=member_id).order_by(CandidateVote.id).all()
    return [{'candidateId': row.candidate_id, 'points': row.points} for row in rows]


def reveal_scores(meet_id, actor) -> dict:
    """Expose point totals. Revealing twice is a no-op."""
    meet = get_meet(meet_id)
    require(actor, meet, HOST_OR_ADMIN, 'Only the host or an admin can reveal scores')

    if not meet.voting_points_revealed:
        meet.voting_points_revealed = True
        db.session.commit()
        current_app.logger.info(f"Scores revealed for meet {meet.id} by member {actor.id}")
    return {'ok': True}


def select_book(meet_id, book_id, actor) -> dict:
    """
    Pick the meet's book under the selection policy.

    - draft: only when there is exactly one candidate, and only that book.
    - voting: only after reveal, and only a book whose candidate total
      equals the highest total. Ties leave the choice to the actor.
    - any other phase: refused.
    """
    meet = get_meet(meet_id)
    require(actor, meet, HOST_OR_ADMIN, 'Only the host or an admin can select a book')

    book_id = parse_id(book_id)
    if book_id is None:
        raise ValidationError('bookId is required')

    candidates = meet.candidates.all()

    if meet.phase == 'draft':
        if len(candidates) != 1:
            raise InvalidSelection(
                'A book can only be selected directly when there is exactly one candidate. '
                'Start the voting phase instead.'
            )
        if candidates[0].book_id != book_id:
            raise InvalidSelection('Can only select the sole candidate book')
    elif meet.phase == 'voting':
        if not meet.voting_points_revealed:
            raise InvalidState('Scores must be revealed before selecting a book')
        totals = candidate_totals(meet.id)
        if not candidates:
            raise InvalidSelection('There are no candidates to select from')
        max_points = max(totals[c.id] for c in candidates)
        top_book_ids = {c.book_id for c in candidates if totals[c.id] == max_points}
        if book_id not in top_book_ids:
            raise InvalidSelection('Can only select a book that has the highest number of votes')
    else:
        raise InvalidPhase('Cannot select a book in this phase')

    meet.selected_book_id = book_id
    db.session.commit()

    already_selected = bool(completed_selection_meet_ids(book_id, exclude_meet_id=meet.id))
    current_app.logger.info(f"Book {book_id} selected for meet {meet.id} by member {actor.id}")
    return {'selectedBookId': book_id, 'alreadySelectedInMeet': already_selected}


def resolve_tie(meet_id, book_id, actor) -> dict:
    """Manual override: set any existing book as selected, in any phase."""
    meet = get_meet(meet_id)
    require(actor, meet, HOST_OR_ADMIN, 'Only the host or an admin can resolve a tie')

    if book_id is None or book_id == '':
        raise ValidationError('bookId is required')
    book = get_book(book_id)

    meet.selected_book_id = book.id
    db.session.commit()

    current_app.logger.info(f"Tie for meet {meet.id} resolved to book {book.id} by member {actor.id}")
    return {'selectedBookId': book.id}
