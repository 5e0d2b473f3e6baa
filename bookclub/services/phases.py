"""
Meet phase state machine.

draft -> voting -> reading -> completed, with cancelled reachable from
every non-terminal phase. completed and cancelled are terminal.
"""

from flask import current_app

from bookclub import db
from bookclub.models import PHASES
from bookclub.services.errors import InvalidTransition, PreconditionFailed, ValidationError
from bookclub.services.lookups import get_meet
from bookclub.services.permissions import HOST_OR_ADMIN, require


TRANSITIONS = {
    'draft': ('voting', 'reading', 'cancelled'),
    'voting': ('reading', 'cancelled'),
    'reading': ('completed', 'cancelled'),
    'completed': (),
    'cancelled': (),
}


def allowed_transitions(phase: str) -> tuple:
    return TRANSITIONS.get(phase, ())


def can_transition(current: str, target: str) -> bool:
    return target in allowed_transitions(current)


def change_phase(meet_id, target, actor) -> dict:
    """
    Move a meet to another phase.

    Moving to reading requires both a selected book and a selected date;
    the meet is re-read right before the check.

    Raises:
        NotFound, Forbidden, ValidationError, InvalidTransition, PreconditionFailed
    """
    meet = get_meet(meet_id)
    require(actor, meet, HOST_OR_ADMIN, 'Only the host or an admin can change the phase')

    if target not in PHASES:
        raise ValidationError(f"Unknown phase: {target}")

    if not can_transition(meet.phase, target):
        raise InvalidTransition(meet.phase, target)

    if target == 'reading':
        db.session.refresh(meet)
        if not meet.selected_book_id:
            raise PreconditionFailed('A book must be selected before moving to the reading phase')
        if not meet.selected_date:
            raise PreconditionFailed('A date must be selected before moving to the reading phase')

    previous = meet.phase
    meet.phase = target
    db.session.commit()

    current_app.logger.info(f"Meet {meet.id} moved from {previous} to {target} by member {actor.id}")
    return {'phase': target}
