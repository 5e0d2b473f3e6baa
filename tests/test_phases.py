"""Tests for the meet phase state machine."""

import pytest

from bookclub import db
from bookclub.models import Meet
from bookclub.services import phases
from bookclub.services.errors import Forbidden, InvalidTransition, NotFound, PreconditionFailed, ValidationError
from conftest import actor_for, make_book, make_meet

ALL_PHASES = ['draft', 'voting', 'reading', 'completed', 'cancelled']
ALLOWED = {
    ('draft', 'voting'), ('draft', 'reading'), ('draft', 'cancelled'),
    ('voting', 'reading'), ('voting', 'cancelled'),
    ('reading', 'completed'), ('reading', 'cancelled'),
}
DISALLOWED = [(a, b) for a in ALL_PHASES for b in ALL_PHASES if (a, b) not in ALLOWED]


class TestTransitionTable:

    def test_terminal_phases_have_no_exits(self):
        assert phases.allowed_transitions('completed') == ()
        assert phases.allowed_transitions('cancelled') == ()

    def test_can_transition_matches_table(self):
        for current in ALL_PHASES:
            for target in ALL_PHASES:
                assert phases.can_transition(current, target) == ((current, target) in ALLOWED)

    @pytest.mark.parametrize('current,target', DISALLOWED)
    def test_disallowed_transition_raises(self, host, current, target):
        meet = make_meet(host, phase=current)
        with pytest.raises(InvalidTransition):
            phases.change_phase(meet.id, target, actor_for(host))
        assert Meet.query.get(meet.id).phase == current


class TestChangePhase:

    def test_draft_to_voting_without_candidates(self, host):
        meet = make_meet(host)
        assert phases.change_phase(meet.id, 'voting', actor_for(host)) == {'phase': 'voting'}
        assert Meet.query.get(meet.id).phase == 'voting'

    def test_admin_may_change_phase(self, host, admin):
        meet = make_meet(host)
        phases.change_phase(meet.id, 'cancelled', actor_for(admin))
        assert Meet.query.get(meet.id).phase == 'cancelled'

    def test_other_member_is_forbidden(self, host, alice):
        meet = make_meet(host)
        with pytest.raises(Forbidden):
            phases.change_phase(meet.id, 'voting', actor_for(alice))

    def test_unknown_meet(self, host):
        with pytest.raises(NotFound):
            phases.change_phase(999, 'voting', actor_for(host))

    def test_unknown_phase_name(self, host):
        meet = make_meet(host)
        with pytest.raises(ValidationError):
            phases.change_phase(meet.id, 'archived', actor_for(host))

    def test_reading_requires_book_even_with_date(self, host):
        meet = make_meet(host, phase='voting', selected_date='2026-11-03T19:00')
        with pytest.raises(PreconditionFailed, match='book must be selected'):
            phases.change_phase(meet.id, 'reading', actor_for(host))

    def test_reading_requires_date_even_with_book(self, host):
        book = make_book(host)
        meet = make_meet(host, phase='voting', selected_book_id=book.id)
        with pytest.raises(PreconditionFailed, match='date must be selected'):
            phases.change_phase(meet.id, 'reading', actor_for(host))

    def test_missing_book_reported_first(self, host):
        meet = make_meet(host)
        with pytest.raises(PreconditionFailed, match='book must be selected'):
            phases.change_phase(meet.id, 'reading', actor_for(host))

    def test_reading_with_book_and_date(self, host):
        book = make_book(host)
        meet = make_meet(host, selected_book_id=book.id, selected_date='2026-11-03T19:00')
        phases.change_phase(meet.id, 'reading', actor_for(host))
        phases.change_phase(meet.id, 'completed', actor_for(host))
        db.session.expire_all()
        assert Meet.query.get(meet.id).phase == 'completed'
