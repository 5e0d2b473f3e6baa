"""Tests for point voting, reveal and book selection."""

import pytest

from bookclub import db, VOTING_POINTS_TOTAL
from bookclub.models import CandidateVote, Meet
from bookclub.services import voting
from bookclub.services.errors import (
    Forbidden,
    InvalidAllocation,
    InvalidPhase,
    InvalidSelection,
    InvalidState,
    NotFound,
    ValidationError,
)
from conftest import actor_for, make_book, make_candidate, make_meet, make_member


def vote_rows(meet, member):
    rows = CandidateVote.query.filter_by(meet_id=meet.id, member_id=member.id).all()
    return sorted((row.candidate_id, row.points) for row in rows)


@pytest.fixture
def voting_meet(host):
    meet = make_meet(host, phase='voting')
    first = make_candidate(meet, make_book(host, title='Emma', author='Jane Austen'))
    second = make_candidate(meet, make_book(host, title='Ulysses', author='James Joyce'))
    return meet, first, second


class TestSubmitVotes:

    def test_budget_constant(self):
        assert VOTING_POINTS_TOTAL == 15

    def test_valid_submission(self, voting_meet, alice):
        meet, first, second = voting_meet
        votes = [{'candidateId': first.id, 'points': 10}, {'candidateId': second.id, 'points': 5}]
        assert voting.submit_votes(meet.id, alice.id, votes) == {'ok': True}
        assert vote_rows(meet, alice) == [(first.id, 10), (second.id, 5)]

    def test_zero_points_not_stored(self, voting_meet, alice):
        meet, first, second = voting_meet
        votes = [{'candidateId': first.id, 'points': 15}, {'candidateId': second.id, 'points': 0}]
        voting.submit_votes(meet.id, alice.id, votes)
        assert vote_rows(meet, alice) == [(first.id, 15)]
        assert voting.candidate_totals(meet.id) == {first.id: 15, second.id: 0}

    def test_wrong_total_rejected_without_changes(self, voting_meet, alice):
        meet, first, second = voting_meet
        voting.submit_votes(meet.id, alice.id, [{'candidateId': first.id, 'points': 15}])

        with pytest.raises(InvalidAllocation, match='you distributed 12'):
            voting.submit_votes(meet.id, alice.id, [{'candidateId': second.id, 'points': 12}])
        assert vote_rows(meet, alice) == [(first.id, 15)]

    def test_over_budget_rejected(self, voting_meet, alice):
        meet, first, second = voting_meet
        with pytest.raises(InvalidAllocation):
            voting.submit_votes(meet.id, alice.id, [
                {'candidateId': first.id, 'points': 10},
                {'candidateId': second.id, 'points': 10},
            ])
        assert vote_rows(meet, alice) == []

    def test_resubmission_replaces(self, voting_meet, alice):
        meet, first, second = voting_meet
        voting.submit_votes(meet.id, alice.id, [{'candidateId': first.id, 'points': 15}])
        voting.submit_votes(meet.id, alice.id, [{'candidateId': second.id, 'points': 15}])
        assert vote_rows(meet, alice) == [(second.id, 15)]

    def test_same_submission_twice_is_idempotent(self, voting_meet, alice):
        meet, first, second = voting_meet
        votes = [{'candidateId': first.id, 'points': 8}, {'candidateId': second.id, 'points': 7}]
        voting.submit_votes(meet.id, alice.id, votes)
        once = vote_rows(meet, alice)
        voting.submit_votes(meet.id, alice.id, votes)
        assert vote_rows(meet, alice) == once
        assert CandidateVote.query.count() == 2

    def test_members_do_not_overwrite_each_other(self, voting_meet, alice, bob):
        meet, first, second = voting_meet
        voting.submit_votes(meet.id, alice.id, [{'candidateId': first.id, 'points': 15}])
        voting.submit_votes(meet.id, bob.id, [{'candidateId': second.id, 'points': 15}])
        assert voting.candidate_totals(meet.id) == {first.id: 15, second.id: 15}

    def test_candidate_from_other_meet(self, voting_meet, host, alice):
        meet, first, _ = voting_meet
        other = make_meet(host, phase='voting')
        foreign = make_candidate(other, make_book(host, title='Dubliners'))
        with pytest.raises(NotFound):
            voting.submit_votes(meet.id, alice.id, [
                {'candidateId': first.id, 'points': 10},
                {'candidateId': foreign.id, 'points': 5},
            ])

    def test_negative_points_rejected(self, voting_meet, alice):
        meet, first, second = voting_meet
        with pytest.raises(InvalidAllocation):
            voting.submit_votes(meet.id, alice.id, [
                {'candidateId': first.id, 'points': 20},
                {'candidateId': second.id, 'points': -5},
            ])

    def test_repeated_candidate_rejected(self, voting_meet, alice):
        meet, first, _ = voting_meet
        with pytest.raises(InvalidAllocation):
            voting.submit_votes(meet.id, alice.id, [
                {'candidateId': first.id, 'points': 10},
                {'candidateId': first.id, 'points': 5},
            ])

    def test_votes_must_be_a_list(self, voting_meet, alice):
        meet, _, _ = voting_meet
        with pytest.raises(ValidationError):
            voting.submit_votes(meet.id, alice.id, None)

    @pytest.mark.parametrize('phase', ['draft', 'reading', 'completed', 'cancelled'])
    def test_only_during_voting(self, host, alice, phase):
        meet = make_meet(host, phase=phase)
        candidate = make_candidate(meet, make_book(host))
        with pytest.raises(InvalidPhase):
            voting.submit_votes(meet.id, alice.id, [{'candidateId': candidate.id, 'points': 15}])


class TestVoteStatus:

    def test_reports_roster_members(self, voting_meet, alice, bob):
        meet, first, _ = voting_meet
        voting.submit_votes(meet.id, alice.id, [{'candidateId': first.id, 'points': 15}])

        status = voting.vote_status(meet.id, [alice, bob])
        assert status == [
            {'userId': alice.id, 'username': 'alice', 'hasVoted': True},
            {'userId': bob.id, 'username': 'bob', 'hasVoted': False},
        ]

    def test_roster_is_injected(self, voting_meet, alice):
        meet, _, _ = voting_meet
        assert voting.vote_status(meet.id, []) == []


class TestReveal:

    def test_reveal_sets_flag(self, voting_meet, host):
        meet, _, _ = voting_meet
        voting.reveal_scores(meet.id, actor_for(host))
        assert Meet.query.get(meet.id).voting_points_revealed is True

    def test_reveal_twice_is_noop(self, voting_meet, host):
        meet, _, _ = voting_meet
        voting.reveal_scores(meet.id, actor_for(host))
        assert voting.reveal_scores(meet.id, actor_for(host)) == {'ok': True}
        assert Meet.query.get(meet.id).voting_points_revealed is True

    def test_reveal_forbidden_for_members(self, voting_meet, alice):
        meet, _, _ = voting_meet
        with pytest.raises(Forbidden):
            voting.reveal_scores(meet.id, actor_for(alice))

    def test_points_visibility(self, host):
        assert voting.points_visible(make_meet(host, phase='voting')) is False
        assert voting.points_visible(make_meet(host, phase='voting', voting_points_revealed=True)) is True
        assert voting.points_visible(make_meet(host, phase='reading')) is True
        assert voting.points_visible(make_meet(host, phase='completed')) is True


class TestSelectBookInDraft:

    def test_single_candidate_can_be_selected(self, host):
        book = make_book(host)
        meet = make_meet(host)
        make_candidate(meet, book)
        result = voting.select_book(meet.id, book.id, actor_for(host))
        assert result == {'selectedBookId': book.id, 'alreadySelectedInMeet': False}
        assert Meet.query.get(meet.id).selected_book_id == book.id

    def test_other_book_rejected(self, host):
        meet = make_meet(host)
        make_candidate(meet, make_book(host))
        other = make_book(host, title='Emma')
        with pytest.raises(InvalidSelection):
            voting.select_book(meet.id, other.id, actor_for(host))

    def test_multiple_candidates_always_rejected(self, host):
        meet = make_meet(host)
        first = make_book(host, title='Emma')
        second = make_book(host, title='Persuasion')
        make_candidate(meet, first)
        make_candidate(meet, second)
        for book in (first, second):
            with pytest.raises(InvalidSelection):
                voting.select_book(meet.id, book.id, actor_for(host))
        assert Meet.query.get(meet.id).selected_book_id is None

    def test_no_candidates_rejected(self, host):
        meet = make_meet(host)
        with pytest.raises(InvalidSelection):
            voting.select_book(meet.id, make_book(host).id, actor_for(host))

    def test_forbidden_for_members(self, host, alice):
        book = make_book(host)
        meet = make_meet(host)
        make_candidate(meet, book)
        with pytest.raises(Forbidden):
            voting.select_book(meet.id, book.id, actor_for(alice))

    def test_advisory_flag_for_book_read_before(self, host):
        book = make_book(host)
        make_meet(host, phase='completed', selected_book_id=book.id, selected_date='2025-01-01')
        meet = make_meet(host)
        make_candidate(meet, book)
        assert voting.select_book(meet.id, book.id, actor_for(host))['alreadySelectedInMeet'] is True


class TestSelectBookInVoting:

    def _vote(self, meet, first, second, splits):
        for index, (a, b) in enumerate(splits):
            member = make_member(f'voter{index}')
            votes = [{'candidateId': first.id, 'points': a}, {'candidateId': second.id, 'points': b}]
            voting.submit_votes(meet.id, member.id, votes)

    def test_requires_reveal(self, voting_meet, host):
        meet, first, second = voting_meet
        self._vote(meet, first, second, [(10, 5)])
        with pytest.raises(InvalidState):
            voting.select_book(meet.id, first.book_id, actor_for(host))

    def test_top_scorer_only(self, voting_meet, host):
        meet, first, second = voting_meet
        self._vote(meet, first, second, [(10, 5)])
        voting.reveal_scores(meet.id, actor_for(host))

        with pytest.raises(InvalidSelection):
            voting.select_book(meet.id, second.book_id, actor_for(host))
        assert voting.select_book(meet.id, first.book_id, actor_for(host))['selectedBookId'] == first.book_id

    def test_tie_allows_either(self, voting_meet, host, admin):
        meet, first, second = voting_meet
        self._vote(meet, first, second, [(8, 7), (7, 8)])
        voting.reveal_scores(meet.id, actor_for(host))

        assert voting.select_book(meet.id, first.book_id, actor_for(host))['selectedBookId'] == first.book_id
        assert voting.select_book(meet.id, second.book_id, actor_for(admin))['selectedBookId'] == second.book_id
        assert Meet.query.get(meet.id).selected_book_id == second.book_id

    def test_book_outside_candidates_rejected(self, voting_meet, host):
        meet, first, second = voting_meet
        self._vote(meet, first, second, [(10, 5)])
        voting.reveal_scores(meet.id, actor_for(host))
        with pytest.raises(InvalidSelection):
            voting.select_book(meet.id, make_book(host, title='Dracula').id, actor_for(host))

    def test_no_votes_means_every_candidate_ties(self, voting_meet, host):
        meet, first, second = voting_meet
        voting.reveal_scores(meet.id, actor_for(host))
        assert voting.select_book(meet.id, second.book_id, actor_for(host))['selectedBookId'] == second.book_id

    @pytest.mark.parametrize('phase', ['reading', 'completed', 'cancelled'])
    def test_other_phases_rejected(self, host, phase):
        book = make_book(host)
        meet = make_meet(host, phase=phase, voting_points_revealed=True)
        make_candidate(meet, book)
        with pytest.raises(InvalidPhase):
            voting.select_book(meet.id, book.id, actor_for(host))


class TestResolveTie:

    def test_override_any_book_any_phase(self, host):
        meet = make_meet(host, phase='reading')
        book = make_book(host, title='Dracula')
        assert voting.resolve_tie(meet.id, book.id, actor_for(host)) == {'selectedBookId': book.id}
        db.session.expire_all()
        assert Meet.query.get(meet.id).selected_book_id == book.id

    def test_override_forbidden_for_members(self, host, alice):
        meet = make_meet(host, phase='voting')
        with pytest.raises(Forbidden):
            voting.resolve_tie(meet.id, make_book(host).id, actor_for(alice))

    def test_override_unknown_book(self, host):
        meet = make_meet(host, phase='voting')
        with pytest.raises(NotFound):
            voting.resolve_tie(meet.id, 12345, actor_for(host))
