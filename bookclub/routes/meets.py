"""
Meet routes - lifecycle, candidates, point voting, availability poll and Top 5.

Every endpoint requires a logged-in member; host/admin checks happen in
the services so the rules live in one place.
"""

from flask import Blueprint, jsonify, g

from bookclub.services import availability, candidates, meets, phases, top5, voting
from bookclub.services.lookups import active_roster
from bookclub.routes.api import json_body, member_required

meets_bp = Blueprint('meets', __name__, url_prefix='/api/meets')


# ============== MEETS ==============

@meets_bp.route('', methods=['GET'])
@member_required
def list_meets():
    return jsonify(meets.list_meets())


@meets_bp.route('', methods=['POST'])
@member_required
def create_meet():
    data = json_body()
    meet = meets.create_meet(g.actor, location=data.get('location'), description=data.get('description'))
    return jsonify(meet), 201


@meets_bp.route('/<int:meet_id>', methods=['GET'])
@member_required
def meet_detail(meet_id):
    return jsonify(meets.meet_detail(meet_id, g.actor, active_roster()))


@meets_bp.route('/<int:meet_id>', methods=['PUT'])
@member_required
def update_meet(meet_id):
    data = json_body()
    meet = meets.update_meet(meet_id, g.actor, location=data.get('location'), description=data.get('description'))
    return jsonify(meet)


@meets_bp.route('/<int:meet_id>', methods=['DELETE'])
@member_required
def delete_meet(meet_id):
    return jsonify(meets.delete_meet(meet_id, g.actor))


@meets_bp.route('/<int:meet_id>/phase', methods=['POST'])
@member_required
def change_phase(meet_id):
    return jsonify(phases.change_phase(meet_id, json_body().get('phase'), g.actor))


# ============== CANDIDATES ==============

@meets_bp.route('/<int:meet_id>/candidates', methods=['POST'])
@member_required
def add_candidate(meet_id):
    data = json_body()
    candidate = candidates.add_candidate(meet_id, data.get('bookId'), data.get('motivation'), g.actor)
    return jsonify(candidate), 201


@meets_bp.route('/<int:meet_id>/candidates/<int:candidate_id>', methods=['DELETE'])
@member_required
def remove_candidate(meet_id, candidate_id):
    return jsonify(candidates.remove_candidate(meet_id, candidate_id, g.actor))


@meets_bp.route('/<int:meet_id>/candidates/select', methods=['POST'])
@member_required
def select_book(meet_id):
    return jsonify(voting.select_book(meet_id, json_body().get('bookId'), g.actor))


@meets_bp.route('/<int:meet_id>/candidates/resolve-tie', methods=['POST'])
@member_required
def resolve_tie(meet_id):
    return jsonify(voting.resolve_tie(meet_id, json_body().get('bookId'), g.actor))


# ============== POINT VOTING ==============

@meets_bp.route('/<int:meet_id>/votes', methods=['POST'])
@member_required
def submit_votes(meet_id):
    return jsonify(voting.submit_votes(meet_id, g.actor.id, json_body().get('votes')))


@meets_bp.route('/<int:meet_id>/votes/status', methods=['GET'])
@member_required
def vote_status(meet_id):
    return jsonify(voting.vote_status(meet_id, active_roster()))


@meets_bp.route('/<int:meet_id>/votes/reveal', methods=['POST'])
@member_required
def reveal_scores(meet_id):
    return jsonify(voting.reveal_scores(meet_id, g.actor))


# ============== AVAILABILITY POLL ==============

@meets_bp.route('/<int:meet_id>/date-options', methods=['GET'])
@member_required
def date_options(meet_id):
    return jsonify(availability.availability_summary(meet_id))


@meets_bp.route('/<int:meet_id>/date-options', methods=['POST'])
@member_required
def add_date_option(meet_id):
    option = availability.add_date_option(meet_id, json_body().get('dateTime'), g.actor)
    return jsonify(option), 201


@meets_bp.route('/<int:meet_id>/date-options/<int:option_id>', methods=['DELETE'])
@member_required
def remove_date_option(meet_id, option_id):
    return jsonify(availability.remove_date_option(meet_id, option_id, g.actor))


@meets_bp.route('/<int:meet_id>/date-votes', methods=['PUT'])
@member_required
def submit_availability(meet_id):
    return jsonify(availability.submit_availability(meet_id, g.actor.id, json_body().get('votes')))


@meets_bp.route('/<int:meet_id>/date-options/select', methods=['POST'])
@member_required
def select_date(meet_id):
    return jsonify(availability.select_date(meet_id, json_body().get('dateOptionId'), g.actor))


# ============== TOP 5 ==============

@meets_bp.route('/<int:meet_id>/top5', methods=['POST'])
@member_required
def submit_top5(meet_id):
    return jsonify(top5.submit_top5(meet_id, g.actor.id, json_body().get('entries')))


@meets_bp.route('/top5/aggregate', methods=['GET'])
@member_required
def aggregate_ranking():
    return jsonify(top5.aggregate_ranking())
