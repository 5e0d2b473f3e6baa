"""
Availability poll - proposed dates for a meet and who can make them.

Date options are managed in draft, members answer during voting, and the
host copies one option's value into the meet as the final date.
"""

from flask import current_app

from bookclub import db
from bookclub.models import AVAILABILITY_VALUES, DateOption, DateVote
from bookclub.services.errors import InvalidPhase, NotFound, ValidationError
from bookclub.services.lookups import get_meet, parse_id
from bookclub.services.permissions import HOST_OR_ADMIN, require


# Phases in which the final date may still be chosen
DATE_SELECTION_PHASES = ('draft', 'voting')


def _get_option(meet, option_id) -> DateOption:
    option_id = parse_id(option_id)
    option = meet.date_options.filter_by(id=option_id).first() if option_id is not None else None
    if not option:
        raise NotFound('Date option not found')
    return option


def serialize_option(option) -> dict:
    return {
        'id': option.id,
        'meetId': option.meet_id,
        'dateTime': option.date_time,
        'votes': [
            {
                'userId': vote.member_id,
                'username': vote.member.username if vote.member else None,
                'availability': vote.availability,
            }
            for vote in option.votes.all()
        ],
    }


def add_date_option(meet_id, date_time, actor) -> dict:
    meet = get_meet(meet_id)
    if meet.phase != 'draft':
        raise InvalidPhase('Date options can only be added during the draft phase')
    require(actor, meet, HOST_OR_ADMIN, 'Only the host or an admin can add date options')

    if not isinstance(date_time, str) or not date_time.strip():
        raise ValidationError('dateTime is required')

    option = DateOption(meet_id=meet.id, date_time=date_time.strip())
    db.session.add(option)
    db.session.commit()

    current_app.logger.info(f"Date option {option.date_time} added to meet {meet.id}")
    return serialize_option(option)


def remove_date_option(meet_id, option_id, actor) -> dict:
    meet = get_meet(meet_id)
    if meet.phase != 'draft':
        raise InvalidPhase('Date options can only be removed during the draft phase')
    require(actor, meet, HOST_OR_ADMIN, 'Only the host or an admin can remove date options')

    option = _get_option(meet, option_id)
    db.session.delete(option)
    db.session.commit()

    current_app.logger.info(f"Date option {option_id} removed from meet {meet.id}")
    return {'ok': True}


def submit_availability(meet_id, member_id, votes) -> dict:
    """
    Upsert a member's availability for one or more date options.

    Options not mentioned keep their previous answer. There is no budget:
    every option gets an independent value.
    """
    meet = get_meet(meet_id)
    if meet.phase != 'voting':
        raise InvalidPhase('Availability voting is only allowed during the voting phase')

    if not isinstance(votes, list) or not all(isinstance(v, dict) for v in votes):
        raise ValidationError('votes array is required')

    answers = []
    for vote in votes:
        option = _get_option(meet, vote.get('dateOptionId'))
        availability = vote.get('availability')
        if availability not in AVAILABILITY_VALUES:
            raise ValidationError(f"Invalid availability: {availability}")
        answers.append((option, availability))

    for option, availability in answers:
        existing = option.votes.filter_by(member_id=member_id).first()
        if existing:
            existing.availability = availability
        else:
            db.session.add(DateVote(date_option_id=option.id, member_id=member_id, availability=availability))

    db.session.commit()
    current_app.logger.info(f"Member {member_id} updated availability for meet {meet.id}")
    return {'ok': True}


def select_date(meet_id, option_id, actor) -> dict:
    """
    Copy a date option's value into the meet as its final date.

    The meet keeps its own copy, so removing the option later does not
    unset the selected date.
    """
    meet = get_meet(meet_id)
    require(actor, meet, HOST_OR_ADMIN, 'Only the host or an admin can select a date')

    if option_id is None or option_id == '':
        raise ValidationError('dateOptionId is required')
    if meet.phase not in DATE_SELECTION_PHASES:
        raise InvalidPhase('A date can only be selected during the draft or voting phase')

    option = _get_option(meet, option_id)
    meet.selected_date = option.date_time
    db.session.commit()

    current_app.logger.info(f"Date {option.date_time} selected for meet {meet.id} by member {actor.id}")
    return {'selectedDate': meet.selected_date}


def availability_summary(meet_id) -> list:
    meet = get_meet(meet_id)
    return [serialize_option(option) for option in meet.date_options.all()]
