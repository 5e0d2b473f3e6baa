"""
API routes shared by the meet and book endpoints.

Includes:
- json_body helper (request body must be a JSON object)
- member_required decorator (identity comes from the session set at login)
- Domain error to JSON response mapping
- Client configuration (voting point budget)
"""

from functools import wraps
from flask import Blueprint, jsonify, request, session, g, current_app

from bookclub import db
from bookclub.models import Member
from bookclub.services.errors import DomainError, ErrorCode, ValidationError
from bookclub.services.permissions import Actor

api_bp = Blueprint('api', __name__, url_prefix='/api')


ERROR_STATUS = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.FORBIDDEN: 403,
}


def get_current_member():
    """Get the currently logged-in member."""
    member_id = session.get('member_id')
    if member_id:
        return Member.query.get(member_id)
    return None


def json_body():
    """Request JSON object, {} when there is no body."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Invalid request body')
    return data


def member_required(f):
    """Decorator to require a logged-in member who has completed account setup.

    Sets g.actor for the view.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        member = get_current_member()
        if not member:
            return jsonify({
                'success': False,
                'error': 'Authentication required',
                'code': 'AUTHENTICATION_REQUIRED',
            }), 401
        if member.is_temporary:
            return jsonify({
                'success': False,
                'error': 'Account setup required',
                'code': 'SETUP_REQUIRED',
            }), 403
        g.actor = Actor.from_member(member)
        return f(*args, **kwargs)
    return decorated_function


@api_bp.app_errorhandler(DomainError)
def handle_domain_error(error):
    """Roll back the request's changes and report the violated rule."""
    db.session.rollback()
    status = ERROR_STATUS.get(error.code, 400)
    current_app.logger.warning(f"Rejected request: {error}")
    return jsonify({
        'success': False,
        'error': error.message,
        'code': error.code.value,
    }), status


@api_bp.route('/config')
def client_config():
    """Constants the client needs to render the voting UI."""
    return jsonify({
        'votingPointsTotal': current_app.config['VOTING_POINTS_TOTAL'],
    })
