"""Seed the first admin member so a fresh circle can be set up."""
import os

import click
from flask.cli import with_appcontext

from bookclub import db
from bookclub.models.member import Member


DEFAULT_ADMIN_USERNAME = 'admin'
DEFAULT_ADMIN_EMAIL = 'admin@example.com'


def seed_admin(username=None, email=None):
    """Add an admin member if the circle has no members yet. Returns summary."""
    if Member.query.count() > 0:
        return {
            'added': 0,
            'skipped': 1,
            'total': Member.query.count()
        }

    member = Member(
        username=username or os.environ.get('ADMIN_USERNAME', DEFAULT_ADMIN_USERNAME),
        email=email or os.environ.get('ADMIN_EMAIL', DEFAULT_ADMIN_EMAIL),
        is_admin=True,
        is_temporary=False,
    )
    db.session.add(member)
    db.session.commit()

    return {
        'added': 1,
        'skipped': 0,
        'total': Member.query.count()
    }


@click.command('seed-admin')
@click.option('--username', default=None, help='Admin username (defaults to ADMIN_USERNAME).')
@click.option('--email', default=None, help='Admin email (defaults to ADMIN_EMAIL).')
@with_appcontext
def seed_admin_command(username, email):
    """Create the initial admin member."""
    result = seed_admin(username, email)
    click.echo(f"Added {result['added']}, skipped {result['skipped']}, total members {result['total']}")
