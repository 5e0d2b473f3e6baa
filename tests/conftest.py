"""Pytest configuration and shared fixtures."""

import pytest

from bookclub import create_app, db
from bookclub.models import Book, Candidate, DateOption, Meet, Member
from bookclub.services.permissions import Actor


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_member(username, is_admin=False, is_temporary=False):
    member = Member(username=username, email=f'{username}@example.com',
                    is_admin=is_admin, is_temporary=is_temporary)
    db.session.add(member)
    db.session.commit()
    return member


def make_book(owner, title='Middlemarch', author='George Eliot'):
    book = Book(title=title, author=author, added_by=owner.id)
    db.session.add(book)
    db.session.commit()
    return book


def make_meet(host, phase='draft', **fields):
    meet = Meet(host_id=host.id, phase=phase, **fields)
    db.session.add(meet)
    db.session.commit()
    return meet


def make_candidate(meet, book, added_by=None):
    candidate = Candidate(meet_id=meet.id, book_id=book.id, added_by=(added_by or meet.host).id)
    db.session.add(candidate)
    db.session.commit()
    return candidate


def make_date_option(meet, date_time='2026-11-03T19:00'):
    option = DateOption(meet_id=meet.id, date_time=date_time)
    db.session.add(option)
    db.session.commit()
    return option


def actor_for(member):
    return Actor.from_member(member)


def login(client, member):
    """Simulate the login collaborator storing the member in the session."""
    with client.session_transaction() as sess:
        sess['member_id'] = member.id


@pytest.fixture
def host(app):
    return make_member('hilda')


@pytest.fixture
def admin(app):
    return make_member('ada', is_admin=True)


@pytest.fixture
def alice(app):
    return make_member('alice')


@pytest.fixture
def bob(app):
    return make_member('bob')
