"""
Pytest configuration and shared fixtures for the moderation tests.

Provides:
- A Flask app built with TestingConfig (in-memory SQLite, one hour voting
  period, unanimity at three votes)
- A small seeded catalog and a pool of moderators
- Test client, CLI runner and a helper to log a moderator in
"""
from datetime import timedelta
from types import SimpleNamespace

import pytest
from werkzeug.security import generate_password_hash

from cdindex import create_app
from cdindex.models import db, Artist, Album, Track, Moderator
from cdindex.models.moderator import utcnow

PASSWORD = 'Secret123!'


@pytest.fixture(scope="function")
def app():
    """App with a fresh schema for each test."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def catalog(app):
    """Two artists, one album, three tracks and five moderators."""
    beetles = Artist(name='Beetles', sortname='Beetles')
    beatles = Artist(name='The Beatles', sortname='Beatles, The')
    db.session.add_all([beetles, beatles])
    db.session.flush()

    album = Album(name='Abbey Road', artist_id=beetles.id)
    other_album = Album(name='Help!', artist_id=beatles.id)
    db.session.add_all([album, other_album])
    db.session.flush()

    song_a = Track(name='Song A', sequence=1, artist_id=beetles.id, album_id=album.id)
    something = Track(name='Something', sequence=3, artist_id=beetles.id, album_id=album.id)
    help_track = Track(name='Help!', sequence=1, artist_id=beatles.id, album_id=other_album.id)
    db.session.add_all([song_a, something, help_track])

    moderators = [
        Moderator(name=name, role=role, password_hash=generate_password_hash(PASSWORD))
        for name, role in [('alice', 'admin'), ('bob', 'moderator'), ('carol', 'moderator'),
                           ('dave', 'moderator'), ('erin', 'moderator')]
    ]
    db.session.add_all(moderators)
    db.session.commit()

    return SimpleNamespace(
        beetles=beetles.id,
        beatles=beatles.id,
        album=album.id,
        other_album=other_album.id,
        song_a=song_a.id,
        something=something.id,
        help_track=help_track.id,
        alice=moderators[0].id,
        bob=moderators[1].id,
        carol=moderators[2].id,
        dave=moderators[3].id,
        erin=moderators[4].id,
    )


@pytest.fixture
def later(app):
    """A point in time after the voting period has run out."""
    return utcnow() + timedelta(seconds=app.config['MOD_PERIOD'] + 60)


@pytest.fixture
def login(client):
    """Put a moderator in the test client's session."""
    def _login(moderator_id, role='moderator'):
        with client.session_transaction() as sess:
            sess['moderator_id'] = moderator_id
            sess['moderator_role'] = role
    return _login


@pytest.fixture
def fresh(app):
    """Reload a row, discarding anything cached in the session."""
    def _fresh(model, row_id):
        db.session.expire_all()
        return db.session.get(model, row_id)
    return _fresh
