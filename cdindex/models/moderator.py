"""Moderator model."""
from datetime import datetime, timezone

from cdindex.extensions import db


def utcnow():
    """Naive UTC timestamp, as stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Moderator(db.Model):
    __tablename__ = 'moderators'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    email = db.Column(db.String(120))
    role = db.Column(db.String(20), default='moderator')  # admin, moderator
    password_hash = db.Column(db.String(256))
    mods_accepted = db.Column(db.Integer, nullable=False, default=0)
    mods_rejected = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=utcnow)
