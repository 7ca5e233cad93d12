"""Modification and Vote models."""
from cdindex.extensions import db
from cdindex.models.moderator import utcnow
from cdindex.models.types import ModStatus


class Modification(db.Model):
    __tablename__ = 'modifications'

    id = db.Column(db.Integer, primary_key=True)
    tab = db.Column(db.String(32), nullable=False)  # Target table
    col = db.Column(db.String(32))  # Target column, None for ADD_TRACK
    row_id = db.Column(db.Integer, nullable=False)
    artist_id = db.Column(db.Integer, db.ForeignKey('artists.id'), nullable=False)
    type = db.Column(db.Integer, nullable=False)  # ModType

    # Values as seen by the submitter; ADD_TRACK packs several lines into new_value
    prev_value = db.Column(db.Text)
    new_value = db.Column(db.Text)

    submitted_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    moderator_id = db.Column(db.Integer, db.ForeignKey('moderators.id'), nullable=False)
    yes_votes = db.Column(db.Integer, nullable=False, default=0)
    no_votes = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.Integer, nullable=False, default=int(ModStatus.OPEN), index=True)

    moderator = db.relationship('Moderator', backref='modifications')
    artist = db.relationship('Artist')

    @property
    def is_open(self):
        return self.status == ModStatus.OPEN


class Vote(db.Model):
    __tablename__ = 'votes'
    __table_args__ = (
        db.UniqueConstraint('moderator_id', 'modification_id', name='uq_votes_moderator_modification'),
    )

    id = db.Column(db.Integer, primary_key=True)
    moderator_id = db.Column(db.Integer, db.ForeignKey('moderators.id'), nullable=False)
    modification_id = db.Column(db.Integer, db.ForeignKey('modifications.id'), nullable=False)
    vote = db.Column(db.Integer, nullable=False)  # VoteValue
