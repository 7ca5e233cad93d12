"""Artist, Album and Track models - the rows moderators propose changes to."""
from cdindex.extensions import db


class Artist(db.Model):
    __tablename__ = 'artists'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False)
    sortname = db.Column(db.String(255))
    mod_pending = db.Column(db.Integer, nullable=False, default=0)  # open modifications on this row

    albums = db.relationship('Album', backref='artist', lazy=True)


class Album(db.Model):
    __tablename__ = 'albums'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    artist_id = db.Column(db.Integer, db.ForeignKey('artists.id'), nullable=False)
    mod_pending = db.Column(db.Integer, nullable=False, default=0)

    tracks = db.relationship('Track', backref='album', lazy=True)


class Track(db.Model):
    __tablename__ = 'tracks'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    sequence = db.Column(db.Integer)  # Track number on the album
    artist_id = db.Column(db.Integer, db.ForeignKey('artists.id'), nullable=False)
    album_id = db.Column(db.Integer, db.ForeignKey('albums.id'), nullable=False)
    mod_pending = db.Column(db.Integer, nullable=False, default=0)


# Tables a modification may target, keyed by the name stored on the modification
TARGET_MODELS = {
    Artist.__tablename__: Artist,
    Album.__tablename__: Album,
    Track.__tablename__: Track,
}
