"""Appliers - perform the data change of an approved modification.

Every applier returns a terminal ModStatus, never OPEN. The edit applier
checks its precondition and writes in one conditional UPDATE; the merge
applier locks the rows it reads before writing. Both run inside the
resolver's transaction.
"""
import logging

from sqlalchemy import delete, select, update

from cdindex.models import db, Artist, Album, Track, Modification, TARGET_MODELS
from cdindex.models.types import ModStatus, ModType, EDIT_TYPES

log = logging.getLogger(__name__)

# Portable range of an INTEGER column
INT_MIN, INT_MAX = -2 ** 31, 2 ** 31 - 1


def apply_modification(mod):
    """Dispatch on the modification type and apply it."""
    try:
        mod_type = ModType(mod.type)
    except ValueError:
        log.warning("Modification %s has unknown type %r", mod.id, mod.type)
        return ModStatus.ERROR

    if mod_type in EDIT_TYPES:
        return apply_edit(mod)
    if mod_type == ModType.MERGE_ARTIST:
        return apply_merge_artist(mod)
    if mod_type == ModType.ADD_TRACK:
        return apply_add_track(mod)
    return ModStatus.ERROR


def to_int(text):
    """Parse an integer that fits an INTEGER column; raises ValueError otherwise."""
    value = int(text.strip())
    if not INT_MIN <= value <= INT_MAX:
        raise ValueError(f"integer out of range: {text.strip()}")
    return value


def _coerce(column, value):
    """Convert stored text to the Python type of the target column."""
    if value is None or value == '':
        return None
    python_type = column.type.python_type
    if python_type is str:
        return value
    if python_type is int:
        return to_int(value)
    return python_type(value.strip())


def apply_edit(mod):
    """Write new_value only if the column still holds prev_value."""
    model = TARGET_MODELS.get(mod.tab)
    if model is None or mod.col is None or mod.col not in model.__table__.columns:
        log.warning("Modification %s targets unknown column %s.%s", mod.id, mod.tab, mod.col)
        return ModStatus.ERROR
    column = model.__table__.columns[mod.col]

    try:
        new_value = _coerce(column, mod.new_value)
    except ValueError:
        log.warning("Modification %s has malformed new value %r", mod.id, mod.new_value)
        return ModStatus.ERROR
    try:
        prev_value = _coerce(column, mod.prev_value)
    except ValueError:
        # The column can never have held it
        return ModStatus.FAILEDDEP

    if prev_value is None:
        precondition = column.is_(None)
    else:
        precondition = column == prev_value

    result = db.session.execute(
        update(model)
        .where(model.id == mod.row_id, precondition)
        .values({mod.col: new_value})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        log.info("Modification %s: %s.%s of row %s changed since submission",
                 mod.id, mod.tab, mod.col, mod.row_id)
        return ModStatus.FAILEDDEP
    return ModStatus.APPLIED


def apply_merge_artist(mod):
    """Fold the artist named prev_value into the artist named new_value."""
    loser = db.session.execute(
        select(Artist.id, Artist.name).where(Artist.id == mod.row_id).with_for_update()
    ).first()
    if loser is None or loser.name != mod.prev_value:
        return ModStatus.FAILEDDEP

    winner_id = db.session.execute(
        select(Artist.id)
        .where(Artist.name == mod.new_value, Artist.id != loser.id)
        .with_for_update()
    ).scalar()
    if winner_id is None:
        # Merge target was renamed or removed
        return ModStatus.FAILEDDEP

    for model in (Album, Track, Modification):
        db.session.execute(
            update(model)
            .where(model.artist_id == loser.id)
            .values(artist_id=winner_id)
            .execution_options(synchronize_session=False)
        )
    db.session.execute(
        delete(Artist).where(Artist.id == loser.id).execution_options(synchronize_session=False)
    )
    log.info("Merged artist %s into %s (modification %s)", loser.id, winner_id, mod.id)
    return ModStatus.APPLIED


def parse_track_payload(payload, default_album_id=None):
    """Unpack an ADD_TRACK value: name, track number and album id, one per line.

    Raises ValueError when the payload is malformed.
    """
    if not payload:
        raise ValueError("empty track payload")
    fields = payload.split('\n')
    name = fields[0].strip()
    if not name:
        raise ValueError("track name is required")

    sequence = None
    if len(fields) > 1 and fields[1].strip():
        sequence = to_int(fields[1])

    album_id = default_album_id
    if len(fields) > 2 and fields[2].strip():
        album_id = to_int(fields[2])
    if album_id is None:
        raise ValueError("album is required")

    return {'name': name, 'sequence': sequence, 'album_id': album_id}


def apply_add_track(mod):
    """Insert the packed track under the recorded artist."""
    try:
        data = parse_track_payload(mod.new_value, default_album_id=mod.row_id)
    except ValueError as e:
        log.warning("Modification %s: bad track payload: %s", mod.id, e)
        return ModStatus.ERROR

    # The pending count was taken on the target album only
    if data['album_id'] != mod.row_id:
        log.warning("Modification %s: payload album %s is not the target album %s",
                    mod.id, data['album_id'], mod.row_id)
        return ModStatus.ERROR
    if db.session.get(Album, data['album_id']) is None:
        log.warning("Modification %s: album %s does not exist", mod.id, data['album_id'])
        return ModStatus.ERROR

    track = Track(artist_id=mod.artist_id, **data)
    db.session.add(track)
    db.session.flush()
    return ModStatus.APPLIED
