"""Moderation service - submission, voting, resolution and moderator credit.

A modification is created OPEN and collects votes. It leaves OPEN exactly
once: early, when one side reaches the unanimity threshold with no votes
against it, or at the end of the voting period by simple majority. Approved
modifications go through the appliers, and whatever status comes back is
final. Closing always decrements the pending count on the target row and
credits the submitter.
"""
import logging
from datetime import timedelta

from flask import current_app
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from cdindex.errors import InvalidModificationError, UnknownModeratorError
from cdindex.models import db, Artist, Moderator, Modification, Vote, TARGET_MODELS
from cdindex.models.moderator import utcnow
from cdindex.models.types import ModStatus, ModType, VoteValue, TARGETS
from cdindex.services.appliers import apply_modification, parse_track_payload

log = logging.getLogger(__name__)

# Returned by decide() when the modification should be applied
APPLY = 'apply'


# ========================================
# SUBMISSION
# ========================================

def artist_id_from_name(name, exclude_id=None):
    """Return the id of the artist called `name`, or None."""
    stmt = select(Artist.id).where(Artist.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Artist.id != exclude_id)
    return db.session.execute(stmt).scalar()


def check_special_cases(mod_type, row_id, new_value):
    """Rewrite submissions that mean something else than they say.

    Renaming an artist to the name of another artist is a merge.
    """
    if mod_type == ModType.EDIT_ARTISTNAME and artist_id_from_name(new_value, exclude_id=row_id):
        return ModType.MERGE_ARTIST
    return mod_type


def _payload_album(payload, row_id):
    try:
        return parse_track_payload(payload, default_album_id=row_id)['album_id']
    except ValueError:
        # Malformed payloads are accepted and close as ERROR when applied
        return row_id


def submit(prev_value, new_value, mod_type, row_id, artist_id, moderator_id):
    """Queue a modification and return its id."""
    try:
        mod_type = ModType(int(mod_type))
    except (TypeError, ValueError):
        raise InvalidModificationError(f"Unknown modification type: {mod_type!r}")

    mod_type = check_special_cases(mod_type, row_id, new_value)
    table, column = TARGETS[mod_type]
    model = TARGET_MODELS[table]

    if db.session.get(Moderator, moderator_id) is None:
        raise UnknownModeratorError(f"Unknown moderator: {moderator_id}")
    if db.session.get(Artist, artist_id) is None:
        raise InvalidModificationError(f"Unknown artist: {artist_id}")
    if mod_type == ModType.ADD_TRACK and _payload_album(new_value, row_id) != row_id:
        raise InvalidModificationError(f"Track payload names another album than {row_id}")

    result = db.session.execute(
        update(model)
        .where(model.id == row_id)
        .values(mod_pending=model.mod_pending + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.session.rollback()
        raise InvalidModificationError(f"Unknown {table} row: {row_id}")

    mod = Modification(
        tab=table,
        col=column,
        row_id=row_id,
        artist_id=artist_id,
        type=int(mod_type),
        prev_value=prev_value,
        new_value=new_value,
        submitted_at=utcnow(),
        moderator_id=moderator_id,
        yes_votes=0,
        no_votes=0,
        status=int(ModStatus.OPEN),
    )
    db.session.add(mod)
    db.session.commit()

    log.info("Moderator %s submitted modification %s (%s on %s %s)",
             moderator_id, mod.id, mod_type.name, table, row_id)
    return mod.id


# ========================================
# VOTING
# ========================================

def has_voted(moderator_id, mod_id):
    return db.session.execute(
        select(Vote.id).where(Vote.moderator_id == moderator_id, Vote.modification_id == mod_id)
    ).first() is not None


def _record_vote(moderator_id, mod_id, value):
    """Store one vote and bump its tally. Returns True if the vote counted."""
    mod = db.session.get(Modification, mod_id, populate_existing=True)
    if mod is None or not mod.is_open:
        log.warning("Moderator %s voted on missing or closed modification %s", moderator_id, mod_id)
        return False

    if has_voted(moderator_id, mod_id):
        log.warning("Moderator %s already voted on modification %s", moderator_id, mod_id)
        return False

    try:
        db.session.add(Vote(moderator_id=moderator_id, modification_id=mod_id, vote=int(value)))
        if value != VoteValue.ABSTAIN:
            tally = Modification.yes_votes if value == VoteValue.YES else Modification.no_votes
            result = db.session.execute(
                update(Modification)
                .where(Modification.id == mod_id, Modification.status == ModStatus.OPEN)
                .values({tally.key: tally + 1})
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                # Closed by another worker in the meantime
                db.session.rollback()
                log.warning("Modification %s closed before moderator %s's vote landed", mod_id, moderator_id)
                return False
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        log.warning("Moderator %s already voted on modification %s", moderator_id, mod_id)
        return False
    return True


def cast_votes(moderator_id, yes_ids=(), no_ids=(), abstain_ids=(), now=None):
    """Record a moderator's votes and resolve anything that became unanimous.

    Returns the number of votes recorded.
    """
    if db.session.get(Moderator, moderator_id) is None:
        raise UnknownModeratorError(f"Unknown moderator: {moderator_id}")

    recorded = 0
    counted = []
    for ids, value in ((yes_ids, VoteValue.YES), (no_ids, VoteValue.NO), (abstain_ids, VoteValue.ABSTAIN)):
        for mod_id in ids:
            if _record_vote(moderator_id, int(mod_id), value):
                recorded += 1
                if value != VoteValue.ABSTAIN:
                    counted.append(int(mod_id))

    check_modifications(counted, now=now)
    return recorded


# ========================================
# RESOLUTION
# ========================================

def decide(yes_votes, no_votes, elapsed, voting_period, threshold):
    """Decide what happens to an open modification.

    Returns APPLY, ModStatus.FAILEDVOTE, or None to leave it open.
    """
    if elapsed >= voting_period:
        # Ties fail
        return APPLY if yes_votes > no_votes else ModStatus.FAILEDVOTE
    if yes_votes == threshold and no_votes == 0:
        return APPLY
    if no_votes == threshold and yes_votes == 0:
        return ModStatus.FAILEDVOTE
    return None


def credit_moderator(moderator_id, accepted):
    """Bump the submitter's accepted or rejected counter."""
    counter = Moderator.mods_accepted if accepted else Moderator.mods_rejected
    db.session.execute(
        update(Moderator)
        .where(Moderator.id == moderator_id)
        .values({counter.key: counter + 1})
        .execution_options(synchronize_session=False)
    )


def close_modification(mod_id, table, row_id, status):
    """Move an OPEN modification to `status` and release its target row.

    Returns False if the modification was no longer open.
    """
    result = db.session.execute(
        update(Modification)
        .where(Modification.id == mod_id, Modification.status == ModStatus.OPEN)
        .values(status=int(status))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False

    model = TARGET_MODELS.get(table)
    if model is not None:
        released = db.session.execute(
            update(model)
            .where(model.id == row_id, model.mod_pending > 0)
            .values(mod_pending=model.mod_pending - 1)
            .execution_options(synchronize_session=False)
        )
        if released.rowcount != 1:
            log.warning("Modification %s: no pending count to release on %s %s", mod_id, table, row_id)
    return True


def _lock_open(mod_id):
    return db.session.execute(
        select(Modification)
        .where(Modification.id == mod_id, Modification.status == ModStatus.OPEN)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()


def check_modification(mod_id, now, voting_period, threshold):
    """Resolve one modification in its own transaction.

    Returns the terminal status, or None if it stays open.
    """
    mod = _lock_open(mod_id)
    if mod is None:
        db.session.rollback()
        return None

    elapsed = (now - mod.submitted_at).total_seconds()
    outcome = decide(mod.yes_votes, mod.no_votes, elapsed, voting_period, threshold)
    if outcome is None:
        db.session.rollback()
        return None

    # Read what close needs before the appliers touch the session
    table, row_id, moderator_id = mod.tab, mod.row_id, mod.moderator_id
    yes_votes, no_votes = mod.yes_votes, mod.no_votes

    if outcome == APPLY:
        try:
            status = apply_modification(mod)
        except Exception:
            log.exception("Applying modification %s failed", mod_id)
            db.session.rollback()
            if _lock_open(mod_id) is None:
                db.session.rollback()
                return None
            status = ModStatus.ERROR
    else:
        status = ModStatus.FAILEDVOTE

    if not close_modification(mod_id, table, row_id, status):
        db.session.rollback()
        return None
    credit_moderator(moderator_id, status == ModStatus.APPLIED)
    db.session.commit()

    log.info("Modification %s closed: %s (yes=%s, no=%s)",
             mod_id, status.name, yes_votes, no_votes)
    return status


def check_modifications(ids, now=None, voting_period=None, threshold=None):
    """Resolve each modification in `ids`; returns {id: status} for those closed."""
    config = current_app.config
    if now is None:
        now = utcnow()
    if voting_period is None:
        voting_period = config['MOD_PERIOD']
    if isinstance(voting_period, timedelta):
        voting_period = voting_period.total_seconds()
    if threshold is None:
        threshold = config['NUM_UNANIMOUS_VOTES']

    closed = {}
    for mod_id in ids:
        status = check_modification(mod_id, now, voting_period, threshold)
        if status is not None:
            closed[mod_id] = status
    return closed


def sweep_expired(now=None, voting_period=None):
    """Resolve every open modification whose voting period has run out."""
    if now is None:
        now = utcnow()
    if voting_period is None:
        voting_period = current_app.config['MOD_PERIOD']
    if not isinstance(voting_period, timedelta):
        voting_period = timedelta(seconds=voting_period)

    ids = db.session.execute(
        select(Modification.id)
        .where(Modification.status == ModStatus.OPEN, Modification.submitted_at <= now - voting_period)
        .order_by(Modification.id)
    ).scalars().all()
    if ids:
        log.info("Sweeping %d expired modifications", len(ids))
    return check_modifications(ids, now=now, voting_period=voting_period)
