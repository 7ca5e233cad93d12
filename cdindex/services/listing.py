"""Listing service - moderation queues as seen by one moderator."""
from datetime import timedelta

from flask import current_app
from sqlalchemy import func, null, select

from cdindex.models import db, Artist, Moderator, Modification, Vote
from cdindex.models.types import ListType, ModStatus, modification_name, status_name, vote_text


def _base_query(vote_column):
    return (
        select(
            Modification,
            Artist.name.label('artist_name'),
            Moderator.name.label('moderator_name'),
            vote_column.label('vote'),
        )
        .outerjoin(Artist, Modification.artist_id == Artist.id)
        .join(Moderator, Modification.moderator_id == Moderator.id)
    )


def build_list_query(list_type, moderator_id):
    """Return the select statement behind one of the moderation lists."""
    list_type = ListType(list_type)

    if list_type == ListType.NEW:
        already_voted = (
            select(Vote.id)
            .where(Vote.modification_id == Modification.id, Vote.moderator_id == moderator_id)
            .exists()
        )
        return (
            _base_query(null())
            .where(
                Modification.status == ModStatus.OPEN,
                Modification.moderator_id != moderator_id,
                ~already_voted,
            )
            .order_by(Modification.submitted_at, Modification.id)
        )

    if list_type == ListType.MINE:
        return (
            _base_query(null())
            .where(Modification.moderator_id == moderator_id)
            .order_by(Modification.submitted_at.desc(), Modification.id.desc())
        )

    return (
        _base_query(Vote.vote)
        .join(Vote, Vote.modification_id == Modification.id)
        .where(Vote.moderator_id == moderator_id)
        .order_by(Modification.submitted_at.desc(), Modification.id.desc())
    )


def to_entry(mod, artist_name=None, moderator_name=None, vote=None, voting_period=None):
    """Flatten a modification and its joined names into a dict."""
    if voting_period is None:
        voting_period = current_app.config['MOD_PERIOD']
    return {
        'id': mod.id,
        'table': mod.tab,
        'column': mod.col,
        'row_id': mod.row_id,
        'artist_id': mod.artist_id,
        'artist_name': artist_name,
        'type': mod.type,
        'type_name': str(modification_name(mod.type)),
        'prev_value': mod.prev_value,
        'new_value': mod.new_value,
        'submitted_at': mod.submitted_at,
        'expires_at': mod.submitted_at + timedelta(seconds=voting_period),
        'moderator_id': mod.moderator_id,
        'moderator_name': moderator_name,
        'yes_votes': mod.yes_votes,
        'no_votes': mod.no_votes,
        'status': mod.status,
        'status_name': str(status_name(mod.status)),
        'vote': vote,
        'vote_text': str(vote_text(vote)) if vote is not None else None,
    }


def get_moderation_list(list_type, moderator_id, index=0, num=None):
    """Return (total, entries) for one page of a moderation list.

    list_type is a ListType: NEW lists open modifications by others that
    the moderator has not voted on yet, MINE the moderator's own
    submissions, VOTED the modifications the moderator voted on along with
    that vote.
    """
    if num is None:
        num = current_app.config['MODERATION_PAGE_SIZE']
    stmt = build_list_query(list_type, moderator_id)

    total = db.session.execute(
        select(func.count()).select_from(stmt.order_by(None).subquery())
    ).scalar()
    rows = db.session.execute(stmt.offset(max(index, 0)).limit(num)).all()

    voting_period = current_app.config['MOD_PERIOD']
    entries = [
        to_entry(row.Modification, row.artist_name, row.moderator_name, row.vote, voting_period)
        for row in rows
    ]
    return total, entries
