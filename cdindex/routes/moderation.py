"""Moderation routes - submitting, voting on and listing modifications."""
from flask import Blueprint, request, jsonify, abort, current_app
from flask_babel import gettext as _

from cdindex.errors import ModerationError
from cdindex.models import db, Modification, Moderator, Artist
from cdindex.models.types import ListType
from cdindex.routes.auth import login_required, current_moderator_id
from cdindex.services.listing import get_moderation_list, to_entry
from cdindex.services.moderation import submit, cast_votes

moderation_bp = Blueprint('moderation', __name__)

LIST_TYPES = {
    'new': ListType.NEW,
    'mine': ListType.MINE,
    'voted': ListType.VOTED,
}


def serialize(entry):
    """Make a listing entry JSON friendly."""
    data = dict(entry)
    for key in ('submitted_at', 'expires_at'):
        if data.get(key) is not None:
            data[key] = data[key].isoformat()
    return data


def _id_list(name):
    try:
        return [int(v) for v in request.form.getlist(name) if v.strip()]
    except ValueError:
        abort(400)


@moderation_bp.route('/moderation')
@login_required
def moderation_list():
    list_type = LIST_TYPES.get(request.args.get('type', 'new'))
    if list_type is None:
        abort(400)
    index = request.args.get('index', 0, type=int)
    num = request.args.get('num', current_app.config['MODERATION_PAGE_SIZE'], type=int)

    total, entries = get_moderation_list(list_type, current_moderator_id(), index=index, num=num)
    return jsonify(total=total, index=index, num=num, modifications=[serialize(e) for e in entries])


@moderation_bp.route('/moderation/<int:mod_id>')
@login_required
def modification_detail(mod_id):
    mod = db.get_or_404(Modification, mod_id)
    artist = db.session.get(Artist, mod.artist_id)
    moderator = db.session.get(Moderator, mod.moderator_id)
    entry = to_entry(
        mod,
        artist_name=artist.name if artist else None,
        moderator_name=moderator.name if moderator else None,
    )
    return jsonify(serialize(entry))


@moderation_bp.route('/moderation/submit', methods=['POST'])
@login_required
def submit_modification():
    form = request.form
    try:
        mod_type = int(form['type'])
        row_id = int(form['row_id'])
        artist_id = int(form['artist_id'])
    except (KeyError, ValueError):
        return jsonify(error=_('type, row_id and artist_id are required integers.')), 400

    try:
        mod_id = submit(
            form.get('prev_value'),
            form.get('new_value'),
            mod_type,
            row_id,
            artist_id,
            current_moderator_id(),
        )
    except ModerationError as e:
        current_app.logger.info("Rejected submission: %s", e)
        return jsonify(error=str(e)), 400

    return jsonify(id=mod_id, message=_('Modification submitted for review.')), 201


@moderation_bp.route('/moderation/vote', methods=['POST'])
@login_required
def vote():
    yes_ids = _id_list('yes')
    no_ids = _id_list('no')
    abstain_ids = _id_list('abstain')

    try:
        recorded = cast_votes(current_moderator_id(), yes_ids, no_ids, abstain_ids)
    except ModerationError as e:
        return jsonify(error=str(e)), 400

    return jsonify(recorded=recorded, message=_('Votes recorded.'))
