"""Main routes - Index, language switching."""
from flask import Blueprint, jsonify, session, request, redirect, make_response

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    moderator = None
    if 'moderator_id' in session:
        moderator = {'name': session.get('moderator_name'), 'role': session.get('moderator_role')}

    # Catalog statistics for the home page
    from cdindex.models import Artist, Album, Track, Modification, Moderator
    from cdindex.models.types import ModStatus
    stats = {
        'artists': Artist.query.count(),
        'albums': Album.query.count(),
        'tracks': Track.query.count(),
        'open_modifications': Modification.query.filter_by(status=int(ModStatus.OPEN)).count(),
        'moderators': Moderator.query.count()
    }

    return jsonify(moderator=moderator, stats=stats)


@main_bp.route('/set_language/<lang>')
def set_language(lang):
    if lang not in ['en', 'es']:
        lang = 'en'
    resp = make_response(redirect(request.referrer or '/'))
    resp.set_cookie('babel_translation', lang)
    return resp
