"""Admin routes - moderation dashboard, expiry sweep and moderator management."""
from flask import Blueprint, request, jsonify, session
from flask_babel import gettext as _

from cdindex.models import db, Modification, Moderator
from cdindex.models.types import ModStatus
from cdindex.routes.auth import admin_required, VALID_ROLES
from cdindex.services.moderation import sweep_expired

admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/admin')
@admin_required
def dashboard():
    open_mods = Modification.query.filter_by(status=int(ModStatus.OPEN)) \
        .order_by(Modification.submitted_at).all()
    return jsonify(open=[
        {
            'id': mod.id,
            'type': mod.type,
            'table': mod.tab,
            'row_id': mod.row_id,
            'yes_votes': mod.yes_votes,
            'no_votes': mod.no_votes,
            'submitted_at': mod.submitted_at.isoformat(),
        }
        for mod in open_mods
    ])


@admin_bp.route('/admin/sweep', methods=['POST'])
@admin_required
def sweep():
    """Close every modification whose voting period has run out."""
    closed = sweep_expired()
    return jsonify(closed={str(mod_id): status.name for mod_id, status in closed.items()})


# ==================== MODERATOR MANAGEMENT ====================

@admin_bp.route('/admin/moderators')
@admin_required
def moderators_list():
    """List all moderators with their reputation."""
    moderators = Moderator.query.order_by(Moderator.created_at.desc()).all()
    return jsonify(moderators=[
        {
            'id': m.id,
            'name': m.name,
            'role': m.role,
            'mods_accepted': m.mods_accepted,
            'mods_rejected': m.mods_rejected,
        }
        for m in moderators
    ])


@admin_bp.route('/admin/moderators/<int:moderator_id>/role', methods=['POST'])
@admin_required
def update_moderator_role(moderator_id):
    """Update a moderator's role."""
    moderator = db.get_or_404(Moderator, moderator_id)
    new_role = request.form.get('role')

    # Prevent admin from demoting themselves
    if moderator.id == session.get('moderator_id'):
        return jsonify(error=_('You cannot change your own role.')), 400

    if new_role not in VALID_ROLES:
        return jsonify(error=_('Invalid role.')), 400

    moderator.role = new_role
    db.session.commit()
    return jsonify(id=moderator.id, role=moderator.role)
