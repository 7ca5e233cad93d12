"""Authentication routes and decorators."""
from functools import wraps

from flask import Blueprint, session, request, jsonify, abort
from flask_babel import gettext as _
from werkzeug.security import generate_password_hash, check_password_hash

from cdindex.models import db, Moderator
import re

auth_bp = Blueprint('auth', __name__)

VALID_ROLES = ['moderator', 'admin']


def is_valid_email(email):
    """Standard email regex validation."""
    regex = r'^[a-z0-9]+[\._]?[a-z0-9]+[@]\w+[.]\w{2,3}$'
    return re.search(regex, email)


def is_strong_password(password):
    """At least 8 chars, 1 uppercase, 1 number or special char."""
    if len(password) < 8:
        return False
    if not re.search(r"[A-Z]", password):
        return False
    if not re.search(r"[\d\W]", password):
        return False
    return True


# ==================== RBAC Decorators (MUST be defined before routes that use them) ====================

def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'moderator_id' not in session:
            abort(401)
        return f(*args, **kwargs)
    return decorated_function


def role_required(roles):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if 'moderator_id' not in session:
                abort(401)
            if session.get('moderator_role') not in roles:
                abort(403)  # Forbidden
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def admin_required(f):
    return role_required(['admin'])(f)


def current_moderator_id():
    return session.get('moderator_id')


# ==================== Routes ====================

@auth_bp.route('/register', methods=['POST'])
def register():
    name = (request.form.get('name') or '').strip()
    email = request.form.get('email')
    password = request.form.get('password')
    confirm_password = request.form.get('confirm_password')

    error = None

    # Validations
    if not name:
        error = _('Name is required.')
    elif email and not is_valid_email(email):
        error = _('Invalid email.')
    elif not password:
        error = _('Password is required.')
    elif password != confirm_password:
        error = _('Passwords do not match.')
    elif not is_strong_password(password):
        error = _('Password must be at least 8 characters long with an uppercase letter and a number or symbol.')
    elif Moderator.query.filter_by(name=name).first() is not None:
        error = _('Moderator %(name)s is already registered.', name=name)

    if error is not None:
        return jsonify(error=error), 400

    # The first account administers the rest
    role = 'admin' if Moderator.query.count() == 0 else 'moderator'
    moderator = Moderator(
        name=name,
        email=email,
        password_hash=generate_password_hash(password),
        role=role
    )
    db.session.add(moderator)
    db.session.commit()
    return jsonify(id=moderator.id, name=moderator.name, role=moderator.role), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    name = request.form.get('name')
    password = request.form.get('password') or ''

    moderator = Moderator.query.filter_by(name=name).first()
    if moderator is None or not moderator.password_hash \
            or not check_password_hash(moderator.password_hash, password):
        return jsonify(error=_('Invalid name or password.')), 401

    session.clear()
    session['moderator_id'] = moderator.id
    session['moderator_role'] = moderator.role
    session['moderator_name'] = moderator.name
    return jsonify(id=moderator.id, name=moderator.name, role=moderator.role)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    session.clear()
    return jsonify(message=_('Logged out.'))


@auth_bp.route('/profile')
@login_required
def profile():
    moderator = db.session.get(Moderator, current_moderator_id())
    if moderator is None:
        session.clear()
        abort(401)
    return jsonify(
        id=moderator.id,
        name=moderator.name,
        email=moderator.email,
        role=moderator.role,
        mods_accepted=moderator.mods_accepted,
        mods_rejected=moderator.mods_rejected,
    )
