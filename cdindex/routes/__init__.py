"""Routes package - Blueprint registration."""
from cdindex.routes.main import main_bp
from cdindex.routes.auth import auth_bp
from cdindex.routes.moderation import moderation_bp
from cdindex.routes.admin import admin_bp


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(moderation_bp)
    app.register_blueprint(admin_bp)
