"""
CD Index moderation - Application Factory
"""
import logging
import os

import click
from flask import Flask, current_app, has_request_context, request
from dotenv import load_dotenv

from cdindex.extensions import db, babel
from cdindex.routes import register_blueprints
from config.settings import config


def get_locale():
    """Determine the best locale for the user."""
    if not has_request_context():
        return current_app.config['BABEL_DEFAULT_LOCALE']
    lang = request.cookies.get('babel_translation')
    if lang:
        return lang
    return request.accept_languages.best_match(['en', 'es'])


def create_app(config_name=None):
    """Application Factory."""
    load_dotenv()

    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config.get(config_name, config['default']))

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    )

    # Initialize extensions
    db.init_app(app)
    babel.init_app(app, locale_selector=get_locale)

    # Register blueprints
    register_blueprints(app)

    # CLI Commands
    register_cli_commands(app)

    return app


def register_cli_commands(app):
    """Register CLI commands."""

    @app.cli.command("init-db")
    def init_db_command():
        """Creates database tables."""
        db.create_all()
        click.echo("Initialized the database.")

    @app.cli.command("sweep-expired")
    def sweep_expired_command():
        """Closes modifications whose voting period has run out."""
        from cdindex.services.moderation import sweep_expired
        closed = sweep_expired()
        for mod_id, status in sorted(closed.items()):
            click.echo(f"Modification {mod_id}: {status.name}")
        click.echo(f"Closed {len(closed)} modification(s).")
