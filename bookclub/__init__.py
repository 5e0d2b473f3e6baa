import os
from datetime import timedelta
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate, upgrade
from dotenv import load_dotenv

# Load environment variables (override=True ensures .env values take precedence)
load_dotenv(override=True)

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()

# Fixed point budget each member distributes across a meet's candidates
VOTING_POINTS_TOTAL = 15


def create_app(config_name=None):
    """Application factory pattern."""
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-me')
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///dev.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Session configuration - the login collaborator stores member_id here
    app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(days=30)
    app.config['SESSION_COOKIE_SECURE'] = os.environ.get('PRODUCTION') is not None  # HTTPS only in production
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

    app.config['VOTING_POINTS_TOTAL'] = VOTING_POINTS_TOTAL

    if config_name == 'testing':
        app.config['TESTING'] = True
        app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite://'

    # Fix for postgres:// vs postgresql:// (some providers use older postgres:// format)
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('postgres://'):
        app.config['SQLALCHEMY_DATABASE_URI'] = app.config['SQLALCHEMY_DATABASE_URI'].replace(
            'postgres://', 'postgresql://', 1
        )

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)

    # Register blueprints
    from bookclub.routes.api import api_bp
    from bookclub.routes.meets import meets_bp
    from bookclub.routes.books import books_bp
    app.register_blueprint(api_bp)
    app.register_blueprint(meets_bp)
    app.register_blueprint(books_bp)

    # Import models so they're known to Flask-Migrate
    from bookclub import models

    from bookclub.seed_members import seed_admin_command
    app.cli.add_command(seed_admin_command)

    # Auto-run migrations when deployed
    if os.environ.get('RUN_MIGRATIONS'):
        with app.app_context():
            upgrade()

    return app
