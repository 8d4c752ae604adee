"""
Flask blueprints for organizing routes by domain.
"""
from blueprints.auth import auth_bp


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(auth_bp)
