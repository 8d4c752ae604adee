"""
Authentication blueprint for user registration, login, logout, and password reset.

Every route lives under a locale prefix, e.g. /en/login.
"""
from flask import Blueprint

auth_bp = Blueprint('auth', __name__, url_prefix='/<locale>')

from blueprints.auth import routes  # noqa: F401, E402
