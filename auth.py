"""
Flask-Login authentication configuration.
"""
from flask import flash, redirect, request, url_for

from extensions import login_manager
from services.auth_service import get_auth_controller


@login_manager.user_loader
def load_user(user_id):
    """
    User loader callback for Flask-Login.
    Loads a user from the database by user ID.

    Args:
        user_id: The ID of the user to load

    Returns:
        User object if found, None otherwise
    """
    return get_auth_controller().credentials.get_by_id(int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    """Send anonymous users to the login page, remembering where they were going."""
    flash(login_manager.login_message, login_manager.login_message_category)
    return redirect(url_for('auth.login', return_to=request.full_path.rstrip('?')))
