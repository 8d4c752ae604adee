"""
Authentication routes: register, login, logout, password reset.

Each POST answers with a redirect, or with JSON when the client's Accept
header prefers it. Failures raised by the controller are turned into
error responses by handle_auth_error.
"""
import logging

from flask import (
    abort, current_app, flash, g, jsonify, redirect, render_template,
    request, session, url_for,
)
from flask_login import current_user, login_required

from extensions import limiter
from services.auth_service import get_auth_controller
from services.errors import AuthError
from utils import wants_json
from blueprints.auth import auth_bp

logger = logging.getLogger(__name__)

# Form template re-rendered when a POST to the endpoint fails
FORM_TEMPLATES = {
    'auth.login': 'auth/register_or_login.html',
    'auth.register': 'auth/register_or_login.html',
    'auth.forgot_password': 'auth/forgot_password.html',
    'auth.reset_password': 'auth/reset_password.html',
}


# ============================================================================
# Locale handling
# ============================================================================

@auth_bp.url_value_preprocessor
def pull_locale(endpoint, values):
    g.locale = values.pop('locale', None) if values else None


@auth_bp.url_defaults
def add_locale(endpoint, values):
    if values.get('locale') is None:
        values['locale'] = g.get('locale') or current_app.config['DEFAULT_LOCALE']


@auth_bp.before_request
def require_supported_locale():
    if g.locale not in current_app.config['SUPPORTED_LOCALES']:
        abort(404)


# ============================================================================
# Response helpers
# ============================================================================

def _form_data():
    """JSON object body when one was sent, else the submitted form."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else request.form


def _verb():
    return 'sign up' if request.endpoint == 'auth.register' else 'sign in'


def _render_form(status=200):
    template = FORM_TEMPLATES.get(request.endpoint, 'auth/register_or_login.html')
    return render_template(
        template,
        verb=_verb(),
        token=(request.view_args or {}).get('token'),
    ), status


def _respond(result, fallback=None):
    """Turn an AuthResult into JSON or a flash + redirect."""
    if wants_json():
        return jsonify(result.to_dict())

    if result.greeting:
        flash(result.greeting, 'success')
    elif result.message:
        flash(result.message, 'success')
    return redirect(result.redirect_to or fallback or url_for('auth.home_or_dashboard'))


@auth_bp.errorhandler(AuthError)
def handle_auth_error(error):
    """Render controller failures as client/server errors."""
    if wants_json():
        return jsonify(error.to_dict()), error.status_code

    flash(error.message, 'danger')
    return _render_form(error.status_code)


# ============================================================================
# Pages
# ============================================================================

@auth_bp.route('/')
def home_or_dashboard():
    """Home page; authenticated users go straight to their dashboard."""
    if current_user.is_authenticated:
        return redirect(get_auth_controller().default_destination(g.locale))
    return render_template('home.html')


@auth_bp.route('/dashboard')
@login_required
def dashboard():
    """Default post-login destination."""
    if wants_json():
        return jsonify({'user': current_user.to_dict()})
    return render_template('dashboard.html')


# ============================================================================
# Auth flows
# ============================================================================

@auth_bp.route('/login', methods=['GET', 'POST'])
@limiter.limit("10 per minute", methods=["POST"])
def login():
    """Login page."""
    controller = get_auth_controller()

    if request.method == 'GET':
        controller.remember_redirect(session, request.args)
        return _render_form()

    data = _form_data()
    result = controller.login(data.get('email'), data.get('password'), g.locale, session)
    g.locale = result.locale
    return _respond(result)


@auth_bp.route('/register', methods=['GET', 'POST'])
@limiter.limit("5 per minute", methods=["POST"])
def register():
    """User registration page."""
    controller = get_auth_controller()

    if request.method == 'GET':
        controller.remember_redirect(session, request.args)
        return _render_form()

    data = _form_data()
    result = controller.register(
        data.get('email'), data.get('password'), g.locale, session,
        name=data.get('name'),
    )
    return _respond(result)


@auth_bp.route('/logout', methods=['GET', 'POST'])
def logout():
    """Logout current user."""
    result = get_auth_controller().logout(g.locale)
    return _respond(result)


@auth_bp.route('/forgot-password', methods=['GET', 'POST'])
@limiter.limit("3 per minute", methods=["POST"])
def forgot_password():
    """Request password reset."""
    if request.method == 'GET':
        return _render_form()

    data = _form_data()
    controller = get_auth_controller()
    result = controller.forgot_password(data.get('email'), g.locale)
    back = controller.redirects.resolve(request.referrer)
    return _respond(result, fallback=back or url_for('auth.forgot_password'))


@auth_bp.route('/reset-password/<token>', methods=['GET', 'POST'])
@limiter.limit("5 per minute", methods=["POST"])
def reset_password(token):
    """Reset password with token."""
    if request.method == 'GET':
        return _render_form()

    data = _form_data()
    result = get_auth_controller().reset_password(
        data.get('email'), data.get('password'), token, g.locale,
    )
    return _respond(result)
