"""
Auth session controller.

Orchestrates login, logout, registration, forgot-password and
reset-password. Every flow either returns an AuthResult or raises an
AuthError; the routes turn those into redirects, JSON or error pages.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from flask import current_app
from flask_login import login_user, logout_user
from sqlalchemy.exc import SQLAlchemyError

from config import AuthSettings
from extensions import db
from messages import translate
from models import Job, User
from services.account_service import AccountProvisioner
from services.credential_service import CredentialStore
from services.errors import (
    InvalidCredentials, InvalidEmail, InvalidPassword, InvalidResetToken,
    StorageError, WeakPassword,
)
from services.notification_service import NotificationQueue
from services.redirect_service import RedirectTargetResolver
from services.reset_token_service import ResetTokenManager
from utils import greeting_for, is_blank, is_valid_email, normalize_email

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'auth_controller'


@dataclass
class AuthResult:
    """Outcome of a successful auth flow."""

    redirect_to: Optional[str] = None
    message_key: Optional[str] = None
    greeting: Optional[str] = None
    locale: Optional[str] = None
    user: Optional[User] = None

    @property
    def message(self):
        return translate(self.message_key) if self.message_key else None

    def to_dict(self):
        data = {}
        if self.message_key:
            data['message'] = self.message
        if self.redirect_to:
            data['redirectTo'] = self.redirect_to
        return data


class AuthSessionController:
    """Compose the auth services into request-level flows."""

    def __init__(self, settings, credentials=None, provisioner=None, tokens=None,
                 redirects=None, notifications=None):
        self.settings = settings
        self.credentials = credentials or CredentialStore(settings)
        self.provisioner = provisioner or AccountProvisioner(self.credentials)
        self.tokens = tokens or ResetTokenManager(settings, self.credentials)
        self.redirects = redirects or RedirectTargetResolver(settings.trusted_origin)
        self.notifications = notifications or NotificationQueue()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def default_destination(self, locale):
        return f"/{locale}{self.settings.default_login_redirect}"

    def _post_auth_redirect(self, session, locale):
        """Pending redirect from the session, else the default destination."""
        return self.redirects.pop_pending(session) or self.default_destination(locale)

    def _greeting(self, user):
        now = datetime.now(ZoneInfo(self.settings.greeting_timezone))
        return f"{greeting_for(now)} {user.display_name}."

    def remember_redirect(self, session, args):
        """Capture ``return_to``/``redirect_to`` before showing the login page."""
        return self.redirects.remember(session, args)

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def login(self, email, password, locale, session):
        """
        Verify credentials and establish the session.

        Raises:
            InvalidCredentials: For unknown email, wrong password or malformed input
        """
        user = self.credentials.get_by_email(email) if isinstance(email, str) else None
        if user is None or not user.is_active or not self.credentials.verify(user, password):
            logger.warning(f"Failed login attempt for email: {email}")
            raise InvalidCredentials()

        # Send the user back to the locale they last used
        if (user.last_locale and user.last_locale != locale
                and user.last_locale in self.settings.supported_locales):
            locale = user.last_locale

        redirect_to = self._post_auth_redirect(session, locale)
        login_user(user)

        user.last_login = datetime.utcnow()
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Could not record last login for user {user.id}")

        logger.info(f"Successful login for user: {user.email} (ID: {user.id})")
        return AuthResult(
            redirect_to=redirect_to,
            greeting=self._greeting(user),
            locale=locale,
            user=user,
        )

    def register(self, email, password, locale, session, name=None):
        """
        Create an account, log it in and queue the welcome email.

        Raises:
            InvalidEmail, InvalidPassword, WeakPassword, DuplicateEmail, StorageError
        """
        user = self.provisioner.provision(email, password, locale=locale, name=name)
        login_user(user)
        redirect_to = self._post_auth_redirect(session, locale)

        self.notifications.enqueue_safely(
            Job.TEMPLATE_WELCOME,
            user.email,
            {'user': user.to_dict()},
        )

        return AuthResult(
            redirect_to=redirect_to,
            message_key='REGISTERED',
            locale=locale,
            user=user,
        )

    def forgot_password(self, email, locale):
        """
        Start a password reset.

        The result is the same whether or not the email has an account; only
        an account with a token still cooling down gets RateLimited.

        Raises:
            InvalidEmail: For a syntactically invalid email
            RateLimited: If a token was issued for this account too recently
        """
        email = normalize_email(email)
        if not is_valid_email(email):
            raise InvalidEmail()

        result = AuthResult(message_key='PASSWORD_RESET_SENT', locale=locale)

        user = self.credentials.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for an unknown email")
            return result

        token = self.tokens.issue(user)

        self.notifications.enqueue_safely(
            Job.TEMPLATE_RESET_PASSWORD,
            user.email,
            {
                'user': {
                    'display_name': user.display_name,
                    'reset_token_expires_at': user.reset_token_expires_at.isoformat(),
                },
                'link': f"{self.settings.trusted_origin}/{locale}/reset-password/{token}",
            },
        )
        return result

    def reset_password(self, email, password, token, locale):
        """
        Finish a password reset.

        When ``login_after_failed_reset`` is set the account is logged in even
        if the new password was rejected (it keeps its old password), and the
        rejection is raised afterwards.

        Raises:
            InvalidEmail, InvalidPassword, InvalidResetToken, InvalidOrExpired,
            WeakPassword, StorageError
        """
        if not is_valid_email(normalize_email(email)):
            raise InvalidEmail()
        if is_blank(password):
            raise InvalidPassword()
        if is_blank(token):
            raise InvalidResetToken()

        user = self.tokens.validate(email, token)

        error = None
        try:
            user = self.tokens.consume(user, password, token=token)
        except (WeakPassword, StorageError) as e:
            error = e

        if error is None or self.settings.login_after_failed_reset:
            login_user(user)

        if error is not None:
            raise error

        return AuthResult(redirect_to=f"/{locale}", message_key='RESET_PASSWORD', locale=locale, user=user)

    def logout(self, locale):
        logout_user()
        return AuthResult(redirect_to=f"/{locale}", message_key='LOGGED_OUT', locale=locale)


def init_auth(app):
    """Build the controller from app config and attach it to the app."""
    controller = AuthSessionController(AuthSettings.from_config(app.config))
    app.extensions[EXTENSION_KEY] = controller
    return controller


def get_auth_controller():
    return current_app.extensions[EXTENSION_KEY]
