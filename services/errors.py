"""
Errors raised by the auth services.

Each error carries a machine-readable ``kind``, the message key shown to
the user and the HTTP status the routes answer with.
"""
import math

from messages import translate
from utils import format_wait


class AuthError(Exception):
    """Base class for auth flow failures surfaced to the caller."""

    kind = 'auth_error'
    message_key = 'UNKNOWN_ERROR'
    status_code = 400

    def __init__(self, message_key=None, *message_args):
        if message_key:
            self.message_key = message_key
        self.message_args = message_args
        super().__init__(self.message)

    @property
    def message(self):
        return translate(self.message_key, *self.message_args)

    def to_dict(self):
        return {'error': self.kind, 'message': self.message}


class InvalidEmail(AuthError):
    kind = 'invalid_email'
    message_key = 'INVALID_EMAIL'


class InvalidPassword(AuthError):
    kind = 'invalid_password'
    message_key = 'INVALID_PASSWORD'


class DuplicateEmail(AuthError):
    kind = 'duplicate_email'
    message_key = 'EMAIL_EXISTS'


class WeakPassword(AuthError):
    kind = 'weak_password'
    message_key = 'INVALID_PASSWORD_STRENGTH'


class InvalidCredentials(AuthError):
    """Deliberately generic: never says which of email/password was wrong."""

    kind = 'invalid_credentials'
    message_key = 'INVALID_CREDENTIALS'


class InvalidResetToken(AuthError):
    kind = 'invalid_reset_token'
    message_key = 'INVALID_RESET_TOKEN'


class InvalidOrExpired(AuthError):
    """Wrong email, wrong token and expired token all look the same."""

    kind = 'invalid_or_expired'
    message_key = 'INVALID_RESET_PASSWORD'


class RateLimited(AuthError):
    kind = 'rate_limited'
    message_key = 'PASSWORD_RESET_LIMIT'

    def __init__(self, retry_after):
        self.retry_after = retry_after
        super().__init__(None, format_wait(retry_after))

    def to_dict(self):
        data = super().to_dict()
        data['retry_after'] = math.ceil(self.retry_after.total_seconds())
        return data


class StorageError(AuthError):
    kind = 'storage_error'
    message_key = 'UNKNOWN_ERROR'
    status_code = 500
