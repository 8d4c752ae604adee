"""
Password reset token service.

Issues, rate-limits, validates and consumes single-use reset tokens. This
is the only code that writes ``User.reset_token`` and
``User.reset_token_expires_at``; the two are always set and cleared together.
"""
import logging
import secrets
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import User
from services.errors import InvalidOrExpired, RateLimited, StorageError, WeakPassword
from utils import is_blank, normalize_email

logger = logging.getLogger(__name__)

# 32 random bytes -> 43 URL-safe characters, 256 bits of entropy
TOKEN_BYTES = 32


class ResetTokenManager:
    """Service for the reset token lifecycle."""

    def __init__(self, settings, credentials, clock=None):
        self.lifetime = settings.reset_token_lifetime
        self.cooldown = settings.reset_token_cooldown
        self.credentials = credentials
        self._clock = clock or datetime.utcnow

    def now(self):
        return self._clock()

    def issue(self, user):
        """
        Issue a fresh reset token for an account.

        The cooldown check and the write are one conditional UPDATE, so of
        two concurrent requests for the same account only one can win.

        Args:
            user (User): The account requesting a reset

        Returns:
            str: The new token

        Raises:
            RateLimited: If the current token was issued less than the cooldown ago
            StorageError: If the token could not be saved
        """
        now = self.now()
        user_id = user.id
        # A token issued less than `cooldown` ago expires after this point
        threshold = now + (self.lifetime - self.cooldown)
        token = secrets.token_urlsafe(TOKEN_BYTES)
        try:
            updated = User.query.filter(
                User.id == user_id,
                or_(
                    User.reset_token.is_(None),
                    User.reset_token_expires_at.is_(None),
                    User.reset_token_expires_at <= threshold,
                ),
            ).update(
                {User.reset_token: token, User.reset_token_expires_at: now + self.lifetime},
                synchronize_session=False,
            )

            if not updated:
                expires_at = db.session.query(User.reset_token_expires_at).filter(
                    User.id == user_id
                ).scalar()
                db.session.rollback()
                logger.warning(f"Password reset rate limited for user {user_id}")
                retry_after = expires_at - threshold if expires_at else self.cooldown
                raise RateLimited(retry_after)

            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Failed to issue reset token for user {user_id}")
            raise StorageError()

        logger.info(f"Issued password reset token for user {user_id}")
        return token

    def validate(self, email, token):
        """
        Find the account a reset token belongs to.

        Wrong email, wrong token and expired token are indistinguishable.

        Returns:
            User: The matching account

        Raises:
            InvalidOrExpired: For any mismatch
        """
        if is_blank(email) or is_blank(token):
            raise InvalidOrExpired()

        user = User.query.filter(
            User.email == normalize_email(email),
            User.reset_token == token,
            User.reset_token_expires_at > self.now(),
        ).first()

        if user is None:
            raise InvalidOrExpired()
        return user

    def consume(self, user, new_password, token=None):
        """
        Spend the account's reset token and set the new password.

        The token is cleared and committed even when the new password is
        rejected, so a failed reset never leaves a replayable token behind.
        Clearing only succeeds while the row still holds the token, so a
        token can be spent once even under concurrent requests.

        Args:
            user (User): Account returned by validate()
            new_password (str): The new plain password
            token (str, optional): Token being spent; defaults to the account's current one

        Raises:
            InvalidOrExpired: If the token was already spent
            WeakPassword: If the credential store rejected the password
            StorageError: If the changes could not be committed
        """
        password_error = None
        user_id = user.id
        if token is None:
            token = user.reset_token
        if is_blank(token):
            raise InvalidOrExpired()

        try:
            cleared = User.query.filter(
                User.id == user_id,
                User.reset_token == token,
            ).update(
                {User.reset_token: None, User.reset_token_expires_at: None},
                synchronize_session=False,
            )
            if not cleared:
                db.session.rollback()
                raise InvalidOrExpired()

            try:
                self.credentials.set_password(user, new_password)
            except WeakPassword as e:
                password_error = e

            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Failed to consume reset token for user {user_id}")
            raise StorageError()

        if password_error is not None:
            logger.warning(f"Reset token for user {user_id} spent on a rejected password")
            raise password_error

        logger.info(f"Password reset completed for user {user_id}")
        return user

    def purge_expired(self):
        """Clear expired token pairs. Returns the number of accounts touched."""
        count = User.query.filter(
            User.reset_token_expires_at.isnot(None),
            User.reset_token_expires_at <= self.now(),
        ).update(
            {User.reset_token: None, User.reset_token_expires_at: None},
            synchronize_session=False,
        )
        db.session.commit()
        return count
