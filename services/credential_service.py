"""
Credential store.

Owns password hashing and account lookups. Nothing outside this module
reads or writes ``User.password_hash``.
"""
import logging

from werkzeug.security import generate_password_hash, check_password_hash

from extensions import db
from models import User
from services.errors import WeakPassword
from utils import is_blank, normalize_email

logger = logging.getLogger(__name__)


class CredentialStore:
    """Service for password verification, password updates and account lookups."""

    def __init__(self, settings):
        self.min_length = settings.password_min_length
        self.max_length = settings.password_max_length

    def check_strength(self, raw_password):
        """
        Apply the password policy.

        Raises:
            WeakPassword: If the password is blank, too short or too long
        """
        if is_blank(raw_password):
            raise WeakPassword()
        if len(raw_password) < self.min_length or len(raw_password) > self.max_length:
            raise WeakPassword()

    def set_password(self, user, raw_password):
        """
        Hash and store a new password on the account (not committed).

        Raises:
            WeakPassword: If the password fails the policy; the account is untouched
        """
        self.check_strength(raw_password)
        # Use pbkdf2:sha256 explicitly so hashes verify on every supported Python
        user.password_hash = generate_password_hash(raw_password, method='pbkdf2:sha256')

    @staticmethod
    def verify(user, raw_password):
        """Check a raw password against the stored hash."""
        if user is None or not isinstance(raw_password, str) or not user.password_hash:
            return False
        try:
            return check_password_hash(user.password_hash, raw_password)
        except ValueError:
            # Malformed stored hash counts as a failed verification
            logger.error(f"Unreadable password hash for user {user.id}")
            return False

    @staticmethod
    def get_by_email(email):
        """Find an account by email (case-insensitive)."""
        if is_blank(email):
            return None
        return User.query.filter_by(email=normalize_email(email)).first()

    @staticmethod
    def get_by_id(user_id):
        return db.session.get(User, user_id)

    @staticmethod
    def count_admins():
        return User.query.filter_by(role=User.ROLE_ADMIN).count()
