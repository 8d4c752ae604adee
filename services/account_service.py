"""
Account provisioning service.

Creates accounts and decides, atomically, which one becomes the first admin.
"""
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from extensions import db
from models import AdminClaim, User
from services.errors import DuplicateEmail, InvalidEmail, InvalidPassword, StorageError
from utils import is_blank, is_valid_email, normalize_email

logger = logging.getLogger(__name__)


class AccountProvisioner:
    """Service for creating new accounts."""

    def __init__(self, credentials):
        self.credentials = credentials

    def provision(self, email, raw_password, locale=None, name=None):
        """
        Create a new account.

        The first account in the system is made admin; every later one is a
        regular user. The decision is an insert into ``admin_claims`` inside
        the account's own transaction, so concurrent signups cannot both win.

        Args:
            email (str): Account email, normalized to lower case
            raw_password (str): Plain password, hashed by the credential store
            locale (str, optional): Locale the account registered under
            name (str, optional): Display name

        Returns:
            User: The committed account

        Raises:
            InvalidEmail, InvalidPassword, WeakPassword, DuplicateEmail, StorageError
        """
        email = normalize_email(email)
        if not is_valid_email(email):
            raise InvalidEmail()
        if is_blank(raw_password):
            raise InvalidPassword()

        if self.credentials.get_by_email(email):
            raise DuplicateEmail()

        user = User(
            email=email,
            name=name.strip() if isinstance(name, str) and name.strip() else None,
            role=User.ROLE_USER,
            last_locale=locale,
        )
        # Policy violations surface before anything is written
        self.credentials.set_password(user, raw_password)

        try:
            db.session.add(user)
            db.session.flush()

            if self._claim_first_admin(user):
                user.role = User.ROLE_ADMIN

            db.session.commit()
        except IntegrityError:
            # Lost a race on the unique email index
            db.session.rollback()
            raise DuplicateEmail()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Failed to create account for {email}")
            raise StorageError()

        logger.info(f"Registered user {user.id} ({user.email}) as {user.role}")
        return user

    def _claim_first_admin(self, user):
        """Try to take the first-admin slot for ``user``; True when it wins."""
        if self.credentials.count_admins() > 0:
            return False

        try:
            with db.session.begin_nested():
                db.session.add(AdminClaim(slot=AdminClaim.FIRST_ADMIN, user_id=user.id))
        except IntegrityError:
            logger.info(f"First-admin slot already claimed; user {user.id} stays a regular user")
            return False
        return True
