"""
Database models for the account system.
"""
from flask_login import UserMixin
from datetime import datetime

from extensions import db


class User(db.Model, UserMixin):
    """Account model for authentication."""

    __tablename__ = 'users'

    ROLE_ADMIN = 'admin'
    ROLE_USER = 'user'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    email = db.Column(db.String(254), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(100), nullable=True)
    role = db.Column(db.String(10), default=ROLE_USER, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_locale = db.Column(db.String(10), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    # Set together and cleared together by ResetTokenManager only
    reset_token = db.Column(db.String(64), unique=True, nullable=True)
    reset_token_expires_at = db.Column(db.DateTime, nullable=True)

    @property
    def display_name(self):
        """Name used in greetings; falls back to the email's local part."""
        return self.name or self.email.split('@')[0]

    def to_dict(self):
        """Public fields only; never the hash or reset token."""
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'display_name': self.display_name,
            'role': self.role,
            'last_locale': self.last_locale,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<User {self.id}: {self.email} ({self.role})>'


class AdminClaim(db.Model):
    """Single-row guard deciding which account became the first admin.

    The unique slot makes the claim an atomic conditional insert: of any
    number of concurrent registrations only one can commit the row.
    """

    __tablename__ = 'admin_claims'

    FIRST_ADMIN = 'first_admin'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    slot = db.Column(db.String(32), unique=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    claimed_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<AdminClaim {self.slot}: User {self.user_id}>'


class Job(db.Model):
    """Queued outbound notification (consumed by email_service)."""

    __tablename__ = 'jobs'

    STATUS_PENDING = 'pending'
    STATUS_SENT = 'sent'
    STATUS_FAILED = 'failed'

    TEMPLATE_WELCOME = 'welcome'
    TEMPLATE_RESET_PASSWORD = 'reset-password'
    TEMPLATES = (TEMPLATE_WELCOME, TEMPLATE_RESET_PASSWORD)

    MAX_ATTEMPTS = 3

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(32), default='email', nullable=False)
    template = db.Column(db.String(32), nullable=False)
    recipient = db.Column(db.String(254), nullable=False)
    data = db.Column(db.JSON, nullable=False, default=dict)
    status = db.Column(db.String(10), default=STATUS_PENDING, nullable=False, index=True)
    attempts = db.Column(db.Integer, default=0, nullable=False)
    last_error = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    sent_at = db.Column(db.DateTime, nullable=True)

    def __repr__(self):
        return f'<Job {self.id}: {self.template} -> {self.recipient} [{self.status}]>'
