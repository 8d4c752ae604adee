"""
Configuration classes for Flask application.

Usage:
    from config import config
    app.config.from_object(config[config_name])

Services never read app.config directly; they receive an AuthSettings
value built once per app (see AuthSettings.from_config).
"""
import os
from dataclasses import dataclass
from datetime import timedelta


def _env_flag(name, default):
    return os.environ.get(name, default).lower() == 'true'


class Config:
    """Base configuration with defaults."""

    APP_NAME = os.environ.get('APP_NAME', 'Account Center')

    # Security
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Database
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session security
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)

    # Rate limiting (Flask-Limiter config keys)
    RATELIMIT_DEFAULT = "200 per day; 50 per hour"
    # Use Redis for persistent rate limiting if REDIS_URL is set, otherwise memory
    RATELIMIT_STORAGE_URL = os.environ.get('REDIS_URL', 'memory://')

    # Mail configuration (used by the notification job consumer)
    MAIL_SERVER = os.environ.get('MAIL_SERVER')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 587))
    MAIL_USE_TLS = _env_flag('MAIL_USE_TLS', 'True')
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER', 'noreply@example.com')

    # Site URL for email links; also the only origin absolute redirects may target
    SITE_URL = os.environ.get('SITE_URL', 'http://localhost:5001')

    # Locales served under /<locale>/...
    DEFAULT_LOCALE = os.environ.get('DEFAULT_LOCALE', 'en')
    SUPPORTED_LOCALES = tuple(os.environ.get('SUPPORTED_LOCALES', 'en,es,fr,de').split(','))

    # Where login/register land when no pending redirect is stored
    DEFAULT_LOGIN_REDIRECT = os.environ.get('DEFAULT_LOGIN_REDIRECT', '/dashboard')

    # Password reset tokens
    RESET_TOKEN_LIFETIME = timedelta(minutes=int(os.environ.get('RESET_TOKEN_LIFETIME_MINUTES', 30)))
    # None means "same as the lifetime"
    RESET_TOKEN_COOLDOWN = None

    # Login greeting is picked by the hour in this zone
    GREETING_TIMEZONE = os.environ.get('GREETING_TIMEZONE', 'UTC')

    # Password policy applied by the credential store
    PASSWORD_MIN_LENGTH = int(os.environ.get('PASSWORD_MIN_LENGTH', 1))
    PASSWORD_MAX_LENGTH = int(os.environ.get('PASSWORD_MAX_LENGTH', 128))

    # Log the user in after a reset even if the new password was rejected
    LOGIN_AFTER_FAILED_RESET = _env_flag('LOGIN_AFTER_FAILED_RESET', 'True')

    # Sent/failed notification jobs older than this are pruned by cleanup
    JOB_RETENTION_DAYS = int(os.environ.get('JOB_RETENTION_DAYS', 30))


class DevelopmentConfig(Config):
    """Development configuration."""

    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        'sqlite:///database.db'
    )


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG = False

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        'sqlite:////data/database.db'
    )

    # Secure cookies in production (requires HTTPS)
    SESSION_COOKIE_SECURE = True

    # Content Security Policy
    CSP_POLICY = (
        "default-src 'self'; "
        "style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; "
        "font-src 'self'; "
        "connect-src 'self';"
    )


class TestingConfig(Config):
    """Testing configuration."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    SITE_URL = 'https://app.example'

    # Disable CSRF for testing
    WTF_CSRF_ENABLED = False

    # Disable rate limiting for tests
    RATELIMIT_ENABLED = False

    # Never talk to an SMTP server from tests
    MAIL_SUPPRESS_SEND = True


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}


def get_config_name():
    """Get configuration name from environment."""
    flask_env = os.environ.get('FLASK_ENV', 'development')
    if flask_env == 'production':
        return 'production'
    elif os.environ.get('TESTING'):
        return 'testing'
    return 'development'


@dataclass(frozen=True)
class AuthSettings:
    """Immutable view of the settings the auth services depend on."""

    trusted_origin: str
    default_locale: str
    supported_locales: tuple
    default_login_redirect: str
    reset_token_lifetime: timedelta
    reset_token_cooldown: timedelta
    greeting_timezone: str
    password_min_length: int
    password_max_length: int
    login_after_failed_reset: bool

    @classmethod
    def from_config(cls, cfg):
        """Build settings from a Flask config mapping."""
        lifetime = cfg['RESET_TOKEN_LIFETIME']
        cooldown = cfg.get('RESET_TOKEN_COOLDOWN') or lifetime
        if cooldown > lifetime:
            raise ValueError('RESET_TOKEN_COOLDOWN cannot exceed RESET_TOKEN_LIFETIME')
        return cls(
            trusted_origin=cfg['SITE_URL'].rstrip('/'),
            default_locale=cfg['DEFAULT_LOCALE'],
            supported_locales=tuple(cfg['SUPPORTED_LOCALES']),
            default_login_redirect=cfg['DEFAULT_LOGIN_REDIRECT'],
            reset_token_lifetime=lifetime,
            reset_token_cooldown=cooldown,
            greeting_timezone=cfg['GREETING_TIMEZONE'],
            password_min_length=cfg['PASSWORD_MIN_LENGTH'],
            password_max_length=cfg['PASSWORD_MAX_LENGTH'],
            login_after_failed_reset=cfg['LOGIN_AFTER_FAILED_RESET'],
        )
