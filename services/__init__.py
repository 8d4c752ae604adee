"""
Service layer for the account system.

Services encapsulate business logic separate from route handlers.
"""
from services.redirect_service import RedirectTargetResolver
from services.credential_service import CredentialStore
from services.reset_token_service import ResetTokenManager
from services.account_service import AccountProvisioner
from services.notification_service import NotificationQueue
from services.auth_service import AuthResult, AuthSessionController

__all__ = [
    'RedirectTargetResolver',
    'CredentialStore',
    'ResetTokenManager',
    'AccountProvisioner',
    'NotificationQueue',
    'AuthResult',
    'AuthSessionController',
]
