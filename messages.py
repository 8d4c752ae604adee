"""
User-facing messages keyed by machine-readable message keys.

Only English strings ship here; a translation layer can replace
MESSAGES per locale without touching callers.
"""

MESSAGES = {
    'INVALID_EMAIL': 'Please enter a valid email address.',
    'INVALID_PASSWORD': 'Please enter a password.',
    'INVALID_CREDENTIALS': 'Invalid email or password.',
    'EMAIL_EXISTS': 'An account with this email already exists.',
    'INVALID_RESET_TOKEN': 'Reset token was missing or blank.',
    'INVALID_RESET_PASSWORD': 'Reset token and email were not valid together.',
    'INVALID_PASSWORD_STRENGTH': 'Password was not strong enough.',
    'PASSWORD_RESET_LIMIT': 'A password reset was requested recently. Please try again %s.',
    'PASSWORD_RESET_SENT': 'We have sent you an email with a link to reset your password.',
    'RESET_PASSWORD': 'You have successfully reset your password.',
    'REGISTERED': 'You have successfully registered.',
    'LOGGED_OUT': 'You have logged out.',
    'UNKNOWN_ERROR': 'An unknown error has occurred. We have been alerted of this issue. Please try again.',
}


def translate(key, *args):
    """Return the message for ``key``, formatted with ``args`` when given."""
    message = MESSAGES.get(key, MESSAGES['UNKNOWN_ERROR'])
    if args:
        message = message % args
    return message
