"""
Utility functions shared by the auth services and routes.
"""
import re
from datetime import datetime
from zoneinfo import ZoneInfo

from flask import request


# Email validation regex pattern
EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def is_valid_email(email):
    """Validate email format using regex."""
    return isinstance(email, str) and EMAIL_REGEX.match(email) is not None


def is_blank(value):
    """True for None, non-strings and whitespace-only strings."""
    return not isinstance(value, str) or not value.strip()


def normalize_email(email):
    """Strip and lower-case an email for storage and lookups."""
    return email.strip().lower() if isinstance(email, str) else email


def format_wait(delta):
    """
    Format a remaining wait time relative to now.

    Args:
        delta: timedelta until the action is allowed again

    Returns:
        str: e.g. "in 25 minutes", "in a minute", "in 1 hour"
    """
    seconds = max(int(delta.total_seconds()), 0)
    if seconds < 45:
        return 'in a few seconds'
    minutes = round(seconds / 60)
    if minutes <= 1:
        return 'in a minute'
    if minutes < 60:
        return f'in {minutes} minutes'
    hours = round(minutes / 60)
    return 'in an hour' if hours == 1 else f'in {hours} hours'


def greeting_for(now=None, tz_name='UTC'):
    """
    Pick the time-of-day greeting.

    Hours 12 through 17 inclusive are afternoon, later hours evening,
    everything before noon morning.
    """
    if now is None:
        now = datetime.now(ZoneInfo(tz_name))
    hour = now.hour
    if 12 <= hour <= 17:
        return 'Good afternoon'
    elif hour > 17:
        return 'Good evening'
    return 'Good morning'


def wants_json():
    """True when the client prefers a JSON body over HTML/redirects."""
    best = request.accept_mimetypes.best_match(['text/html', 'application/json'])
    return best == 'application/json'
