"""
Unit tests for utility functions.
Tests email validation, wait formatting, greetings and config loading.
"""
import pytest
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo


pytestmark = pytest.mark.unit


class TestEmailHelpers:
    """Tests for is_valid_email and normalize_email."""

    @pytest.mark.parametrize('email', ['a@x.com', 'first.last+tag@sub.example.org'])
    def test_valid(self, email):
        from utils import is_valid_email
        assert is_valid_email(email)

    @pytest.mark.parametrize('email', ['', 'a@b', 'no-at.example.com', 'a b@x.com', None, 5])
    def test_invalid(self, email):
        from utils import is_valid_email
        assert not is_valid_email(email)

    def test_normalize(self):
        from utils import normalize_email
        assert normalize_email('  A@X.Com ') == 'a@x.com'
        assert normalize_email(None) is None


class TestIsBlank:
    """Tests for is_blank."""

    @pytest.mark.parametrize('value,expected', [
        (None, True),
        ('', True),
        ('  \t', True),
        (123, True),
        ('x', False),
        (' x ', False),
    ])
    def test_is_blank(self, value, expected):
        from utils import is_blank
        assert is_blank(value) is expected


class TestFormatWait:
    """Tests for format_wait."""

    @pytest.mark.parametrize('delta,expected', [
        (timedelta(seconds=10), 'in a few seconds'),
        (timedelta(seconds=-5), 'in a few seconds'),
        (timedelta(seconds=60), 'in a minute'),
        (timedelta(minutes=25), 'in 25 minutes'),
        (timedelta(minutes=60), 'in an hour'),
        (timedelta(hours=3), 'in 3 hours'),
    ])
    def test_format_wait(self, delta, expected):
        from utils import format_wait
        assert format_wait(delta) == expected


class TestGreetingFor:
    """Tests for greeting_for."""

    def test_boundaries(self):
        from utils import greeting_for

        assert greeting_for(datetime(2024, 1, 1, 11, 59)) == 'Good morning'
        assert greeting_for(datetime(2024, 1, 1, 12, 0)) == 'Good afternoon'
        assert greeting_for(datetime(2024, 1, 1, 17, 59)) == 'Good afternoon'
        assert greeting_for(datetime(2024, 1, 1, 18, 0)) == 'Good evening'

    def test_aware_datetime_uses_local_hour(self):
        from utils import greeting_for

        utc_noon = datetime(2024, 6, 1, 12, 0, tzinfo=ZoneInfo('UTC'))
        tokyo = utc_noon.astimezone(ZoneInfo('Asia/Tokyo'))
        assert greeting_for(tokyo) == 'Good evening'

    def test_defaults_to_now(self):
        from utils import greeting_for
        assert greeting_for() in ('Good morning', 'Good afternoon', 'Good evening')


class TestMessages:
    """Tests for translate."""

    def test_known_key(self):
        from messages import translate
        assert translate('LOGGED_OUT') == 'You have logged out.'

    def test_unknown_key_falls_back(self):
        from messages import translate, MESSAGES
        assert translate('NOPE') == MESSAGES['UNKNOWN_ERROR']

    def test_arguments_interpolated(self):
        from messages import translate
        assert translate('PASSWORD_RESET_LIMIT', 'in 5 minutes').endswith('try again in 5 minutes.')


class TestAuthSettings:
    """Tests for AuthSettings.from_config."""

    def _config(self, **overrides):
        from config import TestingConfig
        cfg = {k: getattr(TestingConfig, k) for k in dir(TestingConfig) if k.isupper()}
        cfg.update(overrides)
        return cfg

    def test_cooldown_defaults_to_lifetime(self):
        from config import AuthSettings

        settings = AuthSettings.from_config(self._config())
        assert settings.reset_token_lifetime == timedelta(minutes=30)
        assert settings.reset_token_cooldown == settings.reset_token_lifetime

    def test_trailing_slash_stripped_from_origin(self):
        from config import AuthSettings

        settings = AuthSettings.from_config(self._config(SITE_URL='https://app.example/'))
        assert settings.trusted_origin == 'https://app.example'

    def test_cooldown_longer_than_lifetime_rejected(self):
        from config import AuthSettings

        with pytest.raises(ValueError):
            AuthSettings.from_config(self._config(RESET_TOKEN_COOLDOWN=timedelta(hours=2)))

    def test_settings_are_immutable(self):
        from dataclasses import FrozenInstanceError
        from config import AuthSettings

        settings = AuthSettings.from_config(self._config())
        with pytest.raises(FrozenInstanceError):
            settings.trusted_origin = 'https://evil.example'
