"""
Redirect target service.

Validates caller-supplied "return to" URLs so the login flow cannot be
used as an open redirect.
"""
import logging

from utils import is_blank

logger = logging.getLogger(__name__)

SESSION_KEY = 'return_to'


class RedirectTargetResolver:
    """Resolve post-auth redirect targets against a trusted origin."""

    def __init__(self, trusted_origin):
        self.trusted_origin = trusted_origin

    def resolve(self, candidate, trusted_origin=None):
        """
        Validate a redirect candidate.

        Relative paths are returned as-is. Absolute URLs (anything containing
        "://") must start with the trusted origin.

        Args:
            candidate (str): Caller-supplied target, may be None
            trusted_origin (str, optional): Overrides the configured origin

        Returns:
            str or None: The accepted target, or None when blank or unsafe
        """
        if is_blank(candidate):
            return None

        origin = (trusted_origin or self.trusted_origin).rstrip('/')
        if '://' in candidate and not self._within_origin(candidate, origin):
            logger.warning(f"Prevented abuse with return_to hijacking to {candidate}")
            return None

        return candidate

    @staticmethod
    def _within_origin(candidate, origin):
        # "https://app.example.evil.test" must not pass for "https://app.example"
        if not candidate.startswith(origin):
            return False
        rest = candidate[len(origin):]
        return rest == '' or rest[0] in '/?#'

    @staticmethod
    def pick_candidate(args):
        """Return ``return_to``, or ``redirect_to`` when the first is blank."""
        candidate = args.get('return_to')
        if is_blank(candidate):
            candidate = args.get('redirect_to')
        return None if is_blank(candidate) else candidate

    def remember(self, session, args):
        """
        Store the caller's pending redirect in the session.

        A stored value that fails validation is cleared, so an unsafe target
        from an earlier request never survives into the login flow.
        """
        candidate = self.pick_candidate(args)
        if candidate is not None:
            session[SESSION_KEY] = candidate

        if SESSION_KEY in session:
            resolved = self.resolve(session[SESSION_KEY])
            if resolved is None:
                session.pop(SESSION_KEY, None)
        return session.get(SESSION_KEY)

    def pop_pending(self, session):
        """Consume the pending redirect, re-validating it on the way out."""
        return self.resolve(session.pop(SESSION_KEY, None))
