"""
Cleanup service for scheduled maintenance tasks.

Handles:
- Expired password reset tokens
- Retention of delivered/failed notification jobs
"""
import logging
from datetime import datetime, timedelta

from extensions import db
from models import Job
from services.auth_service import get_auth_controller

logger = logging.getLogger(__name__)


def cleanup_expired_reset_tokens():
    """Clear reset tokens that have passed their expiry.

    Expired tokens already fail validation; clearing them also lifts the
    reset cooldown for those accounts and keeps the unique index small.

    Returns:
        Number of accounts whose token was cleared.
    """
    count = get_auth_controller().tokens.purge_expired()
    if count > 0:
        logger.info(f"Cleared {count} expired password reset tokens")
    return count


def cleanup_old_jobs(days=30):
    """Delete sent or failed notification jobs older than the retention period.

    Pending jobs are never deleted here, however old.

    Args:
        days: Number of days to retain finished jobs.

    Returns:
        Number of jobs deleted.
    """
    cutoff = datetime.utcnow() - timedelta(days=days)

    count = Job.query.filter(
        Job.status.in_([Job.STATUS_SENT, Job.STATUS_FAILED]),
        Job.created_at < cutoff
    ).delete(synchronize_session=False)

    db.session.commit()

    if count > 0:
        logger.info(f"Cleaned up {count} old notification jobs (older than {days} days)")

    return count


def run_cleanup_with_app(app, tokens=True, job_days=0, run_all=False):
    """Run cleanup tasks with a specific Flask app context.

    Used by the scheduler and CLI commands where we need to pass the app explicitly.

    Args:
        app: Flask application instance.
        tokens: Whether to clear expired reset tokens.
        job_days: Days after which to delete finished jobs (0 to skip).
        run_all: If True, run all cleanup tasks with configured defaults.

    Returns:
        Dict with cleanup results.
    """
    results = {
        'tokens_cleared': 0,
        'jobs_deleted': 0
    }

    with app.app_context():
        if run_all or tokens:
            results['tokens_cleared'] = cleanup_expired_reset_tokens()

        if run_all or job_days > 0:
            days = job_days if job_days > 0 else app.config['JOB_RETENTION_DAYS']
            results['jobs_deleted'] = cleanup_old_jobs(days=days)

    return results
