"""
Email delivery for queued notification jobs.

Auth flows only insert rows into ``jobs``; this module is the consumer
that renders and sends them with Flask-Mail.
"""
import logging
from datetime import datetime

from flask import current_app
from flask_mail import Message

from extensions import db, mail
from models import Job

logger = logging.getLogger(__name__)


def init_mail(app):
    """Initialize Flask-Mail with app configuration."""
    # Suppress email sending in development if not configured
    app.config.setdefault('MAIL_SUPPRESS_SEND', not app.config.get('MAIL_USERNAME'))

    mail.init_app(app)
    return mail


def _welcome_message(job):
    app_name = current_app.config['APP_NAME']
    user = job.data.get('user', {})
    name = user.get('display_name') or job.recipient

    subject = f"Welcome to {app_name}"
    text_body = f"""
Hi {name},

Thanks for signing up for {app_name}. Your account is ready to use.
"""
    html_body = f"""
<p>Hi {name},</p>
<p>Thanks for signing up for <strong>{app_name}</strong>. Your account is ready to use.</p>
"""
    return subject, text_body, html_body


def _reset_password_message(job):
    app_name = current_app.config['APP_NAME']
    user = job.data.get('user', {})
    name = user.get('display_name') or job.recipient
    link = job.data['link']
    expires = user.get('reset_token_expires_at', '')[:16].replace('T', ' ')

    subject = f"Reset your {app_name} password"
    text_body = f"""
Hi {name},

Someone requested a password reset for your {app_name} account.
Use the link below to choose a new password:
{link}

This link expires at {expires} UTC. If you didn't request a reset, you can safely ignore this email.
"""
    html_body = f"""
<p>Hi {name},</p>
<p>Someone requested a password reset for your <strong>{app_name}</strong> account.</p>
<p><a href="{link}">Choose a new password</a></p>
<p style="word-break: break-all;">{link}</p>
<p>This link expires at {expires} UTC. If you didn't request a reset, you can safely ignore this email.</p>
"""
    return subject, text_body, html_body


RENDERERS = {
    Job.TEMPLATE_WELCOME: _welcome_message,
    Job.TEMPLATE_RESET_PASSWORD: _reset_password_message,
}


def send_job(job):
    """
    Render and send one notification job.

    Args:
        job: Job model instance

    Returns:
        bool: True if email sent (or suppressed), False otherwise
    """
    job.attempts += 1
    try:
        subject, text_body, html_body = RENDERERS[job.template](job)
        msg = Message(
            subject=subject,
            recipients=[job.recipient],
            body=text_body,
            html=html_body
        )

        if current_app.config.get('MAIL_SUPPRESS_SEND'):
            logger.info(f"[EMAIL SUPPRESSED] Would send {job.template} email to: {job.recipient}")
        else:
            mail.send(msg)
            logger.info(f"[EMAIL] {job.template} email sent to: {job.recipient}")

        job.status = Job.STATUS_SENT
        job.sent_at = datetime.utcnow()
        job.last_error = None
        return True

    except Exception as e:
        logger.error(f"[EMAIL ERROR] Failed to send job {job.id}: {e}")
        job.last_error = str(e)
        if job.attempts >= Job.MAX_ATTEMPTS:
            job.status = Job.STATUS_FAILED
        return False


def deliver_pending_jobs(limit=50):
    """
    Send queued notification jobs, oldest first.

    Args:
        limit: Maximum number of jobs to process in this run

    Returns:
        dict: Counts of sent and failed deliveries
    """
    jobs = Job.query.filter(
        Job.status == Job.STATUS_PENDING,
        Job.attempts < Job.MAX_ATTEMPTS
    ).order_by(Job.created_at).limit(limit).all()

    results = {'sent': 0, 'failed': 0}
    for job in jobs:
        if send_job(job):
            results['sent'] += 1
        else:
            results['failed'] += 1
        db.session.commit()

    return results

