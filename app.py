"""
Main Flask application for the account system.
"""
import os
import logging
import click
from flask import Flask, request, redirect

from extensions import db, csrf, limiter, login_manager, migrate
from email_service import init_mail
from config import config, get_config_name
from blueprints import register_blueprints
from services.auth_service import init_auth

# Import auth to register the user_loader callback
import auth  # noqa: F401

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Application factory."""
    app = Flask(__name__)

    # Load configuration from centralized config module
    app.config.from_object(config[config_name or get_config_name()])

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)  # Flask-Migrate for database migrations
    csrf.init_app(app)
    login_manager.init_app(app)
    limiter.init_app(app)  # Reads RATELIMIT_* from app.config
    init_mail(app)  # Flask-Mail for queued notification jobs

    # Auth services read an immutable snapshot of the config
    init_auth(app)

    register_blueprints(app)
    register_security_middleware(app)
    register_cli(app)

    @app.route('/')
    def index():
        """Send bare-root visitors to the default locale."""
        return redirect(f"/{app.config['DEFAULT_LOCALE']}")

    with app.app_context():
        db.create_all()

    return app


# ============================================================================
# Security Middleware
# ============================================================================

def register_security_middleware(app):

    @app.before_request
    def enforce_https():
        """Redirect HTTP to HTTPS in production."""
        if not app.debug and not app.testing:
            # Check X-Forwarded-Proto header (set by reverse proxies)
            if request.headers.get('X-Forwarded-Proto') == 'http':
                url = request.url.replace('http://', 'https://', 1)
                return redirect(url, code=301)

    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses."""
        # Prevent clickjacking
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'

        # Prevent MIME type sniffing
        response.headers['X-Content-Type-Options'] = 'nosniff'

        # Referrer policy
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        # Content Security Policy - production only
        csp_policy = app.config.get('CSP_POLICY')
        if csp_policy:
            response.headers['Content-Security-Policy'] = csp_policy

        # Strict Transport Security (HTTPS only in production)
        if not app.debug and not app.testing:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response


# ============================================================================
# Background Scheduler for Queue Delivery and Cleanup
# ============================================================================

def init_scheduler(app):
    """Initialize APScheduler for email delivery and cleanup.

    Only runs in production mode to avoid duplicate jobs during development.
    Passes the app explicitly to ensure proper Flask context in background threads.
    """
    if app.debug or app.testing:
        logger.info("Scheduler disabled in debug/testing mode")
        return None

    try:
        from apscheduler.schedulers.background import BackgroundScheduler
        from email_service import deliver_pending_jobs
        from services.cleanup_service import run_cleanup_with_app

        def _deliver():
            with app.app_context():
                deliver_pending_jobs()

        scheduler = BackgroundScheduler()

        scheduler.add_job(
            func=_deliver,
            trigger='interval',
            minutes=1,
            id='deliver_emails',
            replace_existing=True
        )

        # Run cleanup at 2 AM UTC daily
        scheduler.add_job(
            func=lambda: run_cleanup_with_app(app, run_all=True),
            trigger='cron',
            hour=2,
            minute=0,
            id='daily_cleanup',
            replace_existing=True
        )

        scheduler.start()
        logger.info("Background scheduler started for email delivery and cleanup")
        return scheduler
    except Exception as e:
        logger.warning(f"Failed to initialize scheduler: {e}")
        return None


# ============================================================================
# CLI Commands
# ============================================================================

def register_cli(app):

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize the database."""
        db.create_all()
        click.echo('Database initialized!')

    @app.cli.command('send-emails')
    @click.option('--limit', default=50, help='Maximum number of queued jobs to deliver')
    def send_emails_command(limit):
        """Deliver queued notification emails."""
        from email_service import deliver_pending_jobs

        results = deliver_pending_jobs(limit=limit)
        click.echo(f"Sent {results['sent']} emails, {results['failed']} failed")

    @app.cli.command('cleanup')
    @click.option('--jobs', 'job_days', default=0, help='Days after which to delete finished jobs (0 to skip)')
    @click.option('--all', 'run_all', is_flag=True, help='Run all cleanup tasks with default settings')
    def cleanup_command(job_days, run_all):
        """Clear expired reset tokens and prune old notification jobs.

        Examples:
            flask cleanup              # Clear expired reset tokens
            flask cleanup --jobs 30    # Also delete finished jobs older than 30 days
            flask cleanup --all        # Run everything with configured defaults
        """
        from services.cleanup_service import run_cleanup_with_app

        results = run_cleanup_with_app(app, job_days=job_days, run_all=run_all)
        click.echo(
            f"Cleanup complete: {results['tokens_cleared']} reset tokens, "
            f"{results['jobs_deleted']} jobs"
        )


if __name__ == '__main__':
    app = create_app()
    _scheduler = init_scheduler(app)

    # Default to 5001 for local development (avoids macOS AirPlay Receiver conflict)
    port = int(os.environ.get('PORT', 5001))

    # Allow disabling auto-reload for stable testing (NO_RELOAD=1 python app.py)
    use_reloader = os.environ.get('NO_RELOAD') != '1'

    app.run(debug=app.debug, host='0.0.0.0', port=port, use_reloader=use_reloader)
