# =============================================================================
# Django Project Configuration Package
# =============================================================================
# Settings, URLs, ASGI/WSGI applications and the Celery app.
#
# The Celery app is imported here so tasks are registered when Django starts
# and `reprocess_webhook_event.delay()` has a configured app to send to.
# =============================================================================

from config.celery import app as celery_app

__all__ = ("celery_app",)
