"""Top-level package for Django configuration.

This package holds the settings modules for each environment, the URL
configuration, the Celery application and the WSGI/ASGI entry points.
"""

# Import the Celery application as soon as Django starts. Without this
# the shared task registry will not be populated.
from .celery import app as celery_app  # noqa: F401
