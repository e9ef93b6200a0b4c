"""Project configuration package for the turf booking backend.

Importing the Celery application here makes sure shared tasks are
registered as soon as Django starts.
"""

from .celery import app as celery_app  # noqa: F401
