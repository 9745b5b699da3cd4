"""Flask web API for signature tracing.

Importing this package creates the app and registers its routes::

    from signature_lib.web import app
"""

from .flask_app import app
from . import routes  # noqa: F401

__all__ = ['app']
