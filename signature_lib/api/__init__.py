"""Service layer used by the CLI and the web app."""

from .services import SignatureService, build_notes

__all__ = ['SignatureService', 'build_notes']
