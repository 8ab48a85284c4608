"""Runtime orchestration: terminal host, input decoding, navigation, and the loop.

``run_app`` is imported lazily so importing layout or navigation helpers does
not pull in the whole application.
"""

from __future__ import annotations


def run_app(*args, **kwargs):
    """Lazily import the application entrypoint to avoid package-import cycles."""
    from .app import run_app as _run_app

    return _run_app(*args, **kwargs)


__all__ = ["run_app"]
