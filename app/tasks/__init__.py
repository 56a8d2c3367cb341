from contextlib import contextmanager
from flask import current_app, has_app_context


@contextmanager
def app_context():
    """Reuse the caller's app context (eager mode) or build one on a worker."""
    if has_app_context():
        yield current_app._get_current_object()
        return
    from app import create_app
    app = create_app()
    with app.app_context():
        yield app
