"""Top-level package for the TenderDesk tender tracking backend."""

# Lazy imports keep `tenderdesk.app.core.database` importable on its own
# (tests and scripts configure the environment before the app is built).

__all__ = ["create_app", "app"]


def __getattr__(name):
    """Lazy import to prevent circular dependencies."""
    if name == "app" or name == "create_app":
        from tenderdesk.app.main import app as _app, create_app as _create_app
        if name == "app":
            return _app
        return _create_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
