"""hwprofile CLI - command-line interface for hardware detection.

Main entry point is in main.py which registers all commands.

Usage:
    python -m hwprofile          # Run CLI
    hwprofile detect --json
"""


def __getattr__(name: str):
    """Lazy import to avoid RuntimeWarning when running as module."""
    if name == "app":
        from hwprofile.cli.main import app

        return app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["app"]
