"""libcard - Library student card records."""

__version__ = "0.1.0"


def get_version() -> str:
    """Return the installed libcard version."""
    return __version__
