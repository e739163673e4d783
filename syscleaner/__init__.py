"""Clean temporary files, caches and logs to free disk space."""

__version__ = "0.1.0"