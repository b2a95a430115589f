"""oplfs: index PlayStation 2 disc images by title ID."""

__version__ = "0.1.0"
