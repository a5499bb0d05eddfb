"""cleansys: interactive disk cleanup for Linux."""

__version__ = "0.11.0"
