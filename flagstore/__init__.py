"""flagstore - feature toggle storage on Redis."""

__version__ = "0.1.0"
