"""Forward Microsoft 365 mail to a Telegram chat."""

__version__ = "0.1.0"
