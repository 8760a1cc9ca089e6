"""Build PostgreSQL query text and arguments from field descriptions."""

__version__ = "0.1.0"
__all__ = ["models", "nullhandler", "postgres"]