"""Article Rewrite Agent - rewrites the newest article using web references."""

__version__ = "0.1.0"
