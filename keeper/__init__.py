"""Secret Keeper: register, log in, keep one secret."""

__version__ = "0.1.0"
