"""Performance evaluation service: scoring engine, evaluation lifecycle and action plans."""

__version__ = "1.0.0"
