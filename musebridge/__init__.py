"""Provider-agnostic access to a user's music library."""

__version__ = "1.0.0"
