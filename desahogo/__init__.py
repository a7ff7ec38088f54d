"""desahogo — moderation and crisis detection for an anonymous support community."""

__version__ = "0.1.0"
