"""Photo Roster: a small photo-management backend for a client roster."""

__version__ = "0.1.0"
