"""Domain operations on the client roster."""

from .roster import RosterService, StagedUpload

__all__ = ["RosterService", "StagedUpload"]
