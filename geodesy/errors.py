from __future__ import annotations


class GeodesyError(RuntimeError):
    """Raised when a geodesy command cannot be completed."""


class EmptyRegionError(GeodesyError):
    """The scanned region holds no source voxel."""


class MalformedMarkerError(GeodesyError):
    """A blocker marker was found without a usable machine marker layout."""


class SnapshotError(GeodesyError):
    """A world snapshot or block id could not be parsed."""


class DegenerateEfficiencyWarning(UserWarning):
    """Layout efficiency was requested for a geode without growable nodes."""
