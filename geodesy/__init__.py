"""Amethyst geode farm designer for voxel worlds."""

__version__ = "0.1.0"
