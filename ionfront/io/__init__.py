"""I/O helper subpackage."""
from . import snapshots, writer

__all__ = ["snapshots", "writer"]
