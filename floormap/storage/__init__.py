"""Persistence — structured key/value tier, image blob tier, and the repository."""

from floormap.storage.blobs import BlobStore
from floormap.storage.repository import ProjectRepository
from floormap.storage.structured import StructuredStore

__all__ = [
    "BlobStore",
    "ProjectRepository",
    "StructuredStore",
]
