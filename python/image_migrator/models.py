"""Data model for image stream inventory and migration planning."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class Tag:
    """A tag within an image stream"""

    name: str
    created: Optional[datetime] = None
    size: Optional[int] = None  # estimated, sum of layer sizes in bytes


@dataclass
class Image:
    """An image stream within a namespace"""

    name: str
    tags: List[Tag] = field(default_factory=list)


@dataclass(frozen=True)
class ImageReference:
    """Fully-qualified image reference: registry/path:tag"""

    registry: str
    path: str
    tag: str

    @property
    def repository(self) -> str:
        """Registry and path, without the tag"""
        return f"{self.registry}/{self.path}"

    @property
    def repository_path(self) -> str:
        """Path without the registry host (the Quay repository identifier)"""
        return self.path

    def __str__(self) -> str:
        return f"{self.repository}:{self.tag}"

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """Parse "host[:port]/path:tag" into its parts.

        The tag separator is the last ':' after the last '/', so registry ports are preserved.
        """
        if "/" not in reference:
            raise ValueError(f"Image reference has no registry host: {reference}")
        registry, remainder = reference.split("/", 1)
        if ":" not in remainder.rsplit("/", 1)[-1]:
            raise ValueError(f"Image reference has no tag: {reference}")
        path, tag = remainder.rsplit(":", 1)
        if not path or not tag:
            raise ValueError(f"Malformed image reference: {reference}")
        return cls(registry=registry, path=path, tag=tag)


@dataclass(frozen=True)
class MigrationPair:
    """A single unit of work: copy source to destination"""

    source: ImageReference
    destination: ImageReference

    def to_line(self) -> str:
        return f"{self.source} {self.destination}"

    @classmethod
    def from_line(cls, line: str) -> "MigrationPair":
        parts = line.split()
        if len(parts) != 2:
            raise ValueError(f"Expected '<source> <destination>', got: {line!r}")
        return cls(source=ImageReference.parse(parts[0]), destination=ImageReference.parse(parts[1]))


@dataclass
class NamespaceSummary:
    """Planned work for a namespace, reported before any transfer starts"""

    namespace: str
    image_count: int = 0
    tag_count: int = 0
    total_size: Optional[int] = None  # None when size estimation is disabled
