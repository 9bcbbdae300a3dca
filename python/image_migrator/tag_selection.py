"""
Tag selection for image streams.

Chooses which tags of an image are migrated: every reported tag, or the N
most recently created ones. Tags without a creation timestamp cannot be
ranked and are left out of an N-most-recent selection.
"""

from dataclasses import dataclass
from typing import List, Optional

from image_migrator.config_manager import ConfigValidationError
from image_migrator.models import Image, Tag


@dataclass(frozen=True)
class SelectionMode:
    """Either all tags (latest is None) or the `latest` most recent tags"""

    latest: Optional[int] = None

    @property
    def is_all(self) -> bool:
        return self.latest is None

    def __str__(self) -> str:
        return "all" if self.is_all else str(self.latest)

    @classmethod
    def parse(cls, value) -> "SelectionMode":
        """Parse 'all' or a positive integer"""
        text = str(value).strip()
        if text.lower() == "all":
            return cls()
        try:
            latest = int(text)
        except ValueError:
            raise ConfigValidationError(
                f"Tag selection mode must be 'all' or a positive integer, got: {value!r}"
            )
        if latest < 1:
            raise ConfigValidationError(f"Number of latest tags must be at least 1, got: {latest}")
        return cls(latest=latest)


class TagSelector:
    """Select the tags to migrate for each image"""

    def __init__(self, mode: SelectionMode):
        self.mode = mode

    def select(self, image: Image) -> List[Tag]:
        if self.mode.is_all:
            return list(image.tags)

        dated = [tag for tag in image.tags if tag.created is not None]
        # sorted() is stable, so tags sharing a timestamp keep their reported order
        ranked = sorted(dated, key=lambda tag: tag.created, reverse=True)
        return ranked[: self.mode.latest]
