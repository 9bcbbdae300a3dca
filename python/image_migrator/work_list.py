"""Migration work list: source/destination pairs persisted one per line."""

import logging
from pathlib import Path
from typing import List

from image_migrator.models import ImageReference, MigrationPair


def build_pair(
    source_registry: str,
    destination_registry: str,
    destination_group: str,
    namespace: str,
    image: str,
    tag: str,
) -> MigrationPair:
    """Map a source image tag to its destination under the destination group"""
    return MigrationPair(
        source=ImageReference(registry=source_registry, path=f"{namespace}/{image}", tag=tag),
        destination=ImageReference(
            registry=destination_registry,
            path=f"{destination_group}/{namespace}/{image}",
            tag=tag,
        ),
    )


class WorkList:
    """The persisted pair list. It is the single source of truth for the transfer phase."""

    def __init__(self, path: str):
        self.path = Path(path)

    def truncate(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        open(self.path, "w").close()

    def append(self, pair: MigrationPair) -> None:
        with open(self.path, "a") as f:
            f.write(pair.to_line() + "\n")

    def read(self) -> List[MigrationPair]:
        """Read pairs in file order. Blank lines are ignored, malformed lines are logged and skipped."""
        if not self.path.exists():
            raise FileNotFoundError(f"Work list not found: {self.path}")

        pairs = []
        with open(self.path, "r") as f:
            for line_number, line in enumerate(f, 1):
                if not line.strip():
                    continue
                try:
                    pairs.append(MigrationPair.from_line(line))
                except ValueError as e:
                    logging.warning(f"Skipping malformed work list line {line_number}: {e}")
        return pairs


class PairListBuilder:
    """Builds migration pairs for the selected tags and appends them to the work list"""

    def __init__(self, work_list: WorkList, source_registry: str, destination_registry: str, destination_group: str):
        self.work_list = work_list
        self.source_registry = source_registry
        self.destination_registry = destination_registry
        self.destination_group = destination_group
        self.pairs: List[MigrationPair] = []

    def start(self) -> None:
        """Truncate the work list once at the start of a planning run"""
        self.work_list.truncate()
        self.pairs = []

    def add(self, namespace: str, image: str, tag: str) -> MigrationPair:
        pair = build_pair(
            self.source_registry,
            self.destination_registry,
            self.destination_group,
            namespace,
            image,
            tag,
        )
        self.work_list.append(pair)
        self.pairs.append(pair)
        return pair
