"""
Succeeded and failed migration logs.

Both logs are plain text, one human-readable line per event, and each line
starts with the source image reference. The succeeded log doubles as the
resumption index: a reference found there is never transferred again.
"""

from pathlib import Path
from typing import List, Set

from image_migrator.logging_utils import get_logger

logger = get_logger(__name__)

SUCCESS_SUFFIX = "was migrated successfully."
FAILURE_SUFFIX = "migration failed."
NO_TAGS_SUFFIX = "has no tags. Logging to failures."


def _read_lines(path: Path) -> List[str]:
    if not path.exists():
        return []
    with open(path, "r") as f:
        return [line.rstrip("\n") for line in f if line.strip()]


def _first_token(line: str) -> str:
    parts = line.split()
    return parts[0] if parts else ""


class MigrationLog:
    """Append-only succeeded/failed logs with an exact-match lookup of succeeded references"""

    def __init__(self, success_log_path: str, failure_log_path: str):
        self.success_log_path = Path(success_log_path)
        self.failure_log_path = Path(failure_log_path)
        self._succeeded: Set[str] = set(_first_token(line) for line in _read_lines(self.success_log_path))

    def reset_failure_log(self) -> None:
        """Truncate the failure log at the start of a run"""
        self.failure_log_path.parent.mkdir(parents=True, exist_ok=True)
        open(self.failure_log_path, "w").close()

    def _append(self, path: Path, line: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a") as f:
            f.write(line + "\n")

    def is_succeeded(self, source_reference: str) -> bool:
        return str(source_reference) in self._succeeded

    def record_success(self, source_reference: str) -> None:
        line = f"{source_reference} {SUCCESS_SUFFIX}"
        logger.info(line)
        self._append(self.success_log_path, line)
        self._succeeded.add(str(source_reference))

    def record_failure(self, source_reference: str) -> None:
        line = f"{source_reference} {FAILURE_SUFFIX}"
        logger.error(line)
        self._append(self.failure_log_path, line)

    def record_no_tags(self, image_repository: str) -> None:
        """Record an image with no selectable tags (e.g. "registry/ns/app")"""
        line = f"{image_repository} {NO_TAGS_SUFFIX}"
        logger.warning(line)
        self._append(self.failure_log_path, line)

    def record_namespace_error(self, namespace: str, reason: str) -> None:
        line = f"{namespace} namespace could not be listed: {reason}"
        logger.error(line)
        self._append(self.failure_log_path, line.replace("\n", " "))

    def success_lines(self) -> List[str]:
        return _read_lines(self.success_log_path)

    def failure_lines(self) -> List[str]:
        return _read_lines(self.failure_log_path)

    def success_count(self) -> int:
        return len(self.success_lines())

    def failure_count(self) -> int:
        """Number of failure events (the failure log is not deduplicated)"""
        return len(self.failure_lines())

    def distinct_failures(self) -> List[str]:
        """Distinct failing references, in first-seen order"""
        return list(dict.fromkeys(_first_token(line) for line in self.failure_lines()))
