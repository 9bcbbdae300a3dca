"""
Sequential migration of work list pairs.

Each pair moves through PENDING, then SKIPPED when its source reference is
already in the succeeded log, or TRANSFERRING and then SUCCEEDED or FAILED.
A failed pair is recorded and the loop moves on; there are no retries.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from image_migrator.logging_utils import get_logger
from image_migrator.migration_log import MigrationLog
from image_migrator.models import MigrationPair

logger = get_logger(__name__)


class PairState(Enum):
    PENDING = "pending"
    SKIPPED = "skipped"
    TRANSFERRING = "transferring"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ExecutionResult:
    """Outcome of one executor run, in work list order"""

    outcomes: List[Tuple[MigrationPair, PairState]] = field(default_factory=list)

    def count(self, state: PairState) -> int:
        return sum(1 for _, s in self.outcomes if s == state)

    @property
    def succeeded(self) -> int:
        return self.count(PairState.SUCCEEDED)

    @property
    def failed(self) -> int:
        return self.count(PairState.FAILED)

    @property
    def skipped(self) -> int:
        return self.count(PairState.SKIPPED)

    def to_dict(self) -> Dict[str, int]:
        return {"succeeded": self.succeeded, "failed": self.failed, "skipped": self.skipped}


class MigrationExecutor:
    """Transfers pairs in work list order, one attempt each"""

    def __init__(self, transfer_client, migration_log: MigrationLog, provisioner=None):
        """
        Args:
            transfer_client: SkopeoClient or PodmanClient (anything with copy_image(source, destination) -> bool)
            migration_log: Succeeded/failed logs
            provisioner: Optional RepositoryProvisioner run before each transfer
        """
        self.transfer_client = transfer_client
        self.migration_log = migration_log
        self.provisioner = provisioner

    def migrate_pair(self, pair: MigrationPair) -> PairState:
        source = str(pair.source)
        if self.migration_log.is_succeeded(source):
            logger.info(f"{source} was already migrated, skipping")
            return PairState.SKIPPED

        if self.provisioner is not None:
            try:
                self.provisioner.ensure(pair.destination)
            except Exception as e:
                # A missing repository surfaces as a failed push
                logger.warning(f"Could not provision repository for {pair.destination}: {e}")

        logger.info(f"Migrating {source} -> {pair.destination}")
        if self.transfer_client.copy_image(source, str(pair.destination)):
            self.migration_log.record_success(source)
            return PairState.SUCCEEDED

        self.migration_log.record_failure(source)
        return PairState.FAILED

    def run(self, pairs: List[MigrationPair]) -> ExecutionResult:
        result = ExecutionResult()
        total = len(pairs)
        for index, pair in enumerate(pairs, 1):
            state = self.migrate_pair(pair)
            logger.debug(f"[{index}/{total}] {pair.source}: {state.value}")
            result.outcomes.append((pair, state))

        logger.info(
            f"Transfer phase finished: {result.succeeded} succeeded, {result.failed} failed, {result.skipped} skipped"
        )
        return result
