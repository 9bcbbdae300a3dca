"""Pre-transfer namespace summary and end-of-run counts."""

from typing import List

from tabulate import tabulate

from image_migrator.logging_utils import get_logger
from image_migrator.migration_log import MigrationLog
from image_migrator.models import NamespaceSummary
from image_migrator.report_utils import sizeof_fmt

logger = get_logger(__name__)


class SummaryReporter:
    """Renders the namespace table and the final migration counts"""

    def __init__(self, show_sizes: bool = False):
        self.show_sizes = show_sizes

    def namespace_table(self, summaries: List[NamespaceSummary]) -> str:
        headers = ["Namespace", "Image Count", "Tag Count"]
        if self.show_sizes:
            headers.append("Tag Size")

        rows = []
        for summary in summaries:
            row = [summary.namespace, summary.image_count, summary.tag_count]
            if self.show_sizes:
                row.append(sizeof_fmt(summary.total_size or 0))
            rows.append(row)

        return tabulate(rows, headers=headers, tablefmt="grid")

    def print_namespace_summary(self, summaries: List[NamespaceSummary]) -> None:
        print("\nMigration plan by namespace:")
        print(self.namespace_table(summaries))
        total_tags = sum(s.tag_count for s in summaries)
        print(f"Total: {sum(s.image_count for s in summaries)} images, {total_tags} tags\n")

    def completion_message(self, migration_log: MigrationLog) -> str:
        return (
            f"Migration completed. {migration_log.success_count()} images migrated successfully. "
            f"{migration_log.failure_count()} images failed to migrate."
        )

    def print_final_summary(self, migration_log: MigrationLog) -> None:
        message = self.completion_message(migration_log)
        logger.info(message)
        print(message)

        distinct = migration_log.distinct_failures()
        if distinct:
            print(f"{len(distinct)} distinct references failed; see {migration_log.failure_log_path}")
