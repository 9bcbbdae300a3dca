#!/usr/bin/env python3
"""
Migrate images from OpenShift image streams into a Quay registry.

Workflow:
1. Log into the OpenShift cluster (oc login) and list image streams per namespace
2. Select tags per image (all, or the N most recent) and optionally estimate their size
3. Write the source/destination work list and print a per-namespace summary
4. Log into both registries and copy each pair, creating Quay repositories as needed
5. Record every success and failure, then print the final counts and save a JSON report

Re-running is safe: a source reference already in the success log is skipped.

Usage examples:
  # Plan only: build the work list and print the summary
  image-migrator --namespaces ns1,ns2 --mode 2 --plan-only

  # Migrate the latest 2 tags of every image in two namespaces
  image-migrator --namespaces ns1,ns2 --mode 2

  # Resume the transfer phase from an existing work list
  image-migrator --from-work-list --force
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from image_migrator.config_manager import ConfigManager, ConfigValidationError
from image_migrator.credentials import Credentials, EnvironmentCredentialProvider, InteractiveCredentialProvider
from image_migrator.error_utils import ActionableError, create_config_error
from image_migrator.executor import ExecutionResult, MigrationExecutor
from image_migrator.health_checks import HealthChecker
from image_migrator.logging_utils import get_logger, log_exception, setup_logging
from image_migrator.migration_log import MigrationLog
from image_migrator.models import MigrationPair, NamespaceSummary
from image_migrator.openshift_client import OpenShiftInventory
from image_migrator.podman_client import PodmanClient
from image_migrator.quay_client import QuayClient, RepositoryProvisioner
from image_migrator.report_utils import save_json, sizeof_fmt
from image_migrator.size_estimator import SizeEstimator
from image_migrator.skopeo_client import SkopeoClient
from image_migrator.summary import SummaryReporter
from image_migrator.tag_selection import SelectionMode, TagSelector
from image_migrator.work_list import PairListBuilder, WorkList

logger = get_logger(__name__)


def create_transfer_client(config: ConfigManager):
    """Build the skopeo or podman client named by transfer.tool"""
    if config.get_transfer_tool() == "podman":
        return PodmanClient(
            tls_verify=config.get_tls_verify(),
            timeout=config.get_transfer_timeout(),
            remove_local_images=config.get_remove_local_images(),
            auth_file=config.get_auth_file(),
        )
    return create_skopeo_client(config)


def create_skopeo_client(config: ConfigManager) -> SkopeoClient:
    return SkopeoClient(
        tls_verify=config.get_tls_verify(),
        timeout=config.get_transfer_timeout(),
        auth_file=config.get_auth_file(),
    )


class ImageMigrator:
    """Plans and runs an OpenShift to Quay image migration"""

    def __init__(
        self,
        config: ConfigManager,
        credential_provider,
        inventory: Optional[OpenShiftInventory] = None,
        transfer_client=None,
        size_estimator: Optional[SizeEstimator] = None,
        quay_client: Optional[QuayClient] = None,
        migration_log: Optional[MigrationLog] = None,
    ):
        self.config = config
        self.credential_provider = credential_provider
        self.inventory = inventory or OpenShiftInventory(
            insecure_skip_tls_verify=config.get_cluster_insecure_skip_tls_verify()
        )
        self.transfer_client = transfer_client or create_transfer_client(config)
        if size_estimator is None and config.is_size_estimation_enabled():
            size_estimator = SizeEstimator(create_skopeo_client(config))
        self.size_estimator = size_estimator
        self.quay_client = quay_client
        self.migration_log = migration_log or MigrationLog(
            config.get_success_log_path(), config.get_failure_log_path()
        )
        self.work_list = WorkList(config.get_work_list_path())
        self.reporter = SummaryReporter(show_sizes=self.size_estimator is not None)
        self.credentials = Credentials()
        self._registry_credentials_loaded = False

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def resolve_selection_mode(self) -> SelectionMode:
        """Selection mode from config, or from the credential provider when unset"""
        value = self.config.get_selection_mode()
        if value is None:
            value = self.credential_provider.get_selection_mode()
        if value is None:
            raise create_config_error("selection.mode", None, "No tag selection mode configured or entered")
        return SelectionMode.parse(value)

    def login_cluster(self) -> None:
        """Log into the cluster, or reuse the current kubeconfig when no username is available

        Raises:
            ActionableError: If `oc login` fails
        """
        cluster = self.credential_provider.get_cluster_credentials(self.config.get_cluster_endpoint())
        self.credentials.cluster_endpoint = cluster.cluster_endpoint
        self.credentials.cluster_username = cluster.cluster_username
        self.credentials.cluster_password = cluster.cluster_password

        if not cluster.cluster_username:
            logger.info("No cluster username provided, using the current kubeconfig context")
            return
        if not cluster.cluster_endpoint:
            raise create_config_error("cluster.endpoint", None, "A cluster endpoint is required to log in")
        self.inventory.login(cluster.cluster_endpoint, cluster.cluster_username, cluster.cluster_password or "")

    def load_registry_credentials(self) -> Credentials:
        if not self._registry_credentials_loaded:
            self.credential_provider.get_registry_credentials(self.credentials)
            self._registry_credentials_loaded = True
        return self.credentials

    def login_registries(self, client) -> bool:
        """Log the client into both registries. Failures are logged, not fatal."""
        credentials = self.load_registry_credentials()
        source_ok = client.login(self.config.get_source_registry(), "unused", credentials.source_token or "")
        destination_ok = client.login(
            self.config.get_destination_registry(),
            credentials.destination_username or "",
            credentials.destination_password or "",
        )
        if not (source_ok and destination_ok):
            logger.error("Registry login failed; transfers will likely fail and be recorded in the failure log")
        return source_ok and destination_ok

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def plan(self, mode: SelectionMode) -> Tuple[List[MigrationPair], List[NamespaceSummary]]:
        """Inventory every namespace, select tags and write the work list"""
        source_registry = self.config.get_source_registry()
        builder = PairListBuilder(
            self.work_list,
            source_registry,
            self.config.get_destination_registry(),
            self.config.get_destination_group(),
        )
        builder.start()
        selector = TagSelector(mode)
        summaries = []

        for namespace in self.config.get_namespaces():
            summary = NamespaceSummary(namespace=namespace, total_size=0 if self.size_estimator else None)
            summaries.append(summary)
            logger.info(f"Listing image streams in namespace {namespace}")

            try:
                images = self.inventory.list_images(namespace)
            except ActionableError as e:
                self.migration_log.record_namespace_error(namespace, e.message)
                continue

            for image in images:
                repository = f"{source_registry}/{namespace}/{image.name}"
                tags = selector.select(image)
                if not tags:
                    self.migration_log.record_no_tags(repository)
                    continue

                summary.image_count += 1
                summary.tag_count += len(tags)
                for tag in tags:
                    if self.size_estimator is not None:
                        tag.size = self.size_estimator.estimate(repository, tag.name)
                        summary.total_size += tag.size
                    builder.add(namespace, image.name, tag.name)

        logger.info(f"Wrote {len(builder.pairs)} pairs to {self.work_list.path}")
        return builder.pairs, summaries

    # ------------------------------------------------------------------
    # Transfer
    # ------------------------------------------------------------------

    def build_provisioner(self) -> Optional[RepositoryProvisioner]:
        if not self.config.get_create_repositories():
            return None
        if self.quay_client is None:
            self.quay_client = QuayClient(
                api_url=self.config.get_quay_api_url(),
                token=self.load_registry_credentials().api_token or "",
                tls_verify=self.config.get_tls_verify(),
                not_found_indicator=self.config.get_not_found_indicator(),
                visibility=self.config.get_quay_visibility(),
            )
        return RepositoryProvisioner(self.quay_client, self.config.get_destination_group())

    def execute(self, pairs: List[MigrationPair]) -> ExecutionResult:
        self.login_registries(self.transfer_client)
        executor = MigrationExecutor(self.transfer_client, self.migration_log, provisioner=self.build_provisioner())
        return executor.run(pairs)

    def confirm_migration(self, count: int, force: bool = False) -> bool:
        """Confirmation prompt before any image is copied

        Args:
            count: Number of pairs in the work list
            force: If True, skip confirmation and return True

        Returns:
            True if user confirmed, False otherwise
        """
        if force:
            logger.warning("Force mode enabled - skipping confirmation prompt")
            return True

        print("\n" + "=" * 60)
        print(f"About to migrate {count} images to {self.config.get_destination_registry()}.")
        print("Images already in the success log will be skipped.")
        print("=" * 60)

        while True:
            response = input("Do you want to proceed with the migration? (yes/no): ").lower().strip()
            if response in ["yes", "y"]:
                return True
            elif response in ["no", "n"]:
                return False
            else:
                print("Please enter 'yes' or 'no'.")

    def build_report(
        self,
        summaries: List[NamespaceSummary],
        pairs: List[MigrationPair],
        result: Optional[ExecutionResult],
        mode: Optional[SelectionMode],
    ) -> dict:
        namespaces = []
        for summary in summaries:
            entry = {
                "namespace": summary.namespace,
                "image_count": summary.image_count,
                "tag_count": summary.tag_count,
            }
            if summary.total_size is not None:
                entry["total_size"] = summary.total_size
                entry["total_size_human"] = sizeof_fmt(summary.total_size)
            namespaces.append(entry)

        return {
            "summary": {
                "total_pairs": len(pairs),
                "transferred": result is not None,
                "run": result.to_dict() if result is not None else {},
                "success_log_lines": self.migration_log.success_count(),
                "failure_log_lines": self.migration_log.failure_count(),
                "distinct_failures": self.migration_log.distinct_failures(),
            },
            "namespaces": namespaces,
            "metadata": {
                "source_registry": self.config.get_source_registry(),
                "destination_registry": self.config.get_destination_registry(),
                "destination_group": self.config.get_destination_group(),
                "selection_mode": str(mode) if mode is not None else None,
                "transfer_tool": self.config.get_transfer_tool(),
                "work_list": str(self.work_list.path),
                "timestamp": datetime.now().isoformat(),
            },
        }

    def run(self, plan_only: bool = False, from_work_list: bool = False, force: bool = False) -> int:
        """Run the migration and return the process exit code"""
        if self.config.get_reset_failure_log() and not from_work_list:
            self.migration_log.reset_failure_log()

        mode = None
        summaries: List[NamespaceSummary] = []
        if from_work_list:
            pairs = self.work_list.read()
            logger.info(f"Loaded {len(pairs)} pairs from {self.work_list.path}")
        else:
            self.login_cluster()
            mode = self.resolve_selection_mode()
            if self.size_estimator is not None:
                self.login_registries(self.size_estimator.skopeo_client)
            pairs, summaries = self.plan(mode)
            self.reporter.print_namespace_summary(summaries)

        result = None
        if plan_only:
            logger.info("Plan only: no images were transferred")
        elif not pairs:
            logger.info("No images to migrate")
        elif not self.confirm_migration(len(pairs), force=force):
            logger.info("Operation cancelled by user")
            return 0
        else:
            result = self.execute(pairs)
            self.reporter.print_final_summary(self.migration_log)

        report_path = Path(self.config.get_output_dir()) / "migration-report.json"
        save_json(str(report_path), self.build_report(summaries, pairs, result, mode), timestamp=True)
        return 0


def parse_arguments(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Migrate images from OpenShift image streams to a Quay registry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Plan only: write the work list and print the namespace summary
  image-migrator --namespaces ns1,ns2 --mode 2 --plan-only

  # Migrate every tag, prompting for credentials
  image-migrator --config config.yaml --mode all

  # Unattended run with credentials from the environment
  OC_USERNAME=admin OC_PASSWORD=... SOURCE_REGISTRY_TOKEN=... \\
    DESTINATION_USERNAME=robot DESTINATION_PASSWORD=... \\
    image-migrator --non-interactive --mode 1

  # Resume the transfer phase from the existing work list
  image-migrator --from-work-list --force

  # Use podman pull/tag/push instead of skopeo copy
  image-migrator --transfer-tool podman --mode 3
        """,
    )

    parser.add_argument("--config", help="Path to configuration YAML (default: config.yaml or CONFIG_FILE)")
    parser.add_argument("--namespaces", help="Comma-separated source namespaces (default: from config)")
    parser.add_argument("--mode", help="Tags to migrate per image: 'all' or a number of latest tags")
    parser.add_argument("--source-registry", help="Source registry host (default: from config)")
    parser.add_argument("--destination-registry", help="Destination registry host (default: from config)")
    parser.add_argument("--destination-group", help="Destination Quay organization (default: from config)")
    parser.add_argument("--endpoint", help="OpenShift API endpoint (default: from config or prompt)")
    parser.add_argument(
        "--transfer-tool",
        choices=["skopeo", "podman"],
        help="Transfer tool (default: from config, skopeo)",
    )
    parser.add_argument(
        "--estimate-sizes",
        action="store_true",
        default=None,
        help="Estimate tag sizes with skopeo inspect and show them in the summary",
    )
    parser.add_argument(
        "--plan-only",
        action="store_true",
        help="Build the work list and print the summary without transferring",
    )
    parser.add_argument(
        "--from-work-list",
        action="store_true",
        help="Skip the cluster inventory and transfer the pairs in the existing work list",
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Read credentials from environment variables and skip the confirmation prompt",
    )
    parser.add_argument("--force", action="store_true", help="Skip the confirmation prompt")
    parser.add_argument("--skip-health-checks", action="store_true", help="Skip preflight health checks")
    parser.add_argument("--show-config", action="store_true", help="Print the effective configuration and exit")
    parser.add_argument("--log-level", help="Log level (default: from config, INFO)")

    return parser.parse_args(argv)


def build_config(args) -> ConfigManager:
    config = ConfigManager(config_file=args.config, validate=False)
    config.set_overrides(
        {
            "namespaces": args.namespaces,
            "selection.mode": args.mode,
            "source.registry": args.source_registry,
            "destination.registry": args.destination_registry,
            "destination.group": args.destination_group,
            "cluster.endpoint": args.endpoint,
            "transfer.tool": args.transfer_tool,
            "size_estimation.enabled": args.estimate_sizes,
            "logging.level": args.log_level,
        }
    )
    return config


def main(argv: Optional[List[str]] = None):
    setup_logging()
    args = parse_arguments(argv)

    try:
        config = build_config(args)
        setup_logging(config.get_log_level())

        # Show configuration if requested
        if args.show_config:
            config.print_config()
            sys.exit(0)

        if args.skip_health_checks:
            config.validate_config(need_namespaces=not args.from_work_list)
        else:
            checker = HealthChecker(config)
            if not checker.print_health_report(checker.run_all_checks(need_cluster=not args.from_work_list)):
                logger.error("Health checks failed, aborting migration")
                sys.exit(1)

        if args.non_interactive:
            provider = EnvironmentCredentialProvider()
        else:
            provider = InteractiveCredentialProvider()

        migrator = ImageMigrator(config, provider)
        exit_code = migrator.run(
            plan_only=args.plan_only,
            from_work_list=args.from_work_list,
            force=args.force or args.non_interactive,
        )
        sys.exit(exit_code)

    except (ConfigValidationError, FileNotFoundError) as e:
        logger.error(str(e))
        sys.exit(1)
    except ActionableError as e:
        logger.error(e.format_message())
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("\nMigration interrupted by user; the success and failure logs reflect completed work")
        sys.exit(1)
    except Exception as e:
        log_exception(logger, "Error during migration", exc_info=e)
        sys.exit(1)


if __name__ == "__main__":
    main()
