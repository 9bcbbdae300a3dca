"""
Health check utilities for verifying tooling and configuration before a run.

This module provides health checks for:
- Configuration validity
- Required command-line tools (oc, skopeo or podman) on PATH
- Destination Quay API reachability
"""

import shutil
from dataclasses import dataclass
from typing import Dict, List, Optional

import requests

from image_migrator.config_manager import ConfigManager
from image_migrator.logging_utils import get_logger


@dataclass
class HealthCheckResult:
    """Result of a health check"""

    name: str
    status: bool  # True if healthy, False if unhealthy
    message: str
    details: Optional[Dict] = None


class HealthChecker:
    """Performs preflight checks on the migration environment"""

    def __init__(self, config: ConfigManager):
        self.config = config
        self.logger = get_logger(self.__class__.__name__)

    def check_configuration(self, need_namespaces: bool = True) -> HealthCheckResult:
        """Check if configuration is valid

        Args:
            need_namespaces: If False, an empty namespace list is accepted

        Returns:
            HealthCheckResult indicating configuration validity
        """
        try:
            # This will raise ConfigValidationError if invalid
            self.config.validate_config(need_namespaces=need_namespaces)

            return HealthCheckResult(
                name="configuration",
                status=True,
                message="Configuration is valid",
                details={
                    "source_registry": self.config.get_source_registry(),
                    "destination_registry": self.config.get_destination_registry(),
                    "namespaces": ", ".join(self.config.get_namespaces()),
                },
            )
        except Exception as e:
            return HealthCheckResult(
                name="configuration",
                status=False,
                message=f"Configuration validation failed: {str(e)}",
                details={"error": str(e)},
            )

    def check_required_tools(self, need_cluster: bool = True) -> HealthCheckResult:
        """Check that the CLI tools the run shells out to are installed

        Args:
            need_cluster: If False, `oc` is not required (resuming from a work list)
        """
        tools = [self.config.get_transfer_tool()]
        if need_cluster:
            tools.insert(0, "oc")
        if self.config.is_size_estimation_enabled() and "skopeo" not in tools:
            tools.append("skopeo")

        found = {tool: shutil.which(tool) for tool in tools}
        missing = [tool for tool, path in found.items() if path is None]

        if missing:
            return HealthCheckResult(
                name="required_tools",
                status=False,
                message=f"Required tools not found on PATH: {', '.join(missing)}",
                details={
                    "missing": missing,
                    "suggestions": [f"Install {tool} and make sure it is on PATH" for tool in missing],
                },
            )
        return HealthCheckResult(
            name="required_tools",
            status=True,
            message="All required tools are installed",
            details=found,
        )

    def check_destination_api(self) -> HealthCheckResult:
        """Check that the destination Quay API answers HTTP requests

        Any HTTP response counts as reachable; authentication is checked by the run itself.
        """
        api_url = self.config.get_quay_api_url()
        url = f"{api_url}/api/v1/discovery"
        try:
            response = requests.get(url, verify=self.config.get_tls_verify(), timeout=10)
            return HealthCheckResult(
                name="destination_api",
                status=True,
                message=f"Destination API at {api_url} is reachable",
                details={"api_url": api_url, "http_status": response.status_code},
            )
        except requests.RequestException as e:
            self.logger.debug(f"Destination API check failed: {e}")
            return HealthCheckResult(
                name="destination_api",
                status=False,
                message=f"Failed to reach destination API at {api_url}",
                details={
                    "api_url": api_url,
                    "error": str(e),
                    "suggestions": [
                        "Check network connectivity to the destination registry",
                        "Set quay.api_url if the API is not served from the registry host",
                    ],
                },
            )

    def run_all_checks(self, need_cluster: bool = True) -> List[HealthCheckResult]:
        """Run all health checks

        Args:
            need_cluster: If False, skip the `oc` requirement and the namespace list check

        Returns:
            List of HealthCheckResult objects
        """
        results = [
            self.check_configuration(need_namespaces=need_cluster),
            self.check_required_tools(need_cluster=need_cluster),
        ]
        if self.config.get_create_repositories():
            results.append(self.check_destination_api())
        return results

    def print_health_report(self, results: List[HealthCheckResult]) -> bool:
        """Print a formatted health check report

        Args:
            results: List of HealthCheckResult objects

        Returns:
            True if all checks passed, False otherwise
        """
        print("\n" + "=" * 60)
        print("Health Check Report")
        print("=" * 60)

        all_healthy = True

        for result in results:
            status_icon = "✓" if result.status else "✗"
            status_text = "HEALTHY" if result.status else "UNHEALTHY"

            print(f"\n{status_icon} {result.name.upper().replace('_', ' ')}: {status_text}")
            print(f"   {result.message}")

            if result.details:
                for key, value in result.details.items():
                    if key != "error":  # Don't print error in details if it's already in message
                        print(f"   {key}: {value}")

            if not result.status:
                all_healthy = False

        print("\n" + "=" * 60)

        if all_healthy:
            print("✓ All health checks passed")
        else:
            print("✗ Some health checks failed - please review the issues above")

        print("=" * 60 + "\n")

        return all_healthy
