"""Unit tests for image_migrator/health_checks.py"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from image_migrator.config_manager import ConfigValidationError
from image_migrator.health_checks import HealthChecker, HealthCheckResult


@pytest.fixture
def mock_config():
    """Create a mock ConfigManager"""
    mock = MagicMock()
    mock.get_source_registry.return_value = "src.example.com"
    mock.get_destination_registry.return_value = "quay.example.com"
    mock.get_namespaces.return_value = ["ns1"]
    mock.get_transfer_tool.return_value = "skopeo"
    mock.is_size_estimation_enabled.return_value = False
    mock.get_quay_api_url.return_value = "https://quay.example.com"
    mock.get_tls_verify.return_value = False
    mock.get_create_repositories.return_value = True
    return mock


class TestCheckConfiguration:
    """Tests for HealthChecker.check_configuration"""

    def test_valid_configuration(self, mock_config):
        """Test that a valid config is healthy"""
        result = HealthChecker(mock_config).check_configuration()

        assert result.status is True
        assert result.details["destination_registry"] == "quay.example.com"

    def test_invalid_configuration(self, mock_config):
        """Test that validation errors make the check unhealthy"""
        mock_config.validate_config.side_effect = ConfigValidationError("Source registry is required")

        result = HealthChecker(mock_config).check_configuration()

        assert result.status is False
        assert "Source registry is required" in result.message


class TestCheckRequiredTools:
    """Tests for HealthChecker.check_required_tools"""

    def test_all_tools_present(self, mock_config):
        """Test that oc and the transfer tool are found"""
        with patch("image_migrator.health_checks.shutil.which", side_effect=lambda tool: f"/usr/bin/{tool}"):
            result = HealthChecker(mock_config).check_required_tools()

        assert result.status is True
        assert set(result.details) == {"oc", "skopeo"}

    def test_missing_oc(self, mock_config):
        """Test that a missing oc binary is reported"""
        with patch(
            "image_migrator.health_checks.shutil.which",
            side_effect=lambda tool: None if tool == "oc" else f"/usr/bin/{tool}",
        ):
            result = HealthChecker(mock_config).check_required_tools()

        assert result.status is False
        assert result.details["missing"] == ["oc"]

    def test_oc_not_needed_when_resuming(self, mock_config):
        """Test that resuming from a work list does not require oc"""
        with patch(
            "image_migrator.health_checks.shutil.which",
            side_effect=lambda tool: None if tool == "oc" else f"/usr/bin/{tool}",
        ):
            result = HealthChecker(mock_config).check_required_tools(need_cluster=False)

        assert result.status is True

    def test_podman_with_size_estimation_needs_skopeo(self, mock_config):
        """Test that size estimation adds skopeo to the podman requirements"""
        mock_config.get_transfer_tool.return_value = "podman"
        mock_config.is_size_estimation_enabled.return_value = True

        with patch("image_migrator.health_checks.shutil.which", return_value=None):
            result = HealthChecker(mock_config).check_required_tools()

        assert result.details["missing"] == ["oc", "podman", "skopeo"]


class TestCheckDestinationApi:
    """Tests for HealthChecker.check_destination_api"""

    def test_reachable_api(self, mock_config):
        """Test that any HTTP response counts as reachable"""
        with patch("image_migrator.health_checks.requests.get", return_value=MagicMock(status_code=401)) as mock_get:
            result = HealthChecker(mock_config).check_destination_api()

        assert result.status is True
        assert result.details["http_status"] == 401
        assert mock_get.call_args[0][0] == "https://quay.example.com/api/v1/discovery"

    def test_unreachable_api(self, mock_config):
        """Test that a transport error is unhealthy"""
        with patch(
            "image_migrator.health_checks.requests.get",
            side_effect=requests.ConnectionError("connection refused"),
        ):
            result = HealthChecker(mock_config).check_destination_api()

        assert result.status is False
        assert "quay.example.com" in result.message


class TestRunAllChecks:
    """Tests for run_all_checks and print_health_report"""

    def test_skips_api_check_without_provisioning(self, mock_config):
        """Test that the API check only runs when repositories are created"""
        mock_config.get_create_repositories.return_value = False

        with patch("image_migrator.health_checks.shutil.which", return_value="/usr/bin/x"):
            results = HealthChecker(mock_config).run_all_checks()

        assert [r.name for r in results] == ["configuration", "required_tools"]

    def test_resume_relaxes_namespace_check(self, mock_config):
        """Test that need_cluster=False validates without requiring namespaces"""
        with patch("image_migrator.health_checks.shutil.which", return_value="/usr/bin/x"):
            HealthChecker(mock_config).run_all_checks(need_cluster=False)

        mock_config.validate_config.assert_called_once_with(need_namespaces=False)

    def test_print_health_report(self, mock_config, capsys):
        """Test the report output and overall status"""
        results = [
            HealthCheckResult(name="configuration", status=True, message="Configuration is valid"),
            HealthCheckResult(name="required_tools", status=False, message="missing oc", details={"error": "x"}),
        ]

        healthy = HealthChecker(mock_config).print_health_report(results)

        out = capsys.readouterr().out
        assert healthy is False
        assert "CONFIGURATION: HEALTHY" in out
        assert "REQUIRED TOOLS: UNHEALTHY" in out
