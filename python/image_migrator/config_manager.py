#!/usr/bin/env python3
"""
Configuration Manager for the OpenShift image migrator

This module handles loading and managing configuration from config.yaml,
environment variables and command-line overrides. A single ConfigManager
instance is created by the entry point and passed to every component.
"""

import logging
import os
import re
from typing import Any, Dict, List, Optional

import yaml


class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""


class ConfigManager:
    """Manages configuration for the image migrator"""

    def __init__(self, config_file: str = None, validate: bool = True):
        """Initialize ConfigManager

        Args:
            config_file: Path to configuration YAML file (defaults to config.yaml or CONFIG_FILE env var)
            validate: If True, validate configuration on initialization
        """
        # Allow override via environment variable for containerized runs
        if config_file is None:
            config_file = os.environ.get("CONFIG_FILE", "config.yaml")
        self.config_file = config_file
        self.config = self._load_config()
        self._overrides: Dict[str, Any] = {}

        if validate:
            self.validate_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file with defaults"""
        default_config = {
            "source": {"registry": ""},
            "destination": {"registry": "", "group": "aro-group"},
            "namespaces": [],
            "selection": {"mode": None},
            "cluster": {"endpoint": None, "insecure_skip_tls_verify": True},
            "transfer": {
                "tool": "skopeo",
                "tls_verify": False,
                "timeout": None,  # inherit the transfer tool's own timeout
                "remove_local_images": True,  # podman only
                "auth_file": None,  # registry auth file shared by login and transfers
            },
            "size_estimation": {"enabled": False},
            "quay": {
                "create_repositories": True,
                "api_url": None,  # defaults to https://<destination.registry>
                "visibility": "private",
                "not_found_indicator": '"status": "not found"',
            },
            "files": {
                "work_list": "imagepairs.txt",
                "success_log": "success_log.txt",
                "failure_log": "failure_log.txt",
                "reset_failure_log": True,
            },
            "output": {"dir": "reports"},
            "logging": {"level": "INFO"},
        }

        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, "r") as f:
                    user_config = yaml.safe_load(f) or {}
                return self._merge_config(default_config, user_config)
            else:
                logging.warning(f"Config file {self.config_file} not found, using defaults")
                return default_config
        except (OSError, yaml.YAMLError) as e:
            raise ConfigValidationError(f"Error loading config file {self.config_file}: {e}")

    def _merge_config(self, default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge user config with defaults"""
        result = default.copy()
        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _lookup(self, path: str, env: Optional[str] = None) -> Any:
        """Resolve a dotted key. Priority: override -> env -> config file -> defaults"""
        if path in self._overrides:
            return self._overrides[path]
        if env and os.environ.get(env):
            return os.environ[env]
        current: Any = self.config
        for part in path.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def set_overrides(self, overrides: Dict[str, Any]) -> None:
        """Apply command-line overrides; None values are ignored"""
        for key, value in overrides.items():
            if value is not None:
                self._overrides[key] = value

    @staticmethod
    def _as_bool(value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes", "on")
        return bool(value)

    # Registry configuration
    def get_source_registry(self) -> str:
        """Get source registry host from environment or config"""
        return (self._lookup("source.registry", "SOURCE_REGISTRY") or "").strip()

    def get_destination_registry(self) -> str:
        """Get destination registry host from environment or config"""
        return (self._lookup("destination.registry", "DESTINATION_REGISTRY") or "").strip()

    def get_destination_group(self) -> str:
        """Get destination group (Quay organization) from environment or config"""
        return (self._lookup("destination.group", "DESTINATION_GROUP") or "").strip()

    def get_namespaces(self) -> List[str]:
        """Get source namespaces. NAMESPACES env var is comma-separated"""
        value = self._lookup("namespaces", "NAMESPACES")
        if value is None:
            return []
        if isinstance(value, str):
            return [ns.strip() for ns in value.split(",") if ns.strip()]
        return [str(ns).strip() for ns in value if str(ns).strip()]

    def get_selection_mode(self) -> Optional[str]:
        """Get raw tag selection mode ('all' or an integer), None when it must be prompted"""
        value = self._lookup("selection.mode", "TAG_SELECTION_MODE")
        return None if value is None else str(value).strip()

    # Cluster configuration
    def get_cluster_endpoint(self) -> Optional[str]:
        return self._lookup("cluster.endpoint", "OC_ENDPOINT")

    def get_cluster_insecure_skip_tls_verify(self) -> bool:
        return self._as_bool(self._lookup("cluster.insecure_skip_tls_verify"))

    # Transfer configuration
    def get_transfer_tool(self) -> str:
        return str(self._lookup("transfer.tool", "TRANSFER_TOOL") or "skopeo").strip().lower()

    def get_tls_verify(self) -> bool:
        return self._as_bool(self._lookup("transfer.tls_verify"))

    def get_transfer_timeout(self) -> Optional[int]:
        """Get subprocess timeout for transfer commands, with type coercion"""
        timeout = self._lookup("transfer.timeout")
        if timeout is None:
            return None
        try:
            return int(timeout)
        except (ValueError, TypeError):
            raise ConfigValidationError(
                f"transfer.timeout must be an integer, got: {timeout} (type: {type(timeout).__name__})"
            )

    def get_remove_local_images(self) -> bool:
        return self._as_bool(self._lookup("transfer.remove_local_images"))

    def get_auth_file(self) -> Optional[str]:
        return self._lookup("transfer.auth_file", "REGISTRY_AUTH_FILE") or None

    def is_size_estimation_enabled(self) -> bool:
        return self._as_bool(self._lookup("size_estimation.enabled"))

    # Quay configuration
    def get_create_repositories(self) -> bool:
        return self._as_bool(self._lookup("quay.create_repositories"))

    def get_quay_api_url(self) -> str:
        """Get Quay API base URL, defaulting to https://<destination registry>"""
        url = self._lookup("quay.api_url", "QUAY_API_URL")
        if not url:
            url = f"https://{self.get_destination_registry()}"
        return url.rstrip("/")

    def get_quay_visibility(self) -> str:
        return str(self._lookup("quay.visibility") or "private")

    def get_not_found_indicator(self) -> str:
        return str(self._lookup("quay.not_found_indicator"))

    # File configuration
    def get_work_list_path(self) -> str:
        return self._lookup("files.work_list")

    def get_success_log_path(self) -> str:
        return self._lookup("files.success_log")

    def get_failure_log_path(self) -> str:
        return self._lookup("files.failure_log")

    def get_reset_failure_log(self) -> bool:
        return self._as_bool(self._lookup("files.reset_failure_log"))

    def get_output_dir(self) -> str:
        """Get report output directory from environment or config"""
        return self._lookup("output.dir", "OUTPUT_DIR")

    def get_log_level(self) -> str:
        return str(self._lookup("logging.level", "LOG_LEVEL") or "INFO").upper()

    def validate_config(self, need_namespaces: bool = True) -> None:
        """Validate configuration values

        Args:
            need_namespaces: If False, an empty namespace list is allowed (resuming from a work list)

        Raises:
            ConfigValidationError: If configuration is invalid
        """
        from image_migrator.tag_selection import SelectionMode

        errors = []
        warnings = []

        # Validate registry configuration
        for label, registry in (
            ("Source registry", self.get_source_registry()),
            ("Destination registry", self.get_destination_registry()),
        ):
            if not registry:
                errors.append(f"{label} is required and cannot be empty")
            elif not self._is_valid_registry_url(registry):
                errors.append(f"{label} '{registry}' is invalid (expected format: hostname[:port], no scheme)")

        group = self.get_destination_group()
        if not group:
            errors.append("Destination group is required and cannot be empty")
        elif not self._is_valid_repository_name(group):
            errors.append(f"Destination group '{group}' contains invalid characters")

        namespaces = self.get_namespaces()
        if need_namespaces and not namespaces:
            errors.append("At least one source namespace is required")
        for namespace in namespaces:
            if not self._is_valid_k8s_name(namespace):
                errors.append(
                    f"Namespace '{namespace}' is not a valid Kubernetes name (lowercase alphanumeric and hyphens only)"
                )
        if len(set(namespaces)) != len(namespaces):
            warnings.append("Namespace list contains duplicates; their images will be planned twice")

        mode = self.get_selection_mode()
        if mode is not None:
            try:
                SelectionMode.parse(mode)
            except ConfigValidationError as e:
                errors.append(str(e))

        tool = self.get_transfer_tool()
        if tool not in ("skopeo", "podman"):
            errors.append(f"transfer.tool must be 'skopeo' or 'podman', got: {tool}")

        try:
            timeout = self.get_transfer_timeout()
            if timeout is not None and timeout < 1:
                errors.append(f"transfer.timeout must be a positive integer (seconds), got: {timeout}")
        except ConfigValidationError as e:
            errors.append(str(e))

        if self.get_quay_visibility() not in ("private", "public"):
            errors.append(f"quay.visibility must be 'private' or 'public', got: {self.get_quay_visibility()}")

        if not self.get_not_found_indicator():
            errors.append("quay.not_found_indicator cannot be empty")

        for key, path in (
            ("files.work_list", self.get_work_list_path()),
            ("files.success_log", self.get_success_log_path()),
            ("files.failure_log", self.get_failure_log_path()),
        ):
            if not path or not str(path).strip():
                errors.append(f"{key} is required and cannot be empty")

        if self.get_success_log_path() and self.get_success_log_path() == self.get_failure_log_path():
            errors.append("files.success_log and files.failure_log must be different files")

        if self.get_tls_verify() is False:
            warnings.append("TLS verification is disabled for registry transfers")

        # Log warnings
        for warning in warnings:
            logging.warning(f"Configuration warning: {warning}")

        # Raise error if there are validation errors
        if errors:
            error_msg = "Configuration validation failed:\n  " + "\n  ".join(errors)
            logging.error(error_msg)
            raise ConfigValidationError(error_msg)

    def _is_valid_registry_url(self, url: str) -> bool:
        """Validate registry host format: hostname[:port] without scheme"""
        if not url:
            return False
        pattern = r"^[a-zA-Z0-9]([a-zA-Z0-9\-\.]*[a-zA-Z0-9])?(:[0-9]{1,5})?$"
        return bool(re.match(pattern, url))

    def _is_valid_repository_name(self, name: str) -> bool:
        """Validate repository/group name format"""
        if not name:
            return False
        pattern = r"^[a-zA-Z0-9_\-/\.]+$"
        return bool(re.match(pattern, name))

    def _is_valid_k8s_name(self, name: str) -> bool:
        """Validate Kubernetes namespace name format"""
        if not name:
            return False
        pattern = r"^[a-z0-9]([a-z0-9\-]*[a-z0-9])?$"
        return bool(re.match(pattern, name)) and len(name) <= 63

    def print_config(self):
        """Print current configuration"""
        print("Current Configuration:")
        print(f"  Source Registry: {self.get_source_registry()}")
        print(f"  Destination Registry: {self.get_destination_registry()}")
        print(f"  Destination Group: {self.get_destination_group()}")
        print(f"  Namespaces: {', '.join(self.get_namespaces()) or 'None'}")
        print(f"  Tag Selection Mode: {self.get_selection_mode() or 'prompt'}")
        print(f"  Cluster Endpoint: {self.get_cluster_endpoint() or 'prompt'}")
        print(f"  Transfer Tool: {self.get_transfer_tool()}")
        print(f"  TLS Verify: {self.get_tls_verify()}")
        print(f"  Auth File: {self.get_auth_file() or 'tool default'}")
        print(f"  Size Estimation: {self.is_size_estimation_enabled()}")
        print(f"  Create Repositories: {self.get_create_repositories()}")
        print(f"  Quay API URL: {self.get_quay_api_url()}")
        print(f"  Work List: {self.get_work_list_path()}")
        print(f"  Success Log: {self.get_success_log_path()}")
        print(f"  Failure Log: {self.get_failure_log_path()}")
        print(f"  Output Directory: {self.get_output_dir()}")
