"""
Error message utilities for providing actionable guidance to users.

This module provides functions to create helpful error messages with
suggested fixes and troubleshooting steps.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCategory(Enum):
    """Categories of errors for better error handling"""

    CONNECTION = "connection"
    AUTHENTICATION = "authentication"
    CONFIGURATION = "configuration"
    PERMISSION = "permission"
    RESOURCE = "resource"
    UNKNOWN = "unknown"


class ActionableError(Exception):
    """Exception with actionable guidance for users"""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        suggestions: Optional[List[str]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize actionable error

        Args:
            message: Primary error message
            category: Error category for classification
            suggestions: List of suggested fixes
            details: Additional context information
        """
        self.message = message
        self.category = category
        self.suggestions = suggestions or []
        self.details = details or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message with suggestions"""
        lines = [f"❌ {self.message}"]

        if self.suggestions:
            lines.append("\n💡 Suggested fixes:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"   {i}. {suggestion}")

        if self.details:
            lines.append("\n📋 Additional details:")
            for key, value in self.details.items():
                lines.append(f"   {key}: {value}")

        return "\n".join(lines)


def create_cluster_auth_error(endpoint: str, error: Exception) -> ActionableError:
    """Create actionable error for OpenShift login failures"""
    error_str = str(error).lower()

    suggestions = [
        f"Verify the OpenShift API endpoint is correct: {endpoint}",
        "Verify the username and password (try 'oc login' manually)",
        "Check that the 'oc' binary is installed and on PATH",
        "Check network connectivity to the API server",
    ]

    if "not found" in error_str or "no such file" in error_str:
        suggestions.insert(0, "Install the OpenShift CLI ('oc') before running the migration")

    if "certificate" in error_str or "x509" in error_str:
        suggestions.insert(1, "Enable cluster.insecure_skip_tls_verify in config.yaml for self-signed API certificates")

    return ActionableError(
        message=f"Failed to log into OpenShift at {endpoint}",
        category=ErrorCategory.AUTHENTICATION,
        suggestions=suggestions,
        details={
            "endpoint": endpoint,
            "error_type": type(error).__name__,
            "error_message": str(error),
        },
    )


def create_registry_auth_error(registry_url: str, error: Exception) -> ActionableError:
    """Create actionable error for registry authentication failures"""
    error_str = str(error).lower()

    suggestions = [
        f"Verify the registry hostname is correct: {registry_url}",
        "Verify the registry username and password/token",
        "For the OpenShift internal registry, use a token from 'oc whoami -t'",
        "Verify the token hasn't expired or been rotated",
    ]

    if "unauthorized" in error_str or "401" in error_str:
        suggestions.insert(0, "The registry rejected the credentials; re-enter them and retry")

    return ActionableError(
        message=f"Failed to authenticate with registry at {registry_url}",
        category=ErrorCategory.AUTHENTICATION,
        suggestions=suggestions,
        details={
            "registry_url": registry_url,
            "error_type": type(error).__name__,
            "error_message": str(error),
        },
    )


def create_cluster_query_error(operation: str, error: Exception) -> ActionableError:
    """Create actionable error for image stream queries against the cluster"""
    error_str = str(error).lower()

    suggestions = [
        "Verify cluster access ('oc whoami')",
        "Check that the namespace exists and is accessible",
        "Verify RBAC permissions to list imagestreams",
    ]

    if "403" in error_str or "forbidden" in error_str:
        suggestions.insert(0, "Grant the user 'view' or 'registry-viewer' on the namespace")

    return ActionableError(
        message=f"Cluster query failed: {operation}",
        category=ErrorCategory.PERMISSION if "403" in error_str or "forbidden" in error_str else ErrorCategory.RESOURCE,
        suggestions=suggestions,
        details={
            "operation": operation,
            "error_type": type(error).__name__,
            "error_message": str(error),
        },
    )


def create_config_error(field: str, value: Any, reason: str) -> ActionableError:
    """Create actionable error for configuration validation failures"""
    suggestions = [
        f"Check the '{field}' value in config.yaml",
        "Verify the value matches the expected format",
        "Check config-example.yaml for the correct format",
    ]

    if "registry" in field.lower():
        suggestions.insert(1, "Registry values should be a bare hostname[:port], without scheme")
    elif "mode" in field.lower():
        suggestions.insert(1, "Tag selection mode must be 'all' or a positive integer")

    return ActionableError(
        message=f"Configuration error: Invalid value for '{field}'",
        category=ErrorCategory.CONFIGURATION,
        suggestions=suggestions,
        details={
            "field": field,
            "value": value,
            "reason": reason,
        },
    )
