"""
Skopeo client for registry-to-registry image transfer.

This module wraps the skopeo CLI for the operations the migration needs:
logging into a registry, copying an image between registries without a
local image store, and inspecting image metadata.
"""

import json
import logging
import subprocess
from typing import Dict, List, Optional

from image_migrator.error_utils import create_registry_auth_error

CREDS_FLAGS = ("--creds", "--src-creds", "--dest-creds")
SECRET_FLAGS = ("--password", "-p", "--src-registry-token", "--dest-registry-token")


def redact_command_for_logging(cmd: List[str]) -> List[str]:
    """Return a copy of the command with any credentials redacted."""
    redacted = list(cmd)

    for i, token in enumerate(redacted):
        if token in CREDS_FLAGS and i + 1 < len(redacted):
            value = redacted[i + 1]
            if isinstance(value, str) and ":" in value:
                user, _ = value.split(":", 1)
                redacted[i + 1] = f"{user}:****"
        if token in SECRET_FLAGS and i + 1 < len(redacted):
            redacted[i + 1] = "****"
        if isinstance(token, str) and token.startswith("--password="):
            redacted[i] = "--password=****"

    return redacted


class SkopeoClient:
    """Transfers images with `skopeo copy`, one attempt per image."""

    tool = "skopeo"

    def __init__(self, tls_verify: bool = False, timeout: Optional[int] = None, auth_file: Optional[str] = None):
        """Initialize SkopeoClient.

        Args:
            tls_verify: Verify registry TLS certificates (both ends of a copy)
            timeout: Subprocess timeout in seconds; None waits for skopeo's own timeouts
            auth_file: Optional explicit auth file shared by login, copy and inspect
        """
        self.tls_verify = tls_verify
        self.timeout = timeout
        self.auth_file = auth_file

    def _tls_flag(self, prefix: str = "") -> str:
        return f"--{prefix}tls-verify={'true' if self.tls_verify else 'false'}"

    def _auth_args(self, prefix: str = "") -> List[str]:
        return [f"--{prefix}authfile", self.auth_file] if self.auth_file else []

    def login(self, registry: str, username: str, password: str) -> bool:
        """Login to a registry using `skopeo login`, password on stdin.

        Returns:
            True if login succeeded, False otherwise (the error is logged with guidance)
        """
        cmd = [self.tool, "login"] + self._auth_args()
        cmd.extend(["--username", username or "unused", "--password-stdin", self._tls_flag(), registry])

        logging.info(f"Logging in to registry: {registry}")
        try:
            subprocess.run(cmd, input=password or "", capture_output=True, text=True, check=True, timeout=self.timeout)
            return True
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError) as e:
            stderr = getattr(e, "stderr", None)
            error = create_registry_auth_error(registry, RuntimeError((stderr or "").strip() or str(e)))
            logging.error(error.format_message())
            return False

    def copy_image(self, source: str, destination: str) -> bool:
        """Copy an image from source to destination registry.

        Args:
            source: Full source reference without transport (e.g. "registry:5000/ns/app:v1")
            destination: Full destination reference without transport

        Returns:
            True if copy succeeded, False otherwise
        """
        cmd = [self.tool, "copy"] + self._auth_args("src-") + self._auth_args("dest-")
        cmd.extend([self._tls_flag("src-"), self._tls_flag("dest-"), f"docker://{source}", f"docker://{destination}"])
        log_cmd = " ".join(redact_command_for_logging(cmd))

        logging.debug(f"Running: {log_cmd}")
        try:
            subprocess.run(cmd, capture_output=True, text=True, check=True, timeout=self.timeout)
            return True
        except subprocess.TimeoutExpired:
            logging.error(f"Skopeo copy timed out after {self.timeout}s: {log_cmd}")
        except subprocess.CalledProcessError as e:
            logging.error(f"Skopeo copy failed: {log_cmd}")
            logging.error(f"Error: {(e.stderr or '').strip()}")
        except FileNotFoundError:
            logging.error("skopeo binary not found on PATH")
        return False

    def inspect_image(self, reference: str) -> Optional[Dict]:
        """Inspect an image (registry/path:tag) and return skopeo's JSON, or None on any failure."""
        cmd = [self.tool, "inspect"] + self._auth_args() + [self._tls_flag(), f"docker://{reference}"]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True, timeout=self.timeout)
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError) as e:
            logging.debug(f"skopeo inspect failed for {reference}: {e}")
            return None

        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError:
            logging.debug(f"Failed to parse image inspection for {reference}")
            return None
