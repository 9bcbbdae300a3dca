"""
Podman client for pull/tag/push image transfer.

Unlike skopeo, podman routes the image through local storage, so each
successful transfer optionally removes both local copies afterwards.
"""

import logging
import subprocess
from typing import List, Optional

from image_migrator.skopeo_client import SkopeoClient, redact_command_for_logging


class PodmanClient(SkopeoClient):
    """Transfers images with podman pull, tag and push. Login is shared with skopeo's syntax."""

    tool = "podman"

    def __init__(
        self,
        tls_verify: bool = False,
        timeout: Optional[int] = None,
        auth_file: Optional[str] = None,
        remove_local_images: bool = True,
    ):
        super().__init__(tls_verify=tls_verify, timeout=timeout, auth_file=auth_file)
        self.remove_local_images = remove_local_images

    def _run(self, args: List[str]) -> bool:
        cmd = [self.tool] + args
        log_cmd = " ".join(redact_command_for_logging(cmd))
        logging.debug(f"Running: {log_cmd}")
        try:
            subprocess.run(cmd, capture_output=True, text=True, check=True, timeout=self.timeout)
            return True
        except subprocess.TimeoutExpired:
            logging.error(f"Podman command timed out after {self.timeout}s: {log_cmd}")
        except subprocess.CalledProcessError as e:
            logging.error(f"Podman command failed: {log_cmd}")
            logging.error(f"Error: {(e.stderr or '').strip()}")
        except FileNotFoundError:
            logging.error("podman binary not found on PATH")
        return False

    def copy_image(self, source: str, destination: str) -> bool:
        """Pull the source, tag it as the destination and push it.

        Returns:
            True if the push succeeded, False if any step failed
        """
        auth = self._auth_args()
        if not self._run(["pull"] + auth + [self._tls_flag(), source]):
            return False
        if not self._run(["tag", source, destination]):
            return False
        if not self._run(["push"] + auth + [self._tls_flag(), destination]):
            return False

        if self.remove_local_images and not self._run(["rmi", source, destination]):
            logging.warning(f"Could not remove local copies of {source}; remove them manually to free disk space")
        return True
