"""
Quay repository management for the destination registry.

A repository must exist in Quay before images can be pushed into it. The
existence check is deliberately conservative: only a response carrying the
not-found indicator counts as missing, so an unreachable or erroring API never
triggers a create.
"""

import logging
from typing import Optional

import requests

from image_migrator.models import ImageReference


class QuayClient:
    """Minimal client for the Quay v1 repository API"""

    def __init__(
        self,
        api_url: str,
        token: str,
        tls_verify: bool = False,
        not_found_indicator: str = '"status": "not found"',
        visibility: str = "private",
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.tls_verify = tls_verify
        self.not_found_indicator = not_found_indicator
        self.visibility = visibility
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

        if not tls_verify:
            # Self-signed registry routes are the norm on internal clusters
            requests.packages.urllib3.disable_warnings()

    def repository_exists(self, repository_path: str) -> bool:
        """Check whether a repository exists (e.g. "aro-group/ns1/app").

        Returns:
            False only if the response body contains the not-found indicator, True otherwise
        """
        url = f"{self.api_url}/api/v1/repository/{repository_path}"
        try:
            response = self.session.get(url, verify=self.tls_verify)
            body = response.text or ""
        except requests.RequestException as e:
            logging.warning(f"Repository check for {repository_path} failed, assuming it exists: {e}")
            body = ""

        return self.not_found_indicator not in body

    def create_repository(self, namespace: str, repository: str, description: str = "") -> bool:
        """Create a repository in a Quay organization.

        Args:
            namespace: Quay organization (the destination group)
            repository: Repository name inside the organization (e.g. "ns1/app")
            description: Optional repository description

        Returns:
            True if Quay accepted the request or the repository already exists, False otherwise
        """
        url = f"{self.api_url}/api/v1/repository"
        payload = {
            "namespace": namespace,
            "repository": repository,
            "visibility": self.visibility,
            "repo_kind": "image",
            "description": description,
        }
        try:
            response = self.session.post(url, json=payload, verify=self.tls_verify)
        except requests.RequestException as e:
            logging.error(f"Failed to create repository {namespace}/{repository}: {e}")
            return False

        if response.status_code in (200, 201):
            logging.info(f"Created repository {namespace}/{repository} ({self.visibility})")
            return True
        if response.status_code == 400 and "already exists" in (response.text or "").lower():
            logging.info(f"Repository {namespace}/{repository} already exists")
            return True

        logging.error(
            f"Failed to create repository {namespace}/{repository}: HTTP {response.status_code} {response.text}"
        )
        return False


class RepositoryProvisioner:
    """Ensures the destination repository exists before an image is pushed"""

    def __init__(self, quay_client: QuayClient, group: str):
        self.quay_client = quay_client
        self.group = group

    def split_repository_path(self, repository_path: str):
        """Split "group/ns/app" into ("group", "ns/app")"""
        prefix = f"{self.group}/"
        if self.group and repository_path.startswith(prefix):
            return self.group, repository_path[len(prefix):]
        namespace, _, repository = repository_path.partition("/")
        return namespace, repository

    def ensure(self, destination: ImageReference) -> bool:
        """Create the destination repository if it does not exist.

        Returns:
            True if a create request was issued, False if the repository was treated as existing
        """
        repository_path = destination.repository_path
        if self.quay_client.repository_exists(repository_path):
            logging.debug(f"Repository {repository_path} exists")
            return False

        namespace, repository = self.split_repository_path(repository_path)
        logging.info(f"Repository {repository_path} not found, creating it")
        self.quay_client.create_repository(namespace, repository, description="Created by image migration")
        return True
