"""
Credential providers for the cluster and both registries.

The interactive provider prompts on the terminal, hiding secrets. The
environment provider reads the same values from environment variables for
unattended runs. The Quay API token falls back to the destination password.
"""

import getpass
import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Credentials:
    cluster_endpoint: Optional[str] = None
    cluster_username: Optional[str] = None
    cluster_password: Optional[str] = None
    source_token: Optional[str] = None
    destination_username: Optional[str] = None
    destination_password: Optional[str] = None
    quay_token: Optional[str] = None

    @property
    def api_token(self) -> Optional[str]:
        return self.quay_token or self.destination_password

    def __repr__(self) -> str:
        return (
            f"Credentials(cluster_endpoint={self.cluster_endpoint!r}, cluster_username={self.cluster_username!r}, "
            f"destination_username={self.destination_username!r})"
        )


class InteractiveCredentialProvider:
    """Prompts for anything not already configured"""

    def __init__(self, input_func=input, secret_func=getpass.getpass):
        self._input = input_func
        self._secret = secret_func

    def get_cluster_credentials(self, endpoint: Optional[str] = None) -> Credentials:
        endpoint = endpoint or self._input("Please provide the OpenShift API endpoint: ").strip()
        username = self._input("Please provide your OpenShift username: ").strip()
        password = self._secret("Please provide your OpenShift password: ")
        return Credentials(cluster_endpoint=endpoint, cluster_username=username, cluster_password=password)

    def get_selection_mode(self) -> str:
        return self._input(
            "Please specify the number of the latest tags to migrate (e.g., 2) or type 'all' to migrate all: "
        ).strip()

    def get_registry_credentials(self, credentials: Credentials) -> Credentials:
        credentials.source_token = self._secret("Please provide the token for the source registry: ")
        credentials.destination_username = self._input(
            "Please provide the username for the destination registry: "
        ).strip()
        credentials.destination_password = self._secret("Please provide the password for the destination registry: ")
        return credentials


class EnvironmentCredentialProvider:
    """Reads credentials from environment variables (non-interactive mode)"""

    def __init__(self, environ=None):
        self._environ = os.environ if environ is None else environ

    def _get(self, name: str) -> Optional[str]:
        return self._environ.get(name) or None

    def get_cluster_credentials(self, endpoint: Optional[str] = None) -> Credentials:
        return Credentials(
            cluster_endpoint=endpoint or self._get("OC_ENDPOINT"),
            cluster_username=self._get("OC_USERNAME"),
            cluster_password=self._get("OC_PASSWORD"),
        )

    def get_selection_mode(self) -> Optional[str]:
        return self._get("TAG_SELECTION_MODE")

    def get_registry_credentials(self, credentials: Credentials) -> Credentials:
        credentials.source_token = self._get("SOURCE_REGISTRY_TOKEN")
        credentials.destination_username = self._get("DESTINATION_USERNAME")
        credentials.destination_password = self._get("DESTINATION_PASSWORD")
        credentials.quay_token = self._get("QUAY_API_TOKEN")
        return credentials
