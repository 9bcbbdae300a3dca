"""
OpenShift cluster access for image stream inventory.

Login goes through the `oc` CLI, which writes the session into the local
kubeconfig. Image streams are then read with the Kubernetes API client
(image.openshift.io/v1 custom objects), one list call per namespace.
"""

import logging
import subprocess
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from image_migrator.error_utils import create_cluster_auth_error, create_cluster_query_error
from image_migrator.models import Image, Tag

IMAGE_STREAM_GROUP = "image.openshift.io"
IMAGE_STREAM_VERSION = "v1"
IMAGE_STREAM_PLURAL = "imagestreams"


def _load_kubernetes_config(prefer_kubeconfig: bool = False):
    """Helper function to load Kubernetes configuration.

    Tries in-cluster config first, then falls back to local kubeconfig. After an
    `oc login` the kubeconfig holds the fresh session, so it is loaded directly.
    """
    from kubernetes.config import load_incluster_config, load_kube_config

    if prefer_kubeconfig:
        load_kube_config()
        return
    try:
        load_incluster_config()
    except Exception:
        load_kube_config()


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp as reported by the API server; None if absent or unparseable"""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        logging.debug(f"Unparseable tag creation timestamp: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def image_from_image_stream(image_stream: Dict[str, Any]) -> Image:
    """Build an Image from an image stream object.

    Each entry of status.tags carries the tag name and its history in `items`;
    items[0] is the current image and its `created` is the tag's timestamp.
    """
    name = image_stream.get("metadata", {}).get("name", "")
    tags = []
    for entry in (image_stream.get("status") or {}).get("tags") or []:
        tag_name = entry.get("tag")
        if not tag_name:
            continue
        items = entry.get("items") or []
        created = parse_timestamp(items[0].get("created")) if items else None
        tags.append(Tag(name=tag_name, created=created))
    return Image(name=name, tags=tags)


class OpenShiftInventory:
    """Reads image streams and their tags from source namespaces"""

    def __init__(self, insecure_skip_tls_verify: bool = True):
        self.insecure_skip_tls_verify = insecure_skip_tls_verify
        self._custom_api = None
        self._logged_in = False

    def login(self, endpoint: str, username: str, password: str) -> None:
        """Log into the cluster with `oc login`.

        Raises:
            ActionableError: If login fails; the migration cannot proceed without cluster access
        """
        cmd = [
            "oc",
            "login",
            endpoint,
            f"--username={username}",
            f"--password={password}",
        ]
        if self.insecure_skip_tls_verify:
            cmd.append("--insecure-skip-tls-verify=true")

        logging.info(f"Logging into OpenShift at {endpoint} as {username}")
        try:
            subprocess.run(cmd, capture_output=True, text=True, check=True)
        except subprocess.CalledProcessError as e:
            logging.error(f"oc login failed: {(e.stderr or '').strip()}")
            raise create_cluster_auth_error(endpoint, RuntimeError((e.stderr or e.stdout or "").strip() or str(e)))
        except FileNotFoundError as e:
            raise create_cluster_auth_error(endpoint, e)

        self._logged_in = True
        self._custom_api = None
        logging.info("OpenShift login succeeded")

    def _get_custom_api(self):
        if self._custom_api is None:
            from kubernetes import client as k8s_client

            _load_kubernetes_config(prefer_kubeconfig=self._logged_in)
            self._custom_api = k8s_client.CustomObjectsApi()
        return self._custom_api

    def list_images(self, namespace: str) -> List[Image]:
        """List image streams in a namespace, with their tags and creation timestamps

        Raises:
            ActionableError: If the namespace cannot be queried
        """
        from kubernetes.client.rest import ApiException

        try:
            response = self._get_custom_api().list_namespaced_custom_object(
                group=IMAGE_STREAM_GROUP,
                version=IMAGE_STREAM_VERSION,
                namespace=namespace,
                plural=IMAGE_STREAM_PLURAL,
            )
        except ApiException as e:
            raise create_cluster_query_error(f"list imagestreams in namespace {namespace}", e)

        images = [image_from_image_stream(item) for item in response.get("items", [])]
        logging.debug(f"Found {len(images)} image streams in namespace {namespace}")
        return images
