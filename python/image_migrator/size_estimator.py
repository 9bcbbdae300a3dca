"""Best-effort tag size estimation from registry metadata."""

import logging
from typing import Any, Dict, Optional


def sum_layer_sizes(image_info: Optional[Dict[str, Any]]) -> int:
    """Sum declared layer sizes from `skopeo inspect` output.

    Newer skopeo reports sizes under LayersData; Layers is normally a list of
    digests, but entries carrying a Size are counted too. Anything else is 0.
    """
    if not isinstance(image_info, dict):
        return 0
    layers = image_info.get("LayersData") or image_info.get("Layers") or []
    if not isinstance(layers, list):
        return 0

    total = 0
    for layer in layers:
        if isinstance(layer, dict):
            size = layer.get("Size")
            if isinstance(size, int) and size > 0:
                total += size
    return total


class SizeEstimator:
    """Estimates tag size as the sum of its layer sizes. Never raises."""

    def __init__(self, skopeo_client):
        self.skopeo_client = skopeo_client

    def estimate(self, repository: str, tag: str) -> int:
        """Estimated size in bytes of repository:tag, 0 when metadata is unavailable"""
        reference = f"{repository}:{tag}"
        try:
            size = sum_layer_sizes(self.skopeo_client.inspect_image(reference))
        except Exception as e:
            logging.debug(f"Size estimation failed for {reference}: {e}")
            return 0
        logging.debug(f"Estimated size of {reference}: {size} bytes")
        return size
