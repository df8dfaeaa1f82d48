import logging
from typing import Dict

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3


class FaviconProbe:
    """
    Best-effort check that a favicon endpoint actually serves an image.

    Results are cached per icon URL for the life of the probe. Any network
    error or non-image response counts as unavailable, so the list falls
    back to the initial-letter box.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout
        self._cache: Dict[str, bool] = {}

    def fetch(self, icon_url: str) -> bool:
        try:
            resp = requests.get(icon_url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Favicon fetch failed for %s: %s", icon_url, exc)
            return False
        if resp.status_code != 200:
            return False
        content_type = resp.headers.get("content-type", "")
        return content_type.startswith("image/")

    def is_available(self, icon_url: str) -> bool:
        if icon_url not in self._cache:
            self._cache[icon_url] = self.fetch(icon_url)
        return self._cache[icon_url]
