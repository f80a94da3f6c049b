"""
WordPress REST forwarding for generated stylesheets.

The companion plugin exposes ``/wp-json/device-tester/v1/css-changes`` on the
site; every request carries the caller-supplied key in a header.
"""

import logging
from typing import Any, Optional

import requests

from errors import ResponseParseError, UpstreamFailure

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Device-Tester-Key"
CSS_CHANGES_PATH = "/wp-json/device-tester/v1/css-changes"


class WordPressClient:
    def __init__(self, timeout: float = 30, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, url: str, api_key: str, payload: Optional[dict] = None) -> dict:
        try:
            response = self.session.post(
                url,
                json=payload or {},
                headers={API_KEY_HEADER: api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"❌ WordPress request failed ({url}): {str(e)}")
            raise UpstreamFailure("WordPress request failed", details=str(e))

        try:
            data = response.json()
        except ValueError:
            raise ResponseParseError("WordPress returned a non-JSON response")
        if not isinstance(data, dict):
            raise ResponseParseError("WordPress returned an unexpected response")
        if data.get("success") is False:
            raise UpstreamFailure(
                "WordPress rejected the request",
                details=data.get("message"),
            )
        return data

    def apply_css(
        self,
        site_url: str,
        api_key: str,
        page_id: int,
        css: str,
        device_type: str,
    ) -> Any:
        """Store a stylesheet for a page; returns the change id assigned by WordPress."""
        data = self._post(
            site_url.rstrip("/") + CSS_CHANGES_PATH,
            api_key,
            {"page_id": page_id, "css_content": css, "device_type": device_type},
        )
        if data.get("change_id") is None:
            raise ResponseParseError("WordPress response did not include a change_id")
        logger.info(f"✅ Applied CSS to {site_url} page {page_id} (change {data['change_id']})")
        return data["change_id"]

    def revert_css(self, site_url: str, api_key: str, change_id: str) -> dict:
        data = self._post(
            f"{site_url.rstrip('/')}{CSS_CHANGES_PATH}/{change_id}/revert",
            api_key,
        )
        logger.info(f"↩️  Reverted CSS change {change_id} on {site_url}")
        return data

    def close(self):
        self.session.close()
