#!/usr/bin/env python3
"""
HTTP client for the check-in API, driven by an ApiDescriptor.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from obito_checkin.config import REQUEST_TIMEOUT_MS
from obito_checkin.core.descriptor_models import ApiDescriptor, PROFILE_ENDPOINT, CHECK_IN_ENDPOINT
from obito_checkin.utils import mask_proxy_url

logger = logging.getLogger(__name__)


class ApiResponseError(requests.RequestException):
    """A 2xx response whose body is not the JSON object the API promises."""


class CheckInApiClient:
    """Session wrapper issuing bearer-authenticated profile and check-in calls."""

    def __init__(self, descriptor: ApiDescriptor, proxy_url: Optional[str] = None,
                 timeout_ms: Optional[int] = None):
        self.descriptor = descriptor
        self.proxy_url = proxy_url
        self.session = requests.Session()
        self._setup_session()
        effective_timeout = int(descriptor.timeouts.get("request", timeout_ms or REQUEST_TIMEOUT_MS))
        self.timeout = max(effective_timeout, 1) / 1000.0

    def _setup_session(self):
        self.session.headers.update(
            {
                "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
                "Accept": "application/json, text/plain, */*",
                "Accept-Language": "en-US,en;q=0.9",
                "Connection": "keep-alive",
            }
        )
        self.session.headers.update(self.descriptor.headers)
        if self.proxy_url:
            self.session.proxies.update({"http": self.proxy_url, "https": self.proxy_url})
            logger.debug(f"Using proxy: {mask_proxy_url(self.proxy_url)}")

    def close(self) -> None:
        self.session.close()

    def _request(self, endpoint_name: str, token: str, strict: bool = True) -> Dict[str, Any]:
        """Issue one call; ``strict`` requires the 2xx body to be a JSON object."""
        ep = self.descriptor.endpoint(endpoint_name)
        url = self.descriptor.url_for(endpoint_name)
        kwargs: Dict[str, Any] = {
            "headers": {"Authorization": f"Bearer {token}"},
            "timeout": self.timeout,
        }
        if ep.body is not None:
            kwargs["json"] = ep.body

        resp = self.session.request(ep.method, url, **kwargs)
        logger.debug(f"{self.descriptor.service_key}/{ep.name}: status={resp.status_code}")
        if not 200 <= int(resp.status_code) < 300:
            raise requests.HTTPError(f"{resp.status_code} error for {ep.name}", response=resp)

        if not (resp.text or "").strip():
            return {}
        try:
            payload = resp.json()
        except ValueError as exc:
            if not strict:
                return {}
            raise ApiResponseError(f"Invalid JSON from {ep.name}: {exc}", response=resp) from exc
        if not isinstance(payload, dict):
            if not strict:
                return {"body": payload}
            raise ApiResponseError(f"Unexpected payload type from {ep.name}: {type(payload).__name__}", response=resp)
        return payload

    def fetch_profile(self, token: str) -> Optional[Dict[str, Any]]:
        """Return the account object from the profile envelope, or None if absent."""
        payload = self._request(PROFILE_ENDPOINT, token)
        data_key = self.descriptor.response.data_key
        account = payload.get(data_key) if data_key else payload
        if not account or not isinstance(account, dict):
            return None
        return account

    def check_in(self, token: str) -> Dict[str, Any]:
        # Any 2xx is a completed check-in, whatever the body looks like.
        return self._request(CHECK_IN_ENDPOINT, token, strict=False)
