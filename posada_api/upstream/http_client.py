"""
Thin JSON-over-HTTP client used by the upstream providers.
"""

import logging
import time
from typing import Any, Dict, Optional

import requests
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 429


class UpstreamError(Exception):
    """An upstream call failed: network error, non-200 status or bad JSON."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class HttpClient:
    """Issues JSON requests with a fixed per-call timeout."""

    def __init__(
        self,
        timeout: float,
        session: Optional[requests.Session] = None,
        headers: Optional[Dict[str, str]] = None,
        retry_delay: float = 5.0,
        sleep=time.sleep,
    ):
        self.timeout = timeout
        self._session = session or requests.Session()
        self._headers = dict(headers or {})
        self.retry_delay = retry_delay
        self._sleep = sleep

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                 retry_on_rate_limit: bool = False) -> Any:
        return self._request("GET", url, params=params, retry_on_rate_limit=retry_on_rate_limit)

    def post_json(self, url: str, payload: Dict[str, Any], retry_on_rate_limit: bool = False) -> Any:
        return self._request("POST", url, json=payload, retry_on_rate_limit=retry_on_rate_limit)

    def _request(self, method: str, url: str, retry_on_rate_limit: bool = False, **kwargs) -> Any:
        response = self._send(method, url, **kwargs)

        if response.status_code == RATE_LIMIT_STATUS and retry_on_rate_limit:
            logger.warning(f"{method} {url} rate limited; retrying once in {self.retry_delay}s")
            self._sleep(self.retry_delay)
            response = self._send(method, url, **kwargs)

        if response.status_code != 200:
            raise UpstreamError(f"{method} {url} returned HTTP {response.status_code}",
                                status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"{method} {url} returned invalid JSON: {e}",
                                status_code=response.status_code)

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self._session.request(method, url, headers=self._headers, timeout=self.timeout, **kwargs)
        except RequestException as e:
            raise UpstreamError(f"{method} {url} failed: {e}")
