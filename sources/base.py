"""Base source class with common functionality."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from config import REQUEST_TIMEOUT, load_catalog
from errors import NetworkError, ParseError
from models.opportunity import Opportunity

logger = logging.getLogger(__name__)


class BaseSource(ABC):
    """Abstract base class for all yield sources.

    Subclasses implement _fetch_data(); fetch() never raises and reports the
    last failure through last_error.
    """

    name: str = ""
    catalog_key: str = ""

    def __init__(self, catalog: Optional[Dict[str, Any]] = None):
        """Initialize the source.

        Args:
            catalog: This source's catalog section. Loaded from the
                process-wide catalog when omitted.
        """
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "Accept": "application/json, text/html, */*",
            "Accept-Language": "en-US,en;q=0.9",
        })
        if catalog is None:
            catalog = load_catalog().get(self.catalog_key, {}) if self.catalog_key else {}
        self.catalog = catalog
        self.last_error: Optional[str] = None

    def _make_request(
        self,
        url: str,
        method: str = "GET",
        params: Optional[Dict] = None,
        json_data: Optional[Dict] = None,
        headers: Optional[Dict] = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> requests.Response:
        """Make an HTTP request with a bounded timeout.

        Args:
            url: URL to request.
            method: HTTP method.
            params: Query parameters.
            json_data: JSON body data.
            headers: Additional headers.
            timeout: Request timeout in seconds.

        Returns:
            Response object.

        Raises:
            NetworkError: If the request fails or returns a non-2xx status.
        """
        request_headers = dict(self.session.headers)
        if headers:
            request_headers.update(headers)

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                headers=request_headers,
                timeout=timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e
        return response

    def _get_json(self, url: str, **kwargs) -> Any:
        """Request a URL and decode its JSON body.

        Raises:
            NetworkError: If the request fails.
            ParseError: If the body is not valid JSON.
        """
        headers = {"Accept": "application/json"}
        headers.update(kwargs.pop("headers", None) or {})
        response = self._make_request(url, headers=headers, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f"Invalid JSON from {url}: {e}") from e

    def fetch(self) -> List[Opportunity]:
        """Fetch yield opportunities.

        Returns:
            List of opportunities; empty when the source failed.
        """
        self.last_error = None
        try:
            opportunities = self._fetch_data()
        except Exception as e:
            self.last_error = f"{type(e).__name__}: {e}"
            logger.warning("%s failed: %s", self.name, self.last_error)
            return []

        logger.debug("%s returned %d opportunities", self.name, len(opportunities))
        return opportunities

    @abstractmethod
    def _fetch_data(self) -> List[Opportunity]:
        """Fetch data from the source. Must be implemented by subclasses.

        Returns:
            List of opportunities.
        """
        pass
