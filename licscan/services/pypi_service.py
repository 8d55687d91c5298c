"""PyPI JSON API client used to enrich packages with license metadata."""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote, urljoin

import requests

from licscan.models import DEFAULT_REGISTRY_URL
from licscan.utils.api_error_handler import handle_external_api_errors
from licscan.utils.exceptions import RegistryUnavailableError

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 10
SERVICE_NAME = "PyPI"


class PyPIRegistryClient:
    """Fetches ``info`` metadata for a release from the PyPI JSON API.

    Redirects are followed manually with a hop budget so the bound is
    explicit: a chain of ``max_redirects`` redirects still resolves, one more
    yields empty metadata. No response is cached between calls.
    """

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        timeout: float = 10,
        max_redirects: int = MAX_REDIRECTS,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            registry_url: Base URL of the registry
            timeout: Per-request timeout in seconds
            max_redirects: Number of redirects followed before giving up
            session: Optional pre-configured session (tests inject a mock)
        """
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.logger = logger
        self.stats = {"api_calls": 0, "redirects": 0, "errors": 0}

        if session is None:
            session = requests.Session()
            session.headers.update({
                "User-Agent": "licscan/0.1 (License Compliance Scan)",
                "Accept": "application/json",
            })
        self.session = session

    def release_url(self, name: str, version: str) -> str:
        return (
            f"{self.registry_url}/pypi/{quote(name, safe='')}/"
            f"{quote(version, safe='')}/json"
        )

    @handle_external_api_errors(service=SERVICE_NAME, return_on_error={})
    def pypi_def(self, name: str, version: str) -> Dict[str, Any]:
        """Return the ``info`` mapping for ``name==version``.

        Any non-success outcome yields an empty mapping. Transport failures
        are logged by the decorator and also yield an empty mapping.
        """
        response = self.pypi_request(self.release_url(name, version))

        if not 200 <= response.status_code < 300:
            self.logger.debug(str(RegistryUnavailableError(
                f"No metadata for {name}@{version}",
                service=SERVICE_NAME,
                endpoint=response.url,
                status_code=response.status_code,
            )))
            return {}

        try:
            body = response.json()
        except ValueError:
            self.logger.debug(f"Undecodable registry response for {name}@{version}")
            return {}

        info = body.get("info") if isinstance(body, dict) else None
        return dict(info) if isinstance(info, dict) else {}

    def pypi_request(self, location: str) -> requests.Response:
        """GET ``location``, following up to ``max_redirects`` redirects.

        Returns the last response received: a final non-redirect response,
        or the redirect that exhausted the hop budget.
        """
        remaining = self.max_redirects
        url = location

        while True:
            self.stats["api_calls"] += 1
            response = self.session.get(url, allow_redirects=False, timeout=self.timeout)

            target = None
            if 300 <= response.status_code < 400:
                target = response.headers.get("location")
            if not target or remaining <= 0:
                return response

            url = urljoin(url, target)
            remaining -= 1
            self.stats["redirects"] += 1
