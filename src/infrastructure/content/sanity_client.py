"""
infrastructure.content.sanity_client - HTTP client for the Sanity query API.

Implements the raw `fetch(query, params) -> JSON` contract the CMS
exposes. Uses requests via run_in_executor for async compat, the same
way every other HTTP collaborator in this project is called.

Query parameters are passed as `$name=<json>` URL parameters, per the
Sanity HTTP API; the response body is `{"result": ...}`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

import requests

from domain.exceptions import ContentSourceError

logger = logging.getLogger(__name__)


class SanityClient:
    """Minimal async wrapper around GET /data/query/{dataset}."""

    def __init__(
        self,
        base_url: str,
        dataset: str,
        token: str = "",
        timeout: float = 10.0,
        http: Optional[requests.Session] = None,
    ):
        self._query_url = f"{base_url.rstrip('/')}/data/query/{dataset}"
        self._token = token
        self._timeout = timeout
        self._http = http or requests.Session()

    async def fetch(self, query: str, params: Optional[dict[str, Any]] = None) -> Any:
        """Run a GROQ query and return its `result`.

        Raises:
            ContentSourceError: If the API is unreachable or returns an error.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._call_api, query, params or {})

    def _call_api(self, query: str, params: dict[str, Any]) -> Any:
        """Synchronous HTTP call (runs in thread pool)."""
        query_params = {"query": query}
        for name, value in params.items():
            query_params[f"${name}"] = json.dumps(value)
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else {}

        try:
            response = self._http.get(
                self._query_url,
                params=query_params,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.exceptions.ConnectionError as e:
            raise ContentSourceError(
                f"Content API unreachable at {self._query_url}: {e}"
            ) from e
        except requests.exceptions.Timeout as e:
            raise ContentSourceError(
                f"Content API timed out after {self._timeout}s"
            ) from e
        except requests.exceptions.RequestException as e:
            raise ContentSourceError(f"Content API request failed: {e}") from e

        if not response.ok:
            raise ContentSourceError(
                f"Content API returned HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ContentSourceError("Content API returned invalid JSON") from e

        logger.debug("Content query ok (%d ms)", body.get("ms", -1))
        return body.get("result")
