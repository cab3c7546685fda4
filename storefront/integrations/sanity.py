"""Sanity content backend client.

Thin async wrapper over the Sanity HTTP API:
- GROQ queries (``/data/query``) for catalog and order-history reads
- create mutations (``/data/mutate``) for order documents
"""

import json
from typing import Any

import httpx
import structlog

from storefront.core.config import Settings
from storefront.core.exceptions import ContentBackendError

logger = structlog.get_logger(__name__)


class SanityClient:
    """Client for one Sanity project/dataset pair."""

    def __init__(
        self,
        project_id: str,
        dataset: str,
        api_version: str,
        token: str = "",
        use_cdn: bool = False,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        """Initialize the client.

        Args:
            project_id: Sanity project ID
            dataset: Dataset name, e.g. ``production``
            api_version: Dated API version, e.g. ``2024-01-01``
            token: API token with write access (required for mutations)
            use_cdn: Serve queries from the API CDN
            http_client: Shared ``httpx.AsyncClient``; one is created when omitted
            timeout: Request timeout in seconds for an owned client
        """
        self.project_id = project_id
        self.dataset = dataset
        self.api_version = api_version.lstrip("v")
        self.token = token
        self.use_cdn = use_cdn
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient | None = None) -> "SanityClient":
        return cls(
            project_id=settings.sanity_project_id,
            dataset=settings.sanity_dataset,
            api_version=settings.sanity_api_version,
            token=settings.sanity_api_token,
            use_cdn=settings.sanity_use_cdn,
            http_client=http_client,
            timeout=settings.sanity_timeout_seconds,
        )

    def _base_url(self, cdn: bool = False) -> str:
        host = "apicdn.sanity.io" if cdn else "api.sanity.io"
        return f"https://{self.project_id}.{host}/v{self.api_version}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        if not self.project_id:
            raise ContentBackendError("Sanity project ID is not configured")

        try:
            response = await self._client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            raise ContentBackendError(f"Sanity request failed: {exc}") from exc

        if response.status_code >= 400:
            raise ContentBackendError(
                f"Sanity API error ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ContentBackendError("Sanity API returned a non-JSON response") from exc

        if not isinstance(data, dict):
            raise ContentBackendError(f"Sanity API returned a JSON {type(data).__name__}, expected an object")
        return data

    async def fetch(self, query: str, params: dict[str, Any] | None = None) -> Any:
        """Run a GROQ query and return its ``result``.

        Query parameters are JSON-encoded and passed as ``$name`` URL params.
        Token-authenticated requests bypass the CDN.
        """
        url_params = {"query": query}
        for name, value in (params or {}).items():
            url_params[f"${name}"] = json.dumps(value)

        cdn = self.use_cdn and not self.token
        url = f"{self._base_url(cdn=cdn)}/data/query/{self.dataset}"
        data = await self._request("GET", url, params=url_params)
        return data.get("result")

    async def create(self, document: dict[str, Any]) -> dict[str, Any]:
        """Create a document and return it as stored (with ``_id``, ``_createdAt``, ...)."""
        if not self.token:
            raise ContentBackendError("Sanity API token is required for mutations")

        url = f"{self._base_url()}/data/mutate/{self.dataset}"
        data = await self._request(
            "POST",
            url,
            params={"returnDocuments": "true", "visibility": "sync"},
            json={"mutations": [{"create": document}]},
        )

        results = data.get("results") or []
        if not results:
            raise ContentBackendError("Sanity mutation returned no results")

        created = results[0].get("document") or {"_id": results[0].get("id"), **document}
        logger.debug(
            "sanity_document_created",
            document_id=created.get("_id"),
            document_type=document.get("_type"),
            transaction_id=data.get("transactionId"),
        )
        return created

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
