"""
Shopify GraphQL Admin API client.

Every tool goes through this client. It owns the authenticated HTTP
transport and turns transport and protocol failures into the typed errors
in ``shopify_mcp.services.errors``:

- ``query`` returns the ``data`` payload or raises
- ``mutate`` separates business-rule rejections (``userErrors``) from failures
- ``query_all`` drains a paginated connection
"""

import asyncio
import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from shopify_mcp.config.settings import ShopifyConfig
from shopify_mcp.services.errors import (
    ConfigurationError,
    ShopifyAPIError,
    ShopifyRateLimitError,
    ShopifyTimeoutError,
    classify_error,
)
from shopify_mcp.utils import gid
from shopify_mcp.utils.logger import get_logger
from shopify_mcp.utils.pagination import (
    MAX_ACCUMULATED_ITEMS,
    PageExtractor,
    accumulate_pages,
)

logger = get_logger(__name__)

# Backoff bounds for rate-limit retries, in seconds
_MIN_BACKOFF = 0.5
_MAX_BACKOFF = 10.0


@dataclass
class MutationResult:
    """Outcome of a mutation.

    ``success`` is False only for business-rule rejections; transport and
    protocol failures raise instead.
    """

    success: bool
    data: Optional[Dict[str, Any]] = None
    user_errors: List[Dict[str, Any]] = field(default_factory=list)


def normalize_store_url(store_url: str) -> str:
    """Strip protocol and trailing slashes from a shop domain."""
    domain = store_url.strip()
    domain = domain.replace("https://", "").replace("http://", "")
    return domain.rstrip("/")


def _throttle_status(body: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    extensions = body.get("extensions") or {}
    cost = extensions.get("cost") or {}
    throttle = cost.get("throttleStatus")
    if throttle is None:
        return None
    return {
        "requested": cost.get("requestedQueryCost"),
        "actual": cost.get("actualQueryCost"),
        "maximum_available": throttle.get("maximumAvailable"),
        "currently_available": throttle.get("currentlyAvailable"),
        "restore_rate": throttle.get("restoreRate"),
    }


def compute_backoff(attempt: int, throttle: Optional[Dict[str, Any]] = None) -> float:
    """Seconds to wait before retrying a throttled request.

    With throttle telemetry, wait long enough for the bucket to refill the
    requested cost. Without it, back off exponentially.
    """
    if throttle:
        requested = throttle.get("requested")
        available = throttle.get("currently_available")
        restore_rate = throttle.get("restore_rate")
        if requested is not None and available is not None and restore_rate:
            delay = (requested - available) / restore_rate
            return min(max(delay, _MIN_BACKOFF), _MAX_BACKOFF)
    return min(_MIN_BACKOFF * (2 ** attempt), _MAX_BACKOFF)


class ShopifyGraphQLClient:
    """Authenticated client for the Shopify GraphQL Admin API."""

    def __init__(
        self,
        config: ShopifyConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if not config.store_url:
            raise ConfigurationError("SHOPIFY_STORE_URL is required")
        if not config.access_token:
            raise ConfigurationError("SHOPIFY_ACCESS_TOKEN is required")

        self._config = dataclasses.replace(config)
        self.shop_domain = normalize_store_url(config.store_url)
        self.api_version = config.api_version
        self.endpoint = (
            f"https://{self.shop_domain}/admin/api/{self.api_version}/graphql.json"
        )
        self.headers = {
            "X-Shopify-Access-Token": config.access_token,
            "Content-Type": "application/json",
        }
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_seconds,
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=40),
        )
        logger.info(
            "ShopifyGraphQLClient initialized",
            shop_domain=self.shop_domain,
            api_version=self.api_version,
            max_retries=config.max_retries,
        )

    def get_config(self) -> ShopifyConfig:
        """Return a copy of the configuration captured at construction."""
        return dataclasses.replace(self._config)

    async def close(self):
        """Close the underlying HTTPX client."""
        await self._client.aclose()

    async def __aenter__(self) -> "ShopifyGraphQLClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ── Static id helpers ───────────────────────────────────────────

    @staticmethod
    def to_gid(resource_type: str, resource_id) -> str:
        return gid.to_gid(resource_type, resource_id)

    @staticmethod
    def from_gid(global_id: str) -> str:
        return gid.from_gid(global_id)

    # ── Execution ───────────────────────────────────────────────────

    async def _post(
        self, document: str, variables: Optional[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Send one request and return the ``data`` payload."""
        payload: Dict[str, Any] = {"query": document}
        if variables:
            payload["variables"] = variables

        try:
            response = await self._client.post(
                self.endpoint,
                headers=self.headers,
                json=payload,
                timeout=self._config.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            logger.error("Shopify request timed out", timeout=self._config.timeout_seconds)
            raise ShopifyTimeoutError(
                f"Request timed out after {self._config.timeout_seconds}s"
            ) from e
        except httpx.HTTPError as e:
            logger.error("Shopify request failed", error=str(e))
            raise classify_error(str(e)) from e

        if response.status_code >= 400:
            message = f"HTTP {response.status_code}: {response.text[:200]}"
            logger.error("Shopify HTTP error", status_code=response.status_code)
            raise classify_error(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise ShopifyAPIError(
                "Invalid JSON in Shopify response", response.status_code
            ) from e

        throttle = _throttle_status(body)
        if throttle:
            logger.debug("Shopify query cost", **throttle)

        errors = body.get("errors")
        if errors:
            if not isinstance(errors, list):
                errors = [errors]
            error_messages = [
                e.get("message", str(e)) if isinstance(e, dict) else str(e)
                for e in errors
            ]
            error_code = None
            if isinstance(errors[0], dict):
                error_code = (errors[0].get("extensions") or {}).get("code")
            logger.error("GraphQL errors", errors=error_messages, code=error_code)
            error = classify_error(
                "; ".join(error_messages),
                status_code=response.status_code,
                error_code=error_code,
            )
            if isinstance(error, ShopifyRateLimitError):
                error.throttle_status = throttle
            raise error

        return body.get("data") or {}

    async def query(
        self, document: str, variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Execute a GraphQL document and return its ``data`` payload.

        Args:
            document: GraphQL query text.
            variables: Optional variables for the document.

        Returns:
            The response ``data`` object.

        Raises:
            ShopifyAPIError: A classified subclass for any transport or
                protocol failure.
        """
        attempt = 0
        while True:
            try:
                return await self._post(document, variables)
            except ShopifyRateLimitError as e:
                if attempt >= self._config.max_retries:
                    raise
                delay = compute_backoff(attempt, e.throttle_status)
                attempt += 1
                logger.warning(
                    "Throttled by Shopify, retrying",
                    attempt=attempt,
                    max_retries=self._config.max_retries,
                    delay=delay,
                )
                await asyncio.sleep(delay)

    async def mutate(
        self,
        document: str,
        variables: Optional[Dict[str, Any]],
        result_key: str,
        user_errors_key: str = "userErrors",
    ) -> MutationResult:
        """
        Execute a mutation and normalize its payload.

        Args:
            document: GraphQL mutation text.
            variables: Mutation variables.
            result_key: Top-level field of the mutation, e.g. ``productCreate``.
            user_errors_key: Field holding business-rule errors in the payload.

        Returns:
            MutationResult. User errors are returned, never raised.

        Raises:
            ValueError: If ``result_key`` is empty.
            ShopifyAPIError: On transport failure, or if the response has
                no ``result_key`` field.
        """
        if not result_key:
            raise ValueError("result_key is required for mutations")

        data = await self.query(document, variables)
        if result_key not in data:
            raise ShopifyAPIError(f"Mutation response is missing '{result_key}'")

        payload = data.get(result_key) or {}
        user_errors = payload.get(user_errors_key) or []
        if user_errors:
            logger.info(
                "Mutation rejected",
                mutation=result_key,
                user_errors=[e.get("message") for e in user_errors],
            )
            return MutationResult(success=False, data=None, user_errors=user_errors)

        return MutationResult(success=True, data=data, user_errors=[])

    async def query_all(
        self,
        document: str,
        variables: Optional[Dict[str, Any]],
        extractor: PageExtractor,
        max_items: int = MAX_ACCUMULATED_ITEMS,
    ) -> List[Any]:
        """Fetch every page of a connection and return the flattened items."""
        result = await accumulate_pages(
            self.query, document, variables, extractor, max_items=max_items
        )
        return result.items
