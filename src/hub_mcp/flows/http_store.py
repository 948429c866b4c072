"""Rule store backed by the hub's web API over HTTP."""

from typing import Any

import httpx

from hub_mcp.flows.store import RawRules, RuleStoreError
from hub_mcp.flows.types import TokenSet
from hub_mcp.telemetry import RULE_STORE_REQUEST_FAILED, get_logger

log = get_logger(__name__)

SIMPLE_RULES_PATH = "/api/manager/flow/flow/"
COMPOSITE_RULES_PATH = "/api/manager/flow/advancedflow/"


class HttpRuleStore:
    """Reads rules from the hub web API and fires the marker trigger via a webhook.

    Usage:
        store = HttpRuleStore("http://192.168.1.20", api_token="...",
                              trigger_url="http://192.168.1.20/api/app/.../trigger")
        rules = await store.get_simple_rules()
        await store.aclose()
    """

    def __init__(
        self,
        base_url: str,
        api_token: str | None = None,
        trigger_url: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize store.

        Args:
            base_url: Hub base URL.
            api_token: Optional bearer token.
            trigger_url: Absolute or base-relative URL that accepts
                ``{"tokens": ..., "state": ...}`` and fires the marker trigger.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests use ``httpx.MockTransport``).
        """
        headers = {"Accept": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"

        self.trigger_url = trigger_url
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def _get_rules(self, path: str) -> RawRules:
        """GET a rule collection and normalize it to ``id -> record``."""
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            log.warning(RULE_STORE_REQUEST_FAILED, path=path, error=str(e))
            raise RuleStoreError(f"Failed to read rules from {path}: {e}") from e

        if isinstance(payload, dict):
            return {str(key): value for key, value in payload.items() if isinstance(value, dict)}
        if isinstance(payload, list):
            # Some firmware returns a list; key by the record id
            return {
                str(item.get("id", index)): item
                for index, item in enumerate(payload)
                if isinstance(item, dict)
            }
        raise RuleStoreError(f"Unexpected payload type from {path}: {type(payload).__name__}")

    async def get_simple_rules(self) -> RawRules:
        return await self._get_rules(SIMPLE_RULES_PATH)

    async def get_composite_rules(self) -> RawRules:
        return await self._get_rules(COMPOSITE_RULES_PATH)

    async def fire_trigger(self, tokens: TokenSet, state: dict[str, Any]) -> None:
        if not self.trigger_url:
            raise RuleStoreError("No trigger URL configured; cannot fire flows")

        try:
            response = await self._client.post(
                self.trigger_url, json={"tokens": tokens.as_tokens(), "state": state}
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.warning(
                RULE_STORE_REQUEST_FAILED,
                path=self.trigger_url,
                status_code=e.response.status_code,
            )
            raise RuleStoreError(
                f"Trigger request failed ({e.response.status_code}): {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            log.warning(RULE_STORE_REQUEST_FAILED, path=self.trigger_url, error=str(e))
            raise RuleStoreError(f"Trigger request failed: {e}") from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
