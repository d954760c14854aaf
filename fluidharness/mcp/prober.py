"""
MCP capability prober.

Discovers tool, prompt and resource names on an MCP server by issuing
JSON-RPC 2.0 list requests over HTTP. Discovery is advisory: every failure
degrades to an empty list for that capability kind plus a warning, and never
stops the other kinds from being probed.
"""

import time
from typing import Any

import httpx

from fluidharness.logging import get_logger, log_http_request, log_http_response
from fluidharness.types.mcp import McpCapabilities, ServerInfo

logger = get_logger("mcp")

# method, result key, request id
_LIST_METHODS = (
    ("tools/list", "tools", 1),
    ("prompts/list", "prompts", 2),
    ("resources/list", "resources", 3),
)


class McpProber:
    """
    Probe an MCP server for its advertised capabilities.

    Example:
        ```python
        with McpProber("https://fluidmcpserver.vercel.app/") as prober:
            info = prober.check_connectivity()
            capabilities = prober.probe()
            print(capabilities.tools)
        ```
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the prober.

        Args:
            base_url: Server base URL; requests go to <base>/mcp and <base>/info
            timeout: Request timeout in seconds
            http_client: Preconfigured httpx client (optional, used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                # Streamable-HTTP servers refuse requests that do not accept both
                "Accept": "application/json, text/event-stream",
            },
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/mcp"

    def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "McpProber":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def probe(self) -> McpCapabilities:
        """
        List tools, prompts and resources.

        Returns:
            McpCapabilities; a kind that could not be fetched is an empty list
        """
        logger.info("Fetching MCP capabilities from %s", self.endpoint)
        results: dict[str, list[str]] = {}
        for method, key, request_id in _LIST_METHODS:
            entries = self._list(method, key, request_id)
            if key == "resources":
                names = _names(entries, "uri", "name")
            else:
                names = _names(entries, "name")
            if names:
                logger.info("Found %d %s: %s", len(names), key, ", ".join(names))
            results[key] = names

        return McpCapabilities(
            tools=results["tools"],
            prompts=results["prompts"],
            resources=results["resources"],
        )

    def check_connectivity(self) -> ServerInfo | None:
        """
        Check that the server answers GET <base>/info.

        Returns:
            ServerInfo, or None if the server is unreachable or answers badly
        """
        url = f"{self.base_url}/info"
        log_http_request("GET", url)
        try:
            response = self._client.get(url)
        except httpx.HTTPError as e:
            logger.warning("MCP server connectivity check failed: %s", e)
            return None

        if not response.is_success:
            logger.warning("MCP server returned status %d", response.status_code)
            return None

        try:
            data = response.json()
        except ValueError:
            logger.warning("MCP server /info returned a non-JSON body")
            return None

        if not isinstance(data, dict):
            data = {}
        log_http_response(response.status_code, url, data)
        info = ServerInfo(
            version=str(data.get("version") or "unknown"),
            protocol=str(data.get("protocol") or "unknown"),
        )
        logger.info("MCP server is accessible (version=%s, protocol=%s)", info.version, info.protocol)
        return info

    def _list(self, method: str, key: str, request_id: int) -> list[Any]:
        """
        Issue one list request.

        Returns:
            The raw entries under result[key], or [] on any failure
        """
        body = {"jsonrpc": "2.0", "method": method, "params": {}, "id": request_id}
        log_http_request("POST", self.endpoint, body)

        started = time.monotonic()
        try:
            response = self._client.post(self.endpoint, json=body)
        except httpx.HTTPError as e:
            logger.warning("Could not fetch %s: %s", key, e)
            return []
        elapsed_ms = (time.monotonic() - started) * 1000

        if not response.is_success:
            log_http_response(response.status_code, self.endpoint, elapsed_ms=elapsed_ms)
            logger.warning("Could not fetch %s: HTTP %d", key, response.status_code)
            return []

        try:
            data = response.json()
        except ValueError:
            logger.warning("Could not fetch %s: response is not JSON", key)
            return []

        log_http_response(response.status_code, self.endpoint, data if isinstance(data, dict) else None, elapsed_ms)

        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, dict):
            error = data.get("error") if isinstance(data, dict) else None
            logger.warning("Could not fetch %s: no result in response%s", key, f" ({error})" if error else "")
            return []

        entries = result.get(key)
        if not isinstance(entries, list):
            logger.warning("Could not fetch %s: result has no %r list", key, key)
            return []

        return entries


def _names(entries: list[Any], *fields: str) -> list[str]:
    """Reduce capability entries to names, trying each field in order."""
    names = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        for name_field in fields:
            value = entry.get(name_field)
            if value:
                names.append(str(value))
                break
    return names
