"""Read back pinned registration files through an IPFS HTTP gateway."""

from typing import Any

import httpx

from fluidharness.exceptions import ConnectivityError, RpcError
from fluidharness.logging import get_logger

logger = get_logger("ipfs")


class IpfsGateway:
    """HTTP gateway client, e.g. https://<name>.mypinata.cloud/ipfs/<cid>."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        if not self.base_url.endswith("/ipfs"):
            self.base_url += "/ipfs"
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "IpfsGateway":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def fetch_json(self, cid: str) -> dict[str, Any]:
        """
        Fetch a JSON document by content identifier.

        Raises:
            ConnectivityError: If the gateway cannot be reached
            RpcError: On error status or a non-object body
        """
        url = f"{self.base_url}/{cid}"
        try:
            response = self._client.get(url)
        except httpx.RequestError as e:
            raise ConnectivityError(f"IPFS gateway unreachable: {e}") from e

        if not response.is_success:
            raise RpcError(
                "HTTP_ERROR",
                f"IPFS gateway returned HTTP {response.status_code} for {cid}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RpcError("INVALID_RESPONSE", f"IPFS content {cid} is not JSON") from e

        if not isinstance(data, dict):
            raise RpcError("INVALID_RESPONSE", f"IPFS content {cid} is not a JSON object")
        return data


def find_mcp_endpoint(registration: dict[str, Any]) -> dict[str, Any] | None:
    """Return the MCP entry of a registration file's endpoints, if any."""
    for endpoint in registration.get("endpoints") or []:
        if isinstance(endpoint, dict) and str(endpoint.get("name", "")).lower() == "mcp":
            return endpoint
    return None
