"""
Chain JSON-RPC client.

Handles JSON-RPC 2.0 communication with an EVM node over HTTP and parses
error responses into typed exceptions. Requests are not retried; the only
retry in the harness is the indexing poll.
"""

import itertools
import time
from decimal import Decimal
from typing import Any

import httpx

from fluidharness.exceptions import ConnectivityError, RpcError
from fluidharness.logging import log_http_request, log_http_response

WEI_PER_ETHER = 10**18


def format_ether(wei: int) -> str:
    """Render a wei amount as ether, e.g. 1500000000000000000 -> "1.5"."""
    value = Decimal(wei) / Decimal(WEI_PER_ETHER)
    text = format(value.normalize(), "f")
    return text if "." in text else f"{text}.0"


class ChainClient:
    """
    JSON-RPC client for the chain reads the harness needs.

    Example:
        ```python
        with ChainClient("https://ethereum-sepolia-rpc.publicnode.com") as chain:
            chain_id = chain.chain_id()
            balance = chain.get_balance("0x1059Ed65AD58ffc83642C9Be3f24C250905a28FB")
        ```
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the chain client.

        Args:
            rpc_url: JSON-RPC endpoint
            timeout: Request timeout in seconds
            http_client: Preconfigured httpx client (optional, used by tests)
        """
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._ids = itertools.count(1)
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ChainClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def call(self, method: str, params: list[Any] | None = None) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_chainId")
            params: Positional parameters

        Returns:
            The "result" member of the response

        Raises:
            ConnectivityError: If the node cannot be reached
            RpcError: On HTTP error status or JSON-RPC error object
        """
        body = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": next(self._ids),
        }
        log_http_request("POST", self.rpc_url, body)

        started = time.monotonic()
        try:
            response = self._client.post(self.rpc_url, json=body)
        except httpx.RequestError as e:
            raise ConnectivityError(f"{method} failed: {e}") from e
        elapsed_ms = (time.monotonic() - started) * 1000

        if response.status_code >= 400:
            log_http_response(response.status_code, self.rpc_url, elapsed_ms=elapsed_ms)
            raise RpcError(
                "HTTP_ERROR",
                f"{method} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RpcError("INVALID_RESPONSE", f"{method} returned non-JSON body") from e

        log_http_response(response.status_code, self.rpc_url, data, elapsed_ms)
        return self._parse_result(method, data)

    def chain_id(self) -> int:
        """Return the chain id reported by the node."""
        return int(self.call("eth_chainId"), 16)

    def get_balance(self, address: str, block: str = "latest") -> int:
        """
        Return the balance of an address in wei.

        Args:
            address: Account address
            block: Block tag (default: "latest")
        """
        return int(self.call("eth_getBalance", [address, block]), 16)

    def _parse_result(self, method: str, data: Any) -> Any:
        """
        Extract the result from a JSON-RPC response.

        Args:
            method: Method that was called (for error messages)
            data: Decoded response body

        Returns:
            The result value

        Raises:
            RpcError: If the response carries an error or no result
        """
        if not isinstance(data, dict):
            raise RpcError("INVALID_RESPONSE", f"{method} returned a non-object body")

        error = data.get("error")
        if error:
            code = str(error.get("code", "RPC_ERROR")) if isinstance(error, dict) else "RPC_ERROR"
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise RpcError(code, f"{method}: {message}")

        if "result" not in data:
            raise RpcError("INVALID_RESPONSE", f"{method} response has no result")

        return data["result"]
