"""Run the local MCP test server as a subprocess."""

import subprocess
import sys
import time
from collections.abc import Callable
from typing import Any

import httpx

from fluidharness.exceptions import HarnessError
from fluidharness.logging import get_logger

logger = get_logger("mcp")


class LocalMCPServer:
    """
    Local MCP test server subprocess with guaranteed cleanup.

    Example:
        ```python
        with LocalMCPServer(port=3000) as server:
            prober = McpProber(server.url)
            capabilities = prober.probe()
        # process is terminated here, even if the block raised
        ```
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 3000,
        startup_timeout: float = 15.0,
        stop_timeout: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.host = host
        self.port = port
        self.startup_timeout = startup_timeout
        self.stop_timeout = stop_timeout
        self._sleep = sleep
        self._process: subprocess.Popen[bytes] | None = None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}/"

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process else None

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def command(self) -> list[str]:
        return [
            sys.executable,
            "-m",
            "fluidharness",
            "serve-mcp",
            "--host",
            self.host,
            "--port",
            str(self.port),
        ]

    def start(self) -> None:
        """
        Start the server and wait until GET /info answers.

        Raises:
            HarnessError: If the process exits early or never becomes ready
        """
        if self.running:
            return

        logger.info("Starting MCP server on %s", self.url)
        process = subprocess.Popen(
            self.command(),
            stdout=subprocess.DEVNULL,
            stderr=None,
        )
        self._process = process

        try:
            self._wait_ready(process)
        except BaseException:
            self.stop()
            raise

        logger.info("MCP server started (PID: %s)", process.pid)

    def stop(self) -> None:
        """Terminate the server, killing it if it ignores SIGTERM."""
        process = self._process
        if process is None:
            return
        self._process = None

        if process.poll() is not None:
            return

        logger.info("Stopping MCP server (PID: %s)", process.pid)
        process.terminate()
        try:
            process.wait(timeout=self.stop_timeout)
        except subprocess.TimeoutExpired:
            logger.warning("MCP server did not exit after %.0fs, killing it", self.stop_timeout)
            process.kill()
            process.wait()

    def __enter__(self) -> "LocalMCPServer":
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()

    def _wait_ready(self, process: "subprocess.Popen[bytes]") -> None:
        interval = 0.25
        deadline = time.monotonic() + self.startup_timeout
        info_url = f"{self.url}info"

        with httpx.Client(timeout=interval * 4) as client:
            while True:
                code = process.poll()
                if code is not None:
                    raise HarnessError("MCP_SERVER_EXITED", f"MCP server exited with code {code}")

                try:
                    if client.get(info_url).is_success:
                        return
                except httpx.HTTPError:
                    pass  # not listening yet

                if time.monotonic() >= deadline:
                    raise HarnessError(
                        "MCP_SERVER_TIMEOUT",
                        f"MCP server did not answer {info_url} within {self.startup_timeout:.0f}s",
                    )
                self._sleep(interval)
