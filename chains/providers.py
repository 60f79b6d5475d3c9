"""
chains/providers.py - Solana JSON-RPC access for the host harness.

Provides account fetching with:
- Multiple endpoint failover
- Request timeout handling
- Connection pooling
- Latency tracking

The adapter core never imports this module; it only consumes the bytes.
"""

import base64
import time
from dataclasses import dataclass
from typing import Any, Sequence

import httpx
from solders.pubkey import Pubkey

from core.logging import get_logger
from core.exceptions import InfraError, ErrorCode

logger = get_logger(__name__)

# getMultipleAccounts accepts at most 100 keys per call
MAX_ACCOUNTS_PER_CALL = 100


@dataclass
class RPCStats:
    """Statistics for an RPC endpoint."""
    url: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None
    last_success_ts: int | None = None

    @property
    def avg_latency_ms(self) -> int:
        if self.successful_requests == 0:
            return 0
        return self.total_latency_ms // self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests


@dataclass
class RPCResponse:
    """Response from an RPC call."""
    result: Any
    latency_ms: int
    endpoint_used: str


@dataclass
class AccountFetch:
    """Accounts fetched in one round trip. Missing accounts map to None."""
    accounts: dict[Pubkey, bytes | None]
    slot: int
    latency_ms: int


class RPCProvider:
    """
    RPC provider with failover support.

    Tries multiple endpoints in order until one succeeds.
    Tracks statistics per endpoint for monitoring.
    """

    def __init__(
        self,
        rpc_urls: list[str],
        timeout_seconds: int = 10,
        commitment: str = "confirmed",
    ):
        self.rpc_urls = list(rpc_urls)
        self.timeout_seconds = timeout_seconds
        self.commitment = commitment
        self._client: httpx.AsyncClient | None = None
        self._request_id = 0

        self.stats: dict[str, RPCStats] = {
            url: RPCStats(url=url) for url in self.rpc_urls
        }

    async def __aenter__(self) -> "RPCProvider":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(max_connections=10),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def call(
        self,
        method: str,
        params: list | None = None,
    ) -> RPCResponse:
        """
        Make an RPC call with failover.

        Args:
            method: RPC method name
            params: Method parameters

        Returns:
            RPCResponse with result and metadata

        Raises:
            InfraError: If all endpoints fail
        """
        if not self.rpc_urls:
            raise InfraError(
                "No RPC endpoints configured",
                code=ErrorCode.INFRA_RPC_ERROR,
            )

        client = await self._get_client()
        last_error: Exception | None = None

        for url in self.rpc_urls:
            stats = self.stats[url]
            stats.total_requests += 1

            payload = {
                "jsonrpc": "2.0",
                "method": method,
                "params": params or [],
                "id": self._next_request_id(),
            }

            start_ms = int(time.time() * 1000)

            try:
                resp = await client.post(url, json=payload)
                latency_ms = int(time.time() * 1000) - start_ms

                result = resp.json()

                if not isinstance(result, dict):
                    result = {"error": f"Malformed JSON-RPC body: {result!r}"}

                if "error" in result:
                    error = result["error"]
                    error_msg = error.get("message", str(error)) if isinstance(error, dict) else str(error)
                    stats.failed_requests += 1
                    stats.last_error = error_msg
                    last_error = InfraError(
                        f"RPC error: {error_msg}",
                        code=ErrorCode.INFRA_RPC_ERROR,
                        details={"url": url, "method": method},
                    )
                    logger.debug(f"RPC error from {url}: {error_msg}")
                    continue

                stats.successful_requests += 1
                stats.total_latency_ms += latency_ms
                stats.last_success_ts = int(time.time() * 1000)

                return RPCResponse(
                    result=result.get("result"),
                    latency_ms=latency_ms,
                    endpoint_used=url,
                )

            except httpx.TimeoutException as e:
                latency_ms = int(time.time() * 1000) - start_ms
                stats.failed_requests += 1
                stats.last_error = f"Timeout after {latency_ms}ms"
                last_error = e
                logger.debug(f"RPC timeout for {url}: {latency_ms}ms")
                continue

            except (httpx.HTTPError, ValueError) as e:
                stats.failed_requests += 1
                stats.last_error = str(e)
                last_error = e
                logger.debug(f"RPC failed for {url}: {e}")
                continue

        raise InfraError(
            f"All RPC endpoints failed for {method}",
            code=ErrorCode.INFRA_RPC_ERROR,
            details={
                "method": method,
                "endpoints_tried": len(self.rpc_urls),
                "last_error": str(last_error),
            },
        )

    async def get_multiple_accounts(self, addresses: Sequence[Pubkey]) -> AccountFetch:
        """
        Fetch raw data for several accounts.

        Args:
            addresses: Account addresses (at most MAX_ACCOUNTS_PER_CALL)

        Returns:
            AccountFetch with base64-decoded data and the context slot
        """
        if len(addresses) > MAX_ACCOUNTS_PER_CALL:
            raise InfraError(
                f"getMultipleAccounts accepts at most {MAX_ACCOUNTS_PER_CALL} keys",
                code=ErrorCode.INFRA_RPC_ERROR,
                details={"requested": len(addresses)},
            )

        response = await self.call(
            "getMultipleAccounts",
            [
                [str(address) for address in addresses],
                {"encoding": "base64", "commitment": self.commitment},
            ],
        )

        try:
            slot = int(response.result["context"]["slot"])
            values = response.result["value"]
            accounts: dict[Pubkey, bytes | None] = {}
            for address, value in zip(addresses, values):
                accounts[address] = base64.b64decode(value["data"][0]) if value else None
        except (KeyError, TypeError, IndexError, ValueError) as e:
            raise InfraError(
                f"Malformed getMultipleAccounts response: {e}",
                code=ErrorCode.INFRA_RPC_ERROR,
                details={"endpoint": response.endpoint_used},
            ) from e

        logger.debug(
            f"Fetched {len(accounts)} accounts",
            extra={"context": {"slot": slot, "latency_ms": response.latency_ms}},
        )
        return AccountFetch(accounts=accounts, slot=slot, latency_ms=response.latency_ms)

    def get_stats_summary(self) -> dict:
        """Get statistics summary for all endpoints."""
        return {
            url: {
                "total_requests": s.total_requests,
                "success_rate": round(s.success_rate, 3),
                "avg_latency_ms": s.avg_latency_ms,
                "last_error": s.last_error,
            }
            for url, s in self.stats.items()
        }
