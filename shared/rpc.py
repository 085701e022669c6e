"""
Chain Reader: pulls the latest blocks, with full transaction bodies, from a
public JSON-RPC endpoint per configured chain.
"""
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Mapping
import httpx
from web3 import Web3
from shared.chains import CHAIN_CONFIGS, ChainConfig
from shared.fetch import FetchResult, open_client
import structlog

logger = structlog.get_logger()


@dataclass
class RawTransaction:
    hash: str
    from_address: str
    to_address: str | None  # None for contract creation
    value_wei: int

    @property
    def value_native(self) -> float:
        return float(Web3.from_wei(self.value_wei, "ether"))


@dataclass
class RawBlock:
    number: int
    timestamp: int
    transactions: list[RawTransaction] = field(default_factory=list)


def _hex_to_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    return Web3.to_int(hexstr=value) if str(value).startswith("0x") else int(value)


def decode_transaction(tx: dict) -> RawTransaction:
    return RawTransaction(
        hash=tx.get("hash", ""),
        from_address=tx.get("from", ""),
        to_address=tx.get("to") or None,
        value_wei=_hex_to_int(tx.get("value")),
    )


def decode_block(block: dict) -> RawBlock:
    txs = [
        decode_transaction(tx)
        for tx in block.get("transactions") or []
        if isinstance(tx, dict)  # hash-only lists carry no values
    ]
    return RawBlock(
        number=_hex_to_int(block.get("number")),
        timestamp=_hex_to_int(block.get("timestamp")),
        transactions=txs,
    )


class ChainReader:
    """Single-attempt JSON-RPC reader. A failed call means "no block", never an error."""

    def __init__(
        self,
        chains: Mapping[str, ChainConfig] = CHAIN_CONFIGS,
        client: httpx.AsyncClient | None = None,
    ):
        self.chains = chains
        self._client = client
        self._ids = count(1)

    async def _call(self, http: httpx.AsyncClient, url: str, method: str, params: list) -> FetchResult[Any]:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            resp = await http.post(url, json=payload)
            if resp.status_code >= 400:
                return FetchResult.failure(method, f"http {resp.status_code}")
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            return FetchResult.failure(method, str(e))

        if not isinstance(data, dict):
            return FetchResult.failure(method, "malformed response")
        if data.get("error"):
            return FetchResult.failure(method, str(data["error"]))
        if data.get("result") is None:
            return FetchResult.failure(method, "empty result")
        return FetchResult.success(data["result"])

    async def fetch_latest_blocks(self, chain: str, count: int = 5) -> list[RawBlock]:
        """Latest `count` blocks, most recent first. Unreadable heights are skipped."""
        config = self.chains.get(chain)
        if config is None:
            return []

        async with open_client(self._client) as http:
            head = await self._call(http, config.rpc_url, "eth_blockNumber", [])
            if not head.ok:
                logger.warning("block_number_failed", chain=chain, error=head.error.reason)
                return []
            try:
                latest = _hex_to_int(head.value)
            except ValueError as e:
                logger.warning("block_number_failed", chain=chain, error=str(e))
                return []

            blocks: list[RawBlock] = []
            for height in range(latest, max(latest - count, -1), -1):
                result = await self._call(
                    http, config.rpc_url, "eth_getBlockByNumber", [hex(height), True]
                )
                if not result.ok:
                    logger.debug("block_fetch_failed", chain=chain, block=height, error=result.error.reason)
                    continue
                try:
                    blocks.append(decode_block(result.value))
                except (ValueError, TypeError, AttributeError) as e:
                    logger.debug("block_decode_failed", chain=chain, block=height, error=str(e))
        return blocks
