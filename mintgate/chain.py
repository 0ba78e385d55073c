# mintgate/chain.py
import asyncio
from typing import Awaitable, Iterable, List, Sequence, TypeVar

import aiohttp
from web3 import AsyncWeb3

from .config import RPC_TIMEOUT
from .errors import ConfigurationError, ProviderUnavailable
from .models import ProviderHandle
from .util import get_logger, short
log = get_logger()

T = TypeVar("T")

# transport-level failures; JSON-RPC errors (reverts, bad nonce...) are not in here.
# aiohttp.ServerTimeoutError is also an asyncio.TimeoutError, so check these first.
CONNECTION_ERRORS = (aiohttp.ClientError, ConnectionError)

async def rpc(call: Awaitable[T], timeout: float, what: str) -> T:
    """Await one RPC call with a hard bound; transport failures become ProviderUnavailable."""
    try:
        return await asyncio.wait_for(call, timeout)
    except CONNECTION_ERRORS as e:
        raise ProviderUnavailable(f"{what}: {e}") from e
    except asyncio.TimeoutError:
        raise ProviderUnavailable(f"{what}: no answer within {timeout:g}s")

def get_w3(url: str, timeout: float = RPC_TIMEOUT) -> AsyncWeb3:
    if not url:
        raise ConfigurationError("RPC url required")
    return AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(url, request_kwargs={"timeout": timeout}))

def get_provider(url: str, timeout: float = RPC_TIMEOUT) -> ProviderHandle:
    return ProviderHandle(url=url, w3=get_w3(url, timeout))


class ProviderPool:
    """
    Fixed set of RPC endpoints; wallet i goes to providers[i % N].
    Handles are shared between wallets and never locked.
    """

    def __init__(self, providers: Sequence[ProviderHandle]):
        self.providers: List[ProviderHandle] = list(providers)

    @classmethod
    def from_urls(cls, urls: Iterable[str], timeout: float = RPC_TIMEOUT) -> "ProviderPool":
        urls = [u for u in urls if u]
        if not urls:
            raise ConfigurationError("Custom RPCs are not configured")
        pool = cls([get_provider(u, timeout) for u in urls])
        log.info(f"provider pool: {len(pool)} endpoint(s)")
        return pool

    def __len__(self) -> int:
        return len(self.providers)

    def assign(self, wallet_index: int) -> ProviderHandle:
        if not self.providers:
            raise ConfigurationError("provider pool is empty")
        p = self.providers[wallet_index % len(self.providers)]
        log.debug(f"wallet #{wallet_index} -> {short(p.url, 16)}")
        return p
