"""In-memory stand-ins for AsyncWeb3 used by the tests."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from eth_account import Account
from eth_utils import keccak
from hexbytes import HexBytes

from mintgate.models import MintConfig, ProviderHandle, WalletRecord

ONE = 10**18
NFT = "0x" + "11" * 20
LAUNCHPAD = "0xa8e9fdf57bbd991c3f494273198606632769db99"


class FakeEth:
    def __init__(
        self,
        balances: Optional[Dict[str, int]] = None,
        nonces: Optional[Dict[str, int]] = None,
        blocks: Optional[list] = None,
        balance_error: Optional[BaseException] = None,
        send_error: Optional[BaseException] = None,
        send_delay: float = 0.0,
        receipt_status: int = 1,
        receipt_delay: float = 0.0,
        receipt_error: Optional[BaseException] = None,
        receipt_block: Optional[int] = 100,
    ):
        self.balances = balances or {}
        self.nonces = nonces or {}
        self.blocks = list(blocks or [])
        self.balance_error = balance_error
        self.send_error = send_error
        self.send_delay = send_delay
        self.receipt_status = receipt_status
        self.receipt_delay = receipt_delay
        self.receipt_error = receipt_error
        self.receipt_block = receipt_block
        self.sent: List[bytes] = []
        self.block_calls = 0

    async def get_balance(self, address):
        if self.balance_error:
            raise self.balance_error
        return self.balances.get(address, 0)

    async def get_transaction_count(self, address, block_identifier="latest"):
        return self.nonces.get(address, 0)

    async def get_block(self, block_identifier):
        self.block_calls += 1
        item = self.blocks.pop(0) if len(self.blocks) > 1 else self.blocks[0]
        if isinstance(item, BaseException):
            raise item
        return item

    async def send_raw_transaction(self, raw):
        if self.send_delay:
            await asyncio.sleep(self.send_delay)
        if self.send_error:
            raise self.send_error
        self.sent.append(bytes(raw))
        return HexBytes(keccak(bytes(raw)))

    async def wait_for_transaction_receipt(self, tx_hash, timeout=120, poll_latency=0.1):
        if self.receipt_delay:
            await asyncio.sleep(self.receipt_delay)
        if self.receipt_error:
            raise self.receipt_error
        receipt = {"status": self.receipt_status, "transactionHash": tx_hash}
        if self.receipt_block is not None:
            receipt["blockNumber"] = self.receipt_block
        return receipt


class FakeWeb3:
    def __init__(self, **kwargs):
        self.eth = FakeEth(**kwargs)


def handle(url: str = "http://rpc-0", **kwargs) -> ProviderHandle:
    return ProviderHandle(url=url, w3=FakeWeb3(**kwargs))


def make_wallets(n: int) -> List[WalletRecord]:
    out = []
    for i in range(n):
        pk = "0x" + f"{i + 1:064x}"
        out.append(WalletRecord(address=Account.from_key(pk).address, private_key=pk))
    return out


def make_cfg(**overrides) -> MintConfig:
    values = dict(
        nft_contract=NFT,
        stage_index=0,
        is_public=True,
        price_per_mint=ONE,
        mint_quantity=1,
        gas_limit=2_000_000,
        gas_price=60_000_000_000,
        target_time=datetime(2020, 1, 1, tzinfo=timezone.utc),
        rpc_urls=("http://rpc-0",),
        primary_rpc="http://rpc-0",
        launchpad=LAUNCHPAD,
        chain_id=2020,
        gas_reserve=3 * ONE,
    )
    values.update(overrides)
    return MintConfig(**values)


class FakeClock:
    """Simulated time; sleeping advances it."""

    def __init__(self, start: datetime):
        self.current = start
        self.sleeps: List[float] = []

    def now(self) -> datetime:
        return self.current

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += timedelta(seconds=seconds)
