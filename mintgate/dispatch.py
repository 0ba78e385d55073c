# mintgate/dispatch.py
import asyncio
from typing import Iterable, List, Sequence

from web3 import Web3
from web3.exceptions import TimeExhausted

from .chain import CONNECTION_ERRORS
from .config import CONFIRM_TIMEOUT, SUBMIT_TIMEOUT
from .errors import (
    ConfirmationTimeout, ProviderUnavailable, SubmissionError, TransactionReverted,
)
from .models import DispatchOutcome, DispatchStatus, DispatchSummary, PreparedTransaction
from .util import get_logger, make_account, on_error, short
log = get_logger()


def describe(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"


class DispatchCoordinator:
    """
    Fires every prepared transaction at once and waits for all of them.

    Each wallet runs in its own task; whatever goes wrong inside it ends up
    as a FAILED outcome for that wallet only. dispatch_all returns one
    outcome per input, in input order, after every task is terminal.
    """

    def __init__(self, submit_timeout: float = SUBMIT_TIMEOUT, confirm_timeout: float = CONFIRM_TIMEOUT,
                 poll_latency: float = 0.5):
        self.submit_timeout = submit_timeout
        self.confirm_timeout = confirm_timeout
        self.poll_latency = poll_latency

    async def dispatch_all(self, prepared: Sequence[PreparedTransaction]) -> List[DispatchOutcome]:
        if not prepared:
            return []
        log.info(f"dispatching {len(prepared)} transaction(s)")
        tasks = [
            asyncio.create_task(self._run_one(p), name=f"dispatch-{p.wallet_address}")
            for p in prepared
        ]
        return list(await asyncio.gather(*tasks))

    async def _run_one(self, p: PreparedTransaction) -> DispatchOutcome:
        tx_hash = None
        try:
            tx_hash = await self.submit(p)
            log.info(f"tx sent {short(p.wallet_address)} hash={tx_hash}")
            receipt = await self.confirm(p, tx_hash)
            block = int(receipt["blockNumber"])
        except Exception as e:
            on_error(log, f"wallet {p.wallet_address} failed", e)
            return DispatchOutcome(p.wallet_address, DispatchStatus.FAILED, tx_hash=tx_hash, error=describe(e))
        log.info(f"Transaction confirmed with hash: {tx_hash} (block {block})")
        return DispatchOutcome(p.wallet_address, DispatchStatus.CONFIRMED, tx_hash=tx_hash, block_number=block)

    async def submit(self, p: PreparedTransaction) -> str:
        if p.provider is None:
            raise ProviderUnavailable("no provider assigned")
        # key material lives only for this call
        signed = make_account(p.wallet.private_key).sign_transaction(p.payload)
        try:
            h = await asyncio.wait_for(
                p.provider.w3.eth.send_raw_transaction(signed.raw_transaction), self.submit_timeout,
            )
        except CONNECTION_ERRORS as e:
            raise ProviderUnavailable(f"{p.provider.url}: {e}") from e
        except asyncio.TimeoutError:
            raise SubmissionError(f"no answer from {p.provider.url} within {self.submit_timeout:g}s")
        except Exception as e:
            raise SubmissionError(str(e)) from e
        return Web3.to_hex(h)

    async def confirm(self, p: PreparedTransaction, tx_hash: str):
        try:
            receipt = await asyncio.wait_for(
                p.provider.w3.eth.wait_for_transaction_receipt(
                    tx_hash, timeout=self.confirm_timeout, poll_latency=self.poll_latency,
                ),
                # outer bound in case the provider call itself hangs
                self.confirm_timeout + self.poll_latency,
            )
        except CONNECTION_ERRORS as e:
            raise ProviderUnavailable(f"{p.provider.url}: {e}") from e
        except (TimeExhausted, asyncio.TimeoutError):
            raise ConfirmationTimeout(f"{tx_hash} not confirmed within {self.confirm_timeout:g}s")
        if int(receipt.get("status", 1)) != 1:
            raise TransactionReverted(f"{tx_hash} reverted in block {receipt.get('blockNumber')}")
        return receipt


def summarize(outcomes: Iterable[DispatchOutcome]) -> DispatchSummary:
    s = DispatchSummary()
    for o in outcomes:
        s.total += 1
        if o.status is DispatchStatus.CONFIRMED:
            s.confirmed += 1
        elif o.status is DispatchStatus.FAILED:
            s.failed += 1
            s.failures.append((o.wallet_address, o.error or "unknown error"))
        else:
            s.skipped += 1
            s.failures.append((o.wallet_address, o.error or "skipped"))
    return s
