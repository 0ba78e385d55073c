# mintgate/funding.py
"""
Moving native coin between the main wallet (wallets[0]) and the rest.

Transfers go one after another with a short pause, each bounded by the
dispatch coordinator's timeouts. A failing transfer is logged and the
run moves on to the next wallet.
"""
import asyncio
import dataclasses
from typing import List, Optional, Sequence

from eth_utils import to_checksum_address
from web3 import Web3

from .chain import rpc
from .config import RPC_TIMEOUT
from .dispatch import DispatchCoordinator, describe
from .errors import ConfigurationError
from .models import DispatchOutcome, DispatchStatus, PreparedTransaction, ProviderHandle, WalletRecord
from .util import fmt_ether, get_logger, on_error, short
log = get_logger()

TRANSFER_GAS = 21_000
TRANSFER_GAS_PRICE = Web3.to_wei(20, "gwei")
COLLECT_KEEP = Web3.to_wei("0.00042", "ether")


def _need_two(wallets: Sequence[WalletRecord]) -> None:
    if len(wallets) < 2:
        raise ConfigurationError("You need more than 1 wallet.")


async def _balance(provider: ProviderHandle, address: str, timeout: float) -> int:
    return int(await rpc(provider.w3.eth.get_balance(address), timeout, f"get_balance {address}"))


async def transfer(
    provider: ProviderHandle, sender: WalletRecord, recipient: str, value: int, chain_id: int,
    coordinator: DispatchCoordinator, timeout: float = RPC_TIMEOUT,
) -> DispatchOutcome:
    """Plain value transfer sender -> recipient; the outcome is reported under the recipient."""
    nonce = await rpc(
        provider.w3.eth.get_transaction_count(sender.address, "pending"),
        timeout, f"nonce {sender.address}",
    )
    payload = {
        "to": to_checksum_address(recipient),
        "value": int(value),
        "gas": TRANSFER_GAS,
        "gasPrice": TRANSFER_GAS_PRICE,
        "chainId": int(chain_id),
        "nonce": int(nonce),
    }
    (outcome,) = await coordinator.dispatch_all([PreparedTransaction(sender, payload, provider)])
    return dataclasses.replace(outcome, wallet_address=recipient)


async def scatter(
    provider: ProviderHandle, wallets: Sequence[WalletRecord], amount: int, chain_id: int,
    coordinator: Optional[DispatchCoordinator] = None, pause: float = 0.5,
    timeout: float = RPC_TIMEOUT,
) -> List[DispatchOutcome]:
    """Send `amount` wei from wallets[0] to every other wallet."""
    _need_two(wallets)
    if amount <= 0:
        raise ConfigurationError("amount must be positive")
    if coordinator is None:
        coordinator = DispatchCoordinator()
    sender = wallets[0]
    outcomes: List[DispatchOutcome] = []
    for w in wallets[1:]:
        try:
            balance = await _balance(provider, sender.address, timeout)
            if balance < amount:
                log.warning(f"Insufficient balance to send {fmt_ether(amount)} to {w.address}")
                outcome = DispatchOutcome(
                    w.address, DispatchStatus.SKIPPED,
                    error=f"sender has {fmt_ether(balance)}, needs {fmt_ether(amount)}",
                )
            else:
                outcome = await transfer(provider, sender, w.address, amount, chain_id, coordinator, timeout)
        except Exception as e:
            on_error(log, f"Error sending transaction to {w.address}", e)
            outcome = DispatchOutcome(w.address, DispatchStatus.FAILED, error=describe(e))
        outcomes.append(outcome)
        await asyncio.sleep(pause)
    return outcomes


async def collect(
    provider: ProviderHandle, wallets: Sequence[WalletRecord], chain_id: int,
    keep: int = COLLECT_KEEP, coordinator: Optional[DispatchCoordinator] = None,
    pause: float = 0.5, timeout: float = RPC_TIMEOUT,
) -> List[DispatchOutcome]:
    """Sweep every wallet but the first into wallets[0], leaving `keep` wei behind for gas."""
    _need_two(wallets)
    if coordinator is None:
        coordinator = DispatchCoordinator()
    main = wallets[0]
    outcomes: List[DispatchOutcome] = []
    for w in wallets[1:]:
        try:
            balance = await _balance(provider, w.address, timeout)
            value = balance - keep
            if value <= 0:
                log.info(f"Insufficient balance for wallet {w.address}")
                outcome = DispatchOutcome(w.address, DispatchStatus.SKIPPED, error=f"balance {fmt_ether(balance)}")
            else:
                outcome = await transfer(provider, w, main.address, value, chain_id, coordinator, timeout)
                # report under the source wallet, not the main one
                outcome = dataclasses.replace(outcome, wallet_address=w.address)
                log.info(f"{short(w.address)} -> {short(main.address)}: {fmt_ether(value)}")
        except Exception as e:
            on_error(log, f"Error collecting from {w.address}", e)
            outcome = DispatchOutcome(w.address, DispatchStatus.FAILED, error=describe(e))
        outcomes.append(outcome)
        await asyncio.sleep(pause)
    return outcomes
