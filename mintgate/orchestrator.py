# mintgate/orchestrator.py
import asyncio
from typing import List, Optional, Sequence, Tuple, Union

from .chain import ProviderPool, get_provider
from .clock import Scheduler, TimeOracle
from .config import ORACLE_INTERVAL
from .dispatch import DispatchCoordinator, describe, summarize
from .errors import ConfigurationError
from .models import (
    DispatchOutcome, DispatchStatus, MintConfig, PreparedTransaction, ProviderHandle, WalletRecord,
)
from .preflight import PreflightValidator
from .tx import build_transaction
from .util import get_logger, short
log = get_logger()

Prepared = Union[PreparedTransaction, DispatchOutcome]

async def prepare_wallet(
    index: int, wallet: WalletRecord, cfg: MintConfig,
    pool: ProviderPool, validator: PreflightValidator,
) -> Prepared:
    """Balance check, nonce, payload. Any failure -> SKIPPED outcome for this wallet."""
    try:
        provider = pool.assign(index)
        await validator.validate(wallet, cfg)
        nonce = await validator.fetch_nonce(wallet, provider)
        return build_transaction(wallet, cfg, nonce=nonce, provider=provider)
    except ConfigurationError:
        raise
    except Exception as e:
        log.warning(f"wallet {wallet.address} skipped: {e}")
        return DispatchOutcome(wallet.address, DispatchStatus.SKIPPED, error=describe(e))

async def prepare_wallets(
    wallets: Sequence[WalletRecord], cfg: MintConfig,
    pool: ProviderPool, validator: PreflightValidator,
) -> List[Prepared]:
    return list(await asyncio.gather(*(
        prepare_wallet(i, w, cfg, pool, validator) for i, w in enumerate(wallets)
    )))

def split_prepared(items: Sequence[Prepared]) -> Tuple[List[PreparedTransaction], List[DispatchOutcome]]:
    ready = [x for x in items if isinstance(x, PreparedTransaction)]
    skipped = [x for x in items if isinstance(x, DispatchOutcome)]
    return ready, skipped

async def run_mint(
    cfg: MintConfig,
    wallets: Sequence[WalletRecord],
    pool: Optional[ProviderPool] = None,
    authority: Optional[ProviderHandle] = None,
    scheduler: Optional[Scheduler] = None,
    coordinator: Optional[DispatchCoordinator] = None,
    oracle_interval: float = ORACLE_INTERVAL,
    dry_run: bool = False,
) -> List[DispatchOutcome]:
    """
    Full run: prepare every wallet, wait for cfg.target_time on chain time,
    fire everything, wait for every outcome. Returns one outcome per wallet in
    input order. Only ConfigurationError escapes.
    """
    if not wallets:
        raise ConfigurationError("no wallets loaded")
    if pool is None:
        pool = ProviderPool.from_urls(cfg.rpc_urls)
    if not len(pool):
        raise ConfigurationError("provider pool is empty")
    if authority is None:
        authority = get_provider(cfg.primary_rpc)
    validator = PreflightValidator(authority)
    oracle = TimeOracle(authority)
    if scheduler is None:
        scheduler = Scheduler(now=oracle.current_reference_time)
    if coordinator is None:
        coordinator = DispatchCoordinator()

    log.info(
        f"mint {short(cfg.nft_contract)} stage={cfg.stage_index} "
        f"{'public' if cfg.is_public else 'allow-list'} qty={cfg.mint_quantity} "
        f"wallets={len(wallets)} rpcs={len(pool)} at {cfg.target_time.isoformat()}"
    )

    async with oracle.monitoring(oracle_interval):
        items = await prepare_wallets(wallets, cfg, pool, validator)
        ready, skipped = split_prepared(items)
        log.info(f"{len(ready)} wallet(s) ready, {len(skipped)} skipped")

        if dry_run or not ready:
            if not ready:
                log.warning("No eligible wallets for minting.")
            dispatched: List[DispatchOutcome] = []
        else:
            await scheduler.wait_until(cfg.target_time)
            dispatched = await coordinator.dispatch_all(ready)

    # dispatched[] follows ready[] order, which follows items[] order
    sent = iter(dispatched)
    outcomes = []
    for item in items:
        if isinstance(item, DispatchOutcome):
            outcomes.append(item)
        elif dispatched:
            outcomes.append(next(sent))
        else:
            outcomes.append(DispatchOutcome(item.wallet_address, DispatchStatus.SKIPPED, error="dry run"))

    log.info("\n" + summarize(outcomes).summary())
    return outcomes
