# mintgate/models.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class WalletRecord:
    address: str
    private_key: str = field(repr=False)


@dataclass(frozen=True)
class MintConfig:
    nft_contract: str
    stage_index: int
    is_public: bool
    price_per_mint: int          # wei
    mint_quantity: int
    gas_limit: int
    gas_price: int               # wei
    target_time: datetime        # tz-aware UTC
    rpc_urls: Tuple[str, ...]
    primary_rpc: str
    launchpad: str
    chain_id: int
    gas_reserve: int             # wei
    max_mint: Optional[int] = None

    @property
    def mint_value(self) -> int:
        return self.price_per_mint * self.mint_quantity

    @property
    def required_balance(self) -> int:
        return self.mint_value + self.gas_reserve


@dataclass(frozen=True)
class ProviderHandle:
    """One RPC endpoint. Shared by every wallet assigned to it; holds no per-wallet state."""
    url: str
    w3: Any = field(repr=False, compare=False)


@dataclass(frozen=True)
class PreparedTransaction:
    wallet: WalletRecord
    payload: Dict[str, Any]
    provider: Optional[ProviderHandle] = None

    @property
    def wallet_address(self) -> str:
        return self.wallet.address


class DispatchStatus(Enum):
    CONFIRMED = "confirmed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DispatchOutcome:
    wallet_address: str
    status: DispatchStatus
    tx_hash: Optional[str] = None
    error: Optional[str] = None
    block_number: Optional[int] = None


@dataclass
class DispatchSummary:
    """Counts and failure reasons derived from a run's outcomes."""

    total: int = 0
    confirmed: int = 0
    failed: int = 0
    skipped: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)  # (address, reason)

    def summary(self) -> str:
        lines = [
            f"=== Mint dispatch: {self.confirmed}/{self.total} confirmed ===",
            f"Confirmed: {self.confirmed}",
            f"Failed: {self.failed}",
            f"Skipped: {self.skipped}",
        ]
        for address, reason in self.failures:
            lines.append(f"  ✗ {address}: {reason}")
        return "\n".join(lines)
