# mintgate/config.py
import os
from datetime import datetime, timezone
from typing import List, Optional

from dotenv import load_dotenv
from eth_utils import is_address, to_checksum_address
from web3 import Web3

from .errors import ConfigurationError
from .models import MintConfig

load_dotenv()

def _env(name: str, default: str = "") -> str:
    v = os.getenv(name, default).strip()
    return v

def _env_float(name: str, default: float) -> float:
    v = _env(name)
    return float(v) if v else float(default)

def _env_int(name: str, default: int) -> int:
    v = _env(name)
    return int(v) if v else int(default)

def _env_bool(name: str, default: bool) -> bool:
    v = _env(name)
    if not v:
        return default
    return v.lower() in ("1","true","yes","y","on")

def _env_csv(name: str) -> List[str]:
    raw = _env(name)
    if not raw: return []
    parts = [p.strip() for p in raw.split(",")]
    return [p for p in parts if p]

# Authoritative endpoint: chain time + balances
PRIMARY_RPC = _env("PRIMARY_RPC", "https://api.roninchain.com/rpc")

# Mavis launchpad (execute(stageType, data) entrypoint) on Ronin mainnet
LAUNCHPAD_ADDRESS = _env("LAUNCHPAD_ADDRESS", "0xa8e9fdf57bbd991c3f494273198606632769db99")
CHAIN_ID = _env_int("CHAIN_ID", 2020)

# Fixed headroom on top of price * quantity, in native units (RON)
GAS_RESERVE_ETHER = _env("GAS_RESERVE_ETHER", "3")

DEFAULT_STAGE_INDEX = 255
DEFAULT_MINT_DATE = "2100-01-01T00:00:00Z"
DEFAULT_GAS_PRICE_WEI = 60_000_000_000
DEFAULT_GAS_LIMIT = 2_000_000

# Timeouts (seconds)
RPC_TIMEOUT     = _env_float("RPC_TIMEOUT", 10)
SUBMIT_TIMEOUT  = _env_float("SUBMIT_TIMEOUT", 15)
CONFIRM_TIMEOUT = _env_float("CONFIRM_TIMEOUT", 180)

# Clock / countdown
ORACLE_INTERVAL    = _env_float("ORACLE_INTERVAL", 5)
COUNTDOWN_INTERVAL = _env_float("COUNTDOWN_INTERVAL", 10)
WAIT_POLL_INTERVAL = _env_float("WAIT_POLL_INTERVAL", 0.1)

WALLETS_FILE = _env("WALLETS_FILE", "wallets.json")

# ---- Logging flags ----
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()  # DEBUG/INFO/WARN/ERROR
LOG_COLOR = os.getenv("LOG_COLOR", "1") not in ("0","false","False")
LOG_JSON  = os.getenv("LOG_JSON", "0") in ("1","true","True")
DEBUG     = os.getenv("DEBUG", "0") in ("1","true","True")


def parse_mint_date(raw: str) -> datetime:
    """
    ISO-8601 ('2025-01-01T12:00:00Z', offsets allowed) or unix seconds.
    Naive values are taken as UTC. Result is always tz-aware UTC.
    """
    s = (raw or "").strip()
    if not s:
        raise ConfigurationError("MINT_DATE is empty")
    if s.isdigit():
        return datetime.fromtimestamp(int(s), tz=timezone.utc)
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        raise ConfigurationError(f"MINT_DATE is not a valid date: {raw!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

def _checked_address(name: str, value: str) -> str:
    if not is_address(value):
        raise ConfigurationError(f"check variable: {name} ({value!r} is not an address)")
    return to_checksum_address(value)

def _int_var(name: str, default: Optional[int]) -> Optional[int]:
    try:
        v = _env(name)
        return int(v) if v else default
    except ValueError:
        raise ConfigurationError(f"check variable: {name} (expected an integer)")

def load_mint_config() -> MintConfig:
    """Read the mint stage settings from the environment (.env already loaded)."""
    nft_contract = _checked_address("NFT_CONTRACT", _env("NFT_CONTRACT"))
    launchpad = _checked_address("LAUNCHPAD_ADDRESS", _env("LAUNCHPAD_ADDRESS", LAUNCHPAD_ADDRESS))

    rpc_urls = _env_csv("CUSTOM_RPCS")
    if not rpc_urls:
        raise ConfigurationError("Custom RPCs are not configured (CUSTOM_RPCS)")

    try:
        gas_reserve = Web3.to_wei(_env("GAS_RESERVE_ETHER", GAS_RESERVE_ETHER), "ether")
    except Exception:
        raise ConfigurationError("check variable: GAS_RESERVE_ETHER")

    cfg = MintConfig(
        nft_contract=nft_contract,
        stage_index=_int_var("STAGE_INDEX", DEFAULT_STAGE_INDEX),
        is_public=_env_bool("PUBLIC_STAGE", False),
        price_per_mint=_int_var("PRICE_PER_MINT", 0),
        mint_quantity=_int_var("MINT_AMOUNT", 1),
        max_mint=_int_var("MAX_MINT", None),
        gas_limit=_int_var("GAS_LIMIT", DEFAULT_GAS_LIMIT),
        gas_price=_int_var("GAS_PRICE_WEI", DEFAULT_GAS_PRICE_WEI),
        target_time=parse_mint_date(_env("MINT_DATE", DEFAULT_MINT_DATE)),
        rpc_urls=tuple(rpc_urls),
        primary_rpc=_env("PRIMARY_RPC", PRIMARY_RPC),
        launchpad=launchpad,
        chain_id=_int_var("CHAIN_ID", CHAIN_ID),
        gas_reserve=int(gas_reserve),
    )
    validate_mint_config(cfg)
    return cfg

def validate_mint_config(cfg: MintConfig) -> None:
    if cfg.price_per_mint < 0:
        raise ConfigurationError("PRICE_PER_MINT must be >= 0")
    if cfg.mint_quantity < 1:
        raise ConfigurationError("MINT_AMOUNT must be >= 1")
    if cfg.max_mint is not None and cfg.mint_quantity > cfg.max_mint:
        raise ConfigurationError(f"MINT_AMOUNT {cfg.mint_quantity} exceeds MAX_MINT {cfg.max_mint}")
    if not 0 <= cfg.stage_index <= 255:
        raise ConfigurationError("STAGE_INDEX must fit in uint8 (0..255)")
    if cfg.gas_limit <= 0 or cfg.gas_price < 0:
        raise ConfigurationError("GAS_LIMIT must be > 0 and GAS_PRICE_WEI >= 0")
    if cfg.gas_reserve < 0:
        raise ConfigurationError("GAS_RESERVE_ETHER must be >= 0")
    if not cfg.rpc_urls:
        raise ConfigurationError("Custom RPCs are not configured (CUSTOM_RPCS)")
    for url in cfg.rpc_urls:
        if not url.startswith(("http://", "https://")):
            raise ConfigurationError(f"RPC url must be http(s): {url}")

def funding_rpc() -> str:
    """Endpoint for scatter/collect: first CUSTOM_RPCS entry, else the primary one."""
    urls = _env_csv("CUSTOM_RPCS")
    return urls[0] if urls else _env("PRIMARY_RPC", PRIMARY_RPC)
