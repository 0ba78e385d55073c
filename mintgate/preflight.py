# mintgate/preflight.py
from .chain import rpc
from .config import RPC_TIMEOUT
from .errors import InsufficientBalance
from .models import MintConfig, ProviderHandle, WalletRecord
from .util import fmt_ether, get_logger
log = get_logger()


class PreflightValidator:
    """
    Balance gate run during preparation, before the scheduler wait starts.

    required = price_per_mint * mint_quantity + cfg.gas_reserve. The reserve is
    a flat margin, not a gas estimate.
    """

    def __init__(self, authority: ProviderHandle, timeout: float = RPC_TIMEOUT):
        self.authority = authority
        self.timeout = timeout

    async def validate(self, wallet: WalletRecord, cfg: MintConfig) -> int:
        balance = await rpc(
            self.authority.w3.eth.get_balance(wallet.address),
            self.timeout, f"get_balance {wallet.address}",
        )
        required = cfg.required_balance
        if balance < required:
            raise InsufficientBalance(wallet.address, int(balance), required)
        log.info(f"wallet {wallet.address} has {fmt_ether(balance)} (needs {fmt_ether(required)})")
        return int(balance)

    async def fetch_nonce(self, wallet: WalletRecord, provider: ProviderHandle) -> int:
        return int(await rpc(
            provider.w3.eth.get_transaction_count(wallet.address, "pending"),
            self.timeout, f"nonce {wallet.address}",
        ))
