# mintgate/tx.py
from typing import Any, Dict, Optional

from eth_utils import to_checksum_address
from web3 import Web3

from .abi import launchpad_abi
from .models import MintConfig, PreparedTransaction, ProviderHandle, WalletRecord

STAGE_TYPE_PUBLIC = 1
STAGE_TYPE_ALLOW_LIST = 2

EXTRA_DATA = b"\x00"

# offline: only used for encode_abi, never talks to a node
_launchpad = Web3().eth.contract(abi=launchpad_abi())

def encode_mint_data(recipient: str, cfg: MintConfig) -> bytes:
    """mintPublic/mintAllowList(MintParam) wrapped in execute(stageType, data)."""
    order = (
        to_checksum_address(cfg.nft_contract),
        to_checksum_address(recipient),
        int(cfg.mint_quantity),
        bool(cfg.is_public),
        int(cfg.stage_index),
        EXTRA_DATA,
    )
    fn_name = "mintPublic" if cfg.is_public else "mintAllowList"
    settle = Web3.to_bytes(hexstr=_launchpad.encode_abi(fn_name, [order]))
    stage_type = STAGE_TYPE_PUBLIC if cfg.is_public else STAGE_TYPE_ALLOW_LIST
    return Web3.to_bytes(hexstr=_launchpad.encode_abi("execute", [stage_type, settle]))

def build_transaction(
    wallet: WalletRecord, cfg: MintConfig,
    nonce: Optional[int] = None, provider: Optional[ProviderHandle] = None,
) -> PreparedTransaction:
    # no I/O here: same (wallet, cfg, nonce) -> same payload
    payload: Dict[str, Any] = {
        "to": to_checksum_address(cfg.launchpad),
        "value": cfg.mint_value,
        "gas": int(cfg.gas_limit),
        "gasPrice": int(cfg.gas_price),
        "chainId": int(cfg.chain_id),
        "data": "0x" + encode_mint_data(wallet.address, cfg).hex(),
    }
    if nonce is not None:
        payload["nonce"] = int(nonce)
    return PreparedTransaction(wallet=wallet, payload=payload, provider=provider)
