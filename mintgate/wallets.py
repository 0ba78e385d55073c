# mintgate/wallets.py
import json
from pathlib import Path
from typing import Iterable, List, Union

from eth_account import Account

from .models import WalletRecord
from .util import get_logger, make_account, normalize_hex
log = get_logger()

PathLike = Union[str, Path]

def load_wallets(path: PathLike) -> List[WalletRecord]:
    """
    Read {"wallets": [{"address": ..., "privateKey": ...}, ...]}.
    A missing or malformed file gives an empty list (logged), never an exception.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        log.error(f"wallet file not found: {path}")
        return []
    except (OSError, ValueError) as e:
        log.error(f"Error loading {path}: {e}")
        return []

    entries = data.get("wallets") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        log.error(f"Invalid format in {path}. Expected an array of wallets.")
        return []

    wallets: List[WalletRecord] = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict) or not entry.get("privateKey"):
            log.warning(f"{path}: entry #{i} has no privateKey, ignored")
            continue
        pk = normalize_hex(str(entry["privateKey"]))
        try:
            address = make_account(pk).address
        except Exception as e:
            log.warning(f"{path}: entry #{i} has an unusable privateKey ({type(e).__name__}), ignored")
            continue
        listed = normalize_hex(str(entry.get("address") or ""))
        if listed and listed.lower() != address.lower():
            log.warning(f"{path}: entry #{i} address {listed} does not match its key, using {address}")
        wallets.append(WalletRecord(address=address, private_key=pk))

    log.info(f"Loaded {len(wallets)} wallet(s) from {path}")
    return wallets

def save_wallets(path: PathLike, wallets: Iterable[WalletRecord]) -> None:
    data = {"wallets": [{"address": w.address, "privateKey": w.private_key} for w in wallets]}
    Path(path).write_text(json.dumps(data, indent=2), encoding="utf-8")
    log.info(f"Wallets saved to {path}")

def generate_wallets(count: int) -> List[WalletRecord]:
    out = []
    for _ in range(count):
        acct = Account.create()
        out.append(WalletRecord(address=acct.address, private_key="0x" + bytes(acct.key).hex()))
    return out
