"""
mintgate: fire one mint transaction per wallet at a fixed chain time.

Usage:
    mintgate run [--wallets <path>] [--dry-run]
    mintgate wallets generate <count> [--file <path>]
    mintgate wallets list [--file <path>]
    mintgate wallets scatter <amount> [--file <path>] [--rpc <url>] [--yes]
    mintgate wallets collect [--file <path>] [--rpc <url>] [--yes]

Mint settings come from the environment / .env (NFT_CONTRACT, STAGE_INDEX,
PUBLIC_STAGE, PRICE_PER_MINT, MINT_AMOUNT, MINT_DATE, CUSTOM_RPCS, ...).
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from web3 import Web3

from mintgate import __version__
from mintgate.chain import get_provider
from mintgate.config import CHAIN_ID, WALLETS_FILE, funding_rpc, load_mint_config
from mintgate.dispatch import summarize
from mintgate.errors import ConfigurationError
from mintgate.funding import collect, scatter
from mintgate.models import DispatchStatus
from mintgate.orchestrator import run_mint
from mintgate.util import get_logger
from mintgate.wallets import generate_wallets, load_wallets, save_wallets

log = get_logger()


def cmd_run(args: argparse.Namespace) -> int:
    """Prepare, wait for the mint time, dispatch."""
    try:
        cfg = load_mint_config()
    except ConfigurationError as e:
        log.error(f"configuration error: {e}")
        return 1

    wallets = load_wallets(args.wallets)
    if not wallets:
        log.error(f"no usable wallets in {args.wallets}")
        return 1

    try:
        outcomes = asyncio.run(run_mint(cfg, wallets, dry_run=args.dry_run))
    except ConfigurationError as e:
        log.error(f"configuration error: {e}")
        return 1

    if args.dry_run:
        ready = sum(1 for o in outcomes if o.error == "dry run")
        print(f"[DRY RUN] {ready}/{len(outcomes)} wallet(s) would be dispatched")
    else:
        print(summarize(outcomes).summary())
    return 0 if any(o.status is DispatchStatus.CONFIRMED for o in outcomes) or args.dry_run else 2


def cmd_wallets_generate(args: argparse.Namespace) -> int:
    if args.count < 1:
        print("count must be >= 1")
        return 1
    existing = load_wallets(args.file)
    save_wallets(args.file, existing + generate_wallets(args.count))
    print(f"{args.count} wallet(s) added, {len(existing) + args.count} in {args.file}")
    return 0


def cmd_wallets_list(args: argparse.Namespace) -> int:
    wallets = load_wallets(args.file)
    if not wallets:
        print("No wallets found.")
        return 0
    print(f"Existing wallets [{len(wallets)}]:")
    for i, w in enumerate(wallets, start=1):
        print(f"{i}. Address: {w.address}")
    return 0


def _confirm(question: str, yes: bool) -> bool:
    if yes:
        return True
    return input(f"{question} (yes/no): ").strip().lower() in ("y", "yes")


def _print_transfers(outcomes) -> int:
    for o in outcomes:
        if o.status is DispatchStatus.CONFIRMED:
            print(f"Transaction sent: {o.tx_hash} ({o.wallet_address})")
        else:
            print(f"{o.status.value}: {o.wallet_address}: {o.error}")
    return 0 if all(o.status is not DispatchStatus.FAILED for o in outcomes) else 2


def cmd_wallets_scatter(args: argparse.Namespace) -> int:
    """Send AMOUNT (native units) from the first wallet to each of the others."""
    try:
        amount = Web3.to_wei(args.amount, "ether")
    except (ValueError, ArithmeticError):
        print(f"invalid amount: {args.amount}")
        return 1
    wallets = load_wallets(args.file)
    if len(wallets) < 2:
        print("You need more than 1 wallet.")
        return 1
    if not _confirm(f"Send {args.amount} from {wallets[0].address} to {len(wallets) - 1} wallet(s)?", args.yes):
        print("Aborted.")
        return 1
    try:
        outcomes = asyncio.run(scatter(get_provider(args.rpc), wallets, amount, CHAIN_ID))
    except ConfigurationError as e:
        print(f"configuration error: {e}")
        return 1
    return _print_transfers(outcomes)


def cmd_wallets_collect(args: argparse.Namespace) -> int:
    """Sweep every other wallet into the first one, keeping a little for gas."""
    wallets = load_wallets(args.file)
    if len(wallets) < 2:
        print("You need more than 1 wallet.")
        return 1
    if not _confirm(f"Collect funds from {len(wallets) - 1} wallet(s) into {wallets[0].address}?", args.yes):
        print("Aborted.")
        return 1
    try:
        outcomes = asyncio.run(collect(get_provider(args.rpc), wallets, CHAIN_ID))
    except ConfigurationError as e:
        print(f"configuration error: {e}")
        return 1
    return _print_transfers(outcomes)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mintgate",
        description="Time-gated batch mint dispatcher",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    p_run = sub.add_parser("run", help="Prepare wallets, wait for MINT_DATE, dispatch")
    p_run.add_argument("--wallets", default=WALLETS_FILE, help="Wallet JSON file")
    p_run.add_argument("--dry-run", action="store_true", help="Preflight only, send nothing")
    p_run.set_defaults(func=cmd_run)

    p_w = sub.add_parser("wallets", help="Manage the wallet file")
    w_sub = p_w.add_subparsers(dest="wallets_command")

    p_gen = w_sub.add_parser("generate", help="Append freshly generated wallets")
    p_gen.add_argument("count", type=int)
    p_gen.add_argument("--file", default=WALLETS_FILE)
    p_gen.set_defaults(func=cmd_wallets_generate)

    p_list = w_sub.add_parser("list", help="Show wallet addresses")
    p_list.add_argument("--file", default=WALLETS_FILE)
    p_list.set_defaults(func=cmd_wallets_list)

    p_scatter = w_sub.add_parser("scatter", help="Send AMOUNT from the first wallet to every other one")
    p_scatter.add_argument("amount", help="Amount per wallet, in native units (e.g. 0.5)")
    p_scatter.add_argument("--file", default=WALLETS_FILE)
    p_scatter.add_argument("--rpc", default=funding_rpc(), help="RPC url (default: first CUSTOM_RPCS entry)")
    p_scatter.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    p_scatter.set_defaults(func=cmd_wallets_scatter)

    p_collect = w_sub.add_parser("collect", help="Sweep every other wallet into the first one")
    p_collect.add_argument("--file", default=WALLETS_FILE)
    p_collect.add_argument("--rpc", default=funding_rpc(), help="RPC url (default: first CUSTOM_RPCS entry)")
    p_collect.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    p_collect.set_defaults(func=cmd_wallets_collect)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
