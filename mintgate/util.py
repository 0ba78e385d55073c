# mintgate/util.py
import json
import logging
import sys
from datetime import datetime, timezone

from eth_account import Account

from .config import LOG_LEVEL, LOG_COLOR, LOG_JSON, DEBUG

RESET = "\x1b[0m"
COLORS = {
    "DEBUG": "\x1b[38;5;245m",
    "INFO":  "\x1b[38;5;39m",
    "WARNING": "\x1b[38;5;214m",
    "ERROR": "\x1b[38;5;203m",
}

def _iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

class _HumanFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        msg = record.getMessage()
        if DEBUG and record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        stamp = _iso(record.created)
        if LOG_COLOR:
            color = COLORS.get(level, "")
            return f"{stamp} {color}{level.lower():>7}{RESET} {msg}"
        return f"{stamp} {level.lower():>7} {msg}"

class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": round(record.created, 3),
            "level": record.levelname.lower(),
            "msg": record.getMessage(),
            "logger": record.name,
        }
        if DEBUG and record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

_log = None

def get_logger(name="mintgate"):
    global _log
    return _log if _log else init_logging(name)

def init_logging(name="mintgate"):
    global _log
    log = logging.getLogger(name)
    level = getattr(logging, LOG_LEVEL, logging.INFO)
    log.setLevel(level)
    h = logging.StreamHandler(sys.stdout)
    h.setLevel(level)
    h.setFormatter(_JsonFormatter() if LOG_JSON else _HumanFormatter())
    # avoid duplicate handlers
    log.handlers[:] = [h]
    log.propagate = False
    _log = log
    return log

# --- pretty helpers ---
def short(x: object, keep: int = 6) -> str:
    if x is None:
        return "-"
    s = str(x)
    if s.startswith("0x") and len(s) > 2*keep+2:
        return f"{s[:2+keep]}…{s[-keep:]}"
    if len(s) > keep*2:
        return f"{s[:keep]}…{s[-keep:]}"
    return s

def fmt_ether(wei: int, decimals: int = 18) -> str:
    """Wei -> '1.5' style string, trailing zeros trimmed, at most 8 fractional digits."""
    q = 10 ** decimals
    sign = "-" if wei < 0 else ""
    whole, frac = divmod(abs(int(wei)), q)
    if frac == 0:
        return f"{sign}{whole}"
    s = f"{frac:0{decimals}d}".rstrip("0")[:8].rstrip("0")
    return f"{sign}{whole}.{s}" if s else f"{sign}{whole}"

def on_error(log, msg: str, exc: Exception = None):
    if DEBUG and exc:
        log.exception(msg)
    else:
        log.error(f"{msg}: {exc}" if exc else msg)

def normalize_hex(value: str) -> str:
    """Ronin wallets export 'ronin:'-prefixed keys/addresses; everything else wants 0x."""
    v = (value or "").strip()
    if v.startswith("ronin:"):
        v = "0x" + v[len("ronin:"):]
    return v

def make_account(pk: str):
    return Account.from_key(normalize_hex(pk))

def utc_now() -> datetime:
    return datetime.now(timezone.utc)
