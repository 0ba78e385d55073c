"""
mintgate: time-gated batch mint dispatcher for EVM launchpads.

Prepares one transaction per wallet ahead of time, waits for the mint
instant on chain time, then releases every transaction at once and tracks
each to confirmation on its own.
"""

__version__ = "0.1.0"
