# mintgate/errors.py
"""Error taxonomy. Only ConfigurationError is meant to escape a run."""


class MintError(Exception):
    """Base for everything raised by mintgate."""


class ConfigurationError(MintError):
    """Invalid or missing mint configuration; aborts the run before any network I/O."""


class InsufficientBalance(MintError):
    def __init__(self, address: str, balance: int, required: int):
        self.address = address
        self.balance = balance
        self.required = required
        super().__init__(
            f"Insufficient balance for wallet {address}. "
            f"Required: {required} wei, Available: {balance} wei"
        )


class ProviderUnavailable(MintError):
    """RPC endpoint could not be reached or did not answer in time."""


class SubmissionError(MintError):
    """The node rejected the transaction (nonce, gas, underpriced...)."""


class TransactionReverted(SubmissionError):
    """Included on chain with status 0."""


class ConfirmationTimeout(MintError):
    """Accepted by the node but no receipt within the bound."""
