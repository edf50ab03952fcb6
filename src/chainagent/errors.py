"""Exception taxonomy for tool operations.

Every failure is raised to the caller as one of these; nothing is retried
and nothing is rolled back.
"""

from typing import Optional


class ChainAgentError(Exception):
    """Base class for all tool operation failures."""
    pass


class ParseError(ChainAgentError, ValueError):
    """Malformed address or amount string."""

    def __init__(self, field: str, value: str, reason: str = ""):
        self.field = field
        self.value = value
        message = f"Invalid {field}: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class DerivationError(ChainAgentError):
    """Mnemonic is malformed or a derivation step failed."""
    pass


class NoSignerError(ChainAgentError):
    """Neither the requested sender nor a default identity is available."""

    def __init__(self, address: Optional[str] = None):
        self.address = address
        if address:
            message = f"No signer available for {address} and no default account configured"
        else:
            message = "No signer available: keyring is empty"
        super().__init__(message)


class InsufficientFundsError(ChainAgentError):
    """Account cannot cover amount plus estimated gas."""

    def __init__(self, shortfall: int, required: int, balance: int, message: str = ""):
        self.shortfall = shortfall
        self.required = required
        self.balance = balance
        super().__init__(
            message or f"Insufficient balance. Need {required}, have {balance} (short {shortfall})"
        )


class ChainError(ChainAgentError):
    """Node query failed."""
    pass


class SubmissionError(ChainError):
    """Node rejected the transaction (including gas estimation reverts)."""
    pass


class TransactionRevertedError(SubmissionError):
    """Transaction was mined with a failed status."""

    def __init__(self, tx_hash: str, gas_used: int):
        self.tx_hash = tx_hash
        self.gas_used = gas_used
        super().__init__(f"Transaction {tx_hash} reverted (gas used: {gas_used})")


class PlanExpiredError(ChainAgentError):
    """Swap deadline is not in the future at submission time."""

    def __init__(self, deadline: int, now: int):
        self.deadline = deadline
        self.now = now
        super().__init__(f"Swap deadline {deadline} has passed (now {now}); not submitting")


class ReceiptMissingError(ChainAgentError):
    """No receipt obtained: transaction dropped, replaced or not mined in time."""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Transaction failed: no receipt for {tx_hash}")


class QuoteUnavailableError(ChainAgentError):
    """Aggregator could not provide a price."""
    pass


class SearchError(ChainAgentError):
    """Web search request failed."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Brave Search API error: {status_code} - {body}")
