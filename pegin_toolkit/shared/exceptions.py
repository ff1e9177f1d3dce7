"""
Exception hierarchy for the Pegin Toolkit.

Exception Categories:
- RetryableException: Transient failures that may succeed on retry (RPC, network)
- NonRetryableException: Permanent failures that won't benefit from retry (bad data)
- ConfigurationException: Startup/config errors that prevent operation

Proof pipeline exceptions are categorized:
- ProofValidationException -> NonRetryableException (malformed proof field)
- UtxoNotFoundException -> NonRetryableException (target UTXO absent)
- ConfirmationPolicyException -> NonRetryableException (not deep enough yet)
- UpstreamException -> RetryableException (bitcoind / Electrum / bridge failures)
"""

from typing import Optional


class RetryableException(Exception):
    """
    Base class for exceptions that may succeed on retry.

    Use for transient failures like:
    - RPC timeouts
    - Connection resets
    - Temporary node unavailability
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NonRetryableException(Exception):
    """
    Base class for exceptions that won't benefit from retry.

    Use for permanent failures like:
    - Invalid input data
    - Missing required data
    - Security policy violations
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationException(NonRetryableException):
    """
    Exception for configuration/startup errors.

    Use when:
    - Required environment variables are missing
    - Invalid configuration values (e.g. unknown bitcoin network)
    - A collaborator was constructed without its endpoint
    """

    pass


class ProofValidationException(NonRetryableException, ValueError):
    """
    Raised when a proof field has the wrong shape.

    The offending field is exposed as ``field`` so callers can report it
    without parsing the message.
    """

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class UtxoNotFoundException(NonRetryableException):
    """Raised when the target transaction is not unspent at the gateway."""

    def __init__(self, txid: str, address: str):
        super().__init__(f"UTXO {txid} not found for address {address}")
        self.txid = txid
        self.address = address


class ConfirmationPolicyException(NonRetryableException):
    """
    Raised when a UTXO does not yet have the confirmations the network
    requires before minting.
    """

    def __init__(self, actual: int, required: int):
        super().__init__(f"Not enough confirmations: {actual}/{required}")
        self.actual = actual
        self.required = required


class UpstreamException(RetryableException):
    """
    Exception for collaborator failures (bitcoind, Electrum, L2 bridge RPC).

    ``operation`` names the call that failed; the original transport error,
    if any, is chained as ``__cause__``.
    """

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation
