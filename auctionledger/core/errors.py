"""
Error taxonomy for the auction contract and its host.

Every error aborts the enclosing ledger transaction. Callers assert on the
exception type, so each precondition has its own class.
"""


class AuctionError(Exception):
    """Base class for all contract aborts."""


class AlreadyInitialized(AuctionError):
    """Admin configuration exists already."""


class NotFound(AuctionError):
    """Missing auction or admin record."""


class AuthorizationFailure(AuctionError):
    """A required principal did not sign the transaction."""


class InvalidBid(AuctionError):
    """Bid fails the variant's price rule or the bidder cannot cover it."""


class InvalidReveal(AuctionError):
    """Revealed amount and salt do not match an outstanding commitment."""


class StateConflict(AuctionError):
    """Operation not valid in the auction's current phase."""


class AuctionEnded(StateConflict, InvalidBid):
    """The auction has been resolved."""


class ConfigurationInvalid(AuctionError):
    """Settings or arguments violate creation-time constraints."""


# Host-level errors

class InvalidSignature(AuthorizationFailure):
    """A transaction signature does not verify against its public key."""


class InsufficientBalance(AuctionError):
    """Asset transfer exceeds the sender's balance."""


class UnknownFunction(AuctionError):
    """Transaction names a function the contract does not expose."""


class DuplicateTransaction(AuctionError):
    """The same signed transaction was already applied."""
