"""
Bid Validator - acceptance rules for plain bids and sealed commitments.

Two kinds of bids reach an auction:
1. Plain bids: a visible amount, checked against the variant's price
2. Sealed bids: sha256(amount || salt) commitments accepted during the
   sealed phase, later revealed into plain bids

The functions here are pure over the data they are handed: the variant
supplies the current effective price, the phase and the bidder's balance.
They mutate only the AuctionData passed in; persisting it is the caller's job.
"""

from typing import Optional

from auctionledger.core.auction.types import (
    AuctionData,
    AuctionPhase,
    Bid,
    CommitmentStatus,
    SealedBid,
)
from auctionledger.core.errors import AuctionEnded, InvalidBid, InvalidReveal, StateConflict
from auctionledger.crypto import seal_amount
from auctionledger.utils.logger import auction_logger, get_logger
from auctionledger.utils.validation import validate_salt

logger = get_logger("auction.bids")


def create_commitment(amount: int, salt: bytes) -> bytes:
    """Commitment a bidder submits during the sealed phase."""
    return seal_amount(amount, salt)


# =============================================================================
# Plain bids
# =============================================================================


def validate_plain(
    bid: Bid,
    auction: AuctionData,
    price: int,
    *,
    phase: AuctionPhase,
    balance: int,
    inclusive: bool = False,
) -> None:
    """
    Check a plain bid against the current effective price.

    Args:
        bid: Candidate bid
        auction: Auction being bid on
        price: Current effective price supplied by the variant
        phase: Current phase of the auction
        balance: Bidder's balance of the payment asset
        inclusive: Accept bids equal to the price (Dutch) instead of
            requiring strictly more (ascending)

    Raises:
        AuctionEnded, InvalidBid
    """
    if phase == AuctionPhase.ENDED:
        raise AuctionEnded(f"auction {auction.id} has ended")

    if bid.amount <= 0:
        raise InvalidBid(f"bid amount must be positive, got {bid.amount}")

    if bid.buyer == auction.settings.seller:
        raise InvalidBid("seller cannot bid on their own auction")

    if bid.amount < price or (not inclusive and bid.amount == price):
        relation = "at least" if inclusive else "more than"
        raise InvalidBid(f"bid {bid.amount} must be {relation} current price {price}")

    if balance < bid.amount:
        raise InvalidBid(f"bidder balance {balance} does not cover bid {bid.amount}")


# =============================================================================
# Sealed bids
# =============================================================================


def accept_sealed(sealed: SealedBid, auction: AuctionData, phase: AuctionPhase) -> None:
    """Append a commitment; only valid during the sealed phase."""
    if phase == AuctionPhase.ENDED:
        raise AuctionEnded(f"auction {auction.id} has ended")

    if phase != AuctionPhase.SEALED:
        raise StateConflict(f"auction {auction.id} is not accepting sealed bids ({phase.name})")

    if len(sealed.commitment) != 32:
        raise InvalidBid("commitment must be 32 bytes")

    if sealed.buyer == auction.settings.seller:
        raise InvalidBid("seller cannot bid on their own auction")

    for existing in auction.outstanding_commitments:
        if existing.buyer == sealed.buyer and existing.commitment == sealed.commitment:
            raise InvalidBid("duplicate commitment")

    auction.sealed_bids.append(sealed)
    auction_logger(logger, auction.id).debug(f"commitment from {sealed.buyer}")


def reveal(
    buyer: str,
    amount: int,
    salt: Optional[bytes],
    auction: AuctionData,
    now: int,
) -> Bid:
    """
    Open a commitment into a plain bid.

    The matching commitment is consumed (REVEALED). On mismatch nothing
    is touched and InvalidReveal is raised.
    """
    if salt is None:
        raise InvalidReveal("sealed auction bids must be revealed with their salt")
    ok, message = validate_salt(salt)
    if not ok:
        raise InvalidReveal(message)

    try:
        commitment = create_commitment(amount, salt)
    except OverflowError as exc:
        raise InvalidReveal(f"amount {amount} cannot have been committed") from exc

    for sealed in auction.outstanding_commitments:
        if sealed.buyer == buyer and sealed.commitment == commitment:
            sealed.status = CommitmentStatus.REVEALED
            auction_logger(logger, auction.id).debug(f"{buyer} revealed {amount}")
            return Bid(buyer=buyer, amount=amount, timestamp=now)

    auction_logger(logger, auction.id).warning(f"reveal from {buyer} matches no commitment")
    raise InvalidReveal("revealed amount and salt do not match any outstanding commitment")


def forfeit_outstanding(auction: AuctionData) -> int:
    """Forfeit every unrevealed commitment; returns how many."""
    forfeited = 0
    for sealed in auction.outstanding_commitments:
        sealed.status = CommitmentStatus.FORFEITED
        forfeited += 1
    return forfeited
