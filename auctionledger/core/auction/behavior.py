"""
Shared behavior of the auction protocols.

BaseAuction implements everything the ascending and Dutch protocols have
in common: record loading, the sealed commit-reveal sub-protocol, phase
gating, deadline checks and escrow. Subclasses supply the price rule, what
happens after a bid is accepted, and who wins at resolution.

Escrow: the property unit moves from the seller to the contract account
when the auction starts. The leading bid is held by the contract as well;
when a bid is overtaken its amount goes back to its bidder. Settlement
therefore never depends on what principals hold at resolution time.
"""

from abc import ABC, abstractmethod
from typing import Optional

from auctionledger.core.auction.commit_reveal import accept_sealed, reveal, validate_plain
from auctionledger.core.auction.phase import PhaseMachine
from auctionledger.core.auction.resolution import finalize
from auctionledger.core.auction.types import (
    AdminData,
    AuctionData,
    AuctionPhase,
    Bid,
    SealedBid,
    Settlement,
)
from auctionledger.core.config import PROPERTY_UNIT
from auctionledger.core.errors import StateConflict
from auctionledger.core.storage import DataKey
from auctionledger.utils.logger import auction_logger, get_logger

logger = get_logger("auction")


def load_auction(env, auction_id: int) -> AuctionData:
    return env.storage.get(DataKey.auction_data(auction_id), AuctionData)


def save_auction(env, auction: AuctionData) -> None:
    env.storage.set(DataKey.auction_data(auction.id), auction)


def load_admin(env) -> AdminData:
    return env.storage.get(DataKey.admin_data(), AdminData)


class BaseAuction(ABC):
    """Behavior contract shared by every bidding protocol."""

    name = "base"

    # Dutch accepts a bid equal to the asking price, ascending needs more
    inclusive_price = False

    # =========================================================================
    # Protocol hooks
    # =========================================================================

    @abstractmethod
    def current_price(self, env, auction: AuctionData) -> int:
        """Current effective price at ledger time."""

    @abstractmethod
    def determine_winner(self, env, auction: AuctionData) -> Optional[Bid]:
        """
        Winning bid at resolution, None for no sale.

        Raises StateConflict if the auction cannot be resolved yet.
        """

    def on_bid_accepted(self, env, auction: AuctionData, bid: Bid) -> Optional[Settlement]:
        """Called after a bid has been recorded."""
        return None

    # =========================================================================
    # Operations
    # =========================================================================

    def is_sealed_bid_auction(self, auction: AuctionData) -> bool:
        return auction.settings.sealed_phase_time > 0

    def start(self, env, auction: AuctionData) -> None:
        if self.is_sealed_bid_auction(auction):
            PhaseMachine(env.storage, auction.id).set(AuctionPhase.SEALED)

        settings = auction.settings
        env.token(settings.item).transfer(settings.seller, env.contract_address, PROPERTY_UNIT)
        save_auction(env, auction)

        auction_logger(logger, auction.id).info(
            f"started ({self.name}): item {settings.item} in escrow, "
            f"price {settings.starting_price}, ends at {auction.deadline}"
        )

    def place_sealed_bid(self, env, auction_id: int, buyer: str, commitment: bytes) -> None:
        auction = load_auction(env, auction_id)
        now = env.now()
        phase = PhaseMachine(env.storage, auction_id).current(auction, now)

        accept_sealed(SealedBid(buyer=buyer, commitment=commitment, timestamp=now), auction, phase)
        save_auction(env, auction)

    def place_bid(
        self,
        env,
        auction_id: int,
        buyer: str,
        amount: int,
        salt: Optional[bytes] = None,
    ) -> Optional[Settlement]:
        auction = load_auction(env, auction_id)
        now = env.now()
        machine = PhaseMachine(env.storage, auction_id)
        machine.require(AuctionPhase.RUNNING, auction, now)

        if now >= auction.deadline:
            raise StateConflict(f"auction {auction_id} closed for bidding at {auction.deadline}")

        if self.is_sealed_bid_auction(auction):
            bid = reveal(buyer, amount, salt, auction, now)
        else:
            bid = Bid(buyer=buyer, amount=amount, timestamp=now)

        validate_plain(
            bid,
            auction,
            self.current_price(env, auction),
            phase=AuctionPhase.RUNNING,
            balance=env.token(auction.settings.market).balance(buyer),
            inclusive=self.inclusive_price,
        )

        self.prepare_bid(env, auction, bid)
        self.escrow_bid(env, auction, bid)
        auction.bids.append(bid)
        save_auction(env, auction)
        auction_logger(logger, auction_id).debug(f"accepted bid {bid.amount} from {buyer}")

        return self.on_bid_accepted(env, auction, bid)

    def prepare_bid(self, env, auction: AuctionData, bid: Bid) -> None:
        """Adjust the auction before a validated bid is recorded."""

    def escrow_bid(self, env, auction: AuctionData, bid: Bid) -> None:
        """Take the new leading bid into escrow and release the one it overtakes."""
        market = env.token(auction.settings.market)
        outbid = auction.highest_bid

        market.transfer(bid.buyer, env.contract_address, bid.amount)
        if outbid is not None:
            market.transfer(env.contract_address, outbid.buyer, outbid.amount)
            auction_logger(logger, auction.id).debug(
                f"refunded {outbid.amount} to outbid {outbid.buyer}"
            )

    def resolve(self, env, auction_id: int) -> Optional[Settlement]:
        auction = load_auction(env, auction_id)
        machine = PhaseMachine(env.storage, auction_id)
        machine.require_not_ended()
        machine.advance(auction, env.now())

        return finalize(env, auction, self.determine_winner(env, auction))

    def require_expired(self, env, auction: AuctionData) -> None:
        if env.now() < auction.deadline:
            raise StateConflict(f"auction {auction.id} runs until {auction.deadline}")
