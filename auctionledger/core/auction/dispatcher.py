"""
Dispatcher - routes an auction to its bidding protocol.

The protocol is never stored: it is derived from the settings on every
call, so the same record always dispatches the same way.
"""

from typing import Optional

from auctionledger.core.auction.ascending import AscendingAuction
from auctionledger.core.auction.behavior import BaseAuction
from auctionledger.core.auction.descending import DiscountAuction
from auctionledger.core.auction.types import AuctionData, AuctionSettings, Settlement

ASCENDING = AscendingAuction()
DISCOUNT = DiscountAuction()


def select_variant(settings: AuctionSettings) -> BaseAuction:
    return DISCOUNT if settings.is_discount else ASCENDING


class Dispatcher:
    """Forwards each operation to the variant selected by the settings."""

    def __init__(self, settings: AuctionSettings):
        self.variant = select_variant(settings)

    @classmethod
    def for_auction(cls, auction: AuctionData) -> "Dispatcher":
        return cls(auction.settings)

    def is_sealed_bid_auction(self, auction: AuctionData) -> bool:
        return self.variant.is_sealed_bid_auction(auction)

    def start(self, env, auction: AuctionData) -> None:
        self.variant.start(env, auction)

    def place_bid(self, env, auction_id: int, buyer: str, amount: int,
                  salt: Optional[bytes] = None) -> Optional[Settlement]:
        return self.variant.place_bid(env, auction_id, buyer, amount, salt)

    def place_sealed_bid(self, env, auction_id: int, buyer: str, commitment: bytes) -> None:
        self.variant.place_sealed_bid(env, auction_id, buyer, commitment)

    def resolve(self, env, auction_id: int) -> Optional[Settlement]:
        return self.variant.resolve(env, auction_id)

    def current_price(self, env, auction: AuctionData) -> int:
        return self.variant.current_price(env, auction)
