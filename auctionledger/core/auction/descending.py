"""
Discount (Dutch) auction.

The asking price starts at starting_price and drops by discount_percent
every discount_frequency seconds, never below reserve_price. The first bid
at or above the asking price buys the property on the spot.

Price decay is either linear (each period removes discount_percent of the
starting price) or compounded (each period removes discount_percent of the
previous period's price).
"""

from typing import Optional

from auctionledger.core.auction.behavior import BaseAuction
from auctionledger.core.auction.resolution import finalize
from auctionledger.core.auction.types import AuctionData, AuctionSettings, Bid, Settlement


def discounted_price(settings: AuctionSettings, elapsed: int) -> int:
    """
    Asking price after `elapsed` seconds.

    Non-increasing in `elapsed`, floored at max(reserve_price, 0).
    """
    floor = max(settings.reserve_price, 0)
    periods = max(elapsed, 0) // settings.discount_frequency
    price = settings.starting_price

    if settings.compounded_discount:
        keep = 100 - settings.discount_percent
        for _ in range(periods):
            if price <= floor:
                break
            price = price * keep // 100
    else:
        price -= settings.starting_price * settings.discount_percent * periods // 100

    return max(price, floor)


class DiscountAuction(BaseAuction):

    name = "dutch"
    inclusive_price = True

    def current_price(self, env, auction: AuctionData) -> int:
        return discounted_price(auction.settings, env.now() - auction.start_time)

    def on_bid_accepted(self, env, auction: AuctionData, bid: Bid) -> Optional[Settlement]:
        return finalize(env, auction, bid)

    def determine_winner(self, env, auction: AuctionData) -> Optional[Bid]:
        self.require_expired(env, auction)
        return auction.highest_bid
