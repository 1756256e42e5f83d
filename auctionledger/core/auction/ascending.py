"""
Ascending (English) auction.

Open bidding where every bid must beat the current highest one. The
highest bidder wins once the deadline has passed. A bid landing inside
the anti-snipe window pushes the deadline out so rivals get a chance to
answer it.
"""

from typing import Optional

from auctionledger.core.auction.behavior import BaseAuction, load_admin
from auctionledger.core.auction.types import AuctionData, Bid
from auctionledger.utils.logger import auction_logger, get_logger

logger = get_logger("auction.ascending")


class AscendingAuction(BaseAuction):

    name = "ascending"
    inclusive_price = False

    def current_price(self, env, auction: AuctionData) -> int:
        highest = auction.highest_bid
        return highest.amount if highest else auction.settings.starting_price

    def prepare_bid(self, env, auction: AuctionData, bid: Bid) -> None:
        window = load_admin(env).anti_snipe_time
        if window <= 0 or auction.deadline - bid.timestamp >= window:
            return

        bid.sniper = True
        new_deadline = bid.timestamp + window
        auction.settings = auction.settings.with_duration(new_deadline - auction.start_time)
        auction_logger(logger, auction.id).info(f"late bid, deadline extended to {new_deadline}")

    def determine_winner(self, env, auction: AuctionData) -> Optional[Bid]:
        self.require_expired(env, auction)
        return auction.highest_bid
