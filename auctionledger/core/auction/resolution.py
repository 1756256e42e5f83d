"""
Resolution Engine - closes an auction and settles it.

Both the property unit and the winning amount are already held by the
contract account when an auction is resolved. Settlement of a sale pays
them out:
- contract -> seller: winning amount minus commission (payment asset)
- contract -> admin:  commission (payment asset), if any
- contract -> winner: the property unit

A no-sale hands the property back to the seller. Commitments never
revealed are forfeited.
"""

from typing import Optional

from auctionledger.core.auction.commit_reveal import forfeit_outstanding
from auctionledger.core.auction.phase import PhaseMachine
from auctionledger.core.auction.types import (
    AdminData,
    AuctionData,
    AuctionPhase,
    AuctionSettings,
    Bid,
    Settlement,
)
from auctionledger.core.config import PROPERTY_UNIT
from auctionledger.core.storage import DataKey
from auctionledger.utils.logger import auction_logger, get_logger

logger = get_logger("auction.resolution")


def compute_commission(amount: int, commission_rate: int, settings: AuctionSettings) -> int:
    """
    Platform commission on a winning amount.

    The rate is a percentage, bounded by the auction's min/max overrides
    (max 0 meaning unbounded) and never more than the amount itself.
    """
    commission = amount * commission_rate // 100
    commission = max(commission, settings.min_commission)
    if settings.max_commission > 0:
        commission = min(commission, settings.max_commission)
    return min(commission, amount)


def finalize(env, auction: AuctionData, winner: Optional[Bid]) -> Optional[Settlement]:
    """
    Move the auction to ENDED and pay out the escrow.

    Returns:
        Settlement for a sale, None for no sale
    """
    log = auction_logger(logger, auction.id)
    PhaseMachine(env.storage, auction.id).set(AuctionPhase.ENDED)

    forfeited = forfeit_outstanding(auction)
    if forfeited:
        log.info(f"{forfeited} unrevealed commitment(s) forfeited")

    env.storage.set(DataKey.auction_data(auction.id), auction)

    settings = auction.settings
    escrow = env.contract_address
    item = env.token(settings.item)

    if winner is None:
        item.transfer(escrow, settings.seller, PROPERTY_UNIT)
        log.info("closed without sale, property returned to seller")
        return None

    admin = env.storage.get(DataKey.admin_data(), AdminData)
    settlement = Settlement(
        auction_id=auction.id,
        winner=winner.buyer,
        amount=winner.amount,
        commission=compute_commission(winner.amount, admin.commission_rate, settings),
    )

    market = env.token(settings.market)
    market.transfer(escrow, settings.seller, settlement.seller_proceeds)
    if settlement.commission > 0:
        market.transfer(escrow, admin.admin, settlement.commission)
    item.transfer(escrow, winner.buyer, PROPERTY_UNIT)

    log.info(
        f"sold to {winner.buyer} for {winner.amount} (commission {settlement.commission})"
    )
    return settlement
