"""
Auction Module.

This module provides the auction engine:
- Records (settings, bids, sealed commitments, admin data)
- Per-auction phase state machine
- Bid validation and commit-reveal
- Ascending and Dutch protocols behind one dispatcher
- Resolution and settlement
"""

from auctionledger.core.auction.types import (
    AdminData,
    AuctionData,
    AuctionPhase,
    AuctionSettings,
    Bid,
    CommitmentStatus,
    SealedBid,
    Settlement,
    auction_region,
)
from auctionledger.core.auction.phase import PhaseMachine, effective_phase
from auctionledger.core.auction.commit_reveal import (
    accept_sealed,
    create_commitment,
    reveal,
    validate_plain,
)
from auctionledger.core.auction.resolution import compute_commission, finalize
from auctionledger.core.auction.behavior import BaseAuction
from auctionledger.core.auction.ascending import AscendingAuction
from auctionledger.core.auction.descending import DiscountAuction, discounted_price
from auctionledger.core.auction.dispatcher import Dispatcher, select_variant

__all__ = [
    # Records
    "AdminData",
    "AuctionData",
    "AuctionPhase",
    "AuctionSettings",
    "Bid",
    "CommitmentStatus",
    "SealedBid",
    "Settlement",
    "auction_region",
    # Phase
    "PhaseMachine",
    "effective_phase",
    # Bids
    "accept_sealed",
    "create_commitment",
    "reveal",
    "validate_plain",
    # Resolution
    "compute_commission",
    "finalize",
    # Protocols
    "BaseAuction",
    "AscendingAuction",
    "DiscountAuction",
    "discounted_price",
    "Dispatcher",
    "select_variant",
]
