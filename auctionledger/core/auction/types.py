"""
Auction records.

All records are plain dataclasses that round-trip through to_dict/from_dict
for storage. Byte fields (commitments) are stored hex-encoded.
"""

from dataclasses import asdict, dataclass, field, replace
from enum import Enum, IntEnum
from typing import List, Optional

from auctionledger.core.config import NATIVE_ASSET
from auctionledger.crypto import bytes_to_hex, hex_to_bytes


class AuctionPhase(IntEnum):
    """Phase of one auction, stored per region."""
    SEALED = 0
    RUNNING = 1
    ENDED = 2


class CommitmentStatus(str, Enum):
    """Lifecycle of a sealed commitment."""
    COMMITTED = "committed"
    REVEALED = "revealed"
    FORFEITED = "forfeited"


def auction_region(auction_id: int) -> str:
    """Region scoping the phase record of one auction."""
    return f"Dispatcher:{auction_id}"


@dataclass(frozen=True)
class AuctionSettings:
    """
    Seller-supplied parameters of an auction.

    Both discount fields at zero selects the ascending protocol, both
    positive selects the Dutch protocol.
    """
    seller: str
    item: str                       # property asset identifier
    starting_price: int
    duration: int                   # seconds from start_time
    market: str = NATIVE_ASSET      # payment asset
    sealed_phase_time: int = 0      # 0 = no commit-reveal phase
    discount_percent: int = 0
    discount_frequency: int = 0
    compounded_discount: bool = False
    reserve_price: int = 0          # Dutch price floor
    min_commission: int = 0
    max_commission: int = 0         # 0 = no upper bound

    @property
    def is_discount(self) -> bool:
        return self.discount_percent > 0 and self.discount_frequency > 0

    def with_duration(self, duration: int) -> "AuctionSettings":
        return replace(self, duration=duration)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AuctionSettings":
        return cls(**data)


@dataclass
class Bid:
    buyer: str
    amount: int
    timestamp: int
    sniper: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Bid":
        return cls(**data)


@dataclass
class SealedBid:
    """
    A commitment to a hidden amount.

    Moves from COMMITTED to REVEALED when the bidder discloses a matching
    amount and salt, or to FORFEITED when the auction resolves first.
    """
    buyer: str
    commitment: bytes
    timestamp: int
    status: CommitmentStatus = CommitmentStatus.COMMITTED

    @property
    def outstanding(self) -> bool:
        return self.status == CommitmentStatus.COMMITTED

    def to_dict(self) -> dict:
        return {
            "buyer": self.buyer,
            "commitment": bytes_to_hex(self.commitment),
            "timestamp": self.timestamp,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SealedBid":
        return cls(
            buyer=data["buyer"],
            commitment=hex_to_bytes(data["commitment"]),
            timestamp=data["timestamp"],
            status=CommitmentStatus(data["status"]),
        )


@dataclass
class AuctionData:
    id: int
    settings: AuctionSettings
    start_time: int
    bids: List[Bid] = field(default_factory=list)
    sealed_bids: List[SealedBid] = field(default_factory=list)

    @property
    def deadline(self) -> int:
        return self.start_time + self.settings.duration

    @property
    def sealed_deadline(self) -> int:
        return self.start_time + self.settings.sealed_phase_time

    @property
    def highest_bid(self) -> Optional[Bid]:
        # Earliest bid wins ties
        best = None
        for bid in self.bids:
            if best is None or bid.amount > best.amount:
                best = bid
        return best

    @property
    def outstanding_commitments(self) -> List[SealedBid]:
        return [sealed for sealed in self.sealed_bids if sealed.outstanding]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "settings": self.settings.to_dict(),
            "start_time": self.start_time,
            "bids": [bid.to_dict() for bid in self.bids],
            "sealed_bids": [sealed.to_dict() for sealed in self.sealed_bids],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuctionData":
        return cls(
            id=data["id"],
            settings=AuctionSettings.from_dict(data["settings"]),
            start_time=data["start_time"],
            bids=[Bid.from_dict(b) for b in data["bids"]],
            sealed_bids=[SealedBid.from_dict(s) for s in data["sealed_bids"]],
        )


@dataclass(frozen=True)
class AdminData:
    admin: str
    anti_snipe_time: int
    commission_rate: int            # percent
    extendable_auctions: bool

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AdminData":
        return cls(**data)


@dataclass(frozen=True)
class Settlement:
    """Outcome of a resolved auction that found a buyer."""
    auction_id: int
    winner: str
    amount: int
    commission: int

    @property
    def seller_proceeds(self) -> int:
        return self.amount - self.commission
