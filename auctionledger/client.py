"""
AuctionClient - typed wrapper around host transactions.

Each method builds one transaction for the matching contract function,
signs it with the given keypairs and submits it.
"""

from typing import Optional, Sequence

from auctionledger.core.auction import AdminData, AuctionData, AuctionPhase, AuctionSettings, Settlement
from auctionledger.crypto import KeyPair
from auctionledger.host import Host


class AuctionClient:

    def __init__(self, host: Host):
        self.host = host

    def initialize(
        self,
        admin: KeyPair,
        anti_snipe_time: int = 0,
        commission_rate: int = 0,
        extendable_auctions: bool = False,
    ) -> None:
        self.host.invoke(
            "initialize",
            signers=[admin],
            admin=admin.address,
            anti_snipe_time=anti_snipe_time,
            commission_rate=commission_rate,
            extendable_auctions=extendable_auctions,
        )

    def start(self, settings: AuctionSettings, signers: Sequence[KeyPair] = ()) -> int:
        return self.host.invoke("start", signers=signers, auction_settings=settings)

    def place_sealed_bid(self, auction_id: int, buyer: KeyPair, sealed_amount: bytes) -> None:
        self.host.invoke(
            "place_sealed_bid",
            signers=[buyer],
            auction_id=auction_id,
            buyer=buyer.address,
            sealed_amount=sealed_amount,
        )

    def place_bid(
        self,
        auction_id: int,
        buyer: KeyPair,
        amount: int,
        salt: Optional[bytes] = None,
    ) -> Optional[Settlement]:
        return self.host.invoke(
            "place_bid",
            signers=[buyer],
            auction_id=auction_id,
            buyer=buyer.address,
            amount=amount,
            salt=salt,
        )

    def extend(self, auction_id: int, duration: int, signers: Sequence[KeyPair] = ()) -> bool:
        return self.host.invoke("extend", signers=signers, auction_id=auction_id, duration=duration)

    def resolve(self, auction_id: int, signers: Sequence[KeyPair] = ()) -> Optional[Settlement]:
        return self.host.invoke("resolve", signers=signers, auction_id=auction_id)

    def get_auction(self, auction_id: int) -> Optional[AuctionData]:
        return self.host.query("get_auction", auction_id=auction_id)

    def get_admin(self) -> Optional[AdminData]:
        return self.host.query("get_admin")

    def get_phase(self, auction_id: int) -> AuctionPhase:
        return self.host.query("get_phase", auction_id=auction_id)

    def current_price(self, auction_id: int) -> int:
        return self.host.query("current_price", auction_id=auction_id)
