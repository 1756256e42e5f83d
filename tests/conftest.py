"""
Shared fixtures: keypairs, hosts and ready-to-use auction clients.
"""

import pytest

from auctionledger.client import AuctionClient
from auctionledger.core.auction import AuctionSettings
from auctionledger.core.config import NATIVE_ASSET
from auctionledger.crypto import generate_keypair
from auctionledger.host import Host

ITEM = "ART-0001"
FUNDS = 1_000


@pytest.fixture(scope="session")
def admin():
    return generate_keypair()


@pytest.fixture(scope="session")
def seller():
    return generate_keypair()


@pytest.fixture(scope="session")
def alice():
    return generate_keypair()


@pytest.fixture(scope="session")
def bob():
    return generate_keypair()


@pytest.fixture
def host():
    """In-memory host with real signature checks."""
    return Host()


@pytest.fixture
def client(host):
    return AuctionClient(host)


@pytest.fixture
def house(host, client, admin, seller, alice, bob):
    """
    Initialized contract: 5% commission, 60s anti-snipe, extensions allowed.
    The seller owns ITEM, alice and bob hold FUNDS of the native asset.
    """
    client.initialize(admin, anti_snipe_time=60, commission_rate=5, extendable_auctions=True)
    host.mint(ITEM, seller.address, 1)
    host.mint(NATIVE_ASSET, alice.address, FUNDS)
    host.mint(NATIVE_ASSET, bob.address, FUNDS)
    return client


@pytest.fixture
def make_settings(seller):
    def factory(**overrides) -> AuctionSettings:
        values = dict(
            seller=seller.address,
            item=ITEM,
            starting_price=10,
            duration=3600,
        )
        values.update(overrides)
        return AuctionSettings(**values)
    return factory
