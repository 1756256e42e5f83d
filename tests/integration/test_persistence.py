"""
SQLite-backed host: state survives a restart.
"""

import pytest

from auctionledger.client import AuctionClient
from auctionledger.core.config import NATIVE_ASSET, HostConfig
from auctionledger.core.errors import DuplicateTransaction
from auctionledger.host import Host
from tests.conftest import ITEM


@pytest.fixture
def config(tmp_path):
    return HostConfig(data_dir=tmp_path / "data", host_seed=3)


def test_auction_survives_restart(config, admin, seller, alice, make_settings):
    host = Host.open(config)
    client = AuctionClient(host)
    client.initialize(admin, commission_rate=10)
    host.mint(ITEM, seller.address, 1)
    host.mint(NATIVE_ASSET, alice.address, 100)
    auction_id = client.start(make_settings(), [seller])
    client.place_bid(auction_id, alice, 40)
    host.clock.advance(3600)
    host.close()

    assert config.db_path.exists()

    host = Host.open(config)
    client = AuctionClient(host)
    try:
        auction = client.get_auction(auction_id)
        assert [b.amount for b in auction.bids] == [40]
        assert host.clock.now() == auction.start_time + 3600

        settlement = client.resolve(auction_id)
        assert settlement.commission == 4
        assert host.balance(NATIVE_ASSET, seller.address) == 36
        assert host.balance(ITEM, alice.address) == 1
    finally:
        host.close()


def test_replay_rejected_after_restart(config, admin):
    host = Host.open(config)
    tx = host.build(
        "initialize",
        signers=[admin],
        admin=admin.address,
        anti_snipe_time=0,
        commission_rate=0,
        extendable_auctions=False,
    )
    host.submit(tx)
    host.close()

    host = Host.open(config)
    try:
        with pytest.raises(DuplicateTransaction):
            host.submit(tx)
    finally:
        host.close()
