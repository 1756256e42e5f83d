"""
Tests for the simulated ledger host.

Tests cover:
1. Signature checks
2. All-or-nothing transactions
3. Replay protection
4. Ledger clock and assets
"""

import pytest

from auctionledger.core.errors import (
    ConfigurationInvalid,
    DuplicateTransaction,
    InsufficientBalance,
    InvalidSignature,
    UnknownFunction,
)
from auctionledger.core.storage import DataKey, Storage
from auctionledger.host import Env, Host
from tests.conftest import ITEM


class TestSignatures:

    def test_tampered_transaction_rejected(self, host, admin):
        tx = host.build(
            "initialize",
            signers=[admin],
            admin=admin.address,
            anti_snipe_time=0,
            commission_rate=5,
            extendable_auctions=False,
        )
        tx.args["commission_rate"] = 50

        with pytest.raises(InvalidSignature):
            host.submit(tx)
        assert host.query("get_admin") is None

    def test_signers_recovered(self, host, admin, alice):
        tx = host.build("get_admin", signers=[admin, alice])
        assert tx.signers() == frozenset({admin.address, alice.address})


class TestTransactions:

    def test_unknown_function(self, host):
        with pytest.raises(UnknownFunction):
            host.invoke("upgrade")

    def test_query_rejects_mutating_function(self, host):
        with pytest.raises(UnknownFunction):
            host.query("resolve", auction_id=1)

    def test_replayed_transaction_rejected(self, host, admin):
        tx = host.build(
            "initialize",
            signers=[admin],
            admin=admin.address,
            anti_snipe_time=0,
            commission_rate=5,
            extendable_auctions=False,
        )
        host.submit(tx)

        with pytest.raises(DuplicateTransaction):
            host.submit(tx)

    def test_failed_transaction_leaves_no_writes(self, host, house, seller, make_settings):
        """A start that fails validation must not leave an auction or phase behind."""
        before = len(host.backend)
        with pytest.raises(ConfigurationInvalid):
            house.start(make_settings(sealed_phase_time=5000), [seller])
        assert len(host.backend) == before

    def test_reads_are_not_committed(self, host, house, seller, make_settings):
        auction_id = house.start(make_settings(), [seller])
        before = len(host.backend)
        house.get_auction(auction_id)
        house.current_price(auction_id)
        assert len(host.backend) == before

    def test_mock_all_auths(self, seller, make_settings):
        host = Host(mock_all_auths=True)
        host.invoke(
            "initialize",
            admin=seller.address,
            anti_snipe_time=0,
            commission_rate=0,
            extendable_auctions=False,
        )
        host.mint(ITEM, seller.address, 1)
        auction_id = host.invoke("start", auction_settings=make_settings())
        assert Storage(host.backend).has(DataKey.auction_data(auction_id))


class TestClock:

    def test_genesis(self, host):
        assert host.clock.now() == host.config.genesis_timestamp

    def test_advance(self, host):
        start = host.clock.now()
        assert host.clock.advance(30) == start + 30

    def test_cannot_go_backwards(self, host):
        with pytest.raises(ValueError):
            host.clock.set(host.clock.now() - 1)
        with pytest.raises(ValueError):
            host.clock.advance(-1)


class TestAssets:

    def test_mint_and_balance(self, host, alice):
        host.mint("native", alice.address, 50)
        host.mint("native", alice.address, 25)
        assert host.balance("native", alice.address) == 75
        assert host.balance("other", alice.address) == 0

    def test_transfer_overdraft(self, host, alice, bob):
        host.mint("native", alice.address, 10)
        token = Env(Storage(host.backend), host.clock.now()).token("native")

        with pytest.raises(InsufficientBalance):
            token.transfer(alice.address, bob.address, 11)

        token.transfer(alice.address, bob.address, 10)
        assert token.balance(alice.address) == 0
        assert token.balance(bob.address) == 10
