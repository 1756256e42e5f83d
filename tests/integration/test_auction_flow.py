"""
End-to-end auction scenarios through signed host transactions.

Scenarios:
1. Ascending auction with commission settlement
2. Anti-snipe deadline extension
3. Dutch auction bought on the spot
4. Sealed commit-reveal round
5. No-sale resolution
6. Escrow of the property and the leading bid
"""

import pytest

from auctionledger.core.auction import AuctionPhase, CommitmentStatus, create_commitment
from auctionledger.core.config import CONTRACT_ADDRESS, NATIVE_ASSET
from auctionledger.core.errors import (
    AuctionEnded,
    ConfigurationInvalid,
    InvalidBid,
    InvalidReveal,
    StateConflict,
)
from auctionledger.core.storage import Storage
from auctionledger.crypto import generate_keypair, random_salt
from auctionledger.host import Env
from tests.conftest import FUNDS, ITEM


def balances(host, *keypairs, asset=NATIVE_ASSET):
    return [host.balance(asset, kp.address) for kp in keypairs]


# =============================================================================
# Ascending
# =============================================================================


class TestAscendingAuction:

    def test_highest_bid_wins(self, host, house, admin, seller, alice, bob, make_settings):
        auction_id = house.start(make_settings(), [seller])

        house.place_bid(auction_id, alice, 15)
        house.place_bid(auction_id, bob, 20)

        with pytest.raises(StateConflict):
            house.resolve(auction_id)

        host.clock.advance(3600)
        settlement = house.resolve(auction_id)

        assert settlement.winner == bob.address
        assert settlement.amount == 20
        assert settlement.commission == 1
        assert balances(host, seller, admin, bob, alice) == [19, 1, FUNDS - 20, FUNDS]
        assert host.balance(ITEM, bob.address) == 1
        assert host.balance(ITEM, seller.address) == 0
        assert house.get_phase(auction_id) == AuctionPhase.ENDED

    def test_bid_must_beat_current_price(self, house, seller, alice, bob, make_settings):
        auction_id = house.start(make_settings(), [seller])

        with pytest.raises(InvalidBid):
            house.place_bid(auction_id, alice, 10)

        house.place_bid(auction_id, alice, 15)
        with pytest.raises(InvalidBid):
            house.place_bid(auction_id, bob, 15)

        assert [b.amount for b in house.get_auction(auction_id).bids] == [15]

    def test_seller_cannot_bid(self, host, house, seller, make_settings):
        host.mint(NATIVE_ASSET, seller.address, FUNDS)
        auction_id = house.start(make_settings(), [seller])
        with pytest.raises(InvalidBid):
            house.place_bid(auction_id, seller, 50)

    def test_bid_beyond_balance_rejected(self, house, seller, alice, make_settings):
        auction_id = house.start(make_settings(), [seller])
        with pytest.raises(InvalidBid):
            house.place_bid(auction_id, alice, FUNDS + 1)

    def test_late_bid_extends_deadline(self, host, house, seller, alice, bob, make_settings):
        auction_id = house.start(make_settings(), [seller])
        start = host.clock.now()

        host.clock.advance(3570)
        house.place_bid(auction_id, alice, 15)
        auction = house.get_auction(auction_id)
        assert auction.bids[0].sniper
        assert auction.deadline == start + 3630

        host.clock.advance(40)
        with pytest.raises(StateConflict):
            house.resolve(auction_id)

        house.place_bid(auction_id, bob, 20)
        assert house.get_auction(auction_id).deadline == start + 3670

        host.clock.advance(60)
        assert house.resolve(auction_id).winner == bob.address

    def test_early_bid_does_not_extend(self, host, house, seller, alice, make_settings):
        auction_id = house.start(make_settings(), [seller])
        house.place_bid(auction_id, alice, 15)

        auction = house.get_auction(auction_id)
        assert not auction.bids[0].sniper
        assert auction.deadline == auction.start_time + 3600

    def test_bid_after_deadline_rejected(self, host, house, seller, alice, make_settings):
        auction_id = house.start(make_settings(), [seller])
        host.clock.advance(3600)
        with pytest.raises(StateConflict):
            house.place_bid(auction_id, alice, 15)


# =============================================================================
# Dutch
# =============================================================================


class TestDiscountAuction:

    @pytest.fixture
    def dutch(self, make_settings):
        return make_settings(starting_price=100, discount_percent=10, discount_frequency=60)

    def test_bid_at_asking_price_buys(self, host, house, admin, seller, alice, bob, dutch):
        auction_id = house.start(dutch, [seller])

        host.clock.advance(125)
        assert house.current_price(auction_id) == 80

        with pytest.raises(InvalidBid):
            house.place_bid(auction_id, alice, 79)

        settlement = house.place_bid(auction_id, alice, 80)

        assert settlement.winner == alice.address
        assert settlement.commission == 4
        assert balances(host, seller, admin, alice) == [76, 4, FUNDS - 80]
        assert host.balance(ITEM, alice.address) == 1
        assert house.get_phase(auction_id) == AuctionPhase.ENDED

        with pytest.raises(AuctionEnded):
            house.place_bid(auction_id, bob, 100)

    def test_price_floored_at_reserve(self, host, house, seller, make_settings):
        settings = make_settings(
            starting_price=100, discount_percent=10, discount_frequency=60, reserve_price=55
        )
        auction_id = house.start(settings, [seller])

        host.clock.advance(3000)
        assert house.current_price(auction_id) == 55

    def test_unsold_dutch_resolves_after_deadline(self, host, house, seller, dutch):
        auction_id = house.start(dutch, [seller])

        with pytest.raises(StateConflict):
            house.resolve(auction_id)

        host.clock.advance(3600)
        assert house.resolve(auction_id) is None
        assert host.balance(ITEM, seller.address) == 1


# =============================================================================
# Sealed commit-reveal
# =============================================================================


class TestSealedAuction:

    def test_commit_then_reveal(self, host, house, seller, alice, bob, make_settings):
        carol = generate_keypair()
        auction_id = house.start(make_settings(sealed_phase_time=600), [seller])
        start = host.clock.now()

        alice_salt, bob_salt = random_salt(), random_salt()
        house.place_sealed_bid(auction_id, alice, create_commitment(30, alice_salt))
        house.place_sealed_bid(auction_id, bob, create_commitment(25, bob_salt))
        house.place_sealed_bid(auction_id, carol, create_commitment(99, random_salt()))

        # still sealed one second before the boundary
        host.clock.set(start + 599)
        with pytest.raises(StateConflict):
            house.place_bid(auction_id, alice, 30, alice_salt)

        host.clock.set(start + 600)
        assert house.get_phase(auction_id) == AuctionPhase.RUNNING

        with pytest.raises(StateConflict):
            house.place_sealed_bid(auction_id, bob, create_commitment(40, bob_salt))

        with pytest.raises(InvalidReveal):
            house.place_bid(auction_id, alice, 30, random_salt())
        with pytest.raises(InvalidReveal):
            house.place_bid(auction_id, alice, 31, alice_salt)
        with pytest.raises(InvalidReveal):
            house.place_bid(auction_id, alice, 30)

        house.place_bid(auction_id, bob, 25, bob_salt)
        house.place_bid(auction_id, alice, 30, alice_salt)

        # a commitment opens only once
        with pytest.raises(InvalidReveal):
            house.place_bid(auction_id, alice, 30, alice_salt)

        host.clock.set(start + 3600)
        settlement = house.resolve(auction_id)
        assert settlement.winner == alice.address
        assert settlement.amount == 30

        statuses = {s.buyer: s.status for s in house.get_auction(auction_id).sealed_bids}
        assert statuses == {
            alice.address: CommitmentStatus.REVEALED,
            bob.address: CommitmentStatus.REVEALED,
            carol.address: CommitmentStatus.FORFEITED,
        }

    def test_unrevealed_auction_closes_without_sale(self, host, house, seller, alice, make_settings):
        auction_id = house.start(make_settings(sealed_phase_time=600), [seller])
        house.place_sealed_bid(auction_id, alice, create_commitment(30, random_salt()))

        host.clock.advance(3600)
        assert house.resolve(auction_id) is None

        sealed = house.get_auction(auction_id).sealed_bids
        assert [s.status for s in sealed] == [CommitmentStatus.FORFEITED]
        assert host.balance(NATIVE_ASSET, alice.address) == FUNDS


# =============================================================================
# Resolution
# =============================================================================


class TestResolution:

    def test_no_sale(self, host, house, seller, make_settings):
        auction_id = house.start(make_settings(), [seller])

        host.clock.advance(3600)
        assert house.resolve(auction_id) is None
        assert host.balance(ITEM, seller.address) == 1
        assert house.get_phase(auction_id) == AuctionPhase.ENDED
        assert house.get_auction(auction_id) is not None

    def test_resolve_twice(self, host, house, seller, make_settings):
        auction_id = house.start(make_settings(), [seller])
        host.clock.advance(3600)
        house.resolve(auction_id)

        with pytest.raises(AuctionEnded):
            house.resolve(auction_id)

    def test_bid_on_ended_auction(self, host, house, seller, alice, make_settings):
        auction_id = house.start(make_settings(), [seller])
        host.clock.advance(3600)
        house.resolve(auction_id)

        with pytest.raises(InvalidBid):
            house.place_bid(auction_id, alice, 50)


# =============================================================================
# Escrow
# =============================================================================


def drain(host, asset, owner, recipient):
    """Move everything `owner` holds of `asset` outside of the contract."""
    storage = Storage(host.backend)
    token = Env(storage, host.clock.now()).token(asset)
    token.transfer(owner, recipient, token.balance(owner))
    storage.commit()


class TestEscrow:

    def test_property_held_while_running(self, host, house, seller, make_settings):
        auction_id = house.start(make_settings(), [seller])

        assert host.balance(ITEM, seller.address) == 0
        assert host.balance(ITEM, CONTRACT_ADDRESS) == 1

        host.clock.advance(3600)
        house.resolve(auction_id)
        assert host.balance(ITEM, seller.address) == 1
        assert host.balance(ITEM, CONTRACT_ADDRESS) == 0

    def test_same_item_cannot_be_auctioned_twice(self, house, seller, make_settings):
        house.start(make_settings(), [seller])

        with pytest.raises(ConfigurationInvalid):
            house.start(make_settings(discount_percent=10, discount_frequency=60), [seller])

    def test_outbid_bidder_refunded(self, host, house, seller, alice, bob, make_settings):
        auction_id = house.start(make_settings(), [seller])

        house.place_bid(auction_id, alice, 15)
        assert balances(host, alice) == [FUNDS - 15]
        assert host.balance(NATIVE_ASSET, CONTRACT_ADDRESS) == 15

        house.place_bid(auction_id, bob, 20)
        assert balances(host, alice, bob) == [FUNDS, FUNDS - 20]
        assert host.balance(NATIVE_ASSET, CONTRACT_ADDRESS) == 20

    def test_raising_own_bid(self, host, house, seller, alice, make_settings):
        auction_id = house.start(make_settings(), [seller])

        house.place_bid(auction_id, alice, 15)
        house.place_bid(auction_id, alice, 40)
        assert balances(host, alice) == [FUNDS - 40]
        assert host.balance(NATIVE_ASSET, CONTRACT_ADDRESS) == 40

    def test_winner_spending_funds_cannot_block_resolution(
        self, host, house, admin, seller, alice, bob, make_settings
    ):
        auction_id = house.start(make_settings(), [seller])
        house.place_bid(auction_id, alice, 15)
        house.place_bid(auction_id, bob, 20)

        drain(host, NATIVE_ASSET, bob.address, alice.address)
        host.clock.advance(4000)

        settlement = house.resolve(auction_id)
        assert settlement.winner == bob.address
        assert house.get_phase(auction_id) == AuctionPhase.ENDED
        assert balances(host, seller, admin, bob) == [19, 1, 0]
        assert host.balance(ITEM, bob.address) == 1
        assert host.balance(NATIVE_ASSET, CONTRACT_ADDRESS) == 0

    def test_revealed_bids_escrowed(self, host, house, seller, alice, bob, make_settings):
        auction_id = house.start(make_settings(sealed_phase_time=600), [seller])
        alice_salt, bob_salt = random_salt(), random_salt()
        house.place_sealed_bid(auction_id, alice, create_commitment(30, alice_salt))
        house.place_sealed_bid(auction_id, bob, create_commitment(25, bob_salt))

        # commitments alone hold nothing
        assert host.balance(NATIVE_ASSET, CONTRACT_ADDRESS) == 0

        host.clock.advance(600)
        house.place_bid(auction_id, bob, 25, bob_salt)
        assert balances(host, bob) == [FUNDS - 25]

        house.place_bid(auction_id, alice, 30, alice_salt)
        assert balances(host, alice, bob) == [FUNDS - 30, FUNDS]
        assert host.balance(NATIVE_ASSET, CONTRACT_ADDRESS) == 30
