"""
Auction Contract - public entry points.

Every entry point runs inside one host transaction and receives the
transaction's Env. It reloads what it needs from storage, asks the
Dispatcher for the auction's protocol, lets the protocol do the work and
writes the records back. Any exception aborts the whole transaction.

Entry points:
- initialize: one-time admin configuration
- start: create an auction, returns its identifier
- place_sealed_bid / place_bid: bidding (place_bid also reveals)
- extend: seller lengthens an auction, if the admin allows it
- resolve: close and settle
- get_auction, get_admin, get_phase, current_price: read-only queries
"""

from typing import Callable, Dict, Optional

from auctionledger.core.auction import (
    AdminData,
    AuctionData,
    AuctionPhase,
    AuctionSettings,
    Dispatcher,
    PhaseMachine,
    Settlement,
)
from auctionledger.core.auction.behavior import load_auction, save_auction
from auctionledger.core.auction.phase import sealed_phase_expired
from auctionledger.core.config import MAX_ANTI_SNIPE_TIME, MAX_COMMISSION_RATE, PROPERTY_UNIT
from auctionledger.core.errors import (
    AlreadyInitialized,
    ConfigurationInvalid,
    StateConflict,
)
from auctionledger.core.storage import DataKey
from auctionledger.utils.logger import auction_logger, get_logger
from auctionledger.utils.validation import (
    validate_address,
    validate_all,
    validate_amount,
    validate_asset_id,
    validate_duration,
    validate_hash,
    validate_integer,
)

logger = get_logger("contract")

# Identifiers are unsigned 64-bit
MAX_AUCTION_ID = 2**64 - 1

# function name -> read-only flag
EXPORTS: Dict[str, bool] = {}


def contract_function(read_only: bool = False) -> Callable:
    """Expose a method as a contract entry point."""
    def decorator(method):
        EXPORTS[method.__name__] = read_only
        return method
    return decorator


def validate_settings(settings: AuctionSettings) -> None:
    """Creation-time constraints on auction settings."""
    ok, message = validate_all(
        validate_address(settings.seller, "seller"),
        validate_asset_id(settings.item, "item"),
        validate_asset_id(settings.market, "market"),
        validate_amount(settings.starting_price, "starting_price"),
        validate_amount(settings.reserve_price, "reserve_price"),
        validate_amount(settings.min_commission, "min_commission"),
        validate_amount(settings.max_commission, "max_commission"),
        validate_duration(settings.duration, "duration"),
        validate_duration(settings.sealed_phase_time, "sealed_phase_time"),
        validate_duration(settings.discount_frequency, "discount_frequency"),
        validate_integer(settings.discount_percent, "discount_percent", 0, 100),
    )
    if not ok:
        raise ConfigurationInvalid(message)

    if settings.item == settings.market:
        raise ConfigurationInvalid("property and payment asset must differ")
    if settings.starting_price <= 0:
        raise ConfigurationInvalid("starting_price must be positive")
    if settings.duration <= 0:
        raise ConfigurationInvalid("duration must be positive")
    if settings.sealed_phase_time >= settings.duration:
        raise ConfigurationInvalid("sealed phase must end before the auction does")
    if (settings.discount_percent > 0) != (settings.discount_frequency > 0):
        raise ConfigurationInvalid("discount_percent and discount_frequency must both be set or both be zero")
    if settings.reserve_price > settings.starting_price:
        raise ConfigurationInvalid("reserve_price cannot exceed starting_price")
    if settings.max_commission and settings.min_commission > settings.max_commission:
        raise ConfigurationInvalid("min_commission cannot exceed max_commission")


class AuctionContract:
    """The auction house contract."""

    # =========================================================================
    # Administration
    # =========================================================================

    @contract_function()
    def initialize(
        self,
        env,
        admin: str,
        anti_snipe_time: int,
        commission_rate: int,
        extendable_auctions: bool,
    ) -> None:
        key = DataKey.admin_data()
        if env.storage.has(key):
            raise AlreadyInitialized("auction contract already initialized")

        ok, message = validate_all(
            validate_address(admin, "admin"),
            validate_duration(anti_snipe_time, "anti_snipe_time"),
            validate_integer(commission_rate, "commission_rate"),
        )
        if not ok:
            raise ConfigurationInvalid(message)

        env.require_auth(admin)

        env.storage.set(
            key,
            AdminData(
                admin=admin,
                anti_snipe_time=min(anti_snipe_time, MAX_ANTI_SNIPE_TIME),
                commission_rate=max(0, min(commission_rate, MAX_COMMISSION_RATE)),
                extendable_auctions=bool(extendable_auctions),
            ),
        )
        logger.info(f"Contract initialized by {admin}")

    # =========================================================================
    # Auction lifecycle
    # =========================================================================

    @contract_function()
    def start(self, env, auction_settings: AuctionSettings) -> int:
        if not env.storage.has(DataKey.admin_data()):
            raise StateConflict("auction contract not initialized")

        env.require_auth(auction_settings.seller)
        validate_settings(auction_settings)

        if env.token(auction_settings.item).balance(auction_settings.seller) < PROPERTY_UNIT:
            raise ConfigurationInvalid(
                f"seller does not hold property {auction_settings.item}"
            )

        auction_id = env.prng.randint(1, MAX_AUCTION_ID)
        while env.storage.has(DataKey.auction_data(auction_id)):
            auction_id = env.prng.randint(1, MAX_AUCTION_ID)

        auction = AuctionData(id=auction_id, settings=auction_settings, start_time=env.now())
        Dispatcher.for_auction(auction).start(env, auction)
        return auction_id

    @contract_function()
    def place_sealed_bid(self, env, auction_id: int, buyer: str, sealed_amount: bytes) -> None:
        env.require_auth(buyer)

        ok, message = validate_hash(sealed_amount, "sealed_amount")
        if not ok:
            raise ConfigurationInvalid(message)

        auction = load_auction(env, auction_id)
        Dispatcher.for_auction(auction).place_sealed_bid(env, auction_id, buyer, sealed_amount)

    @contract_function()
    def place_bid(
        self,
        env,
        auction_id: int,
        buyer: str,
        amount: int,
        salt: Optional[bytes] = None,
    ) -> Optional[Settlement]:
        env.require_auth(buyer)

        auction = load_auction(env, auction_id)
        dispatcher = Dispatcher.for_auction(auction)

        # The phase must be current before phase-gated bid rules run
        if dispatcher.is_sealed_bid_auction(auction) and sealed_phase_expired(auction, env.now()):
            PhaseMachine(env.storage, auction_id).advance(auction, env.now())

        return dispatcher.place_bid(env, auction_id, buyer, amount, salt)

    @contract_function()
    def extend(self, env, auction_id: int, duration: int) -> bool:
        admin = env.storage.get(DataKey.admin_data(), AdminData)
        if not admin.extendable_auctions:
            return False

        auction = load_auction(env, auction_id)
        env.require_auth(auction.settings.seller)

        ok, message = validate_duration(duration)
        if not ok or duration <= 0:
            raise ConfigurationInvalid(message or "extension must be positive")

        PhaseMachine(env.storage, auction_id).require_not_ended()

        auction.settings = auction.settings.with_duration(auction.settings.duration + duration)
        save_auction(env, auction)
        auction_logger(logger, auction_id).info(f"extended by {duration}s to {auction.deadline}")
        return True

    @contract_function()
    def resolve(self, env, auction_id: int) -> Optional[Settlement]:
        auction = load_auction(env, auction_id)
        return Dispatcher.for_auction(auction).resolve(env, auction_id)

    # =========================================================================
    # Queries
    # =========================================================================

    @contract_function(read_only=True)
    def get_auction(self, env, auction_id: int) -> Optional[AuctionData]:
        return env.storage.get_optional(DataKey.auction_data(auction_id), AuctionData)

    @contract_function(read_only=True)
    def get_admin(self, env) -> Optional[AdminData]:
        return env.storage.get_optional(DataKey.admin_data(), AdminData)

    @contract_function(read_only=True)
    def get_phase(self, env, auction_id: int) -> AuctionPhase:
        auction = load_auction(env, auction_id)
        return PhaseMachine(env.storage, auction_id).current(auction, env.now())

    @contract_function(read_only=True)
    def current_price(self, env, auction_id: int) -> int:
        auction = load_auction(env, auction_id)
        return Dispatcher.for_auction(auction).current_price(env, auction)
