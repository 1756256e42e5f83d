"""
Phase State Machine - per-auction Sealed -> Running -> Ended.

There is no scheduler on the ledger, so the Sealed -> Running transition
is sampled: it is computed from (stored phase, start time, sealed phase
length, ledger time) whenever a bid-placing call needs the phase, and
persisted lazily. Two calls at the same ledger time always see the same
phase.

Running -> Ended only happens on resolution and is terminal.
"""

from typing import Optional

from auctionledger.core.auction.types import AuctionData, AuctionPhase, auction_region
from auctionledger.core.errors import AuctionEnded, StateConflict
from auctionledger.core.storage import PhaseKey, Storage
from auctionledger.utils.logger import auction_logger, get_logger

logger = get_logger("auction.phase")

# Allowed forward moves; Ended has none
_TRANSITIONS = {
    None: {AuctionPhase.SEALED, AuctionPhase.RUNNING, AuctionPhase.ENDED},
    AuctionPhase.SEALED: {AuctionPhase.RUNNING, AuctionPhase.ENDED},
    AuctionPhase.RUNNING: {AuctionPhase.ENDED},
    AuctionPhase.ENDED: set(),
}


def sealed_phase_expired(auction: AuctionData, now: int) -> bool:
    return auction.sealed_deadline <= now


def effective_phase(
    stored: Optional[AuctionPhase],
    start_time: int,
    sealed_phase_time: int,
    now: int,
) -> AuctionPhase:
    """
    Phase an auction is in at ledger time `now`.

    A missing record means the auction never had a sealed phase and is
    implicitly running.
    """
    if stored is None:
        return AuctionPhase.RUNNING
    if stored == AuctionPhase.SEALED and start_time + sealed_phase_time <= now:
        return AuctionPhase.RUNNING
    return stored


class PhaseMachine:
    """Phase record of one auction region."""

    def __init__(self, storage: Storage, auction_id: int):
        self.storage = storage
        self.auction_id = auction_id
        self.key = PhaseKey(auction_region(auction_id))

    @property
    def stored(self) -> Optional[AuctionPhase]:
        value = self.storage.get_optional(self.key)
        return None if value is None else AuctionPhase(value)

    def current(self, auction: AuctionData, now: int) -> AuctionPhase:
        return effective_phase(
            self.stored, auction.start_time, auction.settings.sealed_phase_time, now
        )

    def set(self, phase: AuctionPhase) -> None:
        stored = self.stored
        if stored == phase:
            return
        if phase not in _TRANSITIONS[stored]:
            raise StateConflict(
                f"auction {self.auction_id}: cannot move from "
                f"{stored.name if stored is not None else 'unset'} to {phase.name}"
            )
        self.storage.set(self.key, int(phase))
        auction_logger(logger, self.auction_id).debug(f"entered {phase.name}")

    def advance(self, auction: AuctionData, now: int) -> AuctionPhase:
        """Persist a pending Sealed -> Running transition, return the phase."""
        stored = self.stored
        phase = self.current(auction, now)
        if stored is not None and phase != stored:
            self.set(phase)
        return phase

    def require(self, expected: AuctionPhase, auction: AuctionData, now: int) -> None:
        phase = self.current(auction, now)
        if phase == AuctionPhase.ENDED:
            raise AuctionEnded(f"auction {self.auction_id} has ended")
        if phase != expected:
            raise StateConflict(
                f"auction {self.auction_id} is {phase.name}, expected {expected.name}"
            )

    def require_not_ended(self) -> None:
        if self.stored == AuctionPhase.ENDED:
            raise AuctionEnded(f"auction {self.auction_id} has ended")
