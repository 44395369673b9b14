"""
Contains the VoteLedger class and the wallet data types it holds.

A wallet is a group of ballots (or ballot fractions) sharing one remaining preference
order, currently counting towards the first candidate of that order.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple

import dataclasses
import decimal
import enum

from fractional_stv.ballots import Ballot
from fractional_stv.package_types import Candidate
from fractional_stv.util import ZERO

decimal.getcontext().prec = 30


class Status(enum.Enum):
    ACTIVE = "active"
    ELECTED = "elected"
    ELIMINATED = "eliminated"


@dataclasses.dataclass(frozen=True)
class Wallet:
    weight: decimal.Decimal
    remaining_order: Tuple[Candidate, ...]

    @property
    def holder(self) -> Optional[Candidate]:
        return self.remaining_order[0] if self.remaining_order else None

    def without(self, candidate: Candidate) -> Wallet:
        if candidate not in self.remaining_order:
            return self
        return Wallet(self.weight, tuple(c for c in self.remaining_order if c != candidate))


@dataclasses.dataclass(frozen=True)
class CandidateVoteSummary:
    candidate: Candidate
    total_votes: decimal.Decimal
    total_wallets: int

    def to_dict(self) -> Dict:
        return {"candidate": self.candidate, "total_votes": self.total_votes, "total_wallets": self.total_wallets}


class CandidateLedgerEntry:
    """Wallets held by one candidate. ``total_weight`` is kept equal to the sum of wallet weights."""

    def __init__(self, candidate: Candidate) -> None:
        self.candidate = candidate
        self.wallets: List[Wallet] = []
        self.total_weight = ZERO

    def add(self, wallet: Wallet) -> None:
        # identical remaining orders share a wallet
        for idx, held in enumerate(self.wallets):
            if held.remaining_order == wallet.remaining_order:
                self.wallets[idx] = Wallet(held.weight + wallet.weight, held.remaining_order)
                break
        else:
            self.wallets.append(wallet)
        self._recompute()

    def replace_wallets(self, wallets: Iterable[Wallet]) -> None:
        self.wallets = []
        for wallet in wallets:
            self.add(wallet)
        self._recompute()

    def detach(self) -> List[Wallet]:
        wallets = self.wallets
        self.wallets = []
        self._recompute()
        return wallets

    def summary(self) -> CandidateVoteSummary:
        return CandidateVoteSummary(self.candidate, self.total_weight, len(self.wallets))

    def _recompute(self) -> None:
        self.total_weight = sum((w.weight for w in self.wallets), ZERO)


class VoteLedger:
    """Per-candidate wallets plus the canonical candidate order used for ties and reporting.

    Holds no election policy; the round engine decides who is resolved and when.
    """

    def __init__(self) -> None:
        self._order: List[Candidate] = []
        self._entries: Dict[Candidate, CandidateLedgerEntry] = {}
        self._status: Dict[Candidate, Status] = {}
        self._retained: Dict[Candidate, decimal.Decimal] = {}
        self.total_weight = ZERO
        self.exhausted_weight = ZERO

    # SETUP
    def _register(self, candidate: Candidate) -> None:
        if candidate not in self._entries:
            self._order.append(candidate)
            self._entries[candidate] = CandidateLedgerEntry(candidate)
            self._status[candidate] = Status.ACTIVE

    def seed(self, ballots: Iterable[Ballot]) -> None:
        """Create one wallet per ballot on its first preference.

        Canonical order is the order candidates are first seen, scanning each ballot's
        preference order in ballot input order.
        """
        if self._order:
            raise RuntimeError("ledger has already been seeded")

        ballots = list(ballots)
        for b in ballots:
            for candidate in b.preference_order:
                self._register(candidate)

        for b in ballots:
            self._entries[b.first_preference].add(Wallet(b.weight, b.preference_order))
            self.total_weight += b.weight

    # QUERIES
    @property
    def canonical_order(self) -> List[Candidate]:
        return list(self._order)

    def status(self, candidate: Candidate) -> Status:
        try:
            return self._status[candidate]
        except KeyError:
            raise RuntimeError(f"unknown candidate: {candidate!r}") from None

    def is_active(self, candidate: Candidate) -> bool:
        return self._status.get(candidate) is Status.ACTIVE

    def active_candidates(self) -> List[Candidate]:
        return [c for c in self._order if self._status[c] is Status.ACTIVE]

    def entry(self, candidate: Candidate) -> CandidateLedgerEntry:
        if not self.is_active(candidate):
            raise RuntimeError(f"{candidate!r} is not an active candidate")
        return self._entries[candidate]

    def snapshot(self) -> List[CandidateVoteSummary]:
        return [self._entries[c].summary() for c in self.active_candidates()]

    def active_weight(self) -> decimal.Decimal:
        return sum((self._entries[c].total_weight for c in self.active_candidates()), ZERO)

    def retained_weight(self, candidate: Optional[Candidate] = None) -> decimal.Decimal:
        if candidate is not None:
            return self._retained.get(candidate, ZERO)
        return sum(self._retained.values(), ZERO)

    # MUTATION
    def remove_candidate(self, candidate: Candidate, status: Status = Status.ELIMINATED) -> List[Wallet]:
        """Resolve a candidate and hand back its wallets for transfer.

        The candidate is also pruned from the order of every wallet still held by an
        active candidate, so active wallets only ever list unresolved candidates.
        """
        if status is Status.ACTIVE:
            raise RuntimeError("candidates can only be removed as elected or eliminated")
        entry = self.entry(candidate)
        self._status[candidate] = status
        wallets = entry.detach()

        for other in self.active_candidates():
            other_entry = self._entries[other]
            if any(candidate in w.remaining_order for w in other_entry.wallets):
                other_entry.replace_wallets([w.without(candidate) for w in other_entry.wallets])

        return wallets

    def receive_wallet(self, candidate: Candidate, wallet: Wallet) -> None:
        # exhausted wallets are never delivered
        if not wallet.remaining_order:
            self.discard(wallet.weight)
            return
        self.entry(candidate).add(wallet)

    def discard(self, weight: decimal.Decimal) -> None:
        self.exhausted_weight += weight

    def retain(self, candidate: Candidate, weight: decimal.Decimal) -> None:
        if self.is_active(candidate):
            raise RuntimeError(f"{candidate!r} is still active and cannot retain weight")
        self._retained[candidate] = self._retained.get(candidate, ZERO) + weight
