"""
Contains the RoundEngine class and the compute entry point.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional

import dataclasses
import decimal
import logging

from fractional_stv.ballots import Ballot, validate_ballots
from fractional_stv.package_types import Candidate
from fractional_stv.stv.events import EventLog, LogEvent, Observer, ObserverGroup
from fractional_stv.stv.ledger import CandidateVoteSummary, Status, VoteLedger
from fractional_stv.stv.quota import compute_quota
from fractional_stv.stv.transfer import EXHAUST, TransferMode, surplus_ratio, transfer
from fractional_stv.util import ZERO

decimal.getcontext().prec = 30

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class RoundRecord:
    """What happened in one round, kept for the report tables."""

    round_num: int
    tally: List[CandidateVoteSummary]
    above_quota: List[Candidate] = dataclasses.field(default_factory=list)
    elected: List[Candidate] = dataclasses.field(default_factory=list)
    eliminated: Optional[Candidate] = None
    transfers: Dict = dataclasses.field(default_factory=dict)


@dataclasses.dataclass
class STVResult:
    winners: List[Candidate]
    logs: List[LogEvent]
    quota: decimal.Decimal
    seats: int
    rounds: List[RoundRecord]
    candidates: List[Candidate]
    total_weight: decimal.Decimal
    exhausted_weight: decimal.Decimal

    def n_rounds(self) -> int:
        return len(self.rounds)

    def get_round_tally_dict(self, round_num: int) -> Dict[Candidate, decimal.Decimal]:
        """Active candidate totals at the start of a round (1-indexed)."""
        return {s.candidate: s.total_votes for s in self.rounds[round_num - 1].tally}

    def get_candidate_outcomes(self) -> List[Dict]:
        """One dictionary per candidate with name, round_elected and round_eliminated (None if not applicable)."""
        outcomes = {cand: {"name": cand, "round_elected": None, "round_eliminated": None} for cand in self.candidates}
        for rnd in self.rounds:
            for cand in rnd.elected:
                outcomes[cand]["round_elected"] = rnd.round_num
            if rnd.eliminated is not None:
                outcomes[rnd.eliminated]["round_eliminated"] = rnd.round_num
        return list(outcomes.values())


class RoundEngine:
    """Fractional STV round loop.

    Each round every active candidate at or above the quota is elected, in canonical
    order, with its surplus transferred at (total - quota) / total of each wallet. If
    nobody reached the quota, the lowest candidate (earliest in canonical order on a tie)
    is eliminated and its wallets transferred at full value.

    The seat count is only checked between rounds, so a tie on the quota boundary can
    elect more candidates than there are seats.
    """

    def __init__(self, seats: int, observer: Observer) -> None:
        self._seats = seats
        self._observer = observer

        self._ledger = VoteLedger()
        self._quota = None
        self._winners: List[Candidate] = []
        self._rounds: List[RoundRecord] = []
        self._round_num = 0

    @property
    def ledger(self) -> VoteLedger:
        return self._ledger

    @property
    def quota(self) -> Optional[decimal.Decimal]:
        return self._quota

    @property
    def winners(self) -> List[Candidate]:
        return list(self._winners)

    @property
    def rounds(self) -> List[RoundRecord]:
        return list(self._rounds)

    def run(self, ballots: List[Ballot]) -> List[Candidate]:
        """Tabulate already validated ballots. Returns winners in order of election."""
        if self._quota is not None:
            raise RuntimeError("a RoundEngine can only run once")

        self._quota = compute_quota(ballots, self._seats)
        logger.info("quota computed at %s", self._quota)
        self._observer.on_quota_set(self._quota)

        self._ledger.seed(ballots)
        self._observer.on_distribution_snapshot(self._ledger.snapshot())

        while self._contest_not_complete():
            self._round_num += 1
            self._run_round()

        logger.info("%d candidates elected after %d rounds: %s", len(self._winners), self._round_num, self._winners)
        return self.winners

    def _contest_not_complete(self) -> bool:
        if not self._ledger.active_candidates():
            return False
        return len(self._winners) < self._seats

    def _run_round(self) -> None:
        tally = self._ledger.snapshot()
        logger.debug("round %d totals: %s", self._round_num, {s.candidate: str(s.total_votes) for s in tally})

        record = RoundRecord(self._round_num, tally)
        self._rounds.append(record)

        # flags come from the starting tally, not updated as elections happen
        record.above_quota = [s.candidate for s in tally if s.total_votes >= self._quota]
        for candidate in record.above_quota:
            self._observer.on_above_quota(candidate)

        if record.above_quota:
            for candidate in record.above_quota:
                self._merge_transfers(record, self._elect(candidate))
                record.elected.append(candidate)
        else:
            record.eliminated = self._round_loser(tally)
            self._merge_transfers(record, self._eliminate(record.eliminated))

    def _round_loser(self, tally: List[CandidateVoteSummary]) -> Candidate:
        # min keeps the first of equal totals, i.e. the earliest in canonical order
        return min(tally, key=lambda s: s.total_votes).candidate

    def _elect(self, candidate: Candidate) -> Dict:
        total_at_election = self._ledger.entry(candidate).total_weight
        ratio = surplus_ratio(total_at_election, self._quota)
        logger.info(
            "%s elected with %s (surplus %s)", candidate, total_at_election, total_at_election - self._quota
        )

        wallets = self._ledger.remove_candidate(candidate, Status.ELECTED)
        transfers = transfer(candidate, wallets, TransferMode.scaled(ratio), self._ledger)
        self._winners.append(candidate)

        self._observer.on_elected(candidate, self._ledger.snapshot())
        return transfers

    def _eliminate(self, candidate: Candidate) -> Dict:
        logger.info("eliminating %s with %s", candidate, self._ledger.entry(candidate).total_weight)

        wallets = self._ledger.remove_candidate(candidate, Status.ELIMINATED)
        transfers = transfer(candidate, wallets, TransferMode.full(), self._ledger)

        self._observer.on_eliminated(candidate, self._ledger.snapshot())
        return transfers

    @staticmethod
    def _merge_transfers(record: RoundRecord, transfers: Dict) -> None:
        for key, value in transfers.items():
            record.transfers[key] = record.transfers.get(key, ZERO) + value
        record.transfers.setdefault(EXHAUST, ZERO)


def compute(ballots: Iterable, seats: int, observer: Optional[Observer] = None) -> STVResult:
    """Compute the winners of a fractional STV election.

    :param ballots: Ballots in input order. Each may be a :class:`fractional_stv.ballots.Ballot`, a ``(weight, preference_order)`` pair or a mapping with ``weight`` and ``preference_order`` keys.
    :type ballots: Iterable
    :param seats: Number of seats to fill.
    :type seats: int
    :param observer: Optional extra observer, receives every event as it is emitted. Defaults to None
    :type observer: Optional[Observer], optional
    :raises InvalidInput: If the input is rejected. Nothing is emitted in that case.
    :return: Winners in order of election, the event log and per-round records.
    :rtype: STVResult
    """
    validated = validate_ballots(ballots, seats)

    event_log = EventLog()
    sink = event_log if observer is None else ObserverGroup([event_log, observer])

    engine = RoundEngine(seats, sink)
    winners = engine.run(validated)

    return STVResult(
        winners=winners,
        logs=event_log.get_logs(),
        quota=engine.quota,
        seats=seats,
        rounds=engine.rounds,
        candidates=engine.ledger.canonical_order,
        total_weight=engine.ledger.total_weight,
        exhausted_weight=engine.ledger.exhausted_weight,
    )
