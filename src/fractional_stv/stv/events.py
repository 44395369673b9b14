"""
Contains the event types emitted by the round engine and the observers that receive them.

Every observer call becomes one immutable event. Elected and Eliminated events always
embed the distribution taken after the candidate's transfer; AboveQuota never does.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Sequence, Tuple, Union

import abc
import dataclasses
import decimal
import enum

from fractional_stv.package_types import Candidate
from fractional_stv.stv.ledger import CandidateVoteSummary
from fractional_stv.util import decimal2float

Distribution = Tuple[CandidateVoteSummary, ...]


class LogType(enum.Enum):
    QUOTA_SET = "quota_set"
    DISTRIBUTION = "distribution"
    ABOVE_QUOTA = "above_quota"
    ELECTED = "elected"
    ELIMINATED = "eliminated"


def _distribution_dicts(distribution: Distribution, keep_decimal_type: bool) -> List[Dict]:
    rows = [s.to_dict() for s in distribution]
    if not keep_decimal_type:
        rows = [{k: decimal2float(v) for k, v in row.items()} for row in rows]
    return rows


@dataclasses.dataclass(frozen=True)
class QuotaSet:
    quota: decimal.Decimal
    type = LogType.QUOTA_SET

    def to_dict(self, keep_decimal_type: bool = False) -> Dict:
        return {
            "type": self.type.value,
            "quota": self.quota if keep_decimal_type else decimal2float(self.quota),
        }


@dataclasses.dataclass(frozen=True)
class DistributionUpdate:
    distribution: Distribution
    type = LogType.DISTRIBUTION

    def to_dict(self, keep_decimal_type: bool = False) -> Dict:
        return {"type": self.type.value, "distribution": _distribution_dicts(self.distribution, keep_decimal_type)}


@dataclasses.dataclass(frozen=True)
class AboveQuota:
    candidate: Candidate
    type = LogType.ABOVE_QUOTA

    def to_dict(self, keep_decimal_type: bool = False) -> Dict:
        return {"type": self.type.value, "candidate": self.candidate}


@dataclasses.dataclass(frozen=True)
class Elected:
    candidate: Candidate
    distribution: Distribution
    type = LogType.ELECTED

    def to_dict(self, keep_decimal_type: bool = False) -> Dict:
        return {
            "type": self.type.value,
            "candidate": self.candidate,
            "distribution": _distribution_dicts(self.distribution, keep_decimal_type),
        }


@dataclasses.dataclass(frozen=True)
class Eliminated:
    candidate: Candidate
    distribution: Distribution
    type = LogType.ELIMINATED

    def to_dict(self, keep_decimal_type: bool = False) -> Dict:
        return {
            "type": self.type.value,
            "candidate": self.candidate,
            "distribution": _distribution_dicts(self.distribution, keep_decimal_type),
        }


LogEvent = Union[QuotaSet, DistributionUpdate, AboveQuota, Elected, Eliminated]


class Observer(abc.ABC):
    """Port through which the round engine reports every state change, in order."""

    @abc.abstractmethod
    def on_quota_set(self, quota: decimal.Decimal) -> None:
        pass

    @abc.abstractmethod
    def on_distribution_snapshot(self, distribution: Sequence[CandidateVoteSummary]) -> None:
        pass

    @abc.abstractmethod
    def on_above_quota(self, candidate: Candidate) -> None:
        pass

    @abc.abstractmethod
    def on_elected(self, candidate: Candidate, distribution: Sequence[CandidateVoteSummary]) -> None:
        pass

    @abc.abstractmethod
    def on_eliminated(self, candidate: Candidate, distribution: Sequence[CandidateVoteSummary]) -> None:
        pass


class EventLog(Observer):
    """Observer that accumulates every call as a LogEvent."""

    def __init__(self) -> None:
        self._logs: List[LogEvent] = []

    def on_quota_set(self, quota):
        self._logs.append(QuotaSet(quota))

    def on_distribution_snapshot(self, distribution):
        self._logs.append(DistributionUpdate(tuple(distribution)))

    def on_above_quota(self, candidate):
        self._logs.append(AboveQuota(candidate))

    def on_elected(self, candidate, distribution):
        self._logs.append(Elected(candidate, tuple(distribution)))

    def on_eliminated(self, candidate, distribution):
        self._logs.append(Eliminated(candidate, tuple(distribution)))

    def get_logs(self) -> List[LogEvent]:
        return list(self._logs)

    def __len__(self) -> int:
        return len(self._logs)


class ObserverGroup(Observer):
    """Forward each call to several observers, in the order given."""

    def __init__(self, observers: Iterable[Observer]) -> None:
        self.observers = list(observers)

    def on_quota_set(self, quota):
        for o in self.observers:
            o.on_quota_set(quota)

    def on_distribution_snapshot(self, distribution):
        for o in self.observers:
            o.on_distribution_snapshot(distribution)

    def on_above_quota(self, candidate):
        for o in self.observers:
            o.on_above_quota(candidate)

    def on_elected(self, candidate, distribution):
        for o in self.observers:
            o.on_elected(candidate, distribution)

    def on_eliminated(self, candidate, distribution):
        for o in self.observers:
            o.on_eliminated(candidate, distribution)


def logs_to_dicts(logs: Iterable[LogEvent], keep_decimal_type: bool = False) -> List[Dict]:
    return [event.to_dict(keep_decimal_type=keep_decimal_type) for event in logs]
