"""
Contains the Ballot class and the input checks run before any tabulation.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

import decimal

from fractional_stv.errors import InvalidInput
from fractional_stv.package_types import BallotDictOfLists, Candidate, Weight
from fractional_stv.util import DL2LD, to_decimal

decimal.getcontext().prec = 30


class Ballot:
    """A weighted ranked ballot, or a group of identical ballots sharing one weight.

    Immutable once built. The constructor only normalises types, use
    :func:`validate_ballots` to check a whole ballot set.
    """

    __slots__ = ("_weight", "_preference_order")

    def __init__(self, weight: Weight, preference_order: Iterable[Candidate]) -> None:
        """Constructor

        :param weight: Ballot weight. Converted to :class:`decimal.Decimal`.
        :type weight: Weight
        :param preference_order: Candidates in ranked order, most preferred first.
        :type preference_order: Iterable[Candidate]
        """
        if isinstance(preference_order, (str, bytes)):
            raise TypeError("preference_order must be a sequence of candidates, not a string")
        object.__setattr__(self, "_weight", to_decimal(weight))
        object.__setattr__(self, "_preference_order", tuple(preference_order))

    def __setattr__(self, name, value):
        raise AttributeError("Ballot objects are immutable")

    @property
    def weight(self) -> decimal.Decimal:
        return self._weight

    @property
    def preference_order(self) -> Tuple[Candidate, ...]:
        return self._preference_order

    @property
    def first_preference(self) -> Candidate:
        return self._preference_order[0]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Ballot):
            return NotImplemented
        return self._weight == other._weight and self._preference_order == other._preference_order

    def __hash__(self) -> int:
        return hash((self._weight, self._preference_order))

    def __repr__(self) -> str:
        return f"Ballot({self._weight!s}, {list(self._preference_order)!r})"


def as_ballot(item) -> Ballot:
    """Accept a Ballot, a ``(weight, preference_order)`` pair or a mapping with
    ``weight`` and ``preference_order`` keys."""
    if isinstance(item, Ballot):
        return item
    try:
        if isinstance(item, Mapping):
            return Ballot(item["weight"], item["preference_order"])
        weight, preference_order = item
        return Ballot(weight, preference_order)
    except (KeyError, TypeError, ValueError, decimal.InvalidOperation) as e:
        raise InvalidInput(f"cannot read ballot {item!r}: {e}") from e


def validate_ballots(ballots: Iterable, seats: int) -> List[Ballot]:
    """Check every precondition of a computation and return the ballots as Ballot objects.

    :param ballots: Ballots in input order, see :func:`as_ballot` for accepted forms.
    :type ballots: Iterable
    :param seats: Number of seats to fill.
    :type seats: int
    :raises InvalidInput: On a non-positive or non-integer seat count, an empty ballot set,
        a non-positive or non-finite weight, or an empty, duplicate-containing or unhashable preference order.
    :return: List of validated ballots, input order preserved.
    :rtype: List[Ballot]
    """
    if isinstance(seats, bool) or not isinstance(seats, int):
        raise InvalidInput(f"seats must be an integer, got {seats!r}")
    if seats <= 0:
        raise InvalidInput(f"seats must be positive, got {seats}")

    if ballots is None:
        raise InvalidInput("no ballots given")
    validated = [as_ballot(b) for b in ballots]
    if not validated:
        raise InvalidInput("no ballots given")

    for idx, ballot in enumerate(validated):
        if not ballot.weight.is_finite() or ballot.weight <= 0:
            raise InvalidInput(f"ballot {idx} has non-positive weight {ballot.weight}")
        if not ballot.preference_order:
            raise InvalidInput(f"ballot {idx} has an empty preference order")
        try:
            distinct = set(ballot.preference_order)
        except TypeError as e:
            raise InvalidInput(f"ballot {idx} ranks an unhashable candidate: {e}") from e
        if len(distinct) != len(ballot.preference_order):
            raise InvalidInput(f"ballot {idx} ranks a candidate more than once: {list(ballot.preference_order)}")

    return validated


def ballots_from_dict(parsed_cvr: BallotDictOfLists) -> List[Ballot]:
    """Convert a parsed CVR in dict-of-lists form into ballots.

    :param parsed_cvr: Dictionary with a mandatory 'ranks' key (list of ranked candidate lists) and an optional 'weight' key. Missing weights default to 1. Other keys are ignored.
    :type parsed_cvr: BallotDictOfLists
    :raises InvalidInput: If 'ranks' is missing or the fields have unequal lengths.
    :return: List of ballots in row order.
    :rtype: List[Ballot]
    """
    if not parsed_cvr or "ranks" not in parsed_cvr:
        raise InvalidInput('Parsed CVR does not contain field "ranks"')

    cvr_dict: Dict[str, Sequence] = {"ranks": parsed_cvr["ranks"]}
    cvr_dict["weight"] = parsed_cvr.get("weight", [decimal.Decimal("1")] * len(parsed_cvr["ranks"]))

    field_lengths = {k: len(v) for k, v in cvr_dict.items()}
    if len(set(field_lengths.values())) > 1:
        raise InvalidInput(f"Parsed CVR contains fields of unequal length. {str(field_lengths)}")

    return [as_ballot((d["weight"], d["ranks"])) for d in DL2LD(cvr_dict)]
