"""
Quota used to decide when a candidate is elected.
"""

from typing import Iterable

import decimal

from fractional_stv.ballots import validate_ballots

decimal.getcontext().prec = 30


def compute_quota(ballots: Iterable, seats: int) -> decimal.Decimal:
    """Fractional Droop quota: total first preference weight / (seats + 1).

    No rounding and no +1 offset, so a candidate can land exactly on the quota.
    Every ballot counts towards its first preference, so the total is simply the
    sum of all ballot weights.

    :param ballots: Ballots in any form accepted by :func:`fractional_stv.ballots.as_ballot`.
    :type ballots: Iterable
    :param seats: Number of seats to fill.
    :type seats: int
    :raises InvalidInput: If the ballots or seat count are rejected by :func:`validate_ballots`.
    :return: The quota.
    :rtype: decimal.Decimal
    """
    validated = validate_ballots(ballots, seats)
    total_first_preference_weight = sum((b.weight for b in validated), decimal.Decimal(0))
    return total_first_preference_weight / (seats + 1)
