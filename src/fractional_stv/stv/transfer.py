"""
Moves the wallets of a resolved candidate on to each wallet's next active preference.
"""

from __future__ import annotations
from typing import Dict, Iterable, Optional, Tuple

import dataclasses
import decimal
import logging

from fractional_stv.package_types import Candidate
from fractional_stv.stv.ledger import VoteLedger, Wallet
from fractional_stv.util import ZERO

decimal.getcontext().prec = 30

logger = logging.getLogger(__name__)


class _ExhaustKey:
    """Transfer dict key for exhausted weight. Never equal to a candidate, even one named "exhaust"."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "exhaust"

    def __reduce__(self) -> str:
        # copies and pickles resolve back to the module singleton
        return "EXHAUST"


EXHAUST = _ExhaustKey()


@dataclasses.dataclass(frozen=True)
class TransferMode:
    """Scaled transfers move ``ratio`` of every wallet (surplus on election),
    full transfers move every wallet unchanged (elimination)."""

    name: str
    ratio: decimal.Decimal

    SCALED = "scaled"
    FULL = "full"

    @classmethod
    def scaled(cls, ratio) -> TransferMode:
        ratio = decimal.Decimal(ratio)
        if ratio < 0 or ratio > 1:
            raise ValueError(f"transfer ratio must be between 0 and 1, got {ratio}")
        return cls(cls.SCALED, ratio)

    @classmethod
    def full(cls) -> TransferMode:
        return cls(cls.FULL, decimal.Decimal(1))


def surplus_ratio(total_at_election: decimal.Decimal, quota: decimal.Decimal) -> decimal.Decimal:
    """(total - quota) / total, the share of each wallet passed on when a candidate is elected."""
    if total_at_election <= 0:
        raise ValueError("cannot compute a surplus ratio for a candidate without votes")
    return (total_at_election - quota) / total_at_election


def next_preference(
    wallet: Wallet, resolved_candidate: Candidate, ledger: VoteLedger
) -> Tuple[Optional[Candidate], Tuple[Candidate, ...]]:
    """Return the first still-active candidate in the wallet order and the order that
    the transferred wallet carries (starting at that candidate, resolved candidates dropped).
    (None, ()) means the wallet is exhausted."""
    order = wallet.remaining_order
    for idx, candidate in enumerate(order):
        if candidate != resolved_candidate and ledger.is_active(candidate):
            return candidate, tuple(c for c in order[idx:] if ledger.is_active(c))
    return None, ()


def transfer(
    resolved_candidate: Candidate,
    wallets: Iterable[Wallet],
    mode: TransferMode,
    ledger: VoteLedger,
) -> Dict[str, decimal.Decimal]:
    """Transfer the detached wallets of ``resolved_candidate`` and record the leftovers on the ledger.

    The part of each wallet that is not transferred stays with the resolved candidate
    (``ledger.retain``); transferred weight without an active next preference is
    exhausted (``ledger.discard``). Zero-weight transfers, from an election exactly on
    quota, are not delivered.

    :return: Transfer flows: candidate names as keys plus 'exhaust', resolved candidate outflow negative.
    :rtype: Dict[str, decimal.Decimal]
    """
    transfer_dict = {resolved_candidate: ZERO, EXHAUST: ZERO}
    retained = ZERO

    for wallet in wallets:

        moved = wallet.weight * mode.ratio
        retained += wallet.weight - moved

        recipient, new_order = next_preference(wallet, resolved_candidate, ledger)

        if recipient is None:
            ledger.discard(moved)
            transfer_dict[EXHAUST] += moved
        elif moved:
            ledger.receive_wallet(recipient, Wallet(moved, new_order))
            transfer_dict[recipient] = transfer_dict.get(recipient, ZERO) + moved
        else:
            continue

        # mark transfer outflow
        transfer_dict[resolved_candidate] -= moved

    ledger.retain(resolved_candidate, retained)

    logger.debug(
        "%s transfer from %s: %s",
        mode.name,
        resolved_candidate,
        {k: str(v) for k, v in transfer_dict.items() if v},
    )
    return transfer_dict
