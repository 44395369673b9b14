import pytest

from decimal import Decimal

from fractional_stv.ballots import Ballot
from fractional_stv.stv.ledger import CandidateVoteSummary, Status, VoteLedger, Wallet


def seeded(ballots):
    ledger = VoteLedger()
    ledger.seed([Ballot(w, order) for w, order in ballots])
    return ledger


params = [
    (
        {
            "input": [(1, ["B", "C"]), (1, ["A"]), (1, ["C", "D", "A"])],
            "expected": ["B", "C", "A", "D"],
        }
    ),
    (
        {
            "input": [(1, ["B", "Z"]), (1, ["A", "Y"])],
            "expected": ["B", "Z", "A", "Y"],
        }
    ),
    (
        {
            "input": [(1, ["A", "B"]), (1, ["C"]), (1, ["B"])],
            "expected": ["A", "B", "C"],
        }
    ),
    (
        {
            "input": [(2.5, ["Alice", "Bob"]), (3.7, ["Bob", "Charlie"]), (1.5, ["Charlie", "Dave"]),
                      (2.3, ["Dave", "Eve"]), (4, ["Eve", "Alice"]), (1, ["Alice", "Charlie"])],
            "expected": ["Alice", "Bob", "Charlie", "Dave", "Eve"],
        }
    ),
]


@pytest.mark.parametrize("param", params)
def test_canonical_order(param):
    ledger = seeded(param["input"])
    assert ledger.canonical_order == param["expected"]
    assert [s.candidate for s in ledger.snapshot()] == param["expected"]


def test_seed_merges_identical_orders():

    ledger = seeded([(1, ["A", "B"]), (2, ["A", "B"]), (1, ["A", "C"])])

    assert ledger.snapshot()[0] == CandidateVoteSummary("A", Decimal("4"), 2)
    assert ledger.total_weight == Decimal("4")


def test_seed_twice_raises():
    ledger = seeded([(1, ["A"])])
    with pytest.raises(RuntimeError):
        ledger.seed([Ballot(1, ["B"])])


def test_snapshot_is_idempotent():

    ledger = seeded([(1, ["A", "B"]), (2, ["B"])])

    first = ledger.snapshot()
    second = ledger.snapshot()

    assert first == second
    assert ledger.active_candidates() == ["A", "B"]


def test_remove_candidate_prunes_active_wallets():

    ledger = seeded([(1, ["A", "B", "C"]), (2, ["C", "B", "A"]), (3, ["B"])])

    wallets = ledger.remove_candidate("B", Status.ELIMINATED)

    assert wallets == [Wallet(Decimal("3"), ("B",))]
    assert ledger.status("B") is Status.ELIMINATED
    assert not ledger.is_active("B")
    assert ledger.entry("A").wallets == [Wallet(Decimal("1"), ("A", "C"))]
    assert ledger.entry("C").wallets == [Wallet(Decimal("2"), ("C", "A"))]
    assert [s.candidate for s in ledger.snapshot()] == ["A", "C"]


def test_pruning_merges_wallets_that_become_identical():

    ledger = seeded([(1, ["A", "B", "C"]), (2, ["A", "C"]), (1, ["B"])])
    assert ledger.entry("A").summary().total_wallets == 2

    ledger.remove_candidate("B")

    assert ledger.entry("A").wallets == [Wallet(Decimal("3"), ("A", "C"))]


def test_resolved_candidate_cannot_be_used():

    ledger = seeded([(1, ["A", "B"]), (1, ["B"])])
    ledger.remove_candidate("A", Status.ELECTED)

    with pytest.raises(RuntimeError):
        ledger.entry("A")
    with pytest.raises(RuntimeError):
        ledger.remove_candidate("A")
    with pytest.raises(RuntimeError):
        ledger.receive_wallet("A", Wallet(Decimal("1"), ("A",)))


def test_remove_as_active_raises():
    ledger = seeded([(1, ["A"])])
    with pytest.raises(RuntimeError):
        ledger.remove_candidate("A", Status.ACTIVE)


def test_unknown_candidate_status():
    ledger = seeded([(1, ["A"])])
    with pytest.raises(RuntimeError):
        ledger.status("Z")
    assert ledger.is_active("Z") is False


def test_receive_wallet_merges_and_updates_total():

    ledger = seeded([(1, ["A"]), (1, ["B"])])

    ledger.receive_wallet("A", Wallet(Decimal("0.5"), ("A",)))
    ledger.receive_wallet("A", Wallet(Decimal("0.25"), ("A", "B")))

    assert ledger.entry("A").summary() == CandidateVoteSummary("A", Decimal("1.75"), 2)


def test_receive_exhausted_wallet_is_discarded():

    ledger = seeded([(1, ["A"]), (1, ["B"])])

    ledger.receive_wallet("A", Wallet(Decimal("0.5"), ()))

    assert ledger.entry("A").total_weight == Decimal("1")
    assert ledger.exhausted_weight == Decimal("0.5")


def test_retain():

    ledger = seeded([(1, ["A"]), (1, ["B"])])

    with pytest.raises(RuntimeError):
        ledger.retain("A", Decimal("1"))

    ledger.remove_candidate("A", Status.ELECTED)
    ledger.retain("A", Decimal("0.6"))

    assert ledger.retained_weight("A") == Decimal("0.6")
    assert ledger.retained_weight("B") == 0
    assert ledger.retained_weight() == Decimal("0.6")
    assert ledger.active_weight() == Decimal("1")


def test_wallet_without():

    wallet = Wallet(Decimal("1"), ("A", "B", "C"))

    assert wallet.holder == "A"
    assert wallet.without("B") == Wallet(Decimal("1"), ("A", "C"))
    assert wallet.without("Z") is wallet
    assert Wallet(Decimal("1"), ()).holder is None


def test_summary_to_dict():
    summary = CandidateVoteSummary("A", Decimal("1.5"), 2)
    assert summary.to_dict() == {"candidate": "A", "total_votes": Decimal("1.5"), "total_wallets": 2}
