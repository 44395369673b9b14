import pytest

from decimal import Decimal

from fractional_stv import InvalidInput, compute
from fractional_stv.stv.events import (
    AboveQuota,
    DistributionUpdate,
    Elected,
    Eliminated,
    EventLog,
    LogType,
    Observer,
    ObserverGroup,
    QuotaSet,
    logs_to_dicts,
)
from fractional_stv.stv.ledger import CandidateVoteSummary as S


def test_event_log_records_in_call_order():

    log = EventLog()
    log.on_quota_set(Decimal("2"))
    log.on_distribution_snapshot([S("A", Decimal("2"), 1)])
    log.on_above_quota("A")
    log.on_elected("A", [])
    log.on_eliminated("B", [])

    assert len(log) == 5
    assert log.get_logs() == [
        QuotaSet(Decimal("2")),
        DistributionUpdate((S("A", Decimal("2"), 1),)),
        AboveQuota("A"),
        Elected("A", ()),
        Eliminated("B", ()),
    ]


def test_events_do_not_share_caller_lists():

    distribution = [S("A", Decimal("2"), 1)]
    log = EventLog()
    log.on_distribution_snapshot(distribution)
    distribution.append(S("B", Decimal("1"), 1))

    assert len(log.get_logs()[0].distribution) == 1


def test_get_logs_returns_copy():

    log = EventLog()
    log.on_above_quota("A")
    log.get_logs().clear()

    assert len(log) == 1


params = [
    ({"input": QuotaSet(Decimal("3.75")), "expected": {"type": "quota_set", "quota": 3.75}}),
    ({"input": AboveQuota("Eve"), "expected": {"type": "above_quota", "candidate": "Eve"}}),
    (
        {
            "input": Eliminated("C", (S("D", Decimal("3.8"), 1),)),
            "expected": {
                "type": "eliminated",
                "candidate": "C",
                "distribution": [{"candidate": "D", "total_votes": 3.8, "total_wallets": 1}],
            },
        }
    ),
    (
        {
            "input": DistributionUpdate((S("A", Decimal("0.33333"), 2),)),
            "expected": {
                "type": "distribution",
                "distribution": [{"candidate": "A", "total_votes": 0.333, "total_wallets": 2}],
            },
        }
    ),
]


@pytest.mark.parametrize("param", params)
def test_event_to_dict(param):
    assert param["input"].to_dict() == param["expected"]


def test_event_to_dict_keeps_decimal():
    event = Elected("A", (S("B", Decimal("1.25"), 1),))
    assert event.to_dict(keep_decimal_type=True)["distribution"][0]["total_votes"] == Decimal("1.25")


def test_logs_to_dicts(scenario_a):
    result = compute(scenario_a, 1)
    assert [d["type"] for d in logs_to_dicts(result.logs)] == ["quota_set", "distribution", "above_quota", "elected"]


def test_events_are_immutable():
    event = AboveQuota("A")
    with pytest.raises(AttributeError):
        event.candidate = "B"
    assert event.type is LogType.ABOVE_QUOTA


class Recorder(Observer):

    def __init__(self):
        self.calls = []

    def on_quota_set(self, quota):
        self.calls.append(("quota_set", quota))

    def on_distribution_snapshot(self, distribution):
        self.calls.append(("distribution", tuple(distribution)))

    def on_above_quota(self, candidate):
        self.calls.append(("above_quota", candidate))

    def on_elected(self, candidate, distribution):
        self.calls.append(("elected", candidate, tuple(distribution)))

    def on_eliminated(self, candidate, distribution):
        self.calls.append(("eliminated", candidate, tuple(distribution)))


def test_observer_sees_same_events_as_log(scenario_b):

    recorder = Recorder()
    result = compute(scenario_b, 3, observer=recorder)

    assert [c[0] for c in recorder.calls] == [e.type.value for e in result.logs]
    assert recorder.calls[0] == ("quota_set", Decimal("3.75"))
    assert recorder.calls[-1] == ("elected", "Dave", (S("Bob", Decimal("3.7"), 1),))


def test_observer_group_forwards_in_order():

    first, second = Recorder(), Recorder()
    group = ObserverGroup([first, second])
    group.on_above_quota("A")
    group.on_eliminated("B", [])

    assert first.calls == second.calls == [("above_quota", "A"), ("eliminated", "B", ())]


params = [
    ({"input": {"ballots": [], "seats": 1}}),
    ({"input": {"ballots": [(1, ["A"])], "seats": 0}}),
    ({"input": {"ballots": [(1, ["A"]), (0, ["B"])], "seats": 1}}),
    ({"input": {"ballots": [(1, ["A", "A"])], "seats": 1}}),
    ({"input": {"ballots": [(1, ["A"]), (1, [["B"]])], "seats": 1}}),
]


@pytest.mark.parametrize("param", params)
def test_invalid_input_emits_nothing(param):

    recorder = Recorder()
    with pytest.raises(InvalidInput):
        compute(observer=recorder, **param["input"])

    assert recorder.calls == []


def test_observer_is_abstract():
    with pytest.raises(TypeError):
        Observer()
