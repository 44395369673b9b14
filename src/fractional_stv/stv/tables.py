"""Report tables built from a finished computation.
"""

from typing import Dict, Sequence

import pandas as pd

from fractional_stv.stv.base import STVResult
from fractional_stv.stv.events import LogEvent, LogType
from fractional_stv.stv.ledger import CandidateVoteSummary
from fractional_stv.stv.transfer import EXHAUST
from fractional_stv.util import decimal2float


def get_distribution_table(distribution: Sequence[CandidateVoteSummary]) -> pd.DataFrame:
    """One row per candidate of a distribution snapshot, in snapshot order.

    :param distribution: Snapshot as carried by Distribution, Elected and Eliminated events.
    :type distribution: Sequence[CandidateVoteSummary]
    :return: Table with columns candidate, total_votes and total_wallets. Votes are floats rounded to 3 places.
    :rtype: pd.DataFrame
    """
    df = pd.DataFrame(
        [s.to_dict() for s in distribution],
        columns=["candidate", "total_votes", "total_wallets"],
    )
    df["total_votes"] = [decimal2float(v) for v in df["total_votes"]]
    return df


def get_event_table(logs: Sequence[LogEvent]) -> pd.DataFrame:
    """One row per event, in emission order.

    :return: Table with columns step, event, candidate, quota and active_candidates (the number of rows in the event's snapshot, if any).
    :rtype: pd.DataFrame
    """
    rows = []
    for step, event in enumerate(logs, start=1):
        distribution = getattr(event, "distribution", None)
        rows.append(
            {
                "step": step,
                "event": event.type.value,
                "candidate": getattr(event, "candidate", None),
                "quota": decimal2float(event.quota) if event.type is LogType.QUOTA_SET else None,
                "active_candidates": len(distribution) if distribution is not None else None,
            }
        )
    return pd.DataFrame(rows, columns=["step", "event", "candidate", "quota", "active_candidates"])


def get_round_by_round_table(result: STVResult) -> pd.DataFrame:
    """Create a table containing round by round details for the tabulation.

    Rows are winners in order of election, then the other candidates by the round they
    were eliminated (latest first), then 'exhaust' and 'colsum'. Each round gets a count,
    a transfer and an active percent column.

    :param result: Finished computation.
    :type result: STVResult
    :return: round by round table
    :rtype: pd.DataFrame
    """
    first_round_dict = result.get_round_tally_dict(1) if result.rounds else {}

    # winners in ascending order of round won
    # followed by losers in descending order of round lost
    # candidates never resolved go in between
    def order_key(d):
        if d["round_elected"]:
            group, rnd = 0, d["round_elected"]
        elif d["round_eliminated"]:
            group, rnd = 2, -d["round_eliminated"]
        else:
            group, rnd = 1, 0
        return group, rnd, -first_round_dict.get(d["name"], 0)

    outcomes = result.get_candidate_outcomes()
    ordered_candidates = [d["name"] for d in sorted(outcomes, key=order_key)]
    # winners elected in the same round keep election order
    winners_in_order = [c for c in result.winners if c in ordered_candidates]
    ordered_candidates = winners_in_order + [c for c in ordered_candidates if c not in winners_in_order]

    # setup data frame
    row_names = ordered_candidates + [EXHAUST]
    columns = {"candidate": [str(c) for c in row_names] + ["colsum"]}

    exhausted_so_far = 0
    for rnd in result.rounds:

        rnd_info = {s.candidate: s.total_votes for s in rnd.tally}
        rnd_info[EXHAUST] = exhausted_so_far
        active_total = sum(v for k, v in rnd_info.items() if k is not EXHAUST)

        counts = [rnd_info.get(cand, 0) for cand in row_names]
        transfers = [rnd.transfers.get(cand, 0) for cand in row_names]
        percents = [
            0 if cand is EXHAUST or not active_total else 100 * (count / active_total)
            for cand, count in zip(row_names, counts)
        ]

        # add round data, with column sums in the last row
        columns[f"r{rnd.round_num}_active_percent"] = percents + [sum(percents)]
        columns[f"r{rnd.round_num}_count"] = counts + [sum(counts)]
        columns[f"r{rnd.round_num}_transfer"] = transfers + [sum(transfers)]

        # maintain cumulative exhaust total
        exhausted_so_far += rnd.transfers.get(EXHAUST, 0)

    rcv_df = pd.DataFrame(columns)

    # convert from decimal to float
    value_cols = [col for col in rcv_df.columns if col != "candidate"]
    if value_cols:
        rcv_df[value_cols] = rcv_df[value_cols].astype(float).round(3)

    return rcv_df


def get_round_by_round_dict(result: STVResult, config: Dict = None) -> Dict:
    """Create a dictionary containing election round by round information that matches the nesting structure of RCVIS upload format.

    :param result: Finished computation.
    :type result: STVResult
    :param config: Extra entries for the 'config' section (e.g. contest name, date). Defaults to None
    :type config: Dict, optional
    :return: Dictionary containing election round by round details
    :rtype: Dict
    """
    json_dict = {
        "config": {**(config or {}), "threshold": decimal2float(result.quota), "seats": result.seats},
        "results": [],
    }

    for rnd in result.rounds:

        tally_dict = {str(s.candidate): str(decimal2float(s.total_votes)) for s in rnd.tally}

        # remove negative transfers, only inflows are listed
        round_transfer = {
            ("exhausted" if key is EXHAUST else str(key)): str(decimal2float(val))
            for key, val in rnd.transfers.items()
            if val > 0
        }

        transfer_list = []
        for cand in rnd.elected:
            transfer_list.append({"elected": str(cand), "transfers": round_transfer})
        if rnd.eliminated is not None:
            transfer_list.append({"eliminated": str(rnd.eliminated), "transfers": round_transfer})

        json_dict["results"].append(
            {
                "round": rnd.round_num,
                "tally": tally_dict,
                "tallyResults": transfer_list,
            }
        )

    return json_dict
