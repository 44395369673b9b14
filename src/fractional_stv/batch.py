"""
Contains functions used to tabulate a batch of STV elections.

A contest set directory holds a ``contest_set.csv`` (one contest per row) and an optional
``run_config.json`` selecting which outputs are written.
"""

from typing import Dict, List, Optional, Tuple

import copy
import json
import logging
import os
import pathlib
import re
import shutil

import pandas as pd
import tqdm

from fractional_stv.ballots import ballots_from_dict
from fractional_stv.errors import InvalidInput
from fractional_stv.parsers import get_parser_dict
from fractional_stv.stv.base import STVResult, compute
from fractional_stv.stv.events import logs_to_dicts
from fractional_stv.stv.tables import get_round_by_round_dict, get_round_by_round_table
import fractional_stv.util as util

logger = logging.getLogger(__name__)

RUN_CONFIG_DEFAULTS = {
    "round_by_round_table": True,
    "round_by_round_json": False,
    "event_log": True,
    "quiet": False,
}

CONTEST_SET_DEFAULTS = {
    "name": {"type": "str", "default": None},
    "cvr_path": {"type": "str", "default": None},
    "seats": {"type": "int", "default": None},
    "parser_func": {"type": "func", "default": "rank_column_csv"},
    "ignore_contest": {"type": "bool", "default": "False"},
}

# failures recorded per contest instead of stopping the batch
CONTEST_ERRORS = (InvalidInput, RuntimeError, ValueError, KeyError, ArithmeticError, OSError)


# typecast functions
def _cast_str(s):
    return None if s is None else str(s).strip()


def _cast_int(s):
    if isinstance(s, int):
        return s
    return int(str(s).strip())


def _cast_bool(s):
    if isinstance(s, bool):
        return s
    value = str(s).strip().title()
    if value not in ("True", "False"):
        raise RuntimeError(f'invalid boolean value "{s}", must be "true" or "false"')
    return value == "True"


def _cast_func(s):
    parser_dict = get_parser_dict()
    if s not in parser_dict:
        raise RuntimeError(f'unknown parser_func "{s}", available: {sorted(parser_dict)}')
    return parser_dict[s]


cast_dict = {"str": _cast_str, "int": _cast_int, "bool": _cast_bool, "func": _cast_func}


def contest_file_stub(name: str) -> str:
    return re.sub("[^0-9a-zA-Z_]+", "", str(name).replace(" ", "_")) or "contest"


def read_run_config(contest_set_path) -> Dict:
    """Read ``run_config.json`` from the contest set directory, filling in defaults for missing options."""
    run_config_fpath = pathlib.Path(contest_set_path) / "run_config.json"

    run_config = {}
    if os.path.isfile(run_config_fpath):
        with open(run_config_fpath) as run_config_file:
            run_config = json.load(run_config_file)

    for option in run_config:
        if option not in RUN_CONFIG_DEFAULTS:
            logger.info('"%s" is an unrecognized option in run_config.json, it will be ignored.', option)

    return {option: run_config.get(option, default) for option, default in RUN_CONFIG_DEFAULTS.items()}


def read_contest_set(contest_set_path) -> Tuple[List[Dict], Dict]:
    """Read the contests listed in a contest set directory.

    :param contest_set_path: Directory containing contest_set.csv and, optionally, run_config.json.
    :raises RuntimeError: If contest_set.csv is missing or a row is missing a mandatory value.
    :return: List of contest dictionaries (name, cvr_path, seats, parser_func) and the run configuration.
    :rtype: Tuple[List[Dict], Dict]
    """
    contest_set_path = pathlib.Path(contest_set_path)
    run_config = read_run_config(contest_set_path)

    # read contest_set.csv
    contest_set_fpath = contest_set_path / "contest_set.csv"
    if os.path.isfile(contest_set_fpath) is False:
        raise RuntimeError(f"not a valid file path: {contest_set_fpath}")

    contest_set_df = pd.read_csv(contest_set_fpath, dtype=object)

    # add in default values for missing columns
    for setting, details in CONTEST_SET_DEFAULTS.items():
        if setting not in contest_set_df.columns:
            contest_set_df[setting] = details["default"]

    for col in contest_set_df.columns:
        if col not in CONTEST_SET_DEFAULTS:
            logger.info('"%s" is an unrecognized column in contest_set.csv, it will be ignored.', col)

    contests = []
    for row_num, row in enumerate(contest_set_df.to_dict("records"), start=1):

        comp = {}
        for setting, details in CONTEST_SET_DEFAULTS.items():
            value = row[setting]
            if pd.isna(value):
                value = details["default"]
            if value is None:
                raise RuntimeError(f'row {row_num} of {contest_set_fpath} is missing a value for "{setting}"')
            comp[setting] = cast_dict[details["type"]](value)

        if comp["ignore_contest"]:
            logger.info("ignoring contest: %s", comp["name"])
            continue

        copy_comp = copy.copy(comp)
        copy_comp["cvr_path"] = contest_set_path / comp["cvr_path"]
        del copy_comp["ignore_contest"]

        contests.append(copy_comp)

    return contests, run_config


def crunch_contest(contest: Dict) -> STVResult:
    """Parse one contest's ballot file and tabulate it."""
    parsed_cvr = contest["parser_func"](contest["cvr_path"])
    return compute(ballots_from_dict(parsed_cvr), contest["seats"])


def _write_contest_results(result: STVResult, contest: Dict, results_dir: pathlib.Path, run_config: Dict) -> None:

    stub = contest_file_stub(contest["name"])

    if run_config.get("round_by_round_table"):
        rbr_dir = results_dir / "round_by_round"
        rbr_dir.mkdir(exist_ok=True)
        get_round_by_round_table(result).to_csv(rbr_dir / f"{stub}.csv", index=False)

    if run_config.get("round_by_round_json"):
        rbr_json_dir = results_dir / "round_by_round_json"
        rbr_json_dir.mkdir(exist_ok=True)
        with open(rbr_json_dir / f"{stub}.json", "w") as outfile:
            json.dump(get_round_by_round_dict(result, config={"contest": contest["name"]}), outfile, default=str)

    if run_config.get("event_log"):
        event_log_dir = results_dir / "event_log"
        event_log_dir.mkdir(exist_ok=True)
        with open(event_log_dir / f"{stub}.json", "w") as outfile:
            json.dump(logs_to_dicts(result.logs), outfile, indent=2, default=str)


def _summary_row(contest: Dict, result: Optional[STVResult]) -> Dict:
    if result is None:
        return {"name": contest["name"], "seats": contest["seats"], "status": "error",
                "winners": None, "n_winners": None, "quota": None, "n_rounds": None, "exhausted": None}
    return {
        "name": contest["name"],
        "seats": contest["seats"],
        "status": "ok",
        "winners": ";".join(str(w) for w in result.winners),
        "n_winners": len(result.winners),
        "quota": util.decimal2float(result.quota),
        "n_rounds": result.n_rounds(),
        "exhausted": util.decimal2float(result.exhausted_weight),
    }


def crunch_contest_set(
    contest_set: List[Dict], run_config: Dict, path_to_output, fresh_output: bool = False
) -> Tuple[pd.DataFrame, int]:
    """Tabulate every contest of a contest set and write the results under ``path_to_output/results``.

    A contest that fails is written to ``run_errors.csv`` and the batch carries on.

    :return: Summary table (one row per contest, written to winners.csv) and the number of failed contests.
    :rtype: Tuple[pd.DataFrame, int]
    """
    results_dir = pathlib.Path(path_to_output) / "results"
    if fresh_output and results_dir.exists():
        shutil.rmtree(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)

    error_log = util.CSVLogger(results_dir / "run_errors.csv", ["contest", "error"])
    n_errors = 0
    summary_rows = []

    try:
        with tqdm.tqdm(
            total=len(contest_set),
            bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt}{postfix}",
            colour="GREEN",
            disable=run_config.get("quiet", False),
        ) as pbar:
            for contest in contest_set:

                pbar.set_postfix_str(str(contest["name"]))
                result = None

                try:
                    result = crunch_contest(contest)
                    _write_contest_results(result, contest, results_dir, run_config)
                except CONTEST_ERRORS as e:
                    logger.warning("contest %s failed: %r", contest["name"], e)
                    error_log.write([contest["name"], repr(e)])
                    n_errors += 1
                    result = None
                finally:
                    pbar.update(1)

                summary_rows.append(_summary_row(contest, result))
    finally:
        error_log.close()

    summary_df = pd.DataFrame(
        summary_rows,
        columns=["name", "seats", "status", "winners", "n_winners", "quota", "n_rounds", "exhausted"],
    )
    summary_df.to_csv(results_dir / "winners.csv", index=False)

    return summary_df, n_errors


def analyze_election_set(contest_set_path, output_path=None, fresh_output: bool = False) -> Tuple[pd.DataFrame, int]:
    """Read and tabulate a contest set. Output goes to ``output_path`` (defaults to the contest set directory)."""
    contest_set, run_config = read_contest_set(contest_set_path)
    return crunch_contest_set(contest_set, run_config, output_path or contest_set_path, fresh_output=fresh_output)
