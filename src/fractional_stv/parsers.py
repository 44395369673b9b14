"""
Contains ballot file parser functions.
"""

from typing import Union, List, Dict

import decimal
import os
import pathlib

import pandas as pd

from fractional_stv.package_types import ParserDict

decimal.getcontext().prec = 30

# values treated as an unused ranking
BLANK_MARKS = {"", "nan", "none", "skipped", "under", "undervote"}


def _is_blank(mark) -> bool:
    return str(mark).strip().lower() in BLANK_MARKS


def rank_column_csv(cvr_path: Union[str, pathlib.Path]) -> Dict[str, List]:
    """Reads ballot ranking information stored in csv format.
    One ballot (or ballot group) per row, with ranking columns appearing in order and named with the word "rank"
    (e.x. "rank1", "rank2", etc). Blank rankings are dropped, so a ballot's preference order is its non-blank
    rankings in column order.

    :param cvr_path: The path to the ballot file. If a file called "candidate_codes.csv" exists in the same directory, it will be read and columns named "code" and "candidate" will be used to replace candidate codes with candidate names in the ballot file during readin.
    :type cvr_path: Union[str, pathlib.Path]
    :raises RuntimeError: Error raised if the file is missing or has no rank columns.
    :return: A dictionary of lists containing all columns in the ballot file. Rank columns are combined into per-ballot lists and stored with the key 'ranks'. A 'weight' key and list of 1's is added to the dictionary if no 'weight' column exists. All weights are of type :class:`decimal.Decimal`.
    :rtype: Dict[str, List]
    """

    cvr_path = pathlib.Path(cvr_path)
    if not os.path.isfile(cvr_path):
        raise RuntimeError(f"not a valid file path: {cvr_path}")

    df = pd.read_csv(cvr_path, encoding="utf8", dtype=str, keep_default_na=False)

    # find rank columns
    rank_col = [col for col in df.columns if "rank" in col.lower()]
    if not rank_col:
        raise RuntimeError(f'no columns named with "rank" found in {cvr_path}')

    df[rank_col] = df[rank_col].apply(lambda col: col.str.strip())

    # if candidate codes file exist, swap in names
    candidate_codes_fpath = cvr_path.parent / "candidate_codes.csv"
    if os.path.isfile(candidate_codes_fpath):

        cand_codes = pd.read_csv(candidate_codes_fpath, encoding="utf8", dtype=str)

        cand_codes_dict = {str(code).strip(): cand for code, cand in zip(cand_codes["code"], cand_codes["candidate"])}
        replace_dict = {col: cand_codes_dict for col in rank_col}
        df = df.replace(replace_dict)

    # pull out rank lists, dropping blank rankings
    rank_col_list = [df[col].tolist() for col in rank_col]
    rank_lists = [[mark for mark in rank_tuple if not _is_blank(mark)] for rank_tuple in zip(*rank_col_list)]

    # assemble dict
    dct = {"ranks": rank_lists}

    # add in non-rank columns
    for col in df.columns:
        if col not in rank_col:
            dct[col] = df[col].tolist()

    # add weight if not present in csv
    if "weight" not in dct:
        dct["weight"] = [decimal.Decimal("1") for _ in dct["ranks"]]
    else:
        dct["weight"] = [decimal.Decimal(str(w).strip()) for w in dct["weight"]]

    return dct


parser_dict: ParserDict = {
    "rank_column_csv": rank_column_csv,
}


def add_parser(new_parsers: ParserDict) -> None:
    """Add custom parser functions to the module parser dictionary.

    :param new_parsers: A dictionary containing parser functions, with their names as keys.
    :type new_parsers: Dict
    """
    parser_dict.update(new_parsers)


def get_parser_dict() -> ParserDict:
    """Returns the module parser dictionary. Including both package parsers and
    custom parsers added with :func:`add_parser`.

    :return: A dictionary of parser functions. Keys are parser name strings.
    :rtype: Dict
    """
    return parser_dict
