import pytest

from decimal import Decimal

from fractional_stv.parsers import add_parser, get_parser_dict, rank_column_csv


def test_rank_column_csv(tmp_path, ballot_csv_writer):

    path = ballot_csv_writer(
        tmp_path / "cvr.csv",
        [["Alice", "Bob", ""], ["Bob", "", "Charlie"], [" Charlie ", "skipped", "Alice"]],
    )

    parsed = rank_column_csv(path)

    assert parsed["ranks"] == [["Alice", "Bob"], ["Bob", "Charlie"], ["Charlie", "Alice"]]
    assert parsed["weight"] == [Decimal("1")] * 3


def test_rank_column_csv_weights(tmp_path, ballot_csv_writer):

    path = ballot_csv_writer(tmp_path / "cvr.csv", [["A", "B"], ["B"]], weights=["2.5", "0.3"])

    parsed = rank_column_csv(path)

    assert parsed["weight"] == [Decimal("2.5"), Decimal("0.3")]
    assert all(isinstance(w, Decimal) for w in parsed["weight"])
    assert parsed["ranks"] == [["A", "B"], ["B"]]


def test_rank_column_csv_candidate_codes(tmp_path, ballot_csv_writer):

    path = ballot_csv_writer(tmp_path / "cvr.csv", [["1", "2"], ["2", ""]])
    (tmp_path / "candidate_codes.csv").write_text("code,candidate\n1,Alice\n2,Bob\n", encoding="utf8")

    parsed = rank_column_csv(path)

    assert parsed["ranks"] == [["Alice", "Bob"], ["Bob"]]


def test_rank_column_csv_keeps_other_columns(tmp_path):

    path = tmp_path / "cvr.csv"
    path.write_text("ballot_id,rank1,rank2\nb1,A,B\nb2,B,\n", encoding="utf8")

    parsed = rank_column_csv(path)

    assert parsed["ballot_id"] == ["b1", "b2"]


params = [
    ({"input": "missing.csv"}),
    ({"input": "no_ranks.csv"}),
]


@pytest.mark.parametrize("param", params)
def test_rank_column_csv_errors(param, tmp_path):

    (tmp_path / "no_ranks.csv").write_text("choice1,choice2\nA,B\n", encoding="utf8")

    with pytest.raises(RuntimeError):
        rank_column_csv(tmp_path / param["input"])


def test_add_parser():

    def custom(path):
        return {"ranks": [["A"]]}

    add_parser({"custom_test_parser": custom})

    assert get_parser_dict()["custom_test_parser"] is custom
    assert get_parser_dict()["rank_column_csv"] is rank_column_csv

    del get_parser_dict()["custom_test_parser"]
