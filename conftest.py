import pytest


SCENARIO_A = [
    (1, ["Alice", "Bob", "Charlie"]),
    (1, ["Bob", "Charlie", "Alice"]),
    (1, ["Charlie", "Alice", "Bob"]),
    (1, ["Alice", "Bob", "Charlie"]),
]

SCENARIO_B = [
    (2.5, ["Alice", "Bob"]),
    (3.7, ["Bob", "Charlie"]),
    (1.5, ["Charlie", "Dave"]),
    (2.3, ["Dave", "Eve"]),
    (4, ["Eve", "Alice"]),
    (1, ["Alice", "Charlie"]),
]

SCENARIO_C = [
    (1, ["Alice", "Bob"]),
    (1, ["Bob", "Alice"]),
]


@pytest.fixture
def scenario_a():
    return list(SCENARIO_A)


@pytest.fixture
def scenario_b():
    return list(SCENARIO_B)


@pytest.fixture
def scenario_c():
    return list(SCENARIO_C)


def write_ballot_csv(path, rows, weights=None):
    """Write ballots in rank column format. Rows may have different lengths, short rows are padded with blanks."""
    n_ranks = max(len(r) for r in rows)
    header = [f"rank{i}" for i in range(1, n_ranks + 1)]
    if weights is not None:
        header = ["weight"] + header
    lines = [",".join(header)]
    for idx, row in enumerate(rows):
        cells = list(row) + [""] * (n_ranks - len(row))
        if weights is not None:
            cells = [str(weights[idx])] + cells
        lines.append(",".join(cells))
    path.write_text("\n".join(lines) + "\n", encoding="utf8")
    return path


@pytest.fixture
def ballot_csv_writer():
    return write_ballot_csv
