"""
Module that contains the command line app.

Why does this file exist, and why not put this in __main__?

  You might be tempted to import things from __main__ later, but that will cause
  problems: the code will get executed twice:

  - When you run `python -mfractional_stv` python will execute
    ``__main__.py`` as a script. That means there won't be any
    ``fractional_stv.__main__`` in ``sys.modules``.
  - When you import __main__ it will get executed again (as a module) because
    there's no ``fractional_stv.__main__`` in ``sys.modules``.
"""
import argparse
import logging
import os
import sys

import fractional_stv.batch as batch
from fractional_stv.ballots import ballots_from_dict
from fractional_stv.errors import InvalidInput
from fractional_stv.parsers import get_parser_dict
from fractional_stv.stv.base import compute
from fractional_stv.stv.tables import get_round_by_round_table


def build_parser():

    p = argparse.ArgumentParser(description='Tabulate fractional STV elections. '
                                'PATH is either a ballot csv file or a contest set directory '
                                'containing contest_set.csv and, optionally, run_config.json.')

    p.add_argument('path', help="Ballot csv file, or contest set directory.")
    p.add_argument('--seats', type=int, help='Number of seats to fill. Required when PATH is a ballot file.')
    p.add_argument('--parser', default='rank_column_csv', choices=sorted(get_parser_dict()),
                   help='Parser used to read a ballot file. Defaults to rank_column_csv.')
    p.add_argument('--output', help='Output directory for a contest set run. Defaults to the contest set directory.')
    p.add_argument('--fresh', action='store_true',
                   help='Delete existing results/ directory before a contest set run.')
    p.add_argument('-v', '--verbose', action='count', default=0,
                   help='Log progress of the count (-v info, -vv debug).')
    return p


def main(argv=None):

    p = build_parser()
    args = p.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')

    path = os.path.abspath(args.path)

    if os.path.isdir(path):
        _, n_errors = batch.analyze_election_set(path, output_path=args.output, fresh_output=args.fresh)
        return 1 if n_errors else 0

    if not os.path.isfile(path):
        p.error(f'invalid path: {path}')

    if args.seats is None:
        p.error('--seats is required when PATH is a ballot file')

    parsed_cvr = get_parser_dict()[args.parser](path)
    try:
        result = compute(ballots_from_dict(parsed_cvr), args.seats)
    except InvalidInput as e:
        print(f'invalid input: {e}', file=sys.stderr)
        return 2

    print(get_round_by_round_table(result).to_string(index=False))
    print()
    print('winners: ' + ', '.join(str(w) for w in result.winners))

    return 0
