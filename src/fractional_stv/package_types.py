import decimal
import pathlib

from typing import (Callable, Dict, Hashable, List, Union)

# opaque candidate identifier, compared by exact equality
Candidate = Hashable

# ballot weights accepted on input, stored internally as Decimal
Weight = Union[int, float, str, decimal.Decimal]

# used in parser function
Path = Union[str, pathlib.Path]

# ballot information in dict-of-list form
BallotDictOfLists = Dict[str, List]

# returned from parser module, get_parser_dict
ParserDict = Dict[str, Callable[[Path], BallotDictOfLists]]
