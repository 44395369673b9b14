"""Fractional single transferable vote tabulation over weighted ballots."""

from fractional_stv.ballots import Ballot, ballots_from_dict
from fractional_stv.errors import InvalidInput
from fractional_stv.stv import (
    AboveQuota,
    CandidateVoteSummary,
    DistributionUpdate,
    Elected,
    Eliminated,
    EventLog,
    LogType,
    Observer,
    QuotaSet,
    STVResult,
    compute,
    compute_quota,
)

__version__ = "0.1.0"
