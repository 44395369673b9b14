from fractional_stv.stv.base import RoundEngine, RoundRecord, STVResult, compute
from fractional_stv.stv.events import (
    AboveQuota,
    DistributionUpdate,
    Elected,
    Eliminated,
    EventLog,
    LogEvent,
    LogType,
    Observer,
    QuotaSet,
)
from fractional_stv.stv.ledger import CandidateLedgerEntry, CandidateVoteSummary, Status, VoteLedger, Wallet
from fractional_stv.stv.quota import compute_quota
from fractional_stv.stv.transfer import TransferMode, transfer
