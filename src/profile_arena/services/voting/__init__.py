from .base import ProfileSource, VoteLog
from .sampler import Candidate, partition_pool, sample_pair
from .service import HistoryEntry, VoteResult, VotingService
from .session import ExclusionWindow, SessionState, VotingSession

__all__ = [
    "Candidate",
    "ExclusionWindow",
    "HistoryEntry",
    "ProfileSource",
    "SessionState",
    "VoteLog",
    "VoteResult",
    "VotingService",
    "VotingSession",
    "partition_pool",
    "sample_pair",
]
