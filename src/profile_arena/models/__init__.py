from .profile import Profile
from .results import ProfilePage, ProfileStats, RecordedVote
from .vote import Vote

__all__ = ["Profile", "ProfilePage", "ProfileStats", "RecordedVote", "Vote"]
