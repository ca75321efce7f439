from .importer import load_profile_records
from .profile_repository import ProfileRepository
from .store import ArenaStore
from .vote_repository import VoteRepository

__all__ = ["ArenaStore", "ProfileRepository", "VoteRepository", "load_profile_records"]
