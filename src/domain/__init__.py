"""Domain layer for the face-comparison voting app."""

from domain.common import LeaderboardEntry, Matchup, PersonSnapshot, PhotoRecord, VoteResult

__all__ = ["LeaderboardEntry", "Matchup", "PersonSnapshot", "PhotoRecord", "VoteResult"]
