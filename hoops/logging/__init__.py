"""Game logging and output."""

from hoops.logging.game_log import BoxScoreLine, GameLog, LogEntry, ScoringPlay

__all__ = ["BoxScoreLine", "GameLog", "LogEntry", "ScoringPlay"]
