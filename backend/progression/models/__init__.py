"""Database models package."""

from progression.models.player import PlayerSession
from progression.models.attempt import AttemptRecord
from progression.models.reward import RewardLedgerEntry
from progression.models.alarm import AlarmEvent
from progression.models.request_log import ProcessedRequest

__all__ = ["PlayerSession", "AttemptRecord", "RewardLedgerEntry", "AlarmEvent", "ProcessedRequest"]
