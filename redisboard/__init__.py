from .entity import Entity, RankedEntity
from .errors import (
    EntityNotFoundError, InvalidEntitiesError, InvalidIdentifierError,
    InvalidOffsetError, InvalidRangeError, InvalidScoreError, RedisboardError,
    TransactionFailedError, UnknownRankingTypeError)
from .leaderboard import Leaderboard
from .ranking import RankingType

__all__ = [
    "Entity", "RankedEntity", "Leaderboard", "RankingType",
    "RedisboardError", "InvalidIdentifierError", "InvalidOffsetError",
    "InvalidRangeError", "InvalidScoreError", "InvalidEntitiesError",
    "UnknownRankingTypeError", "EntityNotFoundError", "TransactionFailedError",
]
