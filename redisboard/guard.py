import math
import numbers

from .entity import score_of
from .errors import (
    InvalidEntitiesError, InvalidIdentifierError, InvalidOffsetError,
    InvalidRangeError, InvalidScoreError)

def against_invalid_identifier(value, parameter="leaderboard_id"):
    if isinstance(value, bool):
        raise InvalidIdentifierError(parameter, value,
                "Identifier must be a string or an integer")
    if isinstance(value, numbers.Integral):
        if value <= 0:
            raise InvalidIdentifierError(parameter, value,
                    "Numeric identifier must be positive")
        return
    if not isinstance(value, str):
        raise InvalidIdentifierError(parameter, value,
                "Identifier must be a string or an integer")
    if not value.strip():
        raise InvalidIdentifierError(parameter, value,
                "Identifier cannot be empty")

def against_invalid_offset(offset, parameter="offset"):
    if isinstance(offset, bool) or not isinstance(offset, numbers.Integral):
        raise InvalidOffsetError(parameter, offset, "Offset must be an integer")
    if offset < 0:
        raise InvalidOffsetError(parameter, offset, "Offset cannot be negative")

def against_invalid_page_size(page_size, parameter="page_size"):
    against_invalid_offset(page_size, parameter)
    if page_size < 1:
        raise InvalidOffsetError(parameter, page_size, "Page size must be at least 1")

def against_invalid_score(score, parameter="score"):
    if not _is_real(score):
        raise InvalidScoreError(parameter, score, "Score must be a real number")
    try:
        value = float(score)
    except OverflowError:
        raise InvalidScoreError(parameter, score, "Score is out of range")
    if not math.isfinite(value) or value < 0:
        raise InvalidScoreError(parameter, score,
                "Score must be a finite, non-negative number")

def against_invalid_score_range(min_score, max_score):
    for parameter, value in (("min_score", min_score), ("max_score", max_score)):
        if not _is_real(value):
            raise InvalidRangeError(parameter, value, "Range limit must be a real number")
        try:
            limit = float(value)
        except OverflowError:
            raise InvalidRangeError(parameter, value, "Range limit is out of range")
        if math.isnan(limit):
            raise InvalidRangeError(parameter, value, "Range limit must be a real number")
        if limit < 0:
            raise InvalidRangeError(parameter, value, "Range limit cannot be negative")
    if min_score > max_score:
        raise InvalidRangeError("min_score", min_score,
                "Range minimum is greater than maximum {0!r}".format(max_score))

def against_invalid_entities(entities):
    if entities is None:
        raise InvalidEntitiesError("entities", entities, "Entities cannot be None")
    try:
        entities = list(entities)
    except TypeError:
        raise InvalidEntitiesError("entities", entities, "Entities must be iterable")
    
    for entity in entities:
        if entity is None or not hasattr(entity, "key"):
            raise InvalidEntitiesError("entities", entity,
                    "Entity must expose an identity key")
        against_invalid_identifier(entity.key, "entity.key")
        against_invalid_score(score_of(entity), "entity.score")
    
    return entities

def _is_real(value):
    return isinstance(value, numbers.Real) and not isinstance(value, bool)
