class RedisboardError(Exception):
    def __init__(self, parameter, value, reason):
        super().__init__(reason)
        self.parameter = parameter
        self.value = value
        self.reason = reason
    
    def __str__(self):
        return "{0}: {1} (parameter: {2}, value: {3!r})".format(
                type(self).__name__, self.reason, self.parameter, self.value)

class InvalidIdentifierError(RedisboardError, ValueError):
    pass

class InvalidOffsetError(RedisboardError, ValueError):
    pass

class InvalidRangeError(RedisboardError, ValueError):
    pass

class InvalidScoreError(RedisboardError, ValueError):
    pass

class InvalidEntitiesError(RedisboardError, ValueError):
    pass

class UnknownRankingTypeError(RedisboardError, ValueError):
    pass

class EntityNotFoundError(RedisboardError, LookupError):
    pass

class TransactionFailedError(RedisboardError):
    def __init__(self, leaderboard_id, reason):
        super().__init__("leaderboard_id", leaderboard_id, reason)
