from collections import namedtuple

DEFAULT_PREFIX = "leaderboard"

LeaderboardKeys = namedtuple("LeaderboardKeys", ["ranking", "scores", "metadata"])

def keys_for(leaderboard_id, prefix=DEFAULT_PREFIX):
    """Collection names of one leaderboard.

    ranking  -- sorted set of entity keys at inverted score
    scores   -- sorted set of the distinct inverted scores
    metadata -- hash of entity key to opaque payload
    """
    base = prefix + ":" + str(leaderboard_id)
    return LeaderboardKeys(base, base + ":scores", base + ":metadata")
