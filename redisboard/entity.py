from collections import namedtuple

RankedEntity = namedtuple("RankedEntity", ["key", "rank", "score", "metadata"])
RankedEntity.__doc__ = """An entity as read back from a leaderboard.

rank is computed per query under the requested ranking type, score is the
caller-visible score and metadata is None when no payload was ever stored.
"""

class Entity:
    """Minimal implementation of the entity contract accepted by writes.

    Any object exposing ``key`` and optionally ``score`` and ``metadata``
    can be passed instead. ``metadata=None`` leaves the stored payload
    untouched, ``metadata=b""`` stores an empty payload.
    """
    __slots__ = ("key", "score", "metadata")
    
    def __init__(self, key, score=0, metadata=None):
        self.key = key
        self.score = score
        self.metadata = metadata
    
    def __repr__(self):
        return "Entity(key={0!r}, score={1!r}, metadata={2!r})".format(
                self.key, self.score, self.metadata)

def score_of(entity):
    score = getattr(entity, "score", None)
    return 0 if score is None else score

def metadata_of(entity):
    return getattr(entity, "metadata", None)
