import bisect
import enum

from .errors import UnknownRankingTypeError

class RankingType(enum.IntEnum):
    """Ranking semantics applied when reading a leaderboard.

    For scores [250, 200, 100, 100, 50] the ranks are:

    DEFAULT               [1, 2, 3, 4, 5]   ties ordered by entity key
    DENSE                 [1, 2, 3, 3, 4]
    STANDARD_COMPETITION  [1, 2, 3, 3, 5]   gap after the tie group
    MODIFIED_COMPETITION  [1, 2, 4, 4, 5]   gap before the tie group
    """
    DEFAULT = 1
    DENSE = 2
    STANDARD_COMPETITION = 3
    MODIFIED_COMPETITION = 4

def resolve_ranking_type(ranking_type):
    try:
        return RankingType(ranking_type)
    except (ValueError, TypeError):
        valid = ", ".join("{0} ({1})".format(t.name, t.value) for t in RankingType)
        raise UnknownRankingTypeError("ranking_type", ranking_type,
                "Ranking type not found, valid ranking types are: " + valid)

# The store orders ascending; scores are kept negated so that the best
# entity sits at position 0. These two functions are the only place the
# sign convention lives.

def to_stored_score(score):
    return 0.0 - float(score)

def from_stored_score(stored):
    return 0.0 - float(stored)

def rank_window(snapshot, start_index, page_size, ranking_type):
    """Rank the window [start_index, start_index + page_size] of a snapshot.

    ``snapshot`` is an iterable of (member, stored_score) pairs in any
    order. Returns (member, rank, stored_score) rows in store order, the
    same rows the ranking scripts produce against a live leaderboard.
    """
    ranking_type = resolve_ranking_type(ranking_type)
    ordered = sorted(snapshot, key=lambda row: (row[1], _member_order(row[0])))
    scores = [score for _, score in ordered]
    distinct = sorted(set(scores))
    
    rows = []
    stop = start_index + page_size + 1
    for position, (member, score) in enumerate(ordered[start_index:stop], start_index):
        if ranking_type is RankingType.DEFAULT:
            rank = position + 1
        elif ranking_type is RankingType.DENSE:
            rank = bisect.bisect_left(distinct, score) + 1
        elif ranking_type is RankingType.STANDARD_COMPETITION:
            rank = bisect.bisect_left(scores, score) + 1
        else:
            rank = bisect.bisect_right(scores, score)
        rows.append((member, rank, score))
    return rows

def _member_order(member):
    if isinstance(member, bytes):
        return member
    return str(member).encode("utf-8")
