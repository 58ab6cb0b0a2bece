import logging
from collections import Counter

import redis

from . import scripts
from .entity import RankedEntity
from .errors import UnknownRankingTypeError
from .ranking import RankingType, from_stored_score, resolve_ranking_type

logger = logging.getLogger(__name__)

def score_member(stored):
    """Member under which a stored score is kept in the distinct score set."""
    return repr(float(stored))

class ChangeSet:
    """Writes to the three collections of one leaderboard, queued together."""

    def __init__(self):
        self.ranking_adds = {}
        self.ranking_removals = []
        self.score_adds = {}
        self.score_removals = []
        self.metadata_sets = {}
        self.metadata_removals = []

    def __len__(self):
        return (len(self.ranking_adds) + len(self.ranking_removals)
                + len(self.score_adds) + len(self.score_removals)
                + len(self.metadata_sets) + len(self.metadata_removals))

    def queue(self, pipeline, keys):
        if self.ranking_adds:
            pipeline.zadd(keys.ranking, self.ranking_adds)
        if self.ranking_removals:
            pipeline.zrem(keys.ranking, *self.ranking_removals)
        if self.score_removals:
            pipeline.zrem(keys.scores, *self.score_removals)
        if self.score_adds:
            pipeline.zadd(keys.scores, self.score_adds)
        if self.metadata_sets:
            pipeline.hset(keys.metadata, mapping=self.metadata_sets)
        if self.metadata_removals:
            pipeline.hdel(keys.metadata, *self.metadata_removals)

class RankingEngine:
    def __init__(self, *, redis_client):
        self._redis = redis_client

        self._lua_dense_rank = self._redis.register_script(scripts.DENSE_RANK)
        self._lua_competition_rank = self._redis.register_script(scripts.COMPETITION_RANK)

    # Write path. ``pipeline`` is watching keys.ranking and still in
    # immediate mode, so the reads below see the state the transaction
    # will be validated against.

    def plan_scores(self, pipeline, keys, stored_scores, metadata=None):
        changes = ChangeSet()
        members = list(stored_scores)
        if not members:
            return changes

        previous = pipeline.zmscore(keys.ranking, members)

        leaving = Counter()
        for member, old in zip(members, previous):
            if old is not None and old != stored_scores[member]:
                leaving[old] += 1

        new_scores = set(stored_scores.values())
        for old, count in leaving.items():
            if old in new_scores:
                continue
            if pipeline.zcount(keys.ranking, old, old) <= count:
                changes.score_removals.append(score_member(old))

        changes.ranking_adds.update(stored_scores)
        changes.score_adds.update((score_member(s), s) for s in new_scores)
        if metadata:
            changes.metadata_sets.update(metadata)
        return changes

    def plan_removal(self, pipeline, keys, member):
        changes = ChangeSet()
        old = pipeline.zscore(keys.ranking, member)

        changes.ranking_removals.append(member)
        changes.metadata_removals.append(member)
        if old is not None and pipeline.zcount(keys.ranking, old, old) <= 1:
            changes.score_removals.append(score_member(old))
        return changes

    # Read path.

    def position_of(self, keys, member):
        return self._redis.zrank(keys.ranking, member)

    def score_window(self, keys, stored_min, stored_max):
        """Start index and page size covering every member in the stored range."""
        pipeline = self._redis.pipeline(transaction=True)
        pipeline.zcount(keys.ranking, "-inf", "(" + repr(float(stored_min)))
        pipeline.zcount(keys.ranking, stored_min, stored_max)
        before, in_range = pipeline.execute()

        if not in_range:
            return None
        return before, in_range - 1

    def rank_rows(self, keys, start_index, page_size, ranking_type):
        """(member, rank, stored score) rows of the window, in store order."""
        ranking_type = resolve_ranking_type(ranking_type)
        logger.debug("Ranking window start=%d size=%d type=%s on %s",
                start_index, page_size, ranking_type.name, keys.ranking)

        if ranking_type is RankingType.DEFAULT:
            response = self._redis.zrange(keys.ranking, start_index,
                    start_index + page_size, withscores=True)
            return [
                (self._decode(member), start_index + i + 1, float(zscore))
                for i, (member, zscore) in enumerate(response)
            ]

        if ranking_type is RankingType.DENSE:
            response = self._evaluate_read_only(self._lua_dense_rank,
                    [keys.ranking, keys.scores], [start_index, page_size])
        elif ranking_type in (RankingType.STANDARD_COMPETITION,
                RankingType.MODIFIED_COMPETITION):
            response = self._evaluate_read_only(self._lua_competition_rank,
                    [keys.ranking], [start_index, page_size, int(ranking_type)])
        else:
            raise UnknownRankingTypeError("ranking_type", ranking_type,
                    "No ranking strategy for ranking type")

        return [
            (self._decode(row[0]), int(row[1]), float(self._decode(row[2])))
            for row in response or []
        ]

    def window(self, keys, start_index, page_size, ranking_type):
        rows = self.rank_rows(keys, start_index, page_size, ranking_type)
        if not rows:
            return []

        metadata = self._redis.hmget(keys.metadata, [row[0] for row in rows])
        return [
            RankedEntity(member, rank, from_stored_score(zscore), payload)
            for (member, rank, zscore), payload in zip(rows, metadata)
        ]

    def _evaluate_read_only(self, script, keys, args):
        # EVALSHA_RO needs Redis 7.0; older servers get plain EVALSHA.
        try:
            try:
                return self._redis.evalsha_ro(script.sha, len(keys), *keys, *args)
            except redis.exceptions.NoScriptError:
                self._redis.script_load(script.script)
                return self._redis.evalsha_ro(script.sha, len(keys), *keys, *args)
        except redis.exceptions.ResponseError as e:
            if "unknown command" not in str(e).lower():
                raise
            logger.debug("EVALSHA_RO unavailable, falling back to EVALSHA: %s", e)
        return script(keys=keys, args=args)

    def _decode(self, value):
        if isinstance(value, bytes):
            value = self._redis.get_encoder().decode(value, force=True)
        return value
