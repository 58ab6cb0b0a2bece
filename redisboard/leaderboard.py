import logging

import redis

from . import guard
from .config import Config
from .engine import RankingEngine
from .entity import metadata_of, score_of
from .errors import EntityNotFoundError, TransactionFailedError
from .keys import keys_for
from .ranking import RankingType, from_stored_score, resolve_ranking_type, to_stored_score

logger = logging.getLogger(__name__)

class Leaderboard:
    """Ranked leaderboards stored in Redis.

    Each leaderboard id maps to three keys: a sorted set of entity keys at
    negated score, a sorted set of the distinct negated scores and a hash of
    entity metadata. Writes touching more than one of them run as a single
    WATCH/MULTI/EXEC transaction.
    """

    def __init__(self, *, redis_client=None, key_prefix=None, default_offset=None):
        if redis_client is None:
            redis_client = redis.Redis.from_url(Config.REDIS_URL)
        if key_prefix is None:
            key_prefix = Config.KEY_PREFIX
        if default_offset is None:
            default_offset = Config.default_offset()
        guard.against_invalid_offset(default_offset, "default_offset")

        self._redis = redis_client
        self._key_prefix = key_prefix
        self._default_offset = default_offset
        self._engine = RankingEngine(redis_client=redis_client)

    @classmethod
    def from_url(cls, url=None, **options):
        """Build a leaderboard on a new client for a redis URL.

        Unknown options go to redis.Redis.from_url; key_prefix and
        default_offset are taken out first.
        """
        key_prefix = options.pop('key_prefix', None)
        default_offset = options.pop('default_offset', None)
        client = redis.Redis.from_url(url or Config.REDIS_URL, **options)
        return cls(redis_client=client, key_prefix=key_prefix,
                default_offset=default_offset)

    # Writes

    def add(self, leaderboard_id, entities, fire_and_forget=False):
        """Add entities, or re-rank the ones already present.

        With fire_and_forget failures are logged instead of raised.
        """
        guard.against_invalid_identifier(leaderboard_id)
        entities = guard.against_invalid_entities(entities)
        if not entities:
            return

        stored_scores = {}
        metadata = {}
        for entity in entities:
            member = str(entity.key)
            stored_scores[member] = to_stored_score(score_of(entity))
            payload = metadata_of(entity)
            if payload is not None:
                metadata[member] = payload

        self._transact(leaderboard_id,
                lambda pipeline, keys: self._engine.plan_scores(pipeline, keys, stored_scores, metadata),
                "Failed to add entities to leaderboard", fire_and_forget)

    def update_score(self, leaderboard_id, entity_key, new_score, fire_and_forget=False):
        guard.against_invalid_identifier(leaderboard_id)
        guard.against_invalid_identifier(entity_key, "entity_key")
        guard.against_invalid_score(new_score, "new_score")

        stored_scores = {str(entity_key): to_stored_score(new_score)}
        self._transact(leaderboard_id,
                lambda pipeline, keys: self._engine.plan_scores(pipeline, keys, stored_scores),
                "Failed to update entity score in leaderboard", fire_and_forget)

    def delete_entity(self, leaderboard_id, entity_key):
        guard.against_invalid_identifier(leaderboard_id)
        guard.against_invalid_identifier(entity_key, "entity_key")

        member = str(entity_key)
        self._transact(leaderboard_id,
                lambda pipeline, keys: self._engine.plan_removal(pipeline, keys, member),
                "Failed to delete entity from leaderboard")

    def delete(self, leaderboard_id):
        """Delete a whole leaderboard. Deleting a missing leaderboard does nothing."""
        guard.against_invalid_identifier(leaderboard_id)
        self._redis.delete(*self._keys(leaderboard_id))

    # Reads

    def get_entity_and_neighbours(self, leaderboard_id, entity_key, offset=None,
            ranking_type=RankingType.DEFAULT):
        """An entity with up to offset neighbours on each side, best first.

        Returns an empty list when the entity is absent.
        """
        if offset is None:
            offset = self._default_offset
        guard.against_invalid_identifier(leaderboard_id)
        guard.against_invalid_identifier(entity_key, "entity_key")
        guard.against_invalid_offset(offset)
        ranking_type = resolve_ranking_type(ranking_type)

        keys = self._keys(leaderboard_id)
        position = self._engine.position_of(keys, str(entity_key))
        if position is None:
            return []

        start_index = max(position - offset, 0)
        page_size = offset * 2 if position > offset else position + offset
        return self._engine.window(keys, start_index, page_size, ranking_type)

    def get_entities_by_score_range(self, leaderboard_id, min_score, max_score,
            ranking_type=RankingType.DEFAULT):
        """Every entity scoring within [min_score, max_score], best first."""
        guard.against_invalid_identifier(leaderboard_id)
        guard.against_invalid_score_range(min_score, max_score)
        ranking_type = resolve_ranking_type(ranking_type)

        keys = self._keys(leaderboard_id)
        window = self._engine.score_window(keys,
                to_stored_score(max_score), to_stored_score(min_score))
        if window is None:
            return []

        start_index, page_size = window
        rows = self._engine.window(keys, start_index, page_size, ranking_type)
        # a write between the count and the window can shift members in
        return [row for row in rows if min_score <= row.score <= max_score]

    def get_page(self, leaderboard_id, page_index, page_size,
            ranking_type=RankingType.DEFAULT):
        """The 0-based page_index-th page of page_size entities, best first."""
        guard.against_invalid_identifier(leaderboard_id)
        guard.against_invalid_offset(page_index, "page_index")
        guard.against_invalid_page_size(page_size)
        ranking_type = resolve_ranking_type(ranking_type)

        return self._engine.window(self._keys(leaderboard_id),
                page_index * page_size, page_size - 1, ranking_type)

    def get_entity(self, leaderboard_id, entity_key, ranking_type=RankingType.DEFAULT):
        guard.against_invalid_identifier(leaderboard_id)
        guard.against_invalid_identifier(entity_key, "entity_key")
        ranking_type = resolve_ranking_type(ranking_type)

        keys = self._keys(leaderboard_id)
        member = str(entity_key)
        position = self._engine.position_of(keys, member)
        if position is not None:
            rows = self._engine.window(keys, position, 0, ranking_type)
            if rows and rows[0].key == member:
                return rows[0]

        raise EntityNotFoundError("entity_key", entity_key,
                "Entity not found in leaderboard {0!r}".format(leaderboard_id))

    def get_entity_rank(self, leaderboard_id, entity_key, ranking_type=RankingType.DEFAULT):
        guard.against_invalid_identifier(leaderboard_id)
        guard.against_invalid_identifier(entity_key, "entity_key")
        ranking_type = resolve_ranking_type(ranking_type)

        keys = self._keys(leaderboard_id)
        position = self._engine.position_of(keys, str(entity_key))
        if position is None:
            return None

        if ranking_type is RankingType.DEFAULT:
            return position + 1

        rows = self._engine.rank_rows(keys, position, 1, ranking_type)
        if not rows:
            return None
        return rows[0][1]

    def get_entity_score(self, leaderboard_id, entity_key):
        guard.against_invalid_identifier(leaderboard_id)
        guard.against_invalid_identifier(entity_key, "entity_key")

        zscore = self._redis.zscore(self._keys(leaderboard_id).ranking, str(entity_key))
        return None if zscore is None else from_stored_score(zscore)

    def get_entity_metadata(self, leaderboard_id, entity_key):
        guard.against_invalid_identifier(leaderboard_id)
        guard.against_invalid_identifier(entity_key, "entity_key")

        return self._redis.hget(self._keys(leaderboard_id).metadata, str(entity_key))

    def get_size(self, leaderboard_id):
        guard.against_invalid_identifier(leaderboard_id)

        return self._redis.zcard(self._keys(leaderboard_id).ranking)

    def _keys(self, leaderboard_id):
        return keys_for(leaderboard_id, self._key_prefix)

    def _transact(self, leaderboard_id, plan, reason, fire_and_forget=False):
        keys = self._keys(leaderboard_id)
        try:
            with self._redis.pipeline(transaction=False) as pipeline:
                pipeline.watch(keys.ranking)

                changes = plan(pipeline, keys)

                pipeline.multi()
                changes.queue(pipeline, keys)
                logger.debug("Committing %d changes to leaderboard %r",
                        len(changes), leaderboard_id)

                try:
                    pipeline.execute()
                except (redis.exceptions.WatchError, redis.exceptions.ExecAbortError):
                    raise TransactionFailedError(leaderboard_id, reason)
        except (redis.exceptions.RedisError, TransactionFailedError) as e:
            if not fire_and_forget:
                raise
            logger.warning("Fire-and-forget write to leaderboard %r failed: %s",
                    leaderboard_id, e)
