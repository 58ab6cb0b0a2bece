"""
Tests for the ranking semantics.

The pure reference implementation and the Lua scripts are checked against
the same tie laws, then against each other over generated leaderboards.
"""

import random

import pytest
import redis

from redisboard import Entity, RankingType, UnknownRankingTypeError
from redisboard.ranking import (
    from_stored_score, rank_window, resolve_ranking_type, to_stored_score)

from .conftest import LEADERBOARD_ID, TIED_ENTITIES

TIE_LAWS = {
    RankingType.DEFAULT: [1, 2, 3, 4, 5],
    RankingType.DENSE: [1, 2, 3, 3, 4],
    RankingType.STANDARD_COMPETITION: [1, 2, 3, 3, 5],
    RankingType.MODIFIED_COMPETITION: [1, 2, 4, 4, 5],
}


def tied_snapshot():
    return [(key, to_stored_score(score)) for key, score in TIED_ENTITIES]


def generated_cases():
    rng = random.Random(20240611)
    cases = []
    for _ in range(12):
        size = rng.randint(1, 40)
        # A narrow score band forces plenty of ties.
        band = rng.choice([3, 10, 1000])
        cases.append([
            ("m{0:03d}".format(i), rng.randint(0, band)) for i in range(size)
        ])
    return cases


class TestScoreInversion:

    @pytest.mark.parametrize("score", [0, 1, 50.5, 1e12])
    def test_round_trip_is_exact(self, score):
        assert from_stored_score(to_stored_score(score)) == score

    def test_better_scores_sort_first(self):
        assert to_stored_score(250) < to_stored_score(100)

    def test_zero_has_no_negative_sign(self):
        assert repr(to_stored_score(0)) == "0.0"
        assert repr(from_stored_score(0.0)) == "0.0"


class TestResolveRankingType:

    def test_accepts_enum_and_value(self):
        assert resolve_ranking_type(RankingType.DENSE) is RankingType.DENSE
        assert resolve_ranking_type(3) is RankingType.STANDARD_COMPETITION

    @pytest.mark.parametrize("value", [0, 5, "dense", None])
    def test_unknown_types(self, value):
        with pytest.raises(UnknownRankingTypeError) as excinfo:
            resolve_ranking_type(value)
        assert "DENSE (2)" in str(excinfo.value)


class TestReferenceImplementation:

    @pytest.mark.parametrize("ranking_type", list(TIE_LAWS))
    def test_tie_laws(self, ranking_type):
        rows = rank_window(tied_snapshot(), 0, 4, ranking_type)
        assert [member for member, _, _ in rows] == ["alice", "bob", "carol", "dave", "erin"]
        assert [rank for _, rank, _ in rows] == TIE_LAWS[ranking_type]

    @pytest.mark.parametrize("ranking_type", list(TIE_LAWS))
    def test_window_inside_tie_group(self, ranking_type):
        rows = rank_window(tied_snapshot(), 3, 1, ranking_type)
        assert [rank for _, rank, _ in rows] == TIE_LAWS[ranking_type][3:5]

    def test_window_past_the_end_is_empty(self):
        assert rank_window(tied_snapshot(), 10, 5, RankingType.DENSE) == []


class TestScriptsMatchReference:

    @pytest.mark.parametrize("ranking_type", list(TIE_LAWS))
    def test_tie_laws(self, tied_leaderboard, ranking_type):
        rows = tied_leaderboard.get_page(LEADERBOARD_ID, 0, 5, ranking_type)
        assert [row.key for row in rows] == ["alice", "bob", "carol", "dave", "erin"]
        assert [row.rank for row in rows] == TIE_LAWS[ranking_type]
        assert [row.score for row in rows] == [250, 200, 100, 100, 50]

    @pytest.mark.parametrize("case", generated_cases())
    @pytest.mark.parametrize("ranking_type", list(TIE_LAWS))
    def test_generated_leaderboards(self, leaderboard, case, ranking_type):
        leaderboard.add(LEADERBOARD_ID, [Entity(key, score) for key, score in case])
        snapshot = [(key, to_stored_score(score)) for key, score in case]

        for start_index in range(0, len(case), 3):
            for page_size in (0, 1, 4, 9):
                expected = [
                    (member, rank, from_stored_score(zscore))
                    for member, rank, zscore in rank_window(
                            snapshot, start_index, page_size, ranking_type)
                ]
                rows = leaderboard._engine.window(
                        leaderboard._keys(LEADERBOARD_ID), start_index, page_size, ranking_type)
                assert [(row.key, row.rank, row.score) for row in rows] == expected

    @pytest.mark.parametrize("case", generated_cases())
    @pytest.mark.parametrize("ranking_type", list(TIE_LAWS))
    def test_rank_ordering(self, leaderboard, case, ranking_type):
        leaderboard.add(LEADERBOARD_ID, [Entity(key, score) for key, score in case])
        rows = leaderboard.get_page(LEADERBOARD_ID, 0, len(case), ranking_type)

        assert len(rows) == len(case)
        for better, worse in zip(rows, rows[1:]):
            assert better.score >= worse.score
            assert better.rank <= worse.rank
            if ranking_type is not RankingType.DEFAULT:
                assert (better.rank == worse.rank) == (better.score == worse.score)


class TestReadOnlyEvaluation:

    def test_scripts_run_read_only(self, tied_leaderboard, redis_client, monkeypatch):
        calls = []
        evalsha_ro = redis_client.evalsha_ro

        def recording(*args):
            calls.append(args[0])
            return evalsha_ro(*args)

        monkeypatch.setattr(redis_client, "evalsha_ro", recording)
        rows = tied_leaderboard.get_page(LEADERBOARD_ID, 0, 5, RankingType.DENSE)

        assert calls
        assert [row.rank for row in rows] == TIE_LAWS[RankingType.DENSE]

    @pytest.mark.parametrize("ranking_type", [
        RankingType.DENSE,
        RankingType.STANDARD_COMPETITION,
        RankingType.MODIFIED_COMPETITION,
    ])
    def test_falls_back_when_server_lacks_evalsha_ro(
            self, tied_leaderboard, redis_client, monkeypatch, ranking_type):
        def unknown(*args):
            raise redis.exceptions.ResponseError("unknown command 'evalsha_ro'")

        monkeypatch.setattr(redis_client, "evalsha_ro", unknown)
        rows = tied_leaderboard.get_page(LEADERBOARD_ID, 0, 5, ranking_type)

        assert [row.rank for row in rows] == TIE_LAWS[ranking_type]

    def test_other_server_errors_propagate(self, tied_leaderboard, redis_client, monkeypatch):
        def wrong_type(*args):
            raise redis.exceptions.ResponseError("WRONGTYPE Operation against a key")

        monkeypatch.setattr(redis_client, "evalsha_ro", wrong_type)
        with pytest.raises(redis.exceptions.ResponseError):
            tied_leaderboard.get_page(LEADERBOARD_ID, 0, 5, RankingType.DENSE)
