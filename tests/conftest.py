"""
Shared fixtures for the redisboard tests.

The store is fakeredis (with Lua support), so scripts and WATCH/MULTI/EXEC
transactions run without a server.
"""

import fakeredis
import pytest

from redisboard import Entity, Leaderboard
from redisboard.keys import keys_for

LEADERBOARD_ID = "season-1"

# Scores used by the tie-law tests: [250, 200, 100, 100, 50]
TIED_ENTITIES = [
    ("alice", 250),
    ("bob", 200),
    ("carol", 100),
    ("dave", 100),
    ("erin", 50),
]


@pytest.fixture
def server():
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(server):
    client = fakeredis.FakeRedis(server=server)
    yield client
    client.flushall()


@pytest.fixture
def leaderboard(redis_client):
    return Leaderboard(redis_client=redis_client, key_prefix="leaderboard")


@pytest.fixture
def keys():
    return keys_for(LEADERBOARD_ID, "leaderboard")


@pytest.fixture
def tied_leaderboard(leaderboard):
    """Leaderboard seeded with the five tie-law entities."""
    leaderboard.add(LEADERBOARD_ID, [
        Entity(key, score, metadata=("payload-" + key).encode())
        for key, score in TIED_ENTITIES
    ])
    return leaderboard


@pytest.fixture
def large_leaderboard(leaderboard):
    """Thirty entities p00..p29 with distinct scores 0, 10, ..., 290."""
    leaderboard.add(LEADERBOARD_ID, [
        Entity("p{0:02d}".format(i), i * 10) for i in range(30)
    ])
    return leaderboard
