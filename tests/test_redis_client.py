# tests/test_redis_client.py
import redis

from cache.redis_client import RATE_LIMIT_TTL_SECONDS, RedisClient


class FakeRedis:

    def __init__(self, fail=False):
        self.counts = {}
        self.ttls = {}
        self.fail = fail

    def incr(self, key):
        if self.fail:
            raise redis.ConnectionError("gone")
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    def expire(self, key, seconds):
        self.ttls[key] = seconds


def test_counts_calls_and_blocks_over_budget():
    fake = FakeRedis()
    client = RedisClient(max_calls=2, client=fake)

    assert client.check_rate_limit("u1") == (True, 1)
    assert client.check_rate_limit("u1") == (True, 2)
    assert client.check_rate_limit("u1") == (False, 3)
    assert client.check_rate_limit("u2") == (True, 1)
    assert fake.ttls["rate_limit:u1"] == RATE_LIMIT_TTL_SECONDS


def test_fails_open_on_redis_errors():
    client = RedisClient(max_calls=1, client=FakeRedis(fail=True))
    assert client.check_rate_limit("u1") == (True, 0)


def test_unreachable_redis_disables_limiting(monkeypatch):
    class Unreachable:
        def ping(self):
            raise redis.ConnectionError("refused")

    monkeypatch.setattr(redis, "from_url", lambda url, **kw: Unreachable())
    client = RedisClient(url="redis://nowhere:6379/0")

    assert client.available is False
    assert client.check_rate_limit("u1") == (True, 0)
