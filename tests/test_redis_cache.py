"""Tests for RedisResolutionCache."""

from unittest.mock import MagicMock

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from conftest import email
from cqrs_ddd_templates.cache.redis import RedisResolutionCache
from cqrs_ddd_templates.exceptions import TemplateCacheError
from cqrs_ddd_templates.template import NotificationChannel, TemplateKey

KEY = TemplateKey.of("Password Reset", NotificationChannel.EMAIL, "billing")
ENTRY_KEY = "templates:1:tpl:passwordreset:email:billing"
GEN_KEY = "templates:1:gen:passwordreset:email:billing"
EPOCH_KEY = "templates:1:epoch"


class TestRedisResolutionCache:
    @pytest.fixture
    def redis_client(self):
        client = MagicMock()
        client.get.return_value = None
        client.mget.return_value = [None, None]
        client.register_script.return_value = MagicMock(return_value=1)
        return client

    @pytest.fixture
    def cache(self, redis_client):
        return RedisResolutionCache(redis_client, namespace="templates:1", ttl=60)

    def test_get_missing(self, cache, redis_client):
        assert cache.get(KEY) is None
        redis_client.get.assert_called_with(ENTRY_KEY)

    def test_get_decodes_json(self, cache, redis_client):
        template = email(locale="fr-fr", content_type="text/html")
        redis_client.get.return_value = (
            b'{"fr-fr": ' + template.model_dump_json().encode() + b"}"
        )

        entry = cache.get(KEY)

        assert entry == {"fr-fr": template}

    def test_get_failure_is_a_miss(self, cache, redis_client, caplog):
        redis_client.get.side_effect = RedisConnectionError("down")
        assert cache.get(KEY) is None
        assert "Redis get failed" in caplog.text

    def test_corrupt_entry_is_dropped(self, cache, redis_client):
        redis_client.get.return_value = b'{"fr-fr": {"body": 1}}'

        assert cache.get(KEY) is None

        pipe = redis_client.pipeline.return_value
        pipe.incr.assert_called_once_with(GEN_KEY)
        pipe.delete.assert_called_once_with(ENTRY_KEY)

    def test_put_runs_generation_checked_script(self, cache, redis_client):
        template = email()

        cache.put(KEY, {"en-us": template}, generation=3)

        script = redis_client.register_script.return_value
        kwargs = script.call_args.kwargs
        assert kwargs["keys"] == [ENTRY_KEY, GEN_KEY, EPOCH_KEY]
        payload, generation, ttl = kwargs["args"]
        assert b'"en-us"' in payload
        assert (generation, ttl) == ("3", "60")

    def test_unchecked_put_without_ttl(self, redis_client):
        cache = RedisResolutionCache(redis_client, namespace="templates:1")
        cache.put(KEY, {"en-us": email()})
        _, generation, ttl = redis_client.register_script.return_value.call_args.kwargs[
            "args"
        ]
        assert (generation, ttl) == ("", "")

    def test_put_failure_is_logged(self, cache, redis_client, caplog):
        redis_client.register_script.return_value.side_effect = RedisConnectionError("down")
        cache.put(KEY, {"en-us": email()})
        assert "Redis set failed" in caplog.text

    def test_invalidate_uses_transaction(self, cache, redis_client):
        cache.invalidate(KEY)

        redis_client.pipeline.assert_called_once_with(transaction=True)
        pipe = redis_client.pipeline.return_value
        pipe.incr.assert_called_once_with(GEN_KEY)
        pipe.delete.assert_called_once_with(ENTRY_KEY)
        pipe.execute.assert_called_once()

    def test_invalidate_failure_raises(self, cache, redis_client):
        redis_client.pipeline.return_value.execute.side_effect = RedisConnectionError("down")
        with pytest.raises(TemplateCacheError) as exc_info:
            cache.invalidate(KEY)
        assert isinstance(exc_info.value.__cause__, RedisConnectionError)

    def test_generation(self, cache, redis_client):
        assert cache.generation(KEY) == 0
        redis_client.mget.return_value = [b"7", b"2"]
        assert cache.generation(KEY) == 9
        redis_client.mget.assert_called_with([GEN_KEY, EPOCH_KEY])

    def test_generation_failure_raises(self, cache, redis_client):
        redis_client.mget.side_effect = RedisConnectionError("down")
        with pytest.raises(TemplateCacheError):
            cache.generation(KEY)

    def test_clear_bumps_epoch_then_deletes_entries(self, cache, redis_client):
        redis_client.scan.side_effect = [
            (5, [ENTRY_KEY.encode()]),
            (0, [b"templates:1:tpl:welcome:email:-"]),
        ]

        cache.clear()

        redis_client.incr.assert_called_once_with(EPOCH_KEY)
        assert [c.args for c in redis_client.delete.call_args_list] == [
            (ENTRY_KEY.encode(),),
            (b"templates:1:tpl:welcome:email:-",),
        ]
        redis_client.scan.assert_called_with(5, match="templates:1:tpl:*")

    def test_clear_failure_raises(self, cache, redis_client):
        redis_client.incr.side_effect = RedisConnectionError("down")
        with pytest.raises(TemplateCacheError):
            cache.clear()


class TestRedisResolutionCacheOnServer:
    """Generation checks run against a Redis server with Lua scripting."""

    @pytest.fixture
    def cache(self):
        return RedisResolutionCache(fakeredis.FakeRedis(), namespace="templates:1")

    def test_put_and_get(self, cache):
        template = email(locale="fr-fr")

        cache.put(KEY, {"fr-fr": template}, generation=cache.generation(KEY))

        assert cache.get(KEY) == {"fr-fr": template}

    def test_invalidate_rejects_put_read_before_it(self, cache):
        generation = cache.generation(KEY)
        cache.invalidate(KEY)

        cache.put(KEY, {"en-us": email()}, generation=generation)

        assert cache.get(KEY) is None

    def test_clear_rejects_put_for_key_never_cached(self, cache):
        generation = cache.generation(KEY)
        cache.clear()

        cache.put(KEY, {"en-us": email()}, generation=generation)

        assert cache.get(KEY) is None
        assert cache.generation(KEY) > generation

    def test_clear_drops_entries_and_accepts_fresh_puts(self, cache):
        other = TemplateKey.of("Welcome", NotificationChannel.EMAIL)
        for key in (KEY, other):
            cache.put(key, {"en-us": email()}, generation=cache.generation(key))

        cache.clear()

        assert cache.get(KEY) is None
        assert cache.get(other) is None
        cache.put(KEY, {"en-us": email()}, generation=cache.generation(KEY))
        assert cache.get(KEY) is not None
