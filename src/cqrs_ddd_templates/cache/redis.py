"""RedisResolutionCache — shared resolution cache on a sync Redis client."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from ..exceptions import TemplateCacheError
from ..template import NotificationTemplate

if TYPE_CHECKING:
    from collections.abc import Mapping

    from redis import Redis

    from ..template import TemplateKey

logger = logging.getLogger("cqrs_ddd.templates.redis_cache")

_ENTRY_ADAPTER: TypeAdapter[dict[str, NotificationTemplate]] = TypeAdapter(
    dict[str, NotificationTemplate]
)

# KEYS[1] = entry key, KEYS[2] = generation key, KEYS[3] = namespace epoch key
# ARGV[1] = payload, ARGV[2] = expected generation ('' = unchecked), ARGV[3] = ttl
_PUT_IF_GENERATION = """
local current = tonumber(redis.call('GET', KEYS[2]) or '0')
    + tonumber(redis.call('GET', KEYS[3]) or '0')
if ARGV[2] ~= '' and current ~= tonumber(ARGV[2]) then
    return 0
end
if ARGV[3] ~= '' then
    redis.call('SET', KEYS[1], ARGV[1], 'EX', ARGV[3])
else
    redis.call('SET', KEYS[1], ARGV[1])
end
return 1
"""


class RedisResolutionCache:
    """
    Redis implementation of ``IResolutionCache``.

    Each :class:`TemplateKey` owns two Redis keys under ``namespace``: the JSON
    entry (``{ns}:tpl:{key}``) and its generation counter (``{ns}:gen:{key}``).
    The namespace shares one epoch counter (``{ns}:epoch``). The generation
    handed to callers is the sum of both counters, so it moves on a key
    invalidation and on a namespace clear alike.

    - ``get`` failures are logged and reported as a miss.
    - ``put`` runs a Lua script that compares the generation and writes in one
      server-side step; failures are logged.
    - ``invalidate`` INCRs the generation and DELs the entry in one MULTI
      block and raises :class:`TemplateCacheError` when Redis fails.
    - ``clear`` INCRs the epoch before deleting entries, so puts that read
      a generation before the clear are rejected even for uncached keys.
    """

    def __init__(
        self,
        redis_client: Redis,
        namespace: str = "templates",
        ttl: int | None = None,
    ) -> None:
        self._redis = redis_client
        self._namespace = namespace
        self._ttl = ttl
        self._put_script = redis_client.register_script(_PUT_IF_GENERATION)

    def _entry_key(self, key: TemplateKey) -> str:
        return f"{self._namespace}:tpl:{key.as_string()}"

    def _generation_key(self, key: TemplateKey) -> str:
        return f"{self._namespace}:gen:{key.as_string()}"

    @property
    def _epoch_key(self) -> str:
        return f"{self._namespace}:epoch"

    def get(self, key: TemplateKey) -> Mapping[str, NotificationTemplate] | None:
        entry_key = self._entry_key(key)
        try:
            raw = self._redis.get(entry_key)
        except RedisError as e:
            logger.warning("Redis get failed for key %s: %s", entry_key, e)
            return None
        if not raw:
            return None
        try:
            return _ENTRY_ADAPTER.validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding corrupt cache entry %s: %s", entry_key, e)
            try:
                self.invalidate(key)
            except TemplateCacheError as err:
                logger.warning("Could not drop corrupt entry %s: %s", entry_key, err)
            return None

    def put(
        self,
        key: TemplateKey,
        entry: Mapping[str, NotificationTemplate],
        *,
        generation: int | None = None,
    ) -> None:
        entry_key = self._entry_key(key)
        payload = _ENTRY_ADAPTER.dump_json(dict(entry))
        try:
            stored = self._put_script(
                keys=[entry_key, self._generation_key(key), self._epoch_key],
                args=[
                    payload,
                    "" if generation is None else str(generation),
                    str(self._ttl) if self._ttl else "",
                ],
            )
        except RedisError as e:
            logger.warning("Redis set failed for key %s: %s", entry_key, e)
            return
        if stored == 0:
            logger.debug("Dropping stale cache put for %s", entry_key)

    def invalidate(self, key: TemplateKey) -> None:
        entry_key = self._entry_key(key)
        try:
            pipe = self._redis.pipeline(transaction=True)
            pipe.incr(self._generation_key(key))
            pipe.delete(entry_key)
            pipe.execute()
        except RedisError as e:
            raise TemplateCacheError(
                f"Redis invalidate failed for key {entry_key}: {e}", key=entry_key
            ) from e

    def generation(self, key: TemplateKey) -> int:
        generation_key = self._generation_key(key)
        try:
            counters: Any = self._redis.mget([generation_key, self._epoch_key])
        except RedisError as e:
            raise TemplateCacheError(
                f"Redis generation read failed for key {generation_key}: {e}",
                key=generation_key,
            ) from e
        return sum(int(raw) for raw in counters if raw)

    def clear(self) -> None:
        """Invalidate every entry in the namespace. Expensive (SCAN)."""
        entry_prefix = f"{self._namespace}:tpl:"
        try:
            # Epoch first: a put racing the scan below is already stale.
            self._redis.incr(self._epoch_key)
            cursor: int = 0
            while True:
                cursor, keys = self._redis.scan(cursor, match=f"{entry_prefix}*")
                if keys:
                    self._redis.delete(*keys)
                if cursor == 0:
                    break
        except RedisError as e:
            raise TemplateCacheError(
                f"Redis clear failed for namespace {self._namespace}: {e}"
            ) from e
