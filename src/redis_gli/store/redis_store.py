"""redis-py adapter for the StoreClient protocol.

// [LAW:single-enforcer] redis.RedisError → StoreError conversion happens here only.
// [LAW:one-source-of-truth] Reply and TTL display formats are defined here;
//   the TUI treats them as opaque strings.

This module is a STABLE BOUNDARY: the TUI never imports redis directly.
"""

import functools
import logging
import shlex

import redis

from redis_gli.store.protocol import RankedMember, StoreError

logger = logging.getLogger(__name__)

NO_EXPIRY = "no expiry"
MISSING_KEY = "missing"


def format_duration(seconds: int) -> str:
    """Compact duration text: 45s, 2m0s, 1h0m5s."""
    hours, rem = divmod(int(seconds), 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def format_ttl(raw: int) -> str:
    """Map a TTL reply to display text. -1 and -2 are the store's sentinels."""
    if raw == -1:
        return NO_EXPIRY
    if raw == -2:
        return MISSING_KEY
    return format_duration(raw)


def format_reply(reply, indent: int = 0) -> str:
    """Format a command reply the way redis-cli prints it."""
    pad = " " * indent
    if reply is None:
        return f"{pad}(nil)"
    if isinstance(reply, bool):
        return f"{pad}(true)" if reply else f"{pad}(false)"
    if isinstance(reply, int):
        return f"{pad}(integer) {reply}"
    if isinstance(reply, float):
        return f"{pad}(double) {reply:g}"
    if isinstance(reply, bytes):
        return pad + reply.decode("utf-8", errors="replace")
    if isinstance(reply, dict):
        if not reply:
            return f"{pad}(empty hash)"
        return "\n".join(
            f"{pad}{k}: {format_reply(v).lstrip()}" for k, v in reply.items()
        )
    if isinstance(reply, (list, tuple, set)):
        items = list(reply)
        if not items:
            return f"{pad}(empty array)"
        lines = []
        for i, item in enumerate(items, start=1):
            if isinstance(item, (list, tuple, dict)):
                lines.append(f"{pad}{i})")
                lines.append(format_reply(item, indent + 3))
            else:
                lines.append(f"{pad}{i}) {format_reply(item).lstrip()}")
        return "\n".join(lines)
    return pad + str(reply)


def _translate_errors(method):
    """Re-raise redis errors as StoreError, logging the failing operation."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except redis.RedisError as e:
            logger.warning("store operation %s failed: %s", method.__name__, e)
            raise StoreError(str(e)) from e

    return wrapper


def raw_reply_client(connection: redis.Redis) -> redis.Redis:
    """Client on the same pool whose replies skip redis-py's response callbacks.

    Ad-hoc commands are shown as the server sent them (PING → PONG, not
    True), not as the typed values redis-py builds.
    """
    raw = redis.Redis(connection_pool=connection.connection_pool)
    raw.response_callbacks.clear()
    return raw


class RedisStoreClient:
    """StoreClient backed by a redis.Redis connection pool.

    Typed operations use the regular client. execute() uses a second client
    on the same pool without response callbacks.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 6379, db: int = 0,
                 password: str | None = None, connection=None, command_connection=None):
        self._host = host
        self._port = port
        self._db = db
        self._redis = connection if connection is not None else redis.Redis(
            host=host,
            port=port,
            db=db,
            password=password or None,
            decode_responses=True,
        )
        if command_connection is None:
            command_connection = (
                self._redis if connection is not None else raw_reply_client(self._redis)
            )
        self._commands = command_connection

    @property
    def address(self) -> str:
        return f"{self._host}:{self._port}"

    @_translate_errors
    def scan(self, cursor: int, pattern: str, limit: int) -> tuple[list[str], int]:
        next_cursor, keys = self._redis.scan(cursor=cursor, match=pattern or "*", count=limit)
        return list(keys), int(next_cursor)

    @_translate_errors
    def keys_by_pattern(self, pattern: str) -> list[str]:
        return list(self._redis.keys(pattern))

    @_translate_errors
    def key_type(self, key: str) -> str:
        return str(self._redis.type(key))

    @_translate_errors
    def ttl(self, key: str) -> str:
        return format_ttl(int(self._redis.ttl(key)))

    @_translate_errors
    def get(self, key: str) -> str:
        value = self._redis.get(key)
        if value is None:
            raise StoreError(f"key {key} does not exist")
        return value

    @_translate_errors
    def list_range(self, key: str, start: int, stop: int) -> list[str]:
        return list(self._redis.lrange(key, start, stop))

    @_translate_errors
    def set_members(self, key: str) -> list[str]:
        return list(self._redis.smembers(key))

    @_translate_errors
    def ranked_range_with_scores(self, key: str, start: int, stop: int) -> list[RankedMember]:
        pairs = self._redis.zrange(key, start, stop, withscores=True)
        return [RankedMember(member=str(m), score=float(s)) for m, s in pairs]

    @_translate_errors
    def hash_field_names(self, key: str) -> list[str]:
        return list(self._redis.hkeys(key))

    @_translate_errors
    def hash_field_get(self, key: str, field: str) -> str:
        value = self._redis.hget(key, field)
        if value is None:
            raise StoreError(f"field {field} does not exist in {key}")
        return value

    @_translate_errors
    def execute(self, command_text: str) -> str:
        try:
            parts = shlex.split(command_text)
        except ValueError as e:
            raise StoreError(f"cannot parse command: {e}") from e
        if not parts:
            raise StoreError("empty command")
        return format_reply(self._commands.execute_command(*parts))

    @_translate_errors
    def server_status_text(self) -> str:
        info = self._redis.info()
        db_info = info.get(f"db{self._db}", {})
        keys = db_info.get("keys", 0) if isinstance(db_info, dict) else 0
        return "\n".join([
            " Server: {} db{} | Redis {} | Mode: {} | Uptime: {}d".format(
                self.address,
                self._db,
                info.get("redis_version", "?"),
                info.get("redis_mode", "?"),
                info.get("uptime_in_days", 0),
            ),
            " Clients: {} | Memory: {} | Keys: {}".format(
                info.get("connected_clients", 0),
                info.get("used_memory_human", "?"),
                keys,
            ),
        ])

    def close(self) -> None:
        """Release pooled connections."""
        self._redis.close()
