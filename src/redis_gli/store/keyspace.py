"""Key listing on top of the StoreClient protocol."""

from redis_gli.store.protocol import StoreClient

MATCH_ALL = ("", "*")


def list_keys(client: StoreClient, pattern: str, limit: int) -> list[str]:
    """Return keys matching pattern.

    The match-all pattern walks SCAN until `limit` keys are collected or the
    cursor wraps. Any other pattern is a single KEYS call, uncapped.
    """
    if pattern not in MATCH_ALL:
        return client.keys_by_pattern(pattern)

    keys: list[str] = []
    cursor = 0
    while True:
        batch, cursor = client.scan(cursor, "*", limit)
        keys.extend(batch)
        if cursor == 0 or len(keys) >= limit:
            break
    return keys[:limit]
