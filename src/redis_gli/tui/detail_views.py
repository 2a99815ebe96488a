"""Detail view variants and the per-type fetchers that produce them.

Pure data, no widgets. Fetching runs on a worker thread; rendering a
variant into widgets is detail_router's job.

// [LAW:dataflow-not-control-flow] Type dispatch is the FETCHERS table, not branching.
// [LAW:one-type-per-behavior] set rows render exactly like list rows (ListDetail).
"""

from collections.abc import Callable
from dataclasses import dataclass

from redis_gli.store.protocol import RankedMember, StoreClient

# Most elements shown for a list or sorted set. Store range stops are inclusive.
RANGE_LIMIT = 1000


@dataclass(frozen=True)
class NoDetail:
    """Nothing inspected yet (welcome screen)."""


@dataclass(frozen=True)
class ScalarDetail:
    value: str


@dataclass(frozen=True)
class ListDetail:
    items: tuple[str, ...]


@dataclass(frozen=True)
class RankedDetail:
    members: tuple[RankedMember, ...]


@dataclass(frozen=True)
class HashDetail:
    key: str
    fields: tuple[str, ...]


DetailView = NoDetail | ScalarDetail | ListDetail | RankedDetail | HashDetail


@dataclass(frozen=True)
class KeyInspection:
    """Everything fetched for one key selection. view is None for unsupported types."""

    key: str
    key_type: str
    ttl: str
    view: DetailView | None

    @property
    def summary(self) -> str:
        return f"query {self.key} OK, type={self.key_type}, ttl={self.ttl}"

    @property
    def meta_text(self) -> str:
        return f"KeyID: {self.key}\nType: {self.key_type}, TTL: {self.ttl}"


def row_format(index: int, item) -> str:
    """1-based row label used by every list-like panel."""
    return f"{index + 1:3d} | {item}"


def score_format(score: float) -> str:
    return f"    Score: {score:g}"


def _fetch_string(client: StoreClient, key: str) -> ScalarDetail:
    return ScalarDetail(client.get(key))


def _fetch_list(client: StoreClient, key: str) -> ListDetail:
    return ListDetail(tuple(client.list_range(key, 0, RANGE_LIMIT - 1)))


def _fetch_set(client: StoreClient, key: str) -> ListDetail:
    return ListDetail(tuple(client.set_members(key)))


def _fetch_zset(client: StoreClient, key: str) -> RankedDetail:
    return RankedDetail(tuple(client.ranked_range_with_scores(key, 0, RANGE_LIMIT - 1)))


def _fetch_hash(client: StoreClient, key: str) -> HashDetail:
    return HashDetail(key, tuple(client.hash_field_names(key)))


FETCHERS: dict[str, Callable[[StoreClient, str], DetailView]] = {
    "string": _fetch_string,
    "list": _fetch_list,
    "set": _fetch_set,
    "zset": _fetch_zset,
    "hash": _fetch_hash,
}


def inspect_key(client: StoreClient, key: str) -> KeyInspection:
    """Fetch type, TTL and payload, in that order. StoreError propagates."""
    key_type = client.key_type(key)
    ttl = client.ttl(key)
    fetcher = FETCHERS.get(key_type)
    view = fetcher(client, key) if fetcher is not None else None
    return KeyInspection(key=key, key_type=key_type, ttl=ttl, view=view)
