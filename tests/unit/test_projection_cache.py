from portfolio.domain.models import Kind
from portfolio.services.cache import ProjectionCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = ProjectionCache(ttl_s=60, clock=clock)
    calls = []

    def load():
        calls.append(1)
        return len(calls)

    assert cache.get_or_load("k", {Kind.skill}, load) == 1
    clock.now += 59
    assert cache.get_or_load("k", {Kind.skill}, load) == 1
    clock.now += 2
    assert cache.get_or_load("k", {Kind.skill}, load) == 2


def test_invalidate_only_drops_matching_tags():
    cache = ProjectionCache(ttl_s=60)
    cache.get_or_load("skills", {Kind.skill}, lambda: "s")
    cache.get_or_load("links", {Kind.social_link}, lambda: "l")
    cache.get_or_load("home", set(Kind), lambda: "h")

    assert cache.invalidate(Kind.skill) == 2
    assert list(cache._entries) == ["links"]


def test_zero_ttl_never_stores():
    cache = ProjectionCache(ttl_s=0)
    cache.get_or_load("k", {Kind.skill}, lambda: "v")
    assert len(cache) == 0


def test_load_racing_an_invalidation_is_not_stored():
    cache = ProjectionCache(ttl_s=60)

    def load():
        # a write lands while the projection is being built
        cache.invalidate(Kind.project)
        return "stale"

    assert cache.get_or_load("projects", {Kind.project}, load) == "stale"
    assert len(cache) == 0
    assert cache.get_or_load("projects", {Kind.project}, lambda: "fresh") == "fresh"
    assert len(cache) == 1
