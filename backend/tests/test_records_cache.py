from domain.models import PlaceRecord
from services.records_cache import RecordsCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


RECORDS = [PlaceRecord("05401", "Burlington", "VT", "Vermont")]


def test_put_and_get_until_ttl_expires():
    clock = FakeClock()
    cache = RecordsCache(ttl_seconds=10, clock=clock)
    cache.put("bundle:us", iter(RECORDS))

    clock.now += 5
    assert cache.get("bundle:us") == tuple(RECORDS)

    clock.now += 10
    assert cache.get("bundle:us") is None


def test_zero_ttl_never_expires():
    clock = FakeClock()
    cache = RecordsCache(ttl_seconds=0, clock=clock)
    cache.put("bundle:us", RECORDS)
    clock.now += 10 ** 9
    assert cache.get("bundle:us") == tuple(RECORDS)


def test_get_or_load_calls_loader_once():
    calls = {"count": 0}

    def loader():
        calls["count"] += 1
        return iter(RECORDS)

    cache = RecordsCache(ttl_seconds=60)
    first = cache.get_or_load("bundle:us", loader)
    second = cache.get_or_load("bundle:us", loader)

    assert first == second == tuple(RECORDS)
    assert calls["count"] == 1


def test_invalidate_one_or_all():
    cache = RecordsCache(ttl_seconds=60)
    cache.put("bundle:us", RECORDS)
    cache.put("bundle:ca", RECORDS)

    cache.invalidate("bundle:us")
    assert cache.get("bundle:us") is None
    assert cache.get("bundle:ca") is not None

    cache.invalidate()
    assert cache.get("bundle:ca") is None
