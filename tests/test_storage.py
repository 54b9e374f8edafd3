from lfp.storage import KeyValueStore, make_geocode_cache_key


def test_key_value_round_trip(tmp_path):
    store = KeyValueStore(str(tmp_path / "kv.db"))
    try:
        assert store.get_item("missing") is None
        store.set_item("k", "v1")
        store.set_item("k", "v2")
        assert store.get_item("k") == "v2"
        assert store.dump_items() == {"k": "v2"}
        store.remove_item("k")
        assert store.get_item("k") is None
    finally:
        store.close()


def test_geocode_cache_round_trip(tmp_path):
    store = KeyValueStore(str(tmp_path / "kv.db"))
    try:
        key = make_geocode_cache_key("https://geo.example/search", "Stuttgart")
        assert store.get_geocode_cache(key) is None
        store.set_geocode_cache(key, "Stuttgart", [{"lat": "48.7", "lon": "9.1"}])
        assert store.get_geocode_cache(key) == [{"lat": "48.7", "lon": "9.1"}]
    finally:
        store.close()


def test_geocode_cache_key_normalizes_query():
    url = "https://geo.example/search"
    assert make_geocode_cache_key(url, "  Stuttgart  Mitte ") == make_geocode_cache_key(url, "stuttgart mitte")
    assert make_geocode_cache_key(url, "Ulm") != make_geocode_cache_key(url, "Stuttgart")


def test_close_is_idempotent(tmp_path):
    store = KeyValueStore(str(tmp_path / "kv.db"))
    store.close()
    store.close()
