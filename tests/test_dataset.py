import json

import requests

from lfp.dataset import load_records, load_records_outcome
from lfp.http import HttpClient
from lfp.outcome import DegradeReason


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.headers = {}

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append(url)
        return self.response


def _client(response):
    client = HttpClient(timeout=1, retry_max=1, backoff_base=0.0, backoff_max=0.0)
    client.session = FakeSession(response)
    return client


def test_load_records_from_file(tmp_path):
    path = tmp_path / "lfp.json"
    records = [{"Einrichtung": "Zoo", "PLZ": "70000"}, {"Einrichtung": "Museum"}]
    path.write_text(json.dumps(records, ensure_ascii=False), encoding="utf-8")
    assert load_records(str(path)) == records


def test_load_records_missing_file_is_empty(tmp_path):
    outcome = load_records_outcome(str(tmp_path / "missing.json"))
    assert outcome.value == []
    assert outcome.reason is DegradeReason.NETWORK_FAILURE


def test_load_records_corrupt_file_is_empty(tmp_path):
    path = tmp_path / "lfp.json"
    path.write_text("[{broken", encoding="utf-8")
    assert load_records(str(path)) == []


def test_load_records_drops_non_objects(tmp_path):
    path = tmp_path / "lfp.json"
    path.write_text(json.dumps([{"Einrichtung": "Zoo"}, 3, "x", None]), encoding="utf-8")
    outcome = load_records_outcome(str(path))
    assert outcome.value == [{"Einrichtung": "Zoo"}]
    assert outcome.reason is DegradeReason.MALFORMED_RECORD


def test_load_records_accepts_wrapped_list(tmp_path):
    path = tmp_path / "lfp.json"
    path.write_text(json.dumps({"records": [{"Einrichtung": "Zoo"}]}), encoding="utf-8")
    assert load_records(str(path)) == [{"Einrichtung": "Zoo"}]


def test_load_records_from_url():
    client = _client(FakeResponse([{"Einrichtung": "Zoo"}]))
    assert load_records("https://data.example/lfp.json", http_client=client) == [{"Einrichtung": "Zoo"}]
    assert client.session.calls == ["https://data.example/lfp.json"]


def test_load_records_url_failure_is_empty():
    client = _client(FakeResponse({}, status_code=404))
    outcome = load_records_outcome("https://data.example/lfp.json", http_client=client)
    assert outcome.value == []
    assert outcome.reason is DegradeReason.NETWORK_FAILURE


def test_load_records_url_bad_json_is_empty():
    client = _client(FakeResponse(ValueError("not json")))
    assert load_records("https://data.example/lfp.json", http_client=client) == []
