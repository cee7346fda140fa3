import json
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import places as places_router
from services.place_sources import BundleSource

US_ROWS = [
    {"zipcode": "05401", "place": "Burlington", "state": "Vermont", "state_code": "VT"},
    {"zipcode": "05402", "place": "Burlington", "state": "Vermont", "state_code": "VT"},
    {"zipcode": "05403", "place": "South Burlington", "state": "Vermont", "state_code": "VT"},
    {"zipcode": "53105", "place": "Burlington", "state": "Wisconsin", "state_code": "WI"},
    {"zipcode": "98233", "place": "Burlington", "state": "Washington", "state_code": "WA"},
    {"zipcode": "26710", "place": "Burlington", "state": "West Virginia", "state_code": "WV"},
    {"zipcode": "82411", "place": "Burlington", "state": "Wyoming", "state_code": "WY"},
    {"zipcode": "97420", "place": "Coos Bay", "state": "Oregon", "state_code": "OR"},
]
CA_ROWS = [
    {"zipcode": "M5A", "place": "Toronto", "state": "Ontario", "state_code": "ON"},
    {"zipcode": "K1A", "place": "Ottawa", "state": "Ontario", "state_code": "ON"},
]
MX_ROWS = [
    {"codigo_postal": "20000", "estado": "Aguascalientes"},
    {"codigo_postal": "44100", "estado": "Jalisco"},
]


@pytest.fixture
def client(tmp_path, monkeypatch):
    for country, rows in (("us", US_ROWS), ("ca", CA_ROWS), ("mx", MX_ROWS)):
        (tmp_path / f"zipcodes.{country}.json").write_text(json.dumps(rows), encoding="utf-8")

    settings = places_router.settings
    monkeypatch.setattr(settings, "PLACES_COUNTRIES", ["us", "ca", "mx"])
    monkeypatch.setattr(settings, "PLACES_CACHE_ENABLED", False)
    monkeypatch.setattr(settings, "AUTOCOMPLETE_MAX_RESULTS", 50)
    monkeypatch.setattr(settings, "AUTOCOMPLETE_DEFAULT_LIMIT", 10)
    monkeypatch.setattr(settings, "AUTOCOMPLETE_MIN_QUERY_LENGTH", 3)

    app = FastAPI()
    app.include_router(places_router.router)
    with patch.object(places_router, "get_place_source", return_value=BundleSource(tmp_path)):
        yield TestClient(app)


def test_lookup_us_city_state(client):
    resp = client.get("/api/us", params={"city": "Burlington", "state": "WI"})
    assert resp.status_code == 200
    assert resp.json() == {"city": "Burlington", "state": "WI", "zip": "53105"}


def test_lookup_is_case_insensitive(client):
    resp = client.get("/api/us", params={"city": "burlington", "state": "wi"})
    assert resp.status_code == 200
    assert resp.json()["zip"] == "53105"


def test_lookup_canada_uses_province(client):
    resp = client.get("/api/ca", params={"city": "toronto", "province": "on"})
    assert resp.status_code == 200
    assert resp.json() == {"city": "Toronto", "province": "ON", "postal_code": "M5A"}


def test_lookup_region_only_country(client):
    resp = client.get("/api/mx", params={"state": "jalisco"})
    assert resp.status_code == 200
    assert resp.json() == {"state": "Jalisco", "postal_code": "44100"}


def test_lookup_not_found(client):
    resp = client.get("/api/us", params={"city": "NonExistentCity", "state": "ZZ"})
    assert resp.status_code == 404
    assert resp.json()["detail"]["error"] == "Not found"


def test_lookup_missing_parameters(client):
    resp = client.get("/api/us", params={"city": "Burlington"})
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["error"] == "Missing required parameters"
    assert detail["required"] == ["city", "state"]


def test_unknown_country_lists_endpoints(client):
    resp = client.get("/api/zz", params={"city": "Paris", "state": "FR"})
    assert resp.status_code == 404
    assert "/api/us?city=Burlington&state=WI" in resp.json()["detail"]["available_endpoints"]


def test_postal_reverse_lookup(client):
    resp = client.get("/api/us/postal/05401")
    assert resp.status_code == 200
    data = resp.json()
    assert data["zip"] == "05401"
    assert data["places"] == [{"city": "Burlington", "state": "VT", "zip": "05401"}]

    assert client.get("/api/us/postal/99999").status_code == 404


def test_countries(client):
    resp = client.get("/api/countries")
    assert resp.status_code == 200
    assert [c["code"] for c in resp.json()] == ["us", "ca", "mx"]


def test_autocomplete_partial_region(client):
    resp = client.get("/api/us/autocomplete", params={"q": "burlington w"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["mode"] == "city"
    assert [r["display"] for r in data["results"]] == [
        "Burlington, WA",
        "Burlington, WI",
        "Burlington, WV",
        "Burlington, WY",
    ]


def test_autocomplete_city_fallback(client):
    resp = client.get("/api/us/autocomplete", params={"q": "coos b"})
    results = resp.json()["results"]
    assert [r["display"] for r in results] == ["Coos Bay, OR"]
    assert results[0]["postal_code"] == "97420"


def test_autocomplete_postal_prefix(client):
    resp = client.get("/api/us/autocomplete", params={"q": "0540"})
    data = resp.json()
    assert data["mode"] == "postal_code"
    assert [r["value"] for r in data["results"]] == ["05401", "05402", "05403"]


def test_autocomplete_canadian_postal_prefix(client):
    resp = client.get("/api/ca/autocomplete", params={"q": "m5a"})
    assert [r["value"] for r in resp.json()["results"]] == ["M5A"]


def test_autocomplete_region_mode(client):
    resp = client.get("/api/mx/autocomplete", params={"q": "calient"})
    data = resp.json()
    assert data["mode"] == "region"
    assert [r["display"] for r in data["results"]] == ["Aguascalientes"]


def test_autocomplete_respects_limit(client):
    resp = client.get("/api/us/autocomplete", params={"q": "burl", "limit": 2})
    assert len(resp.json()["results"]) == 2


def test_autocomplete_no_matches_is_empty_list(client):
    resp = client.get("/api/us/autocomplete", params={"q": "zzzz"})
    assert resp.status_code == 200
    assert resp.json()["results"] == []


def test_autocomplete_rejects_short_query(client):
    resp = client.get("/api/us/autocomplete", params={"q": " bu "})
    assert resp.status_code == 400


def test_autocomplete_data_unavailable_is_503(client, tmp_path):
    (tmp_path / "zipcodes.us.json").unlink()
    resp = client.get("/api/us/autocomplete", params={"q": "burl"})
    assert resp.status_code == 503
    assert resp.json()["detail"]["error"] == "Data unavailable"
