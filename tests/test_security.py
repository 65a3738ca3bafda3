import pytest

pytest.importorskip("swisseph")

from astro_api.middleware.ratelimit import reset_counters  # noqa: E402

PHENO = "/v1/pheno"
PARAMS = {"dt": "2024-03-20T12:00:00", "bodies": "su"}


def test_reject_without_key(monkeypatch, client):
    monkeypatch.setenv("AUTH_ENABLED", "true")
    r = client.get(PHENO, params=PARAMS)
    assert r.status_code == 401


def test_reject_with_invalid_key(monkeypatch, client):
    monkeypatch.setenv("AUTH_ENABLED", "true")
    monkeypatch.setenv("API_KEYS", "valid123")
    r = client.get(PHENO, params=PARAMS, headers={"Authorization": "Bearer nope"})
    assert r.status_code == 403


def test_allow_with_valid_key(monkeypatch, client):
    monkeypatch.setenv("AUTH_ENABLED", "true")
    monkeypatch.setenv("API_KEYS", "valid123")
    r = client.get(PHENO, params=PARAMS, headers={"Authorization": "Bearer valid123"})
    assert r.status_code == 200
    r = client.get(PHENO, params=PARAMS, headers={"X-API-Key": "valid123"})
    assert r.status_code == 200


def test_health_is_public(monkeypatch, client):
    monkeypatch.setenv("AUTH_ENABLED", "true")
    assert client.get("/__health").status_code == 200


def test_rate_limit(monkeypatch, client):
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "true")
    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "2")
    monkeypatch.setenv("AUTH_ENABLED", "false")
    reset_counters()
    try:
        for i in range(3):
            r = client.get(PHENO, params=PARAMS)
            if i < 2:
                assert r.status_code == 200
        assert r.status_code == 429
        assert "Retry-After" in r.headers
    finally:
        reset_counters()
