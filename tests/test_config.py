from speaking_assessor.config import Settings, _parse_cors_origins


def test_defaults():
    s = Settings()
    assert s.max_upload_size_mb == 100
    assert s.min_upload_size_bytes == 10000
    assert s.rate_limit == "10/minute"
    assert "http://localhost:5173" in s.cors_origins


def test_env_override(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT", "5/minute")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    s = Settings()
    assert s.rate_limit == "5/minute"
    assert s.log_level == "DEBUG"


def test_cors_origins_comma_separated(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
    assert _parse_cors_origins() == ["https://a.example", "https://b.example"]


def test_cors_origins_json(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", '["https://a.example"]')
    assert _parse_cors_origins() == ["https://a.example"]


def test_cors_origins_unset(monkeypatch):
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    assert _parse_cors_origins() is None
