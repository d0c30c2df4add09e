import pytest
from pydantic import ValidationError

from cafe_parking.core.config import Settings


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("PLACES_API_KEY", "  abc123 ")
    monkeypatch.setenv("PLACES_BASE_URL", "http://places.test/api/")
    monkeypatch.setenv("DEFAULT_SEARCH_RADIUS", "2500")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")
    monkeypatch.setenv("PARKING_TAGS_PATH", "")

    s = Settings(_env_file=None)

    assert s.PLACES_API_KEY == "abc123"
    assert s.PLACES_BASE_URL == "http://places.test/api"
    assert s.DEFAULT_SEARCH_RADIUS == 2500
    assert s.LOG_LEVEL == "DEBUG"
    assert s.CORS_ORIGINS == ["http://a.test", "http://b.test"]
    assert s.PARKING_TAGS_PATH is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"DEFAULT_SEARCH_RADIUS": 0},
        {"DEFAULT_SEARCH_RADIUS": 60000},
        {"MAX_SEARCH_RADIUS": 0},
        {"DEFAULT_SEARCH_RADIUS": 3000, "MAX_SEARCH_RADIUS": 2000},
    ],
)
def test_settings_reject_invalid_radius(overrides):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)
