"""Shared test fixtures and configuration for pytest."""
import json
from typing import Dict
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from watchwise_service.cache import TTLCache
from watchwise_service.clients import MetadataClient, RecommendationClient
from watchwise_service.models.base import Base
from watchwise_service.repos import BookmarkRepository

OMDB_URL = "http://omdb.test/"
ML_URL = "http://ml.test"


class FakeClock:
    """Manually advanced time source for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ===== Database Fixtures =====

@pytest.fixture(scope="function")
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_session_factory(test_db_engine):
    """Session factory bound to the in-memory database."""
    return sessionmaker(bind=test_db_engine)


@pytest.fixture(scope="function")
def test_db_session(test_session_factory):
    """Create a database session for testing."""
    session = test_session_factory()
    yield session
    session.close()


@pytest.fixture
def bookmark_repository(test_db_session):
    """BookmarkRepository backed by the test session."""
    return BookmarkRepository(test_db_session)


# ===== Cache & Client Fixtures =====

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def metadata_client(clock):
    """MetadataClient with a fake clock and 300s success TTL."""
    client = MetadataClient(
        api_key="test-key",
        base_url=OMDB_URL,
        cache=TTLCache(default_ttl=300, clock=clock),
        batch_cache=TTLCache(default_ttl=300, clock=clock),
        ttl=300,
        not_found_ttl=100,
        error_ttl=30,
        timeout=10,
        max_workers=4,
    )
    yield client
    client.close()


@pytest.fixture
def recommendation_client(clock):
    """RecommendationClient with a fake clock and 600s TTL."""
    client = RecommendationClient(
        base_url=ML_URL,
        recommendations_cache=TTLCache(default_ttl=600, clock=clock),
        top_shows_cache=TTLCache(default_ttl=600, clock=clock),
        ttl=600,
        timeout=10,
    )
    yield client
    client.close()


# ===== Sample Data Fixtures =====

@pytest.fixture
def omdb_payload() -> Dict:
    """OMDb response for Inception."""
    return {
        "Title": "Inception",
        "Year": "2010",
        "Rated": "PG-13",
        "Released": "16 Jul 2010",
        "Runtime": "148 min",
        "Genre": "Action, Adventure, Sci-Fi",
        "Director": "Christopher Nolan",
        "Plot": "A thief who steals corporate secrets through dream-sharing technology.",
        "Poster": "https://example.com/inception.jpg",
        "Ratings": [{"Source": "Internet Movie Database", "Value": "8.8/10"}],
        "imdbRating": "8.8",
        "imdbID": "tt1375666",
        "Type": "movie",
        "Response": "True",
    }


@pytest.fixture
def omdb_not_found_payload() -> Dict:
    return {"Response": "False", "Error": "Movie not found!"}


@pytest.fixture
def recommendations_payload() -> Dict:
    """Recommendation service response with a movie and a series."""
    return {
        "recommendations": [
            {
                "title": "Dune",
                "platform": "Netflix",
                "type": "Movie",
                "similarity_score": 0.91,
                "genres": "Sci-Fi, Adventure",
                "release_year": 2021,
                "rating": "PG-13",
            },
            {
                "title": "Stranger Things",
                "platform": "Netflix",
                "type": "TV Series",
                "similarity_score": 0.84,
                "genres": "Drama, Horror",
                "release_year": 2016,
                "rating": "TV-14",
            },
        ]
    }


@pytest.fixture
def make_omdb_record():
    """Factory for minimal OMDb payloads."""
    def _make(title: str, imdb_id: str, type_: str = "movie", **extra) -> Dict:
        payload = {"Title": title, "Year": "2020", "Rated": "PG", "imdbID": imdb_id, "Type": type_, "Response": "True"}
        payload.update(extra)
        return payload
    return _make


# ===== Configuration Fixtures =====

@pytest.fixture
def mock_config(monkeypatch):
    """Mock configuration values."""
    monkeypatch.setenv('DATABASE_URL', 'sqlite:///:memory:')
    monkeypatch.setenv('OMDB_API_KEY', 'test-key')
    monkeypatch.setenv('OMDB_BASE_URL', OMDB_URL)
    monkeypatch.setenv('ML_MODEL_ENDPOINT', ML_URL)
    monkeypatch.setenv('METADATA_CACHE_TTL', '900')
    monkeypatch.setenv('RECOMMENDATION_CACHE_TTL', '120')


@pytest.fixture
def mock_local_settings(tmp_path):
    """Write a local.settings.json file into tmp_path."""
    settings = {
        "Values": {
            "OMDB_API_KEY": "from-settings",
            "ML_MODEL_ENDPOINT": "http://settings-ml:8000",
        }
    }

    settings_file = tmp_path / "local.settings.json"
    with open(settings_file, 'w') as f:
        json.dump(settings, f)

    yield settings_file


# ===== Azure Functions Fixtures =====

@pytest.fixture
def mock_http_request():
    """Mock Azure Functions HttpRequest."""
    mock_req = Mock()
    mock_req.route_params = {}
    mock_req.params = {}
    mock_req.get_json.return_value = {}
    return mock_req
