"""Unit tests for MetadataClient."""
import time
from unittest.mock import patch

import pytest
import requests

from watchwise_service.cache import TTLCache
from watchwise_service.clients.metadata_client import MetadataClient, is_imdb_id
from watchwise_service.schemas import MetadataRecord

OMDB_URL = "http://omdb.test/"


def register_titles(requests_mock, records, delays=None):
    """Serve OMDb lookups from a dict keyed by lowercased title or id."""
    delays = delays or {}

    def _callback(request, context):
        query = (request.qs.get("t") or request.qs.get("i"))[0]
        time.sleep(delays.get(query, 0))
        if query in records:
            return records[query]
        return {"Response": "False", "Error": "Movie not found!"}

    return requests_mock.get(OMDB_URL, json=_callback)


class TestIsImdbId:
    """Tests for the identifier pattern."""

    @pytest.mark.parametrize("value,expected", [
        ("tt1375666", True),
        ("tt0", True),
        ("Inception", False),
        ("tt", False),
        ("tt12ab", False),
        ("xtt123", False),
    ])
    def test_is_imdb_id(self, value, expected):
        assert is_imdb_id(value) is expected


class TestMetadataClientInit:
    """Tests for MetadataClient initialization."""

    def test_init_reads_config(self, mock_config):
        # Act
        client = MetadataClient()

        # Assert
        assert client.api_key == "test-key"
        assert client.base_url == OMDB_URL
        assert client.ttl == 900
        assert client.not_found_ttl == 300
        assert client.error_ttl < client.not_found_ttl < client.ttl

    def test_init_configures_retry_strategy(self):
        # Act
        client = MetadataClient(api_key="k", base_url=OMDB_URL)

        # Assert
        adapter = client.session.get_adapter("https://omdb.test")
        assert adapter.max_retries.total == 3
        assert 429 in adapter.max_retries.status_forcelist


class TestFetchOne:
    """Tests for fetch_one."""

    def test_fetch_one_returns_record(self, metadata_client, requests_mock, omdb_payload):
        # Arrange
        requests_mock.get(OMDB_URL, json=omdb_payload)

        # Act
        result = metadata_client.fetch_one("Inception")

        # Assert
        assert isinstance(result, MetadataRecord)
        assert result.title == "Inception"
        assert result.rated == "PG-13"
        assert result.imdb_id == "tt1375666"
        assert result.ratings[0].value == "8.8/10"

    def test_fetch_one_twice_issues_one_request(self, metadata_client, requests_mock, omdb_payload):
        # Arrange
        requests_mock.get(OMDB_URL, json=omdb_payload)

        # Act
        first = metadata_client.fetch_one("Inception")
        second = metadata_client.fetch_one("Inception")

        # Assert
        assert first == second
        assert requests_mock.call_count == 1

    def test_cache_key_ignores_case_and_whitespace(self, metadata_client, requests_mock, omdb_payload):
        # Arrange
        requests_mock.get(OMDB_URL, json=omdb_payload)

        # Act
        metadata_client.fetch_one("Inception")
        metadata_client.fetch_one("  INCEPTION ")

        # Assert
        assert requests_mock.call_count == 1

    def test_fetch_one_refetches_after_ttl(self, metadata_client, requests_mock, omdb_payload, clock):
        # Arrange
        requests_mock.get(OMDB_URL, json=omdb_payload)
        metadata_client.fetch_one("Inception")

        # Act
        clock.advance(301)
        metadata_client.fetch_one("Inception")

        # Assert
        assert requests_mock.call_count == 2

    def test_title_is_sent_as_t_param(self, metadata_client, requests_mock, omdb_payload):
        # Arrange
        requests_mock.get(OMDB_URL, json=omdb_payload)

        # Act
        metadata_client.fetch_one("Inception")

        # Assert
        assert requests_mock.last_request.qs == {"apikey": ["test-key"], "t": ["inception"]}

    def test_imdb_id_is_sent_as_i_param(self, metadata_client, requests_mock, omdb_payload):
        # Arrange
        requests_mock.get(OMDB_URL, json=omdb_payload)

        # Act
        metadata_client.fetch_one("tt1375666")

        # Assert
        assert requests_mock.last_request.qs == {"apikey": ["test-key"], "i": ["tt1375666"]}

    def test_fetch_one_uses_timeout(self, metadata_client, requests_mock, omdb_payload):
        # Arrange
        requests_mock.get(OMDB_URL, json=omdb_payload)

        # Act
        metadata_client.fetch_one("Inception")

        # Assert
        assert requests_mock.last_request.timeout == 10

    def test_blank_input_returns_none_without_request(self, metadata_client, requests_mock):
        # Act
        result = metadata_client.fetch_one("   ")

        # Assert
        assert result is None
        assert requests_mock.call_count == 0


class TestFetchOneNegativeCaching:
    """Tests for failure handling in fetch_one."""

    def test_not_found_payload_returns_none(self, metadata_client, requests_mock, omdb_not_found_payload):
        # Arrange
        requests_mock.get(OMDB_URL, json=omdb_not_found_payload)

        # Act
        result = metadata_client.fetch_one("Nonexistent Film")

        # Assert
        assert result is None

    def test_not_found_is_cached_until_short_ttl(self, metadata_client, requests_mock, omdb_not_found_payload, clock):
        # Arrange
        requests_mock.get(OMDB_URL, json=omdb_not_found_payload)
        metadata_client.fetch_one("Nonexistent Film")

        # Act & Assert - retry inside the not-found TTL is served from cache
        clock.advance(99)
        assert metadata_client.fetch_one("Nonexistent Film") is None
        assert requests_mock.call_count == 1

        # After the not-found TTL (shorter than the success TTL) it is retried
        clock.advance(2)
        metadata_client.fetch_one("Nonexistent Film")
        assert requests_mock.call_count == 2
        assert metadata_client.not_found_ttl < metadata_client.ttl

    def test_http_404_is_treated_as_not_found(self, metadata_client, requests_mock, clock):
        # Arrange
        requests_mock.get(OMDB_URL, status_code=404, json={"error": "Movie not found"})

        # Act
        result = metadata_client.fetch_one("Missing")
        clock.advance(50)
        metadata_client.fetch_one("Missing")

        # Assert
        assert result is None
        assert requests_mock.call_count == 1

    def test_error_field_is_treated_as_not_found(self, metadata_client, requests_mock):
        # Arrange
        requests_mock.get(OMDB_URL, json={"error": "Movie not found"})

        # Act & Assert
        assert metadata_client.fetch_one("Missing") is None

    def test_network_error_returns_none_and_uses_error_ttl(self, metadata_client, requests_mock, clock):
        # Arrange
        requests_mock.get(OMDB_URL, exc=requests.exceptions.ConnectionError)

        # Act
        result = metadata_client.fetch_one("Inception")
        clock.advance(29)
        metadata_client.fetch_one("Inception")

        # Assert
        assert result is None
        assert requests_mock.call_count == 1

        clock.advance(2)
        metadata_client.fetch_one("Inception")
        assert requests_mock.call_count == 2

    def test_server_error_returns_none(self, metadata_client, requests_mock):
        # Arrange
        requests_mock.get(OMDB_URL, status_code=500)

        # Act & Assert
        assert metadata_client.fetch_one("Inception") is None

    def test_non_json_body_returns_none(self, metadata_client, requests_mock):
        # Arrange
        requests_mock.get(OMDB_URL, text="<html>oops</html>")

        # Act & Assert
        assert metadata_client.fetch_one("Inception") is None

    def test_malformed_record_returns_none(self, metadata_client, requests_mock):
        # Arrange - no Title
        requests_mock.get(OMDB_URL, json={"Year": "2010", "Response": "True"})

        # Act & Assert
        assert metadata_client.fetch_one("Inception") is None

    def test_missing_api_key_returns_none_without_request(self, requests_mock, monkeypatch, clock):
        # Arrange
        monkeypatch.delenv("OMDB_API_KEY", raising=False)
        with patch("watchwise_service.clients.metadata_client.get_omdb_api_key", return_value=None):
            client = MetadataClient(base_url=OMDB_URL, cache=TTLCache(clock=clock), ttl=300)

        # Act
        result = client.fetch_one("Inception")

        # Assert
        assert result is None
        assert requests_mock.call_count == 0


class TestFetchBatch:
    """Tests for fetch_batch."""

    def test_empty_batch_returns_empty_list(self, metadata_client, requests_mock):
        assert metadata_client.fetch_batch([]) == []
        assert requests_mock.call_count == 0

    def test_results_follow_input_order(self, metadata_client, requests_mock, make_omdb_record):
        # Arrange - the first title answers last
        records = {
            "alpha": make_omdb_record("Alpha", "tt1"),
            "beta": make_omdb_record("Beta", "tt2"),
            "gamma": make_omdb_record("Gamma", "tt3"),
        }
        register_titles(requests_mock, records, delays={"alpha": 0.2, "gamma": 0.1})

        # Act
        results = metadata_client.fetch_batch(["Alpha", "Beta", "Gamma"])

        # Assert
        assert [r.title for r in results] == ["Alpha", "Beta", "Gamma"]

    def test_missing_titles_are_none_at_their_position(self, metadata_client, requests_mock, make_omdb_record):
        # Arrange
        register_titles(requests_mock, {"alpha": make_omdb_record("Alpha", "tt1")})

        # Act
        results = metadata_client.fetch_batch(["Unknown", "Alpha"])

        # Assert
        assert results[0] is None
        assert results[1].title == "Alpha"

    def test_only_uncached_titles_are_requested(self, metadata_client, requests_mock, make_omdb_record):
        # Arrange
        records = {
            "alpha": make_omdb_record("Alpha", "tt1"),
            "beta": make_omdb_record("Beta", "tt2"),
            "gamma": make_omdb_record("Gamma", "tt3"),
        }
        register_titles(requests_mock, records)
        metadata_client.fetch_one("Beta")

        # Act
        results = metadata_client.fetch_batch(["Alpha", "Beta", "Gamma"])

        # Assert
        assert requests_mock.call_count == 3
        assert [r.title for r in results] == ["Alpha", "Beta", "Gamma"]

    def test_duplicate_titles_are_fetched_once(self, metadata_client, requests_mock, make_omdb_record):
        # Arrange
        register_titles(requests_mock, {"alpha": make_omdb_record("Alpha", "tt1")})

        # Act
        results = metadata_client.fetch_batch(["Alpha", "ALPHA", "alpha"])

        # Assert
        assert requests_mock.call_count == 1
        assert all(r.title == "Alpha" for r in results)

    def test_batch_cache_ignores_order_and_case(self, metadata_client, requests_mock, make_omdb_record):
        # Arrange
        records = {"a": make_omdb_record("A", "tt1"), "b": make_omdb_record("B", "tt2")}
        register_titles(requests_mock, records)
        metadata_client.fetch_batch(["B", "A"])
        metadata_client.cache.clear()

        # Act
        results = metadata_client.fetch_batch(["a", "b"])

        # Assert - served from the batch entry, realigned to the new order
        assert requests_mock.call_count == 2
        assert [r.title for r in results] == ["A", "B"]

    def test_batch_key_is_case_and_order_insensitive(self):
        assert MetadataClient.batch_key(["b", "a", "a"]) == MetadataClient.batch_key(["a", "b"])

    def test_incomplete_batch_expires_with_not_found_ttl(
            self, metadata_client, requests_mock, make_omdb_record, clock
    ):
        # Arrange
        register_titles(requests_mock, {"a": make_omdb_record("A", "tt1")})
        metadata_client.fetch_batch(["A", "Missing"])

        # Act
        clock.advance(101)
        batch_hit, _ = metadata_client.batch_cache.lookup(MetadataClient.batch_key(["a", "missing"]))

        # Assert
        assert batch_hit is False

    def test_batch_never_raises(self, metadata_client, requests_mock):
        # Arrange
        requests_mock.get(OMDB_URL, exc=requests.exceptions.Timeout)

        # Act
        results = metadata_client.fetch_batch(["A", "B"])

        # Assert
        assert results == [None, None]

    def test_unexpected_error_in_lookup_becomes_none(self, metadata_client):
        # Arrange
        with patch.object(metadata_client, "_fetch", side_effect=RuntimeError("boom")):
            # Act
            results = metadata_client.fetch_batch(["A", "B"])

        # Assert
        assert results == [None, None]

    def test_batch_with_failed_lookups_expires_with_error_ttl(
            self, metadata_client, requests_mock, make_omdb_record, clock
    ):
        # Arrange - upstream is down for the first batch
        requests_mock.get(OMDB_URL, exc=requests.exceptions.ConnectionError)
        assert metadata_client.fetch_batch(["A", "B"]) == [None, None]
        register_titles(requests_mock, {"a": make_omdb_record("A", "tt1"), "b": make_omdb_record("B", "tt2")})

        # Act
        clock.advance(31)
        single = metadata_client.fetch_one("A")
        results = metadata_client.fetch_batch(["A", "B"])

        # Assert
        assert single.title == "A"
        assert [r.title for r in results] == ["A", "B"]

    def test_batch_built_from_cached_failure_does_not_outlive_it(
            self, metadata_client, requests_mock, make_omdb_record, clock
    ):
        # Arrange - "B" failed earlier and its negative entry is still cached
        register_titles(requests_mock, {"a": make_omdb_record("A", "tt1")})
        metadata_client.cache.set("b", None, metadata_client.error_ttl)
        metadata_client.fetch_batch(["A", "B"])

        # Act
        clock.advance(31)
        batch_hit, _ = metadata_client.batch_cache.lookup(MetadataClient.batch_key(["a", "b"]))

        # Assert
        assert batch_hit is False

    def test_complete_batch_uses_full_ttl(self, metadata_client, requests_mock, make_omdb_record, clock):
        # Arrange
        register_titles(requests_mock, {"a": make_omdb_record("A", "tt1")})
        metadata_client.fetch_batch(["A"])

        # Act
        clock.advance(299)
        batch_hit, _ = metadata_client.batch_cache.lookup(MetadataClient.batch_key(["a"]))

        # Assert
        assert batch_hit is True
