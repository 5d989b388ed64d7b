import pytest
import requests
import responses

from auction_ingest.config import GeocoderConfig
from auction_ingest.geocode import GeocodingClient

SEARCH_URL = "http://kakao.test/v2/local/search/address.json"

FOUND = {
    "meta": {"total_count": 2},
    "documents": [
        {"address_name": "서울 강남구 역삼동 123-4", "x": "127.036508", "y": "37.500070"},
        {"address_name": "서울 강남구 역삼동 123-40", "x": "127.1", "y": "37.6"},
    ],
}


@pytest.fixture
def geocoder():
    return GeocodingClient(GeocoderConfig(
        base_url="http://kakao.test",
        api_key="test-kakao-key",
        max_attempts=3,
        retry_delay=0,
    ))


@responses.activate
def test_resolve_returns_first_document(geocoder):
    responses.get(SEARCH_URL, json=FOUND, status=200)

    coord = geocoder.resolve("서울시 강남구 역삼동 123-4")

    assert coord.latitude == pytest.approx(37.500070)
    assert coord.longitude == pytest.approx(127.036508)
    assert coord.address_name == "서울 강남구 역삼동 123-4"
    request = responses.calls[0].request
    assert request.headers["Authorization"] == "KakaoAK test-kakao-key"
    assert "query=" in request.url


@pytest.mark.parametrize("address", [None, "", "   "])
@responses.activate
def test_blank_address_skips_the_call(geocoder, address):
    assert geocoder.resolve(address) is None
    assert len(responses.calls) == 0


@responses.activate
def test_no_documents_is_none(geocoder):
    responses.get(SEARCH_URL, json={"documents": []}, status=200)
    assert geocoder.resolve("어딘가 없는 주소") is None


@responses.activate
def test_server_error_is_retried_until_success(geocoder):
    responses.get(SEARCH_URL, status=503)
    responses.get(SEARCH_URL, status=500)
    responses.get(SEARCH_URL, json=FOUND, status=200)

    coord = geocoder.resolve("서울시 강남구 역삼동 123-4")

    assert coord is not None
    assert len(responses.calls) == 3


@responses.activate
def test_gives_up_after_three_attempts(geocoder):
    responses.get(SEARCH_URL, status=500)

    assert geocoder.resolve("서울시 강남구 역삼동 123-4") is None
    assert len(responses.calls) == 3


@responses.activate
def test_timeouts_are_retried(geocoder):
    responses.get(SEARCH_URL, body=requests.ReadTimeout("read timed out"))
    responses.get(SEARCH_URL, json=FOUND, status=200)

    assert geocoder.resolve("서울시 강남구 역삼동 123-4") is not None
    assert len(responses.calls) == 2


@pytest.mark.parametrize("status", [400, 401, 403])
@responses.activate
def test_client_error_is_not_retried(geocoder, status):
    responses.get(SEARCH_URL, json={"errorType": "InvalidArgument"}, status=status)

    assert geocoder.resolve("서울시 강남구 역삼동 123-4") is None
    assert len(responses.calls) == 1


@responses.activate
def test_document_without_coordinates_is_none(geocoder):
    responses.get(SEARCH_URL, json={"documents": [{"address_name": "x"}]}, status=200)
    assert geocoder.resolve("서울시 강남구 역삼동 123-4") is None


@responses.activate
def test_rate_limited_answer_is_retried(geocoder):
    responses.get(SEARCH_URL, json={"errorType": "RateLimitExceeded"}, status=429)
    responses.get(SEARCH_URL, json=FOUND, status=200)

    assert geocoder.resolve("서울시 강남구 역삼동 123-4") is not None
    assert len(responses.calls) == 2


@responses.activate
def test_retry_log_names_the_attempt(geocoder, caplog):
    responses.get(SEARCH_URL, status=502)
    responses.get(SEARCH_URL, json=FOUND, status=200)

    geocoder.resolve("서울시 강남구 역삼동 123-4")

    assert "_search_once attempt 1/3 failed" in caplog.text


class RecordingSession(requests.Session):
    def __init__(self):
        super().__init__()
        self.timeouts = []

    def request(self, method, url, **kwargs):
        self.timeouts.append(kwargs.get("timeout"))
        return super().request(method, url, **kwargs)


@responses.activate
def test_search_carries_connect_and_read_timeouts():
    session = RecordingSession()
    geocoder = GeocodingClient(
        GeocoderConfig(base_url="http://kakao.test", api_key="k", connect_timeout=4, read_timeout=9),
        session=session,
    )
    responses.get(SEARCH_URL, json=FOUND, status=200)

    geocoder.resolve("서울시 강남구 역삼동 123-4")

    assert session.timeouts == [(4, 9)]
