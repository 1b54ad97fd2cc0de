import pytest

from macfleet.core import InventoryFetcher
from macfleet.core.auth import PROBE_PATH, TOKEN_PATH
from macfleet.core.inventory import SEARCH_LIST_PATH
from macfleet.errors import FetchError, FetchErrorKind
from macfleet.models import Token

from fakes import SEARCH_113, FakeResponse, computer, search_payload, token_response


@pytest.fixture
def fetcher(client, auth, cache):
    return InventoryFetcher(client, auth, cache)


def test_cache_miss_fetches_and_populates_cache(fetcher, http, session, cache):
    session.token = Token(value="t")
    payload = search_payload(computer(3), computer(1), computer(2))
    http.add("GET", SEARCH_113, FakeResponse(200, payload))

    devices = fetcher.fetch(session)

    assert [d.id for d in devices] == [1, 2, 3]
    assert cache.get("search_113") == payload
    assert http.calls_to("GET", SEARCH_113)[0].headers["Authorization"] == "Bearer t"


def test_second_fetch_within_ttl_uses_cache(fetcher, http, session, clock):
    session.token = Token(value="t")
    http.add("GET", SEARCH_113, FakeResponse(200, search_payload(computer(1))))

    first = fetcher.fetch(session)
    clock.advance(120)
    second = fetcher.fetch(session)

    assert first == second
    assert len(http.calls_to("GET", SEARCH_113)) == 1


def test_expired_cache_fetches_again(fetcher, http, session, clock):
    session.token = Token(value="t")
    http.add("GET", SEARCH_113, FakeResponse(200, search_payload(computer(1))))

    fetcher.fetch(session)
    clock.advance(301)
    fetcher.fetch(session)

    assert len(http.calls_to("GET", SEARCH_113)) == 2


def test_invalid_schema_is_not_cached(fetcher, http, session, cache):
    session.token = Token(value="t")
    http.add("GET", SEARCH_113, FakeResponse(200, {"computers": []}))

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch(session)

    assert excinfo.value.kind is FetchErrorKind.INVALID_SCHEMA
    assert cache.entries() == []


@pytest.mark.parametrize(
    ("status", "kind"),
    [
        (401, FetchErrorKind.UNAUTHORIZED),
        (403, FetchErrorKind.UNAUTHORIZED),
        (500, FetchErrorKind.CONNECTION_FAILED),
    ],
)
def test_http_errors(fetcher, http, session, status, kind):
    session.token = Token(value="t")
    http.add("GET", SEARCH_113, FakeResponse(status))

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch(session)
    assert excinfo.value.kind is kind
    assert excinfo.value.status_code == status


def test_fetch_acquires_token_when_missing(fetcher, http, session):
    http.add("POST", TOKEN_PATH, token_response("fresh"))
    http.add("GET", SEARCH_113, FakeResponse(200, search_payload(computer(1))))

    fetcher.fetch(session)

    assert session.token.value == "fresh"


def test_fetch_with_retry_refreshes_token_once(fetcher, http, session):
    session.token = Token(value="stale")
    http.add(
        "GET",
        SEARCH_113,
        FakeResponse(401),
        FakeResponse(200, search_payload(computer(7))),
    )
    http.add("GET", PROBE_PATH, FakeResponse(401), FakeResponse(200))
    http.add("POST", TOKEN_PATH, token_response("fresh"))

    devices = fetcher.fetch_with_retry(session)

    assert [d.id for d in devices] == [7]
    assert session.token.value == "fresh"
    assert len(http.calls_to("GET", SEARCH_113)) == 2


def test_fetch_with_retry_gives_up_after_second_failure(fetcher, http, session):
    session.token = Token(value="t")
    http.add("GET", SEARCH_113, FakeResponse(500))
    http.add("GET", PROBE_PATH, FakeResponse(200))

    with pytest.raises(FetchError):
        fetcher.fetch_with_retry(session)
    assert len(http.calls_to("GET", SEARCH_113)) == 2


def test_fetch_other_search_id(fetcher, http, session):
    session.token = Token(value="t")
    http.add(
        "GET",
        "/JSSResource/advancedcomputersearches/id/42",
        FakeResponse(200, search_payload(computer(9), search_id=42)),
    )

    assert [d.id for d in fetcher.fetch(session, "42")] == [9]


def test_invalidate_drops_cached_search(fetcher, http, session, cache):
    session.token = Token(value="t")
    http.add("GET", SEARCH_113, FakeResponse(200, search_payload(computer(1))))
    fetcher.fetch(session)

    fetcher.invalidate("113")

    assert cache.get("search_113") is None


def test_list_searches(fetcher, http, session):
    session.token = Token(value="t")
    http.add("GET", PROBE_PATH, FakeResponse(200))
    http.add(
        "GET",
        SEARCH_LIST_PATH,
        FakeResponse(
            200,
            {
                "advanced_computer_searches": [
                    {"id": 200, "name": "Laptops"},
                    {"id": 113, "name": "All Macs"},
                ]
            },
        ),
    )

    searches = fetcher.list_searches(session)

    assert [(s.id, s.name) for s in searches] == [(113, "All Macs"), (200, "Laptops")]
