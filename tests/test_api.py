"""
HTTP tests for the dashboard API.
"""
import pytest
from fastapi.testclient import TestClient
from loguru import logger

from facet_search import api
from facet_search.fuzzy_index import IndexCache


@pytest.fixture
def client(snapshot, monkeypatch):
    """Client over the sample snapshot; startup (file loading) is not run."""
    monkeypatch.setattr(api, "_snapshot", snapshot)
    monkeypatch.setattr(api, "_index_cache", IndexCache())
    return TestClient(api.app)


@pytest.fixture
def empty_client(monkeypatch):
    monkeypatch.setattr(api, "_snapshot", None)
    return TestClient(api.app)


def _ids(payload):
    return [item["id"] for item in payload["page"]["items"]]


@pytest.mark.parametrize(
    "width,expected",
    [(None, 8), (320, 2), (639, 2), (640, 4), (959, 4), (960, 6), (1279, 6), (1280, 8), (2560, 8)],
)
def test_items_per_page_for_width(width, expected):
    assert api.items_per_page_for_width(width) == expected


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_dashboard_without_snapshot_is_500(empty_client):
    response = empty_client.get("/zasoby")
    assert response.status_code == 500
    assert response.json()["detail"] == "Catalog not loaded"


def test_dashboard_root(client):
    response = client.get("/zasoby")
    assert response.status_code == 200
    body = response.json()
    assert body["page"]["total_items"] == 10
    assert body["page"]["page_size"] == 8
    assert body["has_active_filters"] is False
    assert body["url"] == "/zasoby"


def test_dashboard_topic_path(client):
    body = client.get("/zasoby/matematyka/algebra", params={"page_size": 2}).json()
    assert body["selection"]["subject_id"] == "s-math"
    assert body["selection"]["topic_ids"] == ["t-alg"]
    assert body["page"]["total_items"] == 4
    assert body["page"]["total_pages"] == 2
    assert len(body["page"]["items"]) == 2


def test_dashboard_level_and_language_params(client):
    body = client.get("/zasoby?level=l-basic&language=pl").json()
    assert sorted(_ids(body)) == ["r2", "r8"]
    assert body["selection"]["level_ids"] == ["l-basic"]
    assert body["selection"]["languages"] == ["pl"]


def test_dashboard_viewport_width_picks_page_size(client):
    body = client.get("/zasoby", params={"viewport_width": 700}).json()
    assert body["page"]["page_size"] == 4
    assert len(body["page"]["items"]) == 4


def test_dashboard_page_is_clamped(client):
    body = client.get("/zasoby", params={"page": 99, "page_size": 4}).json()
    assert body["page"]["page"] == 3
    assert _ids(body) == ["r9", "r10"]


def test_dashboard_sort_and_subtopics(client):
    body = client.get(
        "/zasoby/matematyka/algebra",
        params={"sort": "alphabetical", "include_subtopics": "false"},
    ).json()
    assert _ids(body) == ["r4", "r9"]


def test_dashboard_keeps_query_and_dashboard_flags_in_url(client):
    body = client.get("/zasoby?q=rownania&favorites=true&page_size=4").json()
    assert body["url"] == "/zasoby?q=rownania&favorites=true"
    assert body["selection"]["query"] == "rownania"
    assert {"r2", "r3"} <= set(_ids(body))


def test_dashboard_rejects_unknown_sort(client):
    assert client.get("/zasoby", params={"sort": "bogus"}).status_code == 422


def test_dashboard_rejects_bad_page_size(client):
    assert client.get("/zasoby", params={"page_size": 0}).status_code == 422


def test_articles(client):
    assert client.get("/articles").json() == {"articles": []}
    slugs = [a["slug"] for a in client.get("/articles", params={"q": "mechanika"}).json()["articles"]]
    assert slugs == ["fizyka-na-co-dzien"]


def test_suggestions(client):
    assert client.get("/suggestions", params={"q": "r"}).json() == {"suggestions": []}
    assert client.get("/suggestions", params={"q": "pythag"}).json() == {
        "suggestions": ["Pythagorean Theorem Explained", "Pythagorean puzzles"]
    }


def test_languages(client):
    assert client.get("/languages").json() == [
        {"code": "de", "name": "Niemiecki"},
        {"code": "en", "name": "Angielski"},
        {"code": "pl", "name": "Polski"},
    ]


def test_subject_topics(client):
    nodes = client.get("/subjects/matematyka/topics").json()
    assert [n["id"] for n in nodes] == ["t-geo", "t-alg"]
    assert [c["id"] for c in nodes[1]["children"]] == ["t-quad", "t-lin"]


def test_subject_topics_unknown_subject(client):
    assert client.get("/subjects/nope/topics").status_code == 404


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    """Point the file sink at a temporary directory and drop it afterwards."""
    monkeypatch.setattr(api, "LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(api, "_log_sink_id", None)
    yield tmp_path / "logs"
    if api._log_sink_id is not None:
        logger.remove(api._log_sink_id)


def test_repeated_startup_adds_one_file_sink(client, log_dir):
    api.startup_event()
    first = api._log_sink_id
    api.startup_event()

    assert first is not None
    assert api._log_sink_id == first
    assert api.add_file_sink() == first
    assert (log_dir / "facet_search.log").exists()
