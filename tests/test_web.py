#!/usr/bin/env python3
"""Tests for the Flask web app."""

import pytest

from models import ApiError, FileSiteStore, SiteStore, load_sites
from web.app import app


class FailingStore(SiteStore):
    def get_sites(self):
        raise ApiError("API error 503: maintenance")

    def get_groups(self):
        return []

    def save_sites(self, sites):
        raise ApiError("API error 503: maintenance")


@pytest.fixture
def store(sample_file):
    return FileSiteStore(sample_file)


@pytest.fixture
def client(store, monkeypatch):
    app.config["TESTING"] = True
    monkeypatch.setitem(app.config, "STORE", store)
    with app.test_client() as client:
        yield client


class TestPages:
    """Tests for HTML pages."""

    def test_index(self, client):
        response = client.get("/?as_of=2025-01-01")
        assert response.status_code == 200
        html = response.get_data(as_text=True)
        assert "Office building A" in html
        assert "1 task(s) need attention" in html

    def test_index_shows_groups(self, client):
        html = client.get("/").get_data(as_text=True)
        assert "Head office (1)" in html
        assert "LogiTech warehouses (1)" in html
        assert "#00539b" in html

    def test_index_group_filter(self, client):
        html = client.get("/?group=g3").get_data(as_text=True)
        assert "LogiTech warehouse</a>" in html
        assert "Office building A</a>" not in html

    def test_index_search(self, client):
        html = client.get("/?q=PRAGUE").get_data(as_text=True)
        assert "Office building A</a>" in html
        assert "LogiTech warehouse</a>" not in html

    def test_index_no_match(self, client):
        html = client.get("/?group=g2").get_data(as_text=True)
        assert "No sites match." in html

    def test_planner(self, client):
        html = client.get("/planner?as_of=2025-01-01").get_data(as_text=True)
        assert "Needs attention (1)" in html
        assert "Upcoming (3)" in html
        assert "Intrusion alarm panel" in html
        assert "Month: March 2025" in html

    def test_planner_bad_as_of_falls_back(self, client):
        response = client.get("/planner?as_of=someday")
        assert response.status_code == 200
        assert "Invalid date" in response.get_data(as_text=True)

    def test_calendar(self, client):
        html = client.get("/calendar?year=2025&month=3").get_data(as_text=True)
        assert "March 2025" in html
        assert "Annual fire alarm revision" in html
        assert "Revision: Office building A" in html
        assert "year=2025&amp;month=4" in html or "month=4&amp;year=2025" in html

    def test_calendar_december_links_to_january(self, client):
        html = client.get("/calendar?year=2024&month=12").get_data(as_text=True)
        assert "year=2025" in html

    @pytest.mark.parametrize("query", ["year=2025&month=13", "year=abc&month=1"])
    def test_calendar_bad_month(self, client, query):
        assert client.get(f"/calendar?{query}").status_code == 400

    def test_site_detail(self, client):
        html = client.get("/site/1").get_data(as_text=True)
        assert "Fire alarm control panel" in html
        assert "18Ah / 12V" in html
        assert "Periodic revision" in html

    def test_unknown_site_redirects(self, client):
        response = client.get("/site/99")
        assert response.status_code == 302

    def test_unreadable_site_data(self, client, sample_file):
        sample_file.write_text(sample_file.read_text().replace("status: HEALTHY", "status: OK"))
        response = client.get("/planner")
        assert response.status_code == 500
        html = response.get_data(as_text=True)
        assert "Unreadable site data" in html
        assert "Battery &#39;b1&#39;" in html

    def test_backend_failure(self, client, monkeypatch):
        monkeypatch.setitem(app.config, "STORE", FailingStore())
        response = client.get("/")
        assert response.status_code == 502
        assert "maintenance" in response.get_data(as_text=True)


class TestObjectsApi:
    """Tests for the /objects JSON endpoints."""

    def test_get_groups(self, client):
        data = client.get("/groups").get_json()
        assert [g["id"] for g in data] == ["g1", "g2", "g3"]
        assert data[0]["color"] == "#00539b"

    def test_get_objects(self, client):
        data = client.get("/objects").get_json()
        assert [s["id"] for s in data] == ["1", "2"]
        assert data[0]["technologies"][0]["batteries"][0]["nextReplacementDate"] == "2025-05-10"

    def test_post_objects_replaces_sites(self, client, store):
        payload = [{"id": "7", "name": "Depot", "technologies": []}]
        response = client.post("/objects", json=payload)

        assert response.status_code == 200
        assert response.get_json() == {"saved": 1}
        assert [s.name for s in load_sites(store.path)] == ["Depot"]
        assert [g.id for g in store.get_groups()] == ["g1", "g2", "g3"]

    def test_get_after_post(self, client):
        site = client.get("/objects").get_json()[1]
        site["name"] = "Renamed warehouse"
        client.post("/objects", json=[site])
        assert client.get("/objects").get_json()[0]["name"] == "Renamed warehouse"

    @pytest.mark.parametrize(
        "payload",
        [
            {"id": "7"},
            [{"id": "7", "title": "no name"}],
            [{"name": "No technologies"}],
            # nested records that would not load
            [{"id": "7", "name": "Depot", "technologies": [{"id": "t", "name": "Panel", "batteries": [{"id": "b", "capacityAh": 7}]}]}],
            [{"id": "7", "name": "Depot", "technologies": [{"id": "t", "name": "Panel"}]}],
            [{"id": "7", "name": "Depot", "technologies": [], "scheduledEvents": [{"id": "e", "title": "Check"}]}],
            [{"id": "7", "name": "Depot", "technologies": [], "logEntries": [{"id": "l", "date": "2025-01-01"}]}],
            [{"id": "7", "name": "Depot", "technologies": [], "contacts": [{"id": "c", "name": "Petra"}]}],
            [
                {
                    "id": "7",
                    "name": "Depot",
                    "technologies": [
                        {
                            "id": "t",
                            "name": "Panel",
                            "batteries": [{"id": "b", "capacityAh": 7, "voltageV": 12, "nextReplacementDate": "2025-01-01", "status": "OK"}],
                        }
                    ],
                }
            ],
        ],
    )
    def test_post_rejects_bad_payload(self, client, store, payload):
        before = store.path.read_text()
        response = client.post("/objects", json=payload)
        assert response.status_code == 400
        assert "error" in response.get_json()
        assert store.path.read_text() == before
