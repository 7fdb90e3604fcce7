"""API tests for the placement config admin routes."""

from fastapi.testclient import TestClient

from affinity_placement import main
from affinity_placement.placement_config import DEFAULT, PlacementConfig
from affinity_placement.services.placement_config import get_store


class TestPlacementConfigRoutes:
    """Tests for /placement-config."""

    def test_get_defaults(self, client):
        """Test the default config is served with document keys."""
        response = client.get("/placement-config")
        assert response.status_code == 200
        assert response.json() == DEFAULT.to_document()

    def test_put_valid(self, client, store):
        """Test a consistent document is stored and echoed."""
        document = {
            "minimalFreeDiskGB": 15,
            "withCollection": {"collectionA": "collectionB"},
            "withCollectionShards": {"collectionC": "collectionD"},
        }
        response = client.put("/placement-config", json=document)
        assert response.status_code == 200
        body = response.json()
        assert body["minimalFreeDiskGB"] == 15
        assert body["prioritizedFreeDiskGB"] == 100
        assert body["withCollectionShards"] == {"collectionC": "collectionD"}
        assert store.get().minimal_free_disk_gb == 15

    def test_put_conflict(self, client, store):
        """Test overlapping co-location maps are a client error."""
        response = client.put(
            "/placement-config",
            json={
                "withCollection": {"collectionA": "collectionB"},
                "withCollectionShards": {"collectionA": "collectionC"},
            },
        )
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == 400
        assert body["collections"] == ["collectionA"]
        assert "collectionA" in body["detail"]
        assert store.get() is DEFAULT

    def test_put_unknown_key(self, client):
        """Test schema errors are reported as 400."""
        response = client.put("/placement-config", json={"withCollections": {}})
        assert response.status_code == 400
        assert response.json()["collections"] == []

    def test_put_null_mapping(self, client):
        """Test explicit null mappings are rejected."""
        response = client.put("/placement-config", json={"collectionNodeType": None})
        assert response.status_code == 400
        assert "collectionNodeType" in response.json()["detail"]

    def test_put_list_body(self, client, store):
        """Test a non-object body gets the placement error body."""
        response = client.put("/placement-config", json=[1, 2])
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == 400
        assert "must be an object" in body["detail"]
        assert store.get() is DEFAULT

    def test_validate_list_body(self, client):
        """Test validation rejects a non-object body with a 400."""
        response = client.post("/placement-config/validate", json=["withCollection"])
        assert response.status_code == 400
        assert response.json()["collections"] == []

    def test_validate_only(self, client, store):
        """Test validation without storing."""
        response = client.post(
            "/placement-config/validate",
            json={"withCollection": {"x": "y"}, "collectionNodeType": {"x": "indexing"}},
        )
        assert response.status_code == 200
        assert response.json() == {"valid": True}
        assert store.get() is DEFAULT

    def test_validate_conflict(self, client):
        """Test validation reports conflicting collections."""
        response = client.post(
            "/placement-config/validate",
            json={
                "withCollection": {"a": "b", "c": "d"},
                "withCollectionShards": {"c": "e", "a": "f"},
            },
        )
        assert response.status_code == 400
        assert set(response.json()["collections"]) == {"a", "c"}

    def test_delete_resets(self, client, store):
        """Test reset to defaults."""
        store.set(PlacementConfig(1, 2))
        response = client.delete("/placement-config")
        assert response.status_code == 200
        assert response.json()["minimalFreeDiskGB"] == 20
        assert store.get() is DEFAULT

    def test_request_id_header(self, client):
        """Test the request id is echoed back."""
        response = client.get("/placement-config", headers={"x-request-id": "req-1"})
        assert response.headers["X-Request-ID"] == "req-1"


def test_health(client):
    """Test the health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_version_route_is_not_served(client):
    """Test only the health endpoint is exposed under system routes."""
    assert client.get("/version").status_code == 404


def test_startup_loads_configured_file(tmp_path, monkeypatch):
    """Test the configured document is installed when the app starts."""
    path = tmp_path / "placement.yaml"
    path.write_text("minimalFreeDiskGB: 42\n", encoding="utf-8")
    monkeypatch.setattr(
        main, "settings", main.settings.model_copy(update={"placement_config_file": str(path)})
    )
    try:
        with TestClient(main.app) as client:
            assert client.get("/placement-config").json()["minimalFreeDiskGB"] == 42
    finally:
        get_store().reset()
