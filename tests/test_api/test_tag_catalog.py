"""Tests for the tag catalog endpoint."""

from fastapi.testclient import TestClient

from tokensa.api.app import create_app
from tokensa.models.tags import SymptomTag


class TestTagCatalog:
    """Tests for GET /api/tags."""

    def test_catalog(self, settings):
        response = TestClient(create_app(settings)).get("/api/tags")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == len(SymptomTag)
        assert set(data["domains"]) == {"Lecture", "Écriture"}
        assert SymptomTag.ECRITURE_GRAPHOMOTRICITE_DYSGRAPHIE.value in (
            data["domains"]["Écriture"]["Graphomotricité"]
        )
