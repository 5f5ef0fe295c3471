"""
Unit tests for the HTTP adapter.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from sis_policy.config import PolicyConfig
from sis_policy.exceptions import ConfigurationError
from sis_policy.repositories import MongoRelationshipLookup
from sis_policy.routing import create_app, create_mongo_app


@pytest.fixture
def client(lookup, policy_config):
    return TestClient(create_app(lookup, policy_config))


@pytest.mark.unit
class TestPolicyEndpoint:
    """Test POST /policies/{resource_type}."""

    def test_decision(self, client):
        response = client.post(
            "/policies/grade",
            json={"action": "canViewGrade", "userId": "student1", "userRole": "student", "gradeId": "grade1"},
        )
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "allowed": True,
            "reason": "Student viewing own grades",
        }

    def test_invalid_json(self, client):
        response = client.post(
            "/policies/attendance",
            content=b"{oops",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid JSON in request body"

    def test_unknown_action(self, client):
        response = client.post(
            "/policies/student",
            json={"action": "canFly", "userId": "admin1", "userRole": "admin"},
        )
        assert response.status_code == 400
        assert response.json()["validActions"] == [
            "canView",
            "canEdit",
            "canDelete",
            "canCreate",
            "filterStudents",
        ]

    def test_unknown_resource_type(self, client):
        response = client.post(
            "/policies/library", json={"action": "canView", "userId": "u", "userRole": "admin"}
        )
        assert response.status_code == 404
        assert response.json()["validResourceTypes"] == [
            "assignment",
            "attendance",
            "grade",
            "student",
        ]

    def test_lookup_stored_on_app(self, lookup, policy_config):
        app = create_app(lookup, policy_config)
        assert app.state.lookup is lookup
        assert set(app.state.dispatchers) == {"assignment", "attendance", "grade", "student"}

    def test_invalid_config_rejected(self, lookup):
        with pytest.raises(ConfigurationError):
            create_app(lookup, PolicyConfig(marking_window_start=20, marking_window_end=8))


@pytest.mark.unit
class TestMongoApp:
    """Test the MongoDB-backed application factory."""

    def test_requires_database_settings(self):
        with pytest.raises(ConfigurationError):
            create_mongo_app(PolicyConfig())

    def test_uses_shared_client(self, mock_mongo_database):
        config = PolicyConfig(mongo_uri="mongodb://localhost:27017", db_name="school")
        client = {"school": mock_mongo_database}

        with patch("sis_policy.routing.app.get_shared_mongo_client", return_value=client) as get:
            app = create_mongo_app(config)

        get.assert_called_once_with("mongodb://localhost:27017")
        assert isinstance(app.state.lookup, MongoRelationshipLookup)
