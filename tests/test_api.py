# tests/test_api.py

"""
Test cases for the Flask JSON API
Run: pytest tests/test_api.py -v
"""

import pytest

from threat_rl.api import create_app
from threat_rl.engine import SeverityEngine

SNAPSHOT = {
    "cves": [
        {"id": "CVE-1", "features": {"expert_engagement": 3, "peak_velocity": 0, "total_engagement": 10},
         "ground_truth_severity": "critical"},
        {"id": "CVE-2", "features": {"expert_engagement": 2, "peak_velocity": 0, "total_engagement": 5},
         "ground_truth_severity": "critical"},
        {"id": "CVE-3", "features": {"expert_engagement": 1, "peak_velocity": 0, "total_engagement": 4},
         "ground_truth_severity": "medium"},
        {"id": "CVE-4", "features": {"expert_engagement": 0, "peak_velocity": 0, "total_engagement": 1},
         "ground_truth_severity": "high"},
        {"id": "CVE-5", "features": {"expert_engagement": 0, "peak_velocity": 300, "total_engagement": 900}},
    ]
}


class TestRLApi:

    @pytest.fixture
    def engine(self):
        return SeverityEngine()

    @pytest.fixture
    def client(self, engine):
        app = create_app(engine)
        app.config["TESTING"] = True
        return app.test_client()

    def test_import_and_stats(self, client):
        res = client.put("/api/rl/corpus", json=SNAPSHOT)
        assert res.status_code == 200
        assert res.get_json()["corpus_size"] == 5

        stats = client.get("/api/rl/stats").get_json()
        assert stats["success"] is True
        assert stats["state"] == "loaded"
        assert stats["beliefs"]["critical"] == {"success_count": 1, "failure_count": 1}

    def test_train(self, client):
        client.put("/api/rl/corpus", json=SNAPSHOT)
        data = client.post("/api/rl/train").get_json()
        assert data["accuracy"] == 0.5
        assert data["sample_count"] == 4
        assert data["state"] == "trained"

    def test_train_progressive(self, client):
        client.put("/api/rl/corpus", json=SNAPSHOT)
        data = client.post("/api/rl/train-progressive").get_json()
        weeks = data["learning_progress"]
        assert [w["sample_count"] for w in weeks] == [1, 2, 3, 4]
        assert [w["accuracy"] for w in weeks] == [1.0, 0.5, pytest.approx(2 / 3), 0.5]

    def test_predictions_limit(self, client):
        client.put("/api/rl/corpus", json=SNAPSHOT)
        data = client.get("/api/rl/predictions?limit=2").get_json()
        assert data["total"] == 5
        assert [p["id"] for p in data["predictions"]] == ["CVE-1", "CVE-2"]

        assert client.get("/api/rl/predictions?limit=-1").status_code == 400

    def test_export(self, client):
        client.put("/api/rl/corpus", json=SNAPSHOT)
        data = client.get("/api/rl/corpus").get_json()
        assert [r["id"] for r in data["cves"]] == [r["id"] for r in SNAPSHOT["cves"]]

    def test_bad_corpus_rejected(self, client, engine):
        """Test: malformed snapshot → 400, engine untouched"""
        client.put("/api/rl/corpus", json=SNAPSHOT)
        res = client.put("/api/rl/corpus", json={"cves": [{"id": "x", "features": {"expert_engagement": "lots"}}]})
        assert res.status_code == 400
        assert res.get_json()["success"] is False
        assert engine.corpus_size() == 5

    def test_missing_body(self, client):
        res = client.put("/api/rl/corpus", data="nope", content_type="text/plain")
        assert res.status_code == 400

    def test_load_flow(self, client):
        data = client.post("/api/rl/load", json=SNAPSHOT).get_json()
        assert data["success"] is True
        assert data["stats"]["total_predictions"] == 4
        assert len(data["predictions"]) == 5
        assert len(data["learning_progress"]) == 4
        # annotations survive the trailing full retrain
        assert data["predictions"][0]["training_batch"]["global_position"] == 1

    def test_adhoc_predict(self, client, engine):
        res = client.post("/api/rl/predict", json={"features": {"expert_engagement": 3}})
        [prediction] = res.get_json()["predictions"]
        assert prediction["id"] == "adhoc-1"
        assert prediction["predicted_severity"] == "critical"
        assert prediction["confidence"] == 0.5
        assert engine.corpus_size() == 0

    def test_report(self, client):
        client.post("/api/rl/load", json=SNAPSHOT)
        metrics = client.get("/api/rl/report").get_json()["metrics"]
        assert metrics["sample_count"] == 4
        assert metrics["accuracy"] == 0.5

    def test_unknown_route_is_json(self, client):
        res = client.get("/api/rl/nothing")
        assert res.status_code == 404
        assert res.get_json()["success"] is False
