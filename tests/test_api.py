"""Tests for the HTTP API in main.py."""

import pytest
from fastapi.testclient import TestClient

from lesson_core.dictionary import DictionaryStore
from lesson_core.main import create_app

LESSON = {
    "chinese": "你好！我很好，谢谢你。",
    "sentences": [
        {"chinese": "你好！", "english": "Hello!"},
        {"chinese": "我很好，谢谢你。", "english": "I'm fine, thank you."},
    ],
}


@pytest.fixture
def client(sample_dict):
    return TestClient(create_app(store=DictionaryStore.from_mapping(sample_dict)))


class TestDictionaryRoutes:
    def test_health(self, client):
        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["ok"] is True

    def test_stats_loads_dictionary(self, client):
        resp = client.get("/dict/stats")

        assert resp.json() == {"entry_count": 10, "loaded": True}

    def test_lookup(self, client):
        resp = client.get("/dict/国")

        assert resp.status_code == 200
        assert resp.json()["traditional"] == "國"

    def test_lookup_missing(self, client):
        assert client.get("/dict/猫").status_code == 404

    def test_missing_dictionary_file(self, tmp_path):
        client = TestClient(create_app(store=DictionaryStore(tmp_path / "missing.json")))

        assert client.get("/dict/stats").status_code == 503


class TestVocabularyRoutes:
    def test_extract(self, client, monkeypatch):
        import lesson_core.vocabulary as vocabulary_module

        monkeypatch.setattr(vocabulary_module.jieba, "lcut", lambda text, cut_all=False: ["你好", "！"])

        resp = client.post("/vocabulary/extract", json={"text": "你好！"})

        body = resp.json()
        assert body["status"] == "complete"
        assert [it["chinese"] for it in body["items"]] == ["你", "好", "你好"]
        assert "error" not in body

    def test_expand(self, client, monkeypatch):
        import lesson_core.vocabulary as vocabulary_module

        monkeypatch.setattr(vocabulary_module.jieba, "lcut", lambda text, cut_all=False: ["谢谢"])

        resp = client.post(
            "/vocabulary/expand",
            json={"content": LESSON, "vocabulary": [{"chinese": "猫", "english": "cat"}]},
        )

        body = resp.json()
        assert body["original_count"] == 1
        assert body["items"][-1] == {"chinese": "猫", "english": "cat"}


class TestAlignmentRoute:
    def test_reconcile(self, client, timings_for):
        resp = client.post(
            "/alignment/reconcile",
            json={"content": LESSON, "alignment": {"characters": timings_for("你好我很好谢谢你")}},
        )

        assert resp.status_code == 200
        first = resp.json()["sentences"][0]
        assert first["timing"]["end"] == pytest.approx(0.4)
        assert first["english"] == "Hello!"

    def test_reconcile_keeps_null_fields(self, client, timings_for):
        content = {
            "chinese": "你好！再见。",
            "sentences": [
                {"chinese": "你好！", "english": "Hi", "audioUrl": None},
                {"chinese": "再见。", "english": "Bye", "audioUrl": None},
            ],
        }

        resp = client.post("/alignment/reconcile", json={"content": content, "alignment": timings_for("你好")})

        matched, skipped = resp.json()["sentences"]
        assert matched["audioUrl"] is None
        assert skipped == {"chinese": "再见。", "english": "Bye", "audioUrl": None}
        assert resp.json()["outcomes"][1]["status"] == "skipped_no_match"

    def test_empty_alignment(self, client):
        resp = client.post(
            "/alignment/reconcile",
            json={"content": LESSON, "alignment": {"characters": [], "words": []}},
        )

        assert resp.status_code == 400

    def test_bad_strategy(self, client, timings_for):
        resp = client.post(
            "/alignment/reconcile",
            json={"content": LESSON, "alignment": timings_for("你好"), "strategy": "nearest"},
        )

        assert resp.status_code == 422
