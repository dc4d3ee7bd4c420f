"""
History/gallery ledger and key-value store tests.

Run with:
    python -m pytest tests/test_ledger.py -v
"""

import json
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import Config
from services.orchestrator.state import AspectRatio, HistoryEntry, Resolution, VideoAsset
from services.storage import InMemoryStore, JsonFileStore, Ledger


def make_entry(prompt: str) -> HistoryEntry:
    return HistoryEntry(
        prompt=prompt,
        aspect_ratio=AspectRatio.PORTRAIT,
        resolution=Resolution.HD,
    )


def make_asset(asset_id: str) -> VideoAsset:
    return VideoAsset(
        id=asset_id,
        url=f"output/video_{asset_id}.mp4",
        prompt="Cinematic neon alley",
        aspect_ratio=AspectRatio.LANDSCAPE,
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def ledger(store):
    ledger = Ledger(store, config=Config())
    ledger.load()
    return ledger


class TestHistory:
    """Capped, newest-first history."""

    def test_history_capped_at_twenty_newest_first(self, ledger, store):
        for i in range(25):
            ledger.append_history(make_entry(f"p{i}"))

        assert len(ledger.history) == 20
        assert ledger.history[0].prompt == "p24"
        assert ledger.history[-1].prompt == "p5"

        persisted = json.loads(store.get("veo_history"))
        assert len(persisted) == 20
        assert persisted[0]["prompt"] == "p24"

    def test_history_is_written_through(self, ledger, store):
        ledger.append_history(make_entry("neon alley"))

        reloaded = Ledger(store, config=Config())
        reloaded.load()

        assert [e.prompt for e in reloaded.history] == ["neon alley"]

    def test_history_never_stores_frames(self, ledger, store):
        entry = make_entry("a fox")
        entry.has_start_frame = True
        ledger.append_history(entry)

        persisted = json.loads(store.get("veo_history"))[0]

        assert persisted["has_start_frame"] is True
        assert set(persisted) == {
            "id", "timestamp", "prompt", "aspect_ratio", "resolution",
            "has_start_frame", "has_end_frame",
        }

    def test_clear_history(self, ledger, store):
        ledger.append_history(make_entry("a fox"))

        ledger.clear_history()

        assert ledger.history == []
        assert store.get("veo_history") is None

    def test_returned_list_is_a_copy(self, ledger):
        ledger.append_history(make_entry("a fox"))

        ledger.history.clear()

        assert len(ledger.history) == 1


class TestGallery:
    """Saved videos."""

    def test_append_and_delete(self, ledger, store):
        ledger.append_gallery(make_asset("aaaa1111"))
        ledger.append_gallery(make_asset("bbbb2222"))

        assert [a.id for a in ledger.gallery] == ["bbbb2222", "aaaa1111"]

        ledger.delete_gallery("aaaa1111")

        assert [a.id for a in ledger.gallery] == ["bbbb2222"]
        assert [a["id"] for a in json.loads(store.get("veo_videos"))] == ["bbbb2222"]

    def test_delete_unknown_id_is_noop(self, ledger):
        ledger.append_gallery(make_asset("aaaa1111"))
        before = ledger.gallery

        ledger.delete_gallery("does-not-exist")

        assert ledger.gallery == before

    def test_get_gallery_and_known_ids(self, ledger):
        ledger.append_gallery(make_asset("aaaa1111"))
        entry = make_entry("a fox")
        ledger.append_history(entry)

        assert ledger.get_gallery("aaaa1111").aspect_ratio is AspectRatio.LANDSCAPE
        assert ledger.get_gallery("missing") is None
        assert ledger.known_ids() == {"aaaa1111", entry.id}


class TestLoadFailOpen:
    """Corrupt stored data loads as empty collections."""

    @pytest.mark.parametrize("raw", ["not json", "{}", '[{"prompt": 1}]', '"a string"'])
    def test_bad_history_loads_empty(self, raw, caplog):
        store = InMemoryStore({"veo_history": raw})
        ledger = Ledger(store, config=Config())

        ledger.load()

        assert ledger.history == []
        assert "veo_history" in caplog.text

    def test_bad_gallery_does_not_affect_history(self):
        history = json.dumps([make_entry("a fox").model_dump(mode="json")])
        store = InMemoryStore({"veo_history": history, "veo_videos": "[[["})
        ledger = Ledger(store, config=Config())

        ledger.load()

        assert len(ledger.history) == 1
        assert ledger.gallery == []

    def test_oversized_history_truncated_on_load(self):
        entries = [make_entry(f"p{i}").model_dump(mode="json") for i in range(30)]
        store = InMemoryStore({"veo_history": json.dumps(entries)})
        ledger = Ledger(store, config=Config())

        ledger.load()

        assert len(ledger.history) == 20
        assert ledger.history[0].prompt == "p0"

    def test_missing_keys_load_empty(self, store):
        ledger = Ledger(store, config=Config())
        ledger.load()

        assert ledger.history == []
        assert ledger.gallery == []


class TestJsonFileStore:
    """File-backed store."""

    def test_survives_reopen(self, tmp_path):
        path = tmp_path / "ledger.json"
        JsonFileStore(str(path)).set("veo_history", "[]")

        assert JsonFileStore(str(path)).get("veo_history") == "[]"
        assert not (tmp_path / "ledger.json.tmp").exists()

    def test_default_path_from_config(self, tmp_path, monkeypatch):
        path = tmp_path / "from_env.json"
        monkeypatch.setenv("VEO_LEDGER_PATH", str(path))

        store = JsonFileStore(config=Config())
        store.set("veo_history", "[]")

        assert store.path == path
        assert json.loads(path.read_text(encoding="utf-8")) == {"veo_history": "[]"}

    def test_remove(self, tmp_path):
        path = tmp_path / "ledger.json"
        store = JsonFileStore(str(path))
        store.set("veo_videos", "[]")

        store.remove("veo_videos")
        store.remove("never-set")

        assert JsonFileStore(str(path)).get("veo_videos") is None

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("{ broken", encoding="utf-8")

        store = JsonFileStore(str(path))

        assert store.get("veo_history") is None
        store.set("veo_history", "[]")
        assert json.loads(path.read_text(encoding="utf-8")) == {"veo_history": "[]"}

    def test_non_object_file_starts_empty(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        assert JsonFileStore(str(path)).get("veo_history") is None

    def test_ledger_round_trip_through_file(self, tmp_path):
        path = str(tmp_path / "nested" / "ledger.json")
        ledger = Ledger(JsonFileStore(path), config=Config())
        ledger.load()
        ledger.append_gallery(make_asset("aaaa1111"))

        reopened = Ledger(JsonFileStore(path), config=Config())
        reopened.load()

        assert [a.id for a in reopened.gallery] == ["aaaa1111"]
