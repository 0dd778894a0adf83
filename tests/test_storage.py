"""
記録の保存 (sessions / records / mistakes / wordlists) のテスト
"""

import json

import pytest

from kanatype import storage
from kanatype.models import SessionRecord, MistakeRecord, WordList
from tests.conftest import make_word


def make_session(session_id="sess-1", wpm=30, accuracy=95.5, mode="falling-words"):
    return SessionRecord(
        id=session_id, mode=mode, level=3, word_list_id="accounting", wpm=wpm,
        accuracy=accuracy, total_words=10, correct_words=8, duration=60000,
        timestamp="2024-04-01T00:00:00+00:00",
    )


class TestSessions:

    def test_empty(self, tmp_path):
        assert storage.load_sessions(tmp_path) == []
        assert storage.load_best_records(tmp_path) == {}

    def test_save_and_load(self, tmp_path):
        assert storage.save_session(make_session(), tmp_path) is True
        sessions = storage.load_sessions(tmp_path)
        assert sessions == [make_session()]

    def test_keeps_latest(self, tmp_path, monkeypatch):
        monkeypatch.setattr(storage, "MAX_SESSIONS", 3)
        for i in range(5):
            storage.save_session(make_session(f"sess-{i}"), tmp_path)
        assert [s.id for s in storage.load_sessions(tmp_path)] == ["sess-2", "sess-3", "sess-4"]

    def test_broken_file(self, tmp_path):
        (tmp_path / "sessions.json").write_text("{not json", encoding="utf-8")
        assert storage.load_sessions(tmp_path) == []

    def test_clear(self, tmp_path):
        storage.record_round(make_session(), tmp_path)
        storage.clear_sessions(tmp_path)
        assert storage.load_sessions(tmp_path) == []
        assert storage.load_best_records(tmp_path) == {}


class TestBestRecords:

    def test_best_values(self, tmp_path):
        storage.update_best_record("falling-words", 30, 90.0, tmp_path)
        storage.update_best_record("falling-words", 20, 97.5, tmp_path)
        records = storage.load_best_records(tmp_path)
        assert records["falling-words"] == {
            "best_wpm": 30, "best_accuracy": 97.5, "total_sessions": 2,
        }

    def test_record_round(self, tmp_path):
        assert storage.record_round(make_session(wpm=42), tmp_path) is True
        assert storage.load_best_records(tmp_path)["falling-words"]["best_wpm"] == 42
        assert len(storage.load_sessions(tmp_path)) == 1


class TestWriteFailure:

    def test_prunes_and_retries(self, tmp_path, monkeypatch):
        real_write = storage._write
        calls = []

        def flaky_write(key, value, data_dir=None):
            calls.append(key)
            if len(calls) == 1:
                raise OSError("disk full")
            real_write(key, value, data_dir)

        monkeypatch.setattr(storage, "_write", flaky_write)
        assert storage.save_session(make_session(), tmp_path) is True
        assert calls == ["sessions", "sessions", "sessions"]

    def test_gives_up(self, tmp_path, monkeypatch):
        def failing_write(key, value, data_dir=None):
            raise OSError("read-only")

        monkeypatch.setattr(storage, "_write", failing_write)
        assert storage.save_session(make_session(), tmp_path) is False

    def test_temporary_file_is_removed(self, tmp_path, monkeypatch):
        def failing_replace(src, dst):
            raise OSError("busy")

        monkeypatch.setattr(storage.os, "replace", failing_replace)
        assert storage.save_session(make_session(), tmp_path) is False
        assert list(tmp_path.iterdir()) == []


class TestBadlyShapedFiles:

    def test_sessions_object_instead_of_list(self, tmp_path):
        (tmp_path / "sessions.json").write_text("{}", encoding="utf-8")
        assert storage.load_sessions(tmp_path) == []
        assert storage.save_session(make_session(), tmp_path) is True
        assert [s.id for s in storage.load_sessions(tmp_path)] == ["sess-1"]

    def test_records_list_instead_of_object(self, tmp_path):
        (tmp_path / "records.json").write_text("[]", encoding="utf-8")
        assert storage.record_round(make_session(wpm=25), tmp_path) is True
        assert storage.load_best_records(tmp_path)["falling-words"]["best_wpm"] == 25

    def test_partial_record(self, tmp_path):
        (tmp_path / "records.json").write_text(
            json.dumps({"falling-words": {"best_wpm": 50}, "word-practice": "broken"}),
            encoding="utf-8")
        storage.update_best_record("falling-words", 30, 90.0, tmp_path)
        storage.update_best_record("word-practice", 10, 80.0, tmp_path)
        records = storage.load_best_records(tmp_path)
        assert records["falling-words"] == {"best_wpm": 50, "best_accuracy": 90.0, "total_sessions": 1}
        assert records["word-practice"]["total_sessions"] == 1

    def test_broken_items_are_skipped(self, tmp_path):
        (tmp_path / "mistakes.json").write_text(
            json.dumps([1, "x", {"word_id": "w1", "word": "broken"}]), encoding="utf-8")
        (tmp_path / "wordlists.json").write_text(
            json.dumps([None, {"id": "custom-1", "words": {"bad": 1}}]), encoding="utf-8")
        assert storage.load_mistakes(tmp_path) == []
        lists = storage.load_custom_word_lists(tmp_path)
        assert [(l.id, l.words) for l in lists] == [("custom-1", [])]


class TestMistakes:

    def test_upsert(self, tmp_path):
        word = make_word("w1", "資産", "しさん", "shisan")
        storage.record_mistake(MistakeRecord("w1", word, 1, "2024-04-01T00:00:00"), tmp_path)
        storage.record_mistake(MistakeRecord("w1", word, 2, "2024-04-02T00:00:00"), tmp_path)
        mistakes = storage.load_mistakes(tmp_path)
        assert len(mistakes) == 1
        assert mistakes[0].mistake_count == 2
        assert mistakes[0].word.reading == "しさん"

    def test_count_mistake(self, tmp_path):
        word = make_word("w1", "資産", "しさん", "shisan")
        other = make_word("w2", "負債", "ふさい", "fusai")
        assert storage.count_mistake(word, tmp_path) is True
        storage.count_mistake(word, tmp_path)
        storage.count_mistake(other, tmp_path)
        counts = {m.word_id: m.mistake_count for m in storage.load_mistakes(tmp_path)}
        assert counts == {"w1": 2, "w2": 1}
        assert all(m.last_mistake_at for m in storage.load_mistakes(tmp_path))


class TestCustomWordLists:

    @pytest.fixture
    def word_list(self):
        return WordList(id="custom-1", name="テスト", words=[make_word("w1", "資産", "しさん")])

    def test_save_and_load(self, tmp_path, word_list):
        assert storage.save_custom_word_list(word_list, tmp_path) is True
        loaded = storage.load_custom_word_lists(tmp_path)
        assert len(loaded) == 1
        assert loaded[0].name == "テスト"
        assert loaded[0].words[0].reading == "しさん"
        assert loaded[0].is_built_in is False

    def test_replace_same_id(self, tmp_path, word_list):
        storage.save_custom_word_list(word_list, tmp_path)
        word_list.name = "変更後"
        storage.save_custom_word_list(word_list, tmp_path)
        loaded = storage.load_custom_word_lists(tmp_path)
        assert [l.name for l in loaded] == ["変更後"]

    def test_delete(self, tmp_path, word_list):
        storage.save_custom_word_list(word_list, tmp_path)
        assert storage.delete_custom_word_list("custom-1", tmp_path) is True
        assert storage.load_custom_word_lists(tmp_path) == []

    def test_clear_all(self, tmp_path, word_list):
        storage.save_custom_word_list(word_list, tmp_path)
        storage.record_round(make_session(), tmp_path)
        storage.clear_all_data(tmp_path)
        assert list(tmp_path.iterdir()) == []
