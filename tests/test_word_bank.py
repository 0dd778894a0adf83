"""
単語帳 (内蔵・カスタム・JSON 読み込み) のテスト
"""

import json
import random

import pytest
import requests

from kanatype import word_bank
from kanatype.matching import is_correct_input


class FakeResponse:

    def __init__(self, data, status_code=200):
        self.data = data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self.data


@pytest.fixture
def json_file(tmp_path):
    def write(items, name="tax.json"):
        path = tmp_path / name
        path.write_text(json.dumps(items, ensure_ascii=False), encoding="utf-8")
        return str(path)
    return write


class TestBuiltIn:

    def test_accounting_list(self, tmp_path):
        word_list = word_bank.get_word_list_by_id("accounting", tmp_path)
        assert word_list.is_built_in is True
        assert word_list.name == "会計・財務"
        assert len(word_list.words) == 28

    def test_every_hint_is_accepted(self, tmp_path):
        for word in word_bank.get_word_list_by_id("accounting", tmp_path).words:
            assert is_correct_input(word.romaji, word), word.japanese

    def test_unknown_list(self, tmp_path):
        assert word_bank.get_word_list_by_id("missing", tmp_path) is None

    def test_select_words(self, tmp_path):
        hard = word_bank.select_words(["accounting"], min_difficulty=3, data_dir=tmp_path)
        assert len(hard) == 7
        assert all(w.difficulty >= 3 for w in hard)
        assert word_bank.select_words(["accounting"], category="tax", data_dir=tmp_path) == []
        assert len(word_bank.select_words(data_dir=tmp_path)) == 28

    def test_pick_words(self, tmp_path):
        word_list = word_bank.get_word_list_by_id("accounting", tmp_path)
        picked = word_bank.pick_words(word_list, 5, rng=random.Random(1))
        assert len(picked) == 5
        assert len({w.id for w in picked}) == 5
        assert len(word_bank.pick_words(word_list, 100)) == 28


class TestParse:

    def test_romaji_from_reading(self):
        words = word_bank.parse_word_items([{"japanese": "利益", "reading": "りえき"}])
        assert words[0].romaji == "rieki"
        assert words[0].category == "custom"

    def test_katakana_reading(self):
        words = word_bank.parse_word_items([{"japanese": "キャッシュ", "reading": "キャッシュ"}])
        assert words[0].reading == "きゃっしゅ"

    def test_reading_from_japanese(self, monkeypatch):
        monkeypatch.setattr(word_bank, "reading_for", lambda text: "りえき")
        words = word_bank.parse_word_items([{"japanese": "利益"}])
        assert words[0].reading == "りえき"

    def test_meaning_fallback(self):
        words = word_bank.parse_word_items([{"japanese": "資産", "reading": "しさん", "meaning_ko": "자산"}])
        assert words[0].meaning == "자산"

    @pytest.mark.parametrize("items", [{"japanese": "資産"}, [{"reading": "しさん"}], ["資産"]])
    def test_invalid(self, items):
        with pytest.raises(ValueError):
            word_bank.parse_word_items(items)


class TestLoadFile:

    def test_from_file(self, json_file):
        word_list = word_bank.load_word_list_file(json_file([{"japanese": "利益", "reading": "りえき"}]))
        assert word_list.name == "tax"
        assert word_list.is_built_in is False
        assert word_list.words[0].reading == "りえき"

    def test_invalid_file(self, json_file, tmp_path):
        assert word_bank.load_word_list_file(json_file({"japanese": "資産"})) is None
        assert word_bank.load_word_list_file(str(tmp_path / "missing.json")) is None

    def test_from_url(self, monkeypatch):
        calls = []

        def fake_get(url, headers=None, timeout=None):
            calls.append((url, timeout))
            return FakeResponse([{"japanese": "税金", "reading": "ぜいきん"}])

        monkeypatch.setattr(word_bank.requests, "get", fake_get)
        word_list = word_bank.load_word_list_file("https://example.com/lists/tax.json")
        assert word_list.name == "tax"
        assert word_list.words[0].romaji == "zeikinn"
        assert calls == [("https://example.com/lists/tax.json", 10)]

    def test_request_error(self, monkeypatch):
        def fake_get(url, headers=None, timeout=None):
            raise requests.exceptions.ConnectionError("offline")

        monkeypatch.setattr(word_bank.requests, "get", fake_get)
        assert word_bank.load_word_list_file("https://example.com/tax.json") is None

    def test_http_error(self, monkeypatch):
        monkeypatch.setattr(word_bank.requests, "get",
                            lambda url, headers=None, timeout=None: FakeResponse([], 404))
        assert word_bank.load_word_list_file("https://example.com/tax.json") is None

    def test_import(self, json_file, tmp_path):
        word_list = word_bank.import_word_list_file(
            json_file([{"japanese": "利益", "reading": "りえき"}]), name="税務", data_dir=tmp_path)
        loaded = word_bank.get_word_list_by_id(word_list.id, tmp_path)
        assert loaded.name == "税務"
        assert [w.reading for w in loaded.words] == ["りえき"]


class TestCustomLists:

    def test_create_and_add(self, tmp_path):
        word_list = word_bank.create_word_list("テスト", tmp_path)
        assert word_list is not None
        assert word_bank.create_word_list("テスト", tmp_path) is None

        word = word_bank.add_word_to_list(word_list.id, "資産", reading="しさん", data_dir=tmp_path)
        assert word.romaji == "sisann"
        loaded = word_bank.get_word_list_by_id(word_list.id, tmp_path)
        assert [w.japanese for w in loaded.words] == ["資産"]

    def test_merged_lists(self, tmp_path):
        word_list = word_bank.create_word_list("テスト", tmp_path)
        word_bank.add_word_to_list(word_list.id, "利益", reading="りえき", data_dir=tmp_path)
        words = word_bank.get_words_by_list_ids(["accounting", word_list.id], tmp_path)
        assert len(words) == 29

    def test_built_in_is_read_only(self, tmp_path):
        assert word_bank.add_word_to_list("accounting", "利益", reading="りえき", data_dir=tmp_path) is None
        assert word_bank.delete_word_list("accounting", tmp_path) is False

    def test_delete(self, tmp_path):
        word_list = word_bank.create_word_list("テスト", tmp_path)
        assert word_bank.delete_word_list(word_list.id, tmp_path) is True
        assert word_bank.get_word_list_by_id(word_list.id, tmp_path) is None
