"""
設定の読み書きのテスト
"""

import json

from kanatype.settings import (
    AppSettings, DEFAULT_SETTINGS, load_settings, save_settings, update_settings, reset_settings,
)


class TestSettings:

    def test_defaults_without_file(self, tmp_path):
        assert load_settings(tmp_path) == DEFAULT_SETTINGS
        assert DEFAULT_SETTINGS.input_mode == "romaji"
        assert DEFAULT_SETTINGS.speed == 3

    def test_save_and_load(self, tmp_path):
        settings = AppSettings(input_mode="katakana", speed=5, show_meaning=False)
        assert save_settings(settings, tmp_path) is True
        assert load_settings(tmp_path) == settings

    def test_invalid_values_fall_back(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({
            "input_mode": "kanji",
            "speed": 9,
            "sfx_volume": 2,
            "show_meaning": False,
            "unknown_key": 1,
        }), encoding="utf-8")
        settings = load_settings(tmp_path)
        assert settings.input_mode == "romaji"
        assert settings.speed == 3
        assert settings.sfx_volume == 0.7
        assert settings.show_meaning is False

    def test_broken_file(self, tmp_path):
        (tmp_path / "settings.json").write_text("{", encoding="utf-8")
        assert load_settings(tmp_path) == DEFAULT_SETTINGS
        (tmp_path / "settings.json").write_text("[1, 2]", encoding="utf-8")
        assert load_settings(tmp_path) == DEFAULT_SETTINGS

    def test_update_and_reset(self, tmp_path):
        updated = update_settings(tmp_path, speed=5, sound_enabled=False)
        assert updated.speed == 5
        assert load_settings(tmp_path).sound_enabled is False
        assert reset_settings(tmp_path) == DEFAULT_SETTINGS
        assert load_settings(tmp_path) == DEFAULT_SETTINGS
