# kanatype/settings.py
import json
import logging
import os
from dataclasses import dataclass, asdict, fields, replace

# --- 設定 (Configuration) ---

# データの保存先 (環境変数で変更可)
DATA_DIR = os.environ.get("KANATYPE_DATA_DIR", os.path.join(os.path.expanduser("~"), ".kanatype"))
SETTINGS_FILE = "settings.json"

INPUT_MODES = ("romaji", "hiragana", "katakana")


@dataclass(frozen=True)
class AppSettings:
    input_mode: str = "romaji"
    speed: int = 3                 # 1 ~ 5 (= ゲームのレベル)
    sound_enabled: bool = True
    sfx_volume: float = 0.7
    show_furigana: bool = True     # 読みのヒントを表示
    show_meaning: bool = True
    selected_word_list_id: str = "accounting"


DEFAULT_SETTINGS = AppSettings()


def _validate(data: dict) -> AppSettings:
    """不正な値は既定値に戻す"""
    known = {f.name for f in fields(AppSettings)}
    values = {k: v for k, v in data.items() if k in known}
    settings = replace(DEFAULT_SETTINGS, **values)

    if settings.input_mode not in INPUT_MODES:
        logging.warning(f"Unknown input_mode '{settings.input_mode}', using default.")
        settings = replace(settings, input_mode=DEFAULT_SETTINGS.input_mode)
    if not isinstance(settings.speed, int) or not 1 <= settings.speed <= 5:
        logging.warning(f"Invalid speed '{settings.speed}', using default.")
        settings = replace(settings, speed=DEFAULT_SETTINGS.speed)
    if not isinstance(settings.sfx_volume, (int, float)) or not 0 <= settings.sfx_volume <= 1:
        settings = replace(settings, sfx_volume=DEFAULT_SETTINGS.sfx_volume)
    return settings


def _settings_path(data_dir=None):
    return os.path.join(data_dir or DATA_DIR, SETTINGS_FILE)


def load_settings(data_dir=None) -> AppSettings:
    """保存された設定を読む。ファイルがない・壊れている場合は既定値"""
    path = _settings_path(data_dir)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return DEFAULT_SETTINGS
    except (OSError, json.JSONDecodeError) as e:
        logging.error(f"Failed to load settings from {path}: {e}")
        return DEFAULT_SETTINGS
    if not isinstance(data, dict):
        logging.error(f"Settings file has unexpected format: {path}")
        return DEFAULT_SETTINGS
    return _validate(data)


def save_settings(settings: AppSettings, data_dir=None) -> bool:
    path = _settings_path(data_dir)
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(asdict(settings), f, ensure_ascii=False, indent=2)
        return True
    except OSError as e:
        logging.error(f"Failed to save settings to {path}: {e}")
        return False


def update_settings(data_dir=None, **partial) -> AppSettings:
    """一部の項目だけ変更して保存する"""
    current = load_settings(data_dir)
    updated = _validate({**asdict(current), **partial})
    save_settings(updated, data_dir)
    return updated


def reset_settings(data_dir=None) -> AppSettings:
    save_settings(DEFAULT_SETTINGS, data_dir)
    return DEFAULT_SETTINGS
