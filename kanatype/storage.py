# kanatype/storage.py
import json
import logging
import os
import threading
from datetime import datetime, timezone

from kanatype.models import SessionRecord, MistakeRecord, Word, WordList, word_from_dict
from kanatype.settings import DATA_DIR

# 記録の保存先 (JSON ファイル)
# 保存に失敗してもゲームの状態には影響させない (False を返してログに残すだけ)

KEYS = {
    "sessions": "sessions.json",
    "records": "records.json",
    "mistakes": "mistakes.json",
    "wordlists": "wordlists.json",
}

MAX_SESSIONS = 100
MAX_MISTAKES = 500
PRUNED_SESSIONS = 50   # 書き込みに失敗したときに残す件数

STORAGE_LOCK = threading.Lock()


def _path(key, data_dir=None):
    return os.path.join(data_dir or DATA_DIR, KEYS[key])


def _safe_get(key, default, data_dir=None):
    """
    JSON を読む。ファイルがない・壊れている・形が違う場合は default
    (リストの場合は dict 以外の要素を捨てる)
    """
    path = _path(key, data_dir)
    try:
        with open(path, "r", encoding="utf-8") as f:
            value = json.load(f)
    except FileNotFoundError:
        return default
    except (OSError, json.JSONDecodeError) as e:
        logging.error(f"Failed to read {path}: {e}")
        return default

    if not isinstance(value, type(default)):
        logging.error(f"Unexpected data in {path}: expected {type(default).__name__}, "
                      f"got {type(value).__name__}")
        return default
    if isinstance(value, list):
        items = [v for v in value if isinstance(v, dict)]
        if len(items) != len(value):
            logging.warning(f"Dropped {len(value) - len(items)} broken item(s) from {path}")
        return items
    return value


def _write(key, value, data_dir=None):
    path = _path(key, data_dir)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    tmp_path = path + ".tmp"
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(value, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    except OSError:
        # 書きかけの一時ファイルは残さない
        try:
            os.remove(tmp_path)
        except OSError:
            pass
        raise


def _prune_sessions(data_dir=None):
    sessions = _safe_get("sessions", [], data_dir)
    _write("sessions", sessions[-PRUNED_SESSIONS:], data_dir)


def _safe_set(key, value, data_dir=None) -> bool:
    try:
        _write(key, value, data_dir)
        return True
    except OSError as e:
        logging.warning(f"Failed to write {key}: {e}. Pruning old sessions and retrying.")
    try:
        _prune_sessions(data_dir)
        _write(key, value, data_dir)
        return True
    except OSError as e:
        logging.error(f"Failed to write {key} after pruning: {e}")
        return False


# --- Sessions ---

def save_session(session: SessionRecord, data_dir=None) -> bool:
    with STORAGE_LOCK:
        sessions = _safe_get("sessions", [], data_dir)
        sessions.append(session.to_dict())
        return _safe_set("sessions", sessions[-MAX_SESSIONS:], data_dir)


def load_sessions(data_dir=None):
    sessions = []
    for data in _safe_get("sessions", [], data_dir):
        try:
            sessions.append(SessionRecord(**data))
        except TypeError as e:
            logging.warning(f"Skipping broken session record: {e}")
    return sessions


def clear_sessions(data_dir=None):
    with STORAGE_LOCK:
        for key in ("sessions", "records"):
            try:
                os.remove(_path(key, data_dir))
            except FileNotFoundError:
                pass
            except OSError as e:
                logging.error(f"Failed to remove {key}: {e}")


# --- Best Records ---

def update_best_record(mode, wpm, accuracy, data_dir=None) -> bool:
    """モードごとの最高記録 (WPM・正確率は最大値、回数は +1)"""
    with STORAGE_LOCK:
        records = _safe_get("records", {}, data_dir)
        current = records.get(mode)
        if not isinstance(current, dict):
            current = {}
        records[mode] = {
            "best_wpm": max(current.get("best_wpm", 0), wpm),
            "best_accuracy": max(current.get("best_accuracy", 0), accuracy),
            "total_sessions": current.get("total_sessions", 0) + 1,
        }
        return _safe_set("records", records, data_dir)


def load_best_records(data_dir=None):
    return _safe_get("records", {}, data_dir)


def record_round(session: SessionRecord, data_dir=None) -> bool:
    """ラウンド結果の保存と最高記録の更新をまとめて行う"""
    saved = save_session(session, data_dir)
    updated = update_best_record(session.mode, session.wpm, session.accuracy, data_dir)
    return saved and updated


# --- Mistakes ---

def _upsert_mistake(mistakes, data):
    for i, m in enumerate(mistakes):
        if m.get("word_id") == data["word_id"]:
            mistakes[i] = data
            return
    mistakes.append(data)


def record_mistake(record: MistakeRecord, data_dir=None) -> bool:
    with STORAGE_LOCK:
        mistakes = _safe_get("mistakes", [], data_dir)
        _upsert_mistake(mistakes, record.to_dict())
        return _safe_set("mistakes", mistakes[-MAX_MISTAKES:], data_dir)


def count_mistake(word: Word, data_dir=None) -> bool:
    """単語の間違い回数を +1 して最終日時を更新する"""
    with STORAGE_LOCK:
        mistakes = _safe_get("mistakes", [], data_dir)
        previous = next((m for m in mistakes if m.get("word_id") == word.id), {})
        try:
            count = int(previous.get("mistake_count", 0))
        except (TypeError, ValueError):
            count = 0
        record = MistakeRecord(
            word_id=word.id,
            word=word,
            mistake_count=count + 1,
            last_mistake_at=datetime.now(timezone.utc).isoformat(),
        )
        _upsert_mistake(mistakes, record.to_dict())
        return _safe_set("mistakes", mistakes[-MAX_MISTAKES:], data_dir)


def load_mistakes(data_dir=None):
    mistakes = []
    for data in _safe_get("mistakes", [], data_dir):
        word_data = data.get("word")
        word = word_from_dict(word_data) if isinstance(word_data, dict) else None
        if word is None:
            continue
        try:
            count = int(data.get("mistake_count", 0))
        except (TypeError, ValueError):
            count = 0
        mistakes.append(MistakeRecord(
            word_id=data.get("word_id", word.id),
            word=word,
            mistake_count=count,
            last_mistake_at=data.get("last_mistake_at", ""),
        ))
    return mistakes


# --- Custom Word Lists ---

def _word_list_from_dict(data):
    items = data.get("words")
    if not isinstance(items, list):
        items = []
    words = [w for w in (word_from_dict(d) for d in items if isinstance(d, dict)) if w]
    return WordList(
        id=data["id"],
        name=data.get("name", data["id"]),
        description=data.get("description", ""),
        words=words,
        is_built_in=False,
        created_at=data.get("created_at", ""),
    )


def save_custom_word_list(word_list: WordList, data_dir=None) -> bool:
    with STORAGE_LOCK:
        lists = _safe_get("wordlists", [], data_dir)
        data = word_list.to_dict()
        for i, l in enumerate(lists):
            if l.get("id") == word_list.id:
                lists[i] = data
                break
        else:
            lists.append(data)
        return _safe_set("wordlists", lists, data_dir)


def load_custom_word_lists(data_dir=None):
    result = []
    for data in _safe_get("wordlists", [], data_dir):
        if not data.get("id"):
            continue
        result.append(_word_list_from_dict(data))
    return result


def delete_custom_word_list(list_id, data_dir=None) -> bool:
    with STORAGE_LOCK:
        lists = _safe_get("wordlists", [], data_dir)
        return _safe_set("wordlists", [l for l in lists if l.get("id") != list_id], data_dir)


def clear_all_data(data_dir=None):
    with STORAGE_LOCK:
        for key in KEYS:
            try:
                os.remove(_path(key, data_dir))
            except FileNotFoundError:
                pass
            except OSError as e:
                logging.error(f"Failed to remove {key}: {e}")
