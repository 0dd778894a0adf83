# kanatype/word_bank.py
import json
import logging
import os
import random
import time
from datetime import datetime, timezone

import requests
from pykakasi import Kakasi

from kanatype.models import Word, WordList, word_from_dict
from kanatype.romaji_converter import kata_to_hira, to_romaji
from kanatype import storage

# --- 設定 (Configuration) ---

# 内蔵単語帳 (読み取り専用) の置き場所
WORDLIST_DIR = os.environ.get(
    "KANATYPE_WORDLIST_DIR",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "data"),
)

# 内蔵単語帳のメタ情報 (ファイル名 -> 名前・説明)
BUILT_IN_META = {
    "accounting": ("会計・財務", "会計・財務に関する単語"),
}

MAX_TEXT_LENGTH = 50
MAX_MEANING_LENGTH = 100

my_headers = {
    "User-Agent": "kanatype (falling-word typing trainer)"
}

# pykakasi インスタンス (読みがない単語の読みを作る)
try:
    KKS = Kakasi()
except Exception as e:
    logging.error(f"Failed to initialize Kakasi: {e}")
    KKS = None


def reading_for(text):
    """表示用の文字列からひらがなの読みを作る"""
    if KKS is None:
        return kata_to_hira(text)
    try:
        return "".join(item['hira'] for item in KKS.convert(text))
    except Exception as e:
        logging.warning(f"Kakasi conversion failed for '{text}': {e}")
        return kata_to_hira(text)


def parse_word_items(items, id_prefix="custom"):
    """
    JSON 配列から Word のリストを作る。
    japanese は必須。reading がなければ japanese から作り、romaji がなければ reading から作る。
    必須項目がない場合は ValueError
    """
    if not isinstance(items, list):
        raise ValueError("Word list must be a JSON array.")

    words = []
    stamp = int(time.time() * 1000)
    for idx, item in enumerate(items):
        if not isinstance(item, dict) or not item.get("japanese"):
            raise ValueError(f"Item {idx + 1}: missing required field 'japanese'")
        japanese = str(item["japanese"])[:MAX_TEXT_LENGTH]
        reading = kata_to_hira(str(item.get("reading") or reading_for(japanese)))[:MAX_TEXT_LENGTH]
        romaji = str(item.get("romaji") or to_romaji(reading))[:MAX_TEXT_LENGTH]
        meaning = str(item.get("meaning") or item.get("meaning_ko") or "")[:MAX_MEANING_LENGTH]
        word = word_from_dict({
            "id": item.get("id") or f"{id_prefix}-{idx}-{stamp}",
            "japanese": japanese,
            "reading": reading,
            "romaji": romaji,
            "meaning": meaning,
            "category": item.get("category") or "custom",
            "difficulty": item.get("difficulty") or 1,
            "tags": item.get("tags") or [],
        })
        if word is None:
            raise ValueError(f"Item {idx + 1}: could not make a reading for '{japanese}'")
        words.append(word)
    return words


def _read_json_source(source):
    """ファイルパスか URL から JSON を読む"""
    if source.startswith("http://") or source.startswith("https://"):
        res = requests.get(source, headers=my_headers, timeout=10)
        res.raise_for_status()
        return res.json()
    with open(source, "r", encoding="utf-8") as f:
        return json.load(f)


def load_word_list_file(source, name=None, list_id=None):
    """
    JSON の単語帳 (ファイル or URL) を読み込む。失敗したら None
    """
    try:
        items = _read_json_source(source)
        words = parse_word_items(items)
    except requests.exceptions.RequestException as e:
        logging.error(f"Word list request error ({source}): {e}")
        return None
    except (OSError, json.JSONDecodeError) as e:
        logging.error(f"Failed to read word list {source}: {e}")
        return None
    except ValueError as e:
        logging.error(f"Invalid word list {source}: {e}")
        return None

    base = os.path.splitext(os.path.basename(source.rstrip("/")))[0] or "custom"
    return WordList(
        id=list_id or f"custom-{int(time.time() * 1000)}",
        name=name or base,
        description=f"JSON import ({len(words)})",
        words=words,
        is_built_in=False,
        created_at=datetime.now(timezone.utc).isoformat(),
    )


def import_word_list_file(source, name=None, data_dir=None):
    """単語帳を読み込んでカスタム単語帳として保存する"""
    word_list = load_word_list_file(source, name=name)
    if word_list is None:
        return None
    if not storage.save_custom_word_list(word_list, data_dir):
        return None
    logging.info(f"Imported word list '{word_list.name}' ({len(word_list.words)} words)")
    return word_list


def _load_built_in_lists():
    lists = []
    try:
        filenames = sorted(os.listdir(WORDLIST_DIR))
    except OSError as e:
        logging.error(f"Built-in word list directory not readable: {e}")
        return lists
    for filename in filenames:
        if not filename.endswith(".json"):
            continue
        list_id = filename[:-len(".json")]
        path = os.path.join(WORDLIST_DIR, filename)
        try:
            with open(path, "r", encoding="utf-8") as f:
                words = parse_word_items(json.load(f), id_prefix=list_id)
        except (OSError, json.JSONDecodeError, ValueError) as e:
            logging.error(f"Failed to load built-in word list {path}: {e}")
            continue
        name, description = BUILT_IN_META.get(list_id, (list_id, ""))
        lists.append(WordList(
            id=list_id,
            name=name,
            description=description,
            words=words,
            is_built_in=True,
        ))
    return lists


# --- 参照 ---

def get_all_word_lists(data_dir=None):
    return _load_built_in_lists() + storage.load_custom_word_lists(data_dir)


def get_word_list_by_id(list_id, data_dir=None):
    for word_list in get_all_word_lists(data_dir):
        if word_list.id == list_id:
            return word_list
    return None


def get_words_by_list_ids(list_ids, data_dir=None):
    """複数の単語帳の単語を合わせて返す (id の重複は除く)"""
    seen = set()
    words = []
    for word_list in get_all_word_lists(data_dir):
        if word_list.id not in list_ids:
            continue
        for w in word_list.words:
            if w.id not in seen:
                seen.add(w.id)
                words.append(w)
    return words


def select_words(list_ids=None, category=None, min_difficulty=1, max_difficulty=5,
                 data_dir=None):
    """条件に合う単語を返す。該当がなければ空リスト"""
    if list_ids is None:
        list_ids = [l.id for l in get_all_word_lists(data_dir)]
    return [
        w for w in get_words_by_list_ids(list_ids, data_dir)
        if (category is None or w.category == category)
        and min_difficulty <= w.difficulty <= max_difficulty
    ]


def pick_words(word_list, count, rng=random):
    words = list(word_list.words if isinstance(word_list, WordList) else word_list)
    rng.shuffle(words)
    return words[:min(count, len(words))]


# --- 編集 (カスタム単語帳のみ) ---

def create_word_list(name, data_dir=None):
    """同じ名前の単語帳があれば None"""
    if any(l.name == name for l in storage.load_custom_word_lists(data_dir)):
        logging.warning(f"Word list '{name}' already exists.")
        return None
    word_list = WordList(
        id=f"custom-{int(time.time() * 1000)}",
        name=name,
        created_at=datetime.now(timezone.utc).isoformat(),
    )
    if not storage.save_custom_word_list(word_list, data_dir):
        return None
    return word_list


def add_word_to_list(list_id, japanese, reading=None, romaji=None, meaning="",
                     difficulty=1, tags=(), data_dir=None):
    word_list = get_word_list_by_id(list_id, data_dir)
    if word_list is None or word_list.is_built_in:
        logging.warning(f"Cannot add word to list '{list_id}'.")
        return None
    word = parse_word_items([{
        "id": f"w-{int(time.time() * 1000)}-{len(word_list.words)}",
        "japanese": japanese,
        "reading": reading,
        "romaji": romaji,
        "meaning": meaning,
        "difficulty": difficulty,
        "tags": list(tags),
    }])[0]
    word_list.words.append(word)
    if not storage.save_custom_word_list(word_list, data_dir):
        return None
    return word


def delete_word_list(list_id, data_dir=None):
    word_list = get_word_list_by_id(list_id, data_dir)
    if word_list is None or word_list.is_built_in:
        logging.warning(f"Cannot delete word list '{list_id}'.")
        return False
    return storage.delete_custom_word_list(list_id, data_dir)
