# kanatype/models.py
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Optional


class GameStatus(str, Enum):
    IDLE = "idle"
    COUNTDOWN = "countdown"
    PLAYING = "playing"
    PAUSED = "paused"
    GAMEOVER = "gameover"
    CLEAR = "clear"


class InputMode(str, Enum):
    ROMAJI = "romaji"
    HIRAGANA = "hiragana"
    KATAKANA = "katakana"


# --- 単語 ---
@dataclass(frozen=True)
class Word:
    id: str
    japanese: str            # 表示用 (漢字を含んでよい)
    reading: str             # ひらがなの読み (判定の正解)
    romaji: str = ""         # ヒント
    meaning: str = ""
    category: str = "custom"
    difficulty: int = 1      # 1 ~ 5
    tags: tuple = ()

    def to_dict(self):
        data = asdict(self)
        data["tags"] = list(self.tags)
        return data


@dataclass
class WordList:
    id: str
    name: str
    description: str = ""
    words: List[Word] = field(default_factory=list)
    is_built_in: bool = False
    created_at: str = ""

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "words": [w.to_dict() for w in self.words],
            "is_built_in": self.is_built_in,
            "created_at": self.created_at,
        }


# --- 落下中の単語 (ゲーム実行時) ---
@dataclass
class FallingWord:
    instance_id: str
    word: Word
    x: float            # 横位置 (0 ~ 100)
    y: float            # 縦位置 (px)
    speed: float        # px/frame
    is_matched: bool = False
    opacity: float = 1.0
    color: str = "#60A5FA"


# --- ラウンド状態 ---
@dataclass
class GameState:
    status: GameStatus = GameStatus.IDLE
    mode: str = "falling-words"
    level: int = 3
    score: int = 0
    combo: int = 0
    max_combo: int = 0
    lives: int = 3
    elapsed: float = 0.0          # ms
    falling_words: List[FallingWord] = field(default_factory=list)
    word_queue: List[Word] = field(default_factory=list)
    used_word_ids: List[str] = field(default_factory=list)
    missed_words: List[Word] = field(default_factory=list)   # 床に落ちた単語
    correct_words: int = 0
    total_keystrokes: int = 0
    correct_keystrokes: int = 0
    countdown_value: int = 3


@dataclass(frozen=True)
class LevelConfig:
    base_speed: float
    spawn_interval: int      # ms
    max_on_screen: int


# --- 統計 ---
@dataclass
class SessionRecord:
    id: str
    mode: str
    level: int
    word_list_id: str
    wpm: int
    accuracy: float
    total_words: int
    correct_words: int
    duration: float          # ms
    timestamp: str

    def to_dict(self):
        return asdict(self)


@dataclass
class MistakeRecord:
    word_id: str
    word: Word
    mistake_count: int
    last_mistake_at: str

    def to_dict(self):
        return {
            "word_id": self.word_id,
            "word": self.word.to_dict(),
            "mistake_count": self.mistake_count,
            "last_mistake_at": self.last_mistake_at,
        }


def word_from_dict(data: dict) -> Optional[Word]:
    """dict から Word を作る。必須項目 (id, japanese, reading) がなければ None"""
    if not data.get("id") or not data.get("japanese") or not data.get("reading"):
        return None
    try:
        difficulty = int(data.get("difficulty") or 1)
    except (TypeError, ValueError):
        difficulty = 1
    return Word(
        id=str(data["id"]),
        japanese=str(data["japanese"]),
        reading=str(data["reading"]),
        romaji=str(data.get("romaji") or ""),
        meaning=str(data.get("meaning") or data.get("meaning_ko") or ""),
        category=str(data.get("category") or "custom"),
        difficulty=min(max(difficulty, 1), 5),
        tags=tuple(data.get("tags") or ()),
    )
