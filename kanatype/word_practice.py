# kanatype/word_practice.py
import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from kanatype.matching import is_correct_input
from kanatype.models import InputMode, SessionRecord, Word
from kanatype.wpm_calculator import (
    calculate_wpm, calculate_accuracy, round_half_up, generate_session_id,
)

WORD_COUNT = 20
WORD_COUNT_CHOICES = (10, 20, 30, 50)
MODE = "word-practice"


@dataclass
class WordResult:
    word: Word
    input: str
    correct: bool
    ms: float


class WordPractice:
    """
    単語帳の単語を1つずつ順番に打つ練習。

    - 入力が読みと一致した時点で次の単語へ (IME 変換中は判定しない)
    - Enter (submit) は間違っていても次へ進む
    - 正確率は打鍵数ベース (正解した単語の読みの文字数 / 入力イベント数)

    使用例:
    practice = WordPractice(words, count=10)
    practice.type_text("shisan")   # True (正解して次へ)
    practice.submit("fusa")        # False (不正解で次へ)
    practice.summary("accounting")
    """

    def __init__(self, words, count=WORD_COUNT, input_mode=InputMode.ROMAJI,
                 rng=random, clock=time.monotonic):
        self.clock = clock
        self.input_mode = InputMode(input_mode)
        shuffled = list(words)
        rng.shuffle(shuffled)
        self.queue = shuffled[:min(count, len(shuffled))]
        self.index = 0
        self.results = []
        self.is_composing = False
        self.total_keystrokes = 0
        self.correct_keystrokes = 0
        self.started_at = self.clock()
        self.finished_at = None
        self._word_started_at = self.started_at

    @property
    def current(self):
        if self.index >= len(self.queue):
            return None
        return self.queue[self.index]

    @property
    def finished(self):
        return self.index >= len(self.queue)

    @property
    def progress(self):
        if not self.queue:
            return 0
        return self.index / len(self.queue)

    @property
    def elapsed_ms(self):
        end = self.finished_at if self.finished_at is not None else self.clock()
        return (end - self.started_at) * 1000

    def _advance(self, user_input, correct):
        now = self.clock()
        word = self.current
        self.results.append(WordResult(word, user_input, correct, (now - self._word_started_at) * 1000))
        if correct:
            self.correct_keystrokes += len(word.reading)
        self.index += 1
        self._word_started_at = now
        if self.finished:
            self.finished_at = now

    def type_text(self, value):
        """入力欄の値が変わったとき。正解なら次の単語へ進んで True"""
        if self.finished:
            return False
        self.total_keystrokes += 1
        if self.is_composing or not is_correct_input(value, self.current, self.input_mode):
            return False
        self._advance(value, True)
        return True

    def composition_start(self):
        self.is_composing = True

    def composition_end(self, text):
        """IME の確定。確定した文字列が正解なら次へ"""
        self.is_composing = False
        if self.finished or not is_correct_input(text, self.current, self.input_mode):
            return False
        self._advance(text, True)
        return True

    def submit(self, user_input):
        """Enter: 正誤を記録して次の単語へ (間違っていても進む)"""
        if self.finished or self.is_composing:
            return False
        correct = is_correct_input(user_input, self.current, self.input_mode)
        self._advance(user_input, correct)
        return correct

    def wrong_words(self):
        return [r.word for r in self.results if not r.correct]

    def stats(self):
        if not self.results:
            return None
        correct = sum(1 for r in self.results if r.correct)
        avg_ms = sum(r.ms for r in self.results) / len(self.results)
        return {
            "correct": correct,
            "total": len(self.results),
            "wpm": calculate_wpm(correct, self.elapsed_ms),
            "accuracy": round_half_up(correct / len(self.results) * 100),
            "avg_sec": round_half_up(avg_ms / 100) / 10,
        }

    def summary(self, word_list_id="") -> SessionRecord:
        correct = sum(1 for r in self.results if r.correct)
        elapsed = self.elapsed_ms
        return SessionRecord(
            id=generate_session_id(),
            mode=MODE,
            level=1,
            word_list_id=word_list_id,
            wpm=calculate_wpm(correct, elapsed),
            accuracy=calculate_accuracy(self.total_keystrokes, self.correct_keystrokes),
            total_words=len(self.results),
            correct_words=correct,
            duration=elapsed,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
