# kanatype/kana_drill.py
import random
import time
from collections import Counter
from dataclasses import dataclass

from kanatype.kana_data import Kana, get_kana_set, check_kana_input
from kanatype.wpm_calculator import calculate_wpm, round_half_up

ROUND_COUNT = 30


@dataclass
class DrillResult:
    kana: Kana
    input: str
    correct: bool
    ms: float


class KanaDrill:
    """
    かな1文字ずつのキーボード練習。

    使用例:
    drill = KanaDrill(["seion"], round_count=10)
    drill.current          # Kana(kana="し", ...)
    drill.submit("shi")    # True (正解して次へ)
    drill.stats()
    """

    def __init__(self, sets=("seion",), round_count=ROUND_COUNT, rng=random, clock=time.monotonic):
        self.clock = clock
        pool = get_kana_set(list(sets))
        shuffled = list(pool)
        rng.shuffle(shuffled)
        self.queue = shuffled[:min(round_count, len(shuffled))]
        self.index = 0
        self.results = []
        self.streak = 0
        self.started_at = self.clock()
        self._kana_started_at = self.started_at

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

    def check(self, user_input):
        """入力途中の判定 (正解なら確定して進む)"""
        kana = self.current
        if kana is not None and check_kana_input(user_input, kana):
            return self.submit(user_input)
        return False

    def submit(self, user_input):
        """Enter での確定。正誤を記録して次のかなへ進む"""
        kana = self.current
        if kana is None:
            return False
        now = self.clock()
        correct = check_kana_input(user_input, kana)
        self.results.append(DrillResult(kana, user_input, correct, (now - self._kana_started_at) * 1000))
        self.streak = self.streak + 1 if correct else 0
        self.index += 1
        self._kana_started_at = now
        return correct

    def stats(self):
        if not self.results:
            return None
        elapsed_ms = (self.clock() - self.started_at) * 1000
        correct = sum(1 for r in self.results if r.correct)
        wrong = Counter(r.kana.kana for r in self.results if not r.correct)
        return {
            "correct": correct,
            "total": len(self.results),
            "wpm": calculate_wpm(correct, elapsed_ms),
            "avg_ms": round_half_up(sum(r.ms for r in self.results) / len(self.results)),
            "accuracy": round_half_up(correct / len(self.results) * 100),
            "top_wrong": wrong.most_common(5),
        }
