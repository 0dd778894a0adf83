# kanatype/game_store.py
import copy
import logging
import random
import threading
import uuid
from datetime import datetime, timezone

from kanatype.models import GameState, GameStatus, FallingWord, LevelConfig, SessionRecord
from kanatype.wpm_calculator import (
    calculate_score, calculate_wpm, calculate_accuracy, generate_session_id,
)

# --- 設定 (Configuration) ---

LEVEL_CONFIG = {
    1: LevelConfig(base_speed=0.3, spawn_interval=4000, max_on_screen=3),
    2: LevelConfig(base_speed=0.6, spawn_interval=3000, max_on_screen=4),
    3: LevelConfig(base_speed=1.0, spawn_interval=2500, max_on_screen=5),
    4: LevelConfig(base_speed=1.5, spawn_interval=2000, max_on_screen=6),
    5: LevelConfig(base_speed=2.2, spawn_interval=1500, max_on_screen=8),
}
MIN_LEVEL = 1
MAX_LEVEL = 5

FLOOR_Y = 580          # 床の位置 (px)
FRAME_MS = 16          # speed は 16ms あたりの移動量
FADE_STEP = 0.06       # マッチ後のフェードアウト量 (1フレームあたり)
SPAWN_Y = -80
SPAWN_X_MIN = 5
SPAWN_X_RANGE = 75
MIN_X_GAP = 12         # 横方向の最小間隔
MAX_PLACEMENT_ATTEMPTS = 10
SPEED_JITTER = 0.3
START_LIVES = 3
COUNTDOWN_START = 3

WORD_COLORS = [
    '#60A5FA', '#34D399', '#FBBF24', '#F87171',
    '#A78BFA', '#38BDF8', '#FB923C', '#4ADE80',
]


def clamp_level(level):
    try:
        level = int(level)
    except (TypeError, ValueError):
        return 3
    return min(max(level, MIN_LEVEL), MAX_LEVEL)


def get_level_config(level) -> LevelConfig:
    return LEVEL_CONFIG[clamp_level(level)]


class GameStore:
    """
    落下単語ゲームのラウンド状態を持つ唯一のコンテナ。

    - 状態遷移: idle → countdown → playing ⇄ paused → gameover / clear
    - フレームドライバ (tick / spawn_word) と入力 (match_word / add_keystroke) の
      両方から呼ばれるので、すべての更新は1つのロックの中で行う
    - 許可されていない状態での操作はエラーにせず何もしない

    使用例:
    store = GameStore()
    store.start_game(words, level=3)
    store.set_playing()
    store.spawn_word()
    store.tick(16)
    """

    def __init__(self, rng=None):
        self._lock = threading.RLock()
        self._state = GameState()
        self._listeners = []
        self._rng = rng or random.Random()
        self._clear_on_exhaust = False

    # --- 購読 ---

    def subscribe(self, listener):
        """状態が変わるたびに listener(store) を呼ぶ。戻り値は購読解除関数"""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    def _notify(self):
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception as e:
                logging.error(f"GameStore listener error: {e}", exc_info=True)

    # --- 参照 ---

    @property
    def state(self) -> GameState:
        """現在の状態のコピー (呼び出し側が書き換えても影響しない)"""
        with self._lock:
            return copy.deepcopy(self._state)

    @property
    def status(self) -> GameStatus:
        with self._lock:
            return self._state.status

    @property
    def level(self) -> int:
        with self._lock:
            return self._state.level

    @property
    def level_config(self) -> LevelConfig:
        return get_level_config(self.level)

    def active_words(self):
        """まだマッチしていない落下中の単語 (コピー)"""
        with self._lock:
            return [copy.deepcopy(w) for w in self._state.falling_words if not w.is_matched]

    def available_words(self):
        with self._lock:
            used = set(self._state.used_word_ids)
            return [w for w in self._state.word_queue if w.id not in used]

    def wpm(self):
        with self._lock:
            return calculate_wpm(self._state.correct_words, self._state.elapsed)

    def accuracy(self):
        with self._lock:
            return calculate_accuracy(self._state.total_keystrokes, self._state.correct_keystrokes)

    def summary(self, word_list_id="") -> SessionRecord:
        """ラウンド結果 (保存は呼び出し側の責任)"""
        with self._lock:
            s = self._state
            return SessionRecord(
                id=generate_session_id(),
                mode=s.mode,
                level=s.level,
                word_list_id=word_list_id,
                wpm=calculate_wpm(s.correct_words, s.elapsed),
                accuracy=calculate_accuracy(s.total_keystrokes, s.correct_keystrokes),
                total_words=len(s.used_word_ids),
                correct_words=s.correct_words,
                duration=s.elapsed,
                timestamp=datetime.now(timezone.utc).isoformat(),
            )

    # --- 状態遷移 ---

    def _transition(self, allowed, new_status, action):
        with self._lock:
            current = self._state.status
            if current not in allowed:
                logging.debug(f"{action} ignored in status {current.value}")
                return False
            self._state.status = new_status
        logging.info(f"Game status: {current.value} -> {new_status.value}")
        self._notify()
        return True

    def start_game(self, words, level=3, mode="falling-words", lives=START_LIVES,
                   clear_on_exhaust=False):
        """ラウンド状態を丸ごと作り直してカウントダウンに入る (どの状態からでも可)"""
        with self._lock:
            self._state = GameState(
                status=GameStatus.COUNTDOWN,
                mode=mode,
                level=clamp_level(level),
                lives=lives,
                word_queue=list(words),
                countdown_value=COUNTDOWN_START,
            )
            self._clear_on_exhaust = clear_on_exhaust
        logging.info(f"Game started: mode={mode}, level={clamp_level(level)}, words={len(words)}")
        self._notify()

    def set_countdown(self, value):
        with self._lock:
            if self._state.status != GameStatus.COUNTDOWN:
                logging.debug(f"set_countdown ignored in status {self._state.status.value}")
                return False
            self._state.countdown_value = max(0, int(value))
        self._notify()
        return True

    def set_playing(self):
        return self._transition({GameStatus.COUNTDOWN}, GameStatus.PLAYING, "set_playing")

    def pause_game(self):
        return self._transition({GameStatus.PLAYING}, GameStatus.PAUSED, "pause_game")

    def resume_game(self):
        return self._transition({GameStatus.PAUSED}, GameStatus.PLAYING, "resume_game")

    def toggle_pause(self):
        with self._lock:
            status = self._state.status
        if status == GameStatus.PLAYING:
            return self.pause_game()
        if status == GameStatus.PAUSED:
            return self.resume_game()
        return False

    def end_game(self):
        return self._transition(
            {GameStatus.COUNTDOWN, GameStatus.PLAYING, GameStatus.PAUSED},
            GameStatus.GAMEOVER, "end_game")

    def clear_game(self):
        return self._transition({GameStatus.PLAYING}, GameStatus.CLEAR, "clear_game")

    def reset_game(self):
        with self._lock:
            self._state = GameState()
            self._clear_on_exhaust = False
        self._notify()

    # --- 物理 (フレーム更新) ---

    def tick(self, delta_time, floor_y=FLOOR_Y):
        """
        1フレーム分進める。playing 以外では何もしない。
        順番: 位置・透明度の更新 → フェード完了の削除 → 床到達 (ミス) の判定
        戻り値: このフレームのミス数
        """
        with self._lock:
            s = self._state
            if s.status != GameStatus.PLAYING:
                return 0

            # 1. 位置の更新
            step = delta_time / FRAME_MS
            for w in s.falling_words:
                w.y += w.speed * step
                if w.is_matched:
                    w.opacity = max(0.0, w.opacity - FADE_STEP)

            # 2. 消えきった単語を削除
            s.falling_words = [w for w in s.falling_words if w.opacity > 0]

            # 3. 床に到達した単語 (マッチ済みは対象外)
            hit_floor = [w for w in s.falling_words if w.y >= floor_y and not w.is_matched]
            misses = len(hit_floor)
            if misses > 0:
                s.lives = max(0, s.lives - misses)
                s.combo = 0
                s.missed_words.extend(w.word for w in hit_floor)
                missed_ids = {w.instance_id for w in hit_floor}
                s.falling_words = [w for w in s.falling_words if w.instance_id not in missed_ids]
                logging.info(f"Missed {misses} word(s), lives left: {s.lives}")

            previous = s.status
            if s.lives <= 0:
                s.status = GameStatus.GAMEOVER
            elif self._clear_on_exhaust and self._pool_exhausted() and not s.falling_words:
                s.status = GameStatus.CLEAR

            s.elapsed += delta_time
            current = s.status

        if previous != current:
            logging.info(f"Game status: {previous.value} -> {current.value}")
        self._notify()
        return misses

    def _pool_exhausted(self):
        used = set(self._state.used_word_ids)
        return all(w.id in used for w in self._state.word_queue)

    def spawn_word(self):
        """新しい単語を落とす。上限に達しているか単語が尽きていれば None"""
        with self._lock:
            s = self._state
            if s.status != GameStatus.PLAYING:
                return None
            config = get_level_config(s.level)
            if len([w for w in s.falling_words if not w.is_matched]) >= config.max_on_screen:
                return None

            used = set(s.used_word_ids)
            available = [w for w in s.word_queue if w.id not in used]
            if not available:
                return None

            word = self._rng.choice(available)

            # 横位置が重ならないように (最大 MAX_PLACEMENT_ATTEMPTS 回だけ試す)
            used_x = [w.x for w in s.falling_words]
            x = SPAWN_X_MIN + self._rng.random() * SPAWN_X_RANGE
            for _ in range(MAX_PLACEMENT_ATTEMPTS):
                if not any(abs(ux - x) < MIN_X_GAP for ux in used_x):
                    break
                x = SPAWN_X_MIN + self._rng.random() * SPAWN_X_RANGE

            falling = FallingWord(
                instance_id=str(uuid.uuid4()),
                word=word,
                x=x,
                y=SPAWN_Y,
                speed=config.base_speed + self._rng.random() * SPEED_JITTER,
                is_matched=False,
                opacity=1.0,
                color=self._rng.choice(WORD_COLORS),
            )
            s.falling_words.append(falling)
            s.used_word_ids.append(word.id)
            spawned = copy.deepcopy(falling)

        self._notify()
        return spawned

    # --- 入力 ---

    def match_word(self, instance_id):
        """単語をマッチ済みにして得点を加算する。存在しない or マッチ済みなら何もしない"""
        with self._lock:
            s = self._state
            if s.status != GameStatus.PLAYING:
                return False
            target = next((w for w in s.falling_words if w.instance_id == instance_id), None)
            if target is None or target.is_matched:
                return False
            target.is_matched = True
            s.score += calculate_score(s.combo, s.level)
            s.combo += 1
            s.max_combo = max(s.max_combo, s.combo)
            s.correct_words += 1
            # キー数の代わりに読みの文字数を数える
            s.correct_keystrokes += len(target.word.reading)
            s.total_keystrokes += len(target.word.reading)
        self._notify()
        return True

    def add_keystroke(self, correct):
        """単語の完成以外の1入力を記録する (間違いならコンボはリセット)"""
        with self._lock:
            s = self._state
            if s.status != GameStatus.PLAYING:
                return False
            s.total_keystrokes += 1
            if correct:
                s.correct_keystrokes += 1
            else:
                s.combo = 0
        self._notify()
        return True
