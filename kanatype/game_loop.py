# kanatype/game_loop.py
import logging
import threading
import time

from kanatype.models import GameStatus
from kanatype.game_store import FLOOR_Y, COUNTDOWN_START, get_level_config

FRAME_INTERVAL = 1 / 60      # 秒
MAX_DELTA_MS = 50            # 処理落ちしても1フレームで進めすぎない
COUNTDOWN_INTERVAL = 0.9     # 秒
COUNTDOWN_BELL_DELAY = 0.6   # 秒


class GameLoop:
    """
    一定間隔で tick と spawn_word を呼ぶフレームドライバ。
    レベルは毎フレーム store から読む (古い設定を持ち続けない)。
    最初の playing フレームですぐに1単語落とす。
    """

    def __init__(self, store, floor_y=FLOOR_Y, clock=time.monotonic, on_miss=None):
        self.store = store
        self.floor_y = floor_y
        self.clock = clock
        self.on_miss = on_miss
        self.spawn_timer = None
        self._was_playing = False
        self._thread = None
        self._stop_event = threading.Event()

    def reset(self):
        self.spawn_timer = None
        self._was_playing = False

    def step(self, delta_ms):
        """1フレーム進める。playing 以外では何もしない"""
        if self.store.status != GameStatus.PLAYING:
            self._was_playing = False
            return
        config = get_level_config(self.store.level)
        delta_ms = min(max(delta_ms, 0), MAX_DELTA_MS)

        if not self._was_playing or self.spawn_timer is None:
            # playing になった最初のフレーム (開始・再開) はすぐにスポーン
            self.spawn_timer = config.spawn_interval
            self._was_playing = True

        misses = self.store.tick(delta_ms, self.floor_y)
        if misses and self.on_miss is not None:
            try:
                self.on_miss(misses)
            except Exception as e:
                logging.warning(f"on_miss callback failed: {e}")

        self.spawn_timer += delta_ms
        if self.spawn_timer >= config.spawn_interval:
            self.spawn_timer = 0
            self.store.spawn_word()

    # --- スレッドで回す ---

    def _run(self):
        logging.info("Game loop started.")
        last = self.clock()
        while not self._stop_event.is_set():
            now = self.clock()
            delta_ms = (now - last) * 1000
            last = now
            self.step(delta_ms)
            self._stop_event.wait(FRAME_INTERVAL)
        logging.info("Game loop stopped.")

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self.reset()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def stop(self):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=1)
            self._thread = None


class Countdown:
    """
    countdown 状態で 3 → 0 と数えて playing にする。
    sleep は差し替え可能 (テストでは待たない)
    """

    def __init__(self, store, audio=None, sleep=time.sleep, start=COUNTDOWN_START):
        self.store = store
        self.audio = audio
        self.sleep = sleep
        self.start = start

    def _play(self, name):
        if self.audio is None:
            return
        try:
            getattr(self.audio, name)()
        except Exception as e:
            logging.warning(f"Audio '{name}' failed: {e}")

    def run(self):
        """カウントダウンを最後まで進めたら True (途中で状態が変わったら False)"""
        count = self.start
        if not self.store.set_countdown(count):
            return False
        self._play("play_tick")
        while count > 0:
            self.sleep(COUNTDOWN_INTERVAL)
            count -= 1
            if not self.store.set_countdown(count):
                return False
            self._play("play_bell" if count == 0 else "play_tick")
        self.sleep(COUNTDOWN_BELL_DELAY)
        return self.store.set_playing()
