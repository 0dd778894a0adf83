# kanatype/audio.py
import logging

from rich.console import Console

# 効果音 (ターミナルのベルで代用)
# 名前 -> ベルを鳴らす回数
SOUNDS = {
    "correct": 1,
    "error": 2,
    "miss": 1,
    "tick": 1,
    "bell": 2,
    "game_over": 3,
}


class AudioManager:
    """
    効果音の通知先。鳴らすだけで戻り値はなく、失敗してもゲームには影響させない。
    """

    def __init__(self, console=None, enabled=True, volume=0.7):
        self.console = console or Console(stderr=True)
        self.enabled = enabled
        self.volume = volume

    def set_settings(self, enabled, volume):
        self.enabled = enabled
        self.volume = volume

    def _play(self, name):
        if not self.enabled or self.volume <= 0:
            return
        try:
            for _ in range(SOUNDS[name]):
                self.console.bell()
            logging.debug(f"sound: {name}")
        except Exception as e:
            logging.warning(f"Failed to play sound '{name}': {e}")

    # 成功音
    def play_correct(self):
        self._play("correct")

    # 失敗音
    def play_error(self):
        self._play("error")

    # ミス (床に到達)
    def play_miss(self):
        self._play("miss")

    # カウントダウン
    def play_tick(self):
        self._play("tick")

    # カウントダウン完了
    def play_bell(self):
        self._play("bell")

    def play_game_over(self):
        self._play("game_over")
