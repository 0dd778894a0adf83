# kanatype/input_store.py
import logging
import threading

from kanatype.models import InputMode, GameStatus
from kanatype.romaji_converter import to_hiragana
from kanatype.matching import find_match, has_prefix_match

DEFAULT_INPUT_MODE = InputMode.ROMAJI


class InputStore:
    """
    入力欄の状態。
    raw_input: 実際に打った文字 (ローマ字 or かな)
    current_input: romaji モードではひらがなに変換したもの、それ以外は raw_input と同じ
    is_composing: IME の変換中 (確定するまで判定しない)
    """

    def __init__(self, input_mode=DEFAULT_INPUT_MODE):
        self._lock = threading.Lock()
        self.raw_input = ""
        self.current_input = ""
        self.input_mode = InputMode(input_mode)
        self.is_composing = False

    def set_raw_input(self, raw):
        with self._lock:
            self.raw_input = raw
            if self.input_mode == InputMode.ROMAJI:
                self.current_input = to_hiragana(raw)
            else:
                self.current_input = raw

    def clear_input(self):
        with self._lock:
            self.raw_input = ""
            self.current_input = ""

    def set_input_mode(self, mode):
        """モードを変えたら入力はリセット"""
        with self._lock:
            self.input_mode = InputMode(mode)
            self.raw_input = ""
            self.current_input = ""
            self.is_composing = False

    def set_composing(self, is_composing):
        with self._lock:
            self.is_composing = is_composing

    def set_composed_input(self, text):
        """IME の確定後にかなを直接設定する"""
        with self._lock:
            self.raw_input = text
            self.current_input = text
            self.is_composing = False


class TypingSession:
    """
    入力イベントをゲームにつなぐ。

    - romaji モード: 1文字ごとに判定 (IME 変換中は判定しない)
    - hiragana / katakana モード: IME の確定 (composition_end) で判定
    - 正解なら match_word して入力をクリア、違えば add_keystroke で記録
    """

    def __init__(self, store, input_store=None, audio=None):
        self.store = store
        self.input = input_store or InputStore()
        self.audio = audio

    def _play(self, name):
        if self.audio is None:
            return
        try:
            getattr(self.audio, name)()
        except Exception as e:
            logging.warning(f"Audio '{name}' failed: {e}")

    def check_match(self, text):
        """入力で完成する単語があればマッチさせて True"""
        if self.store.status != GameStatus.PLAYING:
            return False
        matched = find_match(text, self.store.active_words(), self.input.input_mode)
        if matched is None:
            return False
        if not self.store.match_word(matched.instance_id):
            return False
        self._play("play_correct")
        self.input.clear_input()
        return True

    def type_text(self, value):
        """入力欄の値が変わったとき (value は入力欄全体の文字列)"""
        if self.store.status != GameStatus.PLAYING:
            return False
        self.input.set_raw_input(value)
        if self.input.is_composing or not value:
            return False
        if self.input.input_mode != InputMode.ROMAJI:
            return False
        if self.check_match(value):
            return True
        # 途中まで合っていれば正しい1打として数える
        correct = has_prefix_match(value, self.store.active_words(), self.input.input_mode)
        self.store.add_keystroke(correct)
        return False

    def type_key(self, ch):
        """1文字追加 (ターミナル用)"""
        return self.type_text(self.input.raw_input + ch)

    def backspace(self):
        if self.store.status != GameStatus.PLAYING:
            return
        self.input.set_raw_input(self.input.raw_input[:-1])

    def composition_start(self):
        self.input.set_composing(True)

    def composition_end(self, text):
        """IME の確定。確定した文字列で判定する"""
        self.input.set_composed_input(text)
        if not text:
            return False
        return self.check_match(text)

    def escape(self):
        """ESC: 一時停止 / 再開"""
        return self.store.toggle_pause()

    def set_input_mode(self, mode):
        self.input.set_input_mode(mode)
