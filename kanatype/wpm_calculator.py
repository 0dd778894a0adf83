# kanatype/wpm_calculator.py
import math
import random
import string
from datetime import datetime, timezone


def round_half_up(x):
    """四捨五入 (Python の round は偶数丸めなので使わない)"""
    return int(math.floor(x + 0.5))


def calculate_wpm(completed_words, elapsed_ms):
    """
    WPM (Words Per Minute)
    日本語は完成した単語数を基準に計算する
    """
    if elapsed_ms <= 0:
        return 0
    minutes = elapsed_ms / 60000
    return round_half_up(completed_words / minutes)


def calculate_accuracy(total_keystrokes, correct_keystrokes):
    """正確率 (0 ~ 100, 小数第1位まで)"""
    if total_keystrokes <= 0:
        return 100
    return round_half_up((correct_keystrokes / total_keystrokes) * 1000) / 10


def calculate_score(combo, level):
    """コンボボーナス込みの1単語あたりの得点"""
    base = 100
    combo_bonus = min(combo * 10, 200)
    level_multiplier = 1 + (level - 1) * 0.2
    return round_half_up((base + combo_bonus) * level_multiplier)


def format_time(ms):
    """経過時間を mm:ss 形式にする"""
    total_seconds = int(ms // 1000)
    minutes = total_seconds // 60
    seconds = total_seconds % 60
    return f"{minutes:02d}:{seconds:02d}"


def generate_session_id(now=None):
    now = now or datetime.now(timezone.utc)
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=4))
    return f"sess-{now.strftime('%Y%m%d%H%M%S')}-{suffix}"
