# kanatype/matching.py
from kanatype.romaji_converter import split_romaji, kata_to_hira, pending_fits

# 入力判定 (すべて副作用なし)
#  - romaji: ひらがなに変換してから word.reading と比較
#  - hiragana: そのまま比較
#  - katakana: ひらがなに揃えてから比較 (正解の読みは常にひらがな)


def _reading(word):
    return getattr(word, "reading", word)


def _mode(input_mode):
    return getattr(input_mode, "value", input_mode)


def _kana_input(text, input_mode):
    if _mode(input_mode) == "katakana":
        return kata_to_hira(text)
    return text


def is_correct_input(text, word, input_mode="romaji") -> bool:
    """入力が単語の正解 (完全一致) かどうか"""
    if not text:
        return False
    target = _reading(word).lower()
    if _mode(input_mode) == "romaji":
        # 確定時の変換 (末尾の "n" も "ん" として扱う)
        resolved, pending = split_romaji(text, ime_mode=False)
        return not pending and resolved == target
    return _kana_input(text, input_mode) == target


def is_prefix_match(text, word, input_mode="romaji") -> bool:
    """入力が単語の途中まで合っているか (入力中のハイライト用)"""
    if not text:
        return False
    target = _reading(word).lower()
    if _mode(input_mode) == "romaji":
        resolved, pending = split_romaji(text)
        if not target.startswith(resolved):
            return False
        return pending_fits(pending, target[len(resolved):])
    return target.startswith(_kana_input(text, input_mode))


def get_input_progress(text, word, input_mode="romaji") -> float:
    """入力の進捗 (0 ~ 1)。プログレスバー表示専用で、正誤判定には使わない"""
    target = _reading(word)
    if not text or not target:
        return 0
    if not is_prefix_match(text, word, input_mode):
        return 0
    if _mode(input_mode) == "romaji":
        converted, _ = split_romaji(text)
    else:
        converted = _kana_input(text, input_mode)
    return min(len(converted) / len(target), 1.0)


def find_match(text, falling_words, input_mode="romaji"):
    """入力で完成する、まだマッチしていない落下中の単語を返す (なければ None)"""
    for fw in falling_words:
        if fw.is_matched:
            continue
        if is_correct_input(text, fw.word, input_mode):
            return fw
    return None


def has_prefix_match(text, falling_words, input_mode="romaji") -> bool:
    """入力がどれかの落下中の単語の途中まで合っているか"""
    return any(
        not fw.is_matched and is_prefix_match(text, fw.word, input_mode)
        for fw in falling_words
    )
