# kanatype/romaji_converter.py
import unicodedata
from functools import lru_cache
from itertools import product, islice

from kanatype.kana_data import SEION, DAKUTEN, HANDAKUTEN, YOUON

# --- ローマ字テーブル ---
# かな -> 入力可能なローマ字のリスト (先頭が基本表記)
# 五十音図の基本テーブルに、小文字・外来音・記号を追加する
EXTRA_TABLE = {
    # 五十音図にない別表記
    "し": ["ci"],
    "ぢゃ": ["dya"], "ぢゅ": ["dyu"], "ぢょ": ["dyo"],
    "しぇ": ["she", "sye"], "ちぇ": ["che", "tye"], "じぇ": ["je", "zye"],

    # 小さい ぁ ぃ ぅ ぇ ぉ (ふぁ など)
    "ふぁ": ["fa"], "ふぃ": ["fi"], "ふぇ": ["fe"], "ふぉ": ["fo"],
    "うぃ": ["wi"], "うぇ": ["we"], "うぉ": ["who"],
    "ゔぁ": ["va"], "ゔぃ": ["vi"], "ゔ": ["vu"], "ゔぇ": ["ve"], "ゔぉ": ["vo"],
    "てぃ": ["thi"], "でぃ": ["dhi"], "とぅ": ["twu"], "どぅ": ["dwu"],

    # 小文字単体 (x/l 始まり)
    "ぁ": ["xa", "la"], "ぃ": ["xi", "li"], "ぅ": ["xu", "lu"], "ぇ": ["xe", "le"], "ぉ": ["xo", "lo"],
    "ゃ": ["xya", "lya"], "ゅ": ["xyu", "lyu"], "ょ": ["xyo", "lyo"], "ゎ": ["xwa", "lwa"],
    "っ": ["xtu", "ltu", "xtsu", "ltsu"],  # 促音単体

    # 記号など
    "ー": ["-"], "、": [","], "。": ["."], "「": ["["], "」": ["]"], "・": ["/"],
    "？": ["?"], "！": ["!"], "〜": ["~"],
}


def _build_roman_table():
    table = {}
    for entry in SEION + DAKUTEN + HANDAKUTEN + YOUON:
        spellings = [entry.romaji]
        if entry.alt_romaji:
            spellings.append(entry.alt_romaji)
        table[entry.kana] = spellings
    for kana, spellings in EXTRA_TABLE.items():
        table.setdefault(kana, [])
        for s in spellings:
            if s not in table[kana]:
                table[kana].append(s)
    return table


ROMAN_TABLE = _build_roman_table()

# 逆引き: ローマ字 -> かな
# 先に登録された表記が優先 ("o" は を ではなく お)
# 単独の "n" は撥音ルールで処理するのでトークンに含めない
ROMAJI_TO_KANA = {}
for _kana, _spellings in ROMAN_TABLE.items():
    for _s in _spellings:
        if _s == "n" or _s in ROMAJI_TO_KANA:
            continue
        ROMAJI_TO_KANA[_s] = _kana

# かな -> 実際に変換できるローマ字 (逆引きテーブルと矛盾しないもの)
KANA_SPELLINGS = {}
for _s, _kana in ROMAJI_TO_KANA.items():
    KANA_SPELLINGS.setdefault(_kana, []).append(_s)
KANA_SPELLINGS["ん"] = ["nn", "n'", "n"]

# かな -> 基本ローマ字 (ヒント表示用)
CANONICAL_ROMAJI = {kana: spellings[0] for kana, spellings in ROMAN_TABLE.items()}

MAX_TOKEN_LENGTH = max(len(s) for s in ROMAJI_TO_KANA)

# 入力途中のローマ字 (例: "k", "ky", "sh", "xts")
TOKEN_PREFIXES = set()
for _s in ROMAJI_TO_KANA:
    for _i in range(1, len(_s) + 1):
        TOKEN_PREFIXES.add(_s[:_i])
TOKEN_PREFIXES.add("n")

VOWELS = "aiueo"
# n は撥音として別に扱う
CONSONANTS = "bcdfghjklmpqrstvwxyz"

SMALL_TSU = "っ"
NASAL = "ん"


def kata_to_hira(s):
    """カタカナをひらがなに変換する (NFKC正規化を含む)"""
    s = unicodedata.normalize('NFKC', s)
    result = []
    for ch in s:
        code = ord(ch)
        if 0x30A1 <= code <= 0x30F6:
            result.append(chr(code - 0x60))
        else:
            result.append(ch)
    return "".join(result)


def hira_to_kata(s):
    """ひらがなをカタカナに変換する"""
    result = []
    for ch in s:
        code = ord(ch)
        if 0x3041 <= code <= 0x3096:
            result.append(chr(code + 0x60))
        else:
            result.append(ch)
    return "".join(result)


def _starts_with_token(text):
    for size in range(min(MAX_TOKEN_LENGTH, len(text)), 0, -1):
        if text[:size] in ROMAJI_TO_KANA:
            return True
    return False


def split_romaji(romaji: str, ime_mode: bool = True):
    """
    ローマ字バッファを (確定したかな, 未確定のローマ字) に分ける。

    - 最長一致 (長いトークンから順に試す)
    - 子音の重複 + 母音まで揃ったもの → "っ" (例: "tte" → "って")
      揃っていない重複子音 ("tt") は未確定のまま残す
    - "nn" / "n'" は常に "ん"。"n" + 母音/y 以外 → "ん"、"n" + 母音/y は次の音へ
    - 末尾の単独 "n" は ime_mode では未確定、ime_mode=False (確定時) は "ん"
    - どのトークンの先頭にもならない文字はそのまま通す

    例:
    split_romaji("kitte")   # ("きって", "")
    split_romaji("shisan")  # ("しさ", "n")
    split_romaji("shisan", ime_mode=False)  # ("しさん", "")
    split_romaji("ky")      # ("", "ky")
    """
    text = romaji.lower()
    out = []
    i = 0
    while i < len(text):
        rest = text[i:]
        ch = rest[0]

        # 1. 促音 ("kka", "tte", "tchi" など)
        if rest == "tc":
            # "tch" の入力途中
            return "".join(out), rest
        if ch in CONSONANTS and len(rest) >= 2 and (rest[1] == ch or rest.startswith("tch")):
            follow = rest[1:]
            if _starts_with_token(follow):
                out.append(SMALL_TSU)
                i += 1
                continue
            if follow in TOKEN_PREFIXES:
                # 重複子音の後ろがまだ揃っていない
                return "".join(out), rest

        # 2. "ん" の処理
        if ch == "n":
            if rest.startswith("nn") or rest.startswith("n'"):
                out.append(NASAL)
                i += 2
                continue
            if len(rest) == 1:
                if ime_mode:
                    return "".join(out), rest
                out.append(NASAL)
                i += 1
                continue
            if rest[1] not in VOWELS and rest[1] != "y":
                out.append(NASAL)
                i += 1
                continue

        # 3. 最長一致
        for size in range(min(MAX_TOKEN_LENGTH, len(rest)), 0, -1):
            kana = ROMAJI_TO_KANA.get(rest[:size])
            if kana:
                out.append(kana)
                i += size
                break
        else:
            if rest in TOKEN_PREFIXES:
                # 入力途中のかな
                return "".join(out), rest
            out.append(ch)
            i += 1

    return "".join(out), ""


def to_hiragana(romaji: str, ime_mode: bool = True) -> str:
    """ローマ字をひらがなに変換する。未確定のローマ字は末尾にそのまま残す"""
    resolved, pending = split_romaji(romaji, ime_mode=ime_mode)
    return resolved + pending


def split_hiragana(s):
    """ひらがな文字列をローマ字テーブルに基づいて分割する (拗音などを考慮)"""
    i = 0
    result = []
    while i < len(s):
        # 2文字がテーブルにあるか (例: "きゃ")
        if i + 1 < len(s) and s[i:i+2] in ROMAN_TABLE:
            result.append(s[i:i+2])
            i += 2
        else:
            # テーブルにない文字 (漢字、記号など) もそのまま1単位
            result.append(s[i])
            i += 1
    return result


def _first_consonant(romaji):
    """ローマ字表記の最初の子音を返す"""
    for ch in romaji:
        if ch in CONSONANTS:
            return ch
        if ch in VOWELS:
            return ""
    return ""


def to_romaji(kana: str) -> str:
    """
    ひらがな (カタカナも可) を基本ローマ字に変換する (ヒント表示用)
    例: "しさん" → "sisann", "きって" → "kitte"
    """
    units = split_hiragana(kata_to_hira(kana))
    result = []
    i = 0
    while i < len(units):
        unit = units[i]
        if unit == SMALL_TSU:
            next_romaji = CANONICAL_ROMAJI.get(units[i + 1], "") if i + 1 < len(units) else ""
            consonant = _first_consonant(next_romaji)
            if consonant and next_romaji.startswith(consonant):
                result.append(consonant)
            else:
                result.append(CANONICAL_ROMAJI[SMALL_TSU])
        else:
            result.append(CANONICAL_ROMAJI.get(unit, unit))
        i += 1
    return "".join(result)


def _unit_options(units, i):
    """units[i] から始まる1単位 (促音は次の文字ごと) の候補と消費数を返す"""
    unit = units[i]
    if unit == SMALL_TSU and i + 1 < len(units):
        next_options = KANA_SPELLINGS.get(units[i + 1])
        if next_options:
            options = []
            for nr in next_options:
                first_con = _first_consonant(nr)
                if first_con and nr.startswith(first_con):
                    options.append(first_con + nr)
                if nr.startswith("ch"):
                    options.append("t" + nr)  # tchi
            for small in KANA_SPELLINGS[SMALL_TSU]:
                options.extend(small + nr for nr in next_options)
            return options, 2
    return KANA_SPELLINGS.get(unit, [unit]), 1


def romaji_spellings(reading: str, limit=None):
    """
    ひらがな文字列から、あり得るローマ字表記を返す (基本表記が先頭)。
    全ての候補は to_hiragana(..., ime_mode=False) で reading に戻る。
    """
    hira = kata_to_hira(reading)
    if not hira:
        return [""]

    units = split_hiragana(hira)
    romaji_lists = []
    i = 0
    while i < len(units):
        options, consumed = _unit_options(units, i)
        romaji_lists.append(options)
        i += consumed

    results = []
    seen = set()
    combos = ("".join(p) for p in product(*romaji_lists))
    for combo in combos:
        if combo in seen:
            continue
        seen.add(combo)
        # "n" + 母音 のような組み合わせは別のかなになるので除外
        if to_hiragana(combo, ime_mode=False) != hira:
            continue
        results.append(combo)
        if limit is not None and len(results) >= limit:
            break
    return results


@lru_cache(maxsize=2048)
def _head_spellings(remainder):
    head = "".join(islice(split_hiragana(remainder), 3))
    return tuple(romaji_spellings(head))


def pending_fits(pending: str, remainder: str) -> bool:
    """未確定のローマ字 pending が、残りの読み remainder の入力途中として有効か"""
    if not pending:
        return True
    if not remainder:
        return False
    return any(s.startswith(pending) for s in _head_spellings(remainder))
