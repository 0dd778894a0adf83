# kanatype/kana_data.py
from dataclasses import dataclass
from typing import Optional

# 五十音図ベースのかなテーブル (キーボード練習・ローマ字変換の共通データ)


@dataclass(frozen=True)
class Kana:
    kana: str                        # ひらがな
    kata: str                        # カタカナ
    romaji: str                      # 基本ローマ字
    alt_romaji: Optional[str] = None  # 別表記 (例: し → si / shi)
    row: int = 0                     # 段 (0=あ, 1=か, ...)
    col: int = 0                     # 列 (0=あ, 1=い, ...)
    type: str = "seion"              # seion | dakuten | handakuten


def _k(kana, kata, romaji, row, col, type_="seion", alt=None):
    return Kana(kana=kana, kata=kata, romaji=romaji, alt_romaji=alt,
                row=row, col=col, type=type_)


# --- 清音 ---
SEION = [
    # あ行
    _k("あ", "ア", "a", 0, 0), _k("い", "イ", "i", 0, 1), _k("う", "ウ", "u", 0, 2),
    _k("え", "エ", "e", 0, 3), _k("お", "オ", "o", 0, 4),
    # か行
    _k("か", "カ", "ka", 1, 0), _k("き", "キ", "ki", 1, 1), _k("く", "ク", "ku", 1, 2),
    _k("け", "ケ", "ke", 1, 3), _k("こ", "コ", "ko", 1, 4),
    # さ行
    _k("さ", "サ", "sa", 2, 0), _k("し", "シ", "si", 2, 1, alt="shi"), _k("す", "ス", "su", 2, 2),
    _k("せ", "セ", "se", 2, 3), _k("そ", "ソ", "so", 2, 4),
    # た行
    _k("た", "タ", "ta", 3, 0), _k("ち", "チ", "ti", 3, 1, alt="chi"),
    _k("つ", "ツ", "tu", 3, 2, alt="tsu"), _k("て", "テ", "te", 3, 3), _k("と", "ト", "to", 3, 4),
    # な行
    _k("な", "ナ", "na", 4, 0), _k("に", "ニ", "ni", 4, 1), _k("ぬ", "ヌ", "nu", 4, 2),
    _k("ね", "ネ", "ne", 4, 3), _k("の", "ノ", "no", 4, 4),
    # は行
    _k("は", "ハ", "ha", 5, 0), _k("ひ", "ヒ", "hi", 5, 1), _k("ふ", "フ", "fu", 5, 2, alt="hu"),
    _k("へ", "ヘ", "he", 5, 3), _k("ほ", "ホ", "ho", 5, 4),
    # ま行
    _k("ま", "マ", "ma", 6, 0), _k("み", "ミ", "mi", 6, 1), _k("む", "ム", "mu", 6, 2),
    _k("め", "メ", "me", 6, 3), _k("も", "モ", "mo", 6, 4),
    # や行 (い・え の位置は空き)
    _k("や", "ヤ", "ya", 7, 0), _k("ゆ", "ユ", "yu", 7, 2), _k("よ", "ヨ", "yo", 7, 4),
    # ら行
    _k("ら", "ラ", "ra", 8, 0), _k("り", "リ", "ri", 8, 1), _k("る", "ル", "ru", 8, 2),
    _k("れ", "レ", "re", 8, 3), _k("ろ", "ロ", "ro", 8, 4),
    # わ行
    _k("わ", "ワ", "wa", 9, 0), _k("を", "ヲ", "wo", 9, 4, alt="o"),
    # ん
    _k("ん", "ン", "nn", 10, 2, alt="n"),
]

# --- 濁音 ---
DAKUTEN = [
    _k("が", "ガ", "ga", 1, 0, "dakuten"), _k("ぎ", "ギ", "gi", 1, 1, "dakuten"),
    _k("ぐ", "グ", "gu", 1, 2, "dakuten"), _k("げ", "ゲ", "ge", 1, 3, "dakuten"),
    _k("ご", "ゴ", "go", 1, 4, "dakuten"),
    _k("ざ", "ザ", "za", 2, 0, "dakuten"), _k("じ", "ジ", "zi", 2, 1, "dakuten", alt="ji"),
    _k("ず", "ズ", "zu", 2, 2, "dakuten"), _k("ぜ", "ゼ", "ze", 2, 3, "dakuten"),
    _k("ぞ", "ゾ", "zo", 2, 4, "dakuten"),
    _k("だ", "ダ", "da", 3, 0, "dakuten"), _k("ぢ", "ヂ", "di", 3, 1, "dakuten"),
    _k("づ", "ヅ", "du", 3, 2, "dakuten"), _k("で", "デ", "de", 3, 3, "dakuten"),
    _k("ど", "ド", "do", 3, 4, "dakuten"),
    _k("ば", "バ", "ba", 5, 0, "dakuten"), _k("び", "ビ", "bi", 5, 1, "dakuten"),
    _k("ぶ", "ブ", "bu", 5, 2, "dakuten"), _k("べ", "ベ", "be", 5, 3, "dakuten"),
    _k("ぼ", "ボ", "bo", 5, 4, "dakuten"),
]

# --- 半濁音 ---
HANDAKUTEN = [
    _k("ぱ", "パ", "pa", 5, 0, "handakuten"), _k("ぴ", "ピ", "pi", 5, 1, "handakuten"),
    _k("ぷ", "プ", "pu", 5, 2, "handakuten"), _k("ぺ", "ペ", "pe", 5, 3, "handakuten"),
    _k("ぽ", "ポ", "po", 5, 4, "handakuten"),
]

# --- 拗音 (種別は元の行の 清音/濁音/半濁音 をそのまま使う) ---
YOUON = [
    _k("きゃ", "キャ", "kya", 1, 0), _k("きゅ", "キュ", "kyu", 1, 1), _k("きょ", "キョ", "kyo", 1, 2),
    _k("しゃ", "シャ", "sya", 2, 0, alt="sha"), _k("しゅ", "シュ", "syu", 2, 1, alt="shu"),
    _k("しょ", "ショ", "syo", 2, 2, alt="sho"),
    _k("ちゃ", "チャ", "tya", 3, 0, alt="cha"), _k("ちゅ", "チュ", "tyu", 3, 1, alt="chu"),
    _k("ちょ", "チョ", "tyo", 3, 2, alt="cho"),
    _k("にゃ", "ニャ", "nya", 4, 0), _k("にゅ", "ニュ", "nyu", 4, 1), _k("にょ", "ニョ", "nyo", 4, 2),
    _k("ひゃ", "ヒャ", "hya", 5, 0), _k("ひゅ", "ヒュ", "hyu", 5, 1), _k("ひょ", "ヒョ", "hyo", 5, 2),
    _k("みゃ", "ミャ", "mya", 6, 0), _k("みゅ", "ミュ", "myu", 6, 1), _k("みょ", "ミョ", "myo", 6, 2),
    _k("りゃ", "リャ", "rya", 8, 0), _k("りゅ", "リュ", "ryu", 8, 1), _k("りょ", "リョ", "ryo", 8, 2),
    _k("ぎゃ", "ギャ", "gya", 1, 0, "dakuten"), _k("ぎゅ", "ギュ", "gyu", 1, 1, "dakuten"),
    _k("ぎょ", "ギョ", "gyo", 1, 2, "dakuten"),
    _k("じゃ", "ジャ", "zya", 2, 0, "dakuten", alt="ja"),
    _k("じゅ", "ジュ", "zyu", 2, 1, "dakuten", alt="ju"),
    _k("じょ", "ジョ", "zyo", 2, 2, "dakuten", alt="jo"),
    _k("びゃ", "ビャ", "bya", 5, 0, "dakuten"), _k("びゅ", "ビュ", "byu", 5, 1, "dakuten"),
    _k("びょ", "ビョ", "byo", 5, 2, "dakuten"),
    _k("ぴゃ", "ピャ", "pya", 5, 0, "handakuten"), _k("ぴゅ", "ピュ", "pyu", 5, 1, "handakuten"),
    _k("ぴょ", "ピョ", "pyo", 5, 2, "handakuten"),
]

KANA_SETS = ("seion", "dakuten", "handakuten", "youon", "all")

# 五十音図の行・列ラベル
ROW_LABELS = ["あ", "か", "さ", "た", "な", "は", "ま", "や", "ら", "わ", "ん"]
COL_LABELS = ["ア列", "イ列", "ウ列", "エ列", "オ列"]

_SET_TABLES = (
    ("seion", SEION),
    ("dakuten", DAKUTEN),
    ("handakuten", HANDAKUTEN),
    ("youon", YOUON),
)


def get_kana_set(sets):
    """
    選択されたセット (seion/dakuten/handakuten/youon/all) を
    五十音図の順番で結合して返す。同じかなは一度だけ含まれる。
    """
    if isinstance(sets, str):
        sets = [sets]
    want_all = "all" in sets
    result = []
    seen = set()
    for name, table in _SET_TABLES:
        if not (want_all or name in sets):
            continue
        for entry in table:
            if entry.kana in seen:
                continue
            seen.add(entry.kana)
            result.append(entry)
    return result


def check_kana_input(user_input: str, kana: Kana) -> bool:
    """入力が基本ローマ字か別表記と完全一致するか"""
    normalized = user_input.lower().strip()
    if not normalized:
        return False
    return normalized == kana.romaji or normalized == kana.alt_romaji


def find_kana(romaji: str, sets=("all",)) -> Optional[Kana]:
    """ローマ字 (基本 or 別表記) からかなエントリを引く。見つからなければ None"""
    normalized = romaji.lower().strip()
    if not normalized:
        return None
    for entry in get_kana_set(list(sets)):
        if normalized == entry.romaji:
            return entry
    # 別表記は基本表記より優先度が低い (を の "o" より お を返す)
    for entry in get_kana_set(list(sets)):
        if normalized == entry.alt_romaji:
            return entry
    return None


def kana_grid(sets=("seion",)):
    """
    ドリル表示用の五十音図レイアウトを返す。
    戻り値: [(行ラベル, [Kana | None] * 5), ...]  (空の行は含まない)
    同じ位置に複数のかながある場合 (清音と濁音など) は先に来たものを使う。
    """
    grid = {}
    for entry in get_kana_set(list(sets)):
        cells = grid.setdefault(entry.row, [None] * len(COL_LABELS))
        if cells[entry.col] is None:
            cells[entry.col] = entry
    return [(ROW_LABELS[row], grid[row]) for row in sorted(grid)]
