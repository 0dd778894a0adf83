"""
入力判定 (完全一致・途中一致・進捗) のテスト
"""

import pytest

from kanatype.matching import (
    is_correct_input, is_prefix_match, get_input_progress, find_match, has_prefix_match,
)
from kanatype.models import FallingWord, InputMode
from kanatype.romaji_converter import romaji_spellings
from tests.conftest import make_word


@pytest.fixture
def shisan():
    return make_word("w1", "資産", "しさん", "shisan")


def falling(word, instance_id="fw-1", is_matched=False):
    return FallingWord(instance_id=instance_id, word=word, x=10, y=0, speed=1.0, is_matched=is_matched)


class TestRomajiScenario:

    def test_complete_word(self, shisan):
        assert is_correct_input("shisan", shisan) is True
        assert is_correct_input("sisann", shisan) is True

    def test_partial_word(self, shisan):
        assert is_prefix_match("shi", shisan) is True
        assert get_input_progress("shi", shisan) == pytest.approx(1 / 3)
        assert is_correct_input("shi", shisan) is False

    def test_pending_tail_is_not_counted(self, shisan):
        # 未確定の "s" や末尾の "n" はまだかなではない
        assert get_input_progress("shis", shisan) == pytest.approx(1 / 3)
        assert get_input_progress("shisa", shisan) == pytest.approx(2 / 3)
        assert get_input_progress("shisan", shisan) == pytest.approx(2 / 3)
        assert get_input_progress("shisann", shisan) == 1

    def test_wrong_input(self, shisan):
        assert is_correct_input("xyz", shisan) is False
        assert is_prefix_match("xyz", shisan) is False
        assert get_input_progress("xyz", shisan) == 0

    def test_sokuon(self):
        kitte = make_word("w6", "切手", "きって")
        assert is_correct_input("kitte", kitte) is True
        assert is_prefix_match("kit", kitte) is True
        assert is_prefix_match("kitt", kitte) is True
        assert is_prefix_match("kik", kitte) is False

    def test_empty_input(self, shisan):
        assert is_correct_input("", shisan) is False
        assert is_prefix_match("", shisan) is False
        assert get_input_progress("", shisan) == 0

    def test_pending_consonant(self):
        kaisha = make_word("w4", "会社", "かいしゃ")
        assert is_prefix_match("kais", kaisha) is True
        assert is_prefix_match("kaish", kaisha) is True
        assert is_prefix_match("kait", kaisha) is False
        assert get_input_progress("kais", kaisha) == pytest.approx(2 / 4)

    def test_n_before_vowel(self):
        kani = make_word("w7", "簡易", "かんい")
        assert is_correct_input("kanni", kani) is True
        assert is_correct_input("kani", kani) is False
        assert is_prefix_match("kan", kani) is True


class TestEverySpellingIsAccepted:

    @pytest.mark.parametrize("reading", [
        "しさん", "きって", "かんい", "きょう", "ちょっと", "きっち", "まっちゃ",
    ])
    def test_prefixes_of_accepted_spellings(self, reading):
        word = make_word("w", reading, reading)
        for spelling in romaji_spellings(reading):
            assert is_correct_input(spelling, word) is True
            for i in range(1, len(spelling)):
                assert is_prefix_match(spelling[:i], word) is True, spelling[:i]
                assert 0 <= get_input_progress(spelling[:i], word) <= 1


class TestKanaModes:

    def test_hiragana(self, shisan):
        assert is_correct_input("しさん", shisan, InputMode.HIRAGANA) is True
        assert is_prefix_match("しさ", shisan, InputMode.HIRAGANA) is True
        assert get_input_progress("しさ", shisan, "hiragana") == pytest.approx(2 / 3)
        assert is_correct_input("シサン", shisan, InputMode.HIRAGANA) is False

    def test_katakana_is_folded(self, shisan):
        assert is_correct_input("シサン", shisan, InputMode.KATAKANA) is True
        assert is_prefix_match("シ", shisan, "katakana") is True

    def test_romaji_is_not_kana(self, shisan):
        assert is_correct_input("shisan", shisan, InputMode.HIRAGANA) is False


class TestFallingWords:

    def test_find_match_skips_matched(self, shisan):
        words = [falling(shisan, "fw-1", is_matched=True), falling(shisan, "fw-2")]
        assert find_match("shisan", words).instance_id == "fw-2"

    def test_find_match_none(self, shisan):
        assert find_match("shisan", [falling(shisan, is_matched=True)]) is None
        assert find_match("kessan", [falling(shisan)]) is None

    def test_has_prefix_match(self, shisan):
        kessan = make_word("w3", "決算", "けっさん")
        words = [falling(shisan, "fw-1"), falling(kessan, "fw-2")]
        assert has_prefix_match("ke", words) is True
        assert has_prefix_match("shi", words) is True
        assert has_prefix_match("mo", words) is False
        assert has_prefix_match("ke", [falling(kessan, is_matched=True)]) is False
