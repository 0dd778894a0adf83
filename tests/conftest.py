import random

import pytest

from kanatype.models import Word
from kanatype.game_store import GameStore


def make_word(word_id, japanese, reading, romaji="", difficulty=1, category="accounting"):
    return Word(id=word_id, japanese=japanese, reading=reading, romaji=romaji,
                meaning="", category=category, difficulty=difficulty, tags=())


@pytest.fixture
def words():
    return [
        make_word("w1", "資産", "しさん", "shisan"),
        make_word("w2", "負債", "ふさい", "fusai"),
        make_word("w3", "決算", "けっさん", "kessan", difficulty=2),
        make_word("w4", "会社", "かいしゃ", "kaisha", difficulty=2),
        make_word("w5", "監査", "かんさ", "kansa", difficulty=3),
        make_word("w6", "切手", "きって", "kitte", difficulty=3),
    ]


@pytest.fixture
def store():
    return GameStore(rng=random.Random(0))


@pytest.fixture
def playing_store(store, words):
    store.start_game(words, level=3)
    store.set_playing()
    return store
