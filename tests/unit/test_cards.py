"""牌定义测试"""
import pytest
import numpy as np

from palace.cards import (
    Card,
    Rank,
    Suit,
    CARD_VALUES,
    ALL_RANKS,
    COSMIC_RANKS,
    SPECIAL_RANKS,
    UNIVERSAL_RANKS,
    display_rank,
    make_card_id,
    sort_cards_by_value,
    group_by_rank,
    same_rank,
    cards_to_str,
    rank_counts,
)


def card(rank: str, n: int = 0) -> Card:
    return Card(f"test-{rank}-{n}", Suit.HEARTS, Rank(rank), True)


class TestCardValues:
    """比较值表测试"""

    def test_standard_values(self):
        assert CARD_VALUES[Rank.TWO] == 2
        assert CARD_VALUES[Rank.TEN] == 10
        assert CARD_VALUES[Rank.JACK] == 11
        assert CARD_VALUES[Rank.QUEEN] == 12
        assert CARD_VALUES[Rank.KING] == 13
        assert CARD_VALUES[Rank.ACE] == 14

    def test_cosmic_values(self):
        assert CARD_VALUES[Rank.GLITCH] == 3
        assert CARD_VALUES[Rank.BLACK_HOLE] == 20
        assert CARD_VALUES[Rank.WORMHOLE] == 15
        assert CARD_VALUES[Rank.SUPERNOVA] == 16
        assert CARD_VALUES[Rank.ASTEROID_FIELD] == 15

    def test_every_rank_has_value(self):
        for rank in ALL_RANKS:
            assert rank in CARD_VALUES

    def test_value_derived_from_rank(self):
        assert card("k").value == 13
        assert card("glitch").value == 3


class TestCardSets:
    """牌面集合测试"""

    def test_universal(self):
        assert UNIVERSAL_RANKS == frozenset({
            Rank.TWO, Rank.THREE, Rank.GLITCH, Rank.BLACK_HOLE,
            Rank.WORMHOLE, Rank.SUPERNOVA, Rank.ASTEROID_FIELD,
        })
        assert not card("a").is_universal
        assert not card("7").is_universal

    def test_transparent(self):
        assert card("3").is_transparent
        assert card("glitch").is_transparent
        assert not card("2").is_transparent

    def test_seven_is_not_special(self):
        assert Rank.SEVEN not in SPECIAL_RANKS
        assert card("a").is_special
        assert card("2").is_special

    def test_cosmic(self):
        assert len(COSMIC_RANKS) == 5
        assert Rank.WORMHOLE.is_cosmic
        assert not Rank.ACE.is_cosmic


class TestCard:
    """Card 测试"""

    def test_immutable(self):
        c = card("5")
        with pytest.raises(AttributeError):
            c.rank = Rank.SIX

    def test_with_face(self):
        c = Card("x", Suit.CLUBS, Rank.FIVE)
        flipped = c.with_face(True)
        assert flipped.face_up
        assert not c.face_up
        assert flipped.id == c.id
        assert c.with_face(False) is c

    def test_str(self):
        assert str(card("j")) == "Jack"
        assert str(card("black-hole")) == "Black Hole"
        assert str(card("7")) == "7"

    def test_display_rank(self):
        assert display_rank(Rank.ACE) == "Ace"
        assert display_rank(Rank.ASTEROID_FIELD) == "Asteroid Field"
        assert display_rank(Rank.TEN) == "10"

    def test_make_card_id(self):
        assert make_card_id(Suit.HEARTS, Rank.SEVEN, 18) == "hearts-7-18"


class TestCardHelpers:
    """辅助函数测试"""

    def test_sort_by_value(self):
        cards = [card("k"), card("2"), card("9")]
        assert [c.rank for c in sort_cards_by_value(cards)] == [Rank.TWO, Rank.NINE, Rank.KING]

    def test_group_by_rank(self):
        cards = [card("4", 0), card("9"), card("4", 1)]
        groups = group_by_rank(cards)
        assert list(groups.keys()) == [Rank.FOUR, Rank.NINE]
        assert len(groups[Rank.FOUR]) == 2

    def test_same_rank(self):
        assert same_rank([card("4", 0), card("4", 1)])
        assert not same_rank([card("4"), card("5")])
        assert same_rank([])

    def test_cards_to_str(self):
        assert cards_to_str([card("3"), card("q")]) == "3 Queen"

    def test_rank_counts(self):
        counts = rank_counts([card("4", 0), card("4", 1), card("supernova")])
        assert counts.shape == (18,)
        assert counts.dtype == np.float32
        assert counts[ALL_RANKS.index(Rank.FOUR)] == 2
        assert counts[ALL_RANKS.index(Rank.SUPERNOVA)] == 1
        assert counts.sum() == 3
