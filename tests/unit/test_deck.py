"""牌组构建与发牌测试"""
import pytest
import numpy as np

from palace.cards import Card, Rank, Suit, COSMIC_RANKS
from palace.config import RulesConfig
from palace.deck import (
    build_standard_deck,
    add_special_cards,
    build_deck,
    shuffle_cards,
    arrange_computer_cards,
    deal,
)


def card(rank: str, n: int = 0) -> Card:
    return Card(f"test-{rank}-{n}", Suit.SPADES, Rank(rank), True)


def always_special() -> RulesConfig:
    return RulesConfig(special_probabilities={rank: {1: 1.0, 2: 1.0} for rank in COSMIC_RANKS})


class TestBuildDeck:
    """牌组构建测试"""

    def test_standard_deck(self):
        cards = build_standard_deck()
        assert len(cards) == 52
        assert len({c.id for c in cards}) == 52
        assert all(not c.face_up for c in cards)
        assert all(c.suit != Suit.SPECIAL for c in cards)

    def test_four_of_each_rank(self):
        cards = build_standard_deck()
        for rank in (Rank.TWO, Rank.SEVEN, Rank.ACE):
            assert sum(1 for c in cards if c.rank == rank) == 4

    def test_round_one_has_no_specials(self):
        rng = np.random.default_rng(0)
        for _ in range(20):
            assert len(build_deck(1, rng)) == 52

    def test_specials_added_with_certainty(self):
        rng = np.random.default_rng(0)
        cards = add_special_cards(build_standard_deck(), 1, rng, always_special())
        specials = [c for c in cards if c.suit == Suit.SPECIAL]
        assert len(cards) == 57
        assert [c.rank for c in specials] == list(COSMIC_RANKS)
        assert len({c.id for c in cards}) == 57

    def test_specials_never_added_at_zero(self):
        rng = np.random.default_rng(0)
        config = RulesConfig(special_probabilities={rank: {1: 0.0} for rank in COSMIC_RANKS})
        assert len(add_special_cards(build_standard_deck(), 1, rng, config)) == 52

    def test_at_most_one_of_each_special(self):
        rng = np.random.default_rng(3)
        for _ in range(20):
            cards = build_deck(5, rng)
            for rank in COSMIC_RANKS:
                assert sum(1 for c in cards if c.rank == rank) <= 1

    def test_shuffle_is_permutation(self):
        rng = np.random.default_rng(1)
        cards = build_standard_deck()
        shuffled = shuffle_cards(cards, rng)
        assert sorted(c.id for c in shuffled) == sorted(c.id for c in cards)


class TestArrangeComputerCards:
    """电脑整理测试"""

    def test_best_cards_move_to_face_up(self):
        hand = (card("4"), card("5"), card("k"))
        face_up = (card("a"), card("6"), card("8"))
        new_hand, new_face_up = arrange_computer_cards(hand, face_up)

        assert {c.rank for c in new_face_up} == {Rank.ACE, Rank.KING, Rank.EIGHT}
        assert {c.rank for c in new_hand} == {Rank.FOUR, Rank.FIVE, Rank.SIX}

    def test_too_many_best_cards(self):
        hand = (card("2"), card("3"), card("q"))
        face_up = (card("a"), card("j"), card("9"))
        new_hand, new_face_up = arrange_computer_cards(hand, face_up)

        assert len(new_hand) == 3
        assert len(new_face_up) == 3
        # 最小的最佳牌回到手牌
        assert {c.rank for c in new_hand} == {Rank.NINE, Rank.TWO, Rank.THREE}

    def test_sizes_preserved(self):
        hand = (card("4", 0), card("4", 1), card("5"))
        face_up = (card("6"), card("7"), card("8"))
        new_hand, new_face_up = arrange_computer_cards(hand, face_up)
        assert len(new_hand) == 3 and len(new_face_up) == 3
        assert {c.id for c in new_hand + new_face_up} == {c.id for c in hand + face_up}


class TestDeal:
    """发牌测试"""

    def test_sizes(self):
        dealt = deal(1, np.random.default_rng(42))
        assert len(dealt.discarded) == 15
        for zone in (
            dealt.human_hand, dealt.human_face_down, dealt.human_face_up,
            dealt.computer_hand, dealt.computer_face_down, dealt.computer_face_up,
        ):
            assert len(zone) == 3
        assert len(dealt.deck) == 52 - 15 - 18

    def test_partition(self):
        dealt = deal(5, np.random.default_rng(7))
        ids = [c.id for c in dealt.in_play + dealt.discarded]
        assert len(ids) == len(set(ids))

    def test_faces(self):
        dealt = deal(1, np.random.default_rng(42))
        assert all(c.face_up for c in dealt.human_hand + dealt.human_face_up)
        assert all(not c.face_up for c in dealt.human_face_down + dealt.computer_face_down)
        assert all(not c.face_up for c in dealt.deck)

    def test_human_hand_sorted(self):
        dealt = deal(1, np.random.default_rng(11))
        values = [c.value for c in dealt.human_hand]
        assert values == sorted(values)

    def test_deterministic(self):
        a = deal(3, np.random.default_rng(5))
        b = deal(3, np.random.default_rng(5))
        assert [c.id for c in a.in_play] == [c.id for c in b.in_play]

    def test_no_rearrange(self):
        config = RulesConfig(computer_palace_rearrange=False)
        dealt = deal(1, np.random.default_rng(42), config)
        values = [c.value for c in dealt.computer_hand]
        assert values == sorted(values)
