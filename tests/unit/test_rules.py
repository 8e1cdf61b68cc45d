"""规则引擎测试"""
import pytest

from palace.cards import Card, Rank, Suit, ALL_RANKS, UNIVERSAL_RANKS
from palace.rules import RuleEngine, ILLEGAL_CARD_MESSAGE, MIXED_RANKS_MESSAGE


def card(rank: str, n: int = 0) -> Card:
    return Card(f"test-{rank}-{n}", Suit.HEARTS, Rank(rank), True)


def pile(*ranks: str):
    return tuple(card(r, i) for i, r in enumerate(ranks))


class TestEffectiveBase:
    """有效基准牌测试"""

    def test_empty(self):
        assert RuleEngine.effective_base(()) is None

    def test_plain_top(self):
        assert RuleEngine.effective_base(pile("5", "9")).rank == Rank.NINE

    def test_single_transparent(self):
        assert RuleEngine.effective_base(pile("3")).rank == Rank.THREE

    def test_walks_past_transparent_run(self):
        assert RuleEngine.effective_base(pile("10", "3", "glitch", "3")).rank == Rank.TEN

    def test_all_transparent_returns_bottom(self):
        base = RuleEngine.effective_base(pile("3", "glitch", "3"))
        assert base.id == "test-3-0"

    def test_seven_constraint(self):
        assert RuleEngine.seven_constraint(pile("7"))
        assert RuleEngine.seven_constraint(pile("7", "3", "3"))
        assert not RuleEngine.seven_constraint(pile("8", "3"))
        assert not RuleEngine.seven_constraint(())


class TestCanPlay:
    """出牌合法性测试"""

    def test_empty_pile(self):
        for rank in ALL_RANKS:
            assert RuleEngine.can_play(card(rank.value), ())

    def test_universal_always_legal(self):
        for rank in UNIVERSAL_RANKS:
            assert RuleEngine.can_play(card(rank.value), pile("a"))
            assert RuleEngine.can_play(card(rank.value), pile("7"))

    def test_value_monotonic(self):
        top = pile("9")
        assert RuleEngine.can_play(card("10"), top)
        assert RuleEngine.can_play(card("k"), top)
        assert not RuleEngine.can_play(card("8"), top)

    def test_equal_rank_is_illegal(self):
        assert not RuleEngine.can_play(card("9", 5), pile("9"))

    def test_seven_requires_lower(self):
        top = pile("7")
        assert RuleEngine.can_play(card("4"), top)
        assert RuleEngine.can_play(card("6"), top)
        assert not RuleEngine.can_play(card("7", 3), top)
        assert not RuleEngine.can_play(card("9"), top)
        assert not RuleEngine.can_play(card("k"), top)

    def test_scenario_b(self):
        # 顶牌为 7 时出 9 被拒绝
        assert not RuleEngine.can_play(card("9"), pile("5", "7"))

    def test_scenario_c(self):
        # 7 上的 3: 必须小于 7
        p = pile("k", "7", "3")
        assert RuleEngine.can_play(card("4"), p)
        assert not RuleEngine.can_play(card("9"), p)

    def test_ace_on_seven_is_illegal(self):
        assert not RuleEngine.can_play(card("a"), pile("7"))

    def test_ace_legal_on_high_cards(self):
        assert RuleEngine.can_play(card("a"), pile("k"))
        assert RuleEngine.can_play(card("a", 1), pile("a"))

    def test_ace_on_three_over_seven(self):
        # 只看字面顶牌是否为 7
        assert RuleEngine.can_play(card("a"), pile("7", "3"))

    def test_transparent_lookback(self):
        p = pile("10", "3")
        assert RuleEngine.can_play(card("j"), p)
        assert not RuleEngine.can_play(card("10", 5), p)
        assert not RuleEngine.can_play(card("9"), p)

    def test_transparent_run_lookback(self):
        p = pile("q", "3", "glitch")
        assert RuleEngine.can_play(card("k"), p)
        assert not RuleEngine.can_play(card("j"), p)

    def test_single_transparent_pile(self):
        p = pile("3")
        assert RuleEngine.can_play(card("4"), p)
        assert RuleEngine.can_play(card("3", 1), p)

    def test_all_transparent_pile(self):
        p = pile("3", "3", "glitch")
        assert RuleEngine.can_play(card("4"), p)


class TestCheckPlay:
    """出牌验证测试"""

    def test_legal(self):
        assert RuleEngine.check_play([card("8", 0), card("8", 1)], pile("5")) is None

    def test_mixed_ranks(self):
        assert RuleEngine.check_play([card("8"), card("9")], ()) == MIXED_RANKS_MESSAGE

    def test_illegal(self):
        assert RuleEngine.check_play([card("4")], pile("5")) == ILLEGAL_CARD_MESSAGE

    def test_can_play_set(self):
        assert RuleEngine.can_play_set([card("8", 0), card("8", 1)], pile("5"))
        assert not RuleEngine.can_play_set([card("8"), card("9")], ())
        assert not RuleEngine.can_play_set([], ())


class TestFourOfAKind:
    """四张同牌面测试"""

    def test_four(self):
        assert RuleEngine.is_four_of_a_kind([card("6", i) for i in range(4)])

    def test_aces_excluded(self):
        assert not RuleEngine.is_four_of_a_kind([card("a", i) for i in range(4)])

    def test_three_cards(self):
        assert not RuleEngine.is_four_of_a_kind([card("6", i) for i in range(3)])


class TestInstructionMessage:
    """提示文字测试"""

    def test_empty(self):
        assert RuleEngine.instruction_message(()) == "Your turn - play any card to start"

    def test_seven(self):
        assert RuleEngine.instruction_message(pile("7", "3")) == "Your turn - play a card LOWER than 7"

    def test_base(self):
        assert RuleEngine.instruction_message(pile("j", "3")) == "Your turn - play a card higher than Jack"
