"""
规则引擎 - 出牌合法性判定

所有方法都是纯函数，无状态
"""
from typing import Optional, Sequence

from .cards import Card, Rank, CARD_VALUES, display_rank, same_rank


SEVEN_VALUE = CARD_VALUES[Rank.SEVEN]

MIXED_RANKS_MESSAGE = "Can only play multiple cards of the same rank"
ILLEGAL_CARD_MESSAGE = "Can't play that card"


class RuleEngine:
    """
    Space Palace 规则引擎

    判定一张牌能否出到当前牌堆上
    所有方法都是静态方法，无状态
    """

    @staticmethod
    def effective_base(pile: Sequence[Card]) -> Optional[Card]:
        """
        牌堆的有效基准牌

        顶牌不是透明牌 (3 / glitch) 时就是顶牌；
        否则向下跳过连续的透明牌，直到遇到非透明牌或牌堆底

        Args:
            pile: 牌堆 (最后一张为顶牌)

        Returns:
            基准牌，空牌堆返回 None
        """
        if not pile:
            return None
        i = len(pile) - 1
        while i > 0 and pile[i].is_transparent:
            i -= 1
        return pile[i]

    @staticmethod
    def seven_constraint(pile: Sequence[Card]) -> bool:
        """下一张牌是否必须小于 7 (顶牌或透明牌下方为 7)"""
        base = RuleEngine.effective_base(pile)
        return base is not None and base.rank == Rank.SEVEN

    @staticmethod
    def can_play(card: Card, pile: Sequence[Card]) -> bool:
        """
        检查一张牌能否出到牌堆上

        判定顺序:
        1. 空牌堆: 合法
        2. 万能牌 (2, 3, glitch, 宇宙牌): 合法
        3. A: 顶牌不是 7 即合法
        4. 顶牌为 7: 必须小于 7
        5. 顶牌为透明牌: 以有效基准牌判定 (基准为 7 时必须小于 7，否则必须严格大于)
        6. 默认: 必须严格大于顶牌 (同点不可出)

        Args:
            card: 要出的牌
            pile: 牌堆

        Returns:
            是否合法
        """
        if not pile:
            return True

        if card.is_universal:
            return True

        top = pile[-1]

        if card.rank == Rank.ACE:
            return top.rank != Rank.SEVEN

        if top.rank == Rank.SEVEN:
            return card.value < SEVEN_VALUE

        if top.is_transparent and len(pile) >= 2:
            base = RuleEngine.effective_base(pile)
            if base.rank == Rank.SEVEN:
                return card.value < SEVEN_VALUE
            return card.value > base.value

        return card.value > top.value

    @staticmethod
    def can_play_set(cards: Sequence[Card], pile: Sequence[Card]) -> bool:
        """
        检查一组牌能否一起出

        同牌面的一组牌合法性与其中任意一张相同
        """
        if not cards or not same_rank(cards):
            return False
        return RuleEngine.can_play(cards[0], pile)

    @staticmethod
    def check_play(cards: Sequence[Card], pile: Sequence[Card]) -> Optional[str]:
        """
        验证一次出牌

        Returns:
            拒绝原因，合法时返回 None
        """
        if not same_rank(cards):
            return MIXED_RANKS_MESSAGE
        if not RuleEngine.can_play(cards[0], pile):
            return ILLEGAL_CARD_MESSAGE
        return None

    @staticmethod
    def is_four_of_a_kind(cards: Sequence[Card]) -> bool:
        """四张同牌面 (A 除外) 烧掉原牌堆"""
        return len(cards) == 4 and same_rank(cards) and cards[0].rank != Rank.ACE

    @staticmethod
    def instruction_message(pile: Sequence[Card]) -> str:
        """轮到人类时的提示文字"""
        if not pile:
            return "Your turn - play any card to start"
        if RuleEngine.seven_constraint(pile):
            return "Your turn - play a card LOWER than 7"
        base = RuleEngine.effective_base(pile)
        return f"Your turn - play a card higher than {display_rank(base.rank)}"
