"""
电脑出牌策略

每次调用只决定一个动作; 额外回合 (A) 由状态机再次交给策略
"""
from typing import List, Optional, Sequence
import logging
import numpy as np

from .actions import Action
from .cards import Card, cards_to_str, group_by_rank
from .config import RulesConfig
from .rules import RuleEngine
from .state import CardSource, GameState, Side

logger = logging.getLogger(__name__)


class ComputerPolicy:
    """
    电脑策略

    1. 牌堆为空、手牌不足且牌组非空时先补牌
    2. 按 手牌 → 明牌 → 暗牌 选择出牌区域
    3. 手牌/明牌: 优先出最小的非特殊合法牌面组 (同值时多张优先，整组打出);
       只有特殊牌合法时只出最小特殊牌中的一张; 都不合法则收牌
    4. 暗牌: 随机翻开一张

    Args:
        rng: 随机数生成器 (选择暗牌)
        side: 策略控制的一方
        rules: 规则配置
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        side: Side = Side.COMPUTER,
        rules: Optional[RulesConfig] = None,
    ):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.side = side
        self.rules = rules or RulesConfig()

    def decide(self, state: GameState) -> Action:
        """
        决定一个动作

        Args:
            state: 当前状态 (必须轮到 self.side)

        Returns:
            Action
        """
        side = self.side
        zones = state.zones(side)

        if not state.pile and state.deck and len(zones.hand) < self.rules.hand_floor:
            logger.debug(f"{side.value} draws before acting")
            return Action.draw(side)

        source = state.active_source(side)
        if source is None:
            if state.deck:
                return Action.draw(side)
            return Action.pass_turn(side)

        if source is CardSource.FACE_DOWN:
            card = zones.face_down[int(self.rng.integers(len(zones.face_down)))]
            logger.debug(f"{side.value} reveals a face-down card")
            return Action.reveal(side, card.id)

        chosen = self.choose_cards(zones.get(source), state.pile)
        if chosen:
            logger.debug(f"{side.value} plays {cards_to_str(chosen)} from {source.value}")
            return Action.play(side, [c.id for c in chosen], source)

        if state.pile:
            logger.debug(f"{side.value} has no legal play, picking up {len(state.pile)} cards")
            return Action.pick_up(side)
        return Action.pass_turn(side)

    @staticmethod
    def choose_cards(cards: Sequence[Card], pile: Sequence[Card]) -> List[Card]:
        """
        从一个区域中选择要出的牌

        Args:
            cards: 可用的牌 (手牌或明牌)
            pile: 牌堆

        Returns:
            要出的牌 (无合法牌时为空列表)
        """
        legal = [
            group for group in group_by_rank(cards).values()
            if RuleEngine.can_play(group[0], pile)
        ]
        if not legal:
            return []

        ordinary = [g for g in legal if not g[0].is_special]
        if ordinary:
            ordinary.sort(key=lambda g: (g[0].value, -len(g)))
            return list(ordinary[0])

        # 只剩特殊牌时一次只出一张
        special = min(legal, key=lambda g: g[0].value)
        return [special[0]]
