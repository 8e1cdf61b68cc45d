"""
动作类型定义

外部输入 (人类界面) 和电脑策略都通过 Action 驱动状态机
"""
from enum import Enum
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .state import CardSource, Side


class ActionType(Enum):
    """动作类型"""
    PLAY = "play"                        # 从手牌/明牌出一张或多张同牌面
    REVEAL = "reveal"                    # 翻开一张暗牌并尝试出牌
    PICK_UP = "pick_up"                  # 收起牌堆
    DRAW = "draw"                        # 补牌到手牌下限
    PASS = "pass"                        # 无牌可出且牌堆为空时结束回合
    SWAP = "swap"                        # 交换一张手牌与一张明牌
    FINISH_SWAPPING = "finish_swapping"  # 结束交换，开始出牌
    BEGIN_ROUND = "begin_round"          # 发牌
    NEXT_ROUND = "next_round"            # 进入下一回合
    RESTART = "restart"                  # 从第 1 回合重新开始


# 出牌阶段由行动方发起的动作
TURN_ACTIONS = frozenset({
    ActionType.PLAY,
    ActionType.REVEAL,
    ActionType.PICK_UP,
    ActionType.DRAW,
    ActionType.PASS,
})


@dataclass(frozen=True, slots=True)
class Action:
    """
    不可变动作表示

    Attributes:
        action_type: 动作类型
        side: 行动方 (回合外动作为 None)
        card_ids: 涉及的牌 ID
        source: 出牌来源区域
    """
    action_type: ActionType
    side: Optional[Side] = None
    card_ids: Tuple[str, ...] = ()
    source: Optional[CardSource] = None

    @classmethod
    def play(cls, side: Side, card_ids: Iterable[str], source: CardSource = CardSource.HAND) -> 'Action':
        return cls(ActionType.PLAY, side, tuple(card_ids), source)

    @classmethod
    def reveal(cls, side: Side, card_id: str) -> 'Action':
        return cls(ActionType.REVEAL, side, (card_id,), CardSource.FACE_DOWN)

    @classmethod
    def pick_up(cls, side: Side) -> 'Action':
        return cls(ActionType.PICK_UP, side)

    @classmethod
    def draw(cls, side: Side) -> 'Action':
        return cls(ActionType.DRAW, side)

    @classmethod
    def pass_turn(cls, side: Side) -> 'Action':
        return cls(ActionType.PASS, side)

    @classmethod
    def swap(cls, hand_card_id: str, face_up_card_id: str) -> 'Action':
        return cls(ActionType.SWAP, Side.HUMAN, (hand_card_id, face_up_card_id))

    @classmethod
    def finish_swapping(cls) -> 'Action':
        return cls(ActionType.FINISH_SWAPPING, Side.HUMAN)

    @classmethod
    def begin_round(cls) -> 'Action':
        return cls(ActionType.BEGIN_ROUND)

    @classmethod
    def next_round(cls) -> 'Action':
        return cls(ActionType.NEXT_ROUND)

    @classmethod
    def restart(cls) -> 'Action':
        return cls(ActionType.RESTART)

    @property
    def is_turn_action(self) -> bool:
        return self.action_type in TURN_ACTIONS

    def __len__(self) -> int:
        return len(self.card_ids)
