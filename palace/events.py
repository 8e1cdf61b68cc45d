"""
事件定义

状态机每一步产生的有序事件，供展示层播放动画;
事件本身不再影响游戏逻辑
"""
from enum import Enum
from dataclasses import dataclass
from typing import Optional, Tuple

from .cards import Card
from .state import Side


class EventType(Enum):
    """事件类型"""
    ROUND_DEALT = "round_dealt"
    CARDS_SWAPPED = "cards_swapped"
    PHASE_CHANGED = "phase_changed"
    CARDS_PLAYED = "cards_played"
    CARD_REVEALED = "card_revealed"
    PILE_BURNED = "pile_burned"
    DECK_BURNED = "deck_burned"
    PALACES_BURNED = "palaces_burned"
    CARD_BURNED = "card_burned"
    HANDS_SWAPPED = "hands_swapped"
    FORCED_DRAW = "forced_draw"
    CARDS_DRAWN = "cards_drawn"
    PILE_PICKED_UP = "pile_picked_up"
    DISTORTION = "distortion"
    EXTRA_TURN = "extra_turn"
    TURN_CHANGED = "turn_changed"
    TURN_FORCED = "turn_forced"
    ROUND_WON = "round_won"
    MATCH_WON = "match_won"
    MATCH_LOST = "match_lost"
    PLAY_REJECTED = "play_rejected"


@dataclass(frozen=True)
class Event:
    """
    单个事件

    Attributes:
        event_type: 事件类型
        side: 相关玩家
        cards: 相关的牌
        message: 可读描述
    """
    event_type: EventType
    side: Optional[Side] = None
    cards: Tuple[Card, ...] = ()
    message: str = ""

    def __repr__(self) -> str:
        who = self.side.value if self.side else "-"
        return f"Event({self.event_type.value}, {who}, {len(self.cards)} cards, {self.message!r})"
