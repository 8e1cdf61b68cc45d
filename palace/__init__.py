"""
Palace Layer - 纯游戏逻辑 (无 I/O、无时钟)

Modules:
    cards: 牌定义与编码
    config: 规则配置
    rounds: 对手与回合上下文
    deck: 牌组构建与发牌
    rules: 出牌合法性判定
    state: 游戏状态
    actions: 动作类型
    events: 事件
    effects: 特殊牌效果
    engine: 回合状态机
    policy: 电脑策略
"""
from .cards import (
    Suit,
    Rank,
    Card,
    CARD_VALUES,
    ALL_RANKS,
    COSMIC_RANKS,
    SPECIAL_RANKS,
    UNIVERSAL_RANKS,
    TRANSPARENT_RANKS,
    display_rank,
    make_card_id,
    sort_cards_by_value,
    group_by_rank,
    cards_to_str,
    rank_counts,
)

from .config import RulesConfig, DEFAULT_SPECIAL_PROBABILITIES

from .rounds import OpponentProfile, OPPONENTS, TOTAL_ROUNDS, RoundContext

from .deck import Deal, build_standard_deck, add_special_cards, build_deck, deal

from .rules import RuleEngine

from .state import (
    Phase,
    Side,
    CardSource,
    MatchOutcome,
    PlayerZones,
    GameState,
    PLAY_ORDER,
)

from .actions import ActionType, Action

from .events import EventType, Event

from .effects import EffectResolver, EffectResult

from .engine import TurnEngine, StepResult

from .policy import ComputerPolicy

__all__ = [
    # cards
    "Suit",
    "Rank",
    "Card",
    "CARD_VALUES",
    "ALL_RANKS",
    "COSMIC_RANKS",
    "SPECIAL_RANKS",
    "UNIVERSAL_RANKS",
    "TRANSPARENT_RANKS",
    "display_rank",
    "make_card_id",
    "sort_cards_by_value",
    "group_by_rank",
    "cards_to_str",
    "rank_counts",
    # config
    "RulesConfig",
    "DEFAULT_SPECIAL_PROBABILITIES",
    # rounds
    "OpponentProfile",
    "OPPONENTS",
    "TOTAL_ROUNDS",
    "RoundContext",
    # deck
    "Deal",
    "build_standard_deck",
    "add_special_cards",
    "build_deck",
    "deal",
    # rules
    "RuleEngine",
    # state
    "Phase",
    "Side",
    "CardSource",
    "MatchOutcome",
    "PlayerZones",
    "GameState",
    "PLAY_ORDER",
    # actions
    "ActionType",
    "Action",
    # events
    "EventType",
    "Event",
    # effects
    "EffectResolver",
    "EffectResult",
    # engine
    "TurnEngine",
    "StepResult",
    # policy
    "ComputerPolicy",
]
