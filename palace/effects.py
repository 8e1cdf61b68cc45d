"""
特殊牌效果

出牌的牌从来源区域移除后，按牌面分派处理:
- 2: 烧掉下方整个牌堆
- 3 / glitch: 透明牌，放到牌堆上 (glitch 额外触发扭曲信号)
- 7: 放到牌堆上，下一张必须小于 7
- A: 烧掉牌堆和 A 本身，同一方再行动一次
- black-hole: 烧掉牌堆、剩余牌组和自身
- wormhole: 交换双方手牌，自身烧掉
- supernova: 烧掉双方明牌和暗牌，自身烧掉
- asteroid-field: 对手从牌组摸 2 张，自身烧掉
- 四张同牌面 (A 除外): 出牌前的牌堆被烧掉

所有处理都接收状态快照并返回新快照
"""
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import logging

from .cards import Card, Rank, display_rank, sort_cards_by_value
from .config import RulesConfig
from .events import Event, EventType
from .rules import RuleEngine
from .state import GameState, Side

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EffectResult:
    """
    效果处理结果

    Attributes:
        state: 新状态
        events: 按顺序发生的事件
        extra_turn: 出牌方是否获得额外回合 (A)
    """
    state: GameState
    events: Tuple[Event, ...] = ()
    extra_turn: bool = False


def actor_name(side: Side) -> str:
    return "You" if side is Side.HUMAN else "Computer"


def describe_play(side: Side, cards: Sequence[Card]) -> str:
    """如 "Computer plays 2 5s" """
    verb = "play" if side is Side.HUMAN else "plays"
    rank = cards[0].rank.value
    plural = "s" if len(cards) > 1 else ""
    return f"{actor_name(side)} {verb} {len(cards)} {rank}{plural}"


def add_to_hand(state: GameState, side: Side, cards: Sequence[Card]) -> GameState:
    """
    把牌加入手牌 (正面朝上)

    人类手牌按比较值排序，电脑手牌直接追加
    """
    zones = state.zones(side)
    incoming = tuple(c.with_face(True) for c in cards)
    if side is Side.HUMAN:
        hand = sort_cards_by_value(zones.hand + incoming)
    else:
        hand = zones.hand + incoming
    return state.with_zones(side, replace(zones, hand=hand))


def draw_cards(state: GameState, side: Side, count: int) -> Tuple[GameState, Tuple[Card, ...]]:
    """
    从牌组顶部摸牌

    牌组不足时摸到多少算多少 (可能为 0)，不视为错误

    Returns:
        (新状态, 摸到的牌)
    """
    count = max(0, min(count, len(state.deck)))
    if count == 0:
        return state, ()
    drawn = state.deck[:count]
    new_state = replace(state, deck=state.deck[count:])
    return add_to_hand(new_state, side, drawn), drawn


class EffectResolver:
    """
    特殊牌效果处理器

    无状态; 按牌面分派到对应处理函数
    """

    def __init__(self, config: Optional[RulesConfig] = None):
        self.config = config or RulesConfig()
        self._handlers: Dict[Rank, Callable[[GameState, Side, Tuple[Card, ...]], EffectResult]] = {
            Rank.TWO: self._two,
            Rank.THREE: self._transparent,
            Rank.GLITCH: self._transparent,
            Rank.SEVEN: self._seven,
            Rank.ACE: self._ace,
            Rank.BLACK_HOLE: self._black_hole,
            Rank.WORMHOLE: self._wormhole,
            Rank.SUPERNOVA: self._supernova,
            Rank.ASTEROID_FIELD: self._asteroid_field,
        }

    def resolve(self, state: GameState, side: Side, cards: Sequence[Card]) -> EffectResult:
        """
        处理一次合法出牌

        调用前牌已从来源区域移除

        Args:
            state: 出牌后的状态 (牌不在任何区域)
            side: 出牌方
            cards: 同牌面的一组牌

        Returns:
            EffectResult
        """
        played = tuple(c.with_face(True) for c in cards)
        prior_pile = state.pile
        handler = self._handlers.get(played[0].rank, self._place)
        result = handler(state, side, played)
        logger.debug(f"{side.value} resolved {len(played)}x {played[0].rank.value}")

        if RuleEngine.is_four_of_a_kind(played):
            result = self._burn_prior_pile(result, side, played, prior_pile)
        return result

    # ------------------------------------------------------------------
    # 普通牌
    # ------------------------------------------------------------------
    def _place(self, state: GameState, side: Side, cards: Tuple[Card, ...]) -> EffectResult:
        message = describe_play(side, cards)
        new_state = replace(state, pile=state.pile + cards, message=message)
        return EffectResult(new_state, (Event(EventType.CARDS_PLAYED, side, cards, message),))

    def _burn_prior_pile(
        self,
        result: EffectResult,
        side: Side,
        cards: Tuple[Card, ...],
        prior_pile: Tuple[Card, ...],
    ) -> EffectResult:
        """四张同牌面: 烧掉出牌前的牌堆 (只烧仍在牌堆中的部分)"""
        prior_ids = {c.id for c in prior_pile}
        state = result.state
        leftover = tuple(c for c in state.pile if c.id in prior_ids)
        message = f"Four {cards[0].rank.value}s played - pile burned!"
        events = list(result.events)
        if leftover:
            state = replace(
                state,
                pile=tuple(c for c in state.pile if c.id not in prior_ids),
                burned=state.burned + leftover,
            )
            events.append(Event(EventType.PILE_BURNED, side, leftover, message))
        return EffectResult(state.with_message(message), tuple(events), result.extra_turn)

    # ------------------------------------------------------------------
    # 特殊牌
    # ------------------------------------------------------------------
    def _two(self, state: GameState, side: Side, cards: Tuple[Card, ...]) -> EffectResult:
        message = "2 played - all cards below removed from the game!"
        events = [Event(EventType.CARDS_PLAYED, side, cards, describe_play(side, cards))]
        if state.pile:
            events.append(Event(EventType.PILE_BURNED, side, state.pile, message))
        new_state = replace(
            state,
            burned=state.burned + state.pile,
            pile=cards,
            message=message,
        )
        return EffectResult(new_state, tuple(events))

    def _transparent(self, state: GameState, side: Side, cards: Tuple[Card, ...]) -> EffectResult:
        rank = cards[0].rank
        top = state.top_card
        new_pile = state.pile + cards
        base = RuleEngine.effective_base(new_pile)
        name = "Glitch card" if rank is Rank.GLITCH else "3"

        if top is not None and top.rank is Rank.SEVEN:
            message = f"{name} played on 7 - next card must be LOWER than 7!"
        elif base is not None and not base.is_transparent:
            message = f"{name} played - takes value of {display_rank(base.rank)} below!"
        elif rank is Rank.GLITCH:
            message = "Glitch card played - reality distorted!"
        else:
            message = "3 played - takes value of card below!"

        events = [Event(EventType.CARDS_PLAYED, side, cards, describe_play(side, cards))]
        if rank is Rank.GLITCH:
            events.append(Event(EventType.DISTORTION, side, cards, "Reality distorted!"))
        return EffectResult(replace(state, pile=new_pile, message=message), tuple(events))

    def _seven(self, state: GameState, side: Side, cards: Tuple[Card, ...]) -> EffectResult:
        message = "7 played - next card must be LOWER than 7!"
        new_state = replace(state, pile=state.pile + cards, message=message)
        return EffectResult(new_state, (Event(EventType.CARDS_PLAYED, side, cards, message),))

    def _ace(self, state: GameState, side: Side, cards: Tuple[Card, ...]) -> EffectResult:
        message = "Ace played - pile cleared!"
        events: List[Event] = []
        burned = state.burned
        pile = state.pile
        # 多张 A 依次处理，额外回合在最后一张之后给出
        for ace in cards:
            burned = burned + pile + (ace,)
            events.append(Event(EventType.PILE_BURNED, side, pile + (ace,), message))
            pile = ()
        new_state = replace(state, burned=burned, pile=pile, message=message)
        return EffectResult(new_state, tuple(events), extra_turn=True)

    def _black_hole(self, state: GameState, side: Side, cards: Tuple[Card, ...]) -> EffectResult:
        message = "Black Hole played - cosmic distortion activated!"
        events = [
            Event(EventType.PILE_BURNED, side, state.pile, message),
            Event(EventType.DECK_BURNED, side, state.deck, message),
            Event(EventType.CARD_BURNED, side, cards, message),
        ]
        new_state = replace(
            state,
            burned=state.burned + state.pile + state.deck + cards,
            pile=(),
            deck=(),
            message=message,
        )
        return EffectResult(new_state, tuple(events))

    def _wormhole(self, state: GameState, side: Side, cards: Tuple[Card, ...]) -> EffectResult:
        message = "Wormhole played - swapping hand cards between players!"
        own = state.zones(side)
        other = state.zones(side.opponent)

        new_state = state.with_zones(side, replace(own, hand=()))
        new_state = new_state.with_zones(side.opponent, replace(other, hand=()))
        new_state = add_to_hand(new_state, side, other.hand)
        new_state = add_to_hand(new_state, side.opponent, own.hand)
        new_state = replace(new_state, burned=new_state.burned + cards, message=message)

        events = (
            Event(EventType.HANDS_SWAPPED, side, own.hand + other.hand, message),
            Event(EventType.CARD_BURNED, side, cards, message),
        )
        return EffectResult(new_state, events)

    def _supernova(self, state: GameState, side: Side, cards: Tuple[Card, ...]) -> EffectResult:
        message = "Supernova played - burning all palace cards!"
        palaces = (
            state.human.face_up + state.human.face_down
            + state.computer.face_up + state.computer.face_down
        )
        new_state = replace(
            state,
            human=replace(state.human, face_up=(), face_down=()),
            computer=replace(state.computer, face_up=(), face_down=()),
            burned=state.burned + palaces + cards,
            message=message,
        )
        events = (
            Event(EventType.PALACES_BURNED, side, palaces, message),
            Event(EventType.CARD_BURNED, side, cards, message),
        )
        return EffectResult(new_state, events)

    def _asteroid_field(self, state: GameState, side: Side, cards: Tuple[Card, ...]) -> EffectResult:
        target = side.opponent
        who = "you" if target is Side.HUMAN else "computer"
        message = f"Asteroid Field played - {who} must draw two cards!"

        new_state = replace(state, burned=state.burned + cards)
        new_state, drawn = draw_cards(new_state, target, self.config.forced_draw_count)
        new_state = new_state.with_message(message)

        events = (
            Event(EventType.CARD_BURNED, side, cards, message),
            Event(EventType.FORCED_DRAW, target, drawn, f"{actor_name(target)} drew {len(drawn)} cards"),
        )
        return EffectResult(new_state, events)
