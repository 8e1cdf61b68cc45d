"""
回合状态机

setup → swapping → playing → gameOver

TurnEngine 独占阶段、行动方和所有区域的变化:
- 每个动作接收状态快照，返回新快照和有序事件
- 违反规则的出牌返回被拒绝的结果 (区域不变，只更新提示文字)
- 结构性误用 (阶段错误、不是你的回合、未知的牌) 抛出 ValueError
"""
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple
import logging
import numpy as np

from .actions import Action, ActionType
from .cards import group_by_rank, sort_cards_by_value
from .config import RulesConfig
from .deck import deal
from .effects import EffectResolver, EffectResult, actor_name, add_to_hand, draw_cards
from .events import Event, EventType
from .rounds import RoundContext
from .rules import RuleEngine
from .state import CardSource, GameState, MatchOutcome, Phase, PlayerZones, Side

logger = logging.getLogger(__name__)

SWAP_MESSAGE = "Swap cards between your hand and face-up cards, then finish swapping"

SOURCE_LABELS = {
    CardSource.HAND: "hand",
    CardSource.FACE_UP: "face-up cards",
    CardSource.FACE_DOWN: "face-down cards",
}


@dataclass(frozen=True)
class StepResult:
    """
    一步状态转换的结果

    Attributes:
        state: 新状态 (被拒绝时区域与原状态相同)
        events: 有序事件
        accepted: 动作是否被接受
    """
    state: GameState
    events: Tuple[Event, ...] = ()
    accepted: bool = True

    @property
    def message(self) -> str:
        return self.state.message


class TurnEngine:
    """
    回合状态机

    Args:
        rules: 规则配置
        rng: 随机数生成器 (发牌、宇宙牌)
        seed: 未给出 rng 时用于创建生成器
    """

    def __init__(
        self,
        rules: Optional[RulesConfig] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        self.rules = rules or RulesConfig()
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.effects = EffectResolver(self.rules)

        self._handlers: Dict[ActionType, Callable[[GameState, Action], StepResult]] = {
            ActionType.BEGIN_ROUND: self._begin_round,
            ActionType.SWAP: self._swap,
            ActionType.FINISH_SWAPPING: self._finish_swapping,
            ActionType.PLAY: self._play,
            ActionType.REVEAL: self._reveal,
            ActionType.PICK_UP: self._pick_up,
            ActionType.DRAW: self._draw,
            ActionType.PASS: self._pass,
            ActionType.NEXT_ROUND: self._next_round,
            ActionType.RESTART: self._restart,
        }

    # ------------------------------------------------------------------
    # 公共接口
    # ------------------------------------------------------------------
    def new_game(self, round_context: Optional[RoundContext] = None) -> GameState:
        """创建 SETUP 阶段的初始状态"""
        ctx = round_context or RoundContext(1, self.rules.total_rounds)
        return GameState.initial(ctx)

    def apply(self, state: GameState, action: Action) -> StepResult:
        """
        执行一个动作

        Args:
            state: 当前状态
            action: 动作

        Returns:
            StepResult

        Raises:
            ValueError: 阶段错误、不是该方的回合、牌不在指定区域等
        """
        if action.is_turn_action:
            if state.phase != Phase.PLAYING:
                raise ValueError(f"Cannot {action.action_type.value} during {state.phase.value}")
            if action.side != state.current:
                raise ValueError(f"It is not {action.side.value if action.side else 'nobody'}'s turn")
        return self._handlers[action.action_type](state, action)

    def legal_actions(self, state: GameState, side: Optional[Side] = None) -> List[Action]:
        """
        获取某方当前可执行的回合动作

        - 当前区域中每个合法牌面组的 1..n 张出牌
        - 暗牌阶段每张暗牌一个翻牌动作
        - 牌堆非空时可收牌
        - 可以补牌时可摸牌
        - 以上都没有时才可跳过

        Args:
            state: 当前状态
            side: 行动方 (默认为当前行动方)

        Returns:
            动作列表 (不是该方回合时为空)
        """
        side = side or state.current
        if state.phase != Phase.PLAYING or side != state.current:
            return []

        actions: List[Action] = []
        source = state.active_source(side)
        zones = state.zones(side)

        if source is CardSource.FACE_DOWN:
            actions.extend(Action.reveal(side, c.id) for c in zones.face_down)
        elif source is not None:
            for cards in group_by_rank(zones.get(source)).values():
                if not RuleEngine.can_play(cards[0], state.pile):
                    continue
                for k in range(1, len(cards) + 1):
                    actions.append(Action.play(side, [c.id for c in cards[:k]], source))

        if state.pile:
            actions.append(Action.pick_up(side))
        if self._can_draw(state, side):
            actions.append(Action.draw(side))
        if not actions:
            actions.append(Action.pass_turn(side))
        return actions

    def force_end_turn(self, state: GameState) -> StepResult:
        """
        强制结束当前行动方的回合

        只用于卡住的回合恢复 (超时或电脑动作被拒绝)
        """
        if state.phase != Phase.PLAYING:
            return StepResult(state, (), accepted=False)
        side = state.current
        message = f"{actor_name(side)} turn ended"
        events = [Event(EventType.TURN_FORCED, side, (), message)]
        new_state = self._end_turn(state.with_message(message), events)
        return StepResult(new_state, tuple(events))

    # ------------------------------------------------------------------
    # 回合外动作
    # ------------------------------------------------------------------
    def _begin_round(self, state: GameState, action: Action) -> StepResult:
        if state.phase != Phase.SETUP:
            raise ValueError(f"Cannot deal during {state.phase.value}")

        ctx = state.round
        dealt = deal(ctx.round_number, self.rng, self.rules)
        new_state = replace(
            GameState.initial(ctx),
            phase=Phase.SWAPPING,
            human=PlayerZones(dealt.human_hand, dealt.human_face_up, dealt.human_face_down),
            computer=PlayerZones(dealt.computer_hand, dealt.computer_face_up, dealt.computer_face_down),
            deck=dealt.deck,
            message=SWAP_MESSAGE,
        )
        logger.info(
            f"Round {ctx.round_number}/{ctx.total_rounds} against {ctx.opponent.name}: "
            f"{len(dealt.in_play)} cards in play, {len(dealt.deck)} in the deck"
        )
        events = (
            Event(EventType.ROUND_DEALT, None, dealt.in_play, f"Round {ctx.round_number}"),
            Event(EventType.PHASE_CHANGED, None, (), Phase.SWAPPING.value),
        )
        return StepResult(new_state, events)

    def _swap(self, state: GameState, action: Action) -> StepResult:
        if state.phase != Phase.SWAPPING:
            raise ValueError(f"Cannot swap during {state.phase.value}")
        if len(action.card_ids) != 2:
            raise ValueError("A swap needs one hand card and one face-up card")

        hand_id, face_up_id = action.card_ids
        (hand_card,) = state.find_cards(Side.HUMAN, CardSource.HAND, (hand_id,))
        (face_up_card,) = state.find_cards(Side.HUMAN, CardSource.FACE_UP, (face_up_id,))

        zones = state.human
        hand = sort_cards_by_value(
            [c for c in zones.hand if c.id != hand_id] + [face_up_card]
        )
        face_up = tuple(hand_card if c.id == face_up_id else c for c in zones.face_up)
        new_state = state.with_zones(Side.HUMAN, replace(zones, hand=hand, face_up=face_up))
        new_state = new_state.with_message(f"Swapped {hand_card} for {face_up_card}")

        event = Event(EventType.CARDS_SWAPPED, Side.HUMAN, (hand_card, face_up_card), new_state.message)
        return StepResult(new_state, (event,))

    def _finish_swapping(self, state: GameState, action: Action) -> StepResult:
        if state.phase != Phase.SWAPPING:
            raise ValueError(f"Cannot finish swapping during {state.phase.value}")

        events = [Event(EventType.PHASE_CHANGED, None, (), Phase.PLAYING.value)]
        new_state = replace(state, phase=Phase.PLAYING, current=Side.HUMAN, ace_chain=0)
        new_state = self._start_turn(new_state, Side.HUMAN, events)
        return StepResult(new_state, tuple(events))

    def _next_round(self, state: GameState, action: Action) -> StepResult:
        if state.phase != Phase.GAME_OVER or state.outcome != MatchOutcome.ROUND_WON:
            raise ValueError("No round win is pending")
        return self._begin_round(GameState.initial(state.round.advanced()), action)

    def _restart(self, state: GameState, action: Action) -> StepResult:
        logger.info("Restarting from round 1")
        return self._begin_round(GameState.initial(state.round.restarted()), action)

    # ------------------------------------------------------------------
    # 回合动作
    # ------------------------------------------------------------------
    def _play(self, state: GameState, action: Action) -> StepResult:
        side = action.side
        source = action.source or CardSource.HAND
        if not action.card_ids:
            raise ValueError("No cards selected")
        if source is CardSource.FACE_DOWN:
            raise ValueError("Face-down cards are played with a reveal action")

        cards = state.find_cards(side, source, action.card_ids)

        active = state.active_source(side)
        if source != active:
            if active is None:
                return self._reject(state, side, "Draw cards before playing")
            return self._reject(state, side, f"You must play from your {SOURCE_LABELS[active]} first")

        reason = RuleEngine.check_play(cards, state.pile)
        if reason is not None:
            return self._reject(state, side, reason)

        played_ids = set(action.card_ids)
        zones = state.zones(side)
        remaining = tuple(c for c in zones.get(source) if c.id not in played_ids)
        new_state = state.with_zones(side, zones.with_zone(source, remaining))

        effect = self.effects.resolve(new_state, side, cards)
        return self._after_play(effect, side, [])

    def _reveal(self, state: GameState, action: Action) -> StepResult:
        side = action.side
        if len(action.card_ids) != 1:
            raise ValueError("Reveal exactly one face-down card")

        (card,) = state.find_cards(side, CardSource.FACE_DOWN, action.card_ids)
        if state.active_source(side) is not CardSource.FACE_DOWN:
            return self._reject(state, side, "You can only reveal face-down cards once the rest are gone")

        card = card.with_face(True)
        zones = state.zones(side)
        remaining = tuple(c for c in zones.face_down if c.id != card.id)
        new_state = state.with_zones(side, replace(zones, face_down=remaining))
        events = [Event(EventType.CARD_REVEALED, side, (card,), f"{actor_name(side)} revealed {card}")]

        if RuleEngine.can_play(card, state.pile):
            effect = self.effects.resolve(new_state, side, (card,))
            return self._after_play(effect, side, events)

        # 翻开的牌不能出: 连同牌堆一起收回手牌
        if side is Side.HUMAN:
            message = "Can't play that card! Picking up pile"
        else:
            message = "Computer can't play the revealed card - picks up the pile"
        picked = state.pile + (card,)
        new_state = add_to_hand(replace(new_state, pile=()), side, picked)
        new_state = new_state.with_message(message)
        events.append(Event(EventType.PILE_PICKED_UP, side, picked, message))
        new_state = self._end_turn(new_state, events)
        return StepResult(new_state, tuple(events))

    def _pick_up(self, state: GameState, action: Action) -> StepResult:
        side = action.side
        if not state.pile:
            return self._reject(state, side, "The pile is empty")

        message = "You picked up the pile" if side is Side.HUMAN else "Computer picks up the pile"
        picked = state.pile
        new_state = add_to_hand(replace(state, pile=()), side, picked).with_message(message)
        events = [Event(EventType.PILE_PICKED_UP, side, picked, message)]
        logger.debug(f"{side.value} picked up {len(picked)} cards")
        new_state = self._end_turn(new_state, events)
        return StepResult(new_state, tuple(events))

    def _draw(self, state: GameState, action: Action) -> StepResult:
        side = action.side
        if not self._can_draw(state, side):
            return self._reject(state, side, "You can't draw now")

        events: List[Event] = []
        new_state = self._auto_draw(state, side, events)
        if side is Side.HUMAN:
            new_state = new_state.with_message(RuleEngine.instruction_message(new_state.pile))
        else:
            new_state = new_state.with_message(f"Computer draws {len(events[0].cards)} cards")
        return StepResult(new_state, tuple(events))

    def _pass(self, state: GameState, action: Action) -> StepResult:
        side = action.side
        legal = self.legal_actions(state, side)
        if any(a.action_type != ActionType.PASS for a in legal):
            return self._reject(state, side, "You still have a move")

        events: List[Event] = []
        new_state = self._end_turn(state.with_message(f"{actor_name(side)} passed"), events)
        return StepResult(new_state, tuple(events))

    # ------------------------------------------------------------------
    # 内部辅助
    # ------------------------------------------------------------------
    def _reject(self, state: GameState, side: Optional[Side], reason: str) -> StepResult:
        logger.debug(f"Rejected {side.value if side else '-'} action: {reason}")
        event = Event(EventType.PLAY_REJECTED, side, (), reason)
        return StepResult(state.with_message(reason), (event,), accepted=False)

    def _can_draw(self, state: GameState, side: Side) -> bool:
        return bool(state.deck) and len(state.zones(side).hand) < self.rules.hand_floor

    def _auto_draw(self, state: GameState, side: Side, events: List[Event]) -> GameState:
        """手牌不足下限且牌组非空时补到下限"""
        if not self._can_draw(state, side):
            return state
        need = self.rules.hand_floor - len(state.zones(side).hand)
        new_state, drawn = draw_cards(state, side, need)
        events.append(Event(EventType.CARDS_DRAWN, side, drawn, f"{actor_name(side)} drew {len(drawn)} cards"))
        return new_state

    def _after_play(self, effect: EffectResult, side: Side, events: List[Event]) -> StepResult:
        """出牌效果之后: 胜负检测，然后额外回合或交换行动方"""
        events.extend(effect.events)
        state = effect.state

        finished = self._check_winner(state, side, events)
        if finished is not None:
            return StepResult(finished, tuple(events))

        if effect.extra_turn:
            state = self._grant_extra_turn(state, side, events)
        else:
            state = self._end_turn(state, events)
        return StepResult(state, tuple(events))

    def _grant_extra_turn(self, state: GameState, side: Side, events: List[Event]) -> GameState:
        chain = state.ace_chain + 1
        if side is Side.COMPUTER and chain > self.rules.max_ace_chain:
            logger.debug(f"Computer ace chain reached {chain}, ending its turn")
            return self._end_turn(state, events)

        state = replace(state, ace_chain=chain)
        events.append(Event(EventType.EXTRA_TURN, side, (), f"{actor_name(side)} plays again"))
        state = self._auto_draw(state, side, events)
        if side is Side.HUMAN:
            state = state.with_message(f"{state.message} Play again!")
        return state

    def _end_turn(self, state: GameState, events: List[Event]) -> GameState:
        nxt = state.current.opponent
        state = replace(state, current=nxt, ace_chain=0, turn_count=state.turn_count + 1)
        events.append(Event(EventType.TURN_CHANGED, nxt, (), f"{nxt.value} to act"))
        return self._start_turn(state, nxt, events)

    def _start_turn(self, state: GameState, side: Side, events: List[Event]) -> GameState:
        """轮到某方: 自动补牌并更新提示"""
        state = self._auto_draw(state, side, events)
        if side is Side.HUMAN:
            return state.with_message(RuleEngine.instruction_message(state.pile))
        return state

    def _check_winner(self, state: GameState, acting: Side, events: List[Event]) -> Optional[GameState]:
        """
        胜负检测

        任何一方三个区域同时为空即获胜; 同时清空时行动方获胜

        Returns:
            结束后的状态，无人获胜时返回 None
        """
        for side in (acting, acting.opponent):
            if state.has_cleared(side):
                return self._finish(state, side, events)
        return None

    def _finish(self, state: GameState, winner: Side, events: List[Event]) -> GameState:
        if winner is Side.HUMAN:
            if state.round.is_final:
                outcome, message, event_type = MatchOutcome.MATCH_WON, "You've won the game!", EventType.MATCH_WON
            else:
                outcome, message, event_type = MatchOutcome.ROUND_WON, "Round complete!", EventType.ROUND_WON
        else:
            outcome, message, event_type = MatchOutcome.MATCH_LOST, "Computer wins!", EventType.MATCH_LOST

        logger.info(f"Round {state.round.round_number} finished: {outcome.value}")
        events.append(Event(event_type, winner, (), message))
        events.append(Event(EventType.PHASE_CHANGED, None, (), Phase.GAME_OVER.value))
        return replace(
            state,
            phase=Phase.GAME_OVER,
            winner=winner,
            outcome=outcome,
            message=message,
            ace_chain=0,
        )
