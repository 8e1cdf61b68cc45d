"""
游戏状态定义

使用不可变数据结构:
- 每次转换返回新状态，不修改共享引用
- 各区域 (牌组/手牌/明牌/暗牌/牌堆/烧牌区) 中每张牌只出现一次
"""
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Tuple, Any
from enum import Enum

from .cards import Card
from .rounds import RoundContext


class Phase(Enum):
    """游戏阶段"""
    SETUP = "setup"          # 回合开始 (发牌前)
    SWAPPING = "swapping"    # 人类交换手牌与明牌
    PLAYING = "playing"      # 出牌阶段
    GAME_OVER = "gameOver"   # 回合结束


class Side(Enum):
    """玩家"""
    HUMAN = "human"
    COMPUTER = "computer"

    @property
    def opponent(self) -> 'Side':
        return Side.COMPUTER if self is Side.HUMAN else Side.HUMAN


class CardSource(Enum):
    """出牌来源区域"""
    HAND = "hand"
    FACE_UP = "face_up"
    FACE_DOWN = "face_down"


class MatchOutcome(Enum):
    """回合结束结果"""
    ROUND_WON = "round_won"    # 人类赢下非最终回合
    MATCH_WON = "match_won"    # 人类赢下最终回合
    MATCH_LOST = "match_lost"  # 电脑获胜


# 出牌顺序 (人类先手)
PLAY_ORDER: Tuple[Side, ...] = (Side.HUMAN, Side.COMPUTER)


@dataclass(frozen=True)
class PlayerZones:
    """
    一方的三个区域

    Attributes:
        hand: 手牌
        face_up: 明牌 (宫殿上层)
        face_down: 暗牌 (宫殿下层)
    """
    hand: Tuple[Card, ...] = ()
    face_up: Tuple[Card, ...] = ()
    face_down: Tuple[Card, ...] = ()

    def get(self, source: CardSource) -> Tuple[Card, ...]:
        if source is CardSource.HAND:
            return self.hand
        if source is CardSource.FACE_UP:
            return self.face_up
        return self.face_down

    def with_zone(self, source: CardSource, cards: Tuple[Card, ...]) -> 'PlayerZones':
        if source is CardSource.HAND:
            return replace(self, hand=tuple(cards))
        if source is CardSource.FACE_UP:
            return replace(self, face_up=tuple(cards))
        return replace(self, face_down=tuple(cards))

    @property
    def is_empty(self) -> bool:
        """三个区域同时为空 (即获胜)"""
        return not self.hand and not self.face_up and not self.face_down

    @property
    def palace(self) -> Tuple[Card, ...]:
        return self.face_up + self.face_down

    def all_cards(self) -> Tuple[Card, ...]:
        return self.hand + self.face_up + self.face_down

    def __len__(self) -> int:
        return len(self.hand) + len(self.face_up) + len(self.face_down)


@dataclass(frozen=True)
class GameState:
    """
    不可变游戏状态

    回合状态机独占所有区域内容、阶段和行动方;
    规则引擎与特效处理只接收状态快照并返回新快照

    Attributes:
        round: 回合上下文
        phase: 游戏阶段
        current: 当前行动方
        human: 人类区域
        computer: 电脑区域
        deck: 摸牌堆 (第一张为下一张)
        pile: 出牌堆 (最后一张为顶牌)
        burned: 烧牌区 (只进不出)
        winner: 本回合胜者
        outcome: 回合结束结果
        message: 给玩家的状态文字
        ace_chain: 本回合内 A 已带来的额外回合数
        turn_count: 已完成的回合交接次数
    """
    round: RoundContext = field(default_factory=RoundContext)
    phase: Phase = Phase.SETUP
    current: Side = Side.HUMAN
    human: PlayerZones = field(default_factory=PlayerZones)
    computer: PlayerZones = field(default_factory=PlayerZones)
    deck: Tuple[Card, ...] = ()
    pile: Tuple[Card, ...] = ()
    burned: Tuple[Card, ...] = ()
    winner: Optional[Side] = None
    outcome: Optional[MatchOutcome] = None
    message: str = "Round starting..."
    ace_chain: int = 0
    turn_count: int = 0

    @classmethod
    def initial(cls, round_context: Optional[RoundContext] = None) -> 'GameState':
        """
        创建回合初始状态 (SETUP 阶段，尚未发牌)

        Args:
            round_context: 回合上下文 (默认第 1 回合)
        """
        return cls(round=round_context or RoundContext())

    def zones(self, side: Side) -> PlayerZones:
        return self.human if side is Side.HUMAN else self.computer

    def with_zones(self, side: Side, zones: PlayerZones) -> 'GameState':
        if side is Side.HUMAN:
            return replace(self, human=zones)
        return replace(self, computer=zones)

    def with_message(self, message: str) -> 'GameState':
        return replace(self, message=message)

    def active_source(self, side: Side) -> Optional[CardSource]:
        """
        当前应出牌的区域

        - 手牌非空: 手牌
        - 手牌空但牌组非空: None (需要先摸牌)
        - 否则依次为明牌、暗牌
        """
        zones = self.zones(side)
        if zones.hand:
            return CardSource.HAND
        if self.deck:
            return None
        if zones.face_up:
            return CardSource.FACE_UP
        if zones.face_down:
            return CardSource.FACE_DOWN
        return None

    def find_cards(
        self,
        side: Side,
        source: CardSource,
        card_ids: Tuple[str, ...],
    ) -> List[Card]:
        """
        按 ID 查找某区域中的牌

        Raises:
            ValueError: 任一 ID 不在该区域
        """
        zone = {c.id: c for c in self.zones(side).get(source)}
        missing = [cid for cid in card_ids if cid not in zone]
        if missing:
            raise ValueError(f"Cards {missing} are not in {side.value} {source.value}")
        if len(set(card_ids)) != len(card_ids):
            raise ValueError(f"Duplicate card ids: {card_ids}")
        return [zone[cid] for cid in card_ids]

    def has_cleared(self, side: Side) -> bool:
        """某方三个区域是否全部为空"""
        return self.zones(side).is_empty

    @property
    def top_card(self) -> Optional[Card]:
        return self.pile[-1] if self.pile else None

    @property
    def burned_count(self) -> int:
        return len(self.burned)

    @property
    def is_finished(self) -> bool:
        return self.phase == Phase.GAME_OVER

    def iter_zones(self) -> Iterator[Tuple[str, Tuple[Card, ...]]]:
        """遍历所有区域 (名称, 牌)"""
        yield "deck", self.deck
        yield "pile", self.pile
        yield "burned", self.burned
        for side in PLAY_ORDER:
            zones = self.zones(side)
            yield f"{side.value}_hand", zones.hand
            yield f"{side.value}_face_up", zones.face_up
            yield f"{side.value}_face_down", zones.face_down

    def all_cards(self) -> Tuple[Card, ...]:
        """所有区域中的牌"""
        result: Tuple[Card, ...] = ()
        for _, cards in self.iter_zones():
            result += cards
        return result

    def card_ids(self) -> List[str]:
        return [c.id for c in self.all_cards()]

    def validate_partition(self, expected_ids: Optional[set] = None) -> None:
        """
        检查每张牌只在一个区域中

        Args:
            expected_ids: 本局全部牌 ID (给出时还检查没有丢牌)

        Raises:
            AssertionError: 出现重复或丢失
        """
        ids = self.card_ids()
        duplicates = {cid for cid in ids if ids.count(cid) > 1}
        assert not duplicates, f"Cards in more than one zone: {sorted(duplicates)}"
        if expected_ids is not None:
            assert set(ids) == set(expected_ids), (
                f"Lost cards: {sorted(set(expected_ids) - set(ids))}, "
                f"unknown cards: {sorted(set(ids) - set(expected_ids))}"
            )

    def to_dict(self, reveal_computer: bool = False) -> Dict[str, Any]:
        """
        给展示层的快照

        Args:
            reveal_computer: 是否包含电脑手牌和双方暗牌的内容
        """
        def ids(cards: Tuple[Card, ...]) -> List[str]:
            return [c.id for c in cards]

        view: Dict[str, Any] = {
            "round": self.round.round_number,
            "total_rounds": self.round.total_rounds,
            "opponent": self.round.opponent.name,
            "phase": self.phase.value,
            "current_player": self.current.value,
            "message": self.message,
            "deck_size": len(self.deck),
            "pile": ids(self.pile),
            "burned": ids(self.burned),
            "human_hand": ids(self.human.hand),
            "human_face_up": ids(self.human.face_up),
            "human_face_down_count": len(self.human.face_down),
            "computer_hand_count": len(self.computer.hand),
            "computer_face_up": ids(self.computer.face_up),
            "computer_face_down_count": len(self.computer.face_down),
            "winner": self.winner.value if self.winner else None,
            "outcome": self.outcome.value if self.outcome else None,
        }
        if reveal_computer:
            view["computer_hand"] = ids(self.computer.hand)
            view["computer_face_down"] = ids(self.computer.face_down)
            view["human_face_down"] = ids(self.human.face_down)
        return view
