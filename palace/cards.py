"""
牌的定义与编码

Space Palace 使用 52 张标准牌：
- 2-10, J, Q, K, A 四种花色各 1 张
- 宇宙牌 (glitch, black-hole, wormhole, supernova, asteroid-field) 按回合概率加入，每种至多 1 张
"""
from enum import Enum
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Tuple, FrozenSet
import numpy as np


class Suit(Enum):
    """花色"""
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"
    SPECIAL = "special"


class Rank(Enum):
    """牌面定义 (普通牌 + 宇宙牌)"""
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "j"
    QUEEN = "q"
    KING = "k"
    ACE = "a"
    GLITCH = "glitch"
    BLACK_HOLE = "black-hole"
    WORMHOLE = "wormhole"
    SUPERNOVA = "supernova"
    ASTEROID_FIELD = "asteroid-field"

    @property
    def is_cosmic(self) -> bool:
        return self in COSMIC_RANKS


# 牌面到比较值的映射 (固定表)
CARD_VALUES: Dict[Rank, int] = {
    Rank.TWO: 2,
    Rank.THREE: 3,
    Rank.FOUR: 4,
    Rank.FIVE: 5,
    Rank.SIX: 6,
    Rank.SEVEN: 7,
    Rank.EIGHT: 8,
    Rank.NINE: 9,
    Rank.TEN: 10,
    Rank.JACK: 11,
    Rank.QUEEN: 12,
    Rank.KING: 13,
    Rank.ACE: 14,
    Rank.GLITCH: 3,  # 比较时等同于 3
    Rank.BLACK_HOLE: 20,
    Rank.WORMHOLE: 15,
    Rank.SUPERNOVA: 16,
    Rank.ASTEROID_FIELD: 15,
}

# 标准牌组的花色与牌面
STANDARD_SUITS: Tuple[Suit, ...] = (Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES)

STANDARD_RANKS: Tuple[Rank, ...] = (
    Rank.TWO, Rank.THREE, Rank.FOUR, Rank.FIVE, Rank.SIX, Rank.SEVEN,
    Rank.EIGHT, Rank.NINE, Rank.TEN, Rank.JACK, Rank.QUEEN, Rank.KING, Rank.ACE,
)

# 宇宙牌 (加入顺序固定)
COSMIC_RANKS: Tuple[Rank, ...] = (
    Rank.GLITCH,
    Rank.BLACK_HOLE,
    Rank.WORMHOLE,
    Rank.SUPERNOVA,
    Rank.ASTEROID_FIELD,
)

# 全部牌面 (用于计数编码)
ALL_RANKS: Tuple[Rank, ...] = STANDARD_RANKS + COSMIC_RANKS

RANK_TO_INDEX: Dict[Rank, int] = {rank: i for i, rank in enumerate(ALL_RANKS)}

# 万能牌: 任何牌堆上都可以出
UNIVERSAL_RANKS: FrozenSet[Rank] = frozenset({
    Rank.TWO,
    Rank.THREE,
    Rank.GLITCH,
    Rank.BLACK_HOLE,
    Rank.WORMHOLE,
    Rank.SUPERNOVA,
    Rank.ASTEROID_FIELD,
})

# 透明牌: 判定时看其下方的牌
TRANSPARENT_RANKS: FrozenSet[Rank] = frozenset({Rank.THREE, Rank.GLITCH})

# 特殊牌 (电脑出牌时尽量保留; 7 视为普通牌)
SPECIAL_RANKS: FrozenSet[Rank] = frozenset({
    Rank.TWO,
    Rank.THREE,
    Rank.ACE,
    Rank.GLITCH,
    Rank.BLACK_HOLE,
    Rank.WORMHOLE,
    Rank.SUPERNOVA,
    Rank.ASTEROID_FIELD,
})

# 显示名称
DISPLAY_NAMES: Dict[Rank, str] = {
    Rank.JACK: "Jack",
    Rank.QUEEN: "Queen",
    Rank.KING: "King",
    Rank.ACE: "Ace",
    Rank.GLITCH: "Glitch Card",
    Rank.BLACK_HOLE: "Black Hole",
    Rank.WORMHOLE: "Wormhole",
    Rank.SUPERNOVA: "Supernova",
    Rank.ASTEROID_FIELD: "Asteroid Field",
}


def display_rank(rank: Rank) -> str:
    """牌面显示名称，如 "Jack"、"Black Hole"、"7" """
    return DISPLAY_NAMES.get(rank, rank.value.upper())


@dataclass(frozen=True, slots=True)
class Card:
    """
    不可变牌

    翻面等变化通过 with_face() 生成新对象，避免别名问题

    Attributes:
        id: 唯一标识 (单局内唯一)
        suit: 花色
        rank: 牌面
        face_up: 是否正面朝上
    """
    id: str
    suit: Suit
    rank: Rank
    face_up: bool = False

    @property
    def value(self) -> int:
        """比较值 (由牌面决定，不单独存储)"""
        return CARD_VALUES[self.rank]

    @property
    def is_special(self) -> bool:
        return self.rank in SPECIAL_RANKS

    @property
    def is_universal(self) -> bool:
        return self.rank in UNIVERSAL_RANKS

    @property
    def is_transparent(self) -> bool:
        return self.rank in TRANSPARENT_RANKS

    def with_face(self, face_up: bool) -> 'Card':
        """返回翻面后的新牌"""
        if self.face_up == face_up:
            return self
        return replace(self, face_up=face_up)

    def __str__(self) -> str:
        return display_rank(self.rank)


def make_card_id(suit: Suit, rank: Rank, index: int) -> str:
    """生成牌 ID，如 "hearts-7-18" """
    return f"{suit.value}-{rank.value}-{index}"


def sort_cards_by_value(cards: Iterable[Card]) -> Tuple[Card, ...]:
    """按比较值升序排序 (稳定排序)"""
    return tuple(sorted(cards, key=lambda c: c.value))


def group_by_rank(cards: Iterable[Card]) -> Dict[Rank, List[Card]]:
    """按牌面分组 (保持首次出现顺序)"""
    groups: Dict[Rank, List[Card]] = {}
    for card in cards:
        groups.setdefault(card.rank, []).append(card)
    return groups


def same_rank(cards: Iterable[Card]) -> bool:
    """检查是否全部同一牌面"""
    return len({c.rank for c in cards}) <= 1


def cards_to_str(cards: Iterable[Card]) -> str:
    """
    将牌列表转换为可读字符串

    Returns:
        如 "3 7 Jack Black Hole"
    """
    return ' '.join(str(c) for c in cards)


def rank_counts(cards: Iterable[Card]) -> np.ndarray:
    """
    将牌列表转换为 18 维牌面计数向量

    顺序与 ALL_RANKS 一致 (13 种普通牌 + 5 种宇宙牌)
    """
    counts = np.zeros(len(ALL_RANKS), dtype=np.float32)
    for card in cards:
        counts[RANK_TO_INDEX[card.rank]] += 1
    return counts
