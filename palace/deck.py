"""
牌组构建与发牌

流程:
1. 构建 52 张标准牌
2. 按回合概率独立加入宇宙牌 (每种至多 1 张)
3. 均匀洗牌后移除前 15 张
4. 按 人类手牌 → 暗牌 → 明牌 → 电脑手牌 → 暗牌 → 明牌 顺序各发 3 张
5. 电脑整理手牌与明牌
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple
import logging
import numpy as np

from .cards import (
    Card,
    Rank,
    Suit,
    COSMIC_RANKS,
    STANDARD_RANKS,
    STANDARD_SUITS,
    make_card_id,
    sort_cards_by_value,
)
from .config import RulesConfig

logger = logging.getLogger(__name__)

# 电脑倾向放到明牌的牌
BEST_PALACE_RANKS = frozenset({
    Rank.TWO, Rank.THREE, Rank.ACE,
    Rank.JACK, Rank.QUEEN, Rank.KING,
    Rank.GLITCH,
})


@dataclass(frozen=True)
class Deal:
    """发牌结果"""
    human_hand: Tuple[Card, ...]
    human_face_down: Tuple[Card, ...]
    human_face_up: Tuple[Card, ...]
    computer_hand: Tuple[Card, ...]
    computer_face_down: Tuple[Card, ...]
    computer_face_up: Tuple[Card, ...]
    deck: Tuple[Card, ...]
    discarded: Tuple[Card, ...]

    @property
    def in_play(self) -> Tuple[Card, ...]:
        """进入本局的全部牌 (不含移除的牌)"""
        return (
            self.human_hand + self.human_face_down + self.human_face_up
            + self.computer_hand + self.computer_face_down + self.computer_face_up
            + self.deck
        )


def build_standard_deck() -> List[Card]:
    """构建 52 张标准牌 (背面朝上)"""
    cards = []
    index = 0
    for suit in STANDARD_SUITS:
        for rank in STANDARD_RANKS:
            cards.append(Card(make_card_id(suit, rank, index), suit, rank))
            index += 1
    return cards


def add_special_cards(
    cards: List[Card],
    round_number: int,
    rng: np.random.Generator,
    config: Optional[RulesConfig] = None,
) -> List[Card]:
    """
    按回合概率加入宇宙牌

    每种宇宙牌独立进行一次伯努利试验，至多加入 1 张

    Args:
        cards: 已有牌组
        round_number: 当前回合
        rng: 随机数生成器
        config: 规则配置

    Returns:
        新牌组
    """
    config = config or RulesConfig()
    result = list(cards)
    index = len(result)

    for rank in COSMIC_RANKS:
        p = config.special_probability(rank, round_number)
        if rng.random() < p:
            result.append(Card(make_card_id(Suit.SPECIAL, rank, index), Suit.SPECIAL, rank))
            index += 1
            logger.debug(f"{rank.value} card added to the deck ({p:.0%} chance in round {round_number})")

    return result


def build_deck(
    round_number: int,
    rng: np.random.Generator,
    config: Optional[RulesConfig] = None,
) -> List[Card]:
    """构建本回合的完整牌组 (未洗牌)"""
    return add_special_cards(build_standard_deck(), round_number, rng, config)


def shuffle_cards(cards: List[Card], rng: np.random.Generator) -> List[Card]:
    """均匀随机排列"""
    order = rng.permutation(len(cards))
    return [cards[i] for i in order]


def arrange_computer_cards(
    hand: Tuple[Card, ...],
    face_up: Tuple[Card, ...],
) -> Tuple[Tuple[Card, ...], Tuple[Card, ...]]:
    """
    电脑整理手牌与明牌

    特殊牌和大牌 (2, 3, A, J, Q, K, glitch) 放到明牌，手牌用完后还能用；
    普通牌放到手牌。随后反复移动最小/最大的牌直到两边各 3 张

    Args:
        hand: 电脑手牌
        face_up: 电脑明牌

    Returns:
        (新手牌, 新明牌)
    """
    size = len(face_up)

    def is_best(card: Card) -> bool:
        return card.rank in BEST_PALACE_RANKS

    new_face_up = [c for c in face_up if is_best(c)] + [c for c in hand if is_best(c)]
    new_hand = [c for c in hand if not is_best(c)] + [c for c in face_up if not is_best(c)]

    # 明牌过多: 最小的回到手牌
    while len(new_face_up) > size:
        new_face_up.sort(key=lambda c: c.value)
        new_hand.append(new_face_up.pop(0))

    # 手牌过多: 最大的放到明牌
    while len(new_hand) > size:
        new_hand.sort(key=lambda c: -c.value)
        new_face_up.append(new_hand.pop(0))

    final_hand = tuple(c.with_face(True) for c in new_hand)
    final_face_up = tuple(c.with_face(True) for c in new_face_up)
    return final_hand, final_face_up


def deal(
    round_number: int,
    rng: np.random.Generator,
    config: Optional[RulesConfig] = None,
) -> Deal:
    """
    构建、洗牌、移除并发牌

    Args:
        round_number: 当前回合 (决定宇宙牌概率)
        rng: 随机数生成器
        config: 规则配置

    Returns:
        Deal 对象
    """
    config = config or RulesConfig()

    cards = shuffle_cards(build_deck(round_number, rng, config), rng)

    # 移除若干张让对局更短
    discarded = tuple(cards[:config.trim_count])
    cards = cards[config.trim_count:]
    logger.debug(f"Removed {len(discarded)} cards to make the game shorter")

    n = config.deal_count

    def take() -> List[Card]:
        nonlocal cards
        taken, cards = cards[:n], cards[n:]
        return taken

    human_hand = take()
    human_face_down = take()
    human_face_up = take()
    computer_hand = take()
    computer_face_down = take()
    computer_face_up = take()

    human_hand_t = tuple(c.with_face(True) for c in sort_cards_by_value(human_hand))
    computer_hand_t = tuple(c.with_face(True) for c in sort_cards_by_value(computer_hand))
    human_face_up_t = tuple(c.with_face(True) for c in human_face_up)
    computer_face_up_t = tuple(c.with_face(True) for c in computer_face_up)

    if config.computer_palace_rearrange:
        computer_hand_t, computer_face_up_t = arrange_computer_cards(
            computer_hand_t, computer_face_up_t
        )

    return Deal(
        human_hand=human_hand_t,
        human_face_down=tuple(human_face_down),
        human_face_up=human_face_up_t,
        computer_hand=computer_hand_t,
        computer_face_down=tuple(computer_face_down),
        computer_face_up=computer_face_up_t,
        deck=tuple(cards),
        discarded=discarded,
    )
