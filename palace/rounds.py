"""
回合进度

一局比赛由最多 5 个回合组成，每个回合对应一位对手
人类赢下回合才会前进，输掉任一回合比赛即结束
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class OpponentProfile:
    """对手角色"""
    id: str
    name: str
    description: str
    special_ability: str = "None"


OPPONENTS: Tuple[OpponentProfile, ...] = (
    OpponentProfile(
        id="rookie",
        name="The Rookie",
        description="Ready? I think I got this...",
        special_ability="None",
    ),
    OpponentProfile(
        id="trickster",
        name="The Trickster",
        description="Don't blink, or you'll miss the best part!",
        special_ability="Special cards might appear",
    ),
    OpponentProfile(
        id="analyst",
        name="The Analyst",
        description="My strategy is sound. Your resistance, futile.",
        special_ability="Special cards appear more frequently",
    ),
    OpponentProfile(
        id="psychic",
        name="The Psychic",
        description="Your thoughts betray you. And your cards will too.",
        special_ability="Special cards appear more frequently",
    ),
    OpponentProfile(
        id="master",
        name="The Cosmic Master",
        description="The game is mine, always has been, always will be.",
        special_ability="Special cards appear more frequently",
    ),
)

TOTAL_ROUNDS = len(OPPONENTS)


@dataclass(frozen=True)
class RoundContext:
    """
    回合上下文

    Attributes:
        round_number: 当前回合 (1 起)
        total_rounds: 总回合数
    """
    round_number: int = 1
    total_rounds: int = TOTAL_ROUNDS

    def __post_init__(self):
        if not 1 <= self.total_rounds <= len(OPPONENTS):
            raise ValueError(
                f"total_rounds must be between 1 and {len(OPPONENTS)}, got {self.total_rounds}"
            )
        if not 1 <= self.round_number <= self.total_rounds:
            raise ValueError(
                f"round_number must be between 1 and {self.total_rounds}, got {self.round_number}"
            )

    @property
    def opponent(self) -> OpponentProfile:
        return OPPONENTS[self.round_number - 1]

    @property
    def is_final(self) -> bool:
        return self.round_number == self.total_rounds

    def advanced(self) -> 'RoundContext':
        """进入下一回合 (仅在人类赢下非最终回合后调用)"""
        if self.is_final:
            raise ValueError("Already at the final round")
        return RoundContext(self.round_number + 1, self.total_rounds)

    def restarted(self) -> 'RoundContext':
        """回到第 1 回合"""
        return RoundContext(1, self.total_rounds)
