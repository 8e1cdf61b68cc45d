"""
对战竞技场

让智能体完整挑战 5 个对手 (一场比赛)，输掉任何一回合即结束
"""
from typing import Dict, List, Optional, Callable, Tuple
from dataclasses import dataclass, field
from collections import defaultdict
import logging

from palace.actions import ActionType
from palace.rounds import OPPONENTS
from palace.state import Side

from .evaluator import Agent

logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    """单回合对局结果"""
    round_number: int
    opponent: str
    winner: Optional[str]   # "human" / "computer"，截断时为 None
    length: int             # 回合交接次数
    pickups: int
    truncated: bool = False

    @property
    def won(self) -> bool:
        return self.winner == Side.HUMAN.value


@dataclass
class CampaignResult:
    """一场完整比赛的结果"""
    agent: str
    rounds: List[MatchResult] = field(default_factory=list)
    total_rounds: int = len(OPPONENTS)

    @property
    def rounds_won(self) -> int:
        return sum(1 for r in self.rounds if r.won)

    @property
    def match_won(self) -> bool:
        return self.rounds_won == self.total_rounds

    @property
    def reached(self) -> int:
        """打到的最后一个回合"""
        return self.rounds[-1].round_number if self.rounds else 0


@dataclass
class TournamentResult:
    """多场比赛的汇总"""
    standings: Dict[str, Dict[str, float]]
    total_matches: int
    campaigns: List[CampaignResult]

    def get_ranking(self) -> List[Tuple[str, float]]:
        """按比赛胜率排名"""
        return sorted(
            [(name, stats["match_win_rate"]) for name, stats in self.standings.items()],
            key=lambda x: x[1],
            reverse=True,
        )

    def __repr__(self) -> str:
        ranking = self.get_ranking()
        lines = [f"Campaign Results ({self.total_matches} matches):"]
        for i, (name, win_rate) in enumerate(ranking):
            avg_rounds = self.standings[name]["avg_rounds_won"]
            lines.append(f"  {i+1}. {name}: {win_rate:.2%} matches won, {avg_rounds:.2f} rounds on average")
        return "\n".join(lines)


class Arena:
    """
    对战竞技场

    组织智能体挑战全部对手
    """

    def __init__(self, env_fn: Callable):
        self.env_fn = env_fn

    def play_round(self, env, agent: Agent, round_number: int, seed: Optional[int] = None) -> MatchResult:
        """
        打一个回合

        Args:
            env: PalaceEnv
            agent: 智能体
            round_number: 回合
            seed: 随机种子

        Returns:
            MatchResult
        """
        obs, info = env.reset(seed=seed, options={"round_number": round_number})
        agent.reset()
        done = info["phase"] == "gameOver"
        truncated = False
        pickups = 0

        while not done:
            legal_actions = env.get_legal_actions()
            action = agent.act(obs, legal_actions, env.state)
            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
            if action.action_type == ActionType.PICK_UP and "error" not in info:
                pickups += 1

        return MatchResult(
            round_number=round_number,
            opponent=env.state.round.opponent.name,
            winner=info.get("winner"),
            length=info["turns"],
            pickups=pickups,
            truncated=bool(truncated),
        )

    def play_campaign(self, agent: Agent, seed: Optional[int] = None) -> CampaignResult:
        """
        从第 1 回合打到第 5 回合，输掉 (或截断) 即停止

        Args:
            agent: 智能体
            seed: 随机种子 (每回合加回合数)

        Returns:
            CampaignResult
        """
        env = self.env_fn()
        campaign = CampaignResult(agent=agent.name, total_rounds=env.rules.total_rounds)

        for round_number in range(1, campaign.total_rounds + 1):
            round_seed = seed + round_number if seed is not None else None
            result = self.play_round(env, agent, round_number, round_seed)
            campaign.rounds.append(result)
            if not result.won:
                break

        logger.debug(
            f"{agent.name}: won {campaign.rounds_won}/{campaign.total_rounds} rounds"
        )
        return campaign

    def run(
        self,
        agents: List[Agent],
        n_matches: int = 10,
        seed: Optional[int] = None,
    ) -> TournamentResult:
        """
        每个智能体各打 n_matches 场比赛

        相同序号的比赛使用相同种子

        Args:
            agents: 智能体列表
            n_matches: 每个智能体的比赛场数
            seed: 基础随机种子

        Returns:
            TournamentResult
        """
        standings = {agent.name: defaultdict(float) for agent in agents}
        campaigns = []

        for agent in agents:
            stats = standings[agent.name]
            for match_idx in range(n_matches):
                match_seed = seed + match_idx * 100 if seed is not None else None
                campaign = self.play_campaign(agent, match_seed)
                campaigns.append(campaign)

                stats["matches"] += 1
                stats["match_wins"] += int(campaign.match_won)
                stats["rounds_won"] += campaign.rounds_won
                for r in campaign.rounds:
                    stats[f"round_{r.round_number}_played"] += 1
                    stats[f"round_{r.round_number}_won"] += int(r.won)

            logger.info(
                f"{agent.name}: {int(stats['match_wins'])}/{n_matches} matches won"
            )

        for name, stats in standings.items():
            if stats["matches"] > 0:
                stats["match_win_rate"] = stats["match_wins"] / stats["matches"]
                stats["avg_rounds_won"] = stats["rounds_won"] / stats["matches"]
            else:
                stats["match_win_rate"] = 0.0
                stats["avg_rounds_won"] = 0.0

        return TournamentResult(
            standings={name: dict(stats) for name, stats in standings.items()},
            total_matches=len(campaigns),
            campaigns=campaigns,
        )
