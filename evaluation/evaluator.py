"""
评估器

评估智能体在人类位置对抗电脑策略的表现
"""
from typing import Dict, List, Optional, Callable, Any
from dataclasses import dataclass, field
import numpy as np
import logging

from palace.actions import Action, ActionType
from palace.policy import ComputerPolicy
from palace.state import GameState, Side

logger = logging.getLogger(__name__)


@dataclass
class EvalResult:
    """评估结果"""
    win_rate: float
    avg_reward: float
    avg_length: float
    games_played: int
    pickup_rate: float = 0.0
    truncated_rate: float = 0.0
    extra_stats: Dict[str, float] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"EvalResult(win_rate={self.win_rate:.2%}, "
            f"avg_length={self.avg_length:.1f}, "
            f"games={self.games_played})"
        )


class Agent:
    """智能体基类"""

    def __init__(self, name: str = "agent"):
        self.name = name

    def act(self, obs: Dict[str, Any], legal_actions: List[Action], state: Optional[GameState] = None) -> Action:
        """选择动作"""
        raise NotImplementedError

    def reset(self):
        """重置状态"""
        pass


class RandomAgent(Agent):
    """随机智能体"""

    def __init__(self, name: str = "random", seed: Optional[int] = None):
        super().__init__(name)
        self.rng = np.random.default_rng(seed)

    def act(self, obs: Dict[str, Any], legal_actions: List[Action], state: Optional[GameState] = None) -> Action:
        idx = self.rng.integers(len(legal_actions))
        return legal_actions[idx]


class GreedyAgent(Agent):
    """
    贪心智能体

    出比较值最小的合法牌 (整组); 不能出牌时翻暗牌、摸牌，最后才收牌
    """

    def __init__(self, name: str = "greedy"):
        super().__init__(name)

    def act(self, obs: Dict[str, Any], legal_actions: List[Action], state: Optional[GameState] = None) -> Action:
        plays = [a for a in legal_actions if a.action_type == ActionType.PLAY]
        if plays and state is not None:
            values = {c.id: c.value for c in state.zones(Side.HUMAN).all_cards()}
            return min(plays, key=lambda a: (values[a.card_ids[0]], -len(a)))
        if plays:
            return plays[0]

        for action_type in (ActionType.REVEAL, ActionType.DRAW, ActionType.PICK_UP):
            for action in legal_actions:
                if action.action_type == action_type:
                    return action
        return legal_actions[0]


class PolicyAgent(Agent):
    """电脑策略坐在人类位置"""

    def __init__(self, name: str = "policy", seed: Optional[int] = None):
        super().__init__(name)
        self.policy = ComputerPolicy(np.random.default_rng(seed), side=Side.HUMAN)

    def act(self, obs: Dict[str, Any], legal_actions: List[Action], state: Optional[GameState] = None) -> Action:
        if state is None:
            raise ValueError("PolicyAgent needs the game state")
        return self.policy.decide(state)


class Evaluator:
    """
    评估器

    评估智能体在环境中的表现
    """

    def __init__(self, env_fn: Callable):
        self.env_fn = env_fn

    def evaluate(
        self,
        agent: Agent,
        n_games: int = 100,
        round_number: Optional[int] = None,
        seed: Optional[int] = None,
        verbose: bool = False,
    ) -> EvalResult:
        """
        评估智能体

        Args:
            agent: 待评估智能体
            n_games: 游戏数量
            round_number: 回合 (决定对手和宇宙牌概率)
            seed: 第一局的随机种子 (之后每局加 1)
            verbose: 是否输出详情

        Returns:
            评估结果
        """
        env = self.env_fn()
        options = {"round_number": round_number} if round_number is not None else None

        wins = 0
        total_reward = 0.0
        total_length = 0
        pickups = 0
        actions_taken = 0
        truncations = 0

        for game_idx in range(n_games):
            game_seed = seed + game_idx if seed is not None else None
            obs, info = env.reset(seed=game_seed, options=options)
            agent.reset()
            done = info["phase"] == "gameOver"
            episode_reward = 0.0

            while not done:
                legal_actions = env.get_legal_actions()
                action = agent.act(obs, legal_actions, env.state)
                obs, reward, terminated, truncated, info = env.step(action)
                done = terminated or truncated

                episode_reward += reward
                actions_taken += 1
                if action.action_type == ActionType.PICK_UP and "error" not in info:
                    pickups += 1
                if truncated:
                    truncations += 1

            if info.get("winner") == Side.HUMAN.value:
                wins += 1
            total_reward += episode_reward
            total_length += info["turns"]

            if verbose and (game_idx + 1) % 10 == 0:
                logger.info(f"Game {game_idx + 1}/{n_games}, Win rate: {wins/(game_idx+1):.2%}")

        return EvalResult(
            win_rate=wins / n_games if n_games > 0 else 0.0,
            avg_reward=total_reward / n_games if n_games > 0 else 0.0,
            avg_length=total_length / n_games if n_games > 0 else 0.0,
            games_played=n_games,
            pickup_rate=pickups / actions_taken if actions_taken > 0 else 0.0,
            truncated_rate=truncations / n_games if n_games > 0 else 0.0,
        )

    def compare(
        self,
        agent1: Agent,
        agent2: Agent,
        n_games: int = 100,
        round_number: Optional[int] = None,
        seed: int = 0,
    ) -> Dict[str, float]:
        """
        对比两个智能体 (相同种子，相同发牌)

        Returns:
            对比结果
        """
        r1 = self.evaluate(agent1, n_games, round_number, seed)
        r2 = self.evaluate(agent2, n_games, round_number, seed)
        return {
            "agent1_win_rate": r1.win_rate,
            "agent2_win_rate": r2.win_rate,
            "agent1_avg_length": r1.avg_length,
            "agent2_avg_length": r2.avg_length,
        }
