"""
Evaluation Layer - 评估框架

Modules:
    evaluator: 评估器和智能体
    arena: 完整比赛竞技场
"""
from .evaluator import (
    EvalResult,
    Agent,
    RandomAgent,
    GreedyAgent,
    PolicyAgent,
    Evaluator,
)
from .arena import (
    MatchResult,
    CampaignResult,
    TournamentResult,
    Arena,
)

__all__ = [
    # evaluator
    "EvalResult",
    "Agent",
    "RandomAgent",
    "GreedyAgent",
    "PolicyAgent",
    "Evaluator",
    # arena
    "MatchResult",
    "CampaignResult",
    "TournamentResult",
    "Arena",
]
