#!/usr/bin/env python3
"""
批量模拟脚本

Usage:
    python scripts/simulate.py --agent policy --games 100 --round 3
    python scripts/simulate.py --compare greedy random --games 200
    python scripts/simulate.py --campaign --agents policy greedy random --matches 20
"""
import argparse
import logging
import sys
from pathlib import Path
import json

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from env import PalaceEnv
from evaluation import (
    Evaluator,
    RandomAgent,
    GreedyAgent,
    PolicyAgent,
    Arena,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)

AGENT_TYPES = ["random", "greedy", "policy"]


def parse_args():
    parser = argparse.ArgumentParser(description="Space Palace Simulation")

    # 模式
    parser.add_argument("--compare", nargs=2, choices=AGENT_TYPES, help="Compare two agents")
    parser.add_argument("--campaign", action="store_true", help="Play full 5-round matches")

    # 智能体
    parser.add_argument("--agent", type=str, default="policy", choices=AGENT_TYPES, help="Agent to evaluate")
    parser.add_argument("--agents", nargs="+", choices=AGENT_TYPES, default=AGENT_TYPES, help="Agents for campaigns")

    # 评估参数
    parser.add_argument("--games", type=int, default=100, help="Number of games")
    parser.add_argument("--matches", type=int, default=10, help="Matches per agent in campaign mode")
    parser.add_argument("--round", type=int, default=1, help="Round number (1-5)")
    parser.add_argument("--max-turns", type=int, default=500, help="Turn limit per round")

    # 其他
    parser.add_argument("--seed", type=int, default=0, help="Base random seed")
    parser.add_argument("--output", type=str, help="Output file for results")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")

    return parser.parse_args()


def create_agent(kind: str, seed: int):
    """创建智能体"""
    if kind == "random":
        return RandomAgent("random", seed=seed)
    if kind == "greedy":
        return GreedyAgent("greedy")
    return PolicyAgent("policy", seed=seed)


def env_factory(args):
    return lambda: PalaceEnv(round_number=args.round, max_turns=args.max_turns, seed=args.seed)


def evaluate_single(args):
    """评估单个智能体"""
    logger.info(f"Evaluating {args.agent} agent in round {args.round}")

    agent = create_agent(args.agent, args.seed)
    evaluator = Evaluator(env_fn=env_factory(args))
    result = evaluator.evaluate(
        agent=agent,
        n_games=args.games,
        round_number=args.round,
        seed=args.seed,
        verbose=args.verbose,
    )

    logger.info("=" * 50)
    logger.info("Evaluation Results")
    logger.info("=" * 50)
    logger.info(f"Win Rate: {result.win_rate:.2%}")
    logger.info(f"Average Reward: {result.avg_reward:.2f}")
    logger.info(f"Average Length: {result.avg_length:.1f} turns")
    logger.info(f"Pick-up Rate: {result.pickup_rate:.2%}")
    logger.info(f"Truncated: {result.truncated_rate:.2%}")
    logger.info("=" * 50)

    if args.output:
        with open(args.output, "w") as f:
            json.dump({
                "agent": args.agent,
                "round": args.round,
                "win_rate": result.win_rate,
                "avg_reward": result.avg_reward,
                "avg_length": result.avg_length,
                "pickup_rate": result.pickup_rate,
                "truncated_rate": result.truncated_rate,
                "games_played": result.games_played,
            }, f, indent=2)
        logger.info(f"Results saved to {args.output}")

    return result


def compare_agents(args):
    """比较两个智能体"""
    kind1, kind2 = args.compare
    logger.info(f"Comparing agents: {kind1} vs {kind2}")

    evaluator = Evaluator(env_fn=env_factory(args))
    result = evaluator.compare(
        create_agent(kind1, args.seed),
        create_agent(kind2, args.seed),
        n_games=args.games,
        round_number=args.round,
        seed=args.seed,
    )

    logger.info("=" * 50)
    logger.info("Comparison Results")
    logger.info("=" * 50)
    logger.info(f"{kind1}: {result['agent1_win_rate']:.2%} ({result['agent1_avg_length']:.1f} turns)")
    logger.info(f"{kind2}: {result['agent2_win_rate']:.2%} ({result['agent2_avg_length']:.1f} turns)")
    logger.info("=" * 50)

    if args.output:
        with open(args.output, "w") as f:
            json.dump(result, f, indent=2)

    return result


def run_campaigns(args):
    """完整比赛"""
    logger.info(f"Running {args.matches} campaigns for {len(args.agents)} agents")

    agents = [create_agent(kind, args.seed) for kind in args.agents]
    arena = Arena(env_fn=env_factory(args))
    result = arena.run(agents, n_matches=args.matches, seed=args.seed)

    logger.info("=" * 50)
    logger.info(repr(result))
    logger.info("=" * 50)

    if args.output:
        with open(args.output, "w") as f:
            json.dump({
                "rankings": result.get_ranking(),
                "total_matches": result.total_matches,
                "standings": result.standings,
            }, f, indent=2)

    return result


def main():
    args = parse_args()

    if args.campaign:
        run_campaigns(args)
    elif args.compare:
        compare_agents(args)
    else:
        evaluate_single(args)


if __name__ == "__main__":
    main()
