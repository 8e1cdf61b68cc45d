"""评估层测试"""
import pytest
import numpy as np

from palace.actions import Action, ActionType
from palace.cards import Card, Rank, Suit
from palace.state import GameState, Phase, PlayerZones, Side


def card(rank: str, n: int = 0) -> Card:
    return Card(f"test-{rank}-{n}", Suit.SPADES, Rank(rank), True)


def small_env():
    from env import make_env
    return make_env(max_turns=150)


class TestEvalResult:
    """EvalResult 测试"""

    def test_create(self):
        from evaluation import EvalResult

        result = EvalResult(
            win_rate=0.6,
            avg_reward=0.2,
            avg_length=50.0,
            games_played=100,
        )
        assert result.win_rate == 0.6
        assert result.games_played == 100
        assert "60.00%" in repr(result)


class TestAgents:
    """智能体测试"""

    def test_random_agent(self):
        from evaluation import RandomAgent

        agent = RandomAgent(seed=0)
        legal_actions = [Action.pick_up(Side.HUMAN), Action.draw(Side.HUMAN)]
        assert agent.act({}, legal_actions) in legal_actions

    def test_greedy_plays_lowest(self):
        from evaluation import GreedyAgent

        state = GameState(
            phase=Phase.PLAYING,
            human=PlayerZones(hand=(card("k"), card("5"), card("5", 1))),
        )
        legal_actions = [
            Action.play(Side.HUMAN, ["test-k-0"]),
            Action.play(Side.HUMAN, ["test-5-0"]),
            Action.play(Side.HUMAN, ["test-5-0", "test-5-1"]),
        ]
        action = GreedyAgent().act({}, legal_actions, state)
        assert action == Action.play(Side.HUMAN, ["test-5-0", "test-5-1"])

    def test_greedy_reveals_before_pick_up(self):
        from evaluation import GreedyAgent

        legal_actions = [Action.pick_up(Side.HUMAN), Action.reveal(Side.HUMAN, "test-9-0")]
        action = GreedyAgent().act({}, legal_actions)
        assert action.action_type == ActionType.REVEAL

    def test_policy_agent_needs_state(self):
        from evaluation import PolicyAgent

        with pytest.raises(ValueError):
            PolicyAgent().act({}, [Action.pick_up(Side.HUMAN)])

    def test_policy_agent_plays_for_human(self):
        from evaluation import PolicyAgent

        state = GameState(phase=Phase.PLAYING, human=PlayerZones(hand=(card("9"), card("4"))))
        action = PolicyAgent(seed=0).act({}, [], state)
        assert action == Action.play(Side.HUMAN, ["test-4-0"])


class TestEvaluator:
    """Evaluator 测试"""

    def test_evaluate(self):
        from evaluation import Evaluator, RandomAgent

        evaluator = Evaluator(env_fn=small_env)
        result = evaluator.evaluate(RandomAgent("test", seed=1), n_games=3, seed=0)

        assert result.games_played == 3
        assert 0.0 <= result.win_rate <= 1.0
        assert 0.0 <= result.pickup_rate <= 1.0
        assert result.avg_length > 0

    def test_later_round(self):
        from evaluation import Evaluator, GreedyAgent

        evaluator = Evaluator(env_fn=small_env)
        result = evaluator.evaluate(GreedyAgent(), n_games=2, round_number=5, seed=3)
        assert result.games_played == 2

    def test_compare(self):
        from evaluation import Evaluator, GreedyAgent, PolicyAgent

        evaluator = Evaluator(env_fn=small_env)
        result = evaluator.compare(GreedyAgent(), PolicyAgent(seed=0), n_games=2, seed=5)

        assert set(result) == {
            "agent1_win_rate", "agent2_win_rate", "agent1_avg_length", "agent2_avg_length",
        }


class TestArena:
    """Arena 测试"""

    def test_campaign_stops_at_first_loss(self):
        from evaluation import Arena, PolicyAgent

        arena = Arena(env_fn=small_env)
        campaign = arena.play_campaign(PolicyAgent(seed=2), seed=10)

        assert 1 <= len(campaign.rounds) <= campaign.total_rounds
        assert all(r.won for r in campaign.rounds[:-1])
        if not campaign.match_won:
            assert not campaign.rounds[-1].won
        assert campaign.reached == len(campaign.rounds)
        assert [r.round_number for r in campaign.rounds] == list(range(1, len(campaign.rounds) + 1))

    def test_run(self):
        from evaluation import Arena, GreedyAgent, RandomAgent

        arena = Arena(env_fn=small_env)
        result = arena.run([GreedyAgent(), RandomAgent(seed=0)], n_matches=2, seed=0)

        assert result.total_matches == 4
        assert {name for name, _ in result.get_ranking()} == {"greedy", "random"}
        for stats in result.standings.values():
            assert stats["matches"] == 2
            assert 0.0 <= stats["match_win_rate"] <= 1.0

    def test_match_result(self):
        from evaluation import MatchResult, CampaignResult

        won = MatchResult(1, "The Rookie", "human", 12, 2)
        lost = MatchResult(2, "The Trickster", "computer", 20, 4)
        campaign = CampaignResult("agent", [won, lost])

        assert won.won and not lost.won
        assert campaign.rounds_won == 1
        assert not campaign.match_won
        assert campaign.reached == 2
