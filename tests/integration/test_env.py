"""环境层测试"""
import pytest
import numpy as np

from palace.actions import Action, ActionType
from palace.state import Phase, Side


class TestObservationBuilder:
    """ObservationBuilder 测试"""

    def test_build_after_deal(self):
        from env.observation import ObservationBuilder, NUM_RANKS
        from palace.engine import TurnEngine

        engine = TurnEngine(seed=42)
        state = engine.apply(engine.new_game(), Action.begin_round()).state
        obs = ObservationBuilder(engine).build(state)

        assert obs.hand.shape == (NUM_RANKS,)
        assert obs.hand.sum() == 3
        assert obs.face_up.sum() == 3
        assert obs.opponent_face_up.sum() == 3
        assert obs.pile.sum() == 0
        assert obs.phase == "swapping"
        assert obs.legal_actions == []

    def test_opponent_hidden(self):
        from env.observation import ObservationBuilder
        from palace.engine import TurnEngine

        engine = TurnEngine(seed=1)
        state = engine.apply(engine.new_game(), Action.begin_round()).state
        obs = ObservationBuilder(engine).build(state, Side.HUMAN).to_dict()

        assert "opponent_hand" not in obs
        assert obs["sizes"][1] == pytest.approx(3 / 57.0)

    def test_to_flat_array(self):
        from env.observation import ObservationBuilder
        from palace.engine import TurnEngine

        engine = TurnEngine(seed=42)
        state = engine.apply(engine.new_game(), Action.begin_round()).state
        flat = ObservationBuilder(engine).build(state).to_flat_array()

        assert flat.shape == (6 * 18 + 1 + 6,)
        assert flat.dtype == np.float32


class TestRewardCalculator:
    """RewardCalculator 测试"""

    def test_sparse_reward(self):
        from dataclasses import replace
        from env.reward import RewardCalculator, RewardConfig, RewardType
        from palace.state import GameState, MatchOutcome

        calc = RewardCalculator(RewardConfig(reward_type=RewardType.SPARSE))
        state = GameState.initial()
        assert calc.compute(state) == 0.0

        won = replace(state, phase=Phase.GAME_OVER, winner=Side.HUMAN, outcome=MatchOutcome.ROUND_WON)
        assert calc.compute(won, player=Side.HUMAN) == 1.0
        assert calc.compute(won, player=Side.COMPUTER) == -1.0

    def test_shaped_reward(self):
        from env.reward import RewardCalculator, RewardConfig, RewardType
        from palace.cards import Card, Rank, Suit
        from palace.state import GameState, PlayerZones

        calc = RewardCalculator(RewardConfig(reward_type=RewardType.SHAPED, pickup_penalty=-0.05))
        c1 = Card("a", Suit.CLUBS, Rank.FOUR, True)
        c2 = Card("b", Suit.CLUBS, Rank.NINE, True)
        before = GameState(phase=Phase.PLAYING, human=PlayerZones(hand=(c1, c2)))
        after = GameState(phase=Phase.PLAYING, human=PlayerZones(hand=(c1,)))

        assert calc.compute(after, before) == pytest.approx(0.01)
        assert calc.compute(before, after) == pytest.approx(-0.05)


class TestPalaceEnv:
    """PalaceEnv 测试"""

    def test_reset(self):
        from env import PalaceEnv

        env = PalaceEnv(seed=42)
        obs, info = env.reset()

        assert "hand" in obs
        assert "pile_base" in obs
        assert info["phase"] == "playing"
        assert info["current_player"] == "human"
        assert info["round"] == 1
        assert len(info["legal_actions"]) > 0
        assert info["legal_action_mask"].sum() == len(info["legal_actions"])

    def test_reset_round_option(self):
        from env import PalaceEnv

        env = PalaceEnv(seed=0)
        _, info = env.reset(options={"round_number": 3})
        assert info["round"] == 3
        assert env.state.round.opponent.name == "The Analyst"

    def test_spaces(self):
        from env import PalaceEnv, MAX_ACTIONS

        env = PalaceEnv(seed=0)
        obs, _ = env.reset()
        assert env.action_space.n == MAX_ACTIONS
        assert env.observation_space.contains(obs)

    def test_step_by_index(self):
        from env import PalaceEnv

        env = PalaceEnv(seed=42)
        env.reset()
        obs, reward, terminated, truncated, info = env.step(0)

        assert isinstance(reward, float)
        assert "error" not in info
        assert terminated or info["current_player"] == "human"

    def test_invalid_index(self):
        from env import PalaceEnv

        env = PalaceEnv(seed=42)
        env.reset()
        before = env.state
        obs, reward, terminated, truncated, info = env.step(63)

        assert reward == -0.1
        assert "error" in info
        assert not terminated and not truncated
        assert env.state is before

    def test_illegal_action_object(self):
        from env import PalaceEnv

        env = PalaceEnv(seed=42)
        env.reset()
        _, reward, _, _, info = env.step(Action.play(Side.HUMAN, ["not-a-card"]))
        assert reward == -0.1
        assert "error" in info

        _, _, _, _, info = env.step(Action.pick_up(Side.COMPUTER))
        assert "error" in info

    def test_step_before_reset(self):
        from env import PalaceEnv

        with pytest.raises(RuntimeError):
            PalaceEnv().step(0)

    def test_full_round(self):
        from env import PalaceEnv

        env = PalaceEnv(seed=7, max_turns=300)
        obs, info = env.reset()
        done = False
        steps = 0

        while not done and steps < 2000:
            obs, reward, terminated, truncated, info = env.step(env.sample_action())
            done = terminated or truncated
            steps += 1
            env.state.validate_partition()

        assert done
        if terminated:
            assert info["winner"] in ("human", "computer")
            assert info["outcome"] in ("round_won", "match_won", "match_lost")
            assert reward in (1.0, -1.0)

    def test_seeded_reset(self):
        from env import PalaceEnv

        a = PalaceEnv()
        b = PalaceEnv()
        a.reset(seed=5)
        b.reset(seed=5)
        assert a.state.card_ids() == b.state.card_ids()

    def test_render(self):
        from env import PalaceEnv

        env = PalaceEnv(render_mode="ansi", seed=42)
        env.reset()
        output = env.render()

        assert isinstance(output, str)
        assert "Round 1/5" in output
        assert "The Rookie" in output

    def test_make_env(self):
        from env import make_env

        env = make_env(round_number=2, reward_type="shaped", seed=1)
        _, info = env.reset()
        assert info["round"] == 2
