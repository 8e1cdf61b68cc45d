"""完整对局测试: 会话 + 状态机 + 双方策略"""
import pytest
import numpy as np

from palace.actions import Action
from palace.engine import TurnEngine
from palace.policy import ComputerPolicy
from palace.rounds import RoundContext
from palace.state import MatchOutcome, Phase, Side
from session import GameSession, SessionConfig


def play_round(session: GameSession, human: ComputerPolicy, max_steps: int = 3000):
    """人类位置也由策略控制，返回本回合全部牌 ID"""
    expected = set(session.state.card_ids())
    for _ in range(max_steps):
        state = session.state
        if state.phase == Phase.GAME_OVER:
            break
        if session.awaiting_human:
            session.submit(human.decide(state))
        else:
            session.run_until_human()
        session.state.validate_partition(expected)
    return expected


class TestEngineSelfPlay:
    """状态机自对弈"""

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_round_terminates_and_conserves(self, seed):
        engine = TurnEngine(seed=seed)
        policies = {
            Side.HUMAN: ComputerPolicy(np.random.default_rng(seed), side=Side.HUMAN),
            Side.COMPUTER: ComputerPolicy(np.random.default_rng(seed + 100)),
        }
        state = engine.apply(engine.new_game(RoundContext(5)), Action.begin_round()).state
        expected = set(state.card_ids())
        state = engine.apply(state, Action.finish_swapping()).state

        for _ in range(5000):
            if state.phase == Phase.GAME_OVER:
                break
            result = engine.apply(state, policies[state.current].decide(state))
            if not result.accepted:
                result = engine.force_end_turn(state)
            state = result.state
            state.validate_partition(expected)

        assert state.phase == Phase.GAME_OVER
        assert state.winner is not None
        assert state.zones(state.winner).is_empty
        if state.winner is Side.HUMAN:
            assert state.outcome == MatchOutcome.MATCH_WON
        else:
            assert state.outcome == MatchOutcome.MATCH_LOST


class TestSessionMatch:
    """会话完整对局"""

    def test_single_round(self):
        session = GameSession(SessionConfig(seed=21, auto_finish_swapping=True))
        session.begin_round()
        expected = play_round(session, ComputerPolicy(np.random.default_rng(21), side=Side.HUMAN))

        assert len(expected) == 52 - 15
        if session.state.phase == Phase.GAME_OVER:
            assert session.state.winner in (Side.HUMAN, Side.COMPUTER)
            assert not session.computer_pending

    def test_campaign_progression(self):
        session = GameSession(SessionConfig(seed=4, auto_finish_swapping=True))
        human = ComputerPolicy(np.random.default_rng(4), side=Side.HUMAN)
        session.begin_round()

        for _ in range(5):
            play_round(session, human)
            state = session.state
            if state.outcome != MatchOutcome.ROUND_WON:
                break
            round_number = state.round.round_number
            session.next_round()
            assert session.state.round.round_number == round_number + 1
            assert session.state.phase == Phase.PLAYING

        state = session.state
        if state.outcome == MatchOutcome.MATCH_WON:
            assert state.round.is_final
        session.restart()
        assert session.state.round.round_number == 1
        assert session.state.phase == Phase.PLAYING

    def test_events_reach_subscribers(self):
        session = GameSession(SessionConfig(seed=8, auto_finish_swapping=True))
        notes = []
        session.subscribe(notes.append)
        session.begin_round()
        play_round(session, ComputerPolicy(np.random.default_rng(8), side=Side.HUMAN), max_steps=50)

        assert notes
        assert notes[-1].state is session.state
