#!/usr/bin/env python3
"""
终端对战脚本

Usage:
    python scripts/play.py                # 与电脑对战
    python scripts/play.py --delay 0.5    # 电脑思考时间
    python scripts/play.py --seed 42
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List
import time

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from palace import Action, ActionType, CardSource, Phase, MatchOutcome, Side, cards_to_str
from palace.events import EventType
from session import GameSession, Notification, SessionConfig

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)

# 终端上播放的事件
SHOWN_EVENTS = {
    EventType.CARDS_PLAYED,
    EventType.CARD_REVEALED,
    EventType.PILE_BURNED,
    EventType.DECK_BURNED,
    EventType.PALACES_BURNED,
    EventType.HANDS_SWAPPED,
    EventType.FORCED_DRAW,
    EventType.PILE_PICKED_UP,
    EventType.DISTORTION,
    EventType.TURN_FORCED,
}


def parse_args():
    parser = argparse.ArgumentParser(description="Space Palace")

    parser.add_argument("--delay", type=float, default=1.0, help="Computer thinking delay")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--skip-swap", action="store_true", help="Skip the swapping phase")

    return parser.parse_args()


def print_events(note: Notification):
    """播放事件"""
    for event in note.events:
        if event.event_type in SHOWN_EVENTS and event.message:
            print(f"  > {event.message}")


def print_game_state(session: GameSession):
    """打印游戏状态"""
    state = session.state
    opponent = state.round.opponent

    print("\n" + "=" * 60)
    print(f"Round {state.round.round_number}/{state.round.total_rounds}: {opponent.name}")
    print(f"  {opponent.description}")
    print("-" * 60)
    print(f"Computer: {len(state.computer.hand)} in hand | "
          f"face-up: {cards_to_str(state.computer.face_up) or '-'} | "
          f"face-down: {len(state.computer.face_down)}")
    print(f"Pile ({len(state.pile)}): {cards_to_str(state.pile[-4:]) or '-'}")
    print(f"Deck: {len(state.deck)} | Burned: {state.burned_count}")
    print(f"Your hand: {cards_to_str(state.human.hand) or '-'}")
    print(f"Your face-up: {cards_to_str(state.human.face_up) or '-'} | "
          f"face-down: {len(state.human.face_down)}")
    print("-" * 60)
    print(state.message)
    print("=" * 60)


def action_to_str(session: GameSession, action: Action) -> str:
    """动作转字符串"""
    if action.action_type == ActionType.PLAY:
        zone = session.state.zones(Side.HUMAN).get(action.source)
        cards = [c for c in zone if c.id in action.card_ids]
        where = "" if action.source is CardSource.HAND else " (face-up)"
        return f"Play {cards_to_str(cards)}{where}"
    if action.action_type == ActionType.REVEAL:
        return "Reveal a face-down card"
    if action.action_type == ActionType.PICK_UP:
        return "Pick up the pile"
    if action.action_type == ActionType.DRAW:
        return "Draw cards"
    return "Pass"


def ask(prompt: str) -> str:
    choice = input(prompt).strip().lower()
    if choice == "q":
        print("Goodbye!")
        sys.exit(0)
    return choice


def swap_phase(session: GameSession):
    """交换阶段"""
    while session.state.phase == Phase.SWAPPING:
        human = session.state.human
        print_game_state(session)
        print("Hand:    " + "  ".join(f"[{i}] {c}" for i, c in enumerate(human.hand)))
        print("Face-up: " + "  ".join(f"[{i}] {c}" for i, c in enumerate(human.face_up)))
        choice = ask("\nSwap with '<hand> <face-up>', 'd' when done, 'q' to quit: ")
        if choice == "d":
            session.finish_swapping()
            continue
        try:
            h, f = (int(x) for x in choice.split())
            session.swap(human.hand[h].id, human.face_up[f].id)
        except (ValueError, IndexError):
            print("Invalid choice, try again")


def human_turn(session: GameSession):
    """人类回合"""
    print_game_state(session)
    legal_actions: List[Action] = session.engine.legal_actions(session.state, Side.HUMAN)

    print("\nYour options:")
    for i, action in enumerate(legal_actions):
        print(f"  {i}: {action_to_str(session, action)}")

    while True:
        choice = ask("\nChoose an option (or 'q' to quit): ")
        try:
            idx = int(choice)
        except ValueError:
            print("Please enter a number")
            continue
        if 0 <= idx < len(legal_actions):
            session.submit(legal_actions[idx])
            return
        print("Invalid choice, try again")


def game_over(session: GameSession) -> bool:
    """
    回合结束

    Returns:
        是否继续
    """
    state = session.state
    print_game_state(session)
    if state.outcome == MatchOutcome.ROUND_WON:
        ask("\nPress Enter for the next opponent (or 'q' to quit): ")
        session.next_round()
        return True
    if state.outcome == MatchOutcome.MATCH_WON:
        print("\nYou beat every opponent!")
    choice = ask("\nPlay again? [y/N] ")
    if choice == "y":
        session.restart()
        return True
    return False


def main():
    args = parse_args()

    print("=" * 60)
    print("Space Palace")
    print("=" * 60)

    config = SessionConfig(
        computer_delay=args.delay,
        seed=args.seed,
        auto_finish_swapping=args.skip_swap,
    )
    session = GameSession(config)
    session.subscribe(print_events)
    session.begin_round()

    while True:
        state = session.state
        if state.phase == Phase.SWAPPING:
            swap_phase(session)
        elif state.phase == Phase.GAME_OVER:
            if not game_over(session):
                break
        elif session.awaiting_human:
            human_turn(session)
        else:
            session.tick()
            time.sleep(0.05)


if __name__ == "__main__":
    main()
