#!/usr/bin/env python3
"""
Guess-the-character terminal game
Think of a character, answer yes/no, and the question tree finds them
"""

import argparse
import logging
import os
import sys
from functools import partial

from character_guesser import (
    CharacterNotFoundError,
    GameEngine,
    build_tree,
    parse_answer,
    play_round,
    read_character_by_id,
    read_character_ids,
    read_questions,
    render_tree,
    resolve_character,
    to_dot,
)
from character_guesser.questions import SAMPLE_CHARACTERS_CSV, SAMPLE_QUESTIONS_CSV
from character_guesser.tree import outcome_counts, tree_depth

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def print_header(title: str):
    print("\n" + "=" * 80)
    print(f"  {title}")
    print("=" * 80 + "\n")


def print_section(title: str):
    print(f"\n{title}")
    print("-" * 80)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument(
        "--questions",
        default=os.getenv("GUESSER_QUESTIONS_CSV", SAMPLE_QUESTIONS_CSV),
        help="question bank CSV (env: GUESSER_QUESTIONS_CSV)",
    )
    parser.add_argument(
        "--characters",
        default=os.getenv("GUESSER_CHARACTERS_CSV", SAMPLE_CHARACTERS_CSV),
        help="character table CSV (env: GUESSER_CHARACTERS_CSV)",
    )
    parser.add_argument("--dot", metavar="PATH", help="write the question tree as DOT and exit")
    parser.add_argument(
        "--render",
        metavar="FMT",
        help="with --dot, also draw the tree as FMT (svg, png, ...) beside the DOT file",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=os.getenv("GUESSER_LOG_LEVEL", "WARNING"),
        help="logging level (env: GUESSER_LOG_LEVEL)",
    )
    args = parser.parse_args(argv)
    # argparse does not check a default against choices
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid log level {args.log_level!r} (choose from {', '.join(LOG_LEVELS)})")
    if args.render and not args.dot:
        parser.error("--render requires --dot")
    return args


def ask_yes_no(prompt: str) -> bool:
    """Ask until the player types something parse_answer understands"""
    while True:
        answer = parse_answer(input(prompt))
        if answer is not None:
            return answer
        print("Please answer 'y' or 'n'.")


def show_result(outcome, characters_csv: str):
    print_section("Result")
    lookup = partial(read_character_by_id, characters_csv)
    try:
        character = resolve_character(outcome, lookup)
    except CharacterNotFoundError as e:
        print(f"⚠ {e}")
        character = None

    if character is not None and character.char_id == outcome.candidate_id:
        print(f"✓ You are thinking of {character.name}!")
        print(f"  Picture: {character.image_path}")
    else:
        print(f"⊙ {outcome.describe()}")
        if character is not None:
            print(f"  Picture: {character.image_path}")


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level)

    try:
        questions = read_questions(args.questions)
        universe = read_character_ids(args.characters)
    except (OSError, ValueError) as e:
        print(f"❌ Could not load game data: {e}")
        return 1

    root = build_tree(universe, questions)

    if args.dot:
        with open(args.dot, "w") as f:
            f.write(to_dot(root))
        print(f"✓ Question tree saved to: {args.dot}")
        if args.render:
            try:
                image = render_tree(root, os.path.splitext(args.dot)[0], fmt=args.render)
            except RuntimeError as e:
                print(f"❌ Could not render tree: {e}")
                return 1
            print(f"✓ Question tree drawn to: {image}")
        return 0

    print_header("Guess the Character")
    counts = {kind.value: n for kind, n in outcome_counts(root).items()}
    print(f"{len(universe)} characters, {len(questions)} questions, "
          f"at most {tree_depth(root)} questions per round")
    logging.debug("Leaf outcomes: %s", counts)

    engine = GameEngine(universe, root)
    try:
        while True:
            print("\nThink of a character and answer with y or n.\n")
            outcome = play_round(engine)
            show_result(outcome, args.characters)
            if not ask_yes_no("\nPlay again? (y/n): "):
                break
            engine.restart()
    except (EOFError, KeyboardInterrupt):
        print("\n\nGoodbye!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
