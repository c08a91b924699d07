import argparse
import logging
import time
from typing import Optional

from board_helpers import NUM_PIECES
from piece_helpers import piece
from solver_helpers import Impossible, Solved, Solver, Unsolved
from target_helpers import TargetDate, parse_iso_date, parse_target

LOGGER = logging.getLogger(__name__)


def resolve_target(args: argparse.Namespace, parser: argparse.ArgumentParser) -> TargetDate:
    """Build the target from --date or the three positional values."""
    if not args.date and not (args.month and args.day and args.weekday):
        parser.error("give MONTH DAY WEEKDAY or --date YYYY-MM-DD")
    try:
        if args.date:
            return parse_iso_date(args.date)
        return parse_target(args.month, args.day, args.weekday)
    except ValueError as exc:
        parser.error(str(exc))


def print_placements(message: Solved) -> None:
    """Print where each piece ended up."""
    for piece_index, placement in message.state.placed_pieces():
        cells = " ".join(
            f"({x},{y})" for x, y in piece(piece_index).mask(placement).iter_covered()
        )
        flip = " flipped" if placement.flipped else ""
        print(
            f"  piece {piece_index}: anchor ({placement.x},{placement.y}) "
            f"rotation {placement.rotation}{flip} -> {cells}"
        )


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Solve the calendar puzzle for one date and print the search steps/result."
    )
    parser.add_argument("month", nargs="?", help="month name, prefix or number (e.g. jan, 1)")
    parser.add_argument("day", nargs="?", help="day of month (1-31)")
    parser.add_argument("weekday", nargs="?", help="weekday name, prefix or number (1 = Monday)")
    parser.add_argument("--date", default=None, help="ISO date YYYY-MM-DD (weekday is derived)")
    parser.add_argument("--show-steps", action="store_true", help="print every intermediate board")
    parser.add_argument(
        "--max-steps",
        type=int,
        default=0,
        help="stop after N search steps (0 = run to completion)",
    )
    parser.add_argument(
        "--prune-islands",
        action="store_true",
        help="skip states leaving a required cell no remaining piece can reach",
    )
    parser.add_argument("--verbose", action="store_true", help="debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    target = resolve_target(args, parser)

    try:
        max_steps: Optional[int] = args.max_steps if args.max_steps and args.max_steps > 0 else None

        print("=== TARGET ===")
        print(f"date: {target}")

        winning_mask = target.winning_mask()
        if winning_mask is None:
            print("no board cells for this date")
            raise SystemExit(2)

        start_time = time.time()
        steps = 0
        final = None
        for message in Solver(winning_mask, prune_islands=args.prune_islands):
            final = message
            if isinstance(message, Unsolved):
                steps += 1
                if args.show_steps:
                    print(f"\n--- step {steps} ---")
                    print(message)
                if max_steps is not None and steps >= max_steps:
                    break

        elapsed = time.time() - start_time
        print("\n=== RESULT ===")
        if isinstance(final, Solved):
            print(final)
            print_placements(final)
            LOGGER.info("solved %s in %s steps (%.2fs)", target, f"{final.steps:,}", elapsed)
        elif isinstance(final, Impossible):
            print(final)
            LOGGER.info("%s has no solution, determined in %s steps", target, f"{final.steps:,}")
        else:
            print(f"CANCELLED after {steps} steps")
            placed = 0
            if isinstance(final, Unsolved):
                print(final.mask)
                placed = sum(1 for _ in final.state.placed_pieces())
            LOGGER.info("stopped after %s steps with %d/%d pieces placed", f"{steps:,}", placed, NUM_PIECES)
    except Exception:
        LOGGER.exception("Failed to solve date")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
