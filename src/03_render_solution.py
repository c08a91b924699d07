import argparse
import logging
from pathlib import Path
from typing import Optional, Tuple

import cv2
import numpy as np

from board_helpers import PUZZLE_HEIGHT, PUZZLE_WIDTH, TagKind, TaggedMask
from path_helpers import IMAGES_DIR, ensure_parent_dir
from solver_helpers import OUTCOME_INVALID, OUTCOME_SOLVED, Solved, Unsolved, run_solver
from state_helpers import GameState
from target_helpers import TargetDate, label_at, parse_iso_date, parse_target

LOGGER = logging.getLogger(__name__)

# One colour per piece
PALETTE = [
    (231, 76, 60),
    (46, 204, 113),
    (52, 152, 219),
    (155, 89, 182),
    (241, 196, 15),
    (230, 126, 34),
    (26, 188, 156),
    (149, 165, 166),
    (52, 73, 94),
]
TARGET_COLOR = (40, 40, 200)
TEXT_COLOR = (0, 0, 0)


def draw_centered_text(
    img: np.ndarray,
    text: str,
    center: Tuple[int, int],
    scale: float,
    color: Tuple[int, int, int],
    thickness: int = 1,
) -> None:
    """Draw text centred on a pixel position."""
    if not text:
        return
    (width, height), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, scale, thickness)
    org = (center[0] - width // 2, center[1] + height // 2)
    cv2.putText(img, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)


def render_board_image(tagged: TaggedMask, cell_size: int = 80, margin: int = 20) -> np.ndarray:
    """Render a tagged board: piece colours, date cells ringed, labels on uncovered cells."""
    board_width = cell_size * PUZZLE_WIDTH
    board_height = cell_size * PUZZLE_HEIGHT
    img = np.full((board_height + margin * 2, board_width + margin * 2, 3), 255, dtype=np.uint8)

    # Fill piece placements
    for y in range(PUZZLE_HEIGHT):
        for x in range(PUZZLE_WIDTH):
            tag = tagged.get(x, y)
            if tag.kind is not TagKind.COVERED:
                continue
            color = PALETTE[tag.piece_index % len(PALETTE)]
            x1 = margin + x * cell_size + 2
            y1 = margin + y * cell_size + 2
            x2 = margin + (x + 1) * cell_size - 2
            y2 = margin + (y + 1) * cell_size - 2
            cv2.rectangle(img, (x1, y1), (x2, y2), color, -1)

    # Draw grid
    for i in range(PUZZLE_WIDTH + 1):
        px = margin + i * cell_size
        cv2.line(img, (px, margin), (px, margin + board_height), (0, 0, 0), 2)
    for i in range(PUZZLE_HEIGHT + 1):
        py = margin + i * cell_size
        cv2.line(img, (margin, py), (margin + board_width, py), (0, 0, 0), 2)

    # Labels on anything a piece does not hide
    radius = int(cell_size * 0.4)
    scale = cell_size / 110
    for y in range(PUZZLE_HEIGHT):
        for x in range(PUZZLE_WIDTH):
            tag = tagged.get(x, y)
            center = (margin + int((x + 0.5) * cell_size), margin + int((y + 0.5) * cell_size))
            if tag.kind is TagKind.TARGET:
                cv2.circle(img, center, radius, TARGET_COLOR, 3)
                draw_centered_text(img, label_at(x, y).text, center, scale, TARGET_COLOR, 2)
            elif tag.kind is TagKind.OPEN:
                draw_centered_text(img, label_at(x, y).text, center, scale, TEXT_COLOR)
            else:
                draw_centered_text(img, str(tag.piece_index), center, scale, (255, 255, 255), 2)

    return img


def default_output_path(target: TargetDate) -> Path:
    return IMAGES_DIR / (
        f"{target.month.name.lower()}_{target.day_of_month:02d}_{target.weekday.name.lower()}.png"
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Solve one date and render the board to a PNG image.")
    parser.add_argument("month", nargs="?", help="month name, prefix or number (e.g. jan, 1)")
    parser.add_argument("day", nargs="?", help="day of month (1-31)")
    parser.add_argument("weekday", nargs="?", help="weekday name, prefix or number (1 = Monday)")
    parser.add_argument("--date", default=None, help="ISO date YYYY-MM-DD (weekday is derived)")
    parser.add_argument("--output", default=None, help="PNG path (defaults under output/images)")
    parser.add_argument("--cell-size", type=int, default=80, help="cell size in pixels")
    parser.add_argument(
        "--max-steps",
        type=int,
        default=0,
        help="render the board reached after N search steps (0 = run to completion)",
    )
    parser.add_argument(
        "--prune-islands",
        action="store_true",
        help="skip states leaving a required cell no remaining piece can reach",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    if not args.date and not (args.month and args.day and args.weekday):
        parser.error("give MONTH DAY WEEKDAY or --date YYYY-MM-DD")
    try:
        target = parse_iso_date(args.date) if args.date else parse_target(args.month, args.day, args.weekday)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        max_steps: Optional[int] = args.max_steps if args.max_steps and args.max_steps > 0 else None
        result = run_solver(target, max_steps=max_steps, prune_islands=args.prune_islands)
        if result.outcome == OUTCOME_INVALID:
            LOGGER.error("no board cells for %s", target)
            raise SystemExit(2)

        winning_mask = target.winning_mask()
        if isinstance(result.final, (Solved, Unsolved)):
            tagged = result.final.mask
        else:
            # Impossible: show the empty board with the date cells marked
            tagged = GameState().tagged_mask(winning_mask)

        if result.outcome != OUTCOME_SOLVED:
            LOGGER.warning("%s ended %s after %s steps; rendering last board", target, result.outcome, result.steps)

        out_path = ensure_parent_dir(Path(args.output) if args.output else default_output_path(target))
        img = render_board_image(tagged, cell_size=max(args.cell_size, 20))
        if not cv2.imwrite(str(out_path), img):
            raise RuntimeError(f"could not write image {out_path}")

        print(tagged)
        LOGGER.info("%s: %s in %s steps", target, result.outcome, f"{result.steps:,}")
        LOGGER.info("wrote: %s", out_path)
    except Exception:
        LOGGER.exception("Failed to render solution")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
