import argparse
import calendar
import csv
import datetime
import logging
import os
import time
from concurrent.futures import ProcessPoolExecutor
from functools import partial
from pathlib import Path
from typing import Dict, List, Optional

from path_helpers import OUTPUT_DIR, ensure_output_dir, ensure_parent_dir
from solver_helpers import (
    OUTCOME_CANCELLED,
    OUTCOME_IMPOSSIBLE,
    OUTCOME_SOLVED,
    run_solver,
)
from target_helpers import TargetDate, iter_target_dates

LOGGER = logging.getLogger(__name__)

FIELDNAMES = ["month", "day_of_month", "weekday", "outcome", "steps", "elapsed_seconds"]


def solve_row(target: TargetDate, max_steps: Optional[int] = None, prune_islands: bool = False) -> Dict[str, str]:
    """Solve one date and return its CSV row."""
    result = run_solver(target, max_steps=max_steps, prune_islands=prune_islands)
    return {
        "month": target.month.name.title(),
        "day_of_month": str(target.day_of_month),
        "weekday": target.weekday.name.title(),
        "outcome": result.outcome,
        "steps": str(result.steps),
        "elapsed_seconds": f"{result.elapsed_seconds:.4f}",
    }


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Solve every date of a year and write the outcome and step count per date to CSV."
    )
    parser.add_argument(
        "--year",
        type=int,
        default=datetime.date.today().year,
        help="calendar year to solve (sets weekdays and leap day)",
    )
    parser.add_argument(
        "--start",
        default=None,
        help="first date YYYY-MM-DD (defaults to January 1st of --year)",
    )
    parser.add_argument(
        "--output",
        default=str(OUTPUT_DIR / "02_year_steps.csv"),
        help="output CSV path",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=0,
        help="number of worker processes (0 = cpu count, 1 = no multiprocessing)",
    )
    parser.add_argument(
        "--chunksize",
        type=int,
        default=4,
        help="task chunksize for multiprocessing",
    )
    parser.add_argument("--progress-every", type=int, default=25, help="progress interval")
    parser.add_argument(
        "--max-steps",
        type=int,
        default=0,
        help="give up on a date after N search steps (0 = no limit)",
    )
    parser.add_argument(
        "--prune-islands",
        action="store_true",
        help="skip states leaving a required cell no remaining piece can reach",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        max_steps: Optional[int] = args.max_steps if args.max_steps and args.max_steps > 0 else None

        start_date = (
            datetime.date.fromisoformat(args.start) if args.start else datetime.date(args.year, 1, 1)
        )
        leap_year = calendar.isleap(start_date.year)
        targets: List[TargetDate] = list(
            iter_target_dates(TargetDate.from_date(start_date), leap_year)
        )
        total = len(targets)

        ensure_output_dir()
        output_path = ensure_parent_dir(Path(args.output))

        worker_count = args.workers if args.workers >= 0 else 0
        if worker_count == 0:
            worker_count = os.cpu_count() or 1
        use_multiprocessing = worker_count > 1

        start_time = time.time()
        processed = 0
        counts: Dict[str, int] = {}
        hardest: Optional[Dict[str, str]] = None

        with open(output_path, "w", newline="") as output_file:
            writer = csv.DictWriter(output_file, fieldnames=FIELDNAMES)
            writer.writeheader()

            solver = partial(solve_row, max_steps=max_steps, prune_islands=args.prune_islands)
            if use_multiprocessing:
                executor: Optional[ProcessPoolExecutor] = ProcessPoolExecutor(max_workers=worker_count)
                rows = executor.map(solver, targets, chunksize=max(args.chunksize, 1))
            else:
                executor = None
                rows = map(solver, targets)

            try:
                for row in rows:
                    processed += 1
                    writer.writerow(row)
                    counts[row["outcome"]] = counts.get(row["outcome"], 0) + 1
                    if row["outcome"] == OUTCOME_SOLVED and (
                        hardest is None or int(row["steps"]) > int(hardest["steps"])
                    ):
                        hardest = row

                    if args.progress_every and processed % args.progress_every == 0:
                        elapsed = time.time() - start_time
                        rate = processed / elapsed if elapsed > 0 else 0.0
                        eta = (total - processed) / rate if rate else 0
                        LOGGER.info(
                            "[%s/%s] %.2f%% | %.2f dates/s | ETA %.1f min | solved %s / impossible %s",
                            f"{processed:,}",
                            f"{total:,}",
                            (processed / total) * 100 if total > 0 else 0.0,
                            rate,
                            eta / 60,
                            f"{counts.get(OUTCOME_SOLVED, 0):,}",
                            f"{counts.get(OUTCOME_IMPOSSIBLE, 0):,}",
                        )
            finally:
                if executor is not None:
                    executor.shutdown(wait=True, cancel_futures=True)

        elapsed = time.time() - start_time
        LOGGER.info("=== DONE ===")
        LOGGER.info("processed: %s", f"{processed:,}")
        LOGGER.info("solved: %s", f"{counts.get(OUTCOME_SOLVED, 0):,}")
        LOGGER.info("impossible: %s", f"{counts.get(OUTCOME_IMPOSSIBLE, 0):,}")
        LOGGER.info("cancelled: %s", f"{counts.get(OUTCOME_CANCELLED, 0):,}")
        if hardest is not None:
            LOGGER.info(
                "most steps: %s %s %s (%s steps)",
                hardest["weekday"],
                hardest["month"],
                hardest["day_of_month"],
                f"{int(hardest['steps']):,}",
            )
        LOGGER.info("time: %.1f min", elapsed / 60)
        LOGGER.info("wrote: %s", output_path)
    except Exception:
        LOGGER.exception("Failed to solve year")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
