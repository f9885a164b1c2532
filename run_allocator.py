"""
Main Execution Script for the Initiative Staffing Allocator.

Loads a snapshot (exported JSON, or the built-in sample), previews the
auto-allocation for one initiative, optionally applies it and rolls an
overrun forward, then prints a report and exports the resulting snapshot.
"""

import argparse
import json
import logging
import sys
from datetime import date
from typing import List, Optional
from pydantic import ValidationError

from allocator import AllocationError, AllocationService, AllocationSnapshot, AllocatorSettings, summarize
from generators.sample_data import build_sample_snapshot

logger = logging.getLogger("Main")

# --- CONFIGURATION ---
SNAPSHOT_FILENAME = "snapshot.json"
EXPORT_FILENAME = "snapshot_out.json"
# ---------------------


def load_snapshot(filename: str) -> Optional[AllocationSnapshot]:
    """Load an exported snapshot. Returns None when the file is missing or unreadable."""
    try:
        with open(filename, 'r') as f:
            data = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as exc:
        logger.warning("Snapshot %s not usable (%s). Falling back to sample data.", filename, exc)
        return None

    snapshot = AllocationSnapshot.from_dict(data)
    logger.info("Loaded %s: %d people, %d initiatives, %d cells",
                filename, len(snapshot.people), len(snapshot.initiatives), len(snapshot.cells))
    return snapshot


def save_snapshot(snapshot: AllocationSnapshot, filename: str) -> None:
    with open(filename, 'w') as f:
        json.dump(snapshot.to_dict(), f, indent=2)
    logger.info("Saved snapshot to %s", filename)


def print_report(service: AllocationService, initiative_id: int, person_ids: Optional[List[int]]) -> None:
    plan = service.plan(initiative_id, person_ids)
    stats = plan.get_statistics()

    print("\n" + "=" * 50)
    print(f"PREVIEW: {plan.initiative.name}")
    print("=" * 50)
    print(f"Rows: {stats['total_rows']}   Hours: {stats['total_hours']}   People: {stats['people']}")

    print("\nPlanned vs preview per role")
    for row in plan.coverage(service.snapshot.demand_for(initiative_id)):
        if row.planned_hours == 0 and row.previewed_hours == 0:
            continue
        mark = "ok" if row.met else "--"
        print(f"  [{mark}] {row.role:<10} planned {row.planned_hours:>6.1f}h   preview {row.previewed_hours:>6.1f}h")

    gaps = plan.get_gap_report()
    if gaps:
        print("\nUnmet demand")
        for gap in gaps:
            print(f"  {gap['role']:<10} short {gap['shortfall']:.1f}h ({gap['reason']}: {gap['detail']})")

    if plan.warnings:
        print(f"\nOver capacity on {len(plan.warnings)} person-days")
        for w in sorted(plan.warnings.values(), key=lambda w: (w.date, w.person_id))[:10]:
            name = service.snapshot.people[w.person_id].full_name
            print(f"  {w.date} {name}: {w.committed_hours:.1f}h (cap {w.capacity:.1f}h)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Preview and apply initiative auto-allocation")
    parser.add_argument("--snapshot", default=SNAPSHOT_FILENAME)
    parser.add_argument("--export", default=EXPORT_FILENAME)
    parser.add_argument("--initiative", type=int, default=1)
    parser.add_argument("--people", type=int, nargs="*", help="Explicit eligible people (default: team)")
    parser.add_argument("--apply", action="store_true", help="Commit the preview")
    parser.add_argument("--overwrite", action="store_true", help="Replace existing hours when applying")
    parser.add_argument("--log-actual", nargs=3, metavar=("PERSON", "DAY", "HOURS"),
                        help="Log actual hours and roll the overrun forward")
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    # --- PHASE 1: DATA ACQUISITION (Export vs. Sample) ---
    try:
        snapshot = load_snapshot(args.snapshot) or build_sample_snapshot()
    except (ValidationError, AllocationError) as exc:
        logger.error("Snapshot %s is malformed: %s", args.snapshot, exc)
        return 1
    service = AllocationService(snapshot, AllocatorSettings.from_env())

    try:
        # --- PHASE 2: PREVIEW ---
        print_report(service, args.initiative, args.people)

        # --- PHASE 3: APPLY ---
        if args.apply:
            results = service.apply(args.initiative, args.people, overwrite=args.overwrite)
            counts = summarize(results)
            print(f"\nApplied {len(results)} rows - inserted {counts['inserted']}, "
                  f"updated {counts['updated']}, skipped {counts['skipped']}.")

        # --- PHASE 4: ROLL FORWARD ---
        if args.log_actual:
            try:
                person_id, day, hours = int(args.log_actual[0]), date.fromisoformat(args.log_actual[1]), float(args.log_actual[2])
            except ValueError as exc:
                logger.error("Bad --log-actual value: %s", exc)
                return 1
            rows = service.adjust(args.initiative, person_id, day, hours)
            print(f"\nRoll-forward reduced {sum(r.reduced for r in rows):.1f}h across {len(rows)} days")
            for r in rows:
                print(f"  {r.date}: {r.before_hours:.1f}h -> {r.after_hours:.1f}h")
    except AllocationError as exc:
        logger.error("Allocation failed: %s", exc)
        return 1

    # --- PHASE 5: EXPORT ---
    save_snapshot(snapshot, args.export)
    return 0


if __name__ == "__main__":
    sys.exit(main())
