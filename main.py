"""
Dyeing Operations Dashboard: end-to-end analytics pipeline.

Loads records (from the configured store, or synthetic data when no store URL
is set), builds every dashboard payload and prints smoke-test summaries.

Usage:
    python main.py [--month 3] [--year 2026] [--export-dir out/]
"""

import argparse
import logging
from pathlib import Path

import pandas as pd

from dyeing_dashboard.authorization import AllowAll
from dyeing_dashboard.config import BRANDS, STORE_URL
from dyeing_dashboard.dashboard import (
    get_dyeing_programs,
    get_operations_overview,
    get_production_table,
    get_rft_overview,
    get_shift_performance,
    monthly_report,
)
from dyeing_dashboard.exports import (
    production_csv,
    production_filename,
    read_production_csv,
    rft_csv,
    rft_filename,
    shift_csv,
    shift_filename,
    write_shift_xlsx,
)
from dyeing_dashboard.loaders.store import FirebaseRestStore, InMemoryStore
from dyeing_dashboard.repository import DashboardRepository
from dyeing_dashboard.rft import shift_key
from dyeing_dashboard.simulator import (
    generate_dyeing_programs,
    generate_production_records,
    generate_rft_records,
)
from dyeing_dashboard.windows import filter_month

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def _synthetic_repository() -> DashboardRepository:
    repo = DashboardRepository(InMemoryStore(), AllowAll())
    for record in generate_production_records("2026-01-01", 90):
        repo.save_production(record, None)
    for record in generate_rft_records("2026-01-01", 90):
        repo.save_rft(record, None)
    for record in generate_dyeing_programs("2026-01-01", 90):
        repo.save_program(record, None)
    return repo


def main() -> None:
    """Run the full analytics pipeline and print smoke-test outputs."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--month", type=int, default=3)
    parser.add_argument("--year", type=int, default=2026)
    parser.add_argument("--export-dir", type=Path, default=None)
    args = parser.parse_args()
    month, year = args.month, args.year

    print("=" * 70)
    print("  DYEING OPERATIONS DASHBOARD")
    print("  Analytics Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Load records
    # ------------------------------------------------------------------
    print("[ 1 ] LOADING RECORDS")
    print("-" * 40)

    if STORE_URL:
        repo = DashboardRepository(FirebaseRestStore(), AllowAll())
        print(f"\nSource: {STORE_URL}")
    else:
        repo = _synthetic_repository()
        print("\nSource: synthetic data (DASHBOARD_STORE_URL not set)")

    production = repo.load("production")
    rft = repo.load("rft")
    programs = repo.load("dyeing_program")
    supervisors = repo.supervisors()
    print(f"Production records: {len(production)}")
    print(f"RFT records:        {len(rft)}")
    print(f"Dyeing programs:    {len(programs)}")
    print(f"Supervisors:        {', '.join(supervisors)}")

    # ------------------------------------------------------------------
    # 2. Dashboard outputs
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] DASHBOARD OUTPUTS")
    print("-" * 40)

    overview = get_operations_overview(production, month, year)
    if overview is not None:
        print(f"\nOverview: latest {overview['latest']['date']}")
        for brand, stats in overview["brand_stats"].items():
            print(f"  {brand:10s} | today {stats['today']:>10,.0f} | month {stats['month']:>12,.0f} "
                  f"| avg/day {stats['avg_day']:>10,.1f}")
        print(f"  Growth (weight): {overview['growth_weight']:.2f}%")
        print(f"  Target progress: {overview['target']['progress_pct']:.1f}% "
              f"(shortfall {overview['target']['shortfall']:,.0f} kg)")
        print(f"\n{overview['chart_label']}:")
        print(pd.DataFrame(overview["portfolio"]).head(10).to_string(index=False))

    table = get_production_table(production, "history", month, year)
    print(f"\nProduction table: {len(table['rows'])} rows, "
          f"combined {table['totals']['combined_total']:,.0f} kg")

    rft_view = get_rft_overview(rft, month, year, reference=pd.Timestamp(year=year, month=month, day=1))
    if rft_view["stats"] is not None:
        month_stats = rft_view["stats"]["thisMonth"]
        print(f"\nRFT this month: bulk {month_stats['bulk']:.2f}% | lab {month_stats['lab']:.2f}% "
              f"| {month_stats['batches']} batches over {month_stats['days']} days")

    shifts = get_shift_performance(rft, month, year, supervisors)
    print("\nShift performance:")
    for supervisor in supervisors:
        key = shift_key(supervisor)
        totals = shifts["totals"][key]
        print(f"  {supervisor:10s} | actual {totals['actual']:>12,.1f} | day count {totals['day_count']:>5.2f} "
              f"| eff {shifts['avg_monthly_eff'][key]:6.2f}% | Fridays {totals['friday_count']}")

    for brand in BRANDS:
        registry = get_dyeing_programs(programs, brand, month, year)
        print(f"\nDyeing programs ({brand}): {registry['summary']}")

    report = monthly_report(production, rft, month, year, supervisors)
    if report is not None:
        print(f"\n{report['title']}")
        for section in report["sections"]:
            print(f"  - {section['title']} ({section['orientation']})")

    # ------------------------------------------------------------------
    # 3. Exports and acceptance checks
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] EXPORT CHECKS")
    print("-" * 40)

    month_production = filter_month(production, month, year)
    history_csv = production_csv(month_production, "history")
    reparsed = read_production_csv(history_csv)
    check1 = abs(reparsed["Daily Total"].sum() - table["totals"]["combined_total"]) < 1e-6
    print(f"\n  [{'PASS' if check1 else 'FAIL'}] History CSV daily totals match table totals")

    check2 = len(shifts["rows"]) == shifts["days_in_month"]
    print(f"  [{'PASS' if check2 else 'FAIL'}] Shift register has one row per calendar day")

    if args.export_dir is not None:
        args.export_dir.mkdir(parents=True, exist_ok=True)
        outputs = {
            production_filename("history", month, year): history_csv,
            rft_filename("thisMonth"): rft_csv(filter_month(rft, month, year)),
            shift_filename(month, year): shift_csv(shifts, supervisors),
        }
        for name, content in outputs.items():
            (args.export_dir / name).write_text(content, encoding="utf-8")
            print(f"  wrote {args.export_dir / name}")
        xlsx_path = args.export_dir / shift_filename(month, year, "xlsx")
        write_shift_xlsx(shifts, xlsx_path, supervisors)
        print(f"  wrote {xlsx_path}")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
