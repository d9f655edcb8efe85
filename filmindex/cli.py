"""
============================================================================
FILMINDEX - Command Line Interface
============================================================================
Loads the five IMDb datasets into memory and runs one query.

🔧 USAGE:
    filmindex load
    filmindex same-director-writer [--limit N] [--export FILE]
    filmindex common-actors nm0000093 nm0000138
    filmindex best-by-genre Drama --export drama

    Common options:
        --data-dir DIR   Directory with the TSV files (default: IMDB_DIR)
        --no-progress    Hide progress bars
        --export FILE    Write results as JSON/CSV (EXPORT_FORMAT); relative
                         paths are placed under EXPORTS_DIR
        --limit N        Print at most N results (default: 20)

📝 EXIT STATUS:
    0  query ran (including "no matches")
    1  ingestion failed
============================================================================
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from filmindex.config import Config, config as default_config
from filmindex.errors import IngestionAborted
from filmindex.export import export_best_by_year, export_titles
from filmindex.loader import IngestionCoordinator, IngestionReport
from filmindex.logs import setup_logging
from filmindex.models import Title
from filmindex.queries import QueryEngine
from filmindex.resources import DirectoryResourceLocator
from filmindex.store import EntityStore


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='filmindex',
        description='Load IMDb datasets into memory and run analytical queries',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('--data-dir', type=Path, help='Directory holding the IMDb TSV files')
    parser.add_argument('--no-progress', action='store_true', help='Hide progress bars')

    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('load', help='Load all datasets and print a summary')

    same = sub.add_parser('same-director-writer',
                          help='Titles directed and written by the same living person')
    actors = sub.add_parser('common-actors', help='Titles in which two people both appear')
    actors.add_argument('actor1', help='First nconst (e.g., nm0000093)')
    actors.add_argument('actor2', help='Second nconst')
    genre = sub.add_parser('best-by-genre', help='Most voted title per year for a genre')
    genre.add_argument('genre', help='Genre tag (e.g., Drama)')

    for query in (same, actors, genre):
        query.add_argument('--limit', type=int, default=20, help='Print at most N results (default: 20)')
        query.add_argument('--export', type=Path, help='Write results to this file (relative to EXPORTS_DIR)')

    return parser


def load_store(settings: Config, data_dir: Optional[Path] = None) -> Tuple[EntityStore, IngestionReport]:
    """Run the full ingestion; raises IngestionAborted on failure."""
    store = EntityStore()
    resources = DirectoryResourceLocator(data_dir or settings.paths.imdb_dir)
    report = IngestionCoordinator(store, resources, settings.loading).run()
    return store, report


# ============================================================================
# OUTPUT
# ============================================================================

def print_report(report: IngestionReport):
    print("\n" + "="*70)
    print("📊 LOADING SUMMARY")
    print("="*70)
    for stats in report.datasets.values():
        print(f"   • {stats.filename}: {stats.loaded:,} loaded, "
              f"{stats.skipped:,} skipped, {stats.dropped:,} dropped ({stats.elapsed:.1f}s)")
    print(f"\n📈 Entities in memory:")
    for name, count in report.counts.items():
        print(f"   • {name}: {count:,}")
    print(f"\n⏱️  Total time: {report.elapsed:.1f} seconds")


def format_title(title: Title) -> str:
    year = title.start_year if title.start_year else '????'
    line = f"{title.tconst}  {title.primary_title} ({year})"
    if title.average_rating is not None and title.num_votes is not None:
        line += f"  {title.average_rating:.1f}/10 ({title.num_votes:,} votes)"
    return line


def print_titles(titles: List[Title], limit: int):
    if not titles:
        print("\n🔍 No matching titles.")
        return
    print(f"\n🎬 {len(titles):,} matching title(s):")
    for title in titles[:limit]:
        print(f"   - {format_title(title)}")
    if len(titles) > limit:
        print(f"   ... and {len(titles) - limit:,} more")


def print_best_by_year(best: Dict[int, Title], limit: int):
    if not best:
        print("\n🔍 No matching titles.")
        return
    print(f"\n🏆 Best title for {len(best):,} year(s):")
    for year, title in list(best.items())[:limit]:
        print(f"   {year}: {format_title(title)}")
    if len(best) > limit:
        print(f"   ... and {len(best) - limit:,} more years")


# ============================================================================
# ENTRY POINT
# ============================================================================

def main(argv: Optional[Sequence[str]] = None, settings: Optional[Config] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = settings or default_config
    if args.no_progress:
        settings = settings.model_copy(
            update={'loading': settings.loading.model_copy(update={'show_progress': False})}
        )
    setup_logging(settings.logging)

    print("\n" + "="*70)
    print(f"🎬 {settings.project_name.upper()} - IMDb In-Memory Index")
    print("="*70)
    print(f"📅 Started: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"📂 Data: {(args.data_dir or settings.paths.imdb_dir)}")

    try:
        store, report = load_store(settings, args.data_dir)
    except IngestionAborted as e:
        print(f"\n❌ Loading failed: {e}")
        logger.error("Ingestion aborted: %s", e)
        return 1

    print_report(report)
    if args.command == 'load':
        return 0

    engine = QueryEngine(store)
    export_format = settings.processing.export_format
    exports_dir = settings.paths.exports_dir

    if args.command == 'best-by-genre':
        best = engine.best_titles_by_genre(args.genre)
        print_best_by_year(best, args.limit)
        if args.export:
            path = export_best_by_year(best, args.export, export_format, exports_dir)
            print(f"\n💾 Exported to {path}")
        return 0

    if args.command == 'common-actors':
        titles = engine.titles_by_two_actors(args.actor1, args.actor2)
    else:
        titles = engine.titles_by_same_director_writer_alive()

    print_titles(titles, args.limit)
    if args.export:
        path = export_titles(titles, args.export, export_format, exports_dir)
        print(f"\n💾 Exported to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
