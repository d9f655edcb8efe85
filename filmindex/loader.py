r"""
============================================================================
FILMINDEX - Ingestion Coordinator
============================================================================
Loads the five IMDb datasets into an EntityStore, in dependency order.

🎯 PHASES:
    A. title.basics.tsv alone, awaited before anything else starts.
       It creates every Title; later datasets only enrich existing ones.
    B. name.basics.tsv, title.crew.tsv, title.principals.tsv and
       title.ratings.tsv in parallel (fan-out), all awaited (fan-in).

🔧 FAILURE POLICY:
    - Bad row (MalformedRecord / FieldDecodeError): logged, skipped, file continues
    - Row for an unknown tconst: dropped, never creates a Title
    - Missing dataset or I/O error: fatal for that dataset
        • Phase A failure aborts immediately
        • Phase B failures are collected; the other loads still finish,
          then one IngestionAborted is raised, chained to the first cause
    - Phase timeout: running loads are asked to stop, given the shutdown
      grace period, and the ingestion is reported as failed

📝 OUTPUT:
    IngestionReport with per-dataset row counts; the store is frozen only
    when every dataset loaded.
============================================================================
"""

import csv
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed, wait
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from tqdm import tqdm

from filmindex.config import LoadingConfig
from filmindex.errors import IngestionAborted, RecordError
from filmindex.models import CrewRecord, Person, PrincipalRecord, RatingRecord, Title
from filmindex.parsing import (
    iter_rows, parse_person, parse_title_basic, parse_title_crew,
    parse_title_principal, parse_title_rating,
)
from filmindex.resources import ResourceLocator
from filmindex.store import EntityStore


logger = logging.getLogger(__name__)

# Rows between two progress bar refreshes
PROGRESS_STEP = 10000


# ============================================================================
# DATASET DEFINITIONS
# ============================================================================
# Each dataset: source file, row parser, and how a parsed record is applied.
# An apply function returns False when the record was dropped.

def apply_person(store: EntityStore, person: Person) -> bool:
    store.put_person(person)
    return True


def apply_title_basic(store: EntityStore, title: Title) -> bool:
    store.put_title_basic(title)
    return True


def apply_title_crew(store: EntityStore, crew: CrewRecord) -> bool:
    return store.set_title_crew(crew.tconst, crew.directors, crew.writers)


def apply_title_principal(store: EntityStore, principal: PrincipalRecord) -> bool:
    return store.add_title_cast(principal.tconst, principal.nconst)


def apply_title_rating(store: EntityStore, rating: RatingRecord) -> bool:
    return store.set_title_rating(rating.tconst, rating.average_rating, rating.num_votes)


@dataclass(frozen=True)
class Dataset:
    name: str
    filename: str
    parse: Callable[[Sequence[str], int], Any]
    apply: Callable[[EntityStore, Any], bool]


DATASETS: Dict[str, Dataset] = {
    'title_basics': Dataset('title_basics', 'title.basics.tsv', parse_title_basic, apply_title_basic),
    'name_basics': Dataset('name_basics', 'name.basics.tsv', parse_person, apply_person),
    'title_crew': Dataset('title_crew', 'title.crew.tsv', parse_title_crew, apply_title_crew),
    'title_principals': Dataset('title_principals', 'title.principals.tsv', parse_title_principal, apply_title_principal),
    'title_ratings': Dataset('title_ratings', 'title.ratings.tsv', parse_title_rating, apply_title_rating),
}

PHASE_A: Tuple[str, ...] = ('title_basics',)
PHASE_B: Tuple[str, ...] = ('name_basics', 'title_crew', 'title_principals', 'title_ratings')


# ============================================================================
# REPORTING
# ============================================================================

@dataclass
class DatasetStats:
    """Row accounting for one dataset load."""
    dataset: str
    filename: str
    rows: int = 0
    loaded: int = 0
    skipped: int = 0
    dropped: int = 0
    elapsed: float = 0.0


@dataclass
class IngestionReport:
    datasets: Dict[str, DatasetStats] = field(default_factory=dict)
    counts: Dict[str, int] = field(default_factory=dict)
    elapsed: float = 0.0

    @property
    def skipped(self) -> int:
        return sum(stats.skipped for stats in self.datasets.values())


class LoadCancelled(IngestionAborted):
    """A running load stopped because the ingestion was cancelled."""


# ============================================================================
# COORDINATOR
# ============================================================================

class IngestionCoordinator:
    """
    Runs Phase A then Phase B against one store.

    🔧 USAGE:
        store = EntityStore()
        report = IngestionCoordinator(store, DirectoryResourceLocator(dir)).run()
        engine = QueryEngine(store)
    """

    def __init__(self, store: EntityStore, resources: ResourceLocator,
                 settings: Optional[LoadingConfig] = None):
        self.store = store
        self.resources = resources
        self.settings = settings or LoadingConfig()
        self._cancelled = threading.Event()

    def cancel(self):
        """Ask running loads to stop at their next row; run() resets this."""
        self._cancelled.set()

    # ------------------------------------------------------------------
    # Single dataset
    # ------------------------------------------------------------------

    def load_dataset(self, name: str, position: int = 0) -> DatasetStats:
        """
        Stream one dataset into the store.

        Raises:
            ResourceNotFound: the dataset file is missing
            LoadCancelled: cancel() was called while loading
        """
        dataset = DATASETS[name]
        stats = DatasetStats(dataset=name, filename=dataset.filename)
        start = time.time()
        logger.info("Loading %s (%s)...", name, dataset.filename)

        with self.resources.open(dataset.filename) as stream, tqdm(
            desc=f"   {name}",
            unit=" rows",
            position=position,
            disable=not self.settings.show_progress,
            leave=False,
        ) as pbar:
            def skip(error: RecordError):
                stats.rows += 1
                stats.skipped += 1
                logger.warning("Skipping line %d in %s: %s. Full line: %s",
                               error.line_number, dataset.filename, error, error.raw_line)

            for line_number, row in iter_rows(stream, on_error=skip):
                if self._cancelled.is_set():
                    raise LoadCancelled(f"Loading {name} cancelled at line {line_number}")

                try:
                    record = dataset.parse(row, line_number)
                except RecordError as e:
                    skip(e)
                    continue

                stats.rows += 1
                if dataset.apply(self.store, record):
                    stats.loaded += 1
                else:
                    stats.dropped += 1
                    logger.debug("Dropped line %d in %s: unknown title %s",
                                 line_number, dataset.filename, row[0])

                if stats.rows % PROGRESS_STEP == 0:
                    pbar.update(PROGRESS_STEP)
            pbar.update(stats.rows - pbar.n)

        stats.elapsed = time.time() - start
        logger.info("Loaded %s: %s records, %s skipped, %s dropped in %.1fs",
                    name, f"{stats.loaded:,}", f"{stats.skipped:,}", f"{stats.dropped:,}", stats.elapsed)
        return stats

    # ------------------------------------------------------------------
    # Full ingestion
    # ------------------------------------------------------------------

    def run(self) -> IngestionReport:
        """
        Load every dataset and freeze the store.

        Raises:
            IngestionAborted: any dataset failed; the store stays unfrozen
        """
        start = time.time()
        report = IngestionReport()
        self._cancelled.clear()
        csv.field_size_limit(self.settings.field_size_limit)
        logger.info("Starting data loading from %s with %d workers...",
                    self.resources.describe(), self.settings.max_workers)

        executor = ThreadPoolExecutor(
            max_workers=self.settings.max_workers,
            thread_name_prefix='filmindex-loader',
        )
        futures: List[Future] = []
        try:
            report.datasets.update(self._run_phase_a(executor, futures))
            logger.info("Finished loading basic titles. Proceeding with dependent datasets...")
            report.datasets.update(self._run_phase_b(executor, futures))
        finally:
            self._shutdown(executor, futures)

        self.store.freeze()
        report.counts = self.store.counts()
        report.elapsed = time.time() - start
        logger.info("Data loading complete in %.1fs. Persons: %s, Titles: %s",
                    report.elapsed, f"{report.counts['persons']:,}", f"{report.counts['titles']:,}")
        return report

    def _run_phase_a(self, executor: ThreadPoolExecutor, futures: List[Future]) -> Dict[str, DatasetStats]:
        results = {}
        for position, name in enumerate(PHASE_A):
            future = executor.submit(self.load_dataset, name, position)
            futures.append(future)
            try:
                results[name] = future.result(timeout=self.settings.load_timeout_seconds)
            except FuturesTimeout as e:
                self.cancel()
                logger.error("Timed out loading %s", name)
                raise IngestionAborted(f"Timed out loading {name}", {name: e}) from e
            except Exception as e:
                logger.error("Failed to load %s: %s", name, e, exc_info=e)
                raise IngestionAborted(f"Failed to load {name}: {e}", {name: e}) from e
        return results

    def _run_phase_b(self, executor: ThreadPoolExecutor, futures: List[Future]) -> Dict[str, DatasetStats]:
        pending = {}
        for position, name in enumerate(PHASE_B, start=len(PHASE_A)):
            future = executor.submit(self.load_dataset, name, position)
            pending[future] = name
            futures.append(future)

        results = {}
        failures: Dict[str, BaseException] = {}
        try:
            # Completion order, so the first failure recorded is the first real cause
            for future in as_completed(pending, timeout=self.settings.load_timeout_seconds):
                name = pending[future]
                error = future.exception()
                if error is None:
                    results[name] = future.result()
                else:
                    logger.error("Failed to load %s: %s", name, error, exc_info=error)
                    failures[name] = error
        except FuturesTimeout as e:
            self.cancel()
            for future, name in pending.items():
                if not future.done():
                    logger.error("Timed out loading %s", name)
                    failures[name] = e

        if failures:
            first_error = next(iter(failures.values()))
            raise IngestionAborted(
                f"Failed to load {', '.join(failures)}: {first_error}", failures
            ) from first_error
        return results

    def _shutdown(self, executor: ThreadPoolExecutor, futures: List[Future]):
        """Close submission, then give in-flight loads the grace period."""
        executor.shutdown(wait=False, cancel_futures=True)
        running = [future for future in futures if not future.done()]
        if not running:
            return

        self.cancel()
        _, still_running = wait(running, timeout=self.settings.shutdown_grace_seconds)
        if still_running:
            logger.warning("%d loader task(s) did not stop within %.0fs",
                           len(still_running), self.settings.shutdown_grace_seconds)
