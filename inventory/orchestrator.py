"""
Concurrent multi-region collection.

Every (collector, region) pair is dispatched as an independent work item on a
bounded thread pool. A failing pair is recorded against that pair only; only
cancellation of the run stops the remaining work early. Results are regrouped
by region-dispatch order before each collector's sort policy is applied, so
the output does not depend on completion order.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed, wait
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from tqdm import tqdm

from .base_collector import BaseCollector
from .constants import DEFAULT_WORKERS, ERROR_MESSAGES
from .context import PairWarning, RunContext
from .exceptions import CollectionCancelled, CollectionError
from .logging_utils import CollectionLogger
from .registry import Registry
from .resource import Resource, sort_resources

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PairError:
    """A pair-fatal error recorded for one (collector, region) work item."""

    collector: str
    region: str
    error: BaseException

    @property
    def cancelled(self) -> bool:
        return isinstance(self.error, CollectionCancelled)

    def __str__(self) -> str:
        return f"{self.collector} [{self.region}]: {self.error}"


@dataclass
class PairOutcome:
    collector: str
    region: str
    resources: List[Resource] = field(default_factory=list)
    error: Optional[BaseException] = None
    warnings: List[PairWarning] = field(default_factory=list)


@dataclass
class CollectorResult:
    """Merged output of one collector across all regions."""

    name: str
    resources: List[Resource] = field(default_factory=list)
    errors: List[PairError] = field(default_factory=list)
    warnings: List[PairWarning] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class RunResult:
    """Per-collector results of one run, in selection order."""

    results: Dict[str, CollectorResult] = field(default_factory=dict)
    cancelled: bool = False

    @property
    def errors(self) -> List[PairError]:
        return [error for result in self.results.values() for error in result.errors]

    @property
    def warnings(self) -> List[PairWarning]:
        return [warning for result in self.results.values() for warning in result.warnings]

    @property
    def resource_count(self) -> int:
        return sum(len(result.resources) for result in self.results.values())

    def failure_summary(self) -> List[str]:
        """One line per failed pair followed by one line per recorded warning."""
        lines = [f"ERROR {error}" for error in self.errors]
        lines.extend(f"WARNING {warning}" for warning in self.warnings)
        return lines

    def raise_for_errors(self) -> None:
        errors = self.errors
        if errors:
            raise CollectionError({(e.collector, e.region): e.error for e in errors})


class Orchestrator:
    """Drives a registry of collectors across regions on a bounded worker pool."""

    def __init__(
        self,
        registry: Registry,
        regions: Iterable[str],
        max_workers: int = DEFAULT_WORKERS,
        show_progress: bool = False,
    ):
        """
        Initialize the orchestrator.

        Args:
            registry: Collectors available for this run
            regions: Regions in dispatch order (duplicates are dropped)
            max_workers: Maximum number of work items in flight
            show_progress: Display a tqdm progress bar
        """
        if max_workers < 1:
            raise ValueError(ERROR_MESSAGES["invalid_workers"].format(workers=max_workers))
        self.registry = registry
        self.regions = list(dict.fromkeys(r for r in regions if r))
        self.max_workers = max_workers
        self.show_progress = show_progress

    def run(self, ctx: RunContext, names: Optional[Iterable[str]] = None) -> RunResult:
        """
        Collect every selected collector in every region.

        Args:
            ctx: Run context carrying the cancellation signal
            names: Collector names to run; None runs all registered collectors

        Returns:
            RunResult with merged resources, pair errors and warnings
        """
        collectors = self.registry.select(names)
        work = [
            (name, collector, region)
            for name, collector in collectors.items()
            for region in self.regions
        ]

        logger.info(
            "Starting collection of %d collectors across %d regions (%d work items)",
            len(collectors),
            len(self.regions),
            len(work),
        )

        outcomes: Dict[Tuple[str, str], PairOutcome] = {}
        if work:
            self._dispatch(ctx, work, outcomes)

        results = {
            name: self._merge(name, collector, outcomes)
            for name, collector in collectors.items()
        }
        cancelled = any(
            isinstance(outcome.error, CollectionCancelled) for outcome in outcomes.values()
        )
        run_result = RunResult(results=results, cancelled=cancelled)

        logger.info(
            "Collection complete. Found %d resources, %d failed work items",
            run_result.resource_count,
            len(run_result.errors),
        )
        return run_result

    def _dispatch(
        self,
        ctx: RunContext,
        work: List[Tuple[str, BaseCollector, str]],
        outcomes: Dict[Tuple[str, str], PairOutcome],
    ) -> None:
        executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="collector"
        )
        future_to_pair: Dict[Future, Tuple[str, str]] = {}
        try:
            for name, collector, region in work:
                future = executor.submit(self._run_pair, ctx, name, collector, region)
                future_to_pair[future] = (name, region)

            with tqdm(
                total=len(work), desc="Collected", unit="pair", disable=not self.show_progress
            ) as pbar:
                try:
                    for future in as_completed(future_to_pair):
                        name, region = future_to_pair[future]
                        outcomes[(name, region)] = self._outcome(ctx, future, name, region)
                        pbar.update(1)
                        if ctx.cancelled:
                            self._cancel_pending(future_to_pair)
                except KeyboardInterrupt:
                    logger.warning("Interrupted, cancelling remaining work items")
                    ctx.cancel("interrupted")
                    self._cancel_pending(future_to_pair)
                    wait(future_to_pair)
                    for future, (name, region) in future_to_pair.items():
                        if (name, region) not in outcomes:
                            outcomes[(name, region)] = self._outcome(ctx, future, name, region)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    @staticmethod
    def _cancel_pending(future_to_pair: Dict[Future, Tuple[str, str]]) -> None:
        for future in future_to_pair:
            future.cancel()

    @staticmethod
    def _outcome(ctx: RunContext, future: Future, name: str, region: str) -> PairOutcome:
        if future.cancelled():
            reason = ctx.reason or "cancelled"
            error = CollectionCancelled(ERROR_MESSAGES["run_cancelled"].format(reason=reason))
            return PairOutcome(name, region, error=error)
        return future.result()

    @staticmethod
    def _run_pair(
        ctx: RunContext, name: str, collector: BaseCollector, region: str
    ) -> PairOutcome:
        pair_ctx = ctx.for_pair(name, region)
        collection_logger = CollectionLogger(logger, name, region)
        try:
            with collection_logger:
                pair_ctx.check()
                resources = list(collector.collect(pair_ctx, region) or [])
                collection_logger.log_collection_result(len(resources), len(pair_ctx.warnings))
        except Exception as e:
            return PairOutcome(name, region, error=e, warnings=pair_ctx.warnings)
        return PairOutcome(name, region, resources=resources, warnings=pair_ctx.warnings)

    def _merge(
        self,
        name: str,
        collector: BaseCollector,
        outcomes: Dict[Tuple[str, str], PairOutcome],
    ) -> CollectorResult:
        result = CollectorResult(name)
        for region in self.regions:
            outcome = outcomes.get((name, region))
            if outcome is None:
                continue
            result.warnings.extend(outcome.warnings)
            if outcome.error is not None:
                result.errors.append(PairError(name, region, outcome.error))
                continue
            result.resources.extend(outcome.resources)

        if collector.should_sort():
            result.resources = sort_resources(result.resources)
        return result
