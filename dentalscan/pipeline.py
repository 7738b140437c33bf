"""Scan pipeline: crawl many targets on a thread pool under a global deadline.

Results come back index-aligned with the input. A target whose crawl fails,
never starts, or is still running at the deadline still gets a Result
(ERROR or TIMEOUT band); nothing is dropped.
"""

import sys
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed, wait
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from typing import Callable, Sequence

from tqdm import tqdm

from dentalscan.config import ScanConfig
from dentalscan.crawler import crawl_target
from dentalscan.fetcher import Fetcher
from dentalscan.models import POSITIVE_BANDS, ConfidenceBand, Result, Target

SUMMARY_BANDS = (
    ConfidenceBand.HIGH,
    ConfidenceBand.MEDIUM,
    ConfidenceBand.LOW,
    ConfidenceBand.NONE,
    ConfidenceBand.ERROR,
    ConfidenceBand.TIMEOUT,
)


@dataclass(frozen=True)
class ProgressSnapshot:
    processed: int
    total: int
    elapsed_s: float

    @property
    def percent(self) -> float:
        return 100.0 * self.processed / self.total if self.total else 100.0

    @property
    def eta_s(self) -> float | None:
        """Remaining seconds at the average rate so far; None before the first target finishes."""
        if self.processed == 0:
            return None
        return self.elapsed_s / self.processed * (self.total - self.processed)


class ProgressCounter:
    """Processed-target counter shared by the pipeline and the progress reporter."""

    def __init__(self, total: int, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = threading.Lock()
        self._processed = 0
        self._total = total
        self._clock = clock
        self._started = clock()

    def increment(self) -> int:
        with self._lock:
            self._processed += 1
            return self._processed

    def snapshot(self) -> ProgressSnapshot:
        with self._lock:
            processed = self._processed
        return ProgressSnapshot(processed, self._total, self._clock() - self._started)


def _fmt_duration(seconds: float) -> str:
    seconds = int(seconds)
    return f"{seconds // 3600}h {seconds % 3600 // 60}m {seconds % 60}s"


def format_progress_report(snap: ProgressSnapshot) -> str:
    lines = [
        "=" * 60,
        f"Progress: {snap.processed}/{snap.total} ({snap.percent:.1f}%) after {_fmt_duration(snap.elapsed_s)}",
    ]
    if snap.eta_s is not None:
        rate = snap.processed / (snap.elapsed_s / 60) if snap.elapsed_s > 0 else 0.0
        lines.append(f"Estimated remaining: {_fmt_duration(snap.eta_s)} ({rate:.1f} sites/min)")
    lines.append("=" * 60)
    return "\n".join(lines)


def _print_report(snap: ProgressSnapshot) -> None:
    print("\n" + format_progress_report(snap), file=sys.stderr)


class ProgressReporter:
    """Emits counter snapshots every interval_s on a daemon thread until stopped."""

    def __init__(
        self,
        counter: ProgressCounter,
        interval_s: float,
        callback: Callable[[ProgressSnapshot], None] = _print_report,
    ) -> None:
        self._counter = counter
        self._interval = interval_s
        self._callback = callback
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="dentalscan-progress", daemon=True)

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self._callback(self._counter.snapshot())

    def start(self) -> "ProgressReporter":
        if self._interval > 0:
            self._thread.start()
        return self

    def stop(self) -> None:
        self._stop.set()
        if self._thread.is_alive():
            self._thread.join(timeout=1)


def default_fetcher_factory(config: ScanConfig) -> Callable[[], Fetcher]:
    return lambda: Fetcher(timeout=config.timeout_s, user_agent=config.user_agent)


def format_result_line(n: int, total: int, result: Result) -> str:
    prefix = f"[{n}/{total}] {result.name}"
    band = result.band
    if band in POSITIVE_BANDS:
        return f"{prefix} -> {band.value} (score {result.score})"
    if band in (ConfidenceBand.ERROR, ConfidenceBand.TIMEOUT):
        return f"{prefix} -> {band.value}: {result.error_message}"
    return f"{prefix} -> NONE"


def _close_quietly(fetcher) -> None:
    try:
        fetcher.close()
    except Exception:
        pass


def _collect(fut: Future, target: Target) -> Result:
    try:
        return fut.result()
    except Exception as e:
        return Result.error(target, f"{type(e).__name__}: {e}")


def scan_targets(
    targets: Sequence[Target],
    config: ScanConfig,
    *,
    fetcher_factory: Callable[[], object] | None = None,
    progress: bool = True,
    on_result: Callable[[int, Result], None] | None = None,
    report_callback: Callable[[ProgressSnapshot], None] | None = None,
) -> list[Result]:
    """
    Crawl every target with at most config.workers threads.

    Each worker thread builds one fetcher and reuses it for every target it
    runs. When config.deadline_s passes, running crawls are signalled to stop
    and given config.grace_s to hand back a TIMEOUT result; targets that never
    started or do not stop in time get a TIMEOUT result from here.
    """
    total = len(targets)
    if total == 0:
        return []
    make_fetcher = fetcher_factory or default_fetcher_factory(config)
    results: list[Result | None] = [None] * total
    cancel = threading.Event()
    counter = ProgressCounter(total)

    _thread_local = threading.local()
    _fetchers_to_close: list = []
    _fetchers_lock = threading.Lock()
    _busy: set[int] = set()

    def _get_thread_fetcher():
        f = getattr(_thread_local, "fetcher", None)
        if f is None:
            f = make_fetcher()
            with _fetchers_lock:
                _fetchers_to_close.append(f)
            _thread_local.fetcher = f
        return f

    def _scan_one(target: Target) -> Result:
        fetcher = _get_thread_fetcher()
        with _fetchers_lock:
            _busy.add(id(fetcher))
        try:
            return crawl_target(target, fetcher, config, cancel_event=cancel)
        finally:
            with _fetchers_lock:
                _busy.discard(id(fetcher))
                release = cancel.is_set()
                if release and fetcher in _fetchers_to_close:
                    _fetchers_to_close.remove(fetcher)
            if release:
                # Run is over; the main thread may already have returned
                _thread_local.fetcher = None
                _close_quietly(fetcher)

    workers = min(config.workers, total)
    print(f"  → Scanning {total} sites ({workers} workers, mode {config.mode})...", file=sys.stderr)
    pbar = tqdm(total=total, desc="Scan", unit=" site", file=sys.stderr, disable=not progress)
    reporter = ProgressReporter(counter, config.progress_interval_s, report_callback or _print_report).start()

    def _finish(index: int, result: Result) -> None:
        results[index] = result
        n = counter.increment()
        pbar.update(1)
        tqdm.write(format_result_line(n, total, result), file=sys.stderr)
        if on_result is not None:
            on_result(index, result)

    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dentalscan")
    try:
        futures = {executor.submit(_scan_one, t): i for i, t in enumerate(targets)}
        try:
            for fut in as_completed(futures, timeout=config.deadline_s):
                i = futures[fut]
                _finish(i, _collect(fut, targets[i]))
        except FuturesTimeoutError:
            pending = [f for f, i in futures.items() if results[i] is None]
            tqdm.write(
                f"  Deadline of {config.deadline_s:.0f}s reached; stopping {len(pending)} unfinished sites.",
                file=sys.stderr,
            )
            cancel.set()
            for f in pending:
                f.cancel()
            wait(pending, timeout=config.grace_s)
            for f in pending:
                i = futures[f]
                if f.done() and not f.cancelled():
                    _finish(i, _collect(f, targets[i]))
                else:
                    _finish(i, Result.timeout(targets[i]))
    finally:
        reporter.stop()
        pbar.close()
        cancel.set()
        executor.shutdown(wait=False, cancel_futures=True)
        # Fetchers still in use belong to workers past the deadline; they close their own
        with _fetchers_lock:
            idle = [f for f in _fetchers_to_close if id(f) not in _busy]
            _fetchers_to_close.clear()
        for f in idle:
            _close_quietly(f)

    return [r if r is not None else Result.timeout(t) for r, t in zip(results, targets)]


def summarize(results: Sequence[Result]) -> dict[str, int]:
    """Count of results per band, every band present."""
    counts = {band.value: 0 for band in SUMMARY_BANDS}
    for r in results:
        counts[r.band.value] = counts.get(r.band.value, 0) + 1
    return counts


def format_summary(results: Sequence[Result], elapsed_s: float, *, skipped: int = 0) -> str:
    counts = summarize(results)
    total = len(results)
    found = sum(counts[b.value] for b in POSITIVE_BANDS)
    pct = 100.0 * found / total if total else 0.0
    rate = total / (elapsed_s / 60) if elapsed_s > 0 else 0.0
    lines = [
        "═" * 60,
        f"Scan complete: {total} sites",
        f"Likely 3D scanner owners: {found} ({pct:.1f}%)",
        f"  - HIGH:   {counts['HIGH']}",
        f"  - MEDIUM: {counts['MEDIUM']}",
        f"  - LOW:    {counts['LOW']}",
        f"  - NONE:   {counts['NONE']}",
    ]
    if counts["ERROR"]:
        lines.append(f"  - ERROR:  {counts['ERROR']}")
    if counts["TIMEOUT"]:
        lines.append(f"  - TIMEOUT: {counts['TIMEOUT']}")
    if skipped:
        lines.append(f"  - SKIP:   {skipped}")
    lines.append(f"Elapsed: {_fmt_duration(elapsed_s)} ({rate:.1f} sites/min)")
    lines.append("═" * 60)
    return "\n".join(lines)
