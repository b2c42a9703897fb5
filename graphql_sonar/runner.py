"""Sequential operation runner with pass/fail tracking and latency statistics."""
import asyncio
import inspect
import json
import logging
import sys
import time
import traceback
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

from rich.console import Console
from rich.text import Text

from .client import SonarResult
from .errors import AssertionFailure, SonarError
from .stats import NoDataError, mean, median, quantile, round2

logger = logging.getLogger(__name__)

UNKNOWN_OPERATION = "unknown"

Operation = Callable[[], Union[SonarResult, Awaitable[SonarResult]]]


@dataclass(frozen=True)
class AssertedResult:
    data: Any
    extensions: Optional[Dict[str, Any]] = None


def assert_no_errors(result: SonarResult) -> AssertedResult:
    """
    Assert that a GraphQL response has no errors and contains data.

    Args:
        result: Sonar result to check

    Returns:
        AssertedResult with the response data and extensions

    Raises:
        AssertionFailure: If the response has errors or no data
    """
    response = result.graphql if isinstance(result.graphql, dict) else {}

    if response.get("errors"):
        raise AssertionFailure(
            "Expected response not to contain any errors", result.operation
        )

    if response.get("data") is None:
        raise AssertionFailure("Expected data to be defined", result.operation)

    return AssertedResult(data=response["data"], extensions=response.get("extensions"))


@dataclass(frozen=True)
class Pass:
    result: SonarResult
    duration: float


@dataclass(frozen=True)
class Fail:
    error: Any
    duration: float


Outcome = Union[Pass, Fail]


def format_operation_response(
    passed: bool, name: str, duration: float, error: Optional[str] = None
) -> str:
    line = f"{'✅' if passed else '❌'} {name} ({duration}ms)"
    if error:
        line += f": {error}"
    return line


Clock = Callable[[], float]


def _elapsed_ms(start: float, clock: Clock) -> float:
    return round2(max(clock() - start, 0.0) * 1000)


async def with_timer(operation: Operation, clock: Clock = time.monotonic) -> Outcome:
    """Run one operation, assert its result and time it."""
    start = clock()
    try:
        result = operation()
        if inspect.isawaitable(result):
            result = await result
        if not isinstance(result, SonarResult):
            return Fail(error=result, duration=_elapsed_ms(start, clock))
        assert_no_errors(result)
    except Exception as e:
        return Fail(error=e, duration=_elapsed_ms(start, clock))

    return Pass(result=result, duration=_elapsed_ms(start, clock))


def describe_failure(error: Any) -> Optional[str]:
    if isinstance(error, BaseException):
        return "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        ).rstrip()
    try:
        return json.dumps(error)
    except (TypeError, ValueError):
        return str(error)


@dataclass
class RunOptions:
    # Stop after the first failing operation
    fail_early: bool = True
    # Exit the process when the run completes; otherwise return the report
    exit_process: bool = True
    # Print the run summary
    log_stats: bool = True


@dataclass
class RunReport:
    total: int
    passed: Set[str]
    failed: Set[str]
    success_rate: Optional[float]
    mean_duration: Optional[float]
    median_duration: Optional[float]
    p90_duration: Optional[float] = None
    p95_duration: Optional[float] = None
    durations: List[float] = field(default_factory=list)

    @property
    def passed_count(self) -> int:
        return len(self.passed)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0


def _or_none(statistic: Callable[[], float]) -> Optional[float]:
    try:
        return statistic()
    except NoDataError:
        return None


def build_report(passed: Set[str], failed: Set[str], durations: List[float]) -> RunReport:
    total = len(passed) + len(failed)
    success_rate = round2(len(passed) / total * 100) if total else None

    # quantile sorts in place, keep the recorded order intact
    samples = list(durations)
    report = RunReport(
        total=total,
        passed=passed,
        failed=failed,
        success_rate=success_rate,
        mean_duration=_or_none(lambda: mean(samples)),
        median_duration=_or_none(lambda: median(samples)),
        durations=list(durations),
    )

    if len(durations) > 4:
        report.p90_duration = quantile(0.9, samples)
        report.p95_duration = quantile(0.95, samples)

    return report


def emit(console: Console, line: str) -> None:
    console.print(Text(line), soft_wrap=True)


def _display(value: Optional[float], suffix: str = "") -> str:
    return "no data" if value is None else f"{value}{suffix}"


def print_report(report: RunReport, console: Console) -> None:
    emit(
        console,
        f"➡️  {report.total} total, {report.passed_count} passed, "
        f"{report.failed_count} failed "
        f"({_display(report.success_rate, '%')} success rate)",
    )
    emit(console, "\n⏱  Duration")
    emit(console, f"1️⃣  mean: {_display(report.mean_duration, 'ms')}")
    emit(console, f"2️⃣  median: {_display(report.median_duration, 'ms')}")

    if report.p90_duration is not None:
        emit(console, f"3️⃣  p90: {report.p90_duration}ms")
        emit(console, f"4️⃣  p95: {report.p95_duration}ms")


async def run_operations(
    operations: List[Operation],
    options: Optional[RunOptions] = None,
    *,
    console: Optional[Console] = None,
    error_console: Optional[Console] = None,
    terminate: Callable[[int], Any] = sys.exit,
    clock: Clock = time.monotonic,
) -> RunReport:
    """
    Run operations in sequence and assert their responses have no errors.

    With fail_early disabled the run continues past failing operations.
    With exit_process enabled, terminate is called with 1 if anything failed
    and 0 otherwise; the report is returned only if terminate returns.

    Args:
        operations: Callables returning a SonarResult, or an awaitable of one
        options: Runner configuration, defaults to RunOptions()
        console: Console for passing lines and the summary
        error_console: Console for failing lines
        terminate: Called with the exit code when exit_process is set
        clock: Monotonic time source in seconds, shared by the whole run

    Returns:
        RunReport for the attempted operations
    """
    options = options or RunOptions()
    console = console or Console()
    error_console = error_console or Console(stderr=True)

    passed: Set[str] = set()
    failed: Set[str] = set()
    durations: List[float] = []

    for index, operation in enumerate(operations):
        outcome = await with_timer(operation, clock)
        durations.append(outcome.duration)

        if isinstance(outcome, Pass):
            passed.add(outcome.result.operation)
            emit(
                console,
                format_operation_response(
                    True, outcome.result.operation, outcome.duration
                ),
            )
            continue

        error = outcome.error
        name = error.operation_name if isinstance(error, SonarError) else UNKNOWN_OPERATION
        failed.add(name)
        emit(
            error_console,
            format_operation_response(
                False, name, outcome.duration, describe_failure(error)
            ),
        )

        if options.fail_early:
            logger.debug(
                "Stopping after %s, %d operation(s) not run",
                name,
                len(operations) - index - 1,
            )
            break

    report = build_report(passed, failed, durations)

    if options.log_stats:
        print_report(report, console)

    if options.exit_process:
        terminate(report.exit_code)

    return report


def run(
    operations: List[Operation], options: Optional[RunOptions] = None, **kwargs: Any
) -> RunReport:
    """Blocking entry point for run_operations."""
    return asyncio.run(run_operations(operations, options, **kwargs))
