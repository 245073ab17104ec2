"""
Step-driven runner for the resource lifecycle samples.

A run walks a fixed list of steps in order. Each successful step may move
the run to its next state; the first failed step moves it to ``Failed`` and
ends the run. Resources created by earlier steps are left as they are.
"""
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from config import Config
from logger_config import get_logger
from utils.exceptions import ErrorDetail, ErrorKind, ServiceOperationError

logger = get_logger(__name__)

BANNER = '==========================================='


class RunState(str, Enum):
    """States a sample run moves through."""

    INIT = 'Init'
    CONTAINER_CREATED = 'ContainerCreated'
    CONTENT_WRITTEN = 'ContentWritten'
    CONTENT_READ = 'ContentRead'
    CONTENT_LISTED = 'ContentListed'
    CONTENT_DELETED = 'ContentDeleted'
    CONTAINER_DELETED = 'ContainerDeleted'
    DONE = 'Done'
    FAILED = 'Failed'


@dataclass(frozen=True)
class Step:
    """
    One blocking call in a run.

    A step with no ``next_state`` leaves the state unchanged when it
    succeeds (listing containers, for example).
    """

    name: str
    action: Callable[[], Any]
    next_state: Optional[RunState] = None


@dataclass
class RunResult:
    """Terminal outcome of a run."""

    title: str
    state: RunState
    duration_ns: int
    history: List[RunState] = field(default_factory=list)
    failed_step: Optional[str] = None
    error: Optional[ErrorDetail] = None

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.DONE

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    @property
    def duration_ms(self) -> float:
        return self.duration_ns / 1_000_000.0

    @property
    def duration_seconds(self) -> float:
        return self.duration_ns / 1_000_000_000.0


class DemoOrchestrator:
    """Run a sequence of steps and report the terminal state and timing."""

    def __init__(self, title: str, steps: Sequence[Step], config: Config) -> None:
        """
        Initialize the orchestrator.

        Args:
            title: Heading logged at the start of the run
            steps: Steps executed strictly in order
            config: Region and profile the steps' clients were built for
        """
        self.title = title
        self.steps = list(steps)
        self.config = config

    def run(self) -> RunResult:
        """
        Execute every step until one fails.

        Only ``ServiceOperationError`` ends a run as ``Failed``. Any other
        exception is a programming error and propagates.

        Returns:
            RunResult with the terminal state, duration and error detail
        """
        start = time.perf_counter_ns()
        state = RunState.INIT
        history = [state]
        failed_step = None
        error = None

        logger.info(BANNER)
        logger.info(self.title)
        logger.info(BANNER)
        logger.info(
            f'Region: {self.config.aws_region}, '
            f'profile: {self.config.aws_profile or "default"}'
        )

        for step in self.steps:
            logger.info(step.name)
            try:
                step.action()
            except ServiceOperationError as e:
                state = RunState.FAILED
                history.append(state)
                failed_step = step.name
                error = e.detail
                self._report_failure(step.name, e.detail)
                break
            if step.next_state is not None and step.next_state is not state:
                state = step.next_state
                history.append(state)
        else:
            state = RunState.DONE
            history.append(state)

        duration_ns = time.perf_counter_ns() - start
        result = RunResult(
            title=self.title,
            state=state,
            duration_ns=duration_ns,
            history=history,
            failed_step=failed_step,
            error=error,
        )
        self._report_timing(result)
        return result

    @staticmethod
    def _report_failure(step_name: str, detail: ErrorDetail) -> None:
        if detail.kind is ErrorKind.SERVICE_REJECTED:
            logger.error(
                f'Step "{step_name}" failed: the request reached AWS '
                f'but was rejected with an error response.'
            )
        else:
            logger.error(
                f'Step "{step_name}" failed: the client could not communicate '
                f'with AWS, for example because the network is unreachable.'
            )
        for line in detail.describe():
            logger.error(line)

    @staticmethod
    def _report_timing(result: RunResult) -> None:
        logger.warning(f'{result.title} finished in state {result.state.value}')
        logger.warning(f'Duration in nanoseconds: {result.duration_ns}')
        logger.warning(f'Duration in milliseconds: {result.duration_ns // 1_000_000}')
        logger.warning(f'Duration in seconds: {result.duration_ns // 1_000_000_000}')
        logger.warning(f'High Precision Duration in milliseconds: {result.duration_ms}')
        logger.warning(f'High Precision Duration in seconds: {result.duration_seconds}')
