"""
Quiz engine core logic for the timed quiz game.
Handles the session state machine, the deadline timer and answer scoring.
"""
import asyncio
import logging
import math
import sys
import threading
import time
from typing import Any, Callable, List, Optional, TextIO

from .config_manager import format_duration
from .exceptions import InputStreamError
from .models import (
    AnsweredQuestion,
    CompletionType,
    QuestionRecord,
    ScoreReport,
    SessionResult,
    SessionState,
)
from .question_set import QuestionSet

# Set up logger for timer and session operations
logger = logging.getLogger(__name__)


class TimerLifecycleLogger:
    """Structured logging for deadline timer and session lifecycle events."""

    @staticmethod
    def log_timer_armed(name: str, duration: float) -> None:
        """Log the deadline being armed."""
        logger.info(
            f"Timer lifecycle: ARMED - Session {name}, Duration {duration:.3f}s",
            extra={
                'event_type': 'timer_armed',
                'session': name,
                'duration': duration,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_timer_completion(name: str, completion_type: str, duration: float) -> None:
        """Log timer completion (natural expiry or cancellation)."""
        logger.info(
            f"Timer lifecycle: COMPLETED - Session {name}, Type {completion_type}, Duration {duration:.3f}s",
            extra={
                'event_type': 'timer_completed',
                'session': name,
                'completion_type': completion_type,
                'duration': duration,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_state_transition(name: str, from_state: str, to_state: str, reason: str = None) -> None:
        """Log session state transitions."""
        logger.info(
            f"Session lifecycle: STATE_TRANSITION - Session {name}, {from_state} -> {to_state}" +
            (f" ({reason})" if reason else ""),
            extra={
                'event_type': 'session_state_transition',
                'session': name,
                'from_state': from_state,
                'to_state': to_state,
                'reason': reason,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_read_abandoned(name: str, question_number: int) -> None:
        """Log an answer read abandoned by timeout preemption."""
        logger.debug(
            f"Session lifecycle: READ_ABANDONED - Session {name}, Question {question_number}",
            extra={
                'event_type': 'session_read_abandoned',
                'session': name,
                'question_number': question_number,
                'timestamp': time.time()
            }
        )


class DeadlineWatcher:
    """One-shot countdown that fires a callback once its duration has elapsed."""

    def __init__(self, name: str = "quiz"):
        self._name = name
        self._task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._deadline: Optional[float] = None
        self._duration = 0.0
        self._fired = False
        self._is_cancelled = False

    def arm(self, duration: float, on_expire: Optional[Callable[[], Any]] = None) -> asyncio.Task:
        """
        Start the countdown as a background task on the running event loop.

        Args:
            duration: Seconds until the watcher fires
            on_expire: Called once when the deadline passes, may return an awaitable

        Returns:
            The countdown task

        Raises:
            RuntimeError: If the watcher was already armed
        """
        if self._task is not None:
            raise RuntimeError("Deadline watcher can only be armed once")

        self._loop = asyncio.get_running_loop()
        self._duration = duration
        self._deadline = self._loop.time() + duration
        self._task = asyncio.create_task(self._countdown(duration, on_expire))
        TimerLifecycleLogger.log_timer_armed(self._name, duration)
        return self._task

    async def _countdown(self, duration: float, on_expire: Optional[Callable[[], Any]]) -> None:
        try:
            await asyncio.sleep(duration)
        except asyncio.CancelledError:
            self._is_cancelled = True
            TimerLifecycleLogger.log_timer_completion(self._name, "cancelled", self._duration)
            raise

        self._fired = True
        TimerLifecycleLogger.log_timer_completion(self._name, "natural_expiry", self._duration)
        if on_expire is not None:
            outcome = on_expire()
            if asyncio.iscoroutine(outcome):
                await outcome

    def cancel(self) -> bool:
        """
        Cancel the countdown if it has not fired yet.

        Returns:
            True if a pending countdown was cancelled, False otherwise
        """
        if self._task is None or self._task.done():
            logger.debug(f"No pending deadline to cancel for session {self._name}")
            return False

        self._is_cancelled = True
        self._task.cancel()
        return True

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def is_cancelled(self) -> bool:
        return self._is_cancelled

    @property
    def remaining_time(self) -> float:
        """Seconds left before the deadline, 0 once fired or never armed."""
        if self._deadline is None or self._fired:
            return 0.0
        return max(0.0, self._deadline - self._loop.time())


def check_answer(record: QuestionRecord, raw_answer: str) -> AnsweredQuestion:
    """Trim the raw answer and compare it exactly, case-sensitively, to the correct answer."""
    user_answer = raw_answer.strip()
    return AnsweredQuestion(
        record=record,
        user_answer=user_answer,
        is_correct=user_answer == record.correct_answer
    )


def score(result: SessionResult) -> ScoreReport:
    """
    Compute the score summary for a finished session.

    Args:
        result: Finished session result, with at least one question

    Returns:
        ScoreReport; ``remaining`` is only set when every question was answered
    """
    correct = result.correct_count
    remaining = None
    if result.completed_fully:
        remaining = result.time_limit - result.elapsed

    return ScoreReport(
        user_name=result.user_name,
        total_questions=result.total_questions,
        answered_count=len(result.answered),
        correct_count=correct,
        incorrect_count=result.incorrect_count,
        percent_correct=correct / result.total_questions * 100,
        elapsed=result.elapsed,
        time_limit=result.time_limit,
        completed_fully=result.completed_fully,
        remaining=remaining
    )


class SessionEngine:
    """
    Runs one timed quiz session on a console.

    The answer loop and a DeadlineWatcher race each other; whichever finishes
    first decides how the session ends. Input lines are read on daemon threads
    so a read abandoned at timeout never holds up the caller.
    """

    def __init__(
        self,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
        clock: Callable[[], float] = time.monotonic,
        name: str = "quiz"
    ):
        """
        Initialize the engine.

        Args:
            input_stream: Source of answer lines, sys.stdin by default
            output_stream: Destination for prompts, sys.stdout by default
            clock: Monotonic clock returning seconds
            name: Session label used in log records
        """
        self._input = input_stream if input_stream is not None else sys.stdin
        self._output = output_stream if output_stream is not None else sys.stdout
        self._clock = clock
        self._name = name
        self._state = SessionState.NOT_STARTED
        self._answered: List[AnsweredQuestion] = []
        self._start_time: Optional[float] = None
        self._watcher: Optional[DeadlineWatcher] = None
        self._user_name = ""

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def watcher(self) -> Optional[DeadlineWatcher]:
        """The deadline watcher of the running or finished session."""
        return self._watcher

    def greet(self) -> str:
        """
        Welcome the user and read their name.

        Returns:
            The trimmed name, possibly empty

        Raises:
            InputStreamError: If the input stream is closed
        """
        self._write("Welcome to the Quiz Game\n")
        self._write("Please enter your name: ")
        self._user_name = self._read_line().strip()
        logger.info(f"User name entered: {self._user_name!r}")
        return self._user_name

    def run_session(self, questions: QuestionSet, time_limit: float, user_name: str) -> SessionResult:
        """Run a session to completion on a fresh event loop."""
        return asyncio.run(self.run_session_async(questions, time_limit, user_name))

    async def run_session_async(
        self,
        questions: QuestionSet,
        time_limit: float,
        user_name: str
    ) -> SessionResult:
        """
        Run the timed question loop.

        Args:
            questions: Non-empty question set, asked in its order
            time_limit: Seconds allowed for the whole test, greater than zero
            user_name: Name shown in the timeout message and the report

        Returns:
            The finished SessionResult, on natural completion or timeout

        Raises:
            ValueError: If questions is empty or time_limit is not positive
            RuntimeError: If this engine already ran a session
            InputStreamError: If the input stream closes before the session ends
        """
        if self._state is not SessionState.NOT_STARTED:
            raise RuntimeError("A SessionEngine runs exactly one session")
        if len(questions) == 0:
            raise ValueError("Cannot run a session without questions")
        if time_limit <= 0:
            raise ValueError("Time limit must be greater than zero")

        self._user_name = user_name
        self._transition(SessionState.AWAITING_START, "waiting for ENTER")
        self._write(
            f"You have {format_duration(time_limit)} to finish the test. "
            f"There are {len(questions)} questions in the test.\n"
            f"Press ENTER to start the test"
        )
        await self._read_line_async()

        self._start_time = self._clock()
        self._transition(SessionState.RUNNING, "countdown started")

        watcher = DeadlineWatcher(self._name)
        self._watcher = watcher
        watcher.arm(time_limit)
        answer_task = asyncio.create_task(self._answer_loop(questions))

        await asyncio.wait({answer_task, watcher.task}, return_when=asyncio.FIRST_COMPLETED)

        # The answer loop wins a tie so every recorded answer counts
        if answer_task.done():
            watcher.cancel()
            # Re-raises InputStreamError from the answer loop
            answer_task.result()
            # A finished test always reports time left on the clock
            elapsed = min(self._clock() - self._start_time, math.nextafter(time_limit, 0.0))
            completion = CompletionType.NATURAL_COMPLETION
        else:
            TimerLifecycleLogger.log_read_abandoned(self._name, len(self._answered) + 1)
            answer_task.cancel()
            self._announce_timeout()
            elapsed = time_limit
            completion = CompletionType.TIMEOUT_EXPIRED

        result = SessionResult(
            total_questions=len(questions),
            answered=tuple(self._answered),
            elapsed=elapsed,
            time_limit=time_limit,
            user_name=self._user_name,
            completion=completion,
            unanswered=questions.records[len(self._answered):]
        )
        self._transition(SessionState.FINISHED, completion.value)
        logger.info(
            f"Session finished: {len(result.answered)}/{result.total_questions} answered, "
            f"{result.correct_count} correct in {elapsed:.2f}s"
        )
        return result

    def score(self, result: SessionResult) -> ScoreReport:
        return score(result)

    async def _answer_loop(self, questions: QuestionSet) -> None:
        for number, record in enumerate(questions, start=1):
            self._write(f"{number}. {record.prompt} = ")
            raw_answer = await self._read_line_async()
            self._answered.append(check_answer(record, raw_answer))

    def _announce_timeout(self) -> None:
        self._write("\n")
        self._write(f"Time's Up {self._user_name}!\n")

    def _read_line(self) -> str:
        try:
            line = self._input.readline()
        except (OSError, ValueError) as e:
            raise InputStreamError(f"Unable to read input: {e}") from e
        if not line:
            raise InputStreamError("Input stream closed")
        return line

    async def _read_line_async(self) -> str:
        """Read one line on a daemon thread without blocking the event loop."""
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def reader() -> None:
            try:
                outcome = (future.set_result, self._read_line())
            except InputStreamError as e:
                outcome = (future.set_exception, e)
            try:
                loop.call_soon_threadsafe(_resolve, future, *outcome)
            except RuntimeError:
                logger.debug("Event loop closed before the input read finished; line discarded")

        threading.Thread(target=reader, name=f"{self._name}-input", daemon=True).start()
        return await future

    def _transition(self, to_state: SessionState, reason: str) -> None:
        TimerLifecycleLogger.log_state_transition(self._name, self._state.value, to_state.value, reason)
        self._state = to_state

    def _write(self, text: str) -> None:
        print(text, end='', file=self._output, flush=True)


def _resolve(future: asyncio.Future, setter: Callable[[Any], None], value: Any) -> None:
    # A future cancelled by timeout preemption no longer wants the value
    if not future.done():
        setter(value)
