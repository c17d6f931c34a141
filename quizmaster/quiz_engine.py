"""
Quiz engine core logic.
Handles question selection, ordering, and the deferred feedback timer.
"""
import asyncio
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

from .models import Question

# Set up logger for timer operations
logger = logging.getLogger(__name__)


class TimerLifecycleLogger:
    """Structured logging for feedback timer lifecycle events."""

    @staticmethod
    def log_timer_created(session_id: str, delay: float, generation: int, question_index: int) -> None:
        """Log a newly scheduled feedback timer."""
        logger.info(
            f"Timer lifecycle: CREATED - Session {session_id}, Delay {delay:.2f}s, "
            f"Generation {generation}, Question {question_index}",
            extra={
                'event_type': 'timer_created',
                'session_id': session_id,
                'delay': delay,
                'generation': generation,
                'question_index': question_index,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_timer_completion(session_id: str, completion_type: str, delay: float) -> None:
        """Log timer completion (natural expiry or cancellation)."""
        logger.info(
            f"Timer lifecycle: COMPLETED - Session {session_id}, Type {completion_type}, Delay {delay:.2f}s",
            extra={
                'event_type': 'timer_completed',
                'session_id': session_id,
                'completion_type': completion_type,
                'delay': delay,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_timer_state_transition(session_id: str, from_state: str, to_state: str, reason: str = None) -> None:
        """Log timer state transitions."""
        logger.debug(
            f"Timer lifecycle: STATE_TRANSITION - Session {session_id}, {from_state} -> {to_state}" +
            (f" ({reason})" if reason else ""),
            extra={
                'event_type': 'timer_state_transition',
                'session_id': session_id,
                'from_state': from_state,
                'to_state': to_state,
                'reason': reason,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_timer_error(session_id: str, error_type: str, error_message: str, operation: str) -> None:
        """Log timer-related errors with context."""
        logger.error(
            f"Timer lifecycle: ERROR - Session {session_id}, Operation {operation}, Type {error_type}: {error_message}",
            extra={
                'event_type': 'timer_error',
                'session_id': session_id,
                'error_type': error_type,
                'error_message': error_message,
                'operation': operation,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_race_condition_detected(session_id: str, details: str) -> None:
        """Log race condition detection."""
        logger.warning(
            f"Timer lifecycle: RACE_CONDITION - Session {session_id}: {details}",
            extra={
                'event_type': 'timer_race_condition',
                'session_id': session_id,
                'details': details,
                'timestamp': time.time()
            }
        )


class FeedbackTimer:
    """
    One-shot cancelable timer that runs a callback after the feedback delay.

    The timer remembers the session generation and question index it was
    issued for so the callback can tell whether the session moved on.
    """

    def __init__(self, session_id: str, generation: int, question_index: int):
        """Initialize the timer."""
        self._task: Optional[asyncio.Task] = None
        self._is_cancelled = False
        self._has_fired = False
        self._delay = 0.0
        self._session_id = session_id
        self.generation = generation
        self.question_index = question_index

    def start(
        self,
        delay: float,
        callback: Callable[[], Any],
        on_finished: Optional[Callable[["FeedbackTimer"], None]] = None
    ) -> None:
        """
        Schedule ``callback`` to run after ``delay`` seconds.

        Must be called with a running event loop.

        Args:
            delay: Seconds to wait before firing
            callback: Plain function or coroutine function to run on expiry
            on_finished: Called with this timer once it fires or is cancelled
        """
        self._delay = delay
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(callback, on_finished))

    async def _run(self, callback: Callable[[], Any], on_finished) -> None:
        try:
            await asyncio.sleep(self._delay)

            if self._is_cancelled:
                TimerLifecycleLogger.log_timer_completion(self._session_id, "cancelled", self._delay)
                return

            self._has_fired = True
            TimerLifecycleLogger.log_timer_completion(self._session_id, "natural_expiry", self._delay)
            result = callback()
            if asyncio.iscoroutine(result):
                await result

        except asyncio.CancelledError:
            self._is_cancelled = True
            TimerLifecycleLogger.log_timer_completion(self._session_id, "asyncio_cancelled", self._delay)
            raise
        except Exception as e:
            TimerLifecycleLogger.log_timer_error(
                self._session_id,
                "callback_error",
                str(e),
                "feedback_timer_run"
            )
        finally:
            if on_finished is not None:
                on_finished(self)

    def cancel(self) -> None:
        """Cancel the timer; a no-op once it has fired."""
        TimerLifecycleLogger.log_timer_state_transition(
            self._session_id,
            "pending" if self.is_pending else "finished",
            "cancelled",
            "cancel requested"
        )
        self._is_cancelled = True
        if self._task and not self._task.done():
            self._task.cancel()

    @property
    def is_cancelled(self) -> bool:
        return self._is_cancelled

    @property
    def has_fired(self) -> bool:
        return self._has_fired

    @property
    def is_pending(self) -> bool:
        """True while the timer is scheduled and has neither fired nor been cancelled."""
        return (
            self._task is not None
            and not self._task.done()
            and not self._is_cancelled
            and not self._has_fired
        )

    @property
    def delay(self) -> float:
        return self._delay


class QuizEngine:
    """Core quiz engine that handles question selection and feedback timers."""

    def __init__(self):
        """Initialize the quiz engine."""
        self._timers: Dict[str, FeedbackTimer] = {}  # Session ID -> Timer mapping

    def select_questions(self, questions: Sequence[Question], limit: int, shuffle: bool = True) -> List[Question]:
        """
        Select and order questions for a new session.

        Args:
            questions: Available questions for the category
            limit: Maximum number of questions to keep
            shuffle: Apply a uniform random shuffle before truncating

        Returns:
            New list of at most ``limit`` questions; empty if none are available
        """
        selected_questions = list(questions)

        if shuffle:
            selected_questions = self.shuffle_questions(selected_questions)

        return self.limit_question_count(selected_questions, limit)

    def shuffle_questions(self, questions: List[Question]) -> List[Question]:
        """
        Shuffle questions randomly.

        Args:
            questions: List of questions to shuffle

        Returns:
            New list with questions in random order
        """
        shuffled = questions.copy()
        random.shuffle(shuffled)
        return shuffled

    def limit_question_count(self, questions: List[Question], count: int) -> List[Question]:
        """
        Limit the number of questions to the specified count.

        Note:
            If count is greater than available questions, returns all questions.
            If count is less than 1, returns empty list.
        """
        if count < 1:
            return []

        return questions[:count]

    def schedule_feedback(
        self,
        session_id: str,
        delay: float,
        callback: Callable[[], Any],
        generation: int,
        question_index: int
    ) -> FeedbackTimer:
        """
        Schedule the deferred transition that follows an answer.

        Any timer still pending for the session is cancelled first.

        Args:
            session_id: Session the timer belongs to
            delay: Feedback delay in seconds
            callback: Transition to apply when the delay expires
            generation: Session generation at scheduling time
            question_index: Question index at scheduling time

        Returns:
            The started timer

        Raises:
            RuntimeError: If no event loop is running
        """
        existing = self._timers.get(session_id)
        if existing is not None and existing.is_pending:
            TimerLifecycleLogger.log_race_condition_detected(
                session_id,
                f"Pending timer for question {existing.question_index} replaced by question {question_index}"
            )
            existing.cancel()

        timer = FeedbackTimer(session_id, generation, question_index)
        timer.start(delay, callback, on_finished=lambda t: self._release_timer(session_id, t))
        self._timers[session_id] = timer
        TimerLifecycleLogger.log_timer_created(session_id, delay, generation, question_index)
        return timer

    def _release_timer(self, session_id: str, timer: FeedbackTimer) -> None:
        if self._timers.get(session_id) is timer:
            del self._timers[session_id]
            logger.debug(
                f"Timer cleanup completed for session {session_id}",
                extra={
                    'event_type': 'timer_cleanup',
                    'session_id': session_id,
                    'timestamp': time.time()
                }
            )

    def cancel_feedback(self, session_id: str) -> bool:
        """
        Cancel the pending feedback timer for a session.

        Returns:
            True if a pending timer was cancelled, False if there was none
        """
        timer = self._timers.pop(session_id, None)
        if timer is None or not timer.is_pending:
            logger.debug(
                f"No pending timer to cancel for session {session_id}",
                extra={
                    'event_type': 'timer_cancel_no_timer',
                    'session_id': session_id,
                    'timestamp': time.time()
                }
            )
            return False

        timer.cancel()
        return True

    def has_pending_feedback(self, session_id: str) -> bool:
        timer = self._timers.get(session_id)
        return timer is not None and timer.is_pending

    def get_timer_status(self, session_id: str) -> Optional[dict]:
        """
        Get status information for a session's feedback timer.

        Returns:
            Dictionary with timer status, None if no timer exists
        """
        timer = self._timers.get(session_id)
        if timer is None:
            return None

        return {
            'pending': timer.is_pending,
            'cancelled': timer.is_cancelled,
            'fired': timer.has_fired,
            'delay': timer.delay,
            'generation': timer.generation,
            'question_index': timer.question_index
        }

    def cancel_all(self) -> int:
        """Cancel every pending timer; returns how many were cancelled."""
        cancelled = 0
        for session_id in list(self._timers):
            if self.cancel_feedback(session_id):
                cancelled += 1
        return cancelled
