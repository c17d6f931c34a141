"""
Quiz session controller.
Runs the menu -> playing -> result state machine for one session and
publishes every change to subscribed observers.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from .catalog import QuestionCatalog
from .config_manager import ConfigManager
from .high_scores import HighScoreStore
from .models import Category, GameState, Question, Session
from .quiz_engine import QuizEngine

# (lower bound, title) pairs checked from the top down
RESULT_TITLES = [
    (90, "Perfect Score!"),
    (70, "Great Work!"),
    (40, "Good Job!"),
    (0, "Keep Practicing!"),
]


class SessionEvent(Enum):
    """Notifications published to observers after each state change."""
    GAME_STARTED = "game_started"
    ANSWER_SUBMITTED = "answer_submitted"
    QUESTION_ADVANCED = "question_advanced"
    SCORE_FINALIZED = "score_finalized"
    GAME_FINISHED = "game_finished"
    GAME_RESET = "game_reset"


Observer = Callable[[SessionEvent, Session], Any]


def score_percentage(score: int, total: int) -> int:
    """Whole-number percentage of correct answers, 0 when there were no questions."""
    if total <= 0:
        return 0
    return int((score / total) * 100)


def result_title(percentage: int) -> str:
    for lower_bound, title in RESULT_TITLES:
        if percentage >= lower_bound:
            return title
    return RESULT_TITLES[-1][1]


class QuizController:
    """
    Orchestrates a quiz session.

    Transitions never raise for out-of-place calls: each one returns True
    when it was applied and False when it was a no-op, logging the reason.
    """

    def __init__(
        self,
        catalog: QuestionCatalog,
        high_scores: HighScoreStore,
        config_manager: Optional[ConfigManager] = None,
        quiz_engine: Optional[QuizEngine] = None,
        session: Optional[Session] = None
    ):
        """
        Initialize the quiz controller.

        Args:
            catalog: Source of categories and questions
            high_scores: Store updated when a game finishes
            config_manager: Settings source, defaults to a fresh ConfigManager
            quiz_engine: Question selection and timers, defaults to a new QuizEngine
            session: Session to drive, defaults to an empty one in the menu state
        """
        self.logger = logging.getLogger(__name__)
        self.catalog = catalog
        self.high_scores = high_scores
        self.config_manager = config_manager or ConfigManager()
        self.quiz_engine = quiz_engine or QuizEngine()
        self.session = session or Session()
        self._observers: List[Observer] = []

        self.logger.info(f"QuizController initialized for session {self.session.id}")

    # Observers

    def subscribe(self, observer: Observer) -> Callable[[], bool]:
        """
        Register an observer called as ``observer(event, session)`` after each change.

        Returns:
            Function that unsubscribes the observer
        """
        self._observers.append(observer)
        return lambda: self.unsubscribe(observer)

    def unsubscribe(self, observer: Observer) -> bool:
        try:
            self._observers.remove(observer)
            return True
        except ValueError:
            return False

    def _notify(self, event: SessionEvent) -> None:
        for observer in list(self._observers):
            try:
                observer(event, self.session)
            except Exception as e:
                self.logger.error(f"Observer {observer!r} failed handling {event.value}: {e}")

    # State machine

    @property
    def state(self) -> GameState:
        return self.session.state

    def start_game(self, category: Union[Category, str]) -> bool:
        """
        Start a new game for a category.

        Questions are shuffled and capped at the configured limit. A pending
        feedback timer from a previous game is cancelled.

        Args:
            category: Category object or category name

        Returns:
            True once the session is playing
        """
        if isinstance(category, str):
            category = self.catalog.get_category(category) or Category(name=category, icon="questionmark")

        settings = self.config_manager.get_quiz_settings()
        session = self.session

        if session.state is GameState.PLAYING:
            self.logger.info(f"Abandoning game in progress for '{session.selected_category.name}'")

        self.quiz_engine.cancel_feedback(session.id)
        available = self.catalog.resolve_questions(
            category.name,
            settings.unknown_category_policy,
            settings.fallback_category
        )

        session.generation += 1
        session.selected_category = category
        session.questions = self.quiz_engine.select_questions(available, settings.question_limit)
        session.current_index = 0
        session.score = 0
        session.answers = {}
        session.state = GameState.PLAYING
        session.start_time = datetime.now()
        session.end_time = None

        if not session.questions:
            self.logger.warning(f"Started '{category.name}' with no questions available")

        self.logger.info(f"Started game for '{category.name}' with {len(session.questions)} questions "
                         f"(generation {session.generation})")
        self._notify(SessionEvent.GAME_STARTED)
        return True

    def submit_answer(self, option_index: int) -> bool:
        """
        Record an answer for the current question.

        Only the first submission for a question is scored; a later one
        replaces the stored answer but leaves ``score`` untouched.
        This keeps ``score`` at most ``len(questions)``.

        Args:
            option_index: Index of the chosen option

        Returns:
            True if the answer was recorded
        """
        session = self.session

        if session.state is not GameState.PLAYING:
            self.logger.warning(f"Ignoring answer {option_index}: session is {session.state.value}")
            return False

        question = session.current_question
        if question is None:
            self.logger.debug(f"Ignoring answer {option_index}: no question at index {session.current_index}")
            return False

        first_submission = session.current_index not in session.answers
        session.answers[session.current_index] = option_index

        if first_submission and question.is_correct(option_index):
            session.score += 1

        self.logger.debug(f"Answer {option_index} recorded for question {session.current_index} "
                          f"(score {session.score})")
        self._notify(SessionEvent.ANSWER_SUBMITTED)
        return True

    def next_question(self) -> bool:
        """
        Advance to the next question, or to the result state after the last one.

        A pending feedback advance is cancelled, so a manual advance never
        leaves the next question locked.

        Returns:
            True if the session advanced or finished
        """
        session = self.session

        if session.state is not GameState.PLAYING:
            self.logger.warning(f"Ignoring next question: session is {session.state.value}")
            return False

        self.quiz_engine.cancel_feedback(session.id)

        if not session.is_last_question:
            session.current_index += 1
            self.logger.debug(f"Advanced to question {session.current_index + 1} of {len(session.questions)}")
            self._notify(SessionEvent.QUESTION_ADVANCED)
        else:
            self._finish_game()

        return True

    def restart_game(self) -> bool:
        """Return to the menu, clearing the category, index, score and answers."""
        session = self.session

        self.quiz_engine.cancel_feedback(session.id)
        session.generation += 1
        session.state = GameState.MENU
        session.selected_category = None
        session.current_index = 0
        session.score = 0
        session.answers = {}

        self.logger.info(f"Session reset to menu (generation {session.generation})")
        self._notify(SessionEvent.GAME_RESET)
        return True

    def finalize_score(self, answers: Optional[Dict[int, int]] = None) -> int:
        """
        Recompute the score from stored answers and record it as a high score.

        This recomputation is the score that gets persisted; it replaces the
        running count kept by ``submit_answer``.

        Args:
            answers: Question index -> chosen option; the session's answers if None

        Returns:
            The recomputed score
        """
        session = self.session

        if session.state is not GameState.RESULT:
            self.logger.warning(f"Ignoring finalize: session is {session.state.value}")
            return session.score

        if answers is None:
            answers = session.answers

        final_score = sum(
            1 for index, question in enumerate(session.questions)
            if index in answers and question.is_correct(answers[index])
        )

        if final_score != session.score:
            self.logger.info(f"Final score {final_score} differs from running score {session.score}")
        session.score = final_score

        if session.selected_category is not None:
            self.high_scores.record_if_higher(session.selected_category.name, final_score)

        self._notify(SessionEvent.SCORE_FINALIZED)
        return final_score

    def _finish_game(self) -> None:
        session = self.session
        session.state = GameState.RESULT
        session.end_time = datetime.now()
        self.finalize_score()
        self.logger.info(f"Game finished: {session.score}/{len(session.questions)}")
        self._notify(SessionEvent.GAME_FINISHED)

    # Deferred auto-advance

    def answer_question(self, option_index: int) -> bool:
        """
        Submit an answer and advance after the feedback delay.

        The answer is scored immediately. Further answers for the same
        question are refused until the delayed transition has run.

        Args:
            option_index: Index of the chosen option

        Returns:
            True if the answer was accepted and the advance scheduled
        """
        session = self.session

        if self.quiz_engine.has_pending_feedback(session.id):
            self.logger.debug(f"Answer {option_index} ignored: question {session.current_index} already answered")
            return False

        if not self.submit_answer(option_index):
            return False

        generation = session.generation
        question_index = session.current_index
        delay = self.config_manager.get_feedback_delay()

        try:
            self.quiz_engine.schedule_feedback(
                session.id,
                delay,
                lambda: self._apply_deferred_advance(generation, question_index),
                generation,
                question_index
            )
        except RuntimeError as e:
            self.logger.warning(f"Cannot schedule feedback delay ({e}); advancing immediately")
            self._apply_deferred_advance(generation, question_index)

        return True

    def _apply_deferred_advance(self, generation: int, question_index: int) -> bool:
        session = self.session

        if (session.generation != generation
                or session.current_index != question_index
                or session.state is not GameState.PLAYING):
            self.logger.info(
                f"Discarding stale advance for generation {generation}, question {question_index} "
                f"(now generation {session.generation}, question {session.current_index}, "
                f"{session.state.value})"
            )
            return False

        return self.next_question()

    def has_pending_advance(self) -> bool:
        return self.quiz_engine.has_pending_feedback(self.session.id)

    def play_again(self) -> bool:
        """Start a new game in the category that just finished."""
        session = self.session
        if session.state is not GameState.RESULT or session.selected_category is None:
            self.logger.warning(f"Ignoring play again: session is {session.state.value}")
            return False
        return self.start_game(session.selected_category)

    def shutdown(self) -> None:
        """Cancel any pending timers."""
        cancelled = self.quiz_engine.cancel_all()
        self.logger.info(f"QuizController shut down ({cancelled} pending timers cancelled)")

    # Read-only views

    def get_current_question(self) -> Optional[Question]:
        if self.session.state is not GameState.PLAYING:
            return None
        return self.session.current_question

    def get_progress(self) -> Dict[str, Any]:
        """
        Get progress information for the current session.

        Returns:
            Dictionary with state, category, position and score
        """
        session = self.session
        total = len(session.questions)
        current = min(session.current_index + 1, total)

        return {
            'state': session.state.value,
            'category': session.selected_category.name if session.selected_category else None,
            'current_question': current,
            'total_questions': total,
            'progress': current / total if total else 0.0,
            'score': session.score,
            'answered': len(session.answers)
        }

    def get_results(self) -> Optional[Dict[str, Any]]:
        """
        Get the summary shown once a game is finished.

        Returns:
            Dictionary with score breakdown and high score, None unless in the result state
        """
        session = self.session
        if session.state is not GameState.RESULT:
            return None

        total = len(session.questions)
        percentage = score_percentage(session.score, total)
        category_name = session.selected_category.name if session.selected_category else None
        duration = None
        if session.start_time and session.end_time:
            duration = (session.end_time - session.start_time).total_seconds()

        return {
            'category': category_name,
            'score': session.score,
            'total_questions': total,
            'correct': session.score,
            'wrong': total - session.score,
            'percentage': percentage,
            'title': result_title(percentage),
            'high_score': self.high_scores.get(category_name) if category_name else 0,
            'duration_seconds': duration
        }
