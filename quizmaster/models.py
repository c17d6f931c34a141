"""
Core data models for the quiz application.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Difficulty(Enum):
    """Difficulty tag attached to every question."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class GameState(Enum):
    """Coarse state of a quiz session."""
    MENU = "menu"
    PLAYING = "playing"
    RESULT = "result"


class UnknownCategoryPolicy(Enum):
    """What to do when a game is started for a category the catalog does not know."""
    FALLBACK = "fallback"
    EMPTY = "empty"


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Question:
    """A single multiple-choice quiz item."""
    category: str
    text: str
    options: Tuple[str, ...]
    correct_answer: int
    difficulty: Difficulty = Difficulty.EASY
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        options = tuple(self.options)
        if len(options) < 2:
            raise ValueError(f"Question '{self.text}' needs at least 2 options, got {len(options)}")
        if not isinstance(self.correct_answer, int) or isinstance(self.correct_answer, bool):
            raise ValueError(f"Question '{self.text}' correct_answer must be an integer")
        if not 0 <= self.correct_answer < len(options):
            raise ValueError(
                f"Question '{self.text}' correct_answer {self.correct_answer} "
                f"is not a valid index into {len(options)} options"
            )
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, 'options', options)
        object.__setattr__(self, 'difficulty', Difficulty(self.difficulty))

    def is_correct(self, option_index: int) -> bool:
        return option_index == self.correct_answer


@dataclass(frozen=True)
class Category:
    """
    A named grouping of questions with display metadata.

    ``question_count`` is descriptive only; the number of questions actually
    available comes from the catalog.
    """
    name: str
    icon: str
    question_count: int = 0
    id: str = field(default_factory=_new_id)


@dataclass
class QuizSettings:
    """Configuration settings for quiz sessions."""
    question_limit: int = 10
    feedback_delay: float = 1.5
    unknown_category_policy: UnknownCategoryPolicy = UnknownCategoryPolicy.FALLBACK
    fallback_category: str = "General Knowledge"
    high_score_path: str = "./data/high_scores.json"
    catalog_path: Optional[str] = None


@dataclass
class Session:
    """Mutable run-time state of one quiz attempt."""
    id: str = field(default_factory=_new_id)
    state: GameState = GameState.MENU
    selected_category: Optional[Category] = None
    questions: List[Question] = field(default_factory=list)
    current_index: int = 0
    score: int = 0
    answers: Dict[int, int] = field(default_factory=dict)
    # Bumped on every start/restart so deferred callbacks can detect they are stale.
    generation: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.current_index >= len(self.questions) - 1
