"""
Text-mode front end for the quiz.
Renders the menu, questions and results, and forwards input to the controller.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from .catalog import QuestionCatalog
from .config_manager import ConfigManager
from .high_scores import HighScoreStore
from .models import GameState
from .quiz_controller import QuizController, SessionEvent

logger = logging.getLogger(__name__)

InputFunc = Callable[[str], Awaitable[Optional[str]]]


async def read_line(prompt: str) -> Optional[str]:
    """Read one line from stdin without blocking the event loop; None on EOF."""
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, input, prompt)
    except EOFError:
        return None


class QuizConsoleApp:
    """Console presentation layer driving a QuizController."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        input_func: Optional[InputFunc] = None,
        output: Callable[[str], None] = print
    ):
        self.app_config = config or {}
        self._input = input_func or read_line
        self._output = output
        self._running = False
        self._advanced: Optional[asyncio.Event] = None

        self.config_manager: Optional[ConfigManager] = None
        self.catalog: Optional[QuestionCatalog] = None
        self.high_scores: Optional[HighScoreStore] = None
        self.quiz_controller: Optional[QuizController] = None

    def setup(self) -> None:
        """Create the managers and controller from the application config."""
        logger.info("Setting up quiz components...")

        self.config_manager = ConfigManager()
        if self.app_config:
            result = self.config_manager.load_from_dict(self.app_config)
            for error in result['errors']:
                logger.warning(f"Configuration error, keeping default: {error}")

        settings = self.config_manager.get_quiz_settings()
        if settings.catalog_path:
            self.catalog = QuestionCatalog.from_json_file(settings.catalog_path)
            for error in self.catalog.get_load_errors():
                self._output(f"⚠️ {error}")
        else:
            self.catalog = QuestionCatalog.default()

        self.high_scores = HighScoreStore(settings.high_score_path)
        self.quiz_controller = QuizController(self.catalog, self.high_scores, self.config_manager)
        self.quiz_controller.subscribe(self._on_session_event)

        logger.info("Quiz setup completed successfully")

    def _on_session_event(self, event: SessionEvent, session) -> None:
        if self._advanced is None:
            return
        if event in (SessionEvent.QUESTION_ADVANCED, SessionEvent.GAME_FINISHED, SessionEvent.GAME_RESET):
            self._advanced.set()

    async def run(self) -> None:
        """Run screens until the user quits or input ends."""
        if self.quiz_controller is None:
            self.setup()

        self._advanced = asyncio.Event()
        self._running = True
        try:
            while self._running:
                state = self.quiz_controller.state
                if state is GameState.MENU:
                    await self.handle_menu()
                elif state is GameState.PLAYING:
                    await self.handle_question()
                else:
                    await self.handle_results()
        finally:
            self.quiz_controller.shutdown()

    async def _prompt(self, prompt: str) -> Optional[str]:
        line = await self._input(prompt)
        if line is None:
            self._running = False
            return None
        return line.strip()

    async def handle_menu(self) -> None:
        categories = self.catalog.categories()
        scores = self.high_scores.all_scores()

        self._output("\n=== QuizMaster ===")
        for number, category in enumerate(categories, start=1):
            best = scores.get(category.name, 0)
            self._output(f"{number}. {category.name} ({category.question_count} questions, best {best})")

        choice = await self._prompt("Choose a category (q to quit): ")
        if choice is None:
            return
        if choice.lower() == 'q':
            self._running = False
            return

        index = _parse_choice(choice, len(categories))
        if index is None:
            self._output("❌ Please enter one of the listed numbers")
            return

        self.quiz_controller.start_game(categories[index])

    async def handle_question(self) -> None:
        controller = self.quiz_controller
        question = controller.get_current_question()

        if question is None:
            # Playing with nothing to ask: move straight to the results.
            self._output("No questions available for this category")
            controller.next_question()
            return

        progress = controller.get_progress()
        self._output(
            f"\nQuestion {progress['current_question']}/{progress['total_questions']}"
            f" [{question.difficulty.value}] - Score {progress['score']}"
        )
        self._output(question.text)
        for number, option in enumerate(question.options, start=1):
            self._output(f"  {number}. {option}")

        choice = await self._prompt("Your answer (q to quit): ")
        if choice is None:
            return
        if choice.lower() == 'q':
            controller.restart_game()
            return

        index = _parse_choice(choice, len(question.options))
        if index is None:
            self._output("❌ Please enter one of the listed numbers")
            return

        self._advanced.clear()
        if not controller.answer_question(index):
            return

        if question.is_correct(index):
            self._output("✅ Correct!")
        else:
            self._output(f"❌ Wrong - the answer was {question.options[question.correct_answer]}")

        if controller.has_pending_advance():
            await self._advanced.wait()

    async def handle_results(self) -> None:
        results = self.quiz_controller.get_results()

        self._output("\n=== Quiz Complete! ===")
        self._output(results['title'])
        self._output(f"{results['percentage']}% - {results['correct']} out of {results['total_questions']} correct")
        self._output(f"Wrong answers: {results['wrong']}")
        self._output(f"High score for {results['category']}: {results['high_score']}")

        choice = await self._prompt("(p)lay again, (m)enu or (q)uit: ")
        if choice is None:
            return

        choice = choice.lower()
        if choice == 'p':
            self.quiz_controller.play_again()
        elif choice == 'm':
            self.quiz_controller.restart_game()
        elif choice == 'q':
            self._running = False
        else:
            self._output("❌ Please enter p, m or q")


def _parse_choice(choice: str, count: int) -> Optional[int]:
    """Convert a 1-based menu choice into a 0-based index, None if invalid."""
    try:
        number = int(choice)
    except ValueError:
        return None
    if 1 <= number <= count:
        return number - 1
    return None


async def run_app(config: Optional[Dict[str, Any]] = None) -> None:
    """Run the console quiz with proper error handling."""
    app = QuizConsoleApp(config)
    try:
        logger.info("Starting QuizMaster...")
        await app.run()
    except KeyboardInterrupt:
        logger.info("Quiz interrupted by user")
