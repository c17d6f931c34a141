"""
Integration tests for the quiz.
Wires real catalogs, stores, configuration and the controller together.
"""
import json
import logging
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import main
from quizmaster.catalog import QuestionCatalog
from quizmaster.config_manager import ConfigManager
from quizmaster.high_scores import HIGH_SCORES_KEY, HighScoreStore
from quizmaster.models import GameState
from quizmaster.quiz_controller import QuizController
from tests.test_fixtures import AsyncTestHelpers, TestDataValidation, TestFixtures


class TestCompleteQuizFlow(unittest.TestCase):
    """Full games against the built-in catalog and a file-backed store."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.score_path = str(Path(self.temp_dir) / "high_scores.json")
        self.catalog = QuestionCatalog.default()
        self.config_manager = TestFixtures.create_config_manager(high_score_path=self.score_path)
        self.controller = self._new_controller()

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _new_controller(self) -> QuizController:
        return QuizController(self.catalog, HighScoreStore(self.score_path), self.config_manager)

    def _play(self, controller: QuizController, correct: int) -> None:
        """Answer the first ``correct`` questions right and the rest wrong."""
        answered = 0
        while controller.state is GameState.PLAYING:
            question = controller.get_current_question()
            if answered < correct:
                controller.submit_answer(question.correct_answer)
            else:
                controller.submit_answer((question.correct_answer + 1) % len(question.options))
            answered += 1
            controller.next_question()

    def test_builtin_catalog_is_well_formed(self):
        names = [category.name for category in self.catalog.categories()]
        self.assertEqual(names, ["General Knowledge", "Science", "History", "Entertainment"])

        for name in names:
            questions = self.catalog.questions_for_category(name)
            self.assertEqual(len(questions), 5)
            for question in questions:
                self.assertTrue(TestDataValidation.validate_question(question))
                self.assertEqual(question.category, name)

    def test_full_game_persists_high_score(self):
        """Scores written by one run are read back by the next."""
        self.controller.start_game("Science")
        self._play(self.controller, correct=4)

        results = self.controller.get_results()
        self.assertEqual(results['score'], 4)
        self.assertEqual(results['percentage'], 80)
        self.assertEqual(results['title'], "Great Work!")
        self.assertEqual(results['high_score'], 4)

        restarted = self._new_controller()
        self.assertEqual(restarted.high_scores.get("Science"), 4)

        with open(self.score_path, 'r', encoding='utf-8') as f:
            self.assertEqual(json.load(f), {HIGH_SCORES_KEY: {"Science": 4}})

    def test_worse_game_keeps_previous_best(self):
        self.controller.start_game("History")
        self._play(self.controller, correct=3)

        second = self._new_controller()
        second.start_game("History")
        self._play(second, correct=1)

        self.assertEqual(second.get_results()['high_score'], 3)
        self.assertEqual(self._new_controller().high_scores.get("History"), 3)

    def test_play_again_and_menu_cycle(self):
        self.controller.start_game("Entertainment")
        self._play(self.controller, correct=5)
        self.assertEqual(self.controller.get_results()['title'], "Perfect Score!")

        self.assertTrue(self.controller.play_again())
        self.assertEqual(self.controller.get_progress()['current_question'], 1)
        self._play(self.controller, correct=0)
        self.assertEqual(self.controller.get_results()['title'], "Keep Practicing!")

        self.controller.restart_game()
        self.assertIs(self.controller.state, GameState.MENU)
        self.assertEqual(self.controller.high_scores.get("Entertainment"), 5)

    def test_restart_mid_game(self):
        """Leaving mid-game records nothing and returns to the menu."""
        self.controller.start_game("General Knowledge")
        self.controller.submit_answer(self.controller.get_current_question().correct_answer)
        self.controller.next_question()

        self.controller.restart_game()

        self.assertIs(self.controller.state, GameState.MENU)
        self.assertEqual(self.controller.session.score, 0)
        self.assertFalse(os.path.exists(self.score_path))

    def test_unknown_category_plays_general_knowledge(self):
        self.controller.start_game("Geography")

        general = set(q.id for q in self.catalog.questions_for_category("General Knowledge"))
        self.assertEqual(set(q.id for q in self.controller.session.questions), general)

        self._play(self.controller, correct=2)
        self.assertEqual(self._new_controller().high_scores.get("Geography"), 2)
        self.assertEqual(self._new_controller().high_scores.get("General Knowledge"), 0)

    def test_unknown_category_with_empty_policy(self):
        self.config_manager.set_unknown_category_policy("empty")
        self.controller.start_game("Geography")

        self.assertEqual(self.controller.session.questions, [])
        self.controller.next_question()

        results = self.controller.get_results()
        self.assertEqual(results['total_questions'], 0)
        self.assertEqual(results['percentage'], 0)

    def test_corrupt_high_score_file_recovers(self):
        with open(self.score_path, 'w', encoding='utf-8') as f:
            f.write("garbage")

        logging.disable(logging.CRITICAL)
        try:
            controller = self._new_controller()
            controller.start_game("Science")
            self._play(controller, correct=2)
        finally:
            logging.disable(logging.NOTSET)

        self.assertEqual(self._new_controller().high_scores.all_scores(), {"Science": 2})


class TestCatalogFileIntegration(unittest.TestCase):
    """Games played from a catalog loaded off disk."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.catalog_path = Path(self.temp_dir) / "catalog.json"
        logging.disable(logging.CRITICAL)

    def tearDown(self):
        """Clean up test fixtures."""
        logging.disable(logging.NOTSET)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_game_from_json_catalog(self):
        TestFixtures.write_json(self.catalog_path, TestFixtures.create_valid_catalog_json())
        catalog = QuestionCatalog.from_json_file(str(self.catalog_path))
        controller = TestFixtures.create_controller(catalog)

        controller.start_game("Geography")

        self.assertEqual(len(controller.session.questions), 2)
        while controller.state is GameState.PLAYING:
            controller.submit_answer(1)
            controller.next_question()
        self.assertEqual(controller.session.score, 2)

    def test_broken_catalog_falls_back_to_builtin(self):
        with open(self.catalog_path, 'w', encoding='utf-8') as f:
            f.write("{ not json")

        catalog = QuestionCatalog.from_json_file(str(self.catalog_path))
        controller = TestFixtures.create_controller(catalog)

        self.assertTrue(catalog.has_load_errors())
        self.assertTrue(controller.start_game("Science"))
        self.assertEqual(len(controller.session.questions), 5)


class TestAsyncQuizFlow(unittest.IsolatedAsyncioTestCase):
    """Games driven through answer_question and the feedback delay."""

    async def test_two_sessions_run_independently(self):
        catalog = QuestionCatalog.default()
        first = TestFixtures.create_controller(catalog)
        second = TestFixtures.create_controller(catalog)

        first.start_game("Science")
        second.start_game("History")

        first.answer_question(first.get_current_question().correct_answer)
        second.answer_question(0)
        second.restart_game()

        self.assertTrue(await AsyncTestHelpers.wait_until(lambda: first.session.current_index == 1))
        self.assertIs(second.state, GameState.MENU)
        self.assertEqual(second.session.current_index, 0)

        first.shutdown()
        second.shutdown()


class TestMainConfiguration(unittest.TestCase):
    """Configuration loading done by the entry point."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_missing_config_uses_defaults(self):
        with patch('builtins.print'):
            config = main.load_config(Path(self.temp_dir) / "missing.json")
        self.assertEqual(config, {})

    def test_invalid_config_exits(self):
        path = Path(self.temp_dir) / "config.json"
        path.write_text("{ nope", encoding='utf-8')

        with patch('builtins.print'), self.assertRaises(SystemExit):
            main.load_config(path)

    def test_shipped_config_is_valid(self):
        config = main.load_config(Path(__file__).parent.parent / "config.json")

        config_manager = ConfigManager()
        result = config_manager.load_from_dict(config)

        self.assertTrue(result['success'], result['errors'])
        self.assertTrue(config_manager.validate_settings()['valid'])

    def test_environment_overrides_config(self):
        environment = {
            'QUIZMASTER_HIGH_SCORES': '/tmp/other_scores.json',
            'QUIZMASTER_CATALOG': '/tmp/catalog.json',
        }
        config = {"quiz": {"high_score_path": "./data/high_scores.json"}}

        with patch.dict(os.environ, environment):
            config = main.apply_environment_overrides(config)

        self.assertEqual(config['quiz']['high_score_path'], '/tmp/other_scores.json')
        self.assertEqual(config['quiz']['catalog_path'], '/tmp/catalog.json')

    def test_empty_environment_leaves_config(self):
        with patch.dict(os.environ, {}, clear=True):
            config = main.apply_environment_overrides({})
        self.assertEqual(config, {"quiz": {}})


if __name__ == '__main__':
    unittest.main()
