"""
Unit tests for ConfigManager class.
"""
import logging
import unittest

from quizmaster.config_manager import ConfigManager
from quizmaster.models import QuizSettings, UnknownCategoryPolicy


class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager functionality."""

    def setUp(self):
        """Set up test fixtures before each test method."""
        self.config_manager = ConfigManager()

        # Suppress logging during tests
        logging.disable(logging.CRITICAL)

    def tearDown(self):
        """Clean up after each test method."""
        logging.disable(logging.NOTSET)

    def test_initialization_with_defaults(self):
        """Test that ConfigManager initializes with correct default values."""
        settings = self.config_manager.get_quiz_settings()

        self.assertIsInstance(settings, QuizSettings)
        self.assertEqual(settings.question_limit, 10)
        self.assertEqual(settings.feedback_delay, 1.5)
        self.assertIs(settings.unknown_category_policy, UnknownCategoryPolicy.FALLBACK)
        self.assertEqual(settings.fallback_category, "General Knowledge")
        self.assertEqual(settings.high_score_path, "./data/high_scores.json")
        self.assertIsNone(settings.catalog_path)

    def test_get_quiz_settings_returns_copy(self):
        """Mutating the returned settings does not change the manager."""
        settings = self.config_manager.get_quiz_settings()
        settings.question_limit = 42
        self.assertEqual(self.config_manager.get_question_limit(), 10)

    def test_set_question_limit_valid_values(self):
        """Test setting valid question limit values."""
        for value in (1, 5, 100):
            result = self.config_manager.set_question_limit(value)
            self.assertTrue(result['success'])
            self.assertEqual(self.config_manager.get_question_limit(), value)

    def test_set_question_limit_invalid_values(self):
        """Test setting invalid question limit values."""
        for value in ("5", 5.5, True, None, 0, -1, 101):
            with self.subTest(value=value):
                result = self.config_manager.set_question_limit(value)
                self.assertFalse(result['success'])
                self.assertIn('error', result)
                self.assertIn('user_message', result)
        self.assertEqual(self.config_manager.get_question_limit(), 10)

    def test_set_feedback_delay(self):
        """Feedback delay accepts ints and floats within range."""
        self.assertTrue(self.config_manager.set_feedback_delay(0)['success'])
        self.assertEqual(self.config_manager.get_feedback_delay(), 0.0)

        self.assertTrue(self.config_manager.set_feedback_delay(2.5)['success'])
        self.assertEqual(self.config_manager.get_feedback_delay(), 2.5)

        for value in ("1", -0.1, 10.5, False):
            with self.subTest(value=value):
                self.assertFalse(self.config_manager.set_feedback_delay(value)['success'])
        self.assertEqual(self.config_manager.get_feedback_delay(), 2.5)

    def test_set_unknown_category_policy(self):
        """Policy accepts enum members and their string values."""
        result = self.config_manager.set_unknown_category_policy("empty")
        self.assertTrue(result['success'])
        self.assertIs(self.config_manager.get_unknown_category_policy(), UnknownCategoryPolicy.EMPTY)

        result = self.config_manager.set_unknown_category_policy(UnknownCategoryPolicy.FALLBACK)
        self.assertTrue(result['success'])
        self.assertIs(self.config_manager.get_unknown_category_policy(), UnknownCategoryPolicy.FALLBACK)

        result = self.config_manager.set_unknown_category_policy("strict")
        self.assertFalse(result['success'])
        self.assertIn("fallback", result['error'])

    def test_set_string_settings(self):
        """Path and fallback category settings reject empty values."""
        self.assertTrue(self.config_manager.set_fallback_category("Science")['success'])
        self.assertEqual(self.config_manager.get_fallback_category(), "Science")
        self.assertFalse(self.config_manager.set_fallback_category("  ")['success'])

        self.assertTrue(self.config_manager.set_high_score_path("/tmp/scores.json")['success'])
        self.assertEqual(self.config_manager.get_high_score_path(), "/tmp/scores.json")
        self.assertFalse(self.config_manager.set_high_score_path("")['success'])
        self.assertFalse(self.config_manager.set_high_score_path(None)['success'])

    def test_set_catalog_path(self):
        self.assertTrue(self.config_manager.set_catalog_path("questions.json")['success'])
        self.assertEqual(self.config_manager.get_catalog_path(), "questions.json")

        self.assertTrue(self.config_manager.set_catalog_path(None)['success'])
        self.assertIsNone(self.config_manager.get_catalog_path())

        self.assertFalse(self.config_manager.set_catalog_path("")['success'])

    def test_load_from_dict(self):
        """The quiz section of config.json is applied key by key."""
        result = self.config_manager.load_from_dict({
            "quiz": {
                "question_limit": 5,
                "feedback_delay": 0.5,
                "unknown_category_policy": "empty",
                "catalog_path": None
            },
            "logging": {"level": "DEBUG"}
        })

        self.assertTrue(result['success'])
        self.assertEqual(result['errors'], [])
        settings = self.config_manager.get_quiz_settings()
        self.assertEqual(settings.question_limit, 5)
        self.assertEqual(settings.feedback_delay, 0.5)
        self.assertIs(settings.unknown_category_policy, UnknownCategoryPolicy.EMPTY)

    def test_load_from_dict_reports_errors_and_keeps_defaults(self):
        result = self.config_manager.load_from_dict({
            "quiz": {"question_limit": 0, "feedback_delay": 1, "mystery": True}
        })

        self.assertFalse(result['success'])
        self.assertEqual(len(result['errors']), 1)
        self.assertIn("quiz.question_limit", result['errors'][0])
        self.assertEqual(self.config_manager.get_question_limit(), 10)
        self.assertEqual(self.config_manager.get_feedback_delay(), 1.0)

    def test_load_from_dict_rejects_non_object_section(self):
        result = self.config_manager.load_from_dict({"quiz": ["not", "an", "object"]})
        self.assertFalse(result['success'])

    def test_load_from_empty_dict(self):
        result = self.config_manager.load_from_dict({})
        self.assertTrue(result['success'])

    def test_reset_to_defaults(self):
        self.config_manager.set_question_limit(3)
        self.config_manager.set_unknown_category_policy("empty")
        self.config_manager.set_catalog_path("x.json")

        self.config_manager.reset_to_defaults()

        settings = self.config_manager.get_quiz_settings()
        self.assertEqual(settings.question_limit, ConfigManager.DEFAULT_QUESTION_LIMIT)
        self.assertIs(settings.unknown_category_policy, UnknownCategoryPolicy.FALLBACK)
        self.assertIsNone(settings.catalog_path)

    def test_validate_settings(self):
        validation = self.config_manager.validate_settings()
        self.assertTrue(validation["valid"])
        self.assertEqual(validation["issues"], [])

        # Bypass the setters to simulate a corrupted value
        self.config_manager._settings.question_limit = 0
        validation = self.config_manager.validate_settings()
        self.assertFalse(validation["valid"])
        self.assertIn("Invalid question limit: 0", validation["issues"])

    def test_settings_summary(self):
        self.config_manager.set_question_limit(7)
        self.config_manager.set_feedback_delay(2)

        summary = self.config_manager.get_settings_summary()

        self.assertIn("Questions per game: 7", summary)
        self.assertIn("2.0 seconds", summary)
        self.assertIn("fallback", summary)
        self.assertIn("built-in", summary)


if __name__ == '__main__':
    unittest.main()
