"""
Configuration manager for quiz settings.
"""
import logging
from typing import Any, Dict, List, Optional

from .models import QuizSettings, UnknownCategoryPolicy


class ConfigManager:
    """Manages quiz configuration settings."""

    # Default configuration values
    DEFAULT_QUESTION_LIMIT = 10
    DEFAULT_FEEDBACK_DELAY = 1.5
    DEFAULT_UNKNOWN_CATEGORY_POLICY = UnknownCategoryPolicy.FALLBACK
    DEFAULT_FALLBACK_CATEGORY = "General Knowledge"
    DEFAULT_HIGH_SCORE_PATH = "./data/high_scores.json"

    # Validation limits
    MIN_QUESTION_LIMIT = 1
    MAX_QUESTION_LIMIT = 100
    MIN_FEEDBACK_DELAY = 0
    MAX_FEEDBACK_DELAY = 10

    def __init__(self):
        """Initialize ConfigManager with default settings."""
        self.logger = logging.getLogger(__name__)
        self._settings = QuizSettings()

    def get_quiz_settings(self) -> QuizSettings:
        """
        Get current quiz settings.

        Returns:
            Copy of the current QuizSettings
        """
        return QuizSettings(
            question_limit=self._settings.question_limit,
            feedback_delay=self._settings.feedback_delay,
            unknown_category_policy=self._settings.unknown_category_policy,
            fallback_category=self._settings.fallback_category,
            high_score_path=self._settings.high_score_path,
            catalog_path=self._settings.catalog_path
        )

    def set_question_limit(self, limit: int) -> Dict[str, Any]:
        """
        Set the maximum number of questions per game.

        Args:
            limit: Number of questions

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(limit, int) or isinstance(limit, bool):
            return self._failure(
                f"Question limit must be an integer, got {type(limit).__name__}",
                f"❌ Invalid input: Expected a number, got {type(limit).__name__}"
            )

        if limit < self.MIN_QUESTION_LIMIT:
            return self._failure(
                f"Question limit must be at least {self.MIN_QUESTION_LIMIT}",
                f"❌ Too few questions: Minimum is {self.MIN_QUESTION_LIMIT}"
            )

        if limit > self.MAX_QUESTION_LIMIT:
            return self._failure(
                f"Question limit cannot exceed {self.MAX_QUESTION_LIMIT}",
                f"❌ Too many questions: Maximum is {self.MAX_QUESTION_LIMIT}"
            )

        self._settings.question_limit = limit
        return self._success(f"Question limit set to {limit}", f"✅ Games will use up to {limit} questions")

    def get_question_limit(self) -> int:
        return self._settings.question_limit

    def set_feedback_delay(self, delay: float) -> Dict[str, Any]:
        """
        Set the pause between answering and advancing to the next question.

        Args:
            delay: Delay in seconds

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(delay, (int, float)) or isinstance(delay, bool):
            return self._failure(
                f"Feedback delay must be a number, got {type(delay).__name__}",
                f"❌ Invalid input: Expected a number, got {type(delay).__name__}"
            )

        if delay < self.MIN_FEEDBACK_DELAY or delay > self.MAX_FEEDBACK_DELAY:
            return self._failure(
                f"Feedback delay must be between {self.MIN_FEEDBACK_DELAY} and {self.MAX_FEEDBACK_DELAY} seconds",
                f"❌ Delay out of range: Use {self.MIN_FEEDBACK_DELAY}-{self.MAX_FEEDBACK_DELAY} seconds"
            )

        self._settings.feedback_delay = float(delay)
        return self._success(f"Feedback delay set to {delay} seconds", f"✅ Feedback shown for {delay} seconds")

    def get_feedback_delay(self) -> float:
        return self._settings.feedback_delay

    def set_unknown_category_policy(self, policy) -> Dict[str, Any]:
        """
        Set how games started for an unknown category behave.

        Args:
            policy: UnknownCategoryPolicy or its string value ("fallback" / "empty")

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        try:
            resolved = UnknownCategoryPolicy(policy)
        except ValueError:
            valid = ", ".join(p.value for p in UnknownCategoryPolicy)
            return self._failure(
                f"Unknown category policy must be one of {valid}, got {policy!r}",
                f"❌ Invalid policy: Choose one of {valid}"
            )

        self._settings.unknown_category_policy = resolved
        return self._success(
            f"Unknown category policy set to {resolved.value}",
            f"✅ Unknown categories will use the '{resolved.value}' policy"
        )

    def get_unknown_category_policy(self) -> UnknownCategoryPolicy:
        return self._settings.unknown_category_policy

    def set_fallback_category(self, name: str) -> Dict[str, Any]:
        """Set the category substituted for unknown names under the fallback policy."""
        if not isinstance(name, str) or not name.strip():
            return self._failure(
                "Fallback category must be a non-empty string",
                "❌ Fallback category cannot be empty"
            )

        self._settings.fallback_category = name
        return self._success(f"Fallback category set to {name}", f"✅ Fallback category set to {name}")

    def get_fallback_category(self) -> str:
        return self._settings.fallback_category

    def set_high_score_path(self, path: str) -> Dict[str, Any]:
        """Set the JSON file used to persist high scores."""
        if not isinstance(path, str) or not path.strip():
            return self._failure(
                "High score path must be a non-empty string",
                "❌ High score file path cannot be empty"
            )

        self._settings.high_score_path = path
        return self._success(f"High score path set to {path}", f"✅ High scores will be saved to {path}")

    def get_high_score_path(self) -> str:
        return self._settings.high_score_path

    def set_catalog_path(self, path: Optional[str]) -> Dict[str, Any]:
        """Set the JSON catalog file, or None to use the built-in question bank."""
        if path is None:
            self._settings.catalog_path = None
            return self._success("Catalog path cleared", "✅ Using the built-in question bank")

        if not isinstance(path, str) or not path.strip():
            return self._failure(
                "Catalog path must be a non-empty string or None",
                "❌ Catalog file path cannot be empty"
            )

        self._settings.catalog_path = path
        return self._success(f"Catalog path set to {path}", f"✅ Questions will be loaded from {path}")

    def get_catalog_path(self) -> Optional[str]:
        return self._settings.catalog_path

    def load_from_dict(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply the ``quiz`` section of a configuration mapping.

        Unknown keys are ignored with a warning; invalid values keep the
        current setting and are reported.

        Args:
            config: Parsed configuration (the whole config.json document)

        Returns:
            Dictionary with overall success and the list of errors
        """
        quiz_config = config.get('quiz', {}) if isinstance(config, dict) else {}
        if not isinstance(quiz_config, dict):
            return {'success': False, 'errors': ["'quiz' section must be an object"]}

        setters = {
            'question_limit': self.set_question_limit,
            'feedback_delay': self.set_feedback_delay,
            'unknown_category_policy': self.set_unknown_category_policy,
            'fallback_category': self.set_fallback_category,
            'high_score_path': self.set_high_score_path,
            'catalog_path': self.set_catalog_path,
        }

        errors = []
        for key, value in quiz_config.items():
            setter = setters.get(key)
            if setter is None:
                self.logger.warning(f"Ignoring unknown configuration key 'quiz.{key}'")
                continue
            result = setter(value)
            if not result['success']:
                errors.append(f"quiz.{key}: {result['error']}")

        return {'success': not errors, 'errors': errors}

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values."""
        self._settings = QuizSettings(
            question_limit=self.DEFAULT_QUESTION_LIMIT,
            feedback_delay=self.DEFAULT_FEEDBACK_DELAY,
            unknown_category_policy=self.DEFAULT_UNKNOWN_CATEGORY_POLICY,
            fallback_category=self.DEFAULT_FALLBACK_CATEGORY,
            high_score_path=self.DEFAULT_HIGH_SCORE_PATH,
            catalog_path=None
        )
        self.logger.info("All settings reset to default values")

    def validate_settings(self) -> Dict[str, Any]:
        """
        Validate current settings and return validation results.

        Returns:
            Dictionary with validation results and any issues found
        """
        issues: List[str] = []
        settings = self._settings

        if (not isinstance(settings.question_limit, int) or
                not self.MIN_QUESTION_LIMIT <= settings.question_limit <= self.MAX_QUESTION_LIMIT):
            issues.append(f"Invalid question limit: {settings.question_limit}")

        if (not isinstance(settings.feedback_delay, (int, float)) or
                not self.MIN_FEEDBACK_DELAY <= settings.feedback_delay <= self.MAX_FEEDBACK_DELAY):
            issues.append(f"Invalid feedback delay: {settings.feedback_delay}")

        if not isinstance(settings.unknown_category_policy, UnknownCategoryPolicy):
            issues.append(f"Invalid unknown category policy: {settings.unknown_category_policy}")

        if not isinstance(settings.fallback_category, str) or not settings.fallback_category.strip():
            issues.append(f"Invalid fallback category: {settings.fallback_category}")

        if not isinstance(settings.high_score_path, str) or not settings.high_score_path.strip():
            issues.append(f"Invalid high score path: {settings.high_score_path}")

        return {
            "valid": not issues,
            "issues": issues
        }

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings.

        Returns:
            Human-readable string describing current settings
        """
        settings = self._settings
        return (
            f"Quiz Settings:\n"
            f"• Questions per game: {settings.question_limit}\n"
            f"• Feedback delay: {settings.feedback_delay} seconds\n"
            f"• Unknown categories: {settings.unknown_category_policy.value}"
            f" (fallback: {settings.fallback_category})\n"
            f"• High scores: {settings.high_score_path}\n"
            f"• Catalog: {settings.catalog_path or 'built-in'}"
        )

    def _success(self, message: str, user_message: str) -> Dict[str, Any]:
        self.logger.info(message)
        return {
            'success': True,
            'message': message,
            'user_message': user_message
        }

    def _failure(self, error_msg: str, user_message: str) -> Dict[str, Any]:
        self.logger.error(error_msg)
        return {
            'success': False,
            'error': error_msg,
            'user_message': user_message
        }
