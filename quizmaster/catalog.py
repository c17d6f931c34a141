"""
Question catalog: the read-only universe of questions grouped by category,
plus loading and validation of JSON catalog files.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models import Category, Question, UnknownCategoryPolicy
from .question_bank import BUILTIN_CATEGORIES

VALID_DIFFICULTIES = ("easy", "medium", "hard")
MAX_CATALOG_FILE_SIZE = 10 * 1024 * 1024  # 10MB


class QuestionCatalog:
    """Immutable collection of questions partitioned by category."""

    def __init__(self, entries: Sequence[Tuple[Category, Sequence[Question]]]):
        """
        Build a catalog from ``(category, questions)`` pairs.

        Registration order is preserved and drives ``all_questions`` and
        ``categories``. A later entry with an already registered name
        replaces the earlier one.

        Args:
            entries: Category metadata paired with its question list
        """
        self.logger = logging.getLogger(__name__)
        self._categories: Dict[str, Category] = {}
        self._questions: Dict[str, Tuple[Question, ...]] = {}
        self.load_errors: List[str] = []
        self.fallback_catalog_used = False

        for category, questions in entries:
            if category.name in self._categories:
                self.logger.warning(f"Duplicate category '{category.name}' replaces earlier registration")
            self._categories[category.name] = category
            self._questions[category.name] = tuple(questions)

        self.logger.debug(f"Catalog built with {len(self._categories)} categories")

    @classmethod
    def default(cls) -> "QuestionCatalog":
        """Catalog backed by the built-in question bank."""
        return cls(BUILTIN_CATEGORIES)

    @classmethod
    def from_json_file(cls, path: str) -> "QuestionCatalog":
        """
        Load a catalog from a JSON file, falling back to the built-in bank.

        Expected structure:
        {
            "categories": [
                {
                    "name": str,
                    "icon": str,
                    "question_count": int,  # Optional
                    "questions": [
                        {
                            "question": str,
                            "options": [str, ...],
                            "correct_answer": int,
                            "difficulty": "easy" | "medium" | "hard"  # Optional
                        }
                    ]
                }
            ]
        }

        Args:
            path: Path to the catalog file

        Returns:
            Loaded catalog; the built-in catalog with ``load_errors`` populated
            if the file could not be used
        """
        logger = logging.getLogger(__name__)
        errors: List[str] = []

        load_result = _load_catalog_file_safely(Path(path))
        if not load_result['success']:
            errors.append(f"{path}: {load_result['error']}")
            logger.error(f"Could not load catalog {path}: {load_result['error']}")
            return cls._fallback(errors)

        entries, entry_errors = _parse_catalog(load_result['data'])
        errors.extend(entry_errors)

        if not entries:
            logger.error(f"No usable categories in catalog {path}")
            errors.append("No usable categories found in catalog file")
            return cls._fallback(errors)

        catalog = cls(entries)
        catalog.load_errors = errors
        logger.info(f"Loaded catalog '{path}' with {len(entries)} categories")
        if errors:
            logger.warning(f"Encountered {len(errors)} catalog loading errors")
        return catalog

    @classmethod
    def _fallback(cls, errors: List[str]) -> "QuestionCatalog":
        catalog = cls.default()
        catalog.load_errors = errors
        catalog.fallback_catalog_used = True
        catalog.logger.warning("Using built-in question bank due to catalog loading failures")
        return catalog

    def questions_for_category(self, name: str) -> Tuple[Question, ...]:
        """
        Get the fixed question list for a category.

        Args:
            name: Category name

        Returns:
            The category's questions, or an empty tuple for an unknown name
        """
        return self._questions.get(name, ())

    def resolve_questions(
        self,
        name: str,
        policy: UnknownCategoryPolicy,
        fallback_category: str
    ) -> Tuple[Question, ...]:
        """
        Get questions for a category, applying ``policy`` to unknown names.

        Args:
            name: Requested category name
            policy: FALLBACK substitutes ``fallback_category``; EMPTY returns nothing
            fallback_category: Category used by the FALLBACK policy

        Returns:
            Question tuple, possibly empty
        """
        if self.has_category(name):
            return self.questions_for_category(name)

        if policy is UnknownCategoryPolicy.FALLBACK:
            self.logger.warning(f"Unknown category '{name}', falling back to '{fallback_category}'")
            return self.questions_for_category(fallback_category)

        self.logger.warning(f"Unknown category '{name}', no questions available")
        return ()

    def all_questions(self) -> List[Question]:
        """Every question, concatenated in category registration order."""
        combined: List[Question] = []
        for questions in self._questions.values():
            combined.extend(questions)
        return combined

    def categories(self) -> List[Category]:
        return list(self._categories.values())

    def get_category(self, name: str) -> Optional[Category]:
        return self._categories.get(name)

    def has_category(self, name: str) -> bool:
        return name in self._categories

    def get_question_count(self, name: str) -> int:
        """Number of questions actually available for a category (0 if unknown)."""
        return len(self.questions_for_category(name))

    def get_load_errors(self) -> List[str]:
        return self.load_errors.copy()

    def has_load_errors(self) -> bool:
        return len(self.load_errors) > 0

    def get_loading_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the catalog contents and of the last load.

        Returns:
            Dictionary with category counts, errors and fallback status
        """
        return {
            'total_categories': len(self._categories),
            'total_questions': len(self.all_questions()),
            'has_errors': self.has_load_errors(),
            'error_count': len(self.load_errors),
            'errors': self.get_load_errors(),
            'fallback_active': self.fallback_catalog_used,
            'available_categories': list(self._categories.keys())
        }


def validate_catalog_structure(data: Any) -> List[str]:
    """
    Validate the top-level shape of catalog JSON data.

    Per-question problems are reported later while parsing, so a single bad
    question does not reject the whole file.

    Args:
        data: Parsed JSON data

    Returns:
        List of structural problems; empty if the structure is valid
    """
    if not isinstance(data, dict):
        return ["Catalog data must be a JSON object"]

    if "categories" not in data:
        return ["Catalog data must contain a 'categories' key"]

    categories = data["categories"]
    if not isinstance(categories, list):
        return ["'categories' value must be an array"]

    if not categories:
        return ["Categories array cannot be empty"]

    issues = []
    for i, category_data in enumerate(categories):
        if not isinstance(category_data, dict):
            issues.append(f"Category {i} must be an object")
            continue
        if not isinstance(category_data.get("name"), str) or not category_data["name"].strip():
            issues.append(f"Category {i} missing 'name' string")
        if "icon" in category_data and not isinstance(category_data["icon"], str):
            issues.append(f"Category {i} 'icon' field must be a string")
        if "question_count" in category_data and not isinstance(category_data["question_count"], int):
            issues.append(f"Category {i} 'question_count' field must be an integer")
        if not isinstance(category_data.get("questions"), list):
            issues.append(f"Category {i} 'questions' field must be an array")

    return issues


def validate_question_data(data: Any, label: str) -> Optional[str]:
    """Return a description of what is wrong with one question entry, or None."""
    if not isinstance(data, dict):
        return f"{label} must be an object"
    if not isinstance(data.get("question"), str):
        return f"{label} missing 'question' string"
    options = data.get("options")
    if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
        return f"{label} 'options' field must be an array of strings"
    if len(options) < 2:
        return f"{label} needs at least 2 options"
    correct = data.get("correct_answer")
    if not isinstance(correct, int) or isinstance(correct, bool):
        return f"{label} 'correct_answer' field must be an integer"
    if not 0 <= correct < len(options):
        return f"{label} 'correct_answer' {correct} is out of range"
    if data.get("difficulty", "easy") not in VALID_DIFFICULTIES:
        return f"{label} 'difficulty' must be one of {', '.join(VALID_DIFFICULTIES)}"
    return None


def _parse_catalog(data: dict) -> Tuple[List[Tuple[Category, List[Question]]], List[str]]:
    logger = logging.getLogger(__name__)
    entries: List[Tuple[Category, List[Question]]] = []
    errors: List[str] = []

    for category_data in data["categories"]:
        name = category_data["name"]
        questions = []
        for j, question_data in enumerate(category_data["questions"]):
            problem = validate_question_data(question_data, f"Category '{name}' question {j}")
            if problem:
                logger.error(problem)
                errors.append(problem)
                continue
            questions.append(Question(
                category=name,
                text=question_data["question"],
                options=tuple(question_data["options"]),
                correct_answer=question_data["correct_answer"],
                difficulty=question_data.get("difficulty", "easy")
            ))

        question_count = category_data.get("question_count")
        if not isinstance(question_count, int):
            question_count = len(questions)

        category = Category(
            name=name,
            icon=category_data.get("icon", "questionmark"),
            question_count=question_count
        )
        entries.append((category, questions))

    return entries, errors


def _load_catalog_file_safely(file_path: Path) -> Dict[str, Any]:
    """
    Read and structurally validate a catalog file.

    Returns:
        Dictionary with success status, the parsed data, or an error message
    """
    try:
        if not file_path.exists():
            return {'success': False, 'error': "File not found"}

        if not os.access(file_path, os.R_OK):
            return {'success': False, 'error': "Permission denied: Cannot read file"}

        file_size = file_path.stat().st_size
        if file_size > MAX_CATALOG_FILE_SIZE:
            return {
                'success': False,
                'error': f"File too large ({file_size / 1024 / 1024:.1f}MB). "
                         f"Maximum size is {MAX_CATALOG_FILE_SIZE / 1024 / 1024}MB"
            }

        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        issues = validate_catalog_structure(data)
        if issues:
            return {'success': False, 'error': "; ".join(issues)}

        return {'success': True, 'data': data}

    except json.JSONDecodeError as e:
        return {'success': False, 'error': f"Invalid JSON: {e}"}
    except PermissionError:
        return {'success': False, 'error': "Permission denied"}
    except OSError as e:
        return {'success': False, 'error': f"System error: {e}"}
