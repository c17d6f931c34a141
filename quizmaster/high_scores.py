"""
Persistent best-score-per-category table.
"""
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

HIGH_SCORES_KEY = "highScores"


class HighScoreStore:
    """
    Maps category names to the best score ever achieved.

    Scores are kept in memory and, when a path is given, written to a JSON
    file under the single ``highScores`` key after every change.
    """

    def __init__(self, path: Optional[str] = None):
        """
        Initialize the store and load any existing scores.

        Args:
            path: JSON file to persist to, or None for an in-memory store
        """
        self.logger = logging.getLogger(__name__)
        self.path = Path(path) if path else None
        self._scores: Dict[str, int] = {}
        self.last_error: Optional[str] = None

        if self.path is not None:
            self._scores = self._load()

    def get(self, category_name: str) -> int:
        """Best score for a category, 0 if none recorded."""
        return self._scores.get(category_name, 0)

    def record_if_higher(self, category_name: str, candidate_score: int) -> bool:
        """
        Store ``max(get(category_name), candidate_score)``.

        Args:
            category_name: Category the score was achieved in
            candidate_score: Score of a finished session

        Returns:
            True if the stored value changed, False otherwise
        """
        best = max(self.get(category_name), candidate_score)
        if category_name in self._scores and best == self._scores[category_name]:
            return False
        if category_name not in self._scores and best == 0:
            # Absent already reads as 0; avoid writing a no-op entry.
            return False

        self._scores[category_name] = best
        self.logger.info(f"New high score for '{category_name}': {best}")
        self._save()
        return True

    def all_scores(self) -> Dict[str, int]:
        return dict(self._scores)

    def clear(self) -> None:
        """Remove every stored score."""
        self._scores.clear()
        self._save()
        self.logger.info("High scores cleared")

    def _load(self) -> Dict[str, int]:
        if not self.path.exists():
            self.logger.debug(f"No high score file at {self.path}, starting empty")
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            self.last_error = f"Invalid JSON in {self.path}: {e}"
            self.logger.error(self.last_error)
            return {}
        except OSError as e:
            self.last_error = f"Failed to read high scores {self.path}: {e}"
            self.logger.error(self.last_error)
            return {}

        table = data.get(HIGH_SCORES_KEY) if isinstance(data, dict) else None
        if not isinstance(table, dict):
            self.last_error = f"High score file {self.path} has no '{HIGH_SCORES_KEY}' object"
            self.logger.error(self.last_error)
            return {}

        scores = {}
        for name, value in table.items():
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                scores[name] = value
            else:
                self.logger.warning(f"Skipping invalid high score for '{name}': {value!r}")

        self.logger.info(f"Loaded {len(scores)} high scores from {self.path}")
        return scores

    def _save(self) -> None:
        if self.path is None:
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump({HIGH_SCORES_KEY: self._scores}, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
            self.last_error = None
        except OSError as e:
            self.last_error = f"Failed to write high scores {self.path}: {e}"
            self.logger.error(self.last_error)
