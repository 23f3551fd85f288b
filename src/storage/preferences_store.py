from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from produtivo.models import PlannerPreferences

logger = logging.getLogger(__name__)


class PreferencesStore:
    """JSON file holding the planner defaults (work hours, horizon, time zone)."""

    def __init__(self, path: str = "data/preferences.json"):
        self.path = Path(path)

    def load(self) -> PlannerPreferences:
        """
        Returns defaults if the file is missing, unreadable or fails validation.
        """
        if not self.path.exists():
            return PlannerPreferences()

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return PlannerPreferences(**data)
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return PlannerPreferences()

    def save(self, prefs: PlannerPreferences) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(prefs.model_dump(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
