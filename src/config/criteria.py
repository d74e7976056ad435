"""Load the criteria catalogue (evaluation key -> criteria list) from YAML or JSON."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from src.evaluator.exceptions import ConfigurationError, CriteriaNotFoundError

logger = logging.getLogger(__name__)

RATING_LEVELS_KEY = "ratingLevels"


class CriterionDefinition(BaseModel):
    """A single criterion a participant is scored on."""

    model_config = ConfigDict(extra="allow")

    id: int | str
    name: str = ""
    description: str = ""


class CriteriaSet(BaseModel):
    """Criteria for one evaluation key plus the shared rating levels."""

    criteria: list[CriterionDefinition]
    rating_levels: list[dict[str, Any]] = Field(default_factory=list)

    def to_response(self) -> dict[str, Any]:
        return {
            "criteria": [c.model_dump() for c in self.criteria],
            "ratingLevels": self.rating_levels,
        }


class CriteriaCatalogue(BaseModel):
    """Static lookup table of criteria sets keyed by evaluation key."""

    sets: dict[str, list[CriterionDefinition]] = Field(default_factory=dict)
    rating_levels: list[dict[str, Any]] = Field(default_factory=list)

    def get(self, evaluation_key: str) -> CriteriaSet:
        """Return the criteria set for ``evaluation_key``.

        Raises:
            CriteriaNotFoundError: No criteria are defined for the key.
        """
        criteria = self.sets.get(evaluation_key)
        if criteria is None:
            raise CriteriaNotFoundError(
                "Criteria not found", context={"evaluationKey": evaluation_key}
            )
        return CriteriaSet(criteria=criteria, rating_levels=self.rating_levels)


def load_criteria_catalogue(path: Path) -> CriteriaCatalogue:
    """Load the catalogue from ``path``. Falls back to an empty catalogue.

    Every top-level key except ``ratingLevels`` names an evaluation and maps to
    its criteria list. JSON files load as well, YAML being a superset.

    Raises:
        ConfigurationError: The file exists but is not a valid catalogue.
    """
    if not path.exists():
        logger.warning("Criteria file %s not found; no criteria available", path)
        return CriteriaCatalogue()

    try:
        with open(path, encoding="utf-8") as f:
            data: Any = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Failed to read criteria: {exc}", context={"path": str(path)}) from exc

    if not isinstance(data, dict):
        raise ConfigurationError("Criteria file must map evaluation keys to lists", context={"path": str(path)})

    rating_levels = data.get(RATING_LEVELS_KEY) or []
    sets = {str(k): v for k, v in data.items() if k != RATING_LEVELS_KEY}
    try:
        return CriteriaCatalogue(sets=sets, rating_levels=rating_levels)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid criteria catalogue: {exc}", context={"path": str(path)}) from exc
