"""
Guideline loader - imports guidelines from a JSON file into the guideline store.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from shopping_assistant.core.errors import InputValidationError
from shopping_assistant.core.models import Guideline
from shopping_assistant.db.repositories import GuidelineRepository

logger = logging.getLogger(__name__)


def read_guidelines(file_path: str | Path) -> list[Guideline]:
    """
    Parse a guideline file.

    The file holds a JSON list of guideline objects. Every entry is
    validated before anything is stored.
    """
    file_path = Path(file_path)
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise InputValidationError(f"{file_path.name}: expected a list of guidelines")

    guidelines = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise InputValidationError(f"{file_path.name}[{index}]: expected an object")
        try:
            guidelines.append(Guideline.from_dict(entry))
        except InputValidationError as e:
            raise InputValidationError(f"{file_path.name}[{index}]: {e}") from e
    return guidelines


class GuidelineLoader:
    """Loads guideline files into the guideline store."""

    def __init__(self, repository: Optional[GuidelineRepository] = None):
        self.repository = repository or GuidelineRepository()

    async def load_file(self, file_path: str | Path, replace: bool = False) -> dict:
        """
        Load guidelines from file.

        Args:
            file_path: Path to a JSON guideline file
            replace: Overwrite stored guidelines that have the same name

        Returns:
            Statistics about loaded data
        """
        file_path = Path(file_path)
        guidelines = read_guidelines(file_path)

        existing = {g.name: g for g in await self.repository.list()}
        stats = {
            "file": file_path.name,
            "total": len(guidelines),
            "created": 0,
            "updated": 0,
            "skipped": 0,
        }

        for guideline in guidelines:
            current = existing.get(guideline.name)
            if current is None:
                await self.repository.create(guideline)
                stats["created"] += 1
            elif replace:
                changes = guideline.to_dict()
                changes.pop("id")
                await self.repository.update(current.id, **changes)
                stats["updated"] += 1
            else:
                stats["skipped"] += 1

        logger.info(f"Guidelines loaded from {file_path.name}: {stats}")
        return stats


async def load_guidelines(file_path: str | Path, replace: bool = False) -> dict:
    """Convenience function to load a guideline file."""
    loader = GuidelineLoader()
    return await loader.load_file(file_path, replace=replace)
