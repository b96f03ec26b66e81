"""Catalog storage using JSON files."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from chat_composer.catalog.models import Catalog


logger = logging.getLogger(__name__)


class CatalogStorage:
    """JSON file storage for a workspace catalog snapshot."""

    def __init__(self, path: Path | None = None):
        """Initialize storage.

        Args:
            path: Catalog file location.
                  Defaults to ~/.chat-composer/catalog.json
        """
        if path is None:
            path = Path.home() / '.chat-composer' / 'catalog.json'

        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Catalog:
        """Load the catalog from disk.

        Returns:
            Catalog instance; empty when the file is missing or unreadable.
        """
        if not self._path.exists():
            return Catalog()

        try:
            with open(self._path, encoding='utf-8') as f:
                data = json.load(f)
            return Catalog.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError, ValueError) as e:
            logger.warning(f'Failed to load catalog from {self._path}: {e}')
            return Catalog()

    def save(self, catalog: Catalog) -> None:
        """Save the catalog to disk.

        Args:
            catalog: Catalog to save.
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)

        with open(self._path, 'w', encoding='utf-8') as f:
            json.dump(catalog.model_dump(mode='json', by_alias=True), f, indent=2, ensure_ascii=False)

        logger.debug(f'Saved catalog to {self._path}')
