import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from repokit.config import settings
from repokit.logging.logger import get_logger
from repokit.repository.attributes import replace_recursive

logger = get_logger("json_store")


class JsonAttributeStore:
    """Attributes kept in ``attributes.json`` under a repository storage path."""

    FILE_NAME = "attributes.json"

    def __init__(self, storage_path: Path):
        self.path = Path(storage_path) / self.FILE_NAME
        self._content: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self.path.is_file():
            return json.loads(self.path.read_text(encoding="utf-8")) or {}
        logger.info(f'The file "{self.path}" does not exist.')
        return {}

    def get_attributes(self, force_refresh: bool = False) -> Dict[str, Any]:
        if self._content is None or force_refresh:
            self._content = self._load()
        return self._content

    def get_attribute(self, key: str, locale: Optional[str] = None) -> Any:
        """Value for ``key``; per-locale dicts resolve to the requested locale."""
        locale = locale or settings.APP_LOCALE
        attribute = self.get_attributes().get(key) or None
        if isinstance(attribute, dict) and locale in attribute:
            return attribute[locale]
        return attribute

    def store_attributes(self, attributes: Mapping[str, Any]) -> Dict[str, Any]:
        merged = replace_recursive(self.get_attributes(force_refresh=True), dict(attributes))
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(merged, ensure_ascii=False), encoding="utf-8")
        self._content = merged
        logger.debug(f"Stored {len(attributes)} attribute(s) to {self.path}")
        return merged
