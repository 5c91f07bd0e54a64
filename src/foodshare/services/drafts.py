"""Local persistence of the post composition draft."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from foodshare.domain.drafts import Draft

logger = logging.getLogger(__name__)

DEFAULT_DRAFT_KEY = "foodshare:create-draft"


class KeyValueStore(Protocol):
    """Durable local string store in the style of browser local storage."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""

    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    def remove_item(self, key: str) -> None:
        """Remove a key if present."""


@dataclass
class DraftService:
    """Saves, restores and clears the single composition draft slot."""

    store: KeyValueStore
    key: str = DEFAULT_DRAFT_KEY

    def save_draft(self, draft: Draft) -> bool:
        """Overwrite the stored draft."""
        self.store.set_item(self.key, draft.model_dump_json(by_alias=True))
        return True

    def load_draft(self) -> Draft:
        """Return the stored draft, or an empty one if missing or malformed."""
        raw = self.store.get_item(self.key)
        if raw is None:
            return Draft()
        try:
            return Draft.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding malformed draft stored under %s", self.key)
            return Draft()

    def clear_draft(self) -> None:
        """Remove the stored draft."""
        self.store.remove_item(self.key)
