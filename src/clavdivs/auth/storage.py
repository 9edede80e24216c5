"""File persistence for the authentication profile store."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from clavdivs.auth.profile_store import AuthProfileStore
from clavdivs.auth.types import AuthProfileStoreData

logger = logging.getLogger(__name__)


class FileProfileStorage:
    """Loads and saves the profile store as a single JSON document."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> AuthProfileStore:
        """Load the store. Returns an empty store if the file does not exist."""
        if not self.path.exists():
            logger.debug("No profile store at %s, starting empty", self.path)
            return AuthProfileStore()

        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)

        return AuthProfileStore(AuthProfileStoreData.model_validate(data))

    def save(self, store: AuthProfileStore) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Atomic write: write to temp file, then rename
        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=".tmp_",
            suffix=".json",
        )

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(store.to_dict(), f, indent=2)
                f.write("\n")

            os.replace(temp_path, self.path)
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

        logger.debug("Saved profile store to %s", self.path)


__all__ = ["FileProfileStorage"]
