"""JSON file-backed state repository."""

import logging
from dataclasses import dataclass
from pathlib import Path

from macro_log.domain.state import PersistedState
from macro_log.services.state import StateRepository

_logger = logging.getLogger(__name__)


@dataclass
class JsonStateRepository(StateRepository):
    """Keeps the state snapshot in a single JSON file."""

    path: Path

    def load(self) -> PersistedState | None:
        """Read the snapshot, or return None when the file does not exist."""
        if not self.path.exists():
            return None
        return PersistedState.model_validate_json(self.path.read_text("utf-8"))

    def save(self, state: PersistedState) -> None:
        """Write the snapshot to a temporary file and swap it into place."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temporary = self.path.with_name(f"{self.path.name}.tmp")
        temporary.write_text(
            state.model_dump_json(by_alias=True, indent=2), encoding="utf-8"
        )
        temporary.replace(self.path)
        _logger.debug("Saved state to %s", self.path)
