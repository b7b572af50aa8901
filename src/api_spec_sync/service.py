"""Host for sync passes against a YAML-backed persisted specification.

Loads the persisted specification, reconciles it with a live specification
supplied by the caller, saves the result and keeps it cached. Passes are
serialized: the persisted file is a single shared resource.
"""

import logging
import threading
from pathlib import Path

from api_spec_sync.config import SyncConfig
from api_spec_sync.engine.pipeline import reconcile
from api_spec_sync.model.base import ApiSpecification
from api_spec_sync.store.yaml_store import load_spec, save_spec

logger = logging.getLogger(__name__)


class SpecSyncService:
    """Runs whole sync passes under a lock and caches the last result."""

    def __init__(self, spec_path: Path, config: SyncConfig | None = None):
        self.spec_path = spec_path
        self.config = config or SyncConfig()
        self._lock = threading.Lock()
        self._current: ApiSpecification | None = None

    def synchronize(self, live: ApiSpecification) -> ApiSpecification:
        """Reconcile the stored specification with live, save and return it."""
        with self._lock:
            persisted = load_spec(self.spec_path)
            result = reconcile(persisted, live, self.config)
            save_spec(result, self.spec_path)
            self._current = result
            logger.info("Saved synchronized specification to %s", self.spec_path)
            return result.model_copy(deep=True)

    def current(self) -> ApiSpecification | None:
        """Last synchronized specification, falling back to the stored one."""
        with self._lock:
            if self._current is None:
                self._current = load_spec(self.spec_path)
            if self._current is None:
                return None
            return self._current.model_copy(deep=True)
