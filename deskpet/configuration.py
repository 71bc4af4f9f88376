"""Persisted pet configuration"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from .database import SharedStore, store as default_store
from .models import PetConfiguration
from . import keys

logger = logging.getLogger(__name__)

ConfigListener = Callable[[PetConfiguration], None]


class ConfigurationManager:
    """Holds the current PetConfiguration and tells listeners about changes"""

    def __init__(self, store: Optional[SharedStore] = None):
        self.store = store or default_store
        self._listeners: List[ConfigListener] = []
        self.current = self._load()

    def update(self, configuration: PetConfiguration):
        """Replace the current configuration"""
        configuration.last_updated = datetime.now()
        self.current = configuration
        self.store.set(keys.PET_CONFIGURATION, configuration.to_dict(), suite=keys.STANDARD)
        logger.info("Pet configuration updated (%s)", configuration.name)
        for listener in list(self._listeners):
            listener(configuration)

    def apply_template(self, template: PetConfiguration):
        """Adopt a preset configuration under a fresh id"""
        configuration = PetConfiguration.from_dict(template.to_dict())
        configuration.id = PetConfiguration().id
        self.update(configuration)

    def add_listener(self, listener: ConfigListener):
        self._listeners.append(listener)

    def remove_listener(self, listener: ConfigListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _load(self) -> PetConfiguration:
        raw = self.store.get(keys.PET_CONFIGURATION, suite=keys.STANDARD)
        if not raw:
            return PetConfiguration()
        try:
            return PetConfiguration.from_dict(raw)
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.warning("Stored pet configuration is unreadable, using defaults")
            return PetConfiguration()
