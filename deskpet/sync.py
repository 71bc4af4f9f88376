"""Pushes the pet state to every carrier through the shared store"""

import logging
import sqlite3
from collections import deque
from typing import Deque, Optional

from .database import SharedStore, store as default_store
from .icons import IconManager, icon_manager
from .messages import StateMessageManager, state_messages
from .models import CarrierSyncState, PetCarrier, PetState
from .widget import WidgetCenter
from . import keys

logger = logging.getLogger(__name__)

# Sync records kept in memory for long-running processes
MAX_SYNC_RECORDS = 100


class SyncManager:
    """Writes state, emotion, message and icon to the group suite"""

    def __init__(
        self,
        store: Optional[SharedStore] = None,
        messages: Optional[StateMessageManager] = None,
        icons: Optional[IconManager] = None,
        widget_center: Optional[WidgetCenter] = None
    ):
        self.store = store or default_store
        self.messages = messages or state_messages
        self.icons = icons or icon_manager
        self.widget_center = widget_center or WidgetCenter(self.store)
        self.carrier_states: Deque[CarrierSyncState] = deque(maxlen=MAX_SYNC_RECORDS)

    def update_all_carriers(self, state: PetState) -> CarrierSyncState:
        """
        Publish a new pet state

        Args:
            state: State to show everywhere

        Returns:
            The recorded sync entry
        """
        emotion = state.emotion

        # Picking a message marks it used, which also writes to the store
        try:
            message = self.messages.get_message(state)
            icon = self.icons.get_icon(state)

            self.store.set(keys.SHARED_STATE, state.value)
            self.store.set(keys.SHARED_EMOTION, emotion.value)
            self.store.set(keys.SHARED_STATE_MESSAGE, message)
            self.store.set(keys.SHARED_ICON, icon)
            self.widget_center.reload_all_timelines()
        except sqlite3.OperationalError:
            logger.exception("Could not publish state %s to the shared store", state.value)
            self._record(state, success=False)
            raise

        logger.info("Pet is now %s (%s) %s %s", state.value, emotion.value, icon, message)

        return self._record(state, success=True)

    def current_state(self) -> Optional[PetState]:
        """Read the last published state, or None if nothing was published"""
        raw = self.store.get(keys.SHARED_STATE)
        return PetState.parse(raw) if raw else None

    def _record(self, state: PetState, success: bool) -> CarrierSyncState:
        entry = CarrierSyncState(
            carrier=PetCarrier.WIDGET,
            last_state=state,
            last_success=success
        )
        self.carrier_states.append(entry)
        return entry


# Global sync manager instance
sync_manager = SyncManager()
