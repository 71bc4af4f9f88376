"""Expression resources per state and carrier"""

import json
import random
from typing import List, Optional, Union

from .models import ExpressionResource, PetCarrier, PetState


class ResourceManager:
    """Loads expression resources and looks them up"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self._resources: List[ExpressionResource] = []

    def load(self, data: Union[str, bytes]):
        """Replace the resources from a JSON array"""
        items = json.loads(data)
        self._resources = [ExpressionResource.from_dict(item) for item in items]

    def resources(self, state: PetState, carrier: PetCarrier) -> List[ExpressionResource]:
        """Resources for a state on a carrier, lowest priority value first"""
        return sorted(
            (r for r in self._resources if r.state == state and r.carrier == carrier),
            key=lambda r: r.priority
        )

    def random_resource(self, state: PetState, carrier: PetCarrier) -> Optional[ExpressionResource]:
        matches = self.resources(state, carrier)
        return self.rng.choice(matches) if matches else None

    def for_context(
        self,
        state: PetState,
        carrier: PetCarrier,
        context: str,
        minutes: Optional[int] = None
    ) -> List[ExpressionResource]:
        """Resources whose triggers match a context (and duration, if given)"""
        return [
            r for r in self.resources(state, carrier)
            if any(t.matches(context, minutes) for t in r.triggers)
        ]
