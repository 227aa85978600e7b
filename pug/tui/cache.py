"""A cache of page models.

Retains what the user did on a page, such as the selected row, so that it is
still there when they come back to the page.
"""

from __future__ import annotations

from typing import Any, Dict, Generic, Hashable, List, Optional, TypeVar

K = TypeVar("K", bound=Hashable)


class Cache(Generic[K]):
    """Maps keys to models.

    A model has an ``update(msg)`` method returning the updated model and a
    command, which may be None.
    """

    def __init__(self) -> None:
        self._models: Dict[K, Any] = {}

    def __len__(self) -> int:
        return len(self._models)

    def exists(self, key: K) -> bool:
        return key in self._models

    def get(self, key: K) -> Optional[Any]:
        """Return the model for the key, or None if there is none."""
        return self._models.get(key)

    def put(self, key: K, model: Any) -> None:
        self._models[key] = model

    def update_all(self, msg: Any) -> List[Any]:
        """Send a message to every model; return their commands."""
        return [self.update(key, msg) for key in list(self._models)]

    def update(self, key: K, msg: Any) -> Optional[Any]:
        """Send a message to the model for the key and store the result.

        Returns the model's command, or None if no model is cached for the key.
        """
        model = self._models.get(key)
        if model is None:
            return None
        updated, cmd = model.update(msg)
        self._models[key] = updated
        return cmd