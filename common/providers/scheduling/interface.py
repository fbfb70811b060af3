from abc import ABC, abstractmethod
from typing import Any, Dict


class SchedulerProviderInterface(ABC):
    """Interface for deferred-trigger scheduling services."""

    @abstractmethod
    async def create_trigger(
        self, name: str, fire_at: int, payload: Dict[str, Any]
    ) -> None:
        """
        Create a one-shot trigger.

        Args:
            name: Deterministic trigger name
            fire_at: Fire time in epoch seconds (UTC)
            payload: Action payload delivered when the trigger fires

        Raises:
            ConflictError: If a trigger with this name already exists
            DependencyError: On any other scheduler failure
        """
        pass

    @abstractmethod
    async def update_trigger(
        self, name: str, fire_at: int, payload: Dict[str, Any]
    ) -> None:
        """
        Replace fire time and payload of an existing trigger.

        Raises:
            DependencyError: On scheduler failure
        """
        pass

    @abstractmethod
    async def delete_trigger(self, name: str) -> None:
        """
        Delete a trigger.

        Raises:
            NotFoundError: If no trigger with this name exists
            DependencyError: On any other scheduler failure
        """
        pass
