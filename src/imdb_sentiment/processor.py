from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


class Processor(BaseModel, ABC):
    """Named pipeline stage configured through pydantic fields."""

    name: str

    @abstractmethod
    def compute(self) -> Any:
        """Run the stage (must be implemented by subclasses)."""
        raise NotImplementedError
