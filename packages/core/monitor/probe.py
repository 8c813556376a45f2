from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .types import ProbeKind

R = TypeVar("R")


class EnvironmentProbe(ABC, Generic[R]):
    """Interface for one OS subsystem check."""

    kind: ProbeKind

    @abstractmethod
    async def check(self) -> R:
        """
        Query the OS and classify the result.
        Must never raise: every failure maps to the probe's fail-safe default.
        """
        ...
