"""Abstract base class for all assessment pipeline stages."""

from abc import ABC, abstractmethod
from typing import Any
import logging

logger = logging.getLogger(__name__)


class BaseStage(ABC):
    """Base class for pipeline stages.

    Subclasses must implement:
        - stage_name: identifier used in stage_registry
        - run(**kwargs): compute and return the stage's typed schema

    Stages hold only immutable configuration, so a single instance can
    serve concurrent assessments.
    """

    stage_name: str = ""

    @abstractmethod
    def run(self, **kwargs: Any) -> Any:
        """Run the stage. Returns a Pydantic schema defined per stage."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(stage_name={self.stage_name!r})"
