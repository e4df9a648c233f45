"""Engine exceptions."""

from __future__ import annotations

from typing import Optional


class EngineError(Exception):
    """Base class for errors raised by the engine."""


class DialogueBuildError(EngineError):
    """
    Raised when a dialogue tree fails validation in build().

    Attributes:
        node_id: Node the broken reference starts from (if known)
        choice_key: Choice holding the broken reference (if known)
    """

    def __init__(
        self,
        message: str,
        node_id: Optional[str] = None,
        choice_key: Optional[str] = None,
    ):
        super().__init__(message)
        self.node_id = node_id
        self.choice_key = choice_key


class UnknownModuleError(EngineError, KeyError):
    """Raised when a module id is not registered."""

    def __init__(self, module_id: str):
        super().__init__(f"Module not registered: {module_id}")
        self.module_id = module_id

    def __str__(self) -> str:
        return self.args[0]
