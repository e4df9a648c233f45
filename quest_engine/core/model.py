"""
Model base class for validated records.

Models are plain data containers validated by Pydantic. Progress records,
positions and engine configuration derive from it; authored dialogue
content (nodes, conditions, actions) stays in dataclasses because it
carries callables and object references.

Usage:
    class Position(Model):
        x: int = 0
        y: int = 0
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """
    Base class for all validated records.

    Pydantic gives us:
    - Validation on construction and assignment
    - Serialization via model_dump()
    - Default values
    """

    model_config = ConfigDict(
        # Allow arbitrary types (callables, task references)
        arbitrary_types_allowed=True,
        validate_assignment=True,
        extra='forbid',
    )
