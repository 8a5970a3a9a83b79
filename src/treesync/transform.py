from __future__ import annotations

from typing import TypeAlias

import inspect
from collections.abc import Awaitable
from dataclasses import dataclass

from .models import Transformer, TransformerOutput


@dataclass(frozen=True)
class Skip:
    """Transformer declined; the file is copied or linked as usual."""


@dataclass(frozen=True)
class Literal:
    content: str | bytes


@dataclass(frozen=True)
class Deferred:
    awaitable: Awaitable[TransformerOutput]


TransformOutcome: TypeAlias = Skip | Literal | Deferred


def classify_output(value: object) -> TransformOutcome:
    if value is None:
        return Skip()
    if isinstance(value, (str, bytes)):
        return Literal(value)
    if isinstance(value, (bytearray, memoryview)):
        return Literal(bytes(value))
    if inspect.isawaitable(value):
        return Deferred(value)
    raise TypeError(
        f"transformer must return None, str, bytes or an awaitable, got {type(value).__name__}"
    )


async def resolve_content(transformer: Transformer, path: str) -> str | bytes | None:
    outcome = classify_output(transformer(path))
    if isinstance(outcome, Deferred):
        outcome = classify_output(await outcome.awaitable)
        if isinstance(outcome, Deferred):
            raise TypeError(f"transformer for {path} resolved to another awaitable")
    if isinstance(outcome, Literal):
        return outcome.content
    return None
