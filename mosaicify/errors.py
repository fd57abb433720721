# mosaicify/errors.py
from __future__ import annotations

"""
Error taxonomy. Every error is fatal; nothing is retried.

  MosaicError        : base, carries the pipeline stage and offending path
  ConfigError        : bad grid parameters, empty library, unknown colour space
  DecodeError        : unreadable or corrupt image file
  InvariantViolation : internal shape/candidate checks that should never fire
"""

from pathlib import Path
from typing import Optional


class MosaicError(Exception):
    def __init__(
        self,
        message: str,
        *,
        stage: Optional[str] = None,
        path: Optional[Path] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.path = path

    def with_stage(self, stage: str) -> "MosaicError":
        """Tag with a stage name unless an inner stage already did."""
        if self.stage is None:
            self.stage = stage
        return self

    def __str__(self) -> str:
        text = self.message
        if self.stage:
            text = f"{self.stage}: {text}"
        if self.path is not None:
            text = f"{text} ({self.path})"
        return text


class ConfigError(MosaicError, ValueError):
    pass


class DecodeError(MosaicError, OSError):
    pass


class InvariantViolation(MosaicError, RuntimeError):
    pass


__all__ = ["MosaicError", "ConfigError", "DecodeError", "InvariantViolation"]
