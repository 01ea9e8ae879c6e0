# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fatal rewrite errors.

The pipeline targets a closed set of input shapes. Anything else is a defect
in the pipeline (or an unsupported crate), never a runtime condition to
recover from, so these errors abort the whole run. They are `ValueError`
subclasses carrying a best-effort location so the CLI can report a pinned
diagnostic instead of a raw traceback.
"""

from __future__ import annotations

from .diagnostics import Diagnostic
from .span import Span


class RewriteError(ValueError):
	"""Base class for errors that abort rewriting of a module."""

	phase = "rewrite"

	def __init__(self, message: str, *, loc: object | None = None) -> None:
		super().__init__(message)
		self.loc = Span.from_loc(loc)

	def to_diagnostic(self, *, file: str | None = None) -> Diagnostic:
		span = Span.from_loc(self.loc, file=file)
		return Diagnostic(message=str(self), phase=self.phase, severity="error", span=span)


class UnsupportedShapeError(RewriteError):
	"""An input construct the rewrite passes do not recognize."""

	phase = "rewrite"


class SyntaxModelError(RewriteError):
	"""The source could not be read into (or out of) the syntax model."""

	phase = "parser"


__all__ = ["RewriteError", "UnsupportedShapeError", "SyntaxModelError"]
