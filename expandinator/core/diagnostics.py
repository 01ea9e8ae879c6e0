# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the rewrite pipeline and its CLI.

Passes append non-fatal findings (warnings, notes) to a caller-provided list;
fatal problems are raised as `RewriteError` and converted into an error
diagnostic at the CLI boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a rewrite diagnostic (error/warning/note)."""

	message: str
	code: str | None = None
	# Pass or CLI step that produced the diagnostic ("parser", "extract", ...).
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Span() denotes unknown.
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def to_json(self, *, default_file: str | None = None) -> dict:
		"""Render to a structured JSON-friendly dict."""
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file or default_file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}

	def render(self, *, default_file: str | None = None) -> str:
		"""Human-readable `file:line:col: severity: message` form."""
		file = self.span.file or default_file or "<input>"
		text = f"{file}:{self.span.describe()}: {self.severity}: {self.message}"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text


def has_errors(diagnostics: list[Diagnostic]) -> bool:
	return any(d.severity == "error" for d in diagnostics)


__all__ = ["Diagnostic", "has_errors"]
