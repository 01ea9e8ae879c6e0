# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Shared diagnostics, spans and fatal error types."""

from .diagnostics import Diagnostic, has_errors
from .errors import RewriteError, SyntaxModelError, UnsupportedShapeError
from .span import Span

__all__ = [
	"Diagnostic",
	"has_errors",
	"RewriteError",
	"SyntaxModelError",
	"UnsupportedShapeError",
	"Span",
]
