# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Pipeline driver: one crate root in, rewritten crate root plus export
registry out.

  parse -> eliminate_host_facility -> substitute_host_imports
        -> normalize_parse_input -> prune_shorthand_imports
        -> relax_diagnostics_attrs -> port_token_types
        -> extract_derive_exports -> render

Each pass runs exactly once, in this order; the driver never re-scans for
matches created by a later pass. Unsupported shapes raise `RewriteError`
and abort the module; there is no partial output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from expandinator.config import DEFAULT_CONFIG, RewriteConfig
from expandinator.core.diagnostics import Diagnostic
from expandinator.passes import (
	ExportRegistry,
	eliminate_host_facility,
	extract_derive_exports,
	normalize_parse_input,
	port_token_types,
	prune_shorthand_imports,
	relax_diagnostics_attrs,
	substitute_host_imports,
)
from expandinator.syntax import parse_module, render_module
from expandinator.syntax.ast import Module

ModulePass = Callable[[Module, RewriteConfig], Module]

# Order matters: derive extraction is not in this list because it must see
# the output of all of these, and nothing may see its synthesized wrappers.
MODULE_PASSES: Tuple[Tuple[str, ModulePass], ...] = (
	("eliminate-host-facility", eliminate_host_facility),
	("substitute-host-imports", substitute_host_imports),
	("normalize-parse-input", normalize_parse_input),
	("prune-shorthand-imports", prune_shorthand_imports),
	("relax-diagnostics-attrs", relax_diagnostics_attrs),
	("port-token-types", port_token_types),
)


@dataclass
class RewriteResult:
	module: Module
	registry: ExportRegistry
	diagnostics: List[Diagnostic] = field(default_factory=list)


def rewrite_module(module: Module, config: RewriteConfig = DEFAULT_CONFIG) -> RewriteResult:
	"""Run every pass over `module`, starting from an empty registry."""
	diagnostics: List[Diagnostic] = []
	for _name, rewrite in MODULE_PASSES:
		module = rewrite(module, config)
	module, registry = extract_derive_exports(module, ExportRegistry(), config=config, diagnostics=diagnostics)
	return RewriteResult(module=module, registry=registry, diagnostics=diagnostics)


def rewrite_source(
	source: str,
	*,
	config: RewriteConfig = DEFAULT_CONFIG,
	file: Optional[str] = None,
) -> Tuple[str, RewriteResult]:
	"""Parse, rewrite and re-serialize one crate root."""
	module = parse_module(source, file=file)
	result = rewrite_module(module, config)
	return render_module(result.module), result


__all__ = ["MODULE_PASSES", "RewriteResult", "rewrite_module", "rewrite_source"]
