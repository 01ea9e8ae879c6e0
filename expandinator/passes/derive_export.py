# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Derive-export extraction.

A wasm module cannot be loaded as a compiler plugin, so the
`#[proc_macro_derive(Name)]` registration is replaced by an exported
text-in/text-out wrapper that the embedding page calls directly:

    #[wasm_bindgen::prelude::wasm_bindgen]
    pub fn expand_<fn>(input: String) -> String {
        let output = <fn>(input.parse().unwrap());
        prettyplease::unparse(&syn::parse2(output).unwrap())
    }

Each wrapper is emitted right after the function it calls, and the export
registry maps `#[derive(Name)]` to the wrapper name. The registry is threaded
explicitly through the fold over declarations. Two registrations with the
same key keep the last one (a warning diagnostic is recorded).

This pass must run after every other pass: the wrappers it synthesizes are
not valid input for them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from expandinator.config import DEFAULT_CONFIG, RewriteConfig
from expandinator.core.diagnostics import Diagnostic
from expandinator.core.errors import UnsupportedShapeError
from expandinator.core.span import Span
from expandinator.syntax.ast import Decl, Function, Module
from expandinator.syntax.parser import quote_item
from expandinator.syntax.printer import stmt_tokens, with_decl_lead
from expandinator.syntax.tokens import indent_of, is_ident, split_top

from .edits import drop_attr

_WRAPPER = (
	"#[$export_attr]\n"
	"pub fn $wrapper(input: String) -> String {\n"
	"${indent}let output = $original(input.parse().unwrap());\n"
	"${indent}$unparse(&$parse(output).unwrap())\n"
	"}"
)


@dataclass(frozen=True)
class ExportRegistry:
	"""Export key (e.g. `#[derive(Foo)]`) -> generated wrapper function name."""

	entries: Mapping[str, str] = field(default_factory=dict)

	def with_export(self, key: str, wrapper: str) -> "ExportRegistry":
		entries: Dict[str, str] = dict(self.entries)
		entries[key] = wrapper
		return ExportRegistry(entries=entries)

	def get(self, key: str) -> Optional[str]:
		return self.entries.get(key)

	def __len__(self) -> int:
		return len(self.entries)

	def __contains__(self, key: object) -> bool:
		return key in self.entries

	def __iter__(self) -> Iterator[str]:
		return iter(self.entries)

	def to_json(self) -> Dict[str, str]:
		return dict(self.entries)


@dataclass(frozen=True)
class DeriveRegistration:
	attr_index: int
	capability: str


def find_derive_registration(
	fn: Function,
	config: RewriteConfig = DEFAULT_CONFIG,
	*,
	file: Optional[str] = None,
) -> Optional[DeriveRegistration]:
	"""
	Locate the derive-registration attribute of `fn`.

	Returns None for the common case (no registration). A registration whose
	first argument is not a single identifier, or a second registration on
	the same function, aborts the run.
	"""
	found: Optional[DeriveRegistration] = None
	for idx, attr in enumerate(fn.attrs):
		if attr.path != config.derive_attr:
			continue
		loc = Span.from_loc(attr.pound, file=file)
		if found is not None:
			raise UnsupportedShapeError(f"`{fn.name}` has more than one `#[{config.derive_attr}]`", loc=loc)
		args = attr.args
		segments = split_top(args.trees, ",") if args is not None and args.delim == "(" else []
		if not segments or len(segments[0][0]) != 1 or not is_ident(segments[0][0][0]):
			raise UnsupportedShapeError(
				f"`#[{config.derive_attr}]` on `{fn.name}` must name the derived trait first",
				loc=loc,
			)
		found = DeriveRegistration(attr_index=idx, capability=segments[0][0][0].text)  # type: ignore[union-attr]
	return found


def body_indent(fn: Function, default: str = "    ") -> str:
	"""Indentation of the first statement in `fn`'s body, or `default`."""
	if not fn.body.stmts:
		return default
	first = next(stmt_tokens(fn.body.stmts[0]))
	# One-line bodies (`{ x }`) say nothing about the indent unit.
	if "\n" not in first.lead:
		return default
	return indent_of(first) or default


def build_wrapper(
	original: str,
	wrapper: str,
	config: RewriteConfig = DEFAULT_CONFIG,
	*,
	indent: str = "    ",
) -> Function:
	"""Synthesize the exported wrapper calling `original`, its body indented by `indent`."""
	decl = quote_item(
		_WRAPPER,
		indent=indent,
		export_attr=config.export_attr,
		wrapper=wrapper,
		original=original,
		unparse=config.unparse_function,
		parse=config.parse_function,
	)
	assert isinstance(decl, Function)
	return decl


def _extract_decl(
	decl: Decl,
	registry: ExportRegistry,
	config: RewriteConfig,
	diagnostics: Optional[List[Diagnostic]],
	file: Optional[str],
) -> Tuple[List[Decl], ExportRegistry]:
	if not isinstance(decl, Function):
		return [decl], registry
	registration = find_derive_registration(decl, config, file=file)
	if registration is None:
		return [decl], registry

	fn = drop_attr(decl, registration.attr_index)
	key = config.export_key(registration.capability)
	wrapper_name = config.wrapper_name(fn.name)
	previous = registry.get(key)
	if previous is not None and diagnostics is not None:
		diagnostics.append(
			Diagnostic(
				message=f"export key '{key}' already maps to '{previous}'; '{wrapper_name}' replaces it",
				code="duplicate-export-key",
				phase="extract",
				severity="warning",
				span=Span.from_loc(fn.sig.name, file=file),
			)
		)
	wrapper = with_decl_lead(build_wrapper(fn.name, wrapper_name, config, indent=body_indent(fn)), "\n\n")
	return [fn, wrapper], registry.with_export(key, wrapper_name)


def extract_derive_exports(
	module: Module,
	registry: Optional[ExportRegistry] = None,
	*,
	config: RewriteConfig = DEFAULT_CONFIG,
	diagnostics: Optional[List[Diagnostic]] = None,
) -> Tuple[Module, ExportRegistry]:
	"""Fold over the declarations, threading the registry; return both."""
	if registry is None:
		registry = ExportRegistry()
	decls: List[Decl] = []
	for decl in module.items:
		emitted, registry = _extract_decl(decl, registry, config, diagnostics, module.file)
		decls.extend(emitted)
	return replace(module, items=decls), registry


__all__ = [
	"ExportRegistry",
	"DeriveRegistration",
	"find_derive_registration",
	"body_indent",
	"build_wrapper",
	"extract_derive_exports",
]
