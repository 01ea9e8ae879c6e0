# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structured-diagnostics attribute compatibility.

`#[proc_macro_error]` refuses to annotate anything that is not a
`#[proc_macro*]` entry point unless it is given `allow_not_macro`. Derive
extraction turns the annotated functions into plain functions, so the flag
is added to every spelling of the attribute, keeping its other arguments.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from expandinator.config import DEFAULT_CONFIG, RewriteConfig
from expandinator.core.errors import UnsupportedShapeError
from expandinator.core.span import Span
from expandinator.syntax.ast import Attribute, Decl, Function, Module
from expandinator.syntax.parser import quote
from expandinator.syntax.tokens import TokenTree, find_top, ident, is_ident, is_punct, punct


def relax_attribute(attr: Attribute, flag: str, *, file: Optional[str] = None) -> Attribute:
	"""Return `attr` with `flag` present in its argument list."""
	args = attr.args
	trees = attr.body.trees
	if args is None:
		if len(trees) != attr.path_len:
			raise UnsupportedShapeError(
				f"unsupported `#[{attr.path} ...]` form",
				loc=Span.from_loc(attr.pound, file=file),
			)
		return replace(attr, body=replace(attr.body, trees=[*trees, *quote(f"({flag})")]))
	if find_top(args.trees, lambda tt: is_ident(tt, flag)) >= 0:
		return attr
	inner: List[TokenTree] = list(args.trees)
	if inner and not is_punct(inner[-1], ","):
		inner.append(punct(","))
	inner.append(ident(flag, lead=" " if inner else ""))
	idx = attr.path_len
	new_trees = [*trees[:idx], replace(args, trees=inner), *trees[idx + 1 :]]
	return replace(attr, body=replace(attr.body, trees=new_trees))


def relax_diagnostics_attrs(module: Module, config: RewriteConfig = DEFAULT_CONFIG) -> Module:
	"""Add the permissiveness flag to diagnostics attributes on functions."""
	spellings = config.diagnostics_attr_spellings
	items: List[Decl] = []
	for decl in module.items:
		if isinstance(decl, Function) and any(a.path in spellings for a in decl.attrs):
			attrs = [
				relax_attribute(a, config.diagnostics_flag, file=module.file) if a.path in spellings else a
				for a in decl.attrs
			]
			decl = replace(decl, attrs=attrs)
		items.append(decl)
	return replace(module, items=items)


__all__ = ["relax_attribute", "relax_diagnostics_attrs"]
