# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Argument-extraction shorthand desugaring.

`parse_macro_input!` only works inside a `#[proc_macro*]` entry point: it
returns the compile error from the *macro*, which is not possible once the
function becomes a plain function behind an exported wrapper. This pass
rewrites every top-level

    let input = parse_macro_input!(input as DeriveInput);
    let input: DeriveInput = parse_macro_input!(input);

into the explicit form

    let input = match syn::parse2::<DeriveInput>(input) {
        Ok(syntax_tree) => syntax_tree,
        Err(err) => return err.to_compile_error(),
    };

Notes:
  * The failure branch returns early from the enclosing function.
  * A call with neither `as Type` nor a declared binding type (or the
    parser-driven `with` form) cannot be rewritten; that aborts the run.
  * The rewritten initializer no longer has the shorthand shape, so the pass
    is idempotent.

`prune_shorthand_imports` then removes the now-unused `parse_macro_input`
import from `use syn::...` once nothing in the module mentions it.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from expandinator.config import DEFAULT_CONFIG, RewriteConfig
from expandinator.core.errors import UnsupportedShapeError
from expandinator.core.span import Span
from expandinator.syntax.ast import (
	Decl,
	Function,
	LocalBinding,
	Module,
	Stmt,
	Use,
	UseGroup,
	UseName,
	UsePath,
	UseTree,
)
from expandinator.syntax.parser import quote
from expandinator.syntax.printer import decl_tokens
from expandinator.syntax.tokens import (
	Group,
	TokenTree,
	find_top,
	first_token,
	indent_of,
	is_group,
	is_ident,
	is_punct,
	render,
	spelling,
	strip_lead,
	with_lead,
)

from .edits import drop_decls, drop_group_item

_STRUCTURED_PARSE = (
	"match $parse::<$ty>($expr) {\n"
	"${inner}Ok(syntax_tree) => syntax_tree,\n"
	"${inner}Err(err) => return err.$to_error(),\n"
	"${outer}}"
)


class ParseInputRewriter:
	"""
	Rewrite shorthand-initialized `let` bindings into explicit parse matches.

	Only the top-level statements of each function body are inspected; all
	other declarations and statements are returned unchanged.
	"""

	def __init__(self, config: RewriteConfig = DEFAULT_CONFIG, *, file: Optional[str] = None) -> None:
		self.config = config
		self.file = file

	# Public entry points ------------------------------------------------

	def rewrite_module(self, module: Module) -> Module:
		self.file = module.file or self.file
		return replace(module, items=[self.rewrite_decl(decl) for decl in module.items])

	def rewrite_decl(self, decl: Decl) -> Decl:
		if not isinstance(decl, Function):
			return decl
		stmts = [self._rewrite_stmt(stmt) for stmt in decl.body.stmts]
		return replace(decl, body=replace(decl.body, stmts=stmts))

	# Statements ---------------------------------------------------------

	def _rewrite_stmt(self, stmt: Stmt) -> Stmt:
		if not isinstance(stmt, LocalBinding):
			return stmt
		args = self._shorthand_args(stmt.init)
		if args is None:
			return stmt
		expr, ty = self._parse_target(stmt, args)
		return replace(stmt, init=self._structured_parse(stmt, expr, ty))

	def _shorthand_args(self, init: Sequence[TokenTree]) -> Optional[Group]:
		"""Argument group of a `[syn::]parse_macro_input!(...)` initializer."""
		if len(init) < 3:
			return None
		path, bang, args = init[:-2], init[-2], init[-1]
		if not is_punct(bang, "!") or not is_group(args):
			return None
		if spelling(path) not in self.config.shorthand_paths:
			return None
		return args  # type: ignore[return-value]

	def _parse_target(self, stmt: LocalBinding, args: Group) -> Tuple[List[TokenTree], List[TokenTree]]:
		"""Return (input expression, target type) for a shorthand call."""
		trees = args.trees
		loc = Span.from_loc(stmt.let_tok, file=self.file)
		macro = f"{self.config.parse_shorthand}!"
		if find_top(trees, lambda tt: is_ident(tt, "with")) >= 0:
			raise UnsupportedShapeError(f"`{macro}` with an explicit parser is not supported", loc=loc)
		as_idx = find_top(trees, lambda tt: is_ident(tt, "as"))
		if as_idx >= 0:
			expr, ty = list(trees[:as_idx]), list(trees[as_idx + 1 :])
			if not expr or not ty:
				raise UnsupportedShapeError(f"malformed `{macro}` cast", loc=loc)
			return expr, ty
		if not trees:
			raise UnsupportedShapeError(f"`{macro}` without an input expression", loc=loc)
		if not stmt.ty:
			raise UnsupportedShapeError(
				f"`{macro}` call has neither `as Type` nor a declared binding type",
				loc=loc,
			)
		return list(trees), list(stmt.ty)

	def _structured_parse(
		self,
		stmt: LocalBinding,
		expr: Sequence[TokenTree],
		ty: Sequence[TokenTree],
	) -> List[TokenTree]:
		anchor = first_token(stmt.attrs) or stmt.let_tok
		outer = indent_of(anchor)
		inner = outer + ("\t" if outer.startswith("\t") else "    ")
		trees = quote(
			_STRUCTURED_PARSE,
			parse=self.config.parse_function,
			ty=render(strip_lead(ty)),
			expr=render(strip_lead(expr)),
			to_error=self.config.compile_error_method,
			inner=inner,
			outer=outer,
		)
		lead = first_token(stmt.init).lead  # type: ignore[union-attr]
		return with_lead(trees, lead)


def normalize_parse_input(module: Module, config: RewriteConfig = DEFAULT_CONFIG) -> Module:
	return ParseInputRewriter(config).rewrite_module(module)


def _mentions(decl: Decl, name: str) -> bool:
	return any(tok.kind == "IDENT" and tok.text == name for tok in decl_tokens(decl))


def _without_shorthand(tree: UseTree, name: str) -> Optional[UseTree]:
	"""`tree` minus `name` leaves; None when nothing is left of it."""
	if isinstance(tree, UseName):
		return None if tree.ident.text == name else tree
	if isinstance(tree, UseGroup):
		group = tree
		idx = 0
		while idx < len(group.items):
			if isinstance(group.items[idx].tree, UseName) and group.items[idx].tree.ident.text == name:  # type: ignore[union-attr]
				group = drop_group_item(group, idx)
				continue
			idx += 1
		return group
	return tree


def prune_shorthand_imports(module: Module, config: RewriteConfig = DEFAULT_CONFIG) -> Module:
	"""Remove `parse_macro_input` from `use syn::...` once nothing uses it."""
	name = config.parse_shorthand
	if any(_mentions(decl, name) for decl in module.items if not isinstance(decl, Use)):
		return module

	emptied: List[Decl] = []
	items: List[Decl] = []
	for decl in module.items:
		if isinstance(decl, Use) and isinstance(decl.tree, UsePath) and decl.tree.ident.text == config.shorthand_crate:
			sub = _without_shorthand(decl.tree.tree, name)
			if sub is None:
				emptied.append(decl)
			elif sub is not decl.tree.tree:
				decl = replace(decl, tree=replace(decl.tree, tree=sub))
		items.append(decl)
	module = replace(module, items=items)
	if not emptied:
		return module
	return drop_decls(module, lambda decl: any(decl is e for e in emptied))


__all__ = ["ParseInputRewriter", "normalize_parse_input", "prune_shorthand_imports"]
