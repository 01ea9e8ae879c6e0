# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Re-serialize the syntax model.

Rendering is a walk over every token in source order; trivia travels with
the tokens, so there is no formatting policy here at all.
"""

from __future__ import annotations

import copy
from typing import Iterator

from .ast import (
	Attribute,
	Block,
	Decl,
	ExternCrate,
	Function,
	LocalBinding,
	Module,
	OpaqueStmt,
	Other,
	Param,
	Signature,
	Stmt,
	Use,
	UseGlob,
	UseGroup,
	UseName,
	UsePath,
	UseRename,
	UseTree,
)
from .tokens import Tok, iter_tokens


def attr_tokens(attr: Attribute) -> Iterator[Tok]:
	yield attr.pound
	if attr.bang is not None:
		yield attr.bang
	yield from iter_tokens([attr.body])


def use_tree_tokens(tree: UseTree) -> Iterator[Tok]:
	if isinstance(tree, UsePath):
		yield tree.ident
		yield tree.sep
		yield from use_tree_tokens(tree.tree)
	elif isinstance(tree, UseName):
		yield tree.ident
	elif isinstance(tree, UseRename):
		yield tree.ident
		yield tree.as_tok
		yield tree.rename
	elif isinstance(tree, UseGlob):
		yield tree.star
	elif isinstance(tree, UseGroup):
		yield tree.open
		for item in tree.items:
			yield from use_tree_tokens(item.tree)
			if item.comma is not None:
				yield item.comma
		yield tree.close
	else:
		raise NotImplementedError(f"printer does not handle use tree {type(tree).__name__}")


def param_tokens(param: Param) -> Iterator[Tok]:
	yield from iter_tokens(param.pattern)
	if param.colon is not None:
		yield param.colon
	yield from iter_tokens(param.ty)
	if param.comma is not None:
		yield param.comma


def signature_tokens(sig: Signature) -> Iterator[Tok]:
	yield from iter_tokens(sig.head)
	yield sig.name
	yield from iter_tokens(sig.generics)
	yield sig.params_open
	for param in sig.params:
		yield from param_tokens(param)
	yield sig.params_close
	if sig.arrow is not None:
		yield sig.arrow
	yield from iter_tokens(sig.ret)
	yield from iter_tokens(sig.where_clause)


def stmt_tokens(stmt: Stmt) -> Iterator[Tok]:
	if isinstance(stmt, LocalBinding):
		yield from iter_tokens(stmt.attrs)
		yield stmt.let_tok
		yield from iter_tokens(stmt.pattern)
		if stmt.colon is not None:
			yield stmt.colon
		yield from iter_tokens(stmt.ty)
		if stmt.eq is not None:
			yield stmt.eq
		yield from iter_tokens(stmt.init)
		if stmt.semi is not None:
			yield stmt.semi
	elif isinstance(stmt, OpaqueStmt):
		yield from iter_tokens(stmt.trees)
	else:
		raise NotImplementedError(f"printer does not handle stmt {type(stmt).__name__}")


def block_tokens(block: Block) -> Iterator[Tok]:
	yield block.open
	for stmt in block.stmts:
		yield from stmt_tokens(stmt)
	yield block.close


def decl_tokens(decl: Decl) -> Iterator[Tok]:
	for attr in decl.attrs:
		yield from attr_tokens(attr)
	if isinstance(decl, ExternCrate):
		yield from iter_tokens(decl.head)
		yield decl.name
		yield from iter_tokens(decl.rest)
		yield decl.semi
	elif isinstance(decl, Use):
		yield from iter_tokens(decl.head)
		if decl.leading_sep is not None:
			yield decl.leading_sep
		yield from use_tree_tokens(decl.tree)
		yield decl.semi
	elif isinstance(decl, Function):
		yield from signature_tokens(decl.sig)
		yield from block_tokens(decl.body)
	elif isinstance(decl, Other):
		yield from iter_tokens(decl.trees)
	else:
		raise NotImplementedError(f"printer does not handle decl {type(decl).__name__}")


def decl_first_token(decl: Decl) -> Tok:
	return next(decl_tokens(decl))


def render_tokens(tokens: Iterator[Tok]) -> str:
	return "".join(tok.lead + tok.text for tok in tokens)


def render_decl(decl: Decl) -> str:
	return render_tokens(decl_tokens(decl))


def render_module(module: Module) -> str:
	return "".join(render_decl(decl) for decl in module.items) + module.trailing


def with_decl_lead(decl: Decl, lead: str) -> Decl:
	"""Copy of `decl` whose first token carries `lead`."""
	decl = copy.deepcopy(decl)
	decl_first_token(decl).lead = lead
	return decl


__all__ = [
	"attr_tokens",
	"use_tree_tokens",
	"signature_tokens",
	"stmt_tokens",
	"block_tokens",
	"decl_tokens",
	"decl_first_token",
	"render_decl",
	"render_module",
	"with_decl_lead",
]
