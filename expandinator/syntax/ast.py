# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration-level syntax model for a procedural-macro crate root.

Only the shapes the rewrite passes inspect get structure: `extern crate`,
`use`, and `fn` items (signature, parameters, top-level `let` statements).
Everything else is kept as opaque token trees. Every field is made of
tokens that carry their own leading trivia, so `printer.render_module`
reproduces untouched declarations exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from .tokens import Group, Tok, TokenTree, is_group, is_ident, is_punct, spelling


@dataclass
class Attribute:
	"""`#[path(args...)]` (or `#![...]` when `bang` is set)."""

	pound: Tok
	bang: Optional[Tok]
	body: Group

	@property
	def path_len(self) -> int:
		"""Number of leading body tokens spelling the attribute path."""
		idx = 0
		trees = self.body.trees
		while idx < len(trees) and (is_ident(trees[idx]) or is_punct(trees[idx], "::")):
			idx += 1
		return idx

	@property
	def path(self) -> str:
		return spelling(self.body.trees[: self.path_len])

	@property
	def args(self) -> Optional[Group]:
		"""The delimited argument list following the path, if any."""
		trees = self.body.trees
		idx = self.path_len
		if idx < len(trees) and is_group(trees[idx]):
			return trees[idx]  # type: ignore[return-value]
		return None

	@property
	def is_inner(self) -> bool:
		return self.bang is not None


# Use trees ---------------------------------------------------------------


@dataclass
class UseName:
	ident: Tok


@dataclass
class UseRename:
	ident: Tok
	as_tok: Tok
	rename: Tok


@dataclass
class UseGlob:
	star: Tok


@dataclass
class UsePath:
	ident: Tok
	sep: Tok
	tree: "UseTree"


@dataclass
class UseGroupItem:
	tree: "UseTree"
	comma: Optional[Tok] = None


@dataclass
class UseGroup:
	open: Tok
	items: List[UseGroupItem]
	close: Tok


UseTree = Union[UseName, UseRename, UseGlob, UsePath, UseGroup]


# Function pieces ---------------------------------------------------------


@dataclass
class Param:
	"""`pattern: ty,` (receivers like `&self` have no colon and no type)."""

	pattern: List[TokenTree]
	colon: Optional[Tok] = None
	ty: List[TokenTree] = field(default_factory=list)
	comma: Optional[Tok] = None


@dataclass
class Signature:
	# Visibility and qualifiers up to and including the `fn` keyword.
	head: List[TokenTree]
	name: Tok
	generics: List[TokenTree]
	params_open: Tok
	params: List[Param]
	params_close: Tok
	arrow: Optional[Tok] = None
	ret: List[TokenTree] = field(default_factory=list)
	where_clause: List[TokenTree] = field(default_factory=list)


class Stmt:
	"""Base class for body statements."""


@dataclass
class LocalBinding(Stmt):
	"""`let pattern: ty = init;` (type, initializer and `;` are optional)."""

	attrs: List[TokenTree]
	let_tok: Tok
	pattern: List[TokenTree]
	colon: Optional[Tok] = None
	ty: List[TokenTree] = field(default_factory=list)
	eq: Optional[Tok] = None
	init: List[TokenTree] = field(default_factory=list)
	semi: Optional[Tok] = None


@dataclass
class OpaqueStmt(Stmt):
	trees: List[TokenTree]


@dataclass
class Block:
	open: Tok
	stmts: List[Stmt]
	close: Tok


# Declarations ------------------------------------------------------------


class Decl:
	"""Base class for top-level declarations."""

	attrs: List[Attribute]


@dataclass
class ExternCrate(Decl):
	attrs: List[Attribute]
	# Visibility plus the `extern crate` keywords.
	head: List[TokenTree]
	name: Tok
	# `as alias`, if present.
	rest: List[TokenTree]
	semi: Tok


@dataclass
class Use(Decl):
	attrs: List[Attribute]
	# Visibility plus the `use` keyword.
	head: List[TokenTree]
	leading_sep: Optional[Tok]
	tree: UseTree
	semi: Tok


@dataclass
class Function(Decl):
	attrs: List[Attribute]
	sig: Signature
	body: Block

	@property
	def name(self) -> str:
		return self.sig.name.text


@dataclass
class Other(Decl):
	"""Any declaration the passes never inspect, passed through unchanged."""

	attrs: List[Attribute]
	trees: List[TokenTree]


@dataclass
class Module:
	items: List[Decl]
	# Trivia after the last token (usually the final newline).
	trailing: str = ""
	file: Optional[str] = None


def use_root(tree: UseTree) -> Optional[Tok]:
	"""Identifier of the first path segment of a use tree, if it has one."""
	if isinstance(tree, (UsePath, UseName, UseRename)):
		return tree.ident
	return None


__all__ = [
	"Attribute",
	"UseName",
	"UseRename",
	"UseGlob",
	"UsePath",
	"UseGroupItem",
	"UseGroup",
	"UseTree",
	"Param",
	"Signature",
	"Stmt",
	"LocalBinding",
	"OpaqueStmt",
	"Block",
	"Decl",
	"ExternCrate",
	"Use",
	"Function",
	"Other",
	"Module",
	"use_root",
]
