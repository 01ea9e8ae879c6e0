# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Host-facility passes.

Outside a compiler process the `proc_macro` crate does not exist. These two
passes remove the explicit `extern crate proc_macro;` and point every
`use proc_macro...` at the portable `proc_macro2` crate, whose token stream
has the same shape. Both are total: any module is accepted.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List

from expandinator.config import DEFAULT_CONFIG, RewriteConfig
from expandinator.syntax.ast import Decl, ExternCrate, Module, Use, UseName, UsePath, UseRename, UseTree, use_root

from .edits import drop_decls


def eliminate_host_facility(module: Module, config: RewriteConfig = DEFAULT_CONFIG) -> Module:
	"""Drop `extern crate <host>` declarations; everything else keeps its order."""

	def is_host_extern(decl: Decl) -> bool:
		return isinstance(decl, ExternCrate) and decl.name.text == config.host_crate

	return drop_decls(module, is_host_extern)


def _retarget_root(tree: UseTree, config: RewriteConfig) -> UseTree:
	root = use_root(tree)
	if root is None or root.text != config.host_crate:
		return tree
	assert isinstance(tree, (UsePath, UseName, UseRename))
	return replace(tree, ident=replace(root, text=config.portable_crate))


def substitute_host_imports(module: Module, config: RewriteConfig = DEFAULT_CONFIG) -> Module:
	"""Rename the root segment of `use <host>...` imports to the portable crate."""
	items: List[Decl] = []
	for decl in module.items:
		if isinstance(decl, Use):
			tree = _retarget_root(decl.tree, config)
			if tree is not decl.tree:
				decl = replace(decl, tree=tree)
		items.append(decl)
	return replace(module, items=items)


__all__ = ["eliminate_host_facility", "substitute_host_imports"]
