# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structural edits shared by the passes.

Dropping a node must not lose the comments in front of it or glue its
neighbours together, so every removal hands the dropped node's leading
trivia to whatever follows (see `tokens.merge_lead`).
"""

from __future__ import annotations

import copy
from dataclasses import replace
from typing import Callable, List, Optional

from expandinator.syntax.ast import Decl, Function, Module, UseGroup
from expandinator.syntax.printer import decl_first_token, signature_tokens, use_tree_tokens, with_decl_lead
from expandinator.syntax.tokens import merge_lead


def drop_decls(module: Module, doomed: Callable[[Decl], bool]) -> Module:
	"""Remove declarations matching `doomed`, keeping the rest in order."""
	kept: List[Decl] = []
	carry: Optional[str] = None
	for decl in module.items:
		lead = decl_first_token(decl).lead
		if doomed(decl):
			carry = lead if carry is None else merge_lead(carry, lead)
			continue
		if carry is not None:
			decl = with_decl_lead(decl, merge_lead(carry, lead))
			carry = None
		kept.append(decl)
	if len(kept) == len(module.items):
		return module
	trailing = module.trailing if carry is None else merge_lead(carry, module.trailing)
	return replace(module, items=kept, trailing=trailing)


def drop_attr(fn: Function, index: int) -> Function:
	"""Copy of `fn` without its `index`-th attribute."""
	fn = copy.deepcopy(fn)
	removed = fn.attrs.pop(index)
	if index < len(fn.attrs):
		follower = fn.attrs[index].pound
	else:
		follower = next(signature_tokens(fn.sig))
	follower.lead = merge_lead(removed.pound.lead, follower.lead)
	return fn


def drop_group_item(group: UseGroup, index: int) -> UseGroup:
	"""Copy of a `{...}` use group without its `index`-th member."""
	group = copy.deepcopy(group)
	removed = group.items.pop(index)
	removed_lead = next(use_tree_tokens(removed.tree)).lead
	if index < len(group.items):
		follower = next(use_tree_tokens(group.items[index].tree))
		follower.lead = merge_lead(removed_lead, follower.lead)
	elif removed.comma is None and group.items:
		# The last member went away; do not leave its separator dangling.
		group.items[-1].comma = None
	return group


__all__ = ["drop_decls", "drop_attr", "drop_group_item"]
