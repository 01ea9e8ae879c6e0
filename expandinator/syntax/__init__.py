# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Syntax model for procedural-macro crate roots.

Public API:
  - parse_module(source) -> Module
  - render_module(module) -> str (exact for untouched declarations)
  - quote / quote_item for synthesized code
"""

from . import ast
from .parser import parse_module, quote, quote_item, read_token_trees
from .printer import render_decl, render_module

__all__ = ["ast", "parse_module", "quote", "quote_item", "read_token_trees", "render_decl", "render_module"]
