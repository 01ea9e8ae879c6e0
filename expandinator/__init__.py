# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
expandinator: turn procedural-macro crates into wasm-exportable libraries.

Layers:
  syntax    lossless token-tree model of a crate root
  passes    the individual source rewrites
  pipeline  fixed-order driver producing (module, export registry)
  manifest  Cargo.toml patching
  prepare   per-crate preparation and the targets index
  cli       `python -m expandinator`
"""

from .config import DEFAULT_CONFIG, RewriteConfig, load_rewrite_config_json
from .pipeline import RewriteResult, rewrite_module, rewrite_source

__all__ = [
	"DEFAULT_CONFIG",
	"RewriteConfig",
	"RewriteResult",
	"load_rewrite_config_json",
	"rewrite_module",
	"rewrite_source",
]
