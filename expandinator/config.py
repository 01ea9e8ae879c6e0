# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Rewrite configuration.

Every identifier the passes match or emit is fixed per pipeline run and lives
here. The defaults target Rust procedural-macro crates built for
`wasm32-unknown-unknown` with wasm-bindgen; a JSON file can override them.

Format (pinned for v0, JSON):
{
  "format": "expandinator-config",
  "version": 0,
  "host_crate": "proc_macro",          // any field of RewriteConfig, optional
  ...
}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path


@dataclass(frozen=True)
class RewriteConfig:
	# Host-only macro facility and its portable token-stream equivalent.
	host_crate: str = "proc_macro"
	portable_crate: str = "proc_macro2"
	token_stream_type: str = "TokenStream"
	# Argument-extraction shorthand and its structured-parse replacement.
	parse_shorthand: str = "parse_macro_input"
	shorthand_crate: str = "syn"
	parse_function: str = "syn::parse2"
	compile_error_method: str = "to_compile_error"
	# Structured diagnostics opt-in.
	diagnostics_attr: str = "proc_macro_error"
	diagnostics_flag: str = "allow_not_macro"
	# Derive registration and the exported wrappers replacing it.
	derive_attr: str = "proc_macro_derive"
	export_attr: str = "wasm_bindgen::prelude::wasm_bindgen"
	wrapper_prefix: str = "expand_"
	export_key_format: str = "#[derive({name})]"
	unparse_function: str = "prettyplease::unparse"

	@property
	def host_token_stream_types(self) -> tuple[str, ...]:
		path = f"{self.host_crate}::{self.token_stream_type}"
		return (path, f"::{path}")

	@property
	def portable_token_stream_type(self) -> str:
		return f"{self.portable_crate}::{self.token_stream_type}"

	@property
	def diagnostics_attr_spellings(self) -> tuple[str, ...]:
		return (self.diagnostics_attr, f"{self.diagnostics_attr}::{self.diagnostics_attr}")

	@property
	def shorthand_paths(self) -> tuple[str, ...]:
		return (
			self.parse_shorthand,
			f"{self.shorthand_crate}::{self.parse_shorthand}",
			f"::{self.shorthand_crate}::{self.parse_shorthand}",
		)

	def export_key(self, name: str) -> str:
		return self.export_key_format.format(name=name)

	def wrapper_name(self, fn_name: str) -> str:
		# Raw identifiers (`r#type`) keep their spelling but not the marker.
		if fn_name.startswith("r#"):
			fn_name = fn_name[2:]
		return f"{self.wrapper_prefix}{fn_name}"


DEFAULT_CONFIG = RewriteConfig()


def load_rewrite_config_json(path: Path) -> RewriteConfig:
	"""Load a config override file (see module docstring for the format)."""
	obj = json.loads(path.read_text(encoding="utf-8"))
	if not isinstance(obj, dict):
		raise ValueError("rewrite config must be a JSON object")
	if obj.get("format") != "expandinator-config" or obj.get("version") != 0:
		raise ValueError("unsupported rewrite config format/version")
	known = {f.name for f in fields(RewriteConfig)}
	overrides: dict[str, str] = {}
	for key, value in obj.items():
		if key in ("format", "version"):
			continue
		if key not in known:
			raise ValueError(f"unknown rewrite config key '{key}'")
		if not isinstance(value, str) or not value:
			raise ValueError(f"rewrite config key '{key}' must be a non-empty string")
		overrides[key] = value
	if "{name}" not in overrides.get("export_key_format", "{name}"):
		raise ValueError("export_key_format must contain '{name}'")
	return RewriteConfig(**overrides)


__all__ = ["RewriteConfig", "DEFAULT_CONFIG", "load_rewrite_config_json"]
