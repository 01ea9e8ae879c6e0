# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Rewrite passes, in pipeline order:

  eliminate_host_facility   drop `extern crate proc_macro;`
  substitute_host_imports   `use proc_macro::...` -> `use proc_macro2::...`
  normalize_parse_input     `parse_macro_input!` -> explicit `syn::parse2` match
  prune_shorthand_imports   drop the now-unused `parse_macro_input` import
  relax_diagnostics_attrs   `#[proc_macro_error]` -> `(allow_not_macro)`
  port_token_types          host `TokenStream` in signatures -> portable
  extract_derive_exports    `#[proc_macro_derive]` -> exported wrappers + registry
"""

from .derive_export import ExportRegistry, build_wrapper, extract_derive_exports, find_derive_registration
from .diagnostics_attr import relax_diagnostics_attrs
from .host_facility import eliminate_host_facility, substitute_host_imports
from .parse_input import ParseInputRewriter, normalize_parse_input, prune_shorthand_imports
from .token_types import port_token_types

__all__ = [
	"ExportRegistry",
	"ParseInputRewriter",
	"build_wrapper",
	"eliminate_host_facility",
	"extract_derive_exports",
	"find_derive_registration",
	"normalize_parse_input",
	"port_token_types",
	"prune_shorthand_imports",
	"relax_diagnostics_attrs",
	"substitute_host_imports",
]
