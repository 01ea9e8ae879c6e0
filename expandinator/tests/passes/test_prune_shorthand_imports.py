# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from expandinator.passes import normalize_parse_input, prune_shorthand_imports
from expandinator.syntax import parse_module, render_module


def _prune(source: str) -> str:
	return render_module(prune_shorthand_imports(parse_module(source)))


def test_group_member_is_removed():
	assert _prune("use syn::{parse_macro_input, DeriveInput};\n") == "use syn::{DeriveInput};\n"
	assert _prune("use syn::{DeriveInput, parse_macro_input};\n") == "use syn::{DeriveInput};\n"


def test_single_import_is_dropped():
	assert _prune("use syn::parse_macro_input;\nuse syn::DeriveInput;\n") == "use syn::DeriveInput;\n"


def test_import_is_kept_while_still_used():
	source = "use syn::{parse_macro_input, DeriveInput};\nmacro_rules! p { ($i:ident) => { parse_macro_input!($i as DeriveInput) }; }\n"
	assert _prune(source) == source


def test_other_crates_are_untouched():
	source = "use other::parse_macro_input;\nuse quote::quote;\n"
	assert _prune(source) == source


def test_prune_after_normalization():
	source = """\
use syn::{parse_macro_input, DeriveInput};

fn f(input: TokenStream) {
    let input = parse_macro_input!(input as DeriveInput);
}
"""
	module = prune_shorthand_imports(normalize_parse_input(parse_module(source)))
	out = render_module(module)
	assert out.startswith("use syn::{DeriveInput};\n\nfn f")
	assert render_module(prune_shorthand_imports(parse_module(out))) == out
