# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from expandinator.config import RewriteConfig
from expandinator.passes import eliminate_host_facility, substitute_host_imports
from expandinator.syntax import parse_module, render_module


def _eliminate(source: str, config: RewriteConfig = RewriteConfig()) -> str:
	return render_module(eliminate_host_facility(parse_module(source), config))


def _substitute(source: str, config: RewriteConfig = RewriteConfig()) -> str:
	return render_module(substitute_host_imports(parse_module(source), config))


def test_host_extern_crate_is_removed_others_kept_in_order():
	source = "extern crate proc_macro;\nextern crate syn as s;\n\nuse proc_macro::TokenStream;\n"
	assert _eliminate(source) == "extern crate syn as s;\n\nuse proc_macro::TokenStream;\n"


def test_renamed_host_extern_crate_is_removed():
	assert _eliminate("use a;\nextern crate proc_macro as pm;\nfn f() {}\n") == "use a;\nfn f() {}\n"


def test_comment_before_removed_extern_moves_to_next_item():
	source = "// host crate\nextern crate proc_macro;\nuse a::b;\n"
	assert _eliminate(source) == "// host crate\nuse a::b;\n"


def test_removing_the_last_item_keeps_trailing_newline():
	assert _eliminate("use a;\nextern crate proc_macro;\n") == "use a;\n"


def test_elimination_without_host_extern_is_identity():
	module = parse_module("extern crate alloc;\nfn f() {}\n")
	assert eliminate_host_facility(module) is module


def test_elimination_is_idempotent():
	once = _eliminate("extern crate proc_macro;\n\nfn f() {}\n")
	assert _eliminate(once) == once


def test_import_roots_are_retargeted():
	source = (
		"use proc_macro::TokenStream;\n"
		"use ::proc_macro::{Span, TokenTree as TT};\n"
		"use proc_macro;\n"
		"pub use proc_macro as pm;\n"
		"use proc_macro_hack::x;\n"
		"use syn::proc_macro::Foo;\n"
	)
	expected = (
		"use proc_macro2::TokenStream;\n"
		"use ::proc_macro2::{Span, TokenTree as TT};\n"
		"use proc_macro2;\n"
		"pub use proc_macro2 as pm;\n"
		"use proc_macro_hack::x;\n"
		"use syn::proc_macro::Foo;\n"
	)
	assert _substitute(source) == expected


def test_substitution_keeps_nested_structure_byte_identical():
	source = "use proc_macro::{\n    self,\n    token_stream::{IntoIter /* why */, TokenStream},\n};\n"
	assert _substitute(source) == source.replace("use proc_macro::", "use proc_macro2::", 1)


def test_substitution_is_idempotent():
	once = _substitute("use proc_macro::TokenStream;\n")
	assert _substitute(once) == once


def test_host_identifier_is_configurable():
	config = RewriteConfig(host_crate="hostmacro", portable_crate="portable")
	assert _substitute("use hostmacro::X;\nuse proc_macro::Y;\n", config) == "use portable::X;\nuse proc_macro::Y;\n"
	assert _eliminate("extern crate hostmacro;\nextern crate proc_macro;\n", config) == "extern crate proc_macro;\n"
