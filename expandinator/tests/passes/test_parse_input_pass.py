# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from expandinator.config import RewriteConfig
from expandinator.core.errors import UnsupportedShapeError
from expandinator.passes import normalize_parse_input
from expandinator.syntax import ast as A
from expandinator.syntax import parse_module, render_module
from expandinator.syntax.tokens import render


def _normalize(source: str, config: RewriteConfig = RewriteConfig()) -> str:
	return render_module(normalize_parse_input(parse_module(source), config))


def test_cast_shape_becomes_structured_parse():
	source = """\
pub fn derive_a(input: TokenStream) -> TokenStream {
    let input = parse_macro_input!(input as DeriveInput);
    expand(input)
}
"""
	expected = """\
pub fn derive_a(input: TokenStream) -> TokenStream {
    let input = match syn::parse2::<DeriveInput>(input) {
        Ok(syntax_tree) => syntax_tree,
        Err(err) => return err.to_compile_error(),
    };
    expand(input)
}
"""
	assert _normalize(source) == expected


def test_declared_type_shape_matches_cast_shape():
	cast = "fn f(input: TokenStream) {\n    let ast = parse_macro_input!(input as syn::ItemFn);\n}\n"
	declared = "fn f(input: TokenStream) {\n    let ast: syn::ItemFn = parse_macro_input!(input);\n}\n"

	def init_of(source: str) -> str:
		fn = normalize_parse_input(parse_module(source)).items[0]
		stmt = fn.body.stmts[0]
		assert isinstance(stmt, A.LocalBinding)
		return render(stmt.init)

	assert init_of(cast) == init_of(declared)
	assert "match syn::parse2::<syn::ItemFn>(input) {" in init_of(declared)
	assert _normalize(declared).startswith("fn f(input: TokenStream) {\n    let ast: syn::ItemFn = match")


def test_qualified_shorthand_with_brace_delimiters_and_tabs():
	source = "fn f(tokens: TokenStream) {\n\tlet item = syn::parse_macro_input!{tokens as Item};\n}\n"
	expected = (
		"fn f(tokens: TokenStream) {\n"
		"\tlet item = match syn::parse2::<Item>(tokens) {\n"
		"\t\tOk(syntax_tree) => syntax_tree,\n"
		"\t\tErr(err) => return err.to_compile_error(),\n"
		"\t};\n"
		"}\n"
	)
	assert _normalize(source) == expected


def test_input_expression_is_kept():
	source = "fn f(input: TokenStream) {\n    let args = parse_macro_input!(attr.clone() as AttributeArgs);\n}\n"
	assert "syn::parse2::<AttributeArgs>(attr.clone())" in _normalize(source)


def test_nested_and_unrelated_bindings_are_untouched():
	source = """\
fn f(input: TokenStream) {
    let x = other!(input as DeriveInput);
    if ok {
        let y = parse_macro_input!(input as DeriveInput);
    }
    let z = parse_macro_input!(input as DeriveInput).ident;
}
"""
	assert _normalize(source) == source


def test_shape_without_type_is_fatal():
	source = "fn f(input: TokenStream) {\n    let input = parse_macro_input!(input);\n}\n"
	with pytest.raises(UnsupportedShapeError, match="neither"):
		normalize_parse_input(parse_module(source, file="src/lib.rs"))


def test_parser_driven_form_is_fatal():
	source = "fn f(input: TokenStream) {\n    let input = parse_macro_input!(input with Punctuated::parse_terminated);\n}\n"
	with pytest.raises(UnsupportedShapeError) as excinfo:
		normalize_parse_input(parse_module(source, file="src/lib.rs"))
	assert excinfo.value.loc.file == "src/lib.rs"
	assert excinfo.value.loc.line == 2


def test_normalization_is_idempotent():
	source = "fn f(input: TokenStream) {\n    let input = parse_macro_input!(input as DeriveInput);\n}\n"
	once = _normalize(source)
	assert _normalize(once) == once


def test_shorthand_name_and_targets_are_configurable():
	config = RewriteConfig(parse_shorthand="extract", parse_function="parser::parse", compile_error_method="into_error")
	source = "fn f(input: TokenStream) {\n    let input = extract!(input as DeriveInput);\n}\n"
	out = _normalize(source, config)
	assert "match parser::parse::<DeriveInput>(input) {" in out
	assert "Err(err) => return err.into_error()," in out
