# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from expandinator.core.errors import SyntaxModelError, UnsupportedShapeError
from expandinator.syntax import ast as A
from expandinator.syntax import parse_module, quote_item, render_module
from expandinator.syntax.tokens import render, spelling


def test_items_are_carved_by_kind():
	source = """\
#![no_std]
extern crate proc_macro as pm;
pub use ::proc_macro::{Span, TokenTree as TT};
mod attrs;
#[inline]
pub(crate) const fn helper() -> u8 { 1 }
struct Unit;
"""
	module = parse_module(source)
	kinds = [type(item).__name__ for item in module.items]
	assert kinds == ["Other", "ExternCrate", "Use", "Other", "Function", "Other"]

	inner = module.items[0]
	assert inner.attrs[0].is_inner
	assert inner.attrs[0].path == "no_std"

	extern = module.items[1]
	assert isinstance(extern, A.ExternCrate)
	assert extern.name.text == "proc_macro"
	assert spelling(extern.rest) == "as pm"

	use = module.items[2]
	assert isinstance(use, A.Use)
	assert use.leading_sep is not None
	assert isinstance(use.tree, A.UsePath)
	assert A.use_root(use.tree).text == "proc_macro"
	group = use.tree.tree
	assert isinstance(group, A.UseGroup)
	assert isinstance(group.items[0].tree, A.UseName)
	assert isinstance(group.items[1].tree, A.UseRename)
	assert group.items[1].tree.rename.text == "TT"

	fn = module.items[4]
	assert isinstance(fn, A.Function)
	assert fn.name == "helper"
	assert [a.path for a in fn.attrs] == ["inline"]
	assert render(fn.sig.head).strip() == "pub(crate) const fn"
	assert spelling(fn.sig.ret) == "u8"


def test_function_signature_parts():
	source = "fn f<'a, T: Into<Vec<u8>>>(a: HashMap<K, V>, (b, c): (u8, u8)) -> Option<&'a T> where T: 'a { None }\n"
	fn = parse_module(source).items[0]
	assert isinstance(fn, A.Function)
	assert spelling(fn.sig.generics) == "<'a,T:Into<Vec<u8>>>"
	assert [spelling(p.pattern) for p in fn.sig.params] == ["a", "(b,c)"]
	assert [spelling(p.ty) for p in fn.sig.params] == ["HashMap<K,V>", "(u8,u8)"]
	assert spelling(fn.sig.ret) == "Option<&'a T>"
	assert spelling(fn.sig.where_clause) == "where T:'a"


def test_body_statements_only_structure_let():
	source = """\
fn f(input: TokenStream) -> TokenStream {
    #[allow(unused)]
    let input: DeriveInput = parse_macro_input!(input);
    if cond {
        a();
    } else {
        b();
    }
    let x;
    loop { break; }
    tail()
}
"""
	fn = parse_module(source).items[0]
	stmts = fn.body.stmts
	assert [type(s).__name__ for s in stmts] == [
		"LocalBinding",
		"OpaqueStmt",
		"LocalBinding",
		"OpaqueStmt",
		"OpaqueStmt",
	]
	first = stmts[0]
	assert spelling(first.attrs) == "#[allow(unused)]"
	assert spelling(first.pattern) == "input"
	assert spelling(first.ty) == "DeriveInput"
	assert spelling(first.init) == "parse_macro_input!(input)"
	assert render(stmts[1].trees).strip().endswith("}")
	uninit = stmts[2]
	assert uninit.eq is None and uninit.init == []


def test_brace_macro_statements_end_at_their_group():
	source = """\
fn a(input: TokenStream) -> TokenStream {
    debug_assert! { true }
    std::thread_local! { static X: u8 = 0; }
    m!{ x };
    macro_rules! local { () => {} }
    let input = parse_macro_input!(input as DeriveInput);
    vec![1, 2].len();
    input
}
"""
	module = parse_module(source)
	stmts = module.items[0].body.stmts
	assert [type(s).__name__ for s in stmts] == [
		"OpaqueStmt",
		"OpaqueStmt",
		"OpaqueStmt",
		"OpaqueStmt",
		"LocalBinding",
		"OpaqueStmt",
		"OpaqueStmt",
	]
	assert render(stmts[0].trees) == "\n    debug_assert! { true }"
	assert render(stmts[2].trees) == "\n    m!{ x };"
	assert spelling(stmts[4].init) == "parse_macro_input!(input as DeriveInput)"
	assert spelling(stmts[5].trees) == "vec![1,2].len();"
	assert render_module(module) == source


def test_tokens_record_positions():
	module = parse_module("use a;\n\nfn  go() {}\n")
	fn = module.items[1]
	assert (fn.sig.name.line, fn.sig.name.column) == (3, 5)
	assert fn.sig.head[0].lead == "\n\n"


@pytest.mark.parametrize("source", ["fn f() {", "fn f() }", "fn f() { (] }"])
def test_unbalanced_delimiters_are_syntax_errors(source: str):
	with pytest.raises(SyntaxModelError):
		parse_module(source, file="lib.rs")


def test_unknown_character_is_a_syntax_error():
	with pytest.raises(SyntaxModelError) as excinfo:
		parse_module("fn f() { \\ }", file="lib.rs")
	assert excinfo.value.loc.file == "lib.rs"
	assert excinfo.value.loc.line == 1


def test_unterminated_item_is_a_syntax_error():
	with pytest.raises(SyntaxModelError, match="unterminated item"):
		parse_module("fn f() {}\nstruct Dangling")


def test_unsupported_use_shape_is_rejected():
	with pytest.raises(UnsupportedShapeError):
		parse_module("use a::;\n")


def test_quote_item_requires_one_declaration():
	fn = quote_item("fn $name() {}", name="generated")
	assert isinstance(fn, A.Function)
	assert fn.name == "generated"
	with pytest.raises(ValueError):
		quote_item("fn a() {}\nfn b() {}")
