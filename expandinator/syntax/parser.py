# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Read Rust source into the declaration-level syntax model.

Two steps:
  1. lark (LALR, basic lexer) balances delimiters and produces token trees;
     trivia between tokens is recovered from token positions so nothing in
     the source is lost.
  2. `_ItemCarver` walks the top-level trees and carves out declarations.
     `extern crate`, `use` and `fn` items get structure; any other item is
     delimited by its first depth-zero `;` or `{...}` and kept opaque.

`quote()` / `quote_item()` lex template text into the same model; the
passes use them for synthesized code.
"""

from __future__ import annotations

import string
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from expandinator.core.errors import SyntaxModelError, UnsupportedShapeError
from expandinator.core.span import Span

from .ast import (
	Attribute,
	Block,
	Decl,
	ExternCrate,
	Function,
	LocalBinding,
	Module,
	OpaqueStmt,
	Other,
	Param,
	Signature,
	Stmt,
	Use,
	UseGlob,
	UseGroup,
	UseGroupItem,
	UseName,
	UsePath,
	UseRename,
	UseTree,
)
from .tokens import (
	Group,
	Tok,
	TokenTree,
	angle_step,
	find_top,
	first_token,
	is_group,
	is_ident,
	is_punct,
	split_top,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
	maybe_placeholders=False,
)

# Qualifiers that may precede `fn` in an item header.
_FN_QUALIFIERS = frozenset({"const", "async", "unsafe", "default"})
# Items that always end at `;` even when they contain a `{...}` initializer.
_SEMI_ITEMS = frozenset({"const", "static", "type"})
# Statements that end at their (last) block rather than at `;`.
_BLOCK_STMTS = frozenset(
	{
		"if",
		"match",
		"loop",
		"while",
		"for",
		"unsafe",
		"async",
		"fn",
		"impl",
		"struct",
		"enum",
		"union",
		"trait",
		"mod",
	}
)


def _describe_error(exc: UnexpectedInput) -> str:
	if isinstance(exc, UnexpectedCharacters):
		return f"unexpected character {exc.char!r}"
	if isinstance(exc, UnexpectedEOF):
		return "unexpected end of input (unbalanced delimiters)"
	if isinstance(exc, UnexpectedToken):
		if exc.token.type == "$END":
			return "unexpected end of input (unbalanced delimiters)"
		return f"unexpected {exc.token!r} (unbalanced delimiters)"
	return "cannot read source"


class _TreeReader:
	"""Convert the lark tree into token trees, attaching leading trivia."""

	def __init__(self, source: str) -> None:
		self.source = source
		self.pos = 0

	def tok(self, token: Token) -> Tok:
		lead = self.source[self.pos : token.start_pos]
		self.pos = token.end_pos
		return Tok(kind=token.type, text=token.value, lead=lead, line=token.line, column=token.column)

	def trees(self, children: Sequence[object]) -> List[TokenTree]:
		out: List[TokenTree] = []
		for child in children:
			if isinstance(child, Tree):
				out.append(self.group(child))
			else:
				out.append(self.tok(child))  # type: ignore[arg-type]
		return out

	def group(self, tree: Tree) -> Group:
		children = tree.children
		open_tok = self.tok(children[0])  # type: ignore[arg-type]
		inner = self.trees(children[1:-1])
		close_tok = self.tok(children[-1])  # type: ignore[arg-type]
		return Group(open=open_tok, trees=inner, close=close_tok)

	def trailing(self) -> str:
		return self.source[self.pos :]


def read_token_trees(source: str, *, file: Optional[str] = None) -> Tuple[List[TokenTree], str]:
	"""Return the top-level token trees of `source` plus its trailing trivia."""
	try:
		tree = _PARSER.parse(source)
	except UnexpectedInput as exc:
		raise SyntaxModelError(_describe_error(exc), loc=Span.from_loc(exc, file=file)) from exc
	reader = _TreeReader(source)
	trees = reader.trees(tree.children)
	return trees, reader.trailing()


class _ItemCarver:
	"""Carve top-level declarations out of a token-tree sequence."""

	def __init__(self, trees: Sequence[TokenTree], file: Optional[str]) -> None:
		self.trees = list(trees)
		self.pos = 0
		self.file = file

	# Cursor helpers -----------------------------------------------------

	def _peek(self, offset: int = 0) -> Optional[TokenTree]:
		idx = self.pos + offset
		if idx < len(self.trees):
			return self.trees[idx]
		return None

	def _take(self) -> TokenTree:
		tt = self.trees[self.pos]
		self.pos += 1
		return tt

	def _span(self, tt: Optional[TokenTree]) -> Span:
		tok = first_token([tt]) if tt is not None else None
		return Span.from_loc(tok, file=self.file)

	def _syntax_error(self, message: str, tt: Optional[TokenTree]) -> SyntaxModelError:
		return SyntaxModelError(message, loc=self._span(tt))

	# Items --------------------------------------------------------------

	def carve(self) -> List[Decl]:
		items: List[Decl] = []
		while self.pos < len(self.trees):
			items.append(self._item())
		return items

	def _item(self) -> Decl:
		inner = self._inner_attr()
		if inner is not None:
			return Other(attrs=[inner], trees=[])
		attrs = self._outer_attrs()
		start = self.pos
		vis = self._visibility()
		if is_ident(self._peek(), "extern") and is_ident(self._peek(1), "crate"):
			return self._extern_crate(attrs, vis)
		if is_ident(self._peek(), "use"):
			return self._use(attrs, vis)
		if self._at_fn():
			fn = self._function(attrs, vis)
			if fn is not None:
				return fn
		# Not a shape we structure; rewind and keep it opaque.
		self.pos = start
		return self._other(attrs)

	def _inner_attr(self) -> Optional[Attribute]:
		if is_punct(self._peek(), "#") and is_punct(self._peek(1), "!") and is_group(self._peek(2), "["):
			pound = self._take()
			bang = self._take()
			body = self._take()
			return Attribute(pound=pound, bang=bang, body=body)  # type: ignore[arg-type]
		return None

	def _outer_attrs(self) -> List[Attribute]:
		attrs: List[Attribute] = []
		while is_punct(self._peek(), "#") and is_group(self._peek(1), "["):
			pound = self._take()
			body = self._take()
			attrs.append(Attribute(pound=pound, bang=None, body=body))  # type: ignore[arg-type]
		return attrs

	def _visibility(self) -> List[TokenTree]:
		vis: List[TokenTree] = []
		if is_ident(self._peek(), "pub"):
			vis.append(self._take())
			if is_group(self._peek(), "("):
				vis.append(self._take())
		elif is_ident(self._peek(), "crate") and not is_punct(self._peek(1), "::"):
			vis.append(self._take())
		return vis

	def _extern_crate(self, attrs: List[Attribute], vis: List[TokenTree]) -> ExternCrate:
		head = vis + [self._take(), self._take()]
		name = self._peek()
		if not is_ident(name):
			raise self._syntax_error("expected crate name after `extern crate`", name)
		self._take()
		rest: List[TokenTree] = []
		while self._peek() is not None and not is_punct(self._peek(), ";"):
			rest.append(self._take())
		semi = self._peek()
		if semi is None:
			raise self._syntax_error("unterminated `extern crate` declaration", name)
		self._take()
		return ExternCrate(attrs=attrs, head=head, name=name, rest=rest, semi=semi)  # type: ignore[arg-type]

	def _use(self, attrs: List[Attribute], vis: List[TokenTree]) -> Use:
		use_tok = self._take()
		head = vis + [use_tok]
		end = find_top(self.trees, lambda tt: is_punct(tt, ";"), start=self.pos)
		if end < 0:
			raise self._syntax_error("unterminated `use` declaration", use_tok)
		seq = self.trees[self.pos : end]
		leading_sep: Optional[Tok] = None
		if seq and is_punct(seq[0], "::"):
			leading_sep = seq[0]  # type: ignore[assignment]
			seq = seq[1:]
		tree, used = _parse_use_tree(seq, 0, self.file)
		if used != len(seq):
			raise UnsupportedShapeError("unsupported `use` tree shape", loc=self._span(seq[used]))
		self.pos = end + 1
		return Use(attrs=attrs, head=head, leading_sep=leading_sep, tree=tree, semi=self.trees[end])  # type: ignore[arg-type]

	def _at_fn(self) -> bool:
		offset = 0
		while True:
			tt = self._peek(offset)
			if is_ident(tt, "fn"):
				return True
			if isinstance(tt, Tok) and tt.kind == "IDENT" and tt.text in _FN_QUALIFIERS:
				offset += 1
				continue
			if is_ident(tt, "extern"):
				offset += 1
				nxt = self._peek(offset)
				if isinstance(nxt, Tok) and nxt.kind in ("STRING", "RAW_STRING"):
					offset += 1
				continue
			return False

	def _function(self, attrs: List[Attribute], vis: List[TokenTree]) -> Optional[Function]:
		head = list(vis)
		while not is_ident(self._peek(), "fn"):
			head.append(self._take())
		head.append(self._take())
		name = self._peek()
		if not is_ident(name):
			return None
		self._take()

		generics: List[TokenTree] = []
		depth = 0
		while True:
			tt = self._peek()
			if tt is None or (depth == 0 and (is_punct(tt, ";") or is_group(tt, "{"))):
				return None
			if depth == 0 and is_group(tt, "("):
				break
			generics.append(self._take())
			depth = angle_step(depth, tt)
		params_group: Group = self._take()  # type: ignore[assignment]

		arrow: Optional[Tok] = None
		ret: List[TokenTree] = []
		if is_punct(self._peek(), "->"):
			arrow = self._take()  # type: ignore[assignment]
			ret = self._collect_until_body(stop_at_where=True)
		where_clause: List[TokenTree] = []
		if is_ident(self._peek(), "where"):
			where_clause = self._collect_until_body(stop_at_where=False)
		if not is_group(self._peek(), "{"):
			return None
		body_group: Group = self._take()  # type: ignore[assignment]

		sig = Signature(
			head=head,
			name=name,  # type: ignore[arg-type]
			generics=generics,
			params_open=params_group.open,
			params=_parse_params(params_group.trees),
			params_close=params_group.close,
			arrow=arrow,
			ret=ret,
			where_clause=where_clause,
		)
		body = Block(open=body_group.open, stmts=carve_stmts(body_group.trees), close=body_group.close)
		return Function(attrs=attrs, sig=sig, body=body)

	def _collect_until_body(self, *, stop_at_where: bool) -> List[TokenTree]:
		out: List[TokenTree] = []
		depth = 0
		while True:
			tt = self._peek()
			if tt is None:
				return out
			if depth == 0:
				if is_group(tt, "{") or is_punct(tt, ";"):
					return out
				if stop_at_where and is_ident(tt, "where"):
					return out
			out.append(self._take())
			depth = angle_step(depth, tt)

	def _other(self, attrs: List[Attribute]) -> Other:
		start = self.pos
		keyword = next(
			(
				tt.text
				for tt in self.trees[start:]
				if isinstance(tt, Tok) and tt.kind == "IDENT" and tt.text not in ("pub", "crate", "unsafe", "default")
			),
			None,
		)
		semi_only = keyword in _SEMI_ITEMS
		depth = 0
		idx = start
		while idx < len(self.trees):
			tt = self.trees[idx]
			if is_punct(tt, ";") or (not semi_only and depth == 0 and is_group(tt, "{")):
				self.pos = idx + 1
				return Other(attrs=attrs, trees=self.trees[start : idx + 1])
			depth = angle_step(depth, tt)
			idx += 1
		tt = self.trees[start] if start < len(self.trees) else None
		raise self._syntax_error("unterminated item", tt)


def _parse_use_tree(seq: Sequence[TokenTree], idx: int, file: Optional[str]) -> Tuple[UseTree, int]:
	if idx >= len(seq):
		tok = first_token(seq[-1:]) if seq else None
		raise UnsupportedShapeError("empty `use` tree", loc=Span.from_loc(tok, file=file))
	tt = seq[idx]
	if is_group(tt, "{"):
		group: Group = tt  # type: ignore[assignment]
		items: List[UseGroupItem] = []
		inner = group.trees
		k = 0
		while k < len(inner):
			sub, k = _parse_use_tree(inner, k, file)
			comma: Optional[Tok] = None
			if k < len(inner):
				if not is_punct(inner[k], ","):
					raise UnsupportedShapeError(
						"unsupported `use` group member",
						loc=Span.from_loc(first_token([inner[k]]), file=file),
					)
				comma = inner[k]  # type: ignore[assignment]
				k += 1
			items.append(UseGroupItem(tree=sub, comma=comma))
		return UseGroup(open=group.open, items=items, close=group.close), idx + 1
	if is_punct(tt, "*"):
		return UseGlob(star=tt), idx + 1  # type: ignore[arg-type]
	if is_ident(tt):
		nxt = seq[idx + 1] if idx + 1 < len(seq) else None
		if is_punct(nxt, "::"):
			sub, end = _parse_use_tree(seq, idx + 2, file)
			return UsePath(ident=tt, sep=nxt, tree=sub), end  # type: ignore[arg-type]
		if is_ident(nxt, "as"):
			rename = seq[idx + 2] if idx + 2 < len(seq) else None
			if not is_ident(rename):
				raise UnsupportedShapeError("expected identifier after `as`", loc=Span.from_loc(nxt, file=file))
			return UseRename(ident=tt, as_tok=nxt, rename=rename), idx + 3  # type: ignore[arg-type]
		return UseName(ident=tt), idx + 1  # type: ignore[arg-type]
	raise UnsupportedShapeError("unsupported `use` tree shape", loc=Span.from_loc(first_token([tt]), file=file))


def _parse_params(trees: Sequence[TokenTree]) -> List[Param]:
	params: List[Param] = []
	for segment, comma in split_top(trees, ",", angle=True):
		colon_idx = find_top(segment, lambda tt: is_punct(tt, ":"), angle=True)
		if colon_idx < 0:
			params.append(Param(pattern=segment, comma=comma))
			continue
		params.append(
			Param(
				pattern=segment[:colon_idx],
				colon=segment[colon_idx],  # type: ignore[arg-type]
				ty=segment[colon_idx + 1 :],
				comma=comma,
			)
		)
	return params


def _brace_macro_end(trees: Sequence[TokenTree], start: int) -> int:
	"""End of a `path! { ... }` statement (and its optional `;`) at `start`, or -1."""
	idx = start
	if is_punct(trees[idx], "::"):
		idx += 1
	while idx < len(trees) and is_ident(trees[idx]):
		idx += 1
		if idx < len(trees) and is_punct(trees[idx], "::"):
			idx += 1
			continue
		if idx >= len(trees) or not is_punct(trees[idx], "!"):
			return -1
		idx += 1
		# `macro_rules! name { ... }`
		if idx < len(trees) and is_ident(trees[idx]):
			idx += 1
		if idx >= len(trees) or not is_group(trees[idx], "{"):
			return -1
		idx += 1
		if idx < len(trees) and is_punct(trees[idx], ";"):
			idx += 1
		return idx
	return -1


def _stmt_end(trees: Sequence[TokenTree], start: int) -> int:
	# A brace-delimited macro in statement position needs no `;`.
	macro_end = _brace_macro_end(trees, start)
	if macro_end >= 0:
		return macro_end
	first = trees[start]
	block_like = (
		is_group(first, "{")
		or (isinstance(first, Tok) and first.kind == "LIFETIME")
		or (isinstance(first, Tok) and first.kind == "IDENT" and first.text in _BLOCK_STMTS)
	)
	idx = start
	while idx < len(trees):
		tt = trees[idx]
		if is_punct(tt, ";"):
			return idx + 1
		if block_like and is_group(tt, "{"):
			nxt = trees[idx + 1] if idx + 1 < len(trees) else None
			if not (is_ident(nxt, "else") or is_punct(nxt, ".") or is_punct(nxt, "?")):
				return idx + 1
		idx += 1
	return len(trees)


def _local_binding(attrs: List[TokenTree], seg: List[TokenTree]) -> LocalBinding:
	let_tok: Tok = seg[0]  # type: ignore[assignment]
	semi: Optional[Tok] = None
	body = seg[1:]
	if body and is_punct(body[-1], ";"):
		semi = body[-1]  # type: ignore[assignment]
		body = body[:-1]
	eq_idx = find_top(body, lambda tt: is_punct(tt, "="), angle=True)
	lhs = body if eq_idx < 0 else body[:eq_idx]
	colon_idx = find_top(lhs, lambda tt: is_punct(tt, ":"), angle=True)
	binding = LocalBinding(attrs=attrs, let_tok=let_tok, pattern=lhs, semi=semi)
	if colon_idx >= 0:
		binding.pattern = lhs[:colon_idx]
		binding.colon = lhs[colon_idx]  # type: ignore[assignment]
		binding.ty = lhs[colon_idx + 1 :]
	if eq_idx >= 0:
		binding.eq = body[eq_idx]  # type: ignore[assignment]
		binding.init = body[eq_idx + 1 :]
	return binding


def carve_stmts(trees: Sequence[TokenTree]) -> List[Stmt]:
	"""Split a block body into statements; only `let` gets structure."""
	stmts: List[Stmt] = []
	idx = 0
	while idx < len(trees):
		start = idx
		while idx + 1 < len(trees) and is_punct(trees[idx], "#") and is_group(trees[idx + 1], "["):
			idx += 2
		if idx < len(trees) and is_ident(trees[idx], "let"):
			semi = find_top(trees, lambda tt: is_punct(tt, ";"), start=idx)
			end = len(trees) if semi < 0 else semi + 1
			stmts.append(_local_binding(list(trees[start:idx]), list(trees[idx:end])))
		elif idx < len(trees):
			end = _stmt_end(trees, idx)
			stmts.append(OpaqueStmt(trees=list(trees[start:end])))
		else:
			end = len(trees)
			stmts.append(OpaqueStmt(trees=list(trees[start:end])))
		idx = end
	return stmts


def parse_module(source: str, *, file: Optional[str] = None) -> Module:
	"""Parse crate-root source text into a Module."""
	trees, trailing = read_token_trees(source, file=file)
	items = _ItemCarver(trees, file).carve()
	return Module(items=items, trailing=trailing, file=file)


def quote(template: str, **holes: str) -> List[TokenTree]:
	"""
	Lex a `$hole` template into token trees.

	Hole values are source text; they are substituted before lexing, so any
	comments inside them survive as trivia.
	"""
	text = string.Template(template).substitute(holes)
	trees, _ = read_token_trees(text)
	return trees


def quote_item(template: str, **holes: str) -> Decl:
	"""Lex a template holding exactly one declaration."""
	text = string.Template(template).substitute(holes)
	module = parse_module(text)
	if len(module.items) != 1:
		raise ValueError(f"template must hold one declaration, got {len(module.items)}")
	return module.items[0]


__all__ = ["parse_module", "read_token_trees", "carve_stmts", "quote", "quote_item"]
