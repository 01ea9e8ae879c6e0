# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Token trees: the lossless substrate of the syntax model.

Every token remembers the whitespace and comments that preceded it (`lead`),
so rendering a tree is plain concatenation and unmodified source round-trips
byte-for-byte. Delimited groups (`(...)`, `[...]`, `{...}`) are nested
`Group` nodes; everything else is a flat `Tok`.

Token kinds are the grammar terminal names: IDENT, LIFETIME, NUMBER, STRING,
RAW_STRING, CHAR, PUNCT and the delimiters LPAR/RPAR/LSQB/RSQB/LBRACE/RBRACE.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, Union


@dataclass
class Tok:
	kind: str
	text: str
	lead: str = ""
	line: Optional[int] = None
	column: Optional[int] = None


@dataclass
class Group:
	open: Tok
	trees: List["TokenTree"]
	close: Tok

	@property
	def delim(self) -> str:
		return self.open.text


TokenTree = Union[Tok, Group]

# Kinds that need a separating space when spelled next to each other.
_WORD_KINDS = frozenset({"IDENT", "LIFETIME", "NUMBER", "STRING", "RAW_STRING", "CHAR"})

_ANGLE_DELTA = {"<": 1, "<<": 2, ">": -1, ">>": -2}


def ident(text: str, lead: str = "") -> Tok:
	return Tok(kind="IDENT", text=text, lead=lead)


def punct(text: str, lead: str = "") -> Tok:
	return Tok(kind="PUNCT", text=text, lead=lead)


def is_ident(tt: object, text: Optional[str] = None) -> bool:
	if not isinstance(tt, Tok) or tt.kind != "IDENT":
		return False
	return text is None or tt.text == text


def is_punct(tt: object, text: str) -> bool:
	return isinstance(tt, Tok) and tt.kind == "PUNCT" and tt.text == text


def is_group(tt: object, delim: Optional[str] = None) -> bool:
	if not isinstance(tt, Group):
		return False
	return delim is None or tt.delim == delim


def iter_tokens(trees: Iterable[TokenTree]) -> Iterator[Tok]:
	"""Yield every token of `trees` in source order (groups flattened)."""
	for tt in trees:
		if isinstance(tt, Group):
			yield tt.open
			yield from iter_tokens(tt.trees)
			yield tt.close
		else:
			yield tt


def render(trees: Iterable[TokenTree]) -> str:
	return "".join(tok.lead + tok.text for tok in iter_tokens(trees))


def spelling(trees: Iterable[TokenTree]) -> str:
	"""
	Canonical trivia-free spelling of `trees`.

	Used to compare paths and types independent of formatting:
	`proc_macro :: TokenStream` and `proc_macro::TokenStream` spell the same.
	"""
	out: List[str] = []
	prev: Optional[Tok] = None
	for tok in iter_tokens(trees):
		if prev is not None and prev.kind in _WORD_KINDS and tok.kind in _WORD_KINDS:
			out.append(" ")
		out.append(tok.text)
		prev = tok
	return "".join(out)


def first_token(trees: Iterable[TokenTree]) -> Optional[Tok]:
	return next(iter_tokens(trees), None)


def with_lead(trees: Sequence[TokenTree], lead: str) -> List[TokenTree]:
	"""Shallow copy of `trees` whose first token carries `lead`."""
	if not trees:
		return []
	head = trees[0]
	if isinstance(head, Group):
		head = replace(head, open=replace(head.open, lead=lead))
	else:
		head = replace(head, lead=lead)
	return [head, *trees[1:]]


def strip_lead(trees: Sequence[TokenTree]) -> List[TokenTree]:
	return with_lead(trees, "")


def merge_lead(dropped: str, following: str) -> str:
	"""
	Leading trivia for the node that follows a dropped node.

	The follower takes over the dropped node's position; comments from either
	side are kept in front of it.
	"""
	if not following.strip():
		return dropped
	if not dropped.strip():
		return following
	head = dropped.rstrip()
	if following.startswith(("\n", "\r\n")):
		return head + following
	return head + "\n" + following


def indent_of(tok: Tok) -> str:
	"""Indentation of the line `tok` starts on, taken from its leading trivia."""
	tail = tok.lead.rsplit("\n", 1)[-1]
	return tail if not tail.strip() else ""


def angle_step(depth: int, tt: TokenTree) -> int:
	"""Track `<...>` nesting in type positions; `->` and `=>` are not brackets."""
	if isinstance(tt, Tok) and tt.kind == "PUNCT":
		return max(0, depth + _ANGLE_DELTA.get(tt.text, 0))
	return depth


def find_top(
	trees: Sequence[TokenTree],
	pred: Callable[[TokenTree], bool],
	*,
	start: int = 0,
	angle: bool = False,
) -> int:
	"""Index of the first tree at nesting depth zero matching `pred`, or -1."""
	depth = 0
	for idx in range(start, len(trees)):
		tt = trees[idx]
		if depth == 0 and pred(tt):
			return idx
		if angle:
			depth = angle_step(depth, tt)
	return -1


def split_top(
	trees: Sequence[TokenTree],
	sep: str,
	*,
	angle: bool = False,
) -> List[Tuple[List[TokenTree], Optional[Tok]]]:
	"""
	Split `trees` at depth-zero `sep` punctuation.

	Returns `(segment, separator)` pairs; the final pair has separator None and
	is omitted when it would be empty (trailing separator).
	"""
	out: List[Tuple[List[TokenTree], Optional[Tok]]] = []
	current: List[TokenTree] = []
	depth = 0
	for tt in trees:
		if depth == 0 and is_punct(tt, sep):
			out.append((current, tt))  # type: ignore[arg-type]
			current = []
			continue
		current.append(tt)
		if angle:
			depth = angle_step(depth, tt)
	if current:
		out.append((current, None))
	return out


__all__ = [
	"Tok",
	"Group",
	"TokenTree",
	"ident",
	"punct",
	"is_ident",
	"is_punct",
	"is_group",
	"iter_tokens",
	"render",
	"spelling",
	"first_token",
	"with_lead",
	"strip_lead",
	"merge_lead",
	"indent_of",
	"angle_step",
	"find_top",
	"split_top",
]
