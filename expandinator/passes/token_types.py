# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Token-stream type portability.

`proc_macro::TokenStream` and `proc_macro2::TokenStream` are interchangeable
token sequences, so spelled-out host types in parameter and return position
are simply renamed. Types nested inside other types are left alone.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence

from expandinator.config import DEFAULT_CONFIG, RewriteConfig
from expandinator.syntax.ast import Decl, Function, Module, Param
from expandinator.syntax.parser import quote
from expandinator.syntax.tokens import TokenTree, first_token, spelling, with_lead


def _port(ty: Sequence[TokenTree], config: RewriteConfig) -> Sequence[TokenTree]:
	if not ty or spelling(ty) not in config.host_token_stream_types:
		return ty
	return with_lead(quote(config.portable_token_stream_type), first_token(ty).lead)  # type: ignore[union-attr]


def port_function_types(fn: Function, config: RewriteConfig = DEFAULT_CONFIG) -> Function:
	params: List[Param] = []
	for param in fn.sig.params:
		ty = _port(param.ty, config)
		params.append(param if ty is param.ty else replace(param, ty=list(ty)))
	ret = _port(fn.sig.ret, config)
	sig = replace(fn.sig, params=params, ret=list(ret))
	return replace(fn, sig=sig)


def port_token_types(module: Module, config: RewriteConfig = DEFAULT_CONFIG) -> Module:
	items: List[Decl] = []
	for decl in module.items:
		if isinstance(decl, Function):
			decl = port_function_types(decl, config)
		items.append(decl)
	return replace(module, items=items)


__all__ = ["port_function_types", "port_token_types"]
