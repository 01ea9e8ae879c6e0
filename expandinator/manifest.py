# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build-descriptor (Cargo.toml) patching.

A procedural-macro crate is compiled as a compiler plugin. For the web build
it must become a `cdylib` that also depends on wasm-bindgen (the boundary
exports) and prettyplease (re-serializing wrapper output). Crates pinned to
proc-macro-error 1.x are pointed at the fork that works on proc_macro2.

Two strategies exist:
  regex    `proc[_-]macro = true` plus the proc-macro-error pin (default)
  literal  only the literal `proc-macro = true` substitution
"""

from __future__ import annotations

import re
from enum import Enum

from expandinator.core.errors import UnsupportedShapeError

WASM_LIB_SECTION = "\n".join(
	[
		'crate-type = ["cdylib"]',
		"[dependencies.wasm-bindgen]",
		'version = "0.2.80"',
		"[dependencies.prettyplease]",
		'version = "0.1.9"',
	]
)

PORTABLE_PROC_MACRO_ERROR = "\n".join(
	[
		"[dependencies.proc-macro-error]",
		'git = "https://github.com/boringcactus/proc-macro2-error"',
	]
)

_PROC_MACRO_TRUE = re.compile(r"proc[_-]macro = true")
_PROC_MACRO_ERROR_1 = re.compile(r'\[dependencies\.proc-macro-error\]\nversion = "1(\.\d\.\d)?"')
_LITERAL_PROC_MACRO = "proc-macro = true"


class ManifestStrategy(str, Enum):
	REGEX = "regex"
	LITERAL = "literal"


def patch_manifest(text: str, strategy: ManifestStrategy | str = ManifestStrategy.REGEX) -> str:
	"""Return `text` patched for a wasm build; a non-proc-macro crate is rejected."""
	strategy = ManifestStrategy(strategy)
	if strategy is ManifestStrategy.LITERAL:
		if _LITERAL_PROC_MACRO not in text:
			raise UnsupportedShapeError("Cargo.toml does not declare `proc-macro = true`")
		return text.replace(_LITERAL_PROC_MACRO, WASM_LIB_SECTION)
	patched, count = _PROC_MACRO_TRUE.subn(lambda _m: WASM_LIB_SECTION, text)
	if count == 0:
		raise UnsupportedShapeError("Cargo.toml does not declare a procedural-macro library")
	return _PROC_MACRO_ERROR_1.sub(lambda _m: PORTABLE_PROC_MACRO_ERROR, patched)


__all__ = ["ManifestStrategy", "patch_manifest", "WASM_LIB_SECTION", "PORTABLE_PROC_MACRO_ERROR"]
