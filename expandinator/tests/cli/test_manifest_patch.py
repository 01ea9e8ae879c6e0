# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from expandinator.core.errors import UnsupportedShapeError
from expandinator.manifest import PORTABLE_PROC_MACRO_ERROR, WASM_LIB_SECTION, patch_manifest

MANIFEST = """\
[package]
name = "hello-derive"
version = "0.1.0"

[lib]
proc-macro = true

[dependencies.proc-macro-error]
version = "1.0.4"
"""


def test_regex_strategy_patches_lib_and_pinned_dependency():
	expected = """\
[package]
name = "hello-derive"
version = "0.1.0"

[lib]
crate-type = ["cdylib"]
[dependencies.wasm-bindgen]
version = "0.2.80"
[dependencies.prettyplease]
version = "0.1.9"

[dependencies.proc-macro-error]
git = "https://github.com/boringcactus/proc-macro2-error"
"""
	assert patch_manifest(MANIFEST) == expected


def test_regex_strategy_accepts_underscore_spelling():
	assert patch_manifest("[lib]\nproc_macro = true\n") == f"[lib]\n{WASM_LIB_SECTION}\n"


def test_regex_strategy_leaves_other_proc_macro_error_versions():
	text = "[lib]\nproc-macro = true\n[dependencies.proc-macro-error]\nversion = \"0.4\"\n"
	assert PORTABLE_PROC_MACRO_ERROR not in patch_manifest(text)


def test_literal_strategy_only_replaces_the_lib_flag():
	patched = patch_manifest(MANIFEST, "literal")
	assert WASM_LIB_SECTION in patched
	assert 'version = "1.0.4"' in patched
	with pytest.raises(UnsupportedShapeError):
		patch_manifest("[lib]\nproc_macro = true\n", "literal")


def test_non_proc_macro_crate_is_rejected():
	with pytest.raises(UnsupportedShapeError):
		patch_manifest("[package]\nname = \"x\"\n")


def test_unknown_strategy_is_rejected():
	with pytest.raises(ValueError):
		patch_manifest(MANIFEST, "sed")
