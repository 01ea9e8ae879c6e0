# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from expandinator.config import DEFAULT_CONFIG, RewriteConfig, load_rewrite_config_json


def _write(path: Path, obj: object) -> Path:
	path.write_text(json.dumps(obj))
	return path


def test_defaults_and_derived_spellings():
	cfg = DEFAULT_CONFIG
	assert cfg.host_token_stream_types == ("proc_macro::TokenStream", "::proc_macro::TokenStream")
	assert cfg.portable_token_stream_type == "proc_macro2::TokenStream"
	assert cfg.diagnostics_attr_spellings == ("proc_macro_error", "proc_macro_error::proc_macro_error")
	assert cfg.export_key("Foo") == "#[derive(Foo)]"
	assert cfg.wrapper_name("derive_foo") == "expand_derive_foo"
	assert cfg.wrapper_name("r#type") == "expand_type"


def test_load_overrides(tmp_path: Path):
	path = _write(
		tmp_path / "cfg.json",
		{"format": "expandinator-config", "version": 0, "host_crate": "hostmacro", "wrapper_prefix": "web_"},
	)
	cfg = load_rewrite_config_json(path)
	assert cfg == RewriteConfig(host_crate="hostmacro", wrapper_prefix="web_")


@pytest.mark.parametrize(
	"obj, message",
	[
		([], "JSON object"),
		({"format": "other", "version": 0}, "format/version"),
		({"format": "expandinator-config", "version": 1}, "format/version"),
		({"format": "expandinator-config", "version": 0, "bogus": "x"}, "unknown"),
		({"format": "expandinator-config", "version": 0, "host_crate": 3}, "non-empty string"),
		({"format": "expandinator-config", "version": 0, "host_crate": ""}, "non-empty string"),
		({"format": "expandinator-config", "version": 0, "export_key_format": "#[derive]"}, "{name}"),
	],
)
def test_invalid_config_is_rejected(tmp_path: Path, obj: object, message: str):
	path = _write(tmp_path / "cfg.json", obj)
	with pytest.raises(ValueError) as excinfo:
		load_rewrite_config_json(path)
	assert message in str(excinfo.value)
