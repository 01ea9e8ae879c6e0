# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Prepare unpacked crates for a web build.

For each crate root: patch `Cargo.toml`, rewrite `src/lib.rs`, and write the
export registry to `<out>/<name>-<version>.json` (dots in the version become
dashes, matching the wasm-bindgen `--out-name`). After all crates, the
aggregate `targets.ts` index lets the page lazy-load each crate's module and
registry. Fetching crates and running cargo/wasm-bindgen happen elsewhere.

Crates are processed one at a time; the first failure aborts the run.
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from expandinator.config import DEFAULT_CONFIG, RewriteConfig
from expandinator.core.diagnostics import Diagnostic
from expandinator.manifest import ManifestStrategy, patch_manifest
from expandinator.passes import ExportRegistry
from expandinator.pipeline import rewrite_source


@dataclass(frozen=True)
class CrateId:
	name: str
	version: str

	@property
	def out_name(self) -> str:
		return f"{self.name}-{self.version.replace('.', '-')}"

	@property
	def label(self) -> str:
		return f"{self.name} {self.version}"


@dataclass
class PreparedCrate:
	crate: CrateId
	registry: ExportRegistry
	registry_path: Path
	diagnostics: List[Diagnostic] = field(default_factory=list)


def read_crate_id(manifest_text: str) -> CrateId:
	"""Package name and version from Cargo.toml text."""
	try:
		obj = tomllib.loads(manifest_text)
	except tomllib.TOMLDecodeError as exc:
		raise ValueError(f"invalid Cargo.toml: {exc}") from exc
	package = obj.get("package")
	if not isinstance(package, dict):
		raise ValueError("Cargo.toml has no [package] table")
	name = package.get("name")
	version = package.get("version")
	if not isinstance(name, str) or not isinstance(version, str):
		raise ValueError("Cargo.toml [package] must set string `name` and `version`")
	return CrateId(name=name, version=version)


def registry_to_json(registry: ExportRegistry) -> str:
	return json.dumps(registry.to_json(), indent=2, sort_keys=True) + "\n"


def prepare_crate(
	root: Path,
	out_dir: Path,
	*,
	config: RewriteConfig = DEFAULT_CONFIG,
	strategy: ManifestStrategy | str = ManifestStrategy.REGEX,
) -> PreparedCrate:
	manifest_path = root / "Cargo.toml"
	lib_path = root / "src" / "lib.rs"
	manifest_text = manifest_path.read_text(encoding="utf-8")
	crate = read_crate_id(manifest_text)
	# Compute everything before writing so a rejected crate is left untouched.
	new_manifest = patch_manifest(manifest_text, strategy)
	new_lib, result = rewrite_source(lib_path.read_text(encoding="utf-8"), config=config, file=str(lib_path))
	manifest_path.write_text(new_manifest, encoding="utf-8")
	lib_path.write_text(new_lib, encoding="utf-8")

	out_dir.mkdir(parents=True, exist_ok=True)
	registry_path = out_dir / f"{crate.out_name}.json"
	registry_path.write_text(registry_to_json(result.registry), encoding="utf-8")
	return PreparedCrate(
		crate=crate,
		registry=result.registry,
		registry_path=registry_path,
		diagnostics=result.diagnostics,
	)


def parse_targets_list(text: str) -> List[Tuple[str, str]]:
	"""
	Parse a targets list: one `name requirement` pair per line.

	Blank lines and `#` comments are ignored. Only the crate name is used to
	pick prepared crates; the requirement is kept for reporting.
	"""
	targets: List[Tuple[str, str]] = []
	for lineno, raw in enumerate(text.splitlines(), start=1):
		line = raw.split("#", 1)[0].strip()
		if not line:
			continue
		name, sep, requirement = line.partition(" ")
		if not sep or not requirement.strip():
			raise ValueError(f"targets line {lineno}: expected `name requirement`, got {raw!r}")
		targets.append((name, requirement.strip()))
	return targets


def index_entries(
	crates: Sequence[CrateId],
	targets: Optional[Sequence[Tuple[str, str]]] = None,
) -> List[Tuple[str, CrateId]]:
	"""
	(label, crate) pairs for the index.

	Without a targets list every crate is labelled `name version`. With one,
	entries follow the list order and are labelled `name requirement`; a
	target whose crate was not prepared is an error.
	"""
	if targets is None:
		return [(c.label, c) for c in crates]
	by_name = {c.name: c for c in crates}
	entries: List[Tuple[str, CrateId]] = []
	for name, requirement in targets:
		crate = by_name.get(name)
		if crate is None:
			raise ValueError(f"no prepared crate for target `{name} {requirement}`")
		entries.append((f"{name} {requirement}", crate))
	return entries


def render_targets_index(entries: Sequence[Tuple[str, CrateId]]) -> str:
	"""The `targets.ts` lookup manifest mapping each label to lazy lib/data imports."""
	lines = [
		f'"{label}": {{ lib: () => import("./{c.out_name}.js"), data: () => import("./{c.out_name}.json") }}'
		for label, c in entries
	]
	body = ",\n".join(lines)
	return (
		"export default {\n"
		f"    {body}\n"
		"} as Record<string, { lib: () => Promise<any>; data: () => Promise<any> }>;\n"
	)


__all__ = [
	"CrateId",
	"PreparedCrate",
	"read_crate_id",
	"registry_to_json",
	"prepare_crate",
	"parse_targets_list",
	"index_entries",
	"render_targets_index",
]
