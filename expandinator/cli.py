# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from expandinator.config import DEFAULT_CONFIG, RewriteConfig, load_rewrite_config_json
from expandinator.core.diagnostics import Diagnostic, has_errors
from expandinator.core.errors import RewriteError
from expandinator.manifest import ManifestStrategy, patch_manifest
from expandinator.pipeline import rewrite_source
from expandinator.prepare import (
	index_entries,
	parse_targets_list,
	prepare_crate,
	registry_to_json,
	render_targets_index,
)


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(
		prog="expandinator",
		description="Rewrite procedural-macro crates into wasm-exportable libraries",
	)
	common = argparse.ArgumentParser(add_help=False)
	common.add_argument("--config", type=Path, default=None, help="Path to an expandinator-config JSON file")
	common.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (phase/message/severity/file/line/column)",
	)
	sub = p.add_subparsers(dest="cmd", required=True)

	rewrite = sub.add_parser("rewrite", parents=[common], help="Rewrite one crate root (src/lib.rs)")
	rewrite.add_argument("source", type=Path, help="Path to the crate root source file")
	rewrite.add_argument("-o", "--output", type=Path, default=None, help="Write rewritten source here (default: stdout)")
	rewrite.add_argument("--registry", type=Path, default=None, help="Write the export registry JSON here")

	manifest = sub.add_parser("patch-manifest", parents=[common], help="Patch a Cargo.toml for a wasm build")
	manifest.add_argument("manifest", type=Path, help="Path to Cargo.toml")
	manifest.add_argument(
		"--strategy",
		choices=[s.value for s in ManifestStrategy],
		default=ManifestStrategy.REGEX.value,
		help="Patch strategy (default: regex)",
	)
	manifest.add_argument("-o", "--output", type=Path, default=None, help="Write patched manifest here (default: stdout)")

	prepare = sub.add_parser("prepare", parents=[common], help="Prepare unpacked crates in place and write registries")
	prepare.add_argument("roots", nargs="+", type=Path, help="Unpacked crate root directories")
	prepare.add_argument("--out-dir", type=Path, default=Path("out"), help="Registry/index output directory (default: ./out)")
	prepare.add_argument(
		"--strategy",
		choices=[s.value for s in ManifestStrategy],
		default=ManifestStrategy.REGEX.value,
		help="Cargo.toml patch strategy (default: regex)",
	)
	prepare.add_argument(
		"--targets",
		type=Path,
		default=None,
		help="targets list (`name requirement` per line); orders and labels the index",
	)
	return p


def _report(diagnostics: list[Diagnostic], *, as_json: bool, default_file: str | None = None) -> int:
	exit_code = 1 if has_errors(diagnostics) else 0
	if as_json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [d.to_json(default_file=default_file) for d in diagnostics],
		}
		print(json.dumps(payload), file=sys.stderr)
	else:
		for diag in diagnostics:
			print(diag.render(default_file=default_file), file=sys.stderr)
	return exit_code


def _write_or_print(text: str, out: Path | None) -> None:
	if out is None:
		sys.stdout.write(text)
	else:
		out.write_text(text, encoding="utf-8")


def _run_rewrite(args: argparse.Namespace, config: RewriteConfig) -> list[Diagnostic]:
	source_path: Path = args.source
	text, result = rewrite_source(source_path.read_text(encoding="utf-8"), config=config, file=str(source_path))
	_write_or_print(text, args.output)
	if args.registry is not None:
		args.registry.write_text(registry_to_json(result.registry), encoding="utf-8")
	return result.diagnostics


def _run_patch_manifest(args: argparse.Namespace) -> list[Diagnostic]:
	text = patch_manifest(args.manifest.read_text(encoding="utf-8"), args.strategy)
	_write_or_print(text, args.output)
	return []


def _run_prepare(args: argparse.Namespace, config: RewriteConfig) -> list[Diagnostic]:
	targets = None
	if args.targets is not None:
		targets = parse_targets_list(args.targets.read_text(encoding="utf-8"))
	diagnostics: list[Diagnostic] = []
	crates = []
	for root in args.roots:
		prepared = prepare_crate(root, args.out_dir, config=config, strategy=args.strategy)
		print(f"Prepared {prepared.crate.label} -> {prepared.registry_path}")
		diagnostics.extend(prepared.diagnostics)
		crates.append(prepared.crate)
	index = render_targets_index(index_entries(crates, targets))
	(args.out_dir / "targets.ts").write_text(index, encoding="utf-8")
	return diagnostics


def main(argv: list[str] | None = None) -> int:
	"""
	Run one subcommand. Rewrite warnings are printed but do not fail the run;
	any rejected shape, unreadable file or malformed input aborts with exit 1.

	With --json, diagnostics are printed to stderr as one JSON object with an
	exit_code; otherwise as `file:line:col: severity: message` lines.
	"""
	p = _build_parser()
	args = p.parse_args(argv)
	default_file = str(getattr(args, "source", None) or getattr(args, "manifest", None) or "") or None

	try:
		config = DEFAULT_CONFIG if args.config is None else load_rewrite_config_json(args.config)
		if args.cmd == "rewrite":
			diagnostics = _run_rewrite(args, config)
		elif args.cmd == "patch-manifest":
			diagnostics = _run_patch_manifest(args)
		elif args.cmd == "prepare":
			diagnostics = _run_prepare(args, config)
		else:
			raise AssertionError("unreachable")
	except RewriteError as err:
		diagnostics = [err.to_diagnostic(file=default_file)]
	except (ValueError, OSError) as err:
		# Unreadable inputs and malformed config/manifests/targets lists.
		diagnostics = [Diagnostic(message=str(err), phase=args.cmd, severity="error")]
	return _report(diagnostics, as_json=args.json, default_file=default_file)


__all__ = ["main"]
