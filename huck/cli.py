"""Huck CLI — Command-line interface for the Huck front end.

Commands:
  huck tokens <file.huck>   — Print the token stream
  huck parse <file.huck>    — Print the unchecked AST
  huck check <file.huck>    — Type check and print the resolved type
  huck run <file.huck>      — Type check and evaluate
  huck ir <file.huck>       — Emit LLVM IR
  huck asm <file.huck>      — Emit native assembly
  huck obj <file.huck>      — Write <file>.o native object code
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Optional

from huck import __version__
from huck.config import HuckConfig, load_config
from huck.emit import emit, compile_to_assembly, compile_to_object
from huck.errors import CompileError
from huck.evaluate import evaluate
from huck.lexer import tokenize
from huck.parser import parse
from huck.typecheck import check

logger = logging.getLogger(__name__)


def _read_source(path: str) -> Optional[str]:
    if not os.path.exists(path):
        print(json.dumps({"error": f"File not found: {path}"}))
        return None
    with open(path, "r") as f:
        return f.read()


def _report(error: CompileError, config: HuckConfig) -> int:
    if config.output_format == "json":
        print(error.to_json())
    else:
        for e in error.errors:
            print(f"error{e}", file=sys.stderr)
    return 1


def _emit_output(payload: dict, pretty: str, config: HuckConfig) -> None:
    if config.output_format == "json":
        print(json.dumps(payload, indent=2))
    else:
        print(pretty)


def cmd_tokens(args: argparse.Namespace, config: HuckConfig) -> int:
    """Scan a source file and print its tokens."""
    source = _read_source(args.file)
    if source is None:
        return 1
    try:
        tokens = tokenize(source, filename=args.file)
    except CompileError as e:
        return _report(e, config)
    if config.output_format == "json":
        print(json.dumps([
            {"type": t.type.name, "value": t.value, "location": str(t.location)}
            for t in tokens
        ], indent=2))
    else:
        for t in tokens:
            print(f"{t.location}\t{t.type.name}\t{t.value}")
    return 0


def cmd_parse(args: argparse.Namespace, config: HuckConfig) -> int:
    """Parse a source file and print the unchecked AST."""
    source = _read_source(args.file)
    if source is None:
        return 1
    try:
        ast = parse(source, filename=args.file)
    except CompileError as e:
        return _report(e, config)
    _emit_output(ast.to_dict(), str(ast), config)
    return 0


def cmd_check(args: argparse.Namespace, config: HuckConfig) -> int:
    """Type check a source file and print the resolved type of the program."""
    source = _read_source(args.file)
    if source is None:
        return 1
    try:
        checked = check(parse(source, filename=args.file))
    except CompileError as e:
        return _report(e, config)
    _emit_output({"status": "ok", "type": str(checked.meta)}, str(checked.meta), config)
    return 0


def cmd_run(args: argparse.Namespace, config: HuckConfig) -> int:
    """Type check and evaluate a source file."""
    source = _read_source(args.file)
    if source is None:
        return 1
    try:
        checked = check(parse(source, filename=args.file))
        value = evaluate(checked)
    except CompileError as e:
        return _report(e, config)
    rendered = str(value).lower() if isinstance(value, bool) else str(value)
    _emit_output({"type": str(checked.meta), "value": value}, rendered, config)
    return 0


def cmd_ir(args: argparse.Namespace, config: HuckConfig) -> int:
    """Emit LLVM IR for a source file."""
    source = _read_source(args.file)
    if source is None:
        return 1
    try:
        checked = check(parse(source, filename=args.file))
    except CompileError as e:
        return _report(e, config)

    module_name = os.path.splitext(os.path.basename(args.file))[0]
    llvm_ir_str = emit(checked, module_name)
    if config.emit_ir_file:
        ir_path = os.path.splitext(args.file)[0] + ".ll"
        with open(ir_path, "w") as f:
            f.write(llvm_ir_str)
        logger.info("wrote %s", ir_path)
    print(llvm_ir_str)
    return 0


def cmd_asm(args: argparse.Namespace, config: HuckConfig) -> int:
    """Emit native assembly for a source file."""
    source = _read_source(args.file)
    if source is None:
        return 1
    try:
        checked = check(parse(source, filename=args.file))
    except CompileError as e:
        return _report(e, config)

    module_name = os.path.splitext(os.path.basename(args.file))[0]
    print(compile_to_assembly(emit(checked, module_name), opt_level=config.opt_level))
    return 0


def cmd_obj(args: argparse.Namespace, config: HuckConfig) -> int:
    """Compile a source file to a native object file next to it."""
    source = _read_source(args.file)
    if source is None:
        return 1
    try:
        checked = check(parse(source, filename=args.file))
    except CompileError as e:
        return _report(e, config)

    stem = os.path.splitext(args.file)[0]
    obj = compile_to_object(emit(checked, os.path.basename(stem)), opt_level=config.opt_level)
    obj_path = stem + ".o"
    with open(obj_path, "wb") as f:
        f.write(obj)
    logger.info("wrote %d bytes to %s", len(obj), obj_path)
    _emit_output({"status": "ok", "object": obj_path, "size": len(obj)}, obj_path, config)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="huck",
        description="Huck — scanner, parser and type checker for a small expression language",
    )
    parser.add_argument("--version", action="version", version=f"huck {__version__}")
    parser.add_argument("--config", help="Path to a .huckrc.json config file")
    parser.add_argument("--format", choices=["pretty", "json"], dest="output_format",
                        help="Output format (overrides the config file)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    commands = [
        ("tokens", cmd_tokens, "Print the token stream"),
        ("parse", cmd_parse, "Print the unchecked AST"),
        ("check", cmd_check, "Type check and print the resolved type"),
        ("run", cmd_run, "Type check and evaluate"),
        ("ir", cmd_ir, "Emit LLVM IR"),
        ("asm", cmd_asm, "Emit native assembly"),
        ("obj", cmd_obj, "Write a native object file"),
    ]
    for name, func, help_text in commands:
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("file", help="Huck source file")
        p.set_defaults(func=func)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = load_config(args.config)
    if args.output_format:
        config.output_format = args.output_format

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.logging_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
