"""CLI entry point for the KinderScript interpreter.

Usage:
    python -m kinderscript [-v|-vv|-vvv] <program_file>
    python -m kinderscript [-v...] --emit-ast <program_file>
    python -m kinderscript [-v...] --ast <ast_json_file>
    python -m kinderscript --version

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .kinder file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file
  --version     Print the KinderScript version

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from . import __version__
from .ast_json import ast_to_obj, ast_from_obj
from .errors import KinderError, format_error
from .types import ErrorVal
from .interpreter import Interpreter
from .parser import parse_program


def read_source(program_file: Path) -> str:
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        text = f.read()
    if not text.strip():
        print(f"Error: file {program_file} is empty or contains only whitespace", file=sys.stderr)
        sys.exit(1)
    return text


def report(e: KinderError, text: str | None = None) -> None:
    # the program was parsed with its surrounding whitespace trimmed
    err = e.err
    if text is not None and err.offset is not None:
        lead = len(text) - len(text.lstrip())
        err = ErrorVal(err.name, err.message, err.offset + lead)
    print(f"Error: {format_error(err, text)}", file=sys.stderr)
    sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='kinderscript', description="KinderScript language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--version', action='version', version=f"KinderScript version {__version__}")
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='KINDER_FILE', help='emit AST JSON for the given .kinder file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='KinderScript program file (.kinder) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        text = read_source(program_file)
        try:
            program = parse_program(text.strip())
        except KinderError as e:
            report(e, text)
        obj = ast_to_obj(program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        try:
            with open(ast_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            program = ast_from_obj(data)
        except (TypeError, ValueError, KeyError) as e:
            print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
            sys.exit(1)
        execute(program, args.v)
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast')
    text = read_source(Path(args.program))
    try:
        program = parse_program(text.strip())
    except KinderError as e:
        report(e, text)
    execute(program, args.v, text)


def execute(program, debug_level: int, text: str | None = None) -> None:
    interpreter = Interpreter(debug_level=debug_level)
    try:
        interpreter.run(program)
    except KinderError as e:
        report(e, text)
    except RecursionError:
        print("Error: RecursionError: program recursed too deeply", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
