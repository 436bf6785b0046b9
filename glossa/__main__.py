"""CLI entry point for the Glossa interpreter.

Usage:
    python -m glossa [-v|-vv|-vvv] [-i INPUT] [-o OUTPUT] <program_file>
    python -m glossa --emit-ast <program_file>
    python -m glossa [-v...] [-i INPUT] [-o OUTPUT] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  -i INPUT      Read ΔΙΑΒΑΣΕ input lines from a file instead of stdin
  -o OUTPUT     Also write the printed lines to a file
  --emit-ast    Parse the given program and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .ast import Program
from .ast_json import ast_from_obj, dump_ast
from .errors import GlossaError
from .interpreter import Interpreter
from .parser import parse_program
from .std.io import ConsoleIO


def read_text(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def execute(program: Program, args: argparse.Namespace) -> None:
    input_lines = read_text(Path(args.input)).splitlines() if args.input else None
    interpreter = Interpreter(io=ConsoleIO(input_lines=input_lines), debug_level=args.v)
    try:
        interpreter.run(program)
    except GlossaError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        # lines printed before an error are kept
        if args.output:
            with open(args.output, 'w', encoding='utf-8') as out:
                for line in interpreter.io.output:
                    out.write(line + '\n')


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Glossa language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('-i', '--input', metavar='INPUT', help='file with the input lines for ΔΙΑΒΑΣΕ')
    parser.add_argument('-o', '--output', metavar='OUTPUT', help='also write the printed lines to this file')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='PROGRAM_FILE', help='emit AST JSON for the given program')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Glossa program file to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_text(program_file)
        try:
            ast_program = parse_program(source)
        except GlossaError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            out.write(dump_ast(ast_program))
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        data = read_text(Path(args.ast))
        try:
            ast_program = ast_from_obj(json.loads(data))
        except (ValueError, KeyError, TypeError) as e:
            print(f"Error: invalid AST file {args.ast}: {e}", file=sys.stderr)
            sys.exit(1)
        execute(ast_program, args)
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast')
    source = read_text(Path(args.program))
    try:
        ast_program = parse_program(source)
    except GlossaError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    execute(ast_program, args)


if __name__ == '__main__':
    main()
