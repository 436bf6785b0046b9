# Glossa language package
# This package provides a tokenizer, parser and interpreter for ΓΛΩΣΣΑ,
# the pseudocode language of Greek secondary schools.
from .errors import GlossaError, LexerError, ParseError, GlossaRuntimeError
from .lexer import tokenize
from .parser import parse_program, parse_standalone_expression
from .interpreter import run_program, run_file, Interpreter
from .std.io import BufferedIO, ConsoleIO

__all__ = [
    'tokenize',
    'parse_program',
    'parse_standalone_expression',
    'run_program',
    'run_file',
    'Interpreter',
    'BufferedIO',
    'ConsoleIO',
    'GlossaError',
    'LexerError',
    'ParseError',
    'GlossaRuntimeError',
]
