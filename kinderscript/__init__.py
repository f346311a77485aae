# KinderScript language package
# This package provides the parser and interpreter for KinderScript, a small
# language for teaching programming fundamentals.
__version__ = '1.2.0'

from .errors import KinderError
from .interpreter import run_program, run_file, Interpreter
from .parser import parse_program

__all__ = [
    'run_program',
    'run_file',
    'parse_program',
    'Interpreter',
    'KinderError',
]
