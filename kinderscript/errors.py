from typing import Optional, Tuple
from kinderscript.types import ErrorVal


class KinderError(Exception):
    """Exception type used to propagate KinderScript parse and runtime errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(f"KinderError: {err.name}: {err.message}")
        self.err = err


def line_and_column(source: str, offset: int) -> Tuple[int, int]:
    """Translate a character offset into 1-based line and column numbers."""
    offset = max(0, min(offset, len(source)))
    line = source.count('\n', 0, offset) + 1
    line_start = source.rfind('\n', 0, offset) + 1
    return line, offset - line_start + 1


def context_snippet(source: str, offset: int) -> str:
    """Render the source line containing `offset` with a caret under it."""
    line_num, col_num = line_and_column(source, offset)
    line_text = source.split('\n')[line_num - 1].rstrip('\r')
    prefix = f"{line_num:4d}: "
    return f"{prefix}{line_text}\n{' ' * (len(prefix) + col_num - 1)}^"


def format_error(err: ErrorVal, source: Optional[str] = None) -> str:
    """Format an error as a human readable diagnostic.

    When `source` is given and the error has an offset, the position is
    reported as line/column and a context snippet is shown. A snippet already
    attached by the parser is reused.
    """
    message = f"{err.name}: {err.message}"
    if err.offset is None or source is None:
        if err.context:
            message += f"\n{err.context}"
        return message
    line_num, col_num = line_and_column(source, err.offset)
    message += f"\n  at line {line_num}, column {col_num}"
    context = err.context or context_snippet(source, err.offset)
    message += f"\n{context}"
    return message
