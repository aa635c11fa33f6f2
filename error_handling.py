"""
Error handling for Kestrel
Parse error diagnostics (line/column, context excerpt, suggestions) and the
runtime failure taxonomy raised by the evaluator
"""

from typing import List, Optional, Dict
from pyparsing import ParseException
import re


# ============================================================================
# PARSE ERROR DATA
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create a parse error record"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_parse_error(error: Dict) -> str:
    """Format parse error as string"""
    error_msg = f"Parse error at line {error['line']}, column {error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['expected']:
        error_msg += f"  Expected: {', '.join(error['expected'])}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['context']:
        error_msg += f"  Context:\n{error['context']}\n"

    if error['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg.rstrip('\n')


# ============================================================================
# DIAGNOSTIC HELPERS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get numbered source lines around the error with a caret under the column"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseException) -> List[str]:
    """Extract expected tokens from a pyparsing exception message"""
    expected = []

    msg = str(exc)
    if "Expected" in msg:
        expected_match = re.search(r"Expected\s+(.+?)(?:,\s+found|\s+\(|$)", msg)
        if expected_match:
            expected.append(expected_match.group(1))

    return expected if expected else ["valid syntax"]


def extract_got(source_text: str, line_num: int, col_num: int) -> str:
    """Extract what was actually found at the error location"""
    lines = source_text.split('\n')

    if 0 < line_num <= len(lines):
        error_line = lines[line_num - 1]
        if col_num <= len(error_line):
            start = max(0, col_num - 1)
            end = min(len(error_line), col_num + 10)
            got_text = error_line[start:end].strip()
            if got_text:
                return f"'{got_text}'"
        return "end of line"
    return "end of input"


def generate_suggestions(got: str, expected: List[str], source_line: str = "") -> List[str]:
    """Generate hints for the most common Kestrel syntax slips"""
    suggestions = []
    expected_text = ' '.join(expected)

    if "'}'" in expected_text or got == "end of input":
        suggestions.append("Check that every '{' has a matching '}'")

    if "')'" in expected_text:
        suggestions.append("Check that every '(' has a matching ')'")

    if ".." not in source_line and source_line.lstrip().startswith("for"):
        suggestions.append("Loops are written as: for (i in start..end) { ... }")

    if source_line.lstrip().startswith("function") and "{" not in source_line:
        suggestions.append("Function bodies must be wrapped in braces: function f(x) { ... }")

    if got.startswith("'=") and "==" not in got:
        suggestions.append("Use '==' to compare values; '=' only assigns")

    return suggestions


def enhance_parse_exception_dict(exc: ParseException, source_text: str) -> Dict:
    """Convert pyparsing exception to an enhanced Kestrel error record"""
    line_num = exc.lineno
    col_num = exc.column

    context = get_context_lines(source_text, line_num, col_num)
    expected = extract_expected(exc)
    got = extract_got(source_text, line_num, col_num)
    lines = source_text.split('\n')
    source_line = lines[line_num - 1] if 0 < line_num <= len(lines) else ""
    suggestions = generate_suggestions(got, expected, source_line)

    return make_parse_error(
        message=exc.msg,
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=expected,
        got=got,
        context=context,
        suggestions=suggestions
    )


# ============================================================================
# PARSE ERRORS
# ============================================================================

class KestrelParseError(Exception):
    """Source text that does not match the Kestrel grammar"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None,
                 filename: str = "<input>"):
        self.message = message
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        self.filename = filename
        super().__init__(message)

    def __str__(self) -> str:
        if not self.line:
            return f"Parse error: {self.message}"
        error_dict = make_parse_error(
            self.message, self.location, self.line, self.column,
            self.expected, self.got, self.context, self.suggestions
        )
        return format_parse_error(error_dict)


class KestrelErrorHandler:
    """Builds KestrelParseError values for one source text"""
    def __init__(self, source_text: str, filename: str = "<input>"):
        self.source_text = source_text
        self.filename = filename

    def enhance_parse_exception(self, exc: ParseException) -> KestrelParseError:
        """Convert pyparsing exception to enhanced Kestrel error"""
        error_dict = enhance_parse_exception_dict(exc, self.source_text)
        return KestrelParseError(
            message=error_dict['message'],
            location=error_dict['location'],
            line=error_dict['line'],
            column=error_dict['column'],
            expected=error_dict['expected'],
            got=error_dict['got'],
            context=error_dict['context'],
            suggestions=error_dict['suggestions'],
            filename=self.filename
        )


# ============================================================================
# RUNTIME ERRORS
# ============================================================================

class KestrelRuntimeError(Exception):
    """Base class for every failure raised while evaluating a program"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UndefinedVariableError(KestrelRuntimeError):
    """Lookup of a name bound nowhere on the environment chain"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Undefined variable: {name}")


class TypeMismatchError(KestrelRuntimeError):
    """Operand of the wrong Data variant for an operator or builtin"""

    def __init__(self, operation: str, operands: str):
        self.operation = operation
        self.operands = operands
        super().__init__(f"Unsupported operands for {operation}: {operands}")


class DivisionByZeroError(KestrelRuntimeError):

    def __init__(self):
        super().__init__("Division by zero")


class ArityMismatchError(KestrelRuntimeError):

    def __init__(self, expected: int, actual: int, name: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        self.name = name
        target = f"Function '{name}'" if name else "Function"
        super().__init__(f"{target} expected {expected} arguments but got {actual}")


class NotAFunctionError(KestrelRuntimeError):

    def __init__(self, name: str, type_name: str = ""):
        self.name = name
        self.type_name = type_name
        detail = f" (found {type_name})" if type_name else ""
        super().__init__(f"'{name}' is not a function{detail}")


class IOFailureError(KestrelRuntimeError):
    """File read failure; the underlying OSError is kept as `cause`"""

    def __init__(self, path: str, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to read file: {path} ({cause})")
