"""
Error taxonomy for the TinyLang parser and interpreter
Parse-time and evaluation-time errors are disjoint hierarchies
"""

from typing import List, Optional, Dict
from pyparsing import ParseBaseException
import re


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
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
    """Create an immutable parse error structure"""
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
    if error['line']:
        error_msg = f"Parse error at line {error['line']}, column {error['column']}:\n"
    else:
        error_msg = "Parse error:\n"
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
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        if i == line_num - 1:
            context_parts.append(f"{line_prefix}{lines[i]}")
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")
        else:
            context_parts.append(f"{line_prefix}{lines[i]}")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseBaseException) -> List[str]:
    """Extract expected tokens from exception"""
    expected = []

    # pyparsing only reports this through the message
    msg = str(exc)
    if "Expected" in msg:
        expected_match = re.search(r"Expected\s+(.+?)(?:,\s+found|\s+\(|$)", msg)
        if expected_match:
            expected.append(expected_match.group(1))

    return expected if expected else ["valid syntax"]


def extract_got(source_text: str, line_num: int, col_num: int) -> str:
    """Extract what was actually found at the error location"""
    lines = source_text.split('\n')

    if line_num <= len(lines):
        error_line = lines[line_num - 1]
        if col_num <= len(error_line):
            start = max(0, col_num - 1)
            end = min(len(error_line), col_num + 10)
            got_text = error_line[start:end].strip()
            if got_text:
                return f"'{got_text}'"
        if line_num == len(lines):
            return "end of input"
        return "end of line"
    return "end of input"


def generate_suggestions(got: str, source_text: str) -> List[str]:
    """Generate hints for the mistakes people usually make in TinyLang"""
    suggestions = []

    if got.startswith("'-"):
        suggestions.append("Unary minus is not supported - write '0 - x' instead of '-x'")

    if any(ch.isupper() for ch in got):
        suggestions.append("Identifiers are lowercase letters only")

    if got == "end of input" and not source_text.rstrip().endswith(';'):
        suggestions.append("Every statement must end with ';'")

    if source_text.count('(') != source_text.count(')'):
        suggestions.append("Parentheses are unbalanced")

    if '.' in got:
        suggestions.append("Only integer literals are supported")

    return suggestions


def enhance_parse_exception_dict(exc: ParseBaseException, source_text: str) -> Dict:
    """Convert pyparsing exception to enhanced TinyLang error dict"""
    line_num = exc.lineno
    col_num = exc.column

    context = get_context_lines(source_text, line_num, col_num)
    expected = extract_expected(exc)
    got = extract_got(source_text, line_num, col_num)
    suggestions = generate_suggestions(got, source_text)

    return make_parse_error(
        message=str(exc),
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=expected,
        got=got,
        context=context,
        suggestions=suggestions
    )


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class TinyLangError(Exception):
    """Base class for every error the core reports"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ParseError(TinyLangError):
    """Raised while turning source text into an AST"""


class GrammarViolation(ParseError):
    """Input does not match the grammar"""

    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None,
                 filename: str = "<input>"):
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        self.filename = filename
        super().__init__(message)

    @classmethod
    def from_exception(cls, exc: ParseBaseException, source_text: str,
                       filename: str = "<input>") -> 'GrammarViolation':
        """Build from a pyparsing exception raised against source_text"""
        error_dict = enhance_parse_exception_dict(exc, source_text)
        return cls(filename=filename, **error_dict)

    def __str__(self) -> str:
        error_dict = make_parse_error(
            self.message, self.location, self.line, self.column,
            self.expected, self.got, self.context, self.suggestions
        )
        return format_parse_error(error_dict)


class UnexpectedRule(ParseError):
    """A grammar rule appeared where a different one was required"""

    def __init__(self, rule):
        self.rule = rule
        super().__init__(f"Unexpected rule: {_rule_name(rule)}")


class InvalidNumber(ParseError):
    """A numeric literal does not fit a signed 64-bit integer"""

    def __init__(self, literal: str):
        self.literal = literal
        super().__init__(f"Invalid number: {literal}")


class UnexpectedEnd(ParseError):
    """A rule matched but a child rule it requires is missing"""

    def __init__(self, expected):
        self.expected = expected
        super().__init__(f"Expected {_rule_name(expected)}, but found end of input")


class EvalError(TinyLangError):
    """Raised while evaluating an AST"""


class UndefinedVariable(EvalError):
    """An identifier was read before it was assigned"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Undefined variable '{name}'")


class DivisionByZero(EvalError):
    """The right operand of a division evaluated to zero"""

    def __init__(self):
        super().__init__("Division by zero")


class EvalRuntimeError(EvalError):
    """Any other evaluation failure"""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Runtime error: {detail}")


def _rule_name(rule) -> str:
    return getattr(rule, 'value', str(rule))
