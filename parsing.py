"""
TinyLang Parser
Grammar-driven parser producing a rule-tagged CST with source spans
"""

import sys
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from enum import Enum

# Import pyparsing with error handling
try:
    from pyparsing import (
        Word, Literal, Suppress, Forward, ZeroOrMore, Located, ParseBaseException,
        ParserElement, ParseResults, nums, srange
    )
    # Enable packrat parsing for performance
    ParserElement.enable_packrat()
except ImportError:
    raise ImportError("pyparsing library not found. Install with: pip install pyparsing")

from error_handling import GrammarViolation

# every parenthesis level costs pyparsing a couple dozen frames
sys.setrecursionlimit(max(sys.getrecursionlimit(), 5000))

NESTED_TOO_DEEPLY = "expression nested too deeply"


class Rule(Enum):
    """Grammar rules that tag CST nodes"""
    PROGRAM = "program"
    STATEMENT = "statement"
    ASSIGNMENT = "assignment"
    EXPRESSION = "expression"
    TERM = "term"
    FACTOR = "factor"
    ADD_OP = "add_op"
    MUL_OP = "mul_op"
    NUMBER = "number"
    IDENTIFIER = "identifier"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SourceSpan:
    """Source location information for a matched rule"""
    filename: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def __str__(self) -> str:
        if self.start_line == self.end_line:
            return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_col}"
        return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_line}:{self.end_col}"


@dataclass(frozen=True)
class CSTNode:
    """Concrete Syntax Tree node: one grammar rule match and its sub-matches"""
    rule: Rule
    text: str
    children: List['CSTNode'] = field(default_factory=list)
    span: Optional[SourceSpan] = None

    def __str__(self) -> str:
        if self.children:
            children_str = ", ".join(str(child) for child in self.children)
            return f"{self.rule}({children_str})"
        return f"{self.rule}({self.text!r})"


def _position(text: str, loc: int) -> tuple:
    """1-based (line, column) of an offset into text"""
    line = text.count('\n', 0, loc) + 1
    column = loc - (text.rfind('\n', 0, loc) + 1) + 1
    return line, column


class TinyLangGrammar:
    """TinyLang grammar definition using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.filename = "<input>"
        self._setup_grammar()

    def _rule(self, rule: Rule, expr: ParserElement) -> ParserElement:
        """Wrap expr so each match becomes a CSTNode tagged with rule"""

        def make_node(instring: str, loc: int, tokens: ParseResults) -> CSTNode:
            start, inner, end = tokens[0], tokens[1], tokens[2]
            children = [tok for tok in inner if isinstance(tok, CSTNode)]
            start_line, start_col = _position(instring, start)
            end_line, end_col = _position(instring, end)
            span = SourceSpan(self.filename, start_line, start_col, end_line, end_col)
            return CSTNode(rule, instring[start:end], children, span)

        located = Located(expr)
        located.set_parse_action(make_node)
        located.set_name(rule.value)
        return located

    def _setup_grammar(self):
        """Setup the TinyLang grammar, one pyparsing element per rule"""

        # Forward declaration for parenthesized expressions
        expression = Forward()

        number = self._rule(Rule.NUMBER, Word(nums))
        identifier = self._rule(Rule.IDENTIFIER, Word(srange("[a-z]")))

        add_op = self._rule(Rule.ADD_OP, Literal("+") | Literal("-"))
        mul_op = self._rule(Rule.MUL_OP, Literal("*") | Literal("/"))

        parenthesized = Suppress("(") - expression - Suppress(")")
        factor = self._rule(Rule.FACTOR, number | identifier | parenthesized)
        term = self._rule(Rule.TERM, factor + ZeroOrMore(mul_op + factor))
        expression <<= self._rule(Rule.EXPRESSION, term + ZeroOrMore(add_op + term))

        assignment = self._rule(Rule.ASSIGNMENT, identifier + Suppress("=") - expression)
        statement = self._rule(Rule.STATEMENT, (assignment | expression) - Suppress(";"))
        program = self._rule(Rule.PROGRAM, ZeroOrMore(statement))

        # Spans and error columns refer to the text as given
        program.parse_with_tabs()
        expression.parse_with_tabs()

        # Store the main parsers
        self.program = program
        self.statement = statement
        self.assignment = assignment
        self.expression = expression
        self.term = term
        self.factor = factor

    def parse_cst(self, text: str, filename: str = "<input>") -> CSTNode:
        """Parse a complete TinyLang program into its program CST node"""
        self.filename = filename
        try:
            result = self.program.parse_string(text, parse_all=True)
        except ParseBaseException as e:
            raise GrammarViolation.from_exception(e, text, filename) from e
        except RecursionError:
            raise GrammarViolation(NESTED_TOO_DEEPLY, filename=filename) from None
        finally:
            # memoized matches carry the filename they were built with
            ParserElement.reset_cache()

        cst = result[0]
        if self.debug:
            print(f"Parsed {filename}: {len(cst.children)} statements")
        return cst

    def parse_expression(self, text: str, filename: str = "<input>") -> CSTNode:
        """Parse a single TinyLang expression (no trailing ';')"""
        self.filename = filename
        try:
            result = self.expression.parse_string(text, parse_all=True)
        except ParseBaseException as e:
            raise GrammarViolation.from_exception(e, text, filename) from e
        except RecursionError:
            raise GrammarViolation(NESTED_TOO_DEEPLY, filename=filename) from None
        finally:
            ParserElement.reset_cache()
        return result[0]


class TinyLangParser:
    """Main TinyLang parser combining the grammar and AST lowering"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = TinyLangGrammar(debug)

    def parse_file(self, filepath: str) -> List[Any]:
        """Parse a TinyLang source file into a list of AST nodes"""
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.parse_string(content, filepath)

    def parse_string(self, text: str, filename: str = "<input>") -> List[Any]:
        """Parse TinyLang source code into a list of AST nodes"""
        from semantics import analyze_program

        cst = self.grammar.parse_cst(text, filename)
        try:
            return analyze_program(cst, self.debug)
        except RecursionError:
            raise GrammarViolation(NESTED_TOO_DEEPLY, filename=filename) from None

    def parse_expression(self, text: str, filename: str = "<input>") -> Any:
        """Parse a single expression into one AST node"""
        from semantics import analyze_expression

        cst = self.grammar.parse_expression(text, filename)
        try:
            return analyze_expression(cst, self.debug)
        except RecursionError:
            raise GrammarViolation(NESTED_TOO_DEEPLY, filename=filename) from None


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> TinyLangParser:
    """Create a TinyLang parser"""
    return TinyLangParser(debug=debug)


def create_debug_parser() -> TinyLangParser:
    """Create a TinyLang parser with debug enabled"""
    return TinyLangParser(debug=True)


_default_parser: Optional[TinyLangParser] = None


def parse_program(text: str, filename: str = "<input>") -> List[Any]:
    """
    Parse a complete program into a sequence of AST nodes, one per statement.

    Raises a ParseError subclass if the input does not conform to the grammar
    or cannot be lowered into an AST.
    """
    global _default_parser
    if _default_parser is None:
        _default_parser = create_parser()
    return _default_parser.parse_string(text, filename)


def parse(text: str) -> List[Any]:
    """Main parsing function that takes source code and returns the AST"""
    return parse_program(text)


# Utility functions for working with CST
def find_nodes_by_rule(cst: CSTNode, rule: Rule) -> List[CSTNode]:
    """Find all nodes matched by a specific rule in CST"""
    result = []

    def search(node: CSTNode):
        if node.rule == rule:
            result.append(node)
        for child in node.children:
            search(child)

    search(cst)
    return result


def pretty_print_cst(cst: CSTNode, indent: int = 0) -> str:
    """Pretty print a CST node for debugging"""
    result = "  " * indent + f"{cst.rule}"
    if not cst.children:
        result += f"({cst.text!r})"
    result += "\n"

    for child in cst.children:
        result += pretty_print_cst(child, indent + 1)

    return result


def cst_to_dict(cst: CSTNode) -> Dict[str, Any]:
    """Convert CST to dictionary representation"""
    return {
        "rule": cst.rule.value,
        "text": cst.text,
        "span": {
            "filename": cst.span.filename,
            "start_line": cst.span.start_line,
            "start_col": cst.span.start_col,
            "end_line": cst.span.end_line,
            "end_col": cst.span.end_col,
        } if cst.span else None,
        "children": [cst_to_dict(child) for child in cst.children]
    }
