"""
TinyLang Semantics - AST definitions and CST lowering
Turns the rule-tagged parse tree into an immutable abstract syntax tree
"""

from dataclasses import dataclass
from typing import List, Union

from parsing import CSTNode, Rule
from error_handling import UnexpectedEnd, UnexpectedRule, InvalidNumber
from stdlib import I64_MIN, I64_MAX


# ============================================================================
# AST NODES (Immutable)
# ============================================================================

@dataclass(frozen=True)
class Number:
  """Integer literal, e.g. `42`"""
  value: int


@dataclass(frozen=True)
class Identifier:
  """Variable reference, e.g. `x`"""
  name: str


@dataclass(frozen=True)
class Assignment:
  """Variable assignment, e.g. `x = 5`"""
  name: str
  value: 'ASTNode'


@dataclass(frozen=True)
class BinaryOp:
  left: 'ASTNode'
  right: 'ASTNode'


@dataclass(frozen=True)
class Add(BinaryOp):
  """`a + b`"""


@dataclass(frozen=True)
class Sub(BinaryOp):
  """`a - b`"""


@dataclass(frozen=True)
class Mul(BinaryOp):
  """`a * b`"""


@dataclass(frozen=True)
class Div(BinaryOp):
  """`a / b`"""


ASTNode = Union[Number, Identifier, Assignment, Add, Sub, Mul, Div]

ADD_OPERATORS = {"+": Add, "-": Sub}
MUL_OPERATORS = {"*": Mul, "/": Div}


# ============================================================================
# LOWERING (Pure Functions)
# ============================================================================

def analyze_program(cst_node: CSTNode, debug: bool = False) -> List[ASTNode]:
  """
  Lower a program CST into one AST node per statement, in source order.
  """
  if cst_node.rule != Rule.PROGRAM:
    raise UnexpectedRule(cst_node.rule)

  nodes = []
  for child in cst_node.children:
    if child.rule == Rule.STATEMENT:
      nodes.append(analyze_statement(child, debug))

  if debug:
    print(f"Lowered {len(nodes)} statements")
  return nodes


def analyze_statement(cst_node: CSTNode, debug: bool = False) -> ASTNode:
  """statement := (assignment | expression) ";" """
  if not cst_node.children:
    raise UnexpectedEnd(Rule.STATEMENT)

  stmt = cst_node.children[0]
  if debug:
    print(f"Analyzing statement: {stmt.rule} {stmt.text!r}")

  if stmt.rule == Rule.ASSIGNMENT:
    return analyze_assignment(stmt, debug)
  elif stmt.rule == Rule.EXPRESSION:
    return analyze_expression(stmt, debug)
  raise UnexpectedRule(stmt.rule)


def analyze_assignment(cst_node: CSTNode, debug: bool = False) -> ASTNode:
  """assignment := identifier "=" expression"""
  children = cst_node.children
  if len(children) < 1:
    raise UnexpectedEnd(Rule.IDENTIFIER)
  if len(children) < 2:
    raise UnexpectedEnd(Rule.EXPRESSION)

  name_node, expr_node = children[0], children[1]
  if name_node.rule != Rule.IDENTIFIER:
    raise UnexpectedRule(name_node.rule)

  return Assignment(name_node.text, analyze_expression(expr_node, debug))


def _fold_left(cst_node: CSTNode, operand_rule: Rule, operator_rule: Rule,
               operators: dict, analyze_operand, debug: bool) -> ASTNode:
  """
  Fold `operand (operator operand)*` into a left-leaning tree, so that
  `a - b - c` becomes Sub(Sub(a, b), c).
  """
  children = cst_node.children
  if not children:
    raise UnexpectedEnd(operand_rule)

  current = analyze_operand(children[0], debug)

  # remaining children come in (operator, operand) pairs
  for i in range(1, len(children), 2):
    op_node = children[i]
    if i + 1 >= len(children):
      raise UnexpectedEnd(operand_rule)
    if op_node.rule != operator_rule or op_node.text not in operators:
      raise UnexpectedRule(op_node.rule)

    right = analyze_operand(children[i + 1], debug)
    current = operators[op_node.text](current, right)

  return current


def analyze_expression(cst_node: CSTNode, debug: bool = False) -> ASTNode:
  """expression := term (add_op term)*"""
  if cst_node.rule != Rule.EXPRESSION:
    raise UnexpectedRule(cst_node.rule)
  return _fold_left(cst_node, Rule.TERM, Rule.ADD_OP, ADD_OPERATORS, analyze_term, debug)


def analyze_term(cst_node: CSTNode, debug: bool = False) -> ASTNode:
  """term := factor (mul_op factor)*"""
  if cst_node.rule != Rule.TERM:
    raise UnexpectedRule(cst_node.rule)
  return _fold_left(cst_node, Rule.FACTOR, Rule.MUL_OP, MUL_OPERATORS, analyze_factor, debug)


def analyze_factor(cst_node: CSTNode, debug: bool = False) -> ASTNode:
  """factor := number | identifier | "(" expression ")" """
  if cst_node.rule != Rule.FACTOR:
    raise UnexpectedRule(cst_node.rule)
  if not cst_node.children:
    raise UnexpectedEnd(Rule.NUMBER)

  inner = cst_node.children[0]
  if inner.rule == Rule.NUMBER:
    return analyze_number(inner)
  elif inner.rule == Rule.IDENTIFIER:
    return Identifier(inner.text)
  elif inner.rule == Rule.EXPRESSION:
    return analyze_expression(inner, debug)
  raise UnexpectedRule(inner.rule)


def analyze_number(cst_node: CSTNode) -> Number:
  """Parse a numeric literal as a signed 64-bit integer"""
  text = cst_node.text
  if not (text.isascii() and text.isdigit()):
    raise InvalidNumber(text)

  value = int(text)
  if not I64_MIN <= value <= I64_MAX:
    raise InvalidNumber(text)
  return Number(value)
