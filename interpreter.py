"""
TinyLang Interpreter - tree-walking evaluator
Executes a sequence of AST nodes against a flat name -> integer environment
"""

from typing import Dict, List, Optional

from semantics import ASTNode, Number, Identifier, Assignment, BinaryOp, Add, Sub, Mul, Div
from stdlib import BUILTIN_OPERATORS
from error_handling import UndefinedVariable, EvalRuntimeError


OPERATOR_SYMBOLS = {
    Add: "+",
    Sub: "-",
    Mul: "*",
    Div: "/",
}


class Interpreter:
  """Interpreter that executes the AST and maintains variable state"""

  def __init__(self, debug: bool = False, variables: Optional[Dict[str, int]] = None):
    self.debug = debug
    # variable name -> last assigned value, in first-assignment order
    self.variables: Dict[str, int] = dict(variables) if variables else {}

  def eval(self, nodes: List[ASTNode]) -> None:
    """
    Evaluate a sequence of statements in order.

    Stops at the first failing statement and re-raises its EvalError;
    assignments made before it stay in `variables`, nothing after it runs.
    """
    for index, node in enumerate(nodes, 1):
      value = self.eval_node(node)
      if self.debug:
        print(f"Statement {index} => {value}")

  def eval_node(self, node: ASTNode) -> int:
    """Evaluate a single AST node and return its value"""
    try:
      return self._eval(node)
    except RecursionError:
      raise EvalRuntimeError("expression too deeply nested") from None

  def _eval(self, node: ASTNode) -> int:
    if self.debug:
      print(f"Evaluating: {type(node).__name__}")

    if isinstance(node, Number):
      return node.value
    elif isinstance(node, Identifier):
      return self.lookup(node.name)
    elif isinstance(node, Assignment):
      value = self._eval(node.value)
      self.variables[node.name] = value
      if self.debug:
        print(f"Bound: {node.name} = {value}")
      return value
    elif isinstance(node, BinaryOp):
      return self.eval_operation(node)
    raise EvalRuntimeError(f"Unknown node type: {type(node).__name__}")

  def eval_operation(self, node: BinaryOp) -> int:
    """
    Evaluate binary operation, left operand fully before right.

    The left spine of a chain like `a + b + c` is walked in a loop;
    only right operands recurse.
    """
    spine = [node]
    while isinstance(spine[-1].left, BinaryOp):
      spine.append(spine[-1].left)
      if self.debug:
        print(f"Evaluating: {type(spine[-1]).__name__}")

    value = self._eval(spine[-1].left)
    for operation in reversed(spine):
      op = OPERATOR_SYMBOLS.get(type(operation))
      if op is None:
        raise EvalRuntimeError(f"Unknown operation: {type(operation).__name__}")
      right_val = self._eval(operation.right)
      value = BUILTIN_OPERATORS[op](value, right_val)
    return value

  def lookup(self, name: str) -> int:
    if name not in self.variables:
      raise UndefinedVariable(name)
    return self.variables[name]

  def reset(self) -> None:
    """Forget every variable"""
    self.variables.clear()


def eval_program(nodes: List[ASTNode], debug: bool = False) -> Dict[str, int]:
  """Evaluate a program in a fresh interpreter and return its final variables"""
  interpreter = create_interpreter(debug)
  interpreter.eval(nodes)
  return interpreter.variables


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(debug: bool = False) -> Interpreter:
  """Factory function returning an interpreter with an empty environment"""
  return Interpreter(debug=debug)


def create_debug_interpreter() -> Interpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
