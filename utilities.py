"""
Utilities module for TinyLang
Helpers for displaying ASTs and environments
"""

from typing import Any, Dict, List, Mapping

from semantics import ASTNode, Number, Identifier, Assignment, BinaryOp


# ==================== AST DISPLAY UTILITIES ====================

def pretty_print_ast(node: ASTNode, indent: int = 0) -> str:
  """
  Render an AST node as an indented tree

  Args:
    node: AST node to render
    indent: Nesting level of node

  Returns:
    Multi-line string, one node per line

  Examples:
    pretty_print_ast(Add(Number(1), Number(2))) ->
      Add
        Number(1)
        Number(2)
  """
  lines = []
  stack = [(node, indent)]
  while stack:
    current, level = stack.pop()
    pad = "  " * level
    if isinstance(current, Number):
      lines.append(f"{pad}Number({current.value})")
    elif isinstance(current, Identifier):
      lines.append(f"{pad}Identifier({current.name})")
    elif isinstance(current, Assignment):
      lines.append(f"{pad}Assignment {current.name}")
      stack.append((current.value, level + 1))
    elif isinstance(current, BinaryOp):
      lines.append(f"{pad}{type(current).__name__}")
      # right pushed first so the left operand prints first
      stack.append((current.right, level + 1))
      stack.append((current.left, level + 1))
    else:
      lines.append(f"{pad}{current!r}")
  return "\n".join(lines)


def pretty_print_program(nodes: List[ASTNode]) -> str:
  """Render every statement of a program, numbered from 1"""
  parts = []
  for i, node in enumerate(nodes, 1):
    parts.append(f"Statement {i}:")
    parts.append(pretty_print_ast(node, 1))
  return "\n".join(parts)


def ast_to_dict(node: ASTNode) -> Dict[str, Any]:
  """
  Convert an AST node to plain dicts

  Examples:
    ast_to_dict(Number(4)) -> {"type": "Number", "value": 4}
    ast_to_dict(Sub(Identifier("x"), Number(1))) ->
      {"type": "Sub", "left": {...}, "right": {...}}
  """
  root: Dict[str, Any] = {}
  # (node, dict to fill in for it)
  pending = [(node, root)]
  while pending:
    current, target = pending.pop()
    if isinstance(current, Number):
      target.update(type="Number", value=current.value)
    elif isinstance(current, Identifier):
      target.update(type="Identifier", name=current.name)
    elif isinstance(current, Assignment):
      value: Dict[str, Any] = {}
      target.update(type="Assignment", name=current.name, value=value)
      pending.append((current.value, value))
    elif isinstance(current, BinaryOp):
      left: Dict[str, Any] = {}
      right: Dict[str, Any] = {}
      target.update(type=type(current).__name__, left=left, right=right)
      pending.append((current.right, right))
      pending.append((current.left, left))
    else:
      raise TypeError(f"Not an AST node: {current!r}")
  return root


# ==================== ENVIRONMENT UTILITIES ====================

def format_environment(variables: Mapping[str, int], empty_text: str = "(no variables)") -> str:
  """One `name = value` line per variable, in assignment order"""
  if not variables:
    return f"  {empty_text}"
  return "\n".join(f"  {name} = {value}" for name, value in variables.items())
