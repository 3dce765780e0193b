"""
TinyLang Standard Library
Signed 64-bit integer arithmetic used by the interpreter
"""

from typing import Callable, Dict

from error_handling import DivisionByZero, EvalRuntimeError


I64_MIN = -(2 ** 63)
I64_MAX = 2 ** 63 - 1


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

def check_i64(value: int, op: str, left: int, right: int) -> int:
  """Return value, or fail if it does not fit a signed 64-bit integer"""
  if not I64_MIN <= value <= I64_MAX:
    raise EvalRuntimeError(f"integer overflow in {left} {op} {right}")
  return value


# ============================================================================
# ARITHMETIC FUNCTIONS
# ============================================================================

def tiny_add(left: int, right: int) -> int:
  return check_i64(left + right, "+", left, right)


def tiny_sub(left: int, right: int) -> int:
  return check_i64(left - right, "-", left, right)


def tiny_mul(left: int, right: int) -> int:
  return check_i64(left * right, "*", left, right)


def tiny_div(left: int, right: int) -> int:
  """Integer division truncating toward zero"""
  if right == 0:
    raise DivisionByZero()

  quotient = abs(left) // abs(right)
  if (left < 0) != (right < 0):
    quotient = -quotient
  return check_i64(quotient, "/", left, right)


BUILTIN_OPERATORS: Dict[str, Callable[[int, int], int]] = {
    "+": tiny_add,
    "-": tiny_sub,
    "*": tiny_mul,
    "/": tiny_div,
}
