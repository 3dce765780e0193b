"""
Basic parsing tests for TinyLang
Tests each grammar rule and the AST it lowers to
"""

import pytest
from parsing import (
  TinyLangGrammar, Rule, CSTNode, parse, parse_program,
  find_nodes_by_rule, pretty_print_cst, cst_to_dict
)
from semantics import Number, Identifier, Assignment, Add, Sub, Mul, Div
from error_handling import GrammarViolation, InvalidNumber
from stdlib import I64_MAX


class TestProgramRule:
  """Test the program rule"""

  def test_empty_program(self):
    assert parse("") == []

  def test_whitespace_only_program(self):
    assert parse("  \n\t  \n") == []

  def test_multiple_statements(self):
    result = parse("x = 1; y = 2;")
    assert len(result) == 2

  def test_statements_keep_source_order(self):
    result = parse("a = 1;\nb = 2;\nc = 3;")
    assert [node.name for node in result] == ["a", "b", "c"]

  def test_parse_program_matches_parse(self):
    source = "x = 10; y = x + 5;"
    assert parse_program(source) == parse(source)


class TestStatementRule:
  """Test statements and assignments"""

  def test_number_statement(self):
    assert parse("42;") == [Number(42)]

  def test_identifier_statement(self):
    assert parse("x;") == [Identifier("x")]

  def test_assignment(self):
    assert parse("answer = 42;") == [Assignment("answer", Number(42))]

  def test_assignment_with_expression(self):
    assert parse("x = 5 + 3;") == [Assignment("x", Add(Number(5), Number(3)))]

  def test_whitespace_is_insignificant(self):
    assert parse("x=1+2;") == parse("  x  =\n 1 +\t2 ;  ")

  def test_leading_zeros(self):
    assert parse("007;") == [Number(7)]

  def test_largest_literal(self):
    assert parse(f"{I64_MAX};") == [Number(I64_MAX)]


class TestExpressionRule:
  """Test operator precedence and associativity"""

  def test_addition(self):
    assert parse("1 + 2;") == [Add(Number(1), Number(2))]

  def test_multiplication_binds_tighter(self):
    # 2 + (3 * 4), never (2 + 3) * 4
    assert parse("2 + 3 * 4;") == [Add(Number(2), Mul(Number(3), Number(4)))]

  def test_division_binds_tighter_than_subtraction(self):
    assert parse("8 - 6 / 2;") == [Sub(Number(8), Div(Number(6), Number(2)))]

  def test_precedence_on_the_left(self):
    assert parse("2 * 3 + 4;") == [Add(Mul(Number(2), Number(3)), Number(4))]

  def test_subtraction_is_left_associative(self):
    assert parse("8 - 3 - 2;") == [Sub(Sub(Number(8), Number(3)), Number(2))]

  def test_division_is_left_associative(self):
    assert parse("8 / 4 / 2;") == [Div(Div(Number(8), Number(4)), Number(2))]

  def test_mixed_additive_chain(self):
    assert parse("a + b - c;") == [
      Sub(Add(Identifier("a"), Identifier("b")), Identifier("c"))
    ]


class TestFactorRule:
  """Test parenthesized factors"""

  def test_parentheses_override_precedence(self):
    assert parse("(2 + 3) * 4;") == [Mul(Add(Number(2), Number(3)), Number(4))]

  def test_nested_parentheses(self):
    assert parse("((x));") == [Identifier("x")]

  def test_parentheses_on_the_right(self):
    assert parse("8 - (3 - 2);") == [Sub(Number(8), Sub(Number(3), Number(2)))]

  def test_parse_expression_without_semicolon(self, parser):
    result = parser.parse_expression("2 * (a + 1)")
    assert result == Mul(Number(2), Add(Identifier("a"), Number(1)))


class TestDeterminism:
  """Same input, same output"""

  def test_parsing_twice_gives_equal_asts(self):
    source = "a = 10; b = 2; c = (a + b) * 3 - 4 / 2;"
    assert parse(source) == parse(source)

  def test_separate_parsers_agree(self, parser):
    source = "x = 1 + 2 * 3;"
    assert parser.parse_string(source) == parse(source)

  def test_errors_are_repeatable(self):
    messages = []
    for _ in range(2):
      with pytest.raises(GrammarViolation) as exc_info:
        parse("x = ;")
      messages.append(str(exc_info.value))
    assert messages[0] == messages[1]


class TestRejectedInput:
  """Input outside the grammar"""

  @pytest.mark.parametrize("source", [
    "-5;",
    "x = -1;",
    "x = 1",
    "X = 1;",
    "x1 = 2;",
    "1.5;",
    "x = (1 + 2;",
    "x = y = 3;",
    "x = ;",
    "1 + ;",
    ";",
  ])
  def test_grammar_violation(self, source):
    with pytest.raises(GrammarViolation):
      parse(source)

  def test_number_too_large(self):
    with pytest.raises(InvalidNumber) as exc_info:
      parse("x = 9223372036854775808;")
    assert exc_info.value.literal == "9223372036854775808"
    assert str(exc_info.value) == "Invalid number: 9223372036854775808"


class TestNesting:
  """Deeply nested and very long input"""

  @staticmethod
  def nested(depth, inner="1 + 2"):
    return "(" * depth + inner + ")" * depth

  def test_deep_parentheses(self):
    source = f"x = {self.nested(100)};"
    assert parse(source) == [Assignment("x", Add(Number(1), Number(2)))]

  def test_too_deep_is_a_grammar_violation(self):
    with pytest.raises(GrammarViolation) as exc_info:
      parse(f"x = {self.nested(1000)};")
    assert exc_info.value.message == "expression nested too deeply"
    assert str(exc_info.value).startswith("Parse error:\n  expression nested too deeply")

  def test_too_deep_expression(self, parser):
    with pytest.raises(GrammarViolation):
      parser.parse_expression(self.nested(1000))

  def test_parser_recovers_after_too_deep(self, parser):
    with pytest.raises(GrammarViolation):
      parser.parse_string(f"{self.nested(1000)};")
    assert parser.parse_string("y = (2);") == [Assignment("y", Number(2))]

  def test_long_chain_parses(self):
    result = parse("x = " + " + ".join(["1"] * 2000) + ";")
    node = result[0].value
    depth = 0
    while isinstance(node, Add):
      assert node.right == Number(1)
      node = node.left
      depth += 1
    assert depth == 1999
    assert node == Number(1)


class TestConcreteSyntaxTree:
  """Test the rule-tagged tree produced by the grammar"""

  @pytest.fixture
  def grammar(self):
    return TinyLangGrammar()

  def test_program_root(self, grammar):
    cst = grammar.parse_cst("x = 1;")
    assert cst.rule == Rule.PROGRAM
    assert [child.rule for child in cst.children] == [Rule.STATEMENT]

  def test_statement_text_includes_semicolon(self, grammar):
    cst = grammar.parse_cst("x = 1;")
    assert cst.children[0].text == "x = 1;"

  def test_assignment_children(self, grammar):
    statement = grammar.parse_cst("x = 1;").children[0]
    assignment = statement.children[0]
    assert assignment.rule == Rule.ASSIGNMENT
    assert [child.rule for child in assignment.children] == [Rule.IDENTIFIER, Rule.EXPRESSION]

  def test_operators_are_tagged(self, grammar):
    cst = grammar.parse_cst("1 + 2 * 3;")
    assert [node.text for node in find_nodes_by_rule(cst, Rule.ADD_OP)] == ["+"]
    assert [node.text for node in find_nodes_by_rule(cst, Rule.MUL_OP)] == ["*"]
    assert [node.text for node in find_nodes_by_rule(cst, Rule.NUMBER)] == ["1", "2", "3"]

  def test_parentheses_are_not_nodes(self, grammar):
    cst = grammar.parse_cst("(7);")
    factor = find_nodes_by_rule(cst, Rule.FACTOR)[0]
    assert factor.text == "(7)"
    assert factor.children[0].rule == Rule.EXPRESSION

  def test_spans(self, grammar):
    cst = grammar.parse_cst("x = 1;\n  y = 2;", "prog.tl")
    second = cst.children[1]
    assert second.span.filename == "prog.tl"
    assert (second.span.start_line, second.span.start_col) == (2, 3)
    assert (second.span.end_line, second.span.end_col) == (2, 9)
    assert str(second.span) == "prog.tl:2:3-9"

  def test_pretty_print_cst(self, grammar):
    text = pretty_print_cst(grammar.parse_cst("x;"))
    assert text.splitlines()[0] == "program"
    assert "identifier('x')" in text

  def test_cst_to_dict(self, grammar):
    data = cst_to_dict(grammar.parse_cst("4;"))
    assert data["rule"] == "program"
    assert data["children"][0]["rule"] == "statement"
    assert data["span"]["start_line"] == 1

  def test_nodes_are_immutable(self):
    node = CSTNode(Rule.NUMBER, "1")
    with pytest.raises(AttributeError):
      node.text = "2"
