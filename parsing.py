"""
Kestrel Programming Language Parser
pyparsing grammar that turns source text straight into evaluable AST nodes
"""

import sys
from enum import Enum
from typing import Any, List

from pyparsing import (
    Forward, Group, Keyword, Literal, MatchFirst, OpAssoc, Optional as PyParsingOptional,
    ParseException, ParserElement, QuotedString, Regex, StringEnd, Suppress, ZeroOrMore,
    dbl_slash_comment, infix_notation
)

from error_handling import KestrelErrorHandler, KestrelParseError
from expr import (
    Expr, Arithmetics, AddString, Assign, Block, BoolLiteral, Compare, Comparator,
    Declare, Deref, ForLoop, Ifelse, IntLiteral, Invoke, LogicalAndExpr, LogicalNotExpr,
    LogicalOrExpr, NegationExpr, NoneLiteral, Operator, PrintExpr, ReadFileExpr,
    SplitStringExpr, StringLiteral, TernaryExpr
)
from interpolation import InterpolatedStringExpr
from data import Data

# Packrat parsing keeps the operator-precedence table from re-parsing operands
ParserElement.enable_packrat()


KEYWORDS = [
    'let', 'function', 'for', 'in', 'if', 'else',
    'print', 'readFile', 'split', 'true', 'false', 'None',
]


# ============================================================================
# PARSE ACTIONS
# ============================================================================

def make_binary(op: str, left: Expr, right: Expr) -> Expr:
    """Build the node for one binary operator application"""
    if op in ('+', '-', '*', '/'):
        return Arithmetics(Operator(op), left, right)
    if op == '++':
        return AddString(left, right)
    if op in ('>', '<', '==', '>='):
        return Compare(Comparator(op), left, right)
    if op == '&&':
        return LogicalAndExpr(left, right)
    if op == '||':
        return LogicalOrExpr(left, right)
    raise ValueError(f"Unknown operator: {op}")


def fold_left(tokens) -> Expr:
    """[a, op, b, op, c] -> ((a op b) op c)"""
    items = list(tokens[0])
    result = items[0]
    for i in range(1, len(items), 2):
        result = make_binary(items[i], result, items[i + 1])
    return result


def make_unary(tokens) -> Expr:
    op, operand = tokens[0][0], tokens[0][1]
    if op == '-':
        return NegationExpr(operand)
    return LogicalNotExpr(operand)


def make_ternary(tokens) -> Expr:
    items = list(tokens[0])
    return TernaryExpr(items[0], items[2], items[4])


def make_string(tokens) -> Expr:
    text = tokens[0]
    if '${' in text:
        return InterpolatedStringExpr(text)
    return StringLiteral(text)


def make_if(tokens) -> Expr:
    condition, then_branch = tokens[0], tokens[1]
    if len(tokens) < 3:
        return Ifelse(condition, then_branch, Block([]))
    else_branch = tokens[2]
    if not isinstance(else_branch, Block):
        # else if (...) { ... } chains nest inside a one-statement block
        else_branch = Block([else_branch])
    return Ifelse(condition, then_branch, else_branch)


class KestrelGrammar:
    """Kestrel grammar definition using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        """Build the expression and statement grammars"""

        expression = Forward()
        statement = Forward()

        kw = {name: Keyword(name) for name in KEYWORDS}
        reserved = MatchFirst(list(kw.values()))

        identifier = (~reserved + Regex(r'[A-Za-z_][A-Za-z0-9_]*')).set_name("identifier")

        def comma_separated(element):
            return PyParsingOptional(element + ZeroOrMore(Suppress(",") + element))

        lpar, rpar = Suppress("("), Suppress(")")

        # Literals
        integer = Regex(r'\d+').set_parse_action(lambda t: IntLiteral(int(t[0])))
        string_literal = QuotedString('"', esc_char='\\').set_parse_action(make_string)
        true_literal = kw['true'].copy().set_parse_action(lambda t: BoolLiteral(True))
        false_literal = kw['false'].copy().set_parse_action(lambda t: BoolLiteral(False))
        none_literal = kw['None'].copy().set_parse_action(lambda t: NoneLiteral())

        # Builtins
        print_expr = (Suppress(kw['print']) + lpar + expression + rpar).set_parse_action(
            lambda t: PrintExpr(t[0]))
        read_file_expr = (Suppress(kw['readFile']) + lpar + expression + rpar).set_parse_action(
            lambda t: ReadFileExpr(t[0]))
        split_expr = (
            Suppress(kw['split']) + lpar + expression + Suppress(",") + expression + rpar
        ).set_parse_action(lambda t: SplitStringExpr(t[0], t[1]))

        # Calls and variables
        call = (identifier + Group(lpar + comma_separated(expression) + rpar)).set_parse_action(
            lambda t: Invoke(t[0], list(t[1])))
        variable = identifier.copy().set_parse_action(lambda t: Deref(t[0]))
        parenthesized = lpar + expression + rpar

        operand = (
            integer | string_literal | true_literal | false_literal | none_literal |
            print_expr | read_file_expr | split_expr |
            call | variable | parenthesized
        )

        # Operators, tightest binding first
        unary_op = Regex(r'[-!]')
        mult_op = Regex(r'[*/]')
        add_op = Regex(r'\+(?!\+)|-')
        concat_op = Literal("++")
        compare_op = Regex(r'>=|==|>|<')

        expression <<= infix_notation(operand, [
            (unary_op, 1, OpAssoc.RIGHT, make_unary),
            (mult_op, 2, OpAssoc.LEFT, fold_left),
            (add_op, 2, OpAssoc.LEFT, fold_left),
            (concat_op, 2, OpAssoc.LEFT, fold_left),
            (compare_op, 2, OpAssoc.LEFT, fold_left),
            (Literal("&&"), 2, OpAssoc.LEFT, fold_left),
            (Literal("||"), 2, OpAssoc.LEFT, fold_left),
            ((Literal("?"), Literal(":")), 3, OpAssoc.RIGHT, make_ternary),
        ])

        # Statements
        block = (Suppress("{") + Group(ZeroOrMore(statement)) + Suppress("}")).set_parse_action(
            lambda t: Block(list(t[0])))

        function_decl = (
            Suppress(kw['function']) + identifier +
            Group(lpar + comma_separated(identifier) + rpar) + block
        ).set_parse_action(lambda t: Declare(t[0], list(t[1]), t[2]))

        for_loop = (
            Suppress(kw['for']) + lpar + identifier + Suppress(kw['in']) +
            expression + Suppress("..") + expression + rpar + block
        ).set_parse_action(lambda t: ForLoop(t[0], t[1], t[2], t[3]))

        if_stmt = Forward()
        if_stmt <<= (
            Suppress(kw['if']) + lpar + expression + rpar + block +
            PyParsingOptional(Suppress(kw['else']) + (if_stmt | block))
        ).set_parse_action(make_if)

        assignment = (
            Suppress(PyParsingOptional(kw['let'])) + identifier + Suppress(Regex(r'=(?!=)')) + expression
        ).set_parse_action(lambda t: Assign(t[0], t[1]))

        simple_statement = (assignment | expression) + Suppress(PyParsingOptional(";"))

        statement <<= function_decl | for_loop | if_stmt | block | simple_statement

        program = (ZeroOrMore(statement) + StringEnd()).set_parse_action(lambda t: Block(list(t)))
        program.ignore(dbl_slash_comment)
        single_expression = expression + StringEnd()
        single_expression.ignore(dbl_slash_comment)

        self.program = program
        self.statement = statement
        self.expression = single_expression
        self.block = block

    def parse_program(self, text: str, filename: str = "<input>") -> Block:
        """Parse a complete Kestrel program into its top-level Block"""
        try:
            return self.program.parse_string(text, parse_all=True)[0]
        except ParseException as e:
            raise KestrelErrorHandler(text, filename).enhance_parse_exception(e) from e

    def parse_expression(self, text: str, filename: str = "<input>") -> Expr:
        """Parse a single Kestrel expression"""
        try:
            return self.expression.parse_string(text, parse_all=True)[0]
        except ParseException as e:
            raise KestrelErrorHandler(text, filename).enhance_parse_exception(e) from e


class KestrelParser:
    """Front end used by the interpreter and CLI"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = KestrelGrammar(debug)

    def parse_file(self, filepath: str) -> Block:
        """Parse a Kestrel source file"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise KestrelParseError(f"File not found: {filepath}", filename=filepath)
        except UnicodeDecodeError as e:
            raise KestrelParseError(f"Cannot decode file {filepath}: {e}", filename=filepath)
        return self.parse_string(content, filepath)

    def parse_string(self, text: str, filename: str = "<input>") -> Block:
        """Parse Kestrel source code from string"""
        program = self.grammar.parse_program(text, filename)
        if self.debug:
            print(f"[parse] {filename}: {len(program.statements)} statements", file=sys.stderr)
        return program

    def parse_expression(self, text: str, filename: str = "<input>") -> Expr:
        """Parse a single Kestrel expression"""
        return self.grammar.parse_expression(text, filename)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> KestrelParser:
    """Create a Kestrel parser"""
    return KestrelParser(debug=debug)


def create_debug_parser() -> KestrelParser:
    """Create a Kestrel parser with debug enabled"""
    return KestrelParser(debug=True)


# Utility functions for working with the AST
def child_nodes(node: Expr) -> List[Expr]:
    """Direct sub-expressions of a node, in field order"""
    children = []
    for value in vars(node).values():
        if isinstance(value, Expr):
            children.append(value)
        elif isinstance(value, list):
            children.extend(v for v in value if isinstance(v, Expr))
    return children


def find_nodes_by_type(node: Expr, node_type: type) -> List[Expr]:
    """Find all nodes of a specific class in an AST"""
    result = []

    def search(current: Expr):
        if isinstance(current, node_type):
            result.append(current)
        for child in child_nodes(current):
            search(child)

    search(node)
    return result


def pretty_print_ast(node: Expr, indent: int = 0) -> str:
    """Pretty print an AST node for debugging"""
    attributes = []
    for key, value in vars(node).items():
        if isinstance(value, Expr):
            continue
        if isinstance(value, list) and any(isinstance(v, Expr) for v in value):
            continue
        attributes.append(f"{key}={_format_attribute(value)}")

    result = "  " * indent + type(node).__name__
    if attributes:
        result += f"({', '.join(attributes)})"
    result += "\n"

    for child in child_nodes(node):
        result += pretty_print_ast(child, indent + 1)

    return result


def _format_attribute(value: Any) -> str:
    if isinstance(value, Enum):
        return repr(value.value)
    if isinstance(value, Data):
        return repr(str(value))
    return repr(value)
