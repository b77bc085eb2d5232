"""
RPAL Programming Language Parser
Builds the raw (non-standardized) abstract syntax tree from RPAL source text
"""

from typing import List, Dict, Optional
from dataclasses import dataclass, field
from functools import reduce

# Import pyparsing with error handling
try:
    from pyparsing import (
        Regex, Keyword, Literal, Suppress, Forward, OneOrMore, ZeroOrMore,
        MatchFirst, Optional as PyParsingOptional, ParseException,
        ParserElement, StringEnd, dbl_slash_comment
    )
    # Enable packrat parsing for performance
    ParserElement.enable_packrat()
except ImportError:
    raise ImportError("pyparsing library not found. Install with: pip install pyparsing")

from error_handling import RPALErrorHandler, RPALParseError


@dataclass
class ASTNode:
    """RPAL tree node owning an ordered list of children

    `value` carries the text payload of leaves (identifier name, integer
    digits, string text). `arity` is only set on TAU instructions inside a
    control body, where the children are no longer attached.
    """
    type: str
    value: Optional[str] = None
    children: List['ASTNode'] = field(default_factory=list)
    arity: int = 0

    def __str__(self) -> str:
        if self.children:
            children_str = ", ".join(str(child) for child in self.children)
            return f"{self.type}({children_str})"
        if self.value is not None:
            return f"{self.type}({self.value})"
        return self.type


# Display labels used by the tree printer
NODE_LABELS: Dict[str, str] = {
    "IDENTIFIER": "<ID:{}>",
    "STRING": "<STR:'{}'>",
    "INTEGER": "<INT:{}>",
    "LET": "let",
    "LAMBDA": "lambda",
    "WHERE": "where",
    "WITHIN": "within",
    "CONDITIONAL": "->",
    "OR": "or",
    "AND": "&",
    "NOT": "not",
    "GR": "gr",
    "GE": "ge",
    "LS": "ls",
    "LE": "le",
    "EQ": "eq",
    "NE": "ne",
    "PLUS": "+",
    "MINUS": "-",
    "NEG": "neg",
    "MULT": "*",
    "DIV": "/",
    "EXP": "**",
    "TRUE": "<true>",
    "FALSE": "<false>",
    "TAU": "tau",
    "AUG": "aug",
    "AT": "@",
    "GAMMA": "gamma",
    "NIL": "<nil>",
    "DUMMY": "<dummy>",
    "SIMULTDEF": "and",
    "REC": "rec",
    "EQUAL": "=",
    "FCNFORM": "function_form",
    "PAREN": "<()>",
    "COMMA": ",",
    "YSTAR": "<Y*>",
    # Runtime-only kinds
    "BETA": "beta",
    "DELTA": "delta",
    "ETA": "eta",
    "TUPLE": "tuple",
    "ENV": "env",
}

RESERVED_WORDS = [
    "let", "in", "within", "fn", "where", "aug", "or", "not", "gr", "ge",
    "ls", "le", "eq", "ne", "true", "false", "nil", "dummy", "rec", "and",
]

# Operator spellings to node kinds
OPERATOR_KINDS: Dict[str, str] = {
    "+": "PLUS", "-": "MINUS", "*": "MULT", "/": "DIV", "**": "EXP",
    "&": "AND", "or": "OR", "aug": "AUG",
    "gr": "GR", ">": "GR", "ge": "GE", ">=": "GE",
    "ls": "LS", "<": "LS", "le": "LE", "<=": "LE",
    "eq": "EQ", "ne": "NE",
}


def node_label(node: ASTNode) -> str:
    """Label of a node as shown by the tree printer"""
    label = NODE_LABELS.get(node.type, node.type.lower())
    if node.type in ("IDENTIFIER", "STRING", "INTEGER"):
        return label.format(node.value)
    return label


# ============================================================================
# PARSE ACTIONS
# ============================================================================

def _fold_binary(tokens) -> ASTNode:
    """Left-associate `operand (op operand)*` into nested operator nodes"""
    items = list(tokens)
    node = items[0]
    for i in range(1, len(items), 2):
        node = ASTNode(OPERATOR_KINDS[items[i]], children=[node, items[i + 1]])
    return node


def _make_application(tokens) -> ASTNode:
    """R -> R Rn, applications associate to the left"""
    return reduce(lambda rator, rand: ASTNode("GAMMA", children=[rator, rand]), list(tokens))


def _make_at(tokens) -> ASTNode:
    """Ap -> Ap '@' <ID> R"""
    items = list(tokens)
    node = items[0]
    for i in range(1, len(items), 2):
        node = ASTNode("AT", children=[node, items[i], items[i + 1]])
    return node


def _make_additive(tokens) -> ASTNode:
    """A -> A '+' At | A '-' At | '+' At | '-' At | At"""
    items = list(tokens)
    if isinstance(items[0], str):
        sign = items.pop(0)
        if sign == "-":
            items[0] = ASTNode("NEG", children=[items[0]])
    return _fold_binary(items)


def _make_comparison(tokens) -> ASTNode:
    items = list(tokens)
    if len(items) == 1:
        return items[0]
    return ASTNode(OPERATOR_KINDS[items[1]], children=[items[0], items[2]])


def _make_sequence(kind: str):
    """Build `kind` over the items only when more than one item is present"""
    def action(tokens) -> ASTNode:
        items = list(tokens)
        if len(items) == 1:
            return items[0]
        return ASTNode(kind, children=items)
    return action


class RPALGrammar:
    """RPAL phrase-structure grammar defined with pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        """Setup the RPAL grammar; each production builds its raw tree node"""

        # Forward declarations for recursive structures
        expression = Forward()
        definition = Forward()
        conditional = Forward()
        power = Forward()

        # Keywords
        kw = {word: Keyword(word) for word in RESERVED_WORDS}
        reserved = MatchFirst([kw[word] for word in RESERVED_WORDS])

        # Lexical units
        identifier = (~reserved + Regex(r"[A-Za-z][A-Za-z0-9_]*")).set_parse_action(
            lambda t: ASTNode("IDENTIFIER", t[0]))
        integer = Regex(r"\d+").set_parse_action(lambda t: ASTNode("INTEGER", t[0]))
        # Escape sequences are kept raw and only interpreted when printed
        string = Regex(r"'(?:\\.|[^'\\])*'").set_parse_action(
            lambda t: ASTNode("STRING", t[0][1:-1]))

        lparen = Suppress("(")
        rparen = Suppress(")")
        # '-' must not swallow the start of '->'
        minus = Regex(r"-(?!>)")
        plus = Literal("+")
        times = Regex(r"\*(?!\*)")
        divide = Literal("/")

        # Rn -> <ID> | <INT> | <STR> | true | false | nil | dummy | '(' E ')'
        operand = (
            identifier |
            integer |
            string |
            kw["true"].copy().set_parse_action(lambda t: ASTNode("TRUE")) |
            kw["false"].copy().set_parse_action(lambda t: ASTNode("FALSE")) |
            kw["nil"].copy().set_parse_action(lambda t: ASTNode("NIL")) |
            kw["dummy"].copy().set_parse_action(lambda t: ASTNode("DUMMY")) |
            (lparen + expression + rparen)
        )

        # R -> R Rn
        application = OneOrMore(operand).set_parse_action(_make_application)

        # Ap -> Ap '@' <ID> R
        at_expr = (application + ZeroOrMore(Suppress("@") + identifier + application)).set_parse_action(_make_at)

        # Af -> Ap '**' Af
        power <<= (at_expr + PyParsingOptional(Suppress("**") + power)).set_parse_action(
            _make_sequence("EXP"))

        # At -> At '*' Af | At '/' Af
        term = (power + ZeroOrMore((times | divide) + power)).set_parse_action(_fold_binary)

        # A -> A '+' At | A '-' At | '+' At | '-' At
        arithmetic = (
            PyParsingOptional(plus | minus) + term + ZeroOrMore((plus | minus) + term)
        ).set_parse_action(_make_additive)

        # Bp -> A (gr | ge | ls | le | eq | ne) A
        comparison_op = (
            kw["gr"] | kw["ge"] | kw["ls"] | kw["le"] | kw["eq"] | kw["ne"] |
            Literal(">=") | Literal("<=") | Literal(">") | Literal("<")
        )
        comparison = (arithmetic + PyParsingOptional(comparison_op + arithmetic)).set_parse_action(
            _make_comparison)

        # Bs -> 'not' Bp
        negation = (
            (Suppress(kw["not"]) + comparison).set_parse_action(lambda t: ASTNode("NOT", children=[t[0]])) |
            comparison
        )

        # Bt -> Bt '&' Bs ;  B -> B 'or' Bt
        conjunction = (negation + ZeroOrMore(Literal("&") + negation)).set_parse_action(_fold_binary)
        disjunction = (conjunction + ZeroOrMore(kw["or"] + conjunction)).set_parse_action(_fold_binary)

        # Tc -> B '->' Tc '|' Tc
        conditional <<= (
            disjunction + PyParsingOptional(Suppress("->") + conditional + Suppress("|") + conditional)
        ).set_parse_action(_make_sequence("CONDITIONAL"))

        # Ta -> Ta 'aug' Tc ;  T -> Ta (',' Ta)+
        augmented = (conditional + ZeroOrMore(kw["aug"] + conditional)).set_parse_action(_fold_binary)
        tuple_expr = (augmented + ZeroOrMore(Suppress(",") + augmented)).set_parse_action(
            _make_sequence("TAU"))

        # Vl -> <ID> (',' <ID>)+ ;  Vb -> <ID> | '(' Vl ')' | '(' ')'
        variable_list = (identifier + ZeroOrMore(Suppress(",") + identifier)).set_parse_action(
            _make_sequence("COMMA"))
        bound_variable = (
            identifier |
            (lparen + rparen).set_parse_action(lambda t: ASTNode("PAREN")) |
            (lparen + variable_list + rparen)
        )

        # Db -> <ID> Vb+ '=' E | Vl '=' E | '(' D ')'
        basic_definition = (
            (lparen + definition + rparen) |
            (identifier + OneOrMore(bound_variable) + Suppress("=") + expression).set_parse_action(
                lambda t: ASTNode("FCNFORM", children=list(t))) |
            (variable_list + Suppress("=") + expression).set_parse_action(
                lambda t: ASTNode("EQUAL", children=list(t)))
        )

        # Dr -> 'rec' Db ;  Da -> Dr ('and' Dr)+ ;  D -> Da 'within' D
        recursive_definition = (
            (Suppress(kw["rec"]) + basic_definition).set_parse_action(
                lambda t: ASTNode("REC", children=[t[0]])) |
            basic_definition
        )
        simultaneous_definition = (
            recursive_definition + ZeroOrMore(Suppress(kw["and"]) + recursive_definition)
        ).set_parse_action(_make_sequence("SIMULTDEF"))
        definition <<= (
            simultaneous_definition + PyParsingOptional(Suppress(kw["within"]) + definition)
        ).set_parse_action(_make_sequence("WITHIN"))

        # Ew -> T 'where' Dr
        where_expr = (tuple_expr + PyParsingOptional(Suppress(kw["where"]) + recursive_definition)).set_parse_action(
            _make_sequence("WHERE"))

        # E -> 'let' D 'in' E | 'fn' Vb+ '.' E | Ew
        let_expr = (Suppress(kw["let"]) + definition + Suppress(kw["in"]) + expression).set_parse_action(
            lambda t: ASTNode("LET", children=list(t)))
        lambda_expr = (Suppress(kw["fn"]) + OneOrMore(bound_variable) + Suppress(".") + expression).set_parse_action(
            lambda t: ASTNode("LAMBDA", children=list(t)))
        expression <<= let_expr | lambda_expr | where_expr

        program = expression + StringEnd()
        program.ignore(dbl_slash_comment)

        # Store the main parsers
        self.program = program
        self.expression = expression
        self.definition = definition
        self.bound_variable = bound_variable
        self.operand = operand

    def parse_program(self, text: str, filename: str = "<input>") -> ASTNode:
        """Parse a complete RPAL program into its raw tree"""
        try:
            result = self.program.parse_string(text, parse_all=True)
        except ParseException as e:
            raise RPALErrorHandler(text, filename).enhance_parse_exception(e) from e
        if self.debug:
            print(f"Parsed {filename}: root node {result[0].type}")
        return result[0]


class RPALParser:
    """Main RPAL parser reading files or strings"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = RPALGrammar(debug)

    def parse_file(self, filepath: str) -> ASTNode:
        """Parse an RPAL source file"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise RPALParseError(f"File not found: {filepath}")
        except UnicodeDecodeError as e:
            raise RPALParseError(f"Cannot decode file {filepath}: {e}")
        return self.grammar.parse_program(content, filepath)

    def parse_string(self, text: str, filename: str = "<input>") -> ASTNode:
        """Parse RPAL source code from string"""
        return self.grammar.parse_program(text, filename)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> RPALParser:
    """Create an RPAL parser"""
    return RPALParser(debug=debug)


def create_debug_parser() -> RPALParser:
    """Create an RPAL parser with debug enabled"""
    return RPALParser(debug=True)


# Utility functions for working with trees
def find_nodes_by_type(node: ASTNode, node_type: str) -> List[ASTNode]:
    """Find all nodes of a specific type, in pre-order"""
    result = []

    def search(current: ASTNode):
        if current.type == node_type:
            result.append(current)
        for child in current.children:
            search(child)

    search(node)
    return result


def pretty_print_ast(node: ASTNode, depth: int = 0) -> str:
    """Print a tree in pre-order, one dot of indentation per depth level"""
    result = "." * depth + node_label(node) + "\n"
    for child in node.children:
        result += pretty_print_ast(child, depth + 1)
    return result


