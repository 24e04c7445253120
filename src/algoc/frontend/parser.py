"""
Algo Parser
===========

This module turns the lexer's token stream into an AST. Statements are
parsed by recursive descent; expressions use the shunting-yard algorithm
over the tokens of a single line.

Grammar (Simplified EBNF)
-------------------------
program         ::= statement*
statement       ::= END_LINE
                  | if_stmt | function_def | header_decl
                  | while_stmt | return_stmt | expression END_LINE

if_stmt         ::= 'if' expression END_LINE statement*
                    ('else' (if_stmt_nested | statement*))? 'end'
function_def    ::= 'function' header statement* 'end'
header_decl     ::= 'declare' 'function' header
header          ::= VARIABLE '(' (param (',' param)*)? ')' (':' type)? END_LINE
param           ::= VARIABLE (':' type)?
type            ::= TYPEDEF | ARRAY_TYPEDEF
while_stmt      ::= 'while' expression END_LINE statement* 'end'
return_stmt     ::= 'return' expression? END_LINE

An ``else`` directly followed by ``if`` starts a nested conditional that
becomes the only statement of the else branch; the whole chain shares a
single closing ``end``.

Expression Precedence (lowest to highest)
-----------------------------------------
0.  assignment     <-
1.  comparison     == != < > <= >=
2.  additive       + -
3.  modulo         %
4.  multiplicative * /
5.  unary          + -

Binary operators are left-associative, unary operators right-associative.

Arrays
------
``[a, b]`` is an array literal. When a single integer literal in brackets
directly follows an untyped variable (``xs[0]``), the pair becomes an
ArrayAccess. Any other index (``xs[i]``) leaves the variable and a
one-element array literal side by side.

Example Usage
-------------
>>> from algoc.frontend.parser import parse_source
>>> from algoc.frontend.ast import ASTPrinter
>>> print(ASTPrinter().print(parse_source("a <- 1 + 2 * 3")))
Program
  Assign: a <- (1 + (2 * 3))
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from algoc.errors import SourceLocation
from algoc.frontend.ast import (
    ArrayAccess,
    ArrayLiteral,
    Assignment,
    BINARY_OPERATOR_SYMBOLS,
    BinaryExpression,
    BinaryOperator,
    BoolLiteral,
    CallExpression,
    Expression,
    FloatLiteral,
    FunctionDefinition,
    FunctionHeader,
    IfStatement,
    IntLiteral,
    Node,
    Parameter,
    Program,
    ReturnStatement,
    StringLiteral,
    UNARY_OPERATOR_SYMBOLS,
    UnaryExpression,
    VariableExpression,
    WhileStatement,
)
from algoc.frontend.errors import (
    InvalidAssignmentTargetError,
    InvalidExpressionError,
    MissingTokenError,
    UnexpectedTokenError,
    UnterminatedBlockError,
)
from algoc.frontend.lexer import Token, TokenType, tokenize
from algoc.frontend.types import TypeAnnotation

logger = logging.getLogger(__name__)


# =============================================================================
# Operator Precedence
# =============================================================================

UNARY_PRECEDENCE = 5

BINARY_PRECEDENCE = {
    BinaryOperator.ASSIGN: 0,
    BinaryOperator.EQUAL: 1,
    BinaryOperator.NOT_EQUAL: 1,
    BinaryOperator.LESS: 1,
    BinaryOperator.GREATER: 1,
    BinaryOperator.LESS_EQ: 1,
    BinaryOperator.GREATER_EQ: 1,
    BinaryOperator.ADD: 2,
    BinaryOperator.SUBTRACT: 2,
    BinaryOperator.MODULO: 3,
    BinaryOperator.MULTIPLY: 4,
    BinaryOperator.DIVIDE: 4,
}

_LITERAL_TYPES = {
    TokenType.INT: IntLiteral,
    TokenType.FLOAT: FloatLiteral,
    TokenType.BOOL: BoolLiteral,
    TokenType.STRING: StringLiteral,
}

_OPERATOR_TYPES = (TokenType.BINARY_OPERATOR, TokenType.UNARY_OPERATOR)


def precedence(token: Token) -> int:
    """Precedence of an operator token."""
    if token.type == TokenType.UNARY_OPERATOR:
        return UNARY_PRECEDENCE
    return BINARY_PRECEDENCE[BINARY_OPERATOR_SYMBOLS[token.value]]


@dataclass
class _PendingCall:
    """Output-stack marker below the arguments of an open call."""
    token: Token


# =============================================================================
# Parser
# =============================================================================

class Parser:
    """
    Parser for algo token streams.

    Fails on the first syntax error; there is no recovery.

    Attributes:
        tokens: List of tokens to parse
        filename: Source filename for error reporting
        source_lines: Original source lines for error context
    """

    def __init__(
        self,
        tokens: Sequence[Token],
        filename: str = "<input>",
        source_lines: Optional[Sequence[str]] = None,
    ):
        self.tokens = list(tokens)
        self.filename = filename
        self.source_lines = list(source_lines or [])

        # Current position in token stream
        self._pos = 0

    def parse(self) -> Program:
        """
        Parse the token stream into an AST.

        Returns:
            Program containing all top-level statements

        Raises:
            ParseError: On the first syntax error
        """
        self._pos = 0
        statements: list[Node] = []

        while not self._at_end():
            if self._match(TokenType.END_LINE):
                continue
            statements.append(self._parse_statement())

        logger.debug(
            f"Parsed {len(statements)} top-level statements from {self.filename}"
        )
        return Program(
            location=SourceLocation(self.filename, 1, 1),
            statements=statements,
        )

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.tokens)

    def _peek(self, offset: int = 0) -> Optional[Token]:
        """Look at the token at current position + offset (None past the end)."""
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return None
        return self.tokens[pos]

    def _advance(self) -> Token:
        token = self.tokens[self._pos]
        self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        token = self._peek()
        return token is not None and token.type in types

    def _check_keyword(self, *names: str) -> bool:
        token = self._peek()
        return token is not None and token.type == TokenType.KEYWORD and token.value in names

    def _match(self, *types: TokenType) -> Optional[Token]:
        """Consume the current token if it matches one of the types."""
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, message: str) -> Token:
        """
        Expect and consume a specific token type.

        Raises:
            MissingTokenError: If the expected token is not found
        """
        if self._check(token_type):
            return self._advance()
        raise MissingTokenError(
            message,
            location=self._current_location(),
            source_line=self._current_source_line(),
        )

    def _expect_line_end(self) -> None:
        """Consume END_LINE; the end of input also ends a line."""
        token = self._peek()
        if token is None:
            return
        if token.type != TokenType.END_LINE:
            raise UnexpectedTokenError(
                token.text,
                expected="end of line",
                location=token.location,
                source_line=self._get_source_line(token.line),
            )
        self._advance()

    def _skip_blank_lines(self) -> None:
        while self._match(TokenType.END_LINE):
            pass

    def _current_location(self) -> SourceLocation:
        """Location of the current token, or of the last token at end of input."""
        token = self._peek()
        if token is None:
            token = self.tokens[-1] if self.tokens else None
        if token is None:
            return SourceLocation(self.filename, 1, 1)
        return token.location

    def _current_source_line(self) -> Optional[str]:
        return self._get_source_line(self._current_location().line)

    def _get_source_line(self, line: int) -> Optional[str]:
        """Get source line for error reporting."""
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    # =========================================================================
    # Statements
    # =========================================================================

    def _parse_statement(self) -> Node:
        """Parse one statement starting at the current token."""
        token = self._peek()

        if token.type == TokenType.KEYWORD:
            if token.value == "if":
                return self._parse_if_statement(nested=False)
            if token.value == "function":
                return self._parse_function_definition()
            if token.value == "declare":
                return self._parse_header_declaration()
            if token.value == "while":
                return self._parse_while_statement()
            if token.value == "return":
                return self._parse_return_statement()
            raise UnexpectedTokenError(
                token.text,
                expected="statement",
                location=token.location,
                source_line=self._get_source_line(token.line),
            )

        return self._parse_expression()

    def _parse_block(self, construct: str, opener: Token, terminators: set[str]) -> list[Node]:
        """
        Parse statements until one of the terminator keywords.

        The terminator itself is left for the caller.

        Raises:
            UnterminatedBlockError: If the input ends first
        """
        statements: list[Node] = []
        while True:
            self._skip_blank_lines()
            if self._at_end():
                raise UnterminatedBlockError(
                    construct,
                    location=opener.location,
                    source_line=self._get_source_line(opener.line),
                )
            if self._check_keyword(*terminators):
                return statements
            statements.append(self._parse_statement())

    def _expect_end(self, construct: str, opener: Token) -> None:
        if self._at_end():
            raise UnterminatedBlockError(
                construct,
                location=opener.location,
                source_line=self._get_source_line(opener.line),
            )
        if not self._check_keyword("end"):
            raise MissingTokenError(
                "'end'",
                location=self._current_location(),
                source_line=self._current_source_line(),
            )
        self._advance()
        self._expect_line_end()

    def _parse_if_statement(self, nested: bool) -> IfStatement:
        """
        Parse an if statement.

        A nested conditional (the 'if' of an 'else if') leaves the shared
        'end' to the outermost conditional.
        """
        opener = self._advance()
        condition = self._parse_expression()
        then_branch = self._parse_block("if", opener, {"else", "end"})

        else_branch: list[Node] = []
        if self._check_keyword("else"):
            self._advance()
            self._skip_blank_lines()
            if self._check_keyword("if"):
                else_branch = [self._parse_if_statement(nested=True)]
            else:
                else_branch = self._parse_block("if", opener, {"end"})

        if not nested:
            self._expect_end("if", opener)

        return IfStatement(
            location=opener.location,
            condition=condition,
            then_branch=then_branch,
            else_branch=else_branch,
        )

    def _parse_while_statement(self) -> WhileStatement:
        opener = self._advance()
        condition = self._parse_expression()
        body = self._parse_block("while", opener, {"end"})
        self._expect_end("while", opener)

        return WhileStatement(
            location=opener.location,
            condition=condition,
            body=body,
        )

    def _parse_return_statement(self) -> ReturnStatement:
        """Parse 'return' with an optional value on the same line."""
        token = self._advance()
        if self._at_end() or self._check(TokenType.END_LINE):
            self._expect_line_end()
            return ReturnStatement(location=token.location)

        return ReturnStatement(location=token.location, value=self._parse_expression())

    def _parse_function_definition(self) -> FunctionDefinition:
        opener = self._advance()
        name, parameters, return_type = self._parse_function_header()
        body = self._parse_block("function", opener, {"end"})
        self._expect_end("function", opener)

        return FunctionDefinition(
            location=opener.location,
            name=name,
            parameters=parameters,
            return_type=return_type,
            body=body,
        )

    def _parse_header_declaration(self) -> FunctionHeader:
        """Parse 'declare function name(params): type'."""
        opener = self._advance()
        if not self._check_keyword("function"):
            raise MissingTokenError(
                "'function' after 'declare'",
                location=self._current_location(),
                source_line=self._current_source_line(),
            )
        self._advance()
        name, parameters, return_type = self._parse_function_header()

        return FunctionHeader(
            location=opener.location,
            name=name,
            parameters=parameters,
            return_type=return_type,
        )

    def _parse_function_header(self) -> tuple[str, list[Parameter], Optional[TypeAnnotation]]:
        """Parse 'name(params)' with optional ': type', through the line end."""
        name = self._expect(TokenType.VARIABLE, "function name").value
        self._expect(TokenType.OPENING_PARENTHESIS, "'('")

        parameters: list[Parameter] = []
        if not self._check(TokenType.CLOSING_PARENTHESIS):
            parameters.append(self._parse_parameter())
            while self._match(TokenType.COMMA):
                parameters.append(self._parse_parameter())

        self._expect(TokenType.CLOSING_PARENTHESIS, "')'")

        return_type = None
        if self._match(TokenType.COLON):
            return_type = self._parse_type_annotation()

        self._expect_line_end()
        return name, parameters, return_type

    def _parse_parameter(self) -> Parameter:
        token = self._expect(TokenType.VARIABLE, "parameter name")
        declared_type = None
        if self._match(TokenType.COLON):
            declared_type = self._parse_type_annotation()
        return Parameter(location=token.location, name=token.value, declared_type=declared_type)

    def _parse_type_annotation(self) -> TypeAnnotation:
        token = self._expect_one_of((TokenType.TYPEDEF, TokenType.ARRAY_TYPEDEF), "type name")
        return TypeAnnotation(token.value, is_array=token.type == TokenType.ARRAY_TYPEDEF)

    def _expect_one_of(self, types: tuple[TokenType, ...], message: str) -> Token:
        token = self._match(*types)
        if token is None:
            raise MissingTokenError(
                message,
                location=self._current_location(),
                source_line=self._current_source_line(),
            )
        return token

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """Parse the rest of the current line as one expression."""
        location = self._current_location()
        tokens: list[Token] = []
        while not self._at_end() and not self._check(TokenType.END_LINE):
            tokens.append(self._advance())
        self._expect_line_end()

        if not tokens:
            raise MissingTokenError(
                "expression",
                location=location,
                source_line=self._get_source_line(location.line),
            )
        return self._build_expression(tokens)

    def _build_expression(self, tokens: list[Token]) -> Expression:
        """
        Build one expression tree from a token list (shunting-yard).

        Raises:
            ParseError: On unbalanced brackets, misplaced tokens, or a
                token list that does not reduce to exactly one value
        """
        output: list = []
        operators: list[Token] = []

        i = 0
        while i < len(tokens):
            token = tokens[i]
            kind = token.type

            if kind in _LITERAL_TYPES:
                output.append(_LITERAL_TYPES[kind](location=token.location, value=token.value))

            elif kind == TokenType.VARIABLE:
                if operators:
                    output.append(VariableExpression(location=token.location, name=token.value))
                else:
                    variable, i = self._parse_variable(tokens, i)
                    output.append(variable)

            elif kind == TokenType.FUNCTION_CALL:
                operators.append(token)
                output.append(_PendingCall(token))

            elif kind in _OPERATOR_TYPES:
                self._push_operator(token, operators, output)

            elif kind == TokenType.OPENING_PARENTHESIS:
                operators.append(token)

            elif kind == TokenType.CLOSING_PARENTHESIS:
                self._close_parenthesis(token, operators, output)

            elif kind == TokenType.COMMA:
                self._reduce_until_parenthesis(token, operators, output)

            elif kind == TokenType.OPENING_BRACKET:
                i = self._parse_brackets(tokens, i, output)

            else:
                raise self._unexpected(token, "expression")

            i += 1

        while operators:
            top = operators.pop()
            if top.type not in _OPERATOR_TYPES:
                raise MissingTokenError(
                    "')'",
                    location=top.location,
                    source_line=self._get_source_line(top.line),
                )
            self._reduce(top, output)

        if len(output) != 1 or isinstance(output[0], _PendingCall):
            raise InvalidExpressionError(
                "invalid expression",
                location=tokens[0].location,
                hint="an expression must combine into exactly one value",
                source_line=self._get_source_line(tokens[0].line),
            )
        return output[0]

    def _parse_variable(self, tokens: list[Token], i: int) -> tuple[VariableExpression, int]:
        """Parse 'name' or 'name: type'; returns the node and its last index."""
        token = tokens[i]
        declared_type = None

        if i + 1 < len(tokens) and tokens[i + 1].type == TokenType.COLON:
            if i + 2 >= len(tokens) or tokens[i + 2].type not in (
                TokenType.TYPEDEF, TokenType.ARRAY_TYPEDEF
            ):
                colon = tokens[i + 1]
                raise MissingTokenError(
                    "type name after ':'",
                    location=colon.location,
                    source_line=self._get_source_line(colon.line),
                )
            type_token = tokens[i + 2]
            declared_type = TypeAnnotation(
                type_token.value,
                is_array=type_token.type == TokenType.ARRAY_TYPEDEF,
            )
            i += 2

        return VariableExpression(
            location=token.location,
            name=token.value,
            declared_type=declared_type,
        ), i

    def _push_operator(self, token: Token, operators: list[Token], output: list) -> None:
        """Reduce higher-precedence operators, then push the incoming one."""
        incoming = precedence(token)
        is_unary = token.type == TokenType.UNARY_OPERATOR

        while operators and operators[-1].type in _OPERATOR_TYPES:
            stacked = precedence(operators[-1])
            if stacked > incoming or (not is_unary and stacked == incoming):
                self._reduce(operators.pop(), output)
            else:
                break

        operators.append(token)

    def _close_parenthesis(self, token: Token, operators: list[Token], output: list) -> None:
        """Reduce through the matching '(' and complete a call if one was open."""
        while operators and operators[-1].type in _OPERATOR_TYPES:
            self._reduce(operators.pop(), output)

        if not operators or operators[-1].type != TokenType.OPENING_PARENTHESIS:
            raise self._unexpected(token, "matching '('")

        operators.pop()
        if operators and operators[-1].type == TokenType.FUNCTION_CALL:
            self._complete_call(operators.pop(), output)

    def _complete_call(self, call: Token, output: list) -> None:
        """Collect the outputs above the call's marker as its arguments."""
        arguments: list[Expression] = []
        while not isinstance(output[-1], _PendingCall):
            arguments.append(output.pop())
        output.pop()
        arguments.reverse()

        output.append(CallExpression(location=call.location, name=call.value, arguments=arguments))

    def _reduce_until_parenthesis(self, token: Token, operators: list[Token], output: list) -> None:
        """Reduce operators down to, not including, the nearest '('."""
        while operators and operators[-1].type in _OPERATOR_TYPES:
            self._reduce(operators.pop(), output)

        if not operators or operators[-1].type != TokenType.OPENING_PARENTHESIS:
            raise self._unexpected(token, "',' only between call arguments")

    def _reduce(self, operator: Token, output: list) -> None:
        """Pop operands for an operator and push the resulting node."""
        if operator.type == TokenType.UNARY_OPERATOR:
            if not output or isinstance(output[-1], _PendingCall):
                raise self._missing_operand(operator)
            operand = output.pop()
            output.append(UnaryExpression(
                location=operator.location,
                operator=UNARY_OPERATOR_SYMBOLS[operator.value],
                operand=operand,
            ))
            return

        if len(output) < 2 or any(isinstance(node, _PendingCall) for node in output[-2:]):
            raise self._missing_operand(operator)

        right = output.pop()
        left = output.pop()
        kind = BINARY_OPERATOR_SYMBOLS[operator.value]

        if kind == BinaryOperator.ASSIGN:
            if not isinstance(left, (VariableExpression, ArrayAccess)):
                raise InvalidAssignmentTargetError(
                    location=operator.location,
                    source_line=self._get_source_line(operator.line),
                )
            output.append(Assignment(location=left.location, target=left, value=right))
            return

        output.append(BinaryExpression(
            location=operator.location,
            operator=kind,
            left=left,
            right=right,
        ))

    def _parse_brackets(self, tokens: list[Token], start: int, output: list) -> int:
        """
        Parse '[ ... ]' starting at tokens[start]; returns the index of ']'.

        Produces an ArrayAccess when a lone integer literal directly
        follows an untyped variable, otherwise an ArrayLiteral.
        """
        opener = tokens[start]
        end = self._find_closing_bracket(tokens, start)
        elements = [
            self._build_expression(part)
            for part in self._split_elements(tokens[start + 1:end], opener)
        ]

        if (
            len(elements) == 1
            and isinstance(elements[0], IntLiteral)
            and start > 0
            and tokens[start - 1].type == TokenType.VARIABLE
            and output
            and isinstance(output[-1], VariableExpression)
            and output[-1].declared_type is None
        ):
            variable = output.pop()
            output.append(ArrayAccess(
                location=variable.location,
                name=variable.name,
                offset=elements[0].value,
            ))
        else:
            output.append(ArrayLiteral(location=opener.location, elements=elements))

        return end

    def _find_closing_bracket(self, tokens: list[Token], start: int) -> int:
        depth = 0
        for index in range(start, len(tokens)):
            kind = tokens[index].type
            if kind == TokenType.OPENING_BRACKET:
                depth += 1
            elif kind == TokenType.CLOSING_BRACKET:
                depth -= 1
                if depth == 0:
                    return index

        opener = tokens[start]
        raise MissingTokenError(
            "']' before end of line",
            location=opener.location,
            source_line=self._get_source_line(opener.line),
        )

    def _split_elements(self, tokens: list[Token], opener: Token) -> list[list[Token]]:
        """Split bracket contents on commas that are not nested."""
        if not tokens:
            return []

        parts: list[list[Token]] = [[]]
        depth = 0
        for token in tokens:
            if token.type in (TokenType.OPENING_BRACKET, TokenType.OPENING_PARENTHESIS):
                depth += 1
            elif token.type in (TokenType.CLOSING_BRACKET, TokenType.CLOSING_PARENTHESIS):
                depth -= 1
            elif token.type == TokenType.COMMA and depth == 0:
                parts.append([])
                continue
            parts[-1].append(token)

        if any(not part for part in parts):
            raise InvalidExpressionError(
                "empty array element",
                location=opener.location,
                source_line=self._get_source_line(opener.line),
            )
        return parts

    def _unexpected(self, token: Token, expected: str) -> UnexpectedTokenError:
        return UnexpectedTokenError(
            token.text,
            expected=expected,
            location=token.location,
            source_line=self._get_source_line(token.line),
        )

    def _missing_operand(self, operator: Token) -> InvalidExpressionError:
        return InvalidExpressionError(
            f"missing operand for '{operator.value}'",
            location=operator.location,
            source_line=self._get_source_line(operator.line),
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def parse(
    tokens: Sequence[Token],
    filename: str = "<input>",
    source_lines: Optional[Sequence[str]] = None,
) -> Program:
    """Parse a token stream into a Program."""
    return Parser(tokens, filename, source_lines).parse()


def parse_source(source: str, filename: str = "<input>") -> Program:
    """
    Parse algo source text into an AST.

    This is a convenience function that combines lexing and parsing.

    Args:
        source: The program text
        filename: Source filename for error messages

    Returns:
        The root Program node

    Raises:
        FrontendError: If lexing or parsing fails
    """
    lines = source.splitlines()
    tokens = tokenize(lines, filename)
    return Parser(tokens, filename, lines).parse()
