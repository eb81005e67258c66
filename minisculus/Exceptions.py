from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from minisculus.LexicalAnalysis.Tokens import Token, TokenType


class CompilerError(Exception):
    line_number: Optional[int]

    def __init__(self, message: str, line_number: Optional[int] = None):
        Exception.__init__(self, message)
        self.line_number = line_number


class InvalidTokenError(CompilerError):
    fragment: str

    def __init__(self, fragment: str, line_number: int):
        CompilerError.__init__(self, f"[0001] Invalid token encountered at line {line_number} - '{fragment}'", line_number)
        self.fragment = fragment


class UnterminatedCommentError(InvalidTokenError):
    def __init__(self, line_number: int):
        CompilerError.__init__(self, f"[0002] Comment opened at line {line_number} is never closed", line_number)
        self.fragment = "/*"


class UnexpectedTokenError(CompilerError):
    token: Optional[Token]
    expected: Optional[TokenType]

    CODE = "[0101]"

    def __init__(self, token: Optional[Token], line_number: Optional[int], expected: Optional[TokenType] = None):
        got = token.token_type.name if token else "<EOF>"
        message = f"{self.CODE} Unexpected token '{got}' on line {line_number}"
        if expected is not None:
            message += f", expected '{expected.name}'"
        CompilerError.__init__(self, message, line_number)
        self.token = token
        self.expected = expected


class TrailingInputError(UnexpectedTokenError):
    CODE = "[0102]"

    def __init__(self, token: Token):
        UnexpectedTokenError.__init__(self, token, token.line_number)
        self.args = (f"{self.args[0]} after the end of the program",)


class ParserError(Exception):
    ...


class CodeGenError(Exception):
    ...
