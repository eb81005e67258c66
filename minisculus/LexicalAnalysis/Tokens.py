from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TokenType(Enum):
    # Keywords
    If = "IF"
    Then = "THEN"
    Else = "ELSE"
    While = "WHILE"
    Do = "DO"
    Input = "INPUT"
    Write = "WRITE"
    Begin = "BEGIN"
    End = "END"

    # Operators
    Assign = "ASSIGN"
    Add = "ADD"
    Sub = "SUB"
    Mul = "MUL"
    Div = "DIV"

    # Punctuation
    LPar = "LPAR"
    RPar = "RPAR"
    Semicolon = "SEMICOLON"

    # Lexemes (carry their matched text)
    Id = "Id"
    Num = "Num"


LEXEME_TYPES = frozenset({TokenType.Id, TokenType.Num})


@dataclass(frozen=True)
class Token:
    token_type: TokenType
    token_metadata: Optional[str] = None
    line_number: int = 0

    def __str__(self):
        if self.token_type in LEXEME_TYPES:
            return f"{self.token_type.value}({self.token_metadata})"
        return self.token_type.value
