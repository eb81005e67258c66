from __future__ import annotations

import logging
import re
from typing import Callable

from minisculus.Exceptions import InvalidTokenError, UnterminatedCommentError
from minisculus.LexicalAnalysis.Tokens import Token, TokenType

logger = logging.getLogger(__name__)

# Builds a token from the matched text and the physical line it was read from.
TokenBuilder = Callable[[str, int], Token]


class Lexer:
    _rules: list[tuple[re.Pattern, TokenBuilder]]
    _tokens: list[Token]

    SINGLE_LINE_COMMENT = re.compile(r"%[^\n]*")
    COMMENT_OPEN = "/*"
    COMMENT_CLOSE = "*/"

    def __init__(self):
        self._rules = []
        self._tokens = []

    def add_rule(self, pattern: str, builder: TokenBuilder) -> Lexer:
        """
        Register a pattern and the builder that turns its matched text into a token. Rules are tried in registration
        order and the first one that matches at the current position wins, so specific patterns (keywords) have to be
        registered before general ones (identifiers).
        @param pattern: The regex to match, anchored to the current position.
        @param builder: Called with the matched text and line number.
        @return: The lexer, so that registrations can be chained.
        """
        self._rules.append((re.compile(pattern), builder))
        return self

    def strip_comments(self, code: str) -> str:
        # Single line comments take absolute precedence, so a "/*" after a "%" never opens a block comment. Removing
        # the comment text but not the newline keeps the line count intact.
        code = self.SINGLE_LINE_COMMENT.sub("", code)
        return self._strip_multi_line_comments(code)

    def _strip_multi_line_comments(self, code: str) -> str:
        output = []
        depth = 0
        newline_count = 0
        start_line = 1
        current_line = 1
        current = 0

        while current < len(code):
            # An open marker always nests, whether or not a comment is already open. Remember where the outermost one
            # started for error reporting.
            if code.startswith(self.COMMENT_OPEN, current):
                if depth == 0:
                    newline_count = 0
                    start_line = current_line
                depth += 1
                current += len(self.COMMENT_OPEN)
                continue

            # A close marker outside any comment is plain text (it is a "*" followed by a "/"), otherwise it closes the
            # innermost comment. Once the outermost comment closes, the newlines it contained are put back, followed
            # by a space so that the tokens either side of the comment stay separate.
            if depth > 0 and code.startswith(self.COMMENT_CLOSE, current):
                depth -= 1
                current += len(self.COMMENT_CLOSE)
                if depth == 0:
                    output.append("\n" * newline_count + " ")
                continue

            character = code[current]
            if character == "\n":
                current_line += 1
                if depth > 0:
                    newline_count += 1
            if depth == 0:
                output.append(character)
            current += 1

        if depth > 0:
            raise UnterminatedCommentError(start_line)
        return "".join(output)

    def parse_token(self, code: str, line_number: int) -> str:
        """
        Parse the first token out of the code, store it, and return the rest of the code with the token and any
        surrounding whitespace removed.
        @param code: The (non-empty, left-stripped) remainder of the current line.
        @param line_number: The 1-indexed line the code was read from.
        @return: The remaining code after the token.
        """
        for pattern, builder in self._rules:
            if matched := pattern.match(code):
                token = builder(matched.group(0), line_number)
                self._tokens.append(token)
                logger.debug(f"Adding {token} (line {line_number})")
                return code[matched.end():].strip()

        raise InvalidTokenError(code.split(" ")[0], line_number)

    def lex(self, code: str) -> list[Token]:
        code = self.strip_comments(code.replace("\t", "    "))

        for line_number, line in enumerate(code.split("\n"), start=1):
            line = line.strip()
            while line:
                line = self.parse_token(line, line_number)

        logger.info(f"Lexed {len(self._tokens)} tokens")
        return self.tokens

    @property
    def tokens(self) -> list[Token]:
        return list(self._tokens)


def keyword(token_type: TokenType) -> TokenBuilder:
    return lambda text, line_number: Token(token_type, None, line_number)


def lexeme(token_type: TokenType) -> TokenBuilder:
    return lambda text, line_number: Token(token_type, text, line_number)
