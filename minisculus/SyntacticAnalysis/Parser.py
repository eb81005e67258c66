from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from minisculus.Exceptions import ParserError, TrailingInputError, UnexpectedTokenError
from minisculus.LexicalAnalysis.Tokens import Token, TokenType
from minisculus.SyntacticAnalysis import Ast

logger = logging.getLogger(__name__)

# Decides, from the parser's next token, whether a production applies.
ProductionDecider = Callable[["RecursiveDescentParser"], bool]

# Builds a node, consuming tokens and invoking other rules through the parser.
ProductionEvaluator = Callable[["RecursiveDescentParser"], Ast.NodeAst]


@dataclass(frozen=True)
class Production:
    decider: ProductionDecider
    evaluator: ProductionEvaluator
    form: str = ""


class ParsingRule:
    """
    A named grammar rule: an ordered list of productions, each guarded by a decider. The productions are kept in a
    list rather than keyed by their decider, as the first production (in registration order) whose decider accepts the
    next token is the one that is used.
    """
    _name: str
    _parser: RecursiveDescentParser
    _productions: list[Production]

    def __init__(self, parser: RecursiveDescentParser, name: str):
        self._parser = parser
        self._name = name
        self._productions = []

    def add_production(self, production: Production) -> None:
        self._productions.append(production)

    def select(self) -> Optional[tuple[int, Production]]:
        for index, production in enumerate(self._productions):
            if production.decider(self._parser):
                return index, production
        return None

    def can_match(self) -> bool:
        return self.select() is not None

    @property
    def name(self) -> str:
        return self._name

    @property
    def productions(self) -> list[Production]:
        return list(self._productions)


class RecursiveDescentParser:
    """
    A grammar-agnostic recursive descent parser. Rules are registered by name with "add_rule", and drive the parse by
    invoking each other and consuming terminals. The token list is never modified: a cursor into it is advanced as
    tokens are consumed, and there is no way to move it backwards, so there is exactly one token of lookahead.
    """
    _rules: dict[str, ParsingRule]
    _tokens: tuple[Token, ...]
    _current: int

    def __init__(self):
        self._rules = {}
        self._tokens = ()
        self._current = 0

    def add_rule(self, name: str, decider: ProductionDecider, evaluator: ProductionEvaluator, form: str = "") -> RecursiveDescentParser:
        """
        Add a production to the rule "name", creating the rule if this is its first production. Registering a name
        that already exists appends another alternative after the existing ones; it never replaces them.
        @param name: Name of the rule.
        @param decider: Whether the production applies to the next token.
        @param evaluator: Builds the production's node.
        @param form: Optional display form of the production, used by to_bnf().
        @return: The parser, so that registrations can be chained.
        """
        if name not in self._rules:
            self._rules[name] = ParsingRule(self, name)
        self._rules[name].add_production(Production(decider, evaluator, form))
        return self

    def parse(self, tokens: Iterable[Token], start: Optional[str] = None) -> Ast.NodeAst:
        """
        Parse a whole token sequence with the start rule, which is the first registered rule unless one is named. Any
        tokens left once the start rule has completed are an error, otherwise any prefix of a valid program would
        parse as "complete".
        @param tokens: The tokens to parse.
        @param start: Optional name of the rule to start from.
        @return: The root of the AST.
        """
        if not self._rules:
            raise ParserError("No parsing rules have been registered")

        self.reset(tokens)
        ast = self.invoke_rule(start or next(iter(self._rules)))
        if self.has_tokens_remaining:
            raise TrailingInputError(self.next_token)

        logger.info(f"Parsed {len(self._tokens)} tokens")
        return ast

    def reset(self, tokens: Iterable[Token]) -> None:
        self._tokens = tuple(tokens)
        self._current = 0

    def invoke_rule(self, name: str) -> Ast.NodeAst:
        # Each nested rule costs two Python frames: this call and the evaluator.
        rule = self._rule(name)
        selected = rule.select()
        if selected is None:
            raise UnexpectedTokenError(self.next_token, self.line_number)

        index, production = selected
        logger.debug(f"Rule '{name}' applying alternative {index}{': ' + production.form if production.form else ''}")
        return production.evaluator(self)

    def try_match(self, what: TokenType | str) -> bool:
        # A token type matches against the next token only. A rule name matches if any of the rule's productions
        # would be selected right now, which lets deciders check a rule's FIRST set without it being written out.
        match what:
            case TokenType():
                return self.has_tokens_remaining and self.next_token.token_type == what
            case str():
                return self._rule(what).can_match()
            case _:
                raise ParserError(f"Cannot match against {what!r}")

    def consume_token(self, token_type: TokenType) -> Ast.TokenAst:
        if not self.try_match(token_type):
            raise UnexpectedTokenError(self.next_token, self.line_number, token_type)

        c1 = self._current
        token = self._tokens[self._current]
        self._current += 1
        return Ast.TokenAst(token, c1)

    def to_bnf(self) -> str:
        lines = []
        width = max([len(name) for name in self._rules], default=0)
        for rule in self._rules.values():
            forms = [production.form or "?" for production in rule.productions]
            lines.append(f"{rule.name.ljust(width)} -> " + f"\n{' ' * width}  | ".join(forms))
        return "\n".join(lines)

    def _rule(self, name: str) -> ParsingRule:
        if name not in self._rules:
            raise ParserError(f"Unknown parsing rule '{name}'")
        return self._rules[name]

    @property
    def rule_names(self) -> list[str]:
        return list(self._rules)

    @property
    def has_tokens_remaining(self) -> bool:
        return self._current < len(self._tokens)

    @property
    def next_token(self) -> Optional[Token]:
        return self._tokens[self._current] if self.has_tokens_remaining else None

    @property
    def line_number(self) -> Optional[int]:
        # At the end of the input, errors are reported against the line of the last token.
        if self.has_tokens_remaining:
            return self.next_token.line_number
        return self._tokens[-1].line_number if self._tokens else None

    @property
    def current(self) -> int:
        return self._current
