from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from minisculus.LexicalAnalysis.Tokens import Token, TokenType


class NodeKind(Enum):
    If = "If"
    While = "While"
    Input = "Input"
    Assign = "Assign"
    Write = "Write"
    Begin = "Begin"
    StatementList = "StatementList"
    MoreStatements = "MoreStatements"
    Expression = "Expression"
    MoreExpression = "MoreExpression"
    Term = "Term"
    MoreTerms = "MoreTerms"
    Factor = "Factor"
    Terminal = "Terminal"
    Null = "Null"


class NodeAst:
    """
    Behaviour shared by every node variant. Each variant is a dataclass whose public fields are its children, in the
    order the matching production consumed them, so the child count of a node is fixed by its class. The "_tok" field
    is the index of the first token the node was built from, and is not a child.
    """
    is_terminal = False

    @property
    def children(self) -> list[NodeAst]:
        return [getattr(self, field.name) for field in dataclasses.fields(self) if not field.name.startswith("_")]

    @property
    def literal_data(self) -> Optional[str]:
        return None

    @property
    def terminal_token_type(self) -> Optional[TokenType]:
        return None


@dataclass
class TokenAst(NodeAst):
    tok: Token
    _tok: int

    kind = NodeKind.Terminal
    is_terminal = True

    SOURCE = {
        TokenType.If: "if", TokenType.Then: "then", TokenType.Else: "else",
        TokenType.While: "while", TokenType.Do: "do", TokenType.Input: "input",
        TokenType.Write: "write", TokenType.Begin: "begin", TokenType.End: "end",
        TokenType.Assign: ":=", TokenType.Add: "+", TokenType.Sub: "-",
        TokenType.Mul: "*", TokenType.Div: "/", TokenType.LPar: "(",
        TokenType.RPar: ")", TokenType.Semicolon: ";",
    }

    @property
    def children(self) -> list[NodeAst]:
        return []

    @property
    def literal_data(self) -> Optional[str]:
        return self.tok.token_metadata

    @property
    def terminal_token_type(self) -> Optional[TokenType]:
        return self.tok.token_type

    def __str__(self):
        return self.tok.token_metadata if self.tok.token_metadata is not None else TokenAst.SOURCE[self.tok.token_type]


@dataclass
class NullAst(NodeAst):
    _tok: int

    kind = NodeKind.Null

    def __str__(self):
        return ""


@dataclass
class IfStatementAst(NodeAst):
    if_keyword: TokenAst
    condition: ExpressionAst
    then_keyword: TokenAst
    then_branch: StatementAst
    else_keyword: TokenAst
    else_branch: StatementAst
    _tok: int

    kind = NodeKind.If

    def __str__(self):
        return f"if {self.condition} then {self.then_branch} else {self.else_branch}"


@dataclass
class WhileStatementAst(NodeAst):
    while_keyword: TokenAst
    condition: ExpressionAst
    do_keyword: TokenAst
    body: StatementAst
    _tok: int

    kind = NodeKind.While

    def __str__(self):
        return f"while {self.condition} do {self.body}"


@dataclass
class InputStatementAst(NodeAst):
    input_keyword: TokenAst
    identifier: TokenAst
    _tok: int

    kind = NodeKind.Input

    def __str__(self):
        return f"input {self.identifier}"


@dataclass
class AssignStatementAst(NodeAst):
    identifier: TokenAst
    assign_token: TokenAst
    value: ExpressionAst
    _tok: int

    kind = NodeKind.Assign

    def __str__(self):
        return f"{self.identifier} := {self.value}"


@dataclass
class WriteStatementAst(NodeAst):
    write_keyword: TokenAst
    value: ExpressionAst
    _tok: int

    kind = NodeKind.Write

    def __str__(self):
        return f"write {self.value}"


@dataclass
class BeginStatementAst(NodeAst):
    begin_keyword: TokenAst
    statements: StatementListAst
    end_keyword: TokenAst
    _tok: int

    kind = NodeKind.Begin

    def __str__(self):
        body = str(self.statements).replace("\n", "\n    ")
        return f"begin\n    {body}\nend"


@dataclass
class StatementListAst(NodeAst):
    statement: StatementAst
    more: MoreStatementsAst | NullAst
    _tok: int

    kind = NodeKind.StatementList

    def __str__(self):
        return ";\n".join([str(self.statement)] + [str(link.statement) for link in chain(self.more)])


@dataclass
class MoreStatementsAst(NodeAst):
    semicolon: TokenAst
    statement: StatementAst
    more: MoreStatementsAst | NullAst
    _tok: int

    kind = NodeKind.MoreStatements

    def __str__(self):
        return "".join([f";\n{link.statement}" for link in chain(self)])


@dataclass
class ExpressionAst(NodeAst):
    term: TermAst
    more: MoreExpressionAst | NullAst
    _tok: int

    kind = NodeKind.Expression

    def __str__(self):
        return str(self.term) + str_chain(self.more)


@dataclass
class MoreExpressionAst(NodeAst):
    operator: TokenAst
    term: TermAst
    more: MoreExpressionAst | NullAst
    _tok: int

    kind = NodeKind.MoreExpression

    @property
    def operand(self) -> TermAst:
        return self.term

    def __str__(self):
        return str_chain(self)


@dataclass
class TermAst(NodeAst):
    factor: FactorAst
    more: MoreTermsAst | NullAst
    _tok: int

    kind = NodeKind.Term

    def __str__(self):
        return str(self.factor) + str_chain(self.more)


@dataclass
class MoreTermsAst(NodeAst):
    operator: TokenAst
    factor: FactorAst
    more: MoreTermsAst | NullAst
    _tok: int

    kind = NodeKind.MoreTerms

    @property
    def operand(self) -> FactorAst:
        return self.factor

    def __str__(self):
        return str_chain(self)


@dataclass
class ParenthesizedFactorAst(NodeAst):
    left_paren: TokenAst
    expression: ExpressionAst
    right_paren: TokenAst
    _tok: int

    kind = NodeKind.Factor

    def __str__(self):
        return f"({self.expression})"


@dataclass
class IdentifierFactorAst(NodeAst):
    identifier: TokenAst
    _tok: int

    kind = NodeKind.Factor

    def __str__(self):
        return str(self.identifier)


@dataclass
class NumberFactorAst(NodeAst):
    number: TokenAst
    _tok: int

    kind = NodeKind.Factor

    def __str__(self):
        return str(self.number)


@dataclass
class NegativeNumberFactorAst(NodeAst):
    minus: TokenAst
    number: TokenAst
    _tok: int

    kind = NodeKind.Factor

    def __str__(self):
        return f"-{self.number}"


FactorAst = ParenthesizedFactorAst | IdentifierFactorAst | NumberFactorAst | NegativeNumberFactorAst
StatementAst = IfStatementAst | WhileStatementAst | InputStatementAst | AssignStatementAst | WriteStatementAst | BeginStatementAst


def chain(more: NodeAst) -> Iterator[MoreStatementsAst | MoreExpressionAst | MoreTermsAst]:
    # Walks a right recursive "more" chain without recursing, so long statement lists and sums stay shallow.
    while not isinstance(more, NullAst):
        yield more
        more = more.more


def str_chain(more: MoreExpressionAst | MoreTermsAst | NullAst) -> str:
    return "".join([f" {link.operator} {link.operand}" for link in chain(more)])
