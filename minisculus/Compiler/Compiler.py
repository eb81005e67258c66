from __future__ import annotations

import contextlib
import sys
from typing import Iterator

from minisculus.CodeGen.CodeGen import StackMachineCodeGen
from minisculus.LexicalAnalysis.Lexer import Lexer
from minisculus.LexicalAnalysis.Tokens import Token
from minisculus.SyntacticAnalysis import Ast
from minisculus.SyntacticAnalysis.Grammar import add_lexer_rules, add_parser_rules
from minisculus.SyntacticAnalysis.Parser import RecursiveDescentParser

# Upper bound on the Python frames one token can add to the parse, reached by nested parentheses.
FRAMES_PER_TOKEN = 10


@contextlib.contextmanager
def recursion_limit(token_count: int) -> Iterator[int]:
    """
    Raise the recursion limit for the duration of the block, so that the depth of the parse is bounded by the size
    of the program instead of by the interpreter's default. The previous limit is always restored.
    @param token_count: Number of tokens in the program being compiled.
    @return: The limit in force inside the block.
    """
    previous = sys.getrecursionlimit()
    limit = previous + FRAMES_PER_TOKEN * token_count
    sys.setrecursionlimit(limit)
    try:
        yield limit
    finally:
        sys.setrecursionlimit(previous)


class Compiler:
    """
    Runs one program through the lexer, parser and code generator. Each phase gets a fresh instance, as the lexer's
    token list, the parser's cursor and the generator's label counter are all mutated while they run. Any phase can
    raise a CompilerError, in which case nothing is produced.
    """
    _file_path: str
    _tokens: list[Token]
    _ast: Ast.NodeAst
    _output: str

    def __init__(self, code: str, file_path: str = "<string>"):
        self._file_path = file_path

        # Lex the code into a list of tokens.
        self._tokens = add_lexer_rules(Lexer()).lex(code)

        with recursion_limit(len(self._tokens)):
            # Parse the tokens into an AST.
            self._ast = add_parser_rules(RecursiveDescentParser()).parse(self._tokens)

            # Lower the AST into stack machine code.
            self._output = StackMachineCodeGen().generate(self._ast)

    @property
    def file_path(self) -> str:
        return self._file_path

    @property
    def tokens(self) -> list[Token]:
        return self._tokens

    @property
    def ast(self) -> Ast.NodeAst:
        return self._ast

    @property
    def output(self) -> str:
        return self._output


def compile_source(code: str) -> str:
    return Compiler(code).output
