from __future__ import annotations

import itertools
import os

import inflection

from minisculus.LexicalAnalysis.Tokens import Token
from minisculus.SyntacticAnalysis import Ast


def node_label(ast: Ast.NodeAst) -> str:
    # Terminals show the token they hold ("Id(x)", "IF"), everything else its node kind ("More expression").
    if ast.is_terminal:
        return str(ast.tok)
    return inflection.humanize(inflection.underscore(ast.kind.value))


def token_dump(tokens: list[Token]) -> str:
    lines = []
    for _, line_tokens in itertools.groupby(tokens, key=lambda token: token.line_number):
        lines.append(", ".join([f"[{token}]" for token in line_tokens]))
    return "\n".join(lines) + ("\n" if lines else "")


def ast_dump(ast: Ast.NodeAst) -> str:
    # Preorder walk with an explicit stack, as long statement lists nest too deeply to recurse over.
    lines = []
    stack = [(ast, 0)]
    while stack:
        node, depth = stack.pop()
        lines.append("  " * depth + node_label(node) + "\n")
        stack.extend([(child, depth + 1) for child in reversed(node.children)])
    return "".join(lines)


def dot_graph(ast: Ast.NodeAst) -> str:
    lines = ["digraph G {"]
    # Node ids are the path from the root: the root is "a", its children "aa", "ab", ..., and so on down the tree.
    stack = [(ast, "a", None)]
    while stack:
        node, prefix, parent_prefix = stack.pop()
        if parent_prefix is not None:
            lines.append(f"  {parent_prefix} -> {prefix}")
        colour = ' fillcolor="gold" style="filled"' if node.is_terminal else ""
        lines.append(f'  {prefix} [label="{node_label(node)}"{colour}]')
        children = [(child, prefix + chr(ord("a") + index), prefix) for index, child in enumerate(node.children)]
        stack.extend(reversed(children))
    lines.append("}")
    return "\n".join(lines) + "\n"


def save_text(text: str, file_path: str) -> None:
    os.makedirs(os.path.dirname(file_path) or ".", exist_ok=True)
    with open(file_path, "w") as file:
        file.write(text)
