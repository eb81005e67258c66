from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass
class CompilerOptions:
    source_path: str
    output_dir: str = "_out"
    emit_tokens: bool = False
    emit_ast: bool = False
    emit_dot: bool = False
    emit_source: bool = False
    verbose: bool = False
    colour: bool = True

    @staticmethod
    def argument_parser() -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(prog="minisculus", description="Compile a minisculus program to stack machine code.")
        parser.add_argument("source_path", metavar="SOURCE", help="minisculus source file")
        parser.add_argument("-o", "--out-dir", dest="output_dir", default="_out", help="directory for the output files (default: _out)")
        parser.add_argument("--tokens", dest="emit_tokens", action="store_true", help="also write the token dump")
        parser.add_argument("--ast", dest="emit_ast", action="store_true", help="also write the indented AST dump")
        parser.add_argument("--dot", dest="emit_dot", action="store_true", help="also write the AST as a GraphViz graph")
        parser.add_argument("--source", dest="emit_source", action="store_true", help="also write the source regenerated from the AST")
        parser.add_argument("-v", "--verbose", action="store_true", help="log each token, rule and label")
        parser.add_argument("--no-colour", dest="colour", action="store_false", help="plain error messages")
        return parser

    @staticmethod
    def from_args(argv: Optional[Sequence[str]] = None) -> CompilerOptions:
        return CompilerOptions(**vars(CompilerOptions.argument_parser().parse_args(argv)))
