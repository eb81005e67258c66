import logging
import os
import sys
from typing import Optional, Sequence

import colorama

from minisculus.Compiler import Printer
from minisculus.Compiler.Compiler import Compiler, recursion_limit
from minisculus.Compiler.ErrFmt import ErrFmt
from minisculus.Compiler.Options import CompilerOptions
from minisculus.Exceptions import CompilerError

__version__ = "1.0.0"

logger = logging.getLogger("minisculus")


def configure_logging(verbose: bool) -> None:
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def write_outputs(compiler: Compiler, options: CompilerOptions) -> None:
    stem = os.path.join(options.output_dir, os.path.splitext(os.path.basename(options.source_path))[0])

    outputs = {".stk": compiler.output}
    if options.emit_tokens:
        outputs[".tokens"] = Printer.token_dump(compiler.tokens)
    if options.emit_ast:
        outputs[".ast"] = Printer.ast_dump(compiler.ast)
    if options.emit_dot:
        outputs[".dot"] = Printer.dot_graph(compiler.ast)
    if options.emit_source:
        outputs[".source.m"] = str(compiler.ast) + "\n"

    for extension, text in outputs.items():
        Printer.save_text(text, stem + extension)
        logger.info(f"Wrote {stem + extension}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    options = CompilerOptions.from_args(argv)
    configure_logging(options.verbose)
    colorama.just_fix_windows_console()

    try:
        with open(options.source_path, encoding="utf-8") as file:
            code = file.read()
    except (OSError, UnicodeDecodeError) as error:
        print(ErrFmt.err("", options.source_path, None, f"Cannot read source file: {error}", options.colour), file=sys.stderr)
        return 1

    try:
        compiler = Compiler(code, options.source_path)
    except CompilerError as error:
        print(ErrFmt.err(code, options.source_path, error.line_number, str(error), options.colour), file=sys.stderr)
        return 1

    with recursion_limit(len(compiler.tokens)):
        write_outputs(compiler, options)
    sys.stdout.write(compiler.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
