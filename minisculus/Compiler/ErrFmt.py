from __future__ import annotations

import re
from typing import Optional

import colorama


class ErrFmt:
    """
    Renders a compile error against the source it came from:

    -> path/to/file.m: [Line: 3]
      |
    3 | if x then write 1
      | ^^^^^^^^^^^^^^^^^ <- [0101] Unexpected token 'Id' on line 3, expected 'Else'
    """
    ANSI_ESCAPE = re.compile(r"(?:\x1B[@-_]|[\x80-\x9F])[0-?]*[ -/]*[@-~]")

    @staticmethod
    def escape_ansi(line: str) -> str:
        return ErrFmt.ANSI_ESCAPE.sub("", line)

    @staticmethod
    def err(code: str, file_path: str, line_number: Optional[int], message: str, colour: bool = True) -> str:
        bright = f"{colorama.Fore.WHITE}{colorama.Style.BRIGHT}"
        green = f"{colorama.Fore.GREEN}"
        red = f"{colorama.Fore.RED}{colorama.Style.BRIGHT}"
        reset = f"{colorama.Style.RESET_ALL}"

        # Errors without a line (an empty program, an unreadable file) only get the file path and the message.
        lines = code.split("\n")
        if line_number is None or not 1 <= line_number <= len(lines):
            final_string = "\n".join([
                "",
                f"-> {bright}{file_path}{reset}",
                f"{red}{message}{reset}"])
            return final_string if colour else ErrFmt.escape_ansi(final_string)

        # The margin holds the line number, so the padding lines above and below the source line are as wide as it.
        # The whole (stripped) line is underlined, as tokens only record which line they were read from.
        source_line = lines[line_number - 1].rstrip()
        indent = len(source_line) - len(source_line.lstrip())
        margin = " " * len(str(line_number))
        underline = " " * indent + "^" * max(1, len(source_line) - indent)

        final_string = "\n".join([
            "",
            f"-> {bright}{file_path}: [Line: {line_number}]{reset}",
            f"{margin} {bright}|{reset}",
            f"{bright}{line_number} | {reset}{green}{source_line}{reset}",
            f"{margin} {bright}| {reset}{red}{underline}{reset} <- {message}"])
        return final_string if colour else ErrFmt.escape_ansi(final_string)
