import contextlib
import io
import os
import sys
import tempfile
import unittest

from minisculus.__main__ import main
from minisculus.Compiler import Printer
from minisculus.Compiler.Compiler import Compiler, compile_source, recursion_limit
from minisculus.Compiler.ErrFmt import ErrFmt
from minisculus.Compiler.Options import CompilerOptions
from minisculus.Exceptions import CompilerError, InvalidTokenError, TrailingInputError, UnexpectedTokenError
from minisculus.SyntacticAnalysis import Ast

PROGRAM = """\
/* count down from the number read in */
begin
    input n;
    while n do
        begin
            write n; % current value
            n := n - 1
        end
end
"""


class TestCompiler(unittest.TestCase):
    def test_pipeline(self):
        compiler = Compiler(PROGRAM, "countdown.m")
        self.assertEqual(compiler.file_path, "countdown.m")
        self.assertEqual(str(compiler.tokens[0]), "BEGIN")
        self.assertEqual(compiler.tokens[0].line_number, 2)
        self.assertIsInstance(compiler.ast, Ast.BeginStatementAst)
        self.assertEqual(compiler.output, "".join([
            "    READ n\n",
            "L0:\n",
            "    rPUSH n\n",
            "    cJUMP L1\n",
            "    rPUSH n\n",
            "    PRINT\n",
            "    rPUSH n\n",
            "    cPUSH 1\n",
            "    OP1 -\n",
            "    LOAD n\n",
            "    JUMP L0\n",
            "L1:\n"]))

    def test_compilations_are_independent(self):
        self.assertEqual(compile_source("while x do input x"), compile_source("while x do input x"))

    def test_errors_propagate(self):
        with self.assertRaises(InvalidTokenError):
            compile_source("write 1 # 2")
        with self.assertRaises(UnexpectedTokenError):
            compile_source("write")
        with self.assertRaises(CompilerError):
            compile_source("/* never closed")


class TestLargePrograms(unittest.TestCase):
    def test_block_of_a_thousand_statements(self):
        code = "begin " + "; ".join([f"x := {i}" for i in range(1000)]) + " end"
        compiler = Compiler(code)
        self.assertEqual(compiler.output.count("    LOAD x\n"), 1000)
        self.assertTrue(compiler.output.startswith("    cPUSH 0\n    LOAD x\n    cPUSH 1\n"))
        self.assertTrue(compiler.output.endswith("    cPUSH 999\n    LOAD x\n"))

        regenerated = str(compiler.ast)
        self.assertEqual(regenerated.count(";\n"), 999)
        self.assertEqual(Compiler(regenerated).output, compiler.output)
        self.assertEqual(Printer.ast_dump(compiler.ast).count("Assign\n"), 1000)

    def test_sum_of_a_thousand_terms(self):
        instructions = compile_source("write " + " + ".join(["1"] * 1000)).split("\n")
        self.assertEqual(instructions.count("    cPUSH 1"), 1000)
        self.assertEqual(instructions.count("    OP1 +"), 999)
        self.assertEqual(instructions[:4], ["    cPUSH 1", "    cPUSH 1", "    OP1 +", "    cPUSH 1"])
        self.assertEqual(instructions[-3:], ["    OP1 +", "    PRINT", ""])

    def test_product_of_a_thousand_factors(self):
        output = compile_source("write " + " * ".join(["x"] * 1000))
        self.assertEqual(output.count("    OP1 *\n"), 999)

    def test_dot_graph_of_a_long_block(self):
        ast = Compiler("begin " + "; ".join(["input x"] * 400) + " end").ast
        self.assertEqual(Printer.dot_graph(ast).count('[label="Input"]'), 400)

    def test_recursion_limit_is_restored(self):
        previous = sys.getrecursionlimit()
        Compiler("begin " + "; ".join(["input x"] * 500) + " end")
        self.assertEqual(sys.getrecursionlimit(), previous)

        with self.assertRaises(TrailingInputError):
            Compiler("write 1 " + " + 1" * 500 + " write 2")
        self.assertEqual(sys.getrecursionlimit(), previous)

    def test_recursion_limit_scales_with_tokens(self):
        previous = sys.getrecursionlimit()
        with recursion_limit(0) as unchanged:
            self.assertEqual(unchanged, previous)
        with recursion_limit(1000) as raised:
            self.assertGreater(raised, previous)
            self.assertEqual(sys.getrecursionlimit(), raised)
        self.assertEqual(sys.getrecursionlimit(), previous)

class TestPrinter(unittest.TestCase):
    def test_token_dump_groups_by_line(self):
        tokens = Compiler("begin x := 3;\nwrite x end").tokens
        self.assertEqual(Printer.token_dump(tokens), "[BEGIN], [Id(x)], [ASSIGN], [Num(3)], [SEMICOLON]\n[WRITE], [Id(x)], [END]\n")

    def test_token_dump_empty(self):
        self.assertEqual(Printer.token_dump([]), "")

    def test_ast_dump(self):
        self.assertEqual(Printer.ast_dump(Compiler("write 1").ast), "\n".join([
            "Write",
            "  WRITE",
            "  Expression",
            "    Term",
            "      Factor",
            "        Num(1)",
            "      Null",
            "    Null",
            ""]))

    def test_node_labels(self):
        ast = Compiler("begin x := 1; y := 2 - 1 end").ast
        self.assertEqual(Printer.node_label(ast.statements), "Statement list")
        self.assertEqual(Printer.node_label(ast.statements.more), "More statements")
        self.assertEqual(Printer.node_label(ast.statements.more.statement.value.more), "More expression")

    def test_dot_graph(self):
        self.assertEqual(Printer.dot_graph(Compiler("input x").ast), "\n".join([
            "digraph G {",
            '  a [label="Input"]',
            "  a -> aa",
            '  aa [label="INPUT" fillcolor="gold" style="filled"]',
            "  a -> ab",
            '  ab [label="Id(x)" fillcolor="gold" style="filled"]',
            "}",
            ""]))

    def test_save_text_creates_directories(self):
        with tempfile.TemporaryDirectory() as directory:
            file_path = os.path.join(directory, "nested", "out.stk")
            Printer.save_text("PRINT\n", file_path)
            with open(file_path) as file:
                self.assertEqual(file.read(), "PRINT\n")


class TestErrFmt(unittest.TestCase):
    def test_points_at_line(self):
        message = ErrFmt.err("x := 1\n  y := $ 2", "prog.m", 2, "[0001] bad", colour=False)
        self.assertEqual(message, "\n".join([
            "",
            "-> prog.m: [Line: 2]",
            "  |",
            "2 |   y := $ 2",
            "  |   ^^^^^^^^ <- [0001] bad"]))

    def test_colour_only_adds_escapes(self):
        coloured = ErrFmt.err("write", "prog.m", 1, "message")
        self.assertNotEqual(coloured, ErrFmt.err("write", "prog.m", 1, "message", colour=False))
        self.assertEqual(ErrFmt.escape_ansi(coloured), ErrFmt.err("write", "prog.m", 1, "message", colour=False))

    def test_without_line(self):
        message = ErrFmt.err("", "prog.m", None, "[0101] Unexpected token '<EOF>' on line None", colour=False)
        self.assertEqual(message, "\n-> prog.m\n[0101] Unexpected token '<EOF>' on line None")


class TestOptions(unittest.TestCase):
    def test_defaults(self):
        options = CompilerOptions.from_args(["prog.m"])
        self.assertEqual(options, CompilerOptions("prog.m"))

    def test_flags(self):
        options = CompilerOptions.from_args(["prog.m", "-o", "build", "--tokens", "--ast", "--dot", "--source", "-v", "--no-colour"])
        self.assertEqual(options, CompilerOptions("prog.m", "build", True, True, True, True, True, False))


class TestCommandLine(unittest.TestCase):
    def setUp(self):
        self._directory = tempfile.TemporaryDirectory()
        self._out = os.path.join(self._directory.name, "out")

    def tearDown(self):
        self._directory.cleanup()

    def _write_source(self, code: str) -> str:
        source_path = os.path.join(self._directory.name, "countdown.m")
        with open(source_path, "w") as file:
            file.write(code)
        return source_path

    def _read(self, name: str) -> str:
        with open(os.path.join(self._out, name)) as file:
            return file.read()

    def test_compiles_and_writes_outputs(self):
        source_path = self._write_source(PROGRAM)
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            status = main([source_path, "-o", self._out, "--tokens", "--ast", "--dot", "--source"])

        self.assertEqual(status, 0)
        self.assertEqual(stdout.getvalue(), Compiler(PROGRAM).output)
        self.assertEqual(self._read("countdown.stk"), Compiler(PROGRAM).output)
        self.assertTrue(self._read("countdown.tokens").startswith("[BEGIN]\n[INPUT], [Id(n)], [SEMICOLON]\n"))
        self.assertTrue(self._read("countdown.ast").startswith("Begin\n  BEGIN\n  Statement list\n"))
        self.assertTrue(self._read("countdown.dot").startswith("digraph G {\n"))
        self.assertEqual(Compiler(self._read("countdown.source.m")).output, Compiler(PROGRAM).output)

    def test_only_listing_by_default(self):
        source_path = self._write_source("write 1")
        with contextlib.redirect_stdout(io.StringIO()):
            main([source_path, "-o", self._out])
        self.assertEqual(sorted(os.listdir(self._out)), ["countdown.stk"])

    def test_reports_errors(self):
        source_path = self._write_source("begin\n  write 1;\n  write $\nend\n")
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            status = main([source_path, "-o", self._out, "--no-colour"])

        self.assertEqual(status, 1)
        self.assertIn(f"-> {source_path}: [Line: 3]", stderr.getvalue())
        self.assertIn("3 |   write $", stderr.getvalue())
        self.assertIn("[0001] Invalid token encountered at line 3 - '$'", stderr.getvalue())
        self.assertFalse(os.path.exists(self._out))

    def test_compiles_a_long_program(self):
        source_path = self._write_source("begin\n" + ";\n".join([f"    write {i} + {i}" for i in range(600)]) + "\nend\n")
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            status = main([source_path, "-o", self._out, "--source"])

        self.assertEqual(status, 0)
        self.assertEqual(stdout.getvalue().count("    PRINT\n"), 600)
        self.assertEqual(self._read("countdown.source.m").count("write"), 600)

    def test_reports_missing_source(self):
        source_path = os.path.join(self._directory.name, "missing.m")
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            status = main([source_path, "-o", self._out, "--no-colour"])

        self.assertEqual(status, 1)
        self.assertIn(f"-> {source_path}\nCannot read source file: ", stderr.getvalue())
        self.assertFalse(os.path.exists(self._out))

    def test_reports_undecodable_source(self):
        source_path = os.path.join(self._directory.name, "binary.m")
        with open(source_path, "wb") as file:
            file.write(b"write \xff\xfe 1\n")
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            status = main([source_path, "-o", self._out, "--no-colour"])

        self.assertEqual(status, 1)
        self.assertIn("Cannot read source file: 'utf-8' codec can't decode", stderr.getvalue())
        self.assertFalse(os.path.exists(self._out))
