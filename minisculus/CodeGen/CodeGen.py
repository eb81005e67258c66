import logging

from multimethod import multimethod

from minisculus.Exceptions import CodeGenError
from minisculus.LexicalAnalysis.Tokens import TokenType
from minisculus.SyntacticAnalysis import Ast

logger = logging.getLogger(__name__)

OPERATORS = {
    TokenType.Add: "+",
    TokenType.Sub: "-",
    TokenType.Mul: "*",
    TokenType.Div: "/",
}


class StackMachineCodeGen:
    """
    Lowers an AST into stack machine instructions. Expressions are emitted in postorder (operands are pushed before
    the operator that combines them), and control flow is built from labels named "L0", "L1", ... taken from a
    counter that lives as long as the generator, so a generator must not be reused for a second program.
    """
    _instructions: list[str]
    _label_counter: int

    def __init__(self):
        self._instructions = []
        self._label_counter = 0

    def generate(self, ast: Ast.NodeAst) -> str:
        self._convert(ast)
        logger.info(f"Generated {len(self._instructions)} instructions")
        return self.listing

    @property
    def instructions(self) -> list[str]:
        return [instruction.strip() for instruction in self._instructions]

    @property
    def listing(self) -> str:
        return "".join([instruction + "\n" for instruction in self._instructions])

    def _emit(self, instruction: str) -> None:
        self._instructions.append("    " + instruction)

    def _emit_label(self, label: str) -> None:
        self._instructions.append(f"{label}:")

    def _generate_label(self) -> str:
        label = f"L{self._label_counter}"
        self._label_counter += 1
        logger.debug(f"Allocated label {label}")
        return label

    # The left operand is already on the stack, so push each right operand and combine it before moving along the
    # chain. This keeps "a - b - c" left associative.
    def _convert_operations(self, more: Ast.MoreExpressionAst | Ast.MoreTermsAst) -> None:
        for link in Ast.chain(more):
            self._convert(link.operand)
            self._emit(f"OP1 {OPERATORS[link.operator.terminal_token_type]}")

    @multimethod
    def _convert(self, ast: object):
        raise CodeGenError(f"No code generation for {type(ast).__name__}. Report as bug.")

    @multimethod
    def _convert(self, ast: Ast.IfStatementAst):
        else_label = self._generate_label()
        skip_label = self._generate_label()

        self._convert(ast.condition)
        self._emit(f"cJUMP {else_label}")
        self._convert(ast.then_branch)
        self._emit(f"JUMP {skip_label}")
        self._emit_label(else_label)
        self._convert(ast.else_branch)
        self._emit_label(skip_label)

    @multimethod
    def _convert(self, ast: Ast.WhileStatementAst):
        head_label = self._generate_label()
        exit_label = self._generate_label()

        self._emit_label(head_label)
        self._convert(ast.condition)
        self._emit(f"cJUMP {exit_label}")
        self._convert(ast.body)
        self._emit(f"JUMP {head_label}")
        self._emit_label(exit_label)

    @multimethod
    def _convert(self, ast: Ast.InputStatementAst):
        self._emit(f"READ {ast.identifier.literal_data}")

    @multimethod
    def _convert(self, ast: Ast.AssignStatementAst):
        # The value is left on top of the stack for LOAD to store.
        self._convert(ast.value)
        self._emit(f"LOAD {ast.identifier.literal_data}")

    @multimethod
    def _convert(self, ast: Ast.WriteStatementAst):
        self._convert(ast.value)
        self._emit("PRINT")

    @multimethod
    def _convert(self, ast: Ast.BeginStatementAst):
        self._convert(ast.statements)

    @multimethod
    def _convert(self, ast: Ast.StatementListAst):
        self._convert(ast.statement)
        self._convert(ast.more)

    @multimethod
    def _convert(self, ast: Ast.MoreStatementsAst):
        for link in Ast.chain(ast):
            self._convert(link.statement)

    @multimethod
    def _convert(self, ast: Ast.ExpressionAst):
        self._convert(ast.term)
        self._convert(ast.more)

    @multimethod
    def _convert(self, ast: Ast.TermAst):
        self._convert(ast.factor)
        self._convert(ast.more)

    @multimethod
    def _convert(self, ast: Ast.MoreExpressionAst):
        self._convert_operations(ast)

    @multimethod
    def _convert(self, ast: Ast.MoreTermsAst):
        self._convert_operations(ast)

    @multimethod
    def _convert(self, ast: Ast.ParenthesizedFactorAst):
        self._convert(ast.expression)

    @multimethod
    def _convert(self, ast: Ast.IdentifierFactorAst):
        self._emit(f"rPUSH {ast.identifier.literal_data}")

    @multimethod
    def _convert(self, ast: Ast.NumberFactorAst):
        self._emit(f"cPUSH {ast.number.literal_data}")

    @multimethod
    def _convert(self, ast: Ast.NegativeNumberFactorAst):
        self._emit(f"cPUSH -{ast.number.literal_data}")

    @multimethod
    def _convert(self, ast: Ast.NullAst):
        pass
