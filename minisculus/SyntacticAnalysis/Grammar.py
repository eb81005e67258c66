"""
Lexer and parser rules for minisculus. The grammar, with left recursion removed:

base        -> stmt
stmt        -> IF expr THEN stmt ELSE stmt
             | WHILE expr DO stmt
             | INPUT ID
             | ID ASSIGN expr
             | WRITE expr
             | BEGIN stmtlist END
stmtlist    -> stmt stmtlist'
stmtlist'   -> SEMICOLON stmt stmtlist'
             | .
expr        -> term expr'
expr'       -> addop term expr'
             | .
term        -> factor term'
term'       -> mulop factor term'
             | .
factor      -> LPAR expr RPAR
             | ID
             | NUM
             | SUB NUM
addop       -> ADD | SUB
mulop       -> MUL | DIV

Each epsilon production's decider is the negation of the other production's decider for the same rule, so exactly one
of them is selected for any next token.
"""

from __future__ import annotations

from minisculus.LexicalAnalysis.Lexer import Lexer, keyword, lexeme
from minisculus.LexicalAnalysis.Tokens import TokenType
from minisculus.SyntacticAnalysis import Ast
from minisculus.SyntacticAnalysis.Parser import RecursiveDescentParser


def add_lexer_rules(lexer: Lexer) -> Lexer:
    # Keywords have to come before identifiers, as the first matching rule wins rather than the longest match. The
    # word boundary stops "iffy" or "do_it" being read as a keyword followed by an identifier.
    return (lexer
            .add_rule(r"if\b", keyword(TokenType.If))
            .add_rule(r"then\b", keyword(TokenType.Then))
            .add_rule(r"while\b", keyword(TokenType.While))
            .add_rule(r"do\b", keyword(TokenType.Do))
            .add_rule(r"input\b", keyword(TokenType.Input))
            .add_rule(r"else\b", keyword(TokenType.Else))
            .add_rule(r"begin\b", keyword(TokenType.Begin))
            .add_rule(r"end\b", keyword(TokenType.End))
            .add_rule(r"write\b", keyword(TokenType.Write))
            .add_rule(r"[A-Za-z_][A-Za-z0-9_]*", lexeme(TokenType.Id))
            .add_rule(r"[0-9]+", lexeme(TokenType.Num))
            .add_rule(r"\+", keyword(TokenType.Add))
            .add_rule(r":=", keyword(TokenType.Assign))
            .add_rule(r"-", keyword(TokenType.Sub))
            .add_rule(r"\*", keyword(TokenType.Mul))
            .add_rule(r"/", keyword(TokenType.Div))
            .add_rule(r"\(", keyword(TokenType.LPar))
            .add_rule(r"\)", keyword(TokenType.RPar))
            .add_rule(r";", keyword(TokenType.Semicolon)))


def add_parser_rules(parser: RecursiveDescentParser) -> RecursiveDescentParser:
    _add_statement_rules(parser)
    _add_statement_list_rules(parser)
    _add_expression_rules(parser)
    _add_factor_rules(parser)
    return parser


def _add_statement_rules(parser: RecursiveDescentParser) -> None:
    def parse_base(rdp: RecursiveDescentParser) -> Ast.NodeAst:
        return rdp.invoke_rule("stmt")

    def parse_if(rdp: RecursiveDescentParser) -> Ast.IfStatementAst:
        c1 = rdp.current
        p1 = rdp.consume_token(TokenType.If)
        p2 = rdp.invoke_rule("expr")
        p3 = rdp.consume_token(TokenType.Then)
        p4 = rdp.invoke_rule("stmt")
        p5 = rdp.consume_token(TokenType.Else)
        p6 = rdp.invoke_rule("stmt")
        return Ast.IfStatementAst(p1, p2, p3, p4, p5, p6, c1)

    def parse_while(rdp: RecursiveDescentParser) -> Ast.WhileStatementAst:
        c1 = rdp.current
        p1 = rdp.consume_token(TokenType.While)
        p2 = rdp.invoke_rule("expr")
        p3 = rdp.consume_token(TokenType.Do)
        p4 = rdp.invoke_rule("stmt")
        return Ast.WhileStatementAst(p1, p2, p3, p4, c1)

    def parse_input(rdp: RecursiveDescentParser) -> Ast.InputStatementAst:
        c1 = rdp.current
        p1 = rdp.consume_token(TokenType.Input)
        p2 = rdp.consume_token(TokenType.Id)
        return Ast.InputStatementAst(p1, p2, c1)

    def parse_assign(rdp: RecursiveDescentParser) -> Ast.AssignStatementAst:
        c1 = rdp.current
        p1 = rdp.consume_token(TokenType.Id)
        p2 = rdp.consume_token(TokenType.Assign)
        p3 = rdp.invoke_rule("expr")
        return Ast.AssignStatementAst(p1, p2, p3, c1)

    def parse_write(rdp: RecursiveDescentParser) -> Ast.WriteStatementAst:
        c1 = rdp.current
        p1 = rdp.consume_token(TokenType.Write)
        p2 = rdp.invoke_rule("expr")
        return Ast.WriteStatementAst(p1, p2, c1)

    def parse_begin(rdp: RecursiveDescentParser) -> Ast.BeginStatementAst:
        c1 = rdp.current
        p1 = rdp.consume_token(TokenType.Begin)
        p2 = rdp.invoke_rule("stmtlist")
        p3 = rdp.consume_token(TokenType.End)
        return Ast.BeginStatementAst(p1, p2, p3, c1)

    parser.add_rule("base", lambda rdp: True, parse_base, "stmt")
    parser.add_rule("stmt", lambda rdp: rdp.try_match(TokenType.If), parse_if, "IF expr THEN stmt ELSE stmt")
    parser.add_rule("stmt", lambda rdp: rdp.try_match(TokenType.While), parse_while, "WHILE expr DO stmt")
    parser.add_rule("stmt", lambda rdp: rdp.try_match(TokenType.Input), parse_input, "INPUT ID")
    parser.add_rule("stmt", lambda rdp: rdp.try_match(TokenType.Id), parse_assign, "ID ASSIGN expr")
    parser.add_rule("stmt", lambda rdp: rdp.try_match(TokenType.Write), parse_write, "WRITE expr")
    parser.add_rule("stmt", lambda rdp: rdp.try_match(TokenType.Begin), parse_begin, "BEGIN stmtlist END")


def _add_statement_list_rules(parser: RecursiveDescentParser) -> None:
    def parse_statement_list(rdp: RecursiveDescentParser) -> Ast.StatementListAst:
        c1 = rdp.current
        p1 = rdp.invoke_rule("stmt")
        p2 = rdp.invoke_rule("stmtlist'")
        return Ast.StatementListAst(p1, p2, c1)

    def parse_more_statements(rdp: RecursiveDescentParser) -> Ast.MoreStatementsAst:
        c1 = rdp.current
        p1 = rdp.consume_token(TokenType.Semicolon)
        p2 = rdp.invoke_rule("stmt")
        p3 = rdp.invoke_rule("stmtlist'")
        return Ast.MoreStatementsAst(p1, p2, p3, c1)

    def is_more_statements(rdp: RecursiveDescentParser) -> bool:
        return rdp.try_match(TokenType.Semicolon)

    parser.add_rule("stmtlist", lambda rdp: rdp.try_match("stmt"), parse_statement_list, "stmt stmtlist'")
    parser.add_rule("stmtlist'", is_more_statements, parse_more_statements, "SEMICOLON stmt stmtlist'")
    parser.add_rule("stmtlist'", lambda rdp: not is_more_statements(rdp), _parse_null, ".")


def _add_expression_rules(parser: RecursiveDescentParser) -> None:
    def parse_expression(rdp: RecursiveDescentParser) -> Ast.ExpressionAst:
        c1 = rdp.current
        p1 = rdp.invoke_rule("term")
        p2 = rdp.invoke_rule("expr'")
        return Ast.ExpressionAst(p1, p2, c1)

    def parse_more_expression(rdp: RecursiveDescentParser) -> Ast.MoreExpressionAst:
        c1 = rdp.current
        p1 = rdp.invoke_rule("addop")
        p2 = rdp.invoke_rule("term")
        p3 = rdp.invoke_rule("expr'")
        return Ast.MoreExpressionAst(p1, p2, p3, c1)

    def parse_term(rdp: RecursiveDescentParser) -> Ast.TermAst:
        c1 = rdp.current
        p1 = rdp.invoke_rule("factor")
        p2 = rdp.invoke_rule("term'")
        return Ast.TermAst(p1, p2, c1)

    def parse_more_terms(rdp: RecursiveDescentParser) -> Ast.MoreTermsAst:
        c1 = rdp.current
        p1 = rdp.invoke_rule("mulop")
        p2 = rdp.invoke_rule("factor")
        p3 = rdp.invoke_rule("term'")
        return Ast.MoreTermsAst(p1, p2, p3, c1)

    parser.add_rule("expr", lambda rdp: rdp.try_match("term"), parse_expression, "term expr'")
    parser.add_rule("expr'", lambda rdp: rdp.try_match("addop"), parse_more_expression, "addop term expr'")
    parser.add_rule("expr'", lambda rdp: not rdp.try_match("addop"), _parse_null, ".")
    parser.add_rule("term", lambda rdp: rdp.try_match("factor"), parse_term, "factor term'")
    parser.add_rule("term'", lambda rdp: rdp.try_match("mulop"), parse_more_terms, "mulop factor term'")
    parser.add_rule("term'", lambda rdp: not rdp.try_match("mulop"), _parse_null, ".")

    for name, token_type in [("addop", TokenType.Add), ("addop", TokenType.Sub), ("mulop", TokenType.Mul), ("mulop", TokenType.Div)]:
        parser.add_rule(name, _matches(token_type), _consumes(token_type), token_type.value)


def _add_factor_rules(parser: RecursiveDescentParser) -> None:
    def parse_parenthesized(rdp: RecursiveDescentParser) -> Ast.ParenthesizedFactorAst:
        c1 = rdp.current
        p1 = rdp.consume_token(TokenType.LPar)
        p2 = rdp.invoke_rule("expr")
        p3 = rdp.consume_token(TokenType.RPar)
        return Ast.ParenthesizedFactorAst(p1, p2, p3, c1)

    def parse_identifier(rdp: RecursiveDescentParser) -> Ast.IdentifierFactorAst:
        c1 = rdp.current
        p1 = rdp.consume_token(TokenType.Id)
        return Ast.IdentifierFactorAst(p1, c1)

    def parse_number(rdp: RecursiveDescentParser) -> Ast.NumberFactorAst:
        c1 = rdp.current
        p1 = rdp.consume_token(TokenType.Num)
        return Ast.NumberFactorAst(p1, c1)

    # Unary minus only applies to a number literal, not to an arbitrary factor.
    def parse_negative_number(rdp: RecursiveDescentParser) -> Ast.NegativeNumberFactorAst:
        c1 = rdp.current
        p1 = rdp.consume_token(TokenType.Sub)
        p2 = rdp.consume_token(TokenType.Num)
        return Ast.NegativeNumberFactorAst(p1, p2, c1)

    parser.add_rule("factor", _matches(TokenType.LPar), parse_parenthesized, "LPAR expr RPAR")
    parser.add_rule("factor", _matches(TokenType.Id), parse_identifier, "ID")
    parser.add_rule("factor", _matches(TokenType.Num), parse_number, "NUM")
    parser.add_rule("factor", _matches(TokenType.Sub), parse_negative_number, "SUB NUM")


def _parse_null(rdp: RecursiveDescentParser) -> Ast.NullAst:
    return Ast.NullAst(rdp.current)


def _matches(token_type: TokenType):
    return lambda rdp: rdp.try_match(token_type)


def _consumes(token_type: TokenType):
    return lambda rdp: rdp.consume_token(token_type)
