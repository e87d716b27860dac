"""
Nautilus eval sub-shell: a nested prompt over a restricted Python evaluator.

- Evaluator: evaluates one expression or assignment per line. The AST is
  checked against a whitelist first (no imports, no lambdas, no comprehension
  scopes, no underscore attributes); only a fixed set of builtins is visible.
  Assigned names persist between lines.
- executor(evaluator, session): the line handler of the sub-shell. `exit` and
  `pop` print a hint instead of leaving; only Ctrl-D / Ctrl-C leave.
- eval_command(): the opt-in `eval` built-in. With arguments it evaluates them
  once; without, it opens the nested prompt "<scopes>:eval<prefix>".
"""
import ast

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import FuzzyWordCompleter
from prompt_toolkit.shortcuts import set_title

from .commands import Command
from .faults import FaultCode, ShellFault
from .shell import DEFAULT_COLORS, ColorScheme, bindings
from .utils import *

EXIT_HINT = "Press Ctrl-D to exit"


class EvaluationError(ShellFault):
    code = FaultCode.INVALID_EXPRESSION
    title = "evaluation failed"


class Evaluator:
    """Restricted evaluator using an AST whitelist"""

    ALLOWED_NODES = {
        ast.Module, ast.Expression, ast.Expr, ast.Assign,
        ast.BinOp, ast.UnaryOp, ast.BoolOp, ast.Compare, ast.IfExp,
        ast.Constant, ast.Name, ast.Load, ast.Store,
        ast.List, ast.Tuple, ast.Dict, ast.Set,
        ast.Add, ast.Sub, ast.Mult, ast.Div, ast.FloorDiv, ast.Mod, ast.Pow,
        ast.BitAnd, ast.BitOr, ast.BitXor, ast.LShift, ast.RShift, ast.Invert,
        ast.Lt, ast.Gt, ast.LtE, ast.GtE, ast.Eq, ast.NotEq, ast.In, ast.NotIn, ast.Is, ast.IsNot,
        ast.And, ast.Or, ast.Not, ast.UAdd, ast.USub,
        ast.Subscript, ast.Slice,
        ast.Call, ast.keyword, ast.Attribute,
        ast.JoinedStr, ast.FormattedValue,
    }

    SAFE_BUILTINS = {
        "str": str, "int": int, "float": float, "bool": bool,
        "len": len, "range": range, "min": min, "max": max,
        "sum": sum, "abs": abs, "round": round,
        "dict": dict, "list": list, "set": set, "tuple": tuple,
        "sorted": sorted, "reversed": reversed, "enumerate": enumerate,
        "zip": zip, "map": map, "filter": filter,
        "any": any, "all": all, "divmod": divmod, "pow": pow,
        "True": True, "False": False, "None": None,
    }

    def __init__(self, variables=Unset, /):
        self.variables = dict(coalesce(variables, {}))

    def names(self):
        return sorted({*self.SAFE_BUILTINS, *self.variables})

    def _check(self, tree):
        for node in ast.walk(tree):
            if type(node) not in self.ALLOWED_NODES:
                raise EvaluationError(f"{type(node).__name__.lower()} is not allowed here")
            if isinstance(node, ast.Attribute) and node.attr.startswith("_"):
                raise EvaluationError(f"attribute {node.attr!r} is not accessible")
            if isinstance(node, ast.Name) and node.id.startswith("__"):
                raise EvaluationError(f"name {node.id!r} is not accessible")

    def _run(self, expression):
        code = compile(ast.Expression(expression), "<eval>", "eval")
        try:
            return eval(code, {"__builtins__": {}}, {**self.SAFE_BUILTINS, **self.variables})
        except Exception as exception:
            raise EvaluationError(f"{type(exception).__name__}: {exception}") from exception

    def evaluate(self, source, /):
        """
        Evaluate one line and return its value (None for assignments).

        Raises
        - EvaluationError for syntax errors, disallowed constructs and runtime errors.
        """
        try:
            tree = ast.parse(source.strip(), "<eval>", mode="exec")
        except SyntaxError as exception:
            raise EvaluationError(f"invalid syntax: {exception.msg}") from exception

        if len(tree.body) != 1:
            raise EvaluationError("expected exactly one expression or assignment")
        self._check(tree)

        match tree.body[0]:
            case ast.Expr(value=expression):
                return self._run(expression)
            case ast.Assign(targets=targets, value=expression) if all(isinstance(target, ast.Name) for target in targets):
                value = self._run(expression)
                for target in targets:
                    self.variables[target.id] = value
                return None
            case _:
                raise EvaluationError("only names can be assigned")


def executor(evaluator, session, /):
    """
    Build the line handler of the eval sub-shell.
    """
    @rename("execute")
    def execute(line, /):
        if not (line := line.strip()):
            return
        if line in ("exit", "pop"):
            session.echo(EXIT_HINT)
            return
        try:
            value = evaluator.evaluate(line)
        except EvaluationError as fault:
            session.report(fault)
            return
        if value is not None:
            session.echo(repr(value))

    return execute


def label(session, /):
    """
    Prompt label of the sub-shell: the scope path, "eval", then the session prefix.
    """
    return session.separator.join([*(scope.name for scope in session.scopes), "eval"]) + session.prefix


def eval_command(*, title="eval", colors=Unset, variables=Unset):
    """
    Create the `eval` built-in (not installed by default; add it where wanted).
    """
    evaluator = Evaluator(variables)
    scheme = coalesce(colors, DEFAULT_COLORS)
    if not isinstance(scheme, ColorScheme):
        raise TypeError("eval_command() 'colors' must be a color scheme")
    prompt = None

    @rename("eval")
    def run(session, command, args, /):
        nonlocal prompt
        execute = executor(evaluator, session)
        if args:
            execute(" ".join(args))
            return

        if prompt is None:
            prompt = PromptSession(
                lambda: [("class:prompt", label(session))],
                completer=FuzzyWordCompleter(evaluator.names),
                key_bindings=bindings(),
                style=scheme.style(),
            )
        set_title(title)
        while True:
            try:
                line = prompt.prompt()
            except (EOFError, KeyboardInterrupt):
                return
            execute(line)

    return Command(
        "eval",
        run,
        short="Launch the expression interpreter",
        eager=True,
        builtin=True,
    )


__all__ = (
    "EXIT_HINT",
    "EvaluationError",
    "Evaluator",
    "executor",
    "label",
    "eval_command",
)
