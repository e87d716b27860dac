"""
Eval sub-shell tests.

Scope
- Evaluator: whitelist enforcement, assignment persistence, error wrapping.
- executor(): hint on exit/pop, fault reporting, value echo.
- eval_command(): one-shot evaluation of its arguments.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from nautilus import EXIT_HINT, EvaluationError, Evaluator, Scope, Session, eval_command, executor, label


def session():
    output, errors = io.StringIO(), io.StringIO()
    live = Session(console=Console(file=output, width=200), errors=Console(file=errors, width=200))
    live.push(Scope("mercator"))
    return live, output, errors


class TestEvaluator(TestCase):

    def testExpressions(self):
        evaluator = Evaluator()
        self.assertEqual(evaluator.evaluate("1 + 2 * 3"), 7)
        self.assertEqual(evaluator.evaluate("max([3, 9, 4])"), 9)
        self.assertEqual(evaluator.evaluate("'risk'.upper()"), "RISK")
        self.assertEqual(evaluator.evaluate("[1, 2, 3][1:]"), [2, 3])

    def testAssignmentsPersist(self):
        evaluator = Evaluator({"base": 10})
        self.assertIsNone(evaluator.evaluate("rate = 0.5"))
        self.assertEqual(evaluator.evaluate("base * rate"), 5.0)
        self.assertIn("rate", evaluator.names())
        self.assertIn("len", evaluator.names())

    def testRejectedConstructs(self):
        evaluator = Evaluator()
        for source in (
            "import os",
            "__import__('os')",
            "(1).__class__",
            "lambda: 1",
            "[x for x in range(3)]",
            "total += 1",
            "open('file')",
        ):
            with self.subTest(source=source), self.assertRaises(EvaluationError):
                evaluator.evaluate(source)

    def testSyntaxAndRuntimeErrors(self):
        evaluator = Evaluator()
        with self.assertRaises(EvaluationError) as context:
            evaluator.evaluate("1 / 0")
        self.assertIsInstance(context.exception.__cause__, ZeroDivisionError)
        with self.assertRaises(EvaluationError):
            evaluator.evaluate("1 +")
        with self.assertRaises(EvaluationError):
            evaluator.evaluate("1; 2")
        with self.assertRaises(EvaluationError):
            evaluator.evaluate("a.b = 1")


class TestExecutor(TestCase):

    def testEchoesValues(self):
        live, output, _ = session()
        execute = executor(Evaluator(), live)
        execute("name = 'btc'")
        execute("name")
        execute("   ")
        self.assertEqual(output.getvalue(), "'btc'\n")

    def testExitPrintsHint(self):
        live, output, _ = session()
        execute = executor(Evaluator(), live)
        execute("exit")
        execute("pop")
        self.assertEqual(output.getvalue(), f"{EXIT_HINT}\n{EXIT_HINT}\n")
        self.assertEqual(len(live), 1)

    def testReportsFaults(self):
        live, output, errors = session()
        executor(Evaluator(), live)("missing + 1")
        self.assertEqual(output.getvalue(), "")
        self.assertIn("NameError", errors.getvalue())
        self.assertIn("Evaluation Failed", errors.getvalue())

    def testLabel(self):
        live, _, _ = session()
        live.push(Scope("binance"))
        self.assertEqual(label(live), "mercator:binance:eval> ")


class TestEvalCommand(TestCase):

    def testOneShotEvaluation(self):
        live, output, _ = session()
        live.current.add_command(eval_command(variables={"size": 6}))
        live.execute("eval size * 7")
        self.assertEqual(output.getvalue(), "42\n")

    def testDefinition(self):
        command = eval_command()
        self.assertEqual(command.use, "eval")
        self.assertTrue(command.eager)
        self.assertTrue(command.builtin)
        with self.assertRaises(TypeError):
            eval_command(colors={"prefix": "ansired"})


if __name__ == "__main__":
    unittest.main()
