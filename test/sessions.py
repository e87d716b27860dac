"""
Session tests (scope stack, prompt label, dispatch loop step).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from nautilus import (
    Command,
    ConfigurationError,
    Configuration,
    Outcome,
    Scope,
    Session,
    TerminationRequested,
)


def session(*scopes, **options):
    output, errors = io.StringIO(), io.StringIO()
    live = Session(
        "> ",
        console=Console(file=output, width=200),
        errors=Console(file=errors, width=200),
        **options,
    )
    for scope in scopes:
        live.push(scope)
    return live, output, errors


class TestSessionStack(TestCase):

    def testPopAtRootRequestsTermination(self):
        live, _, _ = session(Scope("root"))
        with self.assertRaises(TerminationRequested) as context:
            live.pop()
        self.assertIsInstance(context.exception, SystemExit)
        self.assertEqual(context.exception.status, 0)
        self.assertEqual(len(live), 1)

    def testPopRemovesExactlyTheTop(self):
        root, child, grandchild = Scope("root"), Scope("child"), Scope("grandchild")
        live, _, _ = session(root, child, grandchild)
        self.assertIs(live.pop(), grandchild)
        self.assertEqual(live.scopes, (root, child))
        self.assertIs(live.current, child)

    def testPushRunsInitializeHook(self):
        seen = []

        def initialize(active):
            seen.append(active)
            active.configuration.set("exchange", "binance")

        live, _, _ = session(Scope("root"))
        live.push(Scope("binance", initialize=initialize))
        self.assertEqual(seen, [live])
        self.assertEqual(live.configuration.get("exchange"), "binance")
        self.assertEqual(live.current.name, "binance")

    def testInitializeHookCannotMoveTheStack(self):
        live, _, _ = session(Scope("root"))
        other = Scope("other")
        with self.assertRaises(ConfigurationError):
            live.push(Scope("bad", initialize=lambda active: active.push(other)))
        with self.assertRaises(ConfigurationError):
            live.push(Scope("worse", initialize=lambda active: active.pop()))
        self.assertEqual(len(live), 1)

    def testPromptReflectsStack(self):
        root = Scope("mercator")
        binance = root.scope("binance")
        account = binance.scope("account")
        live, _, _ = session(root)
        self.assertEqual(live.prompt(), "mercator> ")
        live.push(binance)
        live.push(account)
        self.assertEqual(live.prompt(), "mercator:binance:account> ")
        live.pop()
        self.assertEqual(live.prompt(), "mercator:binance> ")

    def testCustomSeparator(self):
        live, _, _ = session(Scope("a"), Scope("b"), separator="/")
        self.assertEqual(live.prompt(), "a/b> ")


class TestSessionDispatch(TestCase):

    def testExecuteDispatchesToCurrentScope(self):
        calls = []
        root = Scope("root")
        root.add_command(Command("echo", lambda active, command, args: calls.append(args)))
        live, _, _ = session(root)
        self.assertIs(live.execute('echo "hello world" x'), Outcome.OK)
        self.assertEqual(calls, [["hello world", "x"]])

    def testEmptyLineIsIgnored(self):
        live, output, errors = session(Scope("root"))
        self.assertIsNone(live.execute("   "))
        self.assertEqual(output.getvalue(), "")
        self.assertEqual(errors.getvalue(), "")

    def testUnbalancedQuotesAreDropped(self):
        calls = []
        root = Scope("root")
        root.add_command(Command("echo", lambda active, command, args: calls.append(args)))
        live, _, errors = session(root)
        self.assertIsNone(live.execute('echo "open'))
        self.assertEqual(calls, [])
        self.assertIn("Unbalanced Quotes", errors.getvalue())

    def testFaultsAreRenderedAndSwallowed(self):
        live, _, errors = session(Scope("root"))
        self.assertIsNone(live.execute("nope"))
        self.assertIn("unknown command 'nope'", errors.getvalue())

    def testDelegatedFailuresAreRendered(self):
        def run(active, command, args):
            raise KeyError("missing")

        root = Scope("root")
        root.add_command(Command("boom", run))
        live, _, errors = session(root)
        self.assertIsNone(live.execute("boom"))
        self.assertIn("'boom' failed", errors.getvalue())

    def testTerminationEscapesTheDispatch(self):
        def run(active, command, args):
            raise TerminationRequested(3)

        root = Scope("root")
        root.add_command(Command("halt", run))
        live, _, _ = session(root)
        with self.assertRaises(TerminationRequested) as context:
            live.execute("halt")
        self.assertEqual(context.exception.status, 3)

    def testHelpOutputGoesToConsole(self):
        root = Scope("root", "Root scope")
        live, output, _ = session(root)
        self.assertIs(live.execute("help"), Outcome.OK)
        self.assertIn("Built-in Commands:", output.getvalue())

    def testDefaultConfigurationIsCreated(self):
        live, _, _ = session()
        self.assertIsInstance(live.configuration, Configuration)
        self.assertIsNone(live.current)
        self.assertEqual(live.complete("he"), [])

    def testExecuteWithoutRootIsAProgrammingError(self):
        live, _, _ = session()
        with self.assertRaises(RuntimeError):
            live.execute("help")

    def testEchoPrintsVerbatim(self):
        output = io.StringIO()
        live = Session(console=Console(file=output, width=20), errors=Console(file=io.StringIO()))
        line = "note   :smile: [bold]" + "x" * 40
        live.echo(line)
        self.assertEqual(output.getvalue(), line + "\n")


if __name__ == "__main__":
    unittest.main()
