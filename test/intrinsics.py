"""
Built-in command tests (use, help, exit/pop, quit, env, get, set).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from nautilus import Configuration, Outcome, Scope, Session, TerminationRequested, install


def tree():
    root = install(Scope("mercator"))
    binance = root.scope("binance", "Utilities for accessing the Binance crypto exchange")
    binance.scope("account", "Access account info")
    output, errors = io.StringIO(), io.StringIO()
    live = Session(
        "> ",
        Configuration({"exchange": "binance", "depth": 10}),
        console=Console(file=output, width=200),
        errors=Console(file=errors, width=200),
    )
    live.push(root)
    return live, output, errors


class TestNavigation(TestCase):

    def testUsePushesChild(self):
        live, _, _ = tree()
        self.assertIs(live.execute("use binance"), Outcome.OK)
        self.assertEqual(live.prompt(), "mercator:binance> ")
        live.execute("use account")
        self.assertEqual(live.prompt(), "mercator:binance:account> ")

    def testUseFailures(self):
        live, _, errors = tree()
        live.execute("use")
        live.execute("use binance extra")
        live.execute("use nowhere")
        text = errors.getvalue()
        self.assertIn("use requires an argument", text)
        self.assertIn("use requires only 1 argument", text)
        self.assertIn("unknown scope 'nowhere'", text)
        self.assertEqual(len(live), 1)

    def testUseOnlySeesOwnChildren(self):
        live, _, errors = tree()
        live.execute("use account")
        self.assertEqual(len(live), 1)
        self.assertIn("unknown scope 'account'", errors.getvalue())

    def testExitAndPopLeaveChildScopes(self):
        live, _, _ = tree()
        live.execute("use binance")
        live.execute("use account")
        live.execute("pop")
        self.assertEqual(live.prompt(), "mercator:binance> ")
        live.execute("exit")
        self.assertEqual(live.prompt(), "mercator> ")

    def testExitAtRootTerminates(self):
        live, _, _ = tree()
        with self.assertRaises(TerminationRequested):
            live.execute("exit")

    def testQuitTerminatesFromAnyDepth(self):
        live, _, _ = tree()
        live.execute("use binance")
        live.execute("use account")
        with self.assertRaises(TerminationRequested):
            live.execute("quit")

    def testRootBuiltinsPropagate(self):
        live, _, _ = tree()
        root = live.current
        account = root.child("binance").child("account")
        for name in ("exit", "pop", "quit", "env", "get", "set"):
            self.assertIs(account.lookup(name), root.lookup(name))
        self.assertIsNot(account.lookup("use"), root.lookup("use"))


class TestHelp(TestCase):

    def testHelpPrintsScopeUsage(self):
        live, output, _ = tree()
        live.execute("help")
        text = output.getvalue()
        self.assertIn("Sub-scopes:", text)
        self.assertIn("binance    Utilities for accessing the Binance crypto exchange", text)
        self.assertIn("Alias for 'exit' command", text)

    def testHelpForCommandAndChild(self):
        live, output, _ = tree()
        live.execute("help get")
        self.assertIn("Usage:\n  get [flags] [args...]", output.getvalue())
        live.execute("help binance")
        self.assertIn("account    Access account info", output.getvalue())

    def testHelpFailures(self):
        live, _, errors = tree()
        live.execute("help nothing")
        live.execute("help a b")
        text = errors.getvalue()
        self.assertIn("unknown argument 'nothing'", text)
        self.assertIn("requires no more than 1 args", text)

    def testHelpSuggestsCommandsAndScopes(self):
        live, _, _ = tree()
        texts = [suggestion.text for suggestion in live.complete("help ")]
        self.assertIn("binance", texts)
        self.assertIn("quit", texts)


class TestConfigurationCommands(TestCase):

    def testEnvListsSortedKeys(self):
        live, output, _ = tree()
        live.execute("set alpha 1")
        live.execute("env")
        self.assertEqual(output.getvalue().splitlines(), [
            "alpha      1",
            "depth      10",
            "exchange   binance",
        ])

    def testGetAndSet(self):
        live, output, errors = tree()
        live.execute("set exchange kraken")
        live.execute("get exchange")
        self.assertEqual(output.getvalue(), "exchange   kraken\n")
        live.execute("set only-key")
        live.execute("get")
        self.assertIn("requires 2 args", errors.getvalue())
        self.assertIn("requires 1 args", errors.getvalue())

    def testKeySuggestions(self):
        live, _, _ = tree()
        self.assertEqual([suggestion.text for suggestion in live.complete("get ")], ["depth", "exchange"])
        self.assertEqual([suggestion.text for suggestion in live.complete("set ex")], ["depth", "exchange"])
        self.assertEqual(live.complete("set exchange "), [])


if __name__ == "__main__":
    unittest.main()
