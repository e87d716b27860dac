"""
Suggestion engine tests (command mode, argument mode, flag values, failures).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from nautilus import SUGGESTIONS, Command, Flag, Scope, Session, Suggestion, suggest


def shell():
    calls = []

    def provider(session, args):
        calls.append(list(args))
        return ["binance", "kraken"]

    root = Scope("root")
    root.add_command(Command(
        "status",
        lambda *_: None,
        aliases=["st"],
        short="Show status",
        suggestions=provider,
        flags=[
            Flag("verbose", "v", bool, usage="talk more"),
            Flag("mode", usage="pricing mode", annotations={SUGGESTIONS: ["fast", "safe"]}),
            Flag("secret", usage="do not show", hidden=True),
        ],
    ))
    root.add_command(Command("eager", lambda *_: None, short="Eager one", suggestions=provider, eager=True))
    live = Session("> ", console=Console(file=io.StringIO()), errors=Console(file=io.StringIO()))
    live.push(root)
    return live, calls


class TestCommandMode(TestCase):

    def testEmptyLineListsEveryKeySorted(self):
        live, _ = shell()
        suggestions = live.complete("")
        self.assertEqual([suggestion.text for suggestion in suggestions], ["eager", "help", "st", "status", "use"])
        descriptions = dict(suggestions)
        self.assertEqual(descriptions["status"], "Show status")
        self.assertEqual(descriptions["st"], "Alias for `status`. Show status")

    def testPartialNameStaysInCommandMode(self):
        live, calls = shell()
        texts = [suggestion.text for suggestion in live.complete("sta")]
        self.assertEqual(texts, ["eager", "help", "st", "status", "use"])
        self.assertEqual(calls, [])


class TestArgumentMode(TestCase):

    def testAliasSelectsArgumentMode(self):
        live, calls = shell()
        texts = [suggestion.text for suggestion in live.complete("st")]
        self.assertEqual(texts, ["binance", "kraken", "--mode", "--verbose"])
        self.assertNotIn("use", texts)
        self.assertEqual(calls, [[]])

    def testProviderSkippedWithoutWordUnlessEager(self):
        live, calls = shell()
        texts = [suggestion.text for suggestion in live.complete("status ")]
        self.assertEqual(texts, ["--mode", "--verbose"])
        self.assertEqual(calls, [])

        texts = [suggestion.text for suggestion in live.complete("eager ")]
        self.assertEqual(texts, ["binance", "kraken"])
        self.assertEqual(calls, [[]])

    def testProviderReceivesCompletedArguments(self):
        live, calls = shell()
        live.complete("status one two th")
        live.complete("eager one two ")
        self.assertEqual(calls, [["one", "two"], ["one", "two"]])

    def testHiddenFlagsAreNotSuggested(self):
        live, _ = shell()
        texts = [suggestion.text for suggestion in live.complete("status -")]
        self.assertNotIn("--secret", texts)
        self.assertNotIn("--help", texts)
        self.assertIn(Suggestion("--verbose", "talk more"), live.complete("status -"))

    def testFlagValueSuggestions(self):
        live, calls = shell()
        self.assertEqual(
            live.complete("status --mode="),
            [Suggestion("fast", "pricing mode"), Suggestion("safe", "pricing mode")],
        )
        self.assertEqual([suggestion.text for suggestion in live.complete("status --mode=f")], ["fast", "safe"])
        self.assertEqual(calls, [])

    def testFlagValueShapeWithUnknownFlag(self):
        live, _ = shell()
        self.assertEqual(live.complete("status --ghost="), [])
        self.assertEqual(live.complete("status key=value"), [])

    def testUnbalancedQuotesYieldNothing(self):
        live, _ = shell()
        self.assertEqual(live.complete('status "open'), [])

    def testFailingProviderYieldsNothing(self):
        def provider(session, args):
            return session.configuration.get("exchange")[0]

        root = Scope("root")
        root.add_command(Command("status", lambda *_: None, suggestions=provider, eager=True))
        live = Session("> ", console=Console(file=io.StringIO()), errors=Console(file=io.StringIO()))
        live.push(root)
        self.assertEqual(live.complete("status x"), [])
        self.assertEqual(live.complete("status "), [])


class TestPureFunction(TestCase):

    def testSuggestWithExplicitRegistry(self):
        live, _ = shell()
        commands = live.current.commands
        self.assertEqual(suggest(live, "", commands, "", [])[0], Suggestion("eager", "Eager one"))
        self.assertEqual(suggest(live, "x", {}, "x", []), [])


if __name__ == "__main__":
    unittest.main()
