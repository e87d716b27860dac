"""
Fault rendering and taxonomy tests.

Conventions
- Rendering goes to in-memory rich consoles with colour disabled.
"""

from __future__ import annotations

import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console

from nautilus import (
    FaultCode,
    ShellFault,
    TerminationRequested,
    TokenizationWarning,
    UnknownCommandError,
    ValidationError,
    trigger,
)


def render(fault, **options):
    output = io.StringIO()
    trigger(fault, console=Console(file=output, width=200), prog="mercator", **options)
    return output.getvalue()


class TestRendering(TestCase):

    def testHeaderMessageAndHint(self):
        text = render(UnknownCommandError("unknown command 'nope' in scope 'mercator'"))
        lines = text.splitlines()
        self.assertEqual(lines[0], f"[ mercator — {int(FaultCode.UNKNOWN_COMMAND)} | Unknown Command ]")
        self.assertEqual(lines[1], "unknown command 'nope' in scope 'mercator'")
        self.assertIn("type 'help' to list the commands of this scope", lines[2])

    def testOverrides(self):
        text = render(ValidationError("bad"), title="custom title", hint=None)
        self.assertIn("Custom Title", text)
        self.assertNotIn("→", text)

    def testWarnings(self):
        text = render(TokenizationWarning("line dropped: No closing quotation"))
        self.assertIn("Unbalanced Quotes", text)
        self.assertIn(str(int(FaultCode.UNBALANCED_QUOTES)), text)

    def testFancyPanel(self):
        text = render(ValidationError("bad"), fancy=True)
        self.assertIn("Invalid Arguments", text)
        self.assertIn("bad", text)

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))


class TestFaults(TestCase):

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            ShellFault(42)

    def testReplaceKeepsCause(self):
        try:
            try:
                raise KeyError("inner")
            except KeyError as exception:
                raise ValidationError("outer") from exception
        except ValidationError as fault:
            replica = copy.replace(fault, hint="another hint")
        self.assertIsInstance(replica.__cause__, KeyError)
        self.assertEqual(replica.hint, "another hint")
        self.assertEqual(replica.code, FaultCode.INVALID_ARGUMENTS)

    def testTermination(self):
        termination = TerminationRequested(3)
        self.assertIsInstance(termination, SystemExit)
        self.assertEqual(termination.status, 3)
        self.assertEqual(termination.code, 3)


if __name__ == "__main__":
    unittest.main()
