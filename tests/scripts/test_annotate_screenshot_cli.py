"""Tests for the annotate_screenshot command-line entry point."""

import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from PIL import Image

from leadshot.scripts.annotate_screenshot import build_parser, load_annotations, main

ISSUES = [
    {
        "targetRect": {"x": 300, "y": 250, "width": 200, "height": 80},
        "label": "No CTA Button",
        "severity": "critical",
        "conversionImpact": "Up to 30% fewer sign-ups",
    },
    {
        "targetRect": {"x": 60, "y": 60, "width": 240, "height": 50},
        "label": "Headline is vague",
        "severity": "warning",
    },
]


class TestAnnotateScreenshotCli(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.input = self.tmp / "page.png"
        Image.new("RGB", (1000, 700), (240, 240, 240)).save(self.input)
        self.annotations = self.tmp / "issues.json"
        self.annotations.write_text(json.dumps(ISSUES))
        self.output = self.tmp / "out" / "annotated.png"

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, *extra):
        stdout, stderr = io.StringIO(), io.StringIO()
        argv = [str(self.input), str(self.output), "--annotations", str(self.annotations), *extra]
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_writes_annotated_image(self):
        code, out, _ = self._run()

        self.assertEqual(code, 0)
        self.assertTrue(self.output.exists())
        with Image.open(self.output) as img:
            self.assertEqual(img.size, (1000, 700))
        self.assertIn("2 callout(s)", out)
        self.assertIn("1. No CTA Button", out)
        self.assertIn("2. Headline is vague", out)

    def test_missing_input_returns_error(self):
        self.input.unlink()

        code, _, err = self._run()

        self.assertEqual(code, 2)
        self.assertIn("Input image not found", err)
        self.assertFalse(self.output.exists())

    def test_missing_annotations_file_returns_error(self):
        self.annotations.unlink()

        code, _, err = self._run()

        self.assertEqual(code, 2)
        self.assertIn("Annotations file not found", err)

    def test_rejects_non_list_annotations(self):
        self.annotations.write_text(json.dumps("not a list"))

        code, _, err = self._run()

        self.assertEqual(code, 2)
        self.assertIn("Expected a list", err)

    def test_rejects_invalid_json(self):
        self.annotations.write_text("{not json")

        code, _, _ = self._run()

        self.assertEqual(code, 2)

    def test_writes_svg_overlay(self):
        svg_path = self.tmp / "overlay.svg"

        code, _, _ = self._run("--svg", str(svg_path))

        self.assertEqual(code, 0)
        svg = svg_path.read_text(encoding="utf-8")
        self.assertTrue(svg.startswith("<svg"))
        self.assertIn("No CTA Button", svg)

    def test_style_file_overrides(self):
        style = self.tmp / "style.json"
        style.write_text(json.dumps({"max_annotations": 1}))

        code, out, _ = self._run("--style", str(style))

        self.assertEqual(code, 0)
        self.assertIn("1 callout(s)", out)
        self.assertNotIn("Headline is vague", out)

    def test_invalid_style_returns_error(self):
        style = self.tmp / "style.json"
        style.write_text(json.dumps({"ideal_arrow_length": 999}))

        code, _, err = self._run("--style", str(style))

        self.assertEqual(code, 2)
        self.assertIn("ideal_arrow_length", err)


class TestLoadAnnotations(unittest.TestCase):

    def test_accepts_wrapped_object(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "issues.json"
            path.write_text(json.dumps({"annotations": ISSUES}))

            self.assertEqual(load_annotations(path), ISSUES)

    def test_parser_defaults(self):
        args = build_parser().parse_args(["in.png", "out.png", "--annotations", "a.json"])

        self.assertEqual(args.scale, 1.0)
        self.assertIsNone(args.svg)
        self.assertFalse(args.verbose)


if __name__ == "__main__":
    unittest.main()
