#!/usr/bin/env python3
"""
annotate_screenshot.py - draw issue callouts on a website screenshot

Reads a screenshot and a JSON list of issues (as reported by the vision
analysis step) and writes a copy of the screenshot with up to three numbered
callout cards, each with an arrow pointing at its element.

Usage:
    python annotate_screenshot.py <input_image> <output_image> --annotations issues.json [options]

Options:
    --annotations <json>   Issue list: a JSON array, or an object with an
                           "annotations" key
    --style <style_file>   Load layout/style overrides from JSON
    --scale <factor>       Scale factor for target coordinates (e.g., 2.0
                           when boxes are CSS pixels on a Retina capture)
    --svg <path>           Also write the overlay as SVG
    --verbose              Log placement decisions

Annotation format:
    {"targetRect": {"x": 860, "y": 490, "width": 200, "height": 100},
     "label": "No CTA Button", "severity": "critical",
     "description": "...", "conversionImpact": "Up to 30% fewer sign-ups"}

Dependencies:
    - PIL/Pillow
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from leadshot.annotation import (
    AnnotationConfig,
    Canvas,
    annotate_screenshot,
    build_scene,
    load_config,
    scene_to_svg,
)


def load_annotations(path: Path) -> List[Dict[str, Any]]:
    """Read the issue list from a JSON file.

    Accepts either a bare list or an object with an 'annotations' key.

    Raises:
        ValueError: If the file does not hold a list of annotations.
    """
    with open(path) as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('annotations', [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of annotations in {path}")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Draw issue callouts on a screenshot'
    )
    parser.add_argument('input', type=Path, help='Input image path')
    parser.add_argument('output', type=Path, help='Output image path')
    parser.add_argument(
        '--annotations',
        type=Path,
        required=True,
        help='JSON file with the issue list'
    )
    parser.add_argument('--style', type=Path, help='Custom style JSON file')
    parser.add_argument(
        '--scale',
        type=float,
        default=1.0,
        help='Scale factor for target coordinates (devicePixelRatio). Common values: 1.0 (standard), 2.0 (Retina/HiDPI)'
    )
    parser.add_argument('--svg', type=Path, help='Also write the overlay as SVG')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log placement decisions')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if not args.input.exists():
        print(f"Error: Input image not found: {args.input}", file=sys.stderr)
        return 2

    if not args.annotations.exists():
        print(f"Error: Annotations file not found: {args.annotations}", file=sys.stderr)
        return 2

    try:
        annotations = load_annotations(args.annotations)
        config = load_config(args.style, AnnotationConfig.from_env())
        config.validate()
    except (ValueError, json.JSONDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    result = annotate_screenshot(
        args.input.read_bytes(),
        annotations,
        config=config,
        scale_factor=args.scale,
    )

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_bytes(result.buffer)

    if args.svg:
        scene = build_scene(result.placements, config)
        svg = scene_to_svg(scene, Canvas.from_size((result.width, result.height)), config)
        args.svg.parent.mkdir(parents=True, exist_ok=True)
        args.svg.write_text(svg, encoding='utf-8')

    print(f"Annotated image saved: {args.output} ({result.annotation_count} callout(s))")
    for number, label in enumerate(result.annotation_labels, start=1):
        print(f"  {number}. {label}")
    if result.degraded_count:
        print(f"Warning: {result.degraded_count} callout(s) used fallback placement", file=sys.stderr)
    return 0


if __name__ == '__main__':
    sys.exit(main())
