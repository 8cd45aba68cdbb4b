#!/usr/bin/env python3
"""EmergencyClassifier CLI — classify one incident photo or vision payload.

Usage:
    python scripts/classify_image.py tests/fixtures/sample_azure_v4_response.json
    python scripts/classify_image.py photo.jpg --report-id rpt-0042
    python scripts/classify_image.py --url https://example.com/photo.jpg --output result.json
    python scripts/classify_image.py payload.json --rules rules.json --log-level DEBUG
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure project root is on sys.path for consistent import resolution
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from config.defaults import DEFAULT_LOG_LEVEL  # noqa: E402
from config.settings import ClassifierConfig  # noqa: E402

_JSON_SUFFIXES = (".json",)


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the argparse argument parser."""
    parser = argparse.ArgumentParser(
        prog="classify_image",
        description="EmergencyClassifier — Rule-based emergency classification for incident photos",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # ── Input ────────────────────────────────────────────────────────────────────
    parser.add_argument(
        "input",
        type=str,
        nargs="?",
        default=None,
        help="Vision payload (.json) or image file to send to Azure AI Vision",
    )
    parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="Public image URL to analyze instead of a local file",
    )
    parser.add_argument(
        "--report-id",
        type=str,
        default=None,
        help="Report identifier used in log lines",
    )

    # ── Adaptive rules ───────────────────────────────────────────────────────────
    parser.add_argument(
        "--rules",
        type=str,
        default=None,
        help="Local JSON file of adaptive rules (overrides the remote rule store)",
    )
    parser.add_argument(
        "--no-adaptive-rules",
        action="store_true",
        default=False,
        help="Classify without loading any adaptive rules",
    )

    # ── Output and logging ───────────────────────────────────────────────────────
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the classification result JSON to this path",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity level",
    )

    return parser


def args_to_config(args: argparse.Namespace) -> ClassifierConfig:
    """Convert parsed CLI arguments to a ClassifierConfig instance.

    Args:
        args: Parsed argparse Namespace.

    Returns:
        ClassifierConfig with CLI flags applied over environment values.
    """
    config = ClassifierConfig(log_level=args.log_level)
    if args.rules:
        config.adaptive_rules_path = args.rules
    if args.no_adaptive_rules:
        config.enable_adaptive_rules = False
    return config


def main() -> None:
    """CLI entrypoint — parse arguments, build config, classify."""
    parser = build_arg_parser()
    args = parser.parse_args()
    if not args.input and not args.url:
        parser.error("an input file or --url is required")

    from emergencyclassifier.io.persistence import load_json, save_json, to_json
    from emergencyclassifier.pipeline import EmergencyClassifier
    from emergencyclassifier.utils.logging_utils import configure_logging, get_logger

    config = args_to_config(args)
    configure_logging(config)
    logger = get_logger("cli")

    logger.info(
        "EmergencyClassifier starting — input: %s | adaptive rules: %s",
        args.url or args.input,
        config.enable_adaptive_rules,
    )

    try:
        with EmergencyClassifier(config) as classifier:
            if args.url:
                result = classifier.classify_image_url(args.url, report_id=args.report_id)
            else:
                path = Path(args.input)
                if path.suffix.lower() in _JSON_SUFFIXES:
                    payload = load_json(path)
                    if payload is None:
                        logger.error("Could not read vision payload from %s", path)
                        sys.exit(1)
                    result = classifier.classify(payload, report_id=args.report_id)
                else:
                    result = classifier.classify_image(path.read_bytes(), report_id=args.report_id)

        if result is None:
            logger.error("Vision analysis failed — no classification produced")
            sys.exit(1)

        print(to_json(result))
        if args.output:
            save_json(result, args.output)
            logger.info("Result written to %s", args.output)

    except KeyboardInterrupt:
        logger.info("Classification interrupted by user")
        sys.exit(0)
    except Exception as exc:
        logger.exception("Classification failed with unhandled exception: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
