"""
Run a single credibility analysis from the command line and print the result as JSON
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from newscheck.config import get_settings  # noqa: E402
from newscheck.engine import AnalysisEngine  # noqa: E402


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Score the credibility of a news text or URL")
    parser.add_argument("input", help="Article text or an http(s) URL")
    parser.add_argument("--url", default=None, help="Optional source URL for the given text")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser.parse_args(argv)


async def run(args) -> int:
    engine = AnalysisEngine()
    result = await engine.analyze(args.input, url=args.url)
    print(result.model_dump_json(indent=2))
    return 1 if result.failed else 0


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
