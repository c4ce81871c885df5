"""Command-line entry point: transform a statement trace into UPPAAL XML."""

import argparse
import logging
import sys
from typing import List, Optional

from trace2nta.config import LOG_LEVELS, TransformConfig, load_config
from trace2nta.errors import ConfigError
from trace2nta.pipeline import transform_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trace2nta",
        description="Generate a UPPAAL timed-automaton model from a statement trace",
    )
    parser.add_argument("trace_file", help="Input trace file (YAML or JSON)")
    parser.add_argument("-o", "--output", default=None,
                        help="Output XML file (default: next to the trace)")
    parser.add_argument("-c", "--config", default=None,
                        help="YAML configuration file")
    parser.add_argument("--template-name", default=None,
                        help="Template name (default: trace name)")
    parser.add_argument("--dump-model", action="store_true", default=None,
                        help="Also write the model as YAML")
    parser.add_argument("--log-level", default=None, type=str.upper, choices=LOG_LEVELS,
                        help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else TransformConfig()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config = config.merged(
        template_name=args.template_name,
        write_model_dump=args.dump_model,
        log_level=args.log_level,
    )
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    result = transform_file(args.trace_file, args.output, config=config)
    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1
    print(result.output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
