import argparse
import pathlib
import sys
from typing import List, Optional

import jinja2
import structlog

from .config import OutputType, load_config
from .errors import PackerError
from .log import configure_logging
from .pipeline import pack_atlas

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sprite-atlas-packer",
        description="Pack PNG sprites into a power-of-two texture atlas plus metadata.",
    )
    parser.add_argument("config", type=pathlib.Path, help="Packer config file (.json, .yaml or .yml)")
    parser.add_argument(
        "--output-type",
        choices=[member.value for member in OutputType],
        help="Override the output_type from the config",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
        if args.output_type is not None:
            config = config.with_output_type(OutputType(args.output_type))
        result = pack_atlas(config)
    except (PackerError, OSError, jinja2.TemplateError) as exc:
        logger.error("Atlas packing failed", error=str(exc))
        raise SystemExit(str(exc)) from exc

    print(f"Packed {len(result.metadata)} sprites into {result.image_path} "
          f"({result.image.width}x{result.image.height}), metadata saved to {result.metadata_path}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
