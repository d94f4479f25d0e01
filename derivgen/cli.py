"""
Command Line Interface for derivative generation.
"""

import argparse
import logging
from typing import List, Optional

from .config import PipelineConfig
from .errors import ConfigurationError, InvalidInputDirectory
from .pipeline import Pipeline
from .reporter import Reporter


# Kept at 0 for configuration and input errors so existing automation
# that calls this tool keeps working.
EXIT_USAGE = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

MISSING_DIRS_MESSAGE = "Error: must provide input and output directory"


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('sh').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('derivgen')


def get_config(args: argparse.Namespace) -> PipelineConfig:
    """Get configuration from environment and CLI overrides."""
    config = PipelineConfig.from_env()

    if args.input:
        config.input_dir = args.input
    if args.output:
        config.output_dir = args.output
    if args.main_size is not None:
        config.main_size = args.main_size
    if args.thumb_size is not None:
        config.thumb_size = args.thumb_size
    if args.tile_size is not None:
        config.tile_size = args.tile_size
    if args.tile_format:
        config.tile_format = args.tile_format
    if args.tile_timeout is not None:
        config.tile_timeout = args.tile_timeout
    if args.vips:
        config.vips_command = args.vips
    if args.quality is not None:
        config.quality = args.quality
    if args.max_catalog_id is not None:
        config.max_catalog_id = args.max_catalog_id or None
    if args.workers is not None:
        config.workers = args.workers

    config.limit = args.limit
    config.dry_run = args.dry_run

    return config


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='derivgen',
        description='Generate main images, thumbnails, deep-zoom tiles and a '
                    'dimension manifest from catalog photographs',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Source files are named {catalogId}__{pose}.ext, e.g. 7__main.tif, 7__top.tif.

Output layout:
  OUTPUT/main/{catalogId}.jpg      from the 'main' pose
  OUTPUT/thumbs/{catalogId}.jpg    from the 'top' pose
  OUTPUT/tiles/{catalogId}/{pose}/ one pyramid per pose
  OUTPUT/manifest.yml

Settings can also come from DERIVGEN_* environment variables.
"""
    )

    parser.add_argument('-i', '--input', metavar='DIR', help='Directory of source images')
    parser.add_argument('-o', '--output', metavar='DIR', help='Directory for generated assets')

    sizes = parser.add_argument_group('Derivatives')
    sizes.add_argument('--main-size', type=int, metavar='PX',
                       help='Longest edge of main images (default: 2000)')
    sizes.add_argument('--thumb-size', type=int, metavar='PX',
                       help='Longest edge of thumbnails (default: 500)')
    sizes.add_argument('--quality', type=int, metavar='Q',
                       help='JPEG quality (default: 85)')

    tiles = parser.add_argument_group('Tiles')
    tiles.add_argument('--tile-size', type=int, metavar='PX',
                       help='Tile edge length (default: 256)')
    tiles.add_argument('--tile-format', choices=PipelineConfig.TILE_FORMATS,
                       help='Tile format (default: jpg)')
    tiles.add_argument('--tile-timeout', type=float, metavar='SECONDS',
                       help='Kill a tiling process after this long (default: no limit)')
    tiles.add_argument('--vips', metavar='PATH', help='vips executable (default: vips)')

    run = parser.add_argument_group('Run')
    run.add_argument('--max-catalog-id', type=int, metavar='N',
                     help='Ignore catalog ids above N, 0 for no limit (default: 631)')
    run.add_argument('-w', '--workers', type=int, metavar='N',
                     help='Catalog ids processed in parallel per stage (default: 1)')
    run.add_argument('--limit', type=int, metavar='N',
                     help='Limit to the first N catalog ids (for testing)')
    run.add_argument('-n', '--dry-run', action='store_true', help='Show what would be done')
    run.add_argument('-q', '--quiet', action='store_true', help='Suppress summary output')
    run.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not (parsed_args.input or '').strip() or not (parsed_args.output or '').strip():
        print(MISSING_DIRS_MESSAGE)
        parser.print_usage()
        return EXIT_USAGE

    logger = setup_logging(parsed_args.verbose)
    try:
        config = get_config(parsed_args)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return EXIT_USAGE

    logger.info(f"Input: {config.input_dir}")
    logger.info(f"Output: {config.output_dir}")
    if config.dry_run:
        logger.info("Dry run: no derivatives will be written")
    if config.limit:
        logger.info(f"Test mode: limiting to {config.limit} catalog ids")

    try:
        pipeline = Pipeline(config, logger=logger)
        result = pipeline.run()
    except InvalidInputDirectory as e:
        print(f"Error: invalid directory: {e.path}")
        return EXIT_USAGE
    except ConfigurationError as e:
        print(f"Error: {e}")
        return EXIT_USAGE
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.exception(f"Run failed: {e}")
        return EXIT_FAILURE

    if not parsed_args.quiet:
        print()
        Reporter().report_summary(result)

    return 0
