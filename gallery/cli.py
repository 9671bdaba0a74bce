"""
Command Line Interface for gallery maintenance.
"""

import argparse
import logging
import os
from typing import List, Optional

from .config import GalleryConfig
from .errors import GalleryError
from .maintenance import OrphanScanner, ThumbnailRebuilder
from .reporter import Reporter
from .services import GalleryServices


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('gallery')


def get_config(args: argparse.Namespace) -> GalleryConfig:
    """Get configuration from environment and CLI overrides."""
    config = GalleryConfig.from_env()

    if getattr(args, 'base_dir', None):
        config = GalleryConfig(
            base_dir=args.base_dir,
            max_file_size=config.max_file_size,
            allowed_types=config.allowed_types,
            thumbnail_size=config.thumbnail_size,
            thumbnail_quality=config.thumbnail_quality,
            archive_chunk_size=config.archive_chunk_size,
            archive_compression=config.archive_compression,
        )
    if getattr(args, 'registry_file', None):
        config.registry_file = args.registry_file

    return config


def get_services(args: argparse.Namespace, logger: logging.Logger) -> GalleryServices:
    config = get_config(args)
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        raise ValueError("Gallery configuration invalid")
    return GalleryServices.from_config(config, logger=logger)


def add_storage_arguments(parser: argparse.ArgumentParser) -> None:
    """Add storage configuration arguments to a parser."""
    group = parser.add_argument_group('Storage')
    group.add_argument('--base-dir', metavar='PATH',
                       help='Override GALLERY_BASE_DIR (albums/, thumbnails/, albums.json)')
    group.add_argument('--registry-file', metavar='PATH',
                       help='Override GALLERY_REGISTRY_FILE')


def cmd_list(args: argparse.Namespace) -> int:
    """Execute list command."""
    logger = setup_logging(args.verbose)

    try:
        services = get_services(args, logger)
        albums = services.registry.list_all()
    except (ValueError, GalleryError) as e:
        logger.error(f"Cannot read registry: {e}")
        return 1

    reporter = Reporter()
    if args.type == 'detailed':
        reporter.report_detailed(albums)
    else:
        reporter.report_summary(albums)
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Execute export command."""
    logger = setup_logging(args.verbose)

    try:
        services = get_services(args, logger)
    except ValueError:
        return 1

    logger.info(f"Exporting {len(args.album)} album(s) to {args.output}")
    try:
        with open(args.output, 'wb') as out:
            written = services.streamer.stream(args.album, out.write)
    except GalleryError as e:
        logger.error(f"Export failed: {e.reason}: {e.message}")
        _remove_partial(args.output)
        return 1
    except Exception as e:
        logger.exception(f"Export failed: {e}")
        _remove_partial(args.output)
        return 1

    logger.info(f"Wrote {written:,} bytes to {args.output}")
    return 0


def _remove_partial(path: str) -> None:
    if os.path.isfile(path):
        os.remove(path)


def cmd_thumbnails(args: argparse.Namespace) -> int:
    """Execute thumbnails command."""
    logger = setup_logging(args.verbose)

    try:
        services = get_services(args, logger)
        rebuilder = ThumbnailRebuilder(
            services.registry,
            services.store,
            services.thumbnails,
            dry_run=args.dry_run,
            logger=logger,
        )
        stats = rebuilder.rebuild(args.album)
    except GalleryError as e:
        logger.error(f"{e.reason}: {e.message}")
        return 1
    except Exception as e:
        logger.exception(f"Thumbnail rebuild failed: {e}")
        return 1

    return 1 if stats.errors else 0


def cmd_orphans(args: argparse.Namespace) -> int:
    """Execute orphans command."""
    logger = setup_logging(args.verbose)

    try:
        services = get_services(args, logger)
        scanner = OrphanScanner(services.registry, services.store, logger)
        orphans = list(scanner.scan(args.album))
    except Exception as e:
        logger.exception(f"Orphan scan failed: {e}")
        return 1

    Reporter().report_orphans(orphans)
    if args.delete and orphans:
        scanner.delete(orphans)
        logger.info(f"Deleted {len(orphans)} orphaned file(s)")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='gallery',
        description='Album storage maintenance',
    )
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # List command
    list_parser = subparsers.add_parser('list', help='Summarize albums in the registry')
    list_parser.add_argument('-t', '--type', choices=['summary', 'detailed'],
                             default='summary', help='Report type')
    list_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(list_parser)

    # Export command
    export_parser = subparsers.add_parser('export', help='Write albums to a zip file')
    export_parser.add_argument('-a', '--album', action='append', required=True,
                               help='Album id(s) to export')
    export_parser.add_argument('-o', '--output', required=True, help='Output zip file')
    export_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(export_parser)

    # Thumbnails command
    thumbs_parser = subparsers.add_parser('thumbnails', help='Rebuild missing thumbnails')
    thumbs_parser.add_argument('-a', '--album', action='append', help='Album id(s) to process')
    thumbs_parser.add_argument('-n', '--dry-run', action='store_true', help='Show what would be done')
    thumbs_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(thumbs_parser)

    # Orphans command
    orphans_parser = subparsers.add_parser('orphans', help='Find stored files not in the registry')
    orphans_parser.add_argument('-a', '--album', action='append', help='Album id(s) to scan')
    orphans_parser.add_argument('--delete', action='store_true', help='Delete the orphaned files')
    orphans_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(orphans_parser)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'list':
        return cmd_list(parsed_args)
    elif parsed_args.command == 'export':
        return cmd_export(parsed_args)
    elif parsed_args.command == 'thumbnails':
        return cmd_thumbnails(parsed_args)
    elif parsed_args.command == 'orphans':
        return cmd_orphans(parsed_args)

    return 1
