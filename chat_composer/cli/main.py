"""Entry point for the ``chat-composer`` command."""

import argparse
import asyncio
import logging
from pathlib import Path

from chat_composer.catalog import CatalogStorage
from chat_composer.cli.interactive import run_interactive
from chat_composer.config import get_config


logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Run the terminal composer."""
    parser = argparse.ArgumentParser(description='Compose chat messages with mention, channel and emoji suggestions')
    parser.add_argument(
        '--catalog',
        type=Path,
        default=None,
        help='Catalog JSON with members, channels and custom emoji (default: ~/.chat-composer/catalog.json)',
    )
    parser.add_argument(
        '--edit',
        metavar='MARKUP',
        default=None,
        help='Edit an existing message given as markup instead of composing a new one',
    )
    parser.add_argument(
        '--author',
        metavar='MEMBER_ID',
        default=None,
        help='Catalog member shown as the author of sent messages',
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    args = parser.parse_args(argv)

    config = get_config()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level.upper(),
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    storage = CatalogStorage(args.catalog or config.catalog_path)
    catalog = storage.load()
    logger.info(
        f'Loaded catalog from {storage.path}: {len(catalog.member_list)} members, '
        f'{len(catalog.channel_list)} channels, {len(catalog.emoji_list)} custom emoji'
    )

    asyncio.run(run_interactive(catalog, config=config, edit_markup=args.edit, author_id=args.author))


if __name__ == '__main__':
    main()
