#!/usr/bin/env python3
"""
CLI tool for the parts-catalogue engine.

Usage:
    epc-catalog check-csv parts.csv
    epc-catalog options master_category --search truck
    epc-catalog options category --parent 12
    epc-catalog create-document --name "Cabin assembly" --csv parts.csv \\
        --master 1 --category 4 --type 9
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from colorama import Fore, Style, init as colorama_init

from .backends.http import HttpCatalogBackend
from .config import Config
from .documents.builder import CatalogAggregateBuilder
from .errors import CatalogError, ValidationError
from .ingest.csv_pipeline import CsvIngestionPipeline
from .notifications import Notice, NoticeLevel, Notifier
from .options.mapping import OptionKind
from .options.types import Option
from .selectors.graph import FLOW_LEVELS, HierarchyFlow


NOTICE_COLORS = {
    NoticeLevel.SUCCESS: Fore.GREEN,
    NoticeLevel.INFO: Fore.CYAN,
    NoticeLevel.ERROR: Fore.RED,
}


def colorize(text: str, color: str) -> str:
    return f"{color}{text}{Style.RESET_ALL}"


def print_notice(notice: Notice) -> None:
    stream = sys.stderr if notice.level == NoticeLevel.ERROR else sys.stdout
    print(colorize(notice.message, NOTICE_COLORS[notice.level]), file=stream)


def print_errors(errors: dict[str, str]) -> None:
    for key, message in errors.items():
        print(f"  {colorize(key + ':', Fore.YELLOW)} {message}", file=sys.stderr)


def _load_config(args) -> Config:
    config = Config.from_yaml(args.config) if args.config else Config()
    if args.base_url:
        config.service.base_url = args.base_url
    if args.token:
        config.service.api_token = args.token
    return config


def cmd_check_csv(args, config: Config) -> int:
    """Validate a CSV file without sending anything."""
    items = CsvIngestionPipeline(config.csv).validate(args.file)

    print(colorize(f"\n{len(items)} part items", Style.BRIGHT))
    for index, item in enumerate(items, start=1):
        print(
            f"  {colorize(str(index).rjust(3), Style.DIM)} "
            f"{colorize(item.part_number, Fore.YELLOW)} x{item.quantity}  "
            f"{item.name_en} / {item.name_cn}  {colorize('-> ' + item.target_id, Fore.CYAN)}"
        )
    return 0


async def cmd_options(args, config: Config) -> int:
    """List one page of options of a kind."""
    kind = OptionKind(args.kind)
    async with HttpCatalogBackend(config.service) as backend:
        page = await backend.list_options(
            kind,
            args.page,
            args.page_size or config.selectors.page_size,
            search=args.search,
            parent_id=args.parent,
        )

    print(colorize(f"\n{kind.value} (page {args.page}, {page.total} total)", Style.BRIGHT))
    for option in page.items:
        print(f"  {colorize(option.id.rjust(6), Fore.CYAN)}  {option.label}")
    if page.has_more:
        print(colorize("  ... more pages available", Style.DIM))
    return 0


async def cmd_create_document(args, config: Config) -> int:
    """Build a document from a CSV file and submit it."""
    legacy = args.part_type is not None
    flow = HierarchyFlow.LEGACY if legacy else HierarchyFlow.GENERIC
    ids = [args.part_type, args.part, args.subtype] if legacy else [args.master, args.category, args.type]

    notifier = Notifier()
    notifier.add_consumer(print_notice)

    async with HttpCatalogBackend(config.service) as backend:
        builder = CatalogAggregateBuilder(backend, flow=flow, config=config, notifier=notifier)
        builder.set_header_field("name", args.name)
        for level, option_id in zip(FLOW_LEVELS[flow], ids):
            if not option_id:
                break
            builder.select_hierarchy_level(level, Option(id=option_id, label=option_id, kind=args.part_type))
        if args.image:
            builder.set_image(args.image)
        builder.handle_csv_upload(args.csv)

        try:
            await builder.submit()
        finally:
            builder.graph.close()

    if builder.draft.id:
        print(colorize("Document id:", Style.BRIGHT), builder.draft.id)
    return 0


def main(argv: list[str] | None = None) -> int:
    colorama_init()

    parser = argparse.ArgumentParser(
        description="CLI tool for the parts-catalogue engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--base-url", help="Base URL of the catalogue service (default: EPC_SERVICE_URL)")
    parser.add_argument("--token", help="API token (default: EPC_API_TOKEN)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # check-csv command
    check_parser = subparsers.add_parser("check-csv", help="Validate a part-item CSV file")
    check_parser.add_argument("file", help="CSV file")

    # options command
    options_parser = subparsers.add_parser("options", help="List selectable options")
    options_parser.add_argument("kind", choices=[k.value for k in OptionKind])
    options_parser.add_argument("--search", default="", help="Search text")
    options_parser.add_argument("--parent", help="Parent id (category, type_category)")
    options_parser.add_argument("--page", type=int, default=1)
    options_parser.add_argument("--page-size", type=int)

    # create-document command
    create_parser = subparsers.add_parser("create-document", help="Create a catalog document from a CSV")
    create_parser.add_argument("--name", required=True, help="Document name")
    create_parser.add_argument("--csv", required=True, help="Part-item CSV file")
    create_parser.add_argument("--image", help="Document image")
    create_parser.add_argument("--master", help="Master category id")
    create_parser.add_argument("--category", help="Category id")
    create_parser.add_argument("--type", help="Type category id")
    create_parser.add_argument("--part-type", help="Legacy flow: cabin, engine, axle, transmission or steering")
    create_parser.add_argument("--part", help="Legacy flow: part id")
    create_parser.add_argument("--subtype", help="Legacy flow: part sub-type id")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _load_config(args)
        if args.command == "check-csv":
            return cmd_check_csv(args, config)
        elif args.command == "options":
            return asyncio.run(cmd_options(args, config))
        elif args.command == "create-document":
            return asyncio.run(cmd_create_document(args, config))
        else:
            parser.print_help()
            return 1
    except ValidationError as e:
        print(colorize(f"Error: {e}", Fore.RED), file=sys.stderr)
        print_errors(e.errors)
        return 1
    except (CatalogError, OSError) as e:
        print(colorize(f"Error: {e}", Fore.RED), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
