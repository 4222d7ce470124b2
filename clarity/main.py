"""
Clarity - Command Line Interface
================================

Thin front end over OrganizerService: show and edit the configuration,
preview a folder and organize it.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from clarity.config.store import ConfigStore
from clarity.service import OrganizerService
from clarity.utils.exceptions import ClarityError
from clarity.utils.logging_config import LoggingConfig, get_logger, setup_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL = 2


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="clarity",
        description="Clarity - sort the files of a folder into category folders"
    )
    parser.add_argument(
        '--config', '-c',
        type=Path,
        default=None,
        help='Configuration file (default: ~/.clarity/config.yaml)'
    )
    parser.add_argument(
        '--log-level',
        default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Console log level (default: WARNING)'
    )
    parser.add_argument(
        '--json-logs',
        action='store_true',
        help='Log to the console as JSON'
    )
    parser.add_argument(
        '--no-log-file',
        action='store_true',
        help='Do not write ~/.clarity/logs/clarity.log'
    )

    commands = parser.add_subparsers(dest='command', required=True)

    config_cmd = commands.add_parser('config', help='Show the configuration')
    config_cmd.add_argument('action', choices=['show', 'path'])

    preview_cmd = commands.add_parser('preview', help='Preview how a folder would be organized')
    preview_cmd.add_argument('path', type=Path)

    organise_cmd = commands.add_parser(
        'organise', aliases=['organize'], help='Move the files of a folder into category folders'
    )
    organise_cmd.add_argument('path', type=Path)
    organise_cmd.add_argument(
        '--verbose', '-v', action='store_true', help='List every file outcome'
    )

    category_cmd = commands.add_parser('category', help='Edit categories')
    category_actions = category_cmd.add_subparsers(dest='action', required=True)
    add = category_actions.add_parser('add', help='Add a category')
    add.add_argument('name')
    add.add_argument('extensions', nargs='?', default='', help='e.g. "jpg, png"')
    rename = category_actions.add_parser('rename', help='Rename a category')
    rename.add_argument('old_name')
    rename.add_argument('new_name')
    remove = category_actions.add_parser('remove', help='Remove a category')
    remove.add_argument('name')
    set_exts = category_actions.add_parser('set', help='Replace the extensions of a category')
    set_exts.add_argument('name')
    set_exts.add_argument('extensions', help='e.g. "jpg, png"')

    for name, label in (('safe-path', 'safe'), ('unsafe-path', 'unsafe')):
        path_cmd = commands.add_parser(name, help=f'Edit {label} destination paths')
        path_cmd.add_argument('action', choices=['add', 'remove'])
        path_cmd.add_argument('path', type=Path)

    return parser


def _show_config(service: OrganizerService, action: str) -> int:
    if action == 'path':
        print(service.store.config_path)
        return EXIT_OK
    config = service.get_current_config()
    print(yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False), end='')
    return EXIT_OK


def _preview(service: OrganizerService, path: Path) -> int:
    result = service.preview(path)
    rows = result.ordered()
    if not rows:
        print(f"No files to organize in {result.directory}")
    else:
        print(f"\n📂 Preview of {result.directory}:\n")
        for category, count in rows:
            print(f"  {count:5}  {category}")
    if result.unclassified:
        print(f"\n  {result.unclassified} file(s) match no category and stay in place")
    if result.skipped:
        print(f"  {result.skipped} entries could not be read")
    return EXIT_OK


def _organise(service: OrganizerService, path: Path, verbose: bool) -> int:
    report = service.organise_files(path)
    if verbose:
        for outcome in report.outcomes:
            mark = {"success": "✓", "skipped": "↷", "failed": "✗"}[outcome.status.value]
            print(f"  {mark} {outcome.source.name}")
            if outcome.destination:
                print(f"      → {outcome.destination}")
            if outcome.detail:
                kind = f" [{outcome.kind}]" if outcome.kind else ""
                print(f"      {outcome.detail}{kind}")

    print(("✗ " if report.has_failures else "✓ ") + report.summary())
    return EXIT_PARTIAL if report.has_failures else EXIT_OK


def _edit_config(service: OrganizerService, args: argparse.Namespace) -> int:
    config = service.get_current_config()

    if args.command == 'category':
        if args.action == 'add':
            config.add_category(args.name, args.extensions)
        elif args.action == 'rename':
            config.rename_category(args.old_name, args.new_name)
        elif args.action == 'remove':
            config.remove_category(args.name)
        elif args.action == 'set':
            config.set_extensions(args.name, args.extensions)
    elif args.command == 'safe-path':
        path = args.path.expanduser().absolute()
        if args.action == 'add':
            config.add_safe_path(path)
        else:
            config.remove_safe_path(path)
    elif args.command == 'unsafe-path':
        path = args.path.expanduser().absolute()
        if args.action == 'add':
            config.add_unsafe_path(path)
        else:
            config.remove_unsafe_path(path)

    service.save_app_config(config)
    print("✓ Configuration saved")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with CLI support."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(LoggingConfig(
        level=args.log_level,
        json_format=args.json_logs,
        file_output=not args.no_log_file,
    ))

    try:
        service = OrganizerService(store=ConfigStore(args.config))

        if args.command == 'config':
            return _show_config(service, args.action)
        if args.command == 'preview':
            return _preview(service, args.path)
        if args.command in ('organise', 'organize'):
            return _organise(service, args.path, args.verbose)
        return _edit_config(service, args)

    except ClarityError as e:
        logger.debug(f"Command {args.command} failed", exc_info=True)
        print(f"✗ {e.message}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
