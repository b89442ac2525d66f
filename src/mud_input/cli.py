import argparse
import sys

from mud_input import __version__
from mud_input.completion import TabCompletion, split_last_word
from mud_input.config import load_config
from mud_input.debug_log import DebugLogger
from mud_input.history import CommandHistory


def _open_history(args, config) -> CommandHistory:
    history = CommandHistory(hydrate_limit=config.history.hydrate_limit)
    if args.db:
        history.open_path(args.db)
    elif args.character and config.history.enabled:
        history.open_path(config.history.database_path(args.character))
    return history


def _cmd_list(args, config) -> int:
    history = _open_history(args, config)
    try:
        entries = history.get_all()
        start = max(len(entries) - args.n, 0) if args.n else 0
        for i in range(start, len(entries)):
            print(f"{i + 1:5d}  {entries[i]}")
    finally:
        history.close()
    return 0


def _cmd_show(args, config) -> int:
    history = _open_history(args, config)
    try:
        entry = history.get_by_index(args.index)
    finally:
        history.close()
    if entry is None:
        return 1
    print(entry)
    return 0


def _cmd_search(args, config) -> int:
    history = _open_history(args, config)
    try:
        limit = args.limit or config.history.search_limit
        for cmd in history.search_deep(args.pattern, limit):
            print(cmd)
    finally:
        history.close()
    return 0


def _cmd_complete(args, config) -> int:
    completion = TabCompletion(
        min_preview_length=config.completion.min_preview_length,
        max_preview=config.completion.max_preview,
    )
    words = list(args.words) + config.completion.words
    if args.all:
        _, partial = split_last_word(args.text)
        for word in completion.get_completions(partial, words):
            print(word)
    else:
        print(completion.complete(args.text, words))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mud-input", description="MUD command history and completion")
    p.add_argument("-v", "--version", action="version",
                   version=f"%(prog)s {__version__}")
    p.add_argument("-c", "--config", default="default",
                   help="Configuration name or path (searches ~/.mud-input/configs/, ./configs/, or use full path)")
    p.add_argument("-d", "--debug", action="store_true", default=False,
                   help="Enable debug logging to mud_input.log in current directory")
    src = p.add_mutually_exclusive_group()
    src.add_argument("--db", default=None,
                     help="Path to a history database")
    src.add_argument("--character", default=None,
                     help="Character whose history to use (~/.mud-input/characters/<name>/history.db)")

    sub = p.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("list", help="List history entries, oldest first")
    sp.add_argument("-n", type=int, default=0, help="Only the last N entries")
    sp.set_defaults(func=_cmd_list)

    sp = sub.add_parser("show", help="Print the entry with the given 1-based index")
    sp.add_argument("index", type=int)
    sp.set_defaults(func=_cmd_show)

    sp = sub.add_parser("search", help="Search history for a substring (case insensitive)")
    sp.add_argument("pattern")
    sp.add_argument("-l", "--limit", type=int, default=0,
                    help="Maximum results (default from config)")
    sp.set_defaults(func=_cmd_search)

    sp = sub.add_parser("complete", help="Complete the last word of TEXT")
    sp.add_argument("text")
    sp.add_argument("words", nargs="*", help="Extra candidate words")
    sp.add_argument("-a", "--all", action="store_true", default=False,
                    help="List preview candidates instead of completing")
    sp.set_defaults(func=_cmd_complete)

    return p


def main(argv=None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        p.error(str(e))

    logger = DebugLogger()
    if args.debug:
        logger.start()
    try:
        return args.func(args, config)
    finally:
        logger.stop()


if __name__ == "__main__":
    sys.exit(main())
