"""snbtkit command-line interface.

Usage:
    echo '{a:1b,b:[1,2,3]}' | python3 -m snbtkit format [--deflate] [--indent 4] ...
    python3 -m snbtkit format --sort type-alpha --input level.snbt
    python3 -m snbtkit check --input level.snbt
    python3 -m snbtkit version
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Union

from . import (
    ParseError,
    SnbtError,
    Stringifier,
    __version__,
    compare_alphabetically,
    compare_by_type,
    compare_by_type_then_alphabetically,
    parse,
)
from ._constants import BOOL_PREFERENCES, QUOTE_PREFERENCES

logger = logging.getLogger(__name__)

_SORTS = {
    "alpha": compare_alphabetically,
    "type": compare_by_type,
    "type-alpha": compare_by_type_then_alphabetically,
}


def _indent_arg(value: str) -> Union[str, int]:
    if value == "tab":
        return "\t"
    try:
        width = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("expected a number of spaces or 'tab', got {!r}".format(value))
    if width < 0:
        raise argparse.ArgumentTypeError("indent must not be negative")
    return width


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snbtkit",
        description="snbtkit — parse, check and reformat SNBT text",
    )
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log debug details to stderr")
    sub = parser.add_subparsers(dest="command")

    # ── format ──
    fmt_p = sub.add_parser("format", help="Reformat SNBT")
    fmt_p.add_argument("--input", "-i", metavar="FILE",
                       help="Read SNBT from FILE instead of stdin")
    fmt_p.add_argument("--deflate", action="store_true",
                       help="No whitespace, single line")
    fmt_p.add_argument("--indent", type=_indent_arg, default="tab", metavar="N|tab",
                       help="Spaces per level, or 'tab' (default)")
    fmt_p.add_argument("--brackets-own-line", action="store_true",
                       help="Put a multi-line value's opening bracket on its own line")
    fmt_p.add_argument("--collapse-adjacent-brackets", action="store_true",
                       help="Share lines between nested brackets")
    fmt_p.add_argument("--no-collapse-primitive-lists", dest="collapse_primitive_lists",
                       action="store_false",
                       help="Never write lists of lists on one line")
    fmt_p.add_argument("--trailing-comma", action="store_true",
                       help="Comma after the last member of multi-line containers")
    fmt_p.add_argument("--sort", choices=sorted(_SORTS),
                       help="Sort compound members")
    fmt_p.add_argument("--quote-keys", action="store_true",
                       help="Quote every key")
    fmt_p.add_argument("--no-quote-strings", dest="quote_strings", action="store_false",
                       help="Leave strings bare where that reads back the same")
    fmt_p.add_argument("--quote", choices=QUOTE_PREFERENCES, default="preferDouble",
                       help="Quote character preference (default: preferDouble)")
    fmt_p.add_argument("--bools", choices=BOOL_PREFERENCES, default="preserve",
                       help="Write bytes 0/1 as false/true (default: preserve)")
    fmt_p.add_argument("--capitalize", default="", metavar="LETTERS",
                       help="Numeric suffixes to write in upper case, e.g. 'lf'")

    # ── check ──
    check_p = sub.add_parser("check", help="Validate SNBT without output")
    check_p.add_argument("--input", "-i", metavar="FILE",
                         help="Read SNBT from FILE instead of stdin")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(filepath: Optional[str]) -> str:
    """Read SNBT text from a file or stdin."""
    if filepath:
        with open(filepath, "r", encoding="utf-8") as f:
            return f.read()
    if sys.stdin.isatty():
        print("snbtkit: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.read()


def _stringifier_from_args(args: argparse.Namespace) -> Stringifier:
    return Stringifier(
        deflate=args.deflate,
        indent=args.indent,
        brackets_own_line=args.brackets_own_line,
        collapse_adjacent_brackets=args.collapse_adjacent_brackets,
        collapse_primitive_lists=args.collapse_primitive_lists,
        trailing_comma=args.trailing_comma,
        compound_sort=_SORTS[args.sort] if args.sort else None,
        always_quote_keys=args.quote_keys,
        always_quote_strings=args.quote_strings,
        quote_preference=args.quote,
        bytes_as_bools=args.bools,
        capitalize_suffix=args.capitalize,
    )


def _cmd_format(args: argparse.Namespace) -> None:
    stringifier = _stringifier_from_args(args)
    tag = parse(_read_input(args.input))
    print(stringifier.stringify(tag))


def _cmd_check(args: argparse.Namespace) -> None:
    tag = parse(_read_input(args.input))
    logger.debug("parsed a compound with %d members", len(tag))
    print("ok")


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"snbtkit {__version__}")
        return

    try:
        if args.command == "format":
            _cmd_format(args)
        elif args.command == "check":
            _cmd_check(args)
    except SnbtError as e:
        print(f"snbtkit: error [{e.code}]: {e}", file=sys.stderr)
        if isinstance(e, ParseError) and e.suggestion:
            print(f"snbtkit: hint: {e.suggestion}", file=sys.stderr)
        sys.exit(2)
    except UnicodeDecodeError as e:
        print(f"snbtkit: input is not valid UTF-8: {e}", file=sys.stderr)
        sys.exit(2)
    except ValueError as e:
        # bad option combination, e.g. an unknown --capitalize letter
        print(f"snbtkit: invalid option: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
