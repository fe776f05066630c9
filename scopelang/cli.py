"""
`scopec` command line interface.

    scopec tokens FILE        print the token stream
    scopec parse FILE [--json] print the AST
    scopec check              run the built-in self-check cases
"""

import argparse
import json
import sys
from typing import List, Optional

from .api import tokenize, parse, run_cases, validate_forest
from .config import ScopeConfig
from .diagnostics import configure_logging
from .lexer import LexerError, tokenize_file
from .parser import ParseError, parse_file


def _cmd_tokens(args: argparse.Namespace, config: ScopeConfig) -> int:
    if args.file == "-":
        tokens = tokenize(sys.stdin.read(), config, "<stdin>")
    else:
        tokens = tokenize_file(args.file, config)
    for token in tokens:
        print(f"{token.location.line}:{token.location.column}\t{token}")
    return 0


def _cmd_parse(args: argparse.Namespace, config: ScopeConfig) -> int:
    if args.file == "-":
        nodes = parse(sys.stdin.read(), config, "<stdin>")
    else:
        nodes = parse_file(args.file, config)
        validate_forest(nodes)
    if args.json:
        print(json.dumps([node.to_dict() for node in nodes], indent=2))
    else:
        for node in nodes:
            print(node.pretty())
    return 0


def _cmd_check(args: argparse.Namespace, config: ScopeConfig) -> int:
    results = run_cases(config=config)
    failed = 0
    for result in results:
        status = "ok" if result.passed else "FAIL"
        line = f"[{status}] {result.source!r} expected={result.expected} actual={result.actual}"
        if result.error and not result.passed:
            line += f" ({result.error})"
        print(line)
        if not result.passed:
            failed += 1
    print(f"{len(results) - failed}/{len(results)} cases passed")
    return 1 if failed else 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scopec", description="ScopeLang front end")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase debug level (repeatable, up to -vvv)")
    parser.add_argument("--lenient", action="store_true",
                        help="Skip characters no token matches instead of failing")
    parser.add_argument("--extended-keywords", action="store_true",
                        help="Reserve while/if/elif/else/finally as scope keywords")

    sub = parser.add_subparsers(dest="command", required=True)

    tokens_cmd = sub.add_parser("tokens", help="Print the token stream")
    tokens_cmd.add_argument("file", help="Source file, or '-' for stdin")
    tokens_cmd.set_defaults(handler=_cmd_tokens)

    parse_cmd = sub.add_parser("parse", help="Print the abstract syntax tree")
    parse_cmd.add_argument("file", help="Source file, or '-' for stdin")
    parse_cmd.add_argument("--json", action="store_true", help="Emit JSON instead of a tree")
    parse_cmd.set_defaults(handler=_cmd_parse)

    check_cmd = sub.add_parser("check", help="Run the built-in self-check cases")
    check_cmd.set_defaults(handler=_cmd_check)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.verbose)
    config = _config_from_args(args)

    try:
        return args.handler(args, config)
    except (LexerError, ParseError) as e:
        print(str(e), file=sys.stderr, end="")
        return 1
    except OSError as e:
        print(f"scopec: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
