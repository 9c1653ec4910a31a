"""Main entry point for the card CLI."""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from card_cli import __version__
from card_cli.client import ApiClient
from card_cli.config import Config
from engine.card.errors import CardError
from engine.card.renderer import render_page
from engine.card.share import encode_config_fragment, export_config, import_config, parse_location
from engine.card.types import RenderOptions
from engine.card.validation import validate_config

COMMANDS = ("render", "validate", "share", "fetch", "link")


def print_help():
    """Print help message."""
    print(f"""
Holiday card CLI v{__version__}

Usage:
  card [options] <command> [argument]

Commands:
  render CONFIG     Render a config file to a standalone HTML page
  validate CONFIG   Check a config file's structure
  share CONFIG      Save a config to the server and print its share link
  fetch ID|URL      Download a shared card's config
  link CONFIG       Print a self-contained #config= link (no server needed)

Options:
  --api-url URL     Override API endpoint (default: http://localhost:8000)
  -o, --output PATH Write output to PATH instead of stdout
  --title TEXT      Page title for render (default: the intro title)
  -h, --help        Show this help
  -v, --version     Show version

Environment:
  CARD_API_URL      Override API endpoint (same as --api-url)

Examples:
  card render card-config.json -o card.html
  card share card-config.json --api-url http://localhost:8000
  card fetch 'http://localhost:8000/#card=k3j9x0ab' -o card-config.json
""")


def parse_args(args: list[str]) -> dict:
    """
    Parse command line arguments.

    Returns dict with:
        command: str | None
        target: str | None (config path, card id or share URL)
        api_url: str | None
        output: str | None
        title: str | None
        show_help: bool
        show_version: bool
        error: str | None
    """
    result = {
        "command": None,
        "target": None,
        "api_url": None,
        "output": None,
        "title": None,
        "show_help": False,
        "show_version": False,
        "error": None,
    }

    valued = {"--api-url": "api_url", "--output": "output", "-o": "output", "--title": "title"}

    i = 0
    while i < len(args):
        arg = args[i]

        if arg in valued:
            if i + 1 < len(args):
                result[valued[arg]] = args[i + 1]
                i += 1
            else:
                result["error"] = f"{arg} requires a value"
                return result
        elif arg in ("--help", "-h"):
            result["show_help"] = True
        elif arg in ("--version", "-v"):
            result["show_version"] = True
        elif arg.startswith("-"):
            result["error"] = f"Unknown option: {arg}"
            return result
        elif result["command"] is None:
            if arg not in COMMANDS:
                result["error"] = f"Unknown command: {arg}"
                return result
            result["command"] = arg
        elif result["target"] is None:
            result["target"] = arg
        else:
            result["error"] = f"Unexpected argument: {arg}"
            return result

        i += 1

    return result


def read_config(path: str) -> dict:
    """Load and validate a config file. Raises CardError or OSError."""
    return import_config(Path(path).read_bytes())


def write_output(text: str, output: str | None):
    if output:
        Path(output).write_text(text, encoding="utf-8")
        print(f"Wrote {output}", file=sys.stderr)
    else:
        print(text)


def cmd_render(args: dict, config: Config) -> int:
    card = read_config(args["target"])
    options = RenderOptions(base_url=config.api_url)
    if args["title"]:
        options.title = args["title"]
    write_output(render_page(card, options), args["output"])
    return 0


def cmd_validate(args: dict, config: Config) -> int:
    try:
        data = json.loads(Path(args["target"]).read_bytes())
    except ValueError:
        print("Invalid JSON file. Please check the format.", file=sys.stderr)
        return 1
    errors = validate_config(data)
    if errors:
        for error in errors:
            print(f"  ✗ {error}", file=sys.stderr)
        return 1
    print(f"✓ {args['target']} is a valid card config")
    return 0


def cmd_share(args: dict, config: Config) -> int:
    card = read_config(args["target"])
    client = ApiClient(config.api_url)
    try:
        card_id = client.save_card(card)
        url = client.share_url(card_id)
    finally:
        client.close()
    config.remember_card(card_id)
    print(url)
    return 0


def cmd_fetch(args: dict, config: Config) -> int:
    target = args["target"]
    card_id = target
    if "#" in target:
        location = parse_location(target[target.index("#") :])
        if location.kind == "config" and location.config is not None:
            write_output(export_config(location.config), args["output"])
            return 0
        if location.kind != "card" or not location.card_id:
            print(f"Not a card link: {target}", file=sys.stderr)
            return 1
        card_id = location.card_id

    client = ApiClient(config.api_url)
    try:
        card = client.load_card(card_id)
    finally:
        client.close()
    write_output(export_config(card), args["output"])
    return 0


def cmd_link(args: dict, config: Config) -> int:
    card = read_config(args["target"])
    print(f"{config.api_url}/{encode_config_fragment(card)}")
    return 0


_HANDLERS = {
    "render": cmd_render,
    "validate": cmd_validate,
    "share": cmd_share,
    "fetch": cmd_fetch,
    "link": cmd_link,
}


def run(argv: list[str], config: Config | None = None) -> int:
    """Run one command and return its exit code."""
    args = parse_args(argv)

    if args["error"]:
        print(args["error"], file=sys.stderr)
        print("Run 'card --help' for usage.", file=sys.stderr)
        return 1

    if args["show_help"]:
        print_help()
        return 0

    if args["show_version"]:
        print(f"card-cli {__version__}")
        return 0

    if args["command"] is None:
        print_help()
        return 1

    if args["target"] is None:
        print(f"Error: {args['command']} requires an argument", file=sys.stderr)
        return 1

    config = config or Config(api_url_override=args["api_url"])

    try:
        return _HANDLERS[args["command"]](args, config)
    except CardError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main():
    """Main entry point."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
