from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, Optional, Sequence

import uvicorn

from affinity_placement.config import get_settings
from affinity_placement.errors import PlacementConfigConflictError
from affinity_placement.placement_config import DEFAULT
from affinity_placement.services import placement_config as placement_config_service


def _print_json(data: Dict[str, Any]) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def cmd_validate(args: argparse.Namespace) -> int:
    config = placement_config_service.load_config(args.path)
    _print_json(config.to_document())
    return 0


def cmd_defaults(args: argparse.Namespace) -> int:
    if args.output:
        path = placement_config_service.dump_document(DEFAULT, args.output)
        print(f"wrote {path}")
        return 0
    _print_json(DEFAULT.to_document())
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    settings = get_settings()
    uvicorn.run(
        "affinity_placement.main:app",
        host=args.host or settings.server_host,
        port=args.port or settings.server_port,
        log_config=None,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="affinity-placement",
        description="Affinity placement policy configuration tool",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="Load and validate a placement config file")
    validate.add_argument("path", help="JSON or YAML placement config document")
    validate.set_defaults(func=cmd_validate)

    defaults = sub.add_parser("defaults", help="Print the default placement config")
    defaults.add_argument("--output", help="Write the defaults to a .json/.yaml file instead")
    defaults.set_defaults(func=cmd_defaults)

    serve = sub.add_parser("serve", help="Run the placement config admin API")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        exit_code = args.func(args)
    except PlacementConfigConflictError as exc:
        print(f"error: {exc}", file=sys.stderr)
        print(f"conflicting collections: {', '.join(exc.collections)}", file=sys.stderr)
        raise SystemExit(1) from exc
    except Exception as exc:  # noqa: BLE001
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
