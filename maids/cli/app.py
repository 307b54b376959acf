from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Callable, Coroutine
from typing import Any

from maids.cli import output as out
from maids.config import Config, config_path_display, load_config
from maids.errors import ConfigError, MaidsError
from maids.facade.core import Maids
from maids.facade.types import Reply

DESCRIPTION = """\
maids: register and generate unique application IDs

Application IDs are stored with an atomic insert-if-absent, so an id is
never handed out twice, even across several running instances."""


# ── Infrastructure helpers ──────────────────────────────────────────


def _build_maids(cfg: Config) -> Maids:
    return Maids.from_config(cfg.to_dict())


def _owner(args: argparse.Namespace, cfg: Config) -> str:
    return args.owner or cfg.api_owner


def _warn_if_ephemeral(args: argparse.Namespace, cfg: Config) -> None:
    if cfg.uses_postgres or args.json:
        return
    out.warn("Using the in-memory store: ids only live for this command.")
    out.next_step("MAIDS_STORE=postgres maids ...", "persist ids in PostgreSQL")


# ── init ────────────────────────────────────────────────────────────


async def cmd_init(args: argparse.Namespace) -> None:
    """Create the app ID table if it does not exist."""
    cfg = load_config()
    async with _build_maids(cfg) as maids:
        await maids.init()
    out.success(f"Store '{cfg.store_provider}' is ready")


# ── register / create ───────────────────────────────────────────────


async def cmd_register(args: argparse.Namespace) -> None:
    cfg = load_config()
    _warn_if_ephemeral(args, cfg)
    async with _build_maids(cfg) as maids:
        await maids.init()
        reply = await maids.register(_owner(args, cfg), list(args.ids))
    _emit(args, reply)


async def cmd_create(args: argparse.Namespace) -> None:
    cfg = load_config()
    _warn_if_ephemeral(args, cfg)
    async with _build_maids(cfg) as maids:
        await maids.init()
        reply = await maids.create(_owner(args, cfg), args.num_of_ids)
    _emit(args, reply)


def _emit(args: argparse.Namespace, reply: Reply) -> None:
    if args.json:
        print(json.dumps(reply.to_dict(), indent=2))
    else:
        out.app_id_reply(reply)
    if not reply.ok:
        sys.exit(1)


# ── show ────────────────────────────────────────────────────────────


async def cmd_show(args: argparse.Namespace) -> None:
    cfg = load_config()
    if not cfg.uses_postgres:
        out.error("'show' needs a persistent store; the in-memory store is empty.")
        out.next_step("MAIDS_STORE=postgres maids show ID")
        sys.exit(1)

    async with _build_maids(cfg) as maids:
        await maids.init()
        app_id = await maids.get(args.id)

    if app_id is None:
        out.warn(f"No application ID '{args.id}'")
        sys.exit(1)

    out.header(app_id.id)
    out.kv("Created by", app_id.created_by)
    out.kv("Created on", app_id.created_on.isoformat())
    out.kv("Generated", "yes" if app_id.is_generated else "no")


# ── serve ───────────────────────────────────────────────────────────


async def cmd_serve(args: argparse.Namespace) -> None:
    try:
        import uvicorn

        from maids.ext.http.app import create_app
    except ImportError as exc:
        out.error(str(exc))
        out.next_step("pip install maids[http]")
        sys.exit(1)

    cfg = load_config()
    app = create_app(
        _build_maids(cfg),
        api_token=cfg.api_token,
        api_owner=cfg.api_owner,
    )
    server = uvicorn.Server(uvicorn.Config(app, host=args.host, port=args.port))
    await server.serve()


# ── config ──────────────────────────────────────────────────────────


async def cmd_config_show(args: argparse.Namespace) -> None:
    cfg = load_config()

    out.header(f"Configuration ({config_path_display()})")
    print()
    if cfg.uses_postgres:
        out.kv("Store", f"postgres ({cfg.db_host}:{cfg.db_port}/{cfg.db_name})")
    else:
        out.kv("Store", "memory (in-memory, no persistence)")
    out.kv("Max ids per register", cfg.app_ids.max_ids_in_register)
    out.kv("Max ids per create", cfg.app_ids.max_ids_in_create)
    out.kv("Max generation retries", cfg.app_ids.max_gen_retry)
    out.kv("Trusted ids in create", cfg.app_ids.can_set_ids_in_create)
    out.kv("Trusted retries in create", cfg.app_ids.can_set_retries_in_create)
    out.kv("API owner", cfg.api_owner)
    print()


# ── Parser ──────────────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="maids",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable logging")
    sub = parser.add_subparsers(dest="command", title="commands")

    sub.add_parser("init", help="Create the app ID table")

    p_register = sub.add_parser("register", help="Register caller-chosen ids")
    p_register.add_argument("ids", nargs="+", help="Ids to register")

    p_create = sub.add_parser("create", help="Generate new unique ids")
    p_create.add_argument(
        "-n",
        "--num-of-ids",
        type=int,
        default=1,
        help="How many ids to generate (default: 1)",
    )

    for p in (p_register, p_create):
        p.add_argument("--owner", help="Owner identity (default: api owner)")
        p.add_argument("--json", action="store_true", help="Print the raw reply")

    p_show = sub.add_parser("show", help="Show a stored id")
    p_show.add_argument("id")

    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)

    p_cfg = sub.add_parser("config", help="View settings")
    cfg_sub = p_cfg.add_subparsers(dest="config_command", title="config commands")
    cfg_sub.add_parser("show", help="Show current settings")

    return parser


# ── Dispatch ────────────────────────────────────────────────────────

_CommandHandler = Callable[[argparse.Namespace], Coroutine[Any, Any, None]]

_COMMAND_MAP: dict[str, _CommandHandler] = {
    "init": cmd_init,
    "register": cmd_register,
    "create": cmd_create,
    "show": cmd_show,
    "serve": cmd_serve,
}

_CONFIG_MAP: dict[str, _CommandHandler] = {
    "show": cmd_config_show,
}


def main(argv: list[str] | None = None) -> None:
    import logging

    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="  %(name)s: %(message)s",
        )
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    if not args.command:
        parser.print_help()
        return

    if args.command == "config":
        if not args.config_command:
            parser.parse_args(["config", "--help"])
            return
        handler = _CONFIG_MAP.get(args.config_command)
    else:
        handler = _COMMAND_MAP.get(args.command)

    if handler is None:
        parser.print_help()
        return

    try:
        asyncio.run(handler(args))
    except MaidsError as exc:
        out.error(exc.message)
        sys.exit(1)
    except ConfigError as exc:
        out.error(f"Invalid configuration: {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        print()


if __name__ == "__main__":
    main()
