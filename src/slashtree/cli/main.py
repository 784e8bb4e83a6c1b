#!/usr/bin/env python3
"""
CLI entry point for building, watching and serving commands (slashtree command).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path


def _prepare_build(args, mode: str):
    """Attach command compilation to an empty host build."""
    from slashtree.build import BuildConfig, BuildContext, BuildHooks, add_command_compilation, attach_plugins
    from slashtree.config import CompilerOptions

    root = Path(args.root).resolve()
    options = CompilerOptions(
        dist_dir=args.dist_dir,
        watch_mode=(mode == "development"),
        post_commands=getattr(args, "post_commands", False),
    )
    host_config = add_command_compilation({}, options, root=root)
    config = host_config["transform"](BuildConfig(mode=mode), BuildContext(mode=mode, root=root))

    hooks = BuildHooks(mode=mode)
    attach_plugins(config, hooks)
    return hooks


def cmd_build(args):
    """Compile all command modules once."""
    hooks = _prepare_build(args, "production")
    asyncio.run(hooks.run_before())


def cmd_watch(args):
    """Compile command modules on every change until interrupted."""
    hooks = _prepare_build(args, "development")

    async def run():
        await hooks.run_before()
        try:
            await asyncio.Event().wait()
        finally:
            await hooks.run_shutdown()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


def cmd_serve(args):
    """Serve the interactions endpoint."""
    import uvicorn

    from slashtree.server import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port, log_level=args.log_level.lower())


async def _load_tree():
    from slashtree.commands import CommandImporter
    from slashtree.config import get_config

    return await CommandImporter(get_config().commands_dir).load_all()


def cmd_register(args):
    """Overwrite the application's commands with the compiled tree."""
    from slashtree.commands import post_commands
    from slashtree.config import get_config
    from slashtree.interactions import DiscordAPI

    async def run():
        config = get_config()
        tree = await _load_tree()
        async with DiscordAPI.from_config(config) as api:
            return await post_commands(tree, config, api)

    registered = asyncio.run(run())
    print(f"Registered {len(registered)} command(s).")


def cmd_list(args):
    """Print the compiled command tree."""
    from slashtree.commands import build_registration_payload

    tree = asyncio.run(_load_tree())
    if args.as_json:
        print(json.dumps(build_registration_payload(tree), indent=2))
        return

    print("\nCommands:")
    for path in tree.paths():
        indent = "  " * len(path)
        print(f"{indent}/{' '.join(path)}")
    print()


def main():
    """Main entry point for the slashtree CLI."""
    parser = argparse.ArgumentParser(
        description="Build and serve Discord slash commands defined as files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    slashtree build                     # Compile discord/commands once
    slashtree watch                     # Recompile on every change
    slashtree list                      # Show the compiled tree
    slashtree register                  # PUT commands to Discord
    slashtree serve --port 8000         # Serve the interactions endpoint
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, func, help_text in (
        ("build", cmd_build, "Compile command modules once"),
        ("watch", cmd_watch, "Compile command modules on change"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("--root", default=".", help="Project root (default: .)")
        p.add_argument("--dist-dir", default=None, help="Output directory (default: dist/discordModules)")
        p.set_defaults(func=func)

    p = subparsers.add_parser("serve", help="Serve the interactions endpoint")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    p.add_argument("--log-level", default="INFO")
    p.set_defaults(func=cmd_serve)

    p = subparsers.add_parser("register", help="Register commands with Discord")
    p.set_defaults(func=cmd_register)

    p = subparsers.add_parser("list", help="List compiled commands")
    p.add_argument("--json", dest="as_json", action="store_true", help="Print the registration payload")
    p.set_defaults(func=cmd_list)

    args = parser.parse_args()

    from slashtree.config import get_config
    from slashtree.logging import configure_logging

    configure_logging("DEBUG" if args.verbose else get_config().log_level)

    from slashtree.core.exceptions import SlashTreeError

    try:
        args.func(args)
    except SlashTreeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
