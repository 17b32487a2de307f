#!/usr/bin/env python3
import sys
import json
import logging
import asyncio
from pathlib import Path
from typing import Any, Dict

from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from media_namer.cache_store import DiskCacheStore
from media_namer.cli import parse_arguments
from media_namer.config_manager import (
    ConfigManager, ConfigHelper, BaseProfileSettings,
    generate_default_toml_content, DEFAULT_CONFIG_FILENAME
)
from media_namer.enums import MediaFileType
from media_namer.exceptions import RenamerError, ConfigError, CollaboratorError
from media_namer.log_setup import setup_logging
from media_namer.models import RenamedMediaOptions
from media_namer.rename_coordinator import build_coordinator

log = logging.getLogger("media_namer")


def build_options_table(raw_name: str, options: RenamedMediaOptions) -> Table:
    table = Table(title=f"Options for '{raw_name}'", show_header=True, header_style="bold magenta")
    table.add_column("Origin", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Date", style="green")
    table.add_column("Poster", overflow="fold")
    table.add_column("Cast", overflow="fold")
    for desc in options.descriptions:
        table.add_row(str(options.origin), desc.title, desc.date, desc.poster_url, ", ".join(desc.cast[:5]))
    return table


def generate_config(args, console: Console) -> int:
    target_path = args.output.resolve() if args.output else (Path.cwd() / DEFAULT_CONFIG_FILENAME).resolve()
    log.debug(f"Generate config: target path {target_path}")

    if target_path.exists() and not args.force:
        if args.quiet:
            print(f"Config file {target_path} exists. Use --force to overwrite (quiet mode).", file=sys.stderr)
            return 1
        console.print(f"[bold yellow]Warning:[/bold yellow] Config file already exists at [cyan]{target_path}[/cyan].")
        if not Confirm.ask("Overwrite existing file?", default=False):
            console.print("Config file generation cancelled.")
            return 0
        log.info(f"User confirmed overwrite for existing config file at {target_path}")

    try:
        target_path.parent.mkdir(parents=True, exist_ok=True)
        target_path.write_text(generate_default_toml_content(), encoding="utf-8")
    except OSError as e:
        log.error(f"Failed to write generated config to {target_path}: {e}")
        print(f"Error: Could not write configuration file to {target_path}: {e}", file=sys.stderr)
        return 1
    console.print(f"[green]Default configuration file generated at: {target_path}[/green]")
    return 0


def show_config(args, manager: ConfigManager, cfg: ConfigHelper, console: Console) -> int:
    console.print(f"--- Configuration Effective for Profile: '{args.profile}' ---")
    if manager.config_path.is_file():
        console.print(f"Config file loaded: [cyan]{manager.config_path}[/cyan]")
    else:
        console.print(f"Config file [yellow]{manager.config_path}[/yellow] not found. Using internal defaults and environment variables.")
    effective_settings: Dict[str, Any] = {key: cfg(key) for key in BaseProfileSettings.model_fields}
    effective_settings["_api_info_"] = {"tmdb_api_key_loaded": bool(cfg.get_api_key('tmdb'))}
    console.print_json(json.dumps(effective_settings, default=str))
    return 0


async def resolve_name(args, cfg: ConfigHelper, console: Console) -> int:
    media_type = MediaFileType.parse(args.media_type)
    try:
        store = DiskCacheStore(cfg('cache_directory'))
    except CollaboratorError as e:
        log.warning(f"Cache disabled, resolving without it: {e}")
        store = None
    try:
        coordinator = build_coordinator(cfg, store=store, use_cache=store is not None)
        options = await coordinator.produce_renames(args.name, media_type)
    finally:
        if store is not None:
            store.close()
    console.print(build_options_table(args.name, options))
    return 0


def main(argv=None) -> int:
    args = parse_arguments(argv)
    console = Console()

    try:
        if args.command == 'config' and args.config_command == 'generate':
            setup_logging(log_level_console=logging.ERROR if args.quiet else logging.INFO)
            return generate_config(args, console)

        manager = ConfigManager(config_path_override=args.config)
        cfg = ConfigHelper(manager, args)

        log_level_str = cfg('log_level', 'INFO', arg_value=args.log_level)
        log_level_console = logging.ERROR if args.quiet else getattr(logging, log_level_str.upper(), logging.INFO)
        setup_logging(log_level_console=log_level_console, log_file=cfg('log_file'))
        log.debug(f"Full logging configured. Parsed args: {args}")

        if args.command == 'config':
            return show_config(args, manager, cfg, console)
        return asyncio.run(resolve_name(args, cfg, console))

    except ConfigError as e:
        print(f"FATAL CONFIGURATION ERROR: {e}", file=sys.stderr)
        return 2
    except RenamerError as e:
        log.error(f"Application Error: {e}", exc_info=True)
        console.print(f"[bold red]ERROR:[/bold red] {e}")
        return 1
    except KeyboardInterrupt:
        print("\nCancelled by user.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
