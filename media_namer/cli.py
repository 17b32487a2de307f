import argparse
from pathlib import Path
from . import __version__

def create_parser():
    parser = argparse.ArgumentParser(
        description=f"Resolve messy download names into canonical media titles (v{__version__}).",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--config', type=Path, help='Path to TOML config file (overrides default search).')
    parser.add_argument('--profile', type=str, default='default', help='Configuration profile to use.')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], default=None, help='Console logging level (overrides config).')
    parser.add_argument('--quiet', '-q', action='store_true', default=False, help='Only print the resolved options, no log output below ERROR.')

    subparsers = parser.add_subparsers(dest='command', required=True, help='Action to perform')

    # --- Resolve Subparser ---
    parser_resolve = subparsers.add_parser('resolve', help='Resolve a raw name into rename options.', formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser_resolve.add_argument("name", type=str, help="Raw file or folder name to resolve.")
    parser_resolve.add_argument("--type", dest="media_type", choices=['movie', 'tv'], default='movie', help="Kind of media the name refers to.")
    parser_resolve.add_argument("--movies-path", type=str, default=None, help="Movie library root (overrides config).")
    parser_resolve.add_argument("--tv-path", type=str, default=None, help="TV library root (overrides config).")
    parser_resolve.add_argument("--similarity-percent", type=int, metavar="PERCENT", default=None, choices=range(0, 101), help="Minimum library similarity (0-100, overrides config).")
    parser_resolve.add_argument("--log-file", type=str, default=None, help="Log file path (overrides config).")

    # --- Config Subparser ---
    parser_config = subparsers.add_parser('config', help='Manage application configuration.')
    config_subparsers = parser_config.add_subparsers(dest='config_command', required=True, help='Configuration action to perform')

    config_subparsers.add_parser('show', help='Show the effective settings of the selected profile.')

    parser_config_generate = config_subparsers.add_parser('generate', help='Generate a default config.toml file.')
    parser_config_generate.add_argument('--output', type=Path, default=None, help='Where to write the file. Defaults to config.toml in the current directory.')
    parser_config_generate.add_argument('--force', '-f', action='store_true', help='Overwrite the config file if it already exists.')

    return parser

def parse_arguments(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)
    if not getattr(args, 'profile', None):
        args.profile = 'default'
    return args
