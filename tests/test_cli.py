import sys
import pytest
from pathlib import Path

from media_namer import cli, __version__

@pytest.fixture
def reset_argv():
    """Fixture to reset sys.argv after each test."""
    original_argv = sys.argv.copy()
    yield
    sys.argv = original_argv

def test_parse_arguments_resolve_minimal(mocker, reset_argv):
    mocker.patch.object(sys, 'argv', ['namer_main.py', 'resolve', 'Some.Movie.2021.1080p'])
    args = cli.parse_arguments()
    assert args.command == 'resolve'
    assert args.name == 'Some.Movie.2021.1080p'
    assert args.media_type == 'movie'
    assert args.profile == 'default'
    assert args.quiet is False
    assert args.similarity_percent is None

def test_parse_arguments_resolve_with_flags():
    args = cli.parse_arguments([
        '--log-level', 'DEBUG', '--profile', 'strict', '-q',
        'resolve', 'Bodyguard-S01', '--type', 'tv', '--tv-path', '/media/tv', '--similarity-percent', '90'
    ])
    assert args.log_level == 'DEBUG'
    assert args.profile == 'strict'
    assert args.quiet is True
    assert args.media_type == 'tv'
    assert args.tv_path == '/media/tv'
    assert args.similarity_percent == 90

def test_parse_arguments_rejects_unknown_type(capsys):
    with pytest.raises(SystemExit):
        cli.parse_arguments(['resolve', 'name', '--type', 'music'])

def test_parse_arguments_rejects_out_of_range_similarity():
    with pytest.raises(SystemExit):
        cli.parse_arguments(['resolve', 'name', '--similarity-percent', '101'])

def test_parse_arguments_config_generate():
    args = cli.parse_arguments(['config', 'generate', '--output', 'out/config.toml', '--force'])
    assert args.command == 'config'
    assert args.config_command == 'generate'
    assert args.output == Path('out/config.toml')
    assert args.force is True

def test_parse_arguments_config_show_with_config_path():
    args = cli.parse_arguments(['--config', 'my.toml', 'config', 'show'])
    assert args.config == Path('my.toml')
    assert args.config_command == 'show'

def test_parse_arguments_missing_command(mocker, reset_argv):
    mocker.patch.object(sys, 'argv', ['namer_main.py'])
    with pytest.raises(SystemExit):
        cli.parse_arguments()

def test_help_message(capsys):
    with pytest.raises(SystemExit):
        cli.parse_arguments(['--help'])
    captured = capsys.readouterr()
    assert 'usage' in captured.out.lower()
    assert 'resolve' in captured.out
    assert 'config' in captured.out
    assert __version__ in captured.out
