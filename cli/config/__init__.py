"""
Config CLI commands.

Commands for managing the library configuration file.
"""

from cli.config.init import cmd_init
from cli.config.show import cmd_config_show
from cli.config.set import cmd_config_set
from cli.config.transcriber import cmd_transcriber_add, cmd_transcriber_list


def setup_parser(subparsers):
    """Setup config command parser."""
    config_parser = subparsers.add_parser(
        'config',
        help='Manage library configuration'
    )
    config_subparsers = config_parser.add_subparsers(
        dest='config_command',
        help='Config command'
    )
    config_subparsers.required = True

    # folio config init
    init_parser = config_subparsers.add_parser(
        'init',
        help='Create config.yaml with defaults'
    )
    init_parser.add_argument(
        '--force',
        action='store_true',
        help='Overwrite existing config'
    )
    init_parser.set_defaults(func=cmd_init)

    # folio config show
    show_parser = config_subparsers.add_parser(
        'show',
        help='Show library configuration'
    )
    show_parser.add_argument(
        '--json',
        action='store_true',
        help='Output as JSON'
    )
    show_parser.add_argument(
        '--reveal-keys',
        action='store_true',
        help='Show API key values (default: hidden)'
    )
    show_parser.set_defaults(func=cmd_config_show)

    # folio config set <key> <value>
    set_parser = config_subparsers.add_parser(
        'set',
        help='Set a configuration value'
    )
    set_parser.add_argument(
        'key',
        help='Config key (e.g., extraction.max_reissues, api_keys.openrouter)'
    )
    set_parser.add_argument(
        'value',
        help='Value to set'
    )
    set_parser.set_defaults(func=cmd_config_set)

    # folio config transcriber ...
    transcriber_parser = config_subparsers.add_parser(
        'transcriber',
        help='Manage transcription backends'
    )
    transcriber_subparsers = transcriber_parser.add_subparsers(
        dest='transcriber_command',
        help='Transcriber command'
    )
    transcriber_subparsers.required = True

    transcriber_list_parser = transcriber_subparsers.add_parser(
        'list',
        help='List configured transcribers'
    )
    transcriber_list_parser.set_defaults(func=cmd_transcriber_list)

    transcriber_add_parser = transcriber_subparsers.add_parser(
        'add',
        help='Add or update a transcriber'
    )
    transcriber_add_parser.add_argument(
        'name',
        help='Transcriber name (e.g., llava, gemini-flash)'
    )
    transcriber_add_parser.add_argument(
        '--type',
        required=True,
        help='Backend type (ollama, openrouter)'
    )
    transcriber_add_parser.add_argument(
        '--model',
        required=True,
        help='Model identifier'
    )
    transcriber_add_parser.add_argument(
        '--host',
        help='Endpoint override'
    )
    transcriber_add_parser.add_argument(
        '--api-key-ref',
        help='Name of the api_keys entry to use (default: the type)'
    )
    transcriber_add_parser.add_argument(
        '--default',
        action='store_true',
        help='Make this the default transcriber'
    )
    transcriber_add_parser.set_defaults(func=cmd_transcriber_add)


__all__ = [
    'setup_parser',
    'cmd_init',
    'cmd_config_show',
    'cmd_config_set',
    'cmd_transcriber_add',
    'cmd_transcriber_list',
]
