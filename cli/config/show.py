"""
folio config show - Print the effective library configuration.

API keys are resolved (``${ENV_VAR}`` expanded) and masked unless
--reveal-keys is given.
"""

import json

from infra.config import Config, LibraryConfigManager

SETTINGS_SECTIONS = ("reader", "extraction", "transcription")


def mask_key(value: str) -> str:
    if not value:
        return "(not set)"
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}...{value[-4:]}"


def cmd_config_show(args):
    manager = LibraryConfigManager(Config.book_storage_root)
    if not manager.exists():
        print(f"○ No config at {manager.config_path} (showing defaults)")
        print("  Run 'folio config init' to create one")

    config = manager.load()

    def key_display(name):
        resolved = config.resolve_api_key(name)
        if args.reveal_keys:
            return resolved or "(not set)"
        return mask_key(resolved)

    if args.json:
        data = config.model_dump()
        data['api_keys'] = {name: key_display(name) for name in config.api_keys}
        print(json.dumps(data, indent=2, default=str))
        return

    print("\n📋 Library Configuration")
    print(f"   Path: {manager.config_path}\n")

    print("API Keys:")
    for name in config.api_keys:
        print(f"  {name}: {key_display(name)}")

    print("\nTranscribers:")
    for name, transcriber in config.transcribers.items():
        marker = "★" if name == config.transcription.transcriber else " "
        line = f"  {marker} {name}: type={transcriber.type} model={transcriber.model}"
        if transcriber.host:
            line += f" host={transcriber.host}"
        print(line)

    for section in SETTINGS_SECTIONS:
        print(f"\n{section.capitalize()}:")
        for key, value in getattr(config, section).model_dump().items():
            print(f"  {key}: {value}")
    print()
