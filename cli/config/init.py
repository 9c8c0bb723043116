"""
folio config init - Write a default config.yaml into the storage root.
"""

from infra.config import Config, LibraryConfig, LibraryConfigManager


def cmd_init(args):
    storage_root = Config.book_storage_root
    manager = LibraryConfigManager(storage_root)

    if manager.exists() and not args.force:
        print(f"✗ {manager.config_path} already exists (use --force to overwrite)")
        return

    config = LibraryConfig.with_defaults()
    manager.save(config)
    print(f"✓ Created config at: {manager.config_path}")

    credentials = "configured" if Config.has_credentials else "not set (AMAZON_EMAIL / AMAZON_PASSWORD)"
    print("\nConfiguration summary:")
    print(f"  Storage root: {storage_root}")
    print(f"  Default transcriber: {config.transcription.transcriber}")
    print(f"  Transcription workers: {config.transcription.max_workers}")
    print(f"  Reader credentials: {credentials}")

    print("\nAPI keys:")
    for name, reference in config.api_keys.items():
        if config.resolve_api_key(name):
            print(f"  ✓ {name}: configured")
        else:
            print(f"  ○ {name}: not set (reads {reference})")

    print("\nTranscribers:")
    for name, transcriber in config.transcribers.items():
        print(f"  {name}: {transcriber.type} ({transcriber.model})")
