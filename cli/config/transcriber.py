"""
folio config transcriber commands - Manage transcription backends.
"""

from infra.config import LibraryConfigManager
from infra.config import Config
from infra.transcription import PROVIDER_TYPES


def cmd_transcriber_list(args):
    """List configured transcribers."""
    manager = LibraryConfigManager(Config.book_storage_root)
    config = manager.load()

    print("\n🔎 Transcribers (vision models):\n")
    if not config.transcribers:
        print("  (none configured)\n")
        return

    print(f"{'Name':<20} {'Type':<12} {'Model':<40} {'Host'}")
    print("-" * 90)
    for name, transcriber in config.transcribers.items():
        host = transcriber.host or "-"
        print(f"{name:<20} {transcriber.type:<12} {transcriber.model:<40} {host}")

    print(f"\nDefault transcriber: {config.transcription.transcriber}\n")


def cmd_transcriber_add(args):
    """Add or update a transcriber."""
    manager = LibraryConfigManager(Config.book_storage_root)

    if args.type not in PROVIDER_TYPES:
        print(f"✗ Unknown transcriber type: {args.type}")
        print(f"  Known types: {', '.join(PROVIDER_TYPES)}")
        return

    is_update = args.name in manager.load().transcribers
    manager.add_transcriber(
        name=args.name,
        transcriber_type=args.type,
        model=args.model,
        host=args.host,
        api_key_ref=args.api_key_ref,
    )

    action = "Updated" if is_update else "Added"
    print(f"✓ {action} transcriber: {args.name} ({args.type}, {args.model})")

    if args.default:
        manager.update({"transcription": {"transcriber": args.name}})
        print(f"✓ Default transcriber is now: {args.name}")
