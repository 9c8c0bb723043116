"""
folio config set - Change one value in config.yaml by dotted path.

    folio config set extraction.max_reissues 15
    folio config set reader.headless true
    folio config set api_keys.openrouter '${OPENROUTER_API_KEY}'
"""

import json
from functools import reduce

from pydantic import ValidationError

from infra.config import Config, LibraryConfigManager

_BOOLEANS = {"true": True, "false": False}


def cmd_config_set(args):
    parts = args.key.split('.')
    if len(parts) < 2:
        print(f"✗ '{args.key}' is a whole section; name a field inside it")
        print("  e.g. 'extraction.max_reissues' or 'api_keys.openrouter'")
        return

    manager = LibraryConfigManager(Config.book_storage_root)
    try:
        config = manager.update(build_update(parts, parse_value(args.value)))
    except ValidationError as e:
        print(f"✗ Rejected {args.key}: {e}")
        return

    stored = config.model_dump()
    for part in parts:
        stored = stored.get(part) if isinstance(stored, dict) else None
    print(f"✓ {args.key} = {stored!r}")


def build_update(parts, value) -> dict:
    """['extraction', 'max_reissues'], 15 -> {'extraction': {'max_reissues': 15}}"""
    return reduce(lambda inner, key: {key: inner}, reversed(parts), value)


def parse_value(raw: str):
    """Interpret a command line string as bool, number, JSON list/object, or plain text."""
    if raw.lower() in _BOOLEANS:
        return _BOOLEANS[raw.lower()]

    number_type = float if '.' in raw else int
    try:
        return number_type(raw)
    except ValueError:
        pass

    if raw[:1] in ('[', '{'):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw

    return raw
