def snapshot_padding(total: int) -> int:
    """Digits used for both index and page so names sort in capture order."""
    return len(str(total * 2))


def snapshot_filename(index: int, page: int, padding: int) -> str:
    return f"{index:0{padding}d}-{page:0{padding}d}.png"
