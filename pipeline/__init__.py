"""
Folio pipeline stages.

1. extract - drive the web reader, screenshot every content page, write metadata.json
2. transcribe - turn each screenshot into text with a vision model, write content.json
"""
