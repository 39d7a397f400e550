"""Korean spreadsheet translation helper.

Decodes fixed-layout Doctor/Hospital sheet rows, resolves the authoritative
translated values per row and merges them into the per-row multi-language
JSON blob that is written back to the sheet.
"""

__version__ = "2.0.0"
