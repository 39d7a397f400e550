from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from kr_sheet_translator.config.loader import ConfigError, load_config
from kr_sheet_translator.logging.error_log import ErrorLogBuffer
from kr_sheet_translator.logging.init import log_summary, set_debug, setup_logging
from kr_sheet_translator.models.entity_kind import EntityKind
from kr_sheet_translator.services.json_builder import JSONBuilder
from kr_sheet_translator.services.orchestrator import (
    ProcessingError,
    load_translation_results,
    process_sheet,
)
from kr_sheet_translator.services.summary import render_summary_line
from kr_sheet_translator.sheets.parser import SheetStructureError
from kr_sheet_translator.sheets.writer import build_value_ranges, dump_value_ranges
from kr_sheet_translator.store.multi_language import MultiLanguageStore

"""CLI entrypoint.

    python -m kr_sheet_translator.cli --input sheet.xlsx --kind doctor --language en \
        [--translations results.json] [--output ranges.json] [--export bundle.json]

Exit codes: 0 every row processed, 2 some rows failed (decode, translation or
merge), 1 fatal (config, unreadable input, invalid arguments).
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load ``.env`` (e.g. KST_CONFIG) via python-dotenv if present."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="kr_sheet_translator",
        description="Resolve translated values and build multi-language JSON for a Korean sheet",
    )
    p.add_argument("--input", required=True, type=Path, help="Exported sheet (.xlsx or .csv)")
    p.add_argument("--kind", required=True, choices=[k.value for k in EntityKind], help="Record type")
    p.add_argument("--language", required=True, help="Target language code (e.g. en, ja, th)")
    p.add_argument("--sheet", default=None, help="Sheet tab name (default: the language code)")
    p.add_argument("--translations", type=Path, default=None, help="Translation results JSON")
    p.add_argument("--output", type=Path, default=None, help="Write value ranges JSON here")
    p.add_argument("--export", type=Path, default=None, help="Write multi-language export bundle here")
    p.add_argument("--config", type=Path, default=None, help="Config YAML (default: config/translator.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print header & first decoded rows then exit")
    return p.parse_args(argv)


def _inspect_data(args: argparse.Namespace, cfg) -> int:
    from kr_sheet_translator.sheets.parser import decode_all
    from kr_sheet_translator.sheets.reader import read_sheet

    kind = EntityKind.parse(args.kind)
    try:
        sheet = read_sheet(args.input, args.sheet or args.language, header_rows=cfg.header_rows)
    except SheetStructureError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"SHEET: {sheet.sheet_name} headers={sheet.headers} rows={len(sheet.rows)}")
    store = MultiLanguageStore.from_config(cfg)
    decoded = decode_all(
        sheet.rows[:3], kind, args.language, store, first_data_row=cfg.first_data_row
    )
    for row in decoded.rows:
        print(
            f"  row={row.row_number} id={row.id} needs_translation={row.needs_translation} "
            f"manual={row.has_manual_override} mt={row.has_mt_translation} old={row.has_old_values} "
            f"old_json_languages={sorted(store.available_languages(row.old_json_parsed))}"
        )
    for err in decoded.errors:
        print(f"  row={err.row_number} error={err.reason}")
    return 0


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # argv 가 None 일 때만 sys.argv 사용 (테스트에서 [] 전달 가능)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.language not in cfg.languages:
        logger.error(f"invalid language: {args.language} (configured: {', '.join(cfg.languages)})")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(args, cfg)

    kind = EntityKind.parse(args.kind)
    error_log = ErrorLogBuffer()
    try:
        translations = load_translation_results(args.translations) if args.translations else None
        result = process_sheet(
            args.input,
            kind,
            args.language,
            cfg,
            sheet_name=args.sheet,
            translation_results=translations,
            error_log=error_log,
        )
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        error_log.flush()
        return EXIT_FATAL

    if args.output is not None:
        ranges = build_value_ranges(result.sheet_name, result.write_instructions, kind, cfg.columns_for(kind))
        dump_value_ranges(args.output, ranges)
        logger.info(
            f"value ranges written: {args.output} "
            f"(translations={len(ranges['translations'])} json={len(ranges['json'])})"
        )

    if args.export is not None:
        builder = JSONBuilder(MultiLanguageStore.from_config(cfg))
        bundle = builder.build_export_bundle(result.json_results, kind, args.language, cfg.version)
        args.export.parent.mkdir(parents=True, exist_ok=True)
        args.export.write_text(
            json.dumps(bundle, ensure_ascii=False, indent=cfg.json_indent), encoding="utf-8"
        )
        logger.info(f"export written: {args.export} (records={bundle['count']})")

    log_path = error_log.flush()
    if log_path is not None:
        logger.warning(f"row errors logged to {log_path}")

    summary_line = render_summary_line(result)
    # log_summary 가 "SUMMARY " 접두어를 붙이므로 제거
    log_summary(summary_line[len("SUMMARY "):])

    if result.error_count > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
