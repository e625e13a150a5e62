"""scxforge command line.

Inspect scenario files, convert them between editions and pull out the
embedded preview image.

Usage:
    scxforge inspect <scenario>
    scxforge convert <input> <output> [--to TOKEN] [--remap]
    scxforge editions
    scxforge export-bitmap <scenario> <output.png>

Output formats (before the command):
    --format table    (default, human-readable)
    --format json     (machine-readable)
    --format yaml
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import List, Optional

from .convert.engine import convert
from .convert.remap import auto_remapping, remap_ids
from .core.file_operations import ScenarioWriter
from .errors import ScenarioError
from .formats.scx.edition import Edition, capabilities
from .formats.scx.model import DLCPackage, Scenario
from .formats.scx.scenario_file import read_file
from .settings import CodecSettings, load_settings
from .utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """A command failed in a way that should be reported, not traced."""


def load_scenario(path: str) -> Scenario:
    """Load a scenario file, turning failures into CommandError."""
    try:
        return read_file(path)
    except (ScenarioError, OSError) as e:
        raise CommandError(f"Failed to load {path}: {e}") from e


# ─────────────────────────────────────────────────────────────
# OUTPUT
# ─────────────────────────────────────────────────────────────

def _yaml_scalar(value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(str(value), ensure_ascii=False)


def format_yaml(data, indent: int = 0) -> str:
    """Render nested dicts and lists as block YAML."""
    pad = "  " * indent
    lines = []
    if isinstance(data, dict):
        for key, value in data.items():
            if isinstance(value, (dict, list)) and value:
                lines.append(f"{pad}{key}:")
                lines.append(format_yaml(value, indent + 1))
            elif isinstance(value, (dict, list)):
                lines.append(f"{pad}{key}: {'{}' if isinstance(value, dict) else '[]'}")
            else:
                lines.append(f"{pad}{key}: {_yaml_scalar(value)}")
    else:
        for item in data:
            if isinstance(item, dict) and item:
                body = format_yaml(item, indent + 1).lstrip()
                lines.append(f"{pad}- {body}")
            else:
                lines.append(f"{pad}- {_yaml_scalar(item)}")
    return "\n".join(lines)


def emit(data: dict, fmt: str, table: str):
    if fmt == "json":
        print(json.dumps(data, indent=2, ensure_ascii=False))
    elif fmt == "yaml":
        print(format_yaml(data))
    else:
        print(table)


# ─────────────────────────────────────────────────────────────
# COMMANDS
# ─────────────────────────────────────────────────────────────

def describe(scenario: Scenario, path: str = "") -> dict:
    """Summary of a scenario for display."""
    header = scenario.header
    dlc = header.dlc_options
    return {
        "file": path,
        "edition": scenario.edition.name.lower(),
        "token": scenario.edition.token,
        "header_version": header.version,
        "timestamp": header.timestamp,
        "description": header.description,
        "author": header.author_name,
        "dlc": None if dlc is None else {
            "version": dlc.version,
            "data_set": dlc.data_set.name.lower(),
            "dependencies": [p.name.lower() for p in DLCPackage if scenario.requires_dlc(p)],
        },
        "map": {"width": scenario.map.width, "height": scenario.map.height},
        "players": [
            {
                "slot": i + 1,
                "name": p.name,
                "civilization": p.civilization,
                "active": p.active,
                "human": p.human,
                "objects": len(p.objects),
            }
            for i, p in enumerate(scenario.players)
        ],
        "active_players": len(scenario.active_players),
        "triggers": len(scenario.triggers),
        "ai_files": [f.filename for f in scenario.ai_info.files],
        "bitmap": None if scenario.bitmap.is_empty else {
            "width": scenario.bitmap.width, "height": scenario.bitmap.height,
        },
    }


def cmd_inspect(args, settings: CodecSettings) -> int:
    """Show what a scenario file contains."""
    scenario = load_scenario(args.file)
    info = describe(scenario, args.file)

    lines = [f"Scenario: {args.file}"]
    lines.append(f"Edition: {info['edition']} ({info['token']})  |  header v{info['header_version']}")
    lines.append(f"Map: {scenario.map.width}x{scenario.map.height}  |  "
                 f"Triggers: {info['triggers']}  |  AI files: {len(info['ai_files'])}")
    if info["bitmap"]:
        lines.append(f"Preview: {scenario.bitmap.width}x{scenario.bitmap.height}")
    if info["dlc"]:
        deps = ", ".join(info["dlc"]["dependencies"]) or "none"
        lines.append(f"DLC: data set {info['dlc']['data_set']}  |  requires {deps}")
    if scenario.header.description.strip():
        lines.append(f"\n{scenario.header.description.strip()}")
    lines.append(f"\nPLAYERS ({info['active_players']} active)")
    lines.append("─" * 50)
    for p in info["players"]:
        kind = "human" if p["human"] else "computer"
        state = kind if p["active"] else "inactive"
        lines.append(f"  [{p['slot']}] {p['name']:<25} civ {p['civilization']:>2}  "
                     f"{p['objects']:>4} objects  ({state})")

    emit(info, args.format, "\n".join(lines))
    return 0


def cmd_convert(args, settings: CodecSettings) -> int:
    """Convert a scenario to another edition."""
    scenario = load_scenario(args.input)
    source = scenario.edition
    token = args.to or settings.default_target
    try:
        target = Edition.from_token(token) if token else source
    except ScenarioError as e:
        raise CommandError(str(e)) from e

    try:
        result = convert(scenario, target)
    except ScenarioError as e:
        raise CommandError(f"Cannot convert {source} -> {target}: {e}") from e

    remapped = None
    if args.remap:
        mapping = auto_remapping(source)
        if target != Edition.COMMUNITY_PATCHED:
            logger.warning(f"--remap only applies when converting to {Edition.COMMUNITY_PATCHED}, "
                           f"ids left unchanged for {target}")
        elif mapping is None:
            logger.warning(f"No id remapping defined for {source} scenarios")
        else:
            remapped = asdict(remap_ids(result.scenario, mapping))

    writer = ScenarioWriter(create_backup=settings.create_backup, level=settings.compression_level)
    outcome = writer.write(result.scenario, args.output)
    if not outcome.success:
        raise CommandError(outcome.message)

    notes = [str(n) for n in result.notes]
    for note in notes:
        logger.warning(f"Lossy conversion: {note}")
    info = {
        "input": args.input,
        "output": outcome.path,
        "source": source.token,
        "target": target.token,
        "lossy": result.lossy,
        "notes": notes,
        "remapped": remapped,
        "backup": outcome.backup_path,
    }
    lines = [f"{args.input} ({source.token}) -> {outcome.path} ({target.token})", outcome.message]
    lines.extend(f"  lossy: {note}" for note in notes)
    if remapped:
        lines.append(f"  remapped: {remapped['objects']} objects, {remapped['tiles']} tiles, "
                     f"{remapped['trigger_properties']} trigger properties")
    emit(info, args.format, "\n".join(lines))
    return 0


def cmd_editions(args, settings: CodecSettings) -> int:
    """List supported editions and what each one can store."""
    rows = []
    for edition in Edition:
        caps = capabilities(edition)
        row = {"edition": edition.name.lower(), "token": edition.token,
               "tag": edition.tag.decode("ascii")}
        row.update(asdict(caps))
        row["compression_variant"] = caps.compression_variant.value
        rows.append(row)

    lines = [f"{'TOKEN':<6} {'TAG':<5} {'PLAYERS':>7}  {'LAYER':>5}  TRIGGERS  AI   BITMAP  EDITION"]
    lines.append("─" * 70)
    for row in rows:
        lines.append(f"{row['token']:<6} {row['tag']:<5} {row['max_players']:>7}  "
                     f"{row['tile_layer_width']:>5}  {'yes' if row['supports_triggers'] else 'no':<8}  "
                     f"{'yes' if row['supports_ai_info'] else 'no':<3}  "
                     f"{'yes' if row['supports_bitmap'] else 'no':<6}  {row['edition']}")
    emit({"editions": rows}, args.format, "\n".join(lines))
    return 0


def cmd_export_bitmap(args, settings: CodecSettings) -> int:
    """Save the embedded preview image as PNG."""
    from .formats.scx.preview import export_png

    scenario = load_scenario(args.file)
    if scenario.bitmap.is_empty:
        raise CommandError(f"{args.file} has no preview bitmap")
    path = export_png(scenario.bitmap, args.output)
    emit({"file": args.file, "output": str(path),
          "width": scenario.bitmap.width, "height": scenario.bitmap.height},
         args.format, f"Exported {scenario.bitmap.width}x{scenario.bitmap.height} preview to {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="scxforge",
        description="Inspect and convert scenario files between game editions.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Edition tokens: " + ", ".join(e.token for e in Edition),
    )
    parser.add_argument("--format", choices=["table", "json", "yaml"],
                        default="table", help="Output format (default: table)")
    parser.add_argument("--log-level", default=None,
                        help="Log level (debug, info, warning, error)")
    parser.add_argument("--config", default=None,
                        help="Settings file (default: ./.scxforge.json)")

    sub = parser.add_subparsers(dest="command", help="Command to run")

    # inspect
    p = sub.add_parser("inspect", help="Summarize a scenario file")
    p.add_argument("file", help="Scenario file")

    # convert
    p = sub.add_parser("convert", help="Convert a scenario to another edition")
    p.add_argument("input", help="Scenario to read")
    p.add_argument("output", help="Scenario to write")
    p.add_argument("--to", choices=[e.token for e in Edition],
                   help="Target edition (default: settings, else keep)")
    p.add_argument("--remap", action="store_true",
                   help="Rewrite unit and terrain ids for the community patch (with --to wk only)")

    # editions
    sub.add_parser("editions", help="List supported editions")

    # export-bitmap
    p = sub.add_parser("export-bitmap", help="Export the preview image as PNG")
    p.add_argument("file", help="Scenario file")
    p.add_argument("output", help="PNG file to write")

    return parser


COMMANDS = {
    "inspect": cmd_inspect,
    "convert": cmd_convert,
    "editions": cmd_editions,
    "export-bitmap": cmd_export_bitmap,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError, ScenarioError) as e:
        print(f"ERROR: Bad settings file: {e}", file=sys.stderr)
        return 2
    try:
        configure_logging(args.log_level or settings.log_level)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    try:
        return COMMANDS[args.command](args, settings)
    except CommandError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
