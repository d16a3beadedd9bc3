import json
from typing import Any

SEVERITY_NAMES = {1: "error", 2: "warning", 3: "info", 4: "hint"}


def format_output(data: Any, output_format: str = "plain") -> str:
    if output_format == "json":
        return json.dumps(data, indent=2)
    return format_plain(data)


def format_plain(data: Any) -> str:
    if data is None:
        return ""

    if isinstance(data, str):
        return data

    if isinstance(data, dict):
        if "error" in data:
            return f"Error: {data['error']}"

        if "contents" in data:
            return data["contents"] or "No information available"

        if "edits" in data and "new_name" in data:
            return format_rename(data)

        if "path" in data and "line" in data:
            return format_location(data)

        return json.dumps(data, indent=2)

    if isinstance(data, list):
        if not data:
            return "No results"

        first = data[0]

        if "severity" in first and "message" in first:
            return format_diagnostics(data)

        if "kind" in first and "name" in first:
            return format_symbols(data)

        if "path" in first and "line" in first:
            return format_locations(data)

    return json.dumps(data, indent=2)


def format_location(loc: dict) -> str:
    text = loc.get("text")
    prefix = f"{loc['path']}:{loc['line']}:{loc.get('column', 0)}"
    if text is None:
        return prefix
    return f"{prefix}: {text.strip()}"


def format_locations(locations: list[dict]) -> str:
    return "\n".join(format_location(loc) for loc in locations)


def format_symbols(symbols: list[dict]) -> str:
    lines = []
    for sym in symbols:
        lines.append(f"{sym['path']}:{sym['line']}:{sym.get('column', 0)} [{sym['kind']}] {sym['name']}")
    return "\n".join(lines)


def format_diagnostics(diagnostics: list[dict]) -> str:
    lines = []
    for diag in diagnostics:
        severity = diag["severity"]
        if isinstance(severity, int):
            severity = SEVERITY_NAMES.get(severity, "unknown")
        source = f" [{diag['source']}]" if diag.get("source") else ""
        lines.append(f"{diag['path']}:{diag['line']}:{diag.get('column', 0)}: {severity}: {diag['message']}{source}")
    return "\n".join(lines)


def format_rename(data: dict) -> str:
    edits = data["edits"]
    if not edits:
        return f"No occurrences to rename to {data['new_name']}"

    verb = "Renamed" if data.get("written") else "Would rename"
    lines = [f"{verb} {len(edits)} occurrence(s) to {data['new_name']}:"]
    for edit in edits:
        lines.append(f"  {format_location(edit)}")
    return "\n".join(lines)
