"""HTML report rendering for diffed configuration items.

The report is a single table intended for an email body: one header row per
item, followed either by a "(New Item)" dump of the whole record or by one
row per changed field. Composite fields render as titled groups, nested in
the same shape as the Diff Node.
"""

from __future__ import annotations

import html
import json
import posixpath
import re
from collections.abc import Iterable, Mapping
from typing import NamedTuple

import structlog

from configdiff.errors import CollationError
from configdiff.models.config import ConfigDiffConfig, RenderConfig
from configdiff.models.records import DiffedItem, DiffNode, JSONValue, Record
from configdiff.report.worddiff import word_diff

_log = structlog.get_logger(component="report.renderer")

BLANK_ROW = '<tr><td class="blank" colspan=4>&nbsp;</td></tr>\n'
BLANK_COL = '<td class="blank">&nbsp;</td>'
HEADER_ROW = '<tr><td class="blank">&nbsp;</td><th>Property</th><th>Previous</th><th>Current</th></tr>\n'
INDENT = "&nbsp;&nbsp;"
ABSENT = "[]"
NEW_ITEM_LABEL = " (New Item)"
SUPPRESSED = "<em>long output suppressed</em>"

_STYLE = """<style>
  table {border-collapse: collapse;}
  td, th {border: 1px solid Black;}
  th {background: LightGray;}
  tr:nth-child(even) {background: #F3F3F3;}
  tr:nth-child(odd) {background: White;}
  .resource {background-color: RoyalBlue; color: White; font-weight: bold;}
  .blank {background-color: White; border: none;}
  .group {background-color: LightBlue;}
  del.removed {background: #FFD7D5; text-decoration: line-through;}
  ins.added {background: #D4F8D4; text-decoration: none;}
</style>"""

_KEY = re.compile(r'"(\w+)":')


class Report(NamedTuple):
    """Rendered report and whether any item in the batch changed."""

    html: str
    any_changes: bool


def _compact(value: JSONValue) -> str:
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise CollationError(f"value is not serializable: {exc}", type(value).__name__) from exc


def _display_name(record: Mapping[str, object]) -> str:
    name = record.get("resourceName")
    if name is None or name == "":
        name = record.get("resourceId", "")
    return html.escape(str(name), quote=False)


def _item_header(record: Mapping[str, object], suffix: str = "") -> str:
    kind = html.escape(str(record.get("resourceType", "")), quote=False)
    return (
        f'<tr><td class="resource" colspan=2>{_display_name(record)}</td>'
        f'<td class="resource" colspan=2>{kind}{suffix}</td></tr>\n'
    )


def _new_item_dump(record: Record) -> str:
    text = json.dumps(record, indent="\t", sort_keys=True, ensure_ascii=False)
    text = html.escape(text, quote=False).replace("\t", INDENT)
    text = _KEY.sub(lambda m: f"<strong>{m.group(0)}</strong>", text)
    text = text.replace("\n", "<br />\n")
    return f"<tr><td>&nbsp;</td><td colspan=3>{text}</td></tr>\n"


def field_row(key: str, old: JSONValue, new: JSONValue, cfg: RenderConfig, present: bool = True) -> str:
    """One Property/Previous/Current row, sized by the configured thresholds.

    A previous value of ``None`` and a current value with ``present=False``
    both mean the key is absent on that side and render as ``[]``.
    """
    a = ABSENT if old is None else _compact(old)
    b = _compact(new) if present else ABSENT
    name = html.escape(key, quote=False)
    if len(a) <= cfg.short_field_len and len(b) <= cfg.short_field_len:
        return (
            f"<tr>{BLANK_COL}<th>{name}</th>"
            f"<td>{html.escape(a, quote=False)}</td><td>{html.escape(b, quote=False)}</td></tr>\n"
        )
    if len(a) <= cfg.long_field_len and len(b) <= cfg.long_field_len:
        return f"<tr>{BLANK_COL}<th>{name}</th><td colspan=2>{word_diff(a, b)}</td></tr>\n"
    return f'<tr>{BLANK_COL}<th>{name}</th><td colspan=2 align="center">{SUPPRESSED}</td></tr>\n'


def render_diff(node: DiffNode, current: Mapping[str, JSONValue], cfg: RenderConfig, group: str = "", depth: int = 0) -> str:
    """Render *node* against the *current* values it was computed from.

    Plain changes come first, sorted by key, then each nested group.
    """
    if not group:
        out = [BLANK_ROW, HEADER_ROW]
    else:
        title = INDENT * max(depth - 1, 0) + html.escape(group, quote=False)
        out = [f'<tr>{BLANK_COL}<th class="group" colspan="3">{title}</th></tr>\n']

    for key in sorted(node.changes):
        out.append(field_row(key, node.changes[key], current.get(key), cfg, present=key in current))

    for key in sorted(node.children):
        sub = current.get(key)
        out.append(render_diff(node.children[key], sub if isinstance(sub, dict) else {}, cfg, key, depth + 1))

    return "".join(out)


def render_rows(items: Iterable[DiffedItem], config: ConfigDiffConfig | None = None) -> str:
    """Render the table rows for every changed or new item, in input order."""
    cfg = (config or ConfigDiffConfig()).render
    out: list[str] = []
    for item in items:
        if item.diff is None:
            out.append(BLANK_ROW)
            out.append(_item_header(item.record, NEW_ITEM_LABEL))
            out.append(_new_item_dump(item.record))
        elif item.diff:
            out.append(BLANK_ROW)
            out.append(_item_header(item.record))
            out.append(render_diff(item.diff, item.record, cfg))
    return "".join(out)


def reference_name(reference: object | None) -> str:
    """Short display name of the snapshot reference (object key base name)."""
    if reference is None:
        return "(none)"
    if isinstance(reference, Mapping) and "Key" in reference:
        reference = reference["Key"]
    if isinstance(reference, str):
        return posixpath.basename(reference) or reference
    return str(reference)


def render(
    items: Iterable[DiffedItem],
    reference: object | None = None,
    title: str | None = None,
    config: ConfigDiffConfig | None = None,
) -> Report:
    """Render a self-contained HTML report for *items*.

    ``any_changes`` is False when no item is new and every Diff Node is
    empty; callers use it to skip notification entirely.
    """
    cfg = config or ConfigDiffConfig()
    batch = list(items)
    heading = html.escape(title or cfg.render.title, quote=False)
    rows = render_rows(batch, cfg)
    any_changes = any(item.has_changes for item in batch)

    document = f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8" />
<title>{heading}</title>
{_STYLE}
</head>
<body>
<h1>{heading}</h1>
<table>
<tr><td class="resource">Snapshot</td><td colspan=3>{html.escape(reference_name(reference), quote=False)}</td></tr>
{rows}</table>
</body>
</html>
"""
    _log.info(
        "report_rendered",
        items=len(batch),
        rendered=sum(1 for item in batch if item.has_changes),
        any_changes=any_changes,
    )
    return Report(html=document, any_changes=any_changes)
