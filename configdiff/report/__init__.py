"""Report rendering: HTML report and JSON export of diffed items."""

from configdiff.report.export import export_json
from configdiff.report.renderer import Report, render, render_rows

__all__ = ["Report", "export_json", "render", "render_rows"]
