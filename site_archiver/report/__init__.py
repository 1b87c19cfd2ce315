# File: site_archiver/report/__init__.py
"""site_archiver.report: crawl summaries (JSON and HTML) written by the CLI."""

from site_archiver.report.html_report import render_html
from site_archiver.report.json_report import render_json

__all__ = ["render_json", "render_html"]
