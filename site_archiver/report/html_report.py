"""site_archiver.report.html_report: HTML index of an archive run, rendered with Jinja2."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from jinja2 import Environment, PackageLoader, select_autoescape

from site_archiver.archive import ArchiveWriter
from site_archiver.crawler.models import PageResult

TEMPLATE_NAME = "report.html.j2"


def _environment() -> Environment:
    return Environment(
        loader=PackageLoader("site_archiver", "templates"),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )


def render_html(
    results: Sequence[PageResult],
    output_path: Union[Path, str],
    writer: Optional[ArchiveWriter] = None,
) -> Path:
    """Render the run summary and save it at *output_path*.

    Args:
        results: PageResult list returned by the crawl.
        output_path: path of the HTML file to write.
        writer: when given, every archived page gets a link to its local
            ``.html`` copy, relative to the report.

    Returns:
        Path to the saved HTML file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    pages: list[dict[str, Any]] = []
    for result in results:
        local = None
        if writer is not None and result.saved.get("html"):
            _, html_path = writer.archive_paths(result.url, create=False)
            local = Path(os.path.relpath(html_path, output_path.parent)).as_posix()
        pages.append({"result": result, "local": local})

    template = _environment().get_template(TEMPLATE_NAME)
    html_content = template.render(
        pages=pages,
        visited=len(results),
        archived=sum(1 for r in results if r.archived),
    )
    output_path.write_text(html_content, encoding="utf-8")

    return output_path
