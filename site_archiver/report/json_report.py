# site_archiver/report/json_report.py

"""
Генерация JSON-отчёта о прогоне SiteArchiver.

Сериализация списка PageResult в файл.
"""
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Sequence

from site_archiver.crawler.models import PageResult


def results_to_dicts(results: Sequence[PageResult]) -> List[Dict[str, Any]]:
    """PageResult -> dict, плюс вычисляемое поле ``archived``."""
    rows = []
    for result in results:
        row = asdict(result)
        row["archived"] = result.archived
        rows.append(row)
    return rows


def render_json(results: Sequence[PageResult], output_path: Path | str) -> Path:
    """
    Сохраняет отчёт о прогоне в формате JSON по указанному пути.

    :param results: список PageResult из CrawlEngine
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "pages": results_to_dicts(results),
        "visited": len(results),
        "archived": sum(1 for r in results if r.archived),
    }

    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return output
