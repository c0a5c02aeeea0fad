# site_binder/report/json_report.py

"""
Генерация JSON-манифеста запуска SiteBinder.

Манифест описывает, какие URL были найдены и какие из них вошли в PDF.
"""
import json
from pathlib import Path
from typing import Any, Dict

from site_binder.engine import CombinedDocument


def manifest(document: CombinedDocument) -> Dict[str, Any]:
    """Словарь с итогами запуска (без байтов PDF)."""
    return {
        'discovered': list(document.discovered),
        'rendered': [
            {
                'url': s.url,
                'title': s.title,
                'pages': s.page_count,
                'fallback': s.fallback,
            }
            for s in document.sources
        ],
        'page_count': document.page_count,
    }


def render_json(document: CombinedDocument, output_path: Path | str) -> Path:
    """
    Сохраняет манифест document в формате JSON по указанному пути.

    :param document: итог DocumentAssembler.assemble
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from site_binder.report.json_report import render_json
    report_path = render_json(document, 'reports/manifest.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    # Запись в файл с отступами и Unicode
    with output.open('w', encoding='utf-8') as f:
        json.dump(manifest(document), f, ensure_ascii=False, indent=2)

    return output
