# site_digest/report/json_report.py

"""
Генерация JSON- и текстового отчёта для проекта SiteDigest.
"""
import json
from pathlib import Path

from site_digest.digest import DigestReport
from site_digest.logger import logger


def render_json(report: DigestReport, output_path: Path | str) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: объект DigestReport со страницами и анализом
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from site_digest.report.json_report import render_json
    report_path = render_json(report, 'reports/result.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(report.to_dict(), f, ensure_ascii=False, indent=2)

    logger.info("JSON report saved: %s", output)
    return output


def render_summary(report: DigestReport, output_path: Path | str) -> Path:
    """Сохраняет текст анализа в файл; без анализа бросает ValueError."""
    if report.summary is None:
        raise ValueError("report has no summary to save")
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(report.summary, encoding='utf-8')
    logger.info("Summary saved: %s", output)
    return output
