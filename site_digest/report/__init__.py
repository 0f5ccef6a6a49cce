# File: site_digest/report/__init__.py
"""site_digest.report: Утилиты для сохранения отчётов (JSON, текст, HTML), используемые CLI."""

from __future__ import annotations

from site_digest.report.html_report import DEFAULT_TEMPLATE_DIR, render_html
from site_digest.report.json_report import render_json, render_summary

__all__ = ["DEFAULT_TEMPLATE_DIR", "render_json", "render_summary", "render_html"]
