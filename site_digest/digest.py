# File: site_digest/digest.py
"""site_digest.digest: результат одного запуска: страницы и итоговая сводка."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from site_digest.crawler.models import Page


@dataclass(slots=True)
class DigestReport:
    """Собранные страницы сайта и (необязательно) текст анализа."""

    start_url: str
    pages: List[Page] = field(default_factory=list)
    summary: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"pages": [p.to_dict() for p in self.pages]}
        if self.summary is not None:
            data["analysis"] = self.summary
        return data

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)
