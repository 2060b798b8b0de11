"""JSON formatter for memscope."""

import json

from ..query import estimated_total_kb
from ..scanning.models import ScanResult
from .base import BaseFormatter, ReportView


class JsonFormatter(BaseFormatter):
    """Render a scan result as JSON."""

    def render(self, result: ScanResult, view: ReportView) -> None:
        print(self.format(result, view))

    def format(self, result: ScanResult, view: ReportView) -> str:
        data = result.to_dict()
        data["root"] = view.root
        data["declarations"] = [d.to_dict() for d in view.shown]
        if view.rss_kb is not None:
            data["rss_kb"] = view.rss_kb
            data["estimated_total_kb"] = estimated_total_kb(view.rss_kb, result.total_size)
        if view.search or view.kinds or view.top_n is not None:
            data["filter"] = {
                "search": view.search,
                "kinds": list(view.kinds),
                "top": view.top_n,
                "matched": len(view.declarations),
            }
        return json.dumps(data, indent=2)
