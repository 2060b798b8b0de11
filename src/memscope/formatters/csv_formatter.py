"""CSV formatter for memscope."""

import csv
import io

from ..query import ranked_groups
from ..scanning.models import ScanResult
from .base import BaseFormatter, ReportView


class CsvFormatter(BaseFormatter):
    """Render declarations (or groups) as CSV."""

    def render(self, result: ScanResult, view: ReportView) -> None:
        print(self.format(result, view), end="")

    def format(self, result: ScanResult, view: ReportView) -> str:
        output = io.StringIO()
        writer = csv.writer(output)
        if view.show_groups:
            writer.writerow(["kind", "type", "count", "total_size"])
            for key, summary in ranked_groups(result):
                writer.writerow([key.kind.value, key.type_label, summary.count, summary.total_size])
            return output.getvalue()

        writer.writerow([
            "name", "kind", "type", "qualifier",
            "stack_size", "heap_size", "total",
            "file", "line",
        ])
        for d in view.shown:
            writer.writerow([
                d.name, d.kind.value, d.type_label, d.qualifier,
                d.stack_size, d.heap_size, d.total,
                d.file, d.line,
            ])
        return output.getvalue()
