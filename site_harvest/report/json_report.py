# site_harvest/report/json_report.py

"""
JSON crawl summary for SiteHarvest.

Serializes a CrawlReport (pages saved, empty pages, failures) into a file.
"""
import json
from pathlib import Path

from site_harvest.crawler.models import CrawlReport


def render_json(report: CrawlReport, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Save *report* as JSON at *output_path* and return the path.

    Example:
    ```python
    from site_harvest.report.json_report import render_json
    report_path = render_json(outcome.report, 'reports/crawl.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(report.summary(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
