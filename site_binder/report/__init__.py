# File: site_binder/report/__init__.py
"""site_binder.report: JSON-манифест запуска, используемый CLI и тестами."""

from site_binder.report.json_report import manifest, render_json

__all__ = ["manifest", "render_json"]
