"""Report generation for analysis runs (JSON and HTML)."""

import html
import json
from datetime import datetime
from pathlib import Path
from typing import Any

from tshealth.health.models import HealthLevel, RunSummary


def generate_json_report(summary: RunSummary, pretty: bool = True) -> str:
    """Generate a JSON report.

    Args:
        summary: Run summary to serialize
        pretty: Whether to pretty-print the JSON

    Returns:
        JSON string
    """
    data = summary.to_dict()
    if pretty:
        return json.dumps(data, indent=2, default=_json_serializer)
    return json.dumps(data, default=_json_serializer)


def save_json_report(summary: RunSummary, output_path: Path) -> None:
    """Save a JSON report to a file.

    Args:
        summary: Run summary to serialize
        output_path: Path to save the report
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(generate_json_report(summary), encoding="utf-8")


def generate_html_report(summary: RunSummary) -> str:
    """Generate an HTML report.

    Args:
        summary: Run summary to render

    Returns:
        HTML string
    """
    distribution_rows = ""
    for level, count in summary.distribution.items():
        distribution_rows += f"""
        <tr>
            <td class="{level.value}">{level.emoji} {level.value.title()}</td>
            <td>{count}</td>
            <td>{summary.percentage(level):.1f}%</td>
        </tr>
        """

    # Worst files first
    ranked = sorted(
        summary.successes,
        key=lambda o: (o.health_level.rank if o.health_level else 0, o.complexity or 0),
        reverse=True,
    )
    file_rows = ""
    for outcome in ranked:
        level = outcome.health_level or HealthLevel.CRITICAL
        mode = "heuristic" if outcome.fallback else "structural"
        file_rows += f"""
        <tr>
            <td>{html.escape(outcome.file_path)}</td>
            <td class="{level.value}">{level.value}</td>
            <td>{outcome.complexity}</td>
            <td>{outcome.maintainability:.1f}</td>
            <td>{mode}</td>
        </tr>
        """

    recs_html = ""
    for rec in summary.recommendations:
        recs_html += (
            f"<li><code>{html.escape(rec['filePath'])}</code>: {html.escape(rec['message'])}</li>\n"
        )

    errors_html = ""
    if summary.failures:
        error_rows = ""
        for outcome in summary.failures:
            error_rows += f"""
            <tr>
                <td>{html.escape(outcome.file_path)}</td>
                <td>{html.escape(outcome.error or 'unknown error')}</td>
            </tr>
            """
        errors_html = f"""
        <section class="errors">
            <h2>Errors ({summary.errors})</h2>
            <table>
                <thead>
                    <tr>
                        <th>File</th>
                        <th>Error</th>
                    </tr>
                </thead>
                <tbody>
                    {error_rows}
                </tbody>
            </table>
        </section>
        """

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>tshealth Report</title>
    <style>
        :root {{
            --color-excellent: #22c55e;
            --color-good: #06b6d4;
            --color-fair: #eab308;
            --color-poor: #f97316;
            --color-critical: #ef4444;
        }}
        * {{ box-sizing: border-box; margin: 0; padding: 0; }}
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            line-height: 1.6;
            color: #1f2937;
            background: #f9fafb;
            padding: 2rem;
        }}
        .container {{ max-width: 1200px; margin: 0 auto; }}
        h1 {{ margin-bottom: 0.5rem; }}
        h2 {{ margin: 2rem 0 1rem; border-bottom: 2px solid #e5e7eb; padding-bottom: 0.5rem; }}
        .stats {{ display: flex; gap: 1rem; margin: 1.5rem 0; }}
        .stat {{
            background: white;
            border-radius: 12px;
            padding: 1rem 1.5rem;
            box-shadow: 0 1px 3px rgba(0,0,0,0.1);
        }}
        .stat .value {{ font-size: 2rem; font-weight: bold; }}
        .stat .label {{ color: #6b7280; }}
        table {{ width: 100%; border-collapse: collapse; background: white; border-radius: 8px; overflow: hidden; box-shadow: 0 1px 3px rgba(0,0,0,0.1); }}
        th, td {{ padding: 0.75rem 1rem; text-align: left; border-bottom: 1px solid #e5e7eb; }}
        th {{ background: #f3f4f6; font-weight: 600; }}
        tr:last-child td {{ border-bottom: none; }}
        .excellent {{ color: var(--color-excellent); font-weight: 600; }}
        .good {{ color: var(--color-good); font-weight: 600; }}
        .fair {{ color: var(--color-fair); font-weight: 600; }}
        .poor {{ color: var(--color-poor); font-weight: 600; }}
        .critical {{ color: var(--color-critical); font-weight: 600; }}
        .errors td {{ background: #fef2f2; }}
        .recommendations {{ background: white; border-radius: 8px; padding: 1.5rem; box-shadow: 0 1px 3px rgba(0,0,0,0.1); }}
        .recommendations ul {{ padding-left: 1.5rem; }}
        .recommendations li {{ margin: 0.5rem 0; }}
        .meta {{ color: #6b7280; font-size: 0.875rem; margin-top: 2rem; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>tshealth Report</h1>
        <p>{html.escape(str(summary.target))}</p>

        <div class="stats">
            <div class="stat"><div class="value">{summary.total}</div><div class="label">Files analyzed</div></div>
            <div class="stat"><div class="value">{summary.errors}</div><div class="label">Errors</div></div>
            <div class="stat"><div class="value">{summary.average_complexity}</div><div class="label">Avg. complexity</div></div>
            <div class="stat"><div class="value">{summary.average_maintainability}</div><div class="label">Avg. maintainability</div></div>
        </div>

        <section>
            <h2>Health Distribution</h2>
            <table>
                <thead>
                    <tr>
                        <th>Tier</th>
                        <th>Files</th>
                        <th>Share</th>
                    </tr>
                </thead>
                <tbody>
                    {distribution_rows}
                </tbody>
            </table>
        </section>

        <section class="recommendations">
            <h2>Recommendations</h2>
            <ul>
                {recs_html if recs_html else "<li>No recommendations - every file is within limits!</li>"}
            </ul>
        </section>

        <section>
            <h2>Files ({summary.total})</h2>
            <table>
                <thead>
                    <tr>
                        <th>File</th>
                        <th>Tier</th>
                        <th>Complexity</th>
                        <th>Maintainability</th>
                        <th>Analysis</th>
                    </tr>
                </thead>
                <tbody>
                    {file_rows if file_rows else "<tr><td colspan='5'>No files analyzed</td></tr>"}
                </tbody>
            </table>
        </section>

        {errors_html}

        <p class="meta">
            Generated by tshealth on {summary.started_at.strftime('%Y-%m-%d %H:%M:%S')}
        </p>
    </div>
</body>
</html>
"""


def save_html_report(summary: RunSummary, output_path: Path) -> None:
    """Save an HTML report to a file.

    Args:
        summary: Run summary to render
        output_path: Path to save the report
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(generate_html_report(summary), encoding="utf-8")


def _json_serializer(obj: Any) -> Any:
    """Custom JSON serializer for non-standard types."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Path):
        return str(obj)
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")
