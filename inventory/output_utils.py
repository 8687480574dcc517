"""
Output utilities for saving collection results.
"""

import html
import json
import logging
import os
import zipfile
from typing import Dict, List, Sequence

import pandas as pd

from .constants import FILE_PATTERNS, HTML_FILES
from .orchestrator import RunResult
from .registry import Registry
from .resource import Column, Resource, headers, render_row

logger = logging.getLogger(__name__)


def resource_output_directory(output_dir: str, account_id: str) -> str:
    """Directory holding the reports of one account: ``<output_dir>/<account_id>/resources``."""
    return os.path.join(output_dir, account_id, "resources")


def save_collector_results(
    name: str,
    columns: Sequence[Column],
    resources: Sequence[Resource],
    output_dir: str,
    output_format: str,
) -> str:
    """
    Save one collector's resources in the specified format.

    Args:
        name: Collector name, used as the file stem
        columns: Column definitions of the collector
        resources: Resources in final output order
        output_dir: Output directory
        output_format: Output format (json, csv, txt)

    Returns:
        Path of the written file
    """
    os.makedirs(output_dir, exist_ok=True)

    filename = FILE_PATTERNS["collector"].format(name=name, format=output_format)
    filepath = os.path.join(output_dir, filename)
    header_row = headers(columns)
    rows = [render_row(resource, columns) for resource in resources]

    if output_format == "json":
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump([dict(zip(header_row, row)) for row in rows], f, indent=2)
    elif output_format == "csv":
        df = pd.DataFrame(rows, columns=pd.Index(header_row), dtype=str)
        df.to_csv(filepath, index=False)
    else:  # txt
        with open(filepath, "w", encoding="utf-8") as f:
            if not rows:
                f.write(f"No {name} resources found.\n")
                return filepath

            f.write(f"{name} Resources\n")
            f.write("=" * 50 + "\n\n")
            for i, row in enumerate(rows, 1):
                f.write(f"Resource {i}:\n")
                for header, cell in zip(header_row, row):
                    if not cell:
                        continue
                    cell = cell.replace("\n", "\n    ")
                    f.write(f"  {header}: {cell}\n")
                f.write("\n")

    logger.debug("Saved %d %s resources to %s", len(rows), name, filepath)
    return filepath


def save_all_csv(
    sections: Dict[str, Sequence[Column]],
    resources: Dict[str, Sequence[Resource]],
    output_dir: str,
) -> str:
    """
    Write every non-empty collector into a single CSV file.

    Collectors appear in name order, each section with its own header row.
    A single blank line separates consecutive sections.

    Args:
        sections: Column definitions keyed by collector name
        resources: Resources keyed by collector name
        output_dir: Output directory

    Returns:
        Path of the written file
    """
    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, FILE_PATTERNS["all"])

    with open(filepath, "w", newline="", encoding="utf-8") as f:
        first = True
        for name in sorted(sections):
            items = resources.get(name) or []
            if not items:
                continue
            if not first:
                f.write("\n")
            first = False
            columns = sections[name]
            rows = [render_row(resource, columns) for resource in items]
            df = pd.DataFrame(rows, columns=pd.Index(headers(columns)), dtype=str)
            df.to_csv(f, index=False, lineterminator="\n")

    return filepath


def save_failure_summary(run_result: RunResult, output_dir: str, output_format: str) -> str:
    """
    Save pair errors and warnings of a run.

    JSON output is used when the run format is json; every other format
    produces a plain text file with one line per entry.
    """
    os.makedirs(output_dir, exist_ok=True)
    summary_format = "json" if output_format == "json" else "txt"
    filepath = os.path.join(output_dir, FILE_PATTERNS["errors"].format(format=summary_format))

    if summary_format == "json":
        summary = {
            "cancelled": run_result.cancelled,
            "errors": [
                {"collector": e.collector, "region": e.region, "error": str(e.error)}
                for e in run_result.errors
            ],
            "warnings": [
                {"collector": w.collector, "region": w.region, "message": w.message}
                for w in run_result.warnings
            ],
        }
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2)
    else:
        with open(filepath, "w", encoding="utf-8") as f:
            for line in run_result.failure_summary():
                f.write(line + "\n")

    return filepath


def save_inventory_results(
    run_result: RunResult,
    registry: Registry,
    output_dir: str,
    output_format: str,
) -> Dict[str, str]:
    """
    Save all reports of a run.

    Args:
        run_result: Result returned by the orchestrator
        registry: Registry providing column definitions
        output_dir: Account resource directory
        output_format: Output format for per-collector files

    Returns:
        Dictionary mapping report names to file paths
    """
    saved_files: Dict[str, str] = {}
    sections: Dict[str, List[Column]] = {}
    resources: Dict[str, List[Resource]] = {}

    for name, result in run_result.results.items():
        columns = registry.get(name).get_columns()
        sections[name] = columns
        resources[name] = result.resources
        if not result.resources:
            continue
        saved_files[name] = save_collector_results(
            name, columns, result.resources, output_dir, output_format
        )

    saved_files["all"] = save_all_csv(sections, resources, output_dir)

    if run_result.errors or run_result.warnings:
        saved_files["errors"] = save_failure_summary(run_result, output_dir, output_format)

    return saved_files


HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>@@INDEX_TITLE@@</title>
<style>
body { font-family: sans-serif; margin: 2em; }
table { border-collapse: collapse; margin-top: 1em; }
th, td { border: 1px solid #ccc; padding: 4px 8px; text-align: left; vertical-align: top; white-space: pre-wrap; }
th { background: #f0f0f0; }
</style>
</head>
<body>
<h1>@@INDEX_TITLE@@</h1>
<p>@@INDEX_DESCRIPTION@@</p>
<p>
  <a href="resources/@@OUTPUT_FILE@@">@@OUTPUT_FILE@@</a> |
  <a href="resources.zip">Download all CSV files (resources.zip)</a>
</p>
<ul id="files"></ul>
<div id="table"></div>
<script>
function parseCsv(text) {
  const rows = [];
  let row = [], cell = "", quoted = false;
  for (let i = 0; i < text.length; i++) {
    const c = text[i];
    if (quoted) {
      if (c === '"' && text[i + 1] === '"') { cell += '"'; i++; }
      else if (c === '"') { quoted = false; }
      else { cell += c; }
    } else if (c === '"') { quoted = true; }
    else if (c === ',') { row.push(cell); cell = ""; }
    else if (c === '\\n') { row.push(cell); rows.push(row); row = []; cell = ""; }
    else if (c !== '\\r') { cell += c; }
  }
  if (cell || row.length) { row.push(cell); rows.push(row); }
  return rows;
}

function showTable(path) {
  fetch(path).then(r => r.text()).then(text => {
    const rows = parseCsv(text);
    const table = document.createElement("table");
    rows.forEach((cells, index) => {
      const tr = table.insertRow();
      cells.forEach(value => {
        const td = document.createElement(index === 0 ? "th" : "td");
        td.textContent = value;
        tr.appendChild(td);
      });
    });
    const target = document.getElementById("table");
    target.replaceChildren(table);
  });
}

fetch("files.json").then(r => r.json()).then(entries => {
  const list = document.getElementById("files");
  entries.forEach(entry => {
    const item = document.createElement("li");
    const link = document.createElement("a");
    link.href = entry.path;
    link.textContent = entry.display_name;
    link.onclick = event => { event.preventDefault(); showTable(entry.path); };
    item.appendChild(link);
    list.appendChild(item);
  });
});
</script>
</body>
</html>
"""


def generate_html(
    output_dir: str,
    account_id: str,
    categories: Sequence[str],
    output_file: str = FILE_PATTERNS["all"],
) -> Dict[str, str]:
    """
    Write a browsable index next to an account's CSV reports.

    Three files are created under ``<output_dir>/<account_id>``: ``files.json``
    listing the per-category CSV files that exist, ``resources.zip`` holding
    every CSV file of the resources directory, and ``index.html``.

    Args:
        output_dir: Base output directory
        account_id: AWS account ID
        categories: Category names in display order
        output_file: Combined report linked from the index page

    Returns:
        Dictionary mapping the generated file names to their paths
    """
    account_dir = os.path.join(output_dir, account_id)
    resources_dir = resource_output_directory(output_dir, account_id)
    os.makedirs(account_dir, exist_ok=True)

    manifest = []
    for category in categories:
        filename = FILE_PATTERNS["collector"].format(name=category, format="csv")
        if os.path.isfile(os.path.join(resources_dir, filename)):
            manifest.append({"path": f"resources/{filename}", "display_name": category})

    manifest_path = os.path.join(account_dir, HTML_FILES["manifest"])
    with open(manifest_path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2)

    zip_path = os.path.join(account_dir, HTML_FILES["archive"])
    with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as archive:
        if os.path.isdir(resources_dir):
            for root, _, files in os.walk(resources_dir):
                for filename in sorted(files):
                    if not filename.lower().endswith(".csv"):
                        continue
                    path = os.path.join(root, filename)
                    archive.write(path, os.path.relpath(path, resources_dir))

    page = (
        HTML_TEMPLATE.replace("@@INDEX_TITLE@@", html.escape(f"AWS Resources ({account_id})"))
        .replace("@@INDEX_DESCRIPTION@@", "AWS resource inventory")
        .replace("@@OUTPUT_FILE@@", html.escape(output_file))
    )
    index_path = os.path.join(account_dir, HTML_FILES["index"])
    with open(index_path, "w", encoding="utf-8") as f:
        f.write(page)

    logger.info("HTML index written to %s", index_path)
    return {"manifest": manifest_path, "archive": zip_path, "index": index_path}
