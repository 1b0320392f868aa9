#!/usr/bin/env python3
"""
Spreadsheet Record CLI

Works on files locally with the same services the API uses, or uploads a
file to a running API.

Usage:
    # Check a file: import it into a throwaway store and print the result
    python scripts/records_cli.py validate --file participants.xlsx

    # Re-export a file with canonical headers and column order
    python scripts/records_cli.py normalize --file messy.xlsx --out clean.xlsx

    # Write an import template
    python scripts/records_cli.py template --out template.xlsx

    # Upload to a running API (replaces its records)
    python scripts/records_cli.py upload --file participants.xlsx --api-url http://localhost:8000
"""

import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging
from typing import Optional

import click
import requests
from dotenv import load_dotenv

from backend.models.schema import SCHEMAS, get_schema
from services.excel_import_service import ExcelImportService, ImportResult
from services.exceptions import WorkbookReadError
from services.export_service import ExcelExportService
from services.record_store import RecordStore

# Load environment variables
load_dotenv()

# Configure logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'WARNING')

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stderr)]
)

logger = logging.getLogger('records_cli')

# Configuration
DEFAULT_SCHEMA = os.getenv('RECORD_SCHEMA', 'participant')
PREFER_FILE_SERIAL = os.getenv('PREFER_FILE_SERIAL', 'false').lower() in ('1', 'true', 'yes')


@click.group()
@click.option('--schema', '-s', 'schema_name', default=DEFAULT_SCHEMA, show_default=True,
              type=click.Choice(sorted(SCHEMAS), case_sensitive=False),
              help='Record schema to use')
@click.pass_context
def cli(ctx, schema_name):
    """Spreadsheet record import, normalization and template tool."""
    ctx.ensure_object(dict)
    ctx.obj['schema'] = get_schema(schema_name)


def _import_locally(ctx, file_path: str) -> tuple:
    """Import a file into a fresh store. Exits with status 2 on unreadable files."""
    schema = ctx.obj['schema']
    store = RecordStore()

    def on_progress(stage: str, percent: float, message: str):
        logger.debug(f"{stage} {percent:.0f}% {message}")

    importer = ExcelImportService(store, schema, on_progress, prefer_file_serial=PREFER_FILE_SERIAL)
    try:
        result = importer.import_file(file_path)
    except WorkbookReadError as e:
        click.echo(f"❌ {e}", err=True)
        ctx.exit(2)
    return store, result


def _print_result(result: ImportResult, show_errors: bool = True):
    if result.status == 'rejected':
        click.echo(f"❌ Import rejected: missing required columns: "
                   f"{', '.join(result.missing_required_columns)}")
        return
    if result.status == 'empty':
        click.echo(f"⚠️  {result.message}")
        return

    click.echo(f"✅ Imported: {result.imported_count}")
    click.echo(f"   Skipped:  {result.skipped_count} "
               f"({result.blank_count} blank, {result.failed_count} failed)")
    if show_errors and result.row_errors:
        click.echo("\nRow errors:")
        for error in result.row_errors:
            click.echo(f"   row {error.row_index}: {error.message}")


@cli.command('validate')
@click.option('--file', '-f', 'file_path', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Workbook to check')
@click.pass_context
def validate_cmd(ctx, file_path: str):
    """Import a workbook into a throwaway store and report the outcome."""
    click.echo(f"📁 Checking: {file_path} (schema: {ctx.obj['schema'].name})")
    _, result = _import_locally(ctx, file_path)
    _print_result(result)
    if result.status == 'rejected':
        ctx.exit(1)


@cli.command('normalize')
@click.option('--file', '-f', 'file_path', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Workbook to read')
@click.option('--out', '-o', 'out_path', required=True, type=click.Path(dir_okay=False),
              help='Workbook to write')
@click.pass_context
def normalize_cmd(ctx, file_path: str, out_path: str):
    """Re-export a workbook with canonical headers, order and typed cells."""
    store, result = _import_locally(ctx, file_path)
    _print_result(result, show_errors=False)
    if not result.succeeded:
        ctx.exit(1)

    exporter = ExcelExportService(ctx.obj['schema'])
    Path(out_path).write_bytes(exporter.export(store.get_all()))
    click.echo(f"💾 Wrote {store.count()} records to {out_path}")


@cli.command('template')
@click.option('--out', '-o', 'out_path', required=True, type=click.Path(dir_okay=False),
              help='Workbook to write')
@click.pass_context
def template_cmd(ctx, out_path: str):
    """Write an import template with example rows and usage notes."""
    exporter = ExcelExportService(ctx.obj['schema'])
    Path(out_path).write_bytes(exporter.generate_template())
    click.echo(f"💾 Wrote {ctx.obj['schema'].name} template to {out_path}")


@cli.command('upload')
@click.option('--file', '-f', 'file_path', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Workbook to upload')
@click.option('--api-url', envvar='API_URL', required=True, help='API base URL')
@click.option('--api-key', envvar='API_KEY', default=None, help='API key, if the API requires one')
@click.pass_context
def upload_cmd(ctx, file_path: str, api_url: str, api_key: Optional[str]):
    """Upload a workbook to a running API, replacing its records."""
    url = f"{api_url.rstrip('/')}/api/import/upload"
    headers = {'X-API-Key': api_key} if api_key else {}
    click.echo(f"🌐 Uploading {file_path} to {url}")

    try:
        with open(file_path, 'rb') as handle:
            response = requests.post(
                url,
                files={'file': (Path(file_path).name, handle)},
                headers=headers,
                timeout=120
            )
    except requests.RequestException as e:
        click.echo(f"❌ Upload failed: {e}", err=True)
        ctx.exit(2)

    if response.status_code == 200:
        data = response.json()
        click.echo(f"✅ Imported: {data['imported_count']}, skipped: {data['skipped_count']}")
        return

    try:
        detail = response.json().get('detail')
    except ValueError:
        detail = response.text
    click.echo(f"❌ Upload rejected ({response.status_code}): {detail}", err=True)
    ctx.exit(1)


if __name__ == '__main__':
    cli(obj={})
