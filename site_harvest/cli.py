#!/usr/bin/env python3
"""
Command-line entry point for SiteHarvest.

Commands:
  crawl     Crawl a site once and package the extracted text into a zip
  serve     Run the HTTP trigger API (POST /api/crawl)
  config    Show the effective configuration

Common options:
  --config PATH       Path to a YAML/JSON config (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only when omitted)
  --log-format FORMAT Logging format string

crawl options:
  --max-depth INT     Maximum link depth (seed page = 1)
  --tag SELECTOR      Tag/CSS selector to extract, repeatable
  --blacklist PREFIX  URL prefix to skip, repeatable
  --concurrency INT   Parallel render workers (1 = depth-first in link order)
  --crawl-timeout SEC Timeout of the whole crawl (seconds)
  --json PATH         Save a JSON crawl summary
  --html PATH         Save an HTML crawl summary
  --pretty            Pretty-print the JSON summary printed to stdout

Example:
  site-harvest crawl https://example.com --max-depth 2 --tag p --tag h1 --blacklist https://example.com/admin
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from site_harvest import __version__
from site_harvest.config import CrawlRequest, load_config, override
from site_harvest.engine import start_crawl
from site_harvest.errors import PersistenceError, RequestValidationError
from site_harvest.logger import DEFAULT_FORMAT, configure
from site_harvest.report.html_report import render_html
from site_harvest.report.json_report import render_json
from site_harvest.server import run_server

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteHarvest, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML/JSON configuration file.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stdout when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Format string for log records'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SiteHarvest command group."""
    configure(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--max-depth', '-d', 'max_depth', type=int, required=True, help='Maximum link depth (seed = 1)')
@click.option('--tag', '-t', 'tags', multiple=True, required=True, help='Selector to extract, repeatable')
@click.option('--blacklist', '-b', 'blacklist', multiple=True, help='URL prefix to skip, repeatable')
@click.option('--concurrency', type=int, default=None, help='Parallel render workers')
@click.option('--crawl-timeout', 'crawl_timeout', type=float, default=None, help='Timeout of the whole crawl (seconds)')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save a JSON crawl summary'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save an HTML crawl summary'
)
@click.option(
    '--template', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with report.html.j2 (bundled template by default)'
)
@click.option('--pretty', is_flag=True, help='Pretty-print the JSON summary (indent 2)')
@click.pass_context
def crawl(ctx, url, max_depth, tags, blacklist, concurrency, crawl_timeout,
          json_output, html_output, template_dir, pretty):
    """Crawl URL once and write the archive."""
    try:
        cfg = override(ctx.obj['config'], concurrency=concurrency, crawl_timeout=crawl_timeout)
    except ValueError as e:
        print_error(f'Invalid option: {e}')
    try:
        request = CrawlRequest.parse(
            {'url': url, 'maxDepth': max_depth, 'tags': list(tags), 'blacklist': list(blacklist)}
        )
    except RequestValidationError as e:
        print_error(e.message)

    click.echo(f'Starting crawl: {url}', err=True)
    try:
        outcome = asyncio.run(start_crawl(request, cfg))
    except asyncio.TimeoutError:
        print_error(f'Crawl did not finish within {cfg.crawl_timeout} seconds')
    except PersistenceError as e:
        print_error(f'Failed to save results: {e}')
    except Exception as e:
        print_error(f'Error during crawling: {e}')

    if json_output:
        try:
            click.echo(f'JSON report: {render_json(outcome.report, json_output)}', err=True)
        except Exception as e:
            print_error(f'Failed to save JSON report: {e}')
    if html_output:
        try:
            click.echo(f'HTML report: {render_html(outcome.report, template_dir, html_output)}', err=True)
        except Exception as e:
            print_error(f'Failed to save HTML report: {e}')

    summary = {
        'archive': str(outcome.archive_path),
        'downloadUrl': outcome.download_path,
        'pages': outcome.report.pages,
        'failures': len(outcome.report.failures),
    }
    click.echo(json.dumps(summary, ensure_ascii=False, indent=2 if pretty else None))


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default=None, help='Bind address (config "host" by default)')
@click.option('--port', type=int, default=None, help='Port (config "port" by default)')
@click.pass_context
def serve(ctx, host, port):
    """Run the HTTP trigger API."""
    run_server(ctx.obj['config'], host=host, port=port)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


def main():
    cli()


if __name__ == "__main__":
    main()
