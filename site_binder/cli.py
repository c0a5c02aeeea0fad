# === FILE: site_binder/cli.py ===
#!/usr/bin/env python3
"""
Точка входа SiteBinder для командной строки.

Команды:
  crawl SEED  Обойти сайт документации и собрать один PDF
  config      Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --limit INT         Макс. число страниц (override max_pages)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Команда crawl опции:
  --output PATH       Куда сохранить PDF (stdout, если не указан)
  --manifest PATH     Сохранить JSON-манифест запуска
  --format A4|Letter  Формат страниц
  --scale FLOAT       Масштаб шрифтов (0.1–2.0)
  --crawl-timeout SEC Таймаут всего запуска (секунд)

Дополнительно:
  --version, -v       Показать версию SiteBinder

Пример:
  site-binder --limit 50 crawl https://docs.example.com/ -o docs.pdf --manifest docs.json
"""
import asyncio
import sys
from pathlib import Path

import click

from site_binder import __version__
from site_binder.config import load_config
from site_binder.engine import build_document
from site_binder.errors import BinderError
from site_binder.logger import init_logging
from site_binder.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteBinder, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--limit', '-l', 'limit',
    type=click.IntRange(min=1),
    default=None,
    help='Макс. число страниц (override max_pages)'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, limit, log_level, log_file, log_format):
    """Группа команд SiteBinder CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
        cfg = cfg.with_overrides(max_pages=limit)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('seed')
@click.option(
    '--output', '-o', 'output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить PDF в файл (иначе — в stdout)'
)
@click.option(
    '--manifest', '-m', 'manifest_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-манифест в файл'
)
@click.option(
    '--format', 'page_format',
    default=None,
    type=click.Choice(['A4', 'Letter']),
    help='Формат страниц PDF'
)
@click.option(
    '--scale', 'scale',
    default=None,
    type=click.FloatRange(0.1, 2.0),
    help='Масштаб шрифтов'
)
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Таймаут всего запуска (секунд)'
)
@click.pass_context
def crawl(ctx, seed, output, manifest_output, page_format, scale, crawl_timeout):
    """Обойти сайт от SEED и собрать один PDF."""
    try:
        cfg = ctx.obj['config'].with_overrides(page_format=page_format, scale=scale)
    except Exception as e:
        print_error(f'Ошибка конфигурации: {e}')
    click.echo(f'Crawling {seed} (max {cfg.max_pages} pages)', err=True)
    try:
        if crawl_timeout:
            document = asyncio.run(
                asyncio.wait_for(build_document(cfg, seed), timeout=crawl_timeout)
            )
        else:
            document = asyncio.run(build_document(cfg, seed))
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {crawl_timeout} секунд')
    except BinderError as e:
        print_error(f'Ошибка: {e}')

    if output:
        try:
            saved = document.save(output)
            click.echo(f'PDF: {saved} ({document.page_count} pages)', err=True)
        except OSError as e:
            print_error(f'Ошибка при сохранении PDF: {e}')
    else:
        stream = click.get_binary_stream('stdout')
        stream.write(document.pdf)
        stream.flush()

    if manifest_output:
        try:
            saved_json = render_json(document, manifest_output)
            click.echo(f'Manifest: {saved_json}', err=True)
        except OSError as e:
            print_error(f'Ошибка при сохранении манифеста: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
