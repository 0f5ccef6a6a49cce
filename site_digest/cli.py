# === FILE: site_digest/cli.py ===
#!/usr/bin/env python3
"""
Точка входа SiteDigest через командную строку.

Команды:
  crawl URL   Обойти сайт, собрать страницы и (опционально) получить AI-анализ
  serve       Запустить HTTP API заданий (POST /api/scrape, GET /api/jobs/{id})
  config      Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Пример:
  site-digest crawl https://example.com -p 50 -n 5 --json result.json --summary analysis.txt
"""
import sys
import json
from pathlib import Path

import click
from pydantic import ValidationError

from site_digest import __version__
from site_digest.api import run_server
from site_digest.config import ServiceConfig, load_config
from site_digest.engine import Engine
from site_digest.logger import init_logging
from site_digest.report.html_report import render_html
from site_digest.report.json_report import render_json, render_summary
from site_digest.scanner import crawl_site
from site_digest.summarizer import OpenAISummarizer

CONTEXT_SETTINGS = dict(help_option_names=["--help"])
_DEFAULT_CONFIG = Path('configs/default.yaml')


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteDigest, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
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
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteDigest CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        if config_path is None and not _DEFAULT_CONFIG.exists():
            cfg = ServiceConfig()
        else:
            cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--max-pages', '-p', 'max_pages', type=click.IntRange(min=1), default=None,
              help='Макс. число страниц (проверяется между пачками)')
@click.option('--concurrency', '-n', 'concurrency', type=click.IntRange(min=1), default=None,
              help='Число параллельных запросов')
@click.option('--max-content-length', '-l', 'max_content_length', type=click.IntRange(min=0),
              default=None, help='Макс. длина текста страницы (символов)')
@click.option('--skip-ai', '-s', is_flag=True, help='Не запускать AI-анализ')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--summary', 'summary_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить текст анализа в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблонами (по умолчанию встроенный шаблон)'
)
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.pass_context
def crawl(ctx, url, max_pages, concurrency, max_content_length, skip_ai,
          json_output, html_output, summary_output, template_dir, pretty):
    """Обойти сайт и вывести/сохранить страницы и анализ."""
    cfg = ctx.obj['config']
    overrides = {
        k: v for k, v in (
            ('max_pages', max_pages),
            ('concurrency', concurrency),
            ('max_content_length', max_content_length),
        ) if v is not None
    }
    try:
        crawl_cfg = cfg.crawl.model_copy(update=overrides).for_url(url)
    except ValidationError as e:
        print_error(f'Некорректные параметры обхода: {e}')

    summarize = None if skip_ai else OpenAISummarizer(cfg.summarizer)
    click.echo(f'Crawling {crawl_cfg.start_url}', err=True)
    try:
        report = Engine(crawl_cfg, summarize=summarize, crawl=crawl_site).run()
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    if not report.pages:
        print_error('Не удалось собрать ни одной страницы (или все страницы защищены).')

    if not json_output and not html_output and not summary_output:
        indent = 2 if pretty else None
        click.echo(json.dumps(report.to_dict(), ensure_ascii=False, indent=indent))
        return

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')

    if summary_output:
        try:
            saved_summary = render_summary(report, summary_output)
            click.echo(f'Summary: {saved_summary}')
        except (OSError, ValueError) as e:
            print_error(f'Ошибка при сохранении анализа: {e}')


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default=None, help='Адрес для прослушивания (override host)')
@click.option('--port', type=click.IntRange(1, 65535), default=None, help='Порт (override port)')
@click.pass_context
def serve(ctx, host, port):
    """Запустить HTTP API заданий."""
    cfg = ctx.obj['config']
    overrides = {k: v for k, v in (('host', host), ('port', port)) if v is not None}
    run_server(cfg.model_copy(update=overrides))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON (секреты скрыты)."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
