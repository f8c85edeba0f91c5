# ledger_engine/cli.py
import logging
import os
from datetime import date

import click
from dotenv import load_dotenv

from ledger_engine.aggregator import (
    category_shares,
    compute_stats,
    month_insights,
    month_transactions,
    monthly_trend,
    recent_transactions,
)
from ledger_engine.config import load_config
from ledger_engine.core.models import NewRecord, Recurrence, TransactionKind
from ledger_engine.ledger_file import dump_ledger, load_ledger
from ledger_engine.loaders import get_loader
from ledger_engine.outputs import get_output
from ledger_engine.recurring import RecurrenceProjector
from ledger_engine.store import RecordNotFoundError
from ledger_engine.utils import parse_date, parse_month

KINDS = click.Choice([k.value for k in TransactionKind])


class Session:
    """Config plus the store loaded from the ledger file for one invocation."""

    def __init__(self, cfg):
        self.cfg = cfg
        self.ledger_path = cfg['ledger_file']
        self.store = load_ledger(self.ledger_path)

    def save(self):
        dump_ledger(self.store, self.ledger_path)


def _month_option(f):
    return click.option(
        '--month', 'month_str',
        default=None,
        help='Month as YYYY-MM (default: current month)'
    )(f)


def _today_option(f):
    return click.option(
        '--today', 'today_str',
        default=None,
        help='Treat this ISO date as today (default: the local date)'
    )(f)


def _resolve_month(month_str):
    if month_str:
        try:
            return parse_month(month_str)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint='--month')
    today = date.today()
    return today.year, today.month


def _resolve_today(today_str):
    if not today_str:
        return date.today()
    try:
        return parse_date(today_str)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--today')


def _echo_record(r):
    marker = f" (every month on day {r.recurrence.day_of_month})" if r.recurrence else ''
    sign = '+' if r.kind is TransactionKind.INCOME else '-'
    click.echo(
        f"{r.id}  {r.occurred_on.isoformat()}  {sign}{r.amount:.2f}  "
        f"[{r.category_id}] {r.description}{marker}"
    )


@click.group()
@click.option(
    '--config', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Path to config.yaml'
)
@click.option(
    '--ledger', 'ledger_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='YAML ledger file (overrides config if provided)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file, e.g. setting LEDGER_FILE or LEDGER_LOG_LEVEL'
)
@click.pass_context
def main(ctx, config_path, ledger_path, env_file):
    """
    Track income and expenses in a YAML ledger: monthly totals and category
    breakdowns, recurring transactions projected into the current month,
    and bulk copy of last month's entries.
    """
    if env_file:
        load_dotenv(env_file)
    logging.basicConfig(level=os.getenv('LEDGER_LOG_LEVEL', 'WARNING').upper())

    try:
        cfg = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))
    if ledger_path:
        cfg['ledger_file'] = ledger_path
    try:
        ctx.obj = Session(cfg)
    except ValueError as e:
        raise click.ClickException(f"Could not load ledger {cfg['ledger_file']}: {e}")


@main.command()
@click.argument('description')
@click.argument('amount')
@click.option('--kind', type=KINDS, default='expense', show_default=True)
@click.option('--category', 'category_id', required=True, help='Category id')
@click.option('--date', 'date_str', default=None, help='ISO date (default: today)')
@click.option(
    '--recurring-day',
    type=click.IntRange(1, 31),
    default=None,
    help='Repeat every month on this day'
)
@click.pass_obj
def add(session, description, amount, kind, category_id, date_str, recurring_day):
    """Add a transaction."""
    try:
        record_id = session.store.add(
            NewRecord(
                description=description,
                amount=amount,
                kind=TransactionKind.parse(kind),
                category_id=category_id,
                occurred_on=parse_date(date_str) if date_str else date.today(),
                recurrence=Recurrence(recurring_day) if recurring_day else None,
            )
        )
    except ValueError as e:
        raise click.ClickException(str(e))
    session.save()
    click.echo(f"Added transaction {record_id}.")


@main.command()
@click.argument('record_id')
@click.option('--description', default=None)
@click.option('--amount', default=None)
@click.option('--category', 'category_id', default=None)
@click.pass_obj
def update(session, record_id, description, amount, category_id):
    """Change the description, amount or category of a transaction."""
    fields = {
        name: value
        for name, value in (
            ('description', description),
            ('amount', amount),
            ('category_id', category_id),
        )
        if value is not None
    }
    if not fields:
        raise click.UsageError('Nothing to update.')
    try:
        session.store.update(record_id, **fields)
    except (RecordNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))
    session.save()
    click.echo(f"Updated transaction {record_id}.")


@main.command()
@click.argument('record_id')
@click.pass_obj
def delete(session, record_id):
    """Delete a transaction."""
    try:
        session.store.delete(record_id)
    except RecordNotFoundError as e:
        raise click.ClickException(str(e))
    session.save()
    click.echo(f"Deleted transaction {record_id}.")


@main.command(name='list')
@_month_option
@click.option('--kind', type=click.Choice(['all'] + [k.value for k in TransactionKind]), default='all')
@click.option('--recent', type=int, default=None, help='Show the N most recent transactions of any month')
@click.pass_obj
def list_(session, month_str, kind, recent):
    """List the transactions of a month, most recent first."""
    if recent is not None:
        records = recent_transactions(session.store, limit=recent)
    else:
        year, month = _resolve_month(month_str)
        records = month_transactions(
            session.store, year, month, None if kind == 'all' else TransactionKind.parse(kind)
        )
    if not records:
        click.echo("No transactions.")
    for r in records:
        _echo_record(r)


@main.command()
@_month_option
@click.pass_obj
def stats(session, month_str):
    """Show income, expense, balance and expenses per category."""
    year, month = _resolve_month(month_str)
    s = compute_stats(session.store, year, month)
    click.echo(f"{year:04d}-{month:02d}")
    click.echo(f"Income:  {s.total_income:.2f}")
    click.echo(f"Expense: {s.total_expense:.2f}")
    click.echo(f"Balance: {s.balance:.2f}")
    for share in category_shares(s):
        click.echo(f"  {share.category_id}: {share.amount:.2f} ({share.percentage:.1f}%)")


@main.command()
@click.option('--months', type=click.IntRange(1, None), default=6, show_default=True)
@_today_option
@click.pass_obj
def trend(session, months, today_str):
    """Show income and expense for the last N months."""
    for point in monthly_trend(session.store, months, _resolve_today(today_str)):
        click.echo(
            f"{point.year:04d}-{point.month:02d}  "
            f"income {point.total_income:.2f}  expense {point.total_expense:.2f}"
        )


@main.command()
@_month_option
@click.pass_obj
def insights(session, month_str):
    """Show the top category, daily average spend and savings of a month."""
    year, month = _resolve_month(month_str)
    info = month_insights(session.store, year, month)
    if info.top_category is not None:
        click.echo(
            f"Top category: {info.top_category.category_id} ({info.top_category.amount:.2f})"
        )
    else:
        click.echo("Top category: N/A")
    click.echo(f"Daily average: {info.daily_average:.2f}")
    click.echo(f"Savings: {info.savings:.2f} ({info.savings_percentage:.1f}% of income)")


@main.command()
@_today_option
@click.pass_obj
def project(session, today_str):
    """Add this month's occurrence of every recurring transaction."""
    created = RecurrenceProjector(session.store).project_current_month(
        _resolve_today(today_str)
    )
    if created:
        session.save()
    click.echo(f"Projected {len(created)} recurring transaction(s).")


@main.command(name='copy-previous')
@_today_option
@click.pass_obj
def copy_previous(session, today_str):
    """Copy every transaction of last month into this month.

    Not idempotent: running it twice copies everything twice.
    """
    created = RecurrenceProjector(session.store).copy_from_previous_month(
        _resolve_today(today_str)
    )
    if created:
        session.save()
    click.echo(f"Copied {len(created)} transaction(s) from the previous month.")


@main.command(name='import')
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--loader', 'loader_name', default='csv', show_default=True)
@click.pass_obj
def import_(session, file_path, loader_name):
    """Import transactions from a statement file."""
    try:
        loader = get_loader(loader_name, session.cfg)
        count = 0
        for new in loader.load(file_path):
            session.store.add(new)
            count += 1
    except ValueError as e:
        raise click.ClickException(str(e))
    session.save()
    click.echo(f"Imported {count} transaction(s) from {file_path}.")


@main.command()
@_month_option
@click.option('--output', 'output_format', default='csv', show_default=True)
@click.pass_obj
def export(session, month_str, output_format):
    """Export one month of transactions and its stats."""
    year, month = _resolve_month(month_str)
    try:
        outputter = get_output(output_format, session.cfg)
    except ValueError as e:
        raise click.ClickException(str(e))
    for path in outputter.write(session.store, year, month):
        click.echo(f"Wrote {path}")
