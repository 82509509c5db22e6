"""Command-line interface for the mortgage simulator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules, view summaries,
compare the two early-repayment strategies or look up the current reference
rate. Results can be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional

import click

from .data_models import DEFAULT_PREPAYMENT_MONTH, AmortizationRow, MortgageInput, MortgageResult
from .engine import calculate_from_input
from .errors import MortgageError
from .formulas import variable_rate
from .formatter import (
    format_european,
    print_early_repayment,
    print_schedule,
    print_summary,
    result_to_dict,
    schedule_to_dicts,
)
from .rate_client import DEFAULT_RATE_SERVICE_URL, RateServiceError, fetch_reference_rate
from .utils import parse_date

logger = logging.getLogger(__name__)

TERMINAL_ROWS = 120


def build_input_from_options(
    principal: str,
    rate: Optional[str],
    term: Optional[str],
    term_type: str,
    end_date: Optional[str],
    variable: bool = False,
    differential: Optional[str] = None,
    prepayment: Optional[str] = None,
    prepayment_month: int = DEFAULT_PREPAYMENT_MONTH,
) -> MortgageInput:
    """Collect command-line options into a :class:`MortgageInput`."""
    end_dt = None
    if term_type == "end_date":
        if not end_date:
            raise click.BadParameter("--end-date is required when --term-type is end_date")
        try:
            end_dt = parse_date(end_date)
        except ValueError as exc:
            raise click.BadParameter(str(exc))
    elif not term:
        raise click.BadParameter("--term is required unless --term-type is end_date")
    return MortgageInput(
        principal=principal,
        term=term,
        term_type=term_type,
        interest_rate=rate,
        interest_type="variable" if variable else "fixed",
        differential=differential,
        end_date=end_dt,
        prepayment_amount=prepayment,
        prepayment_month=prepayment_month,
    )


def run_calculation(options: Dict[str, Any]) -> MortgageResult:
    """Build the input, fetch the reference rate if needed and calculate."""
    rate_url = options.pop("rate_url")
    data = build_input_from_options(**options)
    reference = None
    if data.interest_type == "variable":
        try:
            reference = fetch_reference_rate(rate_url)
            click.echo(f"Reference rate {format_european(reference.value, 3)}% ({reference.date})")
        except RateServiceError as exc:
            logger.warning("Reference rate unavailable, using --rate: %s", exc)
    try:
        return calculate_from_input(data, reference_rate=reference)
    except MortgageError as exc:
        raise click.ClickException(str(exc)) from exc


def export_to_json(path: Path, result: MortgageResult) -> None:
    """Export the result (schedule and totals) to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(result_to_dict(result, include_yearly=True), f, indent=2)


def export_to_csv(path: Path, schedule: Iterable[AmortizationRow]) -> None:
    """Export the schedule to a CSV file."""
    header = ["Month", "Payment", "Principal", "Interest", "Cumulative_Interest", "Remaining_Balance"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in schedule_to_dicts(schedule):
            writer.writerow(
                [
                    row["month"],
                    row["payment"],
                    row["principal"],
                    row["interest"],
                    row["cumulativeInterest"],
                    row["remainingBalance"],
                ]
            )


def loan_options(func: Callable) -> Callable:
    """Attach the options shared by every calculating command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (e.g. 150000, 150.000 or 150k)"),
        click.option("--rate", "-r", "rate", help="Annual interest rate in percent (e.g. 3 or 3,25)"),
        click.option("--term", "-t", "term", help="Loan term, in years or months depending on --term-type"),
        click.option(
            "--term-type",
            "term_type",
            type=click.Choice(["years", "months", "end_date"]),
            default="years",
            show_default=True,
            help="How --term is expressed",
        ),
        click.option("--end-date", "end_date", help="Last payment date (YYYY-MM-DD) when --term-type is end_date"),
        click.option("--variable", "variable", is_flag=True, help="Variable rate: reference rate plus --differential"),
        click.option("--differential", "differential", help="Spread over the reference rate, in percent (default 1)"),
        click.option("--prepayment", "prepayment", help="Lump-sum early repayment amount"),
        click.option(
            "--prepayment-month",
            "prepayment_month",
            type=int,
            default=DEFAULT_PREPAYMENT_MONTH,
            show_default=True,
            help="Month after which the early repayment is applied",
        ),
        click.option(
            "--rate-url",
            "rate_url",
            envvar="MORTGAGE_RATE_SERVICE_URL",
            default=DEFAULT_RATE_SERVICE_URL,
            show_default=True,
            help="Reference-rate service used with --variable",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """A mortgage simulator with early-repayment comparison."""
    level = "DEBUG" if verbose else os.environ.get("MORTGAGE_LOG_LEVEL", "WARNING")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(output: Optional[str], **options: Any) -> None:
    """Compute and print the amortization schedule."""
    result = run_calculation(options)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result.schedule)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return
    print_summary(result)
    # Limit schedule length printed to avoid flooding the terminal
    rows = result.schedule
    if len(rows) > TERMINAL_ROWS:
        click.echo(f"Schedule has {len(rows)} rows; showing first {TERMINAL_ROWS} rows.")
        rows = rows[:TERMINAL_ROWS]
    print_schedule(rows)
    if result.early_repayment is not None:
        print_early_repayment(result.early_repayment)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(output: Optional[str], **options: Any) -> None:
    """Compute and print only the summary metrics for a loan."""
    result = run_calculation(options)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        data = result_to_dict(result)
        data.pop("schedule")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(result)


@cli.command("early-repayment")
@loan_options
def early_repayment(**options: Any) -> None:
    """Compare reducing the term with reducing the monthly payment."""
    if not options.get("prepayment"):
        raise click.BadParameter("--prepayment is required for this command")
    result = run_calculation(options)
    print_summary(result)
    if result.early_repayment_error:
        raise click.ClickException(result.early_repayment_error)
    if result.early_repayment is None:
        raise click.ClickException("The prepayment amount must be positive")
    print_early_repayment(result.early_repayment)


@cli.command()
@click.option(
    "--rate-url",
    "rate_url",
    envvar="MORTGAGE_RATE_SERVICE_URL",
    default=DEFAULT_RATE_SERVICE_URL,
    show_default=True,
    help="Reference-rate service URL",
)
@click.option("--differential", "differential", type=float, help="Also show the total rate for this spread")
def rate(rate_url: str, differential: Optional[float]) -> None:
    """Show the current reference rate."""
    try:
        reference = fetch_reference_rate(rate_url)
    except RateServiceError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Reference rate : {format_european(reference.value, 3)}%")
    click.echo(f"Observed on    : {reference.date}")
    if differential is not None:
        total = variable_rate(reference.value, Decimal(str(differential)))
        click.echo(f"Total rate     : {format_european(total, 3)}%")


if __name__ == "__main__":
    cli()
