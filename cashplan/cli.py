"""
Command-Line Interface for CashPlan.

Purpose
-------
Runs projections and debt analyses on scenario files without writing
Python code.

Commands
--------
- project: Month-by-month cash-flow projection of a scenario
- debt: Debt ratios, early-payoff comparison and housing affordability
- loan: Payment, balance and prepayment effect of a single loan
- config: Validate and create scenario files
- info: Version and dependency information

Example Usage
-------------
    # Project a scenario over 24 months starting in January 2026
    $ cashplan project -c household.json -m 24 --as-of 2026-01-01

    # Debt analysis
    $ cashplan debt -c household.json

    # Loan with a prepayment of 300,000 in month 12
    $ cashplan loan -a 1000000 -r 2.5 -n 84 --prepay 300000 --at 12

    # Create a starter scenario
    $ cashplan config create household.json
"""

from __future__ import annotations

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import (
    AppSettings,
    BonusAllocationConfig,
    BonusConfig,
    ExpenseConfig,
    IncomeConfig,
    InvestmentPolicyConfig,
    LoanConfig,
    ScenarioConfig,
)
from .exceptions import CashPlanError
from .utils import format_currency


def _money(value: float) -> str:
    return format_currency(value, symbol="").strip()


def _load(config: Path):
    from .serialization import load_scenario

    try:
        return load_scenario(config)
    except (CashPlanError, OSError) as e:
        click.echo(f"Error loading scenario: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="cashplan")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--verbose", "-v", is_flag=True, help="Log debug messages")
@click.pass_context
def main(ctx: click.Context, quiet: bool, verbose: bool) -> None:
    """
    CashPlan - Household cash-flow projection.

    Projects cash, savings and investment balances month by month from
    income, bonuses, expenses, installment plans and loans, and derives
    debt-burden ratios for affordability decisions.

    Use 'cashplan COMMAND --help' for command-specific help.
    """
    settings = AppSettings()
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, settings.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["console"] = Console()
    ctx.obj["settings"] = settings


# ---------------------------------------------------------------------------
# project
# ---------------------------------------------------------------------------

@main.command()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to scenario file (JSON)"
)
@click.option(
    "--months", "-m",
    type=int,
    default=None,
    help="Prediction horizon in months (default: scenario value)"
)
@click.option(
    "--as-of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Any date in the first projected month (default: scenario value or today)"
)
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the full result as JSON"
)
@click.option(
    "--csv", "csv_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the month table as CSV"
)
@click.pass_context
def project(
    ctx: click.Context,
    config: Path,
    months: Optional[int],
    as_of,
    output: Optional[Path],
    csv_path: Optional[Path],
) -> None:
    """
    Run a month-by-month projection.

    Example:
        cashplan project -c household.json -m 12 --as-of 2025-08-01
    """
    console: Console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)
    settings: AppSettings = ctx.obj["settings"]

    from .projection import project_scenario
    from .serialization import save_result

    scenario = _load(config)
    if months is not None and months > settings.max_prediction_months:
        click.echo(
            f"Error: --months must be at most {settings.max_prediction_months} (got {months})", err=True
        )
        sys.exit(1)

    try:
        result = project_scenario(
            scenario,
            prediction_months=months,
            as_of=as_of.date() if as_of else None,
            default_location=settings.default_location,
        )
    except CashPlanError as e:
        click.echo(f"Error during projection: {e}", err=True)
        sys.exit(1)

    final = result.final_amounts
    if quiet:
        click.echo(f"Total assets: {_money(final.total)}")
    else:
        table = Table(title=f"Projection: {scenario.name}", show_header=True)
        table.add_column("Month", style="cyan")
        for column in ("Income", "Expenses", "Net", "Early payoffs", "Cash", "Savings", "Investment", "Total"):
            table.add_column(column, justify="right")
        for r in result.monthly_data:
            table.add_row(
                r.month.strftime("%Y-%m"),
                _money(r.income),
                _money(r.expenses),
                _money(r.net),
                _money(r.early_payoffs),
                _money(r.cumulative_cash),
                _money(r.cumulative_savings),
                _money(r.cumulative_investment),
                _money(r.total_assets),
            )
        console.print(table)

        s = result.summary
        summary = (
            f"[cyan]Monthly income:[/cyan] {_money(s.monthly_income)}\n"
            f"[cyan]Steady monthly expenses:[/cyan] {_money(s.monthly_expenses)}\n"
            f"[cyan]Monthly net:[/cyan] {_money(s.monthly_net)}\n"
            f"[cyan]Annual bonus:[/cyan] {_money(s.total_annual_bonus)}\n\n"
            f"[bold]Final cash:[/bold] {_money(final.cash)}\n"
            f"[bold]Final savings:[/bold] {_money(final.savings)}\n"
            f"[bold]Final investment:[/bold] {_money(final.investment)}\n"
            f"[bold green]Total assets:[/bold green] {_money(final.total)}"
        )
        console.print(Panel(summary, title="Summary", border_style="green"))

        for d in result.diagnostics:
            console.print(f"[yellow]warning:[/yellow] {d.record_kind} {d.record_name!r}: {d.message}")

    if output:
        save_result(result, output)
        if not quiet:
            click.echo(f"Result saved to {output}")
    if csv_path:
        csv_path.parent.mkdir(parents=True, exist_ok=True)
        result.to_frame().to_csv(csv_path)
        if not quiet:
            click.echo(f"Month table saved to {csv_path}")


# ---------------------------------------------------------------------------
# debt
# ---------------------------------------------------------------------------

@main.command()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to scenario file (JSON)"
)
@click.pass_context
def debt(ctx: click.Context, config: Path) -> None:
    """
    Show debt ratios and housing affordability.

    Example:
        cashplan debt -c household.json
    """
    console: Console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)
    settings: AppSettings = ctx.obj["settings"]

    from .projection import project_scenario

    scenario = _load(config)
    try:
        result = project_scenario(scenario, default_location=settings.default_location)
    except CashPlanError as e:
        click.echo(f"Error during analysis: {e}", err=True)
        sys.exit(1)

    a = result.debt_analysis
    if quiet:
        click.echo(f"Debt-to-income: {a.general.ratio:.2f}% ({a.general.risk_level})")
        click.echo(f"Bank ratio: {a.bank.ratio:.2f}% ({'qualified' if a.bank.is_qualified else 'not qualified'})")
        return

    breakdown = Table(title=f"Monthly debt ({a.location})", show_header=True)
    breakdown.add_column("Category", style="cyan")
    breakdown.add_column("Amount", justify="right")
    breakdown.add_row("Housing", _money(a.debt.housing))
    breakdown.add_row("Credit loan", _money(a.debt.credit_loan))
    breakdown.add_row("Card installments", _money(a.debt.card_installments))
    breakdown.add_row("Other", _money(a.debt.other))
    breakdown.add_row("[bold]Total[/bold]", f"[bold]{_money(a.debt.total)}[/bold]")
    console.print(breakdown)

    ratios = (
        f"[cyan]Debt-to-income:[/cyan] {a.general.ratio:.2f}% ({a.general.risk_level})\n"
        f"  {a.general.recommendation}\n"
        f"[cyan]Bank income-to-expense:[/cyan] {a.bank.ratio:.2f}% ({a.bank.risk_level}, "
        f"{'qualified' if a.bank.is_qualified else 'not qualified'})\n"
        f"  {a.bank.recommendation}\n\n"
        f"[bold]{a.overall.title}[/bold] (priority: {a.overall.priority})\n"
        + "\n".join(f"  - {action}" for action in a.overall.actions)
    )
    console.print(Panel(ratios, title="Debt analysis", border_style="blue"))

    c = result.debt_analysis_with_strategy
    if c.has_strategy:
        table = Table(title="Early payoff comparison", show_header=True)
        table.add_column("", style="cyan")
        table.add_column("Before", justify="right")
        table.add_column("After", justify="right")
        table.add_row("Monthly debt", _money(c.before.monthly_debt), _money(c.after.monthly_debt))
        table.add_row("Debt ratio", f"{c.before.debt_ratio:.2f}%", f"{c.after.debt_ratio:.2f}%")
        table.add_row("Expense ratio", f"{c.before.expense_ratio:.2f}%", f"{c.after.expense_ratio:.2f}%")
        table.add_row("Bank ratio", f"{c.before.bank_ratio:.2f}%", f"{c.after.bank_ratio:.2f}%")
        table.add_row("Risk level", c.before.risk_level, c.after.risk_level)
        console.print(table)
        for entry in c.schedule:
            console.print(
                f"  {entry.name}: month {entry.payoff_month}, saves {_money(entry.monthly_savings)}/month, "
                f"{_money(entry.total_savings)} in total"
            )

    h = result.housing_affordability
    if h.is_affordable:
        low, mid, high = h.price_range
        text = (
            f"[cyan]Affordable monthly payment:[/cyan] {_money(h.available_payment)}\n"
            f"[cyan]Loan amount:[/cyan] {_money(h.loan_amount)}\n"
            f"[cyan]House price:[/cyan] {_money(h.house_price)} "
            f"(down payment {_money(h.down_payment)})\n"
            f"[cyan]Price range:[/cyan] {_money(low)} / {_money(mid)} / {_money(high)}"
        )
    else:
        text = f"[red]Not affordable[/red]: short by {_money(h.deficit)} a month\n" + "\n".join(
            f"  - {s}" for s in h.improvement_suggestions
        )
    text += f"\n\n{h.outlook.recommendation}"
    console.print(Panel(text, title="Housing affordability", border_style="magenta"))


# ---------------------------------------------------------------------------
# loan
# ---------------------------------------------------------------------------

@main.command()
@click.option("--amount", "-a", type=float, required=True, help="Original loan amount")
@click.option("--rate", "-r", type=float, required=True, help="Annual rate in percent")
@click.option("--periods", "-n", type=int, required=True, help="Term in months")
@click.option("--paid", type=int, default=0, help="Payments already made (default: 0)")
@click.option("--prepay", type=float, default=0.0, help="Prepayment amount")
@click.option("--at", "prepay_month", type=int, default=1, help="Month of the prepayment (default: 1)")
@click.option("--schedule", is_flag=True, help="Print the remaining amortization schedule")
@click.pass_context
def loan(
    ctx: click.Context,
    amount: float,
    rate: float,
    periods: int,
    paid: int,
    prepay: float,
    prepay_month: int,
    schedule: bool,
) -> None:
    """
    Show a loan's payment and the effect of a prepayment.

    Example:
        cashplan loan -a 1000000 -r 2.5 -n 84 --paid 12 --prepay 300000 --at 6
    """
    console: Console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)

    from .amortization import amortization_schedule
    from .loans import Loan, prepayment_summary

    try:
        item = Loan(
            "Loan",
            amount,
            rate,
            periods,
            paid_periods=paid,
            enable_prepayment=prepay > 0,
            prepayment_amount=prepay,
            prepayment_month=prepay_month,
        )
        s = prepayment_summary(item)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if quiet:
        click.echo(f"Monthly payment: {_money(s.current_payment)}")
        return

    table = Table(title="Loan", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Original payment", _money(s.original_payment))
    table.add_row("Remaining balance", _money(s.current_balance))
    table.add_row("Current payment", _money(s.current_payment))
    if item.has_prepayment:
        table.add_row("", "")
        table.add_row("Balance after prepayment", _money(s.new_balance))
        table.add_row("Payment after prepayment", _money(s.new_payment))
        table.add_row("Payment reduction", _money(s.payment_reduction))
        table.add_row("Total without prepayment", _money(s.total_without_prepayment))
        table.add_row("Total with prepayment", _money(s.total_with_prepayment))
        table.add_row("Interest saved", _money(s.interest_saved))
        if s.fully_paid:
            table.add_row("Status", "[green]paid off[/green]")
    console.print(table)

    if schedule:
        frame = amortization_schedule(item.current_balance, rate, item.remaining_periods)
        sched = Table(title="Amortization schedule", show_header=True)
        sched.add_column("Period", style="cyan")
        for column in frame.columns:
            sched.add_column(column.capitalize(), justify="right")
        for period, row in frame.iterrows():
            sched.add_row(str(period), *(_money(v) for v in row))
        console.print(sched)


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------

@main.group()
def config() -> None:
    """
    Scenario file commands.

    Validate and create scenario files.
    """
    pass


@config.command("validate")
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def config_validate(ctx: click.Context, config_file: Path) -> None:
    """
    Validate a scenario file.

    Example:
        cashplan config validate household.json
    """
    console: Console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)

    from .serialization import load_scenario

    try:
        scenario = load_scenario(config_file)
    except (CashPlanError, OSError) as e:
        click.echo(f"Scenario validation failed: {e}", err=True)
        sys.exit(1)

    if quiet:
        click.echo("Scenario is valid")
        return
    info = (
        f"[bold]Scenario Valid[/bold]: {scenario.name}\n\n"
        f"[cyan]Income:[/cyan] {_money(scenario.income.amount)} ({scenario.income.recurrence_unit}), "
        f"{len(scenario.income.bonuses)} bonuses\n"
        f"[cyan]Expenses:[/cyan] {len(scenario.expenses)}\n"
        f"[cyan]Loans:[/cyan] {len(scenario.loans)}\n"
        f"[cyan]Horizon:[/cyan] {scenario.prediction_months} months"
        + (f" from {scenario.as_of.isoformat()}" if scenario.as_of else "")
    )
    console.print(Panel(info, title="Scenario Summary", border_style="green"))


def _template(name: str, months: int) -> ScenarioConfig:
    if name == "basic":
        return ScenarioConfig(
            name="basic",
            prediction_months=months,
            income=IncomeConfig(amount=45_000),
            expenses=[
                ExpenseConfig(name="Rent", amount=18_000),
                ExpenseConfig(name="Utilities", amount=2_500),
            ],
            investment=InvestmentPolicyConfig(monthly_savings=5_000, monthly_investment=5_000),
        )
    return ScenarioConfig(
        name="advanced",
        as_of=date.today().replace(day=1),
        prediction_months=months,
        income=IncomeConfig(
            amount=80_000,
            location="Taipei City",
            bonuses=[
                BonusConfig(
                    name="Year-end bonus",
                    amount=160_000,
                    month=1,
                    allocation=BonusAllocationConfig(savings=40, investment=40, consumption=20),
                )
            ],
        ),
        expenses=[
            ExpenseConfig(name="Rent", amount=25_000),
            ExpenseConfig(
                name="Insurance",
                amount=2_666,
                type="annual-recurring",
                total_installments=12,
                paid_installments=3,
                is_annual_recurring=True,
            ),
            ExpenseConfig(
                name="Phone installment",
                amount=1_500,
                type="annual-recurring",
                total_installments=24,
                paid_installments=6,
                early_payoff=True,
                payoff_month=6,
            ),
            ExpenseConfig(name="Car tax", amount=11_230, type="yearly", payment_date="2025-04-30"),
        ],
        loans=[
            LoanConfig(
                name="Credit loan",
                original_amount=1_000_000,
                annual_rate=2.5,
                total_periods=84,
                paid_periods=12,
                enable_prepayment=True,
                prepayment_amount=300_000,
                prepayment_month=6,
            )
        ],
        investment=InvestmentPolicyConfig(monthly_savings=10_000, monthly_investment=10_000, auto_allocate=True),
    )


@config.command("create")
@click.argument("output_file", type=click.Path(path_type=Path))
@click.option("--template", "-t", type=click.Choice(["basic", "advanced"]), default="basic")
@click.pass_context
def config_create(ctx: click.Context, output_file: Path, template: str) -> None:
    """
    Create a new scenario file from a template.

    Example:
        cashplan config create household.json --template advanced
    """
    console: Console = ctx.obj["console"]
    quiet = ctx.obj.get("quiet", False)
    settings: AppSettings = ctx.obj["settings"]

    from .serialization import save_scenario

    save_scenario(_template(template, settings.default_prediction_months), output_file)
    if not quiet:
        console.print(f"[green]Created scenario file: {output_file}[/green]")


# ---------------------------------------------------------------------------
# info
# ---------------------------------------------------------------------------

@main.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Display system and package information.

    Shows version numbers and installed dependencies.
    """
    console: Console = ctx.obj["console"]

    from importlib.metadata import PackageNotFoundError, version

    info_lines = [
        f"CashPlan Version: {__version__}",
        f"Python: {sys.version.split()[0]}",
    ]
    for name in ("numpy", "pandas", "pydantic", "pydantic-settings", "click", "rich"):
        try:
            info_lines.append(f"{name}: {version(name)}")
        except PackageNotFoundError:
            info_lines.append(f"{name}: not installed")

    console.print(Panel("\n".join(info_lines), title="System Information"))


if __name__ == "__main__":
    main()
