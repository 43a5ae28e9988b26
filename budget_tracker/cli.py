"""Console interface for the budget tracker."""

from __future__ import annotations

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from budget.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from budget.services import (
    AccountBalanceService,
    BudgetService,
    DeductionService,
    IncomeService,
    ProjectionDateService,
    RecordService,
)
from budget.storage import JSONStorage
from budget.validators import DEDUCTION_CATEGORIES, FREQUENCIES, MAX_DAY, MIN_DAY

CATEGORY_LABELS = {
    "housing": "Housing",
    "transport": "Transport",
    "insurance": "Insurance",
    "utilities": "Utilities",
    "subscription": "Subscriptions",
    "other": "Other",
}

FREQUENCY_LABELS = {
    "monthly": "Monthly",
    "weekly": "Weekly",
    "yearly": "Yearly",
}


def _parse_amount(value: str) -> str:
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError("Amount must be a numeric value") from exc
    if not amount.is_finite():
        raise argparse.ArgumentTypeError("Amount must be a finite number")
    if amount <= 0:
        raise argparse.ArgumentTypeError("Amount must be greater than zero")
    return value


def _parse_non_negative(value: str) -> str:
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError("Overdraft limit must be a numeric value") from exc
    if not amount.is_finite():
        raise argparse.ArgumentTypeError("Overdraft limit must be a finite number")
    if amount < 0:
        raise argparse.ArgumentTypeError("Overdraft limit must not be negative")
    return value


def _parse_day(value: str) -> int:
    try:
        day = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid day '{value}'. Expected an integer.") from exc
    if not MIN_DAY <= day <= MAX_DAY:
        raise argparse.ArgumentTypeError(f"Day must be between {MIN_DAY} and {MAX_DAY}")
    return day


class Services:
    def __init__(self, data_dir: Path) -> None:
        storage = JSONStorage(data_dir)
        self.incomes = IncomeService(storage)
        self.deductions = DeductionService(storage)
        self.balances = AccountBalanceService(storage)
        self.dates = ProjectionDateService(storage)
        self.budget = BudgetService(self.incomes, self.deductions, self.dates)


def _format_income(income: Dict[str, Any]) -> str:
    frequency = FREQUENCY_LABELS.get(income["frequency"], income["frequency"])
    return (
        f"[{income['id']}] day {income['income_date']:>2} {income['amount']:>10}  "
        f"{income['description']} ({frequency})"
    )


def _format_deduction(deduction: Dict[str, Any]) -> str:
    category = CATEGORY_LABELS.get(deduction["category"], deduction["category"])
    return (
        f"[{deduction['id']}] day {deduction['deduction_date']:>2} {deduction['amount']:>10}  "
        f"{deduction['description']} ({category})"
    )


def _format_balance(balance: Dict[str, Any]) -> str:
    return (
        f"[{balance['id']}] day {balance['balance_date']:>2} {balance['amount']:>10}  "
        f"recorded {balance['created_at']}"
    )


def _not_found(label: str, record_id: str) -> RecordNotFoundError:
    return RecordNotFoundError(f"{label} {record_id} not found")


def _handle_records(
    args: argparse.Namespace,
    service: RecordService,
    label: str,
    formatter,
    payload: Dict[str, Any],
) -> None:
    if args.command == "add":
        record = service.add(payload)
        print(f"{label} added:\n" + formatter(record.to_dict()))
    elif args.command == "list":
        records = service.list()
        if not records:
            print(f"No {label.lower()} records found.")
            return
        print(f"Found {len(records)} {label.lower()} records:")
        for record in records:
            print(formatter(record.to_dict()))
    elif args.command == "edit":
        cleaned = {k: v for k, v in payload.items() if v is not None}
        record = service.update(args.id, cleaned)
        if record is None:
            raise _not_found(label, args.id)
        print(f"{label} updated:\n" + formatter(record.to_dict()))
    elif args.command == "delete":
        if not service.delete(args.id):
            raise _not_found(label, args.id)
        print(f"{label} {args.id} deleted.")


def handle_income(args: argparse.Namespace, services: Services) -> None:
    payload = {
        "description": getattr(args, "description", None),
        "amount": getattr(args, "amount", None),
        "frequency": getattr(args, "frequency", None),
        "income_date": getattr(args, "day", None),
    }
    _handle_records(args, services.incomes, "Income", _format_income, payload)


def handle_deduction(args: argparse.Namespace, services: Services) -> None:
    payload = {
        "description": getattr(args, "description", None),
        "amount": getattr(args, "amount", None),
        "category": getattr(args, "category", None),
        "deduction_date": getattr(args, "day", None),
    }
    _handle_records(args, services.deductions, "Deduction", _format_deduction, payload)


def handle_balance(args: argparse.Namespace, services: Services) -> None:
    payload = {
        "amount": getattr(args, "amount", None),
        "balance_date": getattr(args, "day", None),
    }
    _handle_records(args, services.balances, "Account balance", _format_balance, payload)


def handle_dates(args: argparse.Namespace, services: Services) -> None:
    if args.command == "add":
        dates = services.dates.add(args.day)
    elif args.command == "remove":
        dates = services.dates.remove(args.day)
    else:
        dates = services.dates.list()
    print("Projection dates: " + (", ".join(str(day) for day in dates) or "-"))


def _overdraft_options(args: argparse.Namespace) -> Tuple[bool, Decimal]:
    limit = Decimal(args.overdraft_limit) if args.overdraft_limit is not None else Decimal("0.00")
    return bool(args.overdraft), limit


def handle_summary(args: argparse.Namespace, services: Services) -> None:
    enabled, limit = _overdraft_options(args)
    summary = services.budget.summary(args.day, overdraft_enabled=enabled, overdraft_limit=limit)
    totals = summary["totals"]
    dashboard = summary["dashboard"]
    tracking = summary["tracking"]
    print(f"Day {summary['current_day']} of the month")
    print(f"  Total income:      {totals['total_income']:>12}")
    print(f"  Total deductions:  {totals['total_deductions']:>12}")
    print(f"  Remaining budget:  {totals['remaining_budget']:>12}")
    print(f"  Available (month): {dashboard['available']:>12}")
    print("Monthly tracking")
    print(f"  Processed income:      {tracking['processed_income']:>12}")
    print(f"  Processed deductions:  {tracking['processed_deductions']:>12}")
    print(f"  Budget so far:         {tracking['raw_budget']:>12}")
    print(f"  Available (today):     {tracking['available']:>12}")
    print(
        f"  Pending: {len(tracking['incomes']['pending'])} incomes, "
        f"{len(tracking['deductions']['pending'])} deductions"
    )
    if enabled:
        print(f"Overdraft (limit {summary['overdraft']['limit']})")
        print(
            f"  Month: used {dashboard['used_overdraft']}, "
            f"remaining {dashboard['remaining_overdraft']}"
        )
        print(
            f"  Today: used {tracking['used_overdraft']}, "
            f"remaining {tracking['remaining_overdraft']}"
        )


def handle_budget_at(args: argparse.Namespace, services: Services) -> None:
    current_day = services.budget.current_day(args.day)
    value = services.budget.budget_at(args.target, current_day)
    effective = min(args.target, current_day)
    print(f"Budget on day {args.target} (as of day {effective}): {value:.2f}")


def handle_projection(args: argparse.Namespace, services: Services) -> None:
    points = services.budget.series(args.dates, args.day)
    if not points:
        print("No projection dates configured.")
        return
    for point in points:
        marker = "today" if point.is_today else ("past" if point.is_past else "forecast")
        print(
            f"Day {point.date:>2}: income {point.cumulative_income:>10.2f}  "
            f"deductions {point.cumulative_deductions:>10.2f}  "
            f"budget {point.budget:>10.2f}  [{marker}]"
        )


def _add_record_commands(
    parser: argparse.ArgumentParser,
    entity: str,
    add_arguments,
    edit_arguments,
) -> None:
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help=f"Add a new {entity}")
    add_arguments(add)

    sub.add_parser("list", help=f"List {entity} records")

    edit = sub.add_parser("edit", help=f"Edit an existing {entity}")
    edit.add_argument("id")
    edit_arguments(edit)

    delete = sub.add_parser("delete", help=f"Delete an existing {entity}")
    delete.add_argument("id")


def _add_day_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--day",
        type=_parse_day,
        help="Current day of the month (default: today)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Budget Tracker CLI")
    parser.add_argument(
        "--data-dir",
        default="data",
        type=Path,
        help="Directory to store JSON data (default: ./data)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="entity", required=True)

    def income_add(p: argparse.ArgumentParser) -> None:
        p.add_argument("description")
        p.add_argument("amount", type=_parse_amount)
        p.add_argument("day", type=_parse_day)
        p.add_argument("--frequency", choices=sorted(FREQUENCIES), default="monthly")

    def income_edit(p: argparse.ArgumentParser) -> None:
        p.add_argument("--description")
        p.add_argument("--amount", type=_parse_amount)
        p.add_argument("--frequency", choices=sorted(FREQUENCIES))
        p.add_argument("--day", type=_parse_day)

    income_parser = subparsers.add_parser("income", help="Manage incomes")
    _add_record_commands(income_parser, "income", income_add, income_edit)

    def deduction_add(p: argparse.ArgumentParser) -> None:
        p.add_argument("description")
        p.add_argument("amount", type=_parse_amount)
        p.add_argument("category", choices=sorted(DEDUCTION_CATEGORIES))
        p.add_argument("day", type=_parse_day)

    def deduction_edit(p: argparse.ArgumentParser) -> None:
        p.add_argument("--description")
        p.add_argument("--amount", type=_parse_amount)
        p.add_argument("--category", choices=sorted(DEDUCTION_CATEGORIES))
        p.add_argument("--day", type=_parse_day)

    deduction_parser = subparsers.add_parser("deduction", help="Manage deductions")
    _add_record_commands(deduction_parser, "deduction", deduction_add, deduction_edit)

    def balance_add(p: argparse.ArgumentParser) -> None:
        p.add_argument("amount")
        p.add_argument("day", type=_parse_day)

    def balance_edit(p: argparse.ArgumentParser) -> None:
        p.add_argument("--amount")
        p.add_argument("--day", type=_parse_day)

    balance_parser = subparsers.add_parser("balance", help="Manage observed account balances")
    _add_record_commands(balance_parser, "account balance", balance_add, balance_edit)

    dates_parser = subparsers.add_parser("dates", help="Manage projection dates")
    dates_sub = dates_parser.add_subparsers(dest="command", required=True)
    dates_sub.add_parser("list", help="Show projection dates")
    dates_add = dates_sub.add_parser("add", help="Add a projection date")
    dates_add.add_argument("day", type=int)
    dates_remove = dates_sub.add_parser("remove", help="Remove a projection date")
    dates_remove.add_argument("day", type=int)

    summary_parser = subparsers.add_parser("summary", help="Show totals and available budget")
    _add_day_option(summary_parser)
    summary_parser.add_argument(
        "--overdraft",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Treat deficits as overdraft usage",
    )
    summary_parser.add_argument("--overdraft-limit", type=_parse_non_negative)

    budget_at_parser = subparsers.add_parser(
        "budget-at", help="Budget actually realised by a given day"
    )
    budget_at_parser.add_argument("target", type=_parse_day)
    _add_day_option(budget_at_parser)

    projection_parser = subparsers.add_parser("projection", help="Forecast budget at several days")
    projection_parser.add_argument(
        "--dates",
        nargs="+",
        type=_parse_day,
        help="Days to sample (default: stored projection dates)",
    )
    _add_day_option(projection_parser)

    return parser


HANDLERS = {
    "income": handle_income,
    "deduction": handle_deduction,
    "balance": handle_balance,
    "dates": handle_dates,
    "summary": handle_summary,
    "budget-at": handle_budget_at,
    "projection": handle_projection,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        services = Services(args.data_dir)
        HANDLERS[args.entity](args, services)
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
