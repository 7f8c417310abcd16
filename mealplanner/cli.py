"""Command line views of a planned week, fetched from a running API.

Usage::

    flask --app main week --date 2024-03-06
    flask --app main shopping-list --api-url http://planner.example.com
"""

from __future__ import annotations

from datetime import date
from typing import Optional

import click
from flask import current_app
from flask.cli import with_appcontext

from .cache import WeekPlanner
from .client import PlannerClient
from .models import MEAL_TYPES
from .planner import week_days
from .schemas import parse_day


def _day_option(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return parse_day(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--date") from exc


def _load_week(api_url: Optional[str], day: Optional[str]) -> WeekPlanner:
    client = PlannerClient(api_url or current_app.config["PLANNER_API_URL"])
    planner = WeekPlanner(client, _day_option(day))
    if not planner.load():
        click.echo(planner.cache.error, err=True)
        raise SystemExit(1)
    return planner


@click.command("week")
@click.option("--date", "day", help="Any day of the week to show (YYYY-MM-DD). Defaults to today.")
@click.option("--api-url", help="Base URL of the planner API.")
@with_appcontext
def week_command(day: Optional[str], api_url: Optional[str]) -> None:
    """Print the breakfast, lunch and dinner plan for a week."""

    planner = _load_week(api_url, day)
    cache = planner.cache
    click.echo(f"Week of {cache.start.isoformat()} - {cache.end.isoformat()}")
    for current in week_days(cache.start):
        click.echo(current.strftime("%a %Y-%m-%d"))
        for meal_type in MEAL_TYPES:
            plan = cache.slot(current, meal_type)
            if plan is None:
                label = "-"
            elif plan.recipe is None:
                label = "(missing recipe)"
            else:
                label = plan.recipe.name
            click.echo(f"  {meal_type:<10}{label}")


@click.command("shopping-list")
@click.option("--date", "day", help="Any day of the week to shop for (YYYY-MM-DD). Defaults to today.")
@click.option("--api-url", help="Base URL of the planner API.")
@with_appcontext
def shopping_list_command(day: Optional[str], api_url: Optional[str]) -> None:
    """Print the categorized shopping list for a week."""

    planner = _load_week(api_url, day)
    grouped = planner.cache.shopping_list()
    click.echo(f"Shopping list for {planner.cache.start.isoformat()} - {planner.cache.end.isoformat()}")
    if not grouped:
        click.echo("No ingredients found. Plan some meals first!")
        return
    for category, items in grouped.items():
        click.echo(category)
        for item in items:
            click.echo(f"  [ ] {item.name} ({item.recipe})")


__all__ = ["shopping_list_command", "week_command"]
