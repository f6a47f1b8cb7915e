# run.py

import argparse
import datetime
import json
import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ai import planner
from ai.gemini import GeminiTransport
from core.config import Settings
from core.errors import ConfigurationError, TransportError
from core.log import setup_logging
from core.models import TRIP_STYLES, GeneratedItinerary, TripRequest, itinerary_to_dict

console = Console()


def _csv(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate a trip itinerary with Gemini.")
    p.add_argument("--from-json", dest="from_json", help="stored trip request (JSON file)")
    p.add_argument("--origin")
    p.add_argument("--city", "--dest", dest="destination")
    p.add_argument("--start")  # YYYY-MM-DD
    p.add_argument("--end")
    p.add_argument("--budget", type=float)
    p.add_argument("--travelers", type=int, default=1)
    p.add_argument("--style", choices=TRIP_STYLES, default="balanced")
    p.add_argument("--prefs", type=_csv, default=["sightseeing"])
    p.add_argument("--transport", type=_csv, default=["flight"])
    p.add_argument("--diet", type=_csv)
    p.add_argument("--access", type=_csv)
    p.add_argument("--json", action="store_true", help="print the itinerary as JSON")
    return p.parse_args(argv)


def trip_from_args(args: argparse.Namespace) -> TripRequest:
    if args.from_json:
        with open(args.from_json, encoding="utf-8") as f:
            record = json.load(f)
        try:
            return TripRequest.from_dict(record)
        except ValueError as e:
            raise SystemExit(f"Invalid trip request in {args.from_json}: {e}")

    missing = [n for n in ("origin", "destination", "start", "end", "budget") if getattr(args, n) is None]
    if missing:
        raise SystemExit(f"Missing arguments: {', '.join('--' + m for m in missing)} (or use --from-json)")

    return TripRequest(
        start_location=args.origin,
        destination=args.destination,
        budget=args.budget,
        trip_style=args.style,
        start_date=datetime.date.fromisoformat(args.start),
        end_date=datetime.date.fromisoformat(args.end),
        travelers=args.travelers,
        preferences=args.prefs,
        transportation=args.transport,
        dietary_restrictions=args.diet,
        accessibility=args.access,
    )


def print_itinerary(itin: GeneratedItinerary) -> None:
    # model text may contain [brackets] that rich would read as markup
    e = escape
    if itin.is_degraded:
        console.print(f"[bold red]Partial itinerary ({itin.degraded_reason}) – some data is unavailable.[/]")

    console.print(f"[bold green]{e(itin.destination)}[/]  {e(itin.start_date)} → {e(itin.end_date)}, {itin.travelers} traveler(s)")
    console.print(f"[dim]{e(itin.weather_summary)}[/]\n")

    for day in itin.daily_itinerary:
        console.print(f"[yellow]{e(day.date)}[/]  ({e(day.weather)})")
        for a in day.activities:
            console.print(f"  {e(a.time):<20} {e(a.name)} – {e(a.location)} ({a.cost})")
            if a.meal_suggestion:
                meal = a.meal_suggestion
                console.print(f"  {'':<20} [dim]meal: {e(meal.restaurant)}, {e(meal.cuisine)}[/]")

    console.print("\n[bold]Accommodations[/]")
    for acc in itin.accommodations:
        console.print(f"  {e(acc.name)} – {acc.price} ({acc.rating}/5), {e(', '.join(acc.amenities))}")

    budget = itin.budget_breakdown
    table = Table(title=f"Budget {budget.total_budget} (contingency {budget.contingency_amount})")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    table.add_column("%", justify="right")
    for c in budget.categories:
        table.add_row(e(c.name), str(c.amount), str(c.percentage))
    console.print(table)

    console.print("[bold]Packing list[/]")
    for cat in itin.packing_list:
        items = ", ".join(f"{i.name}{'*' if i.essential else ''}" for i in cat.items)
        console.print(f"  {e(cat.category)}: {e(items)}")


def main(argv=None) -> int:
    args = parse_args(argv)
    trip = trip_from_args(args)

    try:
        settings = Settings.from_env()
        setup_logging(settings.log_level)
        transport = GeminiTransport.from_settings(settings)
        with console.status("Generating itinerary with Gemini…"):
            itin = planner.generate_itinerary(trip, transport)
    except (ConfigurationError, TransportError) as e:
        console.print(f"[bold red]❌ {type(e).__name__}:[/] {escape(str(e))}")
        return 1

    if args.json:
        console.print_json(json.dumps(itinerary_to_dict(itin)))
    else:
        print_itinerary(itin)
    return 0


if __name__ == "__main__":
    sys.exit(main())
