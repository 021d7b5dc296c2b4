"""
adapters.cli.main - CLI adapter for the meal planner data layer.

A thin renderer over the caches and stores wired by ServiceFactory:
every command builds the factory, calls one or two operations and
prints the result.

Commands
--------
  login        Sign in (issues a local token, or adopts --token) and save it
  logout       Clear stored credentials
  recipes      List recipes, optionally by category
  categories   List recipe categories
  recipe       Show one recipe, optionally rescaled with --servings
  plan         Show the meal plan for a week
  plan-add     Put a recipe in a day's meal slot
  plan-remove  Remove (or --clear) a meal slot
  plan-slot    Add an empty meal slot to a day
  saved        List saved recipes (or --favorites)
  favorite     Toggle a recipe's favorite flag
  profile      Show your profile and preferences
  diet         Replace your dietary requirements
  portions     Set the number of people you cook for

Usage
-----
  python run_cli.py login alice
  python run_cli.py recipe abc123 --servings 2
  python run_cli.py plan-add Monday meal1 abc123
"""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import date
from pathlib import Path
from typing import NoReturn, Optional

# ── Ensure src/ is on the path ──
_SRC = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(_SRC))

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adapters.cli.session import Session, clear_session, load_session, save_session
from application.dto import CacheStatus
from application.services.meal_plan import DAYS, week_start
from application.services.portions import format_ingredient_quantity, scale_recipe
from domain.exceptions import (
    ContentSourceError,
    MealPlanError,
    RecipeNotFoundError,
    SessionInvalidError,
)
from factory import ServiceFactory
from infrastructure.config import Settings

__version__ = "1.0.0"

console = Console()
app = typer.Typer(
    help="Meal planner CLI",
    add_completion=False,
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _require_session() -> Session:
    """Return the stored session or exit with a user-friendly error."""
    session = load_session()
    if session is None:
        console.print(
            "[bold red]Not signed in.[/bold red] Run [bold]login[/bold] first."
        )
        raise typer.Exit(code=1)
    return session


async def _make_factory(session: Optional[Session] = None) -> ServiceFactory:
    config = Settings.from_env()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    factory = ServiceFactory(config, token=session.access_token if session else None)
    await factory.initialize()
    return factory


def _parse_week(week: Optional[str]) -> date:
    if not week:
        return week_start(date.today())
    try:
        return week_start(date.fromisoformat(week))
    except ValueError:
        console.print(f"[bold red]Invalid date '{week}'.[/bold red] Use YYYY-MM-DD.")
        raise typer.Exit(code=1)


# palette names that rich does not know as-is
_RICH_COLORS = {"pink": "hot_pink", "purple": "medium_purple"}


def _rich_color(color: str) -> str:
    return _RICH_COLORS.get(color, color)


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]{message}[/bold red]")
    raise typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"mealplanner v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Meal planner CLI."""


# ---------------------------------------------------------------------------
# Commands: Session
# ---------------------------------------------------------------------------

@app.command()
def login(
    user_id: str = typer.Argument(..., help="Your user id."),
    token: Optional[str] = typer.Option(
        None, "--token", "-t", help="Adopt an existing access token instead of issuing one.",
    ),
) -> None:
    """Sign in and save credentials locally (~/.mealplanner/session.json)."""
    async def _run() -> None:
        factory = await _make_factory()
        sessions = factory.get_session_provider()
        access_token = token or sessions.issue_token(user_id)
        try:
            auth = sessions.sign_in(access_token)
        except SessionInvalidError as e:
            _fail(f"Login failed: {e}")
        if auth.user_id != user_id:
            _fail("Token belongs to a different user.")
        save_session(Session(user_id=user_id, access_token=access_token))
        console.print(Panel(
            f"[bold green]Signed in[/bold green] as [bold]{user_id}[/bold].",
            border_style="green",
        ))

    asyncio.run(_run())


@app.command()
def logout() -> None:
    """Sign out and clear stored credentials."""
    if load_session() is None:
        console.print("[dim]Not currently signed in.[/dim]")
        return
    clear_session()
    console.print("[green]Signed out.[/green]")


# ---------------------------------------------------------------------------
# Commands: Content
# ---------------------------------------------------------------------------

@app.command()
def recipes(
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Category id."),
) -> None:
    """List recipes from the CMS."""
    async def _run() -> None:
        factory = await _make_factory()
        content = factory.get_content_cache()
        with console.status("[bold cyan]Loading recipes…", spinner="dots"):
            await content.refresh()
        if content.status is CacheStatus.ERROR:
            _fail(content.error or "Could not load recipes.")

        items = content.recipes_in_category(category) if category else list(content.recipes)
        t = Table(box=box.SIMPLE, title=f"Recipes ({len(items)})")
        t.add_column("Id", style="dim")
        t.add_column("Title", style="bold")
        t.add_column("Servings", justify="right")
        t.add_column("kcal", justify="right")
        t.add_column("Categories")
        for r in items:
            t.add_row(
                r.id, r.title, str(r.servings or "-"), f"{r.total_kcal:g}",
                ", ".join(c.name for c in r.categories),
                style=_rich_color(content.color_for(r.id)),
            )
        console.print(t)

    asyncio.run(_run())


@app.command()
def categories() -> None:
    """List recipe categories."""
    async def _run() -> None:
        factory = await _make_factory()
        content = factory.get_content_cache()
        await content.refresh()
        if content.status is CacheStatus.ERROR:
            _fail(content.error or "Could not load categories.")
        t = Table(box=box.SIMPLE, title="Categories")
        t.add_column("Id", style="dim")
        t.add_column("Name", style="bold")
        t.add_column("Recipes", justify="right")
        for c in content.categories:
            t.add_row(c.id, c.name, str(len(content.recipes_in_category(c.id))))
        console.print(t)

    asyncio.run(_run())


@app.command()
def recipe(
    recipe_id: str = typer.Argument(..., help="Recipe id."),
    servings: Optional[int] = typer.Option(None, "--servings", "-s", help="Rescale to N servings."),
) -> None:
    """Show a recipe's ingredients and instructions."""
    async def _run() -> None:
        factory = await _make_factory()
        try:
            r = await factory.get_recipe_detail_cache().get(recipe_id)
        except RecipeNotFoundError:
            _fail(f"No recipe with id '{recipe_id}'.")
        except ContentSourceError as e:
            _fail(f"Could not load recipe: {e}")
        if servings is not None:
            r = scale_recipe(r, servings)

        header = f"[bold]{r.title}[/bold]  ({r.servings} servings, {r.total_kcal:g} kcal)"
        if r.total_macros:
            m = r.total_macros
            header += f"\nProtein {m.protein:g} g · Carbs {m.carbs:g} g · Fat {m.fat:g} g"
        if r.description:
            header += f"\n\n{r.description}"
        console.print(Panel(header, border_style="green"))

        t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
        t.add_column("Amount", justify="right")
        t.add_column("Ingredient", style="bold")
        t.add_column("Comment", style="dim")
        for ing in r.ingredients:
            t.add_row(format_ingredient_quantity(ing), ing.name, ing.comment)
        console.print(Panel(t, title="Ingredients", border_style="blue"))

        if r.instructions:
            steps = "\n".join(f"{i}. {s}" for i, s in enumerate(r.instructions, start=1))
            console.print(Panel(steps, title="Instructions", border_style="yellow"))

    asyncio.run(_run())


# ---------------------------------------------------------------------------
# Commands: Meal plan (device-local, no login required)
# ---------------------------------------------------------------------------

@app.command()
def plan(
    week: Optional[str] = typer.Option(None, "--week", "-w", help="Any date in the week (YYYY-MM-DD)."),
) -> None:
    """Show the meal plan for a week."""
    async def _run() -> None:
        factory = await _make_factory()
        store = factory.get_meal_plan_store()
        anchor = _parse_week(week) if week else store.current_week

        t = Table(box=box.SIMPLE, title=f"Week of {anchor.isoformat()}")
        t.add_column("Day", style="bold")
        t.add_column("Slot", style="dim")
        t.add_column("Meal")
        for day in DAYS:
            slots = store.display_slots(anchor, day)
            for i, slot in enumerate(slots):
                meal = slot.meal
                t.add_row(
                    day if i == 0 else "",
                    f"{slot.label} ({slot.slot_id})",
                    f"[{_rich_color(meal.color)}]{meal.recipe.title}[/]" if meal else "[dim]+ add[/dim]",
                )
            if not slots:
                t.add_row(day, "", "[dim]no slots[/dim]")
        console.print(t)
        await store.set_current_week(anchor)

    asyncio.run(_run())


@app.command("plan-add")
def plan_add(
    day: str = typer.Argument(..., help="Day label, e.g. Monday."),
    slot_id: str = typer.Argument(..., help="Slot id, e.g. meal1."),
    recipe_id: str = typer.Argument(..., help="Recipe id."),
    week: Optional[str] = typer.Option(None, "--week", "-w", help="Any date in the week (YYYY-MM-DD)."),
) -> None:
    """Put a recipe into a day's meal slot."""
    async def _run() -> None:
        factory = await _make_factory()
        try:
            r = await factory.get_recipe_detail_cache().get(recipe_id)
        except ContentSourceError as e:
            _fail(f"Could not load recipe: {e}")
        try:
            await factory.get_meal_plan_store().add_meal_to_day(_parse_week(week), day, slot_id, r)
        except MealPlanError as e:
            _fail(str(e))
        console.print(f"[green]Planned[/green] [bold]{r.title}[/bold] for {day} {slot_id}.")

    asyncio.run(_run())


@app.command("plan-remove")
def plan_remove(
    day: str = typer.Argument(..., help="Day label, e.g. Monday."),
    slot_id: str = typer.Argument(..., help="Slot id, e.g. meal2."),
    week: Optional[str] = typer.Option(None, "--week", "-w", help="Any date in the week (YYYY-MM-DD)."),
    clear: bool = typer.Option(False, "--clear", help="Empty the slot but keep it."),
) -> None:
    """Remove a meal slot from a day."""
    async def _run() -> None:
        factory = await _make_factory()
        store = factory.get_meal_plan_store()
        try:
            if clear:
                await store.clear_meal(_parse_week(week), day, slot_id)
            else:
                await store.remove_meal_from_day(_parse_week(week), day, slot_id)
        except MealPlanError as e:
            _fail(str(e))
        console.print(f"[green]{'Cleared' if clear else 'Removed'}[/green] {day} {slot_id}.")

    asyncio.run(_run())


@app.command("plan-slot")
def plan_slot(
    day: str = typer.Argument(..., help="Day label, e.g. Monday."),
    week: Optional[str] = typer.Option(None, "--week", "-w", help="Any date in the week (YYYY-MM-DD)."),
) -> None:
    """Add an empty meal slot to a day."""
    async def _run() -> None:
        factory = await _make_factory()
        try:
            slot_id = await factory.get_meal_plan_store().add_meal_slot_to_day(_parse_week(week), day)
        except MealPlanError as e:
            _fail(str(e))
        console.print(f"[green]Added[/green] {slot_id} to {day}.")

    asyncio.run(_run())


# ---------------------------------------------------------------------------
# Commands: Saved recipes (requires login)
# ---------------------------------------------------------------------------

@app.command()
def saved(
    favorites: bool = typer.Option(False, "--favorites", "-f", help="Only favorites."),
) -> None:
    """List your saved recipes."""
    session = _require_session()

    async def _run() -> None:
        factory = await _make_factory(session)
        cache = factory.get_saved_recipe_cache()
        with console.status("[bold cyan]Loading saved recipes…", spinner="dots"):
            if favorites:
                await cache.refresh_favorites()
            else:
                await cache.refresh()
        if cache.status is CacheStatus.SIGNED_OUT:
            _fail("Not signed in.")
        if cache.status is CacheStatus.ERROR:
            _fail(cache.error or "Could not load saved recipes.")

        links = cache.favorites if favorites else cache.saved
        t = Table(box=box.SIMPLE, title="Favorites" if favorites else "Saved recipes")
        t.add_column("Recipe", style="bold")
        t.add_column("Saved", style="dim")
        t.add_column("★", justify="center")
        t.add_column("Notes")
        for link in links:
            t.add_row(
                link.recipe.title if link.recipe else link.recipe_id,
                link.saved_at[:10],
                "★" if link.is_favorite else "",
                link.notes or "",
            )
        console.print(t)

    asyncio.run(_run())


@app.command()
def favorite(
    recipe_id: str = typer.Argument(..., help="Recipe id."),
) -> None:
    """Toggle a recipe's favorite flag (saving it if needed)."""
    session = _require_session()

    async def _run() -> None:
        factory = await _make_factory(session)
        cache = factory.get_saved_recipe_cache()
        await cache.refresh()
        try:
            is_fav = await cache.toggle_favorite(session.user_id, recipe_id)
        except SessionInvalidError as e:
            _fail(str(e))
        state = "[bold yellow]★ favorite[/bold yellow]" if is_fav else "no longer a favorite"
        console.print(f"Recipe {recipe_id} is {state}.")

    asyncio.run(_run())


# ---------------------------------------------------------------------------
# Commands: Profile (requires login)
# ---------------------------------------------------------------------------

@app.command()
def profile() -> None:
    """Show your profile, preferences, budget and portions."""
    session = _require_session()

    async def _run() -> None:
        factory = await _make_factory(session)
        cache = factory.get_profile_cache()
        await cache.refresh()
        if cache.status is CacheStatus.ERROR:
            _fail(cache.error or "Could not load profile.")
        snap = await cache.current()
        if snap is None:
            _fail("Not signed in.")

        t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
        t.add_column("Field", style="bold")
        t.add_column("Value")
        p = snap.profile
        t.add_row("Name", (p.full_name if p else "") or "[dim]—[/dim]")
        if p and p.age:
            t.add_row("Age", p.age)
        if p and p.weight:
            t.add_row("Weight", p.weight)
        if p and p.height:
            t.add_row("Height", p.height)
        console.print(Panel(t, title="Your Profile", border_style="blue"))

        t2 = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
        t2.add_column("Field", style="bold")
        t2.add_column("Value")
        t2.add_row(
            "Dietary requirements",
            ", ".join(d.requirement_type for d in snap.dietary_requirements) or "[dim]none[/dim]",
        )
        t2.add_row(
            "Allergies",
            ", ".join(
                f"{a.allergy_name} ({a.severity.value})" if a.severity else a.allergy_name
                for a in snap.allergies
            ) or "[dim]none[/dim]",
        )
        t2.add_row(
            "Cuisines",
            ", ".join(f.preference_value for f in snap.food_preferences) or "[dim]none[/dim]",
        )
        if snap.budget:
            t2.add_row("Budget", f"{snap.budget.amount:g} / {snap.budget.period.value}")
        if snap.portions:
            t2.add_row("Portions", str(snap.portions.number_of_people))
        console.print(Panel(t2, title="Preferences", border_style="yellow"))

    asyncio.run(_run())


@app.command()
def diet(
    requirements: list[str] = typer.Argument(..., help="Dietary requirement names or values."),
) -> None:
    """Replace your dietary requirements."""
    session = _require_session()

    async def _run() -> None:
        factory = await _make_factory(session)
        catalog = factory.get_preference_catalog()
        try:
            await catalog.dietary_options()
        except ContentSourceError as e:
            _fail(f"Could not load dietary options: {e}")
        values = []
        for item in requirements:
            value = catalog.dietary_value(item)
            if value is None:
                _fail(f"Unknown dietary requirement '{item}'.")
            values.append(value)
        try:
            rows = await factory.get_profile_cache().save_dietary_requirements(
                session.user_id, values,
            )
        except SessionInvalidError as e:
            _fail(str(e))
        console.print(
            "[green]Saved[/green] " + (", ".join(r.requirement_type for r in rows) or "no requirements")
        )

    asyncio.run(_run())


@app.command()
def portions(
    number_of_people: int = typer.Argument(..., help="How many people you cook for."),
) -> None:
    """Set the number of people you usually cook for."""
    session = _require_session()

    async def _run() -> None:
        factory = await _make_factory(session)
        try:
            row = await factory.get_profile_cache().save_portions(session.user_id, number_of_people)
        except (SessionInvalidError, ValueError) as e:
            _fail(str(e))
        console.print(f"[green]Portions set to[/green] {row.number_of_people}.")

    asyncio.run(_run())


if __name__ == "__main__":
    app()
