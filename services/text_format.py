from datetime import date
from typing import Iterable, List, Optional

from services.ingredients import Ingredient


def kv(label: object, value: object) -> str:
    return f"{label}: {value}"


def bullet_list(items: Iterable[object], bullet: str = "*") -> str:
    lines: List[str] = []
    for item in items:
        text = str(item or "").strip()
        if text:
            lines.append(f"  {bullet} {text}")
    return "\n".join(lines)


def card(title: object, lines: Optional[Iterable[object]] = None) -> str:
    out: List[str] = [f"#### {title} ####"]
    for line in lines or []:
        value = str(line or "").rstrip()
        if value:
            out.append(value)
    return "\n".join(out)


def money(amount: float, currency: str = "kr") -> str:
    return f"{amount:.2f} {currency}"


def format_ingredient(ingredient: Ingredient, today: Optional[date] = None, currency: str = "kr") -> str:
    today = today or date.today()
    days = ingredient.days_until_expiry(today)
    head = f"{ingredient.name}: {ingredient.measurement} - Best before: {ingredient.expiry}"
    tail = f"Value: {money(ingredient.value, currency)}"
    if ingredient.is_expired(today):
        return f"  * {head} (Expired {abs(days)} days ago) {tail}"
    return f"  - {head} (in {days} days) {tail}"


def format_ledger(
    storage_name: str,
    ingredients: Iterable[Ingredient],
    today: Optional[date] = None,
    currency: str = "kr",
) -> str:
    lines = [format_ingredient(batch, today, currency) for batch in ingredients]
    return "\n".join([f" {storage_name}"] + (lines or ["   (Empty)"]))
