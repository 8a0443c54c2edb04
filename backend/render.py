# render.py
# display defaults for venue cards + the form page markup

from html import escape
from typing import List, Optional

from models import PREFERENCE_LABELS, Preference, VenueResult
from state import FormState

PLACEHOLDER = "N/A"
FREE_LABEL = "Gratis"
DEFAULT_NAME = "Lugar cultural"
DEFAULT_TYPE = "Cultural"
MORE_INFO = "Más información"


def _number(n: float) -> str:
    return str(int(n)) if float(n).is_integer() else str(n)


def format_score(score: Optional[float]) -> str:
    return f"{score:.2f}" if score is not None else PLACEHOLDER


def format_distance(km: Optional[float]) -> str:
    return f"{km:.2f} km" if km is not None else PLACEHOLDER


def format_price(price: Optional[float]) -> str:
    # 0 is free, missing is unknown
    if price is None:
        return PLACEHOLDER
    if price == 0:
        return FREE_LABEL
    return f"{_number(price)}€"


def results_heading(count: int) -> str:
    return f"{count} experiencias culturales encontradas"


def card(venue: VenueResult, index: int) -> dict:
    """Display-ready fields for one venue card."""
    return {
        "key": venue.id if venue.id is not None else index,
        "name": venue.name or DEFAULT_NAME,
        "type": venue.type or DEFAULT_TYPE,
        "score": format_score(venue.score),
        "distance": format_distance(venue.distanceKm),
        "price": format_price(venue.price),
        "free": venue.price == 0,
        "address": venue.address,
        "url": venue.url,
        "tags": venue.tags or [],
    }


def cards(venues: List[VenueResult]) -> List[dict]:
    return [card(v, i) for i, v in enumerate(venues)]


# ---- html ----

def _card_html(c: dict) -> str:
    price_cls = "price free" if c["free"] else "price"
    parts = [
        '<article class="card">',
        f'<span class="score">⭐ {escape(c["score"])}</span>',
        f'<h4>{escape(c["name"])}</h4>',
        f'<span class="type">{escape(c["type"])}</span>',
        f'<p>📍 Distancia: <strong>{escape(c["distance"])}</strong></p>',
        f'<p class="{price_cls}">💰 Precio: <strong>{escape(c["price"])}</strong></p>',
    ]
    if c["address"]:
        parts.append(f'<p>🏠 Dirección: {escape(c["address"])}</p>')
    if c["tags"]:
        parts.append('<p class="tags">' + " ".join(f"#{escape(t)}" for t in c["tags"]) + "</p>")
    if c["url"]:
        parts.append(
            f'<a href="{escape(c["url"], quote=True)}" target="_blank" '
            f'rel="noopener noreferrer">🔗 {MORE_INFO}</a>'
        )
    parts.append("</article>")
    return "\n".join(parts)


def _pref_html(pref: Preference, selected: bool) -> str:
    checked = " checked" if selected else ""
    return (
        f'<label class="pref"><input type="checkbox" name="prefs" value="{pref.value}"{checked}> '
        f"{escape(PREFERENCE_LABELS[pref])}</label>"
    )


def render_page(state: FormState) -> str:
    """Whole form page for the given state."""
    coords_html = ""
    hidden = ""
    if state.coordinates is not None:
        lat, lng = state.coordinates.lat, state.coordinates.lng
        coords_html = f"<small>Coordenadas: {state.coordinates.formatted(4)}</small>"
        hidden = (
            f'<input type="hidden" name="lat" value="{lat!r}">'
            f'<input type="hidden" name="lng" value="{lng!r}">'
        )

    geo_disabled = " disabled" if state.geo_loading else ""
    submit_disabled = " disabled" if state.loading else ""
    geo_label = "📍..." if state.geo_loading else "📍 Mi ubicación"
    submit_label = "🔍 Buscando..." if state.loading else "🚀 Buscar Experiencias"

    prefs_html = "\n".join(_pref_html(p, p in state.prefs) for p in Preference)

    error_html = ""
    if state.error:
        error_html = f'<div class="error">❌ {escape(state.error)}</div>'

    results_html = ""
    if state.results is not None:
        body = "\n".join(_card_html(c) for c in cards(state.results))
        results_html = (
            '<section class="results">'
            f"<h3>🎉 {results_heading(len(state.results))}</h3>"
            f'<div class="carousel">{body}</div>'
            "</section>"
        )

    return f"""<!doctype html>
<html lang="es">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>CulturaCerca</title>
</head>
<body>
<main>
<h1>CulturaCerca</h1>
<form method="get" action="/">
<label for="location">📍 Ubicación</label>
<input id="location" type="text" name="location" value="{escape(state.location, quote=True)}" placeholder="Madrid, Barcelona... o usa tu ubicación">
<button type="submit" name="action" value="locate"{geo_disabled}>{geo_label}</button>
{hidden}
{coords_html}
<label for="maxKm">📏 Distancia (km)</label>
<input id="maxKm" type="number" name="maxKm" min="1" max="100" value="{state.max_km}">
<label for="maxBudget">💰 Presupuesto (€)</label>
<input id="maxBudget" type="number" name="maxBudget" min="0" max="1000" value="{_number(state.max_budget)}">
<fieldset><legend>🎨 Preferencias</legend>
{prefs_html}
</fieldset>
<button type="submit" name="action" value="search"{submit_disabled}>{submit_label}</button>
</form>
{error_html}
{results_html}
</main>
</body>
</html>
"""
