from models import Coordinates, Preference, VenueResult
from render import card, format_distance, format_price, format_score, render_page, results_heading
from state import FormState


def test_price_free_unknown_and_paid_never_conflated():
    assert format_price(0) == "Gratis"
    assert format_price(0.0) == "Gratis"
    assert format_price(None) == "N/A"
    assert format_price(12) == "12€"
    assert format_price(12.5) == "12.5€"


def test_score_and_distance_placeholders():
    assert format_score(None) == "N/A"
    assert format_score(4.567) == "4.57"
    assert format_score(0) == "0.00"
    assert format_distance(None) == "N/A"
    assert format_distance(1.2345) == "1.23 km"


def test_card_defaults():
    c = card(VenueResult(), 3)
    assert c["key"] == 3
    assert c["name"] == "Lugar cultural"
    assert c["type"] == "Cultural"
    assert c["score"] == "N/A"
    assert c["distance"] == "N/A"
    assert c["price"] == "N/A"
    assert c["free"] is False
    assert c["url"] is None


def test_card_uses_venue_fields():
    v = VenueResult(id="p1", name="Museo del Prado", type="museum", score=0.91, distanceKm=2.5, price=0,
                    address="Calle de Ruiz de Alarcón 23", url="https://www.museodelprado.es", tags=["arte"])
    c = card(v, 0)
    assert c["key"] == "p1"
    assert c["price"] == "Gratis"
    assert c["free"] is True
    assert c["distance"] == "2.50 km"
    assert c["tags"] == ["arte"]


def test_results_heading():
    assert results_heading(0) == "0 experiencias culturales encontradas"


def test_page_without_results_has_no_results_section():
    html = render_page(FormState())
    assert "experiencias culturales encontradas" not in html
    assert 'class="error"' not in html


def test_page_empty_results_still_shows_heading():
    html = render_page(FormState(location="Madrid", results=[]))
    assert "0 experiencias culturales encontradas" in html


def test_page_link_only_when_url_present():
    with_url = render_page(FormState(results=[VenueResult(name="A", url="https://a.example")]))
    without_url = render_page(FormState(results=[VenueResult(name="B")]))
    assert "Más información" in with_url
    assert "Más información" not in without_url


def test_page_escapes_user_and_upstream_text():
    html = render_page(
        FormState(location='"><script>', results=[VenueResult(name="<b>x</b>")], error="<i>bad</i>")
    )
    assert "<script>" not in html
    assert "<b>x</b>" not in html
    assert "&lt;i&gt;bad&lt;/i&gt;" in html


def test_page_shows_coordinates_and_disables_controls():
    state = FormState(
        location="40.416775, -3.703790",
        coordinates=Coordinates(lat=40.4167754, lng=-3.7037902),
        loading=True,
        geo_loading=True,
        prefs=(Preference.galleries,),
    )
    html = render_page(state)
    assert "Coordenadas: 40.4168, -3.7038" in html
    assert 'name="lat" value="40.4167754"' in html
    assert 'value="search" disabled' in html
    assert 'value="locate" disabled' in html
    assert 'value="galleries" checked' in html
