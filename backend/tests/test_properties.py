"""
Property-based tests for cart reconciliation and session activation.
"""

from hypothesis import HealthCheck, given, settings as hypothesis_settings, strategies as st
from sqlalchemy import select

from rest_api.models import MenuItem, PopupSession
from rest_api.services.domain import CartService, SessionService, normalize_cart_lines
from shared.config.constants import Limits
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import CartLine

DB_SETTINGS = hypothesis_settings(
    max_examples=40,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

raw_values = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-5, max_value=50),
    st.floats(allow_nan=True, allow_infinity=True),
    st.text(max_size=4),
)
raw_lines = st.lists(
    st.one_of(
        raw_values,
        st.fixed_dictionaries({"menu_item_id": raw_values, "quantity": raw_values}),
    ),
    max_size=12,
)


def _oversized(raw_line) -> bool:
    if not isinstance(raw_line, dict):
        return False
    quantity = raw_line.get("quantity")
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        return False
    return quantity >= Limits.MAX_QUANTITY + 1


@given(raw=raw_lines)
def test_normalized_lines_are_usable(raw):
    try:
        lines = normalize_cart_lines(raw)
    except ValidationError:
        assert any(_oversized(line) for line in raw)
        return

    assert len(lines) <= len(raw)
    for line in lines:
        assert isinstance(line.menu_item_id, int) and line.menu_item_id > 0
        assert isinstance(line.quantity, int) and 0 < line.quantity <= Limits.MAX_QUANTITY


class TestReconciliationPartition:

    @DB_SETTINGS
    @given(
        picks=st.lists(
            st.tuples(st.integers(min_value=0, max_value=4), st.integers(min_value=1, max_value=9)),
            max_size=10,
        )
    )
    def test_every_line_lands_in_exactly_one_list(self, db_session, make_menu_item, picks):
        # Examples share the database, so the catalog is created once
        catalog = {item.name: item.id for item in db_session.scalars(select(MenuItem)).all()}
        if not catalog:
            for name, price, is_active in (("Espresso", 300, True), ("Mocha", 500, True), ("Seasonal", 650, False)):
                catalog[name] = make_menu_item(name, price, is_active=is_active).id
        orderable = {catalog["Espresso"], catalog["Mocha"]}
        candidate_ids = [catalog["Espresso"], catalog["Mocha"], catalog["Seasonal"], 90001, 90002]

        lines = [CartLine(menu_item_id=candidate_ids[i], quantity=q) for i, q in picks]
        result = CartService(db_session).refresh_cart_items(lines)

        assert len(result.active) + len(result.removed) == len(lines)
        assert [a.quantity for a in result.active] == [
            line.quantity for line in lines if line.menu_item_id in orderable
        ]
        for removed in result.removed:
            expected = "INACTIVE" if removed.menu_item_id == catalog["Seasonal"] else "NOT_FOUND"
            assert removed.reason == expected


class TestActivationExclusivity:

    @DB_SETTINGS
    @given(sequence=st.lists(st.integers(min_value=0, max_value=3), min_size=1, max_size=8))
    def test_at_most_one_active_session(self, db_session, sequence):
        service = SessionService(db_session)
        session_ids = [s.id for s in service.list_sessions()]
        while len(session_ids) < 4:
            session_ids.append(service.create_session(f"Market {len(session_ids)}").id)

        for index in sequence:
            service.activate_session(session_ids[index])

        active = db_session.scalars(
            select(PopupSession.id).where(PopupSession.is_active.is_(True))
        ).all()
        assert active == [session_ids[sequence[-1]]]
