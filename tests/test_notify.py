"""Tests for mention notifications."""

from mentionkit.notify import action_url, build_mention_notifications


def test_action_url_routes():
    """Test per-entity routing and the fallback."""
    assert action_url("order", "o1") == "/dashboard/orders/o1"
    assert action_url("purchase_order", "p1") == "/dashboard/purchase-orders/p1"
    assert action_url("sample", "s1") == "/dashboard/sourcing/s1"
    assert action_url("lead", "l1", routes={"lead": "/crm/leads/"}) == "/crm/leads/l1"


def test_one_notification_per_mentioned_id():
    """Test payload shape and order."""
    out = build_mention_notifications(
        "@[Bob](u2) and @[Alice](u1)", entity_type="order", entity_id="o7"
    )
    assert [n["user_id"] for n in out] == ["u2", "u1"]
    assert out[0] == {
        "user_id": "u2",
        "type": "mention",
        "title": "You were mentioned",
        "message": "You were mentioned in an update",
        "entity_type": "order",
        "entity_id": "o7",
        "action_url": "/dashboard/orders/o7",
    }


def test_dedupe_and_author():
    """Test repeated mentions and self-mentions."""
    text = "@[Bob](u2) @[Bob](u2) @[Me](u0)"
    assert [n["user_id"] for n in build_mention_notifications(text, "order", "o1", author_id="u0")] == ["u2"]
    assert [n["user_id"] for n in build_mention_notifications(text, "order", "o1", dedupe=False)] == ["u2", "u2", "u0"]


def test_no_mentions():
    """Test a note without references."""
    assert build_mention_notifications("plain @text", "order", "o1") == []
