import logging

import pytest

from confstore import ConfigStore


@pytest.fixture()
def store(tmp_path) -> ConfigStore:
    return ConfigStore(cwd=tmp_path)


def test_on_did_change_fires_for_watched_key_only(store):
    events = []
    store.on_did_change("foo", lambda new, old: events.append((new, old)))

    store.set("foo", "x")
    assert events == [("x", None)]

    store.set("other", "y")
    assert events == [("x", None)]


def test_on_did_change_reports_old_value_and_deletes(store):
    store.set("foo", "a")
    events = []
    store.on_did_change("foo", lambda new, old: events.append((new, old)))

    store.set("foo", "b")
    store.delete("foo")

    assert events == [("b", "a"), (None, "b")]


def test_on_did_change_uses_deep_equality(store):
    store.set("foo", {"items": [1, 2], "enabled": True})
    events = []
    store.on_did_change("foo", lambda new, old: events.append(new))

    store.set("foo", {"items": [1, 2], "enabled": True})
    assert events == []

    store.set("foo", {"items": [1, 2, 3], "enabled": True})
    assert events == [{"items": [1, 2, 3], "enabled": True}]


def test_on_did_change_compares_blank_values_as_missing(store):
    events = []
    store.on_did_change("flag", lambda new, old: events.append((new, old)))

    store.set("flag", False)

    assert events == []


def test_clear_notifies_watchers(store):
    store.set({"a": 1, "b": 2})
    events = []
    store.on_did_change("a", lambda new, old: events.append(("a", new, old)))
    store.on_did_change("b", lambda new, old: events.append(("b", new, old)))

    store.clear()

    assert events == [("a", None, 1), ("b", None, 2)]


def test_callback_runs_before_set_returns(store):
    seen_on_disk = []
    store.on_did_change("foo", lambda new, old: seen_on_disk.append(store.store))

    store.set("foo", "bar")

    assert seen_on_disk == [{"foo": "bar"}]


def test_unsubscribe(store):
    events = []
    unsubscribe = store.on_did_change("foo", lambda new, old: events.append(new))
    assert store.notifier.subscriptions == 1

    store.set("foo", 1)
    unsubscribe()
    store.set("foo", 2)
    unsubscribe()

    assert events == [1]
    assert store.notifier.subscriptions == 0


def test_on_did_change_validates_arguments(store):
    with pytest.raises(TypeError):
        store.on_did_change(1, lambda new, old: None)
    with pytest.raises(TypeError):
        store.on_did_change("foo", "not callable")
    with pytest.raises(TypeError):
        store.on_did_any_change(None)
    assert store.notifier.subscriptions == 0


def test_on_did_any_change(store):
    store.set("a", 1)
    events = []
    unsubscribe = store.on_did_any_change(lambda new, old: events.append((new, old)))

    store.set("b", 2)
    store.set("b", 2)
    unsubscribe()
    store.set("c", 3)

    assert events == [({"a": 1, "b": 2}, {"a": 1})]


def test_failing_callback_is_logged(store, caplog):
    def explode(new, old):
        raise RuntimeError("boom")

    events = []
    store.on_did_change("foo", explode)
    store.on_did_change("foo", lambda new, old: events.append(new))

    with caplog.at_level(logging.ERROR, logger="confstore.core.change_notifier"):
        store.set("foo", "bar")

    assert store.get("foo") == "bar"
    assert events == ["bar"]
    assert "Change callback for key 'foo' raised" in caplog.text


def test_instances_on_same_file_do_not_share_notifications(tmp_path):
    first = ConfigStore(cwd=tmp_path)
    second = ConfigStore(cwd=tmp_path)
    events = []
    second.on_did_change("foo", lambda new, old: events.append(new))

    first.set("foo", "bar")

    assert events == []
    assert second.get("foo") == "bar"
