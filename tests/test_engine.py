"""Tests for the StateEngine orchestrator."""

import json
import random

import pytest

from emochild.engine import StateEngine
from emochild.errors import ValidationError
from emochild.models import CreatureCustomization, CreatureState
from emochild.storage import UNAVAILABLE_MESSAGE, Storage
from emochild.store import FileStore, MemoryStore


def _reload(file_store: FileStore) -> StateEngine:
    """A second session over the same data directory."""
    eng = StateEngine(Storage(file_store))
    eng.initialize()
    return eng


# ── Initialize ───────────────────────────────────────────────


def test_fresh_session_defaults(engine: StateEngine):
    snap = engine.snapshot
    assert snap.logs == []
    assert snap.safety_score == 0
    assert snap.creature_state == CreatureState(brightness=50, size=50, animation="idle")
    assert snap.text_color_preference == "white"
    assert snap.micro_sentence_index == 0


def test_initialize_restores_previous_session(engine: StateEngine, file_store: FileStore):
    engine.add_log("feeling happy", "expressed")
    engine.set_customization(CreatureCustomization(name="Pip", color="blue", has_bow=True))
    engine.set_text_color_preference("yellow")
    engine.set_micro_sentence_index(4)

    snap = _reload(file_store).snapshot
    assert len(snap.logs) == 1
    assert snap.safety_score == 1
    assert snap.creature_state.brightness == 55
    assert snap.customization.name == "Pip"
    assert snap.text_color_preference == "yellow"
    assert snap.micro_sentence_index == 4


def test_reload_rederives_animation_as_idle(engine: StateEngine, file_store: FileStore):
    engine.add_log("feeling happy", "expressed")
    assert engine.snapshot.creature_state.animation == "grow"
    assert _reload(file_store).snapshot.creature_state.animation == "idle"


def test_initialize_with_one_corrupt_slice(engine: StateEngine, file_store: FileStore):
    engine.add_log("feeling happy", "expressed")
    file_store.set_item("emochild_creature", '{"brightness": 99}')
    snap = _reload(file_store).snapshot
    assert snap.creature_state == CreatureState()
    assert snap.safety_score == 1
    assert len(snap.logs) == 1


# ── add_log ──────────────────────────────────────────────────


def test_add_expressed_on_fresh_session(engine: StateEngine):
    snap = engine.add_log("feeling happy", "expressed")
    assert len(snap.logs) == 1
    assert snap.safety_score == 1
    assert snap.creature_state.animation == "grow"


def test_add_suppressed(engine: StateEngine):
    snap = engine.add_log("pushed it down", "suppressed")
    assert len(snap.logs) == 1
    assert snap.safety_score == 0
    assert snap.creature_state.animation == "curl"
    assert snap.creature_state.brightness == 47


def test_add_log_fields(engine: StateEngine):
    snap = engine.add_log("  nervous  ", "suppressed", text_color="mint", quick_emotion="anxious")
    log = snap.logs[0]
    assert log.text == "nervous"
    assert log.text_color == "mint"
    assert log.quick_emotion == "anxious"
    assert log.id


def test_add_log_uses_text_color_preference(engine: StateEngine):
    engine.set_text_color_preference("orange")
    assert engine.add_log("x", "expressed").logs[0].text_color == "orange"


def test_ids_are_unique(engine: StateEngine):
    for _ in range(20):
        engine.add_log("again", "expressed")
    ids = [log.id for log in engine.snapshot.logs]
    assert len(set(ids)) == 20


@pytest.mark.parametrize("text", ["", "   ", "x" * 101])
def test_add_log_rejects_bad_text(engine: StateEngine, text: str):
    with pytest.raises(ValidationError):
        engine.add_log(text, "expressed")
    snap = engine.snapshot
    assert snap.logs == []
    assert snap.safety_score == 0
    assert engine.last_results == []


def test_add_log_accepts_100_chars_after_trim(engine: StateEngine):
    snap = engine.add_log(" " + "x" * 100 + " ", "expressed")
    assert len(snap.logs[0].text) == 100


@pytest.mark.parametrize("text", [123, None, ["feeling"]])
def test_add_log_rejects_non_string_text(engine: StateEngine, text):
    with pytest.raises(ValidationError):
        engine.add_log(text, "expressed")
    assert engine.snapshot.logs == []


@pytest.mark.parametrize("kwargs", [
    {"action": "ignored"},
    {"action": "expressed", "text_color": "ultraviolet"},
    {"action": "expressed", "quick_emotion": "bored"},
])
def test_add_log_rejects_bad_tags(engine: StateEngine, kwargs):
    with pytest.raises(ValidationError):
        engine.add_log("hello", **kwargs)
    assert engine.snapshot.logs == []


def test_add_log_persists_three_slices(engine: StateEngine, file_store: FileStore):
    engine.add_log("feeling happy", "expressed")
    assert [r.success for r in engine.last_results] == [True, True, True]
    assert file_store.get_item("emochild_safety") == "1"
    assert file_store.get_item("emochild_creature") is not None
    assert file_store.get_item("emochild_logs") is not None


def test_timestamps_never_go_backwards(storage: Storage):
    times = iter([5_000, 3_000, 9_000])
    eng = StateEngine(storage, clock=lambda: next(times))
    eng.initialize()
    for _ in range(3):
        eng.add_log("tick", "expressed")
    assert [log.timestamp for log in eng.snapshot.logs] == [5_000, 5_000, 9_000]


@pytest.mark.parametrize("seed", range(3))
def test_invariants_over_random_sequences(engine: StateEngine, seed: int):
    rng = random.Random(seed)
    for i in range(150):
        before = engine.snapshot
        action = rng.choice(["expressed", "suppressed"])
        after = engine.add_log(f"entry {i}", action)
        assert len(after.logs) == len(before.logs) + 1
        expected = before.safety_score + (1 if action == "expressed" else 0)
        assert after.safety_score == expected
        assert 0 <= after.creature_state.brightness <= 100
        assert 0 <= after.creature_state.size <= 100


def test_reaching_full_brightness_celebrates(engine: StateEngine):
    snap = None
    for _ in range(10):
        snap = engine.add_log("yes", "expressed")
    assert snap.creature_state.brightness == 100
    assert snap.creature_state.animation == "celebrate"


# ── delete_log ───────────────────────────────────────────────


def test_delete_log(engine: StateEngine, file_store: FileStore):
    first = engine.add_log("one", "expressed").logs[0]
    engine.add_log("two", "suppressed")
    snap = engine.delete_log(first.id)
    assert [log.text for log in snap.logs] == ["two"]
    assert [log.text for log in _reload(file_store).snapshot.logs] == ["two"]


def test_delete_unknown_log_is_noop(engine: StateEngine):
    engine.add_log("one", "expressed")
    before = engine.snapshot
    after = engine.delete_log("does-not-exist")
    assert after == before


def test_delete_does_not_reverse_derived_state(engine: StateEngine):
    log = engine.add_log("one", "expressed").logs[0]
    before = engine.snapshot
    after = engine.delete_log(log.id)
    assert after.logs == []
    assert after.safety_score == before.safety_score == 1
    assert after.creature_state.brightness == before.creature_state.brightness
    assert after.creature_state.size == before.creature_state.size


# ── History ──────────────────────────────────────────────────


def test_history_orders_loaded_logs(file_store: FileStore):
    stored = [
        {"id": "b", "text": "second", "action": "expressed", "timestamp": 2_000},
        {"id": "c", "text": "third", "action": "suppressed", "timestamp": 3_000},
        {"id": "a", "text": "first", "action": "expressed", "timestamp": 1_000},
    ]
    file_store.set_item("emochild_logs", json.dumps(stored))
    eng = _reload(file_store)
    assert [log.id for log in eng.snapshot.logs] == ["b", "c", "a"]
    assert [log.id for log in eng.history()] == ["c", "b", "a"]
    assert [log.id for log in eng.history(newest_first=False)] == ["a", "b", "c"]


# ── Settings ─────────────────────────────────────────────────


def test_set_customization_from_dict(engine: StateEngine, file_store: FileStore):
    engine.set_customization({"name": "Mochi", "color": "peach", "has_bow": True})
    assert _reload(file_store).snapshot.customization == CreatureCustomization(
        name="Mochi", color="peach", has_bow=True,
    )


def test_set_customization_rejects_bad_input(engine: StateEngine):
    with pytest.raises(ValidationError):
        engine.set_customization({"name": "", "color": "peach", "has_bow": True})
    assert engine.snapshot.customization.name == "EmoChild"


def test_set_text_color_rejects_unknown(engine: StateEngine):
    with pytest.raises(ValidationError):
        engine.set_text_color_preference("ultraviolet")


@pytest.mark.parametrize("index", [-1, True, 1.5])
def test_set_micro_index_rejects_bad_values(engine: StateEngine, index):
    with pytest.raises(ValidationError):
        engine.set_micro_sentence_index(index)


# ── Animation ────────────────────────────────────────────────


def test_acknowledge_animation(engine: StateEngine):
    engine.add_log("yes", "expressed")
    snap = engine.acknowledge_animation()
    assert snap.creature_state.animation == "idle"
    assert snap.creature_state.brightness == 55


# ── Clear ────────────────────────────────────────────────────


def test_clear_all(engine: StateEngine, file_store: FileStore):
    engine.add_log("yes", "expressed")
    engine.set_micro_sentence_index(3)
    snap = engine.clear_all()
    assert snap.logs == []
    assert snap.safety_score == 0
    assert snap.micro_sentence_index == 0
    assert file_store.keys() == []


# ── Persistence failures ─────────────────────────────────────


def test_failed_writes_keep_in_memory_state():
    store = MemoryStore()
    eng = StateEngine(Storage(store))
    eng.initialize()
    store.available = False
    snap = eng.add_log("still counts", "expressed")
    assert snap.safety_score == 1
    assert len(snap.logs) == 1
    assert all(not r.success for r in eng.last_results)
    assert eng.last_error == UNAVAILABLE_MESSAGE


def test_snapshot_is_a_copy(engine: StateEngine):
    engine.add_log("one", "expressed")
    snap = engine.snapshot
    snap.logs.clear()
    snap.safety_score = 99
    assert len(engine.snapshot.logs) == 1
    assert engine.snapshot.safety_score == 1
