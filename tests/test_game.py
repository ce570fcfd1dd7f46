"""Tests for geometry helpers and the update reducer."""

import math

import pytest

from game import (
    Car,
    Field,
    Game,
    Key,
    KeyChange,
    KeyMap,
    Road,
    Size,
    TimeDelta,
    UnsupportedAction,
    Vector,
    add,
    steering_direction,
    update,
    wrap,
)


def _sample_game() -> Game:
    """Return the reference startup state."""
    return Game(
        field=Field(size=Size(600, 400)),
        car=Car(
            size=Size(40, 50),
            pos=Vector(300, 350),
            speed=Vector(0, 10),
            maxSpeed=Vector(15, 0),
        ),
        road=Road(width=100, y=10),
    )


def _keys(**pressed: bool) -> KeyMap:
    names = {"left": "ArrowLeft", "right": "ArrowRight"}
    return KeyMap.from_pressed({names.get(k, k): v for k, v in pressed.items()})


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


def test_add_is_component_wise() -> None:
    assert add(Vector(1, 2), Vector(3, -5)) == Vector(4, -3)


@pytest.mark.parametrize("n", [-1e9, -61.0, -60.0, -0.5, -1e-18, 0.0, 7.25, 59.999, 60.0, 1234.5])
def test_wrap_result_in_range(n: float) -> None:
    """wrap() always lands in [0, m), negative inputs included."""
    r = wrap(n, 60.0)
    assert 0.0 <= r < 60.0


@pytest.mark.parametrize("k", [-3, -1, 0, 1, 5])
def test_wrap_is_periodic(k: int) -> None:
    assert wrap(17.5 + k * 60, 60) == pytest.approx(wrap(17.5, 60))


def test_wrap_negative_values() -> None:
    assert wrap(-10, 60) == 50
    assert wrap(-70, 60) == 50


@pytest.mark.parametrize("m", [0, -60])
def test_wrap_rejects_non_positive_modulus(m: float) -> None:
    with pytest.raises(ValueError, match="modulus"):
        wrap(10, m)


# ---------------------------------------------------------------------------
# KeyMap
# ---------------------------------------------------------------------------


def test_keymap_absent_key_is_not_pressed() -> None:
    km = KeyMap()
    assert km.pressed(Key.ARROW_LEFT) is False
    assert km.pressed("Space") is False


def test_keymap_accepts_enum_and_raw_names() -> None:
    km = KeyMap.from_pressed({"ArrowRight": True, "a": True})
    assert km.pressed(Key.ARROW_RIGHT)
    assert km.pressed("ArrowRight")
    assert km.pressed("a")
    assert km.as_dict() == {"ArrowRight": True, "a": True}


def test_keymap_snapshot_is_independent_of_source() -> None:
    source = {"ArrowLeft": True}
    km = KeyMap.from_pressed(source)
    source["ArrowLeft"] = False
    assert km.pressed(Key.ARROW_LEFT)


def test_other_keys_do_not_steer() -> None:
    assert steering_direction(KeyMap.from_pressed({"a": True, " ": True})) == 0


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------


def test_update_is_pure() -> None:
    """Same arguments give equal results and the input is left untouched."""
    game = _sample_game()
    snapshot = _sample_game()
    for action in (TimeDelta(1.5), KeyChange(_keys(right=True))):
        assert update(game, action) == update(game, action)
        assert game == snapshot


def test_zero_elapsed_does_not_drift() -> None:
    game = _sample_game()
    result = update(game, TimeDelta(0))
    assert result.car.pos == game.car.pos
    assert result.road.y == game.road.y
    assert result == game


def test_straight_run_scrolls_road() -> None:
    """speed.y = 10 for one time unit moves the road from 10 to 0."""
    game = _sample_game()
    result = update(game, TimeDelta(1))
    assert result.road.y == 0
    assert result.car.pos.x == game.car.pos.x


def test_time_delta_only_moves_lateral_position() -> None:
    game = update(_sample_game(), KeyChange(_keys(left=True)))
    result = update(game, TimeDelta(2))
    assert result.car.pos == Vector(300 - 30, 350)
    assert result.car.speed == game.car.speed
    assert result.car.size == game.car.size
    assert result.field == game.field
    assert result.road.width == game.road.width


def test_road_scroll_is_unbounded() -> None:
    game = _sample_game()
    for _ in range(50):
        game = update(game, TimeDelta(3))
    assert game.road.y == 10 - 50 * 3 * 10


def test_key_cancellation() -> None:
    result = update(_sample_game(), KeyChange(_keys(left=True, right=True)))
    assert result.car.speed.x == 0


@pytest.mark.parametrize("pressed, expected", [("right", 15), ("left", -15)])
def test_single_direction(pressed: str, expected: float) -> None:
    game = _sample_game()
    result = update(game, KeyChange(_keys(**{pressed: True})))
    assert result.car.speed.x == expected
    assert result.car.speed.y == game.car.speed.y
    assert result.car.pos == game.car.pos
    assert result.road == game.road


def test_key_release_stops_car() -> None:
    game = update(_sample_game(), KeyChange(_keys(right=True)))
    result = update(game, KeyChange(_keys(right=False)))
    assert result.car.speed.x == 0


def test_steer_right_then_tick() -> None:
    game = _sample_game()
    steered = update(game, KeyChange(_keys(right=True)))
    assert steered.car.speed.x == game.car.maxSpeed.x
    moved = update(steered, TimeDelta(1))
    assert moved.car.pos.x == game.car.pos.x + game.car.maxSpeed.x


def test_speed_after_key_change_is_one_of_three_values() -> None:
    game = _sample_game()
    allowed = {0, game.car.maxSpeed.x, -game.car.maxSpeed.x}
    for left in (False, True):
        for right in (False, True):
            result = update(game, KeyChange(_keys(left=left, right=right)))
            assert result.car.speed.x in allowed


def test_unsupported_action_raises() -> None:
    with pytest.raises(UnsupportedAction):
        update(_sample_game(), {"kind": "deltaTime", "elapsed": 1})


def test_fractional_elapsed() -> None:
    result = update(_sample_game(), TimeDelta(0.25))
    assert math.isclose(result.road.y, 7.5)
