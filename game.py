from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Mapping, Tuple, Union

# -----------------------------------------------------------------------------
#  Errors
# -----------------------------------------------------------------------------

class UnsupportedAction(TypeError):
    """Raised when update() receives something that is not a known action."""

# -----------------------------------------------------------------------------
#  Geometry
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Vector:
    x: float
    y: float

@dataclass(frozen=True)
class Size:
    width: float
    height: float

def add(a: Vector, b: Vector) -> Vector:
    return Vector(a.x + b.x, a.y + b.y)

def wrap(n: float, m: float) -> float:
    if m <= 0:
        raise ValueError("wrap modulus must be > 0, got %r" % (m,))
    r = ((n % m) + m) % m
    # float rounding can land exactly on m for tiny negative n
    return 0.0 if r >= m else r

# -----------------------------------------------------------------------------
#  World state
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Field:
    size: Size

@dataclass(frozen=True)
class Car:
    size: Size
    pos: Vector         # center
    speed: Vector       # x: lateral, y: road scroll rate
    maxSpeed: Vector

@dataclass(frozen=True)
class Road:
    width: float
    y: float            # scroll accumulator, unbounded

@dataclass(frozen=True)
class Game:
    field: Field
    car: Car
    road: Road

# -----------------------------------------------------------------------------
#  Keys
# -----------------------------------------------------------------------------

class Key(str, Enum):
    ARROW_LEFT = "ArrowLeft"
    ARROW_RIGHT = "ArrowRight"

@dataclass(frozen=True)
class KeyMap:
    entries: Tuple[Tuple[str, bool], ...] = ()

    @classmethod
    def from_pressed(cls, pressed: Mapping[str, bool]) -> "KeyMap":
        return cls(tuple(sorted((str(k), bool(v)) for k, v in pressed.items())))

    def pressed(self, key: Union[Key, str]) -> bool:
        name = key.value if isinstance(key, Key) else key
        for k, v in self.entries:
            if k == name:
                return v
        return False

    def as_dict(self) -> Dict[str, bool]:
        return dict(self.entries)

# -----------------------------------------------------------------------------
#  Actions
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class TimeDelta:
    elapsed: float

@dataclass(frozen=True)
class KeyChange:
    keyMap: KeyMap = field(default_factory=KeyMap)

Action = Union[TimeDelta, KeyChange]

# -----------------------------------------------------------------------------
#  Reducer
# -----------------------------------------------------------------------------

def steering_direction(keyMap: KeyMap) -> int:
    left = -1 if keyMap.pressed(Key.ARROW_LEFT) else 0
    right = 1 if keyMap.pressed(Key.ARROW_RIGHT) else 0
    return left + right

def update_car(car: Car, elapsed: float) -> Car:
    # only the lateral position moves, the road scrolls under the car
    return replace(car, pos=add(car.pos, Vector(car.speed.x * elapsed, 0.0)))

def update_road(road: Road, car: Car, elapsed: float) -> Road:
    return replace(road, y=road.y - car.speed.y * elapsed)

def steer_car(car: Car, keyMap: KeyMap) -> Car:
    direction = steering_direction(keyMap)
    return replace(car, speed=replace(car.speed, x=direction * car.maxSpeed.x))

def update(game: Game, action: Action) -> Game:
    """Return the state that follows ``game`` after ``action``.

    TimeDelta advances the road scroll and the car's lateral position;
    KeyChange recomputes the lateral speed from the arrow keys. The input
    is never modified.
    """
    if isinstance(action, TimeDelta):
        return replace(
            game,
            road=update_road(game.road, game.car, action.elapsed),
            car=update_car(game.car, action.elapsed),
        )
    if isinstance(action, KeyChange):
        return replace(game, car=steer_car(game.car, action.keyMap))
    raise UnsupportedAction("unsupported action: %r" % (action,))
