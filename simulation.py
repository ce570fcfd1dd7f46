import os
import sys
import json
import logging
from dataclasses import dataclass, fields
from typing import Callable, Dict, Optional, Tuple

import pygame

from game import Car, Field, Game, KeyChange, KeyMap, Key, Road, Size, TimeDelta, Vector, update
from render import PygameSurface, RenderStyle, Surface, render

# -----------------------------------------------------------------------------
#  Logging
# -----------------------------------------------------------------------------

def configure_logging(level: int = logging.INFO, logPath: str = "simulation.log"):
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(logPath, mode="w", encoding="utf-8")
        ],
    )

# -----------------------------------------------------------------------------
#  Errors
# -----------------------------------------------------------------------------

class SurfaceUnavailable(RuntimeError):
    pass

# -----------------------------------------------------------------------------
#  Config
# -----------------------------------------------------------------------------

@dataclass
class SimulationConfig:
    screenWidth: int = 600
    screenHeight: int = 400
    fps: int = 60
    caption: str = "ROAD"

    # simulation units per wall-clock second
    timeScale: float = 10.0

    # car
    carSize: Tuple[float, float] = (40, 50)
    carPos: Tuple[float, float] = (300, 350)
    carSpeed: Tuple[float, float] = (0, 10)
    carMaxSpeed: Tuple[float, float] = (15, 0)

    # road
    roadWidth: float = 100
    roadY: float = 10
    bandWidth: float = 5
    bandHeight: float = 30

    # colors
    backgroundColor: Tuple[int, int, int] = (238, 238, 238)
    roadColor: Tuple[int, int, int] = (204, 204, 204)
    bandDarkColor: Tuple[int, int, int] = (68, 68, 68)
    bandLightColor: Tuple[int, int, int] = (255, 255, 255)
    carColor: Tuple[int, int, int] = (51, 102, 170)

def _is_number(v) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)

def check_config_value(name: str, value, default):
    """Return ``value`` shaped like ``default`` or raise ValueError."""
    if isinstance(default, tuple):
        if not isinstance(value, (list, tuple)) or len(value) != len(default):
            raise ValueError(f"'{name}' must be a list of {len(default)} numbers, got {value!r}")
        if not all(_is_number(v) for v in value):
            raise ValueError(f"'{name}' must contain only numbers, got {value!r}")
        return tuple(value)
    if _is_number(default):
        if not _is_number(value):
            raise ValueError(f"'{name}' must be numeric, got {type(value).__name__}")
        return value
    if isinstance(default, str) and not isinstance(value, str):
        raise ValueError(f"'{name}' must be a string, got {type(value).__name__}")
    return value

def load_config_from_file(path: str, base: SimulationConfig) -> SimulationConfig:
    if not os.path.exists(path):
        return base
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("top-level JSON value must be an object")

        known = {fld.name for fld in fields(SimulationConfig)}
        unknown = sorted(k for k in data if k not in known)
        if unknown:
            logging.warning("Ignoring unknown config key(s) in %s: %s", path, ", ".join(unknown))

        # JSON has no tuples; lists are checked against the default's length
        overrides = {
            k: check_config_value(k, v, getattr(base, k))
            for k, v in data.items() if k in known
        }
        cfg = SimulationConfig(**{**base.__dict__, **overrides})
        logging.info("Loaded config from %s", path)
        return cfg
    except (OSError, ValueError, TypeError) as e:
        logging.error("Failed to load config %s: %s", path, str(e))
        return base

def initial_game(config: SimulationConfig) -> Game:
    return Game(
        field=Field(size=Size(config.screenWidth, config.screenHeight)),
        car=Car(
            size=Size(*config.carSize),
            pos=Vector(*config.carPos),
            speed=Vector(*config.carSpeed),
            maxSpeed=Vector(*config.carMaxSpeed),
        ),
        road=Road(width=config.roadWidth, y=config.roadY),
    )

def style_from_config(config: SimulationConfig) -> RenderStyle:
    return RenderStyle(
        bandWidth=config.bandWidth,
        bandHeight=config.bandHeight,
        backgroundColor=config.backgroundColor,
        roadColor=config.roadColor,
        bandDarkColor=config.bandDarkColor,
        bandLightColor=config.bandLightColor,
        carColor=config.carColor,
    )

# -----------------------------------------------------------------------------
#  Frame scheduling
# -----------------------------------------------------------------------------

class FrameScheduler:
    """Request-next-frame primitive: one pending callback, fired once by the host."""

    def __init__(self):
        self._pending: Optional[Callable[[], None]] = None

    def request_frame(self, callback: Callable[[], None]):
        self._pending = callback

    def has_pending(self) -> bool:
        return self._pending is not None

    def run_pending(self) -> bool:
        callback, self._pending = self._pending, None
        if callback is None:
            return False
        callback()
        return True

# -----------------------------------------------------------------------------
#  Game loop driver
# -----------------------------------------------------------------------------

class GameLoop:
    """Owns the session state and turns frame ticks and key events into actions.

    Frame ticks update and render (only when the state changed) and then
    request the next frame. Key events update the state but never render;
    the change shows up on the following tick.
    """

    def __init__(
        self,
        surface: Optional[Surface],
        initialState: Game,
        scheduler: FrameScheduler,
        clock: Callable[[], float] = pygame.time.get_ticks,
        timeScale: float = 10.0,
        update_fn: Callable[[Game, object], Game] = update,
        render_fn: Callable[[Surface, Game], None] = render,
    ):
        self.surface = surface
        self.state = initialState
        self.scheduler = scheduler
        self.clock = clock
        self.timeScale = timeScale
        self.update_fn = update_fn
        self.render_fn = render_fn

        self.keyMap: Dict[str, bool] = {}
        self.previousTime: Optional[float] = None

        self.framesRendered = 0
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        if self.surface is None:
            logging.error("No drawing surface available, game loop not started")
            raise SurfaceUnavailable("No drawing surface available")

        self.previousTime = self.clock()
        self._running = True

        # first pass always draws, even though nothing has moved yet
        self.state = self.update_fn(self.state, TimeDelta(0.0))
        self._draw(self.state)
        self.scheduler.request_frame(self.tick)

    def tick(self):
        if not self._running:
            return

        now = self.clock()
        elapsed = self.timeScale * ((now - self.previousTime) / 1000.0)
        newState = self.update_fn(self.state, TimeDelta(elapsed))

        if newState != self.state:
            self._draw(newState)
        else:
            logging.debug("Frame skipped, state unchanged (elapsed=%.4f)", elapsed)

        self.state = newState
        self.previousTime = now
        self.scheduler.request_frame(self.tick)

    def key_down(self, name: str):
        self._set_key(name, True)

    def key_up(self, name: str):
        self._set_key(name, False)

    def _set_key(self, name: str, pressed: bool):
        self.keyMap[name] = pressed
        self.state = self.update_fn(self.state, KeyChange(KeyMap.from_pressed(self.keyMap)))

    def _draw(self, state: Game):
        self.render_fn(self.surface, state)
        self.framesRendered += 1

    def stop(self):
        if self._running:
            logging.info("Stopping game loop after %d rendered frame(s)", self.framesRendered)
        self._running = False

# -----------------------------------------------------------------------------
#  Keyboard translation
# -----------------------------------------------------------------------------

KEY_NAMES: Dict[int, str] = {
    pygame.K_LEFT: Key.ARROW_LEFT.value,
    pygame.K_RIGHT: Key.ARROW_RIGHT.value,
}

def key_name(key: int) -> str:
    if key in KEY_NAMES:
        return KEY_NAMES[key]
    return pygame.key.name(key)

# -----------------------------------------------------------------------------
#  Simulation Engine
# -----------------------------------------------------------------------------

class SimulationEngine:
    def __init__(self, config: SimulationConfig):
        self.config = config

        pygame.init()
        self.clock = pygame.time.Clock()
        self.style = style_from_config(self.config)
        self.scheduler = FrameScheduler()

        self.loop = GameLoop(
            self._acquire_surface(),
            initial_game(self.config),
            self.scheduler,
            clock=pygame.time.get_ticks,
            timeScale=self.config.timeScale,
            render_fn=lambda surface, game: render(surface, game, self.style),
        )

        self.running = True

    def _acquire_surface(self) -> Optional[PygameSurface]:
        try:
            screen = pygame.display.set_mode((self.config.screenWidth, self.config.screenHeight))
        except pygame.error as e:
            logging.error("Could not open display: %s", str(e))
            return None
        pygame.display.set_caption(self.config.caption)
        return PygameSurface(screen)

    def _handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
                return

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                    return
                self.loop.key_down(key_name(event.key))

            elif event.type == pygame.KEYUP:
                self.loop.key_up(key_name(event.key))

    def run(self):
        logging.info("Simulation started.")
        try:
            self.loop.start()
            while self.running:
                self._handle_events()
                if not self.running:
                    break

                self.clock.tick(self.config.fps)
                if self.scheduler.run_pending():
                    pygame.display.update()

        finally:
            self.loop.stop()
            pygame.quit()

            game = self.loop.state
            logging.info("Frames rendered: %d", self.loop.framesRendered)
            logging.info("Car x: %.2f | Road scroll: %.2f", game.car.pos.x, game.road.y)

# -----------------------------------------------------------------------------
#  Entry
# -----------------------------------------------------------------------------

def main() -> int:
    configure_logging()

    base_config = SimulationConfig()
    config = load_config_from_file("config.json", base_config)

    try:
        SimulationEngine(config).run()
    except SurfaceUnavailable as e:
        logging.critical("Simulation cannot start: %s", str(e))
        print(f"Fatal: {e}", file=sys.stderr)
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
