import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Tuple

import pygame

from game import Game, wrap

Color = Tuple[int, int, int]

# -----------------------------------------------------------------------------
#  Drawing surface boundary
# -----------------------------------------------------------------------------

class Surface(ABC):
    """Minimal 2D raster capability the renderer draws through."""

    @abstractmethod
    def set_fill_color(self, color: Color):
        ...

    @abstractmethod
    def fill_rect(self, x: float, y: float, width: float, height: float):
        ...

class PygameSurface(Surface):
    def __init__(self, screen: pygame.Surface):
        self.screen = screen
        self.fillColor: Color = (0, 0, 0)

    def set_fill_color(self, color: Color):
        self.fillColor = color

    def fill_rect(self, x: float, y: float, width: float, height: float):
        # pygame.Rect is integer based; bands and the car may sit on half pixels
        r = pygame.Rect(int(round(x)), int(round(y)), int(round(width)), int(round(height)))
        self.screen.fill(self.fillColor, r)

class RecordingSurface(Surface):
    def __init__(self):
        self.commands: List[Tuple] = []

    def set_fill_color(self, color: Color):
        self.commands.append(("fill_color", color))

    def fill_rect(self, x: float, y: float, width: float, height: float):
        self.commands.append(("fill_rect", x, y, width, height))

    def rects(self) -> List[Tuple[float, float, float, float]]:
        return [c[1:] for c in self.commands if c[0] == "fill_rect"]

    def clear(self):
        self.commands = []

# -----------------------------------------------------------------------------
#  Style
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class RenderStyle:
    bandWidth: float = 5.0
    bandHeight: float = 30.0
    backgroundColor: Color = (238, 238, 238)
    roadColor: Color = (204, 204, 204)
    bandDarkColor: Color = (68, 68, 68)
    bandLightColor: Color = (255, 255, 255)
    carColor: Color = (51, 102, 170)

DEFAULT_STYLE = RenderStyle()

# -----------------------------------------------------------------------------
#  Renderer
# -----------------------------------------------------------------------------

def band_count(fieldHeight: float, bandHeight: float) -> int:
    # one band past the visible height
    return int(math.ceil(fieldHeight / bandHeight)) + 1

def render(surface: Surface, game: Game, style: RenderStyle = DEFAULT_STYLE):
    field, car, road = game.field, game.car, game.road
    width, height = field.size.width, field.size.height

    # background
    surface.set_fill_color(style.backgroundColor)
    surface.fill_rect(0, 0, width, height)

    # road bed
    roadX = (width - road.width) / 2
    surface.set_fill_color(style.roadColor)
    surface.fill_rect(roadX, 0, road.width, height)

    # lane-divider bands along both road edges
    offsetY = wrap(road.y, 2 * style.bandHeight)
    for index in range(band_count(height, style.bandHeight)):
        posY = index * style.bandHeight - offsetY
        surface.set_fill_color(style.bandDarkColor if index % 2 == 0 else style.bandLightColor)
        surface.fill_rect(roadX, posY, style.bandWidth, style.bandHeight)
        surface.fill_rect(roadX + road.width, posY, style.bandWidth, style.bandHeight)

    # car, on top
    surface.set_fill_color(style.carColor)
    surface.fill_rect(
        car.pos.x - car.size.width / 2,
        car.pos.y - car.size.height / 2,
        car.size.width,
        car.size.height,
    )
