"""Force-directed layout for the answer cloud.

One node per answer group is kept in an arena keyed by the group's canonical
key, so a node keeps its position and velocity across recomputations. The
simulation is stepped from outside (one ``tick`` per frame) and cools down
geometrically; a group-set change or a viewport resize re-heats it without
discarding settled positions.

Forces, applied in this order on every tick:

* centering: shifts the whole cloud so its mean sits on the viewport center;
* charge: pairwise repulsion that falls off with squared distance;
* collision: pushes apart nodes whose collision circles overlap, where the
  circle circumscribes the node rectangle plus a fixed margin;
* positioning: weak pull of every node towards the center lines.

After integration every node is clamped so its rectangle stays inside the
viewport, and any non-finite coordinate is replaced by the viewport center.
"""

from __future__ import annotations

import colorsys
from dataclasses import dataclass
import math
import random
from typing import Iterable, Protocol, Sequence

from greatminds_app.core.models import AnswerGroup

MIN_NODE_WIDTH = 90.0
MAX_NODE_WIDTH = 240.0
MIN_NODE_HEIGHT = 44.0
MAX_NODE_HEIGHT = 110.0
CHAR_WIDTH = 9.0
PADDING_X = 32.0
COLLISION_MARGIN = 6.0
SPAWN_JITTER = 80.0

CENTER_STRENGTH = 0.15
CHARGE_STRENGTH = -25.0
COLLIDE_STRENGTH = 0.9
COLLIDE_ITERATIONS = 5
POSITION_STRENGTH = 0.1

ALPHA_MIN = 0.001
ALPHA_DECAY = 0.02
ALPHA_TARGET = 0.0
RESTART_ALPHA = 0.4
VELOCITY_DECAY = 0.4

# (hue, saturation %) pairs; lightness is fixed at 52%.
BASE_COLORS: tuple[tuple[int, int], ...] = (
    (210, 85),
    (160, 80),
    (280, 75),
    (340, 80),
    (35, 85),
    (145, 70),
    (195, 80),
)


def pick_color(index: int) -> str:
    """Return the palette color for the ``index``-th node as ``#rrggbb``."""
    hue, saturation = BASE_COLORS[index % len(BASE_COLORS)]
    red, green, blue = colorsys.hls_to_rgb(hue / 360.0, 0.52, saturation / 100.0)
    return "#{:02x}{:02x}{:02x}".format(
        round(red * 255), round(green * 255), round(blue * 255)
    )


def node_dimensions(display: str, count: int, max_count: int) -> tuple[float, float]:
    """Width grows with the label length, height with the group's share of the top count."""
    width = min(MAX_NODE_WIDTH, max(MIN_NODE_WIDTH, len(display) * CHAR_WIDTH + PADDING_X))
    ratio = count / max(1, max_count)
    height = min(MAX_NODE_HEIGHT, max(MIN_NODE_HEIGHT, MIN_NODE_HEIGHT + ratio * (MAX_NODE_HEIGHT - MIN_NODE_HEIGHT)))
    return width, height


def collision_radius(width: float, height: float) -> float:
    return math.sqrt((width / 2) ** 2 + (height / 2) ** 2) + COLLISION_MARGIN


def _axis_bounds(half_extent: float, extent: float) -> tuple[float, float]:
    # A node larger than the viewport is pinned to the middle of that axis.
    if extent >= 2 * half_extent:
        return half_extent, extent - half_extent
    return extent / 2, extent / 2


@dataclass(slots=True)
class LayoutNode:
    """Physics state of one answer group."""

    key: str
    display: str
    count: int
    is_winner: bool
    width: float
    height: float
    color: str
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0

    @property
    def half_width(self) -> float:
        return self.width / 2

    @property
    def half_height(self) -> float:
        return self.height / 2

    @property
    def collision_radius(self) -> float:
        return collision_radius(self.width, self.height)


@dataclass(slots=True, frozen=True)
class NodePlacement:
    """What the rendering surface receives: always finite, always in bounds."""

    key: str
    display: str
    count: int
    is_winner: bool
    x: float
    y: float
    width: float
    height: float
    color: str


class CloudLayoutEngine:
    """Owns the node arena and the relaxation state for one viewport."""

    def __init__(self, width: float, height: float, rng: random.Random | None = None) -> None:
        self._validate_viewport(width, height)
        self._width = float(width)
        self._height = float(height)
        self._rng = rng or random.Random()
        self._nodes: dict[str, LayoutNode] = {}
        self._alpha = 0.0
        self._palette_cursor = 0

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def is_settled(self) -> bool:
        return not self._nodes or self._alpha < ALPHA_MIN

    @property
    def nodes(self) -> list[LayoutNode]:
        return list(self._nodes.values())

    def node(self, key: str) -> LayoutNode | None:
        return self._nodes.get(key)

    def update_groups(self, groups: Sequence[AnswerGroup]) -> None:
        """Diff the arena against ``groups``: reuse by key, insert new, drop missing."""
        previous = self._nodes
        max_count = max((group.count for group in groups), default=1)
        arena: dict[str, LayoutNode] = {}
        for group in groups:
            width, height = node_dimensions(group.display, group.count, max_count)
            node = previous.get(group.key)
            if node is None:
                x, y = self._spawn_position()
                node = LayoutNode(
                    key=group.key,
                    display=group.display,
                    count=group.count,
                    is_winner=group.is_winner,
                    width=width,
                    height=height,
                    color=pick_color(self._palette_cursor),
                    x=x,
                    y=y,
                )
                self._palette_cursor += 1
            else:
                node.display = group.display
                node.count = group.count
                node.is_winner = group.is_winner
                node.width = width
                node.height = height
                self._sanitize(node)
            arena[group.key] = node

        self._nodes = arena
        for node in arena.values():
            self._clamp(node)

        if not arena:
            self._alpha = 0.0
        elif previous:
            self._alpha = max(self._alpha, RESTART_ALPHA)
        else:
            self._alpha = 1.0

    def resize(self, width: float, height: float) -> None:
        self._validate_viewport(width, height)
        if (float(width), float(height)) == (self._width, self._height):
            return
        self._width = float(width)
        self._height = float(height)
        for node in self._nodes.values():
            self._clamp(node)
        if self._nodes:
            self._alpha = max(self._alpha, RESTART_ALPHA)

    def tick(self) -> bool:
        """Advance the simulation one step. Returns True while it is still cooling."""
        if self.is_settled:
            return False
        self._alpha += (ALPHA_TARGET - self._alpha) * ALPHA_DECAY
        nodes = list(self._nodes.values())
        for node in nodes:
            self._sanitize(node)

        self._apply_centering(nodes)
        self._apply_charge(nodes)
        self._apply_collision(nodes)
        self._apply_positioning(nodes)

        for node in nodes:
            node.vx *= 1 - VELOCITY_DECAY
            node.vy *= 1 - VELOCITY_DECAY
            node.x += node.vx
            node.y += node.vy
            self._sanitize(node)
            self._clamp(node)
        return self._alpha >= ALPHA_MIN

    def safe_position(self, node: LayoutNode) -> tuple[float, float]:
        """Nearest finite, in-bounds coordinate for ``node``."""
        x = node.x if math.isfinite(node.x) else self._width / 2
        y = node.y if math.isfinite(node.y) else self._height / 2
        low_x, high_x = _axis_bounds(node.half_width, self._width)
        low_y, high_y = _axis_bounds(node.half_height, self._height)
        return min(high_x, max(low_x, x)), min(high_y, max(low_y, y))

    def placements(self) -> list[NodePlacement]:
        placements = []
        for node in self._nodes.values():
            x, y = self.safe_position(node)
            placements.append(
                NodePlacement(
                    key=node.key,
                    display=node.display,
                    count=node.count,
                    is_winner=node.is_winner,
                    x=x,
                    y=y,
                    width=node.width,
                    height=node.height,
                    color=node.color,
                )
            )
        return placements

    def _spawn_position(self) -> tuple[float, float]:
        cx = self._width / 2
        cy = self._height / 2
        return (
            cx + (self._rng.random() - 0.5) * SPAWN_JITTER,
            cy + (self._rng.random() - 0.5) * SPAWN_JITTER,
        )

    def _jiggle(self) -> float:
        return (self._rng.random() - 0.5) * 1e-6

    def _apply_centering(self, nodes: list[LayoutNode]) -> None:
        mean_x = sum(node.x for node in nodes) / len(nodes)
        mean_y = sum(node.y for node in nodes) / len(nodes)
        shift_x = (self._width / 2 - mean_x) * CENTER_STRENGTH
        shift_y = (self._height / 2 - mean_y) * CENTER_STRENGTH
        for node in nodes:
            node.x += shift_x
            node.y += shift_y

    def _apply_charge(self, nodes: list[LayoutNode]) -> None:
        for index, node in enumerate(nodes):
            for other in nodes[index + 1:]:
                dx = other.x - node.x
                dy = other.y - node.y
                if dx == 0 and dy == 0:
                    dx = self._jiggle()
                    dy = self._jiggle()
                distance_sq = max(1.0, dx * dx + dy * dy)
                weight = CHARGE_STRENGTH * self._alpha / distance_sq
                node.vx += dx * weight
                node.vy += dy * weight
                other.vx -= dx * weight
                other.vy -= dy * weight

    def _apply_collision(self, nodes: list[LayoutNode]) -> None:
        for _ in range(COLLIDE_ITERATIONS):
            for index, node in enumerate(nodes):
                radius = node.collision_radius
                predicted_x = node.x + node.vx
                predicted_y = node.y + node.vy
                for other in nodes[index + 1:]:
                    other_radius = other.collision_radius
                    reach = radius + other_radius
                    dx = predicted_x - other.x - other.vx
                    dy = predicted_y - other.y - other.vy
                    distance_sq = dx * dx + dy * dy
                    if distance_sq >= reach * reach:
                        continue
                    if dx == 0:
                        dx = self._jiggle()
                        distance_sq += dx * dx
                    if dy == 0:
                        dy = self._jiggle()
                        distance_sq += dy * dy
                    distance = math.sqrt(distance_sq)
                    push = (reach - distance) / distance * COLLIDE_STRENGTH
                    dx *= push
                    dy *= push
                    share = other_radius ** 2 / (radius ** 2 + other_radius ** 2)
                    node.vx += dx * share
                    node.vy += dy * share
                    other.vx -= dx * (1 - share)
                    other.vy -= dy * (1 - share)

    def _apply_positioning(self, nodes: list[LayoutNode]) -> None:
        cx = self._width / 2
        cy = self._height / 2
        for node in nodes:
            node.vx += (cx - node.x) * POSITION_STRENGTH * self._alpha
            node.vy += (cy - node.y) * POSITION_STRENGTH * self._alpha

    def _sanitize(self, node: LayoutNode) -> None:
        if not math.isfinite(node.x):
            node.x = self._width / 2
            node.vx = 0.0
        if not math.isfinite(node.y):
            node.y = self._height / 2
            node.vy = 0.0
        if not math.isfinite(node.vx):
            node.vx = 0.0
        if not math.isfinite(node.vy):
            node.vy = 0.0

    def _clamp(self, node: LayoutNode) -> None:
        low_x, high_x = _axis_bounds(node.half_width, self._width)
        low_y, high_y = _axis_bounds(node.half_height, self._height)
        if node.x < low_x or node.x > high_x:
            node.x = min(high_x, max(low_x, node.x))
            node.vx = 0.0
        if node.y < low_y or node.y > high_y:
            node.y = min(high_y, max(low_y, node.y))
            node.vy = 0.0

    @staticmethod
    def _validate_viewport(width: float, height: float) -> None:
        if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
            raise ValueError(f"Viewport must be positive and finite, got {width}x{height}.")


class RenderSurface(Protocol):
    """Anything that can draw node placements, e.g. the Qt cloud widget."""

    def is_alive(self) -> bool:
        ...

    def place_nodes(self, placements: Sequence[NodePlacement]) -> None:
        ...


class LayoutRun:
    """One cancellable relaxation pass. A cancelled run never writes again."""

    def __init__(self, engine: CloudLayoutEngine, surface: RenderSurface) -> None:
        self._engine = engine
        self._surface = surface
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def step(self) -> bool:
        """Tick once and publish positions. Returns True if another frame is wanted."""
        if self._cancelled or not self._surface.is_alive():
            return False
        running = self._engine.tick()
        if self._cancelled or not self._surface.is_alive():
            return False
        self._surface.place_nodes(self._engine.placements())
        return running


class LayoutDriver:
    """Restarts the layout on every change, cancelling any in-flight run first."""

    def __init__(self, engine: CloudLayoutEngine, surface: RenderSurface) -> None:
        self._engine = engine
        self._surface = surface
        self._run: LayoutRun | None = None

    @property
    def engine(self) -> CloudLayoutEngine:
        return self._engine

    @property
    def current_run(self) -> LayoutRun | None:
        return self._run

    def update_groups(self, groups: Iterable[AnswerGroup]) -> LayoutRun:
        self.stop()
        self._engine.update_groups(list(groups))
        return self._start()

    def resize(self, width: float, height: float) -> LayoutRun:
        self.stop()
        self._engine.resize(width, height)
        return self._start()

    def step(self) -> bool:
        if self._run is None:
            return False
        return self._run.step()

    def stop(self) -> None:
        if self._run is not None:
            self._run.cancel()
            self._run = None

    def _start(self) -> LayoutRun:
        self._run = LayoutRun(self._engine, self._surface)
        # Publish the seeded positions right away so nothing is drawn at the origin.
        if self._surface.is_alive():
            self._surface.place_nodes(self._engine.placements())
        return self._run
