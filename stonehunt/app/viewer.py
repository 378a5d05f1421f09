# stonehunt/app/viewer.py
#!/usr/bin/env python3
"""
Stone Hunt Viewer: watch an engine walk a simulated world

- Keyboard:
    [1]/[2]/[3]  -> switch map
    [A]/[B]      -> select engine (A* / Backtracking)
    [SPACE]      -> run/pause
    [N]          -> single step
    [R]          -> reset
    [+]/[-]      -> steps/sec
    [Q]/[ESC]    -> quit

Hidden cells are drawn faded until the agent has been told about them.

- CLI: --map=<key or path> --engine=astar|backtracking --log-level=INFO
"""

import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pygame

from stonehunt.config import MAP_FILES, resolve_engine, resolve_log_file, resolve_log_level, resolve_map
from stonehunt.core.engines import make_engine
from stonehunt.core.interaction import MoveBoundary
from stonehunt.core.types import (
    AGENT,
    HAZARDS,
    NEUTRAL,
    SHIELD,
    TARGET,
    Coord,
    Grid,
    StepResult,
)
from stonehunt.core.world import SimulatedWorld, WorldMap, load_world
from stonehunt.logging_utils import setup_logging

logger = logging.getLogger(__name__)

ENGINE_LABELS = {"astar": "A*", "backtracking": "Backtracking"}

PANEL_W = 420            # right band: metrics + buttons
GRID_MARGIN = 16
FONT_NAME = None  # default pygame font

# Colors
WHITE        = (255,255,255)
BLACK        = (  0,  0,  0)
BLUE         = ( 70,130,180)
RED          = (220, 50, 47)
FLOOR_GRAY   = (200,200,200)
HAZARD_RED   = (190, 60, 60)
HERO_PURPLE  = (130, 60,170)
SHIELD_BLUE  = ( 70,150,230)
STONE_GOLD   = (255,210,  0)
NEON_CYAN_A  = (0,150,255,110)
NEON_MAG_A   = (255,0,120,90)
NEON_MINT    = (0,255,200)

CARD_BG      = (24,28,36,220)
CARD_HI      = (255,255,255,18)
TEXT_LIGHT   = (230,235,240)
ACCENT_GOLD  = (255,210,0)


def tile_color(status: str, known: bool) -> Tuple[int, int, int]:
    """Base tile colour; statuses the agent has not been told about are washed out."""
    if status == TARGET:
        base = STONE_GOLD
    elif status == SHIELD:
        base = SHIELD_BLUE
    elif status in HAZARDS:
        base = HAZARD_RED if status == "P" else HERO_PURPLE
    else:
        base = FLOOR_GRAY
    if known or status in (NEUTRAL, AGENT):
        return base
    return tuple(int(ch + (FLOOR_GRAY[i] - ch) * 0.65) for i, ch in enumerate(base))


def outcome_label(res: StepResult) -> str:
    if res.status == "done":
        return f"Done (cost {res.metrics.get('total_cost')})"
    if res.status == "no_path":
        return "No path (e -1)"
    return "Running" if res.status == "running" else "Idle"


# ---------- one simulated session ----------
class Session:
    def __init__(self, world_map: WorldMap, engine_key: str):
        self.world_map = world_map
        self.engine_key = engine_key
        self.world = SimulatedWorld(world_map)
        self.grid = Grid.create(*world_map.target, size=world_map.size)
        self.boundary = MoveBoundary(self.grid, self.world, world_map.perception)
        self.engine = make_engine(engine_key)
        self.engine.init(self.grid, self.boundary)

    def step(self) -> StepResult:
        return self.engine.step()

    @property
    def position(self) -> Optional[Coord]:
        return self.engine.position


# ---------- Simple UI Button ----------
class UIButton:
    def __init__(self, label: str, rect: pygame.Rect, callback, *, togglable: bool = False):
        self.label = label
        self.rect = rect
        self.callback = callback
        self.hover = False
        self.togglable = togglable
        self.active = False  # highlight state

    def set_active(self, value: bool):
        self.active = bool(value)

    def draw(self, screen: pygame.Surface, font: pygame.font.Font):
        base = pygame.Surface(self.rect.size, pygame.SRCALPHA)
        if self.active and self.togglable:
            bg = (58, 86, 160, 235)
        elif self.hover:
            bg = (46, 50, 60, 230)
        else:
            bg = (36, 40, 48, 220)
        pygame.draw.rect(base, bg, base.get_rect(), border_radius=10)
        screen.blit(base, self.rect.topleft)

        if self.active and self.togglable:
            pygame.draw.rect(screen, (120, 170, 255, 255), self.rect, width=2, border_radius=10)

        text = font.render(self.label, True, (235,238,242))
        screen.blit(text, text.get_rect(center=self.rect.center))

    def handle_mouse(self, event: pygame.event.Event):
        if event.type == pygame.MOUSEMOTION:
            self.hover = self.rect.collidepoint(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                self.callback()


# ---------- Viewer ----------
class Viewer:
    def __init__(self, world_map: WorldMap, map_key: str = "custom", engine_key: str = "astar"):
        pygame.init()
        self.font_small = pygame.font.Font(FONT_NAME, 14)
        self.font = pygame.font.Font(FONT_NAME, 18)
        self.font_big = pygame.font.Font(FONT_NAME, 22)

        self.world_map = world_map
        self.selected_map_key = map_key
        self.selected_engine = engine_key
        self.session = Session(world_map, engine_key)

        self.cell_size = 48
        win_w = GRID_MARGIN*2 + world_map.size*self.cell_size + PANEL_W
        win_h = max(GRID_MARGIN*2 + world_map.size*self.cell_size, 600)
        self.screen = pygame.display.set_mode((win_w, win_h), pygame.RESIZABLE)
        pygame.display.set_caption(f"Stone Hunt — {world_map.name}")

        self.open_set: set = set()
        self.closed_set: set = set()
        self.running = False
        self._buttons: List[UIButton] = []
        self._layout(win_w, win_h)

        self.clock = pygame.time.Clock()
        self.steps_per_sec = 6
        self.state = "Idle"
        self._last_step_t = 0.0
        self._last_metrics: Dict[str, object] = {}

    # ---------- layout ----------
    def _layout(self, win_w: int, win_h: int):
        size = self.world_map.size
        avail_w = max(1, win_w - PANEL_W - 2 * GRID_MARGIN)
        avail_h = max(1, win_h - 2 * GRID_MARGIN)
        self.cell_size = int(max(16, min(avail_w // size, avail_h // size)))

        plate = size * self.cell_size + 2 * GRID_MARGIN
        top_y = max(0, (win_h - plate) // 2)
        self.canvas_rect = pygame.Rect(0, top_y, plate, plate)
        self._grid_origin = (self.canvas_rect.x + GRID_MARGIN, self.canvas_rect.y + GRID_MARGIN)
        self._right_band = pygame.Rect(self.canvas_rect.right, 0,
                                       max(PANEL_W, win_w - self.canvas_rect.right), win_h)
        self._build_buttons()

    def run(self):
        while True:
            self._handle_events()
            if self.running:
                self._tick_engine()
            self._draw()
            self.clock.tick(60)

    def _tick_engine(self):
        t0 = time.time()
        if t0 - self._last_step_t >= 1.0 / max(1, self.steps_per_sec):
            self._last_step_t = t0
            self._do_step()

    def _do_step(self):
        res = self.session.step()
        for c in res.opened: self.open_set.add(c)
        for c in res.closed:
            self.closed_set.add(c)
            self.open_set.discard(c)
        if res.status in ("done", "no_path"):
            self.running = False
        self.state = outcome_label(res)
        if res.metrics:
            self._last_metrics = res.metrics
        self._refresh_active_states()

    def _handle_events(self):
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                pygame.quit(); sys.exit(0)
            elif e.type == pygame.KEYDOWN:
                if e.key in (pygame.K_ESCAPE, pygame.K_q):
                    pygame.quit(); sys.exit(0)
                elif e.key == pygame.K_SPACE:
                    self._toggle_run()
                elif e.key == pygame.K_r:
                    self._reset()
                elif e.key == pygame.K_n:
                    self._do_step()
                elif e.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    self._bump_speed(+1)
                elif e.key in (pygame.K_MINUS, pygame.K_UNDERSCORE):
                    self._bump_speed(-1)
                elif e.key == pygame.K_1:
                    self._switch_map("01_open_field")
                elif e.key == pygame.K_2:
                    self._switch_map("02_walled_stone")
                elif e.key == pygame.K_3:
                    self._switch_map("03_shifting_hazard")
                elif e.key == pygame.K_a:
                    self._switch_engine("astar")
                elif e.key == pygame.K_b:
                    self._switch_engine("backtracking")
            elif e.type == pygame.VIDEORESIZE:
                self.screen = pygame.display.set_mode((max(640, e.w), max(480, e.h)), pygame.RESIZABLE)
                self._layout(*self.screen.get_size())
            elif e.type in (pygame.MOUSEMOTION, pygame.MOUSEBUTTONDOWN):
                for b in self._buttons:
                    b.handle_mouse(e)

    def _switch_map(self, key: str):
        if key not in MAP_FILES: return
        try:
            self.world_map = load_world(MAP_FILES[key])
        except (OSError, ValueError, KeyError) as ex:
            logger.error("Failed to load map %s: %s", key, ex)
            return
        self.selected_map_key = key
        pygame.display.set_caption(f"Stone Hunt — {self.world_map.name}")
        self._layout(*self.screen.get_size())
        self._reset()

    def _switch_engine(self, key: str):
        self.selected_engine = key
        self._reset()

    def _reset(self):
        self.running = False
        self.state = "Idle"
        self.session = Session(self.world_map, self.selected_engine)
        self.open_set.clear()
        self.closed_set.clear()
        self._last_metrics = {}
        self._refresh_active_states()

    def _toggle_run(self):
        if self.session.engine.done or self.session.engine.no_path:
            return
        self.running = not self.running
        self.state = "Running" if self.running else "Paused"
        self._refresh_active_states()

    def _bump_speed(self, dv: int):
        self.steps_per_sec = int(max(1, min(60, self.steps_per_sec + dv)))

    # ---------- drawing ----------
    def _draw(self):
        self._draw_backdrop()
        self._draw_grid()
        self._draw_metrics_and_buttons()
        pygame.display.flip()

    def _draw_backdrop(self):
        w, h = self.screen.get_size()
        top = (24, 26, 32); bot = (36, 40, 48)
        for y in range(h):
            t = y / max(1, h-1)
            c = tuple(int(top[i] + (bot[i]-top[i]) * t) for i in range(3))
            pygame.draw.line(self.screen, c, (0, y), (w, y))

    def _cell_rect(self, coord: Coord) -> pygame.Rect:
        cs = self.cell_size
        ox, oy = self._grid_origin
        row, col = coord
        return pygame.Rect(ox + col*cs, oy + row*cs, cs, cs)

    def _draw_grid(self):
        cs = self.cell_size
        grid = self.session.grid
        world = self.session.world

        for cell in grid:
            rect = self._cell_rect(cell.coord)
            known = cell.status != NEUTRAL
            status = cell.status if known else world.status_at(cell.coord)
            pygame.draw.rect(self.screen, tile_color(status, known), rect)
            if status not in (NEUTRAL, AGENT):
                txt = self.font_small.render(status, True, BLACK)
                self.screen.blit(txt, txt.get_rect(center=rect.center))
            pygame.draw.rect(self.screen, BLACK, rect, 1)

        for coord in self.closed_set:
            s = pygame.Surface((cs, cs), pygame.SRCALPHA); s.fill(NEON_MAG_A)
            self.screen.blit(s, self._cell_rect(coord).topleft)
        for coord in self.open_set:
            s = pygame.Surface((cs, cs), pygame.SRCALPHA); s.fill(NEON_CYAN_A)
            self.screen.blit(s, self._cell_rect(coord).topleft)

        # walked trail
        trail = [grid.start] + list(self.session.boundary.moves)
        if len(trail) >= 2:
            pts = [self._cell_rect(c).center for c in trail[-60:]]
            pygame.draw.lines(self.screen, NEON_MINT, False, pts, 3)

        self._draw_badge(grid.target, RED, "I")
        if self.session.position is not None:
            self._draw_badge(self.session.position, BLUE, "A")

    def _draw_badge(self, coord: Coord, color: Tuple[int,int,int], label: str):
        rect = self._cell_rect(coord)
        pygame.draw.circle(self.screen, color, rect.center, max(8, self.cell_size//2 - 6))
        txt = self.font_small.render(label, True, WHITE)
        self.screen.blit(txt, txt.get_rect(center=rect.center))

    # ---------- buttons + metrics ----------
    def _build_buttons(self):
        self._buttons.clear()
        rb = self._right_band
        x = rb.x + 16
        y = rb.y + 250  # leaves space for metrics card above
        w = max(160, rb.width - 32)
        h = 34
        gap = 8

        def add(label, cb, *, togglable=False, store_as: Optional[str] = None):
            btn = UIButton(label, pygame.Rect(x, y, w, h), cb, togglable=togglable)
            self._buttons.append(btn)
            if store_as:
                setattr(self, store_as, btn)

        add("Run / Pause", self._toggle_run, togglable=True, store_as="btn_run"); y += h + gap
        add("Step Once", self._do_step); y += h + gap
        add("Reset", self._reset);       y += h + gap
        add("Engine: A*",           lambda: self._switch_engine("astar"),        togglable=True, store_as="btn_engine_a"); y += h + gap
        add("Engine: Backtracking", lambda: self._switch_engine("backtracking"), togglable=True, store_as="btn_engine_b"); y += h + gap
        add("Map 1: Open field",      lambda: self._switch_map("01_open_field"),      togglable=True, store_as="btn_map1"); y += h + gap
        add("Map 2: Walled stone",    lambda: self._switch_map("02_walled_stone"),    togglable=True, store_as="btn_map2"); y += h + gap
        add("Map 3: Shifting hazard", lambda: self._switch_map("03_shifting_hazard"), togglable=True, store_as="btn_map3")
        self._refresh_active_states()

    def _refresh_active_states(self):
        if hasattr(self, "btn_run"):
            self.btn_run.set_active(self.running)
        if hasattr(self, "btn_engine_a"):
            self.btn_engine_a.set_active(self.selected_engine == "astar")
            self.btn_engine_b.set_active(self.selected_engine == "backtracking")
        if hasattr(self, "btn_map1"):
            self.btn_map1.set_active(self.selected_map_key == "01_open_field")
            self.btn_map2.set_active(self.selected_map_key == "02_walled_stone")
            self.btn_map3.set_active(self.selected_map_key == "03_shifting_hazard")

    def _draw_metrics_and_buttons(self):
        rb = self._right_band
        card = pygame.Surface((rb.width - 20, 230), pygame.SRCALPHA)
        pygame.draw.rect(card, CARD_BG, card.get_rect(), border_radius=14)
        hi = pygame.Surface((card.get_width(), 24), pygame.SRCALPHA)
        pygame.draw.rect(hi, CARD_HI, hi.get_rect(), border_radius=14)
        card.blit(hi, (0,0))
        self.screen.blit(card, (rb.x + 10, rb.y + 10))

        x0 = rb.x + 24
        y0 = rb.y + 18

        def line(text, big=False, color=TEXT_LIGHT):
            nonlocal y0
            f = self.font_big if big else self.font
            surf = f.render(text, True, color)
            self.screen.blit(surf, (x0, y0))
            y0 += surf.get_height() + 6

        m = self._last_metrics
        engine = self.session.engine
        line("Metrics", big=True, color=ACCENT_GOLD)
        line(f"State: {self.state}")
        line(f"Moves: {m.get('moves', 0)}")
        line(f"Popped: {m.get('popped', 0)}   Open: {m.get('open_size', 0)}")
        line(f"Closed: {m.get('closed_count', 0)}")
        line(f"Shield: {'yes' if engine.has_protective_item else 'no'}")
        if m.get("total_cost") is not None:
            line(f"Total Cost: {m['total_cost']}")
        line(f"{ENGINE_LABELS[self.selected_engine]} | {self.steps_per_sec} steps/s")
        if self.session.world.hazard_hits:
            line(f"Stepped on hazard x{len(self.session.world.hazard_hits)}", color=RED)

        for b in self._buttons:
            b.draw(self.screen, self.font)


# ---------- main ----------
def main(argv: Optional[List[str]] = None):
    argv = sys.argv[1:] if argv is None else argv
    setup_logging(resolve_log_level(argv), log_file=resolve_log_file(argv))
    path = resolve_map(argv)
    try:
        world_map = load_world(path)
    except (OSError, ValueError, KeyError) as ex:
        logger.error("Failed to load map %s: %s", path, ex)
        sys.exit(1)
    key = next((k for k, p in MAP_FILES.items() if Path(p) == Path(path)), "custom")
    Viewer(world_map, map_key=key, engine_key=resolve_engine(argv)).run()


if __name__ == "__main__":
    main()
