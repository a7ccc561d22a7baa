"""
Interactive Pygame Viewer for Symmetric Chaos

Renders one map family at a time (symmetric IFS, square quilt, symmetric
icon) and keeps densifying the attractor while the window is open.

Controls:
  SPACE       Pause / Resume
  R           Reset orbit (keep canvas)
  C           Clear canvas and reset
  M           Cycle render mode (chalk / glow / standard / histogram)
  P           Cycle histogram palette
  TAB         Next map family
  1-9         Presets of the current family
  UP / DOWN   Speed +/- 5
  L           Reload the --load preset file
  S           Save screenshot
  H           Toggle HUD overlay
  Q / ESC     Quit
"""

import os
import time
import numpy as np
import pygame

from .simulator import ChaosSimulator
from .accumulators import RENDER_MODES
from .colormaps import PALETTE_ORDER
from .maps import MAP_ORDER, get_map_class
from .presets import get_preset, get_presets_for_map, MAP_DEFAULT_PRESET

HUD_HEIGHT = 24


def screenshots_dir():
    path = os.path.join(
        os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
        "screenshots"
    )
    os.makedirs(path, exist_ok=True)
    return path


class Viewer:

    def __init__(self, width=800, height=800, start_preset="roses", render_mode=None,
                 speed=50, dpr=1.0, preset_file=None, map_name=None):
        self.canvas_w = width
        self.canvas_h = height
        self.running = True
        self.show_hud = True
        self.fps_history = []
        self.preset_file = preset_file
        self._palette_idx = 0

        if start_preset is None:
            start_preset = MAP_DEFAULT_PRESET[map_name or "ifs"]
        self.sim = ChaosSimulator(
            preset_key=start_preset, width=width, height=height,
            dpr=dpr, render_mode=render_mode, speed=speed,
        )
        if preset_file:
            self.sim.request_preset_file(preset_file)

    # --- Actions ---

    def _apply_preset(self, key):
        self.sim.apply_preset(key)
        print(f"Preset: {key}")

    def _next_map(self):
        idx = MAP_ORDER.index(self.sim.map_name)
        name = MAP_ORDER[(idx + 1) % len(MAP_ORDER)]
        self._apply_preset(MAP_DEFAULT_PRESET[name])

    def _cycle_mode(self):
        idx = RENDER_MODES.index(self.sim.render_mode)
        mode = RENDER_MODES[(idx + 1) % len(RENDER_MODES)]
        self.sim.set_render_mode(mode)
        print(f"Render mode: {mode}")

    def _cycle_palette(self):
        self._palette_idx = (self._palette_idx + 1) % len(PALETTE_ORDER)
        name = PALETTE_ORDER[self._palette_idx]
        self.sim.set_palette(name)
        print(f"Palette: {name}")

    def _set_speed(self, speed):
        self.sim.speed = min(max(speed, 1), 100)

    def _save_screenshot(self):
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        name = self.sim.preset_key or self.sim.map_name
        path = os.path.join(screenshots_dir(), f"sc_{name}_{timestamp}.png")
        latest_path = os.path.join(screenshots_dir(), "latest.png")
        img = self.sim.snapshot()
        img.save(path)
        img.save(latest_path)
        print(f"Screenshot saved: {path}")

    # --- Drawing ---

    def _render_frame(self):
        rgb = self.sim.step()
        # surfarray is (W, H, 3)
        surface = pygame.surfarray.make_surface(rgb.swapaxes(0, 1).copy())
        if surface.get_size() != (self.canvas_w, self.canvas_h):
            surface = pygame.transform.smoothscale(surface, (self.canvas_w, self.canvas_h))
        return surface

    def _draw_hud(self, screen, fps):
        if not self.show_hud:
            return

        sim = self.sim
        label = get_map_class(sim.map_name).map_label
        preset = get_preset(sim.preset_key) if sim.preset_key else None
        preset_name = preset["name"] if preset else "custom"

        line = (f"{label} - {preset_name}  |  {sim.render_mode}  |  "
                f"Iter: {sim.iterations:,}  |  Points: {sim.points:,}  |  "
                f"Speed: {sim.speed:.0f}  |  FPS: {fps:.0f}")
        if not sim.running:
            line = "[PAUSED]  " + line
        if sim.last_error:
            line += f"  |  {sim.last_error}"

        bg_surface = pygame.Surface((self.canvas_w, HUD_HEIGHT), pygame.SRCALPHA)
        bg_surface.fill((0, 0, 0, 140))
        screen.blit(bg_surface, (0, 0))

        text_surface = self.hud_font.render(line, True, (210, 215, 225))
        screen.blit(text_surface, (10, 6))

    # --- Main loop ---

    def run(self):
        """Main viewer loop."""
        pygame.init()

        screen = pygame.display.set_mode((self.canvas_w, self.canvas_h), pygame.RESIZABLE)
        pygame.display.set_caption("Symmetric Chaos")
        clock = pygame.time.Clock()
        self.hud_font = pygame.font.SysFont("menlo", 13)

        while self.running:
            frame_start = time.time()

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.KEYDOWN:
                    self._handle_keydown(event)
                elif event.type == pygame.VIDEORESIZE:
                    self.canvas_w, self.canvas_h = event.w, event.h
                    screen = pygame.display.set_mode(
                        (self.canvas_w, self.canvas_h), pygame.RESIZABLE
                    )
                    if not self.sim.resize(event.w, event.h):
                        print(f"Resize failed: {self.sim.last_error}")

            screen.fill((0, 0, 0))
            screen.blit(self._render_frame(), (0, 0))

            frame_time = time.time() - frame_start
            self.fps_history.append(frame_time)
            if len(self.fps_history) > 30:
                self.fps_history.pop(0)
            avg_fps = 1.0 / max(np.mean(self.fps_history), 0.001)

            self._draw_hud(screen, avg_fps)

            pygame.display.flip()
            clock.tick(60)

        self.sim.close()
        pygame.quit()

    def _handle_keydown(self, event):
        key = event.key

        if key in (pygame.K_q, pygame.K_ESCAPE):
            self.running = False

        elif key == pygame.K_SPACE:
            self.sim.toggle()

        elif key == pygame.K_r:
            self.sim.reset(clear=False)

        elif key == pygame.K_c:
            self.sim.clear()

        elif key == pygame.K_m:
            self._cycle_mode()

        elif key == pygame.K_p:
            self._cycle_palette()

        elif key == pygame.K_TAB:
            self._next_map()

        elif key == pygame.K_UP:
            self._set_speed(self.sim.speed + 5)

        elif key == pygame.K_DOWN:
            self._set_speed(self.sim.speed - 5)

        elif key == pygame.K_l:
            if self.preset_file:
                self.sim.request_preset_file(self.preset_file)

        elif key == pygame.K_s:
            self._save_screenshot()

        elif key == pygame.K_h:
            self.show_hud = not self.show_hud

        # Preset selection (1-9) within the current map family
        elif pygame.K_1 <= key <= pygame.K_9:
            idx = key - pygame.K_1
            keys = get_presets_for_map(self.sim.map_name)
            if idx < len(keys):
                self._apply_preset(keys[idx])
