#Pygame viewer for portal mazes

from __future__ import annotations

import colorsys

import pygame

from portal_maze import PORTAL_CHOICES, SIZE_CONFIGS

SIZE_KEYS = {
    pygame.K_1: "S",
    pygame.K_2: "M",
    pygame.K_3: "L",
    pygame.K_4: "XL",
}


def portal_color(portal_id):
    hue = (portal_id * 0.61803) % 1.0
    r, g, b = colorsys.hsv_to_rgb(hue, 0.75, 0.95)
    return int(r * 255), int(g * 255), int(b * 255)


def section_tint(section_id):
    hue = (section_id * 0.29) % 1.0
    r, g, b = colorsys.hsv_to_rgb(hue, 0.12, 0.95)
    return int(r * 255), int(g * 255), int(b * 255)


class MazeVisualizer:
    #Shows one maze with its portals and solution path
    #R regenerates with a new seed, +/- change the portal count, 1-4 pick the page size, P toggles the path

    def __init__(
        self,
        build,
        size="M",
        portals=2,
        seed=0,
        tile_size=16,
        stats_height=90,
    ):
        self.build = build
        self.size = size
        self.portals = portals
        self.seed = seed
        self.tile_size = tile_size
        self.stats_height = stats_height
        self.show_path = True
        self.result = None

    def _cell_to_grid(self, x, y):
        return 2 * x + 1, 2 * y + 1

    def regenerate(self, new_seed=False):
        if new_seed:
            self.seed += 1
        self.result = self.build(self.size, self.portals, seed=self.seed)

    def change_portals(self, delta):
        choices = list(PORTAL_CHOICES)
        idx = choices.index(self.portals) if self.portals in choices else 0
        idx = max(0, min(len(choices) - 1, idx + delta))
        if choices[idx] != self.portals:
            self.portals = choices[idx]
            self.regenerate()

    def change_size(self, size):
        if size in SIZE_CONFIGS and size != self.size:
            self.size = size
            self.regenerate()

    def _compute_layout(self, grid_cols, grid_rows, container_w, container_h):
        usable_w = max(320, container_w - 16)
        usable_h = max(240, container_h - 16 - self.stats_height)
        tile_size = max(3, min(self.tile_size * 2, usable_w // grid_cols, usable_h // grid_rows))
        return tile_size

    def run(self):
        self.regenerate()

        pygame.init()
        display_info = pygame.display.Info()
        default_w = max(640, int(display_info.current_w * 0.9))
        default_h = max(480, int(display_info.current_h * 0.8))
        screen = pygame.display.set_mode((default_w, default_h), pygame.RESIZABLE)
        pygame.display.set_caption("Portal Maze")
        font = pygame.font.SysFont(None, 20)
        clock = pygame.time.Clock()
        fullscreen = False
        last_window_size = screen.get_size()

        #color schemes for visual aspects
        colors = {
            "wall": (20, 20, 20),
            "start": (50, 200, 90),
            "goal": (210, 60, 60),
            "path": (66, 135, 245),
            "hop": (240, 144, 41),
        }

        running = True
        while running:
            clock.tick(30)
            for event in pygame.event.get():
                if event.type == pygame.QUIT or (
                    event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE
                ):
                    running = False
                if event.type == pygame.VIDEORESIZE and not fullscreen:
                    last_window_size = (event.w, event.h)
                    screen = pygame.display.set_mode(last_window_size, pygame.RESIZABLE)
                if event.type != pygame.KEYDOWN:
                    continue
                if event.key == pygame.K_f:
                    fullscreen = not fullscreen
                    if fullscreen:
                        display_info = pygame.display.Info()
                        screen = pygame.display.set_mode((display_info.current_w, display_info.current_h), pygame.FULLSCREEN)
                    else:
                        screen = pygame.display.set_mode(last_window_size, pygame.RESIZABLE)
                elif event.key == pygame.K_r:
                    self.regenerate(new_seed=True)
                elif event.key == pygame.K_p:
                    self.show_path = not self.show_path
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                    self.change_portals(1)
                elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                    self.change_portals(-1)
                elif event.key in SIZE_KEYS:
                    self.change_size(SIZE_KEYS[event.key])

            maze = self.result.maze
            grid = maze.to_grid()
            grid_rows = len(grid)
            grid_cols = len(grid[0])
            tile_size = self._compute_layout(grid_cols, grid_rows, *screen.get_size())

            screen.fill((10, 10, 10))

            for gy, grid_row in enumerate(grid):
                for gx, value in enumerate(grid_row):
                    color = colors["wall"]
                    if value == 1:
                        #floor takes the tint of the section it belongs to
                        cell = maze.cells[max(0, (gy - 1) // 2)][max(0, (gx - 1) // 2)]
                        color = section_tint(cell.section_id or 0)
                    rect = pygame.Rect(gx * tile_size, gy * tile_size, tile_size, tile_size)
                    pygame.draw.rect(screen, color, rect)

            for x, y in maze.portal_cells():
                portal = maze.cells[y][x].portal
                gx, gy = self._cell_to_grid(x, y)
                center = (gx * tile_size + tile_size // 2, gy * tile_size + tile_size // 2)
                pygame.draw.circle(screen, portal_color(portal.id), center, max(2, tile_size // 2))
                if tile_size >= 12:
                    label = font.render(str(portal.id), True, (20, 20, 20))
                    screen.blit(label, label.get_rect(center=center))

            if self.show_path and self.result.path:
                points = []
                for x, y in self.result.path:
                    gx, gy = self._cell_to_grid(x, y)
                    points.append((gx * tile_size + tile_size // 2, gy * tile_size + tile_size // 2))
                width = max(1, tile_size // 3)
                for i in range(len(points) - 1):
                    hop = i < len(self.result.portal_steps) and self.result.portal_steps[i]
                    if hop:
                        self._draw_dashed(screen, colors["hop"], points[i], points[i + 1], width)
                    else:
                        pygame.draw.line(screen, colors["path"], points[i], points[i + 1], width)

            sx, sy = self._cell_to_grid(*maze.entrance)
            gx, gy = self._cell_to_grid(*maze.exit)
            pygame.draw.rect(screen, colors["start"], pygame.Rect(sx * tile_size, sy * tile_size, tile_size, tile_size))
            pygame.draw.rect(screen, colors["goal"], pygame.Rect(gx * tile_size, gy * tile_size, tile_size, tile_size))

            path_len = len(self.result.path) if self.result.path else "-"
            lines = [
                f"size: {self.size}  seed: {self.seed}  sections: {self.result.sections}",
                f"portals: {self.result.portal_pairs}/{self.portals}  path length: {path_len}",
                "R new maze  +/- portals  1-4 size  P path  F fullscreen  Esc quit",
            ]
            top = grid_rows * tile_size + 8
            for i, text in enumerate(lines):
                surface = font.render(text, True, (235, 235, 235))
                screen.blit(surface, (8, top + i * 22))

            pygame.display.flip()

        pygame.quit()

    @staticmethod
    def _draw_dashed(surface, color, start, end, width, dash=6):
        (x0, y0), (x1, y1) = start, end
        length = max(1, int(((x1 - x0) ** 2 + (y1 - y0) ** 2) ** 0.5))
        for i in range(0, length, dash * 2):
            a = i / length
            b = min(1.0, (i + dash) / length)
            pygame.draw.line(
                surface,
                color,
                (x0 + (x1 - x0) * a, y0 + (y1 - y0) * a),
                (x0 + (x1 - x0) * b, y0 + (y1 - y0) * b),
                width,
            )
