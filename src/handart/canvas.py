"""Draw commands issued to the drawing surface.

The stroke builder and particle field never touch pixels themselves. They
return lists of DrawCommand objects which the controller applies to the
surface, so tests can inspect exactly what would be drawn.

Command types:
- path: move/line/quad segments stroked with the brush
- disc: filled circle at (x, y) with radius and alpha
- alpha: set the surface's global alpha
- fill: fill the whole surface with a colour
- fade: composite a translucent colour over the whole surface
"""

from __future__ import annotations

from dataclasses import dataclass, field


# Path segment tuples:
#   ("move", x, y)
#   ("line", x, y)
#   ("quad", cx, cy, x, y)
Segment = tuple


@dataclass
class DrawCommand:
    """A single drawing operation on the surface."""
    type: str  # "path", "disc", "alpha", "fill", "fade"
    x: float = 0.0
    y: float = 0.0
    radius: float = 0.0
    color: str = "#000000"
    width: float = 1.0
    alpha: float = 1.0
    segments: list[Segment] = field(default_factory=list)

    def to_dict(self) -> dict:
        if self.type == "path":
            return {
                "type": "path",
                "segments": [
                    [seg[0]] + [round(float(v), 1) for v in seg[1:]]
                    for seg in self.segments
                ],
                "color": self.color,
                "width": self.width,
            }
        elif self.type == "disc":
            return {
                "type": "disc",
                "x": round(self.x, 1),
                "y": round(self.y, 1),
                "radius": round(self.radius, 2),
                "color": self.color,
                "alpha": round(self.alpha, 3),
            }
        elif self.type == "alpha":
            return {"type": "alpha", "alpha": self.alpha}
        elif self.type in ("fill", "fade"):
            return {"type": self.type, "color": self.color, "alpha": self.alpha}
        return {"type": self.type}


def stroke_path(
    points: list[tuple[float, float]],
    color: str,
    width: float,
    tail: int = 3,
) -> DrawCommand | None:
    """Build a smoothed path command over the tail of a point list.

    Consecutive points are joined through their midpoints: the first
    segment is a straight line to the first midpoint, every later segment
    is a quadratic curve controlled by the previous point and ending at
    the next midpoint, and a final straight line reaches the newest point.

    Returns None when fewer than two points are available.
    """
    if len(points) < 2:
        return None

    start = max(0, len(points) - tail)
    segments: list[Segment] = [("move", points[start][0], points[start][1])]

    for i in range(start + 1, len(points)):
        prev_x, prev_y = points[i - 1]
        curr_x, curr_y = points[i]
        mid_x = (prev_x + curr_x) / 2
        mid_y = (prev_y + curr_y) / 2

        if i == start + 1:
            segments.append(("line", mid_x, mid_y))
        else:
            segments.append(("quad", prev_x, prev_y, mid_x, mid_y))

    last_x, last_y = points[-1]
    segments.append(("line", last_x, last_y))

    return DrawCommand(type="path", color=color, width=width, segments=segments)
