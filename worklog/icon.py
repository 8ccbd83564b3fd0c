from __future__ import annotations

from PIL import Image, ImageDraw

ICON_BACKGROUND = (37, 99, 235, 255)
ICON_BARS = (255, 255, 255, 255)


def draw_app_icon(size: int = 64) -> Image.Image:
    """Rounded blue tile with three bars, used as the window icon."""
    size = max(16, int(size))
    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    inset = max(1, size // 16)
    draw.rounded_rectangle(
        [inset, inset, size - inset - 1, size - inset - 1],
        radius=max(2, size // 5),
        fill=ICON_BACKGROUND,
    )

    baseline = size - size // 4
    bar_width = max(2, size // 8)
    gap = max(1, size // 16)
    left = (size - (3 * bar_width + 2 * gap)) // 2
    for index, ratio in enumerate((0.3, 0.55, 0.42)):
        x = left + index * (bar_width + gap)
        height = int(size * ratio)
        draw.rectangle([x, baseline - height, x + bar_width - 1, baseline], fill=ICON_BARS)
    return image
