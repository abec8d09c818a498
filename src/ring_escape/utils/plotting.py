import colorsys

from matplotlib import colors
import numpy as np

Color = tuple[int, int, int]


def hsl_to_uint8(hue: float, saturation: float, lightness: float) -> Color:
    """hue in degrees, saturation / lightness in percent (CSS hsl() convention)."""
    r, g, b = colorsys.hls_to_rgb((hue % 360.0) / 360.0, lightness / 100.0, saturation / 100.0)
    return tuple(int(round(255 * c)) for c in (r, g, b))


def random_pastel(rng: np.random.Generator) -> Color:
    hue = float(np.floor(rng.uniform(0.0, 360.0)))
    return hsl_to_uint8(hue, 70.0, 80.0)


def scale_brightness(color: Color, factor: float) -> Color:
    return tuple(min(255, max(0, int(np.floor(c * factor)))) for c in color)


def uint8_to_float(color: Color, alpha: float | None = None) -> tuple[float, ...]:
    rgb = tuple(c / 255 for c in color)
    if alpha is None:
        return rgb
    return colors.to_rgba(rgb, float(alpha))


def get_color(base_color, gamma, light_factor=0.7):
    base = np.array(base_color, dtype=float)
    white = np.ones(3, dtype=float)
    light = white * light_factor + base * (1 - light_factor)
    color = light * (1 - gamma) + base * gamma
    return tuple(color)
