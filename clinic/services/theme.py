"""
Colour helpers behind the theme picker: conversions, WCAG contrast
checks and harmony palettes.

Colours are ``#rrggbb`` strings; hue is in degrees, saturation and
lightness are fractions in ``[0, 1]``.
"""
from __future__ import annotations

import colorsys
import re

_HEX_RE = re.compile(r'^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$')

HARMONIES = ('complementary', 'analogous', 'triadic', 'split-complementary', 'monochromatic')


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    m = _HEX_RE.match((value or '').strip())
    if not m:
        raise ValueError(f'not a hex colour: {value!r}')
    digits = m.group(1)
    if len(digits) == 3:
        digits = ''.join(c * 2 for c in digits)
    n = int(digits, 16)
    return (n >> 16) & 255, (n >> 8) & 255, n & 255


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return '#{:02x}{:02x}{:02x}'.format(*(max(0, min(255, int(c))) for c in (r, g, b)))


def rgb_to_hsl(r: int, g: int, b: int) -> tuple[float, float, float]:
    h, l, s = colorsys.rgb_to_hls(r / 255, g / 255, b / 255)
    return h * 360, s, l


def hsl_to_rgb(h: float, s: float, l: float) -> tuple[int, int, int]:
    r, g, b = colorsys.hls_to_rgb((h % 360) / 360, l, s)
    return round(r * 255), round(g * 255), round(b * 255)


def hex_to_hsl(value: str) -> tuple[float, float, float]:
    return rgb_to_hsl(*hex_to_rgb(value))


def hsl_to_hex(h: float, s: float, l: float) -> str:
    return rgb_to_hex(*hsl_to_rgb(h, s, l))


def darker(value: str, amount: float = 0.2) -> str:
    h, s, l = hex_to_hsl(value)
    return hsl_to_hex(h, s, max(0.0, l - amount))


def lighter(value: str, amount: float = 0.2) -> str:
    h, s, l = hex_to_hsl(value)
    return hsl_to_hex(h, s, min(1.0, l + amount))


# ---------------------------------------------------------------------------
# WCAG 2.x contrast
# ---------------------------------------------------------------------------
def relative_luminance(value: str) -> float:
    def channel(c: int) -> float:
        c = c / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = (channel(c) for c in hex_to_rgb(value))
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(first: str, second: str) -> float:
    a, b = relative_luminance(first), relative_luminance(second)
    return (max(a, b) + 0.05) / (min(a, b) + 0.05)


def meets_wcag_aa(first: str, second: str, large_text: bool = False) -> bool:
    return contrast_ratio(first, second) >= (3 if large_text else 4.5)


def meets_wcag_aaa(first: str, second: str, large_text: bool = False) -> bool:
    return contrast_ratio(first, second) >= (4.5 if large_text else 7)


def accessibility_level(ratio: float) -> dict:
    if ratio < 3:
        return {'level': 'Fail', 'description': 'Fails WCAG standards'}
    if ratio < 4.5:
        return {'level': 'AA Large', 'description': 'Passes AA for large text only'}
    if ratio < 7:
        return {'level': 'AA', 'description': 'Passes AA for all text'}
    return {'level': 'AAA', 'description': 'Passes AAA for all text'}


def suggest_accessible_color(foreground: str, background: str, target_ratio: float = 4.5,
                             step: int = 10, max_attempts: int = 25) -> str:
    """Lighten (on dark backgrounds) or darken ``foreground`` until it reaches ``target_ratio``.

    Gives up after ``max_attempts`` steps and returns the last colour tried.
    """
    r, g, b = hex_to_rgb(foreground)
    current = rgb_to_hex(r, g, b)
    if contrast_ratio(current, background) >= target_ratio:
        return current
    delta = step if relative_luminance(background) < 0.5 else -step
    for _ in range(max_attempts):
        r, g, b = (max(0, min(255, c + delta)) for c in (r, g, b))
        current = rgb_to_hex(r, g, b)
        if contrast_ratio(current, background) >= target_ratio:
            break
    return current


def check_contrast(foreground: str, background: str) -> dict:
    ratio = contrast_ratio(foreground, background)
    data = {
        'foreground': rgb_to_hex(*hex_to_rgb(foreground)),
        'background': rgb_to_hex(*hex_to_rgb(background)),
        'ratio': round(ratio, 2),
        'aa': ratio >= 4.5,
        'aaLarge': ratio >= 3,
        'aaa': ratio >= 7,
        'aaaLarge': ratio >= 4.5,
        **accessibility_level(ratio),
    }
    if not data['aa']:
        data['suggestion'] = suggest_accessible_color(foreground, background)
    return data


# ---------------------------------------------------------------------------
# Palettes
# ---------------------------------------------------------------------------
def _rotate(h: float, s: float, l: float, *offsets: float) -> list[str]:
    return [hsl_to_hex((h + o) % 360, s, l) for o in offsets]


def palettes(base: str) -> list[dict]:
    """The five harmony palettes for ``base``; each contains ``base`` itself."""
    base = rgb_to_hex(*hex_to_rgb(base))
    h, s, l = hex_to_hsl(base)
    return [
        {'name': 'Complementary', 'harmony': 'complementary',
         'colors': [base, *_rotate(h, s, l, 180)]},
        {'name': 'Analogous', 'harmony': 'analogous',
         'colors': [_rotate(h, s, l, -30)[0], base, _rotate(h, s, l, 30)[0]]},
        {'name': 'Triadic', 'harmony': 'triadic',
         'colors': [base, *_rotate(h, s, l, 120, 240)]},
        {'name': 'Split-Complementary', 'harmony': 'split-complementary',
         'colors': [base, *_rotate(h, s, l, 150, 210)]},
        {'name': 'Monochromatic', 'harmony': 'monochromatic',
         'colors': [hsl_to_hex(h, s, max(0.0, l - 0.3)), base, hsl_to_hex(h, s, min(0.9, l + 0.3))]},
    ]


def variants(base: str) -> dict:
    """Hover shade and readable text colour for an accent ``base``."""
    text = '#ffffff' if contrast_ratio(base, '#ffffff') >= contrast_ratio(base, '#000000') else '#000000'
    return {'base': rgb_to_hex(*hex_to_rgb(base)), 'hover': darker(base, 0.1), 'lighter': lighter(base),
            'darker': darker(base), 'text': text}
