"""Preset registry -- the five digit-keyed simulation configurations.

Order is significant: ``key`` is the keyboard digit that selects the preset.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PresetDescriptor:
    key: int
    name: str
    description: str

    @property
    def key_binding(self) -> str:
        """Playwright key name for this preset's digit."""
        return f"Digit{self.key}"


PRESETS: tuple[PresetDescriptor, ...] = (
    PresetDescriptor(1, "galaxy", "Spiral Galaxy Simulation"),
    PresetDescriptor(2, "firework", "Firework Explosions"),
    PresetDescriptor(3, "swarm", "Swarm Behavior"),
    PresetDescriptor(4, "fountain", "Particle Fountain"),
    PresetDescriptor(5, "chaos", "Chaos Mode"),
)

DEFAULT_PRESET = PRESETS[0]

# Presets whose post-settle output must be visibly different.
DISTINCT_PAIR = (PRESETS[0], PRESETS[4])


def preset_by_key(key: int) -> PresetDescriptor:
    """Return the preset bound to digit *key* (1..5)."""
    for p in PRESETS:
        if p.key == key:
            return p
    raise ValueError(f"Preset key must be 1..{len(PRESETS)}, got {key!r}")


def preset_by_name(name: str) -> PresetDescriptor:
    """Return the preset with *name* (case-insensitive)."""
    wanted = name.strip().lower()
    for p in PRESETS:
        if p.name == wanted:
            return p
    known = ", ".join(p.name for p in PRESETS)
    raise ValueError(f"Unknown preset '{name}' (known: {known})")
