from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

import yaml

if TYPE_CHECKING:
    from ring_escape.core import SimConfig


@dataclass(frozen=True)
class LoadedPreset:
    preset_path: Path
    resolved: Dict[str, Any]
    loaded_files: Tuple[Path, ...]  # includes + preset itself

    @property
    def mode(self) -> Optional[str]:
        return self.resolved.get("mode")

    @property
    def seed(self) -> int | None:
        return self.resolved.get("seed")

    @property
    def overrides(self) -> Dict[str, Any]:
        overrides = self.resolved.get("config") or {}
        if not isinstance(overrides, dict):
            raise ValueError(f"'config' must be a mapping in {self.preset_path}")
        return overrides

    def to_config(self) -> SimConfig:
        """Mode preset first, then the `config:` mapping of the YAML on top."""
        from ring_escape.presets.modes import DEFAULT_MODE, config_for_mode

        return config_for_mode(self.mode or DEFAULT_MODE, self.overrides)


def _deep_merge(base: Any, override: Any) -> Any:
    """Mappings merge key by key; anything else (lists included) is replaced by `override`."""
    if not (isinstance(base, dict) and isinstance(override, dict)):
        return list(override) if isinstance(override, list) else override
    out = dict(base)
    for key, value in override.items():
        out[key] = _deep_merge(out[key], value) if key in out else value
    return out


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Preset root must be a mapping: {path}")
    return data


def load_preset(preset_path: str | Path) -> LoadedPreset:
    """
    Load a preset YAML that may contain:

      include:
        - other.yaml
        - path/to/more.yaml
      mode: collapsing_rotating_circles
      seed: 7
      config:
        gravity: 0.3

    Includes are resolved relative to the preset (recursively, each file at
    most once). Returns a fully merged dict plus the list of files that were
    loaded.
    """
    preset_path = Path(preset_path).expanduser().resolve()
    loaded: List[Path] = []
    merged = _resolve(preset_path, loaded, stack=())
    return LoadedPreset(
        preset_path=preset_path,
        resolved=merged,
        loaded_files=tuple(loaded),
    )


def _resolve(path: Path, loaded: List[Path], stack: Tuple[Path, ...]) -> Dict[str, Any]:
    if path in stack:
        raise ValueError(f"Circular include: {' -> '.join(str(p) for p in stack + (path,))}")
    data = _load_yaml(path)

    include_list = data.get("include", [])
    if include_list is None:
        include_list = []
    if not isinstance(include_list, list):
        raise ValueError(f"'include' must be a list in {path}")

    merged: Dict[str, Any] = {}

    # 1) Load includes first
    for rel in include_list:
        if not isinstance(rel, str):
            raise ValueError(f"include entries must be strings. Got {type(rel)} in {path}")
        inc_path = (path.parent / rel).expanduser().resolve()
        merged = _deep_merge(merged, _resolve(inc_path, loaded, stack + (path,)))

    # 2) Apply this file's keys last (excluding 'include')
    overrides = dict(data)
    overrides.pop("include", None)
    merged = _deep_merge(merged, overrides)

    if path not in loaded:
        loaded.append(path)
    return merged
