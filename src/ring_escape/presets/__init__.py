from .modes import DEFAULT_MODE, MODE_PRESETS, config_for_mode, make_initial_state, make_world

__all__ = ["DEFAULT_MODE", "MODE_PRESETS", "config_for_mode", "make_initial_state", "make_world"]
