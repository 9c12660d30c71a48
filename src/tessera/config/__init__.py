from .loader import FILL_HISTORY_MODES, EditorConfig, load_config

__all__ = ["EditorConfig", "FILL_HISTORY_MODES", "load_config"]
