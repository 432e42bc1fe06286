"""
Named Redis Lua scripts
Discovers .lua files on a search path and runs them with EVALSHA, loading on NOSCRIPT
"""

from .adapter import (
    LoadAllResult,
    RedisScripts,
    create_scripts,
    get_scripts,
    is_noscript_error,
    reset_scripts,
    run_script,
)
from .registry import (
    Script,
    ScriptRegistry,
    get_default_search_path,
    set_default_search_path,
)

__version__ = "0.1.0"

__all__ = [
    "RedisScripts",
    "LoadAllResult",
    "Script",
    "ScriptRegistry",
    "create_scripts",
    "get_scripts",
    "run_script",
    "reset_scripts",
    "is_noscript_error",
    "get_default_search_path",
    "set_default_search_path",
]
