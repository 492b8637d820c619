"""Backend profiles for code generation (R, Python)."""

from typing import Dict, Type

from .profile import BackendProfile, FunctionRule, TableFormat, TranslationMode
from .python_profile import PythonProfile
from .r_profile import RProfile

PROFILES: Dict[str, Type[BackendProfile]] = {
    "r": RProfile,
    "python": PythonProfile,
}


def get_profile(target: str) -> BackendProfile:
    """Return a fresh profile instance for a target name ("r" or "python")."""
    try:
        return PROFILES[target.lower()]()
    except KeyError:
        raise ValueError(f"Unknown export target '{target}' (expected one of: {', '.join(PROFILES)})")


__all__ = [
    "BackendProfile",
    "FunctionRule",
    "TableFormat",
    "TranslationMode",
    "RProfile",
    "PythonProfile",
    "PROFILES",
    "get_profile",
]
