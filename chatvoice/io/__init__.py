"""Configuration storage and profile listing collaborators."""

from .storage import (
    MAIN_OPTION_KEY,
    ConfigStore,
    JsonFileConfigStore,
    ProfileListing,
    profile_key,
)

__all__ = [
    "MAIN_OPTION_KEY",
    "ConfigStore",
    "JsonFileConfigStore",
    "ProfileListing",
    "profile_key",
]
