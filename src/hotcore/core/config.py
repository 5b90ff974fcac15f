from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, fields
from importlib import resources
from typing import Any

from hotcore.contracts import GameConfig, ProfileManifest

EXPECTED_SCHEMA_VERSION = "1.0"
PROFILE_RESOURCE = "game_profiles.json"
DEFAULT_PROFILE_ID = "arbitrum_v1"

_TUNABLES = tuple(f.name for f in fields(GameConfig))


def _read_profile_bundle(payload: dict[str, Any] | None = None) -> tuple[ProfileManifest, dict[str, dict[str, Any]]]:
    if payload is None:
        package = resources.files("hotcore.resources")
        payload = json.loads((package / PROFILE_RESOURCE).read_text(encoding="utf-8"))
    manifest_data = payload.get("manifest")
    entries = payload.get("resources")
    if not isinstance(manifest_data, dict) or not isinstance(entries, list):
        raise ValueError("profile bundle must provide a manifest and a resources list")

    required = {"resource_type", "schema_version", "resource_version", "checksum"}
    missing = sorted(required - set(manifest_data.keys()))
    if missing:
        raise ValueError(f"profile manifest missing required fields {missing}")
    manifest = ProfileManifest(
        resource_type=str(manifest_data["resource_type"]),
        schema_version=str(manifest_data["schema_version"]),
        resource_version=str(manifest_data["resource_version"]),
        checksum=str(manifest_data["checksum"]),
    )
    if manifest.resource_type != "game_profile":
        raise ValueError(f"expected resource_type 'game_profile', got '{manifest.resource_type}'")
    if manifest.schema_version != EXPECTED_SCHEMA_VERSION:
        raise ValueError(f"expected schema {EXPECTED_SCHEMA_VERSION}, got {manifest.schema_version}")
    canonical = json.dumps(entries, sort_keys=True, separators=(",", ":")).encode("utf-8")
    if hashlib.sha256(canonical).hexdigest() != manifest.checksum:
        raise ValueError("profile bundle checksum mismatch")

    by_id: dict[str, dict[str, Any]] = {}
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("id"):
            continue
        by_id[str(entry["id"])] = dict(entry)
    if not by_id:
        raise ValueError("profile bundle contains no usable profile ids")
    return manifest, by_id


def _config_from_values(values: dict[str, Any]) -> GameConfig:
    unknown = sorted(set(values) - set(_TUNABLES))
    if unknown:
        raise ValueError(f"unknown game config keys {unknown}")
    config = GameConfig(**{k: int(v) for k, v in values.items()})
    config.validate()
    return config


def default_game_profiles(payload: dict[str, Any] | None = None) -> dict[str, GameConfig]:
    _, by_id = _read_profile_bundle(payload)
    return {
        profile_id: _config_from_values({k: v for k, v in raw.items() if k in _TUNABLES})
        for profile_id, raw in by_id.items()
    }


def profile_manifest() -> ProfileManifest:
    manifest, _ = _read_profile_bundle()
    return manifest


def load_game_config(profile_id: str = DEFAULT_PROFILE_ID, overrides: dict[str, Any] | None = None) -> GameConfig:
    profiles = default_game_profiles()
    if profile_id not in profiles:
        raise ValueError(f"game profile '{profile_id}' is not registered")
    values = asdict(profiles[profile_id])
    if overrides:
        unknown = sorted(set(overrides) - set(_TUNABLES))
        if unknown:
            raise ValueError(f"unknown game config keys {unknown}")
        values.update(overrides)
    return _config_from_values(values)
