from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from packages.shared.config import AppConfig
from packages.shared.paths import config_path, ensure_app_dirs

log = logging.getLogger(__name__)


class ConfigStore:
    """
    JSON-backed AppConfig. Keys missing from the file take their defaults;
    a file that cannot be used at all is moved aside to config.json.bad and
    replaced with defaults, so a session never starts on a half-read config.
    """

    def __init__(self) -> None:
        ensure_app_dirs()
        self._path = config_path()

    def load(self) -> AppConfig:
        if not self._path.exists():
            log.info("No config at %s, writing defaults", self._path)
            return self._reset()

        try:
            data: Any = json.loads(self._path.read_text(encoding="utf-8"))
            return AppConfig.model_validate(data)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) or "<root>" for err in e.errors())
            log.warning("Config at %s has invalid values (%s), restoring defaults", self._path, fields)
        except (OSError, ValueError) as e:
            log.warning("Config at %s is unreadable (%s), restoring defaults", self._path, e)

        self._backup()
        return self._reset()

    def save(self, cfg: AppConfig) -> None:
        tmp = self._path.with_suffix(".json.tmp")
        tmp.write_text(cfg.model_dump_json(indent=2), encoding="utf-8")
        os.replace(tmp, self._path)

    def path(self) -> str:
        return str(self._path)

    def backup_path(self) -> Path:
        return self._path.with_suffix(".json.bad")

    def _reset(self) -> AppConfig:
        cfg = AppConfig()
        self.save(cfg)
        return cfg

    def _backup(self) -> None:
        try:
            os.replace(self._path, self.backup_path())
        except OSError as e:
            log.debug(f"Could not keep a copy of the bad config: {e}")
