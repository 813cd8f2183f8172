"""Settings read from YAML parameter files, plus runtime key/value overrides."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
import yaml


class _SettingsLoader(yaml.SafeLoader):
    """Safe loader that also understands matrix nodes written by vision tools."""


def _construct_matrix(loader: yaml.SafeLoader, node: yaml.Node) -> np.ndarray:
    data = loader.construct_mapping(node, deep=True)
    rows, cols = int(data["rows"]), int(data["cols"])
    return np.asarray(data.get("data", []), dtype=float).reshape(rows, cols)


_SettingsLoader.add_constructor("tag:yaml.org,2002:opencv-matrix", _construct_matrix)


def load_settings(path: str | Path) -> dict[str, Any]:
    """Read a settings file into a dictionary."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"parameter file {path} does not exist.")
    lines = path.read_text(encoding="utf-8").splitlines()
    text = "\n".join(line for line in lines if not line.startswith("%YAML"))
    data = yaml.load(text, Loader=_SettingsLoader)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"parameter file {path} does not hold a mapping")
    return data


class Config:
    """Parameters from a settings file and numeric values set at runtime."""

    DEFAULTS: dict[str, float] = {
        # Minimum number of 2D observations before an ellipsoid is initialized.
        "Tracking_MINIMUM_INITIALIZATION_FRAME": 15,
        # Valid depth range in metres.
        "EllipsoidExtractor_DEPTH_RANGE": 6,
    }

    def __init__(self, filename: str | Path | None = None) -> None:
        self._file: dict[str, Any] = {}
        self._values: dict[str, float] = {}
        if filename is not None:
            self.set_parameter_file(filename)

    @classmethod
    def with_defaults(cls) -> Config:
        config = cls()
        for key, value in cls.DEFAULTS.items():
            config.set_value(key, value)
        return config

    def set_parameter_file(self, filename: str | Path) -> None:
        self._file = load_settings(filename)

    def get(self, key: str) -> Any:
        """Value of ``key`` in the parameter file."""
        try:
            return self._file[key]
        except KeyError:
            raise KeyError(f"parameter {key!r} is not in the parameter file") from None

    def set(self, key: str, value: Any) -> None:
        self._file[key] = value

    def set_value(self, key: str, value: float) -> None:
        """Set a runtime value, creating it if needed."""
        self._values[key] = float(value)

    def read_value(self, key: str, default: Any = 0.0) -> Any:
        """Runtime value of ``key``, else its file value, else ``default``."""
        if key in self._values:
            return self._values[key]
        return self._file.get(key, default)