"""Завантаження YAML конфігурацій."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Зчитує YAML файл та повертає його вміст як dict.

    Args:
        path: Шлях до файлу.

    Returns:
        Вміст файлу як словник (порожній для порожнього файлу).

    Raises:
        FileNotFoundError: Якщо файл не знайдено.
        ValueError: Якщо YAML некоректний або верхній рівень не є mapping.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    with p.open("r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ValueError(f"Config {p} is not valid YAML: {exc}") from exc
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Config {p} must contain a mapping, got {type(data).__name__}")
    log.debug("Loaded config %s (%d top-level keys)", p.name, len(data or {}))
    return data or {}


def load_section(path: str | Path | None, section: str, required: bool = False) -> dict[str, Any]:
    """Повертає одну секцію YAML файлу.

    Відсутній файл допустимий, якщо ``required`` не встановлено — тоді
    повертається порожній dict.
    """
    if path is None:
        return {}
    p = Path(path)
    if not p.exists() and not required:
        log.debug("Optional config %s not present, using defaults", p)
        return {}
    section_data = load_yaml(p).get(section) or {}
    if not isinstance(section_data, dict):
        raise ValueError(f"Section '{section}' in {p} must be a mapping")
    return section_data
