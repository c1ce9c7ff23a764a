"""Declarative plugin configuration schema consumed by settings UIs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class FieldKind(Enum):
    """Control types a settings UI can render."""

    TOGGLE = "toggle"
    SELECT = "select"
    TEXT = "text"
    NUMBER = "number"


@dataclass(frozen=True)
class ConfigOption:
    value: str
    label: str


@dataclass(frozen=True)
class ConfigField:
    """One configurable key of a plugin."""

    kind: FieldKind
    label: str
    description: Optional[str] = None
    options: tuple[ConfigOption, ...] = field(default_factory=tuple)
    placeholder: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value, "label": self.label}
        if self.description:
            data["description"] = self.description
        if self.options:
            data["options"] = [{"value": opt.value, "label": opt.label} for opt in self.options]
        if self.placeholder:
            data["placeholder"] = self.placeholder
        return data

    def coerce(self, value: Any) -> Any:
        """Convert a raw value to this field's type.

        Raises:
            ValueError: If the value cannot represent this field
        """
        if self.kind is FieldKind.TOGGLE:
            if isinstance(value, bool):
                return value
            if isinstance(value, str) and value.lower() in ("true", "false"):
                return value.lower() == "true"
            if isinstance(value, int) and value in (0, 1):
                return bool(value)
            raise ValueError(f"Expected a boolean, got {value!r}")

        if self.kind is FieldKind.NUMBER:
            if isinstance(value, bool):
                raise ValueError(f"Expected a number, got {value!r}")
            if isinstance(value, (int, float)):
                return value
            try:
                return float(value) if "." in str(value) else int(value)
            except (TypeError, ValueError):
                raise ValueError(f"Expected a number, got {value!r}")

        if not isinstance(value, str):
            raise ValueError(f"Expected a string, got {value!r}")
        if self.kind is FieldKind.SELECT and self.options:
            if value not in {opt.value for opt in self.options}:
                raise ValueError(f"Unknown option {value!r}")
        return value


ENABLED_FIELD = ConfigField(FieldKind.TOGGLE, "Enabled", "Run this plugin during conversion")


def toggle(label: str, description: Optional[str] = None) -> ConfigField:
    return ConfigField(FieldKind.TOGGLE, label, description)


def select(label: str, options: list[tuple[str, str]], description: Optional[str] = None) -> ConfigField:
    return ConfigField(
        FieldKind.SELECT,
        label,
        description,
        options=tuple(ConfigOption(value, option_label) for value, option_label in options),
    )


def text(label: str, description: Optional[str] = None, placeholder: Optional[str] = None) -> ConfigField:
    return ConfigField(FieldKind.TEXT, label, description, placeholder=placeholder)
