from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional

from ..common.validators import optional_trimmed, require_int
from ..core.enums import Role
from ..core.exceptions import ValidationError

_TRUE = {"1", "true", "yes", "y"}
_FALSE = {"0", "false", "no", "n"}


@dataclass(frozen=True)
class CategorySeed:
    role: Role
    name: str
    sort_order: int
    requires_description: bool = False
    is_active: bool = True


def _flag(value: Optional[str], field_name: str, *, default: bool) -> bool:
    if value is None:
        return default
    text = value.strip().lower()
    if not text:
        return default
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValidationError(f"{field_name} must be 0/1 or yes/no, got {value!r}")


def parse_category_rows(rows: Iterable[Mapping[str, Optional[str]]]) -> list[CategorySeed]:
    """Validate CSV-style rows into seeds.

    Errors name the line (header is line 1). A (role, name) pair may only
    appear once.
    """
    seeds: list[CategorySeed] = []
    seen: set[tuple[Role, str]] = set()

    for line, row in enumerate(rows, start=2):
        try:
            role = Role((row.get("role") or "").strip().upper())
        except ValueError:
            raise ValidationError(f"line {line}: unknown role {row.get('role')!r}") from None

        name = optional_trimmed(row.get("name"))
        if not name:
            raise ValidationError(f"line {line}: name is required")
        if (role, name) in seen:
            raise ValidationError(f"line {line}: duplicate category {role.value}/{name}")
        seen.add((role, name))

        try:
            seeds.append(
                CategorySeed(
                    role=role,
                    name=name,
                    sort_order=require_int(row.get("sort_order") or 0, "sort_order"),
                    requires_description=_flag(
                        row.get("requires_description"), "requires_description", default=False
                    ),
                    is_active=_flag(row.get("is_active"), "is_active", default=True),
                )
            )
        except ValidationError as e:
            raise ValidationError(f"line {line}: {e}") from None

    return seeds


def read_category_csv(path: str | Path) -> list[CategorySeed]:
    with open(path, newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh)
        missing = {"role", "name"} - set(reader.fieldnames or [])
        if missing:
            raise ValidationError(f"{path}: missing column(s) {', '.join(sorted(missing))}")
        return parse_category_rows(reader)
