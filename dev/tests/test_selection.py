from __future__ import annotations

import pytest

from display_patcher.exceptions import UsageError
from display_patcher.patching.registry import PATCH_MODULES
from display_patcher.patching.selection import (
    OPT_IN_MARKER,
    format_module_listing,
    parse_id_list,
    resolve_selection,
)

DEFAULT_ON = {"collapsed-read-search", "thinking-transcript", "installer-message"}


def test_defaults_exclude_opt_in_modules() -> None:
    selection = resolve_selection(PATCH_MODULES)
    assert selection.enabled == DEFAULT_ON
    assert not selection.is_enabled("shebang")


def test_enable_adds_opt_in_and_disable_removes_default() -> None:
    selection = resolve_selection(PATCH_MODULES, enable=["shebang"], disable=["installer-message"])
    assert selection.enabled == (DEFAULT_ON | {"shebang"}) - {"installer-message"}
    assert selection.enable == {"shebang"}
    assert selection.disable == {"installer-message"}


def test_unknown_id_is_a_usage_error() -> None:
    with pytest.raises(UsageError) as excinfo:
        resolve_selection(PATCH_MODULES, enable=["no-such-patch"])
    assert "no-such-patch" in str(excinfo.value)
    assert excinfo.value.details["module_ids"] == ["no-such-patch"]


def test_conflicting_ids_are_a_usage_error() -> None:
    with pytest.raises(UsageError, match="both enabled and disabled"):
        resolve_selection(PATCH_MODULES, enable=["shebang"], disable=["shebang"])


def test_parse_id_list_trims_and_dedupes() -> None:
    assert parse_id_list(" shebang, ,installer-message,shebang ") == ["shebang", "installer-message"]
    assert parse_id_list("") == []
    assert parse_id_list(None) == []


def test_listing_marks_opt_in_modules() -> None:
    lines = format_module_listing(PATCH_MODULES)
    assert len(lines) == len(PATCH_MODULES)

    by_id = {line.split()[0]: line for line in lines}
    assert OPT_IN_MARKER in by_id["shebang"]
    assert OPT_IN_MARKER not in by_id["collapsed-read-search"]
    assert "bun" in by_id["shebang"]
