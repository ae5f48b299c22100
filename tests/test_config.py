from __future__ import annotations

import pytest

from exercheck.config import HarnessSettings


def test_defaults() -> None:
    settings = HarnessSettings()
    assert settings.timeout_ms == 10000
    assert settings.timeout_s == 10.0
    assert settings.max_code_size == 50000
    assert settings.safety_checks is True


def test_from_mapping_coerces_values() -> None:
    settings = HarnessSettings.from_mapping(
        {"timeout-ms": "2500", "grace_s": "0.5", "safety_checks": "off", "node_path": "/opt/node"}
    )
    assert settings.timeout_ms == 2500
    assert settings.grace_s == 0.5
    assert settings.safety_checks is False
    assert settings.node_path == "/opt/node"
    assert settings.resolve_node() == "/opt/node"


@pytest.mark.parametrize(
    "data, message",
    [
        ({"bogus": 1}, "Unknown harness setting"),
        ({"timeout_ms": "soon"}, "expects a number"),
        ({"timeout_ms": 0}, "must be positive"),
        ({"safety_checks": "maybe"}, "expects a boolean"),
    ],
)
def test_invalid_settings(data, message) -> None:
    with pytest.raises(ValueError) as exc:
        HarnessSettings.from_mapping(data)
    assert message in str(exc.value)


def test_from_env() -> None:
    env = {
        "EXERCHECK_TIMEOUT_MS": "1500",
        "EXERCHECK_MEMORY_LIMIT_MB": "128",
        "EXERCHECK_NODE": "/usr/local/bin/node",
        "EXERCHECK_MAX_CODE_SIZE": " ",
        "UNRELATED": "1",
    }
    settings = HarnessSettings.from_env(env)
    assert settings.timeout_ms == 1500
    assert settings.memory_limit_mb == 128
    assert settings.node_path == "/usr/local/bin/node"
    assert settings.max_code_size == 50000


def test_overrides_return_a_copy() -> None:
    base = HarnessSettings()
    fast = base.with_overrides(timeout_ms=100)
    assert fast.timeout_ms == 100
    assert base.timeout_ms == 10000
