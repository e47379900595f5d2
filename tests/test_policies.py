import pytest

from cget import ConfigurationError, Policy, RetrievalOptions


def test_default_options():
    options = RetrievalOptions()

    assert options.policy is Policy.STANDARD
    assert not options.head_only
    assert not options.compressed
    assert options.method == "GET"


def test_head_only_method():
    assert RetrievalOptions(head_only=True).method == "HEAD"


@pytest.mark.parametrize("policy", [Policy.STANDARD, Policy.CHECK_ONLY, Policy.CACHE_ONLY])
def test_head_only_combinations(policy):
    assert RetrievalOptions(policy=policy, head_only=True).head_only


def test_head_only_with_force_refresh():
    with pytest.raises(ConfigurationError, match="force-refresh"):
        RetrievalOptions(policy=Policy.FORCE_REFRESH, head_only=True)


def test_unknown_policy():
    with pytest.raises(ConfigurationError, match="unknown retrieval policy"):
        RetrievalOptions(policy="standard")  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "flags, expected",
    [
        ({}, Policy.STANDARD),
        ({"force_refresh": True}, Policy.FORCE_REFRESH),
        ({"check_only": True}, Policy.CHECK_ONLY),
        ({"cache_only": True}, Policy.CACHE_ONLY),
    ],
)
def test_from_flags(flags, expected):
    assert RetrievalOptions.from_flags(**flags).policy is expected


@pytest.mark.parametrize(
    "flags",
    [
        {"force_refresh": True, "check_only": True},
        {"force_refresh": True, "cache_only": True},
        {"check_only": True, "cache_only": True},
        {"force_refresh": True, "check_only": True, "cache_only": True},
    ],
)
def test_from_flags_exclusive(flags):
    with pytest.raises(ConfigurationError, match="may not be used together"):
        RetrievalOptions.from_flags(**flags)


def test_from_flags_keeps_modifiers():
    options = RetrievalOptions.from_flags(check_only=True, head_only=True, compressed=True)

    assert options == RetrievalOptions(policy=Policy.CHECK_ONLY, head_only=True, compressed=True)


def test_configuration_error_exit_code():
    with pytest.raises(ConfigurationError) as exc_info:
        RetrievalOptions.from_flags(force_refresh=True, head_only=True)
    assert exc_info.value.exit_code == 2
