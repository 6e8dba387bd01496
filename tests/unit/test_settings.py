"""
Unit tests for environment-driven settings.
"""

from service.tool_policy.settings import (
    DEFAULT_TOOL_TIMEOUT_MS,
    ToolPolicySettings,
    split_tokens,
)


class TestSplitTokens:
    def test_split(self) -> None:
        assert split_tokens(" a, b,,c ") == ["a", "b", "c"]

    def test_empty(self) -> None:
        assert split_tokens(None) == []
        assert split_tokens("") == []


class TestToolPolicySettings:
    """ToolPolicySettings.from_env"""

    def test_defaults(self) -> None:
        settings = ToolPolicySettings.from_env({})
        assert settings.profile is None
        assert settings.allow == []
        assert settings.tool_timeout_ms == DEFAULT_TOOL_TIMEOUT_MS
        assert settings.log_level == "INFO"

    def test_reads_env(self) -> None:
        settings = ToolPolicySettings.from_env({
            "TOOL_POLICY_PROFILE": "minimal",
            "TOOL_POLICY_ALSO_ALLOW": "web_search, group:soul",
            "TOOL_POLICY_DENY": "canvas_*",
            "TOOL_TIMEOUT_MS": "5000",
            "LOG_LEVEL": "debug",
        })
        assert settings.profile == "minimal"
        assert settings.also_allow == ["web_search", "group:soul"]
        assert settings.deny == ["canvas_*"]
        assert settings.tool_timeout_ms == 5000
        assert settings.log_level == "DEBUG"

    def test_bad_timeout_falls_back(self) -> None:
        settings = ToolPolicySettings.from_env({"TOOL_TIMEOUT_MS": "soon"})
        assert settings.tool_timeout_ms == DEFAULT_TOOL_TIMEOUT_MS

    def test_default_policy(self) -> None:
        settings = ToolPolicySettings.from_env({"TOOL_POLICY_PROFILE": "coding", "TOOL_POLICY_DENY": "write_file"})
        policy = settings.default_policy()
        assert policy.profile == "coding"
        assert policy.deny == ["write_file"]
