"""Unit tests for the template catalogue (create_openfort.templates)."""

from __future__ import annotations

import pytest

from conftest import ScriptedPrompter
from create_openfort.templates import (
    DEFAULT_AVAILABLE_TEMPLATES,
    THEMES,
    is_known_template,
    prompt_template,
    prompt_theme,
)


class TestCatalogue:
    @pytest.mark.unit
    def test_names(self):
        assert DEFAULT_AVAILABLE_TEMPLATES == ("openfort-ui", "headless", "firebase")

    @pytest.mark.unit
    def test_themes(self):
        assert [t.value for t in THEMES] == [
            "auto", "midnight", "minimal", "soft", "web95", "rounded", "retro", "nouns",
        ]

    @pytest.mark.unit
    def test_is_known_template(self):
        assert is_known_template("headless")
        assert not is_known_template("angular")
        assert not is_known_template("headless", available=("firebase",))


class TestPromptTemplate:
    @pytest.mark.unit
    def test_valid_argument_skips_prompt(self):
        prompter = ScriptedPrompter()
        assert prompt_template(prompter, "firebase") == "firebase"
        assert prompter.messages == []

    @pytest.mark.unit
    def test_no_argument_prompts(self):
        prompter = ScriptedPrompter(selects=["headless"])
        assert prompt_template(prompter) == "headless"
        assert prompter.messages == ["Select a template:"]
        assert prompter.options[0] == ["openfort-ui", "headless", "firebase"]

    @pytest.mark.unit
    def test_invalid_argument_reprompts(self):
        prompter = ScriptedPrompter(selects=["openfort-ui"])
        assert prompt_template(prompter, "angular") == "openfort-ui"
        assert prompter.messages[0].startswith('"angular" isn\'t a valid template.')


class TestPromptTheme:
    @pytest.mark.unit
    def test_openfort_ui_asks(self):
        prompter = ScriptedPrompter(selects=["web95"])
        assert prompt_theme(prompter, "openfort-ui") == "web95"
        assert prompter.messages == ["Select a theme:"]

    @pytest.mark.unit
    @pytest.mark.parametrize("template", ["headless", "firebase"])
    def test_other_templates_have_no_theme(self, template):
        prompter = ScriptedPrompter()
        assert prompt_theme(prompter, template) is None
        assert prompter.messages == []
