"""
AEDCheck Backend — Configuration Tests
=======================================

What:  Tests for Settings validation and the production check.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from aedcheck.config import DEFAULT_SESSION_SECRET, Settings


class TestSettings:

    def test_log_level_upper_cased(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_level="chatty")

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="https://a.example, https://b.example")
        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]

    def test_default_secret_fails_production_check(self):
        settings = Settings(session_secret=DEFAULT_SESSION_SECRET)
        with pytest.raises(ValueError, match="SESSION_SECRET"):
            settings.validate_required_for_production()

    def test_custom_secret_passes(self):
        Settings(session_secret="a-real-secret").validate_required_for_production()
