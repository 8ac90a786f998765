"""
SnipShare — Configuration Tests
================================

What we test:
    ✅ Environment and log level validation
    ✅ Production refuses the development session secret
"""

import pytest
from pydantic import ValidationError

from snipshare.config import DEFAULT_SESSION_SECRET, Settings


class TestSettingsValidation:

    def test_environment_is_normalised(self):
        assert Settings(environment="PRODUCTION").is_production is True
        assert Settings(environment="development").is_production is False

    def test_unknown_environment_rejected(self):
        with pytest.raises(ValidationError):
            Settings(environment="staging")

    def test_log_level_is_upper_cased(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_rate_limit_bounds(self):
        with pytest.raises(ValidationError):
            Settings(rate_limit_requests=1)


class TestProductionRequirements:

    def test_default_secret_rejected_in_production(self):
        settings = Settings(environment="production", session_secret=DEFAULT_SESSION_SECRET)
        with pytest.raises(ValueError, match="SESSION_SECRET"):
            settings.validate_required_for_production()

    def test_custom_secret_accepted_in_production(self):
        settings = Settings(environment="production", session_secret="a" * 64)
        settings.validate_required_for_production()

    def test_default_secret_allowed_in_development(self):
        settings = Settings(environment="development", session_secret=DEFAULT_SESSION_SECRET)
        settings.validate_required_for_production()
