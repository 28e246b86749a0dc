"""
Smoke test - verifies test infrastructure is working.
Run: pytest tests/test_smoke.py -v
"""


def test_import_app():
    """Verify referral_service package can be imported."""
    from referral_service.core.config import get_settings

    settings = get_settings()
    assert settings is not None
    assert hasattr(settings, "mongo_uri")
    assert settings.referral_code_length > 0


def test_settings_read_environment(mock_env):
    """Settings pick up environment variables."""
    from referral_service.core.config import Settings

    settings = Settings()
    assert settings.mongo_database_name == "test_referral_db"
    assert settings.referral_points_per_referral == 1


def test_pytest_runs():
    """Basic sanity check that pytest executes tests."""
    assert True
