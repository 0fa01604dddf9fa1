from pathlib import Path

import pytest

from src.platform.config.core_setting import Settings


PROJECT_ROOT = Path(__file__).resolve().parents[3]


@pytest.mark.unit
class TestCorsOrigins:
    def test_shipped_env_example_loads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """
        Given: The .env.example file shipped with the repo
        When: Settings are loaded from it with no overriding environment
        Then: The comma separated CORS origins become a list
        """
        # Arrange
        monkeypatch.delenv('BACKEND_CORS_ORIGINS', raising=False)

        # Act
        loaded = Settings(_env_file=str(PROJECT_ROOT / '.env.example'))

        # Assert
        assert loaded.BACKEND_CORS_ORIGINS == ['http://localhost:3000']

    @pytest.mark.parametrize(
        'raw, expected',
        [
            ('http://a.test, http://b.test', ['http://a.test', 'http://b.test']),
            ('["http://a.test"]', ['http://a.test']),
        ],
        ids=['comma-separated', 'json-list'],
    )
    def test_environment_value(
        self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: list[str]
    ) -> None:
        # Arrange
        monkeypatch.setenv('BACKEND_CORS_ORIGINS', raw)

        # Act
        loaded = Settings(_env_file=None)

        # Assert
        assert loaded.BACKEND_CORS_ORIGINS == expected
