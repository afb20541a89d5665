"""Root conftest for tests."""

import os

import pytest

if os.getenv("APP_ENV", "").strip().lower() == "prod":
    raise RuntimeError("Refusing to run tests with APP_ENV=prod")

os.environ["APP_ENV"] = "local"
os.environ.setdefault("METRICS_TOKEN", "test-metrics-token")
for _relay_var in ("N8N_WEBHOOK_URL", "RELAY_WEBHOOK_URL", "OPENAI_API_KEY", "RELAY_OPENAI_API_KEY"):
    os.environ.pop(_relay_var, None)


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    dir_marker_map = {
        "unit": pytest.mark.unit,
        "smoke": pytest.mark.smoke,
    }
    for item in items:
        test_path = str(item.fspath)
        for dir_name, marker in dir_marker_map.items():
            if f"/{dir_name}/" in test_path or f"\\{dir_name}\\" in test_path:
                item.add_marker(marker)
                break


@pytest.fixture
def storage_config(tmp_path):
    """Storage settings pointing at a per-test data directory."""
    from app.core.config import StorageConfig

    return StorageConfig(data_path=tmp_path / "data")


@pytest.fixture
def store(storage_config):
    """An empty RecordStore writing to a temporary snapshot file."""
    from app.persistence.record_store import RecordStore

    record_store = RecordStore(storage_config)
    record_store.snapshot.ensure_directories()
    return record_store


@pytest.fixture
def sample_agreement() -> dict:
    return {
        "importer": "0xImporter",
        "exporter": "0xExporter",
        "goodsDescription": "Organic Cotton | 500 bales",
        "amount": "250000",
        "originCountry": "India",
        "destinationCountry": "United States",
        "incoterms": "FOB",
    }
