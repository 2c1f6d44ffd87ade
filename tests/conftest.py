import pytest


@pytest.fixture
def write_csv(tmp_path):
    def _write(text, name="items.csv", encoding="utf-8"):
        path = tmp_path / name
        path.write_bytes(text.encode(encoding))
        return path

    return _write
