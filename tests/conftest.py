import json

import pytest


@pytest.fixture
def sample_image_bytes():
    """Minimal valid PNG for testing (1x1 white pixel)."""
    import base64
    return base64.b64decode(
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR4"
        "nGP4z8BQDwAEgAF/pooBPQAAAABJRU5ErkJggg=="
    )


@pytest.fixture
def cache_dir(tmp_path):
    """An existing, empty cache root."""
    path = tmp_path / "cache"
    path.mkdir()
    return path


@pytest.fixture
def write_pair():
    """Write a data file plus JSON sidecar at ``directory/name``.

    Pass ``meta=None`` to write the data file alone.
    """
    default_meta = {
        "headers": [["content-type", "image/png"]],
        "status": 200,
        "statusText": "OK",
        "isTransparent": False,
    }

    def _write(directory, name, payload=b"\x89PNG data", meta=default_meta):
        directory.mkdir(parents=True, exist_ok=True)
        data_path = directory / name
        data_path.write_bytes(payload)
        if meta is not None:
            (directory / f"{name}.json").write_text(json.dumps(meta))
        return data_path

    return _write
