from __future__ import annotations

import io
import re

import pytest

from papertrove.config import UploadConfig
from papertrove.errors import ValidationError
from papertrove.service.storage_service import PaperStorage


@pytest.fixture()
def storage(tmp_path) -> PaperStorage:
    return PaperStorage(UploadConfig(upload_dir=str(tmp_path / "papers"), max_size_mb=1))


def test_filename_pattern():
    name = PaperStorage.make_filename("My Paper.PDF")
    assert re.fullmatch(r"paper-\d{13}-\d{1,10}\.pdf", name)
    assert PaperStorage.make_filename(None).endswith(".pdf")


def test_content_type(storage: PaperStorage):
    storage.check_content_type("application/pdf")
    with pytest.raises(ValidationError):
        storage.check_content_type("image/png")
    with pytest.raises(ValidationError):
        storage.check_content_type(None)


def test_save_and_remove(storage: PaperStorage):
    stored = storage.save(io.BytesIO(b"%PDF-1.4"), "a.pdf")
    assert stored.disk_path.read_bytes() == b"%PDF-1.4"
    assert stored.public_path == f"/uploads/papers/{stored.disk_path.name}"
    assert storage.resolve(stored.public_path).exists()

    assert storage.remove_public(stored.public_path) is True
    assert storage.remove_public(stored.public_path) is False


def test_oversized_upload_is_discarded(storage: PaperStorage):
    with pytest.raises(ValidationError):
        storage.save(io.BytesIO(b"x" * (1024 * 1024 + 1)), "big.pdf")
    assert list(storage.upload_dir.iterdir()) == []
