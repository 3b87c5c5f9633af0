import io

import pytest
from PIL import Image

from aerocms.data.media import MediaRepository
from aerocms.media.service import MediaReferenceValidator, MediaService, image_dimensions
from aerocms.media.storage import DiskStorageProvider, UploadResult, build_storage_key, sanitize_file_name
from aerocms.models.media import MediaDocument, MediaType


def _png(width=4, height=3) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), "red").save(buffer, format="PNG")
    return buffer.getvalue()


class StubStorage:
    alias = "stub"

    def __init__(self):
        self.uploaded = []
        self.deleted = []

    async def upload(self, stream, file_name, content_type):
        self.uploaded.append((file_name, stream.read()))
        return UploadResult(success=True, storage_key=f"key/{file_name}")

    async def delete(self, storage_key):
        self.deleted.append(storage_key)

    def get_public_url(self, storage_key):
        return f"/media/{storage_key}"


def test_sanitize_file_name():
    assert sanitize_file_name("My Holiday Photo.JPG") == "My-Holiday-Photo.jpg"
    assert sanitize_file_name("..\\..\\evil?.png") == "evil.png"
    assert sanitize_file_name("") == "file"
    assert build_storage_key("a b.txt").endswith("/a-b.txt")


def test_validate_upload_messages():
    service = MediaService(MediaRepository(), StubStorage(), [".png", ".pdf"], max_upload_bytes=10)

    assert service.validate_upload("a.exe", 1).message == "File not allowed"
    assert service.validate_upload("noextension", 1).message == "File not allowed"
    assert service.validate_upload("a.png", 11).message == "File is too large"
    assert service.validate_upload("a.pdf", 1, images_only=True).message == "File must be an image only"
    assert service.validate_upload("A.PNG", 10).success


def test_image_dimensions():
    assert image_dimensions(_png(7, 5)) == (7, 5)
    assert image_dimensions(b"not an image") == (None, None)


@pytest.mark.asyncio
async def test_upload_records_media_document(database):
    storage = StubStorage()
    repository = MediaRepository(database)
    service = MediaService(repository, storage, [".png"])

    result = await service.upload(io.BytesIO(_png()), "logo.png", "image/png", user="alice", alt_text="Logo")

    media = result.value
    assert media.media_type == MediaType.IMAGE
    assert (media.width, media.height) == (4, 3)
    assert media.url == "/media/key/logo.png"
    assert media.created_by == "alice"
    assert (await repository.get_by_id(media.id)).alt_text == "Logo"


@pytest.mark.asyncio
async def test_rejected_upload_never_reaches_storage(database):
    storage = StubStorage()
    service = MediaService(MediaRepository(database), storage, [".png"])

    result = await service.upload(io.BytesIO(b"x"), "script.js", "text/javascript")

    assert result.message == "File not allowed"
    assert storage.uploaded == []


class RecordingStream(io.BytesIO):
    def __init__(self, data):
        super().__init__(data)
        self.requested = []

    def read(self, size=-1):
        self.requested.append(size)
        return super().read(size)


@pytest.mark.asyncio
async def test_oversized_upload_reads_at_most_limit_plus_one(database):
    storage = StubStorage()
    service = MediaService(MediaRepository(database), storage, [".pdf"], max_upload_bytes=10)
    stream = RecordingStream(b"x" * 1000)

    result = await service.upload(stream, "big.pdf", "application/pdf")

    assert result.message == "File is too large"
    assert stream.requested == [11]
    assert stream.tell() == 11
    assert storage.uploaded == []


@pytest.mark.asyncio
async def test_update_and_delete(database):
    storage = StubStorage()
    service = MediaService(MediaRepository(database), storage, [".png"])
    media = (await service.upload(io.BytesIO(_png()), "a.png", "image/png")).value

    updated = await service.update(media.id, name="Renamed", alt_text="New alt")
    deleted = await service.delete(media.id)

    assert updated.value.name == "Renamed"
    assert deleted.success
    assert storage.deleted == [media.storage_key]
    assert (await service.delete(media.id)).message == "Media not found."


@pytest.mark.asyncio
async def test_disk_storage_round_trip(tmp_path):
    provider = DiskStorageProvider(tmp_path, "/media")

    stored = await provider.upload(io.BytesIO(b"hello"), "note one.txt", "text/plain")

    path = provider.path_for(stored.storage_key)
    assert path.read_bytes() == b"hello"
    assert provider.get_public_url(stored.storage_key) == f"/media/{stored.storage_key}"

    await provider.delete(stored.storage_key)
    assert not path.exists()
    assert not path.parent.exists()
    with pytest.raises(ValueError):
        provider.path_for("../outside.txt")


@pytest.mark.asyncio
async def test_media_reference_validator_syncs_and_removes(database):
    repository = MediaRepository(database)
    media = MediaDocument(name="a", file_name="a.png", url="/media/new/a.png", width=10, height=20, alt_text="A")
    await repository.save(media)
    validator = MediaReferenceValidator(repository)
    html = (
        f'<p><img data-mediaid="{media.id}" src="/media/old/a.png">'
        '<a data-mediaid="gone" href="/media/gone.pdf">file</a></p>'
    )

    cleaned = await validator.validate_html(html)

    assert 'src="/media/new/a.png"' in cleaned
    assert 'width="10"' in cleaned
    assert 'alt="A"' in cleaned
    assert "gone.pdf" not in cleaned
    assert await validator.validate_html("<p>plain</p>") == "<p>plain</p>"
