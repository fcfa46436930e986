import io
from unittest.mock import Mock

import pytest
from PIL import Image
from werkzeug.datastructures import FileStorage

import storage


def _png(size=(40, 30)):
    buf = io.BytesIO()
    Image.new("RGBA", size, (200, 40, 90, 255)).save(buf, format="PNG")
    buf.seek(0)
    return buf


@pytest.fixture
def s3(monkeypatch):
    client = Mock()
    monkeypatch.setattr(storage, "s3", client)
    monkeypatch.setattr(storage.settings, "S3_BUCKET", "eyefem-media")
    monkeypatch.setattr(storage.settings, "S3_PUBLIC_BASE_URL", "")
    return client


def test_allowed_file():
    assert storage.allowed_file("photo.JPG")
    assert storage.allowed_file("a.b.webp")
    assert not storage.allowed_file("doc.pdf")
    assert not storage.allowed_file("noext")
    assert not storage.allowed_file("")


def test_upload_reencodes_to_jpeg(s3):
    url = storage.upload_website_image(FileStorage(_png(), filename="hero.png"), prefix="blocks")
    kwargs = s3.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "eyefem-media"
    assert kwargs["Key"].startswith("blocks/") and kwargs["Key"].endswith(".jpg")
    assert kwargs["ContentType"] == "image/jpeg"
    assert Image.open(kwargs["Body"]).format == "JPEG"
    assert url == f"https://eyefem-media.s3.ap-south-1.amazonaws.com/{kwargs['Key']}"


def test_large_images_are_downscaled(s3):
    storage.save_image(FileStorage(_png((3200, 800)), filename="wide.png"), "gallery_images")
    img = Image.open(s3.put_object.call_args.kwargs["Body"])
    assert img.size == (1600, 400)


def test_public_base_url(monkeypatch):
    monkeypatch.setattr(storage.settings, "S3_PUBLIC_BASE_URL", "https://cdn.eyefem.in/")
    assert storage.public_url("blocks/a.jpg") == "https://cdn.eyefem.in/blocks/a.jpg"


@pytest.mark.parametrize("filename,body", [
    ("notes.txt", b"hello"),
    ("empty.png", b""),
    ("fake.png", b"definitely not an image"),
])
def test_rejects_bad_uploads(s3, filename, body):
    with pytest.raises(ValueError):
        storage.save_image(FileStorage(io.BytesIO(body), filename=filename), "blocks")
    s3.put_object.assert_not_called()


def test_requires_bucket(monkeypatch):
    monkeypatch.setattr(storage.settings, "S3_BUCKET", "")
    with pytest.raises(storage.StorageNotConfigured):
        storage.save_image(FileStorage(_png(), filename="hero.png"), "blocks")
