"""
Unit tests for extension-based MIME lookup.
"""

import pytest

from mailcraft.services.mime_types import asset_mime_for, mime_for


class TestMimeFor:

    @pytest.mark.parametrize("value", [".png", ".PNG", "logo.png", "/tmp/Logo.Png"])
    def test_case_insensitive(self, value):
        assert mime_for(value) == "image/png"

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("photo.jpg", "image/jpeg"),
            ("photo.jpeg", "image/jpeg"),
            ("anim.gif", "image/gif"),
            ("pic.webp", "image/webp"),
            ("contract.pdf", "application/pdf"),
            ("notes.txt", "text/plain"),
            ("README.md", "text/markdown"),
            ("sales.csv", "text/csv"),
            ("data.json", "application/json"),
            ("feed.xml", "application/xml"),
            ("email.html", "text/html"),
            ("icon.svg", "image/svg+xml"),
        ],
    )
    def test_known_extensions(self, filename, expected):
        assert mime_for(filename) == expected

    @pytest.mark.parametrize("value", [".xyz", "archive.tar.gz", "Makefile", ""])
    def test_unknown_extensions_fall_back(self, value):
        assert mime_for(value) == "application/octet-stream"

    def test_asset_only_types_are_not_sent_to_model(self):
        assert mime_for("style.css") == "application/octet-stream"


class TestAssetMimeFor:

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("style.css", "text/css"),
            ("app.js", "application/javascript"),
            ("clip.mp4", "video/mp4"),
            ("song.mp3", "audio/mpeg"),
            ("beep.wav", "audio/wav"),
            ("banner.PNG", "image/png"),
            ("blob.bin", "application/octet-stream"),
        ],
    )
    def test_asset_types(self, filename, expected):
        assert asset_mime_for(filename) == expected
