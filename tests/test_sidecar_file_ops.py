# -*- coding: utf-8 -*-
"""
Sidecar .txt 與資料夾列表測試
"""
import os

import pytest

from tagmeister.core.dataclasses import ImageFile
from tagmeister.utils.file_ops import is_image_file, list_directory, list_image_files, load_captions
from tagmeister.utils.sidecar import caption_path_for, load_caption, save_caption, save_captions


class TestCaptionPath:

    @pytest.mark.parametrize("image, expected", [
        ("/data/cat.png", "/data/cat.txt"),
        ("/data/cat.JPG", "/data/cat.txt"),
        ("/data/cat.jpeg", "/data/cat.txt"),
        ("/data/cat.gif", "/data/cat.txt"),
        ("/data/my.cat.png", "/data/my.cat.txt"),
    ])
    def test_caption_path(self, image, expected):
        assert caption_path_for(image) == expected


class TestSaveLoad:

    def test_round_trip_trims(self, tmp_path):
        image = str(tmp_path / "a.png")
        (tmp_path / "a.txt").write_text("  a cat \n", encoding="utf-8")
        assert load_caption(image) == "a cat"

    def test_missing_caption(self, tmp_path):
        assert load_caption(str(tmp_path / "none.png")) is None

    def test_save_caption_utf8(self, tmp_path):
        image = str(tmp_path / "貓.png")
        assert save_caption(image, "可愛的貓, cute") is True
        assert (tmp_path / "貓.txt").read_text(encoding="utf-8") == "可愛的貓, cute"

    def test_save_captions_skips_missing_images(self, make_image, tmp_path):
        a = make_image("a.png")
        b = make_image("b.jpg", fmt="JPEG")
        missing = str(tmp_path / "gone.png")

        written = save_captions({a: "cap a", b: "cap b", missing: "cap missing"})

        assert written == 2
        assert load_caption(a) == "cap a"
        assert load_caption(b) == "cap b"
        assert not os.path.exists(caption_path_for(missing))


class TestListing:

    def test_list_directory_dirs_first_natural_order(self, tmp_path):
        (tmp_path / "zdir").mkdir()
        (tmp_path / "Adir").mkdir()
        for name in ["img10.png", "img2.png", "Img1.png", "notes.txt"]:
            (tmp_path / name).write_bytes(b"12345")

        entries = list_directory(str(tmp_path))

        assert [e.name for e in entries] == ["Adir", "zdir", "Img1.png", "img2.png", "img10.png", "notes.txt"]
        assert entries[0].is_dir and entries[0].size == 0
        assert entries[2].size == 5

    def test_list_image_files_filters_extensions(self, tmp_path):
        for name in ["b.PNG", "a.jpg", "c.jpeg", "d.gif", "e.webp", "f.txt"]:
            (tmp_path / name).write_bytes(b"x")
        (tmp_path / "g.png").mkdir()

        images = list_image_files(str(tmp_path))

        assert [img.display_name for img in images] == ["a.jpg", "b.PNG", "c.jpeg"]
        assert all(isinstance(img, ImageFile) for img in images)
        assert images[0].path == str(tmp_path / "a.jpg")

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list_directory(str(tmp_path / "nope"))

    def test_load_captions(self, tmp_path):
        (tmp_path / "a.png").write_bytes(b"x")
        (tmp_path / "b.png").write_bytes(b"x")
        (tmp_path / "a.txt").write_text("cap a", encoding="utf-8")
        images = list_image_files(str(tmp_path))
        assert load_captions(images) == {
            str(tmp_path / "a.png"): "cap a",
            str(tmp_path / "b.png"): "",
        }

    @pytest.mark.parametrize("name, expected", [
        ("x.jpg", True), ("x.JPEG", True), ("x.png", True), ("x.gif", False), ("x", False),
    ])
    def test_is_image_file(self, name, expected):
        assert is_image_file(name) is expected
