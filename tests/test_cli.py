"""
命令行测试
"""

import hashlib
import zipfile

import pytest

from rasterpack.cli import build_parser, main
from rasterpack.croppack import CropPack


@pytest.fixture
def input_png(tmp_path, png_bytes):
    path = tmp_path / "input.png"
    path.write_bytes(png_bytes)
    return path


class TestCli:
    """CLI 测试类"""

    def test_parser_requires_command(self):
        """测试缺少子命令"""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_clean(self, tmp_path, input_png, png_bytes, capsys):
        """测试 clean 写出 PNG 并打印哈希"""
        out = tmp_path / "cleaned.png"

        assert main(["clean", str(input_png), str(out)]) == 0

        data = out.read_bytes()
        assert data.startswith(b"\x89PNG")
        stdout = capsys.readouterr().out
        assert hashlib.sha256(png_bytes).hexdigest() in stdout
        assert hashlib.sha256(data).hexdigest() in stdout

    def test_crop_pack(self, tmp_path, input_png):
        """测试 crop-pack 写出 ZIP"""
        out = tmp_path / "pack.zip"

        assert main(["crop-pack", str(input_png), "--prefix", "acme", "--out", str(out)]) == 0

        with zipfile.ZipFile(out) as zf:
            names = zf.namelist()
        assert len(names) == 8
        assert names[0] == "acme/gbp/gbp-4x3-1200x900.png"

    def test_crop_pack_default_name(self, tmp_path, input_png, monkeypatch):
        """测试默认输出文件名"""
        monkeypatch.chdir(tmp_path)

        assert main(["crop-pack", str(input_png), "--prefix", "My Brand", "--clean"]) == 0

        assert (tmp_path / "My-Brand-crop-pack.zip").is_file()

    def test_garbage_input(self, tmp_path, garbage_bytes, capsys):
        """测试无法解码时返回 1 且不留下文件"""
        bad = tmp_path / "bad.bin"
        bad.write_bytes(garbage_bytes)
        out = tmp_path / "pack.zip"

        assert main(["crop-pack", str(bad), "--out", str(out)]) == 1

        assert not out.exists()
        assert "[rasterpack] error" in capsys.readouterr().err

    def test_write_failure_removes_partial_zip(self, tmp_path, input_png, monkeypatch, capsys):
        """测试写盘中途失败时删除残缺的归档"""
        def failing_write_to(self, fileobj):
            with self:
                fileobj.write(next(iter(self)))
                raise OSError("No space left on device")

        monkeypatch.setattr(CropPack, "write_to", failing_write_to)
        out = tmp_path / "pack.zip"

        assert main(["crop-pack", str(input_png), "--out", str(out)]) == 1

        assert not out.exists()
        assert "No space left on device" in capsys.readouterr().err

    def test_interrupt_removes_partial_zip(self, tmp_path, input_png, monkeypatch):
        """测试 Ctrl-C 中断时同样删除残缺的归档"""
        def interrupted_write_to(self, fileobj):
            with self:
                fileobj.write(next(iter(self)))
                raise KeyboardInterrupt

        monkeypatch.setattr(CropPack, "write_to", interrupted_write_to)
        out = tmp_path / "pack.zip"

        with pytest.raises(KeyboardInterrupt):
            main(["crop-pack", str(input_png), "--out", str(out)])

        assert not out.exists()

    def test_missing_input(self, tmp_path, capsys):
        """测试输入文件不存在"""
        assert main(["clean", str(tmp_path / "nope.png"), str(tmp_path / "o.png")]) == 1
        assert "[rasterpack] error" in capsys.readouterr().err
