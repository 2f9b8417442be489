"""
CropPackager - 多尺寸裁剪打包

一次解码，按目录顺序逐个生成 cover 裁剪，边生成边写入 ZIP 流。

内存上界：一张解码后的源图 + 一个正在编码的输出。
归档流由生成器驱动：每写完一个成员就把 sink 中的字节交给调用方。
"""

import base64
import binascii
import io
import re
import zipfile
from typing import BinaryIO, Iterable, Iterator

from omegaconf import DictConfig

from ..codec import decode_image, encode_png, resize_cover
from ..config import load_config
from ..context import ZIP_MIME_TYPE, EncodedOutput, OutputSpec, RasterImage
from ..errors import DecodeError, EncodeError
from .catalog import CROP_SPECS, validate_specs


_UNSAFE_PREFIX_CHARS = re.compile(r"[^A-Za-z0-9_-]")

# 固定成员时间戳，保证归档字节可复现
_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def sanitize_prefix(prefix: str | None, default: str = "nano-banana") -> str:
    """
    清洗文件名前缀

    [A-Za-z0-9_-] 之外的每个字符 1:1 替换为 "-"；空值回退到 default。

    >>> sanitize_prefix("My Brand!!")
    'My-Brand--'
    """
    if not prefix:
        return default
    return _UNSAFE_PREFIX_CHARS.sub("-", prefix)


def decode_payload(image_base64: str) -> bytes:
    """
    解码请求体中的 base64 图像

    接受纯 base64 或 data URL（data:image/png;base64,...）。

    Raises:
        DecodeError: 内容过短或不是合法 base64
    """
    if image_base64.startswith("data:") and "," in image_base64:
        image_base64 = image_base64.split(",", 1)[1]
    if len(image_base64) < 10:
        raise DecodeError("imageBase64 过短")
    try:
        return base64.b64decode(image_base64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"imageBase64 不是合法的 base64: {exc}") from exc


class _ArchiveSink(io.RawIOBase):
    """只写、不可 seek 的 sink；zipfile 因此改用 data descriptor 流式写出"""

    def __init__(self):
        super().__init__()
        self._chunks: list[bytes] = []
        self._discarded = False

    def writable(self) -> bool:
        return True

    def write(self, b) -> int:
        size = memoryview(b).nbytes
        if not self._discarded:
            self._chunks.append(bytes(b))
        return size

    def drain(self) -> bytes:
        """取出并清空已缓冲的字节"""
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data

    def discard(self) -> None:
        """丢弃已缓冲字节，之后的写入全部忽略"""
        self._discarded = True
        self._chunks.clear()


class CropPack:
    """
    一次性的 ZIP 字节流

    迭代得到归档字节块；中途失败时异常从迭代中抛出，
    中央目录不会写出，调用方拿不到"看似完整"的归档。
    """

    content_type = ZIP_MIME_TYPE

    def __init__(self, chunks: Iterator[bytes], prefix: str):
        self._chunks = chunks
        self.prefix = prefix

    @property
    def filename(self) -> str:
        """建议下载文件名"""
        return f"{self.prefix}-crop-pack.zip"

    def headers(self) -> dict[str, str]:
        """HTTP 响应头"""
        return {
            "content-type": self.content_type,
            "content-disposition": f'attachment; filename="{self.filename}"',
        }

    def __iter__(self) -> Iterator[bytes]:
        return self._chunks

    def __enter__(self) -> "CropPack":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """释放归档资源（未完成的归档不会被定稿）"""
        self._chunks.close()

    def write_to(self, fileobj: BinaryIO) -> int:
        """
        把整个流写入二进制文件对象

        Returns:
            写入的字节数
        """
        total = 0
        with self:
            for chunk in self:
                fileobj.write(chunk)
                total += len(chunk)
        return total


class CropPackager:
    """多尺寸裁剪打包器"""

    def __init__(
        self,
        cfg: DictConfig | None = None,
        specs: Iterable[OutputSpec] = CROP_SPECS
    ):
        """
        初始化打包器

        Args:
            cfg: 配置对象，需包含 crop_pack.*；None 时使用默认配置
            specs: 输出规格目录（有序），构造时校验

        Raises:
            ConfigError: 目录非法
        """
        if cfg is None:
            cfg = load_config()

        pack_cfg = cfg.crop_pack
        self.default_prefix = str(pack_cfg.default_prefix)
        self.png_compress_level = int(pack_cfg.png_compress_level)
        self.zip_compress_level = int(pack_cfg.zip_compress_level)
        self.verbose = bool(getattr(cfg, 'global').get("verbose", False))
        self.specs = validate_specs(specs)

    def build(self, data: bytes, prefix: str | None = None) -> CropPack:
        """
        生成裁剪包

        输入在返回前即完成解码，DecodeError 在此直接抛出，不产生任何归档字节。

        Args:
            data: 原始图像字节（可以是 Preprocessor 的输出）
            prefix: 归档内路径与下载文件名前缀

        Returns:
            CropPack 字节流

        Raises:
            DecodeError: 输入不是可解码的图像
        """
        prefix = sanitize_prefix(prefix, self.default_prefix)
        image = decode_image(data)
        return CropPack(self._stream(image, prefix), prefix)

    def render(self, image: RasterImage, prefix: str) -> Iterator[EncodedOutput]:
        """
        按目录顺序逐个生成裁剪结果

        严格串行：同一时刻只有一个派生图像存活。
        """
        for spec in self.specs:
            try:
                pixels = resize_cover(image.pixels, spec.width, spec.height)
                data = encode_png(pixels, self.png_compress_level)
            except (MemoryError, ValueError) as exc:
                raise EncodeError(f"{spec.filename} 生成失败: {exc!r}") from exc
            yield EncodedOutput(archive_path=spec.archive_path(prefix), data=data)

    def _stream(self, image: RasterImage, prefix: str) -> Iterator[bytes]:
        sink = _ArchiveSink()
        archive = zipfile.ZipFile(
            sink,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.zip_compress_level
        )
        finalized = False
        try:
            for output in self.render(image, prefix):
                self._append(archive, output)
                yield sink.drain()

            archive.close()
            finalized = True
            if self.verbose:
                print(f"[CropPackager] {prefix}: {len(self.specs)} 个文件已打包")
            yield sink.drain()
        finally:
            if not finalized:
                # 出错或被调用方关闭：丢弃缓冲，中央目录写入被丢弃的 sink
                sink.discard()
                archive.close()

    def _append(self, archive: zipfile.ZipFile, output: EncodedOutput) -> None:
        info = zipfile.ZipInfo(output.archive_path, date_time=_ZIP_DATE_TIME)
        info.compress_type = zipfile.ZIP_DEFLATED
        info.create_system = 3
        info.external_attr = 0o644 << 16
        try:
            archive.writestr(info, output.data, compresslevel=self.zip_compress_level)
        except (OSError, zipfile.LargeZipFile) as exc:
            raise EncodeError(f"写入归档失败 {output.archive_path}: {exc}") from exc

        if self.verbose:
            print(f"[CropPackager] {output.archive_path} ({len(output.data)} bytes)")


def build_crop_pack(
    data: bytes,
    prefix: str | None = None,
    cfg: DictConfig | None = None
) -> CropPack:
    """便捷函数：用默认目录生成裁剪包"""
    return CropPackager(cfg).build(data, prefix)
