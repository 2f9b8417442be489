"""
Context - 流水线数据结构

贯穿 Preprocessor 与 CropPackager 的核心数据类型，全部不可变。
"""

from dataclasses import dataclass

import numpy as np


PNG_MIME_TYPE = "image/png"
ZIP_MIME_TYPE = "application/zip"


@dataclass(frozen=True)
class RasterImage:
    """已解码的图像（只读）"""

    pixels: np.ndarray   # uint8 (H,W,3) RGB 或 (H,W,4) RGBA，writeable=False
    mode: str            # "RGB" | "RGBA"

    def __post_init__(self):
        """冻结像素数组，派生结果必须是新数组"""
        if self.pixels.flags.writeable:
            self.pixels.setflags(write=False)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        """(width, height)"""
        return self.width, self.height

    @property
    def has_alpha(self) -> bool:
        return self.mode == "RGBA"


@dataclass(frozen=True)
class OutputSpec:
    """裁剪目录中的一条输出规格"""

    group: str       # 归档内的分组目录，如 "instagram"
    filename: str    # 归档内文件名，在整个归档内唯一
    width: int       # 目标宽度，px
    height: int      # 目标高度，px

    def archive_path(self, prefix: str) -> str:
        """归档成员路径：{prefix}/{group}/{filename}"""
        return f"{prefix}/{self.group}/{self.filename}"


@dataclass(frozen=True)
class EncodedOutput:
    """单个裁剪结果（已编码）"""

    archive_path: str
    data: bytes


@dataclass(frozen=True)
class PreprocessResult:
    """
    预处理结果

    相同输入字节 + 相同配置 => 字节级一致的 data。
    data 是普通 bytes，调用方可直接做 hashlib.sha256(data) 记录来源。
    """

    data: bytes
    width: int
    height: int
    mime_type: str = PNG_MIME_TYPE
