"""
Errors - 异常体系

所有错误都局限于单次调用，同步抛给直接调用方，内部不做重试
（处理是确定性的，重试只会重现同一个失败）。
"""


class RasterPackError(Exception):
    """rasterpack 异常基类"""


class DecodeError(RasterPackError, ValueError):
    """输入字节不是可解码的栅格图像"""


class EncodeError(RasterPackError, RuntimeError):
    """内部缩放 / 编码 / 写归档步骤失败，整个操作中止"""


class ConfigError(RasterPackError, ValueError):
    """配置或输出规格目录非法（尺寸非正、文件名重复等）"""
