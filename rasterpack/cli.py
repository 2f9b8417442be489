#!/usr/bin/env python
"""
rasterpack 命令行

使用方法:
    rasterpack clean input.jpg cleaned.png
    rasterpack crop-pack input.jpg --prefix acme [--out acme.zip] [--clean]
"""

import argparse
import hashlib
import sys
from pathlib import Path

from .errors import RasterPackError
from .pipeline import load_pipeline


def _sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def run_clean(args: argparse.Namespace) -> int:
    pipe = load_pipeline(args.config)
    original = Path(args.input).read_bytes()

    result = pipe.clean(original)
    Path(args.output).write_bytes(result.data)

    print(f"输出已保存到: {args.output} ({result.width}x{result.height}, {result.mime_type})")
    # 来源记录：原图与清理后图像的哈希
    print(f"sha256 original: {_sha256(original)}")
    print(f"sha256 cleaned:  {_sha256(result.data)}")
    return 0


def run_crop_pack(args: argparse.Namespace) -> int:
    pipe = load_pipeline(args.config)
    original = Path(args.input).read_bytes()

    if args.clean:
        pack = pipe.clean_and_pack(original, args.prefix)
    else:
        pack = pipe.crop_pack(original, args.prefix)

    out_path = Path(args.out) if args.out else Path(pack.filename)
    try:
        with open(out_path, "wb") as f:
            size = pack.write_to(f)
    except BaseException:
        # 任何中止路径（含写盘失败、Ctrl-C）都不保留残缺的归档
        out_path.unlink(missing_ok=True)
        raise

    print(f"裁剪包已保存到: {out_path} ({size} bytes)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rasterpack", description="确定性图像清理与多尺寸裁剪打包")
    parser.add_argument("--config", default=None, help="覆盖配置文件 (YAML)")
    sub = parser.add_subparsers(dest="command", required=True)

    clean = sub.add_parser("clean", help="自动清理，输出 PNG")
    clean.add_argument("input", help="输入图像路径")
    clean.add_argument("output", help="输出 PNG 路径")
    clean.set_defaults(func=run_clean)

    crop = sub.add_parser("crop-pack", help="生成多平台裁剪 ZIP")
    crop.add_argument("input", help="输入图像路径")
    crop.add_argument("--prefix", default=None, help="归档路径与文件名前缀")
    crop.add_argument("--out", default=None, help="输出 ZIP 路径，默认 {prefix}-crop-pack.zip")
    crop.add_argument("--clean", action="store_true", help="打包前先自动清理")
    crop.set_defaults(func=run_crop_pack)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (RasterPackError, OSError) as e:
        print(f"[rasterpack] error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
