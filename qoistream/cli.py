import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import CodecConfig
from .converter import image_to_qoi, qoi_to_image
from .decoder import QOIDecoder
from .encoder import QOIEncoder
from .utils import output_path, read_bytes, write_bytes


def setup_logging(log_file: Optional[Path], verbose: bool = False) -> None:
    log_fmt = "[%(asctime)s] %(levelname)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=log_fmt, datefmt=datefmt, handlers=handlers)


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="qoistream", description="Lossless QOI encoder/decoder"
    )
    p.add_argument("--verbose", action="store_true")
    p.add_argument("--log-file", default=None)
    sub = p.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="raw pixels -> <stem>.qoi")
    enc.add_argument("input", help="Raw pixel file")
    enc.add_argument("width", type=int)
    enc.add_argument("height", type=int)
    enc.add_argument("channels", type=int, choices=(3, 4))
    enc.add_argument("--colorspace", type=int, default=0)
    enc.add_argument("--out-dir", default=None)

    dec = sub.add_parser("decode", help="QOI file -> <stem>.raw")
    dec.add_argument("input", help="QOI file")
    dec.add_argument("--out-dir", default=None)
    dec.add_argument(
        "--lenient", action="store_true", help="Do not validate the end marker"
    )

    frm = sub.add_parser("from-image", help="PNG/JPEG/RAW image -> <stem>.qoi")
    frm.add_argument("input")
    frm.add_argument("--colorspace", type=int, default=0)
    frm.add_argument("--out-dir", default=None)

    to = sub.add_parser("to-image", help="QOI file -> <stem>.<format>")
    to.add_argument("input")
    to.add_argument("--format", default="png")
    to.add_argument("--out-dir", default=None)
    to.add_argument("--lenient", action="store_true")

    return p.parse_args(argv)


def _config(args) -> CodecConfig:
    return CodecConfig(
        colorspace=getattr(args, "colorspace", 0),
        strict_end_marker=not getattr(args, "lenient", False),
    )


def run_encode(args, cfg: CodecConfig) -> Path:
    raw = read_bytes(args.input)
    encoded = QOIEncoder.encode(
        raw, args.width, args.height, args.channels, cfg.colorspace
    )
    out = output_path(args.input, cfg.qoi_extension, args.out_dir)
    write_bytes(out, encoded)
    logging.info(
        "Encoded %s (%d bytes) to %s (%d bytes)", args.input, len(raw), out, len(encoded)
    )
    return out


def run_decode(args, cfg: CodecConfig) -> Path:
    decoded = QOIDecoder.decode(read_bytes(args.input), cfg.strict_end_marker)
    out = output_path(args.input, cfg.raw_extension, args.out_dir)
    write_bytes(out, decoded.data)
    logging.info(
        "Decoded %s to %s: %dx%d, %d channels",
        args.input,
        out,
        decoded.width,
        decoded.height,
        decoded.channels,
    )
    return out


def run_from_image(args, cfg: CodecConfig) -> Path:
    out = output_path(args.input, cfg.qoi_extension, args.out_dir)
    image_to_qoi(args.input, out, cfg.colorspace)
    return out


def run_to_image(args, cfg: CodecConfig) -> Path:
    out = output_path(args.input, "." + args.format.lower(), args.out_dir)
    qoi_to_image(args.input, out, args.format, cfg.strict_end_marker)
    return out


COMMANDS = {
    "encode": run_encode,
    "decode": run_decode,
    "from-image": run_from_image,
    "to-image": run_to_image,
}


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)

    try:
        cfg = _config(args)
        COMMANDS[args.command](args, cfg)
    except (ValueError, OSError) as e:
        logging.error("%s failed for %s: %s", args.command, args.input, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
