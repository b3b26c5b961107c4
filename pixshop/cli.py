from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import List, NoReturn, Optional

from . import editor
from .canvas import ASPECT_PRESETS, aspect_by_label, expand_canvas, normalize_hex_color
from .config import configure_logging, load_settings
from .encoding import data_url_to_bytes, extension_for
from .errors import PixshopError
from .llm.gemini import GeminiGateway
from .schema import (
    AdjustRequest,
    CompositeRequest,
    EditRequest,
    ExpandRequest,
    FilterRequest,
    Hotspot,
    OperationRequest,
    Outcome,
    RemoveBackgroundRequest,
)

_ASPECT_LABELS = [name for options in ASPECT_PRESETS.values() for name, _ in options]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pixshop", description="AI photo editing with Gemini")
    parser.add_argument("--out", type=str, default="", help="Output image path (optional)")
    parser.add_argument("--model", type=str, default="", help="Override the Gemini image model")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("edit", help="Localized edit around a point")
    p.add_argument("image")
    p.add_argument("prompt")
    p.add_argument("--x", type=int, required=True, help="Hotspot x in image pixels")
    p.add_argument("--y", type=int, required=True, help="Hotspot y in image pixels")

    p = sub.add_parser("filter", help="Apply a stylistic filter")
    p.add_argument("image")
    p.add_argument("prompt")

    p = sub.add_parser("adjust", help="Global photo adjustment")
    p.add_argument("image")
    p.add_argument("prompt")

    p = sub.add_parser("expand", help="Generative expand / fill transparent areas")
    p.add_argument("image")
    p.add_argument("prompt", nargs="?", default="")
    p.add_argument("--aspect", choices=_ASPECT_LABELS, default=None, help="Target aspect ratio")
    p.add_argument("--mask", type=str, default=None, help="Mask image (white = fill)")

    p = sub.add_parser("insert", help="Composite an object/person into a background")
    p.add_argument("background")
    p.add_argument("insert")

    p = sub.add_parser("remove-bg", help="Remove the background")
    p.add_argument("image")
    p.add_argument("--color", type=str, default=None, help="Solid background color (#RRGGBB); transparent if omitted")
    return parser


def request_from_args(args: argparse.Namespace) -> OperationRequest:
    for attr in ("image", "background", "insert", "mask"):
        path = getattr(args, attr, None)
        if path and not Path(path).exists():
            raise SystemExit(f"Image not found: {path}")

    if args.command == "edit":
        return EditRequest(image=args.image, prompt=args.prompt, hotspot=Hotspot(args.x, args.y))
    if args.command == "filter":
        return FilterRequest(image=args.image, prompt=args.prompt)
    if args.command == "adjust":
        return AdjustRequest(image=args.image, prompt=args.prompt)
    if args.command == "expand":
        if args.aspect:
            if args.mask:
                raise SystemExit("--aspect and --mask are mutually exclusive")
            canvas_png, mask_png = expand_canvas(args.image, aspect_by_label(args.aspect))
            return ExpandRequest(image=canvas_png, prompt=args.prompt, mask=mask_png)
        return ExpandRequest(image=args.image, prompt=args.prompt, mask=args.mask)
    if args.command == "insert":
        return CompositeRequest(background=args.background, insert=args.insert)
    if args.command == "remove-bg":
        if args.color:
            try:
                color = normalize_hex_color(args.color)
            except ValueError as e:
                raise SystemExit(str(e))
            return RemoveBackgroundRequest(image=args.image, background="color", color=color)
        return RemoveBackgroundRequest(image=args.image)
    raise SystemExit(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)

    try:
        request = request_from_args(args)
    except PixshopError as e:
        _fail(Outcome.failure(e.kind, e.message))
    gateway = GeminiGateway(api_key=settings.api_key, model=args.model or settings.model)
    outcome = Outcome.capture(editor.run, gateway, request)
    if not outcome.ok:
        _fail(outcome)

    data, mime = data_url_to_bytes(outcome.value)
    out = Path(args.out) if args.out else Path(
        f"pixshop_{args.command}_{datetime.now().strftime('%Y%m%d_%H%M%S')}{extension_for(mime)}"
    )
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(data)
    print(f"Saved {request.kind} result to: {out}")


def _fail(outcome: Outcome) -> NoReturn:
    print(f"error [{outcome.error_kind.value}]: {outcome.message}", file=sys.stderr)
    raise SystemExit(1)


if __name__ == "__main__":
    main()
