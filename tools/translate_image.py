"""
Headless page translation.

Runs the translation pipeline on an image file and writes a copy of the
page with the translated overlay drawn in, using the same fitting and
rendering code as the live overlay.

Usage:
    python tools/translate_image.py page.png
    python tools/translate_image.py page.png -o out.png --source ja --target en --auto-crop
"""

import sys
import asyncio
import logging
import argparse
from functools import partial
from pathlib import Path

from PIL import Image

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.autocrop import AutoCropDetector
from src.ocr import create_recognizer, draw_overlay
from src.overlay_renderer import OverlayRenderer
from src.pipeline import TranslationPipeline
from src.settings import load_settings, background_opacity, font_scale
from src.text_fit import PilTextMeasurer, TextFitter
from src.translation import create_translator
from src.viewers import IntrinsicFitViewer


logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")


def translate_file(args: argparse.Namespace) -> int:
    """Translate one image and save the rendered result."""
    settings = load_settings()
    source = args.source or settings["source_language"]
    target = args.target or settings["target_language"]
    font_path = args.font or settings.get("font_path")

    image = Image.open(args.image).convert("RGB")
    print(f"Image: {args.image} ({image.width}x{image.height}), {source} -> {target}")

    pipeline = TranslationPipeline(
        create_recognizer(args.recognizer or settings["recognizer"]),
        partial(create_translator, args.translator or settings["translator"]),
        source_language=source,
        target_language=target,
        auto_crop=args.auto_crop or bool(settings["auto_crop"]),
        crop_detector=AutoCropDetector(
            threshold=int(settings["crop_threshold"]),
            stride=int(settings["crop_stride"]),
        ),
    )

    try:
        result = asyncio.run(pipeline.run(image))
    finally:
        pipeline.close()

    if result.error is not None:
        print(f"ERROR: {result.error}")
        return 1

    if result.crop_rect is not None:
        print(f"Crop: {result.crop_rect}")
    for line in result.lines:
        print(f"  {line.bounding_box}: {line.original_text!r} -> {line.translated_text!r}")
    for failure in result.failed_blocks:
        print(f"  FAILED block {failure.index}: {failure.text!r}")

    # The output image is its own viewer: view size == intrinsic size
    geometry = IntrinsicFitViewer(image.width, image.height, image.width, image.height)
    renderer = OverlayRenderer(TextFitter(PilTextMeasurer(font_path)))
    opacity = args.opacity if args.opacity is not None else background_opacity(settings)
    scale = args.font_scale if args.font_scale is not None else font_scale(settings)
    primitives = renderer.render(result.lines, geometry, opacity, scale)

    output = Path(args.output) if args.output else Path(args.image).with_name(
        f"{Path(args.image).stem}_{target}.png"
    )
    draw_overlay(image, primitives, font_path).convert("RGB").save(output, "PNG")
    print(f"Saved: {output}")
    return 0


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Render translated text over a page image")
    parser.add_argument("image", help="Page image path")
    parser.add_argument("--output", "-o", help="Output PNG (default: <image>_<target>.png)")
    parser.add_argument("--source", "-s", help="Source language code")
    parser.add_argument("--target", "-t", help="Target language code")
    parser.add_argument("--auto-crop", "-c", action="store_true", help="Crop page borders first")
    parser.add_argument("--font", help="TrueType font for the overlay text")
    parser.add_argument("--opacity", type=float, help="Background opacity 0.0-1.0")
    parser.add_argument("--font-scale", type=float, help="Font scale multiplier")
    parser.add_argument("--recognizer", help="Recognizer engine (default: saved setting)")
    parser.add_argument("--translator", help="Translator engine (default: saved setting)")
    return parser.parse_args()


def main():
    return translate_file(parse_args())


if __name__ == "__main__":
    sys.exit(main())
