from __future__ import annotations

import io
import logging
import os
from typing import Callable, Optional, Tuple

import gradio as gr
from PIL import Image

from pixshop import editor
from pixshop.canvas import (
    ASPECT_PRESETS,
    aspect_by_label,
    expand_canvas,
    image_aspect,
    needs_expansion,
    normalize_hex_color,
)
from pixshop.config import configure_logging, load_settings
from pixshop.encoding import data_url_to_bytes
from pixshop.errors import PixshopError
from pixshop.llm.gemini import GeminiGateway
from pixshop.schema import Hotspot, Outcome

logger = logging.getLogger(__name__)

ORIGINAL_ASPECT = "Original"
ASPECT_CHOICES = [ORIGINAL_ASPECT] + [name for options in ASPECT_PRESETS.values() for name, _ in options]

PanelResult = Tuple[Optional[Image.Image], str]


def make_gateway() -> GeminiGateway:
    return GeminiGateway()


def _render(outcome: Outcome) -> PanelResult:
    if not outcome.ok:
        logger.warning(f"Operation failed ({outcome.error_kind.value}): {outcome.message}")
        return None, f"**Error ({outcome.error_kind.value}):** {outcome.message}"
    data, _ = data_url_to_bytes(outcome.value)
    img = Image.open(io.BytesIO(data))
    img.load()
    return img, "Done."


def _run(fn: Callable[..., str], *args) -> PanelResult:
    return _render(Outcome.capture(fn, make_gateway(), *args))


def select_hotspot(evt: gr.SelectData) -> Tuple[int, int, str]:
    x, y = int(evt.index[0]), int(evt.index[1])
    return x, y, f"Hotspot set at (x: {x}, y: {y})"


def run_retouch(image: Optional[str], prompt: str, x: Optional[float], y: Optional[float]) -> PanelResult:
    if not image:
        return None, "Upload an image first."
    if x is None or y is None:
        return None, "Click on the image to choose where to edit."
    if not (prompt or "").strip():
        return None, "Describe the edit you want."
    return _run(editor.generate_edited_image, image, prompt, Hotspot(int(x), int(y)))


def run_adjust(image: Optional[str], prompt: str) -> PanelResult:
    if not image:
        return None, "Upload an image first."
    if not (prompt or "").strip():
        return None, "Describe the adjustment you want."
    return _run(editor.generate_adjusted_image, image, prompt)


def run_filter(image: Optional[str], prompt: str) -> PanelResult:
    if not image:
        return None, "Upload an image first."
    if not (prompt or "").strip():
        return None, "Describe the filter you want."
    return _run(editor.generate_filtered_image, image, prompt)


def run_expand(image: Optional[str], aspect_label: str, prompt: str) -> PanelResult:
    if not image:
        return None, "Upload an image first."
    if aspect_label == ORIGINAL_ASPECT:
        return None, "Choose a new aspect ratio to expand into."
    aspect = aspect_by_label(aspect_label)
    try:
        original = image_aspect(image)
    except PixshopError as e:
        return _render(Outcome.failure(e.kind, e.message))
    if not needs_expansion(aspect, original):
        return None, "The image already has this aspect ratio."
    return _run(_expand_to_aspect, image, aspect, prompt or "")


def _expand_to_aspect(gateway: GeminiGateway, image: str, aspect: float, prompt: str) -> str:
    canvas_png, mask_png = expand_canvas(image, aspect)
    return editor.generate_expanded_image(gateway, canvas_png, prompt, mask_png)


def run_insert(background: Optional[str], insert: Optional[str]) -> PanelResult:
    if not background or not insert:
        return None, "Upload both a background image and an image to insert."
    return _run(editor.generate_composited_image, background, insert)


def run_remove_background(image: Optional[str], mode: str, color: str) -> PanelResult:
    if not image:
        return None, "Upload an image first."
    if mode == "Solid Color":
        try:
            hex_color = normalize_hex_color(color)
        except ValueError as e:
            return None, str(e)
        return _run(editor.generate_background_removed_image, image, "color", hex_color)
    return _run(editor.generate_background_removed_image, image, "transparent", None)


def app() -> gr.Blocks:
    with gr.Blocks(title="Pixshop: AI Photo Editor") as demo:
        gr.Markdown("""
        # Pixshop: AI Photo Editor
        - Retouch: click a point on the photo and describe the change.
        - Adjust / Filters: describe a global adjustment or a style.
        - Expand: pick a new aspect ratio and let the model fill the new space.
        - Insert: add an object or person from a second photo.
        - Requires `GEMINI_API_KEY`; set `GEMINI_IMAGE_EDIT_MODEL` to override the model.
        """)

        with gr.Tab("Retouch"):
            image = gr.Image(label="Photo (click to set the edit point)", type="filepath")
            hx = gr.Number(label="x", precision=0, interactive=False)
            hy = gr.Number(label="y", precision=0, interactive=False)
            hint = gr.Markdown()
            prompt = gr.Textbox(label="Edit", placeholder="e.g., 'change my shirt color to blue'")
            run_btn = gr.Button("Generate")
            result = gr.Image(label="Result", type="pil")
            status = gr.Markdown()
            image.select(select_hotspot, inputs=None, outputs=[hx, hy, hint])
            run_btn.click(run_retouch, inputs=[image, prompt, hx, hy], outputs=[result, status])

        with gr.Tab("Adjust"):
            image2 = gr.Image(label="Photo", type="filepath")
            prompt2 = gr.Textbox(label="Adjustment", placeholder="e.g., 'warmer lighting, blur the background'")
            run_btn2 = gr.Button("Apply Adjustment")
            result2 = gr.Image(label="Result", type="pil")
            status2 = gr.Markdown()
            run_btn2.click(run_adjust, inputs=[image2, prompt2], outputs=[result2, status2])

        with gr.Tab("Filters"):
            image3 = gr.Image(label="Photo", type="filepath")
            prompt3 = gr.Textbox(label="Filter", placeholder="e.g., 'synthwave', 'anime', 'lomo'")
            run_btn3 = gr.Button("Apply Filter")
            result3 = gr.Image(label="Result", type="pil")
            status3 = gr.Markdown()
            run_btn3.click(run_filter, inputs=[image3, prompt3], outputs=[result3, status3])

        with gr.Tab("Expand"):
            image4 = gr.Image(label="Photo", type="filepath")
            aspect = gr.Radio(ASPECT_CHOICES, value=ORIGINAL_ASPECT, label="Aspect Ratio")
            prompt4 = gr.Textbox(label="Optional: guide the fill", placeholder="e.g., 'add more beach and ocean'")
            run_btn4 = gr.Button("Generate Expansion")
            result4 = gr.Image(label="Result", type="pil")
            status4 = gr.Markdown()
            run_btn4.click(run_expand, inputs=[image4, aspect, prompt4], outputs=[result4, status4])

        with gr.Tab("Insert"):
            background = gr.Image(label="Background photo", type="filepath")
            insert = gr.Image(label="Object or person to insert", type="filepath")
            run_btn5 = gr.Button("Apply Insert")
            result5 = gr.Image(label="Result", type="pil")
            status5 = gr.Markdown()
            run_btn5.click(run_insert, inputs=[background, insert], outputs=[result5, status5])

        with gr.Tab("Remove Background"):
            image6 = gr.Image(label="Photo", type="filepath")
            mode = gr.Radio(["Transparent", "Solid Color"], value="Transparent", label="New background")
            color = gr.ColorPicker(value="#FFFFFF", label="Color")
            run_btn6 = gr.Button("Remove Background")
            result6 = gr.Image(label="Result", type="pil")
            status6 = gr.Markdown()
            run_btn6.click(run_remove_background, inputs=[image6, mode, color], outputs=[result6, status6])

    return demo


if __name__ == "__main__":
    configure_logging(load_settings().log_level)
    port = int(os.getenv("PORT", "7860"))
    app().launch(server_name="0.0.0.0", server_port=port)
