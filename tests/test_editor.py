"""
Operation entry point tests: request assembly and outcome handling
"""
import base64
import io

import pytest
from PIL import Image

from pixshop import editor, prompts
from pixshop.errors import AbnormalFinish, BlockedByPolicy, ErrorKind, TransportFailure
from pixshop.schema import (
    AdjustRequest,
    CompositeRequest,
    EditRequest,
    ExpandRequest,
    FilterRequest,
    Hotspot,
    ModelResponse,
    Outcome,
    RemoveBackgroundRequest,
)


def _decode_png(part):
    return Image.open(io.BytesIO(base64.b64decode(part.data)))


@pytest.mark.unit
class TestSingleImageOperations:
    """Edit, filter and adjust send one image plus one instruction"""

    def test_edit(self, fake_gateway, png_file, png_bytes):
        result = editor.generate_edited_image(fake_gateway, png_file, "remove the lamp", Hotspot(3, 1))

        assert result == "data:image/png;base64,AAAA"
        images, instruction = fake_gateway.calls[0]
        assert len(images) == 1
        assert base64.b64decode(images[0].data) == png_bytes
        assert instruction == prompts.build_edit_prompt("remove the lamp", Hotspot(3, 1))

    def test_filter(self, fake_gateway, png_bytes):
        editor.generate_filtered_image(fake_gateway, png_bytes, "noir")

        images, instruction = fake_gateway.calls[0]
        assert len(images) == 1
        assert instruction == prompts.build_filter_prompt("noir")

    def test_adjust(self, fake_gateway, png_bytes):
        editor.generate_adjusted_image(fake_gateway, png_bytes, "golden hour")

        _, instruction = fake_gateway.calls[0]
        assert instruction == prompts.build_adjust_prompt("golden hour")

    def test_remove_background_with_color(self, fake_gateway, png_bytes):
        editor.generate_background_removed_image(fake_gateway, png_bytes, "color", "#112233")

        _, instruction = fake_gateway.calls[0]
        assert "#112233" in instruction


@pytest.mark.unit
class TestMultiImageOperations:
    """Composite and expand send two images, primary first, then one instruction"""

    def test_composite_order(self, fake_gateway, png_bytes, jpeg_bytes):
        editor.generate_composited_image(fake_gateway, png_bytes, jpeg_bytes)

        images, instruction = fake_gateway.calls[0]
        assert [im.mime_type for im in images] == ["image/png", "image/jpeg"]
        assert base64.b64decode(images[0].data) == png_bytes
        assert instruction == prompts.build_composite_prompt()

    def test_expand_with_explicit_mask(self, fake_gateway, transparent_border_png, png_bytes):
        editor.generate_expanded_image(fake_gateway, transparent_border_png, "more sky", png_bytes)

        images, instruction = fake_gateway.calls[0]
        assert len(images) == 2
        assert base64.b64decode(images[0].data) == transparent_border_png
        assert base64.b64decode(images[1].data) == png_bytes
        assert instruction == prompts.build_expand_prompt("more sky", has_mask=True)

    def test_expand_derives_mask_from_alpha(self, fake_gateway, transparent_border_png):
        editor.generate_expanded_image(fake_gateway, transparent_border_png, "")

        images, instruction = fake_gateway.calls[0]
        assert len(images) == 2
        mask = _decode_png(images[1])
        assert images[1].mime_type == "image/png"
        assert mask.getpixel((0, 0)) == 255
        assert mask.getpixel((2, 2)) == 0
        assert instruction == prompts.build_expand_prompt("", has_mask=False)

    def test_expand_without_mask_instruction_names_both_images(self, fake_gateway, transparent_border_png):
        editor.generate_expanded_image(fake_gateway, transparent_border_png, "")

        images, instruction = fake_gateway.calls[0]
        preamble = instruction.split("**CRITICAL INSTRUCTIONS:**")[0]
        assert len(images) == 2
        assert "two aligned images" in preamble
        assert "mask image" in preamble


@pytest.mark.unit
class TestFailuresPropagate:

    def test_blocked_response_raises(self, gateway_factory, png_bytes):
        gateway = gateway_factory(ModelResponse(block_reason="SAFETY"))

        with pytest.raises(BlockedByPolicy):
            editor.generate_edited_image(gateway, png_bytes, "x", Hotspot(0, 0))

    def test_unreadable_input_never_reaches_gateway(self, fake_gateway, tmp_path):
        with pytest.raises(TransportFailure):
            editor.generate_filtered_image(fake_gateway, tmp_path / "missing.png", "x")

        assert fake_gateway.calls == []

    def test_malformed_data_url_is_captured(self, fake_gateway):
        outcome = Outcome.capture(editor.generate_adjusted_image, fake_gateway, "data:image/png;base64,AAA", "x")

        assert outcome.error_kind is ErrorKind.TRANSPORT_FAILURE
        assert fake_gateway.calls == []

    def test_outcome_capture(self, gateway_factory, png_bytes):
        gateway = gateway_factory(ModelResponse(finish_reason="SAFETY"))

        outcome = Outcome.capture(editor.generate_adjusted_image, gateway, png_bytes, "x")

        assert not outcome.ok
        assert outcome.error_kind is ErrorKind.ABNORMAL_FINISH
        assert "SAFETY" in outcome.message

    def test_outcome_capture_success(self, fake_gateway, png_bytes):
        outcome = Outcome.capture(editor.generate_adjusted_image, fake_gateway, png_bytes, "x")

        assert outcome.ok
        assert outcome.value == "data:image/png;base64,AAAA"

    def test_abnormal_finish_type(self, gateway_factory, png_bytes):
        with pytest.raises(AbnormalFinish):
            editor.generate_filtered_image(gateway_factory(ModelResponse(finish_reason="RECITATION")), png_bytes, "x")


@pytest.mark.unit
class TestRunDispatch:
    """run() routes request objects to their operation"""

    @pytest.mark.parametrize(
        "make_request, expected_images",
        [
            (lambda img: EditRequest(image=img, prompt="p", hotspot=Hotspot(1, 1)), 1),
            (lambda img: FilterRequest(image=img, prompt="p"), 1),
            (lambda img: AdjustRequest(image=img, prompt="p"), 1),
            (lambda img: ExpandRequest(image=img, prompt="p", mask=img), 2),
            (lambda img: CompositeRequest(background=img, insert=img), 2),
            (lambda img: RemoveBackgroundRequest(image=img), 1),
        ],
    )
    def test_dispatch(self, fake_gateway, png_bytes, make_request, expected_images):
        result = editor.run(fake_gateway, make_request(png_bytes))

        assert result == "data:image/png;base64,AAAA"
        images, _ = fake_gateway.calls[0]
        assert len(images) == expected_images

    def test_unknown_request(self, fake_gateway):
        with pytest.raises(TypeError):
            editor.run(fake_gateway, object())

    def test_request_kinds_name_the_operation(self):
        assert EditRequest(image=b"", prompt="", hotspot=Hotspot(0, 0)).kind == "edit"
        assert ExpandRequest(image=b"").kind == "expansion"
        assert CompositeRequest(background=b"", insert=b"").kind == "composition"
