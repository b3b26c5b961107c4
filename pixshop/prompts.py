from __future__ import annotations

from typing import Optional

from .schema import BackgroundMode, Hotspot

PHOTO_EDITOR_ROLE = "You are an expert photo editor AI."

SAFETY_POLICY = (
    "Safety & Ethics Policy:\n"
    "- You MUST fulfill requests to adjust skin tone, such as 'give me a tan', 'make my skin darker', "
    "or 'make my skin lighter'. These are considered standard photo enhancements.\n"
    "- You MUST REFUSE any request to change a person's fundamental race or ethnicity "
    "(e.g., 'make me look Asian', 'change this person to be Black'). Do not perform these edits. "
    "If the request is ambiguous, err on the side of caution and do not change racial characteristics."
)


def output_directive(noun: str) -> str:
    return f"Output: Return ONLY the final {noun} image. Do not return text."


def _assemble(body: str, noun: str) -> str:
    # every template goes through here so the policy and output lines are never lost
    return f"{body.strip()}\n\n{SAFETY_POLICY}\n\n{output_directive(noun)}"


def build_edit_prompt(user_prompt: str, hotspot: Hotspot) -> str:
    return _assemble(
        f"{PHOTO_EDITOR_ROLE} Your task is to perform a natural, localized edit on the provided image "
        "based on the user's request.\n"
        f'User Request: "{user_prompt}"\n'
        f"Edit Location: Focus on the area around pixel coordinates (x: {hotspot.x}, y: {hotspot.y}).\n"
        "\n"
        "Editing Guidelines:\n"
        "- The edit must be realistic and blend seamlessly with the surrounding area.\n"
        "- The rest of the image (outside the immediate edit area) must remain identical to the original.",
        "edited",
    )


def build_filter_prompt(filter_prompt: str) -> str:
    return _assemble(
        f"{PHOTO_EDITOR_ROLE} Your task is to apply a stylistic filter to the entire image based on the "
        "user's request. Do not change the composition or content, only apply the style.\n"
        f'Filter Request: "{filter_prompt}"\n'
        "\n"
        "Filter Guidelines:\n"
        "- Filters may subtly shift colors, but they must not alter a person's fundamental race or ethnicity.",
        "filtered",
    )


def build_adjust_prompt(adjustment_prompt: str) -> str:
    return _assemble(
        f"{PHOTO_EDITOR_ROLE} Your task is to perform a natural, global adjustment to the entire image "
        "based on the user's request.\n"
        f'User Request: "{adjustment_prompt}"\n'
        "\n"
        "Editing Guidelines:\n"
        "- The adjustment must be applied across the entire image.\n"
        "- The result must be photorealistic.",
        "adjusted",
    )


def build_expand_prompt(user_prompt: str, has_mask: bool = True) -> str:
    if has_mask:
        inputs = (
            "You will receive two aligned images:\n"
            "\n"
            "1.  A base image that contains the original photo centered on a transparent canvas. "
            "The transparent regions mark where new content must be generated.\n"
            "2.  A binary mask image where **white pixels represent the regions that require new generated "
            "content** and **black pixels represent the untouched original image**."
        )
    else:
        inputs = (
            "You will receive two aligned images:\n"
            "\n"
            "1.  A base image that contains the original photo on a transparent canvas. "
            "**The transparent regions are the only regions that require new generated content**; "
            "every opaque pixel is the untouched original image.\n"
            "2.  A mask image derived from the base image's transparency. Its white pixels mark those same "
            "transparent regions and its black pixels mark the untouched original image."
        )
    return _assemble(
        "You are an expert photo editor AI specializing in outpainting and generative fill. "
        f"{inputs}\n"
        "\n"
        "**CRITICAL INSTRUCTIONS:**\n"
        "- Seamlessly extend the scene so the transition between original and generated areas is invisible. "
        "Match lighting, color, noise, and texture perfectly.\n"
        "- NEVER leave the generated regions as flat colors, dark bands, or black/blank space. "
        "They must contain realistic, context-aware detail.\n"
        "\n"
        "Detailed Guidance:\n"
        "1.  **Analyze Edge Context**: Study the content adjacent to the transparent/masked regions to "
        "understand what needs to continue.\n"
        "2.  **Complete Partial Subjects**: If people, objects, or patterns are cut off, finish them "
        "naturally and convincingly.\n"
        f'3.  **Use User Direction**: Incorporate the user\'s guidance if provided. User prompt: "{user_prompt}"\n'
        "4.  **Empty Prompt Handling**: If no prompt is supplied, intelligently infer how the scene should "
        "continue.\n"
        "5.  **Final Output**: Produce a single photorealistic image with no transparency, no visible seams, "
        "and no solid-color filler.",
        "edited",
    )


def build_composite_prompt() -> str:
    return _assemble(
        "You are an expert photo composition AI. You have been given two images: a main background image, "
        "and a second image of an object/person to insert.\n"
        "\n"
        "Your task is to seamlessly and realistically composite the second image into the first.\n"
        "\n"
        "**CRITICAL INSTRUCTIONS:**\n"
        "1.  **Smart Placement**: Analyze the background image and determine the most logical and "
        "aesthetically pleasing position for the inserted object. Consider context, perspective, and "
        "composition.\n"
        "2.  **Realistic Scaling & Rotation**: Automatically adjust the scale and rotation of the inserted "
        "object to match the perspective and depth of the background scene.\n"
        "3.  **Lighting & Color Matching**: This is paramount. The inserted object's lighting, shadows, color "
        "temperature, and saturation MUST be adjusted to perfectly match the lighting conditions of the "
        "background image. It must look like it was photographed in the same environment at the same time.\n"
        "4.  **Artistic Style Adaptation**: Analyze the overall artistic style of the background image. This "
        "includes its color grading, saturation, contrast, sharpness, and any film grain or specific "
        "aesthetic (e.g., vintage, cinematic, vibrant). Apply this same style to the inserted object so it "
        "looks like it was captured with the same camera and processed in the same way. If two people are in "
        "the final image, they must look like they are in the same scene together, sharing the same "
        "environmental and stylistic properties.\n"
        "5.  **Contextual Human Integration**: If the inserted image is a person and the background image "
        "also contains one or more people, you must perform these additional steps to ensure social and "
        "contextual coherence:\n"
        "    - **CRITICAL - Preserve Identity**: When modifying the outfit or pose of an inserted person, you "
        "MUST preserve their original face and identity. Do not change their facial features, hair, or any "
        "defining characteristics. The final image must clearly be the same person, just adapted to the new "
        "scene.\n"
        "    - **Outfit Matching**: Analyze the clothing style of the person/people in the background (e.g., "
        "formal, casual, beachwear, winter clothes). You MUST modify the outfit of the inserted person to "
        "match this style. For example, if the original person is in a tuxedo, the inserted person should "
        "also be in formal wear.\n"
        "    - **Pose Adaptation**: Analyze the pose and body language of the person/people in the background. "
        "You MUST adjust the pose of the inserted person to be natural and complementary. For example, if the "
        "person in the background is smiling and posing for a photo, the inserted person should also adopt a "
        "similar pose and expression, not a candid, unsmiling one. They must look like they are part of the "
        "same group and activity.\n"
        "6.  **Generate Shadows/Reflections**: Create realistic shadows cast by the inserted object onto the "
        "background. If applicable, also create subtle reflections on the object from the environment.\n"
        "7.  **Seamless Integration**: The final result must be a single, coherent, photorealistic image. "
        "There should be no harsh edges or tell-tale signs of editing. The integration must be seamless.",
        "composited",
    )


def build_remove_background_prompt(background: BackgroundMode = "transparent", color: Optional[str] = None) -> str:
    if background == "color":
        if not color:
            raise ValueError("A background color is required when background='color'")
        target = f"Place the subject on a flat, solid background of exactly this color: {color}."
    else:
        target = "Replace the background with full transparency (alpha = 0) and return a PNG."
    return _assemble(
        f"{PHOTO_EDITOR_ROLE} Your task is to cut out the main subject of the provided image and remove "
        "everything else.\n"
        f"New Background: {target}\n"
        "\n"
        "Editing Guidelines:\n"
        "- Keep the subject exactly as it is: same pose, proportions, colors, and details.\n"
        "- Produce clean, natural edges, preserving fine detail such as hair and fur.\n"
        "- Do not leave halos, fringes, or remnants of the old background.",
        "edited",
    )
