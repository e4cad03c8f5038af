"""
Tests for the Gemini service using a fake async client.
"""

import asyncio
import base64
import json
from types import SimpleNamespace

import pytest

from conftest import fake_client, image_response, make_png, text_response
from design_genius.config import Settings
from design_genius.models import DesignConcept, DeviceType
from design_genius.services.gemini import (
    LOGO_INSTRUCTION,
    GeminiDesignService,
    ResponseParser,
)


CONCEPTS_JSON = json.dumps([
    {"name": "Minimal Tech", "description": "Clean", "imagePrompt": "minimal prompt"},
    {"name": "Bold", "description": "Loud", "imagePrompt": "bold prompt"},
    {"name": "Warm", "description": "Friendly", "imagePrompt": "warm prompt"},
])


def web_chunk(uri, title=None):
    return SimpleNamespace(web=SimpleNamespace(uri=uri, title=title))


def make_service(handler, **settings):
    client, models = fake_client(handler)
    service = GeminiDesignService(settings=Settings(api_key="test-key", **settings), client=client)
    return service, models


@pytest.fixture
def concept():
    return DesignConcept(name="Minimal Tech", description="Clean", image_prompt="minimal prompt")


def test_service_requires_api_key():
    """Test that the service refuses to start without an API key."""
    with pytest.raises(ValueError, match="GEMINI_API_KEY"):
        GeminiDesignService(settings=Settings(api_key=None))


def test_parse_concepts_handles_code_fences():
    """Test parsing concepts wrapped in a markdown code fence."""
    concepts = ResponseParser.parse_concepts(f"```json\n{CONCEPTS_JSON}\n```")
    assert [c.name for c in concepts] == ["Minimal Tech", "Bold", "Warm"]


def test_parse_concepts_accepts_wrapped_object():
    """Test parsing concepts nested under a "concepts" key."""
    concepts = ResponseParser.parse_concepts(json.dumps({"concepts": json.loads(CONCEPTS_JSON)}))
    assert len(concepts) == 3


def test_parse_concepts_rejects_empty_response():
    """Test that an empty research response is an error."""
    with pytest.raises(ValueError, match="No JSON response"):
        ResponseParser.parse_concepts(None)


def test_extract_sources_falls_back_to_hostname():
    """Test source extraction with deduplication and hostname titles."""
    response = text_response("[]", chunks=[
        web_chunk("https://example.com/about", "About us"),
        web_chunk("https://news.example.org/story"),
        web_chunk("https://example.com/about", "Duplicate"),
        SimpleNamespace(web=None),
    ])

    sources = ResponseParser.extract_sources(response)

    assert [(s.title, s.uri) for s in sources] == [
        ("About us", "https://example.com/about"),
        ("news.example.org", "https://news.example.org/story"),
    ]


def test_extract_image_requires_inline_data():
    """Test that a response without image data is an error."""
    with pytest.raises(ValueError, match="No image data"):
        ResponseParser.extract_image(text_response("sorry, no image"))


def test_generate_design_concepts(screenshot_png):
    """Test the research request and its parsed result."""
    chunks = [web_chunk("https://example.com", "Example")]
    service, models = make_service(lambda model, contents, config: text_response(CONCEPTS_JSON, chunks))

    concepts, sources = asyncio.run(
        service.generate_design_concepts("https://example.com", "A bakery", screenshot_png)
    )

    assert [c.image_prompt for c in concepts] == ["minimal prompt", "bold prompt", "warm prompt"]
    assert sources[0].title == "Example"

    call = models.calls[0]
    assert call["model"] == "gemini-3-flash-preview"
    assert call["config"].response_mime_type == "application/json"
    assert call["config"].tools[0].google_search is not None
    screenshot_part, prompt = call["contents"]
    assert screenshot_part.inline_data.data == screenshot_png
    assert "https://example.com" in prompt
    assert "A bakery" in prompt


def test_generate_design_concepts_trims_to_concept_count(screenshot_png):
    """Test that extra concepts are dropped."""
    service, _ = make_service(lambda *args: text_response(CONCEPTS_JSON), concept_count=2)

    concepts, _ = asyncio.run(service.generate_design_concepts("", "", screenshot_png))

    assert len(concepts) == 2


def test_generate_design_concepts_propagates_errors(screenshot_png):
    """Test that API errors reach the caller."""
    def handler(*args):
        raise RuntimeError("permission denied")

    service, _ = make_service(handler)

    with pytest.raises(RuntimeError, match="permission denied"):
        asyncio.run(service.generate_design_concepts("", "", screenshot_png))


@pytest.mark.parametrize("device_type,marker", [
    (DeviceType.MOBILE, "GENERATE A MOBILE MOCKUP"),
    (DeviceType.DESKTOP, "GENERATE A FULL-PAGE DESKTOP SCROLL MOCKUP"),
])
def test_generate_mockup_image(concept, device_type, marker):
    """Test the render request for each device view."""
    png = make_png((9, 16))
    service, models = make_service(lambda *args: image_response(png))

    image_url = asyncio.run(service.generate_mockup_image(concept, None, device_type))

    assert image_url == "data:image/png;base64," + base64.b64encode(png).decode()
    call = models.calls[0]
    assert call["model"] == "gemini-3-pro-image-preview"
    assert len(call["contents"]) == 1
    assert call["contents"][0].startswith("minimal prompt . ")
    assert marker in call["contents"][0]
    assert call["config"].image_config.aspect_ratio == "9:16"
    assert call["config"].image_config.image_size == "2K"


def test_generate_mockup_image_with_logo(concept, logo_png):
    """Test that a logo is sent after the prompt with its instruction."""
    service, models = make_service(lambda *args: image_response(b"jpeg-bytes", "image/jpeg"))

    image_url = asyncio.run(service.generate_mockup_image(concept, logo_png, DeviceType.MOBILE))

    assert image_url.startswith("data:image/jpeg;base64,")
    contents = models.calls[0]["contents"]
    assert len(contents) == 3
    assert contents[1].inline_data.data == logo_png
    assert contents[2] == LOGO_INSTRUCTION


def test_refine_prompt_uses_model_answer(concept):
    """Test that the refined prompt is the stripped model answer."""
    service, models = make_service(lambda *args: text_response("  A sharper prompt  "))

    refined = asyncio.run(service.refine_prompt(concept, "A bakery", DeviceType.DESKTOP))

    assert refined == "A sharper prompt"
    prompt = models.calls[0]["contents"]
    assert "minimal prompt" in prompt
    assert "desktop layout" in prompt


@pytest.mark.parametrize("failure", ["error", "empty"])
def test_refine_prompt_falls_back_to_original(concept, failure):
    """Test the fallback to the original prompt on error or empty text."""
    def handler(*args):
        if failure == "error":
            raise RuntimeError("timeout")
        return text_response("")

    service, _ = make_service(handler)

    refined = asyncio.run(service.refine_prompt(concept, "", DeviceType.MOBILE))

    assert refined == "minimal prompt"


def test_refine_and_regenerate_renders_refined_prompt(concept):
    """Test that the refined prompt is the one rendered."""
    png = make_png()

    def handler(model, contents, config):
        if model == "gemini-3-flash-preview":
            return text_response("refined prompt")
        return image_response(png)

    service, models = make_service(handler)

    image_url = asyncio.run(
        service.refine_and_regenerate_mockup(concept, "A bakery", DeviceType.MOBILE, None)
    )

    assert image_url.startswith("data:image/png;base64,")
    assert models.calls[1]["contents"][0].startswith("refined prompt . GENERATE A MOBILE MOCKUP")


def test_get_company_info():
    """Test the company brief lookup."""
    service, models = make_service(lambda *args: text_response("A family bakery in Lyon.\n"))

    info = asyncio.run(service.get_company_info("bakery.example.com"))

    assert info == "A family bakery in Lyon."
    assert "bakery.example.com" in models.calls[0]["contents"]


def test_get_company_info_returns_empty_on_failure():
    """Test that a failed lookup returns an empty brief."""
    def handler(*args):
        raise RuntimeError("network down")

    service, _ = make_service(handler)

    assert asyncio.run(service.get_company_info("bakery.example.com")) == ""
