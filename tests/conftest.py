"""
Shared fixtures: sample images and fake Gemini clients/services.
"""

import base64
from io import BytesIO
from types import SimpleNamespace

import pytest
from PIL import Image

from design_genius.models import DesignConcept, DeviceType
from design_genius.utils.llm_logger import LogLevel, get_logger


def make_png(size=(64, 128), color="white", mode="RGB") -> bytes:
    buffer = BytesIO()
    Image.new(mode, size, color=color).save(buffer, format="PNG")
    return buffer.getvalue()


def image_response(data: bytes, mime_type: str = "image/png"):
    part = SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type=mime_type))
    return SimpleNamespace(
        text=None,
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]), grounding_metadata=None)],
        usage_metadata=None,
    )


def text_response(text: str, chunks=None):
    part = SimpleNamespace(text=text, inline_data=None)
    return SimpleNamespace(
        text=text,
        candidates=[SimpleNamespace(
            content=SimpleNamespace(parts=[part]),
            grounding_metadata=SimpleNamespace(grounding_chunks=chunks or []),
        )],
        usage_metadata=SimpleNamespace(prompt_token_count=10, candidates_token_count=5, total_token_count=15),
    )


class FakeModels:
    """Stands in for ``client.aio.models``; replies come from a handler."""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    async def generate_content(self, *, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        return self.handler(model, contents, config)


def fake_client(handler):
    models = FakeModels(handler)
    return SimpleNamespace(aio=SimpleNamespace(models=models)), models


class FakeDesignService:
    """Service double for workflow tests; records every call."""

    def __init__(self, concepts=None, sources=None, fail_research=False, fail_views=None,
                 fail_regenerate=False):
        self.concepts = concepts if concepts is not None else [
            DesignConcept(name=f"Concept {i}", description=f"Direction {i}", image_prompt=f"prompt {i}")
            for i in range(3)
        ]
        self.sources = sources or []
        self.fail_research = fail_research
        self.fail_views = set(fail_views or [])  # {(concept name, DeviceType)}
        self.fail_regenerate = fail_regenerate
        self.research_calls = []
        self.image_calls = []
        self.regenerate_calls = []
        self.company_info_calls = []

    async def generate_design_concepts(self, url, company_info, screenshot):
        self.research_calls.append((url, company_info, screenshot))
        if self.fail_research:
            raise RuntimeError("quota exceeded")
        return self.concepts, self.sources

    async def generate_mockup_image(self, concept, logo, device_type):
        self.image_calls.append((concept.name, device_type, logo))
        if (concept.name, device_type) in self.fail_views:
            raise RuntimeError(f"{device_type.value} render failed")
        return data_uri(f"{concept.name}-{device_type.value}")

    async def refine_and_regenerate_mockup(self, concept, company_info, device_type, logo):
        self.regenerate_calls.append((concept, company_info, device_type, logo))
        if self.fail_regenerate:
            raise RuntimeError("render failed")
        return data_uri(f"refined-{concept.name}-{device_type.value}")

    async def get_company_info(self, url):
        self.company_info_calls.append(url)
        return f"Brief for {url}"


def data_uri(label: str) -> str:
    return "data:image/png;base64," + base64.b64encode(label.encode("utf-8")).decode("utf-8")


@pytest.fixture
def screenshot_png():
    return make_png((200, 400))


@pytest.fixture
def logo_png():
    return make_png((32, 32), color=(255, 0, 0, 0), mode="RGBA")


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Keep console logging on but write log files under tmp_path."""
    logger = get_logger()
    previous = (logger.level, logger.log_to_file, logger.log_dir)
    logger.configure(level=LogLevel.INFO, log_to_file=True, log_dir=tmp_path / "logs")
    yield logger
    logger.configure(level=previous[0], log_to_file=previous[1], log_dir=previous[2])


MOBILE = DeviceType.MOBILE
DESKTOP = DeviceType.DESKTOP
