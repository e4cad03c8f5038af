"""
Gemini client for design research, mockup rendering and prompt refinement.
"""

import base64
import json
from typing import Any, List, Optional, Tuple
from urllib.parse import urlparse

from google import genai
from google.genai import types

from design_genius.config import Settings
from design_genius.io.image_loader import to_data_uri
from design_genius.models import DesignConcept, DeviceType, GroundingSource
from design_genius.utils.llm_logger import LoggedGeminiModels


COMPANY_INFO_PROMPT = """You are an expert web design strategist.
Research the website at this URL: {url}

Write a concise design brief summary (approx 50-80 words) covering:
1. What the company does.
2. The target audience.
3. The existing brand vibe (e.g. corporate, playful, minimalist).

Do not use markdown formatting, just plain text suitable for a form field."""


RESEARCH_PROMPT = """You are a world-class UI/UX Designer and Creative Director specialized in modern web design trends (2025+).

Task:
1. Research the provided website URL ({url}) using Google Search to gather up-to-date information about the company, its industry, competitors, and current branding.
2. Analyze the provided website screenshot and company information.
3. Based on your research and analysis, propose {count} distinct, high-fidelity modernization concepts for this website's homepage.

Return a JSON array of {count} design concepts. For each concept, provide:
1. 'name': A catchy name for the design direction (e.g., "Minimalist Tech", "Bold & Disruptive").
2. 'description': A short explanation of the UX strategy.
3. 'imagePrompt': A HIGHLY DETAILED prompt to generate a high-fidelity website mockup using an advanced AI image generator.
   The prompt MUST describe a FULL HOMEPAGE LAYOUT, not just a hero section. It must include details for:
   - Hero Section (Headline, CTA)
   - Features/Services Grid (Middle section)
   - Trust Indicators or Testimonials
   - Footer area
   - Specific layout structure, color palette, typography, and UI elements.
   - Do NOT specify aspect ratio in this prompt.
   - Specific instruction: "High quality website mockup, UI/UX design, trending on Dribbble, 4k, photorealistic".

Company Info: {company_info}"""


DEVICE_PROMPT_SUFFIX = {
    DeviceType.MOBILE: (
        " . GENERATE A MOBILE MOCKUP: Vertical layout, hamburger menu, stacked content, "
        "optimized for smartphone screen (9:16). Show the full length of the mobile page."
    ),
    # Desktop keeps the tall canvas to show the long scroll, but with desktop UI patterns
    DeviceType.DESKTOP: (
        " . GENERATE A FULL-PAGE DESKTOP SCROLL MOCKUP: Vertical long-scrolling screenshot of the "
        "desktop website. Wide navigation bar at the top, multi-column grid layouts for content, "
        "small desktop-sized text. Show the Hero section, followed by Features/Services section, "
        "and ending with the Footer. Do NOT use mobile layout. High-fidelity desktop UI on a long "
        "vertical canvas."
    ),
}

LOGO_INSTRUCTION = "Incorporate this logo naturally into the website header."


REFINE_PROMPT = """You are a Senior Art Director and UI/UX Specialist.
We are refining a website mockup design.

Company Context: {company_info}
Concept Name: {name}
Concept Description: {description}
Original Image Prompt: {image_prompt}

Task:
Analyze the constraints and create a VASTLY IMPROVED, Version 2.0 image generation prompt for a {device} layout.
The goal is to make it look even more professional, modern, and aligned with the brand.
Focus on:
- Better use of whitespace and typography.
- More impactful hero section.
- Clearer visual hierarchy.
- Trending UI elements (glassmorphism, bento grids, etc. if appropriate).

Output: JUST the new image prompt text. Do not explain."""


CONCEPT_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "name": types.Schema(type=types.Type.STRING),
            "description": types.Schema(type=types.Type.STRING),
            "imagePrompt": types.Schema(type=types.Type.STRING),
        },
        required=["name", "description", "imagePrompt"],
    ),
)


class ResponseParser:
    """Parses Gemini responses into concepts, sources and images."""

    @staticmethod
    def extract_json(response_text: str) -> str:
        """
        Strip markdown code fences from a JSON response.

        Args:
            response_text: Raw model response.

        Returns:
            JSON text.
        """
        if "```json" in response_text:
            parts = response_text.split("```json")
            if len(parts) > 1:
                return parts[1].split("```")[0].strip()
        elif "```" in response_text:
            parts = response_text.split("```")
            if len(parts) >= 3:
                return parts[1].strip()

        return response_text.strip()

    @classmethod
    def parse_concepts(cls, response_text: Optional[str]) -> List[DesignConcept]:
        """
        Parse the concept array returned by the research call.

        Raises:
            ValueError: If the response is empty or not a list of concepts.
        """
        if not response_text:
            raise ValueError("No JSON response received from design analysis.")

        data = json.loads(cls.extract_json(response_text))
        if isinstance(data, dict) and isinstance(data.get("concepts"), list):
            data = data["concepts"]
        if not isinstance(data, list):
            raise ValueError("Design analysis did not return a list of concepts.")

        return [DesignConcept.model_validate(item) for item in data]

    @staticmethod
    def extract_sources(response: Any) -> List[GroundingSource]:
        """
        Collect web citations from the grounding metadata of the first candidate.

        Duplicate URIs are kept once, in first-seen order.
        """
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return []

        metadata = getattr(candidates[0], "grounding_metadata", None)
        chunks = getattr(metadata, "grounding_chunks", None) or []

        sources = []
        seen = set()
        for chunk in chunks:
            web = getattr(chunk, "web", None)
            uri = getattr(web, "uri", None)
            if not uri or uri in seen:
                continue
            seen.add(uri)
            title = getattr(web, "title", None) or urlparse(uri).hostname or uri
            sources.append(GroundingSource(title=title, uri=uri))

        return sources

    @staticmethod
    def extract_image(response: Any) -> Tuple[str, bytes]:
        """
        Find the first inline image in a response.

        Returns:
            Tuple of (mime_type, raw_bytes).

        Raises:
            ValueError: If the response holds no image data.
        """
        candidates = getattr(response, "candidates", None) or []
        content = getattr(candidates[0], "content", None) if candidates else None
        for part in getattr(content, "parts", None) or []:
            inline_data = getattr(part, "inline_data", None)
            if inline_data is not None and inline_data.data:
                data = inline_data.data
                if isinstance(data, str):
                    data = base64.b64decode(data)
                return inline_data.mime_type or "image/png", data

        raise ValueError("No image data found in response")


class GeminiDesignService:
    """Thin async client over the Gemini API for the design workflow."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[Any] = None,
        session_id: Optional[str] = None,
    ):
        """
        Initialize the service.

        Args:
            settings: Settings (read from the environment if not provided).
            client: A ``genai.Client`` or compatible object (built from settings if not provided).
            session_id: Session identifier used for log files.
        """
        self.settings = settings or Settings.from_env()
        self.parser = ResponseParser()

        if client is None:
            if not self.settings.api_key:
                raise ValueError("GEMINI_API_KEY environment variable not set")
            client = genai.Client(api_key=self.settings.api_key)

        self.client = client
        self.models = LoggedGeminiModels(client.aio.models, component="gemini", session_id=session_id)

    async def get_company_info(self, url: str) -> str:
        """
        Research a URL and return a short plain-text design brief.

        Best-effort: returns an empty string on any failure.
        """
        try:
            response = await self.models.with_component("company_info").generate_content(
                model=self.settings.text_model,
                contents=COMPANY_INFO_PROMPT.format(url=url),
                config=types.GenerateContentConfig(
                    tools=[types.Tool(google_search=types.GoogleSearch())],
                ),
            )
            return (response.text or "").strip()
        except Exception as e:
            self.models.logger.log_event(
                "company_info", "Failed to fetch company info", e, session_id=self.models.session_id
            )
            return ""

    async def generate_design_concepts(
        self,
        url: str,
        company_info: str,
        screenshot: bytes,
    ) -> Tuple[List[DesignConcept], List[GroundingSource]]:
        """
        Analyze the current site and propose modernization concepts.

        Args:
            url: Website URL (may be empty).
            company_info: Free-text company brief (may be empty).
            screenshot: PNG bytes of the current homepage.

        Returns:
            Tuple of (concepts, grounding sources).
        """
        prompt = RESEARCH_PROMPT.format(
            url=url,
            company_info=company_info,
            count=self.settings.concept_count,
        )

        response = await self.models.with_component("research").generate_content(
            model=self.settings.text_model,
            contents=[
                types.Part.from_bytes(data=screenshot, mime_type="image/png"),
                prompt,
            ],
            config=types.GenerateContentConfig(
                tools=[types.Tool(google_search=types.GoogleSearch())],
                response_mime_type="application/json",
                response_schema=CONCEPT_SCHEMA,
            ),
        )

        sources = self.parser.extract_sources(response)
        concepts = self.parser.parse_concepts(response.text)
        return concepts[: self.settings.concept_count], sources

    def build_image_prompt(self, concept: DesignConcept, device_type: DeviceType) -> str:
        return concept.image_prompt + DEVICE_PROMPT_SUFFIX[DeviceType(device_type)]

    async def generate_mockup_image(
        self,
        concept: DesignConcept,
        logo: Optional[bytes],
        device_type: DeviceType,
    ) -> str:
        """
        Render one view of a concept.

        Args:
            concept: Concept whose prompt is rendered.
            logo: Optional PNG bytes of the company logo.
            device_type: Mobile or desktop view.

        Returns:
            The rendered image as a data URI.
        """
        device_type = DeviceType(device_type)
        contents: List[Any] = [self.build_image_prompt(concept, device_type)]
        if logo:
            contents.append(types.Part.from_bytes(data=logo, mime_type="image/png"))
            contents.append(LOGO_INSTRUCTION)

        response = await self.models.with_component("render", view=device_type.value).generate_content(
            model=self.settings.image_model,
            contents=contents,
            config=types.GenerateContentConfig(
                response_modalities=["IMAGE"],
                image_config=types.ImageConfig(
                    aspect_ratio=self.settings.aspect_ratio,
                    image_size=self.settings.image_size,
                ),
            ),
        )

        mime_type, data = self.parser.extract_image(response)
        return to_data_uri(data, mime_type)

    async def refine_prompt(
        self,
        concept: DesignConcept,
        company_info: str,
        device_type: DeviceType,
    ) -> str:
        """
        Ask for an improved image prompt for one view.

        Best-effort: any failure or empty answer returns the original prompt.
        """
        device_type = DeviceType(device_type)
        try:
            response = await self.models.with_component("refine", view=device_type.value).generate_content(
                model=self.settings.text_model,
                contents=REFINE_PROMPT.format(
                    company_info=company_info,
                    name=concept.name,
                    description=concept.description,
                    image_prompt=concept.image_prompt,
                    device=device_type.value,
                ),
            )
            refined = (response.text or "").strip()
        except Exception as e:
            self.models.logger.log_event(
                "refine",
                "Orchestration step failed, falling back to original prompt",
                e,
                session_id=self.models.session_id,
            )
            return concept.image_prompt

        return refined or concept.image_prompt

    async def refine_and_regenerate_mockup(
        self,
        concept: DesignConcept,
        company_info: str,
        device_type: DeviceType,
        logo: Optional[bytes],
    ) -> str:
        """Refine the prompt for one view, then render that view with it."""
        refined_prompt = await self.refine_prompt(concept, company_info, device_type)
        refined_concept = concept.model_copy(update={"image_prompt": refined_prompt})
        return await self.generate_mockup_image(refined_concept, logo, device_type)
