#!/usr/bin/env python3
"""
Command-line interface for DesignGenius.
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from design_genius.config import Settings
from design_genius.io.image_loader import ArtifactManager, ImageLoader
from design_genius.models import DesignConcept, DeviceType, GeneratedMockup, GenerationInput
from design_genius.orchestration import DesignWorkflow, MockupBoard
from design_genius.services.gemini import GeminiDesignService

# Load environment variables
load_dotenv()


def _read_image(path_str, label):
    """Read an image file as bytes, or None (printing the reason) if unusable."""
    path = Path(path_str)
    if not path.exists():
        print(f"❌ Error: {label} not found: {path}")
        return None

    data = path.read_bytes()
    is_valid, error_msg = ImageLoader().validate_upload(data, label)
    if not is_valid:
        print(f"❌ Error: {error_msg}")
        return None
    return data


def cmd_generate(args):
    """Generate concepts and mockups from a screenshot."""
    print("🚀 Generating design concepts...")

    screenshot = _read_image(args.screenshot, "Screenshot")
    if screenshot is None:
        return 1

    logo = None
    if args.logo:
        logo = _read_image(args.logo, "Logo")
        if logo is None:
            return 1

    company_info = args.company_info or ""
    if args.company_info_file:
        company_info = Path(args.company_info_file).read_text(encoding="utf-8").strip()

    session_id = args.session_id or f"session_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    settings = Settings.from_env()
    if args.count:
        settings.concept_count = args.count

    print(f"📁 Session ID: {session_id}")
    print(f"🌐 URL: {args.url or '(none)'}")
    print(f"🖼️  Screenshot: {args.screenshot}")
    if args.logo:
        print(f"🏷️  Logo: {args.logo}")

    board = MockupBoard()

    def on_change(event, mockup):
        if event == "seeded":
            print(f"✅ {len(board.mockups)} concepts proposed, rendering...")
        elif event == "image" and mockup is not None:
            print(f"   🖼️  Render received for {mockup.concept_name}")
        elif event == "completed" and mockup is not None:
            print(f"   ✔️  {mockup.concept_name}: {mockup.status.value}")

    board.subscribe(on_change)

    service = GeminiDesignService(settings=settings, session_id=session_id)
    workflow = DesignWorkflow(service, board=board)

    result = asyncio.run(workflow.generate(GenerationInput(
        url=args.url or "",
        company_info=company_info,
        screenshot=screenshot,
        logo=logo,
    )))

    if not result.ok:
        print(f"❌ {result.error}")
        return 1

    artifact_manager = ArtifactManager(args.output)
    session_dir = artifact_manager.create_session_directory(session_id)

    print(f"\n📊 Results:")
    for mockup in result.mockups:
        saved = artifact_manager.save_mockup(session_id, mockup)
        print(f"   🎨 {mockup.concept_name} [{mockup.status.value}]")
        for view, path in saved.items():
            print(f"      {view}: {path}")
        for view in mockup.failed_views:
            print(f"      ⚠️  {view.value} view failed")

    # Concepts are saved so single views can be refined later
    concepts_path = session_dir / "concepts.json"
    concepts_path.write_text(json.dumps({
        "url": args.url or "",
        "company_info": company_info,
        "concepts": [c.model_dump(by_alias=True) for c in result.concepts],
        "mockups": [m.model_dump(mode="json", exclude={"mobile_image_url", "desktop_image_url"}) for m in result.mockups],
        "sources": [s.model_dump() for s in result.sources],
    }, indent=2), encoding="utf-8")

    if result.sources:
        print(f"\n🔗 Sources:")
        for source in result.sources:
            print(f"   - {source.title}: {source.uri}")

    print(f"\n📄 Concepts: {concepts_path}")
    return 0


def cmd_refine(args):
    """Refine and re-render one view of a previously generated concept."""
    print("♻️  Refining mockup...")

    concepts_path = Path(args.concepts)
    if not concepts_path.exists():
        print(f"❌ Error: Concepts file not found: {concepts_path}")
        return 1

    saved = json.loads(concepts_path.read_text(encoding="utf-8"))
    concepts = [DesignConcept.model_validate(c) for c in saved.get("concepts", [])]
    if not 0 <= args.index < len(concepts):
        print(f"❌ Error: Concept index {args.index} out of range (0-{len(concepts) - 1})")
        return 1

    logo = None
    if args.logo:
        logo = _read_image(args.logo, "Logo")
        if logo is None:
            return 1

    session_id = args.session_id or concepts_path.parent.name
    concept = concepts[args.index]
    device_type = DeviceType(args.view)

    board = MockupBoard()
    board.input = GenerationInput(
        url=saved.get("url", ""),
        company_info=saved.get("company_info", ""),
        logo=logo,
    )
    mockup = GeneratedMockup(
        id=f"mockup-{args.index}",
        concept_name=concept.name,
        description=concept.description,
    )
    board.seed([mockup], [concept], [])

    service = GeminiDesignService(settings=Settings.from_env(), session_id=session_id)
    workflow = DesignWorkflow(service, board=board)

    print(f"🎨 Concept: {concept.name}")
    print(f"📱 View: {device_type.value}")

    updated = asyncio.run(workflow.regenerate_view(mockup.id, device_type))
    if updated is None or not updated.get_image(device_type):
        print("❌ Regeneration failed")
        return 1

    artifact_manager = ArtifactManager(args.output)
    path = artifact_manager.save_mockup_view(session_id, updated, device_type)
    print(f"✅ Saved: {path}")
    return 0


def cmd_company_info(args):
    """Draft a company brief from a URL."""
    print(f"🔎 Researching {args.url}...")

    service = GeminiDesignService(settings=Settings.from_env())
    workflow = DesignWorkflow(service)
    info = asyncio.run(workflow.autofill_company_info(args.url))

    if not info:
        print("⚠️  No company information found.")
        return 1

    print(info)
    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="DesignGenius: AI website modernization mockups",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Generate command
    gen_parser = subparsers.add_parser("generate", help="Generate concepts and mockups")
    gen_parser.add_argument("--screenshot", "-s", required=True, help="Path to current website screenshot")
    gen_parser.add_argument("--url", "-u", help="Website URL")
    gen_parser.add_argument("--company-info", "-c", help="Company description")
    gen_parser.add_argument("--company-info-file", help="Read the company description from a file")
    gen_parser.add_argument("--logo", "-l", help="Path to company logo")
    gen_parser.add_argument("--output", "-o", default="outputs", help="Output directory")
    gen_parser.add_argument("--session-id", help="Session identifier (default: timestamp)")
    gen_parser.add_argument("--count", type=int, help="Number of concepts (default: from settings)")

    # Refine command
    refine_parser = subparsers.add_parser("refine", help="Refine and regenerate one view of a concept")
    refine_parser.add_argument("--concepts", required=True, help="Path to concepts.json from a generate run")
    refine_parser.add_argument("--index", "-i", type=int, default=0, help="Concept index")
    refine_parser.add_argument("--view", "-v", default="mobile", choices=[d.value for d in DeviceType])
    refine_parser.add_argument("--logo", "-l", help="Path to company logo")
    refine_parser.add_argument("--output", "-o", default="outputs", help="Output directory")
    refine_parser.add_argument("--session-id", help="Session identifier (default: concepts file directory)")

    # Company info command
    info_parser = subparsers.add_parser("company-info", help="Draft a company brief from a URL")
    info_parser.add_argument("url", help="Website URL")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "generate":
            return cmd_generate(args)
        elif args.command == "refine":
            return cmd_refine(args)
        elif args.command == "company-info":
            return cmd_company_info(args)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user")
        return 130
    except Exception as e:
        print(f"\n❌ Error: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
