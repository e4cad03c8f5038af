"""
Streamlit web interface for DesignGenius.

Upload a screenshot of the current website (plus an optional URL, company
brief and logo) and get modernized mobile and desktop mockups back.
"""

import asyncio
from io import BytesIO
from uuid import uuid4

import streamlit as st
from dotenv import load_dotenv
from PIL import Image

from design_genius.config import Settings
from design_genius.io.image_loader import data_uri_to_png, mockup_filename
from design_genius.models import DeviceType, GenerationInput, MockupStatus
from design_genius.orchestration import DesignWorkflow, MockupBoard, should_autofill
from design_genius.services.gemini import GeminiDesignService

# Load environment variables
load_dotenv()

# Page configuration
st.set_page_config(
    page_title="DesignGenius AI",
    page_icon="🎨",
    layout="wide",
    initial_sidebar_state="collapsed"
)

# Initialize session state
if "board" not in st.session_state:
    st.session_state.board = MockupBoard()
if "session_id" not in st.session_state:
    st.session_state.session_id = f"session_{uuid4().hex[:8]}"
if "company_info" not in st.session_state:
    st.session_state.company_info = ""

PAN_STEP = 120


def get_workflow(settings: Settings) -> DesignWorkflow:
    """Workflow bound to this browser session's board."""
    service = GeminiDesignService(settings=settings, session_id=st.session_state.session_id)
    return DesignWorkflow(service, board=st.session_state.board)


def main():
    """Main application entry point."""
    settings = Settings.from_env()
    board: MockupBoard = st.session_state.board

    st.title("🎨 DesignGenius AI")
    st.caption("Powered by Gemini")

    if not settings.has_api_key:
        st.error("❌ GEMINI_API_KEY is not set. Add it to your environment or a .env file and reload.")
        st.stop()

    if board.fullscreen_image:
        fullscreen_viewer(board)
        return

    input_col, results_col = st.columns([1, 2], gap="large")

    with input_col:
        input_section(settings, board)

    with results_col:
        results_section(settings, board)


def autofill_company_info(settings: Settings):
    """on_change callback for the URL field."""
    url = st.session_state.url_input
    if not should_autofill(url):
        return

    board: MockupBoard = st.session_state.board
    board.input = board.input.model_copy(update={"company_info": st.session_state.company_info})

    with st.spinner("🔍 Researching company..."):
        info = asyncio.run(get_workflow(settings).autofill_company_info(url))
    if info:
        st.session_state.company_info = info


def input_section(settings: Settings, board: MockupBoard):
    """Project details form."""
    st.header("Project Details")
    st.write("Provide context for the AI designer.")

    url = st.text_input(
        "Website URL",
        placeholder="https://example.com",
        key="url_input",
        on_change=autofill_company_info,
        args=(settings,),
    )

    company_info = st.text_area(
        "Company Information",
        key="company_info",
        height=140,
        placeholder=(
            "Describe the company, target audience, and desired vibe (e.g., 'A luxury watch "
            "brand targeting millennials, needs to look minimalist and expensive')."
        ),
    )

    screenshot_file = st.file_uploader(
        "Current Website Screenshot (Required)",
        type=["png", "jpg", "jpeg", "webp"],
        key="screenshot_upload",
    )
    logo_file = st.file_uploader(
        "Company Logo (Optional)",
        type=["png", "jpg", "jpeg", "webp", "svg"],
        key="logo_upload",
    )

    if board.error:
        st.error(board.error)

    if st.button(
        "🚀 Generate Designs",
        type="primary",
        disabled=screenshot_file is None or board.is_busy,
        width="stretch",
    ):
        generation_input = GenerationInput(
            url=url,
            company_info=company_info,
            screenshot=screenshot_file.getvalue() if screenshot_file else None,
            logo=logo_file.getvalue() if logo_file else None,
        )
        run_generation(settings, generation_input)

    if board.sources:
        st.subheader("🌐 Sources Used")
        for source in board.sources:
            st.markdown(f"- [{source.title}]({source.uri})")


def run_generation(settings: Settings, generation_input: GenerationInput):
    """Run the full workflow, reporting progress as cards fill in."""
    board: MockupBoard = st.session_state.board
    status = st.status("Analyzing & Searching...", expanded=True)

    def on_change(event, mockup):
        if event == "seeded":
            status.update(label="Rendering mockups...")
            status.write(f"✅ {len(board.mockups)} concepts ready")
        elif event == "image" and mockup is not None:
            status.write(f"🖼️ New render for {mockup.concept_name}")
        elif event == "completed" and mockup is not None:
            status.write(f"✔️ {mockup.concept_name} finished ({mockup.status.value})")

    board.subscribe(on_change)
    try:
        result = asyncio.run(get_workflow(settings).generate(generation_input))
    finally:
        board.unsubscribe(on_change)

    if result.ok:
        status.update(label="Mockups ready", state="complete", expanded=False)
    else:
        status.update(label="Generation failed", state="error")
    st.rerun()


def results_section(settings: Settings, board: MockupBoard):
    """Generated concept cards."""
    header_col, toggle_col = st.columns([2, 1])
    with header_col:
        st.header("Generated Concepts")

    if not board.mockups:
        st.info("Upload your screenshot and let our AI create modern, high-fidelity mockups for you.")
        return

    with toggle_col:
        view_label = st.radio(
            "View",
            ["Mobile (9:16)", "Desktop (Full Page)"],
            index=0 if board.view_mode == DeviceType.MOBILE else 1,
            horizontal=True,
            label_visibility="collapsed",
        )
    board.view_mode = DeviceType.MOBILE if view_label.startswith("Mobile") else DeviceType.DESKTOP

    columns = st.columns(3)
    for index, mockup in enumerate(board.mockups):
        with columns[index % 3]:
            mockup_card(settings, board, mockup)


def mockup_card(settings: Settings, board: MockupBoard, mockup):
    """One concept card for the active view."""
    view = board.view_mode
    image_url = mockup.get_image(view)

    st.subheader(mockup.concept_name)

    if mockup.regenerating_view == view:
        st.info("🔄 Regenerating...")
    elif image_url:
        st.image(image_url, width="stretch")
    elif mockup.status == MockupStatus.GENERATING:
        st.info("🎨 Rendering...")
    elif view in mockup.failed_views:
        st.warning("⚠️ This view could not be rendered.")
    else:
        st.caption("No image yet.")

    st.caption(mockup.description)

    action_cols = st.columns(3)
    with action_cols[0]:
        if st.button("🔍", key=f"zoom_{mockup.id}", disabled=not image_url, help="Open fullscreen"):
            board.open_fullscreen(image_url)
            st.rerun()
    with action_cols[1]:
        if st.button(
            "♻️",
            key=f"regen_{mockup.id}",
            disabled=mockup.is_busy,
            help=f"Refine and regenerate the {view.value} view",
        ):
            with st.spinner("Refining design..."):
                asyncio.run(get_workflow(settings).regenerate_view(mockup.id, view))
            st.rerun()
    with action_cols[2]:
        if image_url:
            st.download_button(
                "⬇️",
                data=data_uri_to_png(image_url),
                file_name=mockup_filename(mockup, view),
                mime="image/png",
                key=f"download_{mockup.id}_{view.value}",
                help="Download PNG",
            )


def fullscreen_viewer(board: MockupBoard):
    """Fullscreen image with zoom and pan controls."""
    zoom = board.zoom
    controls = st.columns(8)

    if controls[0].button("➖", help="Zoom out"):
        zoom.zoom_out()
    if controls[1].button("➕", help="Zoom in"):
        zoom.zoom_in()
    if controls[2].button("Reset"):
        zoom.reset()
    if controls[3].button("⬅️"):
        zoom.pan_by(PAN_STEP, 0)
    if controls[4].button("➡️"):
        zoom.pan_by(-PAN_STEP, 0)
    if controls[5].button("⬆️"):
        zoom.pan_by(0, PAN_STEP)
    if controls[6].button("⬇️"):
        zoom.pan_by(0, -PAN_STEP)
    if controls[7].button("✖️ Close"):
        board.close_fullscreen()
        st.rerun()

    st.caption(f"Zoom: {zoom.zoom * 100:.0f}%")

    image = Image.open(BytesIO(data_uri_to_png(board.fullscreen_image)))
    visible = image.crop(zoom.crop_box(*image.size))
    st.image(visible, width="stretch" if zoom.zoom >= 1.0 else int(image.width * zoom.zoom))


if __name__ == "__main__":
    main()
