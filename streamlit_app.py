"""
Journal Storybook - Streamlit Chat App

Chat interface for turning a photo of a handwritten journal entry into an
illustrated children's storybook.

Run with:
    streamlit run streamlit_app.py
"""

import asyncio
import html
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable

# Ensure pipeline modules are importable
sys.path.insert(0, str(Path(__file__).parent))

import streamlit as st

from core.config import get_llm_config, load_config
from core.constants import (
    IMAGE_ATTACHED_TEXT,
    WELCOME_MESSAGE,
    ConfirmationTypeEnum,
    MessageRoleEnum,
    MessageTypeEnum,
)
from core.logging import get_logger
from core.models import ChatMessage
from pipeline.export_storybook import render_storybook_html
from pipeline.storybook import StorybookError, StorybookPipeline, StorySession
from pipeline.transcribe import guess_mime_type

logger = get_logger(__name__)

# Page configuration
st.set_page_config(
    page_title="Journal to Storybook",
    page_icon="📖",
    layout="centered",
)

st.markdown("""
<style>
    .confirm-card {
        padding: 0.75rem 1rem;
        border-radius: 0.5rem;
        font-size: 0.9rem;
        margin: 0.25rem 0;
    }
    .confirm-character {
        background-color: #EFF6FF;
        border: 1px solid #BFDBFE;
        color: #1E3A8A;
    }
    .confirm-style {
        background-color: #FAF5FF;
        border: 1px solid #E9D5FF;
        color: #581C87;
    }
    .style-chip {
        background-color: #F3E8FF;
        padding: 0.1rem 0.4rem;
        border-radius: 0.25rem;
        margin-right: 0.25rem;
        font-size: 0.8rem;
    }
</style>
""", unsafe_allow_html=True)


# ============================================================================
# Session State
# ============================================================================


def welcome_message() -> ChatMessage:
    return ChatMessage(text=WELCOME_MESSAGE)


def init_state() -> None:
    """Create transcript and conversation context on first run."""
    st.session_state.setdefault("messages", [welcome_message()])
    st.session_state.setdefault("story_session", StorySession())
    st.session_state.setdefault("uploader_key", 0)
    st.session_state.setdefault("pending_action", None)


def reset_chat() -> None:
    """Start a new chat: clear the transcript and the remembered character and style."""
    st.session_state["messages"] = [welcome_message()]
    st.session_state["story_session"].reset()
    st.session_state["pending_action"] = None
    st.session_state["uploader_key"] += 1


def request_action(**action: Any) -> None:
    """Queue a pipeline run for after the transcript has been drawn."""
    st.session_state["pending_action"] = action


# ============================================================================
# Rendering
# ============================================================================


def render_confirmation(message: ChatMessage) -> None:
    data = message.confirmation_data

    if message.confirmation_type == ConfirmationTypeEnum.CHARACTER:
        st.markdown(
            '<div class="confirm-card confirm-character">'
            "<strong>👤 Character Design</strong><br>"
            f"{html.escape(data.get('character_description', ''))}"
            "</div>",
            unsafe_allow_html=True,
        )
        return

    chips = [f"<strong>Style:</strong> <span class='style-chip'>{html.escape(data.get('art_style', ''))}</span>"]
    if data.get("mood"):
        chips.append(f"<strong>Mood:</strong> <span class='style-chip'>{html.escape(data['mood'])}</span>")
    if data.get("colors"):
        colors = "".join(f"<span class='style-chip'>{html.escape(c)}</span>" for c in data["colors"])
        chips.append(f"<strong>Colors:</strong> {colors}")

    st.markdown(
        '<div class="confirm-card confirm-style">'
        "<strong>🎨 Style Settings</strong><br>"
        + "<br>".join(chips)
        + "</div>",
        unsafe_allow_html=True,
    )


def render_storybook(message: ChatMessage, interactive: bool) -> None:
    storybook = message.storybook
    if storybook is None:
        return

    columns = st.columns(2)
    for page in storybook.pages:
        with columns[page.index % 2]:
            if page.has_image:
                st.image(page.image_url, caption=f"Page {page.index + 1}", use_container_width=True)
            else:
                st.warning(f"Page {page.index + 1}: {page.error or 'illustration unavailable'}")
            st.markdown(f"*{page.sentence}*")

    st.caption(f"Style: {storybook.style_info}")

    if not interactive:
        return

    col_download, col_regenerate = st.columns(2)
    with col_download:
        st.download_button(
            label="⬇️ Download",
            data=render_storybook_html(storybook),
            file_name=f"storybook-{storybook.created_at.strftime('%Y%m%d-%H%M%S')}.html",
            mime="text/html",
            key=f"download-{message.id}",
            use_container_width=True,
        )
    with col_regenerate:
        st.button(
            "🔄 Regenerate",
            key=f"regenerate-book-{message.id}",
            on_click=request_action,
            kwargs={"kind": "regenerate_storybook"},
            use_container_width=True,
        )


def render_story_actions(message: ChatMessage) -> None:
    instructions = latest_instructions()
    col_again, col_illustrate = st.columns(2)
    with col_again:
        st.button(
            "🔁 Regenerate story",
            key=f"regenerate-story-{message.id}",
            on_click=request_action,
            kwargs={
                "kind": "regenerate_story",
                "transcription": message.transcription,
                "instructions": instructions,
            },
            use_container_width=True,
        )
    with col_illustrate:
        st.button(
            "🖼️ Illustrate this story",
            key=f"illustrate-{message.id}",
            on_click=request_action,
            kwargs={
                "kind": "illustrate",
                "transcription": message.transcription,
                "story": message.story,
                "instructions": instructions,
            },
            use_container_width=True,
        )


def render_message(message: ChatMessage, interactive: bool = True) -> None:
    """Draw one transcript message."""
    avatar = "🧒" if message.is_user else "📖"

    with st.chat_message(message.role.value, avatar=avatar):
        if message.type == MessageTypeEnum.CONFIRMATION:
            render_confirmation(message)
        elif message.text:
            st.markdown(message.text)

        if message.type == MessageTypeEnum.IMAGE and message.image_bytes:
            st.image(message.image_bytes, caption="Uploaded journal", width=360)

        if message.type == MessageTypeEnum.STORYBOOK:
            render_storybook(message, interactive)

        if interactive and message.type == MessageTypeEnum.STORY and message.transcription:
            render_story_actions(message)

        if interactive and not message.is_user and message.text and message.type != MessageTypeEnum.CONFIRMATION:
            with st.expander("Copy text"):
                st.code(message.text, language=None)

        st.caption(message.timestamp)


def latest_instructions() -> str:
    """Instructions sent with the most recent journal upload."""
    for message in reversed(st.session_state["messages"]):
        if message.is_user and message.type == MessageTypeEnum.IMAGE:
            return "" if message.text == IMAGE_ATTACHED_TEXT else message.text
    return ""


# ============================================================================
# Pipeline Runs
# ============================================================================


async def _run_with_pipeline(
    pipeline: StorybookPipeline,
    action: Callable[[StorybookPipeline], Awaitable[Any]],
) -> None:
    try:
        await action(pipeline)
    finally:
        await pipeline.close()


def run_pipeline(action: Callable[[StorybookPipeline], Awaitable[Any]]) -> None:
    """Run a pipeline action with live progress, then redraw the transcript."""
    progress_bar = st.progress(0.0)
    status_text = st.empty()

    def on_message(message: ChatMessage) -> None:
        st.session_state["messages"].append(message)
        render_message(message, interactive=False)

    pipeline = StorybookPipeline.from_config(
        load_config(),
        session=st.session_state["story_session"],
        on_message=on_message,
        on_progress=progress_bar.progress,
        on_status=lambda status: status_text.markdown(f"_{status}..._"),
    )

    try:
        asyncio.run(_run_with_pipeline(pipeline, action))
    except StorybookError as e:
        st.session_state["messages"].append(ChatMessage(text=f"Error: {e}"))
    except Exception as e:
        logger.exception("Storybook run failed")
        st.session_state["messages"].append(ChatMessage(text=f"Error: {e}"))
    finally:
        progress_bar.empty()
        status_text.empty()

    st.rerun()


def run_pending_action() -> None:
    action = st.session_state.get("pending_action")
    if not action:
        return
    st.session_state["pending_action"] = None

    kind = action.get("kind")

    if kind == "create":
        run_pipeline(lambda p: p.create_storybook(
            action["image_bytes"], action["mime_type"], action.get("instructions") or None,
        ))

    elif kind == "regenerate_story":
        run_pipeline(lambda p: p.regenerate_story(
            action["transcription"], action.get("instructions") or None,
        ))

    elif kind == "illustrate":
        run_pipeline(lambda p: p.build_from_transcription(
            action["transcription"], action.get("instructions") or None, story=action["story"],
        ))

    elif kind == "regenerate_storybook":
        messages = st.session_state["messages"]
        uploads = [i for i, m in enumerate(messages) if m.is_user and m.type == MessageTypeEnum.IMAGE]
        if not uploads:
            messages.append(ChatMessage(text="Failed to regenerate. Please upload the image again."))
            st.rerun()

        upload = messages[uploads[-1]]
        # Drop everything after the upload and run it again
        del messages[uploads[-1] + 1:]
        instructions = "" if upload.text == IMAGE_ATTACHED_TEXT else upload.text
        run_pipeline(lambda p: p.create_storybook(
            upload.image_bytes, upload.mime_type or "image/jpeg", instructions or None,
        ))


def handle_submit(prompt: str) -> None:
    """Record the user's message and queue a storybook run when a photo is attached."""
    uploaded = st.session_state.get(f"journal_upload_{st.session_state['uploader_key']}")
    text = (prompt or "").strip()

    if not text and uploaded is None:
        return

    if uploaded is None:
        st.session_state["messages"].append(
            ChatMessage(role=MessageRoleEnum.USER, text=text)
        )
        st.session_state["messages"].append(
            ChatMessage(text="Attach a photo of your journal entry and I'll turn it into a storybook.")
        )
        return

    image_bytes = uploaded.getvalue()
    mime_type = uploaded.type or guess_mime_type(uploaded.name)

    st.session_state["messages"].append(ChatMessage(
        role=MessageRoleEnum.USER,
        type=MessageTypeEnum.IMAGE,
        text=text or IMAGE_ATTACHED_TEXT,
        image_bytes=image_bytes,
        mime_type=mime_type,
    ))
    st.session_state["uploader_key"] += 1

    request_action(kind="create", image_bytes=image_bytes, mime_type=mime_type, instructions=text)


# ============================================================================
# Main App
# ============================================================================


def main() -> None:
    init_state()

    with st.sidebar:
        st.header("📖 Journal to Storybook")
        st.caption("Transform handwritten memories into illustrated stories")

        st.button(
            "🆕 New chat",
            on_click=reset_chat,
            disabled=len(st.session_state["messages"]) <= 1,
            use_container_width=True,
        )

        if not get_llm_config().api_key:
            st.warning("No API key found. Set OPENAI_API_KEY or STORYBOOK_LLM_API_KEY.")

        st.markdown("---")
        st.markdown("**💡 Try:**")
        st.markdown("- Make it anime style with a brave knight")
        st.markdown("- Watercolor, golden hour, a girl with red rain boots")
        st.markdown("- 3D, playful, a boy who has curly hair")

    st.title("Journal to Storybook")

    for message in st.session_state["messages"]:
        render_message(message)

    run_pending_action()

    upload_key = f"journal_upload_{st.session_state['uploader_key']}"
    st.file_uploader(
        "Attach your journal photo",
        type=["png", "jpg", "jpeg", "webp", "gif"],
        key=upload_key,
    )
    if st.button("✨ Create storybook", disabled=st.session_state.get(upload_key) is None):
        handle_submit("")
        st.rerun()

    prompt = st.chat_input("Optional: add style preferences or character details...")
    if prompt is not None:
        handle_submit(prompt)
        st.rerun()


if __name__ == "__main__":
    main()
