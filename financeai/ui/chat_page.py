"""NiceGUI chat interface with document attachments."""

import os
from datetime import datetime

import httpx
from nicegui import events, ui

from financeai.conversation.service import user_display_text
from financeai.models.schemas import CapturedDocument
from financeai.prompting.prompts import WELCOME_MESSAGE

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

CUSTOM_CSS = """
<style>
    body { background: #f5f5f5; min-height: 100vh; }
    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }
    .header { background: linear-gradient(135deg, #059669 0%, #0f766e 100%); }
    .message-user {
        background: #0f766e;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }
    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }
</style>
"""


class ChatSession:
    """Client-side state for one browser tab."""

    def __init__(self) -> None:
        self.messages: list[dict] = []
        self.session_id: str | None = None
        self.pending: list[CapturedDocument] = []
        self.is_sending: bool = False
        self.add_message("assistant", WELCOME_MESSAGE)

    def add_message(self, role: str, content: str) -> None:
        self.messages.append({
            "role": role,
            "content": content,
            "time": datetime.now().strftime("%I:%M %p"),
        })

    def add_user_message(self, text: str, documents: list[CapturedDocument]) -> None:
        """Show a sent message the same way the conversation log records it."""
        self.add_message("user", user_display_text(text, documents))


def format_file_size(size: int) -> str:
    """Human-readable file size (Bytes, KB, MB)."""
    if size == 0:
        return "0 Bytes"
    for unit in ("Bytes", "KB"):
        if size < 1024:
            return f"{round(size, 2)} {unit}"
        size /= 1024
    return f"{round(size, 2)} MB"


async def capture_file(name: str, content: bytes, media_type: str) -> CapturedDocument:
    """Capture one uploaded file through the API.

    Raises:
        RuntimeError: If the API could not capture the file.
    """
    async with httpx.AsyncClient(timeout=60.0) as client:
        response = await client.post(
            f"{API_BASE_URL}/documents/capture",
            files={"files": (name, content, media_type or "application/octet-stream")},
        )
        response.raise_for_status()
        data = response.json()
    if data["failures"]:
        raise RuntimeError(data["failures"][0]["detail"] or f"Failed to read file: {name}")
    return CapturedDocument.model_validate(data["documents"][0])


async def post_chat(
    message: str,
    session_id: str | None,
    documents: list[CapturedDocument],
) -> dict:
    """Send a chat message to the API and return the JSON response."""
    async with httpx.AsyncClient(timeout=120.0) as client:
        response = await client.post(
            f"{API_BASE_URL}/chat",
            json={
                "message": message,
                "session_id": session_id,
                "documents": [doc.model_dump(mode="json") for doc in documents],
            },
        )
        response.raise_for_status()
        return response.json()


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    session = ChatSession()

    messages_container: ui.column
    attachments_row: ui.row
    input_field: ui.textarea
    send_btn: ui.button

    def render_message(msg: dict) -> None:
        is_user = msg["role"] == "user"
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align}"):
            with ui.column().classes("max-w-[75%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    if is_user:
                        ui.label(msg["content"]).classes("text-sm whitespace-pre-wrap")
                    else:
                        ui.markdown(msg["content"]).classes("text-sm")
                ui.label(msg["time"]).classes("text-[10px] text-gray-400")

    def refresh_messages() -> None:
        messages_container.clear()
        with messages_container:
            for msg in session.messages:
                render_message(msg)

    def refresh_attachments() -> None:
        attachments_row.clear()
        with attachments_row:
            for doc in session.pending:
                ui.chip(
                    f"{doc.name} ({format_file_size(doc.size_bytes)})",
                    icon="description",
                    removable=True,
                    on_value_change=lambda _, doc_id=doc.id: remove_document(doc_id),
                ).props("dense")

    def remove_document(doc_id: str) -> None:
        session.pending = [doc for doc in session.pending if doc.id != doc_id]
        refresh_attachments()

    async def handle_upload(e: events.UploadEventArguments) -> None:
        content = await e.file.read()
        try:
            doc = await capture_file(e.file.name, content, e.file.content_type)
        except (httpx.HTTPError, RuntimeError) as err:
            ui.notify(f"Error reading {e.file.name}: {err}", type="negative")
            return
        session.pending.append(doc)
        refresh_attachments()

    async def send_message() -> None:
        text = input_field.value.strip()
        if not text or session.is_sending:
            return

        documents = list(session.pending)
        input_field.value = ""
        session.pending = []
        session.is_sending = True
        send_btn.disable()
        refresh_attachments()

        session.add_user_message(text, documents)
        refresh_messages()

        try:
            data = await post_chat(text, session.session_id, documents)
            session.session_id = data["session_id"]
            session.add_message("assistant", data["reply"])
            if data.get("error"):
                ui.notify(data["reply"], type="warning")
        except httpx.HTTPError as err:
            session.add_message("assistant", f"Sorry, I encountered an error: {err}")
            ui.notify(str(err), type="negative")
        finally:
            session.is_sending = False
            send_btn.enable()
            refresh_messages()

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        with ui.row().classes("w-full header px-5 py-4 items-center"):
            ui.icon("account_balance").classes("text-white text-3xl")
            ui.label("FinanceAI").classes("text-lg font-semibold text-white")

        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
            ui.column().classes("w-full p-5"),
        ):
            messages_container = ui.column().classes("w-full gap-4")
            refresh_messages()

        with ui.column().classes("w-full p-4 gap-2 bg-white border-t"):
            ui.upload(
                on_upload=handle_upload,
                multiple=True,
                auto_upload=True,
                label="PDF, TXT, DOC, DOCX, XLS, XLSX, CSV, JSON",
            ).props('accept=".pdf,.txt,.doc,.docx,.xls,.xlsx,.csv,.json" flat').classes("w-full")
            attachments_row = ui.row().classes("gap-1")
            with ui.row().classes("w-full gap-3 items-end"):
                input_field = (
                    ui.textarea(placeholder="Ask about your finances...")
                    .props("autogrow outlined dense rows=1")
                    .classes("flex-grow")
                    .on("keydown.enter.prevent", send_message)
                )
                send_btn = ui.button(icon="send", on_click=send_message).props("round unelevated")


def main() -> None:
    ui.run(title="FinanceAI", port=8080, reload=False)


if __name__ == "__main__":
    main()
