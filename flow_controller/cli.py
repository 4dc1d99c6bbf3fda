"""Terminal front end for running a timed mock interview."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Optional

from config.settings import settings
from session_store import build_session_store

from .backend import HttpInterviewBackend, InterviewBackend, LocalInterviewBackend
from .controller import InterviewFlow
from .models import FlowError, FlowStage, MissingContactError
from .snapshots import SnapshotStore


def _ask(prompt: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    value = input(f"{prompt}{suffix}: ").strip()
    return value or default


async def _answer_current(flow: InterviewFlow, pending: Optional[asyncio.Task]) -> Optional[asyncio.Task]:
    """Race the answer prompt against the question's countdown.

    Returns the still-running input task when the timer won, so the next question
    reuses it instead of stacking a second reader on stdin.
    """

    question = flow.current_question
    countdown = flow.countdown
    print(f"\nQ{flow.index + 1}/{flow.question_count} [{question.difficulty}, {countdown.remaining}s] {question.text}")
    reader = pending or asyncio.ensure_future(asyncio.to_thread(input, "> "))
    timer = asyncio.ensure_future(_drive(flow, countdown))
    done, _ = await asyncio.wait({reader, timer}, return_when=asyncio.FIRST_COMPLETED)
    if reader in done:
        countdown.cancel()
        await timer
        flow.submit_answer(reader.result())
        return None
    print("\nTime is up, answer submitted automatically.")
    return reader


async def _drive(flow: InterviewFlow, countdown) -> None:
    while countdown.active:
        await asyncio.sleep(1.0)
        if countdown.active:
            flow.tick()


def _print_result(flow: InterviewFlow) -> None:
    saved = flow.last_saved
    if saved is None or saved.ai_result is None:
        return
    print(f"\nSession {saved.id} saved.")
    for item in saved.ai_result.per_answer:
        print(f"  Q{item.index + 1}: {item.score:g}/10  {item.feedback}")
    print(f"Overall: {saved.ai_result.overall.score:g}/100  {saved.ai_result.overall.summary}")


async def run_interview(flow: InterviewFlow, resume_path: Optional[Path], role: Optional[str]) -> None:
    if flow.has_resumable_snapshot() and _ask("Unfinished interview found. Resume? (y/n)", "y").lower().startswith("y"):
        flow.resume()
    else:
        flow.discard_snapshot()
        if resume_path is None:
            raise SystemExit("--resume is required to start a new interview")
        parsed = flow.upload_resume(resume_path.name, resume_path.read_bytes())
        while True:
            name = _ask("Name", parsed.name)
            email = _ask("Email", parsed.email)
            phone = _ask("Phone", parsed.phone)
            try:
                flow.confirm(name, email, phone, role=role)
                break
            except MissingContactError as exc:
                print(exc)
        input(f"{flow.question_count} questions ready. Press Enter to start...")
        flow.start()

    pending: Optional[asyncio.Task] = None
    while flow.stage is FlowStage.IN_PROGRESS:
        pending = await _answer_current(flow, pending)
    _print_result(flow)
    if pending is not None:
        print("Press Enter to exit.")
        await pending


def build_backend(api_url: Optional[str]) -> InterviewBackend:
    if api_url:
        return HttpInterviewBackend(api_url)
    return LocalInterviewBackend(build_session_store(settings))


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a timed mock interview in the terminal")
    parser.add_argument("--resume", type=Path, help="PDF or DOCX resume to upload")
    parser.add_argument("--api", help="Base URL of a running API server; omit to run in-process")
    parser.add_argument("--role", help="Role to generate questions for")
    args = parser.parse_args()

    flow = InterviewFlow(build_backend(args.api), snapshots=SnapshotStore(Path(settings.SNAPSHOT_PATH)))
    try:
        asyncio.run(run_interview(flow, args.resume, args.role))
    except FlowError as exc:
        raise SystemExit(str(exc))


if __name__ == "__main__":
    main()
