"""Lightweight CLI helpers for inspecting stored interview sessions."""
from __future__ import annotations

import argparse
import json
from datetime import datetime

from config.settings import settings
from session_store import Session, build_session_store


def _when(ms) -> str:
    if not ms:
        return "-"
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


def _overall(session: Session) -> str:
    if session.ai_result is None:
        return "-"
    return f"{session.ai_result.overall.score:g}"


def list_sessions(limit: int = 20) -> None:
    store = build_session_store(settings)
    for session in store.list_sessions()[:limit]:
        candidate = session.candidate
        print(
            f"[{_when(session.created_at)}] {session.id} {candidate.name or '-'} <{candidate.email or '-'}> "
            f"questions={len(session.questions)} answers={len(session.answers)} overall={_overall(session)}"
        )


def show_session(session_id: str) -> None:
    session = build_session_store(settings).get_session(session_id)
    if session is None:
        print(f"Session {session_id} not found")
        return
    print(json.dumps(session.to_wire(), indent=2, ensure_ascii=False))


def delete_session(session_id: str) -> None:
    removed = build_session_store(settings).delete_session(session_id)
    print(f"removed={removed}")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--list", type=int, help="Show the latest stored sessions")
    parser.add_argument("--show", help="Print one session as JSON")
    parser.add_argument("--delete", help="Delete one session by id")
    args = parser.parse_args()

    if args.list:
        list_sessions(args.list)
    if args.show:
        show_session(args.show)
    if args.delete:
        delete_session(args.delete)


if __name__ == "__main__":
    main()
