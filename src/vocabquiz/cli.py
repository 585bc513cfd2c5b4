import argparse
import logging
import sys
from typing import Callable, List, Optional

from .client import LessonClient
from .errors import FetchFailure, InsufficientPairs, LessonNotFound
from .generator import generate
from .models import QuestionItem, QuizSession, QuizStatus, ScoreRecord
from .session import advance, start_session, submit_answer, to_record

Ask = Callable[[QuizSession], Optional[str]]
Echo = Callable[[str], None]


def run_quiz(session: QuizSession, ask: Ask, echo: Echo = print) -> ScoreRecord:
    """Drive one session to the end, asking ``ask`` for each answer."""
    while True:
        question = session.current_question
        choice = ask(session)
        session = submit_answer(session, choice)
        if session.status is QuizStatus.ANSWERED_CORRECT:
            echo(f"Correct! Score: {session.score}")
        else:
            echo(f"Wrong. The answer was: {question.correct_answer}")

        updated = advance(session)
        if updated is None:
            return to_record(session)
        session = updated
        if session.status is QuizStatus.FINISHED:
            echo(f"All {session.total_questions} questions answered. Final score: {session.score}")
            return to_record(session)


def _terminal_ask(session: QuizSession) -> Optional[str]:
    question: QuestionItem = session.current_question
    print(f"\nQuestion {session.current_index + 1}/{session.total_questions}: {question.prompt}")
    for number, option in enumerate(question.options, start=1):
        print(f"  {number}. {option}")
    raw = input("> ").strip()
    if raw.isdigit() and 1 <= int(raw) <= len(question.options):
        return question.options[int(raw) - 1]
    return raw or None


def _pick_lesson(lessons: List[str]) -> str:
    print("Lessons:")
    for number, lesson in enumerate(lessons, start=1):
        print(f"  {number}. {lesson}")
    while True:
        raw = input("Pick a lesson: ").strip()
        if raw in lessons:
            return raw
        if raw.isdigit() and 1 <= int(raw) <= len(lessons):
            return lessons[int(raw) - 1]


def play(args: argparse.Namespace) -> int:
    client = LessonClient(args.url)
    try:
        lessons = client.list_lessons()
        if not lessons:
            print("No lessons available.")
            return 1
        lesson_id = args.lesson or _pick_lesson(lessons)
        questions = generate(client.get_lesson(lesson_id), args.reverse)
        record = run_quiz(start_session(lesson_id, questions, args.reverse), _terminal_ask)
    except (EOFError, KeyboardInterrupt):
        print("\nQuiz cancelled.")
        return 1
    except LessonNotFound as e:
        print(f"Unknown lesson: {e.lesson_id}")
        return 1
    except FetchFailure as e:
        print(f"Unable to load lessons from {args.url} ({e.reason})")
        return 1
    except InsufficientPairs as e:
        print(f"This lesson has no questions: {e}")
        return 1

    print(f"Score recorded: {record.score} ({record.outcome})")
    return 0


def serve(args: argparse.Namespace) -> int:
    import uvicorn

    from .app import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vocabquiz", description="Vocabulary quiz server and terminal client.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the web server.")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.set_defaults(func=serve)

    play_parser = subparsers.add_parser("play", help="Take a quiz in the terminal.")
    play_parser.add_argument("--url", default="http://127.0.0.1:8000", help="Base URL of the server.")
    play_parser.add_argument("--lesson", help="Lesson id; asks interactively when omitted.")
    play_parser.add_argument(
        "--reverse", action="store_true", help="Show the translation and ask for the term."
    )
    play_parser.set_defaults(func=play)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s - %(message)s")
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
