"""CLI script to import a quiz definition from a JSON file into the configured store.
Usage: python scripts/import_quiz.py FILE [--dry-run]

The file holds {"title": ..., "questions": [...]} where each question uses
the same camelCase shape as POST /api/quizzes/{quizId}/questions. Set
QUIZ_STORE=sql (and optionally DATABASE_URL) to persist the result.
"""
import argparse
import json
import pathlib
import sys

from pydantic import ValidationError as SchemaError

from quiz_api import services
from quiz_api.errors import ValidationError
from quiz_api.repositories import get_store
from quiz_api.schemas import QuestionIn
from quiz_api.validation import validate_definition


def load_definitions(path: pathlib.Path):
    """Parse `path` and return `(title, definitions, errors)`.

    The title and every question are checked before anything is written
    so a bad file never leaves a half-imported quiz behind. `errors` is a
    list of printable messages.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return "", [], [f"invalid JSON: {e}"]
    if not isinstance(data, dict):
        return "", [], ["top-level value must be an object with title and questions"]

    title = data.get("title")
    errors = []
    if not isinstance(title, str) or not title.strip():
        errors.append("title: Quiz title is required")
        title = ""
    questions = data.get("questions", [])
    if not isinstance(questions, list):
        errors.append("questions: must be a list")
        questions = []

    definitions = []
    for idx, item in enumerate(questions):
        try:
            definition = QuestionIn.model_validate(item).to_definition()
            validate_definition(definition)
        except (SchemaError, ValidationError) as e:
            errors.append(f"question {idx}: {e}")
            continue
        definitions.append(definition)
    return title.strip(), definitions, errors


def main(path: pathlib.Path, dry_run: bool = False) -> int:
    """Import the quiz at `path`; return a process exit code."""
    if not path.exists():
        print(f"File not found: {path}")
        return 2
    title, definitions, errors = load_definitions(path)
    if errors:
        for err in errors:
            print(err)
        return 1
    if dry_run:
        print(f"OK: {len(definitions)} question(s) would be imported into {title!r}")
        return 0
    svc = services.QuizService(get_store())
    try:
        quiz = svc.create_quiz(title)
    except ValidationError as e:
        print(f"Invalid quiz: {e}")
        return 1
    for definition in definitions:
        svc.add_question(quiz.id, definition)
    print(f"Imported quiz {quiz.id} ({quiz.title!r}) with {len(definitions)} question(s)")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import a quiz from a JSON file")
    parser.add_argument("file", type=pathlib.Path)
    parser.add_argument("--dry-run", action="store_true", help="validate only, write nothing")
    args = parser.parse_args()
    sys.exit(main(args.file, dry_run=args.dry_run))
