#!/usr/bin/env python3
"""
Seed Study Content

Creates missing tables and loads a starter JLPT N5 vocabulary list, five N5
grammar lessons with examples, and a basic vocabulary quiz. Items that
already exist (same word and reading, or same lesson or quiz title) are
skipped, so the script can be re-run safely.

Usage (from backend directory):
    # Preview what would be inserted
    python scripts/seed_content.py --dry-run

    # Seed the database configured by POSTGRES_* variables
    python scripts/seed_content.py

    # Verbose output (includes SQL)
    python scripts/seed_content.py --debug
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add backend to path for imports (must be before app.* imports)
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables from project root .env
# Falls back to backend/.env
project_root = Path(__file__).parent.parent.parent
if (project_root / ".env").exists():
    load_dotenv(project_root / ".env")
else:
    load_dotenv(project_root / "backend" / ".env")

from sqlalchemy import select  # noqa: E402

from app.config import settings  # noqa: E402
from app.db.base import engine, init_db, session_scope  # noqa: E402
from app.db.models import (  # noqa: E402
    GrammarExample,
    GrammarLesson,
    Quiz,
    QuizQuestion,
    Vocabulary,
)
from app.enums.learning import QuestionType, QuizType  # noqa: E402

logger = logging.getLogger("seed_content")

# (word, reading, meaning, part of speech, example, translation)
N5_VOCABULARY = [
    ("私", "わたし", "I, me", "pronoun", "私は学生です。", "I am a student."),
    ("あなた", "あなた", "you", "pronoun", "あなたは先生ですか。", "Are you a teacher?"),
    ("これ", "これ", "this", "pronoun", "これは本です。", "This is a book."),
    ("それ", "それ", "that", "pronoun", "それはペンです。", "That is a pen."),
    ("ここ", "ここ", "here", "noun", "ここは学校です。", "This is a school."),
    ("そこ", "そこ", "there", "noun", "そこは図書館です。", "That is a library."),
    ("今", "いま", "now", "noun", "今は三時です。", "It's 3 o'clock now."),
    ("昨日", "きのう", "yesterday", "noun", "昨日は雨でした。", "It was rainy yesterday."),
    ("今日", "きょう", "today", "noun", "今日は晴れです。", "It's sunny today."),
    ("明日", "あした", "tomorrow", "noun", "明日は月曜日です。", "Tomorrow is Monday."),
    ("学校", "がっこう", "school", "noun", "学校に行きます。", "I go to school."),
    ("先生", "せんせい", "teacher", "noun", "田中先生は親切です。", "Teacher Tanaka is kind."),
    ("学生", "がくせい", "student", "noun", "私は学生です。", "I am a student."),
    ("友達", "ともだち", "friend", "noun", "友達と遊びます。", "I play with friends."),
    ("本", "ほん", "book", "noun", "本を読みます。", "I read books."),
    ("食べる", "たべる", "to eat", "verb", "朝ごはんを食べます。", "I eat breakfast."),
    ("飲む", "のむ", "to drink", "verb", "水を飲みます。", "I drink water."),
    ("見る", "みる", "to see, to watch", "verb", "テレビを見ます。", "I watch TV."),
    ("行く", "いく", "to go", "verb", "学校に行きます。", "I go to school."),
    ("来る", "くる", "to come", "verb", "友達が来ます。", "A friend is coming."),
]

# (title, grammar point, explanation, usage notes, [(japanese, english, notes)])
N5_GRAMMAR = [
    (
        "Basic Sentence Structure: XはYです",
        "XはYです",
        "This is the most basic sentence pattern in Japanese. は (wa) is the "
        "topic marker and です (desu) is the copula meaning 'is/am/are'. Use "
        "this pattern to state that X is Y.",
        "Remember that は is pronounced 'wa' when used as a particle, not 'ha'.",
        [
            ("私は学生です。", "I am a student.", None),
            ("これは本です。", "This is a book.", None),
            ("田中さんは先生です。", "Tanaka-san is a teacher.", None),
        ],
    ),
    (
        "Question Particle: か",
        "か",
        "Add か (ka) to the end of a sentence to make it a question. The word "
        "order stays the same as a statement.",
        "In casual speech, か can be omitted and the question is indicated by "
        "rising intonation.",
        [
            ("これは本ですか。", "Is this a book?", None),
            ("あなたは学生ですか。", "Are you a student?", None),
            ("田中さんは先生ですか。", "Is Tanaka-san a teacher?", None),
        ],
    ),
    (
        "Negative Form: じゃありません",
        "じゃありません / ではありません",
        "To make a negative statement, replace です with じゃありません (casual) "
        "or ではありません (formal). Both mean 'is not / am not / are not'.",
        "じゃありません is more common in everyday conversation.",
        [
            ("私は学生じゃありません。", "I am not a student.", None),
            ("これは本ではありません。", "This is not a book.", "Formal version"),
            ("田中さんは先生じゃありません。", "Tanaka-san is not a teacher.", None),
        ],
    ),
    (
        "Location Particle: に",
        "に (location/time)",
        "The particle に (ni) marks the location where something exists or the "
        "time when something happens. It often translates to 'at', 'in', 'on', "
        "or 'to' in English.",
        "Use に with existence verbs like います and あります, and with movement "
        "verbs like 行きます.",
        [
            ("学校に行きます。", "I go to school.", None),
            ("東京に住んでいます。", "I live in Tokyo.", None),
            ("三時に会いましょう。", "Let's meet at 3 o'clock.", None),
        ],
    ),
    (
        "Object Marker: を",
        "を",
        "The particle を (wo/o) marks the direct object of a sentence - the "
        "thing that receives the action of the verb.",
        "を is pronounced 'o' not 'wo', even though it's written with the 'wo' "
        "character.",
        [
            ("本を読みます。", "I read a book.", None),
            ("水を飲みます。", "I drink water.", None),
            ("テレビを見ます。", "I watch TV.", None),
        ],
    ),
]

BASIC_VOCABULARY_QUIZ = {
    "title": "Basic Vocabulary Quiz",
    "description": "Test your knowledge of basic JLPT N5 vocabulary",
    "quiz_type": QuizType.VOCABULARY.value,
    "jlpt_level": 5,
    "passing_score": 70,
    "questions": [
        {
            "question_text": "What does '私' (わたし) mean?",
            "correct_answer": "A",
            "options": ("I, me", "You", "He, she", "We"),
            "explanation": "私 (わたし) is the most common way to say 'I' or 'me' in Japanese.",
        },
        {
            "question_text": "What does '学校' (がっこう) mean?",
            "correct_answer": "B",
            "options": ("Teacher", "School", "Student", "Book"),
            "explanation": "学校 (がっこう) means 'school'.",
        },
        {
            "question_text": "What does '食べる' (たべる) mean?",
            "correct_answer": "C",
            "options": ("To drink", "To see", "To eat", "To go"),
            "explanation": "食べる (たべる) is a verb meaning 'to eat'.",
        },
        {
            "question_text": "What does '今日' (きょう) mean?",
            "correct_answer": "B",
            "options": ("Yesterday", "Today", "Tomorrow", "Now"),
            "explanation": "今日 (きょう) means 'today'.",
        },
        {
            "question_text": "What does '友達' (ともだち) mean?",
            "correct_answer": "D",
            "options": ("Family", "Teacher", "Student", "Friend"),
            "explanation": "友達 (ともだち) means 'friend'.",
        },
    ],
}


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else settings.LOG_LEVEL.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    if not debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def build_quiz(definition: dict) -> Quiz:
    """Build a Quiz row with its questions from a seed definition."""
    quiz = Quiz(
        title=definition["title"],
        description=definition["description"],
        quiz_type=definition["quiz_type"],
        jlpt_level=definition["jlpt_level"],
        passing_score=definition["passing_score"],
    )
    for order, q in enumerate(definition["questions"], start=1):
        option_a, option_b, option_c, option_d = q["options"]
        quiz.questions.append(
            QuizQuestion(
                question_type=QuestionType.MULTIPLE_CHOICE.value,
                question_text=q["question_text"],
                correct_answer=q["correct_answer"],
                option_a=option_a,
                option_b=option_b,
                option_c=option_c,
                option_d=option_d,
                explanation=q["explanation"],
                points=1,
                question_order=order,
            )
        )
    return quiz


def build_grammar_lesson(definition: tuple, lesson_order: int) -> GrammarLesson:
    """Build a GrammarLesson row with its examples from a seed definition."""
    title, grammar_point, explanation, usage_notes, examples = definition
    lesson = GrammarLesson(
        title=title,
        grammar_point=grammar_point,
        explanation=explanation,
        usage_notes=usage_notes,
        jlpt_level=5,
        lesson_order=lesson_order,
    )
    for order, (japanese, english, notes) in enumerate(examples, start=1):
        lesson.examples.append(
            GrammarExample(
                japanese_sentence=japanese,
                english_translation=english,
                notes=notes,
                example_order=order,
            )
        )
    return lesson


async def seed_vocabulary(session, dry_run: bool) -> int:
    """Insert missing N5 vocabulary. Returns the number of new items."""
    result = await session.execute(select(Vocabulary.word, Vocabulary.reading))
    existing = {(word, reading) for word, reading in result.all()}

    added = 0
    for word, reading, meaning, pos, example, translation in N5_VOCABULARY:
        if (word, reading) in existing:
            logger.debug(f"Skipping existing vocabulary {word}")
            continue
        added += 1
        if dry_run:
            logger.info(f"[dry-run] Would add vocabulary {word} ({reading}): {meaning}")
            continue
        session.add(
            Vocabulary(
                word=word,
                reading=reading,
                meaning=meaning,
                part_of_speech=pos,
                jlpt_level=5,
                example_sentence=example,
                example_translation=translation,
            )
        )
    return added


async def seed_grammar(session, dry_run: bool) -> int:
    """Insert missing N5 grammar lessons. Returns the number of new lessons."""
    result = await session.execute(select(GrammarLesson.title))
    existing = set(result.scalars().all())

    added = 0
    for order, definition in enumerate(N5_GRAMMAR, start=1):
        title = definition[0]
        if title in existing:
            logger.debug(f"Skipping existing grammar lesson {title!r}")
            continue
        added += 1
        if dry_run:
            logger.info(f"[dry-run] Would add grammar lesson {title!r}")
            continue
        session.add(build_grammar_lesson(definition, order))
    return added


async def seed_quizzes(session, dry_run: bool) -> int:
    """Insert the basic vocabulary quiz if missing. Returns quizzes added."""
    result = await session.execute(
        select(Quiz.id).where(Quiz.title == BASIC_VOCABULARY_QUIZ["title"])
    )
    if result.first() is not None:
        logger.debug(f"Skipping existing quiz {BASIC_VOCABULARY_QUIZ['title']!r}")
        return 0

    if dry_run:
        logger.info(
            f"[dry-run] Would add quiz {BASIC_VOCABULARY_QUIZ['title']!r} "
            f"with {len(BASIC_VOCABULARY_QUIZ['questions'])} questions"
        )
        return 1

    session.add(build_quiz(BASIC_VOCABULARY_QUIZ))
    return 1


async def main(dry_run: bool = False) -> int:
    """Seed study content."""
    try:
        if not dry_run:
            await init_db()

        async with session_scope() as session:
            vocab_added = await seed_vocabulary(session, dry_run)
            grammar_added = await seed_grammar(session, dry_run)
            quizzes_added = await seed_quizzes(session, dry_run)

        prefix = "Would seed" if dry_run else "Seeded"
        logger.info(
            f"{prefix} {vocab_added} vocabulary items, {grammar_added} grammar "
            f"lessons and {quizzes_added} quizzes"
        )
        return 0

    except Exception as e:
        logger.exception(f"Seeding failed: {e}")
        return 1

    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed JLPT N5 study content")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview changes without making them",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (includes SQL)",
    )
    args = parser.parse_args()

    setup_logging(args.debug)
    sys.exit(asyncio.run(main(dry_run=args.dry_run)))
