# pte_api/db/seed/questions.py

import logging
import uuid

from sqlalchemy import func, select

from pte_api.db.deps import AsyncSessionLocal
from pte_api.models.pte_question import PteQuestion
from pte_api.models.pte_test import PteTest
from pte_api.utils.enums import QUESTION_SECTIONS, Difficulty, PteTestType, QuestionType

logger = logging.getLogger(__name__)

MOCK_TEST = {
    "title": "PTE Academic Sample Test",
    "description": "Sample test with one question of each common task type",
    "test_type": PteTestType.mock,
    "is_premium": False,
    "duration": 120,
}

# Sample questions for the mock test, in exam order
SAMPLE_QUESTIONS = [
    {
        "question_type": QuestionType.read_aloud,
        "question": "The development of technology has significantly impacted how people live and work in the 21st century.",
        "difficulty": Difficulty.easy,
        "question_data": {"answer_time": 40},
        "tags": ["weekly_prediction"],
    },
    {
        "question_type": QuestionType.read_aloud,
        "question": "Climate change is one of the most critical issues facing our planet today.",
        "difficulty": Difficulty.medium,
        "question_data": {"answer_time": 40},
        "tags": ["monthly_prediction"],
    },
    {
        "question_type": QuestionType.repeat_sentence,
        "question": "The economic implications of renewable energy are becoming increasingly significant.",
        "difficulty": Difficulty.easy,
        "question_data": {"answer_time": 15},
    },
    {
        "question_type": QuestionType.describe_image,
        "question": "Describe the image in detail. Include information about the people, activities, and setting.",
        "difficulty": Difficulty.medium,
        "question_data": {"answer_time": 40},
    },
    {
        "question_type": QuestionType.respond_to_a_situation,
        "question": "Respond to the situation described.",
        "difficulty": Difficulty.medium,
        "question_data": {
            "answer_time": 40,
            "situation": "Your classmate missed the group meeting and asks what was decided. Explain politely.",
        },
    },
    {
        "question_type": QuestionType.summarize_written_text,
        "question": "Summarize the passage in one sentence.",
        "difficulty": Difficulty.medium,
        "question_data": {
            "answer_time": 600,
            "passage": (
                "The digital revolution has fundamentally changed our social interactions. With the "
                "proliferation of social media platforms, people now communicate differently than they "
                "did a few decades ago. While these technologies provide many benefits, such as "
                "connecting people across great distances, they also pose challenges, including "
                "concerns about privacy, misinformation, and reduced face-to-face interaction. The key "
                "is finding a balance between leveraging the benefits while mitigating the risks."
            ),
        },
    },
    {
        "question_type": QuestionType.write_essay,
        "question": (
            "Technology has transformed the way we work and communicate. Write an essay discussing "
            "both the benefits and challenges of this transformation."
        ),
        "difficulty": Difficulty.hard,
        "question_data": {"answer_time": 1200},
    },
    {
        "question_type": QuestionType.reading_multiple_choice_single,
        "question": "According to the passage, what is the primary benefit of social media?",
        "difficulty": Difficulty.easy,
        "question_data": {
            "answer_time": 90,
            "passage": (
                "While social platforms raise concerns about privacy and misinformation, their "
                "main advantage is connecting people across great distances."
            ),
            "options": [
                "Improved privacy controls",
                "Connecting people across distances",
                "Reduced face-to-face interaction",
                "Increased misinformation",
            ],
        },
        "correct_answer": "Connecting people across distances",
    },
    {
        "question_type": QuestionType.reorder_paragraphs,
        "question": "The text boxes have been placed in a random order. Restore the original order.",
        "difficulty": Difficulty.medium,
        "question_data": {
            "answer_time": 120,
            "options": [
                "Finally, the results were published in a peer-reviewed journal.",
                "First, the researchers defined the problem.",
                "Then they collected data over two years.",
            ],
        },
        "correct_answer": [
            "First, the researchers defined the problem.",
            "Then they collected data over two years.",
            "Finally, the results were published in a peer-reviewed journal.",
        ],
    },
    {
        "question_type": QuestionType.summarize_spoken_text,
        "question": "Listen to the lecture about renewable energy sources and summarize the main points discussed.",
        "difficulty": Difficulty.hard,
        "question_data": {
            "answer_time": 600,
            "transcript": (
                "Renewable energy sources such as solar and wind are now the cheapest form of new "
                "electricity in many countries. Storage remains the main obstacle, because supply "
                "varies with the weather, but battery prices have fallen sharply."
            ),
        },
    },
    {
        "question_type": QuestionType.write_from_dictation,
        "question": (
            "The implementation of sustainable practices requires coordinated effort from "
            "individuals, corporations, and governments alike."
        ),
        "difficulty": Difficulty.medium,
        "question_data": {"answer_time": 60},
        "correct_answer": (
            "The implementation of sustainable practices requires coordinated effort from "
            "individuals, corporations, and governments alike."
        ),
    },
]


def build_sample_questions(test_id: uuid.UUID) -> list[PteQuestion]:
    questions = []
    for index, item in enumerate(SAMPLE_QUESTIONS):
        qt = item["question_type"]
        questions.append(
            PteQuestion(
                id=uuid.uuid4(),
                test_id=test_id,
                question=item["question"],
                question_type=qt.value,
                section=QUESTION_SECTIONS[qt],
                question_data=item.get("question_data"),
                correct_answer=item.get("correct_answer"),
                points=1,
                order_index=index,
                difficulty=item.get("difficulty"),
                tags=item.get("tags", []),
                is_active=True,
            )
        )
    return questions


async def seed_questions(session_factory=AsyncSessionLocal) -> int:
    """Seed the sample mock test and its questions when the bank is empty.

    Returns the number of questions inserted (0 when skipped).
    """
    async with session_factory() as db:
        existing = (await db.execute(select(func.count()).select_from(PteQuestion))).scalar_one()
        if existing:
            logger.info(f"Found {existing} existing questions. Skipping seed.")
            return 0

        test = PteTest(id=uuid.uuid4(), **MOCK_TEST)
        db.add(test)
        questions = build_sample_questions(test.id)
        db.add_all(questions)
        await db.commit()
        logger.info(f"Seeded mock test '{test.title}' with {len(questions)} questions.")
        return len(questions)


async def seed_all(session_factory=AsyncSessionLocal):
    await seed_questions(session_factory)
